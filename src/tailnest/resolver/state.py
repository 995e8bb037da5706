"""Resolver state: the export cache and import dependency graph.

One instance per build pipeline. Two pipelines working on the same files in
one process (for example server and client builds) must not share an
instance, so nothing here is module-global apart from ``DEFAULT_STATE``,
which callers opt into explicitly.
"""

from __future__ import annotations

import os

from tailnest.model.rules import ExportBlock


def absolute_path(path: str, base_dir: str | None = None) -> str:
    """Resolve *path* against *base_dir* (or the working directory)."""
    if base_dir is not None:
        path = os.path.join(base_dir, path)
    return os.path.normpath(os.path.abspath(path))


class ResolverState:
    """Long-lived caches shared by every resolution in one pipeline."""

    def __init__(self) -> None:
        self.exports_cache: dict[str, list[ExportBlock]] = {}
        self.import_deps: dict[str, set[str]] = {}

    # --- export cache ---------------------------------------------------------

    def cached_exports(self, path: str) -> list[ExportBlock] | None:
        return self.exports_cache.get(absolute_path(path))

    def store_exports(self, path: str, exports: list[ExportBlock]) -> None:
        self.exports_cache[absolute_path(path)] = exports

    def clear_exports_cache(self, path: str | None = None) -> None:
        """Drop the cached exports for *path*, or every entry when omitted."""
        if path is None:
            self.exports_cache.clear()
        else:
            self.exports_cache.pop(absolute_path(path), None)

    # --- dependency graph -----------------------------------------------------

    def record_dependencies(self, consumer: str, deps: set[str]) -> None:
        """Remember which files *consumer* pulled exports from."""
        key = absolute_path(consumer)
        if deps:
            self.import_deps[key] = set(deps)
        else:
            self.import_deps.pop(key, None)

    def get_import_dependents(self, provider: str) -> list[str]:
        """Return every consumer that imports from *provider*."""
        target = absolute_path(provider)
        return [consumer for consumer, providers in self.import_deps.items() if target in providers]

    def __repr__(self) -> str:
        return (
            f"ResolverState(exports={len(self.exports_cache)}, "
            f"consumers={len(self.import_deps)})"
        )


DEFAULT_STATE = ResolverState()
