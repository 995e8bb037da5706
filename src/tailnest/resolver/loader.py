"""File-backed, memoized ``load_exports`` collaborator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from tailnest.config import DEFAULT_CONFIG, CompilerConfig
from tailnest.model.diagnostic import (
    LOGGER_NAME,
    Diagnostic,
    Severity,
    SourceLocation,
    WarnFunc,
    default_sink,
)
from tailnest.model.rules import ExportBlock
from tailnest.parser import parse
from tailnest.resolver.resolve import resolve_exports
from tailnest.resolver.state import ResolverState, absolute_path

log = logging.getLogger(LOGGER_NAME)

# Pulls the style-block text out of a host file; None means "no style block".
Extractor = Callable[[str], Optional[str]]


class ExportLoader:
    """Read, parse, and resolve a file's ``@export`` blocks, caching per path.

    The cache lives on the supplied :class:`ResolverState`; invalidate it with
    ``state.clear_exports_cache(path)`` when the file changes.
    """

    def __init__(
        self,
        state: ResolverState,
        *,
        extract: Extractor | None = None,
        config: CompilerConfig | None = None,
        warn: WarnFunc | None = None,
    ) -> None:
        self.state = state
        self.extract = extract
        self.config = config or DEFAULT_CONFIG
        self.warn = warn if warn is not None else default_sink
        self._loading: set[str] = set()

    def __call__(self, path: str) -> list[ExportBlock]:
        abs_path = absolute_path(path)
        cached = self.state.cached_exports(abs_path)
        if cached is not None:
            log.debug("exports cache hit: %s", abs_path)
            return cached

        if abs_path in self._loading:
            self.warn(
                Diagnostic(
                    rule="circular-use",
                    severity=Severity.ERROR,
                    message=f"Circular import detected: {abs_path} is already being loaded.",
                    location=SourceLocation(file=abs_path),
                )
            )
            return []

        try:
            text: str | None = Path(abs_path).read_text(encoding="utf-8")
        except OSError:
            self.warn(
                Diagnostic(
                    rule="missing-file",
                    severity=Severity.ERROR,
                    message=f"Could not read file: {path}",
                    location=SourceLocation(file=abs_path),
                )
            )
            return []

        if self.extract is not None:
            text = self.extract(text)
        if not text:
            self.state.store_exports(abs_path, [])
            return []

        log.debug("loading exports from %s", abs_path)
        self._loading.add(abs_path)
        try:
            result = parse(text, abs_path, config=self.config, warn=self.warn)
            exports = resolve_exports(result, abs_path, self, self.state, warn=self.warn)
        finally:
            self._loading.discard(abs_path)

        self.state.store_exports(abs_path, exports)
        return exports
