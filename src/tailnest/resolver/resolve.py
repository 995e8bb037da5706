"""@export / @use / @import resolution.

Inlines every ``@use`` into the rule tree so that the result contains only
selectors, classes, declarations, and child rules. Each inlining site gets
its own deep copy of the used block's children.
"""

from __future__ import annotations

import os
from typing import Callable, Iterator, Union

from tailnest.model.diagnostic import (
    Diagnostic,
    Severity,
    SourceLocation,
    WarnFunc,
    default_sink,
)
from tailnest.model.rules import ExportBlock, ParseResult, StyleRule, UseDirective
from tailnest.resolver.state import ResolverState, absolute_path

__all__ = [
    "LoadExports",
    "clone_rule",
    "resolve",
    "resolve_exports",
    "resolve_with_dependencies",
]

LoadExports = Callable[[str], list[ExportBlock]]

# Anything that carries uses and children: an ExportBlock or a StyleRule.
_Block = Union[ExportBlock, StyleRule]


def clone_rule(rule: StyleRule) -> StyleRule:
    """Deep clone *rule* so each use site owns an independent subtree."""
    return StyleRule(
        selector=rule.selector,
        classes=list(rule.classes),
        declarations=list(rule.declarations),
        uses=list(rule.uses),
        children=[clone_rule(child) for child in rule.children],
    )


class _Resolver:
    """Resolution pass over one source unit."""

    def __init__(
        self,
        file_path: str,
        load_exports: LoadExports,
        warn: WarnFunc,
    ) -> None:
        self.file_path = file_path
        self.base_dir = os.path.dirname(absolute_path(file_path))
        self.load_exports = load_exports
        self.warn = warn
        self.registry: dict[str, ExportBlock] = {}
        self.deps: set[str] = set()
        # Keys of the blocks currently being inlined (cycle guard).
        self._active: set[str] = set()
        self._done: set[int] = set()

    def _report(self, rule: str, message: str, severity: Severity = Severity.ERROR) -> None:
        self.warn(
            Diagnostic(
                rule=rule,
                severity=severity,
                message=message,
                location=SourceLocation(file=self.file_path),
            )
        )

    # ---- registry ----

    def register_exports(self, exports: list[ExportBlock]) -> None:
        for exp in exports:
            if exp.name in self.registry:
                self._report(
                    "duplicate-export",
                    f'Duplicate @export name "{exp.name}". The later definition will be used.',
                    Severity.WARNING,
                )
            self.registry[exp.name] = exp

    def apply_imports(self, result: ParseResult) -> None:
        for imp in result.imports:
            path = absolute_path(imp.source, self.base_dir)
            self.deps.add(path)
            file_exports = self.load_exports(path)
            by_name = {e.name: e for e in file_exports}
            for name in imp.names:
                exp = by_name.get(name)
                if exp is not None:
                    self.registry[name] = exp
                else:
                    available = ", ".join(by_name) or "none"
                    self._report(
                        "import-name-not-found",
                        f'@import: name "{name}" not found in {imp.source} (available: {available})',
                    )

    # ---- lookup ----

    def _cycle_key(self, use: UseDirective) -> str:
        if use.source:
            return f"{absolute_path(use.source, self.base_dir)}#{use.name}"
        return use.name

    def _lookup(self, use: UseDirective, owner: str | None) -> ExportBlock | None:
        prefix = f'@use in @export "{owner}"' if owner else "@use"
        if use.source:
            path = absolute_path(use.source, self.base_dir)
            self.deps.add(path)
            for exp in self.load_exports(path):
                if exp.name == use.name:
                    return exp
            self._report("unknown-use", f'{prefix}: name "{use.name}" not found in {use.source}')
            return None

        block = self.registry.get(use.name)
        if block is None:
            hint = "" if owner else " Did you forget an @export or @import?"
            self._report("unknown-use", f'{prefix}: name "{use.name}" is not defined.{hint}')
        return block

    # ---- inlining ----

    def resolve_export(self, exp: ExportBlock) -> None:
        if id(exp) in self._done:
            return
        key = exp.name
        self._active.add(key)
        self.resolve_block(exp, owner=exp.name)
        self._active.discard(key)
        self._done.add(id(exp))

    def resolve_block(self, block: _Block, owner: str | None = None) -> None:
        """Inline the uses of *block*, then resolve its children.

        Nested blocks are resolved from an explicit stack, so long export
        chains do not grow the Python call stack.
        """
        stack = [self._steps(block, owner)]
        while stack:
            try:
                pending = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue
            stack.append(self._steps(*pending))

    def _steps(self, block: _Block, owner: str | None) -> Iterator[tuple[_Block, str | None]]:
        """Resolve one block, yielding each block that must be resolved first."""
        for use in block.uses:
            key = self._cycle_key(use)
            if key in self._active:
                if owner:
                    message = (
                        f'Circular @use detected in @export "{owner}": '
                        f'"{use.name}" is already being resolved.'
                    )
                else:
                    message = (
                        f'Circular @use detected: "{use.name}" is already being resolved. '
                        "Skipping to prevent infinite loop."
                    )
                self._report("circular-use", message)
                continue

            target = self._lookup(use, owner)
            if target is None:
                continue

            self._active.add(key)
            if id(target) not in self._done:
                yield target, target.name
                self._done.add(id(target))
            block.classes.extend(target.classes)
            block.declarations.extend(target.declarations)
            block.children.extend(clone_rule(child) for child in target.children)
            self._active.discard(key)
        block.uses = []

        for child in block.children:
            yield child, owner


def _prepare(
    result: ParseResult,
    file_path: str,
    load_exports: LoadExports,
    warn: WarnFunc | None,
) -> _Resolver:
    resolver = _Resolver(file_path, load_exports, warn if warn is not None else default_sink)
    resolver.register_exports(result.exports)
    resolver.apply_imports(result)
    # Exports first, so they can compose each other before being used.
    for exp in list(resolver.registry.values()):
        resolver.resolve_export(exp)
    for exp in result.exports:
        resolver.resolve_export(exp)
    return resolver


def resolve_with_dependencies(
    result: ParseResult,
    file_path: str,
    load_exports: LoadExports,
    state: ResolverState | None = None,
    *,
    warn: WarnFunc | None = None,
) -> tuple[list[StyleRule], set[str]]:
    """Resolve *result* in place; return its rules and the files it depends on."""
    resolver = _prepare(result, file_path, load_exports, warn)
    for rule in result.rules:
        resolver.resolve_block(rule)
    if state is not None:
        state.record_dependencies(file_path, resolver.deps)
    return result.rules, resolver.deps


def resolve(
    result: ParseResult,
    file_path: str,
    load_exports: LoadExports,
    state: ResolverState | None = None,
    *,
    warn: WarnFunc | None = None,
) -> list[StyleRule]:
    """Inline every ``@use`` in *result* and return the flat rule list.

    Unknown names, missing files, and circular uses are reported to *warn*
    and skipped; resolution itself always succeeds.
    """
    rules, _ = resolve_with_dependencies(result, file_path, load_exports, state, warn=warn)
    return rules


def resolve_exports(
    result: ParseResult,
    file_path: str,
    load_exports: LoadExports,
    state: ResolverState | None = None,
    *,
    warn: WarnFunc | None = None,
) -> list[ExportBlock]:
    """Resolve only the exports of *result*, for serving to importing files."""
    resolver = _prepare(result, file_path, load_exports, warn)
    if state is not None:
        state.record_dependencies(file_path, resolver.deps)
    return result.exports
