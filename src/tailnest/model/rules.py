"""Style rule model: the tree produced by the parser and consumed by the matcher."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UseDirective:
    """An ``@use name`` or ``@use name from './path'`` request to inline an export."""

    name: str
    source: str | None = None  # the ``from`` path, when present


@dataclass
class StyleRule:
    """A selector with its utility classes, raw declarations, and nested rules.

    ``uses`` is drained by the resolver; a resolved tree has no uses anywhere.
    """

    selector: str
    classes: list[str] = field(default_factory=list)
    declarations: list[str] = field(default_factory=list)
    uses: list[UseDirective] = field(default_factory=list)
    children: list[StyleRule] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return bool(self.classes or self.declarations or self.children)

    def walk(self):
        """Yield this rule and every descendant rule, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class ExportBlock:
    """A named, reusable rule body defined with ``@export``. Never matched itself."""

    name: str
    classes: list[str] = field(default_factory=list)
    declarations: list[str] = field(default_factory=list)
    uses: list[UseDirective] = field(default_factory=list)
    children: list[StyleRule] = field(default_factory=list)


@dataclass(frozen=True)
class ImportDirective:
    """An ``@import a, b from './path'`` line."""

    names: tuple[str, ...]
    source: str


@dataclass
class ParseResult:
    """Everything the parser found in one source unit."""

    rules: list[StyleRule] = field(default_factory=list)
    exports: list[ExportBlock] = field(default_factory=list)
    imports: list[ImportDirective] = field(default_factory=list)

    def merge(self, other: ParseResult) -> ParseResult:
        """Return a new result with *other*'s entries appended after this one's."""
        return ParseResult(
            rules=self.rules + other.rules,
            exports=self.exports + other.exports,
            imports=self.imports + other.imports,
        )
