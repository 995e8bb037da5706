"""Diagnostic rules over a finished match.

Each rule is a plain function returning a list of :class:`Diagnostic`
objects. None of them are errors: a selector that matches nothing still
compiles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from tailnest.config import DEFAULT_CONFIG, CompilerConfig
from tailnest.matching.engine import MatchResult
from tailnest.model.diagnostic import Diagnostic, Severity, SourceLocation
from tailnest.model.rules import StyleRule
from tailnest.model.template import TemplateNode

if TYPE_CHECKING:
    from tailnest.transforms.extract import ExtractedRule

DYNAMIC_CLASS_NOTE = (
    ". Note: some elements use dynamic :class bindings which cannot be "
    "matched at compile time"
)


def _location(file_path: str | None) -> SourceLocation | None:
    return SourceLocation(file=file_path) if file_path else None


def _iter_nodes(roots: Sequence[TemplateNode]):
    for root in roots:
        yield from root.iter_subtree()


def has_dynamic_class(roots: Sequence[TemplateNode]) -> bool:
    return any(node.has_dynamic_class for node in _iter_nodes(roots))


def check_unmatched_rules(
    rules: Sequence[StyleRule],
    result: MatchResult,
    roots: Sequence[TemplateNode],
    *,
    file_path: str | None = None,
) -> list[Diagnostic]:
    """Report rules whose selector matched no element.

    ``&`` rules are never reported themselves but their children are
    checked. Children of an unmatched rule are skipped, as they could not
    have matched either.
    """
    dynamic = has_dynamic_class(roots)
    diagnostics: list[Diagnostic] = []

    def visit(level: Sequence[StyleRule]) -> None:
        for rule in level:
            if rule.selector == "&" or result.is_matched(rule):
                visit(rule.children)
                continue
            if not rule.has_content:
                continue
            message = f'Selector "{rule.selector}" matched no elements in the template'
            if dynamic and "." in rule.selector:
                message += DYNAMIC_CLASS_NOTE
            diagnostics.append(
                Diagnostic(
                    rule="unmatched-selector",
                    severity=Severity.INFO,
                    message=message,
                    location=_location(file_path),
                )
            )

    visit(rules)
    return diagnostics


def check_dynamic_components(
    roots: Sequence[TemplateNode],
    *,
    config: CompilerConfig | None = None,
    file_path: str | None = None,
) -> list[Diagnostic]:
    """Warn about ``<component :is>`` elements, whose tag is decided at runtime."""
    tag = (config or DEFAULT_CONFIG).dynamic_component_tag
    return [
        Diagnostic(
            rule="dynamic-component",
            severity=Severity.WARNING,
            message=(
                f'<{tag} :is="..."> renders a dynamic tag; tag-based selectors '
                "may not match at runtime. Use class or attribute selectors instead."
            ),
            location=_location(file_path),
        )
        for node in _iter_nodes(roots)
        if node.tag == tag
    ]


def check_slotted_without_slot(
    extracted: Sequence[ExtractedRule],
    has_slot: bool,
    *,
    file_path: str | None = None,
) -> list[Diagnostic]:
    """Flag ``:slotted()`` CSS in a template that renders no ``<slot>``."""
    if not extracted or has_slot:
        return []
    return [
        Diagnostic(
            rule="slotted-without-slot",
            severity=Severity.INFO,
            message=(
                ":slotted() rules found but template has no <slot> element; "
                "the emitted CSS will never apply"
            ),
            location=_location(file_path),
        )
    ]
