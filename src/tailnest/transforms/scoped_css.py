"""CSS text for what class application cannot express.

Raw declarations keep the nesting of the style block they came from.
Extracted rules get their classes through ``@apply`` inside their
ancestor selectors.
"""

from __future__ import annotations

from typing import Iterable

from tailnest.model.rules import StyleRule
from tailnest.transforms.extract import ExtractedRule

INDENT = "  "


def has_declarations(rules: Iterable[StyleRule]) -> bool:
    return any(rule.declarations or has_declarations(rule.children) for rule in rules)


def _emit_declarations(rule: StyleRule, lines: list[str], depth: int) -> None:
    if not rule.declarations and not has_declarations(rule.children):
        return
    indent = INDENT * depth
    lines.append(f"{indent}{rule.selector} {{")
    lines.extend(f"{indent}{INDENT}{decl}" for decl in rule.declarations)
    for child in rule.children:
        _emit_declarations(child, lines, depth + 1)
    lines.append(f"{indent}}}")


def build_scoped_css(rules: list[StyleRule]) -> str | None:
    """Nested CSS for every branch of *rules* that carries declarations.

    Returns ``None`` when there is nothing to emit.
    """
    if not has_declarations(rules):
        return None
    lines: list[str] = []
    for rule in rules:
        _emit_declarations(rule, lines, 0)
    return "\n".join(lines)


def _has_apply_content(rule: StyleRule) -> bool:
    if rule.classes or rule.declarations:
        return True
    return any(_has_apply_content(child) for child in rule.children)


def _emit_apply(rule: StyleRule, lines: list[str], depth: int) -> None:
    if not _has_apply_content(rule):
        return
    indent = INDENT * depth
    lines.append(f"{indent}{rule.selector} {{")
    if rule.classes:
        lines.append(f"{indent}{INDENT}@apply {' '.join(rule.classes)};")
    lines.extend(f"{indent}{INDENT}{decl}" for decl in rule.declarations)
    for child in rule.children:
        _emit_apply(child, lines, depth + 1)
    lines.append(f"{indent}}}")


def build_apply_css(extracted: list[ExtractedRule]) -> str | None:
    """CSS for extracted rules, wrapped in their ancestor selectors."""
    lines: list[str] = []
    for item in extracted:
        if not _has_apply_content(item.rule):
            continue
        depth = 0
        for selector in item.selector_path:
            lines.append(f"{INDENT * depth}{selector} {{")
            depth += 1
        _emit_apply(item.rule, lines, depth)
        for depth in reversed(range(len(item.selector_path))):
            lines.append(f"{INDENT * depth}}}")
    return "\n".join(lines) if lines else None
