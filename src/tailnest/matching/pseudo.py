"""Structural pseudo-classes and An+B evaluation."""

from __future__ import annotations

from tinycss2.nth import parse_nth

from tailnest.config import CompilerConfig
from tailnest.matching.selectors import SimpleSelector
from tailnest.matching.siblings import sibling_position
from tailnest.model.template import TemplateNode

STRUCTURAL_PSEUDOS = frozenset({
    "first-child",
    "last-child",
    "only-child",
    "first-of-type",
    "last-of-type",
    "only-of-type",
    "empty",
    "root",
})


def an_plus_b_matches(a: int, b: int, position: int) -> bool:
    """Whether the 1-based *position* is ``a*n + b`` for some ``n >= 0``."""
    if a == 0:
        return position == b
    diff = position - b
    return diff % a == 0 and diff // a >= 0


def nth_matches(expression: str, position: int) -> bool:
    """Evaluate an An+B expression (``odd``, ``even``, ``3``, ``-n+3``...).

    An expression that does not parse matches every position.
    """
    parsed = parse_nth(expression)
    if parsed is None:
        return True
    return an_plus_b_matches(parsed[0], parsed[1], position)


def _type_pool(node: TemplateNode, siblings: list[TemplateNode]) -> list[TemplateNode]:
    return [s for s in siblings if s.tag == node.tag]


def _position(node: TemplateNode, pool: list[TemplateNode], from_end: bool) -> int:
    for i, candidate in enumerate(pool):
        if candidate is node:
            return len(pool) - i if from_end else i + 1
    return 0


def matches_structural(node: TemplateNode, name: str) -> bool:
    if name == "root":
        return node.parent is None
    if name == "empty":
        return not node.children

    siblings, idx = sibling_position(node)
    if name == "first-child":
        return idx == 0
    if name == "last-child":
        return idx == len(siblings) - 1
    if name == "only-child":
        return len(siblings) == 1

    pool = _type_pool(node, siblings)
    if name == "first-of-type":
        return pool[0] is node
    if name == "last-of-type":
        return pool[-1] is node
    if name == "only-of-type":
        return len(pool) == 1
    return True


def matches_nth(node: TemplateNode, sel: SimpleSelector) -> bool:
    if sel.nth is None:
        return True
    siblings, _ = sibling_position(node)
    pool = _type_pool(node, siblings) if sel.name.endswith("of-type") else siblings
    position = _position(node, pool, from_end="-last-" in sel.name)
    return an_plus_b_matches(sel.nth[0], sel.nth[1], position)


def matches_pseudo(node: TemplateNode, sel: SimpleSelector, config: CompilerConfig) -> bool:
    """Non-relational pseudo-classes. Runtime and unknown ones always match."""
    if sel.kind == "nth":
        return matches_nth(node, sel)
    if sel.name in config.runtime_pseudo_classes:
        return True
    if sel.name in STRUCTURAL_PSEUDOS and sel.value is None:
        return matches_structural(node, sel.name)
    return True
