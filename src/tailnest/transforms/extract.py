"""Pull out rules that can never match a template element.

``:slotted()`` rules style content owned by the parent component, and
pseudo-element rules (``::before``) target boxes that are not elements. Both
are removed from the rule tree before matching and emitted as CSS instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from tailnest.model.rules import StyleRule


@dataclass
class ExtractedRule:
    """A removed rule and the selectors of the rules it was nested in."""

    rule: StyleRule
    selector_path: list[str] = field(default_factory=list)


def is_slotted_selector(selector: str) -> bool:
    return ":slotted(" in selector


def has_pseudo_element(selector: str) -> bool:
    return "::" in selector


def _extract(rules: list[StyleRule], predicate: Callable[[str], bool]) -> list[ExtractedRule]:
    extracted: list[ExtractedRule] = []

    def visit(level: list[StyleRule], path: list[str]) -> list[StyleRule]:
        kept: list[StyleRule] = []
        for rule in level:
            if predicate(rule.selector):
                extracted.append(ExtractedRule(rule=rule, selector_path=list(path)))
                continue
            rule.children = visit(rule.children, path + [rule.selector])
            kept.append(rule)
        return kept

    rules[:] = visit(rules, [])
    return extracted


def extract_slotted_rules(rules: list[StyleRule]) -> list[ExtractedRule]:
    """Remove ``:slotted()`` rules from *rules* (in place, at any depth)."""
    return _extract(rules, is_slotted_selector)


def extract_pseudo_element_rules(rules: list[StyleRule]) -> list[ExtractedRule]:
    """Remove pseudo-element rules from *rules* (in place, at any depth)."""
    return _extract(rules, has_pseudo_element)
