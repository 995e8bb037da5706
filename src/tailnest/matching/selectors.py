"""Selector compilation: selector strings to matchable segment chains.

Parsing is delegated to ``cssselect2`` (on top of ``tinycss2`` tokens). The
library's AST is converted once into the small frozen dataclasses below, so
the matcher never depends on the parser's internals.

A complex selector is an ordered tuple of :class:`Segment` objects; each
segment holds the combinator that leads into it and one compound selector.
The first segment's combinator is the *leading* combinator of a nested rule
(``> p``, ``+ p``) or of a ``:has()`` argument, and ``" "`` otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import tinycss2
from cssselect2 import parser as css
from tinycss2.ast import IdentToken, LiteralToken
from tinycss2.nth import parse_nth

__all__ = [
    "ComplexSelector",
    "CompiledSelector",
    "Segment",
    "SimpleSelector",
    "compile_selector",
    "NTH_PSEUDOS",
]

NTH_PSEUDOS = frozenset({"nth-child", "nth-last-child", "nth-of-type", "nth-last-of-type"})

_COMBINATORS = (">", "+", "~")

# Pseudo-class name a non-leading `&` is rewritten to before parsing.
_NESTING_PSEUDO = "-tailnest-nesting"


@dataclass(frozen=True)
class SimpleSelector:
    """One simple selector inside a compound.

    ``kind`` is one of ``type``, ``class``, ``id``, ``attribute``, ``pseudo``,
    ``nth``, ``has``, ``is``, ``not``, ``nesting`` (an element of the
    enclosing rule), or ``any`` (always matches).
    """

    kind: str
    name: str = ""
    operator: str | None = None
    value: str | None = None
    nth: tuple[int, int] | None = None
    alternatives: tuple[ComplexSelector, ...] = ()


@dataclass(frozen=True)
class Segment:
    combinator: str  # " ", ">", "+", "~"
    compound: tuple[SimpleSelector, ...]


@dataclass(frozen=True)
class ComplexSelector:
    """A combinator chain.

    ``anchored`` marks a leading ``&``. ``contextual`` marks an ``&`` past
    the first token (``.dark &``), which is matched backward from the subject.
    """

    segments: tuple[Segment, ...]
    anchored: bool = False
    contextual: bool = False

    @property
    def leading_combinator(self) -> str:
        return self.segments[0].combinator


@dataclass(frozen=True)
class CompiledSelector:
    """Every comma branch that compiled, plus the errors of those that did not."""

    source: str
    branches: tuple[ComplexSelector, ...]
    errors: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# cssselect2 AST conversion
# ---------------------------------------------------------------------------


def _convert_simple(sel: object) -> SimpleSelector:
    if isinstance(sel, css.LocalNameSelector):
        return SimpleSelector("type", sel.local_name)
    if isinstance(sel, css.ClassSelector):
        return SimpleSelector("class", sel.class_name)
    if isinstance(sel, css.IDSelector):
        return SimpleSelector("id", sel.ident)
    if isinstance(sel, css.AttributeSelector):
        return SimpleSelector("attribute", sel.name, operator=sel.operator, value=sel.value)
    if isinstance(sel, css.PseudoClassSelector):
        if sel.name == _NESTING_PSEUDO:
            return SimpleSelector("nesting")
        return SimpleSelector("pseudo", sel.name)
    if isinstance(sel, css.FunctionalPseudoClassSelector):
        argument = tinycss2.serialize(sel.arguments).strip()
        if sel.name in NTH_PSEUDOS:
            return SimpleSelector("nth", sel.name, value=argument, nth=parse_nth(sel.arguments))
        return SimpleSelector("pseudo", sel.name, value=argument)
    if isinstance(sel, css.RelationalSelector):
        return SimpleSelector("has", alternatives=tuple(_convert_relative(s) for s in sel.selector_list))
    if isinstance(sel, (css.MatchesAnySelector, css.SpecificityAdjustmentSelector)):
        return SimpleSelector("is", alternatives=tuple(_convert_selector(s) for s in sel.selector_list))
    if isinstance(sel, css.NegationSelector):
        return SimpleSelector("not", alternatives=tuple(_convert_selector(s) for s in sel.selector_list))
    # Namespace selectors and anything newer than this module: fail open.
    return SimpleSelector("any")


def _convert_tree(tree: object, leading: str = " ") -> tuple[Segment, ...]:
    segments: list[Segment] = []
    while isinstance(tree, css.CombinedSelector):
        compound = tuple(_convert_simple(s) for s in tree.right.simple_selectors)
        segments.append(Segment(tree.combinator, compound))
        tree = tree.left
    compound = tuple(_convert_simple(s) for s in tree.simple_selectors)
    segments.append(Segment(leading, compound))
    segments.reverse()
    return tuple(segments)


def _convert_selector(selector: object) -> ComplexSelector:
    return ComplexSelector(_convert_tree(selector.parsed_tree))


def _convert_relative(selector: object) -> ComplexSelector:
    # :has() arguments are relative selectors carrying their own combinator.
    combinator = getattr(selector, "combinator", " ")
    inner = getattr(selector, "selector", selector)
    return ComplexSelector(_convert_tree(inner.parsed_tree, combinator))


# ---------------------------------------------------------------------------
# Token-level handling of `&` and leading combinators
# ---------------------------------------------------------------------------


def _is_blank(token: object) -> bool:
    return getattr(token, "type", None) in ("whitespace", "comment")


def _lstrip(tokens: list) -> list:
    i = 0
    while i < len(tokens) and _is_blank(tokens[i]):
        i += 1
    return tokens[i:]


def _split_branches(tokens: list) -> list[list]:
    """Split top-level tokens at commas. Commas inside functions are nested."""
    branches: list[list] = [[]]
    for token in tokens:
        if getattr(token, "type", None) == "literal" and token.value == ",":
            branches.append([])
        else:
            branches[-1].append(token)
    return branches


def _is_nesting(token: object) -> bool:
    return getattr(token, "type", None) == "literal" and token.value == "&"


def _mark_nesting(tokens: list) -> list:
    out: list = []
    for token in tokens:
        if _is_nesting(token):
            line, column = token.source_line, token.source_column
            out.append(LiteralToken(line, column, ":"))
            out.append(IdentToken(line, column, _NESTING_PSEUDO))
        else:
            out.append(token)
    return out


def _compile_branch(tokens: list) -> ComplexSelector:
    tokens = _lstrip(tokens)
    if not tokens:
        raise css.SelectorError(None, "empty selector")

    anchored = False
    leading = " "
    first = tokens[0]
    contextual = any(_is_nesting(t) for t in tokens[1:])
    if _is_nesting(first) and not contextual:
        # `&` stands for the enclosing rule's elements; parse it as `*`
        # and anchor the first compound on those elements.
        anchored = True
        tokens = [LiteralToken(first.source_line, first.source_column, "*")] + tokens[1:]
    elif getattr(first, "type", None) == "literal" and first.value in _COMBINATORS:
        leading = first.value
        tokens = _lstrip(tokens[1:])
        if not tokens:
            raise css.SelectorError(first, f"expected a selector after {first.value!r}")
    if contextual:
        tokens = _mark_nesting(tokens)

    parsed = list(css.parse(tokens))
    if len(parsed) != 1:
        raise css.SelectorError(None, "expected exactly one selector")
    return ComplexSelector(
        _convert_tree(parsed[0].parsed_tree, leading),
        anchored=anchored,
        contextual=contextual,
    )


@lru_cache(maxsize=2048)
def compile_selector(selector: str) -> CompiledSelector:
    """Compile a (possibly comma-separated) selector string.

    Branches that fail to parse are dropped and described in ``errors``;
    the rest still compile.
    """
    tokens = tinycss2.parse_component_value_list(selector, skip_comments=True)
    branches: list[ComplexSelector] = []
    errors: list[str] = []
    for branch_tokens in _split_branches(tokens):
        text = tinycss2.serialize(branch_tokens).strip()
        try:
            branches.append(_compile_branch(branch_tokens))
        except css.SelectorError as exc:
            errors.append(f'"{text}": {_describe(exc)}')
    return CompiledSelector(source=selector, branches=tuple(branches), errors=tuple(errors))


def _describe(exc: css.SelectorError) -> str:
    args = [a for a in exc.args if isinstance(a, str)]
    return args[-1] if args else "invalid selector"
