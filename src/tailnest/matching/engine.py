"""Selector matching against the template tree.

Rules are matched top-down: a root rule selects from the template roots, and
each nested rule selects from the children of every element its parent rule
matched. Inside a selector, combinators narrow a working set forward;
``:is()``, ``:where()`` and ``:not()`` verify a node backward through its
ancestors and preceding siblings; ``:has()`` searches forward from the node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from tailnest.config import DEFAULT_CONFIG, CompilerConfig
from tailnest.matching.pseudo import matches_pseudo
from tailnest.matching.selectors import (
    ComplexSelector,
    Segment,
    SimpleSelector,
    compile_selector,
)
from tailnest.matching.siblings import following_siblings, preceding_siblings
from tailnest.model.diagnostic import (
    Diagnostic,
    Severity,
    SourceLocation,
    WarnFunc,
    default_sink,
)
from tailnest.model.rules import StyleRule
from tailnest.model.template import TemplateNode

Compound = Sequence[SimpleSelector]


def _unique(nodes: Iterable[TemplateNode]) -> list[TemplateNode]:
    seen: set[int] = set()
    out: list[TemplateNode] = []
    for node in nodes:
        if id(node) not in seen:
            seen.add(id(node))
            out.append(node)
    return out


def _tree_roots(nodes: Iterable[TemplateNode]) -> list[TemplateNode]:
    roots = []
    for node in nodes:
        while node.parent is not None:
            node = node.parent
        roots.append(node)
    return _unique(roots)


def _matches_attribute(node: TemplateNode, sel: SimpleSelector) -> bool:
    if sel.name not in node.attributes:
        return False
    if sel.operator is None:
        return True
    actual = node.attributes[sel.name]
    # A boolean attribute carries no value to compare against.
    if isinstance(actual, bool):
        return False
    expected = sel.value or ""
    op = sel.operator
    if op == "=":
        return actual == expected
    if op == "~=":
        return expected in actual.split()
    if op == "|=":
        return actual == expected or actual.startswith(expected + "-")
    if not expected:
        return False
    if op == "^=":
        return actual.startswith(expected)
    if op == "$=":
        return actual.endswith(expected)
    if op == "*=":
        return expected in actual
    return False


class SelectorMatcher:
    """Evaluates compiled selectors over :class:`TemplateNode` trees.

    Invalid selectors are reported once per matcher as ``invalid-selector``
    and the failing comma branch matches nothing.
    """

    def __init__(
        self,
        config: CompilerConfig | None = None,
        warn: WarnFunc | None = None,
        file_path: str | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.warn = warn if warn is not None else default_sink
        self.file_path = file_path
        self._reported: set[str] = set()
        # Elements `&` stands for while a selector is being matched.
        self._nesting: set[int] = set()

    # ---- compound ----

    def matches_simple(self, node: TemplateNode, sel: SimpleSelector) -> bool:
        kind = sel.kind
        if kind == "type":
            return node.tag == sel.name
        if kind == "class":
            return sel.name in node.classes
        if kind == "id":
            return node.id == sel.name
        if kind == "attribute":
            return _matches_attribute(node, sel)
        if kind in ("pseudo", "nth"):
            return matches_pseudo(node, sel, self.config)
        if kind == "has":
            return any(self.has_match(node, alt) for alt in sel.alternatives)
        if kind == "is":
            return any(self.matches_complex(node, alt) for alt in sel.alternatives)
        if kind == "not":
            return not any(self.matches_complex(node, alt) for alt in sel.alternatives)
        if kind == "nesting":
            return id(node) in self._nesting
        return True

    def matches(self, node: TemplateNode, compound: Compound) -> bool:
        """AND over every simple selector. An empty compound is ``*``."""
        return all(self.matches_simple(node, sel) for sel in compound)

    # ---- forward narrowing ----

    def _descendants(self, nodes: Iterable[TemplateNode], compound: Compound) -> list[TemplateNode]:
        """Matching nodes among *nodes* and their whole subtrees."""
        return [d for n in nodes for d in n.iter_subtree() if self.matches(d, compound)]

    def _step(self, current: list[TemplateNode], segment: Segment) -> list[TemplateNode]:
        compound = segment.compound
        combinator = segment.combinator
        if combinator == ">":
            found = [c for n in current for c in n.children if self.matches(c, compound)]
        elif combinator == "+":
            found = []
            for n in current:
                following = following_siblings(n)
                if following and self.matches(following[0], compound):
                    found.append(following[0])
        elif combinator == "~":
            found = [s for n in current for s in following_siblings(n) if self.matches(s, compound)]
        else:
            found = self._descendants((c for n in current for c in n.children), compound)
        return _unique(found)

    def _chain(self, current: list[TemplateNode], segments: Sequence[Segment]) -> list[TemplateNode]:
        for segment in segments:
            if not current:
                break
            current = self._step(current, segment)
        return current

    # ---- backward verification ----

    def matches_complex(self, node: TemplateNode, selector: ComplexSelector) -> bool:
        """Whether *node* is a subject of *selector* (last compound first)."""
        segments = selector.segments
        if not self.matches(node, segments[-1].compound):
            return False
        return self._verify_backward(node, segments, len(segments) - 1)

    def _verify_backward(self, node: TemplateNode, segments: Sequence[Segment], idx: int) -> bool:
        if idx == 0:
            return True
        combinator = segments[idx].combinator
        previous = segments[idx - 1].compound

        if combinator == ">":
            candidates = [node.parent] if node.parent is not None else []
        elif combinator == " ":
            candidates = []
            ancestor = node.parent
            while ancestor is not None:
                candidates.append(ancestor)
                ancestor = ancestor.parent
        elif combinator == "+":
            candidates = preceding_siblings(node)[:1]
        else:
            candidates = preceding_siblings(node)

        return any(
            self.matches(c, previous) and self._verify_backward(c, segments, idx - 1)
            for c in candidates
        )

    def has_match(self, node: TemplateNode, selector: ComplexSelector) -> bool:
        """``:has()``: search forward from *node* for the relative selector."""
        first = selector.segments[0]
        start = self._step([node], first)
        return bool(self._chain(start, selector.segments[1:]))

    # ---- selector strings ----

    def _report_errors(self, source: str, errors: Sequence[str]) -> None:
        if not errors or source in self._reported:
            return
        self._reported.add(source)
        location = SourceLocation(file=self.file_path) if self.file_path else None
        for error in errors:
            self.warn(
                Diagnostic(
                    rule="invalid-selector",
                    severity=Severity.ERROR,
                    message=f"Invalid selector {error}",
                    location=location,
                )
            )

    def _match_branch(
        self,
        branch: ComplexSelector,
        scope: list[TemplateNode],
        parent_matched: list[TemplateNode] | None,
    ) -> list[TemplateNode]:
        first = branch.segments[0]
        anchors = parent_matched if parent_matched is not None else scope
        if branch.contextual:
            return self._match_contextual(branch, anchors)
        if branch.anchored:
            current = [n for n in anchors if self.matches(n, first.compound)]
        elif first.combinator == ">":
            current = [n for n in scope if self.matches(n, first.compound)]
        elif first.combinator in ("+", "~"):
            # Siblings of the enclosing rule's elements; nothing at the top.
            current = self._step(list(parent_matched or []), first)
        else:
            current = self._descendants(scope, first.compound)
        return self._chain(_unique(current), branch.segments[1:])

    def _match_contextual(
        self,
        branch: ComplexSelector,
        anchors: list[TemplateNode],
    ) -> list[TemplateNode]:
        """Match a selector with a non-leading ``&`` (``.dark &``, ``.a & p``).

        Candidates are the anchors themselves when ``&`` is in the subject
        compound, otherwise every element of their trees; each candidate is
        verified backward.
        """
        if any(sel.kind == "nesting" for sel in branch.segments[-1].compound):
            candidates = anchors
        else:
            candidates = [d for root in _tree_roots(anchors) for d in root.iter_subtree()]
        return [n for n in candidates if self.matches_complex(n, branch)]

    def match(
        self,
        selector: str,
        scope: Sequence[TemplateNode],
        parent_matched: Sequence[TemplateNode] | None = None,
    ) -> list[TemplateNode]:
        """Match *selector* against *scope*.

        *scope* is the template roots for a top-level rule, or the children
        of one element the enclosing rule matched (*parent_matched*). ``&``
        and the empty selector stand for *parent_matched*, or for the roots
        at the top level.
        """
        scope = list(scope)
        parents = list(parent_matched) if parent_matched is not None else None
        if not selector.strip() or selector.strip() == "&":
            return list(parents if parents is not None else scope)

        compiled = compile_selector(selector)
        self._report_errors(selector, compiled.errors)
        self._nesting = {id(n) for n in (parents if parents is not None else scope)}
        results: list[TemplateNode] = []
        for branch in compiled.branches:
            results.extend(self._match_branch(branch, scope, parents))
        return _unique(results)


# ---------------------------------------------------------------------------
# Whole rule trees
# ---------------------------------------------------------------------------


@dataclass
class MatchResult:
    """Classes and declarations accumulated per node, plus the matched rules.

    Accumulation order is depth-first rule order: a rule's classes land on an
    element before those of its nested rules and of any later rule.
    """

    classes: dict[TemplateNode, list[str]] = field(default_factory=dict)
    declarations: dict[TemplateNode, list[str]] = field(default_factory=dict)
    matched_rules: list[StyleRule] = field(default_factory=list)
    _matched_ids: set[int] = field(default_factory=set, repr=False)

    def mark(self, rule: StyleRule) -> None:
        if id(rule) not in self._matched_ids:
            self._matched_ids.add(id(rule))
            self.matched_rules.append(rule)

    def is_matched(self, rule: StyleRule) -> bool:
        return id(rule) in self._matched_ids

    def class_string(self, node: TemplateNode) -> str:
        """Space-joined classes for *node*, first occurrence wins."""
        return " ".join(dict.fromkeys(self.classes.get(node, [])))


def _collect(
    matcher: SelectorMatcher,
    rule: StyleRule,
    scope: list[TemplateNode],
    parent_matched: list[TemplateNode] | None,
    result: MatchResult,
) -> None:
    matched = matcher.match(rule.selector, scope, parent_matched)
    if matched:
        result.mark(rule)
    for element in matched:
        if rule.classes:
            result.classes.setdefault(element, []).extend(rule.classes)
        if rule.declarations:
            result.declarations.setdefault(element, []).extend(rule.declarations)
        for child in rule.children:
            _collect(matcher, child, element.children, [element], result)


def match_all(
    rules: Sequence[StyleRule],
    roots: Sequence[TemplateNode],
    *,
    config: CompilerConfig | None = None,
    warn: WarnFunc | None = None,
    file_path: str | None = None,
) -> MatchResult:
    """Match a resolved rule tree against the template roots."""
    matcher = SelectorMatcher(config=config, warn=warn, file_path=file_path)
    result = MatchResult()
    roots = list(roots)
    for rule in rules:
        _collect(matcher, rule, roots, None, result)
    return result


def match(
    selector: str,
    scope: Sequence[TemplateNode],
    parent_matched: Sequence[TemplateNode] | None = None,
    *,
    config: CompilerConfig | None = None,
    warn: WarnFunc | None = None,
) -> list[TemplateNode]:
    """Match one selector string; see :meth:`SelectorMatcher.match`."""
    return SelectorMatcher(config=config, warn=warn).match(selector, scope, parent_matched)
