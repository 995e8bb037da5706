"""End-to-end pipeline: style sources plus a template tree in, classes out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from tailnest.config import DEFAULT_CONFIG, CompilerConfig
from tailnest.matching.engine import match_all
from tailnest.model.diagnostic import Diagnostic, DiagnosticCollector, WarnFunc, default_sink
from tailnest.model.rules import ParseResult, StyleRule
from tailnest.model.template import TemplateNode
from tailnest.parser import parse
from tailnest.resolver.loader import ExportLoader
from tailnest.resolver.resolve import LoadExports, resolve_with_dependencies
from tailnest.resolver.state import DEFAULT_STATE, ResolverState
from tailnest.transforms.extract import (
    ExtractedRule,
    extract_pseudo_element_rules,
    extract_slotted_rules,
)
from tailnest.transforms.scoped_css import build_apply_css, build_scoped_css
from tailnest.validation.validator import validate


@dataclass
class CompileResult:
    """Everything one compilation produced.

    ``classes`` maps each matched node to its accumulated class list, in
    rule order and possibly with repeats; ``class_strings`` holds the
    de-duplicated text ready for a ``class`` attribute.
    """

    rules: list[StyleRule] = field(default_factory=list)
    classes: dict[TemplateNode, list[str]] = field(default_factory=dict)
    class_strings: dict[TemplateNode, str] = field(default_factory=dict)
    declarations: dict[TemplateNode, list[str]] = field(default_factory=dict)
    extracted: list[ExtractedRule] = field(default_factory=list)
    scoped_css: str | None = None
    dependencies: set[str] = field(default_factory=set)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]


def compile_template(
    sources: str | Sequence[str],
    roots: Sequence[TemplateNode],
    file_path: str,
    *,
    state: ResolverState | None = None,
    load_exports: LoadExports | None = None,
    has_slot: bool = False,
    config: CompilerConfig | None = None,
    warn: WarnFunc | None = None,
) -> CompileResult:
    """Compile one or more style blocks against a template tree.

    Multiple *sources* are merged in order, as if they were one block.
    *load_exports* defaults to an :class:`ExportLoader` over *state*, which
    itself defaults to the shared :data:`DEFAULT_STATE`. Diagnostics are
    collected on the result and forwarded to *warn*.
    """
    config = config or DEFAULT_CONFIG
    state = state if state is not None else DEFAULT_STATE
    collector = DiagnosticCollector(forward=warn if warn is not None else default_sink)
    if load_exports is None:
        load_exports = ExportLoader(state, config=config, warn=collector)

    if isinstance(sources, str):
        sources = [sources]
    merged = ParseResult()
    for source in sources:
        merged = merged.merge(parse(source, file_path, config=config, warn=collector))

    rules, deps = resolve_with_dependencies(merged, file_path, load_exports, state, warn=collector)

    slotted = extract_slotted_rules(rules)
    pseudo_elements = extract_pseudo_element_rules(rules)

    result = match_all(rules, roots, config=config, warn=collector, file_path=file_path)
    for diagnostic in validate(
        rules,
        result,
        roots,
        slotted=slotted,
        has_slot=has_slot,
        config=config,
        file_path=file_path,
    ):
        collector(diagnostic)

    css_parts = [
        build_scoped_css(rules),
        build_apply_css(slotted),
        build_apply_css(pseudo_elements),
    ]
    scoped_css = "\n".join(part for part in css_parts if part) or None

    return CompileResult(
        rules=rules,
        classes=result.classes,
        class_strings={node: result.class_string(node) for node in result.classes},
        declarations=result.declarations,
        extracted=slotted + pseudo_elements,
        scoped_css=scoped_css,
        dependencies=deps,
        diagnostics=list(collector.diagnostics),
    )
