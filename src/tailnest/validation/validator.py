"""Run every validation rule over a match, and the strict-build helper."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from tailnest.config import CompilerConfig
from tailnest.matching.engine import MatchResult
from tailnest.model.diagnostic import Diagnostic
from tailnest.model.rules import StyleRule
from tailnest.model.template import TemplateNode
from tailnest.validation.rules import (
    check_dynamic_components,
    check_slotted_without_slot,
    check_unmatched_rules,
)

if TYPE_CHECKING:
    from tailnest.transforms.extract import ExtractedRule


class CompileError(Exception):
    """Raised by :func:`raise_for_errors` when ERROR diagnostics exist."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [str(d) for d in diagnostics if d.is_error]
        super().__init__(
            f"Compilation failed with {len(messages)} error(s): " + "; ".join(messages)
        )


def validate(
    rules: Sequence[StyleRule],
    result: MatchResult,
    roots: Sequence[TemplateNode],
    *,
    slotted: Sequence[ExtractedRule] = (),
    has_slot: bool = False,
    config: CompilerConfig | None = None,
    file_path: str | None = None,
) -> list[Diagnostic]:
    """Run all validation rules. Returns every diagnostic found."""
    diagnostics: list[Diagnostic] = []
    diagnostics.extend(check_dynamic_components(roots, config=config, file_path=file_path))
    diagnostics.extend(check_unmatched_rules(rules, result, roots, file_path=file_path))
    diagnostics.extend(check_slotted_without_slot(slotted, has_slot, file_path=file_path))
    return diagnostics


def raise_for_errors(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Raise :class:`CompileError` if any diagnostic is an error.

    Returns the remaining (warning and info) diagnostics otherwise.
    """
    diagnostics = list(diagnostics)
    errors = [d for d in diagnostics if d.is_error]
    if errors:
        raise CompileError(errors)
    return diagnostics
