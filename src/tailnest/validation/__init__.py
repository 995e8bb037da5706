"""tailnest validation -- diagnostic rules over a finished match."""

from tailnest.validation.rules import (
    check_dynamic_components,
    check_slotted_without_slot,
    check_unmatched_rules,
    has_dynamic_class,
)
from tailnest.validation.validator import CompileError, raise_for_errors, validate

__all__ = [
    "validate",
    "raise_for_errors",
    "CompileError",
    "check_unmatched_rules",
    "check_dynamic_components",
    "check_slotted_without_slot",
    "has_dynamic_class",
]
