"""tailnest transforms -- rule extraction, CSS output, and the pipeline."""

from tailnest.transforms.extract import (
    ExtractedRule,
    extract_pseudo_element_rules,
    extract_slotted_rules,
)
from tailnest.transforms.scoped_css import build_apply_css, build_scoped_css
from tailnest.transforms.compile import CompileResult, compile_template

__all__ = [
    "ExtractedRule",
    "extract_slotted_rules",
    "extract_pseudo_element_rules",
    "build_scoped_css",
    "build_apply_css",
    "CompileResult",
    "compile_template",
]
