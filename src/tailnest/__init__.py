"""tailnest: nested, selector-shaped utility-class style blocks compiled onto templates."""
from __future__ import annotations

__version__ = "0.1.0"

# Model
from tailnest.model import (
    ConditionalTag,
    Diagnostic,
    DiagnosticCollector,
    ExportBlock,
    ImportDirective,
    ParseResult,
    Severity,
    SourceLocation,
    StyleRule,
    TemplateNode,
    UseDirective,
)

# Configuration
from tailnest.config import DEFAULT_CONFIG, CompilerConfig

# Parsing and resolution
from tailnest.parser import parse
from tailnest.resolver import (
    DEFAULT_STATE,
    ExportLoader,
    ResolverState,
    resolve,
    resolve_with_dependencies,
)

# Matching
from tailnest.matching import MatchResult, match, match_all, nth_matches, runtime_siblings

# Template trees
from tailnest.template import build_template_tree

# Pipeline
from tailnest.transforms import CompileResult, build_scoped_css, compile_template
from tailnest.validation import CompileError, raise_for_errors, validate

__all__ = [
    "__version__",
    # Model
    "ConditionalTag",
    "Diagnostic",
    "DiagnosticCollector",
    "ExportBlock",
    "ImportDirective",
    "ParseResult",
    "Severity",
    "SourceLocation",
    "StyleRule",
    "TemplateNode",
    "UseDirective",
    # Configuration
    "CompilerConfig",
    "DEFAULT_CONFIG",
    # Parsing and resolution
    "parse",
    "resolve",
    "resolve_with_dependencies",
    "ExportLoader",
    "ResolverState",
    "DEFAULT_STATE",
    # Matching
    "match",
    "match_all",
    "MatchResult",
    "nth_matches",
    "runtime_siblings",
    # Template trees
    "build_template_tree",
    # Pipeline
    "compile_template",
    "CompileResult",
    "build_scoped_css",
    "validate",
    "raise_for_errors",
    "CompileError",
]
