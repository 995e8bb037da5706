"""tailnest model layer -- public type re-exports."""

from tailnest.model.diagnostic import (
    Diagnostic,
    DiagnosticCollector,
    Severity,
    SourceLocation,
    WarnFunc,
    default_sink,
    logging_sink,
)
from tailnest.model.rules import (
    ExportBlock,
    ImportDirective,
    ParseResult,
    StyleRule,
    UseDirective,
)
from tailnest.model.template import AttrValue, ConditionalTag, TemplateNode

__all__ = [
    # rules
    "UseDirective",
    "StyleRule",
    "ExportBlock",
    "ImportDirective",
    "ParseResult",
    # template
    "AttrValue",
    "ConditionalTag",
    "TemplateNode",
    # diagnostic
    "Severity",
    "SourceLocation",
    "Diagnostic",
    "DiagnosticCollector",
    "WarnFunc",
    "default_sink",
    "logging_sink",
]
