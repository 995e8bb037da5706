from tailnest.parser.style_tree import (
    looks_like_selector,
    parse,
    split_classes_and_selector,
)
from tailnest.parser.directives import (
    parse_export_header,
    parse_import_directive,
    parse_use_directive,
)

__all__ = [
    "parse",
    "looks_like_selector",
    "split_classes_and_selector",
    "parse_use_directive",
    "parse_import_directive",
    "parse_export_header",
]
