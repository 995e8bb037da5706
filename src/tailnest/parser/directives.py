"""Line-level ``@use``, ``@import`` and ``@export`` directive parsing."""

from __future__ import annotations

import re

from tailnest.model.rules import ImportDirective, UseDirective

# @use name
# @use name from './path'
_USE_RE = re.compile(
    r"""
    ^@use\s+
    (?P<name>\w[\w-]*)                      # export name
    (?:\s+from\s+['"](?P<source>[^'"]+)['"])?  # optional quoted source path
    \s*;?\s*$
    """,
    re.VERBOSE,
)

# @import a, b from './path'
_IMPORT_RE = re.compile(
    r"""
    ^@import\s+
    (?P<names>\w[\w\s,-]*?)                 # comma-separated export names
    \s+from\s+['"](?P<source>[^'"]+)['"]    # quoted source path
    \s*;?\s*$
    """,
    re.VERBOSE,
)

_EXPORT_RE = re.compile(r"^@export\s+(?P<name>\w[\w-]*)\s*$")

USE_USAGE = "@use name or @use name from './path'"
IMPORT_USAGE = "@import name1, name2 from './path'"
EXPORT_USAGE = "@export name { ... }"


def parse_use_directive(text: str) -> UseDirective | None:
    """Parse an ``@use`` line, returning ``None`` when malformed."""
    match = _USE_RE.match(text.strip())
    if not match:
        return None
    return UseDirective(name=match.group("name"), source=match.group("source"))


def parse_import_directive(text: str) -> ImportDirective | None:
    """Parse an ``@import`` line, returning ``None`` when malformed."""
    match = _IMPORT_RE.match(text.strip())
    if not match:
        return None
    names = tuple(n.strip() for n in match.group("names").split(",") if n.strip())
    if not names or any(not re.fullmatch(r"\w[\w-]*", n) for n in names):
        return None
    return ImportDirective(names=names, source=match.group("source"))


def parse_export_header(text: str) -> str | None:
    """Return the export name from an ``@export name`` header, or ``None``."""
    match = _EXPORT_RE.match(text.strip())
    return match.group("name") if match else None
