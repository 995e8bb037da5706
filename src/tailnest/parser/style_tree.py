"""Hand-written parser for nested utility-class style blocks.

Syntax example::

    @import card from './shared.vue'

    @export button {
      px-4 py-2 rounded
    }

    & {
      bg-gray-900 py-24
      box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);
      > div {
        mx-auto max-w-7xl
        @use button
      }
    }

Lines inside a rule body are utility classes, raw declarations (ending in
``;``), or ``@use`` directives. Text before a ``{`` is a nested selector.
The parser never raises: malformed input produces diagnostics and a
best-effort result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from tailnest.config import DEFAULT_CONFIG, CompilerConfig
from tailnest.model.diagnostic import (
    Diagnostic,
    Severity,
    SourceLocation,
    WarnFunc,
    default_sink,
)
from tailnest.model.rules import (
    ExportBlock,
    ParseResult,
    StyleRule,
    UseDirective,
)
from tailnest.parser.directives import (
    EXPORT_USAGE,
    IMPORT_USAGE,
    USE_USAGE,
    parse_export_header,
    parse_import_directive,
    parse_use_directive,
)
from tailnest.parser.scanner import (
    find_matching_brace,
    find_top_level,
    line_at,
    skip_whitespace_and_comments,
    strip_comments,
)

__all__ = ["parse", "looks_like_selector", "split_classes_and_selector"]

_AT_RULE_RE = re.compile(r"^@(?P<name>[\w-]+)")

# Characters that can only appear in a selector, never in a bare word.
_SELECTOR_SYNTAX = frozenset(">+~.#[]:,*&")


@dataclass
class _Body:
    classes: list[str] = field(default_factory=list)
    declarations: list[str] = field(default_factory=list)
    uses: list[UseDirective] = field(default_factory=list)
    children: list[StyleRule] = field(default_factory=list)


def looks_like_selector(text: str, config: CompilerConfig = DEFAULT_CONFIG) -> bool:
    """Return False for a bare word that doubles as a utility class name."""
    trimmed = text.strip()
    if any(ch in _SELECTOR_SYNTAX for ch in trimmed):
        return True
    return trimmed not in config.ambiguous_words


def split_classes_and_selector(
    text: str, config: CompilerConfig = DEFAULT_CONFIG
) -> tuple[str, str]:
    """Split the text before a ``{`` into ``(class_text, selector)``.

    The selector is the last non-empty line, extended upwards over lines that
    end with a comma. Everything above it is body content. When the selector
    is a lone ambiguous word the whole text is body content and the selector
    is empty.
    """
    lines = text.split("\n")
    end = len(lines) - 1
    while end >= 0 and not strip_comments(lines[end]).strip():
        end -= 1
    if end < 0:
        return "", ""

    start = end
    while start > 0 and strip_comments(lines[start - 1]).strip().endswith(","):
        start -= 1

    selector = strip_comments("\n".join(lines[start:end + 1])).strip()
    if not looks_like_selector(selector, config):
        return text, ""
    return "\n".join(lines[:start]), selector


class _StyleParser:
    """Single-use parser over one source unit."""

    def __init__(
        self,
        src: str,
        file_path: str | None,
        config: CompilerConfig,
        warn: WarnFunc,
    ) -> None:
        self.src = src
        self.file_path = file_path
        self.config = config
        self.warn = warn

    # ---- diagnostics ----

    def _report(self, rule: str, severity: Severity, message: str, offset: int) -> None:
        location = SourceLocation(file=self.file_path, line=line_at(self.src, offset))
        self.warn(Diagnostic(rule=rule, severity=severity, message=message, location=location))

    def _unsupported_at_rule(self, text: str) -> str | None:
        match = _AT_RULE_RE.match(text)
        if match and match.group("name").lower() in self.config.unsupported_at_rules:
            return match.group(0)
        return None

    def _check_closed(self, open_pos: int, close_pos: int) -> None:
        if close_pos >= len(self.src):
            self._report(
                "unclosed-brace",
                Severity.ERROR,
                'Unclosed "{" -- missing closing "}". Rules after this point may be lost.',
                open_pos,
            )

    # ---- top level ----

    def parse_top_level(self) -> ParseResult:
        result = ParseResult()
        src = self.src
        end = len(src)
        pos = 0

        while pos < end:
            pos = skip_whitespace_and_comments(src, pos, end)
            if pos >= end:
                break

            if src.startswith("@import", pos) and (
                pos + 7 >= end or src[pos + 7].isspace()
            ):
                line_end = src.find("\n", pos)
                line_end = end if line_end == -1 else line_end
                line = src[pos:line_end].strip()
                directive = parse_import_directive(line)
                if directive:
                    result.imports.append(directive)
                else:
                    self._report(
                        "malformed-import",
                        Severity.ERROR,
                        f'Malformed @import directive: "{line}". Expected: {IMPORT_USAGE}',
                        pos,
                    )
                pos = line_end + 1
                continue

            brace = find_top_level(src, pos, end, "{")
            if brace == -1:
                leftover = strip_comments(src[pos:end]).strip()
                if leftover:
                    self._report(
                        "stray-content",
                        Severity.WARNING,
                        f'Ignoring content outside of any rule: "{leftover.splitlines()[0]}"',
                        pos,
                    )
                break

            header = strip_comments(src[pos:brace]).strip()
            close = find_matching_brace(src, brace)
            self._check_closed(brace, close)

            at_rule = self._unsupported_at_rule(header)
            if at_rule:
                self._report(
                    "unsupported-at-rule",
                    Severity.WARNING,
                    f'"{at_rule}" is not supported inside utility style blocks. '
                    "Move it to a regular stylesheet.",
                    pos,
                )
                pos = close + 1
                continue

            body = self.parse_body(brace + 1, close)

            if header.startswith("@export"):
                name = parse_export_header(header)
                if name is None:
                    self._report(
                        "malformed-export",
                        Severity.ERROR,
                        f'Malformed @export header: "{header}". Expected: {EXPORT_USAGE}',
                        pos,
                    )
                else:
                    result.exports.append(
                        ExportBlock(
                            name=name,
                            classes=body.classes,
                            declarations=body.declarations,
                            uses=body.uses,
                            children=body.children,
                        )
                    )
            else:
                result.rules.append(
                    StyleRule(
                        selector=header,
                        classes=body.classes,
                        declarations=body.declarations,
                        uses=body.uses,
                        children=body.children,
                    )
                )
            pos = close + 1

        return result

    # ---- rule bodies ----

    def parse_body(self, start: int, end: int) -> _Body:
        """Parse the text between a rule's braces."""
        body = _Body()
        src = self.src
        end = min(end, len(src))
        pos = start

        while pos < end:
            brace = find_top_level(src, pos, end, "{")
            if brace == -1:
                self._extract_content(src[pos:end], pos, body)
                break

            class_text, selector = split_classes_and_selector(src[pos:brace], self.config)
            self._extract_content(class_text, pos, body)

            close = find_matching_brace(src, brace)
            self._check_closed(brace, close)

            at_rule = self._unsupported_at_rule(selector)
            if at_rule:
                self._report(
                    "unsupported-at-rule",
                    Severity.WARNING,
                    f'"{at_rule}" is not supported inside utility style blocks. '
                    "Move it to a regular stylesheet.",
                    pos,
                )
                pos = close + 1
                continue

            if selector.startswith("@export"):
                self._report(
                    "malformed-export",
                    Severity.ERROR,
                    "@export is only allowed at the top level of a style block.",
                    pos,
                )
                pos = close + 1
                continue

            inner = self.parse_body(brace + 1, close)
            body.children.append(
                StyleRule(
                    # A lone ambiguous word before `{` opens a scope on the
                    # same elements rather than a nested selector.
                    selector=selector or "&",
                    classes=inner.classes,
                    declarations=inner.declarations,
                    uses=inner.uses,
                    children=inner.children,
                )
            )
            pos = close + 1

        return body

    def _extract_content(self, text: str, base_offset: int, body: _Body) -> None:
        """Sort body lines into classes, declarations, and ``@use`` directives."""
        offset = base_offset
        cleaned = strip_comments(text, keep_lines=True).split("\n")
        for raw_line, clean_line in zip(text.split("\n"), cleaned):
            line = clean_line.strip()
            line_offset = offset
            offset += len(raw_line) + 1
            if not line:
                continue
            if line == "@use" or line.startswith("@use "):
                directive = parse_use_directive(line)
                if directive:
                    body.uses.append(directive)
                else:
                    self._report(
                        "malformed-use",
                        Severity.ERROR,
                        f'Malformed @use directive: "{line}". Expected: {USE_USAGE}',
                        line_offset,
                    )
            elif line == "@import" or line.startswith("@import "):
                self._report(
                    "malformed-import",
                    Severity.ERROR,
                    f'@import is only allowed at the top level: "{line}"',
                    line_offset,
                )
            elif line.endswith(";"):
                body.declarations.append(line)
            else:
                body.classes.extend(line.split())


def parse(
    text: str,
    file_path: str | None = None,
    *,
    config: CompilerConfig | None = None,
    warn: WarnFunc | None = None,
) -> ParseResult:
    """Parse a style block into rules, exports, and imports.

    Never raises for malformed content; problems are reported to *warn*
    (default: the ``tailnest`` logger) and parsing continues.
    """
    parser = _StyleParser(
        src=text,
        file_path=file_path,
        config=config or DEFAULT_CONFIG,
        warn=warn if warn is not None else default_sink,
    )
    return parser.parse_top_level()
