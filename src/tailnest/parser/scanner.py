"""Brace-aware scanning helpers shared by the style-block parser.

The scanners respect nested ``{ }``, bracket spans (``[a{b}]``), quoted
strings, and ``/* */`` comments so that only structural braces count.
"""

from __future__ import annotations

import re

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)


def strip_comments(text: str, *, keep_lines: bool = False) -> str:
    """Remove every ``/* ... */`` comment from *text*.

    With *keep_lines* a comment is replaced by the newlines it spanned, so
    line ``i`` of the result is still line ``i`` of *text*.
    """
    if keep_lines:
        return _COMMENT_RE.sub(lambda m: "\n" * m.group().count("\n"), text)
    return _COMMENT_RE.sub("", text)



def line_at(src: str, offset: int) -> int:
    """Return the 1-based line number of *offset* in *src*."""
    return src.count("\n", 0, max(0, min(offset, len(src)))) + 1


def _walk(src: str, start: int, end: int):
    """Yield ``(index, char, depth)`` for structural characters only.

    Characters inside strings, comments, and square brackets are skipped.
    ``depth`` is the brace depth *before* the character is applied.
    """
    depth = 0
    brackets = 0
    quote = ""
    i = start
    while i < end:
        ch = src[i]
        if quote:
            if ch == quote and src[i - 1] != "\\":
                quote = ""
        elif ch == "/" and src.startswith("/*", i):
            close = src.find("*/", i + 2)
            i = end if close == -1 else close + 2
            continue
        elif ch in "\"'":
            quote = ch
        elif ch == "[":
            brackets += 1
        elif ch == "]":
            brackets -= 1
        elif brackets <= 0:
            yield i, ch, depth
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth = max(depth - 1, 0)
        i += 1


def find_top_level(src: str, start: int, end: int, char: str) -> int:
    """Find *char* at brace depth 0 between *start* and *end*, or -1."""
    for i, ch, depth in _walk(src, start, end):
        if ch == char and depth == 0:
            return i
    return -1


def find_matching_brace(src: str, open_pos: int) -> int:
    """Return the index of the ``}`` closing the ``{`` at *open_pos*.

    Returns ``len(src)`` when the brace is never closed.
    """
    for i, ch, depth in _walk(src, open_pos + 1, len(src)):
        if ch == "}" and depth == 0:
            return i
    return len(src)


def skip_whitespace_and_comments(src: str, pos: int, end: int) -> int:
    """Advance *pos* past whitespace and comments, stopping at *end*."""
    while pos < end:
        if src[pos].isspace():
            pos += 1
        elif src.startswith("/*", pos):
            close = src.find("*/", pos + 2)
            pos = end if close == -1 else close + 2
        else:
            break
    return pos
