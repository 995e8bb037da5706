"""Diagnostic model: structured warnings emitted while compiling a style block."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

LOGGER_NAME = "tailnest"


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class SourceLocation:
    """Where a diagnostic originated: an optional file and a 1-based line."""

    file: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        if self.file and self.line is not None:
            return f"{self.file}:{self.line}"
        if self.file:
            return self.file
        if self.line is not None:
            return f"line {self.line}"
        return ""


@dataclass(frozen=True)
class Diagnostic:
    """A single finding produced by the parser, resolver, or matcher.

    Attributes:
        rule: Stable identifier for the kind of problem (e.g. ``circular-use``).
        severity: How serious the issue is. Never fatal on its own.
        message: Human-readable description of the problem.
        location: Source file and line, when known.
    """

    rule: str
    severity: Severity
    message: str
    location: SourceLocation | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def __str__(self) -> str:
        where = str(self.location) if self.location else ""
        if where:
            return f"[{LOGGER_NAME}] ({where}) {self.message}"
        return f"[{LOGGER_NAME}] {self.message}"


WarnFunc = Callable[[Diagnostic], None]

_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
}


def logging_sink(logger: logging.Logger | None = None) -> WarnFunc:
    """Create a warning sink that forwards diagnostics to *logger*."""
    log = logger or logging.getLogger(LOGGER_NAME)

    def sink(diagnostic: Diagnostic) -> None:
        log.log(_LEVELS[diagnostic.severity], "%s", diagnostic)

    return sink


default_sink: WarnFunc = logging_sink()


class DiagnosticCollector:
    """Warning sink that keeps every diagnostic it receives, in order."""

    def __init__(self, forward: WarnFunc | None = None) -> None:
        self.diagnostics: list[Diagnostic] = []
        self._forward = forward

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if self._forward is not None:
            self._forward(diagnostic)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)

    @property
    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics]

    def by_rule(self, rule: str) -> list[Diagnostic]:
        """Return the diagnostics produced by *rule*."""
        return [d for d in self.diagnostics if d.rule == rule]

    def clear(self) -> None:
        self.diagnostics.clear()
