"""Tests for diagnostics, warning sinks, and compiler configuration."""

import dataclasses
import logging

import pytest

from tailnest.config import DEFAULT_CONFIG, CompilerConfig
from tailnest.model import (
    Diagnostic,
    DiagnosticCollector,
    Severity,
    SourceLocation,
    logging_sink,
)
from tailnest.parser import parse


def _diag(severity=Severity.WARNING, message="something happened", location=None):
    return Diagnostic(rule="test-rule", severity=severity, message=message, location=location)


# ---------------------------------------------------------------------------
# Diagnostic rendering
# ---------------------------------------------------------------------------


class TestDiagnostic:
    def test_str_with_file_and_line(self):
        d = _diag(location=SourceLocation(file="Comp.vue", line=4))
        assert str(d) == "[tailnest] (Comp.vue:4) something happened"

    def test_str_with_line_only(self):
        d = _diag(location=SourceLocation(line=2))
        assert str(d) == "[tailnest] (line 2) something happened"

    def test_str_without_location(self):
        assert str(_diag()) == "[tailnest] something happened"

    def test_severity_flags(self):
        assert _diag(Severity.ERROR).is_error
        assert _diag(Severity.WARNING).is_warning
        assert not _diag(Severity.INFO).is_error

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            _diag().message = "changed"


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class TestSinks:
    def test_collector(self):
        collector = DiagnosticCollector()
        collector(_diag(message="one"))
        collector(_diag(message="two"))
        assert len(collector) == 2
        assert collector.messages == ["one", "two"]
        assert len(collector.by_rule("test-rule")) == 2
        collector.clear()
        assert list(collector) == []

    def test_collector_forwards(self):
        seen = []
        collector = DiagnosticCollector(forward=seen.append)
        collector(_diag())
        assert len(seen) == 1

    def test_empty_collector_still_receives(self, caplog):
        collector = DiagnosticCollector()
        assert len(collector) == 0
        with caplog.at_level(logging.INFO, logger="tailnest"):
            parse("& {\n  @use\n}", warn=collector)
        [diagnostic] = collector.by_rule("malformed-use")
        assert diagnostic.location == SourceLocation(line=2)
        assert caplog.records == []

    def test_logging_sink_levels(self, caplog):
        sink = logging_sink(logging.getLogger("tailnest.test"))
        with caplog.at_level(logging.INFO, logger="tailnest.test"):
            sink(_diag(Severity.ERROR, "broken"))
            sink(_diag(Severity.INFO, "fyi"))
        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert levels == [
            (logging.ERROR, "[tailnest] broken"),
            (logging.INFO, "[tailnest] fyi"),
        ]

    def test_default_sink_uses_tailnest_logger(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tailnest"):
            parse("@media print {\n  hidden\n}")
        assert any(r.name == "tailnest" and "@media" in r.getMessage() for r in caplog.records)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestCompilerConfig:
    def test_defaults(self):
        assert "flex" in DEFAULT_CONFIG.ambiguous_words
        assert "hover" in DEFAULT_CONFIG.runtime_pseudo_classes
        assert "media" in DEFAULT_CONFIG.unsupported_at_rules
        assert DEFAULT_CONFIG.dynamic_component_tag == "component"

    def test_extend_returns_new_config(self):
        config = DEFAULT_CONFIG.extend(
            ambiguous_words={"truncate"},
            runtime_pseudo_classes=[":open"],
            unsupported_at_rules=("@scope",),
        )
        assert "truncate" in config.ambiguous_words
        assert "open" in config.runtime_pseudo_classes
        assert "scope" in config.unsupported_at_rules
        assert "truncate" not in DEFAULT_CONFIG.ambiguous_words

    def test_custom_at_rule_is_skipped(self):
        config = CompilerConfig().extend(unsupported_at_rules={"scope"})
        collector = DiagnosticCollector()
        result = parse("@scope (.card) {\n  flex\n}", config=config, warn=collector)
        assert result.rules == []
        assert len(collector.by_rule("unsupported-at-rule")) == 1
