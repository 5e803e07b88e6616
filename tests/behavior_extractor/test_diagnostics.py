"""Tests for diagnostic sinks."""

import logging

from behavior_extractor.diagnostics import (
    CollectingDiagnosticSink,
    LoggingDiagnosticSink,
    NegativeTimeRange,
    NullDiagnosticSink,
)


def make_event(**overrides):
    fields = dict(
        session_id="S1",
        source_use_case_id="B",
        source_name="Browse",
        target_use_case_id="A",
        target_name="Login",
        time_distance=-2,
    )
    fields.update(overrides)
    return NegativeTimeRange(**fields)


class TestNegativeTimeRange:
    """Tests for the diagnostic event."""

    def test_message(self):
        assert make_event().message == (
            'negative time range detected in transition from state "Browse" '
            'to state "Login" in session "S1"; range will be ignored'
        )

    def test_to_dict(self):
        d = make_event().to_dict()
        assert d["severity"] == "warning"
        assert d["time_distance"] == -2
        assert d["source_use_case_id"] == "B"
        assert d["message"].endswith("range will be ignored")


class TestSinks:
    """Tests for sink implementations."""

    def test_logging_sink(self, caplog):
        with caplog.at_level(logging.WARNING, logger="behavior_extractor.diagnostics"):
            LoggingDiagnosticSink().emit(make_event())

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.WARNING
        assert 'session "S1"' in caplog.records[0].getMessage()

    def test_logging_sink_custom_logger(self, caplog):
        log = logging.getLogger("custom.diagnostics")
        with caplog.at_level(logging.WARNING, logger="custom.diagnostics"):
            LoggingDiagnosticSink(log).emit(make_event())

        assert caplog.records[0].name == "custom.diagnostics"

    def test_null_sink(self):
        NullDiagnosticSink().emit(make_event())

    def test_collecting_sink(self):
        sink = CollectingDiagnosticSink()
        sink.emit(make_event())
        sink.emit(make_event(session_id="S2"))

        assert len(sink) == 2
        assert [e.session_id for e in sink.events] == ["S1", "S2"]

        sink.clear()
        assert len(sink) == 0

    def test_collecting_sink_forwards(self):
        inner = CollectingDiagnosticSink()
        outer = CollectingDiagnosticSink(forward_to=inner)
        outer.emit(make_event())

        assert inner.events == outer.events
