"""Tests for the trace sinks."""

from __future__ import annotations

import logging

import pytest

from iv_scanner.utils.trace import ListTrace, LoggingTrace, NullTrace


class TestSinks:
    def test_null_trace_accepts_anything(self) -> None:
        assert NullTrace().emit("anything", value=1) is None

    def test_list_trace_keeps_order(self) -> None:
        trace = ListTrace()
        trace.emit("first", a=1)
        trace.emit("second")
        trace.emit("first", a=2)

        assert [event.event for event in trace.events] == ["first", "second", "first"]
        assert [event.fields["a"] for event in trace.named("first")] == [1, 2]

    def test_logging_trace_formats_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="iv_scanner.trace"):
            LoggingTrace().emit("bar_bounds", start_x=49, bar="attack")

        assert "bar_bounds bar='attack' start_x=49" in caplog.text

    def test_logging_trace_respects_level(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="iv_scanner.trace"):
            LoggingTrace().emit("hidden", value=1)

        assert "hidden" not in caplog.text

    def test_custom_logger_and_level(self, caplog: pytest.LogCaptureFixture) -> None:
        custom = logging.getLogger("tests.trace")
        with caplog.at_level(logging.INFO, logger="tests.trace"):
            LoggingTrace(custom, logging.INFO).emit("iv_result", total=21)

        assert caplog.records[-1].name == "tests.trace"
        assert "total=21" in caplog.text
