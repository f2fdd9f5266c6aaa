"""Tests for per-call diagnostic capture."""

from __future__ import annotations

import logging

import pytest

from transitionkit.core.logging.collector import DiagnosticCollector, capture_diagnostics
from transitionkit.core.logging.models import LogContext, LogEntry, LogLevel

engine_logger = logging.getLogger("transitionkit.core.transitions.test")


class TestLogEntry:
    """Tests for LogEntry rendering."""

    def test_debug_renders_message(self) -> None:
        """Debug and info entries render as the bare message."""
        entry = LogEntry(level=LogLevel.DEBUG, message="State: VALIDATING")
        assert entry.render() == "State: VALIDATING"

    def test_error_is_prefixed(self) -> None:
        """Errors stand out in the log."""
        entry = LogEntry(level=LogLevel.ERROR, message="Overlapping transitions")
        assert entry.render() == "Error: Overlapping transitions"

    def test_warning_is_prefixed(self) -> None:
        """Warnings are prefixed too."""
        entry = LogEntry(level=LogLevel.WARNING, message="Driver mismatch")
        assert entry.render() == "Warning: Driver mismatch"

    def test_error_message_is_appended_once(self) -> None:
        """Exception text is appended unless already in the message."""
        entry = LogEntry(
            level=LogLevel.ERROR,
            message="Unexpected error",
            context=LogContext(error_message="boom"),
        )
        assert entry.render() == "Error: Unexpected error | boom"

        entry = LogEntry(
            level=LogLevel.ERROR,
            message="Unexpected error: boom",
            context=LogContext(error_message="boom"),
        )
        assert entry.render() == "Error: Unexpected error: boom"


class TestCaptureDiagnostics:
    """Tests for capture_diagnostics context manager."""

    def test_collects_debug_records_in_order(self) -> None:
        """Debug records from package loggers are captured in order."""
        with capture_diagnostics() as diagnostics:
            engine_logger.debug("first")
            engine_logger.info("second %d", 2)

        assert diagnostics.messages() == ["first", "second 2"]

    def test_ignores_other_packages(self) -> None:
        """Records outside the package logger are not captured."""
        with capture_diagnostics() as diagnostics:
            logging.getLogger("somewhere.else").warning("not ours")

        assert diagnostics.messages() == []

    def test_copies_context_from_extra(self) -> None:
        """State and operation extras are kept on the entry."""
        with capture_diagnostics() as diagnostics:
            engine_logger.debug("State: DONE", extra={"state": "DONE", "operation": "fadeIn"})

        context = diagnostics.entries[0].context
        assert context.state == "DONE"
        assert context.operation == "fadeIn"
        assert context.logger_name == engine_logger.name

    def test_respects_capture_level(self) -> None:
        """Records below the capture level are dropped."""
        with capture_diagnostics("WARNING") as diagnostics:
            engine_logger.debug("quiet")
            engine_logger.warning("loud")

        assert diagnostics.messages() == ["Warning: loud"]

    def test_records_exception_details(self) -> None:
        """logger.exception records carry the error type and message."""
        with capture_diagnostics() as diagnostics:
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                engine_logger.exception("Unexpected error")

        entry = diagnostics.entries[0]
        assert entry.context.error_type == "RuntimeError"
        assert entry.render() == "Error: Unexpected error | boom"

    def test_restores_logger_state(self) -> None:
        """Level, propagation and handlers are restored on exit."""
        package_logger = logging.getLogger("transitionkit")
        level = package_logger.level
        propagate = package_logger.propagate
        handlers = package_logger.handlers[:]

        with pytest.raises(RuntimeError):
            with capture_diagnostics():
                raise RuntimeError("inside")

        assert package_logger.level == level
        assert package_logger.propagate == propagate
        assert package_logger.handlers == handlers

    def test_debug_records_do_not_reach_application_handlers(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Lowering the package level for capture does not leak debug records upward."""
        caplog.set_level(logging.WARNING)

        with capture_diagnostics() as diagnostics:
            engine_logger.debug("private")
            engine_logger.error("public")

        assert diagnostics.messages() == ["private", "Error: public"]
        assert [r.getMessage() for r in caplog.records] == ["public"]


def test_collector_clear() -> None:
    """clear() drops buffered entries."""
    collector = DiagnosticCollector()
    collector.entries.append(LogEntry(level=LogLevel.INFO, message="x"))
    collector.clear()
    assert collector.messages() == []
