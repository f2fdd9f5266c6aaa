"""Per-call diagnostic log capture.

Every entry-point call returns its own ordered diagnostic log to the Caller.
Engine modules log through ordinary module loggers; a DiagnosticCollector is
attached to the package logger for the duration of one call and turns each
record into a LogEntry.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging

from transitionkit.core.logging.models import LogContext, LogEntry, LogLevel
from transitionkit.core.utils.logging import PACKAGE_LOGGER_NAME

_CONTEXT_FIELDS = ("operation", "state", "transition_number")


class DiagnosticCollector(logging.Handler):
    """Logging handler that buffers records as LogEntry models."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self.entries: list[LogEntry] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            context = LogContext(logger_name=record.name)
            for field in _CONTEXT_FIELDS:
                value = getattr(record, field, None)
                if value is not None:
                    setattr(context, field, value)
            if record.exc_info and record.exc_info[1] is not None:
                context.error_type = type(record.exc_info[1]).__name__
                context.error_message = str(record.exc_info[1])
            self.entries.append(
                LogEntry(
                    level=LogLevel(record.levelname),
                    message=record.getMessage(),
                    context=context,
                )
            )
        except Exception:
            self.handleError(record)

    def clear(self) -> None:
        """Drop all buffered entries."""
        self.entries = []

    def messages(self) -> list[str]:
        """Rendered entries in emission order."""
        return [entry.render() for entry in self.entries]


class _ThresholdForwarder(logging.Handler):
    """Pass records at or above a threshold on to the parent logger."""

    def __init__(self, target: logging.Logger, threshold: int) -> None:
        super().__init__(threshold)
        self._target = target

    def emit(self, record: logging.LogRecord) -> None:
        self._target.handle(record)


@contextmanager
def capture_diagnostics(level: str = "DEBUG") -> Iterator[DiagnosticCollector]:
    """Collect package log records emitted inside the block.

    The package logger level is lowered to ``level`` while the block runs so
    debug diagnostics reach the collector regardless of the application's
    logging configuration. Records below the application's own threshold are
    kept out of the application's handlers. Everything is restored on exit.

    Args:
        level: Lowest level to capture

    Yields:
        The active collector
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    collector = DiagnosticCollector(getattr(logging, level.upper()))
    previous_level = package_logger.level
    previous_propagate = package_logger.propagate
    effective = package_logger.getEffectiveLevel()

    forwarder: logging.Handler | None = None
    package_logger.addHandler(collector)
    if effective > collector.level:
        package_logger.setLevel(collector.level)
        if previous_propagate and package_logger.parent is not None:
            forwarder = _ThresholdForwarder(package_logger.parent, effective)
            package_logger.addHandler(forwarder)
            package_logger.propagate = False
    try:
        yield collector
    finally:
        package_logger.removeHandler(collector)
        if forwarder is not None:
            package_logger.removeHandler(forwarder)
        package_logger.setLevel(previous_level)
        package_logger.propagate = previous_propagate
