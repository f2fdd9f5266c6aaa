"""Data models for structured logging."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogContext(BaseModel):
    """Structured log context for one engine call.

    All fields are optional to allow flexible usage.
    Additional fields can be added via extra="allow".
    """

    # Identification
    logger_name: str | None = None
    operation: str | None = None
    state: str | None = None
    transition_number: int | None = None

    # Status
    error_type: str | None = None
    error_message: str | None = None

    # Metadata
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "allow"}


class LogEntry(BaseModel):
    """Complete log entry with message and context."""

    level: LogLevel
    message: str
    context: LogContext = Field(default_factory=LogContext)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    def render(self) -> str:
        """Render as a single diagnostic line.

        Errors and warnings are prefixed with their level so they stand out
        in the Caller's debug console.
        """
        text = self.message
        if self.context.error_message and self.context.error_message not in text:
            text = f"{text} | {self.context.error_message}"
        if self.level in (LogLevel.ERROR, LogLevel.CRITICAL):
            return f"Error: {text}"
        if self.level == LogLevel.WARNING:
            return f"Warning: {text}"
        return text
