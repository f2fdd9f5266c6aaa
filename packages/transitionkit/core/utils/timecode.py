"""Duration string parsing and formatting.

Durations are accepted as plain numbers (seconds) or as strings with a unit
suffix: ``"150ms"``, ``"0.5s"`` or ``"10f"`` (frames, converted with the
composition frame rate).
"""

from __future__ import annotations

import re

_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)(ms|s|f)$")

DEFAULT_FRAME_RATE = 30.0


def time_to_seconds(value: float | int | str, frame_rate: float | None = None) -> float:
    """Convert a duration value to seconds.

    Args:
        value: Number of seconds, or a string such as "150ms", "2s", "12f".
            Bare numeric strings are read as seconds.
        frame_rate: Frames per second used for the "f" unit. Defaults to 30.

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string cannot be parsed

    Example:
        >>> time_to_seconds("150ms")
        0.15
        >>> time_to_seconds("15f", frame_rate=30)
        0.5
    """
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip()
    match = _DURATION_RE.match(text)
    if match is None:
        try:
            return float(text)
        except ValueError:
            raise ValueError(f"Unrecognised duration: {value!r}") from None

    amount = float(match.group(1))
    unit = match.group(2)
    if unit == "ms":
        return ms_to_seconds(amount)
    if unit == "s":
        return amount
    return amount / (frame_rate or DEFAULT_FRAME_RATE)


def ms_to_seconds(value: float) -> float:
    """Convert milliseconds to seconds."""
    return value / 1000.0


def format_ms(seconds: float) -> str:
    """Render seconds as whole milliseconds for diagnostics.

    Example:
        >>> format_ms(1.5)
        '1500ms'
    """
    return f"{round(seconds * 1000)}ms"
