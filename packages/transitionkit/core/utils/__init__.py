"""Shared utilities for TransitionKit."""

from transitionkit.core.utils.json import read_json, write_json
from transitionkit.core.utils.math import clamp, frame_times, lerp
from transitionkit.core.utils.timecode import format_ms, ms_to_seconds, time_to_seconds

__all__ = [
    "clamp",
    "format_ms",
    "frame_times",
    "lerp",
    "ms_to_seconds",
    "read_json",
    "time_to_seconds",
    "write_json",
]
