"""Math utilities for common operations."""

from __future__ import annotations

from typing import TypeVar

import numpy as np

Number = TypeVar("Number", int, float, np.number)


def clamp(value: Number, min_val: Number, max_val: Number) -> Number:
    """Clamp value to range [min_val, max_val].

    Args:
        value: Value to clamp
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Clamped value
    """
    return max(min_val, min(max_val, value))


def lerp(a: Number, b: Number, t: float) -> float:
    """Linear interpolation between a and b.

    Args:
        a: Start value
        b: End value
        t: Interpolation factor [0, 1]

    Returns:
        Interpolated value
    """
    return float(a) + (float(b) - float(a)) * t


def frame_times(start: float, end: float, frame_rate: float) -> np.ndarray:
    """Frame-boundary sample times from start to end inclusive.

    Times are computed as ``start + i / frame_rate`` so the grid does not
    accumulate floating point drift. The end time is included when it falls
    on (or within 1e-9 of) a frame boundary.

    Args:
        start: First sample time in seconds
        end: Last allowed sample time in seconds
        frame_rate: Frames per second, must be positive

    Returns:
        1-D array of sample times

    Raises:
        ValueError: If frame_rate is not positive

    Example:
        >>> frame_times(0.0, 0.1, 20.0).tolist()
        [0.0, 0.05, 0.1]
    """
    if frame_rate <= 0:
        raise ValueError(f"frame_rate must be > 0, got {frame_rate}")
    if end < start:
        return np.empty(0, dtype=float)

    frame_duration = 1.0 / frame_rate
    count = int(np.floor((end - start) / frame_duration + 1e-9)) + 1
    return start + np.arange(count, dtype=float) * frame_duration
