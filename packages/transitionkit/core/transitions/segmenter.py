"""Motion segmentation of a controller's position track.

The controller's position history is partitioned into transitions: runs of
frame-to-frame movement separated by pauses longer than the gap threshold.
Transitions are never stored; this is recomputed on every query.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging

import numpy as np

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.models import PositionKey, Vec2
from transitionkit.core.utils.math import frame_times
from transitionkit.core.utils.timecode import format_ms

from .models import Transition

logger = logging.getLogger(__name__)

_DEFAULTS = EngineConfig()


def find_all_transitions(
    keys: Sequence[PositionKey],
    sample: Callable[[float], Vec2],
    frame_rate: float,
    tolerance: float = _DEFAULTS.movement_tolerance,
    gap_threshold: float = _DEFAULTS.gap_threshold_s,
) -> list[Transition]:
    """Partition a position track into ordered, disjoint transitions.

    The track is sampled at every frame boundary from the first to the last
    key time. A sample moves when either axis differs from the previous
    sample by more than ``tolerance``. A transition starts at the sample
    before its first moving sample and ends at its last moving sample. A
    moving sample more than ``gap_threshold`` seconds after the previous
    moving sample closes the current transition and opens a new one. Gaps
    are measured in whole frames so grid rounding never splits a continuous
    slide.

    Args:
        keys: Position keys ascending by time.
        sample: Returns the track value at a time.
        frame_rate: Composition frames per second.
        tolerance: Per-axis displacement counted as movement.
        gap_threshold: Pause in seconds that separates transitions.

    Returns:
        Transitions ascending by start, indexed from 1. With a single key the
        result is one instantaneous transition at that key; with keys but no
        movement, one transition spanning the key range; with no keys, empty.

    Example:
        >>> keys = [PositionKey(time=0.0, value=(0, 0)), PositionKey(time=0.5, value=(10, 0))]
        >>> sample = lambda t: (min(t, 0.5) * 20, 0.0)
        >>> [(t.index, t.start_time, t.end_time) for t in find_all_transitions(keys, sample, 10)]
        [(1, 0.0, 0.5)]
    """
    if not keys:
        return []

    if len(keys) < 2:
        time = keys[0].time
        return [Transition(index=1, start_time=time, end_time=time)]

    key_start = keys[0].time
    key_end = keys[-1].time
    times = frame_times(key_start, key_end, frame_rate)

    logger.debug(
        "Finding transitions between %s and %s (tolerance: %s)",
        format_ms(key_start),
        format_ms(key_end),
        tolerance,
    )

    transitions: list[Transition] = []
    if len(times) >= 2:
        positions = np.array([sample(float(t)) for t in times], dtype=float)
        moving = np.any(np.abs(np.diff(positions, axis=0)) > tolerance, axis=1)

        current_start: float | None = None
        last_movement: float | None = None
        last_index = 0
        for i in np.flatnonzero(moving) + 1:
            time = float(times[i])
            gap = (i - last_index) / frame_rate
            if current_start is None:
                current_start = float(times[i - 1])
            elif last_movement is not None and gap > gap_threshold + 1e-9:
                transitions.append(
                    Transition(
                        index=len(transitions) + 1,
                        start_time=current_start,
                        end_time=last_movement,
                    )
                )
                logger.debug(
                    "Transition %d ends at %s (gap detected)",
                    len(transitions),
                    format_ms(last_movement),
                )
                current_start = float(times[i - 1])
            last_movement = time
            last_index = int(i)

        if current_start is not None:
            end_time = last_movement if last_movement is not None else key_end
            transitions.append(
                Transition(index=len(transitions) + 1, start_time=current_start, end_time=end_time)
            )

    if not transitions:
        logger.debug("No movement detected, using full keyframe range as T1")
        return [Transition(index=1, start_time=key_start, end_time=key_end)]

    logger.debug("Found %d distinct transitions", len(transitions))
    return transitions
