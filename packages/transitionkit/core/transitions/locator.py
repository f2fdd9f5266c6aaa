"""Playhead location within a segmented transition list."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from transitionkit.core.config.models import EngineConfig

from .models import Transition

logger = logging.getLogger(__name__)

_DEFAULTS = EngineConfig()


def find_transition_at(
    transitions: Iterable[Transition],
    time: float,
    tolerance: float = _DEFAULTS.playhead_tolerance_s,
) -> Transition | None:
    """Return the transition containing ``time``, or None.

    Bounds are widened by ``tolerance`` on both sides to absorb cursor
    jitter. If widened bounds of neighbours both contain the time, the
    earlier transition wins.

    Args:
        transitions: Transitions ascending by start time.
        time: Playhead time in seconds.
        tolerance: Slack in seconds around each transition.

    Returns:
        The containing transition, or None
    """
    for transition in transitions:
        if transition.contains(time, tolerance):
            logger.debug(
                "Playhead is within T%d (%s to %s)",
                transition.index,
                transition.start_time,
                transition.end_time,
            )
            return transition

    logger.debug("Playhead is not over any existing transition")
    return None
