"""Slide geometry: distance scaling, displacement and direction inference."""

from __future__ import annotations

import logging

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.models import Vec2

from .models import Direction, FadeKind

logger = logging.getLogger(__name__)

_DEFAULTS = EngineConfig()


def calculate_slide_distance(
    base_distance: float,
    direction: Direction | str,
    comp_width: float | None,
    reference_width: float = _DEFAULTS.reference_width,
) -> float:
    """Scale a slide distance to the composition width.

    Distances are authored for a composition ``reference_width`` pixels wide
    and scale linearly with the actual width. The direction does not affect
    the magnitude.

    Example:
        >>> calculate_slide_distance(100, "left", 1572)
        200.0
    """
    if not comp_width:
        return float(base_distance)
    return float(base_distance) * (comp_width / reference_width)


def displace(position: Vec2, direction: Direction, distance: float) -> Vec2:
    """Move a position by distance in a direction (y grows downward)."""
    dx, dy = direction.unit_vector
    return (position[0] + dx * distance, position[1] + dy * distance)


def infer_direction(start: Vec2, end: Vec2) -> Direction:
    """Direction of the dominant axis of movement from start to end.

    Horizontal wins only when strictly larger; ties and no movement resolve
    vertically.

    Example:
        >>> infer_direction((0, 0), (-200, 0))
        <Direction.LEFT: 'left'>
        >>> infer_direction((0, 0), (0, 150))
        <Direction.DOWN: 'down'>
    """
    delta_x = end[0] - start[0]
    delta_y = end[1] - start[1]

    if abs(delta_x) > abs(delta_y):
        direction = Direction.RIGHT if delta_x > 0 else Direction.LEFT
    else:
        direction = Direction.DOWN if delta_y > 0 else Direction.UP

    logger.debug(
        "Detected transition direction: %s (deltaX=%s, deltaY=%s)",
        direction.value,
        delta_x,
        delta_y,
    )
    return direction


def marker_text(kind: FadeKind, direction: Direction) -> str:
    """Marker comment for a fade, e.g. "← Fade Out"."""
    return f"{direction.glyph} {kind.marker_label}"
