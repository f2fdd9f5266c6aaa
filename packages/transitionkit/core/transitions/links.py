"""Layer-to-driver links: opacity expressions and fade markers.

A layer is linked to a driver when its opacity formula reads that driver's
value from the controller. Fade markers on the layer record which fade kind
and direction were applied at which time.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, ConfigDict

from transitionkit.core.host.models import MarkerKey
from transitionkit.core.host.protocols import TimelineHost

from .models import FadeKind

logger = logging.getLogger(__name__)

_REFERENCE_PATTERN = re.compile(r'effect\("(Transition (\d+) - Opacity (\d+))"\)')


class DriverReference(BaseModel):
    """Driver named in a layer's opacity formula."""

    model_config = ConfigDict(frozen=True)

    driver_name: str
    transition_number: int
    opacity_number: int


def link_expression(controller_name: str, driver_name: str) -> str:
    """Opacity formula that reads a driver's value from the controller.

    Example:
        >>> link_expression("Ctrl", "Transition 1 - Opacity 1")
        'thisComp.layer("Ctrl").effect("Transition 1 - Opacity 1")("Slider")'
    """
    return f'thisComp.layer("{controller_name}").effect("{driver_name}")("Slider")'


def parse_reference(expression: str, controller_name: str) -> DriverReference | None:
    """Driver referenced by an opacity formula, if it points at the controller."""
    if not expression or controller_name not in expression:
        return None
    match = _REFERENCE_PATTERN.search(expression)
    if match is None:
        return None
    return DriverReference(
        driver_name=match.group(1),
        transition_number=int(match.group(2)),
        opacity_number=int(match.group(3)),
    )


def layer_reference(host: TimelineHost, layer_id: str, controller_name: str) -> DriverReference | None:
    """Driver a layer is currently linked to, or None."""
    return parse_reference(host.opacity_expression(layer_id), controller_name)


def linked_layers(
    host: TimelineHost,
    controller_id: str,
    controller_name: str,
    driver_name: str,
) -> list[str]:
    """Ids of every layer whose opacity formula reads the driver, in stack order."""
    linked = []
    for layer_id in host.layer_ids():
        if layer_id == controller_id:
            continue
        reference = layer_reference(host, layer_id, controller_name)
        if reference is not None and reference.driver_name == driver_name:
            linked.append(layer_id)
    return linked


def marker_kind(comment: str) -> FadeKind | None:
    """Fade kind named anywhere in a marker comment."""
    for kind in FadeKind:
        if kind.marker_label in comment:
            return kind
    return None


def is_plain_fade_marker(comment: str) -> bool:
    """Whether a comment starts with a fade label (markers written without a glyph)."""
    return any(comment.startswith(kind.marker_label) for kind in FadeKind)


def markers_in_window(
    host: TimelineHost, layer_id: str, start: float, end: float
) -> list[MarkerKey]:
    """Markers of a layer within [start, end], inclusive."""
    return [marker for marker in host.markers(layer_id) if start <= marker.time <= end]


def find_fade_marker(
    host: TimelineHost,
    layer_id: str,
    start: float,
    end: float,
    kind: FadeKind | None = None,
) -> MarkerKey | None:
    """First fade marker inside the window.

    With a kind, matches markers naming that kind anywhere in the comment.
    Without one, matches only comments that start with a fade label.
    """
    for marker in markers_in_window(host, layer_id, start, end):
        if kind is None:
            if is_plain_fade_marker(marker.comment):
                return marker
        elif marker_kind(marker.comment) is kind:
            return marker
    return None
