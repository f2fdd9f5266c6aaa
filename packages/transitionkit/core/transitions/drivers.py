"""Driver tracks on the controller: naming, kind tags and resolution.

A driver is a 0..100 slider track named "Transition N - Opacity M". Its keys
carry labels that tag the fade kind they implement. For each request the
resolver picks the driver the selected layers should be linked to, reusing
one where the composition already has a fitting driver, and writes the fade
keys when the driver does not carry them yet.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import logging
import re

from pydantic import BaseModel, ConfigDict

from transitionkit.core.config.models import EngineConfig, KeyframeLabels
from transitionkit.core.host.models import ScalarKey
from transitionkit.core.host.protocols import TimelineHost

from .links import DriverReference, layer_reference
from .models import FadeKind, TransitionPlan, TransitionParams

logger = logging.getLogger(__name__)

DRIVER_NAME_PATTERN = re.compile(r"^Transition (\d+) - Opacity (\d+)$")

# Keys this close in time are the same key
_SAME_TIME = 1e-6


def driver_name(transition_number: int, opacity_number: int) -> str:
    """Driver name for a transition and opacity number."""
    return f"Transition {transition_number} - Opacity {opacity_number}"


def parse_driver_name(name: str) -> tuple[int, int] | None:
    """(transition number, opacity number) of a driver name, or None."""
    match = DRIVER_NAME_PATTERN.match(name)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def next_transition_number(host: TimelineHost, controller_id: str) -> int:
    """One more than the largest transition number among the controller's drivers."""
    numbers = [
        parsed[0]
        for parsed in map(parse_driver_name, host.driver_names(controller_id))
        if parsed is not None
    ]
    return max(numbers, default=0) + 1


def next_opacity_number(host: TimelineHost, controller_id: str, transition_number: int) -> int:
    """One more than the largest opacity number used for a transition number."""
    numbers = [
        parsed[1]
        for parsed in map(parse_driver_name, host.driver_names(controller_id))
        if parsed is not None and parsed[0] == transition_number
    ]
    return max(numbers, default=0) + 1


def kind_from_label(label: int, labels: KeyframeLabels) -> FadeKind | None:
    """Fade kind tagged by a key label, None for untagged keys."""
    if label in (labels.exit, labels.legacy_exit):
        return FadeKind.EXIT
    if label == labels.enter:
        return FadeKind.ENTER
    return None


def kind_from_suffix(opacity_number: int) -> FadeKind | None:
    """Fade kind implied by the naming convention (1 = exit, 2 = enter)."""
    for kind in FadeKind:
        if kind.conventional_suffix == opacity_number:
            return kind
    return None


class DriverSource(str, Enum):
    """Which rule picked the driver for a request.

    Attributes:
        LAYER_EXPRESSION: A selected layer was already linked to it.
        KEYFRAME_TAG: It has a key tagged with the requested kind in the window.
        CREATED: A new driver was added.
    """

    LAYER_EXPRESSION = "layer_expression"
    KEYFRAME_TAG = "keyframe_tag"
    CREATED = "created"


class DriverResolution(BaseModel):
    """Driver chosen for one request.

    Attributes:
        name: Driver track name.
        source: Rule that picked it.
        keys_written: Whether fade keys were written by this request.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    source: DriverSource
    keys_written: bool


class DriverResolver:
    """Picks, creates and keys the driver for a fade request."""

    def __init__(
        self,
        host: TimelineHost,
        controller_id: str,
        config: EngineConfig | None = None,
    ) -> None:
        self.host = host
        self.controller_id = controller_id
        self.config = config or EngineConfig()

    @property
    def labels(self) -> KeyframeLabels:
        return self.config.labels

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def keys(self, name: str) -> list[ScalarKey]:
        return self.host.driver_keys(self.controller_id, name)

    def tagged_kinds(self, name: str, start: float | None = None, end: float | None = None) -> set[FadeKind]:
        """Fade kinds tagged on a driver's keys, optionally within [start, end]."""
        kinds = set()
        for key in self.keys(name):
            if start is not None and key.time < start:
                continue
            if end is not None and key.time > end:
                continue
            kind = kind_from_label(key.label, self.labels)
            if kind is not None:
                kinds.add(kind)
        return kinds

    def driver_kinds(self, reference: DriverReference) -> set[FadeKind]:
        """Fade kinds a referenced driver implements.

        Key tags are authoritative. The name suffix is used when the driver has
        no tagged keys, and a disagreement between the two is logged.
        """
        tagged = self.tagged_kinds(reference.driver_name)
        named = kind_from_suffix(reference.opacity_number)

        if tagged:
            if named is not None and named not in tagged:
                logger.warning(
                    "Driver %s is named as %s but its keys are tagged %s",
                    reference.driver_name,
                    named.display_name,
                    ", ".join(sorted(k.display_name for k in tagged)),
                )
            return tagged
        return {named} if named is not None else set()

    # ------------------------------------------------------------------
    # Resolution signals
    # ------------------------------------------------------------------

    def from_layers(self, layer_ids: Sequence[str], kind: FadeKind) -> DriverReference | None:
        """Driver already linked from a selected layer.

        References implementing the requested kind are preferred; otherwise
        the first reference of either kind is used, since a layer's opacity
        formula can only read one driver.
        """
        existing = set(self.host.driver_names(self.controller_id))
        references: list[DriverReference] = []
        for layer_id in layer_ids:
            reference = layer_reference(self.host, layer_id, self.config.controller_name)
            if reference is None:
                continue
            if reference.driver_name not in existing:
                logger.warning(
                    "Layer %s references missing driver %s",
                    self.host.layer_name(layer_id),
                    reference.driver_name,
                )
                continue
            references.append(reference)

        for reference in references:
            if kind in self.driver_kinds(reference):
                logger.debug(
                    "Found existing %s slider from layer expression: %s",
                    kind.display_name,
                    reference.driver_name,
                )
                return reference

        if references:
            logger.debug(
                "Reusing slider from layer expression: %s", references[0].driver_name
            )
            return references[0]
        return None

    def from_tags(self, kind: FadeKind, start: float, end: float) -> str | None:
        """First driver with a key tagged for the kind inside [start, end]."""
        for name in self.host.driver_names(self.controller_id):
            if parse_driver_name(name) is None:
                continue
            if kind in self.tagged_kinds(name, start, end):
                logger.debug("Found existing %s slider by color: %s", kind.display_name, name)
                return name
        return None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def carries_fade(self, name: str, kind: FadeKind, fade_start: float, fade_end: float) -> bool:
        """Whether the driver already has this kind's tagged keys at both fade times."""
        tagged_times = [
            key.time
            for key in self.keys(name)
            if kind_from_label(key.label, self.labels) is kind
        ]
        return all(
            any(abs(t - wanted) <= _SAME_TIME for t in tagged_times)
            for wanted in (fade_start, fade_end)
        )

    def write_fade_keys(self, name: str, kind: FadeKind, fade_start: float, fade_end: float) -> None:
        """Write the two fade keys and tag both with the kind's label."""
        label = self.labels.exit if kind is FadeKind.EXIT else self.labels.enter
        first_value, second_value = kind.values

        self.host.set_driver_key(self.controller_id, name, fade_start, first_value)
        self.host.set_driver_key(self.controller_id, name, fade_end, second_value)

        # Label by time after both writes; a second insert can shift indices.
        for index, key in enumerate(self.keys(name), start=1):
            if any(abs(key.time - t) <= _SAME_TIME for t in (fade_start, fade_end)):
                self.host.set_driver_key_label(self.controller_id, name, index, label)

        logger.debug(
            "Created %s keyframes at %s and %s", kind.display_name, fade_start, fade_end
        )

    def _ensure_keys(self, name: str, kind: FadeKind, fade_start: float, fade_end: float) -> bool:
        if self.carries_fade(name, kind, fade_start, fade_end):
            logger.debug("Driver %s already carries the %s keys", name, kind.display_name)
            return False
        self.write_fade_keys(name, kind, fade_start, fade_end)
        return True

    def resolve(
        self,
        plan: TransitionPlan,
        kind: FadeKind,
        layer_ids: Sequence[str],
        params: TransitionParams,
    ) -> DriverResolution:
        """Pick the driver for a request, creating and keying it when needed.

        Signals are tried in order: a driver already linked from a selected
        layer, then a driver tagged for the kind inside the target window,
        then a new driver named after the plan's transition number.
        """
        fade_start = plan.start_time + params.delay_s(kind)
        fade_end = fade_start + params.duration_s(kind)

        reference = self.from_layers(layer_ids, kind)
        if reference is not None:
            written = self._ensure_keys(reference.driver_name, kind, fade_start, fade_end)
            return DriverResolution(
                name=reference.driver_name,
                source=DriverSource.LAYER_EXPRESSION,
                keys_written=written,
            )

        tagged = self.from_tags(kind, plan.start_time, plan.end_time)
        if tagged is not None:
            return DriverResolution(name=tagged, source=DriverSource.KEYFRAME_TAG, keys_written=False)

        name = driver_name(
            plan.transition_number,
            next_opacity_number(self.host, self.controller_id, plan.transition_number),
        )
        logger.debug("Creating new slider: %s", name)
        self.host.add_driver(self.controller_id, name)
        self.write_fade_keys(name, kind, fade_start, fade_end)
        return DriverResolution(name=name, source=DriverSource.CREATED, keys_written=True)
