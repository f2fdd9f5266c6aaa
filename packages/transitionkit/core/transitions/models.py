"""Models for the transition engine.

Enums for fade kinds, slide directions and editor states, the derived
Transition value object, the Caller's parameter record and the result
returned across the engine boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transitionkit.core.utils.timecode import ms_to_seconds, time_to_seconds

# Separator of the wire result string
WIRE_SEPARATOR = "|"


class FadeKind(str, Enum):
    """Kind of opacity fade applied to a layer.

    Attributes:
        EXIT: Fade-out, driver goes 100 -> 0.
        ENTER: Fade-in, driver goes 0 -> 100.
    """

    EXIT = "fadeOut"
    ENTER = "fadeIn"

    @property
    def marker_label(self) -> str:
        """Marker text label ("Fade Out" / "Fade In")."""
        return "Fade Out" if self is FadeKind.EXIT else "Fade In"

    @property
    def display_name(self) -> str:
        """Lower-case name for user notices."""
        return "fade-out" if self is FadeKind.EXIT else "fade-in"

    @property
    def values(self) -> tuple[float, float]:
        """Driver values at the first and second key."""
        return (100.0, 0.0) if self is FadeKind.EXIT else (0.0, 100.0)

    @property
    def conventional_suffix(self) -> int:
        """Opacity number that by naming convention marks this kind."""
        return 1 if self is FadeKind.EXIT else 2


class Direction(str, Enum):
    """Slide direction of the controller."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"

    @property
    def glyph(self) -> str:
        """Arrow shown on markers."""
        return _GLYPHS[self]

    @property
    def unit_vector(self) -> tuple[float, float]:
        """Displacement per unit distance (screen y grows downward)."""
        return _UNIT_VECTORS[self]


_GLYPHS = {
    Direction.LEFT: "←",
    Direction.RIGHT: "→",
    Direction.UP: "↑",
    Direction.DOWN: "↓",
}

_UNIT_VECTORS = {
    Direction.LEFT: (-1.0, 0.0),
    Direction.RIGHT: (1.0, 0.0),
    Direction.UP: (0.0, -1.0),
    Direction.DOWN: (0.0, 1.0),
}


class EditMode(str, Enum):
    """Whether a request adds a transition or edits the one under the playhead."""

    CREATE = "create"
    UPDATE = "update"


class EditState(str, Enum):
    """Progress of one add-animation request."""

    LOCATING_CONTROLLER = "LOCATING_CONTROLLER"
    LOCATING_TRANSITION = "LOCATING_TRANSITION"
    VALIDATING = "VALIDATING"
    MUTATING_DRIVER = "MUTATING_DRIVER"
    MUTATING_POSITION = "MUTATING_POSITION"
    LINKING_LAYERS = "LINKING_LAYERS"
    DONE = "DONE"


class Transition(BaseModel):
    """One slide gesture of the controller.

    Derived from the position track on every query, never stored. ``index`` is
    the 1-based rank among the controller's transitions at derivation time and
    can change as keys are added, moved or removed.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    start_time: float
    end_time: float

    def contains(self, time: float, tolerance: float = 0.0) -> bool:
        """Whether time lies within the bounds widened by tolerance."""
        return self.start_time - tolerance <= time <= self.end_time + tolerance

    def overlaps(self, start: float, end: float) -> bool:
        """Whether [start, end] touches this transition (inclusive bounds)."""
        return (
            self.start_time <= start <= self.end_time
            or self.start_time <= end <= self.end_time
            or (start <= self.start_time and end >= self.end_time)
        )


def _to_milliseconds(value: Any) -> Any:
    """Numbers and bare numeric strings are milliseconds; "ms"/"s" suffixes convert."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("f"):
            raise ValueError("frame durations are not accepted here, use ms or s")
        if text.endswith("s"):
            return time_to_seconds(text) * 1000.0
        return text
    return value


class TransitionParams(BaseModel):
    """Validated parameter record supplied by the Caller.

    Field aliases match the panel's keys, so a raw panel dict validates
    directly. Times are milliseconds, distance is pixels at the reference
    composition width.

    Example:
        >>> params = TransitionParams.model_validate(
        ...     {"fadeOutDelay": "0", "fadeOutDuration": "250", "direction": "up"}
        ... )
        >>> params.fade_out_duration_s
        0.25
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    transition_type: str = Field(default="slideFade", alias="transitionType")
    fade_out_delay_ms: float = Field(default=0.0, ge=0.0, alias="fadeOutDelay")
    fade_out_duration_ms: float = Field(default=200.0, ge=0.0, alias="fadeOutDuration")
    fade_in_delay_ms: float = Field(default=300.0, ge=0.0, alias="fadeInDelay")
    fade_in_duration_ms: float = Field(default=200.0, ge=0.0, alias="fadeInDuration")
    slide_distance: float = Field(default=100.0, alias="slideDistance")
    direction: Direction = Direction.LEFT

    @field_validator(
        "fade_out_delay_ms",
        "fade_out_duration_ms",
        "fade_in_delay_ms",
        "fade_in_duration_ms",
        mode="before",
    )
    @classmethod
    def _parse_milliseconds(cls, value: Any) -> Any:
        return _to_milliseconds(value)

    @field_validator("direction", mode="before")
    @classmethod
    def _normalise_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def fade_out_delay_s(self) -> float:
        return ms_to_seconds(self.fade_out_delay_ms)

    @property
    def fade_out_duration_s(self) -> float:
        return ms_to_seconds(self.fade_out_duration_ms)

    @property
    def fade_in_delay_s(self) -> float:
        return ms_to_seconds(self.fade_in_delay_ms)

    @property
    def fade_in_duration_s(self) -> float:
        return ms_to_seconds(self.fade_in_duration_ms)

    def delay_s(self, kind: FadeKind) -> float:
        """Fade delay in seconds for a kind."""
        return self.fade_out_delay_s if kind is FadeKind.EXIT else self.fade_in_delay_s

    def duration_s(self, kind: FadeKind) -> float:
        """Fade duration in seconds for a kind."""
        return self.fade_out_duration_s if kind is FadeKind.EXIT else self.fade_in_duration_s


class TransitionPlan(BaseModel):
    """Decision taken at LOCATING_TRANSITION for one request.

    Attributes:
        mode: Create a new transition or update the one under the playhead.
        transition_number: Number used for driver naming and lookup.
        start_time: Start of the target window.
        end_time: End of the target window.
        controller_created: Whether the controller was created by this request.
    """

    model_config = ConfigDict(frozen=True)

    mode: EditMode
    transition_number: int = Field(ge=1)
    start_time: float
    end_time: float
    controller_created: bool = False


class EditResult(BaseModel):
    """Outcome of one entry-point call.

    Attributes:
        success: Whether the edit was applied.
        error: Error message when not successful.
        log: Ordered diagnostic lines.
        kind: Fade kind requested.
        transition_number: Transition the edit targeted, when known.
        mode: Create or update, when decided.
        driver_name: Driver the layers are linked to, when resolved.
        failed_state: Editor state in which a failure happened.
    """

    success: bool
    error: str | None = None
    log: list[str] = Field(default_factory=list)
    kind: FadeKind | None = None
    transition_number: int | None = None
    mode: EditMode | None = None
    driver_name: str | None = None
    failed_state: EditState | None = None

    @property
    def status(self) -> str:
        return "success" if self.success else "error"

    def to_wire(self) -> str:
        """Encode as ``"<status>|<field>|..."``.

        Success fields are the log lines. Error fields are the message
        followed by the log lines.
        """
        fields = [self.status]
        if not self.success:
            fields.append(self.error or "Unknown error")
        fields.extend(self.log)
        if self.success and not self.log:
            fields.append("")
        return WIRE_SEPARATOR.join(fields)
