"""Value types exchanged with the timeline host, and the composition document.

The document models describe a whole composition as plain data. They back the
in-memory host and are the on-disk format the CLI reads and writes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

Vec2 = tuple[float, float]


class CompositionInfo(BaseModel):
    """Read-only facts about the active composition."""

    model_config = ConfigDict(frozen=True)

    name: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    frame_rate: float = Field(gt=0.0)
    duration: float = Field(gt=0.0)


class PositionKey(BaseModel):
    """A 2D position keyframe."""

    time: float
    value: Vec2


class ScalarKey(BaseModel):
    """A scalar keyframe with its label (tag color index, 0 = none)."""

    time: float
    value: float
    label: int = Field(default=0, ge=0, le=16)


class MarkerKey(BaseModel):
    """A layer marker."""

    time: float
    comment: str


class DriverTrack(BaseModel):
    """A named scalar slider track attached to a layer."""

    name: str = Field(min_length=1)
    keys: list[ScalarKey] = Field(default_factory=list)


class LayerDocument(BaseModel):
    """One layer of a composition document.

    Attributes:
        id: Stable identifier, unique within the composition.
        name: Display name.
        selected: Whether the layer is part of the current selection.
        position: Static position used while the layer has no position keys.
        position_keys: Position keyframes, ascending by time.
        drivers: Slider tracks in creation order.
        markers: Layer markers, ascending by time.
        opacity_expression: Formula driving opacity ("" = none).
        parent_id: Id of the parent layer, if parented.
        parent_time: Composition time at which the parent was assigned.
    """

    id: str = Field(min_length=1)
    name: str
    selected: bool = False
    position: Vec2 = (0.0, 0.0)
    position_keys: list[PositionKey] = Field(default_factory=list)
    drivers: list[DriverTrack] = Field(default_factory=list)
    markers: list[MarkerKey] = Field(default_factory=list)
    opacity_expression: str = ""
    parent_id: str | None = None
    parent_time: float | None = None


class CompositionDocument(BaseModel):
    """A whole composition: settings, cursor and stacked layers (top first)."""

    name: str = "Comp 1"
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)
    frame_rate: float = Field(default=30.0, gt=0.0)
    duration: float = Field(default=10.0, gt=0.0)
    time: float = 0.0
    layers: list[LayerDocument] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_ids(self) -> CompositionDocument:
        """Layer ids must be unique."""
        ids = [layer.id for layer in self.layers]
        if len(ids) != len(set(ids)):
            raise ValueError("layer ids must be unique")
        return self

    def info(self) -> CompositionInfo:
        """Snapshot of the composition settings."""
        return CompositionInfo(
            name=self.name,
            width=self.width,
            height=self.height,
            frame_rate=self.frame_rate,
            duration=self.duration,
        )
