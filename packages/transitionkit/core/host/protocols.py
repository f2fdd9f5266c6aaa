"""Protocol for the timeline host application.

The engine never touches a scene graph directly. Everything it reads or
writes goes through this protocol, so any application that can expose layers,
keyframes, markers and expressions can be driven by it.
"""

from typing import Protocol

from .models import CompositionInfo, MarkerKey, PositionKey, ScalarKey, Vec2


class TimelineHost(Protocol):
    """
    Protocol for the host that owns the composition.

    Layers are addressed by opaque string ids. Layer indices are 1-based and
    follow the stacking order, index 1 being the top layer. All times are in
    seconds on the composition timeline.

    Implementations raise KeyError for unknown layer ids or driver names.
    """

    # Composition
    def active_composition(self) -> CompositionInfo | None:
        """The active composition, or None when no composition is active."""
        ...

    def get_time(self) -> float:
        """Current time cursor."""
        ...

    def set_time(self, time: float) -> None:
        """Move the time cursor."""
        ...

    # Layers
    def layer_ids(self) -> list[str]:
        """All layer ids in stacking order (top first)."""
        ...

    def layer_name(self, layer_id: str) -> str:
        """Display name of a layer."""
        ...

    def is_selected(self, layer_id: str) -> bool:
        """Whether the layer is part of the user's selection."""
        ...

    def add_layer(self, name: str) -> str:
        """
        Create an empty layer at the top of the stack.

        Returns:
            Id of the new layer
        """
        ...

    def move_layer(self, layer_id: str, index: int) -> None:
        """
        Move a layer so it ends up at the given 1-based index.

        Indices past the bottom of the stack place the layer last.
        """
        ...

    def set_parent(self, layer_id: str, parent_id: str | None) -> None:
        """Parent a layer at the current time, keeping its visual placement."""
        ...

    # Position track
    def position_keys(self, layer_id: str) -> list[PositionKey]:
        """Position keyframes ascending by time."""
        ...

    def position_at(self, layer_id: str, time: float) -> Vec2:
        """Position value at a time, pre-expression."""
        ...

    def set_position_key(self, layer_id: str, time: float, value: Vec2) -> None:
        """Create (or overwrite) a position keyframe."""
        ...

    # Slider (driver) tracks
    def driver_names(self, layer_id: str) -> list[str]:
        """Names of slider tracks on a layer, in creation order."""
        ...

    def add_driver(self, layer_id: str, name: str) -> None:
        """Attach a new, empty slider track."""
        ...

    def driver_keys(self, layer_id: str, name: str) -> list[ScalarKey]:
        """Keyframes of a slider track ascending by time, with labels."""
        ...

    def set_driver_key(self, layer_id: str, name: str, time: float, value: float) -> int:
        """
        Create (or overwrite) a slider keyframe.

        Returns:
            1-based index of the key after insertion
        """
        ...

    def set_driver_key_label(self, layer_id: str, name: str, key_index: int, label: int) -> None:
        """Set the label of the key at a 1-based index."""
        ...

    # Markers and expressions
    def markers(self, layer_id: str) -> list[MarkerKey]:
        """Layer markers ascending by time."""
        ...

    def add_marker(self, layer_id: str, time: float, comment: str) -> None:
        """Add (or replace) the marker at a time."""
        ...

    def opacity_expression(self, layer_id: str) -> str:
        """Opacity formula, empty string when none."""
        ...

    def set_opacity_expression(self, layer_id: str, expression: str) -> None:
        """Replace the opacity formula."""
        ...

    # Session
    def begin_undo_group(self, name: str) -> None:
        """Open an undo-recording boundary."""
        ...

    def end_undo_group(self) -> None:
        """Close the innermost undo-recording boundary."""
        ...

    def alert(self, message: str) -> None:
        """Show a blocking notice to the user."""
        ...
