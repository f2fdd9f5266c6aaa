"""Exceptions raised by the transition engine.

Every error carries the short message returned to the Caller and, where the
user should be told, the text of the blocking notice shown by the host.
"""

from __future__ import annotations

from .models import FadeKind


class TransitionKitError(Exception):
    """Base class for engine errors.

    Attributes:
        message: Short message returned to the Caller.
        alert: Notice shown to the user, or None for silent failures.
    """

    def __init__(self, message: str, alert: str | None = None) -> None:
        self.message = message
        self.alert = alert
        super().__init__(message)


class PreconditionError(TransitionKitError):
    """The request cannot start (no composition, no selection)."""


class ConflictError(TransitionKitError):
    """The request would break a transition invariant. Raised before any mutation."""


class DuplicateFadeKindError(ConflictError):
    """A selected layer already has this fade kind in the target transition.

    Attributes:
        layer_name: Offending layer.
        kind: Fade kind requested.
    """

    def __init__(self, layer_name: str, kind: FadeKind) -> None:
        self.layer_name = layer_name
        self.kind = kind
        super().__init__(
            f"Duplicate {kind.display_name} in current transition",
            alert=(
                f"Layer '{layer_name}' already has a {kind.display_name} transition at this "
                "timeline position. Cannot add duplicate transition types."
            ),
        )


class OverlappingTransitionError(ConflictError):
    """A new transition's provisional window overlaps an existing transition.

    Attributes:
        start_time: Provisional start.
        end_time: Provisional end.
        existing_index: Index of the transition it collides with.
    """

    def __init__(self, start_time: float, end_time: float, existing_index: int) -> None:
        self.start_time = start_time
        self.end_time = end_time
        self.existing_index = existing_index
        super().__init__(
            "Overlapping transitions",
            alert="Can't add overlapping transitions",
        )


class ExistingFadeMarkerError(ConflictError):
    """A selected layer already carries a fade marker inside the target window.

    Attributes:
        layer_name: Offending layer.
        comment: Text of the conflicting marker.
    """

    def __init__(self, layer_name: str, comment: str) -> None:
        self.layer_name = layer_name
        self.comment = comment
        super().__init__(
            "Existing fade markers detected in current transition",
            alert=(
                "Can't add overlapping transitions - selected layers already have fade "
                "markers in this transition"
            ),
        )


class HostOperationError(TransitionKitError):
    """The host did not behave as the engine expected."""


class DriverNotFoundError(HostOperationError):
    """An expected driver track is missing from the controller.

    Attributes:
        driver_name: Name that was looked up.
    """

    def __init__(self, driver_name: str) -> None:
        self.driver_name = driver_name
        super().__init__(f"Slider effect not found: {driver_name}")
