"""Slide-and-fade transition engine.

Example:
    >>> from transitionkit.core.host import CompositionDocument, LayerDocument, MemoryTimelineHost
    >>> from transitionkit.core.transitions import add_exit_transition
    >>> host = MemoryTimelineHost(
    ...     CompositionDocument(width=786, layers=[LayerDocument(id="a", name="Title", selected=True)])
    ... )
    >>> add_exit_transition(host, {"direction": "left"}).startswith("success|")
    True
"""

from .api import (
    PLUGIN_VERSION,
    TransitionEngine,
    TransitionSummary,
    add_enter_transition,
    add_exit_transition,
    describe_transitions,
    get_plugin_version,
)
from .controller import ControllerManager
from .direction import calculate_slide_distance, displace, infer_direction, marker_text
from .drivers import (
    DriverResolution,
    DriverResolver,
    DriverSource,
    driver_name,
    next_opacity_number,
    next_transition_number,
    parse_driver_name,
)
from .editor import EditOutcome, TransitionEditor
from .errors import (
    ConflictError,
    DriverNotFoundError,
    DuplicateFadeKindError,
    ExistingFadeMarkerError,
    HostOperationError,
    OverlappingTransitionError,
    PreconditionError,
    TransitionKitError,
)
from .links import DriverReference, link_expression, linked_layers, parse_reference
from .locator import find_transition_at
from .models import (
    Direction,
    EditMode,
    EditResult,
    EditState,
    FadeKind,
    Transition,
    TransitionParams,
    TransitionPlan,
)
from .segmenter import find_all_transitions

__all__ = [
    # Entry points
    "add_exit_transition",
    "add_enter_transition",
    "get_plugin_version",
    "describe_transitions",
    "PLUGIN_VERSION",
    "TransitionEngine",
    "TransitionSummary",
    # Engine components
    "find_all_transitions",
    "find_transition_at",
    "calculate_slide_distance",
    "displace",
    "infer_direction",
    "marker_text",
    "ControllerManager",
    "DriverResolver",
    "DriverResolution",
    "DriverSource",
    "driver_name",
    "parse_driver_name",
    "next_transition_number",
    "next_opacity_number",
    "DriverReference",
    "link_expression",
    "linked_layers",
    "parse_reference",
    "TransitionEditor",
    "EditOutcome",
    # Models
    "Direction",
    "EditMode",
    "EditResult",
    "EditState",
    "FadeKind",
    "Transition",
    "TransitionParams",
    "TransitionPlan",
    # Errors
    "TransitionKitError",
    "PreconditionError",
    "ConflictError",
    "DuplicateFadeKindError",
    "OverlappingTransitionError",
    "ExistingFadeMarkerError",
    "HostOperationError",
    "DriverNotFoundError",
]
