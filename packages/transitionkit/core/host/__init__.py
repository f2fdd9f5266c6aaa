"""Timeline host abstraction for TransitionKit.

Example:
    >>> from transitionkit.core.host import CompositionDocument, MemoryTimelineHost
    >>> host = MemoryTimelineHost(CompositionDocument(width=786))
    >>> layer_id = host.add_layer("Title")
    >>> host.layer_name(layer_id)
    'Title'
"""

from .context import preserve_time, undo_group
from .impl_memory import MemoryTimelineHost
from .models import (
    CompositionDocument,
    CompositionInfo,
    DriverTrack,
    LayerDocument,
    MarkerKey,
    PositionKey,
    ScalarKey,
    Vec2,
)
from .protocols import TimelineHost

__all__ = [
    # Protocol
    "TimelineHost",
    # Implementations
    "MemoryTimelineHost",
    # Scoped helpers
    "preserve_time",
    "undo_group",
    # Value types
    "CompositionInfo",
    "PositionKey",
    "ScalarKey",
    "MarkerKey",
    "Vec2",
    # Documents
    "CompositionDocument",
    "LayerDocument",
    "DriverTrack",
]
