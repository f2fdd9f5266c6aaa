"""Scoped host state helpers.

Both helpers guarantee release on every exit path, including exceptions.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging

from .protocols import TimelineHost

logger = logging.getLogger(__name__)


@contextmanager
def preserve_time(host: TimelineHost) -> Iterator[float]:
    """Restore the host time cursor when the block exits.

    Yields:
        The cursor value at entry
    """
    original = host.get_time()
    try:
        yield original
    finally:
        host.set_time(original)
        logger.debug("Restored playhead to %s", original)


@contextmanager
def undo_group(host: TimelineHost, name: str) -> Iterator[None]:
    """Record everything inside the block as one undoable step."""
    host.begin_undo_group(name)
    try:
        yield
    finally:
        host.end_undo_group()
