"""Locate or create the controller layer of a composition."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.protocols import TimelineHost

logger = logging.getLogger(__name__)


class ControllerManager:
    """Finds the composition's controller layer by name, creating it on demand.

    At most one controller exists per composition. The first layer carrying the
    configured name is the controller; later duplicates are ignored.
    """

    def __init__(self, host: TimelineHost, config: EngineConfig | None = None) -> None:
        self.host = host
        self.config = config or EngineConfig()

    @property
    def name(self) -> str:
        return self.config.controller_name

    def locate(self) -> str | None:
        """Id of the controller layer, or None when the composition has none."""
        for layer_id in self.host.layer_ids():
            if self.host.layer_name(layer_id) == self.name:
                logger.debug("Found existing controller layer %s", layer_id)
                return layer_id
        return None

    def create(self, selected_indices: Sequence[int]) -> str:
        """Create the controller directly below the bottom-most selected layer.

        Args:
            selected_indices: 1-based stack indices of the selected layers,
                taken before the controller is inserted.

        Returns:
            Id of the new controller layer
        """
        layer_id = self.host.add_layer(self.name)

        if selected_indices:
            # Indices are final positions, counted with the controller removed.
            target = max(selected_indices) + 1
            target = min(target, len(self.host.layer_ids()))
            self.host.move_layer(layer_id, target)
            logger.debug("Placed controller at index %d", target)

        logger.debug("Created new controller layer %s", layer_id)
        return layer_id

    def locate_or_create(self, selected_indices: Sequence[int]) -> tuple[str, bool]:
        """Return the controller id and whether it was created by this call."""
        layer_id = self.locate()
        if layer_id is not None:
            return layer_id, False
        return self.create(selected_indices), True
