"""In-memory timeline host backed by a CompositionDocument.

Used by the test-suite and the CLI. Behaves like an interactive host for the
operations the engine relies on: keys overwrite on equal time, position is
linearly interpolated and held outside the key range, new layers go on top.
"""

from __future__ import annotations

import bisect
import logging
from pathlib import Path
from typing import TypeVar

import yaml

from transitionkit.core.config.loader import detect_format
from transitionkit.core.utils.json import read_json, write_json
from transitionkit.core.utils.math import clamp, lerp

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

logger = logging.getLogger(__name__)

# Keys closer than this are the same key
KEY_TIME_EPSILON = 1e-6

K = TypeVar("K", PositionKey, ScalarKey, MarkerKey)


def _upsert(keys: list[K], key: K) -> int:
    """Insert key by time, replacing one at the same time. Returns 0-based index."""
    for i, existing in enumerate(keys):
        if abs(existing.time - key.time) <= KEY_TIME_EPSILON:
            keys[i] = key
            return i
    times = [k.time for k in keys]
    index = bisect.bisect_right(times, key.time)
    keys.insert(index, key)
    return index


class MemoryTimelineHost:
    """TimelineHost implementation over an in-memory composition document.

    Attributes:
        document: The composition being edited (None = no active composition).
        alerts: Notices shown through alert(), in order.
        undo_groups: Names of undo groups that were opened and closed.
    """

    def __init__(self, document: CompositionDocument | None = None) -> None:
        self.document = document
        self.alerts: list[str] = []
        self.undo_groups: list[str] = []
        self._open_groups: list[str] = []
        self._next_layer_number = len(document.layers) + 1 if document else 1

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> MemoryTimelineHost:
        """Load a composition document from JSON or YAML."""
        path = Path(path)
        if detect_format(path) == "json":
            raw = read_json(path)
        else:
            with path.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        return cls(CompositionDocument.model_validate(raw))

    def save(self, path: str | Path) -> None:
        """Write the composition document as JSON or YAML."""
        if self.document is None:
            raise ValueError("No composition to save")
        path = Path(path)
        data = self.document.model_dump(mode="json")
        if detect_format(path) == "json":
            write_json(path, data)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)

    @property
    def undo_depth(self) -> int:
        """Number of undo groups currently open."""
        return len(self._open_groups)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def _doc(self) -> CompositionDocument:
        if self.document is None:
            raise RuntimeError("No active composition")
        return self.document

    def layer(self, layer_id: str) -> LayerDocument:
        """Layer document by id.

        Raises:
            KeyError: If no layer has that id
        """
        for layer in self._doc().layers:
            if layer.id == layer_id:
                return layer
        raise KeyError(f"Unknown layer id: {layer_id}")

    def layer_by_name(self, name: str) -> LayerDocument:
        """First layer with a display name.

        Raises:
            KeyError: If no layer has that name
        """
        for layer in self._doc().layers:
            if layer.name == name:
                return layer
        raise KeyError(f"Unknown layer name: {name}")

    def _driver(self, layer_id: str, name: str) -> DriverTrack:
        for driver in self.layer(layer_id).drivers:
            if driver.name == name:
                return driver
        raise KeyError(f"Layer {layer_id} has no driver named {name!r}")

    def select(self, *names: str) -> None:
        """Replace the selection with the layers of the given names."""
        wanted = set(names)
        missing = wanted - {layer.name for layer in self._doc().layers}
        if missing:
            raise KeyError(f"Unknown layer names: {', '.join(sorted(missing))}")
        for layer in self._doc().layers:
            layer.selected = layer.name in wanted

    # ------------------------------------------------------------------
    # TimelineHost: composition
    # ------------------------------------------------------------------

    def active_composition(self) -> CompositionInfo | None:
        return self.document.info() if self.document is not None else None

    def get_time(self) -> float:
        return self._doc().time

    def set_time(self, time: float) -> None:
        self._doc().time = time

    # ------------------------------------------------------------------
    # TimelineHost: layers
    # ------------------------------------------------------------------

    def layer_ids(self) -> list[str]:
        return [layer.id for layer in self._doc().layers]

    def layer_name(self, layer_id: str) -> str:
        return self.layer(layer_id).name

    def is_selected(self, layer_id: str) -> bool:
        return self.layer(layer_id).selected

    def add_layer(self, name: str) -> str:
        doc = self._doc()
        existing = {layer.id for layer in doc.layers}
        layer_id = f"layer-{self._next_layer_number}"
        while layer_id in existing:
            self._next_layer_number += 1
            layer_id = f"layer-{self._next_layer_number}"
        self._next_layer_number += 1

        layer = LayerDocument(
            id=layer_id,
            name=name,
            position=(doc.width / 2.0, doc.height / 2.0),
        )
        doc.layers.insert(0, layer)
        logger.debug("Added layer %s (%s) at index 1", name, layer_id)
        return layer_id

    def move_layer(self, layer_id: str, index: int) -> None:
        layers = self._doc().layers
        layer = self.layer(layer_id)
        layers.remove(layer)
        position = clamp(index, 1, len(layers) + 1)
        layers.insert(position - 1, layer)

    def set_parent(self, layer_id: str, parent_id: str | None) -> None:
        layer = self.layer(layer_id)
        if parent_id is not None:
            self.layer(parent_id)
        layer.parent_id = parent_id
        layer.parent_time = self.get_time() if parent_id is not None else None

    # ------------------------------------------------------------------
    # TimelineHost: position track
    # ------------------------------------------------------------------

    def position_keys(self, layer_id: str) -> list[PositionKey]:
        return [key.model_copy() for key in self.layer(layer_id).position_keys]

    def position_at(self, layer_id: str, time: float) -> Vec2:
        layer = self.layer(layer_id)
        keys = layer.position_keys
        if not keys:
            return layer.position
        if time <= keys[0].time:
            return keys[0].value
        if time >= keys[-1].time:
            return keys[-1].value

        times = [k.time for k in keys]
        i = bisect.bisect_right(times, time)
        k0, k1 = keys[i - 1], keys[i]
        span = k1.time - k0.time
        t = (time - k0.time) / span if span > 0 else 0.0
        return (lerp(k0.value[0], k1.value[0], t), lerp(k0.value[1], k1.value[1], t))

    def set_position_key(self, layer_id: str, time: float, value: Vec2) -> None:
        layer = self.layer(layer_id)
        _upsert(layer.position_keys, PositionKey(time=time, value=value))

    # ------------------------------------------------------------------
    # TimelineHost: driver tracks
    # ------------------------------------------------------------------

    def driver_names(self, layer_id: str) -> list[str]:
        return [driver.name for driver in self.layer(layer_id).drivers]

    def add_driver(self, layer_id: str, name: str) -> None:
        layer = self.layer(layer_id)
        layer.drivers.append(DriverTrack(name=name))

    def driver_keys(self, layer_id: str, name: str) -> list[ScalarKey]:
        return [key.model_copy() for key in self._driver(layer_id, name).keys]

    def set_driver_key(self, layer_id: str, name: str, time: float, value: float) -> int:
        driver = self._driver(layer_id, name)
        label = 0
        for existing in driver.keys:
            if abs(existing.time - time) <= KEY_TIME_EPSILON:
                label = existing.label
        return _upsert(driver.keys, ScalarKey(time=time, value=value, label=label)) + 1

    def set_driver_key_label(self, layer_id: str, name: str, key_index: int, label: int) -> None:
        driver = self._driver(layer_id, name)
        if not 1 <= key_index <= len(driver.keys):
            raise IndexError(f"Key index {key_index} out of range for {name!r}")
        driver.keys[key_index - 1].label = label

    # ------------------------------------------------------------------
    # TimelineHost: markers and expressions
    # ------------------------------------------------------------------

    def markers(self, layer_id: str) -> list[MarkerKey]:
        return [marker.model_copy() for marker in self.layer(layer_id).markers]

    def add_marker(self, layer_id: str, time: float, comment: str) -> None:
        _upsert(self.layer(layer_id).markers, MarkerKey(time=time, comment=comment))

    def opacity_expression(self, layer_id: str) -> str:
        return self.layer(layer_id).opacity_expression

    def set_opacity_expression(self, layer_id: str, expression: str) -> None:
        self.layer(layer_id).opacity_expression = expression

    # ------------------------------------------------------------------
    # TimelineHost: session
    # ------------------------------------------------------------------

    def begin_undo_group(self, name: str) -> None:
        self._open_groups.append(name)

    def end_undo_group(self) -> None:
        if not self._open_groups:
            raise RuntimeError("end_undo_group() without an open group")
        self.undo_groups.append(self._open_groups.pop())

    def alert(self, message: str) -> None:
        logger.info("Alert: %s", message)
        self.alerts.append(message)
