"""Shared pytest fixtures for transitionkit tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.impl_memory import MemoryTimelineHost
from transitionkit.core.host.models import CompositionDocument, LayerDocument

CONTROLLER_NAME = "Slide and fade - Controller"

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


# ============================================================================
# Config Fixtures
# ============================================================================


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default engine configuration."""
    return EngineConfig()


# ============================================================================
# Host Fixtures
# ============================================================================


@pytest.fixture
def make_host() -> Callable[..., MemoryTimelineHost]:
    """Factory for in-memory hosts with named layers.

    Layers are created top first with ids "a", "b", ... and the names given.
    Names listed in ``selected`` start selected.
    """

    def _make(
        *names: str,
        selected: tuple[str, ...] = (),
        width: int = 786,
        frame_rate: float = 30.0,
        time: float = 0.0,
    ) -> MemoryTimelineHost:
        layers = [
            LayerDocument(
                id=chr(ord("a") + i),
                name=name,
                selected=name in selected,
                position=(100.0, 100.0),
            )
            for i, name in enumerate(names)
        ]
        document = CompositionDocument(
            width=width, height=1080, frame_rate=frame_rate, time=time, layers=layers
        )
        return MemoryTimelineHost(document)

    return _make


@pytest.fixture
def title_host(make_host: Callable[..., MemoryTimelineHost]) -> MemoryTimelineHost:
    """786px wide composition with one selected layer "Title" at t=0."""
    return make_host("Title", selected=("Title",))


@pytest.fixture
def empty_host(make_host: Callable[..., MemoryTimelineHost]) -> MemoryTimelineHost:
    """Composition with no layers."""
    return make_host()


@pytest.fixture
def controller_of() -> Callable[[MemoryTimelineHost], str]:
    """Lookup of the controller layer id in a host (KeyError if missing)."""

    def _lookup(host: MemoryTimelineHost) -> str:
        return host.layer_by_name(CONTROLLER_NAME).id

    return _lookup
