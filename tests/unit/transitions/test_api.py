"""Tests for the engine entry points."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from transitionkit.core.host.impl_memory import MemoryTimelineHost
from transitionkit.core.transitions import (
    Direction,
    EditMode,
    EditState,
    FadeKind,
    TransitionEngine,
    add_enter_transition,
    add_exit_transition,
    describe_transitions,
    get_plugin_version,
)

HostFactory = Callable[..., MemoryTimelineHost]


class ExplodingHost(MemoryTimelineHost):
    """Host whose parenting fails, to exercise host-operation errors."""

    def set_parent(self, layer_id: str, parent_id: str | None) -> None:
        raise RuntimeError("parenting failed")


class MarkerFailingHost(MemoryTimelineHost):
    """Host whose marker writes fail while layers are being linked."""

    def add_marker(self, layer_id: str, time: float, comment: str) -> None:
        raise RuntimeError("marker write failed")


class TestPreconditions:
    """Requests that cannot start."""

    def test_no_composition(self) -> None:
        """No active composition is reported without a log."""
        host = MemoryTimelineHost()
        assert add_exit_transition(host, {}) == "error|No composition selected"
        assert host.alerts == ["Please select a composition first."]

    def test_no_selection(self, make_host: HostFactory) -> None:
        """No selected layers is reported and nothing is created."""
        host = make_host("Title")
        assert add_enter_transition(host, {}) == "error|No layers selected"
        assert host.layer_ids() == ["a"]
        assert host.undo_groups == []


class TestResults:
    """EditResult contents."""

    def test_success_result(self, title_host: MemoryTimelineHost) -> None:
        """A successful call reports what it did and its log."""
        result = TransitionEngine(title_host).add_exit_transition({"direction": "left"})

        assert result.success
        assert result.kind is FadeKind.EXIT
        assert result.mode is EditMode.CREATE
        assert result.transition_number == 1
        assert result.driver_name == "Transition 1 - Opacity 1"
        assert "State: LINKING_LAYERS" in result.log
        assert result.log[-1] == "Exit transition added successfully"

    def test_wire_success(self, title_host: MemoryTimelineHost) -> None:
        """The wire string starts with the status and carries the log."""
        wire = add_exit_transition(title_host, {"direction": "left"})
        status, *log = wire.split("|")
        assert status == "success"
        assert "Creating new slider: Transition 1 - Opacity 1" in log

    def test_invalid_params(self, title_host: MemoryTimelineHost) -> None:
        """Invalid parameters fail before anything is created."""
        result = TransitionEngine(title_host).add_exit_transition({"direction": "sideways"})

        assert not result.success
        assert result.error.startswith("Invalid parameters: direction")
        assert title_host.layer_ids() == ["a"]

    def test_conflict_alerts_and_fails(self, title_host: MemoryTimelineHost) -> None:
        """Conflicts are shown to the user and returned as errors."""
        engine = TransitionEngine(title_host)
        engine.add_exit_transition({})
        title_host.set_time(0.25)

        result = engine.add_exit_transition({})

        assert not result.success
        assert result.error == "Duplicate fade-out in current transition"
        assert result.failed_state is EditState.VALIDATING
        assert result.mode is EditMode.UPDATE
        assert any(line.startswith("Error: ") for line in result.log)
        assert "already has a fade-out transition" in title_host.alerts[-1]

    def test_unexpected_error_is_converted(self, title_host: MemoryTimelineHost) -> None:
        """Host failures become error results; undo group and cursor are restored."""
        host = ExplodingHost(title_host.document)
        host.set_time(0.1)

        result = TransitionEngine(host).add_enter_transition({})

        assert not result.success
        assert result.error == "parenting failed"
        assert result.failed_state is EditState.LINKING_LAYERS
        assert host.undo_depth == 0
        assert host.undo_groups == ["Add Enter Transition"]
        assert host.get_time() == 0.1

    def test_failed_marker_write_restores_cursor_and_closes_undo(
        self, title_host: MemoryTimelineHost
    ) -> None:
        """A host failure while linking leaves the cursor and undo stack as they were."""
        host = MarkerFailingHost(title_host.document)
        host.set_time(0.1)

        wire = add_enter_transition(host, {})

        assert wire.startswith("error|marker write failed")
        assert host.get_time() == 0.1
        assert host.undo_depth == 0
        assert host.undo_groups == ["Add Enter Transition"]

    def test_single_key_controller_blocks_overlapping_create(
        self, title_host: MemoryTimelineHost
    ) -> None:
        """A lone controller key is a point transition that a new slide may not cover."""
        controller = title_host.add_layer("Slide and fade - Controller")
        title_host.set_position_key(controller, 1.0, (393.0, 540.0))
        title_host.set_time(0.7)

        wire = add_exit_transition(title_host, {})

        assert wire.startswith("error|Overlapping transitions|")
        assert len(title_host.position_keys(controller)) == 1

    def test_each_call_has_its_own_log(self, title_host: MemoryTimelineHost) -> None:
        """Diagnostics do not leak from one call into the next."""
        engine = TransitionEngine(title_host)
        first = engine.add_exit_transition({})
        title_host.set_time(0.25)
        second = engine.add_enter_transition({})

        assert first.log[0].startswith("Add fade-out called")
        assert second.log[0].startswith("Add fade-in called")


def test_get_plugin_version() -> None:
    """The version string is reported."""
    assert get_plugin_version() == "1.0.0"


class TestDescribeTransitions:
    """Tests for describe_transitions function."""

    def test_empty_without_controller(self, title_host: MemoryTimelineHost) -> None:
        """No controller, nothing to describe."""
        assert describe_transitions(title_host) == []

    def test_lists_drivers_and_layers(self, make_host: HostFactory) -> None:
        """Each transition lists its drivers, their kinds and linked layers."""
        host = make_host("Title", "Logo", selected=("Title",))
        engine = TransitionEngine(host)
        engine.add_exit_transition({"direction": "up"})
        host.select("Logo")
        host.set_time(2.0)
        engine.add_enter_transition({"direction": "right"})

        first, second = describe_transitions(host)

        assert first.direction is Direction.UP
        assert first.drivers == {"Transition 1 - Opacity 1": [FadeKind.EXIT]}
        assert first.linked_layers == {"Transition 1 - Opacity 1": ["Title"]}
        assert second.transition.index == 2
        assert second.transition.start_time == pytest.approx(2.0)
        assert second.direction is Direction.RIGHT
        assert second.drivers == {"Transition 2 - Opacity 1": [FadeKind.ENTER]}
