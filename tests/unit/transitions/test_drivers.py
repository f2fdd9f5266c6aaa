"""Tests for driver naming, classification and resolution."""

from __future__ import annotations

from collections.abc import Callable
import logging

import pytest

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.impl_memory import MemoryTimelineHost
from transitionkit.core.transitions.drivers import (
    DriverResolver,
    DriverSource,
    driver_name,
    kind_from_label,
    kind_from_suffix,
    next_opacity_number,
    next_transition_number,
    parse_driver_name,
)
from transitionkit.core.transitions.links import DriverReference, link_expression
from transitionkit.core.transitions.models import (
    EditMode,
    FadeKind,
    TransitionParams,
    TransitionPlan,
)

HostFactory = Callable[..., MemoryTimelineHost]
CTRL = "Slide and fade - Controller"


@pytest.fixture
def rig(make_host: HostFactory) -> MemoryTimelineHost:
    """Controller "a" above layers "b" (Title) and "c" (Subtitle)."""
    return make_host(CTRL, "Title", "Subtitle", selected=("Title",))


@pytest.fixture
def plan() -> TransitionPlan:
    """Update plan on T1 spanning 0..0.5 s."""
    return TransitionPlan(mode=EditMode.UPDATE, transition_number=1, start_time=0.0, end_time=0.5)


def _add_driver(host: MemoryTimelineHost, name: str, keys: list[tuple[float, float, int]]) -> None:
    host.add_driver("a", name)
    for time, value, label in keys:
        index = host.set_driver_key("a", name, time, value)
        host.set_driver_key_label("a", name, index, label)


class TestNaming:
    """Driver names and numbering."""

    def test_driver_name(self) -> None:
        """Names follow "Transition N - Opacity M"."""
        assert driver_name(2, 1) == "Transition 2 - Opacity 1"

    def test_parse_driver_name(self) -> None:
        """Names parse back to their numbers; others give None."""
        assert parse_driver_name("Transition 12 - Opacity 3") == (12, 3)
        assert parse_driver_name("Brightness") is None
        assert parse_driver_name("Transition 1 - Opacity 1 copy") is None

    def test_next_numbers(self, rig: MemoryTimelineHost) -> None:
        """Next numbers are one past the largest in use."""
        for name in ("Transition 1 - Opacity 1", "Transition 3 - Opacity 2", "Brightness"):
            rig.add_driver("a", name)

        assert next_transition_number(rig, "a") == 4
        assert next_opacity_number(rig, "a", 1) == 2
        assert next_opacity_number(rig, "a", 3) == 3
        assert next_opacity_number(rig, "a", 5) == 1

    def test_next_transition_number_without_drivers(self, rig: MemoryTimelineHost) -> None:
        """The first transition is number 1."""
        assert next_transition_number(rig, "a") == 1


class TestClassification:
    """Fade kind from tags and names."""

    def test_kind_from_label(self) -> None:
        """Legacy green reads as exit."""
        labels = EngineConfig().labels
        assert kind_from_label(8, labels) is FadeKind.EXIT
        assert kind_from_label(9, labels) is FadeKind.EXIT
        assert kind_from_label(10, labels) is FadeKind.ENTER
        assert kind_from_label(0, labels) is None

    def test_kind_from_suffix(self) -> None:
        """Suffix 1 is exit, 2 is enter, others unknown."""
        assert kind_from_suffix(1) is FadeKind.EXIT
        assert kind_from_suffix(2) is FadeKind.ENTER
        assert kind_from_suffix(3) is None

    def test_tags_override_name(
        self, rig: MemoryTimelineHost, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A driver tagged enter but named as exit is enter, with a warning."""
        _add_driver(rig, "Transition 1 - Opacity 1", [(0.3, 0.0, 10), (0.5, 100.0, 10)])
        reference = DriverReference(
            driver_name="Transition 1 - Opacity 1", transition_number=1, opacity_number=1
        )

        with caplog.at_level(logging.WARNING, logger="transitionkit"):
            kinds = DriverResolver(rig, "a").driver_kinds(reference)

        assert kinds == {FadeKind.ENTER}
        assert "named as fade-out" in caplog.text

    def test_name_used_without_tags(self, rig: MemoryTimelineHost) -> None:
        """Untagged drivers fall back to the naming convention."""
        rig.add_driver("a", "Transition 1 - Opacity 2")
        reference = DriverReference(
            driver_name="Transition 1 - Opacity 2", transition_number=1, opacity_number=2
        )
        assert DriverResolver(rig, "a").driver_kinds(reference) == {FadeKind.ENTER}


class TestResolve:
    """Tests for DriverResolver.resolve."""

    def test_creates_tagged_driver(self, rig: MemoryTimelineHost, plan: TransitionPlan) -> None:
        """Without signals a new driver gets two tagged keys."""
        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.EXIT, ["b"], TransitionParams(fade_out_delay_ms=100)
        )

        assert resolution.name == "Transition 1 - Opacity 1"
        assert resolution.source is DriverSource.CREATED
        keys = rig.driver_keys("a", resolution.name)
        assert [(k.time, k.value, k.label) for k in keys] == [
            (pytest.approx(0.1), 100.0, 8),
            (pytest.approx(0.3), 0.0, 8),
        ]

    def test_enter_keys(self, rig: MemoryTimelineHost, plan: TransitionPlan) -> None:
        """Enter keys go 0 -> 100 tagged purple."""
        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.ENTER, ["b"], TransitionParams()
        )
        keys = rig.driver_keys("a", resolution.name)
        assert [(k.value, k.label) for k in keys] == [(0.0, 10), (100.0, 10)]
        assert keys[0].time == pytest.approx(0.3)
        assert keys[1].time == pytest.approx(0.5)

    def test_suffix_increments(self, rig: MemoryTimelineHost, plan: TransitionPlan) -> None:
        """A second new driver on the same transition takes the next suffix."""
        rig.add_driver("a", "Transition 1 - Opacity 1")
        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.ENTER, ["b"], TransitionParams()
        )
        assert resolution.name == "Transition 1 - Opacity 2"

    def test_reuses_tagged_driver_without_writing(
        self, rig: MemoryTimelineHost, plan: TransitionPlan
    ) -> None:
        """A driver tagged for the kind in the window is linked as is."""
        _add_driver(rig, "Transition 1 - Opacity 1", [(0.0, 100.0, 8), (0.2, 0.0, 8)])

        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.EXIT, ["c"], TransitionParams(fade_out_delay_ms=50)
        )

        assert resolution.source is DriverSource.KEYFRAME_TAG
        assert resolution.keys_written is False
        assert len(rig.driver_keys("a", "Transition 1 - Opacity 1")) == 2

    def test_legacy_tag_counts_as_exit(self, rig: MemoryTimelineHost, plan: TransitionPlan) -> None:
        """Green-tagged keys are found for exit requests."""
        _add_driver(rig, "Transition 1 - Opacity 1", [(0.0, 100.0, 9), (0.2, 0.0, 9)])
        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.EXIT, ["c"], TransitionParams()
        )
        assert resolution.name == "Transition 1 - Opacity 1"

    def test_tag_outside_window_is_ignored(
        self, rig: MemoryTimelineHost, plan: TransitionPlan
    ) -> None:
        """Tags in another transition do not match."""
        _add_driver(rig, "Transition 1 - Opacity 1", [(2.0, 100.0, 8), (2.2, 0.0, 8)])
        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.EXIT, ["c"], TransitionParams()
        )
        assert resolution.source is DriverSource.CREATED
        assert resolution.name == "Transition 1 - Opacity 2"

    def test_layer_reference_of_requested_kind_preferred(
        self, rig: MemoryTimelineHost, plan: TransitionPlan
    ) -> None:
        """Among selected layers' links, one of the requested kind wins."""
        _add_driver(rig, "Transition 1 - Opacity 1", [(0.0, 100.0, 8), (0.2, 0.0, 8)])
        _add_driver(rig, "Transition 1 - Opacity 2", [(0.3, 0.0, 10), (0.5, 100.0, 10)])
        rig.set_opacity_expression("b", link_expression(CTRL, "Transition 1 - Opacity 1"))
        rig.set_opacity_expression("c", link_expression(CTRL, "Transition 1 - Opacity 2"))

        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.ENTER, ["b", "c"], TransitionParams()
        )

        assert resolution.name == "Transition 1 - Opacity 2"
        assert resolution.source is DriverSource.LAYER_EXPRESSION
        assert resolution.keys_written is False

    def test_layer_reference_of_other_kind_reused(
        self, rig: MemoryTimelineHost, plan: TransitionPlan
    ) -> None:
        """A layer linked to an exit driver gets its enter keys on the same driver."""
        _add_driver(rig, "Transition 1 - Opacity 1", [(0.0, 100.0, 8), (0.2, 0.0, 8)])
        rig.set_opacity_expression("b", link_expression(CTRL, "Transition 1 - Opacity 1"))

        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.ENTER, ["b"], TransitionParams()
        )

        assert resolution.name == "Transition 1 - Opacity 1"
        assert resolution.keys_written is True
        labels = [k.label for k in rig.driver_keys("a", "Transition 1 - Opacity 1")]
        assert labels == [8, 8, 10, 10]

    def test_reference_to_missing_driver_is_skipped(
        self, rig: MemoryTimelineHost, plan: TransitionPlan
    ) -> None:
        """Links to deleted drivers do not count."""
        rig.set_opacity_expression("b", link_expression(CTRL, "Transition 7 - Opacity 1"))
        resolution = DriverResolver(rig, "a").resolve(
            plan, FadeKind.EXIT, ["b"], TransitionParams()
        )
        assert resolution.source is DriverSource.CREATED

    def test_idempotent_reuse(self, rig: MemoryTimelineHost, plan: TransitionPlan) -> None:
        """Resolving the same fade twice neither adds a driver nor duplicates keys."""
        resolver = DriverResolver(rig, "a")
        first = resolver.resolve(plan, FadeKind.EXIT, ["b"], TransitionParams())
        rig.set_opacity_expression("b", link_expression(CTRL, first.name))

        second = resolver.resolve(plan, FadeKind.EXIT, ["b"], TransitionParams())

        assert second.name == first.name
        assert second.keys_written is False
        assert rig.driver_names("a") == [first.name]
        assert len(rig.driver_keys("a", first.name)) == 2
