"""Transition editor: one add-animation request from start to finish.

States run in a fixed order:

    LOCATING_CONTROLLER -> LOCATING_TRANSITION -> VALIDATING
        -> MUTATING_DRIVER -> MUTATING_POSITION -> LINKING_LAYERS -> DONE

Any conflict is raised during VALIDATING, before the first mutation. The
caller owns the undo group around run().
"""

from __future__ import annotations

from collections.abc import Sequence
import logging

from pydantic import BaseModel, ConfigDict

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.context import preserve_time
from transitionkit.core.host.protocols import TimelineHost

from .controller import ControllerManager
from .direction import calculate_slide_distance, displace, infer_direction, marker_text
from .drivers import DriverResolution, DriverResolver, next_transition_number
from .errors import (
    DriverNotFoundError,
    DuplicateFadeKindError,
    ExistingFadeMarkerError,
    OverlappingTransitionError,
)
from .links import find_fade_marker, layer_reference, link_expression, linked_layers
from .locator import find_transition_at
from .models import (
    Direction,
    EditMode,
    EditState,
    FadeKind,
    Transition,
    TransitionParams,
    TransitionPlan,
)
from .segmenter import find_all_transitions

logger = logging.getLogger(__name__)


class EditOutcome(BaseModel):
    """What a completed request did."""

    model_config = ConfigDict(frozen=True)

    plan: TransitionPlan
    driver: DriverResolution
    direction: Direction
    linked_layer_ids: list[str]


class TransitionEditor:
    """Runs a fade request against a host.

    Attributes:
        host: Timeline host being edited.
        config: Engine tunables.
        state: Current state; after a failure, the state it failed in.
    """

    def __init__(self, host: TimelineHost, config: EngineConfig | None = None) -> None:
        self.host = host
        self.config = config or EngineConfig()
        self.controllers = ControllerManager(host, self.config)
        self.state = EditState.LOCATING_CONTROLLER
        self.plan: TransitionPlan | None = None

    def _enter(self, state: EditState) -> None:
        self.state = state
        logger.debug("State: %s", state.value, extra={"state": state.value})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def transitions(self, controller_id: str) -> list[Transition]:
        """Transitions of the controller, segmented only when it has 2+ position keys."""
        if len(self.host.position_keys(controller_id)) < 2:
            return []
        return self.segment(controller_id)

    def segment(self, controller_id: str) -> list[Transition]:
        """Segment the controller track, including the single-key and no-movement fallbacks."""
        keys = self.host.position_keys(controller_id)
        composition = self.host.active_composition()
        frame_rate = composition.frame_rate if composition is not None else 30.0
        return find_all_transitions(
            keys,
            lambda t: self.host.position_at(controller_id, t),
            frame_rate,
            tolerance=self.config.movement_tolerance,
            gap_threshold=self.config.gap_threshold_s,
        )

    def transition_direction(self, controller_id: str, plan: TransitionPlan) -> Direction:
        """Direction of an existing transition from its position delta."""
        if len(self.host.position_keys(controller_id)) < 2:
            return Direction.LEFT
        start = self.host.position_at(controller_id, plan.start_time)
        end = self.host.position_at(controller_id, plan.end_time)
        return infer_direction(start, end)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _locate_controller(self, layer_ids: Sequence[str]) -> tuple[str, bool]:
        self._enter(EditState.LOCATING_CONTROLLER)
        stack = self.host.layer_ids()
        selected_indices = [stack.index(layer_id) + 1 for layer_id in layer_ids]
        return self.controllers.locate_or_create(selected_indices)

    def _locate_transition(self, controller_id: str, created: bool) -> TransitionPlan:
        self._enter(EditState.LOCATING_TRANSITION)
        now = self.host.get_time()
        provisional_end = now + self.config.slide_duration_s

        if not created:
            located = find_transition_at(
                self.transitions(controller_id), now, self.config.playhead_tolerance_s
            )
            if located is not None:
                return TransitionPlan(
                    mode=EditMode.UPDATE,
                    transition_number=located.index,
                    start_time=located.start_time,
                    end_time=located.end_time,
                )
            number = next_transition_number(self.host, controller_id)
        else:
            number = 1

        logger.debug("Creating new transition T%d at %s", number, now)
        return TransitionPlan(
            mode=EditMode.CREATE,
            transition_number=number,
            start_time=now,
            end_time=provisional_end,
            controller_created=created,
        )

    def _validate(
        self,
        controller_id: str,
        plan: TransitionPlan,
        kind: FadeKind,
        layer_ids: Sequence[str],
    ) -> None:
        self._enter(EditState.VALIDATING)

        if plan.mode is EditMode.UPDATE:
            for layer_id in layer_ids:
                marker = find_fade_marker(self.host, layer_id, plan.start_time, plan.end_time)
                if marker is not None:
                    raise ExistingFadeMarkerError(self.host.layer_name(layer_id), marker.comment)

            for layer_id in layer_ids:
                marker = find_fade_marker(
                    self.host, layer_id, plan.start_time, plan.end_time, kind=kind
                )
                if marker is not None:
                    raise DuplicateFadeKindError(self.host.layer_name(layer_id), kind)
            return

        for transition in self.segment(controller_id):
            if transition.overlaps(plan.start_time, plan.end_time):
                logger.debug(
                    "Overlap detected with T%d (%s to %s)",
                    transition.index,
                    transition.start_time,
                    transition.end_time,
                )
                raise OverlappingTransitionError(
                    plan.start_time, plan.end_time, transition.index
                )

    def _mutate_position(
        self, controller_id: str, plan: TransitionPlan, params: TransitionParams
    ) -> Direction:
        self._enter(EditState.MUTATING_POSITION)
        if plan.mode is EditMode.UPDATE:
            return self.transition_direction(controller_id, plan)

        composition = self.host.active_composition()
        width = composition.width if composition is not None else None
        distance = calculate_slide_distance(
            params.slide_distance, params.direction, width, self.config.reference_width
        )
        start_value = self.host.position_at(controller_id, plan.start_time)
        end_value = displace(start_value, params.direction, distance)

        self.host.set_position_key(controller_id, plan.start_time, start_value)
        self.host.set_position_key(controller_id, plan.end_time, end_value)
        logger.debug(
            "Added position keyframes for T%d: %s -> %s (%s, %spx)",
            plan.transition_number,
            start_value,
            end_value,
            params.direction.value,
            distance,
        )
        return params.direction

    def _link_layers(
        self,
        controller_id: str,
        plan: TransitionPlan,
        kind: FadeKind,
        layer_ids: Sequence[str],
        params: TransitionParams,
        driver: str,
        direction: Direction,
    ) -> list[str]:
        self._enter(EditState.LINKING_LAYERS)
        if driver not in self.host.driver_names(controller_id):
            raise DriverNotFoundError(driver)

        controller_name = self.config.controller_name
        parent_time = plan.start_time if kind is FadeKind.EXIT else plan.end_time
        marker_time = plan.start_time + params.delay_s(kind)
        text = marker_text(kind, direction)
        existing = set(self.host.driver_names(controller_id))

        with preserve_time(self.host):
            self.host.set_time(parent_time)
            for layer_id in layer_ids:
                self.host.set_parent(layer_id, controller_id)
                self.host.add_marker(layer_id, marker_time, text)

                reference = layer_reference(self.host, layer_id, controller_name)
                if reference is None or reference.driver_name not in existing:
                    self.host.set_opacity_expression(
                        layer_id, link_expression(controller_name, driver)
                    )
                    logger.debug(
                        "Linked %s to %s", self.host.layer_name(layer_id), driver
                    )
                else:
                    logger.debug(
                        "Layer %s keeps existing link to %s",
                        self.host.layer_name(layer_id),
                        reference.driver_name,
                    )

        selected = set(layer_ids)
        others = [
            layer_id
            for layer_id in linked_layers(self.host, controller_id, controller_name, driver)
            if layer_id not in selected
        ]
        for layer_id in others:
            self.host.add_marker(layer_id, marker_time, text)
            logger.debug("Added marker to linked layer %s", self.host.layer_name(layer_id))

        return [*layer_ids, *others]

    # ------------------------------------------------------------------
    # Entry
    # ------------------------------------------------------------------

    def run(
        self,
        kind: FadeKind,
        params: TransitionParams,
        layer_ids: Sequence[str],
    ) -> EditOutcome:
        """Apply a fade of ``kind`` to the selected layers.

        Args:
            kind: Fade kind to add.
            params: Validated request parameters.
            layer_ids: Selected layers in stack order.

        Returns:
            The outcome of the request

        Raises:
            ConflictError: Before any mutation when the request is rejected
            DriverNotFoundError: If the resolved driver vanished before linking
        """
        controller_id, created = self._locate_controller(layer_ids)
        plan = self._locate_transition(controller_id, created)
        self.plan = plan

        self._validate(controller_id, plan, kind, layer_ids)

        self._enter(EditState.MUTATING_DRIVER)
        resolver = DriverResolver(self.host, controller_id, self.config)
        resolution = resolver.resolve(plan, kind, layer_ids, params)

        direction = self._mutate_position(controller_id, plan, params)
        linked = self._link_layers(
            controller_id, plan, kind, layer_ids, params, resolution.name, direction
        )

        self._enter(EditState.DONE)
        return EditOutcome(
            plan=plan, driver=resolution, direction=direction, linked_layer_ids=linked
        )
