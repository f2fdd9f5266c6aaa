"""Entry points called by the panel.

Each call validates its preconditions, runs the editor inside one undo group
and returns an EditResult carrying the ordered diagnostic log of that call.
The module-level functions return the wire string the panel parses.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from transitionkit.core.config.models import EngineConfig
from transitionkit.core.host.context import undo_group
from transitionkit.core.host.protocols import TimelineHost
from transitionkit.core.logging.collector import DiagnosticCollector, capture_diagnostics

from .controller import ControllerManager
from .direction import infer_direction
from .drivers import DriverResolver, parse_driver_name
from .editor import TransitionEditor
from .errors import PreconditionError, TransitionKitError
from .links import linked_layers
from .models import Direction, EditResult, FadeKind, Transition, TransitionParams

logger = logging.getLogger(__name__)

PLUGIN_VERSION = "1.0.0"

_UNDO_GROUP_NAMES = {
    FadeKind.EXIT: "Add Exit Transition",
    FadeKind.ENTER: "Add Enter Transition",
}


def get_plugin_version() -> str:
    """Version string reported to the panel."""
    return PLUGIN_VERSION


def _validation_message(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "params"
        parts.append(f"{location}: {item['msg']}")
    return "Invalid parameters: " + "; ".join(parts)


class TransitionEngine:
    """Applies fade requests to a host and reports the outcome.

    Example:
        >>> from transitionkit.core.host import CompositionDocument, LayerDocument, MemoryTimelineHost
        >>> host = MemoryTimelineHost(
        ...     CompositionDocument(width=786, layers=[LayerDocument(id="a", name="Title", selected=True)])
        ... )
        >>> TransitionEngine(host).add_exit_transition({"direction": "left"}).success
        True
    """

    def __init__(self, host: TimelineHost, config: EngineConfig | None = None) -> None:
        self.host = host
        self.config = config or EngineConfig()

    def add_exit_transition(self, params: TransitionParams | Mapping[str, Any]) -> EditResult:
        return self.apply(FadeKind.EXIT, params)

    def add_enter_transition(self, params: TransitionParams | Mapping[str, Any]) -> EditResult:
        return self.apply(FadeKind.ENTER, params)

    def _selected_layers(self) -> list[str]:
        if self.host.active_composition() is None:
            raise PreconditionError(
                "No composition selected", alert="Please select a composition first."
            )
        selected = [layer_id for layer_id in self.host.layer_ids() if self.host.is_selected(layer_id)]
        if not selected:
            raise PreconditionError("No layers selected", alert="Please select at least one layer.")
        return selected

    def apply(self, kind: FadeKind, params: TransitionParams | Mapping[str, Any]) -> EditResult:
        """Run one fade request.

        Precondition failures return an error with an empty log and leave the
        composition untouched. Conflicts are shown to the user through the
        host's alert and returned as errors. Any other failure is converted to
        an error result rather than raised.
        """
        with capture_diagnostics(self.config.diagnostics_level) as diagnostics:
            return self._apply(kind, params, diagnostics)

    def _apply(
        self,
        kind: FadeKind,
        params: TransitionParams | Mapping[str, Any],
        diagnostics: DiagnosticCollector,
    ) -> EditResult:
        try:
            layer_ids = self._selected_layers()
        except PreconditionError as e:
            if e.alert:
                self.host.alert(e.alert)
            return EditResult(success=False, error=e.message, kind=kind)

        extra = {"operation": kind.value}
        editor: TransitionEditor | None = None
        try:
            if not isinstance(params, TransitionParams):
                params = TransitionParams.model_validate(dict(params))
            logger.debug(
                "Add %s called with params: %s",
                kind.display_name,
                params.model_dump_json(by_alias=True),
                extra=extra,
            )

            editor = TransitionEditor(self.host, self.config)
            with undo_group(self.host, _UNDO_GROUP_NAMES[kind]):
                outcome = editor.run(kind, params, layer_ids)

            logger.debug(
                "%s transition added successfully",
                "Exit" if kind is FadeKind.EXIT else "Enter",
                extra={**extra, "transition_number": outcome.plan.transition_number},
            )
            return EditResult(
                success=True,
                log=diagnostics.messages(),
                kind=kind,
                transition_number=outcome.plan.transition_number,
                mode=outcome.plan.mode,
                driver_name=outcome.driver.name,
            )

        except ValidationError as e:
            message = _validation_message(e)
            logger.error(message, extra=extra)
            return EditResult(success=False, error=message, log=diagnostics.messages(), kind=kind)

        except TransitionKitError as e:
            if e.alert:
                self.host.alert(e.alert)
            logger.error("Error in add %s: %s", kind.display_name, e.message, extra=extra)
            return self._failure(kind, e.message, diagnostics, editor)

        except Exception as e:
            logger.exception("Unexpected error in add %s", kind.display_name, extra=extra)
            return self._failure(kind, str(e) or type(e).__name__, diagnostics, editor)

    @staticmethod
    def _failure(
        kind: FadeKind,
        message: str,
        diagnostics: DiagnosticCollector,
        editor: TransitionEditor | None,
    ) -> EditResult:
        plan = editor.plan if editor is not None else None
        return EditResult(
            success=False,
            error=message,
            log=diagnostics.messages(),
            kind=kind,
            transition_number=plan.transition_number if plan is not None else None,
            mode=plan.mode if plan is not None else None,
            failed_state=editor.state if editor is not None else None,
        )


def add_exit_transition(
    host: TimelineHost,
    params: TransitionParams | Mapping[str, Any],
    config: EngineConfig | None = None,
) -> str:
    """Add a fade-out and slide to the selected layers; returns the wire string."""
    return TransitionEngine(host, config).add_exit_transition(params).to_wire()


def add_enter_transition(
    host: TimelineHost,
    params: TransitionParams | Mapping[str, Any],
    config: EngineConfig | None = None,
) -> str:
    """Add a fade-in and slide to the selected layers; returns the wire string."""
    return TransitionEngine(host, config).add_enter_transition(params).to_wire()


# ----------------------------------------------------------------------
# Inspection
# ----------------------------------------------------------------------


class TransitionSummary(BaseModel):
    """Read-only description of one transition on the controller."""

    model_config = ConfigDict(frozen=True)

    transition: Transition
    direction: Direction
    drivers: dict[str, list[FadeKind]]
    linked_layers: dict[str, list[str]]


def describe_transitions(
    host: TimelineHost, config: EngineConfig | None = None
) -> list[TransitionSummary]:
    """Describe the controller's transitions without modifying anything.

    Drivers are attributed to a transition when they have tagged keys inside
    its window. Returns an empty list when there is no composition or
    controller.
    """
    config = config or EngineConfig()
    if host.active_composition() is None:
        return []
    controller_id = ControllerManager(host, config).locate()
    if controller_id is None:
        return []

    editor = TransitionEditor(host, config)
    resolver = DriverResolver(host, controller_id, config)
    summaries = []
    for transition in editor.transitions(controller_id):
        drivers: dict[str, list[FadeKind]] = {}
        layers: dict[str, list[str]] = {}
        for name in host.driver_names(controller_id):
            if parse_driver_name(name) is None:
                continue
            kinds = resolver.tagged_kinds(name, transition.start_time, transition.end_time)
            if not kinds:
                continue
            drivers[name] = sorted(kinds, key=lambda k: k.value, reverse=True)
            layers[name] = [
                host.layer_name(layer_id)
                for layer_id in linked_layers(host, controller_id, config.controller_name, name)
            ]

        direction = infer_direction(
            host.position_at(controller_id, transition.start_time),
            host.position_at(controller_id, transition.end_time),
        )
        summaries.append(
            TransitionSummary(
                transition=transition,
                direction=direction,
                drivers=drivers,
                linked_layers=layers,
            )
        )
    return summaries
