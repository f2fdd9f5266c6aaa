"""Command-line interface for TransitionKit.

Applies slide-and-fade edits to composition documents (JSON or YAML) through
the in-memory host.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from transitionkit.core.config.loader import configure_logging, load_app_config
from transitionkit.core.config.models import AppConfig
from transitionkit.core.host.impl_memory import MemoryTimelineHost
from transitionkit.core.transitions import (
    FadeKind,
    TransitionEngine,
    describe_transitions,
    get_plugin_version,
)
from transitionkit.core.utils.timecode import format_ms, time_to_seconds

console = Console()
logger = logging.getLogger(__name__)

_PARAM_OPTIONS = {
    "fade_out_delay": "fadeOutDelay",
    "fade_out_duration": "fadeOutDuration",
    "fade_in_delay": "fadeInDelay",
    "fade_in_duration": "fadeInDuration",
    "slide_distance": "slideDistance",
    "direction": "direction",
}


def _load_config(args: argparse.Namespace) -> AppConfig | None:
    try:
        app_config = load_app_config(args.config)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]ERROR: Could not load config: {escape(str(e))}[/red]")
        return None

    configure_logging(app_config, level="DEBUG" if args.verbose else None)
    return app_config


def _load_document(path: Path) -> MemoryTimelineHost | None:
    if not path.exists():
        console.print(f"[red]ERROR: Composition not found: {path}[/red]")
        return None
    try:
        host = MemoryTimelineHost.load(path)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]ERROR: Could not read composition: {escape(str(e))}[/red]")
        return None
    logger.debug("Loaded composition from %s", path)
    return host


def run_edit(args: argparse.Namespace) -> int:
    """Apply an exit or enter transition to a composition document.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    app_config = _load_config(args)
    if app_config is None:
        return 1

    document_path = Path(args.document).resolve()
    host = _load_document(document_path)
    if host is None:
        return 1

    if args.select:
        try:
            host.select(*args.select)
        except KeyError as e:
            console.print(f"[red]ERROR: {escape(str(e.args[0]))}[/red]")
            return 1

    if args.at is not None:
        composition = host.active_composition()
        frame_rate = composition.frame_rate if composition is not None else None
        try:
            host.set_time(time_to_seconds(args.at, frame_rate))
        except ValueError as e:
            console.print(f"[red]ERROR: {escape(str(e))}[/red]")
            return 1

    params = {
        alias: getattr(args, option)
        for option, alias in _PARAM_OPTIONS.items()
        if getattr(args, option) is not None
    }

    kind = FadeKind.EXIT if args.cmd == "exit" else FadeKind.ENTER
    engine = TransitionEngine(host, app_config.engine)
    result = engine.apply(kind, params)

    if args.wire:
        console.print(result.to_wire(), markup=False, highlight=False, emoji=False, soft_wrap=True)
    else:
        for line in result.log:
            console.print(line, style="dim", markup=False, highlight=False, emoji=False)
        for alert in host.alerts:
            console.print(f"[yellow]⚠ {escape(alert)}[/yellow]")

    if not result.success:
        if not args.wire:
            console.print(f"[red]❌ {escape(result.error or '')}[/red]")
        return 1

    output_path = Path(args.out).resolve() if args.out else document_path
    host.save(output_path)
    if not args.wire:
        console.print(
            f"[green]✅ {kind.display_name} added to T{result.transition_number}[/green] "
            f"({result.mode.value if result.mode else 'unknown'}, driver: {result.driver_name})"
        )
        console.print(f"[green]📁 Saved to:[/green] {output_path}")
    return 0


def run_inspect(args: argparse.Namespace) -> int:
    """Print the controller's transitions as a table."""
    app_config = _load_config(args)
    if app_config is None:
        return 1

    host = _load_document(Path(args.document).resolve())
    if host is None:
        return 1

    summaries = describe_transitions(host, app_config.engine)
    if not summaries:
        console.print("[yellow]No transitions found[/yellow]")
        return 0

    table = Table(title=f"Transitions on '{app_config.engine.controller_name}'")
    table.add_column("#", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Direction")
    table.add_column("Drivers")
    table.add_column("Linked layers")

    for summary in summaries:
        drivers = "\n".join(
            f"{name} ({', '.join(k.display_name for k in kinds)})"
            for name, kinds in summary.drivers.items()
        )
        layers = "\n".join(
            f"{name}: {', '.join(names) or '-'}" for name, names in summary.linked_layers.items()
        )
        table.add_row(
            str(summary.transition.index),
            format_ms(summary.transition.start_time),
            format_ms(summary.transition.end_time),
            f"{summary.direction.glyph} {summary.direction.value}",
            drivers or "-",
            layers or "-",
        )

    console.print(table)
    return 0


def run_version(args: argparse.Namespace) -> int:
    console.print(f"TransitionKit {get_plugin_version()}")
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("document", help="Path to composition document (.json/.yaml)")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to app config (default: transitionkit.yaml if present)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def _add_edit_arguments(parser: argparse.ArgumentParser) -> None:
    _add_common_arguments(parser)
    parser.add_argument(
        "--select",
        nargs="+",
        metavar="LAYER",
        help="Layer names to select (default: selection stored in the document)",
    )
    parser.add_argument("--at", help="Playhead time, e.g. 1.5, 1500ms, 1.5s or 45f")
    parser.add_argument("--out", help="Output path (default: overwrite the document)")
    parser.add_argument("--wire", action="store_true", help="Print the raw result string")
    parser.add_argument("--fade-out-delay", help="Fade-out delay in ms (or with ms/s suffix)")
    parser.add_argument("--fade-out-duration", help="Fade-out duration in ms")
    parser.add_argument("--fade-in-delay", help="Fade-in delay in ms")
    parser.add_argument("--fade-in-duration", help="Fade-in duration in ms")
    parser.add_argument("--slide-distance", type=float, help="Slide distance in px at 786px width")
    parser.add_argument(
        "--direction",
        choices=["left", "right", "up", "down"],
        help="Slide direction for new transitions (default: left)",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="transitionkit",
        description="TransitionKit - slide and fade transitions for timeline compositions",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    exit_cmd = sub.add_parser("exit", help="Add an exit transition (fade-out)")
    _add_edit_arguments(exit_cmd)

    enter_cmd = sub.add_parser("enter", help="Add an enter transition (fade-in)")
    _add_edit_arguments(enter_cmd)

    inspect = sub.add_parser("inspect", help="List the controller's transitions")
    _add_common_arguments(inspect)

    sub.add_parser("version", help="Print the version")

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    if args.cmd in ("exit", "enter"):
        return run_edit(args)
    if args.cmd == "inspect":
        return run_inspect(args)
    return run_version(args)


if __name__ == "__main__":
    sys.exit(main())
