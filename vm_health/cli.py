"""Entry point for the vm-health command line tool."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .cpu import DEFAULT_INTERVAL
from .diagnostics import THRESHOLD, Evaluation, Metric, evaluate
from .errors import ProbeFailure
from .formatting import (
    EXIT_HEALTHY,
    EXIT_PROBE_FAILURE,
    EXIT_UNHEALTHY,
    METRIC_ORDER,
    exceeded_message,
    exit_code_for,
    format_threshold,
    metric_label,
    render_snapshot,
    to_json,
)
from .system_state import UtilizationSnapshot, gather_snapshot

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)
    if args.mode not in (None, "explain"):
        logger.warning("Ignoring unknown argument %r", args.mode)

    try:
        snapshot = gather_snapshot(interval=args.interval)
    except ProbeFailure as exc:
        for failure in exc.failures:
            print(f"vm-health: {failure}", file=sys.stderr)
        logger.debug("Aborting without a verdict: %s", exc)
        return EXIT_PROBE_FAILURE

    evaluation = evaluate(
        snapshot.cpu_percent, snapshot.memory_percent, snapshot.disk_percent, threshold=THRESHOLD
    )
    logger.debug("Verdict %s, exceeding %s", evaluation.verdict.value, sorted(m.value for m in evaluation.exceeding))

    if args.json:
        print(to_json(snapshot, evaluation))
        return exit_code_for(evaluation.verdict)

    if args.ui:
        _render_rich(snapshot, evaluation, explain=args.mode == "explain")
        return exit_code_for(evaluation.verdict)

    text, exit_code = render_snapshot(snapshot, evaluation, explain=args.mode == "explain")
    print(text)
    return exit_code


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vm-health",
        description="Report whether this host is healthy based on CPU, memory and root disk utilization.",
        epilog=(
            f"exit status: {EXIT_HEALTHY} healthy, {EXIT_UNHEALTHY} unhealthy, "
            f"{EXIT_PROBE_FAILURE} probe failure or invalid option"
        ),
    )
    parser.add_argument(
        "mode", nargs="?", help="pass 'explain' to also print the per-metric breakdown; other values are ignored"
    )
    parser.add_argument(
        "--interval",
        type=_non_negative_float,
        default=DEFAULT_INTERVAL,
        help="seconds between the two CPU counter snapshots (default: %(default)s)",
    )
    parser.add_argument("--json", action="store_true", help="print the readings and verdict as JSON")
    parser.add_argument("--ui", action="store_true", help="render the result with Rich styling")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug details to stderr")
    return parser.parse_args(argv)


def _non_negative_float(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value!r}")
    return seconds


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _render_rich(snapshot: UtilizationSnapshot, evaluation: Evaluation, explain: bool) -> None:
    console = Console()
    style = "bold green" if evaluation.healthy else "bold red"
    console.print(Panel(f"VM Health: {evaluation.verdict.value}", style=style))
    if not explain:
        return

    limit = format_threshold(evaluation.threshold)
    values = {
        Metric.CPU: snapshot.cpu_percent,
        Metric.MEMORY: snapshot.memory_percent,
        Metric.DISK: snapshot.disk_percent,
    }
    table = Table(title=f"Threshold {limit}% - {snapshot.timestamp:%Y-%m-%d %H:%M:%S}", box=box.SIMPLE_HEAD)
    table.add_column("Metric", style="bold")
    table.add_column("Used", justify="right")
    table.add_column("Status")
    for metric in METRIC_ORDER:
        over = metric in evaluation.exceeding
        table.add_row(
            metric_label(metric, snapshot.mount_point),
            f"{values[metric]:.2f}%",
            "[red]above threshold[/red]" if over else "[green]ok[/green]",
        )
    console.print(table)

    if evaluation.exceeding:
        for metric in METRIC_ORDER:
            if metric in evaluation.exceeding:
                console.print(f"- {exceeded_message(metric, evaluation.threshold, snapshot.mount_point)}", markup=False)
    else:
        console.print("All metrics are at or below the threshold.", style="green")


if __name__ == "__main__":
    sys.exit(main())
