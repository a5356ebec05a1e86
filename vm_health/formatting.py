"""Console-friendly rendering of a health verdict."""

from __future__ import annotations

import json
from typing import AbstractSet, Any, Dict, List, Tuple

from .diagnostics import THRESHOLD, Evaluation, HealthVerdict, Metric
from .system_state import ROOT_MOUNT, UtilizationSnapshot

EXIT_HEALTHY = 0
EXIT_UNHEALTHY = 1
EXIT_PROBE_FAILURE = 2

METRIC_ORDER = (Metric.CPU, Metric.MEMORY, Metric.DISK)


def exit_code_for(verdict: HealthVerdict) -> int:
    return EXIT_HEALTHY if verdict is HealthVerdict.HEALTHY else EXIT_UNHEALTHY


def format_threshold(threshold: float) -> str:
    return f"{threshold:g}"


def format_percent(value: float) -> str:
    return f"{value:6.2f}%"


def metric_label(metric: Metric, mount_point: str = ROOT_MOUNT) -> str:
    labels = {
        Metric.CPU: "CPU utilization",
        Metric.MEMORY: "Memory utilization",
        Metric.DISK: f"Disk ({mount_point}) used",
    }
    return labels[metric]


def exceeded_message(metric: Metric, threshold: float, mount_point: str = ROOT_MOUNT) -> str:
    limit = format_threshold(threshold)
    if metric is Metric.DISK:
        return f"Disk usage ({mount_point}) is above {limit}%"
    return f"{metric_label(metric)} is above {limit}%"


def render(
    verdict: HealthVerdict,
    cpu: float,
    mem: float,
    disk: float,
    exceeding: AbstractSet[Metric],
    explain: bool,
    threshold: float = THRESHOLD,
    mount_point: str = ROOT_MOUNT,
) -> Tuple[str, int]:
    """Return the report text and the process exit code for a verdict."""
    lines = [f"VM Health: {verdict.value}"]
    if explain:
        lines.extend(_explain_lines(verdict, {Metric.CPU: cpu, Metric.MEMORY: mem, Metric.DISK: disk},
                                    exceeding, threshold, mount_point))
    return "\n".join(lines), exit_code_for(verdict)


def render_snapshot(snapshot: UtilizationSnapshot, evaluation: Evaluation, explain: bool) -> Tuple[str, int]:
    return render(
        evaluation.verdict,
        snapshot.cpu_percent,
        snapshot.memory_percent,
        snapshot.disk_percent,
        evaluation.exceeding,
        explain,
        threshold=evaluation.threshold,
        mount_point=snapshot.mount_point,
    )


def to_json(snapshot: UtilizationSnapshot, evaluation: Evaluation) -> str:
    payload: Dict[str, Any] = {
        "timestamp": snapshot.timestamp.isoformat(),
        "mount_point": snapshot.mount_point,
        "metrics": {
            Metric.CPU.value: snapshot.cpu_percent,
            Metric.MEMORY.value: snapshot.memory_percent,
            Metric.DISK.value: snapshot.disk_percent,
        },
        "threshold": evaluation.threshold,
        "verdict": evaluation.verdict.value,
        "exceeding": [metric.value for metric in METRIC_ORDER if metric in evaluation.exceeding],
        "exit_code": exit_code_for(evaluation.verdict),
    }
    return json.dumps(payload, indent=2)


def _explain_lines(
    verdict: HealthVerdict,
    values: Dict[Metric, float],
    exceeding: AbstractSet[Metric],
    threshold: float,
    mount_point: str,
) -> List[str]:
    limit = format_threshold(threshold)
    suffix = "" if verdict is HealthVerdict.UNHEALTHY else f" (below or equal to {limit}%)"
    width = max(len(metric_label(metric, mount_point)) for metric in METRIC_ORDER) + 1

    lines = [f"Explanation (threshold > {limit}% = unhealthy):"]
    for metric in METRIC_ORDER:
        label = f"{metric_label(metric, mount_point)}:".ljust(width)
        lines.append(f"  {label}{format_percent(values[metric])}{suffix}")
    lines.append("")

    if verdict is HealthVerdict.UNHEALTHY:
        lines.append(f"  Metric(s) exceeding {limit}% (cause of 'Unhealthy'):")
        for metric in METRIC_ORDER:
            if metric in exceeding:
                lines.append(f"    - {exceeded_message(metric, threshold, mount_point)}")
    else:
        lines.append("  All metrics are at or below the threshold => VM declared Healthy.")
    return lines
