"""Turn utilization percentages into a health verdict."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet


THRESHOLD = 60.0


class Metric(Enum):
    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"


class HealthVerdict(Enum):
    HEALTHY = "Healthy"
    UNHEALTHY = "Unhealthy"


@dataclass(frozen=True)
class Evaluation:
    verdict: HealthVerdict
    exceeding: FrozenSet[Metric]
    threshold: float = THRESHOLD

    @property
    def healthy(self) -> bool:
        return self.verdict is HealthVerdict.HEALTHY


def evaluate(cpu: float, mem: float, disk: float, threshold: float = THRESHOLD) -> Evaluation:
    """Unhealthy if any metric is strictly above ``threshold``; equal counts as healthy."""
    readings = {Metric.CPU: cpu, Metric.MEMORY: mem, Metric.DISK: disk}
    exceeding = frozenset(metric for metric, value in readings.items() if value > threshold)
    verdict = HealthVerdict.UNHEALTHY if exceeding else HealthVerdict.HEALTHY
    return Evaluation(verdict=verdict, exceeding=exceeding, threshold=threshold)
