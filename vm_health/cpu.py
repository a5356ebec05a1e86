"""Sample whole-system CPU utilization from the kernel's cumulative time counters."""

from __future__ import annotations

import logging
import time
from typing import Callable, NamedTuple, Optional

from .errors import DataUnavailable
from .units import clamp_percent, percent_of, round_percent

logger = logging.getLogger(__name__)

PROC_STAT = "/proc/stat"
DEFAULT_INTERVAL = 0.5
COUNTER_FIELDS = 10


class CounterSnapshot(NamedTuple):
    """Cumulative time-in-state counters of the aggregate ``cpu`` line, in jiffies."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int
    guest: int
    guest_nice: int

    @property
    def idle_time(self) -> int:
        # iowait counts as not doing useful work
        return self.idle + self.iowait

    @property
    def total_time(self) -> int:
        return sum(self)


def parse_counter_line(line: str) -> CounterSnapshot:
    """Parse the ten counters that follow the ``cpu`` label."""
    fields = line.split()
    if not fields or fields[0] != "cpu":
        raise DataUnavailable("cpu", f"not an aggregate cpu line: {line.strip()!r}")
    values = fields[1 : COUNTER_FIELDS + 1]
    if len(values) < COUNTER_FIELDS:
        raise DataUnavailable("cpu", f"expected {COUNTER_FIELDS} counters, found {len(values)}")
    try:
        counters = [int(value) for value in values]
    except ValueError as exc:
        raise DataUnavailable("cpu", f"non-numeric counter in {line.strip()!r}") from exc
    if any(counter < 0 for counter in counters):
        raise DataUnavailable("cpu", f"negative counter in {line.strip()!r}")
    return CounterSnapshot(*counters)


def read_counter_snapshot(path: Optional[str] = None) -> CounterSnapshot:
    path = path or PROC_STAT
    try:
        with open(path, "r", encoding="ascii") as stat:
            for line in stat:
                if line.startswith("cpu "):
                    return parse_counter_line(line)
    except (OSError, UnicodeDecodeError) as exc:
        raise DataUnavailable("cpu", f"cannot read {path}: {exc}") from exc
    raise DataUnavailable("cpu", f"no aggregate cpu line in {path}")


def cpu_utilization_between(before: CounterSnapshot, after: CounterSnapshot) -> float:
    """Derive utilization from two snapshots taken some time apart.

    A zero total delta means the counters did not advance, which is reported
    as 0.0 rather than an error. A negative delta (counter reset or wraparound)
    is treated the same way.
    """
    delta_idle = after.idle_time - before.idle_time
    delta_total = after.total_time - before.total_time

    if delta_total == 0:
        logger.debug("CPU counters did not advance between snapshots, reporting 0%")
        return 0.0
    if delta_total < 0:
        logger.warning("CPU counters went backwards (delta %d), reporting 0%%", delta_total)
        return 0.0

    busy = clamp_percent(percent_of(delta_total - delta_idle, delta_total))
    return round_percent(busy)


def sample_cpu_utilization(
    interval: float = DEFAULT_INTERVAL,
    read_snapshot: Callable[[], CounterSnapshot] = read_counter_snapshot,
    sleep: Callable[[float], None] = time.sleep,
) -> float:
    """Take two counter snapshots ``interval`` seconds apart and return busy percent."""
    if interval < 0:
        raise ValueError(f"interval must be non-negative, got {interval}")

    before = read_snapshot()
    sleep(interval)
    after = read_snapshot()

    percent = cpu_utilization_between(before, after)
    logger.debug("CPU sample over %.2fs: %s -> %s = %.2f%%", interval, before, after, percent)
    return percent
