"""Collect the memory, disk and CPU utilization figures a health verdict is based on."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import math
from typing import List, Optional

import psutil

from .cpu import DEFAULT_INTERVAL, sample_cpu_utilization
from .errors import DataUnavailable, ProbeFailure
from .units import percent_of, round_percent

logger = logging.getLogger(__name__)

ROOT_MOUNT = "/"


@dataclass(frozen=True)
class UtilizationSnapshot:
    timestamp: datetime
    cpu_percent: float
    memory_percent: float
    disk_percent: float
    mount_point: str = ROOT_MOUNT


def read_memory_utilization() -> float:
    """Return used memory as a percentage, counting reclaimable cache as available."""
    try:
        memory = psutil.virtual_memory()
        total, available = int(memory.total), int(memory.available)
    except (OSError, RuntimeError, AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DataUnavailable("memory", str(exc) or type(exc).__name__) from exc

    if total <= 0:
        logger.debug("Memory total reported as %d, reporting 0%%", total)
        return 0.0
    percent = round_percent(percent_of(total - available, total))
    logger.debug("Memory: total=%d available=%d -> %.2f%%", total, available, percent)
    return percent


def read_disk_utilization(mount_point: str = ROOT_MOUNT) -> float:
    """Return the ``df -P`` style Use% of the filesystem mounted at ``mount_point``."""
    try:
        usage = psutil.disk_usage(mount_point)
        used, free = int(usage.used), int(usage.free)
    except (OSError, AttributeError, TypeError, ValueError) as exc:
        raise DataUnavailable("disk", f"{mount_point}: {exc}") from exc

    capacity = used + free
    if capacity <= 0:
        logger.debug("Filesystem at %s reports no capacity, reporting 0%%", mount_point)
        return 0.0
    # df rounds the used share up to the next whole percent
    percent = round_percent(math.ceil(percent_of(used, capacity)))
    logger.debug("Disk %s: used=%d free=%d -> %.2f%%", mount_point, used, free, percent)
    return percent


def gather_snapshot(interval: float = DEFAULT_INTERVAL, mount_point: Optional[str] = None) -> UtilizationSnapshot:
    """Run every reader once; raise ``ProbeFailure`` naming all sources that failed."""
    mount_point = mount_point or ROOT_MOUNT
    failures: List[DataUnavailable] = []
    cpu_percent = memory_percent = disk_percent = 0.0

    try:
        cpu_percent = sample_cpu_utilization(interval)
    except DataUnavailable as exc:
        failures.append(exc)
    try:
        memory_percent = read_memory_utilization()
    except DataUnavailable as exc:
        failures.append(exc)
    try:
        disk_percent = read_disk_utilization(mount_point)
    except DataUnavailable as exc:
        failures.append(exc)

    if failures:
        raise ProbeFailure(failures)

    return UtilizationSnapshot(
        timestamp=datetime.now(),
        cpu_percent=cpu_percent,
        memory_percent=memory_percent,
        disk_percent=disk_percent,
        mount_point=mount_point,
    )
