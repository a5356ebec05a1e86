"""Failures raised when a data source cannot be read."""

from __future__ import annotations

from typing import Sequence


class DataUnavailable(RuntimeError):
    """A required data source is missing, unreadable or unparsable."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source} data unavailable: {reason}")
        self.source = source
        self.reason = reason


class ProbeFailure(RuntimeError):
    """One or more readers failed, so no verdict can be produced."""

    def __init__(self, failures: Sequence[DataUnavailable]) -> None:
        self.failures = list(failures)
        sources = ", ".join(failure.source for failure in self.failures)
        super().__init__(f"probe failed, unavailable sources: {sources}")

    @property
    def sources(self) -> list[str]:
        return [failure.source for failure in self.failures]
