"""Failure counters tracked in a release status."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class CounterField(str, enum.Enum):
    """Names of the failure counters."""

    RECONCILE = "reconcile"
    APPLY = "apply"
    PRUNE = "prune"
    DRIFT = "drift"


@dataclass
class FailureCounters:
    """Consecutive failure counts per reconcile phase."""

    reconcile: int = 0
    apply: int = 0
    prune: int = 0
    drift: int = 0

    @staticmethod
    def _attribute(field: str) -> str | None:
        try:
            return CounterField(field).value
        except ValueError:
            return None

    def increment(self, field: str) -> None:
        """Add one to the named counter; unknown names are ignored."""
        name = self._attribute(field)
        if name is not None:
            setattr(self, name, getattr(self, name) + 1)

    def reset(self, field: str) -> None:
        """Set the named counter to zero; unknown names are ignored."""
        name = self._attribute(field)
        if name is not None:
            setattr(self, name, 0)


def ensure_counters(status: Any) -> FailureCounters:
    """Give status a FailureCounters if it has none and return it."""
    if status.failure_counters is None:
        status.failure_counters = FailureCounters()
    return status.failure_counters