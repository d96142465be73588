"""Release status records: history entries and the status they live in."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from opmrelease.conditions import ConditionSet
from opmrelease.counters import FailureCounters


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded reconcile attempt."""

    action: str = ""
    phase: str = ""
    started_at: datetime | None = None
    finished_at: datetime | None = None
    source_digest: str = ""
    config_digest: str = ""
    render_digest: str = ""
    inventory_digest: str = ""
    inventory_count: int = 0
    message: str = ""
    sequence: int = 0


@dataclass
class ReleaseStatus:
    """Observed state of a release."""

    conditions: ConditionSet = field(default_factory=ConditionSet)
    history: list[HistoryEntry] = field(default_factory=list)
    failure_counters: FailureCounters | None = None