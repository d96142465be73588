"""Reconcile history: entry construction and bounded, newest-first recording."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from opmrelease.digests import DigestSet
from opmrelease.model import HistoryEntry

MAX_HISTORY_ENTRIES = 10
"""Maximum number of history entries retained in a status."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_success_entry(
    action: str, phase: str, digests: DigestSet, inventory_count: int
) -> HistoryEntry:
    """Build a history entry for a successful reconcile action."""
    now = _now()
    return HistoryEntry(
        action=action,
        phase=phase,
        started_at=now,
        finished_at=now,
        source_digest=digests.source,
        config_digest=digests.config,
        render_digest=digests.render,
        inventory_digest=digests.inventory,
        inventory_count=inventory_count,
    )


def new_failure_entry(action: str, message: str, digests: DigestSet) -> HistoryEntry:
    """Build a history entry for a failed reconcile attempt.

    Digests may be partially filled, depending on which phase failed.
    """
    now = _now()
    return HistoryEntry(
        action=action,
        started_at=now,
        finished_at=now,
        source_digest=digests.source,
        config_digest=digests.config,
        render_digest=digests.render,
        inventory_digest=digests.inventory,
        message=message,
    )


def next_sequence(history: Iterable[HistoryEntry] | None) -> int:
    """Return one more than the highest sequence in history, or 1 if it is empty."""
    return max((entry.sequence for entry in history or ()), default=0) + 1


def record_history(status: Any, entry: HistoryEntry) -> HistoryEntry:
    """Prepend entry to status.history with the next sequence and trim the list.

    The newest entry ends up first; at most MAX_HISTORY_ENTRIES are kept.
    Returns the entry as recorded.
    """
    recorded = dataclasses.replace(entry, sequence=next_sequence(status.history))
    status.history.insert(0, recorded)
    del status.history[MAX_HISTORY_ENTRIES:]
    return recorded