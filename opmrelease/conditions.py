"""Release status conditions and the helpers that move a release between states."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone

# Condition types.
READY_CONDITION = "Ready"
RECONCILING_CONDITION = "Reconciling"
STALLED_CONDITION = "Stalled"
MODULE_RESOLVED_CONDITION = "ModuleResolved"
DRIFTED_CONDITION = "Drifted"

# Condition reasons.
SUSPENDED_REASON = "Suspended"
RESOLUTION_FAILED_REASON = "ResolutionFailed"
RENDER_FAILED_REASON = "RenderFailed"
APPLY_FAILED_REASON = "ApplyFailed"
PRUNE_FAILED_REASON = "PruneFailed"
IMPERSONATION_FAILED_REASON = "ImpersonationFailed"
DELETION_SA_MISSING_REASON = "DeletionSAMissing"
ORPHANED_ON_DELETION_REASON = "OrphanedOnDeletion"
RECONCILIATION_SUCCEEDED_REASON = "ReconciliationSucceeded"
DRIFT_DETECTED_REASON = "DriftDetected"

# Release-specific reasons.
SOURCE_NOT_READY_REASON = "SourceNotReady"
FETCH_FAILED_REASON = "FetchFailed"
PATH_NOT_FOUND_REASON = "PathNotFound"
RELEASE_FILE_NOT_FOUND_REASON = "ReleaseFileNotFound"
UNSUPPORTED_KIND_REASON = "UnsupportedKind"
DEPENDENCIES_NOT_READY_REASON = "DependenciesNotReady"

# Event-only reasons (no corresponding condition).
APPLIED_REASON = "Applied"
PRUNED_REASON = "Pruned"
RESUMED_REASON = "Resumed"
NO_OP_REASON = "NoOp"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ConditionStatus(str, enum.Enum):
    """Tri-state value of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Condition:
    """One observed aspect of a release's state."""

    type: str
    status: ConditionStatus
    reason: str
    message: str
    last_transition_time: datetime = field(default_factory=_now)


class ConditionSet:
    """An ordered collection of conditions keyed by type."""

    def __init__(self, conditions: Iterable[Condition] = ()) -> None:
        self._conditions: dict[str, Condition] = {c.type: c for c in conditions}

    def __iter__(self) -> Iterator[Condition]:
        return iter(list(self._conditions.values()))

    def __len__(self) -> int:
        return len(self._conditions)

    def __contains__(self, condition_type: object) -> bool:
        return condition_type in self._conditions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConditionSet):
            return NotImplemented
        return list(self) == list(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConditionSet({list(self._conditions.values())!r})"

    def get(self, condition_type: str) -> Condition | None:
        """Return the condition of the given type, or None."""
        return self._conditions.get(condition_type)

    def has(self, condition_type: str) -> bool:
        return condition_type in self._conditions

    def _status_is(self, condition_type: str, status: ConditionStatus) -> bool:
        condition = self._conditions.get(condition_type)
        return condition is not None and condition.status is status

    def is_true(self, condition_type: str) -> bool:
        return self._status_is(condition_type, ConditionStatus.TRUE)

    def is_false(self, condition_type: str) -> bool:
        return self._status_is(condition_type, ConditionStatus.FALSE)

    def is_unknown(self, condition_type: str) -> bool:
        return self._status_is(condition_type, ConditionStatus.UNKNOWN)

    def set(
        self,
        condition_type: str,
        status: ConditionStatus,
        reason: str,
        message: str,
    ) -> Condition:
        """Set a condition, keeping its transition time if the status is unchanged."""
        status = ConditionStatus(status)
        previous = self._conditions.get(condition_type)
        if previous is not None and previous.status is status:
            transition = previous.last_transition_time
        else:
            transition = _now()
        condition = Condition(condition_type, status, reason, message, transition)
        self._conditions[condition_type] = condition
        return condition

    def delete(self, condition_type: str) -> None:
        """Remove a condition; removing an absent one is not an error."""
        self._conditions.pop(condition_type, None)


def _format(message_format: str, args: tuple) -> str:
    return message_format % args if args else message_format


def mark_reconciling(
    conditions: ConditionSet, reason: str, message_format: str, *args: object
) -> None:
    """Set Reconciling=True, remove Stalled, and set Ready=Unknown."""
    message = _format(message_format, args)
    conditions.set(RECONCILING_CONDITION, ConditionStatus.TRUE, reason, message)
    conditions.delete(STALLED_CONDITION)
    conditions.set(READY_CONDITION, ConditionStatus.UNKNOWN, reason, message)


def mark_stalled(
    conditions: ConditionSet, reason: str, message_format: str, *args: object
) -> None:
    """Set Stalled=True, remove Reconciling, and set Ready=False."""
    message = _format(message_format, args)
    conditions.set(STALLED_CONDITION, ConditionStatus.TRUE, reason, message)
    conditions.delete(RECONCILING_CONDITION)
    conditions.set(READY_CONDITION, ConditionStatus.FALSE, reason, message)


def mark_ready(conditions: ConditionSet, message_format: str, *args: object) -> None:
    """Set Ready=True and remove Reconciling and Stalled."""
    conditions.delete(RECONCILING_CONDITION)
    conditions.delete(STALLED_CONDITION)
    conditions.set(
        READY_CONDITION,
        ConditionStatus.TRUE,
        RECONCILIATION_SUCCEEDED_REASON,
        _format(message_format, args),
    )


def mark_suspended(conditions: ConditionSet) -> None:
    """Set Ready=False with reason Suspended and remove Reconciling and Stalled."""
    conditions.delete(RECONCILING_CONDITION)
    conditions.delete(STALLED_CONDITION)
    conditions.set(
        READY_CONDITION,
        ConditionStatus.FALSE,
        SUSPENDED_REASON,
        "Reconciliation is suspended",
    )


def mark_not_ready(
    conditions: ConditionSet, reason: str, message_format: str, *args: object
) -> None:
    """Set Ready=False with the given reason and message."""
    conditions.set(
        READY_CONDITION, ConditionStatus.FALSE, reason, _format(message_format, args)
    )


def mark_drifted(conditions: ConditionSet, count: int) -> None:
    """Set Drifted=True; drift is informational and leaves Ready alone."""
    conditions.set(
        DRIFTED_CONDITION,
        ConditionStatus.TRUE,
        DRIFT_DETECTED_REASON,
        "%d resource(s) drifted from desired state" % count,
    )


def clear_drifted(conditions: ConditionSet) -> None:
    """Remove the Drifted condition."""
    conditions.delete(DRIFTED_CONDITION)


def mark_module_resolved(conditions: ConditionSet, module_ref: str) -> None:
    """Set ModuleResolved=True for a module resolved from the registry."""
    conditions.set(
        MODULE_RESOLVED_CONDITION,
        ConditionStatus.TRUE,
        "ModuleResolved",
        "module resolved: %s" % module_ref,
    )