import pytest

from opmrelease.conditions import (
    APPLY_FAILED_REASON,
    DRIFT_DETECTED_REASON,
    DRIFTED_CONDITION,
    MODULE_RESOLVED_CONDITION,
    READY_CONDITION,
    RECONCILIATION_SUCCEEDED_REASON,
    RECONCILING_CONDITION,
    RENDER_FAILED_REASON,
    STALLED_CONDITION,
    SUSPENDED_REASON,
    ConditionSet,
    ConditionStatus,
    clear_drifted,
    mark_drifted,
    mark_module_resolved,
    mark_not_ready,
    mark_ready,
    mark_reconciling,
    mark_stalled,
    mark_suspended,
)


@pytest.fixture
def conditions():
    return ConditionSet()


def test_mark_reconciling(conditions):
    mark_reconciling(conditions, SUSPENDED_REASON, "starting reconciliation")
    assert conditions.is_true(RECONCILING_CONDITION)
    assert conditions.is_unknown(READY_CONDITION)
    assert not conditions.has(STALLED_CONDITION)


def test_mark_reconciling_removes_stalled(conditions):
    mark_stalled(conditions, RENDER_FAILED_REASON, "render error")
    assert conditions.has(STALLED_CONDITION)
    mark_reconciling(conditions, SUSPENDED_REASON, "retrying")
    assert not conditions.has(STALLED_CONDITION)
    assert conditions.is_true(RECONCILING_CONDITION)


def test_mark_stalled(conditions):
    mark_stalled(conditions, RENDER_FAILED_REASON, "render error")
    assert conditions.is_true(STALLED_CONDITION)
    assert conditions.is_false(READY_CONDITION)
    assert not conditions.has(RECONCILING_CONDITION)


def test_mark_stalled_removes_reconciling(conditions):
    mark_reconciling(conditions, SUSPENDED_REASON, "working")
    assert conditions.has(RECONCILING_CONDITION)
    mark_stalled(conditions, APPLY_FAILED_REASON, "apply error")
    assert not conditions.has(RECONCILING_CONDITION)
    assert conditions.is_true(STALLED_CONDITION)


def test_mark_ready(conditions):
    mark_reconciling(conditions, SUSPENDED_REASON, "working")
    mark_ready(conditions, "all resources applied")
    assert conditions.is_true(READY_CONDITION)
    assert not conditions.has(RECONCILING_CONDITION)
    assert not conditions.has(STALLED_CONDITION)
    assert conditions.get(READY_CONDITION).reason == RECONCILIATION_SUCCEEDED_REASON
    assert conditions.get("Ready").message == "all resources applied"


def test_mark_suspended(conditions):
    mark_reconciling(conditions, "Progressing", "working")
    mark_stalled(conditions, RENDER_FAILED_REASON, "render error")
    mark_suspended(conditions)
    assert conditions.is_false(READY_CONDITION)
    ready = conditions.get(READY_CONDITION)
    assert ready.reason == SUSPENDED_REASON
    assert ready.message == "Reconciliation is suspended"
    assert not conditions.has(RECONCILING_CONDITION)
    assert not conditions.has(STALLED_CONDITION)


def test_mark_not_ready(conditions):
    mark_not_ready(conditions, RENDER_FAILED_REASON, "render failed: invalid values")
    assert conditions.is_false(READY_CONDITION)
    ready = conditions.get(READY_CONDITION)
    assert ready.reason == RENDER_FAILED_REASON
    assert ready.message == "render failed: invalid values"


def test_mark_not_ready_formats_arguments(conditions):
    mark_not_ready(conditions, RENDER_FAILED_REASON, "render failed: %s", "boom")
    assert conditions.get(READY_CONDITION).message == "render failed: boom"


def test_mark_module_resolved(conditions):
    mark_module_resolved(conditions, "opmodel.dev/modules/hello@v0@v0.1.0")
    assert conditions.is_true(MODULE_RESOLVED_CONDITION)
    assert "opmodel.dev/modules/hello@v0@v0.1.0" in conditions.get(
        MODULE_RESOLVED_CONDITION
    ).message


def test_mark_module_resolved_overwrite(conditions):
    conditions.set(
        MODULE_RESOLVED_CONDITION, ConditionStatus.FALSE, "Failed", "initial failure"
    )
    assert conditions.is_false(MODULE_RESOLVED_CONDITION)
    mark_module_resolved(conditions, "opmodel.dev/test@v0@v0.2.0")
    assert conditions.is_true(MODULE_RESOLVED_CONDITION)


def test_mark_drifted_leaves_ready(conditions):
    mark_ready(conditions, "ok")
    mark_drifted(conditions, 3)
    drifted = conditions.get(DRIFTED_CONDITION)
    assert drifted.status is ConditionStatus.TRUE
    assert drifted.reason == DRIFT_DETECTED_REASON
    assert drifted.message == "3 resource(s) drifted from desired state"
    assert conditions.is_true(READY_CONDITION)


def test_clear_drifted(conditions):
    mark_drifted(conditions, 1)
    clear_drifted(conditions)
    assert not conditions.has(DRIFTED_CONDITION)


def test_transition_time_kept_when_status_unchanged(conditions):
    first = conditions.set("X", ConditionStatus.TRUE, "A", "one")
    second = conditions.set("X", ConditionStatus.TRUE, "B", "two")
    assert second.last_transition_time == first.last_transition_time
    assert conditions.get("X").reason == "B"


def test_transition_time_moves_on_status_change(conditions):
    first = conditions.set("X", ConditionStatus.TRUE, "A", "one")
    second = conditions.set("X", ConditionStatus.FALSE, "A", "one")
    assert second.last_transition_time >= first.last_transition_time
    assert conditions.is_false("X")


def test_get_missing_and_delete_missing(conditions):
    conditions.delete("Missing")
    assert conditions.get("Missing") is None
    assert not conditions.is_true("Missing")
    assert len(conditions) == 0


def test_set_accepts_string_status(conditions):
    conditions.set("X", "Unknown", "R", "m")
    assert conditions.is_unknown("X")