from types import SimpleNamespace

import pytest

from models.feature import FeatureStatus
from services.status_service import (
    ProjectStatus,
    classify,
    count_open_features,
    is_scope_locked,
    sort_by_status,
    status_precedence,
)


def _features(*statuses):
    return [{"status": status} for status in statuses]


@pytest.mark.parametrize("limit", [1, 2, 3, 10])
def test_no_features_is_planning(limit):
    assert classify([], limit) == ProjectStatus.PLANNING


@pytest.mark.parametrize("limit", [1, 2, 5])
def test_all_done_is_completed_regardless_of_limit(limit):
    assert classify(_features("done", "done", "done"), limit) == ProjectStatus.COMPLETED


def test_open_count_reaching_limit_is_blocked():
    assert classify(_features("planned", "in_progress"), 2) == ProjectStatus.BLOCKED
    assert classify(_features("planned", "in_progress", "planned"), 2) == ProjectStatus.BLOCKED


def test_open_count_below_limit_is_in_progress():
    assert classify(_features("planned", "done", "done"), 2) == ProjectStatus.IN_PROGRESS


def test_concrete_scenarios():
    assert classify([], 3) == ProjectStatus.PLANNING
    assert classify(_features("done"), 3) == ProjectStatus.COMPLETED
    assert classify(_features("planned"), 1) == ProjectStatus.BLOCKED
    assert classify(_features("planned", "in_progress"), 3) == ProjectStatus.IN_PROGRESS
    assert classify(_features("done", "planned"), 1) == ProjectStatus.BLOCKED


def test_classify_is_idempotent():
    features = _features("planned", "done")
    assert classify(features, 2) == classify(features, 2)
    assert features == _features("planned", "done")


@pytest.mark.parametrize("features", [None, "done", 42, {"status": "planned"}])
def test_invalid_features_are_treated_as_empty(features):
    assert classify(features, 3) == ProjectStatus.PLANNING


@pytest.mark.parametrize("limit", [None, 0, -4, "not a number", True, "3", 2.5])
def test_invalid_limit_is_clamped_to_one(limit):
    assert classify(_features("planned"), limit) == ProjectStatus.BLOCKED
    assert is_scope_locked(_features("planned"), limit)


def test_accepts_objects_and_enum_statuses():
    features = [
        SimpleNamespace(status=FeatureStatus.DONE),
        SimpleNamespace(status=FeatureStatus.IN_PROGRESS),
    ]
    assert count_open_features(features) == 1
    assert classify(features, 2) == ProjectStatus.IN_PROGRESS
    assert classify(iter(features), 1) == ProjectStatus.BLOCKED


def test_status_values_match_display_names():
    assert [str(status) for status in ProjectStatus] == [
        "Planning",
        "In Progress",
        "Blocked",
        "Completed",
    ]


def test_numeric_strings_and_floats_are_not_limits():
    two_open = _features("planned", "in_progress")
    assert classify(two_open, "3") == ProjectStatus.BLOCKED
    assert classify(two_open, 2.5) == ProjectStatus.BLOCKED
    assert classify(two_open, 3) == ProjectStatus.IN_PROGRESS


def test_scope_lock_threshold_is_inclusive():
    assert not is_scope_locked(_features("planned"), 2)
    assert is_scope_locked(_features("planned", "planned"), 2)
    assert not is_scope_locked(_features("planned", "done"), 2)
    assert not is_scope_locked([], 1)


def test_sort_by_status_orders_blocked_first():
    statuses = [
        ProjectStatus.COMPLETED,
        ProjectStatus.BLOCKED,
        ProjectStatus.IN_PROGRESS,
        ProjectStatus.PLANNING,
    ]
    assert sort_by_status(statuses) == [
        ProjectStatus.BLOCKED,
        ProjectStatus.IN_PROGRESS,
        ProjectStatus.PLANNING,
        ProjectStatus.COMPLETED,
    ]


def test_sort_by_status_is_stable():
    items = [
        ("newest", "Completed"),
        ("second", "Blocked"),
        ("third", "Completed"),
        ("oldest", "Blocked"),
    ]
    ordered = sort_by_status(items, key=lambda item: item[1])
    assert [name for name, _ in ordered] == ["second", "oldest", "newest", "third"]


def test_status_precedence_accepts_plain_strings():
    assert status_precedence("Blocked") == 0
    assert status_precedence(ProjectStatus.COMPLETED) == 3
