"""Project status classification.

A project's status is never stored. It is derived on every read from the
project's features and its feature limit:

* Planning: the project has no features
* Completed: every feature is done
* Blocked: open features >= feature limit (the ScopeLock threshold)
* In Progress: anything else
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any, Callable, TypeVar

from models.feature import FeatureStatus

T = TypeVar("T")


class ProjectStatus(StrEnum):
    """Derived status of a project."""

    PLANNING = "Planning"
    IN_PROGRESS = "In Progress"
    BLOCKED = "Blocked"
    COMPLETED = "Completed"


STATUS_PRECEDENCE: dict[ProjectStatus, int] = {
    ProjectStatus.BLOCKED: 0,
    ProjectStatus.IN_PROGRESS: 1,
    ProjectStatus.PLANNING: 2,
    ProjectStatus.COMPLETED: 3,
}


def _normalize_features(features: Any) -> list[Any]:
    if features is None or isinstance(features, (str, bytes, Mapping)):
        return []
    if not isinstance(features, Iterable):
        return []
    return list(features)


def _normalize_limit(feature_limit: Any) -> int:
    if not isinstance(feature_limit, int) or isinstance(feature_limit, bool):
        return 1
    return max(feature_limit, 1)


def _feature_status(feature: Any) -> Any:
    if isinstance(feature, Mapping):
        return feature.get("status")
    return getattr(feature, "status", None)


def count_open_features(features: Any) -> int:
    """Return how many features are not done."""
    return sum(
        1
        for feature in _normalize_features(features)
        if _feature_status(feature) != FeatureStatus.DONE
    )


def classify(features: Any, feature_limit: Any) -> ProjectStatus:
    """Return the status of a project holding ``features``.

    Invalid input is normalized rather than rejected: a missing feature
    collection counts as empty and a missing or non-positive limit is
    clamped to 1.
    """
    features = _normalize_features(features)
    feature_limit = _normalize_limit(feature_limit)

    if not features:
        return ProjectStatus.PLANNING

    open_count = count_open_features(features)
    if open_count == 0:
        return ProjectStatus.COMPLETED
    if open_count >= feature_limit:
        return ProjectStatus.BLOCKED
    return ProjectStatus.IN_PROGRESS


def is_scope_locked(features: Any, feature_limit: Any) -> bool:
    """True when no further open feature may be added to the project."""
    return count_open_features(features) >= _normalize_limit(feature_limit)


def status_precedence(status: ProjectStatus | str) -> int:
    return STATUS_PRECEDENCE[ProjectStatus(status)]


def sort_by_status(
    items: Iterable[T],
    key: Callable[[T], ProjectStatus | str] | None = None,
) -> list[T]:
    """Stable sort of ``items`` by status precedence, Blocked first."""
    if key is None:
        return sorted(items, key=status_precedence)
    return sorted(items, key=lambda item: status_precedence(key(item)))
