"""User scoped access to projects and features, and page context builders."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from models.feature import Feature
from models.project import Project
from models.user import User
from services.status_service import (
    ProjectStatus,
    classify,
    count_open_features,
    is_scope_locked,
    sort_by_status,
)

SCOPE_LOCK_MESSAGE = "You chose this limit. Finish something to continue."
BLOCKED_BANNER_MESSAGE = (
    "You are blocked because you chose too many open features. "
    "You chose this limit. Finish something to continue."
)


@dataclass
class ProjectSummary:
    """A project together with the features its status was derived from."""

    project: Project
    features: list[Feature] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return count_open_features(self.features)

    @property
    def status(self) -> ProjectStatus:
        return classify(self.features, self.project.feature_limit)

    @property
    def is_locked(self) -> bool:
        return is_scope_locked(self.features, self.project.feature_limit)


def get_user_projects(user: User | None) -> list[Project]:
    """Return the user's projects, newest first."""

    if user is None:
        return []
    return (
        Project.query.filter_by(owner_id=user.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def get_user_project(user: User | None, project_id: int | None) -> Project | None:
    """Return the project when it exists and belongs to the user."""

    if user is None or project_id is None:
        return None
    return Project.query.filter_by(id=project_id, owner_id=user.id).one_or_none()


def get_user_feature(user: User | None, feature_id: int | None) -> Feature | None:
    """Return the feature when it exists and belongs to the user."""

    if user is None or feature_id is None:
        return None
    return Feature.query.filter_by(id=feature_id, owner_id=user.id).one_or_none()


def get_project_features(project: Project) -> list[Feature]:
    """Return the project's features, newest first."""

    return (
        Feature.query.filter_by(project_id=project.id, owner_id=project.owner_id)
        .order_by(Feature.created_at.desc(), Feature.id.desc())
        .all()
    )


def group_features_by_project(user: User | None) -> dict[int, list[Feature]]:
    """Load every feature of the user in one query, grouped by project id."""

    grouped: dict[int, list[Feature]] = defaultdict(list)
    if user is None:
        return grouped
    features = (
        Feature.query.filter_by(owner_id=user.id)
        .order_by(Feature.created_at.desc(), Feature.id.desc())
        .all()
    )
    for feature in features:
        grouped[feature.project_id].append(feature)
    return grouped


def build_project_summaries(user: User | None) -> list[ProjectSummary]:
    """Return summaries of the user's projects ordered by status precedence."""

    features_by_project = group_features_by_project(user)
    summaries = [
        ProjectSummary(project, features_by_project.get(project.id, []))
        for project in get_user_projects(user)
    ]
    return sort_by_status(summaries, key=lambda summary: summary.status)


def build_dashboard_context(user: User | None, **extra: Any) -> dict[str, Any]:
    summaries = build_project_summaries(user)
    blocked = [summary for summary in summaries if summary.status == ProjectStatus.BLOCKED]
    context = {
        "summaries": summaries,
        "blocked_summaries": blocked,
        "blocked_message": BLOCKED_BANNER_MESSAGE,
    }
    context.update(extra)
    return context


def build_project_page_context(project: Project, **extra: Any) -> dict[str, Any]:
    summary = ProjectSummary(project, get_project_features(project))
    context = {
        "project": project,
        "summary": summary,
        "features": summary.features,
        "scope_locked": summary.is_locked,
        "scope_lock_message": SCOPE_LOCK_MESSAGE,
    }
    context.update(extra)
    return context


def serialize_feature(feature: Feature) -> dict[str, Any]:
    return {
        "id": feature.id,
        "project_id": feature.project_id,
        "title": feature.title,
        "status": feature.status,
        "created_at": feature.created_at.isoformat() if feature.created_at else None,
    }


def serialize_project(summary: ProjectSummary) -> dict[str, Any]:
    project = summary.project
    return {
        "id": project.id,
        "name": project.name,
        "deadline": project.deadline.isoformat() if project.deadline else None,
        "feature_limit": project.feature_limit,
        "created_at": project.created_at.isoformat() if project.created_at else None,
        "status": str(summary.status),
        "open_features": summary.open_count,
        "total_features": len(summary.features),
        "scope_locked": summary.is_locked,
    }
