"""A feature is a unit of work inside a project.

A Feature belongs to exactly one Project
A Feature is open until its status is done
A Feature can move from any status to any other status
A User can only see and modify the Features he owns

"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from database import db


class FeatureStatus(StrEnum):
    """Lifecycle status of a feature."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


FEATURE_STATUS_CHOICES = [(status.value, status.label) for status in FeatureStatus]


class Feature(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    project_id = db.Column(db.Integer, db.ForeignKey("project.id"), nullable=False, index=True)
    title = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=FeatureStatus.PLANNED.value)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    project = db.relationship("Project", back_populates="features")

    __table_args__ = (
        db.CheckConstraint(
            "status IN ('planned', 'in_progress', 'done')",
            name="ck_feature_status",
        ),
    )

    @property
    def status_enum(self) -> FeatureStatus:
        """Return the status as an enum value."""

        return FeatureStatus(self.status)

    @status_enum.setter
    def status_enum(self, value: FeatureStatus) -> None:
        self.status = value.value

    @property
    def is_open(self) -> bool:
        return self.status_enum != FeatureStatus.DONE

    def __repr__(self):
        return f"<Feature {self.title}>"
