"""A project is a deliverable with a deadline and a limit of open features.

A User can create multiple Projects
A User is the owner of the Project he creates
A Project contains zero or more Features (see Feature)
The feature limit is fixed when the Project is created
Deleting a Project deletes its Features
The status of a Project is derived from its Features and is never stored

"""
from datetime import datetime, timezone

from database import db


class Project(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    deadline = db.Column(db.Date, nullable=False)
    feature_limit = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    owner = db.relationship("User", back_populates="projects")
    features = db.relationship(
        "Feature",
        back_populates="project",
        lazy=True,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint("feature_limit >= 1", name="ck_project_feature_limit_positive"),
    )

    def __repr__(self):
        return f"<Project {self.name}>"
