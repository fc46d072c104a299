""" Represents a user in the system.

Users must login to access the dashboard.
A User owns the Projects he creates (see Project)
A User owns the Features he adds to his Projects (see Feature)
Every query for Projects and Features is scoped by the User id

"""
from datetime import datetime, timezone

from werkzeug.security import generate_password_hash, check_password_hash
from database import db


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.Text)
    name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    projects = db.relationship(
        "Project",
        back_populates="owner",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, str | int | None]:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "email": self.email,
        }

    def __repr__(self):
        return f"<User {self.id}>"
