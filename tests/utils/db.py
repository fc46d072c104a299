"""Throwaway test database helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Tuple

SQLITE_PREFIX = "sqlite:"


def provision_test_database(prefix: str = "scopelock_test") -> Tuple[str | None, str, bool]:
    """Create a database for tests.

    Returns a tuple of (database_name, database_uri, managed_flag).
    When TEST_DATABASE_URL is set it is used as is and managed_flag is False:
    the caller must not attempt to remove that database.
    """
    override_url = os.environ.get("TEST_DATABASE_URL")
    if override_url:
        return None, override_url, False

    temp_db = tempfile.NamedTemporaryFile(prefix=f"{prefix}_", suffix=".db", delete=False)
    temp_db_path = temp_db.name
    temp_db.close()
    return f"{SQLITE_PREFIX}{temp_db_path}", f"sqlite:///{temp_db_path}", True


def cleanup_test_database(database_name: str | None) -> None:
    """Remove a previously provisioned test database."""
    if not database_name or not database_name.startswith(SQLITE_PREFIX):
        return
    path = Path(database_name.split(SQLITE_PREFIX, 1)[1])
    if path.exists():
        path.unlink()


def rebuild_database_engine(db, database_uri: str):
    """Ensure the SQLAlchemy engine reflects the provided database URI."""

    engines = db.engines
    engine = engines.pop(None, None)

    if engine is not None:
        engine.dispose()

    engine_options = getattr(db, "_engine_options", {}) or {}
    engines[None] = db.create_engine(database_uri, **engine_options)
    return engines[None]


__all__ = [
    "cleanup_test_database",
    "provision_test_database",
    "rebuild_database_engine",
]
