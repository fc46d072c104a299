"""Environment driven application settings."""

import os
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    session_lifetime_hours: int
    log_level: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from exc


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///scopelock.db"),
        session_lifetime_hours=_getenv_int("SESSION_LIFETIME_HOURS", 8),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
    )


def is_production(settings: Settings) -> bool:
    return settings.env.lower() in ("prod", "production")


def load_config(settings: Settings | None = None) -> dict:
    s = settings or load_settings()
    production = is_production(s)
    if production and s.secret_key in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set in production.")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "SQLALCHEMY_DATABASE_URI": s.database_url,
        "LOG_LEVEL": s.log_level,
        "PERMANENT_SESSION_LIFETIME": timedelta(hours=s.session_lifetime_hours),
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": production,
    }
