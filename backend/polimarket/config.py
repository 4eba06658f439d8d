# backend/polimarket/config.py
from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def engine_options_for(database_uri: str, *, pool_size: int, max_overflow: int,
                       pool_timeout: int, sqlite_busy_timeout: int) -> dict:
    """
    Build SQLAlchemy engine options for the configured database.

    SQLite has no server-side pool; the busy timeout is how long a writer
    waits on another writer's lock before failing with "database is locked".
    Server databases get a bounded pool whose acquisition timeout surfaces
    as a DatabaseError instead of hanging the request.
    """
    if database_uri.startswith("sqlite"):
        return {"connect_args": {"timeout": sqlite_busy_timeout}}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_pre_ping": True,
    }


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Local SQLite file by default; point DATABASE_URL at PostgreSQL in production
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///polimarket.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 10)
    DB_POOL_MAX_OVERFLOW = _env_int("DB_POOL_MAX_OVERFLOW", 2)
    DB_POOL_TIMEOUT_SECONDS = _env_int("DB_POOL_TIMEOUT_SECONDS", 30)
    SQLITE_BUSY_TIMEOUT_SECONDS = _env_int("SQLITE_BUSY_TIMEOUT_SECONDS", 15)

    # Attempts for outermost write transactions that hit lock contention
    WRITE_RETRY_ATTEMPTS = _env_int("WRITE_RETRY_ATTEMPTS", 3)
