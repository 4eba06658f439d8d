# Overview: Transaction scoping, row locking and retry for write paths.

from __future__ import annotations

import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import DatabaseError
from ..extensions import db

_DEPTH_KEY = "unit_of_work_depth"


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; unit_of_work() takes the
    database write lock up front with BEGIN IMMEDIATE instead.
    """
    return query.with_for_update()


def in_unit_of_work() -> bool:
    return db.session().info.get(_DEPTH_KEY, 0) > 0


@contextmanager
def unit_of_work():
    """
    Scoped write transaction: begin -> operations -> commit.

    Any exception rolls back every statement issued inside the scope and is
    re-raised. A nested unit_of_work joins the enclosing one and only
    flushes; the outermost scope owns commit and rollback.
    """
    session = db.session()
    depth = session.info.get(_DEPTH_KEY, 0)

    if depth > 0:
        session.info[_DEPTH_KEY] = depth + 1
        try:
            yield session
            session.flush()
        finally:
            session.info[_DEPTH_KEY] = depth
        return

    # Discard any read transaction autobegun by validation reads; pending
    # caller changes never ride along with this write.
    if session.in_transaction():
        session.rollback()

    session.info[_DEPTH_KEY] = 1
    try:
        if db.engine.dialect.name == "sqlite":
            session.execute(text("BEGIN IMMEDIATE"))
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.info[_DEPTH_KEY] = 0


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float = 0.1):
    """
    Execute a DB write operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks, pool exhaustion at the
    driver) and StaleDataError. When retries are exhausted, or on any other
    SQLAlchemyError, raises DatabaseError so store failures are never
    confused with business-rule failures.

    Inside an enclosing unit_of_work the call is passed straight through:
    retrying there would replay half of someone else's transaction.
    """
    if in_unit_of_work():
        return func()

    if attempts is None:
        attempts = current_app.config.get("WRITE_RETRY_ATTEMPTS", 3)

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                current_app.logger.error("Write failed after %d attempts: %s", attempts, exc)
                raise DatabaseError() from exc
            current_app.logger.warning("Retrying write after lock contention (attempt %d)", attempt + 1)
            time.sleep(backoff_base * (2 ** attempt))
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception("Unexpected database failure")
            raise DatabaseError() from exc
