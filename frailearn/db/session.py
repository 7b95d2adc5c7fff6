"""Database engine and session utilities.

Nothing is connected at import time: scripts build an engine with
:func:`create_database_engine` (or let :func:`session_scope` do it) and the
engine is disposed as soon as the unit of work is over.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from frailearn.core.config import settings

logger = logging.getLogger(__name__)


def _derive_connect_args(database_url: str) -> dict[str, Any]:
    """Return driver-specific ``connect_args`` for *database_url*."""

    try:
        parsed_url = make_url(database_url)
    except Exception:
        return {}

    if parsed_url.drivername.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def _install_slow_query_logger(engine: Engine, threshold_ms: int | None = None) -> None:
    """Attach callbacks that warn when queries exceed the configured budget."""

    if threshold_ms is None:
        threshold_ms = settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS
    threshold_ms = max(threshold_ms or 0, 0)
    if threshold_ms == 0:
        return

    marker = "_frailearn_slow_query_hook"
    if getattr(engine, marker, False):
        return

    setattr(engine, marker, True)

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        context._frailearn_query_start = perf_counter()

    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start = getattr(context, "_frailearn_query_start", None)
        if start is None:
            return

        elapsed_ms = (perf_counter() - start) * 1000.0
        if elapsed_ms < threshold_ms:
            return

        snippet = " ".join(statement.split()) if isinstance(statement, str) else str(statement)
        if len(snippet) > 200:
            snippet = snippet[:197] + "..."

        params_preview = repr(parameters)
        if len(params_preview) > 200:
            params_preview = params_preview[:197] + "..."

        logger.warning("Slow SQL (%.1f ms) - %s | params=%s", elapsed_ms, snippet, params_preview)

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)


def _verify_database_connection(engine: Engine) -> None:
    """Ping *engine* with retry logic to tolerate transient outages."""

    if engine.dialect.name == "sqlite":
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return

    max_retries = max(int(settings.DATABASE_CONNECTION_MAX_RETRIES or 1), 1)
    backoff = max(float(settings.DATABASE_CONNECTION_RETRY_BACKOFF_SECONDS or 1.0), 0.1)

    attempt = 1
    last_exc: Optional[Exception] = None

    while attempt <= max_retries:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return
        except (OperationalError, OSError) as exc:
            last_exc = exc
            if attempt >= max_retries:
                break

            delay = min(30.0, backoff * (2 ** (attempt - 1)))
            logger.warning(
                "Database connection failed (attempt %s/%s): %s. Retrying in %.1f s.",
                attempt,
                max_retries,
                exc,
                delay,
            )
            time.sleep(delay)
            attempt += 1

    if last_exc is not None:
        raise last_exc


def create_database_engine(database_url: str | None = None, *, verify: bool = True) -> Engine:
    """Build a synchronous engine for *database_url* (defaults to settings).

    With ``verify`` the connection is pinged eagerly so a wrong URL fails
    before any report starts printing.
    """

    target_url = str(database_url or settings.DATABASE_URL)
    logger.info(
        "Configuring database: %s",
        make_url(target_url).render_as_string(hide_password=True),
    )

    engine = create_engine(
        target_url,
        pool_pre_ping=True,
        connect_args=_derive_connect_args(target_url),
    )
    _install_slow_query_logger(engine)

    if verify:
        try:
            _verify_database_connection(engine)
        except (OperationalError, OSError) as exc:
            logger.error("Database connection failed: %s", exc)
            engine.dispose()
            raise

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False)


@contextmanager
def session_scope(engine: Engine | None = None) -> Iterator[Session]:
    """Provide a transactional session around a unit of work.

    Commits on success, rolls back on any exception and always closes the
    session. When no *engine* is given, one is created from the settings and
    disposed on exit.
    """

    owns_engine = engine is None
    if owns_engine:
        engine = create_database_engine()

    db = create_session_factory(engine)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        if owns_engine:
            engine.dispose()
