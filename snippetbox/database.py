"""
Snippetbox: Database Connection Pool
====================================

What:  Opens the async SQLAlchemy engine (connection pool) and verifies it
       with a single ping. Also hosts the declarative ``Base`` for models.
Why:   A store that can't be reached at startup is fatal; it is better to
       fail before the listener opens than on the first request.
How:   ``open_db()`` creates the engine and runs ``SELECT 1``. Any failure
       disposes what was created and raises ``DatabaseConnectionError``.
       There is no retry.
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from snippetbox.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for ORM models; its metadata is what Alembic tracks."""


def _safe_dsn(dsn: str) -> str:
    """Render a DSN for logs with the password masked."""
    try:
        return make_url(dsn).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable dsn>"


async def open_db(dsn: str, **engine_options) -> AsyncEngine:
    """
    Open a connection pool for ``dsn`` and ping it once.

    Args:
        dsn:             SQLAlchemy URL with an async driver.
        engine_options:  Passed through to ``create_async_engine``
                         (pool sizing, pre-ping, echo, poolclass).

    Returns:
        A ready-to-use ``AsyncEngine``.

    Raises:
        DatabaseConnectionError: the URL is invalid, the driver is missing,
        or the server could not be reached.
    """
    engine = None
    try:
        engine = create_async_engine(dsn, **engine_options)
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        if engine is not None:
            await engine.dispose()
        raise DatabaseConnectionError(
            context={"dsn": _safe_dsn(dsn), "error": str(e), "error_type": type(e).__name__},
        ) from e

    logger.debug("Database ping succeeded", extra={"dsn": _safe_dsn(dsn)})
    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    # expire_on_commit=False: attributes stay readable after commit
    # (needed to return the generated id).
    return async_sessionmaker(engine, expire_on_commit=False)
