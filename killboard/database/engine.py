"""
killboard.database.engine — Store Connection & Thread Bridge
=============================================================

The store is plain synchronous SQLAlchemy.  The bot and the poller are
async, so every store call from a coroutine goes through :func:`run_db`,
which hands the function to a worker thread and awaits its result.

Usage::

    from killboard.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # DATABASE_URL, else ./killboard.db
    init_db(engine)

    # In a cog or the poller:
    rows = await run_db(get_recent_kills, engine, "Alice", 10)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from killboard.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

DEFAULT_DATABASE_URL = "sqlite:///killboard.db"


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build the store's :class:`Engine`.

    The URL comes from *url*, then the ``DATABASE_URL`` env var, then a
    local ``killboard.db`` SQLite file.  SQLite connections may be used
    from :func:`run_db`'s worker threads; server databases get a small
    pre-pinged pool.
    """
    url = url or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_timeout=10,
            pool_recycle=3600,
        )
    logger.info("Database engine created → %s", engine.url.render_as_string(hide_password=True))
    return engine


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create any missing tables.

    Alembic owns the schema for long-lived deployments
    (``alembic upgrade head``); this covers fresh SQLite files and tests.
    """
    Base.metadata.create_all(engine)
    logger.info("Killboard tables ready.")


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Session scope: commit when the block exits cleanly, roll back if it raises."""
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Await a synchronous store function run on the default thread pool."""
    return await asyncio.to_thread(func, *args, **kwargs)
