"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from killboard.database.models import Base


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all killboard tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------
def make_participant(pid: str, name: str, **extra) -> dict:
    """A killer/victim dict in the gameinfo API's PascalCase shape."""
    return {"Id": pid, "Name": name, **extra}


def make_event_payload(
    event_id,
    killer: tuple[str, str],
    victim: tuple[str, str],
    *,
    fame: int = 1000,
    timestamp: str = "2030-01-01T12:00:00.000000000Z",
) -> dict:
    return {
        "EventId": event_id,
        "Killer": make_participant(*killer),
        "Victim": make_participant(*victim),
        "TotalVictimKillFame": fame,
        "TimeStamp": timestamp,
    }
