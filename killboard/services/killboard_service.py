"""
killboard.services.killboard_service — Kill Log & Roster Cache
===============================================================

Sync store functions for the poller and the ``/kills`` command.  Call them
from async code through :func:`~killboard.database.engine.run_db`.

Kill events are inserted idempotently: the unique index on ``event_id``
decides, and a duplicate insert reports ``False`` instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from killboard.database.engine import get_session
from killboard.database.models import GuildMember, KillEvent

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from killboard.engine.occurrences import Occurrence
    from killboard.engine.schemas import GuildMemberInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Kill events
# ---------------------------------------------------------------------------
def save_kill_event(engine: Engine, occurrence: Occurrence) -> bool:
    """Insert the occurrence unless its ``event_id`` is already stored.

    Returns True when a new row was created.
    """
    row = occurrence.as_row()
    with Session(engine) as session:
        if session.scalar(
            select(KillEvent.id).where(KillEvent.event_id == row["event_id"])
        ) is not None:
            return False
        try:
            with session.begin_nested():   # SAVEPOINT
                session.add(KillEvent(**row))
                session.flush()
        except IntegrityError:
            # Lost a race with another writer; the unique index caught it.
            session.commit()
            return False
        session.commit()
    logger.debug(
        "Stored %s %s for %s", occurrence.kind, row["event_id"], row["guild_member_involved"],
    )
    return True


def get_recent_kills(engine: Engine, member_name: str, limit: int = 10) -> list[KillEvent]:
    """Newest stored occurrences for *member_name* (kills and deaths)."""
    with Session(engine) as session:
        rows = session.scalars(
            select(KillEvent)
            .where(KillEvent.guild_member_involved == member_name)
            .order_by(KillEvent.timestamp.desc())
            .limit(limit)
        ).all()
        for r in rows:
            session.expunge(r)
        return list(rows)


# ---------------------------------------------------------------------------
# Guild member cache
# ---------------------------------------------------------------------------
def update_guild_members(
    engine: Engine,
    guild_id: str,
    members: Iterable[GuildMemberInfo],
    *,
    prune: bool = False,
) -> int:
    """Replace-on-conflict upsert of the roster for *guild_id*.

    With ``prune=True``, cached members of that guild who are absent from
    *members* are deleted.  Returns the number of members written.
    """
    members = list(members)
    with get_session(engine) as session:
        for m in members:
            session.merge(GuildMember(id=m.id, name=m.name, guild_id=guild_id))

        if prune:
            result = session.execute(
                delete(GuildMember).where(
                    GuildMember.guild_id == guild_id,
                    GuildMember.id.not_in([m.id for m in members]),
                )
            )
            if result.rowcount:
                logger.info(
                    "Pruned %d departed members from guild %s", result.rowcount, guild_id,
                )
    return len(members)


def get_guild_members(engine: Engine, guild_id: str) -> list[GuildMember]:
    """Cached roster for *guild_id*, ordered by name."""
    with Session(engine) as session:
        rows = session.scalars(
            select(GuildMember)
            .where(GuildMember.guild_id == guild_id)
            .order_by(GuildMember.name)
        ).all()
        for r in rows:
            session.expunge(r)
        return list(rows)
