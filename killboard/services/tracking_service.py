"""
killboard.services.tracking_service — Tracked Players & Guilds
===============================================================

CRUD for ``tracked_entities``.  Uniqueness is ``(server, entity_id)``;
adding an entity that is already tracked is a no-op that reports False.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from killboard.database.models import EntityType, TrackedEntity

logger = logging.getLogger(__name__)


def add_tracked_entity(
    engine,
    guild_id: str | int,
    entity_id: str,
    entity_name: str,
    entity_type: EntityType | str,
) -> bool:
    """Insert-if-absent.  Returns True when a new row was created."""
    entity_type = EntityType(entity_type)
    with Session(engine) as session:
        exists = session.scalar(
            select(TrackedEntity.id).where(
                TrackedEntity.guild_id == str(guild_id),
                TrackedEntity.entity_id == entity_id,
            )
        )
        if exists is not None:
            return False
        try:
            with session.begin_nested():
                session.add(TrackedEntity(
                    guild_id=str(guild_id),
                    entity_id=entity_id,
                    entity_name=entity_name,
                    entity_type=entity_type.value,
                ))
                session.flush()
        except IntegrityError:
            session.commit()
            return False
        session.commit()

    logger.info("Server %s now tracks %s %r", guild_id, entity_type.value, entity_name)
    return True


def remove_tracked_entity(engine, guild_id: str | int, entity_id: str) -> bool:
    """Delete by key.  Returns True when something was removed."""
    with Session(engine) as session:
        result = session.execute(
            delete(TrackedEntity).where(
                TrackedEntity.guild_id == str(guild_id),
                TrackedEntity.entity_id == entity_id,
            )
        )
        session.commit()
        return bool(result.rowcount)


def remove_tracked_entity_by_name(engine, guild_id: str | int, name: str) -> TrackedEntity | None:
    """Remove the entity whose name matches *name* case-insensitively.

    Returns the removed entity (detached), or None if nothing matched.
    """
    wanted = name.strip().lower()
    for entity in get_tracked_entities(engine, guild_id):
        if entity.entity_name.lower() == wanted:
            if remove_tracked_entity(engine, guild_id, entity.entity_id):
                return entity
            return None
    return None


def get_tracked_entities(engine, guild_id: str | int) -> list[TrackedEntity]:
    """Every entity tracked by *guild_id*, oldest first."""
    with Session(engine) as session:
        rows = session.scalars(
            select(TrackedEntity)
            .where(TrackedEntity.guild_id == str(guild_id))
            .order_by(TrackedEntity.id)
        ).all()
        for r in rows:
            session.expunge(r)
        return list(rows)


def clear_tracked_entities(engine, guild_id: str | int) -> int:
    """Drop every tracked entity for *guild_id*.  Returns the count removed."""
    with Session(engine) as session:
        result = session.execute(
            delete(TrackedEntity).where(TrackedEntity.guild_id == str(guild_id))
        )
        session.commit()
        return result.rowcount or 0
