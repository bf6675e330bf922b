"""
killboard.services.build_service — Custom Builds
=================================================

Create, read, list and delete user-authored builds.

Build names are unique per server, but the schema does not enforce it:
:func:`create_build` checks first and refuses a duplicate without writing
anything.  Deleting needs the creator's id, so members can only remove
their own builds.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from killboard.database.models import Build

logger = logging.getLogger(__name__)


class BuildExistsError(Exception):
    """A build with that name already exists on the server."""

    def __init__(self, build_name: str) -> None:
        super().__init__(f'Build "{build_name}" already exists')
        self.build_name = build_name


@dataclass(slots=True)
class BuildData:
    """Fields a member supplies when creating a build."""

    name: str
    weapon: str | None = None
    off_hand: str | None = None
    helmet: str | None = None
    armor: str | None = None
    shoes: str | None = None
    cape: str | None = None
    bag: str | None = None
    mount: str | None = None
    food: str | None = None
    potion: str | None = None
    spells: list[str] = field(default_factory=list)
    description: str | None = None


def _find(session: Session, guild_id: str, build_name: str) -> Build | None:
    return session.scalar(
        select(Build).where(
            Build.guild_id == guild_id,
            func.lower(Build.build_name) == build_name.strip().lower(),
        )
    )


def create_build(engine, guild_id: str | int, creator_id: str | int, data: BuildData) -> Build:
    """Save a new build and return it (detached).

    Raises
    ------
    BuildExistsError
        If the server already has a build with that name (case-insensitive).
    ValueError
        If the name is blank.
    """
    name = data.name.strip()
    if not name:
        raise ValueError("Build name must not be empty")

    with Session(engine) as session:
        if _find(session, str(guild_id), name) is not None:
            raise BuildExistsError(name)

        values = asdict(data)
        values.pop("name")
        spells = [s.strip() for s in values.pop("spells") if s and s.strip()]
        build = Build(
            guild_id=str(guild_id),
            build_name=name,
            creator_id=str(creator_id),
            spells=json.dumps(spells),
            **values,
        )
        session.add(build)
        session.commit()
        session.refresh(build)
        session.expunge(build)

    logger.info("Server %s: build %r created by %s (id=%d)", guild_id, name, creator_id, build.id)
    return build


def get_build(engine, guild_id: str | int, build_name: str) -> Build | None:
    with Session(engine) as session:
        build = _find(session, str(guild_id), build_name)
        if build is not None:
            session.expunge(build)
        return build


def list_builds(engine, guild_id: str | int) -> list[Build]:
    """All builds on the server, newest first."""
    with Session(engine) as session:
        rows = session.scalars(
            select(Build)
            .where(Build.guild_id == str(guild_id))
            .order_by(Build.created_at.desc(), Build.id.desc())
        ).all()
        for r in rows:
            session.expunge(r)
        return list(rows)


def remove_build(engine, guild_id: str | int, build_name: str, creator_id: str | int) -> bool:
    """Delete a build owned by *creator_id*.  Returns True if one was removed."""
    with Session(engine) as session:
        result = session.execute(
            delete(Build).where(
                Build.guild_id == str(guild_id),
                func.lower(Build.build_name) == build_name.strip().lower(),
                Build.creator_id == str(creator_id),
            )
        )
        session.commit()
        return bool(result.rowcount)
