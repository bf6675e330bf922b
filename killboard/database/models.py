"""
killboard.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- kill_events       — Append-only kill/death log with idempotent insert
- guild_members     — Cached roster of the tracked Albion guild
- server_settings   — Per-Discord-server configuration
- tracked_entities  — Players/guilds a server follows
- builds            — User-authored equipment loadouts

``guild_id`` on the per-server tables is the Discord server snowflake,
stored as text so it round-trips unchanged through every backend.
"""

from __future__ import annotations

import enum
import json
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Killboard ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class EntityType(enum.StrEnum):
    """What a tracked entity refers to on the Albion side."""
    PLAYER = "player"
    GUILD = "guild"


# ---------------------------------------------------------------------------
# KillEvent — one row per distinct upstream event
# ---------------------------------------------------------------------------
class KillEvent(Base):
    """A kill or death seen by the poller.

    ``is_kill`` is relative to ``guild_member_involved``: True when that
    member was the killer, False when they were the victim.
    """
    __tablename__ = "kill_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    killer_name: Mapped[str | None] = mapped_column(String(100), default=None)
    killer_id: Mapped[str | None] = mapped_column(String(50), default=None)
    victim_name: Mapped[str | None] = mapped_column(String(100), default=None)
    victim_id: Mapped[str | None] = mapped_column(String(50), default=None)
    fame: Mapped[int] = mapped_column(Integer, default=0)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    guild_member_involved: Mapped[str] = mapped_column(String(100), nullable=False)
    is_kill: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_kill_events_member_time", "guild_member_involved", "timestamp"),
    )

    def __repr__(self) -> str:
        kind = "kill" if self.is_kill else "death"
        return f"<KillEvent event={self.event_id} {kind} member={self.guild_member_involved!r}>"


# ---------------------------------------------------------------------------
# GuildMember — cached roster entry
# ---------------------------------------------------------------------------
class GuildMember(Base):
    __tablename__ = "guild_members"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # Albion player id
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    guild_id: Mapped[str] = mapped_column(String(50), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_guild_members_guild_id", "guild_id"),
    )

    def __repr__(self) -> str:
        return f"<GuildMember id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# ServerSettings — one row per Discord server
# ---------------------------------------------------------------------------
class ServerSettings(Base):
    __tablename__ = "server_settings"

    guild_id: Mapped[str] = mapped_column(String(30), primary_key=True)
    killboard_channel: Mapped[str | None] = mapped_column(String(30), default=None)
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    builder_role: Mapped[str | None] = mapped_column(String(30), default=None)
    status_channel: Mapped[str | None] = mapped_column(String(30), default=None)

    def __repr__(self) -> str:
        return f"<ServerSettings guild={self.guild_id} lang={self.language!r}>"


# ---------------------------------------------------------------------------
# TrackedEntity — a player or guild a server follows
# ---------------------------------------------------------------------------
class TrackedEntity(Base):
    __tablename__ = "tracked_entities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String(30), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_name: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("guild_id", "entity_id", name="uq_tracked_entities_guild_entity"),
    )

    def __repr__(self) -> str:
        return f"<TrackedEntity {self.entity_type}:{self.entity_name!r} guild={self.guild_id}>"


# ---------------------------------------------------------------------------
# Build — user-authored equipment loadout
# ---------------------------------------------------------------------------
class Build(Base):
    """A named loadout.

    Name uniqueness per server is enforced by
    :func:`killboard.services.build_service.create_build`, not by the schema.
    """
    __tablename__ = "builds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String(30), nullable=False)
    build_name: Mapped[str] = mapped_column(String(100), nullable=False)
    creator_id: Mapped[str] = mapped_column(String(30), nullable=False)
    weapon: Mapped[str | None] = mapped_column(String(100), default=None)
    helmet: Mapped[str | None] = mapped_column(String(100), default=None)
    armor: Mapped[str | None] = mapped_column(String(100), default=None)
    shoes: Mapped[str | None] = mapped_column(String(100), default=None)
    cape: Mapped[str | None] = mapped_column(String(100), default=None)
    off_hand: Mapped[str | None] = mapped_column(String(100), default=None)
    bag: Mapped[str | None] = mapped_column(String(100), default=None)
    mount: Mapped[str | None] = mapped_column(String(100), default=None)
    food: Mapped[str | None] = mapped_column(String(100), default=None)
    potion: Mapped[str | None] = mapped_column(String(100), default=None)
    spells: Mapped[str | None] = mapped_column(Text, default=None)  # JSON list
    description: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_builds_guild_name", "guild_id", "build_name"),
    )

    @property
    def spell_list(self) -> list[str]:
        """Decoded spells, in the order the creator gave them."""
        if not self.spells:
            return []
        try:
            return list(json.loads(self.spells))
        except (json.JSONDecodeError, TypeError):
            return []

    def __repr__(self) -> str:
        return f"<Build id={self.id} name={self.build_name!r} guild={self.guild_id}>"
