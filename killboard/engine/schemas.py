"""
killboard.engine.schemas — Upstream Payload Schemas
=====================================================

Strict pydantic models for everything the Albion APIs return.  The API
client validates responses against these at the boundary, so the poller
and the cogs never touch raw dicts or optional-chained field access.

Albion uses PascalCase keys; each model maps them onto snake_case
attributes via aliases and still accepts the snake_case names, which keeps
test fixtures readable.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value):
    """Normalise an Albion timestamp into an aware UTC :class:`datetime`.

    The gameinfo API emits up to nine fractional digits and a trailing
    ``Z``; ``datetime.fromisoformat`` only takes six.  Naive values are
    taken to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


class _AlbionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# Kill/death events
# ---------------------------------------------------------------------------
class Participant(_AlbionModel):
    """Killer or victim of an event."""

    id: str = Field(alias="Id", min_length=1)
    name: str = Field(alias="Name", min_length=1)
    guild_name: str | None = Field(default=None, alias="GuildName")
    alliance_name: str | None = Field(default=None, alias="AllianceName")
    average_item_power: float = Field(default=0.0, alias="AverageItemPower")
    equipment: dict | None = Field(default=None, alias="Equipment")

    @property
    def main_hand(self) -> str | None:
        """Item type of the main-hand weapon, if the payload carried one."""
        slot = (self.equipment or {}).get("MainHand")
        if isinstance(slot, dict):
            return slot.get("Type")
        return None


class KillboardEvent(_AlbionModel):
    """One entry of a player's kill or death feed."""

    event_id: str = Field(alias="EventId")
    killer: Participant = Field(alias="Killer")
    victim: Participant = Field(alias="Victim")
    fame: int = Field(default=0, alias="TotalVictimKillFame")
    timestamp: datetime = Field(alias="TimeStamp")

    @field_validator("event_id", mode="before")
    @classmethod
    def _coerce_event_id(cls, value):
        if isinstance(value, bool) or value in (None, ""):
            raise ValueError("EventId is required")
        return str(value)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return parse_timestamp(value)

    @property
    def composite_key(self) -> tuple[str, datetime]:
        """``(event_id, timestamp)`` pair used for in-memory dedup."""
        return (self.event_id, self.timestamp)


# ---------------------------------------------------------------------------
# Players & guilds
# ---------------------------------------------------------------------------
class GuildMemberInfo(_AlbionModel):
    """A roster entry from ``/guilds/{id}/members``."""

    id: str = Field(alias="Id", min_length=1)
    name: str = Field(alias="Name", min_length=1)
    guild_id: str | None = Field(default=None, alias="GuildId")
    guild_name: str | None = Field(default=None, alias="GuildName")
    kill_fame: int = Field(default=0, alias="KillFame")
    death_fame: int = Field(default=0, alias="DeathFame")


class PlayerDetail(_AlbionModel):
    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    guild_name: str | None = Field(default=None, alias="GuildName")
    alliance_name: str | None = Field(default=None, alias="AllianceName")
    kill_fame: int = Field(default=0, alias="KillFame")
    death_fame: int = Field(default=0, alias="DeathFame")
    fame_ratio: float | None = Field(default=None, alias="FameRatio")


class GuildDetail(_AlbionModel):
    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    alliance_name: str | None = Field(default=None, alias="AllianceName")
    alliance_tag: str | None = Field(default=None, alias="AllianceTag")
    founder_name: str | None = Field(default=None, alias="FounderName")
    founded: datetime | None = Field(default=None, alias="Founded")
    member_count: int = Field(default=0, alias="MemberCount")
    kill_fame: int = Field(default=0, alias="killFame")
    death_fame: int = Field(default=0, alias="DeathFame")
    members: list[GuildMemberInfo] = Field(default_factory=list)

    @field_validator("founded", mode="before")
    @classmethod
    def _parse_founded(cls, value):
        if value in (None, ""):
            return None
        return parse_timestamp(value)


class SearchHit(_AlbionModel):
    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    guild_name: str | None = Field(default=None, alias="GuildName")
    alliance_name: str | None = Field(default=None, alias="AllianceName")


class SearchResult(_AlbionModel):
    players: list[SearchHit] = Field(default_factory=list)
    guilds: list[SearchHit] = Field(default_factory=list)

    @field_validator("players", "guilds", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------
class PriceQuote(_AlbionModel):
    item_id: str
    city: str
    quality: int = 1
    sell_price_min: int = 0
    sell_price_min_date: datetime | None = None
    buy_price_max: int = 0
    buy_price_max_date: datetime | None = None

    @field_validator("sell_price_min_date", "buy_price_max_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        if value in (None, ""):
            return None
        return parse_timestamp(value)


class GoldPrice(_AlbionModel):
    price: int
    timestamp: datetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return parse_timestamp(value)


class ServerStatus(_AlbionModel):
    status: str
    message: str | None = None

    @property
    def online(self) -> bool:
        return self.status.lower() == "online"
