"""
killboard.services.poller — Kill/Death Event Poller
====================================================

The core of the bot.  One :class:`EventPoller` owns all polling state
(``last_check`` and the bounded admission filter); nothing lives in
module globals.

A tick:

1. Checks the notification destination.  If it is gone, the tick is
   aborted — nothing could be delivered anyway.
2. Fetches the tracked guild's roster.  Failure aborts the tick; the next
   scheduled tick is the retry.
3. Walks the roster one member at a time, sleeping ``member_delay``
   between members to stay under the upstream rate limit, and fetches
   each member's recent kills and deaths.
4. Runs every event through the :class:`AdmissionFilter`.
5. Classifies admitted events against the roster, so an event between two
   members yields both a kill and a death.
6. Sends one notification per occurrence, then persists it with an
   insert-if-absent keyed by ``event_id``.  Sending is not gated on the
   insert.
7. Advances ``last_check`` to the moment the tick started.

Failures are contained: one member's fetch failing never stops the others,
a store error is counted and logged, and nothing escapes :meth:`tick`
except cancellation.  Overlapping ticks are refused by an in-flight flag.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from killboard.database.engine import run_db
from killboard.engine.admission import AdmissionFilter
from killboard.engine.occurrences import Occurrence, classify
from killboard.services.albion_client import AlbionAPIError
from killboard.services.embeds import build_occurrence_embed
from killboard.services.killboard_service import save_kill_event, update_guild_members

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from killboard.engine.schemas import GuildMemberInfo, KillboardEvent
    from killboard.services.albion_client import AlbionClient
    from killboard.services.notifier import NotificationSink

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class TickResult:
    """Summary of one tick, logged by the tasks cog."""

    skipped: bool = False
    aborted: str | None = None
    members_polled: int = 0
    members_failed: int = 0
    events_admitted: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0
    rows_inserted: int = 0
    persistence_failures: int = 0


def classify_for_roster(
    event: KillboardEvent, roster: dict[str, GuildMemberInfo],
) -> list[Occurrence]:
    """Occurrences of *event* for every roster member who took part in it."""
    found: list[Occurrence] = []
    for participant in (event.killer, event.victim):
        member = roster.get(participant.id)
        if member is None:
            continue
        for occ in classify(event, member.id, member.name):
            if occ not in found:
                found.append(occ)
    return found


class EventPoller:
    """Polls a guild's kill/death feeds and announces new events.

    Parameters
    ----------
    client:
        The shared :class:`AlbionClient`.
    engine:
        SQLAlchemy engine for the kill log and roster cache.
    sink:
        Where notifications go.
    guild_id:
        Albion id of the guild whose roster is polled.
    clock / sleep:
        Injection points for tests.
    """

    def __init__(
        self,
        client: AlbionClient,
        engine: Engine,
        sink: NotificationSink,
        *,
        guild_id: str,
        event_page_size: int = 10,
        member_delay: float = 1.0,
        key_capacity: int = 1000,
        prune_departed: bool = False,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.engine = engine
        self.sink = sink
        self.guild_id = guild_id
        self.event_page_size = event_page_size
        self.member_delay = member_delay
        self.prune_departed = prune_departed
        self._clock = clock
        self._sleep = sleep

        self.admission = AdmissionFilter(key_capacity)
        # Nothing older than startup is announced.
        self.last_check: datetime = clock()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    # -------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------
    async def tick(self) -> TickResult:
        """Run one polling cycle unless one is already running."""
        if self._in_flight:
            logger.warning("Previous poll still running — skipping this tick")
            return TickResult(skipped=True)

        self._in_flight = True
        try:
            return await self._run_tick()
        finally:
            self._in_flight = False

    async def _run_tick(self) -> TickResult:
        result = TickResult()
        started = self._clock()

        if not await self.sink.resolve():
            logger.error("Kill feed destination unavailable — aborting tick")
            result.aborted = "destination unavailable"
            return result

        try:
            roster = await self.client.guild_members(self.guild_id)
        except AlbionAPIError as exc:
            logger.warning("Roster fetch for guild %s failed: %s", self.guild_id, exc)
            result.aborted = "roster fetch failed"
            return result

        await self._cache_roster(roster)
        by_id = {m.id: m for m in roster}

        for index, member in enumerate(roster):
            if index:
                await self._sleep(self.member_delay)
            try:
                await self._process_member(member, by_id, result)
            except AlbionAPIError as exc:
                result.members_failed += 1
                level = logging.INFO if exc.rate_limited else logging.WARNING
                logger.log(level, "Event fetch for %s failed: %s", member.name, exc)
            except Exception:
                result.members_failed += 1
                logger.exception("Unexpected error while polling %s", member.name)
            else:
                result.members_polled += 1

        self.last_check = started
        return result

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    async def _cache_roster(self, roster: Sequence[GuildMemberInfo]) -> None:
        try:
            await run_db(
                update_guild_members,
                self.engine,
                self.guild_id,
                roster,
                prune=self.prune_departed,
            )
        except Exception:
            logger.exception("Failed to cache roster for guild %s", self.guild_id)

    async def _process_member(
        self,
        member: GuildMemberInfo,
        roster: dict[str, GuildMemberInfo],
        result: TickResult,
    ) -> None:
        events = await self.client.player_events(member.id, self.event_page_size)
        for event in events:
            if not self.admission.admit(event.composite_key, event.timestamp, self.last_check):
                continue
            result.events_admitted += 1
            for occ in classify_for_roster(event, roster):
                await self._deliver(occ, result)

    async def _deliver(self, occ: Occurrence, result: TickResult) -> None:
        try:
            sent = await self.sink.send(build_occurrence_embed(occ))
        except Exception:
            logger.exception("Notification for event %s raised", occ.event.event_id)
            sent = False
        if sent:
            result.notifications_sent += 1
        else:
            result.notifications_failed += 1

        try:
            inserted = await run_db(save_kill_event, self.engine, occ)
        except Exception:
            result.persistence_failures += 1
            logger.exception("Failed to store %s %s", occ.kind, occ.event.event_id)
            return
        if inserted:
            result.rows_inserted += 1
        logger.info(
            "%s: %s (%s → %s, %d fame)",
            occ.kind.capitalize(), occ.member_name,
            occ.event.killer.name, occ.event.victim.name, occ.event.fame,
        )
