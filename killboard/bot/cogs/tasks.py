"""
killboard.bot.cogs.tasks — Periodic Background Tasks
=====================================================

Drives the :class:`~killboard.services.poller.EventPoller` from a
``discord.ext.tasks`` loop:

- first tick ``initial_delay_seconds`` after the bot is ready,
- then one tick every ``poll_interval_seconds``.

``tasks.loop`` awaits each tick before scheduling the next, and the
poller's own in-flight flag rejects a manual ``/killboard poll`` that
lands mid-tick, so ticks never overlap.  Errors are logged and never stop
the loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from discord.ext import commands, tasks

if TYPE_CHECKING:
    from killboard.bot.core import KillboardBot

logger = logging.getLogger(__name__)


class PeriodicTasks(commands.Cog):
    """Cog for the kill feed poller loop."""

    def __init__(self, bot: KillboardBot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        """Start task loops when the cog is loaded."""
        self.poll_loop.change_interval(seconds=self.bot.cfg.poll_interval_seconds)
        self.poll_loop.start()

    async def cog_unload(self) -> None:
        """Cancel task loops on unload."""
        self.poll_loop.cancel()

    # -------------------------------------------------------------------
    # Kill feed poller
    # -------------------------------------------------------------------
    @tasks.loop(seconds=60)
    async def poll_loop(self):
        """Run one poller tick and log its summary."""
        try:
            result = await self.bot.poller.tick()
        except Exception:
            logger.exception("Poll tick failed", extra={"task": "poller"})
            return

        if result.skipped:
            return
        if result.aborted:
            logger.warning("Poll tick aborted: %s", result.aborted)
            return
        logger.info(
            "Poll tick complete: members=%d failed=%d admitted=%d sent=%d stored=%d store_errors=%d",
            result.members_polled,
            result.members_failed,
            result.events_admitted,
            result.notifications_sent,
            result.rows_inserted,
            result.persistence_failures,
        )

    @poll_loop.before_loop
    async def _wait_poll(self):
        await self.bot.wait_until_ready()
        await asyncio.sleep(self.bot.cfg.initial_delay_seconds)


async def setup(bot: KillboardBot) -> None:
    await bot.add_cog(PeriodicTasks(bot))
