"""
killboard.services.notifier — Kill Feed Notification Sink
==========================================================

Posts embeds to the configured kill-feed channel.

The poller only depends on the :class:`NotificationSink` protocol, so tests
can hand it a fake and the bot hands it a :class:`ChannelNotifier`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import discord
from discord.abc import Messageable

if TYPE_CHECKING:
    from discord.ext import commands

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    async def resolve(self) -> bool:
        """Return True if the destination exists and can be posted to."""

    async def send(self, embed: discord.Embed) -> bool:
        """Deliver one message.  Return False on failure; never raise."""


class ChannelNotifier:
    """Send embeds to a single Discord channel by id."""

    def __init__(self, bot: commands.Bot, channel_id: int | None) -> None:
        self.bot = bot
        self.channel_id = channel_id
        self._channel: Messageable | None = None

    async def resolve(self) -> bool:
        self._channel = None
        if not self.channel_id:
            return False

        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(self.channel_id)
            except (discord.NotFound, discord.Forbidden):
                logger.warning("Kill feed channel %d is not accessible", self.channel_id)
                return False
            except discord.HTTPException as exc:
                logger.warning("Could not fetch kill feed channel %d: %s", self.channel_id, exc)
                return False

        if not isinstance(channel, Messageable):
            logger.warning("Kill feed channel %d cannot receive messages", self.channel_id)
            return False
        self._channel = channel
        return True

    async def send(self, embed: discord.Embed) -> bool:
        if self._channel is None and not await self.resolve():
            return False
        try:
            await self._channel.send(embed=embed)
        except discord.HTTPException:
            logger.exception("Failed to send kill feed embed to channel %s", self.channel_id)
            return False
        return True
