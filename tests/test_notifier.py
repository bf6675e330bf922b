"""
tests/test_notifier.py — Channel Notifier
==========================================
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord

from killboard.services.notifier import ChannelNotifier


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


def _make_messageable(channel_id: int = 100) -> MagicMock:
    ch = MagicMock(spec=discord.TextChannel)
    ch.id = channel_id
    ch.send = AsyncMock()
    return ch


def _make_bot(channels: dict[int, object] | None = None) -> MagicMock:
    bot = MagicMock()
    bot.get_channel = lambda ch_id: (channels or {}).get(ch_id)
    bot.fetch_channel = AsyncMock(side_effect=discord.NotFound(MagicMock(status=404), "gone"))
    return bot


class TestResolve:
    def test_cached_channel(self):
        ch = _make_messageable(100)
        notifier = ChannelNotifier(_make_bot({100: ch}), 100)
        assert run_async(notifier.resolve()) is True

    def test_no_channel_configured(self):
        notifier = ChannelNotifier(_make_bot(), None)
        assert run_async(notifier.resolve()) is False

    def test_missing_channel(self):
        bot = _make_bot()
        notifier = ChannelNotifier(bot, 100)
        assert run_async(notifier.resolve()) is False
        bot.fetch_channel.assert_awaited_once_with(100)

    def test_fetch_fallback(self):
        ch = _make_messageable(100)
        bot = _make_bot()
        bot.fetch_channel = AsyncMock(return_value=ch)
        notifier = ChannelNotifier(bot, 100)
        assert run_async(notifier.resolve()) is True

    def test_non_messageable_rejected(self):
        category = MagicMock(spec=discord.CategoryChannel)
        notifier = ChannelNotifier(_make_bot({100: category}), 100)
        assert run_async(notifier.resolve()) is False


class TestSend:
    def test_send_success(self):
        ch = _make_messageable(100)
        notifier = ChannelNotifier(_make_bot({100: ch}), 100)
        embed = discord.Embed(title="Kill")

        async def _inner():
            assert await notifier.resolve() is True
            assert await notifier.send(embed) is True

        run_async(_inner())
        ch.send.assert_awaited_once_with(embed=embed)

    def test_send_failure_returns_false(self):
        ch = _make_messageable(100)
        ch.send = AsyncMock(side_effect=discord.HTTPException(MagicMock(status=500), "oops"))
        notifier = ChannelNotifier(_make_bot({100: ch}), 100)
        assert run_async(notifier.send(discord.Embed(title="Kill"))) is False
