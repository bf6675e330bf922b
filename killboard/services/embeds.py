"""
killboard.services.embeds — Discord embed builders
===================================================

All embed construction lives here so the poller, the notifier and the cogs
only need to supply data — no layout concerns.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import discord

from killboard.constants import (
    BUILD_SLOTS,
    DEATH_COLOR,
    GOLD_COLOR,
    INFO_COLOR,
    KILL_COLOR,
    PREMIUM_COLOR,
    SUCCESS_COLOR,
)

if TYPE_CHECKING:
    from killboard.database.models import Build, KillEvent
    from killboard.engine.occurrences import Occurrence
    from killboard.engine.schemas import GoldPrice, GuildDetail, PlayerDetail, PriceQuote

KILLBOARD_URL = "https://albiononline.com/killboard/kill/{event_id}"


def _fmt(value: int | float | None) -> str:
    if value is None:
        return "0"
    return f"{value:,}"


def _relative(ts) -> str:
    return discord.utils.format_dt(ts, style="R") if ts else "unknown"


# ---------------------------------------------------------------------------
# Kill feed
# ---------------------------------------------------------------------------
def build_occurrence_embed(occ: Occurrence) -> discord.Embed:
    """Kill (green) or death (red) notification for one tracked member."""
    event = occ.event
    if occ.is_kill:
        title = f"⚔️ {occ.member_name} killed {event.victim.name}"
        color = KILL_COLOR
    else:
        title = f"\U0001f480 {occ.member_name} was killed by {event.killer.name}"
        color = DEATH_COLOR

    embed = discord.Embed(
        title=title,
        url=KILLBOARD_URL.format(event_id=event.event_id),
        color=color,
        timestamp=event.timestamp,
    )
    for label, who in (("Killer", event.killer), ("Victim", event.victim)):
        lines = [f"**{who.name}**"]
        if who.guild_name:
            lines.append(f"[{who.guild_name}]")
        if who.average_item_power:
            lines.append(f"IP {who.average_item_power:.0f}")
        if who.main_hand:
            lines.append(who.main_hand)
        embed.add_field(name=label, value="\n".join(lines), inline=True)
    embed.add_field(name="Fame", value=_fmt(event.fame), inline=True)
    embed.set_footer(text=f"Event {event.event_id}")
    return embed


def build_recent_kills_embed(member_name: str, rows: Sequence[KillEvent]) -> discord.Embed:
    embed = discord.Embed(
        title=f"\U0001f4dc Recent activity — {member_name}",
        color=INFO_COLOR,
    )
    if not rows:
        embed.description = "No recorded kills or deaths yet."
        return embed

    lines = []
    for row in rows:
        if row.is_kill:
            lines.append(f"⚔️ killed **{row.victim_name}** (+{_fmt(row.fame)} fame)")
        else:
            lines.append(f"\U0001f480 killed by **{row.killer_name}** ({_fmt(row.fame)} fame)")
    embed.description = "\n".join(lines)
    kills = sum(1 for r in rows if r.is_kill)
    embed.set_footer(text=f"{kills} kills / {len(rows) - kills} deaths in the last {len(rows)} events")
    return embed


# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------
def build_price_embed(item_name: str, prices: Sequence[PriceQuote]) -> discord.Embed:
    """Cheapest sell orders first, up to six cities."""
    embed = discord.Embed(title=f"\U0001f4b0 {item_name} Prices", color=INFO_COLOR)
    embed.timestamp = discord.utils.utcnow()

    if not prices:
        embed.description = "No recent price data available"
        return embed

    selling = sorted((p for p in prices if p.sell_price_min > 0), key=lambda p: p.sell_price_min)
    if not selling:
        embed.description = "No current market orders found"
        return embed

    for p in selling[:6]:
        embed.add_field(
            name=p.city,
            value=(
                f"Sell: {_fmt(p.sell_price_min)}\n"
                f"Buy: {_fmt(p.buy_price_max)}\n"
                f"Updated: {_relative(p.sell_price_min_date)}"
            ),
            inline=True,
        )
    return embed


def build_premium_embed(prices: Sequence[PriceQuote]) -> discord.Embed:
    embed = discord.Embed(
        title="\U0001f48e Premium Prices",
        description="Current premium subscription prices across markets",
        color=PREMIUM_COLOR,
    )
    embed.timestamp = discord.utils.utcnow()
    if not prices:
        embed.description = "No premium price data available"
        return embed
    for p in prices[:6]:
        value = f"{_fmt(p.sell_price_min)} silver" if p.sell_price_min else "N/A"
        embed.add_field(name=p.city, value=value, inline=True)
    return embed


def build_gold_embed(latest: GoldPrice) -> discord.Embed:
    embed = discord.Embed(title="\U0001fa99 Live Gold Price", color=GOLD_COLOR)
    embed.add_field(name="Current Price", value=f"{_fmt(latest.price)} silver", inline=True)
    embed.add_field(name="Last Updated", value=_relative(latest.timestamp), inline=True)
    return embed


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def build_player_embed(player: PlayerDetail) -> discord.Embed:
    embed = discord.Embed(title=f"\U0001f464 {player.name}", color=INFO_COLOR)
    embed.add_field(name="Guild", value=player.guild_name or "None", inline=True)
    embed.add_field(name="Alliance", value=player.alliance_name or "None", inline=True)
    embed.add_field(name="Kill Fame", value=_fmt(player.kill_fame), inline=True)
    embed.add_field(name="Death Fame", value=_fmt(player.death_fame), inline=True)
    ratio = f"{player.fame_ratio:.2f}" if player.fame_ratio is not None else "0"
    embed.add_field(name="Fame Ratio", value=ratio, inline=True)
    return embed


def build_guild_embed(guild: GuildDetail) -> discord.Embed:
    embed = discord.Embed(title=f"\U0001f3f0 {guild.name}", color=INFO_COLOR)
    embed.add_field(name="Alliance", value=guild.alliance_name or "None", inline=True)
    members = len(guild.members) or guild.member_count
    embed.add_field(name="Members", value=str(members), inline=True)
    founded = discord.utils.format_dt(guild.founded, style="D") if guild.founded else "Unknown"
    embed.add_field(name="Founded", value=founded, inline=True)
    embed.add_field(name="Kill Fame", value=_fmt(guild.kill_fame), inline=True)
    embed.add_field(name="Death Fame", value=_fmt(guild.death_fame), inline=True)
    return embed


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------
def build_build_embed(build: Build, creator_name: str) -> discord.Embed:
    embed = discord.Embed(
        title=f"⚔️ {build.build_name}",
        description=build.description or "No description provided",
        color=INFO_COLOR,
        timestamp=build.created_at,
    )
    for slot in BUILD_SLOTS:
        label = slot.replace("_", "-").capitalize()
        embed.add_field(name=label, value=getattr(build, slot) or "None", inline=True)
    spells = build.spell_list
    if spells:
        embed.add_field(name="Spells", value=", ".join(spells), inline=False)
    embed.set_footer(text=f"Created by {creator_name}")
    return embed


def build_build_list_embed(builds: Sequence[Build]) -> discord.Embed:
    embed = discord.Embed(title="\U0001f4d6 Server Builds", color=INFO_COLOR)
    if not builds:
        embed.description = "No builds yet. Create one with `/new-build`."
        return embed
    embed.description = "\n".join(
        f"**{b.build_name}** — <@{b.creator_id}>" for b in builds[:25]
    )
    if len(builds) > 25:
        embed.set_footer(text=f"… and {len(builds) - 25} more")
    return embed


# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------
def build_success_embed(title: str, description: str) -> discord.Embed:
    return discord.Embed(
        title=f"✅ {title}",
        description=description,
        color=SUCCESS_COLOR,
    )
