"""
killboard.bot.cogs.killboard — Killboard Management Commands
=============================================================

- /killboard info        — channel, language and tracked entities
- /killboard set-channel — where this server wants its kill feed
- /killboard track       — follow an Albion player or guild
- /killboard untrack     — stop following by name
- /killboard remove      — reset settings and drop every tracker
- /killboard poll        — run one poller tick now (admin role)
- /kills                 — recent stored kills/deaths of a guild member

Mutating subcommands need the Manage Server permission.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from killboard.constants import INFO_COLOR
from killboard.database.engine import run_db
from killboard.database.models import EntityType
from killboard.services.albion_client import AlbionAPIError
from killboard.services.embeds import build_recent_kills_embed, build_success_embed
from killboard.services.killboard_service import get_recent_kills
from killboard.services.settings_service import (
    get_server_settings,
    reset_server_settings,
    update_server_settings,
)
from killboard.services.tracking_service import (
    add_tracked_entity,
    clear_tracked_entities,
    get_tracked_entities,
    remove_tracked_entity_by_name,
)

if TYPE_CHECKING:
    from killboard.bot.core import KillboardBot

logger = logging.getLogger(__name__)


def is_admin():
    """Check that the user holds the configured admin role."""
    async def predicate(interaction: discord.Interaction) -> bool:
        bot: KillboardBot = interaction.client  # type: ignore[assignment]
        admin_role_id = bot.cfg.admin_role_id
        if admin_role_id is None or not hasattr(interaction.user, "roles"):
            return False
        return any(role.id == admin_role_id for role in interaction.user.roles)
    return app_commands.check(predicate)


class Killboard(commands.Cog, name="Killboard"):
    """Kill feed configuration and history."""

    killboard = app_commands.Group(
        name="killboard",
        description="Killboard management",
        guild_only=True,
    )

    def __init__(self, bot: KillboardBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # /killboard info
    # -------------------------------------------------------------------
    @killboard.command(name="info", description="Display killboard information")
    async def info(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            settings = await run_db(get_server_settings, self.bot.engine, interaction.guild_id)
            tracked = await run_db(get_tracked_entities, self.bot.engine, interaction.guild_id)
        except Exception:
            logger.exception("Killboard info failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error fetching killboard information")
            return

        channel = settings["killboard_channel"]
        embed = discord.Embed(title="⚔️ Killboard Information", color=INFO_COLOR)
        embed.add_field(name="Channel", value=f"<#{channel}>" if channel else "Not set", inline=True)
        embed.add_field(name="Tracked Entities", value=str(len(tracked)), inline=True)
        embed.add_field(name="Language", value=settings["language"], inline=True)
        if tracked:
            embed.add_field(
                name="Currently Tracking",
                value="\n".join(f"{t.entity_type}: {t.entity_name}" for t in tracked),
                inline=False,
            )
        await interaction.followup.send(embed=embed)

    # -------------------------------------------------------------------
    # /killboard set-channel
    # -------------------------------------------------------------------
    @killboard.command(name="set-channel", description="Set channel for kills/deaths feed")
    @app_commands.describe(channel="Channel for killboard")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def set_channel(
        self, interaction: discord.Interaction, channel: discord.TextChannel,
    ) -> None:
        await interaction.response.defer()
        try:
            await run_db(
                update_server_settings, self.bot.engine, interaction.guild_id,
                killboard_channel=channel.id,
            )
        except Exception:
            logger.exception("Set channel failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error setting killboard channel")
            return
        await interaction.followup.send(
            embed=build_success_embed("Channel Set", f"Killboard channel set to {channel.mention}")
        )

    # -------------------------------------------------------------------
    # /killboard track
    # -------------------------------------------------------------------
    @killboard.command(name="track", description="Track a player or guild")
    @app_commands.rename(entity_type="type")
    @app_commands.describe(entity_type="What to track", name="Player or guild name")
    @app_commands.choices(entity_type=[
        app_commands.Choice(name=t.value.title(), value=t.value) for t in EntityType
    ])
    @app_commands.checks.has_permissions(manage_guild=True)
    async def track(self, interaction: discord.Interaction, entity_type: str, name: str) -> None:
        await interaction.response.defer()
        try:
            results = await self.bot.albion.search(name)
        except AlbionAPIError as exc:
            logger.warning("Search for %r failed: %s", name, exc)
            await interaction.followup.send("Error adding tracker")
            return

        hits = results.players if entity_type == EntityType.PLAYER else results.guilds
        if not hits:
            await interaction.followup.send(f'{entity_type} "{name}" not found')
            return

        entity = hits[0]
        try:
            added = await run_db(
                add_tracked_entity, self.bot.engine, interaction.guild_id,
                entity.id, entity.name, entity_type,
            )
        except Exception:
            logger.exception("Track failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error adding tracker")
            return

        if added:
            await interaction.followup.send(
                embed=build_success_embed("Now Tracking", f'Now tracking {entity_type} "{entity.name}"')
            )
        else:
            await interaction.followup.send(f'{entity_type} "{entity.name}" is already being tracked')

    # -------------------------------------------------------------------
    # /killboard untrack
    # -------------------------------------------------------------------
    @killboard.command(name="untrack", description="Stop tracking a player or guild")
    @app_commands.describe(name="Name of the tracked player or guild")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def untrack(self, interaction: discord.Interaction, name: str) -> None:
        await interaction.response.defer()
        try:
            removed = await run_db(
                remove_tracked_entity_by_name, self.bot.engine, interaction.guild_id, name,
            )
        except Exception:
            logger.exception("Untrack failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error removing tracker")
            return

        if removed is None:
            await interaction.followup.send(f'No tracker found for "{name}"')
            return
        await interaction.followup.send(
            embed=build_success_embed("Tracker Removed", f'Stopped tracking "{removed.entity_name}"')
        )

    @untrack.autocomplete("name")
    async def _tracked_autocomplete(
        self, interaction: discord.Interaction, current: str,
    ) -> list[app_commands.Choice[str]]:
        tracked = await run_db(get_tracked_entities, self.bot.engine, interaction.guild_id)
        return [
            app_commands.Choice(name=t.entity_name, value=t.entity_name)
            for t in tracked
            if current.lower() in t.entity_name.lower()
        ][:25]

    # -------------------------------------------------------------------
    # /killboard remove
    # -------------------------------------------------------------------
    @killboard.command(name="remove", description="Reset killboard in this server")
    @app_commands.checks.has_permissions(manage_guild=True)
    async def remove(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            await run_db(reset_server_settings, self.bot.engine, interaction.guild_id)
            cleared = await run_db(clear_tracked_entities, self.bot.engine, interaction.guild_id)
        except Exception:
            logger.exception("Killboard reset failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error resetting killboard")
            return

        logger.info("Server %s reset its killboard (%d trackers dropped)", interaction.guild_id, cleared)
        await interaction.followup.send(
            embed=build_success_embed(
                "Killboard Reset", "All killboard settings and trackers have been removed",
            )
        )

    # -------------------------------------------------------------------
    # /killboard poll
    # -------------------------------------------------------------------
    @killboard.command(name="poll", description="Check for new kills and deaths right now")
    @is_admin()
    async def poll(self, interaction: discord.Interaction) -> None:
        if self.bot.poller.in_flight:
            await interaction.response.send_message(
                "⏳ A poll is already running.", ephemeral=True,
            )
            return

        await interaction.response.defer(ephemeral=True)
        result = await self.bot.poller.tick()
        if result.skipped:
            await interaction.followup.send("⏳ A poll is already running.", ephemeral=True)
        elif result.aborted:
            await interaction.followup.send(f"⚠️ Poll aborted: {result.aborted}", ephemeral=True)
        else:
            await interaction.followup.send(
                f"✅ Polled {result.members_polled} members "
                f"({result.members_failed} failed), "
                f"{result.notifications_sent} new notifications.",
                ephemeral=True,
            )

    # -------------------------------------------------------------------
    # /kills
    # -------------------------------------------------------------------
    @app_commands.command(name="kills", description="Recent kills and deaths of a guild member")
    @app_commands.describe(member="Albion character name", limit="How many events (max 25)")
    async def kills(
        self,
        interaction: discord.Interaction,
        member: str,
        limit: app_commands.Range[int, 1, 25] = 10,
    ) -> None:
        await interaction.response.defer()
        try:
            rows = await run_db(get_recent_kills, self.bot.engine, member, limit)
        except Exception:
            logger.exception("Recent kills lookup failed for %r", member)
            await interaction.followup.send("Error fetching kill history")
            return
        await interaction.followup.send(embed=build_recent_kills_embed(member, rows))

    # -------------------------------------------------------------------
    # Error handler for permission checks
    # -------------------------------------------------------------------
    async def cog_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        if isinstance(error, app_commands.MissingPermissions):
            message = "🔒 You need the Manage Server permission to use this command."
        elif isinstance(error, app_commands.CheckFailure):
            message = "🔒 You need the Admin role to use this command."
        else:
            raise error
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)


async def setup(bot: KillboardBot) -> None:
    await bot.add_cog(Killboard(bot))
