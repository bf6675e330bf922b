"""
killboard.bot.cogs.server — Server Settings & Game Status
==========================================================

- /set-language     — display language for this server
- /set-builder-role — who may create builds (omit the role to open it up)
- /server-status    — Albion game server status per region
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from killboard.constants import INFO_COLOR, SERVER_STATUS_URLS, SUPPORTED_LANGUAGES
from killboard.database.engine import run_db
from killboard.services.albion_client import AlbionAPIError
from killboard.services.embeds import build_success_embed
from killboard.services.settings_service import update_server_settings

if TYPE_CHECKING:
    from killboard.bot.core import KillboardBot

logger = logging.getLogger(__name__)


class Server(commands.Cog, name="Server"):
    """Per-server preferences and live game status."""

    def __init__(self, bot: KillboardBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # /set-language
    # -------------------------------------------------------------------
    @app_commands.command(name="set-language", description="Set the bot language for this server")
    @app_commands.describe(language="Display language")
    @app_commands.choices(language=[
        app_commands.Choice(name=label, value=code) for code, label in SUPPORTED_LANGUAGES.items()
    ])
    @app_commands.guild_only()
    @app_commands.checks.has_permissions(manage_guild=True)
    async def set_language(self, interaction: discord.Interaction, language: str) -> None:
        await interaction.response.defer()
        try:
            await run_db(update_server_settings, self.bot.engine, interaction.guild_id, language=language)
        except Exception:
            logger.exception("Set language failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error setting language")
            return
        await interaction.followup.send(
            embed=build_success_embed(
                "Language Set", f"Language set to {SUPPORTED_LANGUAGES.get(language, language)}",
            )
        )

    # -------------------------------------------------------------------
    # /set-builder-role
    # -------------------------------------------------------------------
    @app_commands.command(name="set-builder-role", description="Set the role allowed to create builds")
    @app_commands.describe(role="Builder role; leave empty to let everyone create builds")
    @app_commands.guild_only()
    @app_commands.checks.has_permissions(manage_guild=True)
    async def set_builder_role(
        self, interaction: discord.Interaction, role: discord.Role | None = None,
    ) -> None:
        await interaction.response.defer()
        try:
            await run_db(
                update_server_settings, self.bot.engine, interaction.guild_id,
                builder_role=role.id if role else None,
            )
        except Exception:
            logger.exception("Set builder role failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error setting builder role")
            return

        if role is None:
            text = "Anyone can now create builds"
        else:
            text = f"Builder role set to {role.mention}"
        await interaction.followup.send(embed=build_success_embed("Builder Role Updated", text))

    # -------------------------------------------------------------------
    # /server-status
    # -------------------------------------------------------------------
    @app_commands.command(name="server-status", description="Check Albion Online server status")
    async def server_status(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()

        embed = discord.Embed(title="\U0001f310 Albion Online Server Status", color=INFO_COLOR)
        for region in SERVER_STATUS_URLS:
            try:
                status = await self.bot.albion.server_status(region)
            except AlbionAPIError as exc:
                logger.info("Status check for %s failed: %s", region, exc)
                value = "⚪ Unknown"
            else:
                icon = "\U0001f7e2" if status.online else "\U0001f534"
                value = f"{icon} {status.status.title()}"
                if status.message:
                    value += f"\n{status.message}"
            embed.add_field(name=region, value=value, inline=True)
        embed.timestamp = discord.utils.utcnow()
        await interaction.followup.send(embed=embed)

    async def cog_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        if not isinstance(error, app_commands.MissingPermissions):
            raise error
        message = "🔒 You need the Manage Server permission to use this command."
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)


async def setup(bot: KillboardBot) -> None:
    await bot.add_cog(Server(bot))
