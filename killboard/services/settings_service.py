"""
killboard.services.settings_service — Per-Server Settings
==========================================================

Typed read/write access to the ``server_settings`` table.  One row per
Discord server; writes are upserts scoped by the server id.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from killboard.database.models import ServerSettings

logger = logging.getLogger(__name__)

SETTING_FIELDS = frozenset({"killboard_channel", "language", "builder_role", "status_channel"})

DEFAULTS: dict[str, str | None] = {
    "killboard_channel": None,
    "language": "en",
    "builder_role": None,
    "status_channel": None,
}


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_server_settings(engine, guild_id: str | int) -> dict:
    """Fetch the settings for *guild_id* as a plain dict.

    Missing rows read as the defaults, so callers never have to special-case
    a server that has not configured anything yet.
    """
    with Session(engine) as session:
        row = session.get(ServerSettings, str(guild_id))
        if row is None:
            return {"guild_id": str(guild_id), **DEFAULTS}
        return {
            "guild_id": row.guild_id,
            "killboard_channel": row.killboard_channel,
            "language": row.language,
            "builder_role": row.builder_role,
            "status_channel": row.status_channel,
        }


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def update_server_settings(engine, guild_id: str | int, **changes) -> dict:
    """Insert or update the settings row for *guild_id*.

    Only the given fields change; the rest keep their stored (or default)
    values.  Snowflake ints are stored as text.

    Raises
    ------
    ValueError
        If a field name is not a known setting.
    """
    unknown = set(changes) - SETTING_FIELDS
    if unknown:
        raise ValueError(f"Unknown server settings: {', '.join(sorted(unknown))}")

    with Session(engine) as session:
        row = session.get(ServerSettings, str(guild_id))
        if row is None:
            row = ServerSettings(guild_id=str(guild_id), **DEFAULTS)
            session.add(row)
        for key, value in changes.items():
            if key == "language":
                value = value or "en"
            elif value is not None:
                value = str(value)
            setattr(row, key, value)
        session.commit()

    logger.info("Updated settings for server %s: %s", guild_id, ", ".join(sorted(changes)))
    return get_server_settings(engine, guild_id)


def reset_server_settings(engine, guild_id: str | int) -> dict:
    """Restore every setting for *guild_id* to its default."""
    return update_server_settings(engine, guild_id, **DEFAULTS)
