"""
killboard.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for the bot's soft settings (which Albion
guild to watch, where to announce, how often to poll).  Secrets such as
``DISCORD_TOKEN`` and ``DATABASE_URL`` stay in ``.env``.

A handful of deployment-sensitive keys can be overridden from the
environment so the same ``config.yaml`` works across hosts:

* ``KILLBOARD_GUILD_ID``   → ``tracked_guild_id``
* ``KILLBOARD_CHANNEL_ID`` → ``killboard_channel_id``
* ``POLL_INTERVAL_SECONDS`` → ``poll_interval_seconds``

Usage::

    from killboard.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.tracked_guild_id)      # "gZ3Qd1ZfQ1yB7pq6F4pHsg"
    print(cfg.poll_interval_seconds) # 60
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_POLL_INTERVAL_SECONDS = 60
DEFAULT_PROCESSED_KEY_CAP = 1000


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class KillboardConfig:
    """Immutable configuration loaded from ``config.yaml`` (+ env overrides).

    Injected once at process start; nothing mutates it afterwards.
    """

    # Discord
    bot_prefix: str
    killboard_channel_id: int | None  # Where kill/death notifications go

    # Albion
    tracked_guild_id: str  # Albion guild whose roster is polled

    # Poller tuning
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    initial_delay_seconds: float = 5.0
    member_delay_seconds: float = 1.0   # Throttle between member fetches
    event_page_size: int = 10
    processed_key_cap: int = DEFAULT_PROCESSED_KEY_CAP
    request_timeout_seconds: float = 10.0
    prune_departed_members: bool = False

    # Optional
    admin_role_id: int | None = None  # Role allowed to force a poll


def _optional_int(value) -> int | None:
    if value in (None, ""):
        return None
    return int(value)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def config_from_mapping(
    raw: Mapping, env: Mapping[str, str] | None = None
) -> KillboardConfig:
    """Build a :class:`KillboardConfig` from parsed YAML plus env overrides.

    Raises
    ------
    KeyError
        If ``tracked_guild_id`` is missing from both the YAML and the env.
    ValueError
        If a numeric setting is out of range.
    """
    env = os.environ if env is None else env

    guild_id = env.get("KILLBOARD_GUILD_ID") or raw.get("tracked_guild_id")
    if not guild_id:
        raise KeyError("tracked_guild_id")

    channel_id = env.get("KILLBOARD_CHANNEL_ID") or raw.get("killboard_channel_id")
    interval = env.get("POLL_INTERVAL_SECONDS") or raw.get(
        "poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS
    )

    cfg = KillboardConfig(
        bot_prefix=raw.get("bot_prefix", "!"),
        killboard_channel_id=_optional_int(channel_id),
        tracked_guild_id=str(guild_id),
        poll_interval_seconds=int(interval),
        initial_delay_seconds=float(raw.get("initial_delay_seconds", 5.0)),
        member_delay_seconds=float(raw.get("member_delay_seconds", 1.0)),
        event_page_size=int(raw.get("event_page_size", 10)),
        processed_key_cap=int(raw.get("processed_key_cap", DEFAULT_PROCESSED_KEY_CAP)),
        request_timeout_seconds=float(raw.get("request_timeout_seconds", 10.0)),
        prune_departed_members=_as_bool(raw.get("prune_departed_members", False)),
        admin_role_id=_optional_int(raw.get("admin_role_id")),
    )

    if cfg.poll_interval_seconds <= 0:
        raise ValueError("poll_interval_seconds must be positive")
    if cfg.processed_key_cap <= 0:
        raise ValueError("processed_key_cap must be positive")
    if not 1 <= cfg.event_page_size <= 51:
        raise ValueError("event_page_size must be between 1 and 51")
    return cfg


def load_config(path: str | Path = "config.yaml") -> KillboardConfig:
    """Read *path* and return a :class:`KillboardConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return config_from_mapping(raw)
