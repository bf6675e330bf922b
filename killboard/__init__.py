"""
Killboard — An Albion Online Killboard Bot for Discord
=======================================================
Watches an Albion Online guild's kills and deaths, announces them to a
Discord channel, and answers market, player and guild lookups.  Per-server
settings, tracked entities and user-authored builds live in a small
relational store.

Package layout::

    killboard/
    ├── config.py          # YAML + env → typed Python config
    ├── constants.py       # API endpoints, market cities, embed colours
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # ORM models (5 tables)
    ├── engine/
    │   ├── schemas.py     # Strict pydantic models for upstream payloads
    │   ├── admission.py   # Bounded dedup filter for polled events
    │   └── occurrences.py # Kill/death classification per member
    ├── services/
    │   ├── albion_client.py     # httpx wrapper for the Albion APIs
    │   ├── poller.py            # The kill/death polling pipeline
    │   ├── notifier.py          # Discord channel notification sink
    │   ├── embeds.py            # Embed builders
    │   ├── items.py             # Item name → item id lookup
    │   ├── killboard_service.py # Kill events + guild member cache
    │   ├── tracking_service.py  # Tracked players/guilds
    │   ├── settings_service.py  # Per-server settings
    │   └── build_service.py     # Custom builds
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        └── cogs/
            ├── killboard.py  # /killboard, /kills
            ├── builds.py     # /build, /new-build, /remove-build, /builds
            ├── market.py     # /price, /premium, /gold, /image, /randomator
            ├── lookup.py     # /player, /guild
            ├── server.py     # /set-language, /set-builder-role, /server-status
            └── tasks.py      # Poller loop
"""

__version__ = "0.1.0"
