"""
killboard.constants — Shared Constants
=======================================

Single source of truth for upstream endpoints, market locations and
presentation constants.  Import from here instead of duplicating in cogs
and services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Upstream endpoints
# ---------------------------------------------------------------------------
GAMEINFO_API = "https://gameinfo.albiononline.com/api/gameinfo"
DATA_API = "https://www.albion-online-data.com/api/v2/stats"
RENDER_API = "https://render.albiononline.com/v1"

# Region label → status endpoint
SERVER_STATUS_URLS: dict[str, str] = {
    "Americas": "https://serverstatus.albiononline.com/",
    "Europe": "https://serverstatus-ams.albiononline.com/",
    "Asia": "https://serverstatus-sgp.albiononline.com/",
}

# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------
MARKET_CITIES: list[str] = [
    "Caerleon",
    "Bridgewatch",
    "Lymhurst",
    "Martlock",
    "Thetford",
    "Fort Sterling",
]

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
KILL_COLOR = 0x2ECC71
DEATH_COLOR = 0xE74C3C
INFO_COLOR = 0x0099FF
SUCCESS_COLOR = 0x00FF00
PREMIUM_COLOR = 0x9932CC
GOLD_COLOR = 0xFFD700

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "de": "Deutsch",
    "fr": "Français",
    "es": "Español",
    "pt": "Português",
    "ru": "Русский",
}

# Equipment slots a build can fill, in display order.
BUILD_SLOTS: list[str] = [
    "weapon",
    "off_hand",
    "helmet",
    "armor",
    "shoes",
    "cape",
    "bag",
    "mount",
    "food",
    "potion",
]
