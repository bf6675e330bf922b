"""
killboard.services.items — Item Name Lookup
============================================

Maps the common item names players type into Albion item ids.

Lookup contract:

1. An exact (case-insensitive) name match returns its id.
2. Anything shaped like an item id (``T4_SWORD``, ``T6_2H_BOW@2``) is
   taken as-is.
3. Otherwise :func:`find_item_suggestions` offers up to ten names that
   contain the search term.
"""

from __future__ import annotations

import random
import re

ITEM_ID_RE = re.compile(r"^T[2-8]_", re.IGNORECASE)
MAX_SUGGESTIONS = 10

ITEM_DATABASE: dict[str, str] = {
    # Resources: planks
    "chestnut planks": "T3_PLANKS_LEVEL1@1",
    "pine planks": "T4_PLANKS_LEVEL1@1",
    "cedar planks": "T5_PLANKS_LEVEL1@1",
    "bloodoak planks": "T6_PLANKS_LEVEL1@1",
    "ashenbark planks": "T7_PLANKS_LEVEL1@1",
    "elderwood planks": "T8_PLANKS_LEVEL1@1",
    # Resources: logs
    "rough logs": "T2_WOOD",
    "birch logs": "T3_WOOD",
    "chestnut logs": "T4_WOOD",
    "pine logs": "T5_WOOD",
    "cedar logs": "T6_WOOD",
    "bloodoak logs": "T7_WOOD",
    "ashenbark logs": "T8_WOOD",
    # Resources: stone
    "rough stone": "T2_ROCK",
    "limestone": "T3_ROCK",
    "sandstone": "T4_ROCK",
    "travertine": "T5_ROCK",
    "granite": "T6_ROCK",
    "slate": "T7_ROCK",
    "basalt": "T8_ROCK",
    # Resources: hide
    "raw hide": "T2_HIDE",
    "scrapped hide": "T3_HIDE",
    "rugged hide": "T4_HIDE",
    "thick hide": "T5_HIDE",
    "resilient hide": "T6_HIDE",
    "robust hide": "T7_HIDE",
    "superior hide": "T8_HIDE",
    # Weapons: swords
    "novice sword": "T3_SWORD",
    "adept sword": "T4_SWORD",
    "expert sword": "T5_SWORD",
    "master sword": "T6_SWORD",
    "grandmaster sword": "T7_SWORD",
    "elder sword": "T8_SWORD",
    "broadsword": "T4_SWORD",
    "claymore": "T4_2H_CLAYMORE",
    "dual swords": "T4_2H_DUALSWORD",
    # Weapons: axes
    "battle axe": "T4_AXE",
    "greataxe": "T4_2H_AXE",
    "halberd": "T4_2H_HALBERD",
    # Weapons: hammers
    "war hammer": "T4_HAMMER",
    "great hammer": "T4_2H_HAMMER",
    "polehammer": "T4_2H_POLEHAMMER",
    # Weapons: bows & crossbows
    "bow": "T4_BOW",
    "warbow": "T4_BOW_LONGBOW",
    "crossbow": "T4_CROSSBOW",
    "heavy crossbow": "T4_CROSSBOW_CANNON",
    # Armor: cloth
    "scholar cowl": "T4_HEAD_CLOTH_SET1",
    "scholar robe": "T4_ARMOR_CLOTH_SET1",
    "scholar sandals": "T4_SHOES_CLOTH_SET1",
    # Armor: leather
    "mercenary hood": "T4_HEAD_LEATHER_SET1",
    "mercenary jacket": "T4_ARMOR_LEATHER_SET1",
    "mercenary shoes": "T4_SHOES_LEATHER_SET1",
    # Armor: plate
    "soldier helmet": "T4_HEAD_PLATE_SET1",
    "soldier armor": "T4_ARMOR_PLATE_SET1",
    "soldier boots": "T4_SHOES_PLATE_SET1",
    # Consumables
    "minor healing potion": "T3_POTION_HEAL",
    "healing potion": "T4_POTION_HEAL",
    "major healing potion": "T5_POTION_HEAL",
    "pork pie": "T3_MEAL",
    "goose pie": "T4_MEAL",
    "pork omelette": "T5_MEAL",
    # Mounts
    "riding horse": "T3_MOUNT_HORSE",
    "armored horse": "T4_MOUNT_HORSE",
    "heavy war horse": "T5_MOUNT_HORSE",
    "ox": "T4_MOUNT_OX",
    "giant stag": "T5_MOUNT_STAG",
    # Premium
    "premium": "PREMIUM",
}


def find_item_id(search_term: str) -> str | None:
    """Resolve *search_term* to an item id, or None."""
    term = search_term.strip()
    by_name = ITEM_DATABASE.get(term.lower())
    if by_name:
        return by_name
    if ITEM_ID_RE.match(term):
        return term.upper()
    return None


def find_item_suggestions(search_term: str) -> list[tuple[str, str]]:
    """``(name, item_id)`` pairs whose name contains *search_term*."""
    term = search_term.strip().lower()
    if not term:
        return []
    return [
        (name, item_id)
        for name, item_id in ITEM_DATABASE.items()
        if term in name
    ][:MAX_SUGGESTIONS]


# ---------------------------------------------------------------------------
# Random weapon roll
# ---------------------------------------------------------------------------
WEAPON_TYPES: list[str] = [
    "SWORD", "AXE", "HAMMER", "SPEAR", "BOW", "CROSSBOW", "FIRESTAFF",
    "FROSTSTAFF", "HOLYSTAFF", "ARCANESTAFF", "CURSESTAFF", "NATURESTAFF", "DAGGER",
]
WEAPON_TIERS: list[str] = ["T4", "T5", "T6", "T7", "T8"]
ENCHANTMENTS: list[str] = ["", "@1", "@2", "@3"]


def random_weapon(rng: random.Random | None = None) -> tuple[str, str, str]:
    """Roll a ``(item_id, weapon_type, tier)`` triple."""
    rng = rng or random.Random()
    weapon = rng.choice(WEAPON_TYPES)
    tier = rng.choice(WEAPON_TIERS)
    enchant = rng.choice(ENCHANTMENTS)
    return f"{tier}_{weapon}{enchant}", weapon, tier
