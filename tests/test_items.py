"""
tests/test_items.py — Item Name Lookup
=======================================
"""

from __future__ import annotations

import random

from killboard.services.items import (
    MAX_SUGGESTIONS,
    WEAPON_TIERS,
    WEAPON_TYPES,
    find_item_id,
    find_item_suggestions,
    random_weapon,
)


class TestFindItemId:
    def test_exact_name_case_insensitive(self):
        assert find_item_id("Pine Planks") == "T4_PLANKS_LEVEL1@1"

    def test_item_id_passthrough(self):
        assert find_item_id("t6_2h_bow@2") == "T6_2H_BOW@2"

    def test_unknown(self):
        assert find_item_id("excalibur") is None


class TestSuggestions:
    def test_substring_matches(self):
        names = [name for name, _ in find_item_suggestions("planks")]
        assert "pine planks" in names
        assert all("planks" in n for n in names)

    def test_capped(self):
        assert len(find_item_suggestions("a")) <= MAX_SUGGESTIONS

    def test_blank(self):
        assert find_item_suggestions("  ") == []


class TestRandomWeapon:
    def test_shape(self):
        item_id, weapon, tier = random_weapon(random.Random(7))
        assert weapon in WEAPON_TYPES
        assert tier in WEAPON_TIERS
        assert item_id.startswith(f"{tier}_{weapon}")
        assert find_item_id(item_id) == item_id
