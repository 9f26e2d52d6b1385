"""
Tests for loading game content from JSON files.
"""

import json

import pytest

from tower_combat.core.constants import SpellEffectType, WeaponCategory
from tower_combat.core.content import ContentRepository


@pytest.fixture
def content():
    return ContentRepository()


@pytest.fixture
def data_dir(tmp_path):
    spells = [
        {"id": "spark", "name": "Spark", "effect_type": "damage", "effect_value": 5, "mana_cost": 3},
        {"id": "rot", "name": "Rot", "effect_type": "dot", "effect_value": 4, "mana_cost": 6},
    ]
    weapons = [{"id": "club", "name": "Wooden Club", "equipment_type": "WEAPON"}]
    enemies = [{"id": "rat", "name": "Rat", "hp": 10, "max_hp": 10}]
    for name, data in (("spells", spells), ("weapons", weapons), ("enemies", enemies)):
        (tmp_path / f"{name}.json").write_text(json.dumps(data), encoding="utf-8")
    return tmp_path


def test_bundled_content_loads_lazily(content):
    """
    Test that content is read on first access.
    """
    assert not content.loaded
    spell = content.get_spell("fireball")
    assert content.loaded
    assert spell.effect_type == SpellEffectType.DAMAGE
    assert content.get_spell("missing") is None


def test_spells_are_handed_out_as_copies(content):
    """
    Test that changing a returned spell does not alter the repository.
    """
    spell = content.get_spell("fireball")
    spell.current_cooldown = 5
    assert content.get_spell("fireball").current_cooldown == 0


def test_weapon_categories_resolved_at_load(content):
    """
    Test that weapon categories are resolved when the content is loaded.
    """
    assert content.get_weapon("war_hammer").category == WeaponCategory.BLUNT
    assert content.get_weapon("battle_axe").category == WeaponCategory.AXE
    assert content.get_weapon("moonlight_edge").category == WeaponCategory.MAGIC
    assert content.get_weapon("wooden_shield").category is None


def test_spawned_enemies_are_fresh(content):
    """
    Test that every spawn is an independent enemy.
    """
    first = content.spawn_enemy("goblin")
    first.hp = 0
    assert content.spawn_enemy("goblin").hp > 0


def test_enemies_up_to_level(content):
    """
    Test filtering enemy templates by level.
    """
    ids = {enemy.id for enemy in content.enemies_up_to_level(2)}
    assert ids == {"goblin", "dire_wolf"}


def test_malformed_entries_are_skipped(data_dir):
    """
    Test that an invalid entry is dropped while the rest loads.
    """
    content = ContentRepository(data_dir)
    assert content.get_spell("spark") is not None
    assert content.get_spell("rot") is None
    assert content.get_weapon("club").category == WeaponCategory.BLUNT


def test_duplicate_ids_are_rejected(data_dir):
    """
    Test that two entries with the same id abort loading.
    """
    enemies = [{"id": "rat", "name": "Rat", "hp": 10, "max_hp": 10}] * 2
    (data_dir / "enemies.json").write_text(json.dumps(enemies), encoding="utf-8")
    with pytest.raises(ValueError):
        ContentRepository(data_dir).reload()


def test_missing_directory_is_rejected(tmp_path):
    """
    Test that loading from a directory without content files fails.
    """
    with pytest.raises(ValueError):
        ContentRepository(tmp_path / "nowhere").reload()


def test_invalidate_and_reload(content, data_dir):
    """
    Test that invalidating drops the cache and reload can switch directories.
    """
    content.get_spell("fireball")
    content.invalidate()
    assert not content.loaded
    content.reload(data_dir)
    assert content.get_spell("fireball") is None
    assert content.get_spell("spark") is not None
