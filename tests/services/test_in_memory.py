"""
Tests for the in-memory collaborators.
"""

import pytest

from tower_combat.character.combatant import DropChance
from tower_combat.combat.battle_state import Floor
from tower_combat.core.constants import FloorType, SkillType
from tower_combat.core.content import ContentRepository
from tower_combat.services.in_memory import (
    ContentFloorService,
    InMemoryCemeteryService,
    InMemoryCharacterService,
    RandomRewardService,
    build_in_memory_services,
    floor_type_for,
)


@pytest.fixture
def content():
    return ContentRepository()


@pytest.mark.parametrize(
    "number, expected",
    [
        (1, FloorType.COMMON),
        (5, FloorType.BOSS),
        (10, FloorType.BOSS),
        (15, FloorType.ELITE),
        (20, FloorType.BOSS),
        (7, FloorType.COMMON),
    ],
)
def test_floor_types(number, expected):
    """
    Test that floor 5 and every tenth floor are boss floors, other fifths elite.
    """
    assert floor_type_for(number) == expected


def test_character_levels_and_skill_xp():
    """
    Test that XP grants report level-ups and skill XP is cumulative.
    """
    characters = InMemoryCharacterService()
    grant = characters.grant_xp("p1", 150, "test")
    assert grant.leveled_up
    assert grant.new_level == 2
    assert characters.add_skill_xp("p1", SkillType.SWORD_MASTERY, 60).new_level == 1
    result = characters.add_skill_xp("p1", SkillType.SWORD_MASTERY, 60)
    assert result.leveled_up
    assert result.new_level == 2


def test_cemetery_buries_once():
    """
    Test that a character can only be buried once.
    """
    cemetery = InMemoryCemeteryService()
    assert cemetery.kill_character("p1", "Slain", "Goblin")
    assert not cemetery.kill_character("p1", "Slain", "Goblin")


def test_drops_roll_quantity(scripted):
    """
    Test that a successful drop roll picks a quantity within the range.
    """
    rewards = RandomRewardService(scripted([0.1, 0.5]))
    table = [DropChance(drop_id="fang", drop_chance=0.5, min_quantity=1, max_quantity=3)]
    (drop,) = rewards.roll_drops(1, table, 1.0)
    assert drop.drop_id == "fang"
    assert drop.quantity == 2


def test_drop_chance_is_capped(scripted):
    """
    Test that no drop is ever guaranteed above 95%.
    """
    rewards = RandomRewardService(scripted([0.96]))
    table = [DropChance(drop_id="gem", drop_chance=1.0)]
    assert rewards.roll_drops(50, table, 1.5) == []


def test_seventh_floor_is_an_event(content, player, scripted):
    """
    Test that every seventh floor that is not a boss floor holds an event.
    """
    floors = ContentFloorService(content, scripted())
    advance = floors.advance(player, Floor(number=6))
    assert advance.floor.number == 7
    assert advance.event is not None
    assert advance.enemy is None


def test_boss_floor_spawns_strongest_enemy(content, player, scripted):
    """
    Test that a boss floor picks the highest level enemy available.
    """
    floors = ContentFloorService(content, scripted())
    advance = floors.advance(player, Floor(number=4))
    assert advance.floor.floor_type == FloorType.BOSS
    assert advance.enemy.id == "stone_golem"


def test_build_services(content, scripted):
    """
    Test that the builder wires every collaborator.
    """
    services = build_in_memory_services(content, scripted())
    assert services.inventory.consume("p1", "health_potion", None).success is False
