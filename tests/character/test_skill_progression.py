"""
Tests for mastery skill XP.
"""

import pytest

from tower_combat.character.skill_progression import (
    SkillXpGain,
    apply_skill_gains,
    on_attack,
    on_defend,
    on_spell_cast,
)
from tower_combat.core.constants import EquipmentType, SkillType, WeaponCategory
from tower_combat.core.error_handling import CollaboratorWarning
from tower_combat.items.equipment import Equipment, infer_weapon_category


@pytest.fixture
def sword():
    return Equipment(id="iron_sword", name="Iron Sword", equipment_type=EquipmentType.WEAPON)


@pytest.fixture
def axe():
    return Equipment(id="hatchet", name="Hatchet", equipment_type=EquipmentType.WEAPON)


def test_weapon_category_inferred_once(sword, axe):
    """
    Test that weapons without a category get one inferred from their name.
    """
    assert sword.category == WeaponCategory.SWORD
    assert axe.category == WeaponCategory.AXE
    assert infer_weapon_category("War Hammer") == WeaponCategory.BLUNT
    assert infer_weapon_category("Mystery Thing") == WeaponCategory.SWORD


def test_explicit_category_is_kept():
    """
    Test that an explicit category wins over the name.
    """
    blade = Equipment(
        id="moonlight_edge",
        name="Moonlight Blade",
        equipment_type=EquipmentType.WEAPON,
        category=WeaponCategory.MAGIC,
    )
    assert blade.category == WeaponCategory.MAGIC


def test_attack_xp_is_a_tenth_of_damage(sword):
    """
    Test that a landed attack trains the weapon's mastery by damage // 10.
    """
    gains = on_attack(sword, 40)
    assert gains == [SkillXpGain(skill=SkillType.SWORD_MASTERY, amount=4)]


def test_attack_xp_has_minimum(sword):
    """
    Test that a weak hit still grants one XP.
    """
    assert on_attack(sword, 3)[0].amount == 1


def test_attack_without_weapon_grants_nothing():
    """
    Test that unarmed attacks train no mastery.
    """
    assert on_attack(None, 40) == []


def test_dual_wielding_splits_xp(sword, axe):
    """
    Test that dual wielding boosts the main hand and trains the off hand.
    """
    main, off = on_attack(sword, 40, axe)
    assert main.skill == SkillType.SWORD_MASTERY and main.amount == 5
    assert off.skill == SkillType.AXE_MASTERY and off.amount == 3
    assert off.off_hand


@pytest.mark.parametrize(
    "has_shield, blocked, expected",
    [
        (False, 0, 3),
        (True, 0, 7),
        (False, 4, 2),
        (False, 50, 10),
        (True, 50, 25),
    ],
)
def test_defend_xp(has_shield, blocked, expected):
    """
    Test defense mastery XP, with the flat reward and the shield bonus.
    """
    (gain,) = on_defend(has_shield, blocked)
    assert gain.skill == SkillType.DEFENSE_MASTERY
    assert gain.amount == expected


def test_spell_xp_with_staff_bonus():
    """
    Test magic XP from cost and magnitude, plus the off-hand staff bonus.
    """
    assert on_spell_cast(20, 32, False)[0].amount == 14
    main, staff = on_spell_cast(20, 32, True)
    assert main.amount == 14
    assert staff.amount == 2
    assert on_spell_cast(0, 0, False)[0].amount == 2


def test_apply_gains_levels_up_through_service(player, characters):
    """
    Test that crossing 100 XP reports a level-up confirmed by the service.
    """
    player.skills[SkillType.SWORD_MASTERY].xp = 95
    characters.seed_skills(player)
    warnings: list[CollaboratorWarning] = []
    level_ups, events = apply_skill_gains(
        player,
        [SkillXpGain(skill=SkillType.SWORD_MASTERY, amount=10)],
        characters,
        warnings,
    )
    assert player.skills[SkillType.SWORD_MASTERY].xp == 105
    assert player.skill_level(SkillType.SWORD_MASTERY) == 2
    assert [(lu.old_level, lu.new_level) for lu in level_ups] == [(1, 2)]
    assert len(events) == 2
    assert warnings == []


def test_apply_gains_survives_persistence_failure(player, characters):
    """
    Test that a failing service keeps the local XP and reports a warning.
    """
    characters.fail = {"add_skill_xp"}
    player.skills[SkillType.DEFENSE_MASTERY].xp = 98
    warnings: list[CollaboratorWarning] = []
    level_ups, _ = apply_skill_gains(
        player,
        [SkillXpGain(skill=SkillType.DEFENSE_MASTERY, amount=3)],
        characters,
        warnings,
    )
    assert player.skills[SkillType.DEFENSE_MASTERY].xp == 101
    assert len(warnings) == 1
    assert warnings[0].operation == "add_skill_xp"
    assert level_ups[0].new_level == 2


def test_skill_xp_never_decreases(player):
    """
    Test that negative XP amounts are ignored.
    """
    progress = player.skills[SkillType.MAGIC_MASTERY]
    progress.add_xp(-50)
    assert progress.xp == 0
    assert progress.level == 1
