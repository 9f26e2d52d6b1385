"""
Tests for enemy decision making.
"""

import pytest

from tower_combat.actions.ability import EnemyAbility
from tower_combat.combat.npc_ai import (
    behavior_chances,
    choose_enemy_action,
    enemy_spell_damage,
    resolve_special_move,
)
from tower_combat.core.constants import AbilityKind, EnemyActionType, EnemyBehavior


def test_behavior_chances_for_archetypes(enemy_factory):
    """
    Test the base chances of each archetype.
    """
    aggressive = behavior_chances(enemy_factory(behavior=EnemyBehavior.AGGRESSIVE))
    assert aggressive.special == pytest.approx(0.25)
    assert aggressive.spell == pytest.approx(0.10)
    defensive = behavior_chances(enemy_factory(behavior=EnemyBehavior.DEFENSIVE))
    assert defensive.special == pytest.approx(0.30)


def test_balanced_caster_prefers_spells(enemy_factory):
    """
    Test that a balanced enemy smarter than it is strong casts more often.
    """
    caster = enemy_factory(intelligence=15, strength=10)
    assert behavior_chances(caster).spell == pytest.approx(0.35)


def test_abilities_raise_special_chance(enemy_factory):
    """
    Test that having special abilities adds ten points of special chance.
    """
    enemy = enemy_factory(
        behavior=EnemyBehavior.AGGRESSIVE,
        special_abilities=[EnemyAbility(name="Bite", kind=AbilityKind.DAMAGE)],
    )
    assert behavior_chances(enemy).special == pytest.approx(0.35)


def test_special_is_rolled_first(enemy_factory, scripted):
    """
    Test that a low first roll picks the special move.
    """
    enemy = enemy_factory(behavior=EnemyBehavior.AGGRESSIVE, mana=50)
    assert choose_enemy_action(enemy, scripted([0.1])) == EnemyActionType.SPECIAL


def test_spell_needs_mana(enemy_factory, scripted):
    """
    Test that the spell roll only happens when the enemy can pay for it.
    """
    rng = scripted([0.5, 0.05])
    caster = enemy_factory(mana=20)
    assert choose_enemy_action(caster, rng) == EnemyActionType.SPELL

    rng = scripted([0.5, 0.05])
    drained = enemy_factory(mana=5)
    assert choose_enemy_action(drained, rng) == EnemyActionType.ATTACK
    assert rng.values == [0.05]


def test_enemy_spell_damage(enemy):
    """
    Test that enemy spells hit for 120% of attack.
    """
    assert enemy_spell_damage(enemy) == 24


@pytest.mark.parametrize(
    "behavior, name, damage, heal",
    [
        (EnemyBehavior.AGGRESSIVE, "Furious Attack", 30, 0),
        (EnemyBehavior.DEFENSIVE, "Focus", 0, 15),
        (EnemyBehavior.BALANCED, "Special Technique", 26, 0),
    ],
)
def test_fallback_special_moves(enemy_factory, scripted, behavior, name, damage, heal):
    """
    Test the archetype moves of enemies without abilities.
    """
    move = resolve_special_move(enemy_factory(behavior=behavior), scripted())
    assert move.name == name
    assert move.damage == damage
    assert move.heal == heal


def test_ability_kinds(enemy_factory, scripted):
    """
    Test that abilities resolve according to their kind.
    """
    enemy = enemy_factory(
        special_abilities=[
            EnemyAbility(name="Regenerate", kind=AbilityKind.HEAL),
            EnemyAbility(name="Crushing Blow", kind=AbilityKind.CRITICAL),
        ]
    )
    rng = scripted([0.0])
    heal = resolve_special_move(enemy, rng)
    assert heal.name == "Regenerate"
    assert heal.heal == 10

    rng.choices = [1]
    crit = resolve_special_move(enemy, rng)
    assert crit.name == "Crushing Blow"
    assert crit.damage == 40
