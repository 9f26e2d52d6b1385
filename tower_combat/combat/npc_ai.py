"""
Enemy decision making for the combat engine.

Chooses what an enemy does on its turn from its behavior archetype, and
resolves the special moves it can perform. All randomness comes from the
injected random source.
"""

import math
import random

from catchery import log_debug
from pydantic import BaseModel, Field

from tower_combat.character.combatant import Enemy
from tower_combat.core.config import DEFAULT_CONFIG, BehaviorChances, CombatConfig
from tower_combat.core.constants import (
    AbilityKind,
    Attribute,
    EnemyActionType,
    EnemyBehavior,
)


class SpecialMove(BaseModel):
    """A resolved enemy special move."""

    name: str = Field(
        description="Name of the move, used in the narration.",
    )
    kind: AbilityKind = Field(
        description="What the move does.",
    )
    damage: int = Field(
        0,
        ge=0,
        description="Raw damage against the player, before defense mitigation.",
    )
    heal: int = Field(
        0,
        ge=0,
        description="HP the enemy restores to itself.",
    )


def behavior_chances(
    enemy: Enemy, config: CombatConfig = DEFAULT_CONFIG
) -> BehaviorChances:
    """
    Returns the special and spell chances of an enemy.

    Balanced enemies with more intelligence than strength act as casters.
    Having any special ability makes special moves more likely.

    Args:
        enemy (Enemy):
            The acting enemy.
        config (CombatConfig):
            Balance constants.

    Returns:
        BehaviorChances:
            The chances to roll against.

    """
    base = config.behavior_chances[enemy.behavior]
    special = base.special
    spell = base.spell
    if enemy.behavior == EnemyBehavior.BALANCED and enemy.intelligence > enemy.strength:
        spell = config.balanced_caster_spell_chance
    if enemy.has_special_abilities:
        special += config.special_ability_bonus
    return BehaviorChances(special=min(1.0, special), spell=spell)


def choose_enemy_action(
    enemy: Enemy, rng: random.Random, config: CombatConfig = DEFAULT_CONFIG
) -> EnemyActionType:
    """
    Picks the action an enemy takes this turn.

    The special move is rolled first, then a spell if the enemy has the mana
    for one; otherwise the enemy attacks.

    Args:
        enemy (Enemy):
            The acting enemy.
        rng (random.Random):
            Source of the rolls.
        config (CombatConfig):
            Balance constants.

    Returns:
        EnemyActionType:
            The chosen action.

    """
    chances = behavior_chances(enemy, config)
    action = EnemyActionType.ATTACK
    if rng.random() < chances.special:
        action = EnemyActionType.SPECIAL
    elif enemy.mana >= config.enemy_spell_cost and rng.random() < chances.spell:
        action = EnemyActionType.SPELL
    log_debug(
        f"{enemy.name} chooses {action.value}",
        {
            "enemy": enemy.id,
            "special_chance": chances.special,
            "spell_chance": chances.spell,
        },
    )
    return action


def enemy_spell_damage(enemy: Enemy, config: CombatConfig = DEFAULT_CONFIG) -> int:
    """Returns the raw damage of an enemy's spell."""
    return math.floor(enemy.effective(Attribute.ATTACK) * config.enemy_spell_multiplier)


def resolve_special_move(enemy: Enemy, rng: random.Random) -> SpecialMove:
    """
    Resolves the special move an enemy performs.

    Enemies with abilities use one at random, according to its kind.
    Enemies without abilities fall back on a move of their archetype.

    Args:
        enemy (Enemy):
            The acting enemy.
        rng (random.Random):
            Source of the ability choice and of the ranged magnitudes.

    Returns:
        SpecialMove:
            The move, with its raw damage or healing.

    """
    attack = enemy.effective(Attribute.ATTACK)
    if not enemy.special_abilities:
        if enemy.behavior == EnemyBehavior.AGGRESSIVE:
            return SpecialMove(
                name="Furious Attack",
                kind=AbilityKind.DAMAGE,
                damage=max(0, math.floor(attack * 1.5)),
            )
        if enemy.behavior == EnemyBehavior.DEFENSIVE:
            return SpecialMove(
                name="Focus",
                kind=AbilityKind.HEAL,
                heal=math.floor(enemy.max_hp * 0.15),
            )
        return SpecialMove(
            name="Special Technique",
            kind=AbilityKind.GENERIC,
            damage=max(0, math.floor(attack * 1.3)),
        )

    ability = rng.choice(enemy.special_abilities)
    if ability.kind == AbilityKind.HEAL:
        heal = math.floor(enemy.max_hp * (0.10 + rng.random() * 0.15))
        return SpecialMove(name=ability.name, kind=ability.kind, heal=heal)
    if ability.kind == AbilityKind.DAMAGE:
        damage = math.floor(attack * (1.3 + rng.random() * 0.7))
    elif ability.kind == AbilityKind.CRITICAL:
        damage = math.floor(attack * 2.0)
    elif ability.kind == AbilityKind.AREA:
        damage = math.floor(attack * 1.2)
    else:
        damage = math.floor(attack * (1.2 + rng.random() * 0.5))
    return SpecialMove(name=ability.name, kind=ability.kind, damage=max(0, damage))
