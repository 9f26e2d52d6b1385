"""
Damage module for the combat engine.

Pure functions computing physical damage with critical hit and double
attack rolls, and the flat mitigation applied to a defending target. Given
the same random source, every function here returns the same result.
"""

import math
import random

from pydantic import BaseModel, Field

from tower_combat.core.config import DEFAULT_CONFIG, CombatConfig
from tower_combat.core.utils import roll_percent


class AttackResult(BaseModel):
    """Outcome of a single attack resolution."""

    damage: int = Field(
        ge=1,
        description="Total damage dealt, including crit and double attack.",
    )
    is_critical: bool = Field(
        False,
        description="Whether the critical hit roll succeeded.",
    )
    is_double_attack: bool = Field(
        False,
        description="Whether the double attack roll succeeded.",
    )
    total_attacks: int = Field(
        1,
        ge=1,
        le=2,
        description="Number of hits landed.",
    )
    breakdown: str = Field(
        "",
        description="Human readable description of the computation.",
    )

    @property
    def hit_damage(self) -> int:
        """Returns the damage of a single hit."""
        return self.damage // self.total_attacks


def effective_double_attack_chance(
    double_attack_chance: float,
    dexterity: float,
    speed: float,
    config: CombatConfig = DEFAULT_CONFIG,
) -> float:
    """
    Computes the double attack chance after dexterity and speed bonuses.

    Args:
        double_attack_chance (float):
            The base chance, in percent.
        dexterity (float):
            The attacker's dexterity.
        speed (float):
            The attacker's speed.
        config (CombatConfig):
            Balance constants.

    Returns:
        float:
            The effective chance, in percent, never above the configured cap.

    """
    dexterity_bonus = math.floor((dexterity - 10) * config.double_attack_dexterity_factor)
    speed_bonus = math.floor((speed - 10) * config.double_attack_speed_factor)
    return min(
        config.double_attack_cap,
        double_attack_chance + dexterity_bonus + speed_bonus,
    )


def resolve_attack(
    attack: float,
    defense: float,
    critical_chance: float,
    critical_damage: float,
    double_attack_chance: float,
    dexterity: float,
    speed: float,
    rng: random.Random,
    config: CombatConfig = DEFAULT_CONFIG,
) -> AttackResult:
    """
    Resolves a physical attack.

    The critical hit multiplies the base damage first; a double attack then
    doubles the (possibly critical) hit. Both rolls are independent.

    Args:
        attack (float):
            The attacker's effective attack.
        defense (float):
            The defender's effective defense.
        critical_chance (float):
            Chance of a critical hit, in percent.
        critical_damage (float):
            Damage of a critical hit, in percent of a normal hit.
        double_attack_chance (float):
            Base chance of a double attack, in percent.
        dexterity (float):
            The attacker's dexterity.
        speed (float):
            The attacker's speed.
        rng (random.Random):
            Source of the crit and double attack rolls.
        config (CombatConfig):
            Balance constants.

    Returns:
        AttackResult:
            The damage dealt and how it was computed.

    """
    if attack <= 0:
        return AttackResult(damage=1, breakdown="no attack power (minimum 1)")

    damage = max(1, math.floor(attack - defense * config.defense_weight))
    breakdown = f"{attack:g} ATK - {defense:g} DEF x {config.defense_weight:g} = {damage}"

    is_critical = roll_percent(rng) < critical_chance
    if is_critical:
        damage = max(1, math.floor(damage * critical_damage / 100))
        breakdown += f", critical x{critical_damage / 100:g} = {damage}"

    chance = effective_double_attack_chance(
        double_attack_chance, dexterity, speed, config
    )
    is_double_attack = roll_percent(rng) < chance
    total_attacks = 1
    if is_double_attack:
        damage *= 2
        total_attacks = 2
        breakdown += f", double attack = {damage}"

    return AttackResult(
        damage=damage,
        is_critical=is_critical,
        is_double_attack=is_double_attack,
        total_attacks=total_attacks,
        breakdown=breakdown,
    )


def mitigate_defended(raw_damage: int, config: CombatConfig = DEFAULT_CONFIG) -> int:
    """Returns the damage that gets through a defensive stance."""
    return math.floor(raw_damage * config.defend_damage_factor)


def apply_resistance(damage: int, multiplier: float) -> int:
    """Scales damage by a resistance multiplier, never below 1."""
    return max(1, math.floor(damage * multiplier))
