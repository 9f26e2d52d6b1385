"""
Flee resolution for the combat engine.
"""

import math
import random

from pydantic import BaseModel, Field

from tower_combat.core.config import DEFAULT_CONFIG, CombatConfig
from tower_combat.core.utils import clamp, roll_percent


class FleeOutcome(BaseModel):
    """Result of an escape attempt."""

    success: bool = Field(
        description="Whether the player got away.",
    )
    chance: int = Field(
        description="The escape chance that was rolled against, in percent.",
    )
    damage_taken_on_failure: int = Field(
        0,
        ge=0,
        description="Damage the enemy deals when the attempt fails.",
    )


def flee_chance(
    player_speed: float, enemy_speed: float, config: CombatConfig = DEFAULT_CONFIG
) -> int:
    """
    Computes the chance of escaping, in percent.

    Args:
        player_speed (float):
            The player's effective speed.
        enemy_speed (float):
            The enemy's effective speed.
        config (CombatConfig):
            Balance constants.

    Returns:
        int:
            The chance, always between the configured minimum and maximum.

    """
    raw = config.flee_base_chance + math.floor(
        (player_speed - enemy_speed) * config.flee_speed_factor
    )
    return clamp(raw, config.flee_min_chance, config.flee_max_chance)


def attempt_flee(
    player_speed: float,
    enemy_speed: float,
    enemy_attack: float,
    rng: random.Random,
    config: CombatConfig = DEFAULT_CONFIG,
) -> FleeOutcome:
    """
    Rolls an escape attempt.

    Args:
        player_speed (float):
            The player's effective speed.
        enemy_speed (float):
            The enemy's effective speed.
        enemy_attack (float):
            The enemy's effective attack, used for the failure penalty.
        rng (random.Random):
            Source of the escape roll.
        config (CombatConfig):
            Balance constants.

    Returns:
        FleeOutcome:
            Whether the attempt succeeded and the penalty if it did not.

    """
    chance = flee_chance(player_speed, enemy_speed, config)
    if roll_percent(rng) < chance:
        return FleeOutcome(success=True, chance=chance)
    penalty = max(0, math.floor(enemy_attack * config.flee_failure_damage_factor))
    return FleeOutcome(success=False, chance=chance, damage_taken_on_failure=penalty)
