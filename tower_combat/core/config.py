"""
Balance configuration for the combat engine.

Every constant the combat formulas depend on lives here, so a deployment can
tune them from a JSON file without touching code. The defaults are the
values the game ships with.
"""

import json
from pathlib import Path

from pydantic import BaseModel, Field

from .constants import EnemyBehavior, FloorType


class BehaviorChances(BaseModel):
    """Probabilities an enemy archetype uses to pick its action."""

    special: float = Field(ge=0.0, le=1.0, description="Chance to use a special move.")
    spell: float = Field(ge=0.0, le=1.0, description="Chance to cast a spell.")


class CombatConfig(BaseModel):
    """Tunable constants of the combat engine."""

    # Defense.
    defense_cooldown: int = Field(
        3, ge=0, description="Turns before 'defend' can be used again."
    )
    defend_damage_factor: float = Field(
        0.15, ge=0.0, le=1.0, description="Share of damage that gets through a defense."
    )

    # Damage model.
    defense_weight: float = Field(
        0.5, description="How much of the defender's defense is subtracted."
    )
    double_attack_cap: int = Field(
        35, description="Upper bound of the effective double attack chance (%)."
    )
    double_attack_dexterity_factor: float = Field(0.5)
    double_attack_speed_factor: float = Field(0.3)

    # Spell scaling.
    spell_damage_threshold: float = Field(150.0)
    spell_damage_dampen: float = Field(0.6)
    spell_damage_cap: float = Field(300.0)
    spell_healing_threshold: float = Field(120.0)
    spell_healing_dampen: float = Field(0.5)
    spell_healing_cap: float = Field(220.0)
    default_effect_duration: int = Field(
        3, ge=1, description="Duration of buffs and debuffs that declare none."
    )

    # Flee.
    flee_base_chance: int = Field(70)
    flee_min_chance: int = Field(15)
    flee_max_chance: int = Field(95)
    flee_speed_factor: float = Field(2.0)
    flee_failure_damage_factor: float = Field(0.3)

    # Enemy turn.
    enemy_spell_cost: int = Field(10, ge=0)
    enemy_spell_multiplier: float = Field(1.2)
    special_ability_bonus: float = Field(
        0.10, description="Extra special chance for enemies with abilities."
    )
    behavior_chances: dict[EnemyBehavior, BehaviorChances] = Field(
        default_factory=lambda: {
            EnemyBehavior.AGGRESSIVE: BehaviorChances(special=0.25, spell=0.10),
            EnemyBehavior.DEFENSIVE: BehaviorChances(special=0.30, spell=0.15),
            EnemyBehavior.BALANCED: BehaviorChances(special=0.20, spell=0.20),
        }
    )
    balanced_caster_spell_chance: float = Field(
        0.35, description="Spell chance of balanced enemies with INT above STR."
    )

    # Rewards.
    floor_reward_multipliers: dict[FloorType, float] = Field(
        default_factory=lambda: {
            FloorType.COMMON: 1.0,
            FloorType.ELITE: 1.8,
            FloorType.BOSS: 2.5,
        }
    )
    boss_drop_multiplier: float = Field(1.5)

    # Extra turns, as (speed ratio, extra turns) pairs from highest ratio.
    extra_turn_thresholds: list[tuple[float, int]] = Field(
        default_factory=lambda: [(3.5, 3), (2.5, 2), (1.8, 1)]
    )
    extra_turn_bonus_chance: float = Field(0.2)
    max_extra_turns: int = Field(3)


DEFAULT_CONFIG = CombatConfig()


def load_config(path: Path) -> CombatConfig:
    """
    Loads a configuration override from a JSON file.

    Keys missing from the file keep their default value.

    Args:
        path (Path):
            The JSON file to read.

    Returns:
        CombatConfig:
            The validated configuration.

    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return CombatConfig.model_validate(data)
