"""
Spell scaling for the combat engine.

Converts a spell's base magnitude into the amount actually dealt or healed,
from the caster's intelligence, wisdom and magic mastery. Bonuses grow with
diminishing returns past a threshold and stop at a hard cap, so high level
casters never one-shot an encounter.
"""

import math

from tower_combat.character.combatant import Combatant
from tower_combat.core.config import DEFAULT_CONFIG, CombatConfig
from tower_combat.core.constants import Attribute


def diminish(bonus: float, threshold: float, dampen: float, cap: float) -> float:
    """
    Applies diminishing returns to a percentage bonus.

    Args:
        bonus (float):
            The raw bonus.
        threshold (float):
            Value above which only a fraction of the bonus counts.
        dampen (float):
            Fraction of the excess over the threshold that counts.
        cap (float):
            Hard upper bound of the result.

    Returns:
        float:
            The diminished bonus.

    """
    if bonus > threshold:
        bonus = threshold + (bonus - threshold) * dampen
    return min(cap, bonus)


def spell_damage_bonus(
    intelligence: float,
    wisdom: float,
    mastery: int,
    config: CombatConfig = DEFAULT_CONFIG,
) -> float:
    """Returns the damage bonus percentage of a caster."""
    raw = (
        intelligence**1.35 * 1.8
        + wisdom**1.2 * 1.2
        + mastery**1.2 * 2.5
    )
    return diminish(
        raw,
        config.spell_damage_threshold,
        config.spell_damage_dampen,
        config.spell_damage_cap,
    )


def spell_healing_bonus(
    wisdom: float,
    mastery: int,
    config: CombatConfig = DEFAULT_CONFIG,
) -> float:
    """Returns the healing bonus percentage of a caster."""
    raw = wisdom**1.3 * 2.2 + mastery**1.15 * 1.8
    return diminish(
        raw,
        config.spell_healing_threshold,
        config.spell_healing_dampen,
        config.spell_healing_cap,
    )


def scale_damage(
    base: int,
    intelligence: float,
    wisdom: float,
    mastery: int,
    config: CombatConfig = DEFAULT_CONFIG,
) -> int:
    """Scales a base damage value, rounding to the nearest integer."""
    bonus = spell_damage_bonus(intelligence, wisdom, mastery, config)
    return round(base * (1 + bonus / 100))


def scale_healing(
    base: int,
    wisdom: float,
    mastery: int,
    config: CombatConfig = DEFAULT_CONFIG,
) -> int:
    """Scales a base healing value, rounding to the nearest integer."""
    bonus = spell_healing_bonus(wisdom, mastery, config)
    return round(base * (1 + bonus / 100))


def caster_spell_damage(
    caster: Combatant, base: int, config: CombatConfig = DEFAULT_CONFIG
) -> int:
    """
    Computes the damage of a spell cast by a combatant.

    The base is raised by half the caster's magic attack before scaling, and
    the result is multiplied by the caster's magic damage bonus.

    Args:
        caster (Combatant):
            The caster.
        base (int):
            The spell's base magnitude.
        config (CombatConfig):
            Balance constants.

    Returns:
        int:
            The final damage.

    """
    raised = base + math.floor(caster.magic_attack * 0.5)
    scaled = scale_damage(
        raised,
        caster.effective(Attribute.INTELLIGENCE),
        caster.effective(Attribute.WISDOM),
        caster.magic_mastery,
        config,
    )
    return math.floor(scaled * (1 + caster.magic_damage_bonus / 100))


def caster_spell_healing(
    caster: Combatant, base: int, config: CombatConfig = DEFAULT_CONFIG
) -> int:
    """Computes the healing of a spell cast by a combatant."""
    raised = base + math.floor(caster.magic_attack * 0.3)
    return scale_healing(
        raised,
        caster.effective(Attribute.WISDOM),
        caster.magic_mastery,
        config,
    )
