"""
Effect manager for the combat engine.

Applies and decays the timed effects carried by a combatant. Effects are
independent of each other; the ticking order (damage over time, healing over
time, attribute modifications, then the generic buff and debuff markers)
only fixes the order of the narration lines.
"""

from typing import TYPE_CHECKING

from catchery import log_critical, log_debug

from tower_combat.actions.spell import Spell
from tower_combat.core.constants import (
    Attribute,
    NarrationKind,
    SpellEffectType,
    ValueKind,
)
from tower_combat.core.error_handling import CorruptedEffectError
from tower_combat.core.narration import NarrationEvent, narrate
from tower_combat.effects.base_effect import AttributeModification, TimedEffect

if TYPE_CHECKING:
    from tower_combat.character.combatant import Combatant


def _check_integrity(combatant: "Combatant") -> None:
    effects = combatant.active_effects
    timed: list[TimedEffect | AttributeModification] = [
        *effects.dots,
        *effects.hots,
        *effects.buffs,
        *effects.debuffs,
        *effects.attribute_modifications,
    ]
    for effect in timed:
        if effect.duration <= 0:
            log_critical(
                f"Corrupted effect on {combatant.name}",
                {
                    "combatant": combatant.id,
                    "source_spell": effect.source_spell,
                    "duration": effect.duration,
                },
            )
            raise CorruptedEffectError(
                f"Effect '{effect.source_spell}' on {combatant.name} has "
                f"non-positive duration {effect.duration}."
            )


def _turns_left(duration: int) -> str:
    if duration <= 0:
        return "expired"
    return f"{duration} turn{'s' if duration != 1 else ''} left"


def tick(combatant: "Combatant") -> list[NarrationEvent]:
    """
    Advances every active effect on a combatant by one turn.

    Args:
        combatant (Combatant):
            The combatant whose effects are ticked, modified in place.

    Returns:
        list[NarrationEvent]:
            What happened, in ticking order.

    Raises:
        CorruptedEffectError:
            If an effect is found with a non-positive duration before ticking.

    """
    _check_integrity(combatant)
    effects = combatant.active_effects
    events: list[NarrationEvent] = []

    for dot in effects.dots:
        lost = combatant.take_damage(dot.magnitude)
        dot.duration -= 1
        events.append(
            narrate(
                NarrationKind.DAMAGE,
                f"{combatant.name} takes {lost} damage from {dot.source_spell} "
                f"({_turns_left(dot.duration)}).",
            )
        )
    effects.dots = [dot for dot in effects.dots if dot.duration > 0]

    for hot in effects.hots:
        healed = combatant.heal(hot.magnitude)
        hot.duration -= 1
        if healed > 0:
            events.append(
                narrate(
                    NarrationKind.HEALING,
                    f"{combatant.name} recovers {healed} HP from "
                    f"{hot.source_spell} ({_turns_left(hot.duration)}).",
                )
            )
    effects.hots = [hot for hot in effects.hots if hot.duration > 0]

    remaining: list[AttributeModification] = []
    for modification in effects.attribute_modifications:
        modification.duration -= 1
        if modification.duration > 0:
            remaining.append(modification)
            continue
        events.append(
            narrate(
                NarrationKind.EFFECT,
                f"{modification.source_spell} ({modification.describe()}) "
                f"expired on {combatant.name}.",
            )
        )
    effects.attribute_modifications = remaining

    for label, markers in (("buff", effects.buffs), ("debuff", effects.debuffs)):
        for marker in markers:
            marker.duration -= 1
            if marker.duration <= 0:
                events.append(
                    narrate(
                        NarrationKind.EFFECT,
                        f"The {label} {marker.source_spell} wore off "
                        f"{combatant.name}.",
                    )
                )
    effects.buffs = [buff for buff in effects.buffs if buff.duration > 0]
    effects.debuffs = [debuff for debuff in effects.debuffs if debuff.duration > 0]

    if events:
        log_debug(
            f"Ticked effects on {combatant.name}",
            {"combatant": combatant.id, "events": len(events)},
        )
    return events


def effective_stat(combatant: "Combatant", attribute: Attribute) -> float:
    """
    Reads an attribute with its active modifications overlaid.

    Flat modifications are summed first, then the summed percentage is
    applied to the result.

    Args:
        combatant (Combatant):
            The combatant to read.
        attribute (Attribute):
            The attribute to read.

    Returns:
        float:
            The effective value, never below zero.

    """
    value = float(getattr(combatant, attribute.value))
    flat = 0
    percentage = 0
    for modification in combatant.active_effects.attribute_modifications:
        if modification.attribute != attribute:
            continue
        if modification.kind == ValueKind.PERCENTAGE:
            percentage += modification.value
        else:
            flat += modification.value
    value = (value + flat) * (1 + percentage / 100)
    return max(0.0, value)


def apply_over_time(
    target: "Combatant", spell: Spell, magnitude: int
) -> list[NarrationEvent]:
    """
    Attaches a damage or healing over time effect created by a spell.

    Args:
        target (Combatant):
            Who receives the effect.
        spell (Spell):
            The DOT or HOT spell being cast.
        magnitude (int):
            The scaled amount applied on every tick.

    Returns:
        list[NarrationEvent]:
            The narration of the application.

    """
    assert spell.duration is not None
    effect = TimedEffect(
        magnitude=magnitude,
        duration=spell.duration,
        source_spell=spell.name,
    )
    if spell.effect_type == SpellEffectType.DOT:
        target.active_effects.dots.append(effect)
        text = (
            f"{target.name} is afflicted by {spell.name}: {magnitude} damage "
            f"per turn for {spell.duration} turns."
        )
    elif spell.effect_type == SpellEffectType.HOT:
        target.active_effects.hots.append(effect)
        text = (
            f"{target.name} is blessed by {spell.name}: {magnitude} HP "
            f"per turn for {spell.duration} turns."
        )
    else:
        raise ValueError(f"{spell.name} is not an over-time spell.")
    return [narrate(NarrationKind.EFFECT, text)]


def apply_attribute_effect(
    target: "Combatant", spell: Spell, default_duration: int
) -> list[NarrationEvent]:
    """
    Attaches the buff or debuff declared by a spell.

    Spells declaring modification templates create attribute modifications
    (negated for debuffs); spells without templates leave a generic marker.

    Args:
        target (Combatant):
            Who receives the effect.
        spell (Spell):
            The BUFF or DEBUFF spell being cast.
        default_duration (int):
            Duration used when the spell declares none.

    Returns:
        list[NarrationEvent]:
            The narration of the application.

    """
    is_debuff = spell.effect_type == SpellEffectType.DEBUFF
    duration = spell.duration or default_duration
    events: list[NarrationEvent] = []

    if not spell.modifications:
        marker = TimedEffect(
            magnitude=spell.effect_value,
            duration=duration,
            source_spell=spell.name,
        )
        if is_debuff:
            target.active_effects.debuffs.append(marker)
        else:
            target.active_effects.buffs.append(marker)
        label = "weakened" if is_debuff else "empowered"
        events.append(
            narrate(
                NarrationKind.EFFECT,
                f"{target.name} is {label} by {spell.name} for {duration} turns.",
            )
        )
        return events

    for template in spell.modifications:
        value = -abs(template.value) if is_debuff else template.value
        modification = AttributeModification(
            attribute=template.attribute,
            value=value,
            kind=template.kind,
            duration=duration,
            source_spell=spell.name,
        )
        target.active_effects.attribute_modifications.append(modification)
        events.append(
            narrate(
                NarrationKind.EFFECT,
                f"{spell.name}: {modification.describe()} on {target.name} "
                f"for {duration} turns.",
            )
        )
    return events
