"""
Skill progression for the combat engine.

Derives mastery XP from combat events (hits landed, damage blocked, spells
cast) and applies it to a player. Persisting the XP is delegated to the
character service; a persistence failure never undoes the local gain.
"""

import math
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from tower_combat.character.combatant import Player
from tower_combat.core.constants import NarrationKind, SkillType
from tower_combat.core.error_handling import CollaboratorWarning, call_collaborator
from tower_combat.core.narration import NarrationEvent, narrate
from tower_combat.items.equipment import Equipment

if TYPE_CHECKING:
    from tower_combat.services.interfaces import CharacterService


class SkillXpGain(BaseModel):
    """XP earned by one skill from a combat event."""

    skill: SkillType = Field(
        description="The skill receiving the XP.",
    )
    amount: int = Field(
        ge=0,
        description="XP earned.",
    )
    off_hand: bool = Field(
        False,
        description="Whether the XP comes from the off-hand item.",
    )

    def describe(self) -> str:
        suffix = " (off-hand)" if self.off_hand else ""
        return f"+{self.amount} {self.skill.display_name} XP{suffix}"


class SkillLevelUp(BaseModel):
    """A skill reaching a new level."""

    skill: SkillType
    old_level: int
    new_level: int

    def describe(self) -> str:
        return f"{self.skill.display_name} reached level {self.new_level}!"


def on_attack(
    main_weapon: Equipment | None,
    damage_dealt: int,
    off_hand_weapon: Equipment | None = None,
) -> list[SkillXpGain]:
    """
    Computes the mastery XP of a landed attack.

    Args:
        main_weapon (Equipment | None):
            The main-hand weapon; no main-hand XP without one.
        damage_dealt (int):
            Damage dealt by the attack.
        off_hand_weapon (Equipment | None):
            The off-hand weapon when dual wielding.

    Returns:
        list[SkillXpGain]:
            The main-hand gain, then the off-hand gain if any.

    """
    base = max(1, damage_dealt // 10)
    dual_wielding = main_weapon is not None and off_hand_weapon is not None
    gains: list[SkillXpGain] = []
    if main_weapon is not None and main_weapon.category is not None:
        amount = math.floor(base * 1.25) if dual_wielding else base
        gains.append(SkillXpGain(skill=main_weapon.category.skill, amount=amount))
    if dual_wielding and off_hand_weapon.category is not None:
        gains.append(
            SkillXpGain(
                skill=off_hand_weapon.category.skill,
                amount=math.floor(base * 0.75),
                off_hand=True,
            )
        )
    return gains


def on_defend(has_shield: bool, damage_blocked: int) -> list[SkillXpGain]:
    """
    Computes the defense mastery XP of a defensive action.

    Defending is never zero-reward: when nothing was blocked a flat amount
    is granted.

    Args:
        has_shield (bool):
            Whether a shield is equipped.
        damage_blocked (int):
            Damage prevented by the stance.

    Returns:
        list[SkillXpGain]:
            A single defense mastery gain.

    """
    if damage_blocked > 0:
        amount = max(2, damage_blocked // 5)
    else:
        amount = 3
    if has_shield:
        amount = math.floor(amount * 2.5)
    return [SkillXpGain(skill=SkillType.DEFENSE_MASTERY, amount=max(1, amount))]


def on_spell_cast(
    mana_cost: int, effect_magnitude: int, has_off_hand_staff: bool
) -> list[SkillXpGain]:
    """
    Computes the magic mastery XP of a cast spell.

    Args:
        mana_cost (int):
            Mana spent.
        effect_magnitude (int):
            Damage or healing produced.
        has_off_hand_staff (bool):
            Whether a staff is held in the off hand.

    Returns:
        list[SkillXpGain]:
            The cast gain, then the off-hand staff bonus if any.

    """
    total = max(2, mana_cost // 2 + effect_magnitude // 8)
    gains = [SkillXpGain(skill=SkillType.MAGIC_MASTERY, amount=total)]
    if has_off_hand_staff:
        gains.append(
            SkillXpGain(
                skill=SkillType.MAGIC_MASTERY,
                amount=max(1, math.floor(total * 0.2)),
                off_hand=True,
            )
        )
    return gains


def apply_skill_gains(
    player: Player,
    gains: list[SkillXpGain],
    character_service: "CharacterService",
    warnings: list[CollaboratorWarning],
) -> tuple[list[SkillLevelUp], list[NarrationEvent]]:
    """
    Applies XP gains to a player and persists them.

    The local XP always grows; the service result decides the reported level
    when the call succeeds, the locally derived level otherwise.

    Args:
        player (Player):
            The player receiving the XP, modified in place.
        gains (list[SkillXpGain]):
            The gains to apply.
        character_service (CharacterService):
            Persists the XP.
        warnings (list[CollaboratorWarning]):
            Receives a warning for every failed persistence call.

    Returns:
        tuple[list[SkillLevelUp], list[NarrationEvent]]:
            The level-ups, and the narration of gains and level-ups.

    """
    level_ups: list[SkillLevelUp] = []
    events: list[NarrationEvent] = []
    for gain in gains:
        if gain.amount <= 0:
            continue
        progress = player.skills[gain.skill]
        old_level, local_level = progress.add_xp(gain.amount)
        events.append(narrate(NarrationKind.SKILL_XP, gain.describe()))

        result = call_collaborator(
            lambda gain=gain: character_service.add_skill_xp(
                player.id, gain.skill, gain.amount
            ),
            None,
            "add_skill_xp",
            warnings,
            {"player": player.id, "skill": gain.skill.value, "amount": gain.amount},
        )
        if result is not None:
            leveled_up, new_level = result.leveled_up, result.new_level
        else:
            leveled_up, new_level = local_level > old_level, local_level

        if leveled_up:
            level_up = SkillLevelUp(
                skill=gain.skill, old_level=old_level, new_level=new_level
            )
            level_ups.append(level_up)
            events.append(narrate(NarrationKind.LEVEL_UP, level_up.describe()))
    return level_ups, events
