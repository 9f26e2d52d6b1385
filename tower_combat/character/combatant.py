"""
Combatant module for the combat engine.

Defines the Player and Enemy participants of a battle. Both share vitals,
combat stats, derived stats and active effects; the player adds mana, skill
mastery and turn flags, the enemy adds rewards, behavior and resistances.
Every stat has an explicit neutral default, so formulas never deal with
missing values.
"""

from abc import abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from tower_combat.actions.ability import EnemyAbility
from tower_combat.actions.spell import Spell
from tower_combat.core.constants import (
    Attribute,
    CharacterType,
    EnemyBehavior,
    SkillType,
)
from tower_combat.effects.base_effect import ActiveEffects

# Skill XP needed per mastery level.
SKILL_XP_PER_LEVEL = 100


def skill_level_for_xp(xp: int) -> int:
    """Derives a mastery level from its cumulative XP."""
    return xp // SKILL_XP_PER_LEVEL + 1


class SkillProgress(BaseModel):
    """Cumulative XP of one mastery skill; the level is derived from it."""

    xp: int = Field(
        0,
        ge=0,
        description="Cumulative XP earned in the skill.",
    )

    @property
    def level(self) -> int:
        return skill_level_for_xp(self.xp)

    def add_xp(self, amount: int) -> tuple[int, int]:
        """
        Adds XP to the skill.

        Args:
            amount (int):
                XP to add. Negative amounts are ignored so XP never decreases.

        Returns:
            tuple[int, int]:
                The level before and after the gain.

        """
        before = self.level
        self.xp += max(0, amount)
        return before, self.level


class Combatant(BaseModel):
    """
    Shared capabilities of every battle participant.

    HP is kept inside [0, max_hp]; a combatant at 0 HP is out of the fight.
    """

    id: str = Field(
        description="Unique identifier of the combatant.",
    )
    name: str = Field(
        description="Display name of the combatant.",
    )
    hp: int = Field(
        description="Current hit points.",
    )
    max_hp: int = Field(
        gt=0,
        description="Maximum hit points.",
    )
    attack: int = Field(
        0,
        description="Physical attack power.",
    )
    defense: int = Field(
        0,
        description="Physical defense.",
    )
    speed: int = Field(
        10,
        description="Speed, used for double attacks, fleeing and extra turns.",
    )
    strength: int = Field(10)
    dexterity: int = Field(10)
    intelligence: int = Field(10)
    wisdom: int = Field(10)
    critical_chance: float = Field(
        0.0,
        ge=0.0,
        description="Chance of a critical hit, in percent.",
    )
    critical_damage: float = Field(
        110.0,
        description="Damage of a critical hit, in percent of a normal hit.",
    )
    double_attack_chance: float = Field(
        0.0,
        description="Base chance of striking twice, in percent.",
    )
    magic_attack: int = Field(
        0,
        description="Flat bonus added to the base of spells.",
    )
    magic_damage_bonus: float = Field(
        0.0,
        description="Final bonus applied to spell damage, in percent.",
    )
    is_defending: bool = Field(
        False,
        description="Whether the combatant is in a defensive stance.",
    )
    active_effects: ActiveEffects = Field(
        default_factory=ActiveEffects,
        description="Timed effects currently active.",
    )

    def model_post_init(self, _: Any) -> None:
        self.hp = max(0, min(self.max_hp, self.hp))

    @property
    @abstractmethod
    def char_type(self) -> CharacterType:
        """Kind of participant, used to color its name."""

    @property
    def colored_name(self) -> str:
        return self.char_type.colorize(self.name)

    @property
    def magic_mastery(self) -> int:
        return 1

    def is_alive(self) -> bool:
        return self.hp > 0

    def effective(self, attribute: Attribute) -> float:
        """
        Returns an attribute with active modifications overlaid.

        Args:
            attribute (Attribute):
                The attribute to read.

        Returns:
            float:
                The modified value; base stats are never changed.

        """
        from tower_combat.effects.effect_manager import effective_stat

        return effective_stat(self, attribute)

    def take_damage(self, amount: int) -> int:
        """
        Removes HP, never going below zero.

        Args:
            amount (int):
                The damage to apply.

        Returns:
            int:
                The HP actually lost.

        """
        before = self.hp
        self.hp = max(0, self.hp - max(0, amount))
        return before - self.hp

    def heal(self, amount: int) -> int:
        """
        Restores HP, never going above the maximum.

        Args:
            amount (int):
                The healing to apply.

        Returns:
            int:
                The HP actually restored.

        """
        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, amount))
        return self.hp - before


class Player(Combatant):
    """The character controlled by the user."""

    level: int = Field(1, ge=1)
    floor: int = Field(1, ge=1, description="Tower floor the player is on.")
    mana: int = Field(
        0,
        description="Current mana.",
    )
    max_mana: int = Field(
        0,
        ge=0,
        description="Maximum mana.",
    )
    defense_cooldown: int = Field(
        0,
        ge=0,
        description="Turns before 'defend' can be used again.",
    )
    potion_used_this_turn: bool = Field(
        False,
        description="Whether a consumable was already used this turn.",
    )
    skills: dict[SkillType, SkillProgress] = Field(
        default_factory=lambda: {skill: SkillProgress() for skill in SkillType},
        description="Mastery progress for each skill.",
    )
    spells: list[Spell] = Field(
        default_factory=list,
        description="Spells the player can cast.",
    )

    def model_post_init(self, _: Any) -> None:
        super().model_post_init(_)
        self.mana = max(0, min(self.max_mana, self.mana))
        for skill in SkillType:
            self.skills.setdefault(skill, SkillProgress())

    @property
    def char_type(self) -> CharacterType:
        return CharacterType.PLAYER

    @property
    def magic_mastery(self) -> int:
        return self.skill_level(SkillType.MAGIC_MASTERY)

    def skill_level(self, skill: SkillType) -> int:
        return self.skills[skill].level

    def get_spell(self, spell_id: str) -> Spell | None:
        for spell in self.spells:
            if spell.id == spell_id:
                return spell
        return None

    def spend_mana(self, amount: int) -> None:
        self.mana = max(0, self.mana - max(0, amount))

    def restore_mana(self, amount: int) -> int:
        before = self.mana
        self.mana = min(self.max_mana, self.mana + max(0, amount))
        return self.mana - before

    def tick_spell_cooldowns(self) -> None:
        """Advances every spell cooldown by one turn."""
        for spell in self.spells:
            if spell.current_cooldown > 0:
                spell.current_cooldown -= 1

    def reset_spell_cooldowns(self) -> None:
        """Makes every spell available, as at the start of an encounter."""
        for spell in self.spells:
            spell.current_cooldown = 0


class DropChance(BaseModel):
    """An entry of an enemy's drop table."""

    drop_id: str = Field(
        description="Identifier of the item that can drop.",
    )
    drop_chance: float = Field(
        ge=0.0,
        le=1.0,
        description="Base probability of the drop (0-1).",
    )
    min_quantity: int = Field(1, ge=0)
    max_quantity: int = Field(1, ge=0)


class Resistances(BaseModel):
    """Damage and debuff resistances, as fractions (0 is neutral)."""

    physical_resistance: float = Field(0.0, ge=0.0, le=1.0)
    magical_resistance: float = Field(0.0, ge=0.0, le=1.0)
    debuff_resistance: float = Field(0.0, ge=0.0, le=1.0)
    physical_vulnerability: float = Field(0.0, ge=0.0)
    magical_vulnerability: float = Field(0.0, ge=0.0)

    def physical_multiplier(self) -> float:
        return (1.0 - self.physical_resistance) * (1.0 + self.physical_vulnerability)

    def magical_multiplier(self) -> float:
        return (1.0 - self.magical_resistance) * (1.0 + self.magical_vulnerability)


class Enemy(Combatant):
    """A monster the player fights on a tower floor."""

    level: int = Field(1, ge=1)
    mana: int = Field(
        0,
        ge=0,
        description="Mana available for the enemy's spells.",
    )
    reward_xp: int = Field(10, ge=0)
    reward_gold: int = Field(5, ge=0)
    possible_drops: list[DropChance] = Field(default_factory=list)
    behavior: EnemyBehavior = Field(
        EnemyBehavior.BALANCED,
        description="Archetype driving the enemy's action choices.",
    )
    special_abilities: list[EnemyAbility] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)
    resistances: Resistances = Field(default_factory=Resistances)

    @property
    def char_type(self) -> CharacterType:
        return CharacterType.ENEMY

    @property
    def has_special_abilities(self) -> bool:
        return bool(self.special_abilities)
