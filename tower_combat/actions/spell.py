"""
Spell module for the combat engine.

Defines the spells a player knows, their costs, cooldowns and what they do
when cast.
"""

from pydantic import BaseModel, Field, model_validator

from tower_combat.core.constants import SpellEffectType
from tower_combat.effects.base_effect import AttributeModifier


class Spell(BaseModel):
    """
    A spell known by a player.

    The cooldown counts turns; a spell can be cast only while its current
    cooldown is zero.
    """

    id: str = Field(
        description="Unique identifier of the spell.",
    )
    name: str = Field(
        description="Display name of the spell.",
    )
    description: str = Field(
        "",
        description="A brief description of the spell.",
    )
    effect_type: SpellEffectType = Field(
        description="What the spell does.",
    )
    effect_value: int = Field(
        ge=0,
        description="Base magnitude before attribute scaling.",
    )
    mana_cost: int = Field(
        ge=0,
        description="Mana spent on each cast.",
    )
    cooldown: int = Field(
        0,
        ge=0,
        description="Turns the spell is unavailable after being cast.",
    )
    current_cooldown: int = Field(
        0,
        ge=0,
        description="Turns left before the spell can be cast again.",
    )
    duration: int | None = Field(
        None,
        description="Duration in turns of the effect it leaves, if any.",
    )
    modifications: list[AttributeModifier] = Field(
        default_factory=list,
        description="Attribute changes applied by buff and debuff spells.",
    )

    @model_validator(mode="after")
    def _check_duration(self) -> "Spell":
        if self.effect_type in (SpellEffectType.DOT, SpellEffectType.HOT):
            if self.duration is None or self.duration <= 0:
                raise ValueError(
                    f"Spell '{self.name}' needs a positive duration for "
                    f"{self.effect_type.value} effects."
                )
        if self.duration is not None and self.duration <= 0:
            raise ValueError(
                f"Spell '{self.name}' has a non-positive duration ({self.duration})."
            )
        return self

    @property
    def is_ready(self) -> bool:
        """Returns True if the spell is off cooldown."""
        return self.current_cooldown == 0

    def can_cast(self, mana: int) -> bool:
        """Returns True if the spell is ready and mana covers its cost."""
        return self.is_ready and mana >= self.mana_cost
