"""
Base effect module for the combat engine.

Defines the timed effects a combatant can carry: damage and healing over
time, generic buff and debuff markers, and attribute modifications read as a
live overlay on top of base stats.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from tower_combat.core.constants import Attribute, ValueKind


class TimedEffect(BaseModel):
    """
    A recurring or lingering effect with a countdown.

    Used for damage over time, healing over time and the generic buff and
    debuff markers.
    """

    magnitude: int = Field(
        ge=0,
        description="Damage or healing per tick, or the strength of a marker.",
    )
    duration: int = Field(
        description="Remaining duration in turns.",
    )
    source_spell: str = Field(
        description="Name of the spell that created the effect.",
    )


class AttributeModifier(BaseModel):
    """Template of an attribute change declared by a spell."""

    attribute: Attribute = Field(
        description="The attribute being changed.",
    )
    value: int = Field(
        description="The change, as flat points or percentage points.",
    )
    kind: ValueKind = Field(
        ValueKind.FLAT,
        description="Whether the value is flat or a percentage.",
    )

    def describe(self) -> str:
        """Returns a short signed description such as '+10% attack'."""
        sign = "+" if self.value > 0 else ""
        suffix = "%" if self.kind == ValueKind.PERCENTAGE else ""
        return f"{sign}{self.value}{suffix} {self.attribute.display_name.lower()}"


class AttributeModification(AttributeModifier):
    """An attribute change currently active on a combatant."""

    duration: int = Field(
        description="Remaining duration in turns.",
    )
    source_spell: str = Field(
        description="Name of the spell that applied the modification.",
    )
    applied_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the modification was applied.",
    )


class ActiveEffects(BaseModel):
    """All effects currently active on a combatant."""

    buffs: list[TimedEffect] = Field(default_factory=list)
    debuffs: list[TimedEffect] = Field(default_factory=list)
    dots: list[TimedEffect] = Field(default_factory=list)
    hots: list[TimedEffect] = Field(default_factory=list)
    attribute_modifications: list[AttributeModification] = Field(
        default_factory=list
    )

    def is_empty(self) -> bool:
        """Returns True if no effect of any kind is active."""
        return not (
            self.buffs
            or self.debuffs
            or self.dots
            or self.hots
            or self.attribute_modifications
        )
