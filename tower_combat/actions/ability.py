"""
Enemy special abilities.
"""

from pydantic import BaseModel, Field

from tower_combat.core.constants import AbilityKind


class EnemyAbility(BaseModel):
    """A special move an enemy can use instead of a plain attack."""

    name: str = Field(
        description="Display name of the ability.",
    )
    kind: AbilityKind = Field(
        description="What the ability does when used.",
    )
    description: str = Field(
        "",
        description="Flavor text, never interpreted.",
    )
