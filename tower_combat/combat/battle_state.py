"""
Battle state for the combat engine.

A BattleState is the whole in-memory picture of one encounter. It is never
mutated between turns: every resolution works on a deep copy and returns the
new state together with what happened.
"""

from pydantic import BaseModel, Field

from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill_progression import SkillLevelUp, SkillXpGain
from tower_combat.core.constants import BattleMode, FloorType, TurnPhase
from tower_combat.core.error_handling import CollaboratorWarning
from tower_combat.core.narration import NarrationEvent


class Floor(BaseModel):
    """A tower floor the player is fighting on."""

    number: int = Field(
        ge=1,
        description="Floor number, starting from 1.",
    )
    floor_type: FloorType = Field(
        FloorType.COMMON,
        description="Kind of floor, which scales rewards.",
    )
    name: str = Field(
        "",
        description="Display name of the floor.",
    )


class SpecialEvent(BaseModel):
    """A non-combat event waiting for the player on a floor."""

    id: str
    name: str
    description: str = ""


class DropResult(BaseModel):
    """An item dropped by a defeated enemy."""

    drop_id: str
    quantity: int = Field(ge=1)


class BattleRewards(BaseModel):
    """What the player earned by winning an encounter."""

    xp: int = Field(0, ge=0)
    gold: int = Field(0, ge=0)
    drops: list[DropResult] = Field(default_factory=list)
    leveled_up: bool = False
    new_level: int | None = None


class BattleState(BaseModel):
    """
    The state of one encounter.

    The player's turn is derived from the phase: the player may act only in
    AWAITING_PLAYER_ACTION.
    """

    encounter_id: str = Field(
        description="Identifier of the encounter, unique per enemy faced.",
    )
    player: Player = Field(
        description="The player character.",
    )
    enemy: Enemy | None = Field(
        None,
        description="The enemy being fought, None once it is gone.",
    )
    floor: Floor | None = Field(
        None,
        description="The floor the encounter takes place on.",
    )
    phase: TurnPhase = Field(
        TurnPhase.AWAITING_PLAYER_ACTION,
        description="Current phase of the turn state machine.",
    )
    mode: BattleMode = Field(
        BattleMode.ONGOING,
        description="Overall mode of the encounter.",
    )
    narration: list[NarrationEvent] = Field(
        default_factory=list,
        description="Narration of the latest resolution.",
    )
    rewards: BattleRewards | None = Field(
        None,
        description="Rewards computed on victory, at most once.",
    )
    special_event: SpecialEvent | None = Field(
        None,
        description="The event awaiting interaction, in SPECIAL_EVENT mode.",
    )
    character_deleted: bool = Field(
        False,
        description="Whether the permadeath service removed the character.",
    )

    @property
    def is_player_turn(self) -> bool:
        return self.mode == BattleMode.ONGOING and (
            self.phase == TurnPhase.AWAITING_PLAYER_ACTION
        )


class PlayerActionResult(BaseModel):
    """Outcome of a submitted player action."""

    new_state: BattleState
    turn_consumed: bool = Field(
        description="Whether the action used up the player's turn.",
    )
    narration: list[NarrationEvent] = Field(default_factory=list)
    skill_xp_gains: list[SkillXpGain] = Field(default_factory=list)
    level_ups: list[SkillLevelUp] = Field(default_factory=list)
    warnings: list[CollaboratorWarning] = Field(default_factory=list)
    message: str = Field(
        "",
        description="Short summary of the outcome, or the rejection reason.",
    )


class EnemyTurnResult(BaseModel):
    """Outcome of one enemy turn."""

    new_state: BattleState
    narration: list[NarrationEvent] = Field(default_factory=list)
    skill_xp_gains: list[SkillXpGain] = Field(default_factory=list)
    level_ups: list[SkillLevelUp] = Field(default_factory=list)
    warnings: list[CollaboratorWarning] = Field(default_factory=list)
