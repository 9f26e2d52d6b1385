"""
Contracts of the external collaborators used by the combat engine.

The engine never persists, generates floors or rolls loot itself; it calls
these services and treats every call as blocking. Implementations live
outside the engine (see ``in_memory`` for a reference one).
"""

from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, Field

from tower_combat.character.combatant import DropChance, Enemy, Player
from tower_combat.combat.battle_state import DropResult, Floor, SpecialEvent
from tower_combat.core.constants import SkillType
from tower_combat.items.equipment import EquipmentSlots


class XpGrant(BaseModel):
    """Result of granting character XP."""

    amount: int = Field(ge=0)
    leveled_up: bool = False
    new_level: int = Field(1, ge=1)


class SkillXpResult(BaseModel):
    """Result of persisting skill XP."""

    new_level: int = Field(ge=1)
    leveled_up: bool = False


class FloorAdvance(BaseModel):
    """What awaits the player on the next floor."""

    floor: Floor
    enemy: Enemy | None = None
    event: SpecialEvent | None = None
    message: str = ""


class ConsumableOutcome(BaseModel):
    """Effect of using a consumable; the engine applies the amounts."""

    success: bool
    message: str = ""
    hp_restored: int = Field(0, ge=0)
    mana_restored: int = Field(0, ge=0)


class EventOutcome(BaseModel):
    """Result of interacting with a special event."""

    message: str = ""
    enemy: Enemy | None = Field(
        None,
        description="An enemy the event summons, starting a new encounter.",
    )
    hp_change: int = 0
    mana_change: int = 0


class CharacterService(Protocol):
    def update_hp_mana(self, character_id: str, hp: int, mana: int) -> None: ...

    def grant_xp(self, character_id: str, amount: int, source: str) -> XpGrant: ...

    def grant_gold(self, character_id: str, amount: int, source: str) -> int: ...

    def add_skill_xp(
        self, character_id: str, skill: SkillType, amount: int
    ) -> SkillXpResult: ...


class CemeteryService(Protocol):
    def kill_character(self, character_id: str, cause: str, killed_by: str) -> bool: ...


class RewardService(Protocol):
    def roll_drops(
        self, enemy_level: int, drop_table: list[DropChance], multiplier: float
    ) -> list[DropResult]: ...


class EquipmentService(Protocol):
    def get_equipped_slots(self, character_id: str) -> EquipmentSlots: ...


class FloorService(Protocol):
    def advance(self, player: Player, current_floor: Floor | None) -> FloorAdvance: ...


class InventoryService(Protocol):
    def consume(
        self, player_id: str, consumable_id: str, player: Player
    ) -> ConsumableOutcome: ...


class EventService(Protocol):
    def interact(self, player: Player, event: SpecialEvent) -> EventOutcome: ...


@dataclass
class CombatServices:
    """The collaborators an engine instance works with."""

    characters: CharacterService
    cemetery: CemeteryService
    rewards: RewardService
    equipment: EquipmentService
    floors: FloorService
    inventory: InventoryService
    events: EventService
