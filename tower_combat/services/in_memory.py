"""
In-memory collaborators.

Reference implementations of every service the engine depends on, keeping
their records in plain dictionaries. They power the CLI demo and double as
realistic collaborators in tests.
"""

import math
import random

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from tower_combat.character.combatant import (
    DropChance,
    Player,
    skill_level_for_xp,
)
from tower_combat.combat.battle_state import DropResult, Floor, SpecialEvent
from tower_combat.core.constants import FloorType, SkillType
from tower_combat.core.content import ContentRepository
from tower_combat.items.equipment import EquipmentSlots
from tower_combat.services.interfaces import (
    CombatServices,
    ConsumableOutcome,
    EventOutcome,
    FloorAdvance,
    SkillXpResult,
    XpGrant,
)

# Character XP needed per character level.
CHARACTER_XP_PER_LEVEL = 100


class CharacterRecord(BaseModel):
    """What the character service remembers about a character."""

    hp: int = 0
    mana: int = 0
    xp: int = 0
    level: int = 1
    gold: int = 0
    skill_xp: dict[SkillType, int] = Field(default_factory=dict)


class InMemoryCharacterService:
    """Persists character progress in a dictionary."""

    def __init__(self) -> None:
        self.records: dict[str, CharacterRecord] = {}

    def record(self, character_id: str) -> CharacterRecord:
        return self.records.setdefault(character_id, CharacterRecord())

    def update_hp_mana(self, character_id: str, hp: int, mana: int) -> None:
        record = self.record(character_id)
        record.hp = hp
        record.mana = mana

    def grant_xp(self, character_id: str, amount: int, source: str) -> XpGrant:
        record = self.record(character_id)
        old_level = record.level
        record.xp += amount
        record.level = record.xp // CHARACTER_XP_PER_LEVEL + 1
        log_debug(
            f"Granted {amount} XP",
            {"character": character_id, "source": source, "level": record.level},
        )
        return XpGrant(
            amount=amount,
            leveled_up=record.level > old_level,
            new_level=record.level,
        )

    def grant_gold(self, character_id: str, amount: int, source: str) -> int:
        record = self.record(character_id)
        record.gold += amount
        return record.gold

    def add_skill_xp(
        self, character_id: str, skill: SkillType, amount: int
    ) -> SkillXpResult:
        record = self.record(character_id)
        before = record.skill_xp.get(skill, 0)
        after = before + max(0, amount)
        record.skill_xp[skill] = after
        old_level = skill_level_for_xp(before)
        new_level = skill_level_for_xp(after)
        return SkillXpResult(new_level=new_level, leveled_up=new_level > old_level)

    def seed_skills(self, player: Player) -> None:
        """Copies a player's current skill XP into the records."""
        record = self.record(player.id)
        for skill, progress in player.skills.items():
            record.skill_xp[skill] = progress.xp


class InMemoryCemeteryService:
    """Remembers the characters that died."""

    def __init__(self) -> None:
        self.graves: dict[str, tuple[str, str]] = {}

    def kill_character(self, character_id: str, cause: str, killed_by: str) -> bool:
        if character_id in self.graves:
            log_warning(
                "Character already buried",
                {"character": character_id, "killed_by": killed_by},
            )
            return False
        self.graves[character_id] = (cause, killed_by)
        return True


class RandomRewardService:
    """Rolls drop tables; higher level enemies drop more often."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def roll_drops(
        self, enemy_level: int, drop_table: list[DropChance], multiplier: float
    ) -> list[DropResult]:
        drops: list[DropResult] = []
        for entry in drop_table:
            chance = entry.drop_chance * (1 + enemy_level * 0.02) * multiplier
            if self.rng.random() > min(0.95, chance):
                continue
            spread = max(0, entry.max_quantity - entry.min_quantity)
            quantity = math.floor(self.rng.random() * (spread + 1) + entry.min_quantity)
            if quantity > 0:
                drops.append(DropResult(drop_id=entry.drop_id, quantity=quantity))
        return drops


class StaticEquipmentService:
    """Reports equipment assigned up front."""

    def __init__(self, loadouts: dict[str, EquipmentSlots] | None = None) -> None:
        self.loadouts = loadouts or {}

    def get_equipped_slots(self, character_id: str) -> EquipmentSlots:
        return self.loadouts.get(character_id, EquipmentSlots())


class Consumable(BaseModel):
    """A consumable item known to the in-memory inventory."""

    id: str
    name: str
    hp_restored: int = Field(0, ge=0)
    mana_restored: int = Field(0, ge=0)


DEFAULT_CONSUMABLES = {
    "health_potion": Consumable(id="health_potion", name="Health Potion", hp_restored=40),
    "mana_potion": Consumable(id="mana_potion", name="Mana Potion", mana_restored=30),
}


class InMemoryInventoryService:
    """Tracks consumable counts per character."""

    def __init__(
        self,
        stock: dict[str, dict[str, int]] | None = None,
        catalog: dict[str, Consumable] | None = None,
    ) -> None:
        self.stock = stock or {}
        self.catalog = catalog or DEFAULT_CONSUMABLES

    def consume(
        self, player_id: str, consumable_id: str, player: Player
    ) -> ConsumableOutcome:
        items = self.stock.setdefault(player_id, {})
        item = self.catalog.get(consumable_id)
        if item is None:
            return ConsumableOutcome(success=False, message="Unknown item.")
        if items.get(consumable_id, 0) <= 0:
            return ConsumableOutcome(
                success=False, message=f"You have no {item.name} left."
            )
        items[consumable_id] -= 1
        return ConsumableOutcome(
            success=True,
            message=f"{player.name} uses a {item.name}.",
            hp_restored=item.hp_restored,
            mana_restored=item.mana_restored,
        )


def floor_type_for(number: int) -> FloorType:
    """Floor 5 and every tenth floor hold a boss, other fifth floors an elite."""
    if number == 5 or number % 10 == 0:
        return FloorType.BOSS
    if number % 5 == 0:
        return FloorType.ELITE
    return FloorType.COMMON


class ContentFloorService:
    """
    Generates floors from the content repository.

    Every seventh floor (unless it holds a boss) is a special event; other
    floors spawn an enemy suited to the floor number.
    """

    def __init__(self, content: ContentRepository, rng: random.Random | None = None) -> None:
        self.content = content
        self.rng = rng or random.Random()

    def advance(self, player: Player, current_floor: Floor | None) -> FloorAdvance:
        number = current_floor.number + 1 if current_floor else player.floor
        floor_type = floor_type_for(number)
        floor = Floor(
            number=number,
            floor_type=floor_type,
            name=f"{floor_type.display_name} floor {number}",
        )
        if number % 7 == 0 and floor_type != FloorType.BOSS:
            return FloorAdvance(
                floor=floor,
                event=SpecialEvent(
                    id=f"fountain-{number}",
                    name="Mysterious Fountain",
                    description="A glowing fountain hums with old magic.",
                ),
                message=f"Floor {number}: something unusual awaits.",
            )

        candidates = self.content.enemies_up_to_level(max(1, math.ceil(number / 2)))
        if not candidates:
            return FloorAdvance(floor=floor, message=f"Floor {number} is deserted.")
        if floor_type == FloorType.COMMON:
            template = self.rng.choice(candidates)
        else:
            template = max(candidates, key=lambda enemy: enemy.level)
        enemy = self.content.spawn_enemy(template.id)
        return FloorAdvance(
            floor=floor,
            enemy=enemy,
            message=f"You climb to floor {number}.",
        )


class FountainEventService:
    """Resolves special events: a fountain that usually heals, sometimes bites."""

    def __init__(
        self, content: ContentRepository, rng: random.Random | None = None
    ) -> None:
        self.content = content
        self.rng = rng or random.Random()

    def interact(self, player: Player, event: SpecialEvent) -> EventOutcome:
        roll = self.rng.random()
        if roll < 0.6:
            return EventOutcome(
                message=f"The {event.name} restores your strength.",
                hp_change=math.floor(player.max_hp * 0.3),
                mana_change=math.floor(player.max_mana * 0.3),
            )
        if roll < 0.85:
            return EventOutcome(
                message=f"The {event.name} burns your skin!",
                hp_change=-math.floor(player.max_hp * 0.1),
            )
        candidates = self.content.enemies_up_to_level(player.level + 1)
        if not candidates:
            return EventOutcome(message=f"The {event.name} falls silent.")
        guardian = self.content.spawn_enemy(self.rng.choice(candidates).id)
        return EventOutcome(
            message=f"A guardian rises from the {event.name}!",
            enemy=guardian,
        )


def build_in_memory_services(
    content: ContentRepository,
    rng: random.Random | None = None,
    loadouts: dict[str, EquipmentSlots] | None = None,
    stock: dict[str, dict[str, int]] | None = None,
) -> CombatServices:
    """
    Builds a full set of in-memory collaborators.

    Args:
        content (ContentRepository):
            Source of enemies for floors and events.
        rng (random.Random | None):
            Shared random source.
        loadouts (dict[str, EquipmentSlots] | None):
            Equipment per character id.
        stock (dict[str, dict[str, int]] | None):
            Consumable counts per character id.

    Returns:
        CombatServices:
            The services bundle.

    """
    rng = rng or random.Random()
    return CombatServices(
        characters=InMemoryCharacterService(),
        cemetery=InMemoryCemeteryService(),
        rewards=RandomRewardService(rng),
        equipment=StaticEquipmentService(loadouts),
        floors=ContentFloorService(content, rng),
        inventory=InMemoryInventoryService(stock),
        events=FountainEventService(content, rng),
    )
