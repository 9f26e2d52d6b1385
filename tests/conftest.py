"""
Shared fixtures for the combat engine tests.

Rolls are scripted through ScriptedRandom, and collaborators are the
in-memory services, wrapped where a test needs to count calls or simulate
failures.
"""

import random
from collections.abc import Sequence
from typing import Any

import pytest

from tower_combat.actions.spell import Spell
from tower_combat.character.combatant import Enemy, Player
from tower_combat.combat.battle_state import BattleState, Floor, SpecialEvent
from tower_combat.combat.turn_resolver import TurnResolver
from tower_combat.core.constants import FloorType, SpellEffectType
from tower_combat.services.in_memory import (
    InMemoryCemeteryService,
    InMemoryCharacterService,
    InMemoryInventoryService,
    RandomRewardService,
    StaticEquipmentService,
)
from tower_combat.services.interfaces import (
    CombatServices,
    EventOutcome,
    FloorAdvance,
)


class ScriptedRandom(random.Random):
    """
    A random source returning scripted values.

    Once the script runs out, random() keeps returning the default, which is
    high enough to make every percentage roll fail.
    """

    def __init__(self, values: Sequence[float] = (), default: float = 0.99) -> None:
        super().__init__(0)
        self.values = list(values)
        self.default = default
        self.choices: list[int] = []

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return self.default

    def choice(self, seq: Sequence[Any]) -> Any:
        index = self.choices.pop(0) if self.choices else 0
        return seq[index]


class RecordingCemetery(InMemoryCemeteryService):
    """Cemetery counting every call, optionally failing them."""

    def __init__(self, fail: bool = False) -> None:
        super().__init__()
        self.fail = fail
        self.calls: list[tuple[str, str, str]] = []

    def kill_character(self, character_id: str, cause: str, killed_by: str) -> bool:
        self.calls.append((character_id, cause, killed_by))
        if self.fail:
            raise ConnectionError("cemetery unreachable")
        return super().kill_character(character_id, cause, killed_by)


class RecordingCharacters(InMemoryCharacterService):
    """Character service counting calls; operations named in fail raise."""

    def __init__(self, fail: Sequence[str] = ()) -> None:
        super().__init__()
        self.fail = set(fail)
        self.calls: list[str] = []

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            raise ConnectionError(f"{operation} unavailable")

    def update_hp_mana(self, character_id, hp, mana):
        self._record("update_hp_mana")
        return super().update_hp_mana(character_id, hp, mana)

    def grant_xp(self, character_id, amount, source):
        self._record("grant_xp")
        return super().grant_xp(character_id, amount, source)

    def grant_gold(self, character_id, amount, source):
        self._record("grant_gold")
        return super().grant_gold(character_id, amount, source)

    def add_skill_xp(self, character_id, skill, amount):
        self._record("add_skill_xp")
        return super().add_skill_xp(character_id, skill, amount)


class ScriptedFloors:
    """Floor service handing out prepared advances in order."""

    def __init__(self, advances: Sequence[FloorAdvance] = ()) -> None:
        self.advances = list(advances)
        self.calls = 0

    def advance(self, player: Player, current_floor: Floor | None) -> FloorAdvance:
        self.calls += 1
        if not self.advances:
            raise RuntimeError("no floor prepared")
        return self.advances.pop(0)


class ScriptedEvents:
    """Event service returning a prepared outcome."""

    def __init__(self, outcome: EventOutcome | None = None) -> None:
        self.outcome = outcome or EventOutcome(message="Nothing happens.")

    def interact(self, player: Player, event: SpecialEvent) -> EventOutcome:
        return self.outcome


def make_player(**overrides: Any) -> Player:
    data: dict[str, Any] = {
        "id": "p1",
        "name": "Hero",
        "hp": 100,
        "max_hp": 100,
        "mana": 50,
        "max_mana": 50,
        "attack": 50,
        "defense": 10,
    }
    data.update(overrides)
    return Player(**data)


def make_enemy(**overrides: Any) -> Enemy:
    data: dict[str, Any] = {
        "id": "goblin",
        "name": "Goblin",
        "hp": 100,
        "max_hp": 100,
        "attack": 20,
        "defense": 20,
    }
    data.update(overrides)
    return Enemy(**data)


def make_state(player: Player, enemy: Enemy | None, **overrides: Any) -> BattleState:
    data: dict[str, Any] = {
        "encounter_id": "enc-1",
        "player": player,
        "enemy": enemy,
        "floor": Floor(number=1, floor_type=FloorType.COMMON),
    }
    data.update(overrides)
    return BattleState(**data)


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def cemetery():
    return RecordingCemetery()


@pytest.fixture
def characters():
    return RecordingCharacters()


@pytest.fixture
def floors():
    return ScriptedFloors()


@pytest.fixture
def events():
    return ScriptedEvents()


@pytest.fixture
def inventory():
    return InMemoryInventoryService({"p1": {"health_potion": 2, "mana_potion": 1}})


@pytest.fixture
def equipment():
    return StaticEquipmentService()


@pytest.fixture
def services(characters, cemetery, floors, events, inventory, equipment):
    return CombatServices(
        characters=characters,
        cemetery=cemetery,
        rewards=RandomRewardService(ScriptedRandom()),
        equipment=equipment,
        floors=floors,
        inventory=inventory,
        events=events,
    )


@pytest.fixture
def resolver(services, rng):
    return TurnResolver(services, rng)


@pytest.fixture
def fireball():
    return Spell(
        id="fireball",
        name="Fireball",
        effect_type=SpellEffectType.DAMAGE,
        effect_value=20,
        mana_cost=20,
        cooldown=2,
    )


@pytest.fixture
def player():
    return make_player()


@pytest.fixture
def enemy():
    return make_enemy()


@pytest.fixture
def state(player, enemy):
    return make_state(player, enemy)


@pytest.fixture
def player_factory():
    return make_player


@pytest.fixture
def enemy_factory():
    return make_enemy


@pytest.fixture
def state_factory():
    return make_state


@pytest.fixture
def scripted():
    return ScriptedRandom
