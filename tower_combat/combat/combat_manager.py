"""
Combat manager for the combat engine.

Owns one encounter at a time and drives its turn cycle: the player's
action, the enemy's reply (possibly repeated when the enemy is much faster),
then the end-of-turn effects. Submissions are serialized by a lock, so two
resolutions of the same encounter can never interleave.
"""

import random
import threading

from catchery import log_debug
from pydantic import BaseModel, Field

from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill_progression import SkillLevelUp, SkillXpGain
from tower_combat.combat.battle_state import (
    BattleState,
    EnemyTurnResult,
    Floor,
    PlayerActionResult,
)
from tower_combat.combat.turn_resolver import TurnResolver, new_encounter_id
from tower_combat.core.config import DEFAULT_CONFIG, CombatConfig
from tower_combat.core.constants import (
    ActionType,
    Attribute,
    BattleMode,
    NarrationKind,
    TurnPhase,
)
from tower_combat.core.error_handling import CollaboratorWarning, CombatError
from tower_combat.core.narration import NarrationEvent, narrate
from tower_combat.services.interfaces import CombatServices


class TurnCycleResult(BaseModel):
    """Everything that happened in response to one player submission."""

    state: BattleState
    turn_consumed: bool
    message: str = ""
    narration: list[NarrationEvent] = Field(default_factory=list)
    skill_xp_gains: list[SkillXpGain] = Field(default_factory=list)
    level_ups: list[SkillLevelUp] = Field(default_factory=list)
    warnings: list[CollaboratorWarning] = Field(default_factory=list)
    enemy_actions: int = Field(
        0,
        description="How many times the enemy acted in this cycle.",
    )

    def absorb(self, result: PlayerActionResult | EnemyTurnResult) -> None:
        self.state = result.new_state
        self.narration.extend(result.narration)
        self.skill_xp_gains.extend(result.skill_xp_gains)
        self.level_ups.extend(result.level_ups)
        self.warnings.extend(result.warnings)


class CombatManager:
    """
    Drives encounters through the turn resolver.

    Speed decides extra turns: a much faster enemy acts several times in a
    row, while a much faster player banks turns that the enemy cannot answer.
    """

    def __init__(
        self,
        services: CombatServices,
        rng: random.Random | None = None,
        config: CombatConfig = DEFAULT_CONFIG,
    ) -> None:
        self.rng = rng or random.Random()
        self.config = config
        self.resolver = TurnResolver(services, self.rng, config)
        # Serializes every resolution of the current encounter.
        self._lock = threading.Lock()
        self._state: BattleState | None = None
        # Enemy turns the player may still skip thanks to speed.
        self._banked_turns = 0

    @property
    def state(self) -> BattleState:
        if self._state is None:
            raise CombatError("No encounter has been started.")
        return self._state

    def start_encounter(
        self, player: Player, enemy: Enemy | None, floor: Floor | None = None
    ) -> BattleState:
        """
        Begins a new encounter.

        Args:
            player (Player):
                The player character.
            enemy (Enemy | None):
                The enemy to fight; None starts on a cleared floor.
            floor (Floor | None):
                The floor the encounter takes place on.

        Returns:
            BattleState:
                The initial state, awaiting the player's action.

        """
        with self._lock:
            player = player.model_copy(deep=True)
            player.reset_spell_cooldowns()
            player.is_defending = False
            player.potion_used_this_turn = False
            if floor is not None:
                player.floor = floor.number
            narration = []
            if enemy is not None:
                narration.append(
                    narrate(NarrationKind.ENEMY_ACTION, f"{enemy.name} appears!")
                )
            self._state = BattleState(
                encounter_id=new_encounter_id(),
                player=player,
                enemy=enemy.model_copy(deep=True) if enemy else None,
                floor=floor,
                mode=BattleMode.ONGOING if enemy else BattleMode.CLEARED,
                phase=(
                    TurnPhase.AWAITING_PLAYER_ACTION
                    if enemy
                    else TurnPhase.TURN_COMPLETE
                ),
                narration=narration,
            )
            self._banked_turns = 0
            log_debug(
                "Encounter started",
                {
                    "encounter": self._state.encounter_id,
                    "player": player.id,
                    "enemy": enemy.id if enemy else None,
                },
            )
            return self._state

    def calculate_extra_turns(self, faster_speed: float, slower_speed: float) -> int:
        """
        Computes the extra turns earned by a speed advantage.

        Args:
            faster_speed (float):
                Speed of the faster combatant.
            slower_speed (float):
                Speed of the slower combatant.

        Returns:
            int:
                Extra turns, at most the configured maximum.

        """
        if slower_speed <= 0:
            return 2
        ratio = faster_speed / slower_speed
        extra = 0
        for threshold, turns in self.config.extra_turn_thresholds:
            if ratio >= threshold:
                extra = turns
                break
        if extra < self.config.max_extra_turns and (
            self.rng.random() < self.config.extra_turn_bonus_chance
        ):
            extra += 1
        return min(extra, self.config.max_extra_turns)

    def submit_player_action(
        self,
        action: ActionType | str,
        spell_id: str | None = None,
        consumable_id: str | None = None,
    ) -> TurnCycleResult:
        """
        Resolves a player action and everything it sets in motion.

        Args:
            action (ActionType | str):
                The action, or its identifier.
            spell_id (str | None):
                The spell to cast, for the spell action.
            consumable_id (str | None):
                The item to use, for the consumable action.

        Returns:
            TurnCycleResult:
                The resulting state and the combined narration.

        """
        with self._lock:
            player_result = self.resolver.submit_player_action(
                self.state, action, spell_id, consumable_id
            )
            cycle = TurnCycleResult(
                state=player_result.new_state,
                turn_consumed=player_result.turn_consumed,
                message=player_result.message,
            )
            cycle.absorb(player_result)
            if player_result.turn_consumed:
                self._resolve_replies(cycle)
            elif cycle.state.mode != BattleMode.ONGOING:
                self._banked_turns = 0
            self._state = cycle.state
            return cycle

    def _resolve_replies(self, cycle: TurnCycleResult) -> None:
        state = cycle.state
        if state.mode != BattleMode.ONGOING:
            self._banked_turns = 0
            return
        if state.phase != TurnPhase.AWAITING_ENEMY_ACTION:
            return

        was_defending = state.player.is_defending
        if self._banked_turns > 0:
            self._banked_turns -= 1
            cycle.absorb(self.resolver.skip_enemy_turn(state))
        else:
            enemy_extra = self._roll_extra_turns(state, cycle)
            cycle.absorb(self.resolver.resolve_enemy_turn(state, was_defending))
            cycle.enemy_actions += 1
            for _ in range(enemy_extra):
                state = cycle.state
                if state.mode != BattleMode.ONGOING:
                    break
                state = state.model_copy(
                    update={"phase": TurnPhase.AWAITING_ENEMY_ACTION}
                )
                cycle.absorb(
                    self.resolver.resolve_enemy_turn(
                        state, was_defending, tick_effects=False
                    )
                )
                cycle.enemy_actions += 1

        if cycle.state.mode == BattleMode.ONGOING:
            cycle.absorb(self.resolver.complete_turn(cycle.state))
        if cycle.state.mode.is_terminal:
            self._banked_turns = 0

    def _roll_extra_turns(self, state: BattleState, cycle: TurnCycleResult) -> int:
        """Returns the enemy's extra turns, banking the player's instead."""
        enemy = state.enemy
        if enemy is None:
            return 0
        player_speed = state.player.effective(Attribute.SPEED)
        enemy_speed = enemy.effective(Attribute.SPEED)
        if enemy_speed > player_speed:
            extra = self.calculate_extra_turns(enemy_speed, player_speed)
            if extra:
                cycle.narration.append(
                    narrate(
                        NarrationKind.ENEMY_ACTION,
                        f"{enemy.name} is faster and acts {extra + 1} times!",
                    )
                )
            return extra
        if player_speed > enemy_speed:
            self._banked_turns = self.calculate_extra_turns(player_speed, enemy_speed)
            if self._banked_turns:
                cycle.narration.append(
                    narrate(
                        NarrationKind.PLAYER_ACTION,
                        f"{state.player.name} outpaces {enemy.name} and gains "
                        f"{self._banked_turns} extra turns!",
                    )
                )
        return 0
