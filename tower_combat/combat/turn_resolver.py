"""
Turn resolution for the combat engine.

The TurnResolver is the action state machine of an encounter. It validates
and executes one player action, or one enemy action, against a battle state
and returns a new state together with the narration of what happened. The
given state is never modified: every resolution starts from a deep copy.
"""

import random
import uuid
from dataclasses import dataclass, field

from catchery import log_debug, log_warning

from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill_progression import (
    SkillLevelUp,
    SkillXpGain,
    apply_skill_gains,
    on_attack,
    on_defend,
    on_spell_cast,
)
from tower_combat.combat.battle_state import (
    BattleState,
    EnemyTurnResult,
    PlayerActionResult,
)
from tower_combat.combat.damage import (
    apply_resistance,
    mitigate_defended,
    resolve_attack,
)
from tower_combat.combat.flee import attempt_flee
from tower_combat.combat.npc_ai import (
    choose_enemy_action,
    enemy_spell_damage,
    resolve_special_move,
)
from tower_combat.combat.outcomes import resolve_player_death, resolve_victory
from tower_combat.combat.spell_scaling import caster_spell_damage, caster_spell_healing
from tower_combat.core.config import DEFAULT_CONFIG, CombatConfig
from tower_combat.core.constants import (
    AbilityKind,
    ActionType,
    Attribute,
    BattleMode,
    EnemyActionType,
    NarrationKind,
    SpellEffectType,
    TurnPhase,
)
from tower_combat.core.error_handling import (
    CollaboratorWarning,
    ErrorSeverity,
    InvalidPhaseError,
    MissingEnemyError,
    UnknownActionError,
    call_collaborator,
)
from tower_combat.core.narration import NarrationEvent, narrate
from tower_combat.effects.effect_manager import (
    apply_attribute_effect,
    apply_over_time,
    tick,
)
from tower_combat.items.equipment import EquipmentSlots
from tower_combat.services.interfaces import CombatServices

# Actions that fight the current enemy.
COMBAT_ACTIONS = (
    ActionType.ATTACK,
    ActionType.DEFEND,
    ActionType.SPELL,
    ActionType.CONSUMABLE,
    ActionType.FLEE,
    ActionType.SPECIAL,
)

# Modes in which the player may move on to the next floor.
ADVANCE_MODES = (BattleMode.VICTORY, BattleMode.FLED, BattleMode.CLEARED)


@dataclass
class _Resolution:
    """Accumulates the side products of a resolution."""

    events: list[NarrationEvent] = field(default_factory=list)
    gains: list[SkillXpGain] = field(default_factory=list)
    level_ups: list[SkillLevelUp] = field(default_factory=list)
    warnings: list[CollaboratorWarning] = field(default_factory=list)
    message: str = ""

    def say(self, kind: NarrationKind, text: str) -> None:
        self.events.append(narrate(kind, text))


class _Rejected(Exception):
    """Internal signal for a precondition rejection."""


def new_encounter_id() -> str:
    return uuid.uuid4().hex[:12]


class TurnResolver:
    """
    Resolves player and enemy actions.

    Precondition failures are reported as rejected results, never as
    exceptions. Exceptions are raised only for states the encounter cannot
    continue from: a wrong phase, an unknown action or a missing enemy.
    """

    def __init__(
        self,
        services: CombatServices,
        rng: random.Random | None = None,
        config: CombatConfig = DEFAULT_CONFIG,
    ) -> None:
        self.services = services
        self.rng = rng or random.Random()
        self.config = config

    # === Player actions ===

    def submit_player_action(
        self,
        state: BattleState,
        action: ActionType | str,
        spell_id: str | None = None,
        consumable_id: str | None = None,
    ) -> PlayerActionResult:
        """
        Executes one player action.

        Args:
            state (BattleState):
                The current state, left untouched.
            action (ActionType | str):
                The action, or its identifier.
            spell_id (str | None):
                The spell to cast, for the spell action.
            consumable_id (str | None):
                The item to use, for the consumable action.

        Returns:
            PlayerActionResult:
                The new state, whether the turn was consumed and what
                happened.

        Raises:
            UnknownActionError:
                If the action identifier is not a known action.
            InvalidPhaseError:
                If a combat action is submitted outside the player's turn.
            MissingEnemyError:
                If a combat action is submitted with no enemy in the state.

        """
        action = self._parse_action(action)
        if action in COMBAT_ACTIONS:
            if state.mode != BattleMode.ONGOING or (
                state.phase != TurnPhase.AWAITING_PLAYER_ACTION
            ):
                raise InvalidPhaseError(
                    f"Cannot {action.value} in mode {state.mode.value}, "
                    f"phase {state.phase.value}."
                )
            if state.enemy is None:
                raise MissingEnemyError(f"Cannot {action.value} without an enemy.")

        new_state = state.model_copy(deep=True)
        new_state.narration = []
        resolution = _Resolution()
        handlers = {
            ActionType.ATTACK: lambda: self._attack(new_state, resolution),
            ActionType.DEFEND: lambda: self._defend(new_state, resolution),
            ActionType.SPELL: lambda: self._cast_spell(new_state, resolution, spell_id),
            ActionType.CONSUMABLE: lambda: self._use_consumable(
                new_state, resolution, consumable_id
            ),
            ActionType.FLEE: lambda: self._flee(new_state, resolution),
            ActionType.SPECIAL: lambda: self._special(),
            ActionType.CONTINUE: lambda: self._continue(new_state, resolution),
            ActionType.INTERACT_EVENT: lambda: self._interact(new_state, resolution),
        }

        if action in COMBAT_ACTIONS:
            new_state.phase = TurnPhase.RESOLVING_PLAYER_ACTION
        try:
            turn_consumed = handlers[action]()
        except _Rejected as rejection:
            return self._reject(state, str(rejection), resolution.warnings)

        if turn_consumed:
            player = new_state.player
            player.defense_cooldown = max(0, player.defense_cooldown - 1)
            player.potion_used_this_turn = False
        if new_state.mode == BattleMode.ONGOING and action in COMBAT_ACTIONS:
            new_state.phase = (
                TurnPhase.AWAITING_ENEMY_ACTION
                if turn_consumed
                else TurnPhase.AWAITING_PLAYER_ACTION
            )

        new_state.narration = resolution.events
        log_debug(
            f"Resolved player action {action.value}",
            {
                "encounter": new_state.encounter_id,
                "turn_consumed": turn_consumed,
                "mode": new_state.mode.value,
            },
        )
        return PlayerActionResult(
            new_state=new_state,
            turn_consumed=turn_consumed,
            narration=resolution.events,
            skill_xp_gains=resolution.gains,
            level_ups=resolution.level_ups,
            warnings=resolution.warnings,
            message=resolution.message,
        )

    def _parse_action(self, action: ActionType | str) -> ActionType:
        if isinstance(action, ActionType):
            return action
        try:
            return ActionType(action)
        except ValueError as e:
            raise UnknownActionError(f"Unknown action '{action}'.") from e

    def _reject(
        self,
        state: BattleState,
        message: str,
        warnings: list[CollaboratorWarning],
    ) -> PlayerActionResult:
        unchanged = state.model_copy(deep=True)
        unchanged.narration = [narrate(NarrationKind.WARNING, message)]
        return PlayerActionResult(
            new_state=unchanged,
            turn_consumed=False,
            narration=unchanged.narration,
            warnings=warnings,
            message=message,
        )

    def _equipment(self, player: Player, resolution: _Resolution) -> EquipmentSlots:
        return call_collaborator(
            lambda: self.services.equipment.get_equipped_slots(player.id),
            EquipmentSlots(),
            "get_equipped_slots",
            resolution.warnings,
            {"player": player.id},
            ErrorSeverity.LOW,
        )

    def _grant_skill_xp(
        self, player: Player, gains: list[SkillXpGain], resolution: _Resolution
    ) -> None:
        level_ups, events = apply_skill_gains(
            player, gains, self.services.characters, resolution.warnings
        )
        resolution.gains.extend(gains)
        resolution.level_ups.extend(level_ups)
        resolution.events.extend(events)

    def _check_victory(self, state: BattleState, resolution: _Resolution) -> None:
        if state.enemy is not None and not state.enemy.is_alive():
            resolution.events.extend(
                resolve_victory(state, self.services, resolution.warnings, self.config)
            )

    def _living_enemy(self, state: BattleState) -> Enemy:
        enemy = state.enemy
        if enemy is None:
            raise MissingEnemyError("The action requires an enemy.")
        if not enemy.is_alive():
            raise _Rejected(f"{enemy.name} is already defeated.")
        return enemy

    def _attack(self, state: BattleState, resolution: _Resolution) -> bool:
        player = state.player
        enemy = self._living_enemy(state)
        result = resolve_attack(
            player.effective(Attribute.ATTACK),
            enemy.effective(Attribute.DEFENSE),
            player.effective(Attribute.CRITICAL_CHANCE),
            player.effective(Attribute.CRITICAL_DAMAGE),
            player.effective(Attribute.DOUBLE_ATTACK_CHANCE),
            player.effective(Attribute.DEXTERITY),
            player.effective(Attribute.SPEED),
            self.rng,
            self.config,
        )
        damage = apply_resistance(
            result.damage, enemy.resistances.physical_multiplier()
        )
        enemy.take_damage(damage)
        player.is_defending = False

        tags = []
        if result.is_critical:
            tags.append("critical")
        if result.is_double_attack:
            tags.append("double")
        label = f"{' '.join(tags)} attack" if tags else "attack"
        resolution.say(
            NarrationKind.PLAYER_ACTION,
            f"{player.name} lands a {label} on {enemy.name} for {damage} damage.",
        )
        resolution.message = f"You dealt {damage} damage."

        slots = self._equipment(player, resolution)
        off_hand = slots.off_hand_weapon if slots.is_dual_wielding else None
        self._grant_skill_xp(
            player, on_attack(slots.main_weapon, damage, off_hand), resolution
        )
        self._check_victory(state, resolution)
        return True

    def _defend(self, state: BattleState, resolution: _Resolution) -> bool:
        player = state.player
        if player.defense_cooldown > 0:
            raise _Rejected(
                f"Defense is on cooldown for {player.defense_cooldown} more turns."
            )
        player.is_defending = True
        player.defense_cooldown = self.config.defense_cooldown
        resolution.say(
            NarrationKind.PLAYER_ACTION,
            f"{player.name} takes a defensive stance.",
        )
        resolution.message = "You brace for the next blow."
        slots = self._equipment(player, resolution)
        self._grant_skill_xp(player, on_defend(slots.has_shield, 0), resolution)
        return True

    def _cast_spell(
        self, state: BattleState, resolution: _Resolution, spell_id: str | None
    ) -> bool:
        player = state.player
        if not spell_id:
            raise _Rejected("No spell was chosen.")
        spell = player.get_spell(spell_id)
        if spell is None:
            raise _Rejected(f"{player.name} does not know that spell.")
        if not spell.is_ready:
            raise _Rejected(
                f"{spell.name} is on cooldown for {spell.current_cooldown} more turns."
            )
        if player.mana < spell.mana_cost:
            raise _Rejected(
                f"Not enough mana for {spell.name} "
                f"({player.mana}/{spell.mana_cost})."
            )
        enemy = None
        if spell.effect_type.targets_enemy:
            enemy = self._living_enemy(state)

        player.spend_mana(spell.mana_cost)
        spell.current_cooldown = spell.cooldown
        resolution.say(
            NarrationKind.PLAYER_ACTION,
            f"{player.name} casts {spell.name} {spell.effect_type.emoji}.",
        )

        magnitude = 0
        effect_type = spell.effect_type
        if effect_type == SpellEffectType.DAMAGE:
            assert enemy is not None
            magnitude = apply_resistance(
                caster_spell_damage(player, spell.effect_value, self.config),
                enemy.resistances.magical_multiplier(),
            )
            enemy.take_damage(magnitude)
            resolution.say(
                NarrationKind.DAMAGE,
                f"{spell.name} hits {enemy.name} for {magnitude} magic damage.",
            )
        elif effect_type == SpellEffectType.HEAL:
            magnitude = caster_spell_healing(player, spell.effect_value, self.config)
            healed = player.heal(magnitude)
            resolution.say(
                NarrationKind.HEALING,
                f"{player.name} recovers {healed} HP.",
            )
        elif effect_type == SpellEffectType.HOT:
            magnitude = caster_spell_healing(player, spell.effect_value, self.config)
            resolution.events.extend(apply_over_time(player, spell, magnitude))
        elif effect_type == SpellEffectType.BUFF:
            magnitude = spell.effect_value
            resolution.events.extend(
                apply_attribute_effect(
                    player, spell, self.config.default_effect_duration
                )
            )
        else:
            assert enemy is not None
            magnitude = spell.effect_value
            if self._resists_debuff(enemy):
                resolution.say(
                    NarrationKind.EFFECT,
                    f"{enemy.name} resists {spell.name}!",
                )
            elif effect_type == SpellEffectType.DOT:
                magnitude = apply_resistance(
                    caster_spell_damage(player, spell.effect_value, self.config),
                    enemy.resistances.magical_multiplier(),
                )
                resolution.events.extend(apply_over_time(enemy, spell, magnitude))
            else:
                resolution.events.extend(
                    apply_attribute_effect(
                        enemy, spell, self.config.default_effect_duration
                    )
                )
        resolution.message = f"You cast {spell.name}."

        slots = self._equipment(player, resolution)
        self._grant_skill_xp(
            player,
            on_spell_cast(spell.mana_cost, magnitude, slots.has_off_hand_staff),
            resolution,
        )
        self._check_victory(state, resolution)
        return True

    def _resists_debuff(self, enemy: Enemy) -> bool:
        chance = enemy.resistances.debuff_resistance
        return chance > 0 and self.rng.random() < chance

    def _use_consumable(
        self,
        state: BattleState,
        resolution: _Resolution,
        consumable_id: str | None,
    ) -> bool:
        player = state.player
        if not consumable_id:
            raise _Rejected("No consumable was chosen.")
        if player.potion_used_this_turn:
            raise _Rejected("You already used a consumable this turn.")
        outcome = call_collaborator(
            lambda: self.services.inventory.consume(
                player.id, consumable_id, player.model_copy(deep=True)
            ),
            None,
            "consume",
            resolution.warnings,
            {"player": player.id, "consumable": consumable_id},
        )
        if outcome is None:
            raise _Rejected("The item could not be used.")
        if not outcome.success:
            raise _Rejected(outcome.message or "The item could not be used.")

        healed = player.heal(outcome.hp_restored)
        restored = player.restore_mana(outcome.mana_restored)
        player.potion_used_this_turn = True
        resolution.say(
            NarrationKind.HEALING,
            outcome.message
            or f"{player.name} recovers {healed} HP and {restored} mana.",
        )
        resolution.message = outcome.message or "Item used."
        return False

    def _flee(self, state: BattleState, resolution: _Resolution) -> bool:
        player = state.player
        enemy = self._living_enemy(state)
        outcome = attempt_flee(
            player.effective(Attribute.SPEED),
            enemy.effective(Attribute.SPEED),
            enemy.effective(Attribute.ATTACK),
            self.rng,
            self.config,
        )
        if outcome.success:
            resolution.say(
                NarrationKind.SYSTEM,
                f"{player.name} escaped from {enemy.name}!",
            )
            resolution.message = "You fled the battle."
            call_collaborator(
                lambda: self.services.characters.update_hp_mana(
                    player.id, player.hp, player.mana
                ),
                None,
                "update_hp_mana",
                resolution.warnings,
                {"player": player.id},
            )
            player.is_defending = False
            state.enemy = None
            state.mode = BattleMode.FLED
            state.phase = TurnPhase.TURN_COMPLETE
            return True

        damage = outcome.damage_taken_on_failure
        resolution.say(
            NarrationKind.DAMAGE,
            f"{player.name} failed to escape and took {damage} damage "
            f"({outcome.chance}% chance).",
        )
        resolution.message = "The escape failed."
        if damage >= player.hp:
            resolution.events.extend(
                resolve_player_death(
                    state,
                    enemy.name,
                    f"Struck down while fleeing from {enemy.name}",
                    self.services,
                    resolution.warnings,
                )
            )
            return False
        player.take_damage(damage)
        return False

    def _special(self) -> bool:
        raise _Rejected("Special abilities are not available yet.")

    def _continue(self, state: BattleState, resolution: _Resolution) -> bool:
        if state.mode not in ADVANCE_MODES:
            if state.mode == BattleMode.DEFEAT:
                raise _Rejected("The journey has ended.")
            if state.mode == BattleMode.SPECIAL_EVENT:
                raise _Rejected("An event awaits on this floor.")
            raise _Rejected("The enemy still stands in your way.")

        player = state.player
        advance = call_collaborator(
            lambda: self.services.floors.advance(
                player.model_copy(deep=True), state.floor
            ),
            None,
            "advance",
            resolution.warnings,
            {"player": player.id},
            ErrorSeverity.HIGH,
        )
        if advance is None:
            raise _Rejected("Could not advance to the next floor.")

        state.floor = advance.floor
        player.floor = advance.floor.number
        state.rewards = None
        state.special_event = None
        player.is_defending = False
        player.potion_used_this_turn = False
        resolution.say(
            NarrationKind.SYSTEM,
            advance.message or f"You climb to floor {advance.floor.number}.",
        )
        resolution.message = advance.message
        if advance.enemy is not None:
            self._begin_encounter(state, advance.enemy, resolution)
        elif advance.event is not None:
            state.enemy = None
            state.special_event = advance.event
            state.mode = BattleMode.SPECIAL_EVENT
            state.phase = TurnPhase.TURN_COMPLETE
            resolution.say(NarrationKind.SYSTEM, f"You find: {advance.event.name}.")
        else:
            state.enemy = None
            state.mode = BattleMode.CLEARED
            state.phase = TurnPhase.TURN_COMPLETE
        return False

    def _interact(self, state: BattleState, resolution: _Resolution) -> bool:
        event = state.special_event
        if state.mode != BattleMode.SPECIAL_EVENT or event is None:
            raise _Rejected("There is nothing to interact with.")
        player = state.player
        outcome = call_collaborator(
            lambda: self.services.events.interact(player.model_copy(deep=True), event),
            None,
            "interact",
            resolution.warnings,
            {"player": player.id, "event": event.id},
        )
        if outcome is None:
            raise _Rejected("The event could not be resolved.")

        resolution.say(NarrationKind.SYSTEM, outcome.message or event.name)
        resolution.message = outcome.message
        if outcome.hp_change >= 0:
            player.heal(outcome.hp_change)
        else:
            player.take_damage(-outcome.hp_change)
        if outcome.mana_change >= 0:
            player.restore_mana(outcome.mana_change)
        else:
            player.spend_mana(-outcome.mana_change)
        state.special_event = None

        if not player.is_alive():
            resolution.events.extend(
                resolve_player_death(
                    state,
                    event.name,
                    f"Perished at {event.name}",
                    self.services,
                    resolution.warnings,
                )
            )
        elif outcome.enemy is not None:
            self._begin_encounter(state, outcome.enemy, resolution)
        else:
            state.mode = BattleMode.CLEARED
            state.phase = TurnPhase.TURN_COMPLETE
        return False

    def _begin_encounter(
        self, state: BattleState, enemy: Enemy, resolution: _Resolution
    ) -> None:
        state.encounter_id = new_encounter_id()
        state.enemy = enemy
        state.special_event = None
        state.rewards = None
        state.mode = BattleMode.ONGOING
        state.phase = TurnPhase.AWAITING_PLAYER_ACTION
        state.player.reset_spell_cooldowns()
        resolution.say(NarrationKind.ENEMY_ACTION, f"{enemy.name} appears!")

    # === Enemy actions ===

    def resolve_enemy_turn(
        self,
        state: BattleState,
        was_player_defending: bool,
        tick_effects: bool = True,
    ) -> EnemyTurnResult:
        """
        Executes one enemy turn.

        The enemy's effects tick first; an enemy killed by them takes no
        action. Damage that would kill the player routes to the death
        hand-off before any other consequence of the action is committed.

        Args:
            state (BattleState):
                The current state, left untouched.
            was_player_defending (bool):
                Whether the player defended on the preceding turn.
            tick_effects (bool):
                Whether to tick enemy effects and spell cooldowns. Extra
                turns granted by speed do not tick them again.

        Returns:
            EnemyTurnResult:
                The new state and what happened.

        Raises:
            InvalidPhaseError:
                If the state is not awaiting an enemy action.
            MissingEnemyError:
                If the state has no enemy.

        """
        if state.mode != BattleMode.ONGOING or (
            state.phase != TurnPhase.AWAITING_ENEMY_ACTION
        ):
            raise InvalidPhaseError(
                f"Enemy cannot act in mode {state.mode.value}, "
                f"phase {state.phase.value}."
            )
        if state.enemy is None:
            raise MissingEnemyError("Enemy turn requested without an enemy.")

        new_state = state.model_copy(deep=True)
        new_state.phase = TurnPhase.RESOLVING_ENEMY_ACTION
        player = new_state.player
        enemy = new_state.enemy
        assert enemy is not None
        resolution = _Resolution()

        if tick_effects:
            resolution.events.extend(tick(enemy))
            if not enemy.is_alive():
                resolution.say(
                    NarrationKind.EFFECT,
                    f"{enemy.name} succumbs to lingering effects!",
                )
                self._check_victory(new_state, resolution)
                return self._enemy_result(new_state, resolution)

        defending = was_player_defending or player.is_defending
        action = choose_enemy_action(enemy, self.rng, self.config)
        if action == EnemyActionType.ATTACK:
            survived = self._enemy_attack(new_state, enemy, defending, resolution)
        elif action == EnemyActionType.SPELL:
            survived = self._enemy_spell(new_state, enemy, defending, resolution)
        else:
            survived = self._enemy_special(new_state, enemy, defending, resolution)

        if survived:
            player.is_defending = False
            player.potion_used_this_turn = False
            if tick_effects:
                player.tick_spell_cooldowns()
            new_state.phase = TurnPhase.TURN_COMPLETE
        return self._enemy_result(new_state, resolution)

    def skip_enemy_turn(self, state: BattleState) -> EnemyTurnResult:
        """
        Ends the turn without an enemy action, for a player fast enough to
        act again before the enemy can react.

        The enemy's effects still tick, so they wear off once per cycle.
        """
        if state.phase != TurnPhase.AWAITING_ENEMY_ACTION:
            raise InvalidPhaseError(
                f"No enemy turn to skip in phase {state.phase.value}."
            )
        new_state = state.model_copy(deep=True)
        resolution = _Resolution()
        player = new_state.player
        enemy = new_state.enemy
        if enemy is not None:
            resolution.events.extend(tick(enemy))
            if not enemy.is_alive():
                resolution.say(
                    NarrationKind.EFFECT,
                    f"{enemy.name} succumbs to lingering effects!",
                )
                self._check_victory(new_state, resolution)
                return self._enemy_result(new_state, resolution)
        enemy_name = enemy.name if enemy else "The enemy"
        resolution.say(
            NarrationKind.SYSTEM,
            f"{player.name} moves again before {enemy_name} can react!",
        )
        player.is_defending = False
        player.potion_used_this_turn = False
        player.tick_spell_cooldowns()
        new_state.phase = TurnPhase.TURN_COMPLETE
        return self._enemy_result(new_state, resolution)

    def _enemy_result(
        self, state: BattleState, resolution: _Resolution
    ) -> EnemyTurnResult:
        state.narration = resolution.events
        return EnemyTurnResult(
            new_state=state,
            narration=resolution.events,
            skill_xp_gains=resolution.gains,
            level_ups=resolution.level_ups,
            warnings=resolution.warnings,
        )

    def _strike_player(
        self,
        state: BattleState,
        enemy: Enemy,
        damage: int,
        cause: str,
        resolution: _Resolution,
    ) -> bool:
        """Applies enemy damage to the player; False if the blow was lethal."""
        player = state.player
        if damage >= player.hp:
            resolution.events.extend(
                resolve_player_death(
                    state, enemy.name, cause, self.services, resolution.warnings
                )
            )
            return False
        player.take_damage(damage)
        return True

    def _defense_xp(
        self, state: BattleState, blocked: int, resolution: _Resolution
    ) -> None:
        player = state.player
        slots = self._equipment(player, resolution)
        self._grant_skill_xp(player, on_defend(slots.has_shield, blocked), resolution)

    def _enemy_attack(
        self,
        state: BattleState,
        enemy: Enemy,
        defending: bool,
        resolution: _Resolution,
    ) -> bool:
        player = state.player
        result = resolve_attack(
            enemy.effective(Attribute.ATTACK),
            player.effective(Attribute.DEFENSE),
            enemy.effective(Attribute.CRITICAL_CHANCE),
            enemy.effective(Attribute.CRITICAL_DAMAGE),
            enemy.effective(Attribute.DOUBLE_ATTACK_CHANCE),
            enemy.effective(Attribute.DEXTERITY),
            enemy.effective(Attribute.SPEED),
            self.rng,
            self.config,
        )
        raw = result.damage
        actual = mitigate_defended(raw, self.config) if defending else raw
        label = "attacks"
        if result.is_critical:
            label += " with a critical blow"
        if result.is_double_attack:
            label += " twice"
        if defending:
            resolution.say(
                NarrationKind.ENEMY_ACTION,
                f"{enemy.name} {label}, but your guard reduces {raw} damage "
                f"to {actual}!",
            )
        else:
            resolution.say(
                NarrationKind.ENEMY_ACTION,
                f"{enemy.name} {label} and deals {actual} damage!",
            )
        if not self._strike_player(
            state, enemy, actual, f"Slain by {enemy.name}'s attack", resolution
        ):
            return False
        blocked = raw - actual if defending else int(actual * 0.3)
        self._defense_xp(state, blocked, resolution)
        return True

    def _enemy_spell(
        self,
        state: BattleState,
        enemy: Enemy,
        defending: bool,
        resolution: _Resolution,
    ) -> bool:
        raw = enemy_spell_damage(enemy, self.config)
        actual = mitigate_defended(raw, self.config) if defending else raw
        if defending:
            resolution.say(
                NarrationKind.ENEMY_ACTION,
                f"{enemy.name} casts a spell, but your guard reduces {raw} "
                f"damage to {actual}!",
            )
        else:
            resolution.say(
                NarrationKind.ENEMY_ACTION,
                f"{enemy.name} casts a spell and deals {actual} magic damage!",
            )
        if not self._strike_player(
            state, enemy, actual, f"Slain by {enemy.name}'s spell", resolution
        ):
            return False
        enemy.mana = max(0, enemy.mana - self.config.enemy_spell_cost)
        if defending:
            self._defense_xp(state, int((raw - actual) * 0.5), resolution)
        return True

    def _enemy_special(
        self,
        state: BattleState,
        enemy: Enemy,
        defending: bool,
        resolution: _Resolution,
    ) -> bool:
        move = resolve_special_move(enemy, self.rng)
        if move.kind == AbilityKind.HEAL:
            healed = enemy.heal(move.heal)
            resolution.say(
                NarrationKind.ENEMY_ACTION,
                f"{enemy.name} uses {move.name} and recovers {healed} HP!",
            )
            return True

        raw = move.damage
        actual = mitigate_defended(raw, self.config) if defending else raw
        resolution.say(
            NarrationKind.ENEMY_ACTION,
            f"{enemy.name} uses {move.name} and deals {actual} damage!",
        )
        if not self._strike_player(
            state, enemy, actual, f"Slain by {enemy.name}'s {move.name}", resolution
        ):
            return False
        if actual > 0:
            blocked = raw - actual if defending else int(actual * 0.2)
            self._defense_xp(state, blocked, resolution)
        return True

    # === Turn completion ===

    def complete_turn(self, state: BattleState) -> EnemyTurnResult:
        """
        Closes a full turn cycle: the player's effects tick and, if the
        player survives, the next player turn begins.

        Args:
            state (BattleState):
                A state whose turn cycle is complete.

        Returns:
            EnemyTurnResult:
                The state awaiting the next player action, or the defeat.

        """
        if state.mode != BattleMode.ONGOING or state.phase != TurnPhase.TURN_COMPLETE:
            log_warning(
                "Turn completion requested out of phase",
                {
                    "encounter": state.encounter_id,
                    "mode": state.mode.value,
                    "phase": state.phase.value,
                },
            )
            return EnemyTurnResult(new_state=state)

        new_state = state.model_copy(deep=True)
        resolution = _Resolution()
        player = new_state.player
        resolution.events.extend(tick(player))
        if not player.is_alive():
            killer = new_state.enemy.name if new_state.enemy else "lingering effects"
            resolution.events.extend(
                resolve_player_death(
                    new_state,
                    killer,
                    "Succumbed to lingering effects",
                    self.services,
                    resolution.warnings,
                )
            )
        else:
            new_state.phase = TurnPhase.AWAITING_PLAYER_ACTION
        return self._enemy_result(new_state, resolution)
