"""
Terminal hand-offs of an encounter: victory rewards and permadeath.

Both functions work in place on a state the caller already copied. They are
the only way an encounter enters VICTORY or DEFEAT.
"""

import math

from catchery import log_critical, log_debug

from tower_combat.combat.battle_state import BattleRewards, BattleState
from tower_combat.core.config import DEFAULT_CONFIG, CombatConfig
from tower_combat.core.constants import (
    BattleMode,
    FloorType,
    NarrationKind,
    TurnPhase,
)
from tower_combat.core.error_handling import (
    CollaboratorWarning,
    ErrorSeverity,
    MissingEnemyError,
    call_collaborator,
)
from tower_combat.core.narration import NarrationEvent, narrate
from tower_combat.services.interfaces import CombatServices


def resolve_victory(
    state: BattleState,
    services: CombatServices,
    warnings: list[CollaboratorWarning],
    config: CombatConfig = DEFAULT_CONFIG,
) -> list[NarrationEvent]:
    """
    Grants the rewards of a defeated enemy and ends the encounter.

    Runs at most once per encounter: a state that already holds rewards, or
    is already in VICTORY, is left untouched.

    Args:
        state (BattleState):
            The state to update in place.
        services (CombatServices):
            Collaborators persisting XP, gold and drops.
        warnings (list[CollaboratorWarning]):
            Receives collaborator failures.
        config (CombatConfig):
            Balance constants.

    Returns:
        list[NarrationEvent]:
            The victory narration, empty for a duplicate trigger.

    """
    if state.rewards is not None or state.mode == BattleMode.VICTORY:
        log_debug(
            "Ignoring duplicate victory",
            {"encounter": state.encounter_id},
        )
        return []
    enemy = state.enemy
    if enemy is None:
        raise MissingEnemyError("Victory requires the defeated enemy.")

    player = state.player
    floor_type = state.floor.floor_type if state.floor else FloorType.COMMON
    multiplier = config.floor_reward_multipliers.get(floor_type, 1.0)
    xp = math.floor(enemy.reward_xp * multiplier)
    gold = math.floor(enemy.reward_gold * multiplier)
    context = {"player": player.id, "enemy": enemy.id}
    events = [
        narrate(NarrationKind.SYSTEM, f"{enemy.name} has been defeated!"),
    ]

    grant = call_collaborator(
        lambda: services.characters.grant_xp(player.id, xp, f"combat:{enemy.id}"),
        None,
        "grant_xp",
        warnings,
        context,
    )
    call_collaborator(
        lambda: services.characters.grant_gold(player.id, gold, f"combat:{enemy.id}"),
        0,
        "grant_gold",
        warnings,
        context,
    )
    drop_multiplier = config.boss_drop_multiplier if floor_type == FloorType.BOSS else 1.0
    drops = call_collaborator(
        lambda: services.rewards.roll_drops(
            enemy.level, enemy.possible_drops, drop_multiplier
        ),
        [],
        "roll_drops",
        warnings,
        context,
        ErrorSeverity.LOW,
    )
    call_collaborator(
        lambda: services.characters.update_hp_mana(player.id, player.hp, player.mana),
        None,
        "update_hp_mana",
        warnings,
        context,
    )

    state.rewards = BattleRewards(
        xp=xp,
        gold=gold,
        drops=drops,
        leveled_up=grant.leveled_up if grant else False,
        new_level=grant.new_level if grant else None,
    )
    state.mode = BattleMode.VICTORY
    state.phase = TurnPhase.TURN_COMPLETE
    player.is_defending = False

    events.append(narrate(NarrationKind.REWARD, f"You gain {xp} XP and {gold} gold."))
    for drop in drops:
        events.append(
            narrate(NarrationKind.REWARD, f"Loot: {drop.drop_id} x{drop.quantity}.")
        )
    if grant and grant.leveled_up:
        events.append(
            narrate(NarrationKind.LEVEL_UP, f"You reached level {grant.new_level}!")
        )
    return events


def resolve_player_death(
    state: BattleState,
    killer: str,
    cause: str,
    services: CombatServices,
    warnings: list[CollaboratorWarning],
) -> list[NarrationEvent]:
    """
    Ends the encounter with the permanent death of the player.

    The state always ends in DEFEAT with HP at zero. The permadeath service
    is invoked once; its failure only changes the message.

    Args:
        state (BattleState):
            The state to update in place.
        killer (str):
            Name of whatever dealt the final blow.
        cause (str):
            Description of the death.
        services (CombatServices):
            Collaborators, the cemetery among them.
        warnings (list[CollaboratorWarning]):
            Receives the cemetery failure, if any.

    Returns:
        list[NarrationEvent]:
            The death narration, empty if the player was already dead.

    """
    player = state.player
    player.hp = 0
    player.is_defending = False
    if state.mode == BattleMode.DEFEAT:
        return []
    state.mode = BattleMode.DEFEAT
    state.phase = TurnPhase.TURN_COMPLETE

    deleted = call_collaborator(
        lambda: services.cemetery.kill_character(player.id, cause, killer),
        False,
        "kill_character",
        warnings,
        {"player": player.id, "killed_by": killer},
        ErrorSeverity.CRITICAL,
    )
    state.character_deleted = bool(deleted)
    events = [
        narrate(NarrationKind.DAMAGE, f"{player.name} was slain by {killer}."),
    ]
    if deleted:
        events.append(
            narrate(NarrationKind.SYSTEM, f"{player.name} rests in the cemetery.")
        )
    else:
        log_critical(
            "Permadeath was not recorded",
            {"player": player.id, "killed_by": killer},
        )
        events.append(
            narrate(
                NarrationKind.WARNING,
                "The fall was not recorded, but the character is lost.",
            )
        )
    return events
