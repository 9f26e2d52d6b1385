"""
Tests for the combat manager: encounter lifecycle, full turn cycles and
extra turns granted by speed.
"""

import random

import pytest

from tower_combat.combat.combat_manager import CombatManager
from tower_combat.core.constants import (
    ActionType,
    BattleMode,
    EnemyBehavior,
    TurnPhase,
)
from tower_combat.core.error_handling import CombatError
from tower_combat.effects.base_effect import TimedEffect


@pytest.fixture
def manager(services, rng):
    return CombatManager(services, rng)


def test_state_requires_encounter(manager):
    """
    Test that reading the state before any encounter is an error.
    """
    with pytest.raises(CombatError):
        manager.state


def test_start_encounter(manager, player, enemy):
    """
    Test that a new encounter waits for the player's first action.
    """
    state = manager.start_encounter(player, enemy)
    assert state.mode == BattleMode.ONGOING
    assert state.phase == TurnPhase.AWAITING_PLAYER_ACTION
    assert state.is_player_turn
    assert manager.state is state


def test_start_without_enemy_is_cleared(manager, player):
    """
    Test that an encounter without an enemy starts cleared.
    """
    assert manager.start_encounter(player, None).mode == BattleMode.CLEARED


@pytest.mark.parametrize(
    "faster, slower, expected",
    [
        (40, 10, 3),
        (25, 10, 2),
        (18, 10, 1),
        (15, 10, 0),
        (10, 0, 2),
    ],
)
def test_calculate_extra_turns(manager, faster, slower, expected):
    """
    Test the extra turns earned by each speed ratio.
    """
    assert manager.calculate_extra_turns(faster, slower) == expected


def test_extra_turn_bonus_roll(manager, rng):
    """
    Test the 20% chance of one more extra turn, never beyond three.
    """
    rng.values = [0.1]
    assert manager.calculate_extra_turns(10, 10) == 1
    rng.values = [0.1]
    assert manager.calculate_extra_turns(40, 10) == 3
    assert rng.values == [0.1]


def test_full_cycle(manager, player, enemy):
    """
    Test that an attack is answered by the enemy and control returns to the player.
    """
    manager.start_encounter(player, enemy)
    cycle = manager.submit_player_action(ActionType.ATTACK)
    assert cycle.turn_consumed
    assert cycle.enemy_actions == 1
    assert cycle.state.enemy.hp == 60
    assert cycle.state.player.hp == 85
    assert cycle.state.phase == TurnPhase.AWAITING_PLAYER_ACTION
    assert manager.state is cycle.state


def test_defend_cycle(manager, player, enemy):
    """
    Test that the defensive stance covers the enemy reply and then drops.
    """
    manager.start_encounter(player, enemy)
    cycle = manager.submit_player_action(ActionType.DEFEND)
    assert cycle.state.player.hp == 98
    assert not cycle.state.player.is_defending
    assert cycle.state.player.defense_cooldown == 2


def test_consumable_gets_no_reply(manager, player_factory, enemy):
    """
    Test that using an item does not give the enemy a turn.
    """
    manager.start_encounter(player_factory(hp=50), enemy)
    cycle = manager.submit_player_action(
        ActionType.CONSUMABLE, consumable_id="health_potion"
    )
    assert not cycle.turn_consumed
    assert cycle.enemy_actions == 0
    assert cycle.state.player.hp == 90
    assert cycle.state.is_player_turn


def test_faster_enemy_acts_repeatedly(manager, player, enemy_factory):
    """
    Test that an enemy four times faster acts four times in one cycle.
    """
    manager.start_encounter(player, enemy_factory(speed=40))
    cycle = manager.submit_player_action(ActionType.ATTACK)
    assert cycle.enemy_actions == 4
    assert cycle.state.player.hp == 40


def test_faster_player_skips_enemy_replies(manager, player_factory, enemy):
    """
    Test that a much faster player banks turns the enemy cannot answer.
    """
    manager.start_encounter(player_factory(speed=40), enemy)
    first = manager.submit_player_action(ActionType.ATTACK)
    assert first.enemy_actions == 1
    assert first.state.player.hp == 85

    second = manager.submit_player_action(ActionType.ATTACK)
    assert second.enemy_actions == 0
    assert second.state.player.hp == 85
    assert second.state.enemy.hp == 20
    assert second.state.is_player_turn


def test_victory_gets_no_reply(manager, player_factory, enemy_factory):
    """
    Test that a killing blow ends the cycle without an enemy action.
    """
    manager.start_encounter(player_factory(attack=15), enemy_factory(hp=10, defense=0))
    cycle = manager.submit_player_action(ActionType.ATTACK)
    assert cycle.state.mode == BattleMode.VICTORY
    assert cycle.enemy_actions == 0


def test_death_ends_cycle(manager, cemetery, player_factory, enemy_factory):
    """
    Test that a lethal reply ends the encounter in defeat.
    """
    manager.start_encounter(player_factory(hp=5), enemy_factory(attack=25))
    cycle = manager.submit_player_action(ActionType.ATTACK)
    assert cycle.state.mode == BattleMode.DEFEAT
    assert cycle.state.player.hp == 0
    assert len(cemetery.calls) == 1


def test_submissions_hold_the_lock(manager, player, enemy):
    """
    Test that resolutions run while the encounter lock is held.
    """
    manager.start_encounter(player, enemy)
    original = manager.resolver.submit_player_action
    held = []

    def spy(*args, **kwargs):
        held.append(manager._lock.locked())
        return original(*args, **kwargs)

    manager.resolver.submit_player_action = spy
    manager.submit_player_action(ActionType.ATTACK)
    assert held == [True]
    assert not manager._lock.locked()


def test_enemy_effects_tick_on_skipped_replies(manager, player_factory, enemy):
    """
    Test that enemy effects keep wearing off while a faster player skips replies.
    """
    enemy.active_effects.dots.append(
        TimedEffect(magnitude=1, duration=2, source_spell="Poison")
    )
    manager.start_encounter(player_factory(speed=40), enemy)
    first = manager.submit_player_action(ActionType.ATTACK)
    assert first.state.enemy.active_effects.dots[0].duration == 1
    assert first.state.enemy.hp == 59

    second = manager.submit_player_action(ActionType.ATTACK)
    assert second.enemy_actions == 0
    assert second.state.enemy.active_effects.dots == []
    assert second.state.enemy.hp == 18


def test_effects_can_finish_enemy_on_skipped_reply(manager, player_factory, enemy):
    """
    Test that lingering damage on a skipped reply still ends in victory.
    """
    enemy.active_effects.dots.append(
        TimedEffect(magnitude=10, duration=3, source_spell="Poison")
    )
    manager.start_encounter(player_factory(speed=40), enemy)
    first = manager.submit_player_action(ActionType.ATTACK)
    assert first.state.enemy.hp == 50

    second = manager.submit_player_action(ActionType.ATTACK)
    assert second.enemy_actions == 0
    assert second.state.enemy.hp == 0
    assert second.state.mode == BattleMode.VICTORY
    assert second.state.rewards is not None


FUZZED_ACTIONS = [
    (ActionType.ATTACK, None, None),
    (ActionType.DEFEND, None, None),
    (ActionType.SPELL, "fireball", None),
    (ActionType.CONSUMABLE, None, "health_potion"),
    (ActionType.CONSUMABLE, None, "mana_potion"),
    (ActionType.FLEE, None, None),
    (ActionType.SPECIAL, None, None),
]


@pytest.mark.parametrize("seed", range(25))
def test_random_action_sequences_keep_vitals_in_bounds(
    services, fireball, player_factory, enemy_factory, seed
):
    """
    Test that random action sequences keep HP and mana within bounds and end
    the fight exactly when a side reaches 0 HP.
    """
    fuzz = random.Random(seed)
    manager = CombatManager(services, random.Random(seed))
    player = player_factory(speed=fuzz.randint(5, 40), spells=[fireball])
    enemy = enemy_factory(
        attack=fuzz.randint(10, 60),
        speed=fuzz.randint(5, 40),
        mana=fuzz.randint(0, 30),
        behavior=fuzz.choice(list(EnemyBehavior)),
    )
    manager.start_encounter(player, enemy)

    for _ in range(60):
        action, spell_id, consumable_id = fuzz.choice(FUZZED_ACTIONS)
        state = manager.submit_player_action(action, spell_id, consumable_id).state
        player, enemy = state.player, state.enemy
        assert 0 <= player.hp <= player.max_hp
        assert 0 <= player.mana <= player.max_mana
        assert 0 <= enemy.hp <= enemy.max_hp
        assert enemy.mana >= 0
        if player.hp == 0:
            assert state.mode == BattleMode.DEFEAT
        if enemy.hp == 0:
            assert state.mode == BattleMode.VICTORY
        if state.mode != BattleMode.ONGOING:
            break
        assert state.is_player_turn
