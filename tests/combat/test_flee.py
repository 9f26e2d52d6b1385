"""
Tests for escape attempts.
"""

import pytest

from tower_combat.combat.flee import attempt_flee, flee_chance


@pytest.mark.parametrize(
    "player_speed, enemy_speed, expected",
    [
        (10, 10, 70),
        (15, 10, 80),
        (10, 12, 66),
        (1000, 0, 95),
        (0, 1000, 15),
    ],
)
def test_flee_chance(player_speed, enemy_speed, expected):
    """
    Test the escape chance, clamped between 15% and 95%.
    """
    assert flee_chance(player_speed, enemy_speed) == expected


def test_successful_flee_takes_no_damage(scripted):
    """
    Test that a roll under the chance escapes unharmed.
    """
    outcome = attempt_flee(10, 10, 20, scripted([0.5]))
    assert outcome.success
    assert outcome.chance == 70
    assert outcome.damage_taken_on_failure == 0


def test_failed_flee_deals_thirty_percent_of_enemy_attack(scripted):
    """
    Test that a failed escape costs 30% of the enemy attack.
    """
    outcome = attempt_flee(10, 10, 25, scripted([0.7]))
    assert not outcome.success
    assert outcome.damage_taken_on_failure == 7
