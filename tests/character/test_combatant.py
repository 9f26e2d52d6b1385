"""
Tests for the battle participants.
"""

import pytest

from tower_combat.character.combatant import Combatant
from tower_combat.core.constants import CharacterType


def test_combatant_is_abstract():
    """
    Test that only concrete participants can be built.
    """
    with pytest.raises(TypeError):
        Combatant(id="x", name="Nobody", hp=10, max_hp=10)


def test_participants_have_types(player, enemy):
    """
    Test that players and enemies report their own kind.
    """
    assert player.char_type == CharacterType.PLAYER
    assert enemy.char_type == CharacterType.ENEMY
    assert enemy.name in enemy.colored_name
