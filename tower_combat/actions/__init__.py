"""
Actions system module for the tower combat engine.

This module contains the spells players cast and the special abilities
enemies use.
"""

from .ability import EnemyAbility
from .spell import Spell

__all__ = ["EnemyAbility", "Spell"]
