"""
Effects system module for the tower combat engine.

This module contains the timed effects a combatant can carry: damage and
healing over time, buffs, debuffs and attribute modifications.
"""

from .base_effect import (
    ActiveEffects,
    AttributeModification,
    AttributeModifier,
    TimedEffect,
)

__all__ = [
    "ActiveEffects",
    "AttributeModification",
    "AttributeModifier",
    "TimedEffect",
]
