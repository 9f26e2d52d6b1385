"""
Character module for the tower combat engine.

This module defines the player and enemy combatants and the mastery skills a
player raises by fighting.
"""
