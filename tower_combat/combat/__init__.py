"""
Combat system module for the tower combat engine.

This module handles all combat mechanics including damage calculation, spell
scaling, fleeing, enemy AI, victory and death outcomes, and the turn-based
state machine driving each encounter.
"""
