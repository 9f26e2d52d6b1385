"""
Items system module for the tower combat engine.

This module contains equipment definitions and the slot layout that decides
which mastery skills a fight trains.
"""
