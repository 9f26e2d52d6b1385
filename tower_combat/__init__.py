"""
Tower combat package.

This package contains the combat resolution engine of the tower climb,
including combatants, damage and spell formulas, timed effects, enemy AI,
the turn state machine, collaborator interfaces and a console front end.
"""
