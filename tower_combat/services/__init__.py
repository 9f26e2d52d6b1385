"""
Collaborator services for the tower combat engine.

This module declares the services the engine calls for persistence, rewards,
equipment, floors, inventory and events, plus in-memory implementations.
"""
