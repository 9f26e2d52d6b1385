"""
User interface module for the tower combat engine.

This module provides the command-line interface of the climb, including
menus, prompts and battle display.
"""
