"""
Core system module for the tower combat engine.

This module contains the fundamental components shared by the engine,
including constants, balance configuration, error handling, narration and
display utilities.
"""

from .config import (
    DEFAULT_CONFIG,
    BehaviorChances,
    CombatConfig,
    load_config,
)
from .constants import (
    ActionType,
    Attribute,
    BattleMode,
    CharacterType,
    EnemyBehavior,
    FloorType,
    NarrationKind,
    SkillType,
    SpellEffectType,
    TurnPhase,
    WeaponCategory,
)
from .error_handling import (
    CollaboratorWarning,
    CombatError,
    CorruptedEffectError,
    ErrorSeverity,
    InvalidPhaseError,
    MissingEnemyError,
    UnknownActionError,
    call_collaborator,
)
from .narration import NarrationEvent, narrate
from .utils import (
    ccapture,
    clamp,
    cprint,
    crule,
    make_bar,
    roll_percent,
)

__all__ = [
    # Import from config.py
    "DEFAULT_CONFIG",
    "BehaviorChances",
    "CombatConfig",
    "load_config",
    # Import from constants.py
    "ActionType",
    "Attribute",
    "BattleMode",
    "CharacterType",
    "EnemyBehavior",
    "FloorType",
    "NarrationKind",
    "SkillType",
    "SpellEffectType",
    "TurnPhase",
    "WeaponCategory",
    # Import from error_handling.py
    "CollaboratorWarning",
    "CombatError",
    "CorruptedEffectError",
    "ErrorSeverity",
    "InvalidPhaseError",
    "MissingEnemyError",
    "UnknownActionError",
    "call_collaborator",
    # Import from narration.py
    "NarrationEvent",
    "narrate",
    # Import from utils.py
    "ccapture",
    "clamp",
    "cprint",
    "crule",
    "make_bar",
    "roll_percent",
]
