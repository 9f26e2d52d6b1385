"""
Centralized error handling for the combat engine.

Expected branching (a defend on cooldown, a spell without mana) is never an
exception. Exceptions are reserved for conditions the caller cannot recover
from inside the encounter; collaborator failures are caught, logged and
turned into warnings attached to the result.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from catchery import log_warning
from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Enumeration of severity levels for collaborator warnings."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CombatError(Exception):
    """Base class for unrecoverable combat failures."""


class MissingEnemyError(CombatError):
    """Raised when an action needs an enemy and the state has none."""


class CorruptedEffectError(CombatError):
    """Raised when an active effect holds an impossible duration or value."""


class InvalidPhaseError(CombatError):
    """Raised when a resolution is requested in the wrong turn phase."""


class UnknownActionError(CombatError):
    """Raised when an action identifier does not name a known action."""


class CollaboratorWarning(BaseModel):
    """A non-fatal failure of an external collaborator."""

    operation: str = Field(
        description="Name of the collaborator operation that failed.",
    )
    message: str = Field(
        description="Human readable description of the failure.",
    )
    severity: ErrorSeverity = Field(
        ErrorSeverity.MEDIUM,
        description="How much the failure degrades the result.",
    )


def call_collaborator(
    operation: Callable[[], T],
    default: T,
    name: str,
    warnings: list[CollaboratorWarning],
    context: dict[str, Any] | None = None,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
) -> T:
    """
    Runs a collaborator call, degrading to a default on failure.

    Args:
        operation (Callable[[], T]):
            The blocking collaborator call.
        default (T):
            The value returned when the call raises.
        name (str):
            Operation name used in the log and the warning.
        warnings (list[CollaboratorWarning]):
            Receives a warning when the call fails.
        context (dict[str, Any] | None):
            Extra context for the log entry.
        severity (ErrorSeverity):
            Severity recorded on the warning.

    Returns:
        T:
            The collaborator result, or default on failure.

    """
    try:
        return operation()
    except Exception as e:
        message = f"{name} failed: {e}"
        log_warning(message, {"operation": name, **(context or {})})
        warnings.append(
            CollaboratorWarning(operation=name, message=message, severity=severity)
        )
        return default
