"""
Narration lines produced while resolving a turn.
"""

from pydantic import BaseModel, Field

from .constants import NarrationKind


class NarrationEvent(BaseModel):
    """One human readable line describing what happened."""

    kind: NarrationKind = Field(
        description="Category of the line, used for coloring.",
    )
    text: str = Field(
        description="The line itself.",
    )

    @property
    def colored_text(self) -> str:
        """Returns the line with rich markup for its kind."""
        return f"{self.kind.emoji} " + self.kind.colorize(self.text)

    def __str__(self) -> str:
        return self.text


def narrate(kind: NarrationKind, text: str) -> NarrationEvent:
    """Shorthand constructor for a narration line."""
    return NarrationEvent(kind=kind, text=text)
