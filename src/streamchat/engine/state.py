"""Explicit state container for a chat session.

Everything the engine mutates lives here: the credential slots, the model
catalog, the transcript and the request phase. Presentation code reads it
but only changes it through ``ChatSession`` and ``CredentialResolver``.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..conversation import Transcript


class SessionPhase(str, Enum):
    """Request lifecycle: idle -> sent -> streaming -> completed | failed."""

    IDLE = "idle"
    SENT = "sent"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CredentialSlots:
    """Active credential (authorizes requests) and draft being validated."""

    active: str = ""
    draft: str = ""


@dataclass
class ModelCatalog:
    """Filtered model identifiers for the active credential and the selection."""

    available: list[str] = field(default_factory=list)
    selected: str = ""

    def select(self, model: str) -> None:
        """Select a model from the catalog.

        Raises:
            ValueError: If the model is not in the catalog
        """
        if model not in self.available:
            raise ValueError(f"Unknown model: {model}. Available: {', '.join(self.available) or 'none'}")
        self.selected = model


@dataclass
class StreamState:
    """Ephemeral per-request streaming state."""

    text: str = ""
    deltas: int = 0
    malformed: int = 0
    terminated: bool = False


@dataclass
class ChatState:
    """Owned state of one conversation."""

    credentials: CredentialSlots = field(default_factory=CredentialSlots)
    catalog: ModelCatalog = field(default_factory=ModelCatalog)
    transcript: Transcript = field(default_factory=Transcript)
    phase: SessionPhase = SessionPhase.IDLE
