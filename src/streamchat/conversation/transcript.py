"""Conversation transcript.

Hides how the ordered message list is stored and which mutations are legal.
Callers only ever see immutable snapshots (tuples of frozen messages), so a
published snapshot can never be changed by a later mutation.
"""

from collections.abc import Iterator, Sequence
from datetime import datetime

from ..llm.models import ChatMessage
from ..prompts import get_system_prompt


class TranscriptError(ValueError):
    """Raised when a transcript mutation would break its invariants."""


def make_system_message(now: datetime | None = None) -> ChatMessage:
    """Build a freshly dated system message."""
    return ChatMessage(role="system", content=get_system_prompt(now))


class Transcript:
    """Ordered conversation history with checkpointed turns.

    Invariants:
    - the first message is the only system message;
    - all other messages are append-only, except the content of the
      in-flight assistant reply, which only grows;
    - ``rollback`` restores the snapshot taken by ``begin_turn`` exactly.
    """

    def __init__(self, messages: Sequence[ChatMessage] | None = None) -> None:
        initial = tuple(messages) if messages else (make_system_message(),)
        self._check_shape(initial)
        self._messages: tuple[ChatMessage, ...] = initial
        self._checkpoint: tuple[ChatMessage, ...] | None = None
        self._reply_open = False

    @classmethod
    def create(cls, now: datetime | None = None) -> "Transcript":
        """Create a transcript holding a single system message."""
        return cls([make_system_message(now)])

    @staticmethod
    def _check_shape(messages: Sequence[ChatMessage]) -> None:
        if not messages or messages[0].role != "system":
            raise TranscriptError("Transcript must start with a system message")
        if any(msg.role == "system" for msg in messages[1:]):
            raise TranscriptError("Transcript may contain only one system message")

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        """Current snapshot."""
        return self._messages

    @property
    def in_turn(self) -> bool:
        """Whether a turn has begun and not yet finished or rolled back."""
        return self._checkpoint is not None

    @property
    def reply_open(self) -> bool:
        """Whether the last message is a growing assistant reply."""
        return self._reply_open

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self._messages)

    def history(self) -> tuple[ChatMessage, ...]:
        """All messages except the system message."""
        return self._messages[1:]

    def begin_turn(self, messages: Sequence[ChatMessage]) -> None:
        """Adopt the outbound message list of a new turn.

        The list must be the current history with a regenerated system
        message in front and exactly one new user message at the end.

        Raises:
            TranscriptError: If a turn is already open or the list does not
                extend the current history
        """
        if self.in_turn:
            raise TranscriptError("A turn is already in progress")
        adopted = tuple(messages)
        self._check_shape(adopted)
        if adopted[1:-1] != self.history() or adopted[-1].role != "user":
            raise TranscriptError("Turn must extend the current history with one user message")
        self._checkpoint = self._messages
        self._messages = adopted

    def start_reply(self) -> None:
        """Append an empty assistant message for the streamed reply."""
        if not self.in_turn or self._reply_open:
            raise TranscriptError("A reply can only start once inside an open turn")
        self._messages = (*self._messages, ChatMessage(role="assistant", content=""))
        self._reply_open = True

    def extend_reply(self, delta: str) -> None:
        """Append text to the in-flight assistant reply."""
        if not self._reply_open:
            raise TranscriptError("No assistant reply is in flight")
        reply = self._messages[-1]
        self._messages = (*self._messages[:-1], reply.with_content(reply.content + delta))

    def finish_turn(self) -> None:
        """Finalize the open turn; the reply becomes immutable."""
        if not self.in_turn:
            raise TranscriptError("No turn is in progress")
        self._checkpoint = None
        self._reply_open = False

    def rollback(self) -> None:
        """Restore the transcript to its state before ``begin_turn``."""
        if self._checkpoint is None:
            raise TranscriptError("No turn is in progress")
        self._messages = self._checkpoint
        self._checkpoint = None
        self._reply_open = False
