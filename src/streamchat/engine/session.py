"""Streaming conversation engine.

Drives one request at a time through idle -> sent -> streaming ->
completed | failed, folding streamed deltas into the transcript and
publishing a full snapshot after every mutation.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..llm.base import LLMProvider
from ..llm.errors import RemoteRejection, TransportFailure
from ..llm.models import ChatMessage
from .classifier import ErrorClassification, classify_rejection, classify_transport_failure
from .events import EventStreamDecoder
from .request import build_completion_request
from .resolver import (
    DEFAULT_MODEL,
    DEFAULT_MODEL_PREFIX,
    CredentialResolver,
    ProviderFactory,
    ValidationResult,
)
from .state import ChatState, SessionPhase, StreamState

Snapshot = tuple[ChatMessage, ...]
TranscriptListener = Callable[[Snapshot], None]

INTERRUPTED_MESSAGE = "The connection was lost before the response finished; the reply may be incomplete."


class SendOutcome(str, Enum):
    """How a send attempt ended."""

    IGNORED = "ignored"
    COMPLETED = "completed"
    REJECTED = "rejected"
    TRANSPORT_FAILED = "transport_failed"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True)
class Notice:
    """User-facing notification produced by the engine."""

    message: str
    severity: str = "information"  # "information", "warning" or "error"


@dataclass(frozen=True)
class SendResult:
    """Result of ``ChatSession.send``."""

    outcome: SendOutcome
    classification: ErrorClassification | None = None
    stream: StreamState | None = None


class ChatSession:
    """Owns a conversation and talks to the remote endpoint.

    Hidden design decisions:
    - single-flight guard (sends while busy are ignored, never queued)
    - transcript checkpoint and rollback on failure
    - snapshot publication after each atomic mutation
    - which provider instance is bound to the active credential

    Usage:
        session = ChatSession(provider_factory)
        await session.submit_credential("sk-...")
        session.subscribe(render)
        result = await session.send("hello")
    """

    def __init__(
        self,
        provider_factory: ProviderFactory,
        state: ChatState | None = None,
        model_prefix: str = DEFAULT_MODEL_PREFIX,
        default_model: str = DEFAULT_MODEL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._state = state or ChatState()
        self._resolver = CredentialResolver(
            self._state,
            provider_factory,
            model_prefix=model_prefix,
            default_model=default_model,
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._provider: LLMProvider | None = None
        self._retired: list[LLMProvider] = []
        self._listeners: list[TranscriptListener] = []
        self._notice_callback: Callable[[Notice], None] | None = None
        self._debug_callback: Any = None

    @property
    def state(self) -> ChatState:
        """Session state (read-only by convention)."""
        return self._state

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def is_busy(self) -> bool:
        """Whether a request is outstanding."""
        return self._state.phase is not SessionPhase.IDLE

    @property
    def model(self) -> str:
        return self._state.catalog.selected

    @property
    def messages(self) -> Snapshot:
        return self._state.transcript.messages

    @property
    def has_credential(self) -> bool:
        return self._provider is not None

    def subscribe(self, listener: TranscriptListener) -> None:
        """Register a callable receiving every published transcript snapshot."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: TranscriptListener) -> None:
        self._listeners.remove(listener)

    def set_notice_callback(self, callback: Callable[[Notice], None]) -> None:
        """Set the callable receiving user-facing notifications."""
        self._notice_callback = callback

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed execution logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
                      component: Source component name
                      message: Log message
        """
        self._debug_callback = callback
        self._resolver.set_debug_callback(callback)

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback is not None:
            self._debug_callback(level, "Session", message)

    def _publish(self) -> None:
        snapshot = self._state.transcript.messages
        for listener in list(self._listeners):
            listener(snapshot)

    def _notify(self, message: str, severity: str) -> None:
        if self._notice_callback is not None:
            self._notice_callback(Notice(message=message, severity=severity))

    def _set_phase(self, phase: SessionPhase) -> None:
        self._debug("debug", f"Phase {self._state.phase.value} -> {phase.value}")
        self._state.phase = phase

    async def submit_credential(self, draft: str) -> ValidationResult:
        """Validate a draft API key and make it active on success.

        Raises:
            CredentialInvalid: If validation fails; the previous credential,
                provider and catalog stay in place
            RuntimeError: If a request is outstanding
        """
        if self.is_busy:
            raise RuntimeError("A request is in flight; wait for it to finish before changing the API key")
        result = await self._resolver.validate(draft)
        previous, self._provider = self._provider, result.provider
        if previous is None:
            return result
        if self.is_busy:
            # A send started during validation and still streams from it
            self._debug("debug", "Previous provider retired until the request finishes")
            self._retired.append(previous)
        else:
            await previous.close()
        return result

    async def _close_retired(self) -> None:
        while self._retired:
            await self._retired.pop().close()

    def select_model(self, model: str) -> None:
        """Select a model from the active credential's catalog.

        Raises:
            ValueError: If the model is not in the catalog
        """
        self._state.catalog.select(model)
        self._debug("info", f"Model selected: {model}")

    async def send(self, text: str) -> SendResult:
        """Send a user message and stream the reply into the transcript.

        Returns immediately with ``SendOutcome.IGNORED`` while another
        request is outstanding.

        Raises:
            RuntimeError: If no credential has been validated yet
        """
        if self.is_busy:
            self._debug("debug", "Send ignored: a request is already in flight")
            return SendResult(SendOutcome.IGNORED)
        if self._provider is None:
            raise RuntimeError("No active API key; submit a credential first")

        transcript = self._state.transcript
        request = build_completion_request(self.model, transcript.messages, text, now=self._clock())
        self._set_phase(SessionPhase.SENT)
        transcript.begin_turn(request.messages)
        self._publish()
        self._debug("info", f"Request sent: model={request.model} messages={len(request.messages)}")

        stream = StreamState()
        decoder = EventStreamDecoder()
        try:
            async with self._provider.stream_chat(request) as chunks:
                self._set_phase(SessionPhase.STREAMING)
                transcript.start_reply()
                self._publish()

                async for chunk in chunks:
                    self._apply(stream, decoder.feed(chunk))
                self._apply(stream, decoder.flush())

        except RemoteRejection as exc:
            classification = classify_rejection(exc.status_code, exc.body)
            return self._fail(SendOutcome.REJECTED, classification)

        except TransportFailure as exc:
            if self._state.phase is SessionPhase.STREAMING:
                return self._interrupt(stream, decoder, exc)
            return self._fail(SendOutcome.TRANSPORT_FAILED, classify_transport_failure(exc))

        except asyncio.CancelledError:
            self._abandon_turn()
            raise

        except Exception as exc:
            self._debug("error", f"Unexpected error during request: {exc}")
            self._abandon_turn()
            raise

        finally:
            await self._close_retired()

        self._settle(stream, decoder)
        transcript.finish_turn()
        self._set_phase(SessionPhase.COMPLETED)
        if stream.malformed:
            self._debug("warning", f"Skipped {stream.malformed} malformed record(s)")
        self._debug("info", f"Response complete: {stream.deltas} deltas, {len(stream.text)} chars")
        self._set_phase(SessionPhase.IDLE)
        return SendResult(SendOutcome.COMPLETED, stream=stream)

    def _apply(self, stream: StreamState, deltas: list[str]) -> None:
        for delta in deltas:
            stream.text += delta
            stream.deltas += 1
            self._state.transcript.extend_reply(delta)
            self._publish()

    def _fail(self, outcome: SendOutcome, classification: ErrorClassification) -> SendResult:
        self._set_phase(SessionPhase.FAILED)
        self._debug("error", f"Request failed ({classification.kind.value}): {classification.message}")
        self._state.transcript.rollback()
        self._publish()
        self._notify(classification.message, "error")
        self._set_phase(SessionPhase.IDLE)
        return SendResult(outcome, classification=classification)

    @staticmethod
    def _settle(stream: StreamState, decoder: EventStreamDecoder) -> None:
        stream.malformed = decoder.malformed
        stream.terminated = decoder.terminated

    def _abandon_turn(self) -> None:
        """Close out a turn ended by an exception the engine does not handle.

        Streamed content stays; a turn with no reply yet is rolled back.
        """
        transcript = self._state.transcript
        if transcript.reply_open:
            transcript.finish_turn()
        elif transcript.in_turn:
            transcript.rollback()
        self._publish()
        self._set_phase(SessionPhase.IDLE)

    def _interrupt(self, stream: StreamState, decoder: EventStreamDecoder, exc: TransportFailure) -> SendResult:
        self._settle(stream, decoder)
        self._debug("warning", f"Stream interrupted after {stream.deltas} deltas: {exc}")
        self._state.transcript.finish_turn()
        self._set_phase(SessionPhase.FAILED)
        self._notify(INTERRUPTED_MESSAGE, "warning")
        self._set_phase(SessionPhase.IDLE)
        return SendResult(SendOutcome.INTERRUPTED, stream=stream)

    async def close(self) -> None:
        """Close the active provider."""
        await self._close_retired()
        if self._provider is not None:
            await self._provider.close()
            self._provider = None

    async def __aenter__(self) -> "ChatSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
