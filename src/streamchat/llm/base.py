from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Any

from .models import CompletionRequest


class LLMProvider(ABC):
    """Abstract base class for chat completion providers.

    This module hides the design decision of how the remote API is reached.
    Implementations must handle provider-specific details like:
    - API client setup and authentication
    - Request serialization
    - Translating transport and status errors into ``streamchat.llm.errors``

    Record framing of the streamed body is deliberately not the provider's
    job: ``stream_chat`` hands out decoded text exactly as the transport
    delivers it.

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            models = await provider.list_models()
        # Automatically cleaned up
    """

    @abstractmethod
    def stream_chat(
        self,
        request: CompletionRequest,
    ) -> AbstractAsyncContextManager[AsyncIterator[str]]:
        """Open a streamed chat completion.

        Entering the context sends the request and waits for the response
        status. The yielded iterator produces decoded text chunks until the
        transport signals end-of-stream.

        Args:
            request: Completion request to send

        Returns:
            Async context manager yielding an async iterator of text chunks

        Raises:
            RemoteRejection: On entry, when the endpoint answers non-2xx
            TransportFailure: On entry or while iterating, when the
                connection fails
        """

    @abstractmethod
    async def list_models(self) -> list[str]:
        """List the model identifiers visible to this provider's credential.

        Raises:
            RemoteRejection: When the endpoint answers non-2xx
            TransportFailure: When the connection fails
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            # Suppress harmless cleanup errors from httpx/anyio
            if "Event loop is closed" not in str(e):
                raise
