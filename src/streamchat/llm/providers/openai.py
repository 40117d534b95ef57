from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from ..base import LLMProvider
from ..errors import RemoteRejection, TransportFailure
from ..models import CompletionRequest


def _rejection_from(exc: openai.APIStatusError) -> RemoteRejection:
    """Build a RemoteRejection carrying the endpoint's error body.

    The SDK unwraps the ``error`` object from the JSON body; it is wrapped
    again here so callers see the body as the endpoint sent it.
    """
    body = exc.body
    if isinstance(body, dict):
        error = body
    else:
        error = {"message": body if isinstance(body, str) and body else exc.message}
    return RemoteRejection(exc.status_code, {"error": error}, message=exc.message)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completion provider.

    Hidden design decisions:
    - OpenAI API client initialization
    - Raw streaming through ``with_streaming_response``
    - SDK exception translation
    - Authentication mechanism

    SDK retries are disabled: every call is exactly one round trip.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        organization: str | None = None,
        timeout: float | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (bearer credential)
            base_url: Optional custom API base URL
            organization: Optional organization ID
            timeout: Optional request timeout in seconds (SDK default if None)
            **client_kwargs: Additional kwargs for AsyncOpenAI client
                (e.g. ``http_client``)
        """
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            max_retries=0,
            **client_kwargs
        )

    @asynccontextmanager
    async def stream_chat(self, request: CompletionRequest) -> AsyncIterator[AsyncIterator[str]]:
        """Open a streamed chat completion and yield its decoded text chunks."""
        payload = request.to_payload()
        try:
            async with self._client.chat.completions.with_streaming_response.create(
                model=payload["model"],
                messages=payload["messages"],
                stream=payload["stream"],
            ) as response:
                yield self._iter_text(response)
        except openai.APIStatusError as exc:
            raise _rejection_from(exc) from exc
        except openai.APIConnectionError as exc:
            raise TransportFailure(f"Could not reach the completions endpoint: {exc}") from exc

    async def _iter_text(self, response: Any) -> AsyncIterator[str]:
        """Yield decoded text as the transport delivers it."""
        try:
            async for text in response.iter_text():
                yield text
        except httpx.HTTPError as exc:
            raise TransportFailure(f"Connection lost while streaming: {exc}") from exc

    async def list_models(self) -> list[str]:
        """List model identifiers visible to the configured API key."""
        try:
            page = await self._client.models.list()
        except openai.APIStatusError as exc:
            raise _rejection_from(exc) from exc
        except openai.APIConnectionError as exc:
            raise TransportFailure(f"Could not reach the models endpoint: {exc}") from exc
        return [model.id for model in page.data]

    async def close(self) -> None:
        """Close the OpenAI client.

        Note: Uses the OpenAI SDK's async context manager for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
