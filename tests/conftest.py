"""Pytest configuration and shared fixtures."""
import asyncio
import json
import os
from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio

from streamchat.engine import ChatSession
from streamchat.llm.providers import OpenAIProvider

VALID_KEY = "sk-test-valid-0000abcd"
DEFAULT_MODELS = ["gpt-4", "gpt-3.5-turbo", "text-davinci-003"]


def delta_record(content: str) -> dict:
    """Build one streamed completion record carrying a content delta."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion.chunk",
        "choices": [{"index": 0, "delta": {"content": content}, "finish_reason": None}],
    }


def sse_body(deltas: list[str], done: bool = True) -> str:
    """Serialize deltas the way the completions endpoint streams them."""
    body = "".join(f"data: {json.dumps(delta_record(delta), ensure_ascii=False)}\n\n" for delta in deltas)
    if done:
        body += "data: [DONE]\n\n"
    return body


def split_every(data: bytes, size: int) -> list[bytes]:
    """Cut a body into transport chunks of ``size`` bytes."""
    return [data[i:i + size] for i in range(0, len(data), size)]


class MockChatAPI:
    """Simulated chat-completion endpoint served through httpx.MockTransport.

    Records every request. Behaviour is set through attributes:
    ``chunks`` (streamed body), ``status``/``error_body`` (rejection),
    ``connect_error`` (fail before any response), ``drop_after`` (raise
    ``drop_with``, a read error by default, after that many chunks),
    ``pause_after`` (stop after that many chunks until ``resume`` is set),
    ``gate`` (hold the chat response until the event is set) and ``models_gate``
    (the same for the model listing). Every HTTP client it hands out is kept
    in ``clients``.
    """

    def __init__(self) -> None:
        self.models = list(DEFAULT_MODELS)
        self.valid_keys = {VALID_KEY}
        self.chunks: list[bytes] = [sse_body(["Hi", " there", "!"]).encode()]
        self.status = 200
        self.error_body: dict | None = None
        self.connect_error = False
        self.drop_after: int | None = None
        self.drop_with: type[Exception] = httpx.ReadError
        self.pause_after: int | None = None
        self.resume = asyncio.Event()
        self.gate: asyncio.Event | None = None
        self.models_gate: asyncio.Event | None = None
        self.requests: list[httpx.Request] = []
        self.clients: list[httpx.AsyncClient] = []

    @property
    def chat_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/chat/completions")]

    def chat_payload(self, index: int = -1) -> dict:
        return json.loads(self.chat_requests[index].content)

    def stream(self, deltas: list[str], chunk_size: int | None = None, done: bool = True) -> None:
        body = sse_body(deltas, done=done).encode()
        self.chunks = split_every(body, chunk_size) if chunk_size else [body]

    def reject(self, status: int, message: str = "Request failed", code: str | None = None) -> None:
        self.status = status
        self.error_body = {"error": {"message": message, "type": "invalid_request_error", "code": code}}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.connect_error:
            raise httpx.ConnectError("Connection refused", request=request)

        key = request.headers.get("authorization", "").removeprefix("Bearer ")
        if key not in self.valid_keys:
            return httpx.Response(
                401,
                json={"error": {"message": "Incorrect API key provided", "code": "invalid_api_key"}},
            )

        if request.url.path.endswith("/models"):
            if self.models_gate is not None:
                await self.models_gate.wait()
            return httpx.Response(
                200,
                json={
                    "object": "list",
                    "data": [
                        {"id": model_id, "object": "model", "created": 0, "owned_by": "openai"}
                        for model_id in self.models
                    ],
                },
            )

        if self.gate is not None:
            await self.gate.wait()
        if self.status != 200:
            return httpx.Response(self.status, json=self.error_body)
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=self._body(),
        )

    async def _body(self):
        for index, chunk in enumerate(self.chunks):
            if self.drop_after is not None and index >= self.drop_after:
                raise self.drop_with("Connection reset by peer")
            if index == self.pause_after:
                await self.resume.wait()
            yield chunk
            await asyncio.sleep(0)

    def provider(self, api_key: str = VALID_KEY) -> OpenAIProvider:
        """Provider factory: a fresh client per key, all routed to this mock."""
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        self.clients.append(http_client)
        return OpenAIProvider(api_key=api_key, http_client=http_client)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "OPENAI_ORG_ID",
        "STREAMCHAT_MODEL",
        "STREAMCHAT_MODEL_PREFIX",
        "STREAMCHAT_DEFAULT_MODEL",
        "STREAMCHAT_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys for integration tests (captured before env cleanup)."""
    return {"openai": os.getenv("OPENAI_API_KEY")}


@pytest.fixture
def fixed_now():
    """A fixed UTC moment."""
    return datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def api():
    """Simulated remote endpoint."""
    return MockChatAPI()


@pytest_asyncio.fixture
async def session(api, fixed_now):
    """A session with a validated credential against the mock endpoint."""
    chat_session = ChatSession(api.provider, clock=lambda: fixed_now)
    await chat_session.submit_credential(VALID_KEY)
    yield chat_session
    await chat_session.close()


@pytest.fixture
def published(session):
    """Every snapshot the session publishes, in order."""
    snapshots = []
    session.subscribe(snapshots.append)
    return snapshots
