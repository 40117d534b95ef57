"""Error taxonomy for talking to the remote API.

Provider implementations translate SDK and transport exceptions into these
types at the boundary, so the engine never depends on a particular SDK.
"""

from typing import Any


class LLMError(Exception):
    """Base class for all remote API errors."""


class TransportFailure(LLMError):
    """The connection failed before or while the response was delivered.

    No partial body is guaranteed.
    """


class RemoteRejection(LLMError):
    """The endpoint answered with a non-success status and an error body."""

    def __init__(self, status_code: int, body: Any, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Remote endpoint rejected the request with status {status_code}")


class CredentialInvalid(LLMError):
    """A credential could not be validated against the model listing."""
