"""Classification of failed requests into user-facing categories.

Pure functions: no transcript or UI side effects. The caller decides what to
roll back and how to present the message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

CONTEXT_LENGTH_EXCEEDED_CODE = "context_length_exceeded"
RATE_LIMIT_STATUS = 429

CONTEXT_LENGTH_MESSAGE = (
    "The conversation has grown too long for the model. "
    "Start a new conversation or shorten your messages."
)
RATE_LIMIT_MESSAGE = (
    "The API request limit was exceeded.\n"
    "Check that billing information is registered on your OpenAI account."
)


class ErrorKind(str, Enum):
    """Category of a failed request."""

    CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"
    RATE_LIMITED = "rate_limited"
    GENERIC = "generic"


@dataclass(frozen=True)
class ErrorClassification:
    """Result of classifying a failed request."""

    kind: ErrorKind
    message: str
    status_code: int | None = None


def _error_object(body: Any) -> dict[str, Any]:
    """Return the ``error`` object of a body, tolerating an unwrapped one."""
    if not isinstance(body, dict):
        return {}
    error = body.get("error", body)
    return error if isinstance(error, dict) else {}


def classify_rejection(status_code: int, body: Any) -> ErrorClassification:
    """Classify a non-success response.

    Precedence:
        1. ``error.code == "context_length_exceeded"`` in the body.
        2. HTTP 429.
        3. Anything else, with the remote message passed through verbatim.

    Args:
        status_code: HTTP status of the response
        body: Parsed JSON body (``{"error": {...}}`` or the error object)

    Returns:
        ErrorClassification with a user-facing message
    """
    error = _error_object(body)
    if error.get("code") == CONTEXT_LENGTH_EXCEEDED_CODE:
        return ErrorClassification(ErrorKind.CONTEXT_LENGTH_EXCEEDED, CONTEXT_LENGTH_MESSAGE, status_code)
    if status_code == RATE_LIMIT_STATUS:
        return ErrorClassification(ErrorKind.RATE_LIMITED, RATE_LIMIT_MESSAGE, status_code)

    message = error.get("message")
    if not isinstance(message, str) or not message:
        message = f"Request failed with status {status_code}"
    return ErrorClassification(ErrorKind.GENERIC, message, status_code)


def classify_transport_failure(exc: Exception) -> ErrorClassification:
    """Classify a connection failure that happened before any response."""
    return ErrorClassification(ErrorKind.GENERIC, f"Could not connect to the API: {exc}")
