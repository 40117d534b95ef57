from .classifier import ErrorClassification, ErrorKind, classify_rejection, classify_transport_failure
from .events import EventStreamDecoder, extract_delta
from .request import build_completion_request
from .resolver import (
    CredentialResolver,
    ValidationResult,
    filter_models,
    mask_api_key,
    select_default_model,
)
from .session import ChatSession, Notice, SendOutcome, SendResult
from .state import ChatState, CredentialSlots, ModelCatalog, SessionPhase, StreamState

__all__ = [
    "ChatSession",
    "ChatState",
    "CredentialResolver",
    "CredentialSlots",
    "ErrorClassification",
    "ErrorKind",
    "EventStreamDecoder",
    "ModelCatalog",
    "Notice",
    "SendOutcome",
    "SendResult",
    "SessionPhase",
    "StreamState",
    "ValidationResult",
    "build_completion_request",
    "classify_rejection",
    "classify_transport_failure",
    "extract_delta",
    "filter_models",
    "mask_api_key",
    "select_default_model",
]
