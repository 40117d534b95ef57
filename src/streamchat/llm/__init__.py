from .base import LLMProvider
from .errors import CredentialInvalid, LLMError, RemoteRejection, TransportFailure
from .factory import create_llm_provider
from .models import ChatMessage, CompletionRequest
from .providers import OpenAIProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "CompletionRequest",
    "CredentialInvalid",
    "LLMError",
    "RemoteRejection",
    "TransportFailure",
    "OpenAIProvider",
]
