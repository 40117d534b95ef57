"""
Streamchat: a terminal client for hosted chat-completion APIs.

The streaming conversation engine sends the conversation to the remote
endpoint, parses the incrementally delivered response and keeps a
consistent transcript while the reply is still arriving.
"""

__version__ = "0.1.0"

from .config import ChatSettings, load_settings
from .engine import (
    ChatSession,
    ChatState,
    ErrorKind,
    Notice,
    SendOutcome,
    SendResult,
    SessionPhase,
)
from .llm import ChatMessage, CredentialInvalid, create_llm_provider

__all__ = [
    "ChatMessage",
    "ChatSession",
    "ChatSettings",
    "ChatState",
    "CredentialInvalid",
    "ErrorKind",
    "Notice",
    "SendOutcome",
    "SendResult",
    "SessionPhase",
    "create_llm_provider",
    "load_settings",
]
