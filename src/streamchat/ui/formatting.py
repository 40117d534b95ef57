"""Text formatting utilities for the TUI.

Hides the details of how headers and status lines are rendered.
"""

from datetime import datetime

from rich.text import Text

from ..engine.resolver import mask_api_key
from .config import MESSAGE_TIMESTAMP_FORMAT

ROLE_LABELS = {
    "user": ("You", ">"),
    "assistant": ("Assistant", "<"),
}


def format_header(role: str, timestamp: datetime) -> str:
    """Header line for a chat message, e.g. ``> You [14:02]``."""
    label, icon = ROLE_LABELS.get(role, (role.capitalize(), "-"))
    return f"{icon} {label} [{timestamp.strftime(MESSAGE_TIMESTAMP_FORMAT)}]"


def format_content(content: str, streaming: bool = False) -> Text:
    """Message body as plain text; markup in model output is never parsed."""
    text = Text(content)
    if streaming:
        text.append(" ...", style="dim")
    return text


def format_key(api_key: str) -> str:
    """Sidebar value for the active API key."""
    return mask_api_key(api_key) if api_key else "not set"


def format_model(model: str) -> str:
    """Sidebar value for the selected model."""
    return model or "none"
