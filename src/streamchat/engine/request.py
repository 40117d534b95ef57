from collections.abc import Sequence
from datetime import datetime

from ..conversation import make_system_message
from ..llm.models import ChatMessage, CompletionRequest


def build_completion_request(
    model: str,
    messages: Sequence[ChatMessage],
    user_text: str,
    now: datetime | None = None,
) -> CompletionRequest:
    """Assemble the outbound request for a new user turn.

    The system message is regenerated for every request because it embeds
    the current UTC date. ``user_text`` is not validated; an empty string is
    sent as is.

    Args:
        model: Target model identifier
        messages: Current transcript (its system message is replaced)
        user_text: Text of the new user message
        now: Moment used to date the system message (defaults to now)

    Returns:
        CompletionRequest with streaming enabled
    """
    history = [msg for msg in messages if msg.role != "system"]
    return CompletionRequest(
        model=model,
        messages=(
            make_system_message(now),
            *history,
            ChatMessage(role="user", content=user_text),
        ),
        stream=True,
    )
