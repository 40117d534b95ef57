from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")

    def with_content(self, content: str) -> "ChatMessage":
        """Return a copy of this message carrying different content."""
        return self.model_copy(update={"content": content})


class CompletionRequest(BaseModel):
    """Outbound chat completion request.

    The message list is replayed verbatim to the remote endpoint, so its
    order is the conversation order.
    """

    model_config = ConfigDict(frozen=True)

    model: str = Field(description="Remote model identifier")
    messages: tuple[ChatMessage, ...] = Field(description="Full conversation, system message first")
    stream: bool = Field(default=True, description="Request an incrementally delivered response")

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON body expected by the completions endpoint."""
        return {
            "model": self.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in self.messages],
            "stream": self.stream,
        }
