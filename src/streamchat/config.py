"""Client configuration.

Centralizes the environment variables the application reads. The CLI loads
a ``.env`` file first (python-dotenv), then builds settings from the
environment; command-line options override individual fields.
"""

import os

from pydantic import BaseModel, Field

from .engine.resolver import DEFAULT_MODEL, DEFAULT_MODEL_PREFIX


class ChatSettings(BaseModel):
    """Settings for a chat client."""

    api_key: str | None = Field(default=None, description="Bearer credential; prompted for when missing")
    base_url: str | None = Field(default=None, description="Custom API base URL")
    model: str | None = Field(default=None, description="Preferred initial model, if available")
    model_prefix: str = Field(default=DEFAULT_MODEL_PREFIX, description="Model family filter")
    default_model: str = Field(default=DEFAULT_MODEL, description="Preferred default model")
    timeout: float | None = Field(default=None, gt=0, description="Request timeout in seconds")

    def provider_config(self) -> dict:
        """Keyword arguments for ``create_llm_provider`` (without the key)."""
        config: dict = {}
        if self.base_url:
            config["base_url"] = self.base_url
        if self.timeout is not None:
            config["timeout"] = self.timeout
        return config


def load_settings(**overrides) -> ChatSettings:
    """Create settings from environment variables.

    Args:
        **overrides: Field values taking precedence over the environment
            (``None`` values are ignored)

    Returns:
        ChatSettings instance

    Environment variables:
        OPENAI_API_KEY: API key
        OPENAI_BASE_URL: API base URL
        STREAMCHAT_MODEL: Preferred initial model
        STREAMCHAT_MODEL_PREFIX: Model family filter (default: gpt)
        STREAMCHAT_DEFAULT_MODEL: Preferred default model (default: gpt-3.5-turbo)
        STREAMCHAT_TIMEOUT: Request timeout in seconds (default: SDK default)
    """
    values = {
        "api_key": os.getenv("OPENAI_API_KEY") or None,
        "base_url": os.getenv("OPENAI_BASE_URL") or None,
        "model": os.getenv("STREAMCHAT_MODEL") or None,
        "model_prefix": os.getenv("STREAMCHAT_MODEL_PREFIX", DEFAULT_MODEL_PREFIX),
        "default_model": os.getenv("STREAMCHAT_DEFAULT_MODEL", DEFAULT_MODEL),
        "timeout": os.getenv("STREAMCHAT_TIMEOUT") or None,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ChatSettings(**values)
