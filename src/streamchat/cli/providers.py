"""Session factory functions for CLI.

Centralizes creation of chat sessions from settings.
Hides provider configuration details from command implementations.
"""

from typing import Any

from rich.console import Console
from rich.text import Text

from ..config import ChatSettings
from ..engine import ChatSession
from ..engine.resolver import mask_api_key
from ..llm import CredentialInvalid, create_llm_provider

# Default console for output
_console = Console()


def create_session(settings: ChatSettings, **client_kwargs: Any) -> ChatSession:
    """Create a chat session whose providers follow the given settings.

    Args:
        settings: Client settings
        **client_kwargs: Extra provider kwargs (e.g. ``http_client``)

    Returns:
        ChatSession without an active credential
    """
    provider_config = {**settings.provider_config(), **client_kwargs}

    def provider_factory(api_key: str):
        return create_llm_provider("openai", api_key=api_key, **provider_config)

    return ChatSession(
        provider_factory,
        model_prefix=settings.model_prefix,
        default_model=settings.default_model,
    )


async def activate(session: ChatSession, settings: ChatSettings, console: Console | None = None) -> bool:
    """Validate the configured API key and apply the preferred model.

    Args:
        session: Session to activate
        settings: Settings holding the key and the preferred model
        console: Optional Rich console for output

    Returns:
        True if the session now has an active credential
    """
    con = console or _console
    if not settings.api_key:
        return False

    try:
        result = await session.submit_credential(settings.api_key)
    except CredentialInvalid as e:
        con.print(f"[red]Error: {e}[/red]")
        return False

    if settings.model:
        if settings.model in result.models:
            session.select_model(settings.model)
        else:
            con.print(
                f"[yellow]Warning: model '{settings.model}' not available for key "
                f"{mask_api_key(settings.api_key)}, using '{session.model or '-'}'[/yellow]"
            )
    return True


def debug_printer(console: Console | None = None, min_level: str = "debug") -> Any:
    """Build a debug callback that prints entries at or above ``min_level``."""
    order = ["debug", "info", "warning", "error"]
    threshold = order.index(min_level.lower()) if min_level.lower() in order else 0
    con = console or _console

    def _print(level: str, component: str, message: str) -> None:
        if order.index(level) >= threshold:
            con.print(Text(f"{level.upper():<7} [{component}] {message}", style="dim"))

    return _print
