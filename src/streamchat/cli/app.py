"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..config import load_settings
from ..engine import SendOutcome
from ..engine.resolver import mask_api_key
from ..llm.models import ChatMessage
from .providers import activate, create_session, debug_printer

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="streamchat",
    help="Converse with a hosted chat-completion API from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

API_KEY_OPTION = typer.Option(
    None,
    "--api-key",
    "-k",
    help="API key (default: OPENAI_API_KEY)"
)
MODEL_OPTION = typer.Option(
    None,
    "--model",
    "-m",
    help="Model to use if available (default: STREAMCHAT_MODEL or gpt-3.5-turbo)"
)
BASE_URL_OPTION = typer.Option(
    None,
    "--base-url",
    help="API base URL (default: OPENAI_BASE_URL)"
)
LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    "-l",
    help="Show engine log with level: debug (all), info, warning, or error"
)


class _ReplyPrinter:
    """Print the streamed assistant reply as snapshots arrive."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._printed = 0
        self._turn_length = 0

    def reset(self, turn_length: int) -> None:
        self._printed = 0
        self._turn_length = turn_length

    def __call__(self, snapshot: tuple[ChatMessage, ...]) -> None:
        if len(snapshot) <= self._turn_length:
            return
        reply = snapshot[-1]
        if reply.role != "assistant":
            return
        if self._printed == 0:
            self._console.print("[bold green]Assistant:[/bold green] ", end="")
        new_text = reply.content[self._printed:]
        if new_text:
            self._console.out(new_text, end="", highlight=False)
            self._printed = len(reply.content)


@app.command()
def chat(
    api_key: str | None = API_KEY_OPTION,
    model: str | None = MODEL_OPTION,
    base_url: str | None = BASE_URL_OPTION,
    log_level: str | None = LOG_LEVEL_OPTION,
):
    """Interactive chat in the console with streamed replies."""
    settings = load_settings(api_key=api_key, model=model, base_url=base_url)
    if not settings.api_key:
        console.print("[red]Error: OPENAI_API_KEY not set (or pass --api-key)[/red]")
        raise typer.Exit(code=1)

    async def _chat():
        session = create_session(settings)
        if log_level is not None:
            session.set_debug_callback(debug_printer(console, log_level))
        session.set_notice_callback(
            lambda notice: console.print(f"\n[red]{notice.message}[/red]", highlight=False)
        )

        try:
            if not await activate(session, settings, console):
                raise typer.Exit(code=1)

            printer = _ReplyPrinter(console)
            session.subscribe(printer)

            console.print("[bold cyan]Streamchat[/bold cyan]")
            console.print(f"[dim]Model: {session.model or '-'}  Key: {mask_api_key(settings.api_key)}[/dim]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if not user_input.strip():
                        continue

                    if user_input.strip().lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    printer.reset(len(session.messages) + 1)
                    result = await session.send(user_input)
                    if result.outcome in (SendOutcome.COMPLETED, SendOutcome.INTERRUPTED):
                        console.print("\n")

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
        finally:
            await session.close()

    asyncio.run(_chat())


@app.command()
def models(
    api_key: str | None = API_KEY_OPTION,
    base_url: str | None = BASE_URL_OPTION,
):
    """Validate the API key and list the available chat models."""
    settings = load_settings(api_key=api_key, base_url=base_url)
    if not settings.api_key:
        console.print("[red]Error: OPENAI_API_KEY not set (or pass --api-key)[/red]")
        raise typer.Exit(code=1)

    async def _models():
        session = create_session(settings)
        try:
            if not await activate(session, settings, console):
                raise typer.Exit(code=1)

            catalog = session.state.catalog
            if not catalog.available:
                console.print(f"[yellow]No models matching '{settings.model_prefix}' found[/yellow]")
                return

            table = Table(title=f"Models for {mask_api_key(settings.api_key)}")
            table.add_column("Model", style="cyan")
            table.add_column("Default", style="green", justify="center")
            for model_id in catalog.available:
                table.add_row(model_id, "*" if model_id == catalog.selected else "")
            console.print(table)
        finally:
            await session.close()

    asyncio.run(_models())


@app.command(name="tui")
def tui_command(
    api_key: str | None = API_KEY_OPTION,
    model: str | None = MODEL_OPTION,
    base_url: str | None = BASE_URL_OPTION,
    log_level: str | None = LOG_LEVEL_OPTION,
):
    """Launch interactive TUI chat interface."""
    settings = load_settings(api_key=api_key, model=model, base_url=base_url)

    async def _tui():
        from ..ui import run_textual_tui

        session = create_session(settings)
        try:
            await run_textual_tui(session, settings, log_level=log_level)
        finally:
            await session.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
