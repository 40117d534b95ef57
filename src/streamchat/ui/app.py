"""Main Textual TUI application.

Orchestrates the UI components and handles user interaction with ChatSession.
"""

import asyncio

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..config import ChatSettings
from ..engine import ChatSession, SendOutcome
from ..llm import CredentialInvalid
from .callbacks import TUICallback
from .config import NOTIFY_ERROR, NOTIFY_SHORT, LogLevel
from .screens import ApiKeyScreen, ModelSelectScreen
from .styles import APP_CSS
from .themes import NEUTRAL_DARK
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusPanel


class ChatApp(App):
    """Textual TUI for streamed chat."""

    CSS = APP_CSS
    TITLE = "Streamchat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        # TextArea and Input bind ctrl+k and ctrl+d themselves
        Binding("ctrl+k", "open_api_key", "API Key", priority=True),
        Binding("ctrl+o", "select_model", "Model", priority=True),
        Binding("ctrl+r", "copy_last_response", "Copy Response", priority=True),
        Binding("ctrl+d", "toggle_debug", "Debug", priority=True),
    ]

    def __init__(
        self,
        session: ChatSession,
        settings: ChatSettings | None = None,
        log_level: str | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._settings = settings or ChatSettings()
        self._log_level = log_level
        self._callback: TUICallback | None = None
        # App.query_one only searches the topmost screen; workers finish
        # while dialogs are open
        self._status_panel = StatusPanel(id="status-panel")
        self._history = ChatHistoryWidget(id="chat-history")
        self._log_panel = DebugPanel(id="debug-panel")
        self._input_bar = ChatInputBar(id="chat-input-bar")

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        # Sidebar: model and key
        yield self._status_panel

        # Main panel: chat history + log panel
        with Vertical(id="main-panel"):
            yield self._history
            yield self._log_panel

        with Vertical(id="bottom-bar"):
            yield self._input_bar

        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(NEUTRAL_DARK)
        self.theme = "neutral-dark"

        log_panel = self._log_panel
        history = self._history
        self._callback = TUICallback(self._session, history, log_panel, app=self)
        self._callback.attach()

        # Configure log panel if --log-level was passed
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        history.sync(self._session.messages)
        self._refresh_status()
        self._input_bar.focus_input()

        if self._session.has_credential:
            return
        if self._settings.api_key:
            self._validate_key(self._settings.api_key, preferred_model=self._settings.model)
        else:
            self._prompt_for_key()

    def on_unmount(self) -> None:
        if self._callback is not None:
            self._callback.detach()
            self._callback = None

    def _refresh_status(self) -> None:
        state = self._session.state
        self._status_panel.update_status(
            state.catalog.selected, state.credentials.active
        )
        self.sub_title = state.catalog.selected or "no model"

    def _log(self, level: int, message: str) -> None:
        self._log_panel.log_entry("TUI", message, level)

    def _prompt_for_key(self) -> None:
        credentials = self._session.state.credentials
        screen = ApiKeyScreen(
            current_key=credentials.draft,
            allow_cancel=self._session.has_credential,
        )
        self.push_screen(screen, self._on_key_entered)

    def _on_key_entered(self, api_key: str | None) -> None:
        if api_key is None:
            return
        self._validate_key(api_key)

    @work(exclusive=True, group="credential")
    async def _validate_key(self, draft: str, preferred_model: str | None = None) -> None:
        """Validate a key in the background and activate it on success."""
        if self._session.is_busy:
            self.notify("Wait for the current reply before changing the API key", severity="warning", timeout=NOTIFY_SHORT)
            return
        self._log(LogLevel.INFO, "Validating API key")
        try:
            result = await self._session.submit_credential(draft)
        except CredentialInvalid as e:
            self._log(LogLevel.ERROR, str(e))
            self.notify(str(e), severity="error", timeout=NOTIFY_ERROR)
            self._refresh_status()
            if not self._session.has_credential:
                self._prompt_for_key()
            return

        if preferred_model:
            if preferred_model in result.models:
                self._session.select_model(preferred_model)
            else:
                self.notify(
                    f"Model '{preferred_model}' not available, using '{self._session.model or '-'}'",
                    severity="warning",
                )
        self._refresh_status()
        self.notify(f"API key accepted: {len(result.models)} model(s) available", timeout=NOTIFY_SHORT * 2)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        user_input = event.value
        if not user_input:
            return

        if self._session.is_busy:
            self.notify("Wait for the current reply to finish", severity="warning", timeout=NOTIFY_SHORT)
            self._input_bar.restore(user_input)
            return

        if not self._session.has_credential:
            self._input_bar.restore(user_input)
            self._prompt_for_key()
            return

        self._send(user_input)

    @work(group="chat")
    async def _send(self, user_input: str) -> None:
        """Send a message as a background async worker."""
        history = self._history
        input_bar = self._input_bar

        history.set_busy(True)
        input_bar.set_busy(True)
        self._log(LogLevel.DEBUG, f"Sending: '{user_input[:50]}'")
        try:
            result = await self._session.send(user_input)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=NOTIFY_SHORT)
            raise
        except Exception as e:
            self._log(LogLevel.ERROR, f"Exception: {e}")
            self.notify(f"Error: {str(e)[:80]}", severity="error", timeout=NOTIFY_ERROR)
            input_bar.restore(user_input)
            return
        finally:
            history.sync(self._session.messages, streaming=False)
            history.set_busy(False)
            input_bar.set_busy(False)

        if result.outcome in (SendOutcome.REJECTED, SendOutcome.TRANSPORT_FAILED):
            input_bar.restore(user_input)

    def on_button_pressed(self, event) -> None:
        if event.button.id == "change-model-btn":
            event.stop()
            self.action_select_model()
        elif event.button.id == "change-key-btn":
            event.stop()
            self.action_open_api_key()

    def _dialog_open(self) -> bool:
        return isinstance(self.screen, (ApiKeyScreen, ModelSelectScreen))

    def action_open_api_key(self) -> None:
        """Open the API key dialog."""
        if self._dialog_open():
            return
        if self._session.is_busy:
            self.notify("Wait for the current reply before changing the API key", severity="warning", timeout=NOTIFY_SHORT)
            return
        self._prompt_for_key()

    def action_select_model(self) -> None:
        """Open the model picker."""
        if self._dialog_open():
            return
        if not self._session.has_credential:
            self.notify("Set an API key first", severity="warning", timeout=NOTIFY_SHORT)
            return
        catalog = self._session.state.catalog
        self.push_screen(
            ModelSelectScreen(catalog.available, selected=catalog.selected),
            self._on_model_selected,
        )

    def _on_model_selected(self, model: str | None) -> None:
        if model is None:
            return
        self._session.select_model(model)
        self._refresh_status()
        self.notify(f"Model: {model}", timeout=NOTIFY_SHORT)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self._log_panel
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=NOTIFY_SHORT)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self._history
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied", timeout=NOTIFY_SHORT)
        else:
            self.notify("No response to copy", severity="warning", timeout=NOTIFY_SHORT)


async def run_textual_tui(
    session: ChatSession,
    settings: ChatSettings | None = None,
    log_level: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        session: Chat session (credential may still be missing)
        settings: Settings holding the initial key and preferred model
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = ChatApp(session, settings, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
