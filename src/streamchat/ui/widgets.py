"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Live rendering of transcript snapshots
- Sidebar status display
- Log rendering and level filtering
"""

from datetime import datetime

from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, RichLog, Static, TextArea

from ..llm.models import ChatMessage
from .config import (
    CHAT_SUBTITLE_BUSY,
    CHAT_SUBTITLE_IDLE,
    INPUT_HISTORY_MAX_SIZE,
    LOG_TIMESTAMP_FORMAT,
    NOTIFY_SHORT,
    LogLevel,
)
from .formatting import format_content, format_header, format_key, format_model


class MessageView(Vertical):
    """One rendered chat message; clicking copies its content."""

    def __init__(self, message: ChatMessage, *args, streaming: bool = False, **kwargs) -> None:
        super().__init__(*args, classes=f"chat-message {message.role}-message", **kwargs)
        self.message = message
        self._header = Static(format_header(message.role, datetime.now()), classes="message-header")
        self._content = Static(
            format_content(message.content, streaming=streaming),
            classes="message-content",
        )

    def compose(self):
        yield self._header
        yield self._content

    def update_message(self, message: ChatMessage, streaming: bool = False) -> None:
        """Show new content for the same turn."""
        self.message = message
        self._content.update(format_content(message.content, streaming=streaming))

    def on_click(self, event: Click) -> None:
        """Copy message content to the clipboard when clicked."""
        event.stop()
        self.app.copy_to_clipboard(self.message.content)
        self.app.notify("Copied to clipboard", timeout=NOTIFY_SHORT)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history kept in step with transcript snapshots.

    The system message is never shown. Messages that disappear from a
    snapshot (a rolled-back turn) are removed from the display.
    """

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = CHAT_SUBTITLE_IDLE
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._views: list[MessageView] = []
        self._live_index: int | None = None

    @property
    def message_count(self) -> int:
        return len(self._views)

    def sync(self, snapshot: tuple[ChatMessage, ...], streaming: bool = False) -> None:
        """Render a transcript snapshot, touching only what changed.

        Args:
            snapshot: Transcript snapshot to show
            streaming: Whether a trailing assistant message is still growing
        """
        visible = [msg for msg in snapshot if msg.role != "system"]
        live_index = None
        if streaming and visible and visible[-1].role == "assistant":
            live_index = len(visible) - 1

        # Keep the common prefix; a role change means the turn was replaced
        keep = 0
        for view, msg in zip(self._views, visible):
            if view.message.role != msg.role:
                break
            keep += 1

        for view in self._views[keep:]:
            view.remove()
        del self._views[keep:]

        for index, msg in enumerate(visible):
            is_live = index == live_index
            if index < keep:
                view = self._views[index]
                if view.message != msg or (index == self._live_index) != is_live:
                    view.update_message(msg, streaming=is_live)
            else:
                view = MessageView(msg, streaming=is_live)
                self._views.append(view)
                self.mount(view)

        self._live_index = live_index
        self.scroll_end(animate=False)

    def set_busy(self, busy: bool) -> None:
        """Reflect an outstanding request in the border."""
        self.set_class(busy, "busy")
        self.border_subtitle = CHAT_SUBTITLE_BUSY if busy else CHAT_SUBTITLE_IDLE

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for view in reversed(self._views):
            if view.message.role == "assistant":
                return view.message.content
        return None


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._busy = False

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        last_row = len(lines) - 1
        last_col = len(lines[-1]) if lines else 0
        return text_area.cursor_location == (last_row, last_col)

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:  # Up
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:  # Down
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self._busy:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
                del self._history[:-INPUT_HISTORY_MAX_SIZE]
            self._history_index = -1
            text_area.text = ""
            self.post_message(self.Submitted(value))

    def set_busy(self, busy: bool) -> None:
        """Disable sending while a request is outstanding."""
        self._busy = busy
        self.query_one("#send-btn", Button).disabled = busy

    def restore(self, value: str) -> None:
        """Put text back into an empty input (after a rolled-back turn)."""
        text_area = self.query_one("#chat-input", TextArea)
        if not text_area.text.strip():
            text_area.text = value

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class StatusPanel(Vertical):
    """Sidebar showing the selected model and the masked API key."""

    def compose(self):
        yield Static("Model", classes="status-label")
        yield Static(format_model(""), id="status-model", classes="status-value")
        yield Button("Change model", id="change-model-btn").with_tooltip("Ctrl+O")
        yield Static("", classes="status-separator")
        yield Static("API Key", classes="status-label")
        yield Static(format_key(""), id="status-key", classes="status-value")
        yield Button("Change key", id="change-key-btn").with_tooltip("Ctrl+K")

    def update_status(self, model: str, api_key: str) -> None:
        self.query_one("#status-model", Static).update(format_model(model))
        self.query_one("#status-key", Static).update(format_key(api_key))


class DebugPanel(RichLog):
    """Log panel for real-time engine tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        """Set log level threshold."""
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Session, Resolver)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        from rich.markup import escape

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        component_colors = {
            "TUI": "cyan",
            "Session": "green",
            "Resolver": "magenta",
        }
        level_color = level_colors.get(level, "white")
        comp_color = component_colors.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{escape(component)}][/] {escape(message)}"
        )

    def debug(self, component: str, message: str) -> None:
        """Log a DEBUG level message."""
        self.log_entry(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        """Log an INFO level message."""
        self.log_entry(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        """Log a WARNING level message."""
        self.log_entry(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        """Log an ERROR level message."""
        self.log_entry(component, message, LogLevel.ERROR)

    def show(self) -> None:
        """Show the log panel."""
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        """Hide the log panel."""
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
