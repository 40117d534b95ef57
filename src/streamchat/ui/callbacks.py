"""Callback interface for ChatSession integration.

Hides the details of how the TUI receives updates from the session.
Uses thread-safe methods to update UI from worker threads.
"""

from typing import TYPE_CHECKING, Any

from ..engine import Notice, SessionPhase
from ..llm.models import ChatMessage
from .config import NOTIFY_ERROR, NOTIFY_SHORT

if TYPE_CHECKING:
    from textual.app import App

    from ..engine import ChatSession
    from .widgets import ChatHistoryWidget, DebugPanel


class TUICallback:
    """Callback handler for ChatSession updates.

    Uses call_from_thread for thread-safe UI updates from workers.
    """

    def __init__(
        self,
        session: "ChatSession",
        history: "ChatHistoryWidget",
        log_panel: "DebugPanel | None" = None,
        app: "App | None" = None
    ) -> None:
        self.session = session
        self.history = history
        self.log_panel = log_panel
        self.app = app

    def _call_thread_safe(self, func: Any, *args: Any, **kwargs: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        import threading
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args, **kwargs)
        else:
            func(*args, **kwargs)

    def attach(self) -> None:
        """Register all handlers with the session."""
        self.session.subscribe(self.on_transcript)
        self.session.set_notice_callback(self.on_notice)
        self.session.set_debug_callback(self.on_debug)

    def detach(self) -> None:
        self.session.unsubscribe(self.on_transcript)

    def on_transcript(self, snapshot: tuple[ChatMessage, ...]) -> None:
        """Render a published transcript snapshot."""
        streaming = self.session.phase is SessionPhase.STREAMING
        self._call_thread_safe(self.history.sync, snapshot, streaming=streaming)

    def on_notice(self, notice: Notice) -> None:
        """Show a session notice as a toast."""
        if self.app is None:
            return
        timeout = NOTIFY_ERROR if notice.severity == "error" else NOTIFY_SHORT * 2
        self._call_thread_safe(
            self.app.notify, notice.message, severity=notice.severity, timeout=timeout
        )

    def on_debug(self, level: str, component: str, message: str) -> None:
        """Route debug messages to the log panel."""
        if self.log_panel is None:
            return
        if level == "debug":
            self._call_thread_safe(self.log_panel.debug, component, message)
        elif level == "info":
            self._call_thread_safe(self.log_panel.info, component, message)
        elif level == "warning":
            self._call_thread_safe(self.log_panel.warning, component, message)
        elif level == "error":
            self._call_thread_safe(self.log_panel.error, component, message)
