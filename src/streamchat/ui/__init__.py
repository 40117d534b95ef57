"""Terminal UI module for streamchat.

Provides a Textual-based TUI for streamed chat.

Module structure (Parnas principle - each module hides a design decision):
- widgets.py: Custom widgets (input history, transcript rendering, log rendering)
- formatting.py: Text formatting (message headers, masked key)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (API key entry, model picker)
- callbacks.py: Session integration (how TUI receives updates)
- app.py: Application orchestration (user interaction flow)
"""

from .app import ChatApp, run_textual_tui
from .callbacks import TUICallback
from .config import LogLevel
from .screens import ApiKeyScreen, ModelSelectScreen
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, StatusPanel

__all__ = [
    "ApiKeyScreen",
    "ChatApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "ModelSelectScreen",
    "StatusPanel",
    "TUICallback",
    "run_textual_tui",
]
