"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - Sidebar + Chat, Input Below
   ============================================ */
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 30 1fr;
    grid-rows: 1fr auto;
    background: $background;
}

/* ============================================
   Sidebar - Model and API Key
   ============================================ */
#status-panel {
    height: 100%;
    background: $surface;
    padding: 1 2;
    align: center bottom;
}

#status-panel .status-label {
    width: 100%;
    text-align: center;
    color: $foreground;
    text-style: bold;
}

#status-panel .status-value {
    width: 100%;
    text-align: center;
    color: $text-muted;
    margin-bottom: 1;
}

#status-panel Button {
    width: 100%;
    margin-bottom: 1;
}

#status-panel .status-separator {
    width: 100%;
    height: 1;
    border-bottom: solid $border;
    margin-bottom: 1;
}

/* ============================================
   Main Panel - Chat History + Log
   ============================================ */
#main-panel {
    height: 100%;
}

#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }

    &.busy {
        border: round $accent;
        border-subtitle-color: $accent;
    }
}

#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-x: auto;
    margin-top: 1;
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
}

.user-message {
    border-left: tall $primary;
    background: $primary 8%;

    & .message-header {
        color: $primary;
        text-style: bold;
    }
}

.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    color: $foreground;
}

/* ============================================
   Input Bar - Text Entry + Send
   ============================================ */
#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

ChatInputBar {
    height: 7;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    text-style: bold;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-information {
        border: tall $primary;
    }

    &.-warning {
        border: tall $warning;
    }

    &.-error {
        border: tall $error;
    }
}

Header {
    background: $panel;
    color: $foreground;
    height: 1;
}
"""

MODAL_CSS = """
ApiKeyScreen, ModelSelectScreen {
    align: center middle;
    background: $background 70%;
}

.dialog {
    width: 64;
    height: auto;
    max-height: 24;
    border: tall $accent;
    background: $surface;
    padding: 1 2;
}

.dialog-title {
    width: 100%;
    text-align: center;
    text-style: bold;
    color: $accent;
    padding: 0 0 1 0;
    border-bottom: solid $border;
    margin-bottom: 1;
}

.dialog-hint {
    width: 100%;
    color: $text-muted;
    margin-bottom: 1;
}

.dialog-row {
    width: 100%;
    height: auto;
}

#api-key-input {
    width: 1fr;
}

#toggle-visibility {
    width: 10;
    margin-left: 1;
}

#model-list {
    height: auto;
    max-height: 14;
    background: $panel;
    border: round $border;
}

.dialog-buttons {
    width: 100%;
    height: 3;
    align: center middle;
    margin-top: 1;
}

.dialog-buttons Button {
    margin: 0 1;
    min-width: 10;
}
"""
