"""Modal screens for the TUI.

This module hides the design decisions about:
- How the API key is captured (masked input, show/hide toggle)
- How the model is picked from the catalog
- Keyboard shortcuts for dialogs

Screens only collect input; validation and selection happen in the app.
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, OptionList, Static

from .styles import MODAL_CSS


class ApiKeyScreen(ModalScreen[str | None]):
    """Modal dialog asking for an API key.

    Dismisses with the entered key, or None when cancelled. Cancelling is
    only offered when an active key already exists.
    """

    CSS = MODAL_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("ctrl+t", "toggle_visibility", "Show/Hide", show=False),
    ]

    def __init__(self, current_key: str = "", allow_cancel: bool = False) -> None:
        super().__init__()
        self._current_key = current_key
        self._allow_cancel = allow_cancel

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("API Key", classes="dialog-title")
            yield Static(
                "Enter your OpenAI API key. It is checked against the model list before use.",
                classes="dialog-hint",
            )
            with Horizontal(classes="dialog-row"):
                yield Input(
                    value=self._current_key,
                    placeholder="sk-...",
                    password=True,
                    id="api-key-input",
                )
                yield Button("Show", id="toggle-visibility")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Confirm", id="btn-confirm", variant="success")
                if self._allow_cancel:
                    yield Button("Cancel", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        self.query_one("#api-key-input", Input).focus()

    def _confirm(self) -> None:
        value = self.query_one("#api-key-input", Input).value.strip()
        if not value:
            self.notify("API key must not be empty", severity="warning")
            return
        self.dismiss(value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._confirm()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "btn-confirm":
            self._confirm()
        elif event.button.id == "btn-cancel":
            self.action_cancel()
        elif event.button.id == "toggle-visibility":
            self.action_toggle_visibility()

    def action_toggle_visibility(self) -> None:
        """Show or hide the typed key."""
        key_input = self.query_one("#api-key-input", Input)
        key_input.password = not key_input.password
        self.query_one("#toggle-visibility", Button).label = "Show" if key_input.password else "Hide"

    def action_cancel(self) -> None:
        if self._allow_cancel:
            self.dismiss(None)


class ModelSelectScreen(ModalScreen[str | None]):
    """Modal dialog listing the available models.

    Dismisses with the chosen identifier, or None when cancelled.
    """

    CSS = MODAL_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, models: list[str], selected: str = "") -> None:
        super().__init__()
        self._models = list(models)
        self._selected = selected

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static("Model", classes="dialog-title")
            if self._models:
                yield OptionList(*self._models, id="model-list")
            else:
                yield Static("No models available for this API key.", classes="dialog-hint")
            with Horizontal(classes="dialog-buttons"):
                yield Button("Cancel", id="btn-cancel", variant="error")

    def on_mount(self) -> None:
        if not self._models:
            return
        option_list = self.query_one("#model-list", OptionList)
        if self._selected in self._models:
            option_list.highlighted = self._models.index(self._selected)
        option_list.focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(self._models[event.option_index])

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "btn-cancel":
            self.action_cancel()

    def action_cancel(self) -> None:
        self.dismiss(None)
