"""Single-line free-text entry modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

_MAX_LENGTH = 200


class TextEntryModal(ModalScreen[str | None]):
    """Prompt for one line of optional text, e.g. order instructions."""

    CSS = """
    TextEntryModal {
        align: center middle;
        background: $background 60%;
    }

    #entry-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #entry-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #entry-prompt {
        color: white;
        margin-bottom: 1;
    }

    #entry-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #entry-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, prompt: str, value: str = "") -> None:
        super().__init__()
        self.title_text = title
        self.prompt_text = prompt
        self.value = value

    def compose(self) -> ComposeResult:
        with Container(id="entry-dialog"):
            yield Static(self.title_text, id="entry-title")
            yield Static(self.prompt_text, id="entry-prompt")
            yield Static(id="entry-value")
            yield Static("Enter confirm. Backspace delete. Esc cancel.", id="entry-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self.dismiss(self.value)
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if len(self.value) < _MAX_LENGTH:
                self.value += event.character
            self._refresh_content()
            event.stop()

    def _refresh_content(self) -> None:
        self.query_one("#entry-value", Static).update(f"{self.value}|")
