"""Multi-field form modal screen used by the admin and feedback flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from canteen.errors import CanteenError
from canteen.rendering import describe_error

_MAX_LENGTH = 200


@dataclass
class FormField:
    name: str
    label: str
    value: str = ""
    secret: bool = False


class FormModal(ModalScreen[str | None]):
    """
    Edit a handful of text fields, then hand them to ``submit``.

    ``submit`` receives the field values by name and returns a confirmation
    message, which becomes the dismiss result. A ``CanteenError`` keeps the
    form open with the error shown under the fields.
    """

    CSS = """
    FormModal {
        align: center middle;
        background: $background 60%;
    }

    #form-dialog {
        width: 76;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #form-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #form-fields {
        color: white;
        margin-bottom: 1;
    }

    #form-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #form-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, fields: Sequence[FormField], submit: Callable[[dict[str, str]], str]) -> None:
        super().__init__()
        self.title_text = title
        self.fields = list(fields)
        self.values = {field.name: field.value for field in self.fields}
        self.submit = submit
        self.field_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="form-dialog"):
            yield Static(self.title_text, id="form-title")
            yield Static(id="form-fields")
            yield Static(id="form-error")
            yield Static("Tab/↑/↓ field, Enter save, Backspace delete, Esc cancel", id="form-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            return

        name = self.fields[self.field_index].name
        if event.key in {"tab", "down"}:
            self.field_index = (self.field_index + 1) % len(self.fields)
        elif event.key in {"shift+tab", "up"}:
            self.field_index = (self.field_index - 1) % len(self.fields)
        elif event.key == "enter":
            self._confirm()
            return
        elif event.key == "backspace":
            self.values[name] = self.values[name][:-1]
        elif event.is_printable and event.character:
            if len(self.values[name]) < _MAX_LENGTH:
                self.values[name] += event.character
        self._refresh_content()

    def _confirm(self) -> None:
        try:
            message = self.submit({key: value.strip() for key, value in self.values.items()})
        except CanteenError as exc:
            self.error = describe_error(exc)
            self._refresh_content()
            return
        self.dismiss(message)

    def _refresh_content(self) -> None:
        content = Text(style="white")
        for idx, field in enumerate(self.fields):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.field_index else "  "
            value = self.values[field.name]
            shown = "*" * len(value) if field.secret else value
            cursor = "|" if idx == self.field_index else ""
            style = "bold white" if idx == self.field_index else "white"
            content.append(f"{pointer}{field.label}: {shown}{cursor}", style=style)
        self.query_one("#form-fields", Static).update(content)
        self.query_one("#form-error", Static).update(self.error)
