"""Sign-in, registration and reset-request modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from canteen.errors import CanteenError, DuplicateEmail, InvalidCredentials, ValidationError
from canteen.models import Account
from canteen.store import Store


class LoginModal(ModalScreen[Account | None]):
    """Collect email and password and sign in against the store."""

    CSS = """
    LoginModal {
        align: center middle;
        background: $background 60%;
    }

    #login-dialog {
        width: 60;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #login-fields {
        color: white;
        margin-bottom: 1;
    }

    #login-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #login-help {
        color: #dddddd;
    }
    """

    _FIELDS_LOGIN = ("email", "secret")
    _FIELDS_REGISTER = ("name", "email", "secret")

    def __init__(self, store: Store) -> None:
        super().__init__()
        self.store = store
        self.registering = False
        self.values: dict[str, str] = {"name": "", "email": "", "secret": ""}
        self.field_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="login-dialog"):
            yield Static(id="login-title")
            yield Static(id="login-fields")
            yield Static(id="login-error")
            yield Static(id="login-help")

    def on_mount(self) -> None:
        self._refresh_content()

    @property
    def fields(self) -> tuple[str, ...]:
        return self._FIELDS_REGISTER if self.registering else self._FIELDS_LOGIN

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            return

        if event.key in {"tab", "down"}:
            self.field_index = (self.field_index + 1) % len(self.fields)
        elif event.key in {"shift+tab", "up"}:
            self.field_index = (self.field_index - 1) % len(self.fields)
        elif event.key == "ctrl+n":
            self.registering = not self.registering
            self.field_index = 0
            self.error = ""
        elif event.key == "ctrl+r":
            self._request_reset()
        elif event.key == "enter":
            self._confirm()
            return
        elif event.key == "backspace":
            name = self.fields[self.field_index]
            self.values[name] = self.values[name][:-1]
        elif event.is_printable and event.character:
            name = self.fields[self.field_index]
            self.values[name] += event.character
        self._refresh_content()

    def _confirm(self) -> None:
        try:
            if self.registering:
                account = self.store.register(self.values["name"], self.values["email"], self.values["secret"])
            else:
                account = self.store.login(self.values["email"], self.values["secret"])
        except InvalidCredentials:
            self.error = "Invalid email or password."
        except DuplicateEmail:
            self.error = "A user with this email already exists."
        except ValidationError as exc:
            self.error = f"Check your details: {exc}."
        except CanteenError as exc:
            self.error = str(exc)
        else:
            self.dismiss(account)
            return
        self._refresh_content()

    def _request_reset(self) -> None:
        email = self.values["email"].strip()
        if not email:
            self.error = "Type your email first."
        elif self.store.directory.request_reset(email):
            self.error = "Reset request sent to a superadmin for review."
        else:
            self.error = "No user found with that email address."

    def _refresh_content(self) -> None:
        title = "Register" if self.registering else "Sign in"
        self.query_one("#login-title", Static).update(title)

        content = Text(style="white")
        for idx, name in enumerate(self.fields):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.field_index else "  "
            shown = "*" * len(self.values[name]) if name == "secret" else self.values[name]
            label = {"name": "Name", "email": "Email", "secret": "Password"}[name]
            style = "bold white" if idx == self.field_index else "white"
            content.append(f"{pointer}{label}: {shown}", style=style)
        self.query_one("#login-fields", Static).update(content)
        self.query_one("#login-error", Static).update(self.error)

        switch = "Ctrl+N sign in instead" if self.registering else "Ctrl+N register"
        self.query_one("#login-help", Static).update(
            f"Tab/↑/↓ field, Enter confirm, {switch}, Ctrl+R forgot password, Esc close"
        )
