"""Staff back office: menu items, accounts, reset requests and feedback."""

from __future__ import annotations

import logging
from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from canteen.accounts import parse_role
from canteen.catalog import format_portions, parse_portions, parse_time_windows
from canteen.errors import CanteenError, NotFoundError
from canteen.form_modal import FormField, FormModal
from canteen.models import Account, MenuItem, PasswordResetRequest
from canteen.rendering import describe_error, format_window_tags, role_badge
from canteen.store import Store

logger = logging.getLogger(__name__)

SECTIONS = ("items", "users", "resets", "feedback")
_TITLES = {
    "items": "Manage Items",
    "users": "Manage Users",
    "resets": "Reset Requests",
    "feedback": "Feedback",
}
_HELP = {
    "items": "n new, e edit, t offer/hide, d delete",
    "users": "n add, e edit, s set password, d delete, A reset all passwords",
    "resets": "Enter resolve with a new password",
    "feedback": "read only",
}


class AdminModal(ModalScreen[None]):
    """Tabbed management screen; account actions are checked by the directory."""

    CSS = """
    AdminModal {
        align: center middle;
        background: $background 60%;
    }

    #admin-dialog {
        width: 90%;
        height: 80%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #admin-tabs {
        margin-bottom: 1;
    }

    #admin-list {
        height: 1fr;
        color: white;
    }

    #admin-message {
        color: #ffd479;
        margin-top: 1;
    }

    #admin-help {
        color: #dddddd;
    }
    """

    def __init__(self, store: Store) -> None:
        super().__init__()
        self.store = store
        self.section = "items"
        self.index = 0
        self.message = ""
        self.pending_delete: str | None = None

    def compose(self) -> ComposeResult:
        with Container(id="admin-dialog"):
            yield Static(id="admin-tabs")
            yield Static(id="admin-list")
            yield Static(id="admin-message")
            yield Static(id="admin-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            return

        if event.key in {"right", "tab"}:
            self._switch_section(1)
        elif event.key in {"left", "shift+tab"}:
            self._switch_section(-1)
        elif event.key == "down" or event.character == "j":
            self._move(1)
        elif event.key == "up" or event.character == "k":
            self._move(-1)
        elif event.key == "enter" and self.section == "resets":
            try:
                self._resolve_reset()
            except CanteenError as exc:
                self.message = describe_error(exc)
        elif event.character:
            handler = self._handlers().get(event.character)
            if handler is not None:
                try:
                    handler()
                except CanteenError as exc:
                    self.message = describe_error(exc)
        self._refresh_content()

    def _handlers(self) -> dict[str, Callable[[], None]]:
        if self.section == "items":
            return {
                "n": lambda: self._edit_item(None),
                "e": self._edit_selected_item,
                "t": self._toggle_offered,
                "d": self._delete_selected,
            }
        if self.section == "users":
            return {
                "n": lambda: self._edit_account(None),
                "e": self._edit_selected_account,
                "s": self._set_password,
                "d": self._delete_selected,
                "A": self._reset_all_passwords,
            }
        return {}

    def _switch_section(self, delta: int) -> None:
        idx = SECTIONS.index(self.section)
        self.section = SECTIONS[(idx + delta) % len(SECTIONS)]
        self.index = 0
        self.pending_delete = None
        self.message = ""

    def _move(self, delta: int) -> None:
        rows = self._rows()
        if rows:
            self.index = (self.index + delta) % len(rows)
        self.pending_delete = None

    def _rows(self) -> list:
        if self.section == "items":
            return self.store.catalog.items()
        if self.section == "users":
            return self.store.directory.accounts()
        if self.section == "resets":
            return self.store.directory.reset_requests()
        return self.store.feedback.entries()

    def _selected(self):
        rows = self._rows()
        if not rows:
            return None
        self.index = min(self.index, len(rows) - 1)
        return rows[self.index]

    def _attempt(self, operation: Callable[[], str]) -> None:
        try:
            self.message = operation()
        except CanteenError as exc:
            logger.debug("admin_operation_failed error=%r", exc)
            self.message = describe_error(exc)

    def _open_form(self, title: str, fields: list[FormField], submit: Callable[[dict[str, str]], str]) -> None:
        def done(message: str | None) -> None:
            if message is not None:
                self.message = message
            self._refresh_content()

        self.app.push_screen(FormModal(title, fields, submit), done)

    def _edit_selected_item(self) -> None:
        item = self._selected()
        if item is not None:
            self._edit_item(item)

    def _edit_item(self, item: MenuItem | None) -> None:
        fields = [
            FormField("name", "Name", item.name if item else ""),
            FormField("description", "Description", item.description if item else ""),
            FormField("category", "Category", item.category if item else ""),
            FormField("portions", "Portions (Half=200, Full=350)", format_portions(item.portions) if item else ""),
            FormField(
                "times",
                "Times (Breakfast, Lunch, Dinner, Snacks, All Day)",
                format_window_tags(item.time_windows) if item else "",
            ),
            FormField("ingredients", "Ingredients (comma separated)", ", ".join(item.ingredients) if item else ""),
            FormField("image_url", "Image URL", item.image_url if item else ""),
        ]
        title = f"Edit {item.name}" if item else "New menu item"
        self._open_form(title, fields, lambda values: self._save_item(item, values))

    def _save_item(self, item: MenuItem | None, values: dict[str, str]) -> str:
        changes = {
            "name": values["name"],
            "description": values["description"],
            "category": values["category"],
            "portions": parse_portions(values["portions"]),
            "time_windows": parse_time_windows(values["times"]),
            "ingredients": values["ingredients"],
            "image_url": values["image_url"],
        }
        if item is None:
            created = self.store.catalog.create_item(**changes)  # type: ignore[arg-type]
            return f"Added {created.name}."
        updated = self.store.catalog.update_item(item.item_id, **changes)
        return f"Saved {updated.name}."

    def _toggle_offered(self) -> None:
        item = self._selected()
        if item is None:
            return

        def toggle() -> str:
            updated = self.store.catalog.update_item(item.item_id, offered=not item.offered)
            return f"{updated.name} is now {'offered' if updated.offered else 'hidden'}."

        self._attempt(toggle)

    def _edit_selected_account(self) -> None:
        account = self._selected()
        if account is not None:
            self._edit_account(account)

    def _edit_account(self, account: Account | None) -> None:
        acting = self.store.require_account()
        fields = [
            FormField("name", "Name", account.name if account else ""),
            FormField("email", "Email", account.email if account else ""),
            FormField("role", "Role (customer, admin, superadmin)", account.role.value if account else "customer"),
        ]
        if account is None:
            fields.append(FormField("secret", "Password", secret=True))

        def save(values: dict[str, str]) -> str:
            role = parse_role(values["role"])
            if account is None:
                created = self.store.directory.add_account(acting, values["name"], values["email"], values["secret"], role)
                return f"Added {created.name}."
            self.store.directory.update_account(
                acting, account.account_id, name=values["name"], email=values["email"], role=role
            )
            return f"Saved {values['name']}."

        self._open_form(f"Edit {account.name}" if account else "Add user", fields, save)

    def _set_password(self) -> None:
        account = self._selected()
        if account is None:
            return
        acting = self.store.require_account()

        def save(values: dict[str, str]) -> str:
            self.store.directory.change_secret(acting, account.account_id, values["secret"])
            return f"Password changed for {account.name}."

        self._open_form(f"New password for {account.name}", [FormField("secret", "Password", secret=True)], save)

    def _reset_all_passwords(self) -> None:
        acting = self.store.require_account()

        def save(values: dict[str, str]) -> str:
            count = self.store.directory.reset_all_secrets(acting, values["secret"])
            return f"Reset the password of {count} account(s)."

        self._open_form("Reset every password", [FormField("secret", "New password", secret=True)], save)

    def _resolve_reset(self) -> None:
        request: PasswordResetRequest | None = self._selected()
        if request is None:
            return
        acting = self.store.require_account()

        def save(values: dict[str, str]) -> str:
            self.store.directory.resolve_reset(acting, request.request_id, values["secret"])
            return f"Password reset for {request.email}."

        self._open_form(f"Resolve reset for {request.email}", [FormField("secret", "New password", secret=True)], save)

    def _delete_selected(self) -> None:
        row = self._selected()
        if row is None:
            return
        row_id = row.item_id if self.section == "items" else row.account_id
        if self.pending_delete != row_id:
            self.pending_delete = row_id
            self.message = f"Press d again to delete {row.name}. This cannot be undone."
            return
        self.pending_delete = None

        def delete() -> str:
            if self.section == "items":
                self.store.catalog.delete_item(row_id)
            else:
                self.store.directory.delete_account(self.store.require_account(), row_id)
            return f"Deleted {row.name}."

        self._attempt(delete)

    def _refresh_content(self) -> None:
        tabs = Text()
        for name in SECTIONS:
            style = "bold reverse" if name == self.section else "dim"
            tabs.append(f" {_TITLES[name]} ", style=style)
            tabs.append(" ")
        self.query_one("#admin-tabs", Static).update(tabs)

        rows = self._rows()
        body = Text(style="white")
        if not rows:
            body.append("(nothing here)", style="dim")
        self.index = min(self.index, max(len(rows) - 1, 0))
        for idx, row in enumerate(rows):
            if idx > 0:
                body.append("\n")
            body.append("➤ " if idx == self.index else "  ")
            body.append_text(self._format_row(row))
        self.query_one("#admin-list", Static).update(body)
        self.query_one("#admin-message", Static).update(self.message)
        self.query_one("#admin-help", Static).update(f"←/→ section, ↑/↓ move, {_HELP[self.section]}, Esc close")

    def _format_row(self, row: object) -> Text:
        text = Text()
        if self.section == "items":
            text.append(row.name, style="bold")
            text.append(f"  [{row.category}]  {format_portions(row.portions)}", style="dim")
            if not row.offered:
                text.append("  hidden", style="bold #ffb3b3")
        elif self.section == "users":
            text.append_text(role_badge(row.role))
            text.append(f" {row.name}  {row.email}  ")
            text.append(row.account_id, style="dim")
        elif self.section == "resets":
            text.append(row.email, style="bold")
            text.append(f"  requested {row.created_at.astimezone().strftime('%Y-%m-%d %H:%M')}", style="dim")
        else:
            text.append("★" * row.rating + "☆" * (5 - row.rating), style="bold #e0c341")
            text.append(f"  {self._author(row.account_id)}")
            if row.order_id:
                text.append(f"  {row.order_id}", style="dim")
            if row.comment:
                text.append(f"\n    {row.comment}")
        return text

    def _author(self, account_id: str) -> str:
        try:
            return self.store.directory.get(account_id).name
        except NotFoundError:
            return "Unknown User"
