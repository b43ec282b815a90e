"""Main Textual app class."""

from __future__ import annotations

import logging
from typing import Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from canteen.admin_modal import AdminModal
from canteen.config import AVAILABILITY_REFRESH_SECONDS
from canteen.errors import CanteenError, NotFoundError
from canteen.feedback import parse_rating
from canteen.form_modal import FormField, FormModal
from canteen.ledger import sort_by_placed
from canteen.login_modal import LoginModal
from canteen.models import Account, CartLine, MenuItem, Order, OrderStatus, Role
from canteen.printer import check_printer_dependencies, print_order_bill
from canteen.recommendations import HistoryRecommender, Recommender
from canteen.recommendations_modal import RecommendationsModal
from canteen.rendering import (
    describe_error,
    format_cart_line,
    format_menu_item,
    format_order_row,
    format_window_tags,
    role_badge,
)
from canteen.store import Store
from canteen.text_entry_modal import TextEntryModal

logger = logging.getLogger(__name__)

PANES = ("menu", "cart", "orders")


class CanteenApp(App):
    """A Textual app for browsing the menu, ordering and managing orders."""

    TITLE = "Canteen"
    SUB_TITLE = "Order Desk"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #menu-pane {
        width: 3fr;
        border: round $secondary;
        padding: 0 1;
    }

    #cart-pane {
        width: 2fr;
        border: round $secondary;
        padding: 0 1;
    }

    #orders-pane {
        width: 3fr;
        border: round $secondary;
        padding: 0 1;
    }

    .active-pane {
        border: round $primary;
    }

    #menu-list, #cart-list, #orders-list {
        height: 1fr;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #status-bar {
        height: 3;
        border: heavy $secondary;
        padding: 0 1;
    }
    """

    active_pane = reactive("menu")

    BINDINGS = [
        ("right", "cycle_pane(1)", "Next pane"),
        ("left", "cycle_pane(-1)", "Previous pane"),
        ("down", "move_selection(1)", "Down"),
        ("up", "move_selection(-1)", "Up"),
        ("enter", "activate", "Add / select"),
        Binding("ctrl+s", "place_order", "Place order", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        store: Store | None = None,
        recommender: Recommender | None = None,
        bill_printer: Callable[[Order], None] | None = None,
    ) -> None:
        super().__init__()
        self.store = store or Store.seeded()
        self.recommender = recommender or HistoryRecommender(self.store.catalog)
        self.bill_printer = bill_printer
        self.system_status = ""
        self.menu_index = 0
        self.portion_index = 0
        self.cart_index = 0
        self.order_index = 0
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="menu-pane"):
                yield Static(id="menu-title", classes="pane-title")
                yield Static(id="menu-list")
            with Vertical(id="cart-pane"):
                yield Static("Cart", classes="pane-title")
                yield Static(id="cart-list")
            with Vertical(id="orders-pane"):
                yield Static(id="orders-title", classes="pane-title")
                yield Static(id="orders-list")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        if self.bill_printer is None:
            ready, msg = check_printer_dependencies()
            self.bill_printer = print_order_bill if ready else None
            self.system_status = msg
            logger.debug("on_mount printer_status=%r", msg)
        self._unsubscribe = self.store.subscribe(self._refresh_all)
        self.set_interval(1, self._refresh_orders)
        self.set_interval(AVAILABILITY_REFRESH_SECONDS, self._refresh_menu)
        self.query_one(f"#{self.active_pane}-pane").add_class("active-pane")
        self._refresh_all()

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()

    def watch_active_pane(self, old: str, new: str) -> None:
        try:
            self.query_one(f"#{old}-pane").remove_class("active-pane")
            self.query_one(f"#{new}-pane").add_class("active-pane")
        except NoMatches:
            return

    def on_key(self, event: Key) -> None:
        if self._modal_open():
            return
        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        handlers: dict[str, Callable[[], None]] = {
            "j": lambda: self.action_move_selection(1),
            "k": lambda: self.action_move_selection(-1),
            "p": self._cycle_portion,
            "+": lambda: self._change_quantity(1),
            "-": lambda: self._change_quantity(-1),
            "d": self._remove_cart_line,
            "x": self._customer_cancel,
            "c": lambda: self._staff_status(OrderStatus.CONFIRMED),
            "v": lambda: self._staff_status(OrderStatus.DELIVERED),
            "z": lambda: self._staff_status(OrderStatus.CANCELLED),
            "b": self._settle_selected,
            "B": self._settle_all_for_owner,
            "r": self._open_recommendations,
            "l": self._open_login,
            "a": self._open_admin,
            "f": self._open_feedback,
            "o": self._logout,
        }
        handler = handlers.get(event.character)
        if handler is None:
            return
        logger.debug("on_key char=%r pane=%s", event.character, self.active_pane)
        handler()
        event.stop()

    def action_cycle_pane(self, delta: int) -> None:
        if self._modal_open():
            return
        idx = PANES.index(self.active_pane)
        self.active_pane = PANES[(idx + delta) % len(PANES)]

    def action_move_selection(self, delta: int) -> None:
        if self._modal_open():
            return
        if self.active_pane == "menu":
            items = self._menu_items()
            if items:
                self.menu_index = (self.menu_index + delta) % len(items)
                self.portion_index = 0
            self._refresh_menu()
        elif self.active_pane == "cart":
            if self.store.cart.lines:
                self.cart_index = (self.cart_index + delta) % len(self.store.cart.lines)
            self._refresh_cart()
        else:
            orders = self._orders()
            if orders:
                self.order_index = (self.order_index + delta) % len(orders)
            self._refresh_orders()

    def action_activate(self) -> None:
        if self._modal_open():
            return
        if self.active_pane != "menu":
            return
        item = self._selected_menu_item()
        if item is None:
            return
        portion = item.portions[self.portion_index % len(item.portions)]
        if self._attempt(lambda: self.store.cart.add(item, portion)):
            self._set_status(f"Added {item.name} ({portion.name}) to your order.")

    def action_place_order(self) -> None:
        if self._modal_open():
            return
        account = self.store.current_account
        if account is None:
            self._set_status("Please log in to place an order.")
            return
        if not self.store.cart.lines:
            self._set_status("Your order is empty.")
            return

        if account.role.is_staff:
            self.push_screen(
                TextEntryModal("Place for customer", "Customer email (blank for yourself)"),
                self._on_customer_chosen,
            )
            return
        self._ask_instructions(None)

    def _on_customer_chosen(self, email: str | None) -> None:
        if email is None:
            return
        email = email.strip()
        if not email:
            self._ask_instructions(None)
            return
        target = self.store.directory.find_by_email(email)
        if target is None:
            self._set_status(f"No user found with email {email}.")
            return
        self._ask_instructions(target)

    def _ask_instructions(self, target: Account | None) -> None:
        def place(instructions: str | None) -> None:
            if instructions is None:
                return
            for_id = target.account_id if target is not None else None
            order = self._attempt(lambda: self.store.place_order(instructions, for_account_id=for_id))
            if order is not None:
                self.cart_index = 0
                self._set_status(f"Order {order.order_id} placed.")

        self.push_screen(TextEntryModal("Instructions", "Special instructions (optional)"), place)

    def _cycle_portion(self) -> None:
        item = self._selected_menu_item()
        if item is None or self.active_pane != "menu":
            return
        self.portion_index = (self.portion_index + 1) % len(item.portions)
        self._refresh_menu()

    def _change_quantity(self, delta: int) -> None:
        line = self._selected_cart_line()
        if line is None:
            return
        self.store.cart.set_quantity(line.item_id, line.portion.name, line.quantity + delta)

    def _remove_cart_line(self) -> None:
        line = self._selected_cart_line()
        if line is None:
            return
        self.store.cart.remove(line.item_id, line.portion.name)

    def _customer_cancel(self) -> None:
        order = self._selected_order()
        account = self.store.current_account
        if order is None or account is None:
            return
        if self._attempt(lambda: self.store.ledger.cancel(order.order_id, account)):
            self._set_status(f"Order {order.order_id} has been cancelled.")

    def _staff_status(self, status: OrderStatus) -> None:
        order = self._selected_order()
        account = self.store.current_account
        if order is None or account is None:
            return
        if self._attempt(lambda: self.store.ledger.update_status(order.order_id, status, account)):
            self._set_status(f"Order {order.order_id} status changed to {status.value}.")

    def _settle_selected(self) -> None:
        order = self._selected_order()
        if order is None or not self._require_staff():
            return
        settled = self._attempt(lambda: self.store.ledger.settle(order.order_id))
        if settled is None:
            return
        self._set_status(f"Order {order.order_id} has been marked as settled.")
        self._print_bill(settled)

    def _settle_all_for_owner(self) -> None:
        order = self._selected_order()
        if order is None or not self._require_staff():
            return
        delivered = [o for o in self.store.ledger.for_account(order.account_id) if o.status is OrderStatus.DELIVERED]
        count = self.store.ledger.settle_all_for_account(order.account_id)
        self._set_status(f"Settled {count} delivered bill(s) for {self._owner_name(order.account_id)}.")
        for settled in delivered:
            if settled.status is OrderStatus.SETTLED:
                self._print_bill(settled)

    def _print_bill(self, order: Order) -> None:
        if self.bill_printer is None:
            return
        try:
            self.bill_printer(order)
        except Exception as exc:
            self._set_status(f"Settled {order.order_id} but print failed: {exc}")
            logger.debug("bill_print_failed order_id=%s error=%r", order.order_id, exc)

    def _open_recommendations(self) -> None:
        account = self.store.current_account
        if account is None:
            self._set_status("Please log in to get recommendations.")
            return
        history = self.store.ledger.for_account(account.account_id)
        self.push_screen(RecommendationsModal(self.recommender, history))

    def _open_admin(self) -> None:
        if not self._require_staff():
            return
        self.push_screen(AdminModal(self.store), lambda _: self._refresh_all())

    def _open_feedback(self) -> None:
        if self.store.current_account is None:
            self._set_status("Please log in to leave feedback.")
            return
        order = self._selected_order()
        fields = [
            FormField("rating", "Rating (1-5)", "5"),
            FormField("comment", "Comment (optional, 10+ characters)"),
            FormField("order_id", "Order ID (optional)", order.order_id if order else ""),
        ]

        def submit(values: dict[str, str]) -> str:
            self.store.submit_feedback(parse_rating(values["rating"]), values["comment"], values["order_id"] or None)
            return "Thank you for your feedback!"

        self.push_screen(FormModal("Feedback", fields, submit), self._on_form_done)

    def _on_form_done(self, message: str | None) -> None:
        if message is not None:
            self._set_status(message)

    def _open_login(self) -> None:
        def done(account: Account | None) -> None:
            if account is not None:
                self._reset_selection()
                self._set_status(f"Welcome, {account.name}!")

        self.push_screen(LoginModal(self.store), done)

    def _logout(self) -> None:
        if self.store.current_account is None:
            return
        self.store.logout()
        self._reset_selection()
        self._set_status("You have been logged out.")

    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def _require_staff(self) -> bool:
        account = self.store.current_account
        if account is None or not account.role.is_staff:
            self._set_status("Permission denied: staff only.")
            return False
        return True

    def _attempt(self, operation: Callable[[], object]) -> object | None:
        try:
            result = operation()
        except CanteenError as exc:
            logger.debug("operation_failed error=%r", exc)
            self._set_status(describe_error(exc))
            return None
        return result if result is not None else True

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_status()

    def _reset_selection(self) -> None:
        self.menu_index = self.portion_index = self.cart_index = self.order_index = 0
        self._refresh_all()

    def _menu_items(self) -> list[MenuItem]:
        return self.store.catalog.available_now()

    def _orders(self) -> list[Order]:
        return sort_by_placed(self.store.visible_orders())

    def _selected_menu_item(self) -> MenuItem | None:
        items = self._menu_items()
        if not items:
            return None
        self.menu_index = min(self.menu_index, len(items) - 1)
        return items[self.menu_index]

    def _selected_cart_line(self) -> CartLine | None:
        lines = self.store.cart.lines
        if self.active_pane != "cart" or not lines:
            return None
        self.cart_index = min(self.cart_index, len(lines) - 1)
        return lines[self.cart_index]

    def _selected_order(self) -> Order | None:
        orders = self._orders()
        if self.active_pane != "orders" or not orders:
            return None
        self.order_index = min(self.order_index, len(orders) - 1)
        return orders[self.order_index]

    def _owner_name(self, account_id: str) -> str:
        try:
            return self.store.directory.get(account_id).name
        except NotFoundError:
            return "Unknown User"

    def _refresh_all(self) -> None:
        self._refresh_menu()
        self._refresh_cart()
        self._refresh_orders()
        self._refresh_status()

    def _refresh_menu(self) -> None:
        try:
            title = self.query_one("#menu-title", Static)
            menu_widget = self.query_one("#menu-list", Static)
        except NoMatches:
            return
        title.update(f"Menu: {self.store.catalog.current_window().value}")
        items = self._menu_items()
        if not items:
            menu_widget.update("(nothing available right now)")
            return
        self.menu_index = min(self.menu_index, len(items) - 1)

        lines = Text()
        for idx, item in enumerate(items):
            if idx > 0:
                lines.append("\n")
            pointer = "➤ " if idx == self.menu_index else "  "
            lines.append(pointer)
            portion_index = self.portion_index if idx == self.menu_index else -1
            lines.append_text(format_menu_item(item, portion_index))
            lines.append(f"\n    {format_window_tags(item.time_windows)}", style="dim")
        menu_widget.update(lines)

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
        except NoMatches:
            return
        cart = self.store.cart
        if not cart.lines:
            self.cart_index = 0
            cart_widget.update("(no items yet)")
            return
        self.cart_index = min(self.cart_index, len(cart.lines) - 1)

        lines = Text()
        for idx, line in enumerate(cart.lines):
            pointer = "➤ " if idx == self.cart_index and self.active_pane == "cart" else "  "
            lines.append(pointer)
            lines.append_text(format_cart_line(line))
            lines.append("\n")
        subtotal = cart.subtotal()
        tax = subtotal * self.store.ledger.tax_rate
        lines.append(f"\nSubtotal {subtotal:.2f}  Tax {tax:.2f}  Total {subtotal + tax:.2f}", style="bold")
        cart_widget.update(lines)

    def _refresh_orders(self) -> None:
        try:
            title = self.query_one("#orders-title", Static)
            orders_widget = self.query_one("#orders-list", Static)
        except NoMatches:
            return
        account = self.store.current_account
        if account is None:
            title.update("Orders")
            orders_widget.update("(log in to see orders)")
            return

        staff_view = account.role.is_staff
        title.update(Text.assemble("Orders ", role_badge(account.role)))
        orders = self._orders()
        if not orders:
            orders_widget.update("You haven't placed any orders yet.")
            return
        self.order_index = min(self.order_index, len(orders) - 1)

        lines = Text()
        for idx, order in enumerate(orders):
            if idx > 0:
                lines.append("\n")
            pointer = "➤ " if idx == self.order_index and self.active_pane == "orders" else "  "
            lines.append(pointer)
            seconds_left = 0
            if account.role is Role.CUSTOMER:
                seconds_left = self.store.ledger.seconds_left_to_cancel(order.order_id)
            owner = self._owner_name(order.account_id) if staff_view else None
            lines.append_text(format_order_row(order, owner, seconds_left))
            if order.instructions:
                lines.append(f"\n      Note: {order.instructions}", style="dim")
        orders_widget.update(lines)

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        account = self.store.current_account
        who = f"{account.name} ({account.role.value})" if account else "not signed in"
        status = self.system_status or "Ready"
        bar.update(
            f"{who} | ←/→ pane, ↑/↓ move, Enter add, p portion, +/- qty, d remove, Ctrl+S order, "
            f"x cancel, c/v/z status, b settle, B settle all, r recs, f feedback, a admin, l login, o logout\n{status}"
        )
