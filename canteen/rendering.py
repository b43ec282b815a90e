"""Rendering helpers for menu, cart and order rows."""

from __future__ import annotations

from rich.text import Text

from canteen.errors import (
    AuthorizationError,
    CancellationWindowExpired,
    CanteenError,
    DuplicateError,
    EmptyCartError,
    InvalidSettlementState,
    ItemUnavailable,
    NotFoundError,
    OrderTerminalError,
    StateConflictError,
    ValidationError,
)
from canteen.models import CartLine, MenuItem, Order, OrderStatus, Role, TimeWindow
from canteen.printer import money


def status_style(status: OrderStatus) -> str:
    """Return a consistent badge style for order statuses."""
    if status is OrderStatus.PENDING:
        return "bold #0b1f0f on #e0c341"
    if status is OrderStatus.CONFIRMED:
        return "bold #ffffff on #2f6db5"
    if status is OrderStatus.DELIVERED:
        return "bold #0b1f0f on #5fbf72"
    if status is OrderStatus.CANCELLED:
        return "bold #ffffff on #b23a48"
    return "bold #ffffff on #555555"


def role_badge(role: Role) -> Text:
    style = "bold #ffffff on #b23a48" if role.is_staff else "bold #0b1f0f on #5fbf72"
    return Text(f" {role.value} ", style=style)


def format_window_tags(windows: frozenset[TimeWindow]) -> str:
    ordered = [window.value for window in TimeWindow if window in windows]
    return ", ".join(ordered)


def format_menu_item(item: MenuItem, portion_index: int = 0) -> Text:
    """Render a menu row with the currently selected portion highlighted."""
    text = Text()
    text.append(item.name, style="bold")
    text.append(f"  [{item.category}]", style="dim")
    text.append("\n    ")
    for idx, portion in enumerate(item.portions):
        if idx > 0:
            text.append("  ")
        label = f"{portion.name} {money(portion.price)}"
        if idx == portion_index:
            text.append(f"<{label}>", style="reverse")
        else:
            text.append(label)
    return text


def format_cart_line(line: CartLine) -> Text:
    text = Text()
    text.append(f"{line.quantity} x ", style="bold")
    text.append(f"{line.item_name} ({line.portion.name})")
    text.append(f"  {money(line.line_total)}", style="dim")
    return text


def format_order_row(order: Order, owner_name: str | None = None, seconds_left: int = 0) -> Text:
    """Render one order with its status badge and, while open, its cancel countdown."""
    text = Text()
    text.append(f" {order.status.value} ", style=status_style(order.status))
    text.append(f" {order.order_id}  {money(order.total)}")
    text.append(f"  {order.placed_at.astimezone().strftime('%Y-%m-%d %H:%M')}", style="dim")
    if owner_name:
        text.append(f"  for {owner_name}", style="italic")
    if seconds_left > 0:
        text.append(f"  cancel {seconds_left}s", style="bold #ffb3b3")
    return text


def describe_error(exc: CanteenError) -> str:
    """Translate a core failure into status-bar text."""
    if isinstance(exc, EmptyCartError):
        return "Your order is empty."
    if isinstance(exc, ItemUnavailable):
        return "That item is not available right now."
    if isinstance(exc, CancellationWindowExpired):
        return "The cancellation window for this order has passed."
    if isinstance(exc, InvalidSettlementState):
        return "Order must be Delivered to settle the bill."
    if isinstance(exc, OrderTerminalError):
        return "That order is closed and cannot change."
    if isinstance(exc, StateConflictError):
        return f"Not allowed now: {exc}"
    if isinstance(exc, AuthorizationError):
        return f"Permission denied: {exc}"
    if isinstance(exc, DuplicateError):
        return "A user with this email already exists."
    if isinstance(exc, NotFoundError):
        return f"Not found: {exc}"
    if isinstance(exc, ValidationError):
        return f"Invalid input: {exc}"
    return str(exc)
