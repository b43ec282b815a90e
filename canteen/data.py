"""Typed demo menu, accounts and order history built from ``constant``."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from canteen.accounts import hash_secret
from canteen.constant import DEMO_ACCOUNTS_RAW, DEMO_ORDERS_RAW, DEMO_SECRET, MENU_ITEMS_RAW
from canteen.ledger import compute_totals
from canteen.models import Account, CartLine, MenuItem, Order, OrderStatus, Portion, Role, TimeWindow


def _menu_item(raw: dict[str, object]) -> MenuItem:
    return MenuItem(
        item_id=str(raw["id"]),
        name=str(raw["name"]),
        description=str(raw["description"]),
        category=str(raw["category"]),
        image_url=str(raw.get("image_url", "")),
        ingredients=list(raw.get("ingredients", [])),  # type: ignore[call-overload]
        offered=bool(raw.get("offered", True)),
        time_windows=frozenset(TimeWindow(w) for w in raw["windows"]),  # type: ignore[attr-defined]
        portions=[Portion(name, float(price)) for name, price in raw["portions"]],  # type: ignore[attr-defined]
    )


def demo_menu() -> list[MenuItem]:
    return [_menu_item(raw) for raw in MENU_ITEMS_RAW]


def demo_accounts() -> list[Account]:
    secret_hash = hash_secret(DEMO_SECRET)
    return [
        Account(
            account_id=raw["id"],
            name=raw["name"],
            email=raw["email"],
            secret_hash=secret_hash,
            role=Role(raw["role"]),
        )
        for raw in DEMO_ACCOUNTS_RAW
    ]


def demo_orders(menu: list[MenuItem], now: datetime | None = None) -> list[Order]:
    """Historic orders for the demo customer, placed well outside any cancellation window."""
    moment = now or datetime.now(timezone.utc)
    by_id = {item.item_id: item for item in menu}
    orders: list[Order] = []
    for order_id, account_id, picks, status, age_hours in DEMO_ORDERS_RAW:
        lines = tuple(
            CartLine(
                item_id=item_id,
                item_name=by_id[item_id].name,
                portion=by_id[item_id].portion(portion_name),
                quantity=quantity,
            )
            for item_id, portion_name, quantity in picks
        )
        subtotal, tax, total = compute_totals(sum(line.line_total for line in lines))
        orders.append(
            Order(
                order_id=order_id,
                account_id=account_id,
                lines=lines,
                subtotal=subtotal,
                tax=tax,
                total=total,
                placed_at=moment - timedelta(hours=age_hours),
                status=OrderStatus(status),
            )
        )
    return orders
