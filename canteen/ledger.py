"""Order ledger: placement, status state machine, cancellation and settlement."""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable
from uuid import uuid4

from canteen.cart import Cart
from canteen.config import CANCELLATION_WINDOW_SECONDS, TAX_RATE
from canteen.errors import (
    AuthorizationError,
    CancellationWindowExpired,
    EmptyCartError,
    InvalidSettlementState,
    NotFoundError,
    OrderTerminalError,
    StateConflictError,
)
from canteen.models import Account, Order, OrderStatus, Role

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.SETTLED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.SETTLED: frozenset(),
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def compute_totals(subtotal: float, tax_rate: float = TAX_RATE) -> tuple[float, float, float]:
    """Return (subtotal, tax, total) for a cart subtotal."""
    tax = subtotal * tax_rate
    return (subtotal, tax, subtotal + tax)


class OrderLedger:
    """Owns every placed order and is the only writer of order status."""

    def __init__(
        self,
        orders: Iterable[Order] = (),
        clock: Clock = _utc_now,
        tax_rate: float = TAX_RATE,
        cancellation_window: timedelta = timedelta(seconds=CANCELLATION_WINDOW_SECONDS),
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._orders: dict[str, Order] = {order.order_id: order for order in orders}
        self.clock = clock
        self.tax_rate = tax_rate
        self.cancellation_window = cancellation_window
        self.on_change = on_change
        self._lock = threading.RLock()

    def orders(self) -> list[Order]:
        return list(self._orders.values())

    def get(self, order_id: str) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError(f"unknown order {order_id}")
        return order

    def for_account(self, account_id: str) -> list[Order]:
        return [order for order in self._orders.values() if order.account_id == account_id]

    def list_for(self, account_id: str, role: Role) -> list[Order]:
        """Customers see their own orders; staff see every order."""
        if role.is_staff:
            return self.orders()
        return self.for_account(account_id)

    def place(self, cart: Cart, account_id: str, instructions: str | None = None) -> Order:
        if not cart.lines:
            raise EmptyCartError("cannot place an empty order")

        subtotal, tax, total = compute_totals(cart.subtotal(), self.tax_rate)
        note = instructions.strip() if instructions else ""
        with self._lock:
            order = Order(
                order_id=self._new_order_id(),
                account_id=account_id,
                lines=cart.lines,
                subtotal=subtotal,
                tax=tax,
                total=total,
                placed_at=self.clock(),
                instructions=note or None,
            )
            self._orders[order.order_id] = order
        cart.clear()
        logger.debug(
            "order_placed order_id=%s account_id=%s lines=%d total=%.2f",
            order.order_id,
            account_id,
            len(order.lines),
            order.total,
        )
        self._changed()
        return order

    def is_cancellable(self, order_id: str, at: datetime | None = None) -> bool:
        """Whether the order is still inside its self-cancellation window at ``at``."""
        order = self.get(order_id)
        return self._within_window(order, at or self.clock())

    def seconds_left_to_cancel(self, order_id: str, at: datetime | None = None) -> int:
        order = self.get(order_id)
        moment = at or self.clock()
        if not self._within_window(order, moment):
            return 0
        remaining = (order.placed_at + self.cancellation_window - moment).total_seconds()
        return max(0, math.ceil(remaining))

    def cancel(self, order_id: str, acting_account: Account) -> Order:
        with self._lock:
            order = self.get(order_id)
            if acting_account.role is not Role.CUSTOMER:
                raise AuthorizationError("only the ordering customer may self-cancel")
            if order.account_id != acting_account.account_id:
                raise AuthorizationError(f"order {order_id} belongs to another account")
            if not self._within_window(order, self.clock()):
                logger.warning("cancel_rejected order_id=%s status=%s", order_id, order.status.value)
                raise CancellationWindowExpired(f"order {order_id} can no longer be cancelled")
            order.status = OrderStatus.CANCELLED
        logger.debug("order_cancelled order_id=%s", order_id)
        self._changed()
        return order

    def update_status(self, order_id: str, new_status: OrderStatus, acting_account: Account) -> Order:
        if not acting_account.role.is_staff:
            raise AuthorizationError("only staff may change order status")
        with self._lock:
            order = self.get(order_id)
            if order.status.is_terminal:
                logger.warning("status_rejected order_id=%s terminal=%s", order_id, order.status.value)
                raise OrderTerminalError(f"order {order_id} is {order.status.value}")
            if new_status not in ALLOWED_TRANSITIONS[order.status]:
                logger.warning(
                    "status_rejected order_id=%s from=%s to=%s", order_id, order.status.value, new_status.value
                )
                raise StateConflictError(f"cannot move order {order_id} from {order.status.value} to {new_status.value}")
            order.status = new_status
        logger.debug("order_status order_id=%s status=%s", order_id, new_status.value)
        self._changed()
        return order

    def settle(self, order_id: str) -> Order:
        with self._lock:
            order = self.get(order_id)
            if order.status is not OrderStatus.DELIVERED:
                logger.warning("settle_rejected order_id=%s status=%s", order_id, order.status.value)
                raise InvalidSettlementState(f"order {order_id} must be Delivered to settle")
            order.status = OrderStatus.SETTLED
        logger.debug("order_settled order_id=%s", order_id)
        self._changed()
        return order

    def settle_all_for_account(self, account_id: str) -> int:
        """Settle every Delivered order of one account; return how many changed."""
        count = 0
        with self._lock:
            for order in self._orders.values():
                if order.account_id == account_id and order.status is OrderStatus.DELIVERED:
                    order.status = OrderStatus.SETTLED
                    count += 1
        logger.debug("orders_settled account_id=%s count=%d", account_id, count)
        if count:
            self._changed()
        return count

    def _within_window(self, order: Order, moment: datetime) -> bool:
        if order.status is not OrderStatus.PENDING:
            return False
        return moment - order.placed_at < self.cancellation_window

    def _new_order_id(self) -> str:
        while True:
            order_id = f"ORD{uuid4().hex[:8].upper()}"
            if order_id not in self._orders:
                return order_id

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()


def filter_by_id(orders: Iterable[Order], text: str) -> list[Order]:
    needle = text.strip().lower()
    return [order for order in orders if needle in order.order_id.lower()]


def filter_by_status(orders: Iterable[Order], text: str) -> list[Order]:
    needle = text.strip().lower()
    return [order for order in orders if needle in order.status.value.lower()]


def filter_by_date_range(
    orders: Iterable[Order], start: datetime | None = None, end: datetime | None = None
) -> list[Order]:
    """Keep orders placed within [start, end]; either bound may be open."""
    return [
        order
        for order in orders
        if (start is None or order.placed_at >= start) and (end is None or order.placed_at <= end)
    ]


def search_orders(orders: Iterable[Order], text: str) -> list[Order]:
    """Match the admin search box: order id, account id or status."""
    needle = text.strip().lower()
    return [
        order
        for order in orders
        if needle in order.order_id.lower()
        or needle in order.account_id.lower()
        or needle in order.status.value.lower()
    ]


def sort_by_placed(orders: Iterable[Order], descending: bool = True) -> list[Order]:
    return sorted(orders, key=lambda order: order.placed_at, reverse=descending)
