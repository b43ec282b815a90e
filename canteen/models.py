"""Domain models for canteen ordering."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from canteen.errors import NotFoundError


class TimeWindow(Enum):
    """Day-part tag gating when an item is orderable."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"
    ALL_DAY = "All Day"


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @property
    def is_staff(self) -> bool:
        if self is Role.CUSTOMER:
            return False
        if self is Role.ADMIN or self is Role.SUPERADMIN:
            return True
        raise AssertionError(f"unhandled role {self!r}")


class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    SETTLED = "Settled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.CANCELLED, OrderStatus.SETTLED)


@dataclass(frozen=True)
class Portion:
    """A named, separately priced serving size."""

    name: str
    price: float


@dataclass
class MenuItem:
    """A menu entry with one or more portions and availability windows."""

    item_id: str
    name: str
    description: str
    category: str
    portions: list[Portion]
    time_windows: frozenset[TimeWindow]
    image_url: str = ""
    ingredients: list[str] = field(default_factory=list)
    offered: bool = True

    def portion(self, name: str) -> Portion:
        for portion in self.portions:
            if portion.name == name:
                return portion
        raise NotFoundError(f"item {self.item_id} has no portion {name!r}")


CartKey = tuple[str, str]


@dataclass(frozen=True)
class CartLine:
    """A by-value cart selection; placed orders keep these as their snapshot."""

    item_id: str
    item_name: str
    portion: Portion
    quantity: int

    @property
    def key(self) -> CartKey:
        return (self.item_id, self.portion.name)

    @property
    def line_total(self) -> float:
        return self.portion.price * self.quantity


@dataclass
class Order:
    """A placed order. Only the ledger mutates ``status``."""

    order_id: str
    account_id: str
    lines: tuple[CartLine, ...]
    subtotal: float
    tax: float
    total: float
    placed_at: datetime
    status: OrderStatus = OrderStatus.PENDING
    instructions: str | None = None


@dataclass
class Account:
    account_id: str
    name: str
    email: str
    secret_hash: str
    role: Role = Role.CUSTOMER


@dataclass(frozen=True)
class PasswordResetRequest:
    """An unresolved self-service reset ask awaiting a superadmin."""

    request_id: str
    account_id: str
    email: str
    created_at: datetime


@dataclass(frozen=True)
class Feedback:
    feedback_id: str
    account_id: str
    rating: int
    created_at: datetime
    comment: str | None = None
    order_id: str | None = None
