from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from canteen.accounts import AccountDirectory, hash_secret
from canteen.cart import Cart
from canteen.catalog import Catalog
from canteen.ledger import OrderLedger
from canteen.models import Account, MenuItem, Portion, Role, TimeWindow


class FakeClock:
    """Settable clock; call it to read the time."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 4, 13, 0, tzinfo=timezone.utc))


@pytest.fixture
def dosa() -> MenuItem:
    return MenuItem(
        item_id="A",
        name="Masala Dosa",
        description="Crispy rice pancake with spiced potatoes.",
        category="Breakfast",
        portions=[Portion("Full", 150.0)],
        time_windows=frozenset({TimeWindow.BREAKFAST, TimeWindow.SNACKS}),
        ingredients=["Rice", "Lentils", "Potatoes"],
    )


@pytest.fixture
def biryani() -> MenuItem:
    return MenuItem(
        item_id="B",
        name="Chicken Biryani",
        description="Basmati rice cooked with chicken and spices.",
        category="Lunch",
        portions=[Portion("Half", 200.0), Portion("Full", 350.0)],
        time_windows=frozenset({TimeWindow.LUNCH, TimeWindow.DINNER}),
        ingredients=["Basmati Rice", "Chicken"],
    )


@pytest.fixture
def chai() -> MenuItem:
    return MenuItem(
        item_id="C",
        name="Masala Chai",
        description="Black tea boiled in milk with spices.",
        category="Beverages",
        portions=[Portion("Regular", 80.0)],
        time_windows=frozenset({TimeWindow.ALL_DAY}),
    )


@pytest.fixture
def salad() -> MenuItem:
    return MenuItem(
        item_id="D",
        name="Vegetable Caesar Salad",
        description="Romaine lettuce with a vegetarian caesar dressing.",
        category="Lunch",
        portions=[Portion("Full", 220.0)],
        time_windows=frozenset({TimeWindow.ALL_DAY}),
        offered=False,
    )


@pytest.fixture
def catalog(clock, dosa, biryani, chai, salad) -> Catalog:
    return Catalog([dosa, biryani, chai, salad], clock=clock)


@pytest.fixture
def cart() -> Cart:
    return Cart()


@pytest.fixture
def ledger(clock) -> OrderLedger:
    return OrderLedger(clock=clock)


def make_account(account_id: str, role: Role, email: str | None = None, secret: str = "password") -> Account:
    return Account(
        account_id=account_id,
        name=account_id.title(),
        email=email or f"{account_id}@example.com",
        secret_hash=hash_secret(secret),
        role=role,
    )


@pytest.fixture
def alice() -> Account:
    return make_account("alice", Role.CUSTOMER)


@pytest.fixture
def dave() -> Account:
    return make_account("dave", Role.CUSTOMER)


@pytest.fixture
def bob() -> Account:
    return make_account("bob", Role.ADMIN)


@pytest.fixture
def charlie() -> Account:
    return make_account("charlie", Role.SUPERADMIN)


@pytest.fixture
def directory(clock, alice, bob, charlie) -> AccountDirectory:
    return AccountDirectory([alice, bob, charlie], clock=clock)
