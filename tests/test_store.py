from __future__ import annotations

import pytest

from canteen.accounts import AccountDirectory
from canteen.catalog import Catalog
from canteen.errors import AuthorizationError, NotFoundError, ValidationError
from canteen.ledger import OrderLedger
from canteen.models import OrderStatus, Role
from canteen.store import Store


@pytest.fixture
def store(clock, catalog, alice, bob, charlie, dave):
    return Store(
        catalog=catalog,
        ledger=OrderLedger(clock=clock),
        directory=AccountDirectory([alice, bob, charlie, dave], clock=clock),
    )


def test_every_component_change_notifies_subscribers(store, chai, alice):
    seen = []
    unsubscribe = store.subscribe(lambda: seen.append(1))

    store.session.log_in(alice)
    store.cart.add(chai, chai.portions[0])
    store.catalog.delete_item("A")
    store.feedback.submit(alice.account_id, 5)
    assert len(seen) == 4

    unsubscribe()
    unsubscribe()
    store.cart.clear()
    assert len(seen) == 4


def test_login_and_logout(store, alice):
    assert store.login(alice.email, "password") is alice
    assert store.current_account is alice
    store.logout()
    assert store.current_account is None
    with pytest.raises(AuthorizationError):
        store.require_account()


def test_register_signs_the_new_account_in(store):
    account = store.register("Erin", "erin@example.com", "s3cret!")
    assert store.current_account is account


def test_place_order_requires_sign_in(store, chai):
    store.cart.add(chai, chai.portions[0])
    with pytest.raises(AuthorizationError):
        store.place_order()
    assert len(store.cart) == 1


def test_customer_places_own_order(store, alice, chai):
    store.session.log_in(alice)
    store.cart.add(chai, chai.portions[0], 2)
    order = store.place_order("less sugar")
    assert order.account_id == alice.account_id
    assert order.instructions == "less sugar"
    assert store.visible_orders() == [order]
    assert not store.cart.lines


def test_staff_places_order_for_customer(store, bob, dave, chai):
    store.session.log_in(bob)
    store.cart.add(chai, chai.portions[0])
    order = store.place_order(for_account_id=dave.account_id)
    assert order.account_id == dave.account_id
    assert order.status is OrderStatus.PENDING


def test_on_behalf_rules(store, alice, bob, charlie, dave, chai):
    store.cart.add(chai, chai.portions[0])

    store.session.log_in(alice)
    with pytest.raises(AuthorizationError):
        store.place_order(for_account_id=dave.account_id)

    store.session.log_in(bob)
    with pytest.raises(ValidationError):
        store.place_order(for_account_id=charlie.account_id)
    with pytest.raises(NotFoundError):
        store.place_order(for_account_id="ghost")

    assert store.ledger.orders() == []
    assert len(store.cart) == 1


def test_visible_orders_scoped_by_role(store, alice, bob, dave, chai):
    store.session.log_in(alice)
    store.cart.add(chai, chai.portions[0])
    mine = store.place_order()
    store.session.log_in(dave)
    store.cart.add(chai, chai.portions[0])
    theirs = store.place_order()

    assert store.visible_orders() == [theirs]
    store.session.log_in(bob)
    assert {o.order_id for o in store.visible_orders()} == {mine.order_id, theirs.order_id}
    store.logout()
    assert store.visible_orders() == []


def test_seeded_store():
    store = Store.seeded()
    alice = store.login("alice@example.com", "password")
    assert alice.role is Role.CUSTOMER
    assert {o.order_id for o in store.visible_orders()} == {"ORD001", "ORD002", "ORD003"}
    assert store.ledger.get("ORD001").total == pytest.approx(store.ledger.get("ORD001").subtotal * 1.05)
    assert not store.ledger.is_cancellable("ORD002")
    assert not store.catalog.get("4").offered
    assert isinstance(store.catalog, Catalog)


def test_submit_feedback_uses_signed_in_account(store, alice):
    with pytest.raises(AuthorizationError):
        store.submit_feedback(5, "Great food and quick service.")
    store.session.log_in(alice)
    entry = store.submit_feedback(4, "Great food and quick service.", "ORD001")
    assert entry.account_id == alice.account_id
    assert store.feedback.entries() == [entry]
