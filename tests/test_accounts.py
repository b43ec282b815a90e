from __future__ import annotations

import pytest

from canteen.accounts import parse_role
from canteen.errors import (
    AuthorizationError,
    CannotDeleteSelf,
    DuplicateEmail,
    DuplicateError,
    InvalidCredentials,
    NotFoundError,
    RequestNotFound,
    ValidationError,
    WeakSecret,
)
from canteen.models import Role


def test_register_creates_customer(directory):
    account = directory.register("Erin", "erin@example.com", "s3cret!")
    assert account.role is Role.CUSTOMER
    assert account.secret_hash != "s3cret!"
    assert directory.login("erin@example.com", "s3cret!") is account


def test_register_duplicate_email_never_creates_second_account(directory):
    before = len(directory.accounts())
    with pytest.raises(DuplicateError):
        directory.register("Alice Again", "alice@example.com", "password")
    assert len(directory.accounts()) == before


def test_register_email_comparison_is_exact(directory):
    account = directory.register("Alice Upper", "Alice@example.com", "password")
    assert account.email == "Alice@example.com"


def test_register_validates_secret_and_name(directory):
    with pytest.raises(WeakSecret):
        directory.register("Erin", "erin@example.com", "12345")
    with pytest.raises(ValidationError):
        directory.register("E", "erin@example.com", "123456")
    assert directory.find_by_email("erin@example.com") is None


def test_login_does_not_say_which_field_was_wrong(directory):
    with pytest.raises(InvalidCredentials) as wrong_secret:
        directory.login("alice@example.com", "nope-nope")
    with pytest.raises(InvalidCredentials) as unknown_email:
        directory.login("nobody@example.com", "password")
    assert str(wrong_secret.value) == str(unknown_email.value)


def test_add_account_is_superadmin_only(directory, bob, alice, charlie):
    for acting in (bob, alice):
        with pytest.raises(AuthorizationError):
            directory.add_account(acting, "Frank", "frank@example.com", "password", Role.ADMIN)

    frank = directory.add_account(charlie, "Frank", "frank@example.com", "password", Role.ADMIN)
    assert frank.role is Role.ADMIN
    with pytest.raises(DuplicateEmail):
        directory.add_account(charlie, "Frank Two", "frank@example.com", "password")
    assert [a.email for a in directory.accounts()].count("frank@example.com") == 1


def test_update_account(directory, charlie, alice, bob):
    directory.update_account(charlie, alice.account_id, email=alice.email, name="Alice Smith")
    assert alice.name == "Alice Smith"

    with pytest.raises(DuplicateEmail):
        directory.update_account(charlie, alice.account_id, email=bob.email)
    assert alice.email == "alice@example.com"

    directory.update_account(charlie, alice.account_id, role=Role.ADMIN)
    assert alice.role is Role.ADMIN

    with pytest.raises(AuthorizationError):
        directory.update_account(bob, alice.account_id, name="Hacked")
    with pytest.raises(NotFoundError):
        directory.update_account(charlie, "ghost", name="Ghost")


def test_delete_self_is_rejected(directory, charlie):
    with pytest.raises(CannotDeleteSelf):
        directory.delete_account(charlie, charlie.account_id)
    with pytest.raises(AuthorizationError):
        directory.delete_account(charlie, charlie.account_id)
    assert directory.get(charlie.account_id) is charlie


def test_delete_account(directory, charlie, alice, bob):
    with pytest.raises(AuthorizationError):
        directory.delete_account(bob, alice.account_id)
    directory.delete_account(charlie, alice.account_id)
    with pytest.raises(NotFoundError):
        directory.get(alice.account_id)
    with pytest.raises(NotFoundError):
        directory.delete_account(charlie, alice.account_id)


def test_change_secret(directory, charlie, alice, bob):
    with pytest.raises(WeakSecret):
        directory.change_secret(charlie, alice.account_id, "short")
    with pytest.raises(AuthorizationError):
        directory.change_secret(bob, alice.account_id, "longenough")

    directory.change_secret(charlie, alice.account_id, "longenough")
    assert directory.login(alice.email, "longenough") is alice


def test_reset_all_secrets(directory, charlie, bob, alice):
    with pytest.raises(WeakSecret):
        directory.reset_all_secrets(charlie, "abc")
    with pytest.raises(AuthorizationError):
        directory.reset_all_secrets(bob, "everyone1")

    assert directory.reset_all_secrets(charlie, "everyone1") == 3
    for account in (alice, bob, charlie):
        assert directory.login(account.email, "everyone1") is account


def test_reset_request_flow(directory, charlie, alice, clock):
    assert directory.request_reset("nobody@example.com") is False
    assert directory.reset_requests() == []

    assert directory.request_reset(alice.email) is True
    (request,) = directory.reset_requests()
    assert request.account_id == alice.account_id
    assert request.created_at == clock.now

    with pytest.raises(WeakSecret):
        directory.resolve_reset(charlie, request.request_id, "tiny")
    assert directory.reset_requests() == [request]

    directory.resolve_reset(charlie, request.request_id, "brand-new")
    assert directory.reset_requests() == []
    assert directory.login(alice.email, "brand-new") is alice


def test_resolving_twice_fails_and_leaves_state_alone(directory, charlie, alice):
    directory.request_reset(alice.email)
    (request,) = directory.reset_requests()
    directory.resolve_reset(charlie, request.request_id, "brand-new")

    with pytest.raises(RequestNotFound):
        directory.resolve_reset(charlie, request.request_id, "other-secret")
    with pytest.raises(NotFoundError):
        directory.resolve_reset(charlie, request.request_id, "other-secret")
    assert directory.login(alice.email, "brand-new") is alice


def test_resolve_reset_requires_superadmin(directory, bob, alice):
    directory.request_reset(alice.email)
    (request,) = directory.reset_requests()
    with pytest.raises(AuthorizationError):
        directory.resolve_reset(bob, request.request_id, "brand-new")
    assert directory.reset_requests() == [request]


def test_customers_lists_only_customers(directory, alice):
    assert directory.customers() == [alice]


@pytest.mark.parametrize("email", ["", "   ", "not-an-email", "erin@", "@example.com"])
def test_register_rejects_malformed_email(directory, email):
    before = len(directory.accounts())
    with pytest.raises(ValidationError):
        directory.register("Erin", email, "password")
    assert len(directory.accounts()) == before


def test_add_and_update_account_reject_malformed_email(directory, charlie, alice):
    with pytest.raises(ValidationError):
        directory.add_account(charlie, "Frank", "frank-at-example", "password")
    with pytest.raises(ValidationError):
        directory.update_account(charlie, alice.account_id, email="alice.example.com")
    assert alice.email == "alice@example.com"


def test_parse_role():
    assert parse_role(" Admin ") is Role.ADMIN
    with pytest.raises(ValidationError):
        parse_role("chef")
