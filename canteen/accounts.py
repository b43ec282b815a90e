"""Account directory: registration, login, staff account management and password resets."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable
from uuid import uuid4

from pydantic import BaseModel, EmailStr
from pydantic import ValidationError as SchemaError
from werkzeug.security import check_password_hash, generate_password_hash

from canteen.config import MIN_NAME_LENGTH, MIN_SECRET_LENGTH
from canteen.errors import (
    AuthorizationError,
    CannotDeleteSelf,
    DuplicateEmail,
    InvalidCredentials,
    NotFoundError,
    RequestNotFound,
    ValidationError,
    WeakSecret,
)
from canteen.models import Account, PasswordResetRequest, Role

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_secret(secret: str) -> str:
    return generate_password_hash(secret)


def _check_secret_strength(secret: str) -> None:
    if len(secret) < MIN_SECRET_LENGTH:
        raise WeakSecret(f"secret must be at least {MIN_SECRET_LENGTH} characters")


def _check_name(name: str) -> None:
    if len(name.strip()) < MIN_NAME_LENGTH:
        raise ValidationError("name is required")


class _EmailField(BaseModel):
    email: EmailStr


def _check_email(email: str) -> None:
    try:
        _EmailField(email=email)
    except SchemaError as exc:
        raise ValidationError(f"invalid email address {email!r}") from exc


def parse_role(raw: str) -> Role:
    try:
        return Role(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(role.value for role in Role)
        raise ValidationError(f"unknown role {raw.strip()!r}; use {choices}") from exc


def _require_superadmin(acting: Account) -> None:
    if acting.role is Role.SUPERADMIN:
        return
    if acting.role is Role.ADMIN or acting.role is Role.CUSTOMER:
        raise AuthorizationError(f"{acting.role.value} may not manage accounts")
    raise AssertionError(f"unhandled role {acting.role!r}")


class AccountDirectory:
    """
    Owns accounts and pending reset requests.

    Emails are compared exactly as typed; ``Alice@x`` and ``alice@x`` are
    different accounts.
    """

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        clock: Clock = _utc_now,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._accounts: dict[str, Account] = {}
        self._reset_requests: dict[str, PasswordResetRequest] = {}
        self.clock = clock
        self.on_change = on_change
        self._lock = threading.RLock()
        for account in accounts:
            if self._email_taken(account.email):
                raise DuplicateEmail(f"duplicate email {account.email}")
            self._accounts[account.account_id] = account

    def accounts(self) -> list[Account]:
        return list(self._accounts.values())

    def customers(self) -> list[Account]:
        return [account for account in self._accounts.values() if account.role is Role.CUSTOMER]

    def get(self, account_id: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"unknown account {account_id}")
        return account

    def find_by_email(self, email: str) -> Account | None:
        for account in self._accounts.values():
            if account.email == email:
                return account
        return None

    def reset_requests(self) -> list[PasswordResetRequest]:
        return sorted(self._reset_requests.values(), key=lambda req: req.created_at)

    def register(self, name: str, email: str, secret: str) -> Account:
        _check_name(name)
        _check_secret_strength(secret)
        account = self._insert(name, email, secret, Role.CUSTOMER)
        logger.debug("account_registered account_id=%s", account.account_id)
        return account

    def login(self, email: str, secret: str) -> Account:
        account = self.find_by_email(email)
        if account is None or not check_password_hash(account.secret_hash, secret):
            logger.warning("login_failed email=%r", email)
            raise InvalidCredentials("invalid email or password")
        return account

    def add_account(self, acting: Account, name: str, email: str, secret: str, role: Role = Role.CUSTOMER) -> Account:
        _require_superadmin(acting)
        _check_name(name)
        _check_secret_strength(secret)
        account = self._insert(name, email, secret, role)
        logger.debug("account_added account_id=%s role=%s by=%s", account.account_id, role.value, acting.account_id)
        return account

    def update_account(
        self,
        acting: Account,
        account_id: str,
        name: str | None = None,
        email: str | None = None,
        role: Role | None = None,
    ) -> Account:
        _require_superadmin(acting)
        with self._lock:
            account = self.get(account_id)
            if name is not None:
                _check_name(name)
            if email is not None:
                _check_email(email)
            if email is not None and email != account.email and self._email_taken(email):
                raise DuplicateEmail(f"an account with {email} already exists")
            if name is not None:
                account.name = name.strip()
            if email is not None:
                account.email = email
            if role is not None:
                account.role = role
        logger.debug("account_updated account_id=%s by=%s", account_id, acting.account_id)
        self._changed()
        return account

    def delete_account(self, acting: Account, account_id: str) -> None:
        _require_superadmin(acting)
        if acting.account_id == account_id:
            raise CannotDeleteSelf("cannot delete the signed-in account")
        with self._lock:
            self.get(account_id)
            del self._accounts[account_id]
            for request_id in [r.request_id for r in self._reset_requests.values() if r.account_id == account_id]:
                del self._reset_requests[request_id]
        logger.debug("account_deleted account_id=%s by=%s", account_id, acting.account_id)
        self._changed()

    def change_secret(self, acting: Account, account_id: str, new_secret: str) -> None:
        _require_superadmin(acting)
        _check_secret_strength(new_secret)
        account = self.get(account_id)
        account.secret_hash = hash_secret(new_secret)
        logger.debug("secret_changed account_id=%s by=%s", account_id, acting.account_id)
        self._changed()

    def reset_all_secrets(self, acting: Account, new_secret: str) -> int:
        _require_superadmin(acting)
        _check_secret_strength(new_secret)
        secret_hash = hash_secret(new_secret)
        with self._lock:
            for account in self._accounts.values():
                account.secret_hash = secret_hash
            count = len(self._accounts)
        logger.debug("secrets_reset count=%d by=%s", count, acting.account_id)
        self._changed()
        return count

    def request_reset(self, email: str) -> bool:
        """File a reset request for ``email``; False when no account uses it."""
        account = self.find_by_email(email)
        if account is None:
            return False
        request = PasswordResetRequest(
            request_id=f"req-{uuid4().hex[:8]}",
            account_id=account.account_id,
            email=account.email,
            created_at=self.clock(),
        )
        with self._lock:
            self._reset_requests[request.request_id] = request
        logger.debug("reset_requested request_id=%s account_id=%s", request.request_id, account.account_id)
        self._changed()
        return True

    def resolve_reset(self, acting: Account, request_id: str, new_secret: str) -> Account:
        _require_superadmin(acting)
        _check_secret_strength(new_secret)
        with self._lock:
            request = self._reset_requests.get(request_id)
            if request is None:
                raise RequestNotFound(f"unknown reset request {request_id}")
            account = self.get(request.account_id)
            account.secret_hash = hash_secret(new_secret)
            del self._reset_requests[request_id]
        logger.debug("reset_resolved request_id=%s by=%s", request_id, acting.account_id)
        self._changed()
        return account

    def _insert(self, name: str, email: str, secret: str, role: Role) -> Account:
        _check_email(email)
        with self._lock:
            if self._email_taken(email):
                raise DuplicateEmail(f"an account with {email} already exists")
            account = Account(
                account_id=f"user-{uuid4().hex[:8]}",
                name=name.strip(),
                email=email,
                secret_hash=hash_secret(secret),
                role=role,
            )
            self._accounts[account.account_id] = account
        self._changed()
        return account

    def _email_taken(self, email: str) -> bool:
        return any(account.email == email for account in self._accounts.values())

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
