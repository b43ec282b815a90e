"""Current-account tracking for one UI session."""

from __future__ import annotations

import json
import logging
from typing import Callable

from canteen.errors import ValidationError
from canteen.models import Account, Role

logger = logging.getLogger(__name__)


class Session:
    """
    Holds the signed-in account for the life of the app.

    ``restore`` trusts a previously dumped blob without checking credentials
    again, the same way the tab-local storage it replaces did.
    """

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        self._current: Account | None = None
        self.on_change = on_change

    @property
    def current(self) -> Account | None:
        return self._current

    def log_in(self, account: Account) -> None:
        self._current = account
        logger.debug("session_login account_id=%s", account.account_id)
        self._changed()

    def log_out(self) -> None:
        if self._current is None:
            return
        logger.debug("session_logout account_id=%s", self._current.account_id)
        self._current = None
        self._changed()

    def dump(self) -> str | None:
        if self._current is None:
            return None
        account = self._current
        return json.dumps(
            {
                "id": account.account_id,
                "name": account.name,
                "email": account.email,
                "role": account.role.value,
            }
        )

    def restore(self, blob: str) -> Account:
        try:
            raw = json.loads(blob)
            account = Account(
                account_id=str(raw["id"]),
                name=str(raw["name"]),
                email=str(raw["email"]),
                secret_hash="",
                role=Role(raw["role"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise ValidationError(f"malformed session blob: {exc}") from exc
        self.log_in(account)
        return account

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
