"""Single state container shared by the UI."""

from __future__ import annotations

import logging
from typing import Callable

from canteen.accounts import AccountDirectory
from canteen.cart import Cart
from canteen.catalog import Catalog
from canteen.data import demo_accounts, demo_menu, demo_orders
from canteen.errors import AuthorizationError, ValidationError
from canteen.feedback import FeedbackBox
from canteen.ledger import OrderLedger
from canteen.models import Account, Feedback, Order, Role
from canteen.session import Session

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Store:
    """
    Owns one of each component and fans their change events out to listeners.

    All mutation goes through the component APIs; views subscribe and
    re-render on every notification.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        ledger: OrderLedger | None = None,
        directory: AccountDirectory | None = None,
        cart: Cart | None = None,
        session: Session | None = None,
        feedback: FeedbackBox | None = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else Catalog()
        self.ledger = ledger if ledger is not None else OrderLedger()
        self.directory = directory if directory is not None else AccountDirectory()
        self.cart = cart if cart is not None else Cart()
        self.session = session if session is not None else Session()
        self.feedback = feedback if feedback is not None else FeedbackBox()
        self._listeners: list[Listener] = []
        for component in (self.catalog, self.ledger, self.directory, self.cart, self.session, self.feedback):
            component.on_change = self.notify

    @classmethod
    def seeded(cls) -> Store:
        menu = demo_menu()
        return cls(
            catalog=Catalog(menu),
            ledger=OrderLedger(demo_orders(menu)),
            directory=AccountDirectory(demo_accounts()),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @property
    def current_account(self) -> Account | None:
        return self.session.current

    def require_account(self) -> Account:
        account = self.session.current
        if account is None:
            raise AuthorizationError("sign in first")
        return account

    def login(self, email: str, secret: str) -> Account:
        account = self.directory.login(email, secret)
        self.session.log_in(account)
        return account

    def logout(self) -> None:
        self.session.log_out()

    def register(self, name: str, email: str, secret: str) -> Account:
        account = self.directory.register(name, email, secret)
        self.session.log_in(account)
        return account

    def place_order(self, instructions: str | None = None, for_account_id: str | None = None) -> Order:
        """Place the cart for the signed-in customer, or for a customer chosen by staff."""
        acting = self.require_account()
        target_id = acting.account_id
        if for_account_id is not None and for_account_id != acting.account_id:
            if not acting.role.is_staff:
                raise AuthorizationError("only staff may order on behalf of another account")
            target = self.directory.get(for_account_id)
            if target.role is not Role.CUSTOMER:
                raise ValidationError("orders may only be placed for customer accounts")
            target_id = target.account_id
            logger.debug("place_on_behalf acting=%s target=%s", acting.account_id, target_id)
        return self.ledger.place(self.cart, target_id, instructions)

    def visible_orders(self) -> list[Order]:
        account = self.session.current
        if account is None:
            return []
        return self.ledger.list_for(account.account_id, account.role)

    def submit_feedback(self, rating: int, comment: str | None = None, order_id: str | None = None) -> Feedback:
        account = self.require_account()
        return self.feedback.submit(account.account_id, rating, comment, order_id)
