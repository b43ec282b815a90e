"""Transient cart for the active session."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterator

from canteen.errors import ItemUnavailable, ValidationError
from canteen.models import CartKey, CartLine, MenuItem, Portion

logger = logging.getLogger(__name__)


class Cart:
    """Ordered (item, portion, quantity) selections keyed by item id and portion name."""

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        self._lines: list[CartLine] = []
        self.on_change = on_change

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(tuple(self._lines))

    def add(self, item: MenuItem, portion: Portion, quantity: int = 1) -> CartLine:
        if not item.offered:
            raise ItemUnavailable(f"{item.name} is not currently offered")
        if quantity < 1:
            raise ValidationError("quantity must be at least 1")
        if portion not in item.portions:
            raise ValidationError(f"{portion.name!r} is not a portion of {item.name}")

        key: CartKey = (item.item_id, portion.name)
        idx = self._index_of(key)
        if idx is None:
            line = CartLine(item_id=item.item_id, item_name=item.name, portion=portion, quantity=quantity)
            self._lines.append(line)
        else:
            line = replace(self._lines[idx], quantity=self._lines[idx].quantity + quantity)
            self._lines[idx] = line
        logger.debug("cart_add key=%s quantity=%d", key, line.quantity)
        self._changed()
        return line

    def remove(self, item_id: str, portion_name: str) -> None:
        idx = self._index_of((item_id, portion_name))
        if idx is None:
            return
        del self._lines[idx]
        logger.debug("cart_remove key=%s", (item_id, portion_name))
        self._changed()

    def set_quantity(self, item_id: str, portion_name: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(item_id, portion_name)
            return
        idx = self._index_of((item_id, portion_name))
        if idx is None:
            return
        self._lines[idx] = replace(self._lines[idx], quantity=quantity)
        self._changed()

    def clear(self) -> None:
        if not self._lines:
            return
        self._lines.clear()
        self._changed()

    def subtotal(self) -> float:
        return sum(line.line_total for line in self._lines)

    def _index_of(self, key: CartKey) -> int | None:
        for idx, line in enumerate(self._lines):
            if line.key == key:
                return idx
        return None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
