"""Menu catalog and time-of-day availability."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable
from uuid import uuid4

from canteen.config import MIN_DESCRIPTION_LENGTH, MIN_NAME_LENGTH
from canteen.errors import NotFoundError, ValidationError
from canteen.models import MenuItem, Portion, TimeWindow

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_EDITABLE_FIELDS = {
    "name",
    "description",
    "category",
    "image_url",
    "ingredients",
    "offered",
    "portions",
    "time_windows",
}


def _local_now() -> datetime:
    return datetime.now().astimezone()


def time_of_day(moment: datetime) -> TimeWindow:
    """Map a wall-clock moment onto its day-part bucket."""
    hour = moment.hour
    if 5 <= hour < 12:
        return TimeWindow.BREAKFAST
    if 12 <= hour < 17:
        return TimeWindow.LUNCH
    if 17 <= hour < 22:
        return TimeWindow.DINNER
    return TimeWindow.SNACKS


def is_available(item: MenuItem, window: TimeWindow) -> bool:
    if not item.offered:
        return False
    return TimeWindow.ALL_DAY in item.time_windows or window in item.time_windows


def list_available_now(all_items: Iterable[MenuItem], clock: Clock = _local_now) -> list[MenuItem]:
    """Return offered items whose windows cover the clock's current day-part."""
    window = time_of_day(clock())
    return [item for item in all_items if is_available(item, window)]


def parse_ingredients(raw: str | Iterable[str]) -> list[str]:
    """Accept a list or the comma-separated form typed into the admin form."""
    if isinstance(raw, str):
        parts = raw.split(",")
    else:
        parts = list(raw)
    return [part.strip() for part in parts if part.strip()]


def parse_portions(raw: str) -> list[Portion]:
    """Read ``"Half=200, Full=350"``; a bare price is a single ``Full`` portion."""
    portions: list[Portion] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, price = part.rpartition("=")
        if not sep:
            name, price = "Full", part
        try:
            portions.append(Portion(name.strip(), float(price)))
        except ValueError as exc:
            raise ValidationError(f"bad price in {part!r}") from exc
    return portions


def format_portions(portions: Iterable[Portion]) -> str:
    return ", ".join(f"{portion.name}={portion.price:g}" for portion in portions)


def parse_time_windows(raw: str) -> frozenset[TimeWindow]:
    """Read ``"Lunch, Dinner"``; names match case-insensitively."""
    by_name = {window.value.lower(): window for window in TimeWindow}
    windows = set()
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        if name not in by_name:
            choices = ", ".join(window.value for window in TimeWindow)
            raise ValidationError(f"unknown time {part.strip()!r}; use {choices}")
        windows.add(by_name[name])
    return frozenset(windows)


def validate_item(item: MenuItem) -> None:
    if len(item.name.strip()) < MIN_NAME_LENGTH:
        raise ValidationError("name is too short")
    if len(item.description.strip()) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError("description is too short")
    if not item.category.strip():
        raise ValidationError("category is required")
    if not item.portions:
        raise ValidationError("at least one portion is required")
    for portion in item.portions:
        if not portion.name.strip():
            raise ValidationError("portion name is required")
        if not portion.price > 0:
            raise ValidationError(f"portion {portion.name!r} price must be positive")
    if not item.time_windows:
        raise ValidationError("at least one availability time is required")


class Catalog:
    """Owns the menu items and answers what is orderable right now."""

    def __init__(
        self,
        items: Iterable[MenuItem] = (),
        clock: Clock = _local_now,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._items: dict[str, MenuItem] = {}
        self.clock = clock
        self.on_change = on_change
        for item in items:
            validate_item(item)
            self._items[item.item_id] = item

    def items(self) -> list[MenuItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> MenuItem:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(f"unknown menu item {item_id}")
        return item

    def available_now(self) -> list[MenuItem]:
        return list_available_now(self._items.values(), self.clock)

    def current_window(self) -> TimeWindow:
        return time_of_day(self.clock())

    def search(self, term: str) -> list[MenuItem]:
        needle = term.strip().lower()
        if not needle:
            return self.items()
        return [
            item
            for item in self._items.values()
            if needle in item.name.lower() or needle in item.description.lower()
        ]

    def create_item(
        self,
        name: str,
        description: str,
        category: str,
        portions: Iterable[Portion],
        time_windows: Iterable[TimeWindow],
        image_url: str = "",
        ingredients: str | Iterable[str] = (),
        offered: bool = True,
    ) -> MenuItem:
        item = MenuItem(
            item_id=f"food-{uuid4().hex[:8]}",
            name=name.strip(),
            description=description.strip(),
            category=category.strip(),
            portions=list(portions),
            time_windows=frozenset(time_windows),
            image_url=image_url,
            ingredients=parse_ingredients(ingredients),
            offered=offered,
        )
        validate_item(item)
        # Newest first, matching the admin listing.
        self._items = {item.item_id: item, **self._items}
        logger.debug("catalog_create item_id=%s name=%r", item.item_id, item.name)
        self._changed()
        return item

    def update_item(self, item_id: str, /, **changes: object) -> MenuItem:
        current = self.get(item_id)
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"cannot edit fields: {', '.join(sorted(unknown))}")

        if "ingredients" in changes:
            changes["ingredients"] = parse_ingredients(changes["ingredients"])  # type: ignore[arg-type]
        if "portions" in changes:
            changes["portions"] = list(changes["portions"])  # type: ignore[call-overload]
        if "time_windows" in changes:
            changes["time_windows"] = frozenset(changes["time_windows"])  # type: ignore[arg-type]

        updated = replace(current, **changes)
        validate_item(updated)
        self._items[item_id] = updated
        logger.debug("catalog_update item_id=%s fields=%s", item_id, sorted(changes))
        self._changed()
        return updated

    def delete_item(self, item_id: str) -> None:
        self.get(item_id)
        del self._items[item_id]
        logger.debug("catalog_delete item_id=%s", item_id)
        self._changed()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
