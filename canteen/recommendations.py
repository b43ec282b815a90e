"""Boundary to the food-recommendation text collaborator."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from typing import Iterable

from canteen.catalog import Catalog
from canteen.config import RECOMMENDATION_TIMEOUT_SECONDS
from canteen.errors import UpstreamError
from canteen.models import Order

logger = logging.getLogger(__name__)

_BULLET_PREFIX = "- "
_MAX_SUGGESTIONS = 5


class Recommender(ABC):
    """An opaque text generator: order history plus preferences in, newline text out."""

    @abstractmethod
    async def generate(self, order_history: str, dietary_preferences: str) -> str:
        raise NotImplementedError


def serialize_order_history(orders: Iterable[Order]) -> str:
    """Flatten orders into the JSON list the collaborator expects."""
    rows = [
        {
            "itemName": line.item_name,
            "quantity": line.quantity,
            "total": round(order.total, 2),
            "date": order.placed_at.isoformat(),
        }
        for order in orders
        for line in order.lines
    ]
    return json.dumps(rows)


def parse_recommendations(text: str) -> list[str]:
    """Split collaborator output into clean suggestion lines."""
    suggestions: list[str] = []
    for raw in text.split("\n"):
        line = raw.strip()
        if line.startswith(_BULLET_PREFIX):
            line = line[len(_BULLET_PREFIX) :]
        if line:
            suggestions.append(line)
    return suggestions


async def fetch_recommendations(
    recommender: Recommender,
    orders: Iterable[Order],
    dietary_preferences: str,
    timeout: float = RECOMMENDATION_TIMEOUT_SECONDS,
) -> list[str]:
    """Ask the collaborator for suggestions; every failure surfaces as ``UpstreamError``."""
    history = serialize_order_history(orders)
    try:
        text = await asyncio.wait_for(recommender.generate(history, dietary_preferences), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("recommendations_timeout timeout=%s", timeout)
        raise UpstreamError(f"recommendation service timed out after {timeout:g}s") from exc
    except Exception as exc:
        logger.warning("recommendations_failed error=%r", exc)
        raise UpstreamError(f"recommendation service failed: {exc}") from exc
    if not isinstance(text, str):
        raise UpstreamError("recommendation service returned no text")
    return parse_recommendations(text)


def _preference_tokens(dietary_preferences: str) -> set[str]:
    return {token for token in re.split(r"[^a-z0-9-]+", dietary_preferences.lower()) if len(token) > 2}


class HistoryRecommender(Recommender):
    """
    Offline collaborator that ranks suggestions from the customer's own history.

    The most frequently ordered items come first; the remaining slots go to
    offered items from the same categories, preferring those whose name,
    description or ingredients mention one of the dietary preference words.
    """

    def __init__(self, catalog: Catalog, limit: int = _MAX_SUGGESTIONS) -> None:
        self.catalog = catalog
        self.limit = limit

    async def generate(self, order_history: str, dietary_preferences: str) -> str:
        try:
            rows = json.loads(order_history or "[]")
        except ValueError as exc:
            raise UpstreamError(f"unreadable order history: {exc}") from exc

        frequency: Counter[str] = Counter()
        for row in rows:
            frequency[str(row.get("itemName", ""))] += int(row.get("quantity", 0))

        offered = [item for item in self.catalog.items() if item.offered]
        by_name = {item.name: item for item in offered}
        tokens = _preference_tokens(dietary_preferences)

        def matches_preferences(name: str) -> bool:
            item = by_name.get(name)
            if item is None or not tokens:
                return item is not None
            haystack = " ".join([item.name, item.description, *item.ingredients]).lower()
            return any(token in haystack for token in tokens)

        picks: list[str] = []
        favourites = [name for name, _ in frequency.most_common() if name in by_name]
        preferred = [name for name in favourites if matches_preferences(name)]
        picks.extend((preferred or favourites)[:2])

        categories = {by_name[name].category for name in favourites}
        remaining = [item for item in offered if item.name not in picks]
        same_category = [item.name for item in remaining if item.category in categories]
        elsewhere = [item.name for item in remaining if item.category not in categories]
        candidates = same_category + elsewhere
        candidates.sort(key=lambda name: not matches_preferences(name))
        for name in candidates:
            if len(picks) >= self.limit:
                break
            picks.append(name)

        await asyncio.sleep(0)
        return "\n".join(f"{_BULLET_PREFIX}{name}" for name in picks)
