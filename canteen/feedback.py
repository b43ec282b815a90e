"""Customer feedback on orders."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from canteen.config import MIN_FEEDBACK_COMMENT_LENGTH
from canteen.errors import ValidationError
from canteen.models import Feedback

logger = logging.getLogger(__name__)


def parse_rating(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValidationError("rating must be a whole number from 1 to 5") from exc


class FeedbackBox:
    def __init__(
        self,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._entries: list[Feedback] = []
        self.clock = clock
        self.on_change = on_change

    def entries(self) -> list[Feedback]:
        """Newest first."""
        return list(reversed(self._entries))

    def submit(
        self,
        account_id: str,
        rating: int,
        comment: str | None = None,
        order_id: str | None = None,
    ) -> Feedback:
        if not (1 <= rating <= 5):
            raise ValidationError("rating must be between 1 and 5")
        text = (comment or "").strip() or None
        if text is not None and len(text) < MIN_FEEDBACK_COMMENT_LENGTH:
            raise ValidationError(f"feedback must be at least {MIN_FEEDBACK_COMMENT_LENGTH} characters")

        entry = Feedback(
            feedback_id=f"fb-{uuid4().hex[:8]}",
            account_id=account_id,
            rating=rating,
            created_at=self.clock(),
            comment=text,
            order_id=order_id or None,
        )
        self._entries.append(entry)
        logger.debug("feedback_submitted feedback_id=%s rating=%d", entry.feedback_id, rating)
        if self.on_change is not None:
            self.on_change()
        return entry
