from __future__ import annotations

import pytest

from canteen.errors import ValidationError
from canteen.feedback import FeedbackBox, parse_rating


def test_submit_and_list_newest_first(clock):
    box = FeedbackBox(clock=clock)
    first = box.submit("alice", 5, "Lovely crispy dosa today.", order_id="ORD001")
    second = box.submit("alice", 3, "   ")
    assert box.entries() == [second, first]
    assert first.created_at == clock.now
    assert second.comment is None
    assert second.order_id is None


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_rating_must_be_one_to_five(rating):
    with pytest.raises(ValidationError):
        FeedbackBox().submit("alice", rating)


def test_short_comment_rejected():
    box = FeedbackBox()
    with pytest.raises(ValidationError):
        box.submit("alice", 4, "too short")
    assert box.entries() == []


def test_parse_rating():
    assert parse_rating(" 4 ") == 4
    with pytest.raises(ValidationError):
        parse_rating("great")
