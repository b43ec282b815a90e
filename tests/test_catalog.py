from __future__ import annotations

from datetime import datetime

import pytest

from canteen.catalog import (
    Catalog,
    format_portions,
    list_available_now,
    parse_ingredients,
    parse_portions,
    parse_time_windows,
    time_of_day,
)
from canteen.errors import NotFoundError, ValidationError
from canteen.models import Portion, TimeWindow


@pytest.mark.parametrize(
    "hour, expected",
    [
        (0, TimeWindow.SNACKS),
        (4, TimeWindow.SNACKS),
        (5, TimeWindow.BREAKFAST),
        (11, TimeWindow.BREAKFAST),
        (12, TimeWindow.LUNCH),
        (16, TimeWindow.LUNCH),
        (17, TimeWindow.DINNER),
        (21, TimeWindow.DINNER),
        (22, TimeWindow.SNACKS),
        (23, TimeWindow.SNACKS),
    ],
)
def test_time_of_day_buckets(hour, expected):
    assert time_of_day(datetime(2024, 1, 1, hour, 30)) is expected


def test_available_now_respects_offered_flag_and_windows(dosa, biryani, chai, salad):
    items = [dosa, biryani, chai, salad]

    lunch = list_available_now(items, lambda: datetime(2024, 1, 1, 13, 0))
    assert [item.item_id for item in lunch] == ["B", "C"]

    breakfast = list_available_now(items, lambda: datetime(2024, 1, 1, 8, 0))
    assert [item.item_id for item in breakfast] == ["A", "C"]

    late = list_available_now(items, lambda: datetime(2024, 1, 1, 23, 0))
    assert [item.item_id for item in late] == ["A", "C"]


def test_available_now_follows_clock_changes(catalog, clock):
    assert {item.item_id for item in catalog.available_now()} == {"B", "C"}
    clock.now = clock.now.replace(hour=7)
    assert {item.item_id for item in catalog.available_now()} == {"A", "C"}
    assert catalog.current_window() is TimeWindow.BREAKFAST


def test_create_item_validates_and_prepends(catalog):
    item = catalog.create_item(
        name="Samosa Chaat",
        description="Crushed samosas with chutneys and yogurt.",
        category="Snacks",
        portions=[Portion("Full", 100.0)],
        time_windows=[TimeWindow.SNACKS],
        ingredients="Samosa, Yogurt ,  Mint Chutney,",
    )
    assert catalog.items()[0] is item
    assert item.ingredients == ["Samosa", "Yogurt", "Mint Chutney"]
    assert catalog.get(item.item_id) is item


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": "X"},
        {"description": "too short"},
        {"category": "  "},
        {"portions": []},
        {"portions": [Portion("Full", 0.0)]},
        {"portions": [Portion("Full", -5.0)]},
        {"portions": [Portion("", 10.0)]},
        {"time_windows": []},
    ],
)
def test_create_item_rejects_invalid_input(catalog, overrides):
    fields = {
        "name": "Paneer Tikka",
        "description": "Grilled cottage cheese with spices.",
        "category": "Dinner",
        "portions": [Portion("Full", 240.0)],
        "time_windows": [TimeWindow.DINNER],
    }
    fields.update(overrides)
    before = len(catalog.items())
    with pytest.raises(ValidationError):
        catalog.create_item(**fields)
    assert len(catalog.items()) == before


def test_update_item_replaces_fields(catalog):
    updated = catalog.update_item("B", name="Mutton Biryani", portions=[Portion("Full", 420.0)], offered=False)
    assert updated.name == "Mutton Biryani"
    assert catalog.get("B").portions == [Portion("Full", 420.0)]
    assert "B" not in {item.item_id for item in catalog.available_now()}


def test_update_item_rejects_bad_values_and_unknown_fields(catalog):
    with pytest.raises(ValidationError):
        catalog.update_item("B", portions=[])
    with pytest.raises(ValidationError):
        catalog.update_item("B", item_id="Z")
    assert catalog.get("B").name == "Chicken Biryani"


def test_delete_item(catalog):
    catalog.delete_item("A")
    with pytest.raises(NotFoundError):
        catalog.get("A")
    with pytest.raises(NotFoundError):
        catalog.delete_item("A")


def test_search_matches_name_or_description(catalog):
    assert [item.item_id for item in catalog.search("masala")] == ["A", "C"]
    assert [item.item_id for item in catalog.search("ROMAINE")] == ["D"]
    assert len(catalog.search("")) == 4


def test_change_callback_fires_on_mutation(dosa):
    calls = []
    catalog = Catalog([dosa], on_change=lambda: calls.append(1))
    catalog.update_item("A", offered=False)
    catalog.delete_item("A")
    assert len(calls) == 2


def test_parse_ingredients_accepts_lists():
    assert parse_ingredients([" Rice ", "", "Dal"]) == ["Rice", "Dal"]


def test_parse_portions():
    assert parse_portions("Half=200, Full = 350.5") == [Portion("Half", 200.0), Portion("Full", 350.5)]
    assert parse_portions("120") == [Portion("Full", 120.0)]
    assert parse_portions(" , ") == []
    with pytest.raises(ValidationError):
        parse_portions("Half=cheap")
    assert format_portions([Portion("Half", 200.0), Portion("Full", 350.5)]) == "Half=200, Full=350.5"


def test_parse_time_windows():
    assert parse_time_windows("lunch, All Day") == frozenset({TimeWindow.LUNCH, TimeWindow.ALL_DAY})
    assert parse_time_windows("") == frozenset()
    with pytest.raises(ValidationError):
        parse_time_windows("Brunch")


def test_update_item_never_changes_the_id(catalog):
    with pytest.raises(ValidationError):
        catalog.update_item("B", item_id="Z", name="Renamed")
    assert catalog.get("B").name == "Chicken Biryani"
    with pytest.raises(NotFoundError):
        catalog.get("Z")
