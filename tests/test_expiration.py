import pytest

from app.models.event import Event
from app.recurrence import effective_expiration, is_visible


def test_non_recurring_expires_on_primary_date():
    assert effective_expiration("2026-05-01", False, []) == "2026-05-01"


def test_recurring_expires_on_last_date():
    dates = ["2026-02-10", "2026-02-15", "2026-02-20"]
    assert effective_expiration("2026-02-10", True, dates) == "2026-02-20"


def test_recurring_without_dates_expires_on_primary_date():
    assert effective_expiration("2026-02-10", True, []) == "2026-02-10"
    assert effective_expiration("2026-02-10", True, None) == "2026-02-10"


def test_dates_are_ignored_for_non_recurring_events():
    assert effective_expiration("2026-02-13", False, ["2026-02-13", "2026-02-14"]) == "2026-02-13"


@pytest.mark.parametrize("primary_date", [None, ""])
def test_undated_event_never_expires(primary_date):
    assert effective_expiration(primary_date, True, ["2026-02-20"]) is None
    assert is_visible(primary_date, True, ["2026-02-20"], "2030-01-01")


@pytest.mark.parametrize("dates", [
    ["2026-02-10"],
    ["2026-02-10", "2026-03-01"],
    ["2026-01-01", "2026-02-10"],
])
def test_recurring_expiration_never_precedes_primary_date(dates):
    assert effective_expiration("2026-02-10", True, dates) >= "2026-02-10"


@pytest.mark.parametrize("today,visible", [
    ("2026-02-19", True),
    ("2026-02-20", True),
    ("2026-02-21", False),
])
def test_visibility_boundary(today, visible):
    dates = ["2026-02-10", "2026-02-15", "2026-02-20"]
    assert is_visible("2026-02-10", True, dates, today) is visible


def test_event_expiration_property():
    event = Event(
        title="Noche de salsa",
        date="2026-02-06",
        is_recurring=True,
        recurring_dates=["2026-02-06", "2026-02-13", "2026-02-20", "2026-02-27"],
    )
    assert event.expiration_date == "2026-02-27"
    assert event.is_visible_on("2026-02-27")
    assert not event.is_visible_on("2026-02-28")


def test_single_date_string_is_one_date():
    assert effective_expiration("2026-02-10", True, "2026-03-01") == "2026-03-01"
    assert not is_visible("2026-02-10", True, "2026-03-01", "2026-03-02")
