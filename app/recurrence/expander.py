"""
Date expander.

Enumerates the concrete dates a ``RecurrencePattern`` denotes. Expansion is
driven by ``dateutil.rrule`` over a bounded month window: weekday patterns
use a DAILY rule filtered by weekday, day-of-month patterns use a MONTHLY
rule filtered by month day (days missing from a month are skipped by the
rule itself, never clamped).
"""
from datetime import date, datetime, time
from typing import Any, Iterable, List, Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, MONTHLY, rrule

from app.recurrence.patterns import (
    ContinuousRange,
    ExpandedDateSet,
    ExplicitDays,
    Monthly,
    RecurrencePattern,
    Seasonal,
    SingleDate,
    WeekdayRecurring,
    coerce_day,
    parse_iso_date,
)
from app.recurrence.normalizer import normalize
from app.recurrence.weekdays import RRULE_WEEKDAYS


def _window(month_start: date, month_end: date) -> tuple[datetime, datetime]:
    first = month_start.replace(day=1)
    # day=31 clamps to the month's last day without leaving the month
    last = month_end + relativedelta(day=31)
    return datetime.combine(first, time.min), datetime.combine(last, time.min)


def weekday_dates(weekdays: Iterable[int], month_start: date, month_end: date) -> List[date]:
    """Every day in the month window whose (Sunday-indexed) weekday is in ``weekdays``."""
    byweekday = [RRULE_WEEKDAYS[index] for index in sorted(set(weekdays))]
    if not byweekday:
        return []
    dtstart, until = _window(month_start, month_end)
    return [dt.date() for dt in rrule(DAILY, dtstart=dtstart, until=until, byweekday=byweekday)]


def month_day_dates(days: Iterable[int], month_start: date, month_end: date) -> List[date]:
    """Each requested day of month in every month of the window, when that day exists."""
    bymonthday = sorted(set(days))
    if not bymonthday:
        return []
    dtstart, until = _window(month_start, month_end)
    return [dt.date() for dt in rrule(MONTHLY, dtstart=dtstart, until=until, bymonthday=bymonthday)]


def to_date_set(dates: Iterable[date]) -> ExpandedDateSet:
    """Sorted, duplicate-free ISO ``YYYY-MM-DD`` strings."""
    return [d.isoformat() for d in sorted(set(dates))]


def expand(pattern: RecurrencePattern) -> ExpandedDateSet:
    """
    Expand a normalized pattern into its concrete dates.

    Weekday matching takes precedence; leftover specific days are only used
    when the weekday expansion yields nothing. Patterns without usable
    parameters expand to an empty list.
    """
    if isinstance(pattern, SingleDate):
        return [pattern.primary_date.isoformat()] if pattern.primary_date else []

    if isinstance(pattern, ExplicitDays):
        return to_date_set(month_day_dates(pattern.days, pattern.month, pattern.month))

    if isinstance(pattern, ContinuousRange):
        days = range(pattern.start_day, pattern.end_day + 1)
        return to_date_set(month_day_dates(days, pattern.month, pattern.month))

    if isinstance(pattern, (WeekdayRecurring, Monthly, Seasonal)):
        dates = weekday_dates(pattern.weekdays, pattern.month_start, pattern.month_end)
        if not dates:
            dates = month_day_dates(pattern.specific_days, pattern.month_start, pattern.month_end)
        return to_date_set(dates)

    return []


def expand_explicit_days(base_date: Any, days: Any) -> ExpandedDateSet:
    """
    Dates for a non-recurring multi-day event.

    Every day number is placed in the year and month of ``base_date``; days
    that do not exist in that month are skipped.
    """
    base = parse_iso_date(base_date)
    if base is None or not isinstance(days, (list, tuple, set)):
        return []
    valid_days = {coerce_day(day) for day in days}
    valid_days.discard(None)
    return to_date_set(month_day_dates(valid_days, base, base))


def resolve_recurring_dates(raw_guess: Any, today: Optional[date] = None) -> ExpandedDateSet:
    """Normalize an untrusted guess and expand it in one step."""
    return expand(normalize(raw_guess, today=today))
