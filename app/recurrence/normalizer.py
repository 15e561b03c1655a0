"""
Pattern normalizer.

Turns the vision model's date guess into a canonical ``RecurrencePattern``.
Only the pattern parameters are kept; any date list the model computed on
its own is ignored, the expander recomputes every date.

Classification order (first match wins):

1. not recurring with two or more specific days -> ``ExplicitDays``
2. not recurring -> ``SingleDate``
3. recurring with weekday names -> ``Monthly`` / ``Seasonal`` / ``WeekdayRecurring``
4. recurring with specific days only -> ``ContinuousRange`` / ``Monthly``
5. anything else -> an empty ``Monthly`` window (expands to nothing)
"""
import logging
import re
from datetime import date
from typing import Any, Optional, Sequence

from dateutil.relativedelta import relativedelta

from app.core.config import settings
from app.recurrence.patterns import (
    ContinuousRange,
    ExplicitDays,
    Monthly,
    PatternGuess,
    RecurrencePattern,
    Seasonal,
    SingleDate,
    WeekdayRecurring,
)
from app.recurrence.weekdays import weekday_index, weekday_indexes
from app.utils.dates import local_today

logger = logging.getLogger("recurrence")

DEFAULT_MAX_MONTHS = 12

_MONTHLY_RE = re.compile(
    r"\b(mensual(es|mente)?|cada mes|todos los meses|monthly|every month)\b",
    re.IGNORECASE,
)


def month_span(month_start: date, month_end: date) -> int:
    """Number of calendar months covered by an inclusive month window."""
    return (month_end.year - month_start.year) * 12 + month_end.month - month_start.month + 1


def resolve_month_window(
    guess: PatternGuess,
    today: date,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> tuple[date, date]:
    """Month bounds for a guess: defaults to the current month, never inverted, capped."""
    month_start = guess.month_start or today.replace(day=1)
    month_end = guess.month_end or month_start
    if month_end < month_start:
        logger.warning(
            "Month window is inverted, collapsing to month_start",
            extra={"month_start": month_start.isoformat(), "month_end": month_end.isoformat()},
        )
        month_end = month_start
    max_months = max(1, max_months)
    if month_span(month_start, month_end) > max_months:
        capped = month_start + relativedelta(months=max_months - 1)
        logger.warning(
            "Month window exceeds limit, capping",
            extra={"month_end": month_end.isoformat(), "capped_to": capped.isoformat()},
        )
        month_end = capped
    return month_start, month_end


def _is_consecutive(days: Sequence[int]) -> bool:
    return len(days) >= 2 and days[-1] - days[0] == len(days) - 1


def classify(
    guess: PatternGuess,
    today: date,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> RecurrencePattern:
    """Map a coerced guess onto a pattern following the fixed priority order."""
    days = tuple(guess.specific_days)

    if not guess.is_recurring:
        if len(days) >= 2:
            if guess.primary_date is None:
                return SingleDate()
            return ExplicitDays(month=guess.primary_date, days=days)
        return SingleDate(primary_date=guess.primary_date)

    month_start, month_end = resolve_month_window(guess, today, max_months)

    if guess.weekday_names:
        weekdays = frozenset(weekday_indexes(guess.weekday_names))
        unknown = [name for name in guess.weekday_names if weekday_index(name) is None]
        if unknown:
            logger.debug("Dropped unrecognized weekday names", extra={"unknown_weekdays": unknown})
        window = dict(
            weekdays=weekdays,
            specific_days=days,
            month_start=month_start,
            month_end=month_end,
        )
        if guess.pattern_description and _MONTHLY_RE.search(guess.pattern_description):
            return Monthly(**window)
        bounds_supplied = guess.month_start is not None and guess.month_end is not None
        if bounds_supplied and month_span(month_start, month_end) > 1:
            return Seasonal(**window)
        return WeekdayRecurring(**window)

    if days:
        if month_start == month_end and _is_consecutive(days):
            return ContinuousRange(month=month_start, start_day=days[0], end_day=days[-1])
        return Monthly(specific_days=days, month_start=month_start, month_end=month_end)

    return Monthly(month_start=month_start, month_end=month_end)


def normalize(
    raw_guess: Any,
    today: Optional[date] = None,
    max_months: Optional[int] = None,
) -> RecurrencePattern:
    """
    Normalize an untrusted date guess into a ``RecurrencePattern``.

    Never raises: malformed or missing fields degrade to the narrowest
    interpretation (a single date, or a pattern that expands to nothing).

    Args:
        raw_guess: Mapping (or ``PatternGuess``) with the classifier fields
        today: Reference date used for month defaults, today in the
            configured time zone when omitted
        max_months: Upper bound on the month window

    Returns:
        The canonical pattern
    """
    guess = PatternGuess.from_raw(raw_guess)
    if today is None:
        today = local_today()
    if max_months is None:
        max_months = settings.RECURRENCE_MAX_MONTHS

    pattern = classify(guess, today, max_months)
    logger.debug(
        "Classified date pattern",
        extra={"kind": pattern.kind, "is_recurring": guess.is_recurring},
    )
    return pattern
