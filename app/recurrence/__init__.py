from .patterns import (
    PatternGuess,
    RecurrencePattern,
    ExpandedDateSet,
    SingleDate,
    ExplicitDays,
    WeekdayRecurring,
    ContinuousRange,
    Monthly,
    Seasonal,
)
from .weekdays import WEEKDAY_INDEX, weekday_index
from .normalizer import normalize
from .expander import expand, expand_explicit_days, resolve_recurring_dates
from .expiration import effective_expiration, is_visible

__all__ = [
    "PatternGuess",
    "RecurrencePattern",
    "ExpandedDateSet",
    "SingleDate",
    "ExplicitDays",
    "WeekdayRecurring",
    "ContinuousRange",
    "Monthly",
    "Seasonal",
    "WEEKDAY_INDEX",
    "weekday_index",
    "normalize",
    "expand",
    "expand_explicit_days",
    "resolve_recurring_dates",
    "effective_expiration",
    "is_visible",
]
