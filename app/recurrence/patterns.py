"""
Recurrence pattern types.

``PatternGuess`` is the untrusted date description produced by the vision
model. Every field is coerced in a ``before`` validator so that malformed
values degrade to ``None``/empty instead of failing validation.

``RecurrencePattern`` is the canonical, tagged form produced by the
normalizer and consumed by the expander.
"""
import logging
import re
from datetime import date
from typing import Annotated, Any, FrozenSet, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger("recurrence")

ExpandedDateSet = List[str]

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TRUE_STRINGS = {"true", "1", "yes", "si", "sí"}
MAX_MONTH_DAY = 31


def parse_month(value: Any) -> Optional[date]:
    """Parse ``YYYY-MM`` into the first day of that month, or None."""
    if isinstance(value, date):
        return value.replace(day=1)
    if not isinstance(value, str):
        return None
    match = _MONTH_RE.match(value.strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month <= 12:
        return None
    return date(year, month, 1)


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` string, or None."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def coerce_day(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        day = value
    elif isinstance(value, float) and value.is_integer():
        day = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        day = int(value.strip())
    else:
        return None
    return day if 1 <= day <= MAX_MONTH_DAY else None


class PatternGuess(BaseModel):
    """Loosely-typed recurrence description as returned by the classifier."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    is_recurring: bool = Field(
        False, validation_alias=AliasChoices("is_recurring", "isRecurring")
    )
    pattern_description: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("pattern_description", "patternDescription", "recurring_pattern"),
    )
    weekday_names: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("weekday_names", "weekdayNames", "weekdays"),
    )
    specific_days: List[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("specific_days", "specificDays"),
    )
    month_start: Optional[date] = Field(
        None, validation_alias=AliasChoices("month_start", "monthStart")
    )
    month_end: Optional[date] = Field(
        None, validation_alias=AliasChoices("month_end", "monthEnd")
    )
    primary_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("primary_date", "primaryDate", "date")
    )

    @field_validator("is_recurring", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_STRINGS
        if isinstance(v, int):
            return v == 1
        return False

    @field_validator("pattern_description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("weekday_names", mode="before")
    @classmethod
    def coerce_weekday_names(cls, v: Any) -> List[str]:
        # a single name is still accepted for older prompts
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [name for name in v if isinstance(name, str) and name.strip()]

    @field_validator("specific_days", mode="before")
    @classmethod
    def coerce_specific_days(cls, v: Any) -> List[int]:
        if isinstance(v, (int, str)) and not isinstance(v, bool):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        days = {coerce_day(item) for item in v}
        days.discard(None)
        return sorted(days)

    @field_validator("month_start", "month_end", mode="before")
    @classmethod
    def coerce_month(cls, v: Any) -> Optional[date]:
        return parse_month(v)

    @field_validator("primary_date", mode="before")
    @classmethod
    def coerce_primary_date(cls, v: Any) -> Optional[date]:
        return parse_iso_date(v)

    @classmethod
    def from_raw(cls, raw: Any) -> "PatternGuess":
        """Build a guess from arbitrary input; unusable input yields an empty guess."""
        if isinstance(raw, PatternGuess):
            return raw
        if not isinstance(raw, Mapping):
            logger.warning(
                "Discarding non-mapping pattern guess",
                extra={"guess_type": type(raw).__name__},
            )
            return cls()
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            logger.warning("Discarding invalid pattern guess", extra={"error": str(e)})
            return cls()


# --- Canonical patterns ---
Weekday = Annotated[int, Field(ge=0, le=6)]
MonthDay = Annotated[int, Field(ge=1, le=MAX_MONTH_DAY)]


class _Pattern(BaseModel):
    model_config = ConfigDict(frozen=True)


class _MonthWindow(_Pattern):
    month_start: date
    month_end: date

    @field_validator("month_start", "month_end")
    @classmethod
    def first_of_month(cls, v: date) -> date:
        return v.replace(day=1)

    @model_validator(mode="after")
    def validate_window(self) -> "_MonthWindow":
        if self.month_end < self.month_start:
            raise ValueError("month_end must not precede month_start")
        return self


class SingleDate(_Pattern):
    """A single fixed date (no recurrence)."""
    kind: Literal["none"] = "none"
    primary_date: Optional[date] = None


class ExplicitDays(_Pattern):
    """Non-consecutive specific days inside one month, e.g. "13 y 14"."""
    kind: Literal["explicit_days"] = "explicit_days"
    month: date
    days: Tuple[MonthDay, ...]

    @field_validator("month")
    @classmethod
    def first_of_month(cls, v: date) -> date:
        return v.replace(day=1)


class WeekdayRecurring(_MonthWindow):
    """Weekly on one or more weekdays, possibly across several months."""
    kind: Literal["weekday"] = "weekday"
    weekdays: FrozenSet[Weekday]
    specific_days: Tuple[MonthDay, ...] = ()


class ContinuousRange(_Pattern):
    """Consecutive days inside one month, e.g. del 12 al 18."""
    kind: Literal["range"] = "range"
    month: date
    start_day: MonthDay
    end_day: MonthDay

    @field_validator("month")
    @classmethod
    def first_of_month(cls, v: date) -> date:
        return v.replace(day=1)

    @model_validator(mode="after")
    def validate_days(self) -> "ContinuousRange":
        if self.end_day < self.start_day:
            raise ValueError("end_day must not precede start_day")
        return self


class Monthly(_MonthWindow):
    """Every month of a bounded window, by weekday or by day of month."""
    kind: Literal["monthly"] = "monthly"
    weekdays: FrozenSet[Weekday] = frozenset()
    specific_days: Tuple[MonthDay, ...] = ()


class Seasonal(_MonthWindow):
    """Tour or season with explicit month bounds."""
    kind: Literal["seasonal"] = "seasonal"
    weekdays: FrozenSet[Weekday]
    specific_days: Tuple[MonthDay, ...] = ()


RecurrencePattern = Annotated[
    Union[SingleDate, ExplicitDays, WeekdayRecurring, ContinuousRange, Monthly, Seasonal],
    Field(discriminator="kind"),
]
