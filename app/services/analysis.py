"""Post-processing of raw vision analyses."""
from datetime import date
from typing import Any, Dict, Optional

from app.core.logging import analysis_logger as logger
from app.recurrence import (
    PatternGuess,
    SingleDate,
    expand,
    normalize,
)
from app.recurrence.patterns import parse_iso_date
from app.schemas.analysis import NOT_SPECIFIED, VisionAnalysis

REQUIRED_FIELDS = ["event_name", "date", "time", "description", "location", "organizer", "confidence"]
OPTIONAL_TEXT_FIELDS = ["end_time", "price", "registration_url"]
TEXT_FIELDS = REQUIRED_FIELDS + OPTIONAL_TEXT_FIELDS + ["extracted_text"]


def _fill_defaults(data: Dict[str, Any]) -> None:
    missing = [field for field in REQUIRED_FIELDS if field not in data]
    if missing:
        logger.warning("Vision analysis is missing fields", extra={"missing_fields": missing})
        for field in missing:
            data[field] = NOT_SPECIFIED
        if "confidence" in missing:
            data["confidence"] = "low"

    for field in OPTIONAL_TEXT_FIELDS:
        if not data.get(field):
            data[field] = NOT_SPECIFIED

    for field in TEXT_FIELDS:
        value = data.get(field)
        if value is None:
            data[field] = "" if field == "extracted_text" else NOT_SPECIFIED
        elif not isinstance(value, str):
            data[field] = str(value)

    if not isinstance(data.get("recurring_pattern"), str) or not data["recurring_pattern"]:
        data["recurring_pattern"] = None


def sanitize_analysis(raw: Any, today: Optional[date] = None) -> VisionAnalysis:
    """
    Fill missing fields and replace the model's date list with server-computed dates.

    The date pattern is normalized and expanded here, whatever the model
    put in ``recurring_dates`` is discarded.
    """
    data: Dict[str, Any] = dict(raw) if isinstance(raw, dict) else {}
    _fill_defaults(data)

    guess = PatternGuess.from_raw(data)
    pattern = normalize(guess, today=today)
    recurring_dates = [] if isinstance(pattern, SingleDate) else expand(pattern)

    if data.get("recurring_dates") and data["recurring_dates"] != recurring_dates:
        logger.info("Replaced model-computed dates", extra={"computed_dates": len(recurring_dates)})

    data.update(
        is_recurring=guess.is_recurring,
        weekday_names=list(guess.weekday_names),
        specific_days=list(guess.specific_days),
        recurring_dates=recurring_dates,
        date_pattern=pattern.kind,
    )
    month_start = getattr(pattern, "month_start", None) or getattr(pattern, "month", None)
    month_end = getattr(pattern, "month_end", None) or getattr(pattern, "month", None)
    data["month_start"] = month_start.strftime("%Y-%m") if month_start else None
    data["month_end"] = month_end.strftime("%Y-%m") if month_end else None

    # the first computed date stands in for a missing primary date
    if parse_iso_date(data["date"]) is None and recurring_dates:
        data["date"] = recurring_dates[0]

    return VisionAnalysis.model_validate(data)
