from typing import Iterable, Optional


def effective_expiration(
    primary_date: Optional[str],
    is_recurring: bool,
    expanded_dates: Optional[Iterable[str]],
) -> Optional[str]:
    """
    Date after which an event no longer belongs in a current-events listing.

    A recurring event stays listed until its last occurrence, so the latest
    of the primary date and the expanded dates is used. ISO dates compare
    correctly as strings.
    """
    if not primary_date:
        return None
    # a lone date string counts as one date, not as a sequence of characters
    if isinstance(expanded_dates, str):
        expanded_dates = [expanded_dates]
    if not is_recurring or not expanded_dates:
        return primary_date
    candidates = [d for d in expanded_dates if isinstance(d, str) and d]
    return max([primary_date, *candidates])


def is_visible(
    primary_date: Optional[str],
    is_recurring: bool,
    expanded_dates: Optional[Iterable[str]],
    today: str,
) -> bool:
    """True when the event has no date or its expiration is today or later."""
    expiration = effective_expiration(primary_date, is_recurring, expanded_dates)
    return expiration is None or expiration >= today
