import unicodedata
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from dateutil.rrule import weekday, SU, MO, TU, WE, TH, FR, SA

# Sunday-indexed (0-6), accent and no-accent spellings are equivalent
WEEKDAY_INDEX: Mapping[str, int] = MappingProxyType({
    "domingo": 0,
    "lunes": 1,
    "martes": 2,
    "miércoles": 3,
    "miercoles": 3,
    "jueves": 4,
    "viernes": 5,
    "sábado": 6,
    "sabado": 6,
})

# rrule weekday constants in the same Sunday-first order
RRULE_WEEKDAYS: tuple[weekday, ...] = (SU, MO, TU, WE, TH, FR, SA)


def weekday_index(name: object) -> Optional[int]:
    """Return the Sunday-indexed weekday for a Spanish weekday name, or None."""
    if not isinstance(name, str):
        return None
    # decomposed accents (NFD) compose to the table spelling
    return WEEKDAY_INDEX.get(unicodedata.normalize("NFC", name).strip().lower())


def weekday_indexes(names: Iterable[object]) -> List[int]:
    """Resolve weekday names to sorted unique indexes, dropping unknown names."""
    indexes = {weekday_index(name) for name in names}
    indexes.discard(None)
    return sorted(indexes)


def sunday_index(day) -> int:
    """Sunday-indexed weekday of a date (Sunday=0 ... Saturday=6)."""
    return day.isoweekday() % 7
