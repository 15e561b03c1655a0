from datetime import date, datetime
from dateutil import tz as dateutil_tz

from app.core.config import settings


def local_today(timezone_name: str | None = None) -> date:
    """Today's date in the configured reference time zone (UTC if the zone is unknown)."""
    zone = dateutil_tz.gettz(timezone_name or settings.EVENTS_TIMEZONE) or dateutil_tz.UTC
    return datetime.now(zone).date()


def local_today_str(timezone_name: str | None = None) -> str:
    """``local_today`` as an ISO ``YYYY-MM-DD`` string."""
    return local_today(timezone_name).isoformat()
