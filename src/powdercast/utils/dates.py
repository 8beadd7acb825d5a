"""Calendar-date helpers for resort-local days."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]):
    """ZoneInfo for an IANA name; UTC for None, ``"auto"`` or unknown names."""
    if not name or name == "auto":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using UTC")
        return timezone.utc


def iso_date_in_timezone(moment: datetime, tz_name: Optional[str] = None) -> str:
    """Calendar date (YYYY-MM-DD) of ``moment`` as seen in ``tz_name``.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(resolve_timezone(tz_name)).date().isoformat()


def today_iso_in_timezone(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Today's date in ``tz_name``."""
    return iso_date_in_timezone(now or datetime.now(timezone.utc), tz_name)


def date_range_back(end: str, days: int) -> tuple[str, str]:
    """(start, end) ISO dates covering ``days`` days ending on ``end``."""
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")
    start = date.fromisoformat(end) - timedelta(days=days - 1)
    return start.isoformat(), end
