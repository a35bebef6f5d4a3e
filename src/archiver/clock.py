"""UTC clock helpers producing the ISO strings used in archives."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_timestamp(value: datetime | date) -> str:
    """Render *value* as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Plain dates are taken as midnight UTC.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    moment = _as_utc(value)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def iso_date(value: datetime) -> str:
    """``YYYY-MM-DD`` of *value* in UTC."""
    return _as_utc(value).date().isoformat()
