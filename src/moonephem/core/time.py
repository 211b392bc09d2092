from __future__ import annotations
from datetime import date, datetime, timedelta, timezone

SECONDS_PER_DAY = 86400.0
JD_UNIX_EPOCH = 2440587.5  # JD at 1970-01-01 00:00:00 UTC
JD_J2000 = 2451545.0       # 2000-01-01 12:00 (epoch offset from TT ignored)


def datetime_utc_to_jd(dt: datetime) -> float:
    """datetime -> JD (UTC). Requires a timezone-aware datetime."""
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    t = dt.astimezone(timezone.utc).timestamp()
    return JD_UNIX_EPOCH + t / SECONDS_PER_DAY


def jd_to_datetime_utc(jd: float) -> datetime:
    """JD (UTC) -> timezone-aware UTC datetime."""
    seconds = (jd - JD_UNIX_EPOCH) * SECONDS_PER_DAY
    return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=seconds)


def date_to_jd(d: date) -> float:
    """Civil date -> JD at 00:00 UTC of that day."""
    return datetime_utc_to_jd(datetime(d.year, d.month, d.day, tzinfo=timezone.utc))


def j2000_days(jd: float) -> float:
    return jd - JD_J2000


def seconds_to_days(seconds: float) -> float:
    return seconds / SECONDS_PER_DAY


def parse_date_or_jd(s: str) -> float:
    """
    Accepts either a plain Julian Date ("2460000.5") or an ISO date/datetime
    ("2024-03-10", "2024-03-10T06:30:00Z"). Naive datetimes are taken as UTC.
    """
    try:
        return float(s)
    except ValueError:
        pass
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return datetime_utc_to_jd(dt)
