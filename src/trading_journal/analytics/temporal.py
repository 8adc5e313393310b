"""Temporal bucketing of trade open timestamps.

Two deliberately different clocks are in play:

* day / month / day-of-week / hour-of-day keys use the *local* calendar
  of the report timezone;
* the trading session uses the *UTC* hour, a fixed partition of the
  day into four regions.

Usage::

    tz = resolve_timezone("Europe/Istanbul")
    day_key(trade.opened_at, tz)       # "2024-03-08"
    session_for(trade.opened_at)       # Session.LONDON
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from trading_journal.core.enums import Session
from trading_journal.core.errors import ConfigError, UnknownTimezoneError

UTC = ZoneInfo("UTC")

SESSION_ORDER: tuple[Session, ...] = (
    Session.ASIA,
    Session.LONDON,
    Session.OVERLAP,
    Session.NEW_YORK,
)

_SESSION_LABELS = {
    Session.ASIA: "Asia",
    Session.LONDON: "London",
    Session.OVERLAP: "London–NY Overlap",
    Session.NEW_YORK: "New York",
}

# Sunday first, matching day_of_week()
DAY_LABELS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def resolve_timezone(name: str | ZoneInfo | None) -> ZoneInfo:
    """Return a ZoneInfo for *name*; ``None`` or blank means UTC."""
    if isinstance(name, ZoneInfo):
        return name
    if name is None or not name.strip():
        return UTC
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise UnknownTimezoneError(name) from exc


def as_utc(ts: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_local(ts: datetime, tz: ZoneInfo) -> datetime:
    return as_utc(ts).astimezone(tz)


def day_key(ts: datetime, tz: ZoneInfo = UTC) -> str:
    """``YYYY-MM-DD`` of the local calendar date."""
    return to_local(ts, tz).strftime("%Y-%m-%d")


def month_key(ts: datetime, tz: ZoneInfo = UTC) -> str:
    """``YYYY-MM`` of the local calendar date."""
    return to_local(ts, tz).strftime("%Y-%m")


def day_of_week(ts: datetime, tz: ZoneInfo = UTC) -> int:
    """0-6 with Sunday = 0."""
    # Python's weekday() is Monday = 0
    return (to_local(ts, tz).weekday() + 1) % 7


def hour_of_day(ts: datetime, tz: ZoneInfo = UTC) -> int:
    """Local wall-clock hour, 0-23."""
    return to_local(ts, tz).hour


def session_for(ts: datetime) -> Session:
    """Classify by UTC hour: Asia 21-06, London 07-11, Overlap 12-15, NY 16-20."""
    h = as_utc(ts).hour
    if h >= 21 or h <= 6:
        return Session.ASIA
    if 7 <= h <= 11:
        return Session.LONDON
    if 12 <= h <= 15:
        return Session.OVERLAP
    return Session.NEW_YORK


def session_label(session: Session) -> str:
    return _SESSION_LABELS[session]


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

def _local_midnight(d: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(d, time.min, tzinfo=tz).astimezone(timezone.utc)


def parse_month(month: str) -> tuple[int, int]:
    """Split ``YYYY-MM`` into (year, month)."""
    try:
        year_s, month_s = month.strip().split("-")
        year, mon = int(year_s), int(month_s)
    except (AttributeError, ValueError) as exc:
        raise ConfigError(f"Month must be YYYY-MM, got {month!r}") from exc
    if not 1 <= mon <= 12:
        raise ConfigError(f"Month must be YYYY-MM, got {month!r}")
    return year, mon


def month_range(month: str, tz: ZoneInfo = UTC) -> tuple[datetime, datetime]:
    """``[start, end)`` instants covering the local calendar month."""
    year, mon = parse_month(month)
    start = date(year, mon, 1)
    end = date(year + 1, 1, 1) if mon == 12 else date(year, mon + 1, 1)
    return _local_midnight(start, tz), _local_midnight(end, tz)


def day_range(
    start_day: date, end_day: date, tz: ZoneInfo = UTC
) -> tuple[datetime, datetime]:
    """``[start, end)`` instants covering whole local days, end day inclusive."""
    return (
        _local_midnight(start_day, tz),
        _local_midnight(end_day + timedelta(days=1), tz),
    )


def default_range(today: date, days: int = 90) -> tuple[date, date]:
    """The default analytics window: the last *days* days up to *today*."""
    return today - timedelta(days=days), today


def current_month(now: datetime, tz: ZoneInfo = UTC) -> str:
    return month_key(now, tz)
