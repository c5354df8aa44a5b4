"""Shared date utilities used by conflict and availability logic."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

DateLike = date | datetime | str


def parse_date(value: DateLike) -> date:
    """Parse a YYYY-MM-DD string, an ISO timestamp, or a date/datetime into a date.

    The whole string must be valid; trailing text is rejected.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError("empty date value")
    text = str(value).strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def parse_date_or_none(value: DateLike | None) -> date | None:
    """Like parse_date, but None for missing or unparseable values."""
    if value is None or value == "":
        return None
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        return None


def ensure_date(value: DateLike) -> str:
    """Validate a date value and return it as an ISO string."""
    return parse_date(value).isoformat()


def ranges_overlap(start_a: DateLike, end_a: DateLike, start_b: DateLike, end_b: DateLike) -> bool:
    """Return True if two closed date ranges share at least one day."""
    a0, a1 = parse_date(start_a), parse_date(end_a)
    b0, b1 = parse_date(start_b), parse_date(end_b)
    return a0 <= b1 and b0 <= a1


def date_in_range(day: DateLike, start: DateLike | None, end: DateLike | None) -> bool:
    """Return True if day falls in [start, end]; a None bound is open."""
    d = parse_date(day)
    lo = parse_date_or_none(start)
    hi = parse_date_or_none(end)
    if lo is not None and d < lo:
        return False
    if hi is not None and d > hi:
        return False
    return True


def days_overlapping(start: DateLike, end: DateLike, window_start: DateLike, window_end: DateLike) -> int:
    """Number of days (inclusive) shared by [start, end] and the window."""
    lo = max(parse_date(start), parse_date(window_start))
    hi = min(parse_date(end), parse_date(window_end))
    if lo > hi:
        return 0
    return (hi - lo).days + 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month (month is 1-12)."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def add_days(value: DateLike, days: int) -> date:
    return parse_date(value) + timedelta(days=days)
