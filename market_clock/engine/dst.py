"""Daylight-saving windows for the two supported seasonal rules.

Europe switches at 01:00 UTC on the last Sunday of March and of October.
The Americas switch at 02:00 local time on the second Sunday of March
(standard time) and the first Sunday of November (daylight time), so their
UTC instants depend on the exchange's base offset.
"""

import calendar
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache

from market_clock.core.time_utils import hours_to_minutes
from market_clock.core.types import DstRule, DstWindow

_SUNDAY = calendar.SUNDAY
_EUROPE_SWITCH_HOUR_UTC = 1
_AMERICAS_SWITCH_HOUR_LOCAL = 2


def last_sunday(year: int, month: int) -> date:
    """Return the latest Sunday on or before the last day of the month."""

    last_day = date(year, month, calendar.monthrange(year, month)[1])
    return last_day - timedelta(days=(last_day.weekday() - _SUNDAY) % 7)


def nth_sunday(year: int, month: int, n: int) -> date:
    """Return the n-th Sunday of the month, counting from the 1st."""

    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    first = date(year, month, 1)
    day = first + timedelta(days=(_SUNDAY - first.weekday()) % 7 + 7 * (n - 1))
    if day.month != month:
        raise ValueError(f"{year}-{month:02d} has no Sunday #{n}")
    return day


def _at_utc(day: date, hour: int) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


@lru_cache(maxsize=256)
def resolve_dst_window(rule: DstRule, year: int, base_gmt_offset: float = 0.0) -> DstWindow | None:
    """Return the DST window for ``year`` under ``rule``, or None when the rule never shifts.

    Callers pass the year of the instant being evaluated, never a "current" year.
    """

    match rule:
        case DstRule.NONE:
            return None
        case DstRule.EUROPE:
            return DstWindow(
                start=_at_utc(last_sunday(year, 3), _EUROPE_SWITCH_HOUR_UTC),
                end=_at_utc(last_sunday(year, 10), _EUROPE_SWITCH_HOUR_UTC),
            )
        case DstRule.AMERICAS:
            standard = timedelta(minutes=hours_to_minutes(base_gmt_offset))
            daylight = standard + timedelta(hours=1)
            return DstWindow(
                start=_at_utc(nth_sunday(year, 3, 2), _AMERICAS_SWITCH_HOUR_LOCAL) - standard,
                end=_at_utc(nth_sunday(year, 11, 1), _AMERICAS_SWITCH_HOUR_LOCAL) - daylight,
            )
    raise ValueError(f"unsupported DST rule: {rule!r}")


_PERIOD_TEXT = {
    DstRule.EUROPE: "last Sunday of March to last Sunday of October",
    DstRule.AMERICAS: "second Sunday of March to first Sunday of November",
}


def describe_dst_period(rule: DstRule) -> str | None:
    """Return a human description of the seasonal rule, or None without DST."""

    return _PERIOD_TEXT.get(rule)
