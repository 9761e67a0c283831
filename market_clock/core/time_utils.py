"""Time helpers anchoring every computation to Korea Standard Time (fixed GMT+9)."""

from datetime import datetime, time, timedelta, timezone

KST_OFFSET_HOURS = 9
KST = timezone(timedelta(hours=KST_OFFSET_HOURS))
MINUTES_PER_DAY = 24 * 60


def kst_now() -> datetime:
    """Return current KST datetime with timezone attached."""

    return datetime.now(KST)


def to_kst(instant: datetime) -> datetime:
    """Return an aware KST datetime; naive input is already read as KST."""

    if instant.tzinfo is None:
        return instant.replace(tzinfo=KST)
    return instant.astimezone(KST)


def to_utc(instant: datetime) -> datetime:
    """Return an aware UTC datetime; naive input is read as KST."""

    return to_kst(instant).astimezone(timezone.utc)


def hours_to_minutes(hours: float) -> int:
    """Convert a (possibly half-hour) offset in hours to whole minutes."""

    return round(hours * 60)


def minute_of_day(value: time | datetime) -> int:
    """Return minutes since midnight for a wall-clock reading."""

    return value.hour * 60 + value.minute


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` string into a time, rejecting anything else."""

    hour_raw, sep, minute_raw = value.strip().partition(":")
    if not sep or not hour_raw.isdigit() or not minute_raw.isdigit():
        raise ValueError(f"expected HH:MM, got {value!r}")
    return time(int(hour_raw), int(minute_raw))


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM`` after wrapping into one day."""

    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
