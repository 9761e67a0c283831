"""Shared immutable types describing exchanges and their derived clock status."""

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Any

from market_clock.core.errors import ConfigurationError
from market_clock.core.time_utils import format_hhmm, minute_of_day


class Region(str, Enum):
    """Geographic grouping used for display order and DST eligibility."""

    ASIA = "asia"
    EUROPE = "europe"
    AMERICAS = "americas"


class DstRule(str, Enum):
    """Seasonal clock-change rule attached to an exchange."""

    NONE = "none"
    EUROPE = "europe"
    AMERICAS = "americas"


class EventKind(str, Enum):
    """State-changing boundaries within a trading day."""

    LUNCH_START = "lunch-start"
    LUNCH_END = "lunch-end"
    CLOSE = "close"
    OPEN = "open"


# Tie-break order when two boundaries are equally far away.
EVENT_PRIORITY: tuple[EventKind, ...] = (
    EventKind.LUNCH_START,
    EventKind.LUNCH_END,
    EventKind.CLOSE,
    EventKind.OPEN,
)


class MarketPhase(str, Enum):
    """Display phase with precedence lunch > open > closed."""

    OPEN = "open"
    LUNCH = "lunch"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class LunchBreak:
    """Midday pause inside the trading window, local to the exchange."""

    start: time
    end: time


@dataclass(frozen=True, slots=True)
class ExchangeInfo:
    """Reference details shown alongside an exchange."""

    trading_currency: str = ""
    settlement_cycle: str = ""
    features: tuple[str, ...] = ()
    website: str = ""


@dataclass(frozen=True, slots=True)
class ExchangeDefinition:
    """Static description of one exchange's trading day.

    Definitions are not validated on construction; ``validate_definition``
    checks them so a bad catalog entry surfaces as a ConfigurationError at the
    point of use.
    """

    id: str
    name: str
    name_kr: str
    country: str
    region: Region
    open_time: time
    close_time: time
    base_gmt_offset: float
    lunch_break: LunchBreak | None = None
    dst_rule: DstRule = DstRule.NONE
    info: ExchangeInfo = field(default_factory=ExchangeInfo)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready view with ``HH:MM`` times."""

        lunch = None
        if self.lunch_break is not None:
            lunch = {
                "start": _hhmm(self.lunch_break.start),
                "end": _hhmm(self.lunch_break.end),
            }
        return {
            "id": self.id,
            "name": self.name,
            "name_kr": self.name_kr,
            "country": self.country,
            "region": Region(self.region).value,
            "open_time": _hhmm(self.open_time),
            "close_time": _hhmm(self.close_time),
            "base_gmt_offset": self.base_gmt_offset,
            "lunch_break": lunch,
            "dst_rule": DstRule(self.dst_rule).value,
            "info": {
                "trading_currency": self.info.trading_currency,
                "settlement_cycle": self.info.settlement_cycle,
                "features": list(self.info.features),
                "website": self.info.website,
            },
        }


@dataclass(frozen=True, slots=True)
class DstWindow:
    """Half-open UTC interval [start, end) during which clocks run one hour ahead."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        """Return True when ``instant`` falls in [start, end)."""

        return self.start <= instant < self.end


@dataclass(frozen=True, slots=True)
class OffsetInfo:
    """Effective GMT offset; ``is_dst`` is None when the exchange never observes DST."""

    offset: float
    is_dst: bool | None


@dataclass(frozen=True, slots=True)
class WindowEvaluation:
    """Trading-window membership and countdown for one local wall-clock reading."""

    is_open: bool
    is_lunch_break: bool
    minutes_to_next: int
    seconds_to_next: int
    next_event: EventKind


_EVENT_VERBS = {
    EventKind.OPEN: "opens",
    EventKind.CLOSE: "closes",
    EventKind.LUNCH_START: "lunch break starts",
    EventKind.LUNCH_END: "lunch break ends",
}


def format_countdown(event: EventKind, minutes: int) -> str:
    """Render a countdown such as ``closes in 2h 05m``."""

    verb = _EVENT_VERBS[event]
    if minutes <= 0:
        return f"{verb} in under a minute"
    hours, rest = divmod(minutes, 60)
    if hours:
        return f"{verb} in {hours}h {rest:02d}m"
    return f"{verb} in {rest}m"


@dataclass(frozen=True, slots=True)
class ExchangeStatus:
    """Derived per-tick snapshot for one exchange; replaced wholesale every tick."""

    exchange: ExchangeDefinition
    local_time: datetime
    current_gmt_offset: float
    is_dst: bool | None
    is_open: bool
    is_lunch_break: bool
    minutes_to_next: int
    seconds_to_next: int
    next_event: EventKind

    @property
    def phase(self) -> MarketPhase:
        """Return the display phase, lunch taking precedence over open."""

        if self.is_lunch_break:
            return MarketPhase.LUNCH
        if self.is_open:
            return MarketPhase.OPEN
        return MarketPhase.CLOSED

    @property
    def time_to_next_event(self) -> str:
        """Return the countdown as display text."""

        return format_countdown(self.next_event, self.minutes_to_next)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready view for API responses and snapshots."""

        return {
            "exchange_id": self.exchange.id,
            "name": self.exchange.name,
            "region": Region(self.exchange.region).value,
            "local_time": self.local_time.strftime("%H:%M:%S"),
            "local_date": self.local_time.date().isoformat(),
            "current_gmt_offset": self.current_gmt_offset,
            "is_dst": self.is_dst,
            "is_open": self.is_open,
            "is_lunch_break": self.is_lunch_break,
            "phase": self.phase.value,
            "next_event": self.next_event.value,
            "minutes_to_next": self.minutes_to_next,
            "seconds_to_next": self.seconds_to_next,
            "time_to_next_event": self.time_to_next_event,
        }


@dataclass(frozen=True, slots=True)
class KstTradingWindow:
    """Trading hours of an exchange projected onto the KST clock face."""

    exchange_id: str
    open_minute: int
    close_minute: int
    lunch_start_minute: int | None = None
    lunch_end_minute: int | None = None

    @property
    def crosses_midnight(self) -> bool:
        """Return True when the KST window wraps past midnight."""

        return self.close_minute < self.open_minute

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready view with KST ``HH:MM`` boundaries."""

        lunch = None
        if self.lunch_start_minute is not None and self.lunch_end_minute is not None:
            lunch = {
                "start": format_hhmm(self.lunch_start_minute),
                "end": format_hhmm(self.lunch_end_minute),
            }
        return {
            "exchange_id": self.exchange_id,
            "kst_open": format_hhmm(self.open_minute),
            "kst_close": format_hhmm(self.close_minute),
            "kst_lunch_break": lunch,
            "crosses_midnight": self.crosses_midnight,
        }


ALERT_MINUTES_MIN = 1
ALERT_MINUTES_MAX = 30


@dataclass(frozen=True, slots=True)
class AlertThresholdSetting:
    """User alert preference for one exchange: how many minutes before open/close."""

    exchange_id: str
    open_enabled: bool = False
    close_enabled: bool = False
    open_minutes: int = 3
    close_minutes: int = 3

    def __post_init__(self) -> None:
        for label, minutes in (("open_minutes", self.open_minutes), ("close_minutes", self.close_minutes)):
            if not ALERT_MINUTES_MIN <= minutes <= ALERT_MINUTES_MAX:
                raise ConfigurationError(
                    self.exchange_id,
                    "alert_threshold_range",
                    f"{label}={minutes} outside [{ALERT_MINUTES_MIN}, {ALERT_MINUTES_MAX}]",
                )

    def is_within_threshold(self, status: ExchangeStatus) -> bool:
        """Return True when the status's next open/close is inside the enabled threshold."""

        if status.exchange.id != self.exchange_id:
            return False
        if status.next_event is EventKind.OPEN and self.open_enabled:
            return status.seconds_to_next <= self.open_minutes * 60
        if status.next_event is EventKind.CLOSE and self.close_enabled:
            return status.seconds_to_next <= self.close_minutes * 60
        return False


def _hhmm(value: time) -> str:
    return format_hhmm(minute_of_day(value))
