"""Per-tick status aggregation over a catalog of exchanges.

Every function takes the instant explicitly; callers sample the clock once
and pass the same instant through the whole chain so all fields of a status
describe the same moment.
"""

from collections.abc import Sequence
from datetime import datetime, time

from market_clock.core.time_utils import MINUTES_PER_DAY, minute_of_day
from market_clock.core.types import ExchangeDefinition, ExchangeStatus, KstTradingWindow, Region
from market_clock.engine.local_time import kst_difference_minutes, to_local
from market_clock.engine.offset import effective_offset
from market_clock.engine.validation import validate_catalog
from market_clock.engine.window import evaluate

REGION_ORDER: tuple[Region, ...] = (Region.ASIA, Region.EUROPE, Region.AMERICAS)


def exchange_status(definition: ExchangeDefinition, kst_instant: datetime) -> ExchangeStatus:
    """Compute one exchange's status; the definition is assumed valid."""

    offset_info = effective_offset(definition, kst_instant)
    local_wall = to_local(definition, kst_instant)
    window = evaluate(definition, local_wall)
    return ExchangeStatus(
        exchange=definition,
        local_time=local_wall,
        current_gmt_offset=offset_info.offset,
        is_dst=offset_info.is_dst,
        is_open=window.is_open,
        is_lunch_break=window.is_lunch_break,
        minutes_to_next=window.minutes_to_next,
        seconds_to_next=window.seconds_to_next,
        next_event=window.next_event,
    )


def statuses_at(definitions: Sequence[ExchangeDefinition], kst_instant: datetime) -> list[ExchangeStatus]:
    """Return one status per definition, in input order.

    Raises ConfigurationError if any definition is invalid; no partial result is returned.
    """

    validate_catalog(definitions)
    return [exchange_status(definition, kst_instant) for definition in definitions]


def kst_trading_window(definition: ExchangeDefinition, kst_instant: datetime) -> KstTradingWindow:
    """Project the local trading window onto the KST clock using the offset in effect."""

    shift = kst_difference_minutes(effective_offset(definition, kst_instant).offset)

    def project(value: time) -> int:
        return (minute_of_day(value) + shift) % MINUTES_PER_DAY

    lunch = definition.lunch_break
    return KstTradingWindow(
        exchange_id=definition.id,
        open_minute=project(definition.open_time),
        close_minute=project(definition.close_time),
        lunch_start_minute=project(lunch.start) if lunch is not None else None,
        lunch_end_minute=project(lunch.end) if lunch is not None else None,
    )


def group_by_region(statuses: Sequence[ExchangeStatus]) -> dict[Region, list[ExchangeStatus]]:
    """Group statuses by region, east-most (largest effective offset) first within each group."""

    grouped: dict[Region, list[ExchangeStatus]] = {region: [] for region in REGION_ORDER}
    for status in statuses:
        grouped[status.exchange.region].append(status)
    for members in grouped.values():
        members.sort(key=lambda status: status.current_gmt_offset, reverse=True)
    return grouped
