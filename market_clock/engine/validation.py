"""Invariant checks for exchange definitions and catalogs."""

from collections.abc import Iterable

from market_clock.core.errors import ConfigurationError
from market_clock.core.time_utils import MINUTES_PER_DAY, minute_of_day
from market_clock.core.types import DstRule, ExchangeDefinition, Region

_MIN_OFFSET = -12.0
_MAX_OFFSET = 14.0

_ALLOWED_RULES = {
    Region.ASIA: {DstRule.NONE},
    Region.EUROPE: {DstRule.NONE, DstRule.EUROPE},
    Region.AMERICAS: {DstRule.NONE, DstRule.AMERICAS},
}


def validate_definition(definition: ExchangeDefinition) -> None:
    """Raise ConfigurationError naming the first invariant the definition breaks."""

    exchange_id = definition.id or "<unnamed>"
    if not definition.id.strip():
        raise ConfigurationError(exchange_id, "non_empty_id")

    try:
        region = Region(definition.region)
        rule = DstRule(definition.dst_rule)
    except ValueError as exc:
        raise ConfigurationError(exchange_id, "known_region_and_rule", str(exc)) from exc

    offset = definition.base_gmt_offset
    if not _MIN_OFFSET <= offset <= _MAX_OFFSET or (offset * 2) != int(offset * 2):
        raise ConfigurationError(
            exchange_id,
            "half_hour_gmt_offset",
            f"base_gmt_offset={offset} must be a multiple of 0.5 in [{_MIN_OFFSET}, {_MAX_OFFSET}]",
        )

    if rule not in _ALLOWED_RULES[region]:
        raise ConfigurationError(
            exchange_id,
            "region_dst_consistency",
            f"region {region.value} cannot use DST rule {rule.value}",
        )

    open_min = minute_of_day(definition.open_time)
    close_min = minute_of_day(definition.close_time)
    if open_min == close_min:
        raise ConfigurationError(exchange_id, "open_differs_from_close", f"both are {definition.open_time:%H:%M}")

    lunch = definition.lunch_break
    if lunch is None:
        return

    # Position of each boundary measured forward from the open, so midnight crossings line up.
    session_length = (close_min - open_min) % MINUTES_PER_DAY
    lunch_start = (minute_of_day(lunch.start) - open_min) % MINUTES_PER_DAY
    lunch_end = (minute_of_day(lunch.end) - open_min) % MINUTES_PER_DAY
    if not 0 < lunch_start < lunch_end < session_length:
        raise ConfigurationError(
            exchange_id,
            "lunch_within_trading_window",
            f"lunch {lunch.start:%H:%M}-{lunch.end:%H:%M} outside "
            f"{definition.open_time:%H:%M}-{definition.close_time:%H:%M}",
        )


def validate_catalog(definitions: Iterable[ExchangeDefinition]) -> None:
    """Validate every definition and reject duplicate identifiers."""

    seen: set[str] = set()
    for definition in definitions:
        validate_definition(definition)
        if definition.id in seen:
            raise ConfigurationError(definition.id, "unique_id")
        seen.add(definition.id)
