"""Effective GMT offset of an exchange at a given instant."""

from datetime import datetime

from market_clock.core.time_utils import to_utc
from market_clock.core.types import DstRule, ExchangeDefinition, OffsetInfo
from market_clock.engine.dst import resolve_dst_window

DST_SHIFT_HOURS = 1


def effective_offset(definition: ExchangeDefinition, instant: datetime) -> OffsetInfo:
    """Return the offset in effect at ``instant`` (naive instants are read as KST).

    Both supported rules move clocks forward by exactly one hour.
    """

    rule = DstRule(definition.dst_rule)
    if rule is DstRule.NONE:
        return OffsetInfo(offset=definition.base_gmt_offset, is_dst=None)

    utc_instant = to_utc(instant)
    window = resolve_dst_window(rule, utc_instant.year, definition.base_gmt_offset)
    if window is not None and window.contains(utc_instant):
        return OffsetInfo(offset=definition.base_gmt_offset + DST_SHIFT_HOURS, is_dst=True)
    return OffsetInfo(offset=definition.base_gmt_offset, is_dst=False)
