"""Shared builders for engine tests."""

from datetime import time

import pytest

from market_clock.core.types import DstRule, ExchangeDefinition, LunchBreak, Region


def make_exchange(
    exchange_id: str = "test",
    open_at: str = "09:00",
    close_at: str = "15:30",
    offset: float = 9,
    region: Region = Region.ASIA,
    lunch: tuple[str, str] | None = None,
    dst_rule: DstRule = DstRule.NONE,
) -> ExchangeDefinition:
    def hhmm(value: str) -> time:
        hour, minute = value.split(":")
        return time(int(hour), int(minute))

    return ExchangeDefinition(
        id=exchange_id,
        name=exchange_id.upper(),
        name_kr=exchange_id,
        country="Testland",
        region=region,
        open_time=hhmm(open_at),
        close_time=hhmm(close_at),
        base_gmt_offset=offset,
        lunch_break=LunchBreak(hhmm(lunch[0]), hhmm(lunch[1])) if lunch else None,
        dst_rule=dst_rule,
    )


@pytest.fixture
def overnight_exchange() -> ExchangeDefinition:
    return make_exchange("overnight", open_at="22:00", close_at="05:00")


@pytest.fixture
def lunch_exchange() -> ExchangeDefinition:
    return make_exchange("lunch", lunch=("11:30", "12:30"))
