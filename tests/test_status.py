"""Tests for per-tick status aggregation over a catalog."""

from datetime import datetime

import pytest

from conftest import make_exchange
from market_clock.catalog.exchanges import EXCHANGES
from market_clock.core.errors import ConfigurationError
from market_clock.core.types import EventKind, MarketPhase, Region
from market_clock.engine.status import exchange_status, group_by_region, kst_trading_window, statuses_at


def test_empty_catalog_yields_no_statuses() -> None:
    assert statuses_at([], datetime(2024, 7, 1, 10, 0)) == []


def test_invalid_definition_fails_the_whole_call() -> None:
    catalog = [EXCHANGES["krx"], make_exchange("broken", "10:00", "10:00")]

    with pytest.raises(ConfigurationError, match="broken"):
        statuses_at(catalog, datetime(2024, 7, 1, 10, 0))


def test_statuses_preserve_catalog_order() -> None:
    catalog = [EXCHANGES["nyse"], EXCHANGES["krx"], EXCHANGES["lse"]]

    statuses = statuses_at(catalog, datetime(2024, 7, 1, 10, 0))

    assert [status.exchange.id for status in statuses] == ["nyse", "krx", "lse"]


def test_seoul_morning() -> None:
    status = exchange_status(EXCHANGES["krx"], datetime(2024, 7, 1, 10, 0))

    assert status.is_open
    assert status.phase is MarketPhase.OPEN
    assert status.is_dst is None
    assert status.next_event is EventKind.CLOSE
    assert status.minutes_to_next == 330
    assert status.time_to_next_event == "closes in 5h 30m"
    assert status.to_dict()["local_time"] == "10:00:00"


def test_tokyo_lunch_takes_precedence() -> None:
    status = exchange_status(EXCHANGES["tse"], datetime(2024, 7, 1, 12, 0))

    assert status.is_open
    assert status.is_lunch_break
    assert status.phase is MarketPhase.LUNCH
    assert status.next_event is EventKind.LUNCH_END
    assert status.minutes_to_next == 30


def test_london_in_summer_time() -> None:
    status = exchange_status(EXCHANGES["lse"], datetime(2024, 7, 1, 17, 0))

    assert status.is_dst is True
    assert status.current_gmt_offset == 1
    assert status.local_time == datetime(2024, 7, 1, 9, 0)
    assert status.next_event is EventKind.CLOSE
    assert status.minutes_to_next == 450


def test_new_york_winter_open() -> None:
    status = exchange_status(EXCHANGES["nyse"], datetime(2024, 1, 15, 23, 30))

    assert status.is_dst is False
    assert status.is_open
    assert status.minutes_to_next == 390


def test_new_york_window_on_kst_clock() -> None:
    window = kst_trading_window(EXCHANGES["nyse"], datetime(2024, 7, 1, 12, 0))

    assert window.to_dict() == {
        "exchange_id": "nyse",
        "kst_open": "22:30",
        "kst_close": "05:00",
        "kst_lunch_break": None,
        "crosses_midnight": True,
    }


def test_shanghai_window_on_kst_clock() -> None:
    window = kst_trading_window(EXCHANGES["sse"], datetime(2024, 7, 1, 12, 0))

    assert window.to_dict() == {
        "exchange_id": "sse",
        "kst_open": "10:30",
        "kst_close": "16:00",
        "kst_lunch_break": {"start": "12:30", "end": "14:00"},
        "crosses_midnight": False,
    }


def test_group_by_region_orders_east_first() -> None:
    catalog = [EXCHANGES[key] for key in ("nyse", "nse", "lse", "krx", "xetra", "sse", "b3")]
    statuses = statuses_at(catalog, datetime(2024, 7, 1, 12, 0))

    grouped = group_by_region(statuses)

    assert list(grouped) == [Region.ASIA, Region.EUROPE, Region.AMERICAS]
    assert [s.exchange.id for s in grouped[Region.ASIA]] == ["krx", "sse", "nse"]
    assert [s.exchange.id for s in grouped[Region.EUROPE]] == ["xetra", "lse"]
    assert [s.exchange.id for s in grouped[Region.AMERICAS]] == ["b3", "nyse"]
