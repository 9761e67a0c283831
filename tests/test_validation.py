"""Tests for exchange definition invariants."""

import pytest

from conftest import make_exchange
from market_clock.catalog.exchanges import builtin_catalog
from market_clock.core.errors import ConfigurationError
from market_clock.core.types import DstRule, Region
from market_clock.engine.validation import validate_catalog, validate_definition


def test_builtin_catalog_is_valid() -> None:
    validate_catalog(builtin_catalog())


def test_open_equal_to_close_is_rejected() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_definition(make_exchange("flat", "09:00", "09:00"))

    assert excinfo.value.exchange_id == "flat"
    assert excinfo.value.invariant == "open_differs_from_close"
    assert "flat" in str(excinfo.value)


@pytest.mark.parametrize(
    "lunch",
    [("08:00", "10:00"), ("09:00", "10:00"), ("15:00", "15:30"), ("12:30", "11:30"), ("16:00", "17:00")],
)
def test_lunch_outside_trading_window_is_rejected(lunch: tuple[str, str]) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_definition(make_exchange("lunchy", lunch=lunch))

    assert excinfo.value.invariant == "lunch_within_trading_window"


def test_lunch_inside_overnight_session_is_accepted() -> None:
    validate_definition(make_exchange("night", "20:00", "04:00", lunch=("23:30", "00:30")))


def test_asian_exchange_cannot_observe_dst() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_definition(make_exchange("tokyo", dst_rule=DstRule.EUROPE))

    assert excinfo.value.invariant == "region_dst_consistency"


def test_region_must_match_rule() -> None:
    with pytest.raises(ConfigurationError):
        validate_definition(make_exchange("paris", region=Region.EUROPE, offset=1, dst_rule=DstRule.AMERICAS))


@pytest.mark.parametrize("offset", [5.75, 15, -13])
def test_offsets_must_be_half_hours_in_range(offset: float) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_definition(make_exchange("odd", offset=offset))

    assert excinfo.value.invariant == "half_hour_gmt_offset"


def test_half_hour_offset_is_accepted() -> None:
    validate_definition(make_exchange("mumbai", offset=5.5))


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        validate_catalog([make_exchange("twin"), make_exchange("twin")])

    assert excinfo.value.invariant == "unique_id"


def test_blank_id_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        validate_definition(make_exchange(" "))
