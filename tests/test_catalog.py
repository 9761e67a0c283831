"""Tests for the built-in registry and the JSON catalog loader."""

import json
from pathlib import Path

import pytest

from market_clock.catalog.exchanges import (
    EXCHANGES,
    builtin_catalog,
    get_catalog,
    load_catalog,
    select_exchanges,
)
from market_clock.core.config import Settings
from market_clock.core.errors import ConfigurationError
from market_clock.core.types import DstRule, Region


def _write(tmp_path: Path, payload) -> Path:
    path = tmp_path / "exchanges.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _entry(**overrides):
    entry = {
        "id": "XTST",
        "name": "Test Exchange",
        "region": "europe",
        "open_time": "09:00",
        "close_time": "17:30",
        "base_gmt_offset": 1,
        "dst_rule": "europe",
        "lunch_break": {"start": "12:00", "end": "13:00"},
        "info": {"trading_currency": "EUR", "features": ["Auctions"]},
    }
    entry.update(overrides)
    return entry


def test_builtin_registry_covers_all_regions() -> None:
    regions = {definition.region for definition in builtin_catalog()}

    assert regions == {Region.ASIA, Region.EUROPE, Region.AMERICAS}
    assert list(EXCHANGES) == [definition.id for definition in builtin_catalog()]
    assert EXCHANGES["nyse"].dst_rule is DstRule.AMERICAS
    assert EXCHANGES["b3"].dst_rule is DstRule.NONE


def test_load_catalog_parses_entries(tmp_path: Path) -> None:
    catalog = load_catalog(_write(tmp_path, [_entry()]))

    assert len(catalog) == 1
    definition = catalog[0]
    assert definition.id == "xtst"
    assert definition.lunch_break is not None
    assert definition.lunch_break.start.hour == 12
    assert definition.info.features == ("Auctions",)
    assert definition.to_dict()["open_time"] == "09:00"


def test_load_catalog_rejects_bad_time(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_catalog(_write(tmp_path, [_entry(open_time="9am")]))

    assert excinfo.value.exchange_id == "xtst"
    assert excinfo.value.invariant == "hhmm_time"


def test_load_catalog_rejects_invariant_violation(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="xtst"):
        load_catalog(_write(tmp_path, [_entry(close_time="09:00", lunch_break=None)]))


def test_load_catalog_rejects_unknown_region(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_catalog(_write(tmp_path, [_entry(region="oceania")]))


def test_load_catalog_rejects_non_array(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_catalog(_write(tmp_path, {"id": "xtst"}))


def test_load_catalog_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_catalog(tmp_path / "missing.json")


def test_select_exchanges_preserves_requested_order() -> None:
    selected = select_exchanges(builtin_catalog(), ("nyse", "KRX"))

    assert [definition.id for definition in selected] == ["nyse", "krx"]


def test_select_exchanges_empty_means_all() -> None:
    assert select_exchanges(builtin_catalog(), ()) == builtin_catalog()


def test_select_exchanges_rejects_unknown_id() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        select_exchanges(builtin_catalog(), ("nope",))

    assert excinfo.value.invariant == "known_exchange_id"


def test_get_catalog_uses_configured_path(tmp_path: Path) -> None:
    path = _write(tmp_path, [_entry()])

    assert get_catalog(Settings(CLOCK_CATALOG_PATH="")) == builtin_catalog()
    assert [d.id for d in get_catalog(Settings(CLOCK_CATALOG_PATH=str(path)))] == ["xtst"]


@pytest.mark.parametrize("features", [None, "Auctions", {"a": 1}])
def test_load_catalog_rejects_non_list_features(tmp_path: Path, features) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_catalog(_write(tmp_path, [_entry(info={"features": features})]))

    assert excinfo.value.exchange_id == "xtst"
    assert excinfo.value.invariant == "info_shape"


def test_load_catalog_rejects_undecodable_file(tmp_path: Path) -> None:
    path = tmp_path / "exchanges.json"
    path.write_bytes(b'[{"id": "\xff"}]')

    with pytest.raises(ConfigurationError) as excinfo:
        load_catalog(path)

    assert excinfo.value.invariant == "readable_json_catalog"
