"""Exchange registry: built-in definitions plus an optional JSON catalog override.

Adding an exchange to the built-in set only requires a new entry in EXCHANGES.
"""

import json
import logging
from collections.abc import Sequence
from datetime import time
from functools import lru_cache
from pathlib import Path
from typing import Any

from market_clock.core.config import Settings
from market_clock.core.errors import ConfigurationError
from market_clock.core.time_utils import parse_hhmm
from market_clock.core.types import DstRule, ExchangeDefinition, ExchangeInfo, LunchBreak, Region
from market_clock.engine.validation import validate_catalog

logger = logging.getLogger(__name__)

_CASH_FEATURES = ("Continuous double auction", "Opening and closing auctions")

_BUILTIN: tuple[ExchangeDefinition, ...] = (
    ExchangeDefinition(
        id="krx",
        name="Korea Exchange",
        name_kr="한국거래소",
        country="South Korea",
        region=Region.ASIA,
        open_time=time(9, 0),
        close_time=time(15, 30),
        base_gmt_offset=9,
        info=ExchangeInfo("KRW", "T+2", ("±30% daily price limit", *_CASH_FEATURES), "https://global.krx.co.kr"),
    ),
    ExchangeDefinition(
        id="tse",
        name="Tokyo Stock Exchange",
        name_kr="도쿄증권거래소",
        country="Japan",
        region=Region.ASIA,
        open_time=time(9, 0),
        close_time=time(15, 30),
        base_gmt_offset=9,
        lunch_break=LunchBreak(time(11, 30), time(12, 30)),
        info=ExchangeInfo("JPY", "T+2", ("Morning and afternoon sessions", "Itayose auctions"), "https://www.jpx.co.jp/english/"),
    ),
    ExchangeDefinition(
        id="sse",
        name="Shanghai Stock Exchange",
        name_kr="상하이증권거래소",
        country="China",
        region=Region.ASIA,
        open_time=time(9, 30),
        close_time=time(15, 0),
        base_gmt_offset=8,
        lunch_break=LunchBreak(time(11, 30), time(13, 0)),
        info=ExchangeInfo("CNY", "T+1", ("±10% daily price limit", "Call auction 09:15-09:25"), "https://english.sse.com.cn"),
    ),
    ExchangeDefinition(
        id="hkex",
        name="Hong Kong Exchanges and Clearing",
        name_kr="홍콩증권거래소",
        country="Hong Kong",
        region=Region.ASIA,
        open_time=time(9, 30),
        close_time=time(16, 0),
        base_gmt_offset=8,
        lunch_break=LunchBreak(time(12, 0), time(13, 0)),
        info=ExchangeInfo("HKD", "T+2", ("Pre-opening session", "Closing auction session"), "https://www.hkex.com.hk"),
    ),
    ExchangeDefinition(
        id="sgx",
        name="Singapore Exchange",
        name_kr="싱가포르거래소",
        country="Singapore",
        region=Region.ASIA,
        open_time=time(9, 0),
        close_time=time(17, 0),
        base_gmt_offset=8,
        lunch_break=LunchBreak(time(12, 0), time(13, 0)),
        info=ExchangeInfo("SGD", "T+2", _CASH_FEATURES, "https://www.sgx.com"),
    ),
    ExchangeDefinition(
        id="nse",
        name="National Stock Exchange of India",
        name_kr="인도국립증권거래소",
        country="India",
        region=Region.ASIA,
        open_time=time(9, 15),
        close_time=time(15, 30),
        base_gmt_offset=5.5,
        info=ExchangeInfo("INR", "T+1", ("Pre-open call auction", "Circuit breakers"), "https://www.nseindia.com"),
    ),
    ExchangeDefinition(
        id="lse",
        name="London Stock Exchange",
        name_kr="런던증권거래소",
        country="United Kingdom",
        region=Region.EUROPE,
        open_time=time(8, 0),
        close_time=time(16, 30),
        base_gmt_offset=0,
        dst_rule=DstRule.EUROPE,
        info=ExchangeInfo("GBP", "T+2", ("SETS order book", *_CASH_FEATURES), "https://www.londonstockexchange.com"),
    ),
    ExchangeDefinition(
        id="xetra",
        name="Deutsche Börse Xetra",
        name_kr="프랑크푸르트증권거래소",
        country="Germany",
        region=Region.EUROPE,
        open_time=time(9, 0),
        close_time=time(17, 30),
        base_gmt_offset=1,
        dst_rule=DstRule.EUROPE,
        info=ExchangeInfo("EUR", "T+2", ("Midday auction", *_CASH_FEATURES), "https://www.xetra.com"),
    ),
    ExchangeDefinition(
        id="euronext",
        name="Euronext Paris",
        name_kr="유로넥스트 파리",
        country="France",
        region=Region.EUROPE,
        open_time=time(9, 0),
        close_time=time(17, 30),
        base_gmt_offset=1,
        dst_rule=DstRule.EUROPE,
        info=ExchangeInfo("EUR", "T+2", ("Optiq trading platform", *_CASH_FEATURES), "https://www.euronext.com"),
    ),
    ExchangeDefinition(
        id="six",
        name="SIX Swiss Exchange",
        name_kr="스위스증권거래소",
        country="Switzerland",
        region=Region.EUROPE,
        open_time=time(9, 0),
        close_time=time(17, 30),
        base_gmt_offset=1,
        dst_rule=DstRule.EUROPE,
        info=ExchangeInfo("CHF", "T+2", _CASH_FEATURES, "https://www.six-group.com"),
    ),
    ExchangeDefinition(
        id="nyse",
        name="New York Stock Exchange",
        name_kr="뉴욕증권거래소",
        country="United States",
        region=Region.AMERICAS,
        open_time=time(9, 30),
        close_time=time(16, 0),
        base_gmt_offset=-5,
        dst_rule=DstRule.AMERICAS,
        info=ExchangeInfo("USD", "T+1", ("Designated market makers", *_CASH_FEATURES), "https://www.nyse.com"),
    ),
    ExchangeDefinition(
        id="nasdaq",
        name="Nasdaq",
        name_kr="나스닥",
        country="United States",
        region=Region.AMERICAS,
        open_time=time(9, 30),
        close_time=time(16, 0),
        base_gmt_offset=-5,
        dst_rule=DstRule.AMERICAS,
        info=ExchangeInfo("USD", "T+1", ("Fully electronic market", "Opening and closing crosses"), "https://www.nasdaq.com"),
    ),
    ExchangeDefinition(
        id="tsx",
        name="Toronto Stock Exchange",
        name_kr="토론토증권거래소",
        country="Canada",
        region=Region.AMERICAS,
        open_time=time(9, 30),
        close_time=time(16, 0),
        base_gmt_offset=-5,
        dst_rule=DstRule.AMERICAS,
        info=ExchangeInfo("CAD", "T+1", _CASH_FEATURES, "https://www.tsx.com"),
    ),
    ExchangeDefinition(
        id="b3",
        name="B3 - Brasil Bolsa Balcão",
        name_kr="브라질증권거래소",
        country="Brazil",
        region=Region.AMERICAS,
        open_time=time(10, 0),
        close_time=time(17, 0),
        base_gmt_offset=-3,
        info=ExchangeInfo("BRL", "T+2", ("Closing call auction",), "https://www.b3.com.br"),
    ),
)

EXCHANGES: dict[str, ExchangeDefinition] = {definition.id: definition for definition in _BUILTIN}


def builtin_catalog() -> tuple[ExchangeDefinition, ...]:
    """Return the built-in exchange definitions in display order."""

    return _BUILTIN


def _require(entry: dict[str, Any], key: str, exchange_id: str) -> Any:
    if key not in entry:
        raise ConfigurationError(exchange_id, "required_field", f"missing {key!r}")
    return entry[key]


def _parse_time(value: Any, exchange_id: str, field_name: str) -> time:
    try:
        return parse_hhmm(str(value))
    except ValueError as exc:
        raise ConfigurationError(exchange_id, "hhmm_time", f"{field_name}: {exc}") from exc


def parse_definition(entry: dict[str, Any]) -> ExchangeDefinition:
    """Build a definition from one JSON catalog object."""

    exchange_id = str(entry.get("id", "")).strip().lower() or "<unnamed>"

    lunch = None
    raw_lunch = entry.get("lunch_break")
    if raw_lunch is not None:
        if not isinstance(raw_lunch, dict):
            raise ConfigurationError(exchange_id, "lunch_break_shape", "expected an object with start/end")
        lunch = LunchBreak(
            start=_parse_time(_require(raw_lunch, "start", exchange_id), exchange_id, "lunch_break.start"),
            end=_parse_time(_require(raw_lunch, "end", exchange_id), exchange_id, "lunch_break.end"),
        )

    raw_info = entry.get("info") or {}
    if not isinstance(raw_info, dict):
        raise ConfigurationError(exchange_id, "info_shape", "expected an object")
    raw_features = raw_info.get("features", [])
    if not isinstance(raw_features, list):
        raise ConfigurationError(exchange_id, "info_shape", "features must be an array")
    try:
        region = Region(str(_require(entry, "region", exchange_id)).lower())
        dst_rule = DstRule(str(entry.get("dst_rule", DstRule.NONE.value)).lower())
        offset = float(_require(entry, "base_gmt_offset", exchange_id))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(exchange_id, "known_region_and_rule", str(exc)) from exc

    return ExchangeDefinition(
        id=exchange_id,
        name=str(_require(entry, "name", exchange_id)),
        name_kr=str(entry.get("name_kr", "")),
        country=str(entry.get("country", "")),
        region=region,
        open_time=_parse_time(_require(entry, "open_time", exchange_id), exchange_id, "open_time"),
        close_time=_parse_time(_require(entry, "close_time", exchange_id), exchange_id, "close_time"),
        base_gmt_offset=offset,
        lunch_break=lunch,
        dst_rule=dst_rule,
        info=ExchangeInfo(
            trading_currency=str(raw_info.get("trading_currency", "")),
            settlement_cycle=str(raw_info.get("settlement_cycle", "")),
            features=tuple(str(item) for item in raw_features),
            website=str(raw_info.get("website", "")),
        ),
    )


def load_catalog(path: str | Path) -> tuple[ExchangeDefinition, ...]:
    """Load and validate a JSON array of exchange objects."""

    catalog_path = Path(path)
    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError("<catalog>", "readable_json_catalog", f"{catalog_path}: {exc}") from exc

    if not isinstance(raw, list):
        raise ConfigurationError("<catalog>", "readable_json_catalog", "top level must be an array")

    definitions = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise ConfigurationError("<catalog>", "readable_json_catalog", "entries must be objects")
        definitions.append(parse_definition(entry))

    validate_catalog(definitions)
    logger.info("catalog_loaded", extra={"path": str(catalog_path), "exchanges": len(definitions)})
    return tuple(definitions)


def select_exchanges(
    catalog: Sequence[ExchangeDefinition], ids: Sequence[str]
) -> tuple[ExchangeDefinition, ...]:
    """Return definitions for ``ids`` in requested order; empty ``ids`` selects everything."""

    if not ids:
        return tuple(catalog)

    by_id = {definition.id: definition for definition in catalog}
    selected = []
    for exchange_id in ids:
        definition = by_id.get(exchange_id.lower())
        if definition is None:
            raise ConfigurationError(exchange_id, "known_exchange_id", "not in catalog")
        selected.append(definition)
    return tuple(selected)


@lru_cache(maxsize=4)
def _catalog_for(path: str | None) -> tuple[ExchangeDefinition, ...]:
    if path is None:
        validate_catalog(_BUILTIN)
        return _BUILTIN
    return load_catalog(path)


def get_catalog(settings: Settings) -> tuple[ExchangeDefinition, ...]:
    """Return the configured catalog, loaded once per process."""

    return _catalog_for(settings.catalog_path())
