"""FastAPI service exposing live exchange clock status computed once per request."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from market_clock.catalog.exchanges import get_catalog, select_exchanges
from market_clock.core.config import Settings, get_settings
from market_clock.core.errors import ConfigurationError
from market_clock.core.logging import configure_logging
from market_clock.core.time_utils import kst_now, to_kst
from market_clock.core.types import ExchangeDefinition
from market_clock.engine.dst import describe_dst_period
from market_clock.engine.status import exchange_status, group_by_region, kst_trading_window, statuses_at

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Log startup metadata and fail fast on a broken catalog."""

    catalog = get_catalog(settings)
    logger.info(
        "api_startup",
        extra={
            "service": "api",
            "env": settings.ENV,
            "version": settings.VERSION,
            "exchanges": len(catalog),
        },
    )
    yield


app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(_: Request, exc: ConfigurationError) -> JSONResponse:
    """Report bad exchange data as unavailable instead of a server crash."""

    logger.error("api_configuration_error", extra=exc.to_dict())
    return JSONResponse(status_code=503, content={"detail": exc.to_dict()})


def _selected(app_settings: Settings, ids: str) -> tuple[ExchangeDefinition, ...]:
    requested = Settings.parse_exchange_ids(ids) or app_settings.clock_exchanges()
    return select_exchanges(get_catalog(app_settings), requested)


def _sample(at: datetime | None) -> datetime:
    return to_kst(at) if at is not None else kst_now()


@app.get("/health")
def health() -> dict[str, str]:
    """Return process liveness status."""

    return {"status": "ok"}


@app.get("/version")
def version() -> dict[str, str]:
    """Return application metadata from shared settings."""

    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "env": settings.ENV,
    }


@app.get("/exchanges")
def exchanges(ids: str = "") -> list[dict[str, Any]]:
    """Return the static definitions of the selected exchanges."""

    return [definition.to_dict() for definition in _selected(settings, ids)]


@app.get("/status")
def status(at: datetime | None = None, ids: str = "") -> dict[str, Any]:
    """Return every selected exchange's status at one sampled instant."""

    instant = _sample(at)
    return {
        "at": instant.isoformat(),
        "statuses": [item.to_dict() for item in statuses_at(_selected(settings, ids), instant)],
    }


@app.get("/status/{exchange_id}")
def status_for(exchange_id: str, at: datetime | None = None) -> dict[str, Any]:
    """Return a single exchange's status."""

    catalog = {definition.id: definition for definition in get_catalog(settings)}
    definition = catalog.get(exchange_id.lower())
    if definition is None:
        raise HTTPException(status_code=404, detail=f"unknown exchange: {exchange_id}")

    instant = _sample(at)
    return {"at": instant.isoformat(), **exchange_status(definition, instant).to_dict()}


@app.get("/timeline")
def timeline(at: datetime | None = None, ids: str = "") -> dict[str, Any]:
    """Return statuses grouped by region with trading hours on the KST clock face."""

    instant = _sample(at)
    statuses = statuses_at(_selected(settings, ids), instant)
    groups = []
    for region, members in group_by_region(statuses).items():
        groups.append(
            {
                "region": region.value,
                "exchanges": [
                    {
                        **member.to_dict(),
                        "kst_window": kst_trading_window(member.exchange, instant).to_dict(),
                        "dst_period": describe_dst_period(member.exchange.dst_rule),
                    }
                    for member in members
                ],
            }
        )
    return {"at": instant.isoformat(), "regions": groups}
