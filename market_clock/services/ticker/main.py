"""Polling driver that samples the KST clock each tick and publishes exchange status snapshots."""

import json
import logging
import signal
import threading
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from market_clock.catalog.exchanges import get_catalog, select_exchanges
from market_clock.core.config import get_settings
from market_clock.core.errors import ConfigurationError
from market_clock.core.logging import configure_logging
from market_clock.core.time_utils import kst_now
from market_clock.core.types import ExchangeStatus, MarketPhase
from market_clock.engine.status import statuses_at


class SnapshotWriter:
    """Simple JSONL writer for per-tick status snapshots."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self._file: TextIO | None = None

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.path.open("a", encoding="utf-8")

    def write(self, snapshot: dict[str, Any]) -> None:
        if self._file is None:
            raise RuntimeError("snapshot writer is not open")
        line = json.dumps(snapshot, ensure_ascii=False, separators=(",", ":"))
        self._file.write(line + "\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is None:
            return
        self._file.close()
        self._file = None


def build_snapshot(instant: datetime, statuses: Sequence[ExchangeStatus]) -> dict[str, Any]:
    """Return the JSONL record written for one tick."""

    return {
        "type": "exchange_status_snapshot",
        "at": instant.isoformat(),
        "statuses": [status.to_dict() for status in statuses],
    }


def phase_changes(
    previous: dict[str, MarketPhase], statuses: Sequence[ExchangeStatus]
) -> list[tuple[str, MarketPhase | None, MarketPhase]]:
    """Return (exchange_id, old_phase, new_phase) for every exchange whose phase moved.

    ``previous`` is updated in place; the first observation of an exchange is
    reported with ``old_phase`` None.
    """

    changes = []
    for status in statuses:
        exchange_id = status.exchange.id
        old_phase = previous.get(exchange_id)
        if old_phase is not status.phase:
            changes.append((exchange_id, old_phase, status.phase))
            previous[exchange_id] = status.phase
    return changes


def _request_shutdown(shutdown_event: threading.Event, logger: logging.Logger, signal_name: str) -> None:
    if shutdown_event.is_set():
        return
    logger.info("ticker_shutdown_signal", extra={"signal": signal_name})
    shutdown_event.set()


def _install_signal_handlers(shutdown_event: threading.Event, logger: logging.Logger) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal_name = sig.name
        signal.signal(
            sig,
            lambda *_args, signal_name=signal_name: _request_shutdown(
                shutdown_event,
                logger,
                signal_name,
            ),
        )


def main() -> int:
    """Run the status ticker until interrupted."""

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger = logging.getLogger(__name__)
    shutdown_event = threading.Event()

    try:
        definitions = select_exchanges(get_catalog(settings), settings.clock_exchanges())
    except ConfigurationError as exc:
        logger.error("ticker_configuration_error", extra={**exc.to_dict(), "detail": exc.detail})
        return 1

    writer: SnapshotWriter | None = None
    status_path = settings.status_path()
    if status_path is not None:
        writer = SnapshotWriter(status_path)
        try:
            writer.open()
        except OSError as exc:
            logger.error("ticker_status_path_error", extra={"path": status_path, "error": str(exc)})
            return 1

    tick_seconds = settings.tick_seconds()
    log_every_n = settings.log_every_n()
    _install_signal_handlers(shutdown_event, logger)
    logger.info(
        "ticker_startup",
        extra={
            "exchanges": [definition.id for definition in definitions],
            "tick_seconds": tick_seconds,
            "status_path": status_path,
            "log_every_n": log_every_n,
        },
    )

    phases: dict[str, MarketPhase] = {}
    tick_count = 0
    exit_code = 0

    try:
        while not shutdown_event.is_set():
            instant = kst_now()
            try:
                statuses = statuses_at(definitions, instant)
            except ConfigurationError as exc:
                logger.error("ticker_configuration_error", extra={**exc.to_dict(), "detail": exc.detail})
                exit_code = 1
                break

            for exchange_id, old_phase, new_phase in phase_changes(phases, statuses):
                logger.info(
                    "exchange_phase_changed",
                    extra={
                        "exchange_id": exchange_id,
                        "from": old_phase.value if old_phase is not None else None,
                        "to": new_phase.value,
                        "at": instant.isoformat(),
                    },
                )

            if writer is not None:
                try:
                    writer.write(build_snapshot(instant, statuses))
                except OSError as exc:
                    logger.error(
                        "ticker_snapshot_write_failed",
                        extra={"path": str(writer.path), "error": str(exc)},
                    )

            tick_count += 1
            if tick_count % log_every_n == 0:
                open_ids = [status.exchange.id for status in statuses if status.phase is MarketPhase.OPEN]
                logger.info(
                    "ticker_heartbeat",
                    extra={"ticks": tick_count, "at": instant.isoformat(), "open": open_ids},
                )

            shutdown_event.wait(tick_seconds)
    finally:
        if writer is not None:
            writer.close()

    logger.info("ticker_shutdown", extra={"ticks": tick_count})
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
