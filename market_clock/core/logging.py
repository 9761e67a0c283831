"""Structured JSON logging helpers for stdout-friendly service logs."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()) | {"message", "asctime"}
_CONFIGURED_FLAG = "_market_clock_configured"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return str(value)


class JsonFormatter(logging.Formatter):
    """Serialize log records as compact JSON lines stamped with their creation time."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED and not key.startswith("_")
        }
        if extras:
            payload["context"] = extras

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=_json_default)


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure process-wide JSON logging once."""

    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG, False):
        return

    root.handlers.clear()
    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())
    setattr(root, _CONFIGURED_FLAG, True)
