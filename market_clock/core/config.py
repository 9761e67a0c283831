"""Environment-driven settings shared by the API and ticker services."""

from functools import lru_cache
from typing import Callable

from pydantic_settings import BaseSettings, SettingsConfigDict

_MIN_TICK_SECONDS = 0.1


class Settings(BaseSettings):
    """Simple application settings loaded from environment variables or a local .env file."""

    APP_NAME: str = "Market Clock"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    VERSION: str = "0.1.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CLOCK_CATALOG_PATH: str = ""
    CLOCK_EXCHANGES: str = ""
    CLOCK_TICK_SECONDS: float = 1.0
    CLOCK_STATUS_PATH: str = ""
    CLOCK_LOG_EVERY_N: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def clock_exchanges(self) -> tuple[str, ...]:
        """Return normalized exchange ids from CLOCK_EXCHANGES; empty means all."""

        return self.parse_exchange_ids(self.CLOCK_EXCHANGES)

    def catalog_path(self) -> str | None:
        """Return the JSON catalog override, or None for the built-in registry."""

        path = self.CLOCK_CATALOG_PATH.strip()
        return path or None

    def status_path(self) -> str | None:
        """Return the ticker snapshot path, or None when snapshots are disabled."""

        path = self.CLOCK_STATUS_PATH.strip()
        return path or None

    def tick_seconds(self) -> float:
        """Return the polling cadence, clamped so the ticker never spins."""

        return max(_MIN_TICK_SECONDS, self.CLOCK_TICK_SECONDS)

    def log_every_n(self) -> int:
        """Return the heartbeat cadence in ticks, never below one."""

        return max(1, self.CLOCK_LOG_EVERY_N)

    @classmethod
    def parse_exchange_ids(cls, value: str) -> tuple[str, ...]:
        """Normalize a comma-separated exchange id list the same way as CLOCK_EXCHANGES."""

        return cls._split_csv(value, transform=str.lower)

    @staticmethod
    def _split_csv(value: str, transform: Callable[[str], str]) -> tuple[str, ...]:
        """Split comma-separated values while removing empty entries and duplicates."""

        items: list[str] = []
        seen: set[str] = set()

        for raw in value.split(","):
            item = transform(raw.strip())
            if not item or item in seen:
                continue
            seen.add(item)
            items.append(item)

        return tuple(items)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings to avoid repeated environment parsing."""

    return Settings()
