"""Error taxonomy for exchange definitions."""


class ConfigurationError(ValueError):
    """An exchange definition or catalog entry breaks a data invariant."""

    def __init__(self, exchange_id: str, invariant: str, detail: str = "") -> None:
        self.exchange_id = exchange_id
        self.invariant = invariant
        self.detail = detail
        message = f"exchange {exchange_id!r} violates {invariant}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Return the payload reported to API clients."""

        return {
            "error": "exchange_data_unavailable",
            "exchange_id": self.exchange_id,
            "invariant": self.invariant,
        }
