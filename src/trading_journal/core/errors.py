"""Custom exception hierarchy for the trading journal."""

from __future__ import annotations

from .enums import ValidationErrorKind


class JournalError(Exception):
    """Base exception for all trading journal errors."""


# --- Configuration ---
class ConfigError(JournalError):
    """Invalid or missing configuration."""


class UnknownTimezoneError(ConfigError):
    """Timezone name is not a known IANA zone."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown timezone: {name!r}")


# --- Data ---
class DataError(JournalError):
    """Input data could not be used."""


class TradeValidationError(DataError):
    """A persisted trade row failed boundary validation."""

    def __init__(
        self,
        kind: ValidationErrorKind,
        field: str,
        message: str,
        trade_id: str | None = None,
    ):
        self.kind = kind
        self.field = field
        self.trade_id = trade_id
        prefix = f"trade {trade_id}: " if trade_id else ""
        super().__init__(f"{prefix}{field}: {message}")
