"""Enumerations used across the trading journal."""

from enum import Enum


class Direction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Outcome(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    BREAKEVEN = "BREAKEVEN"

    @property
    def symbol(self) -> str:
        """Single-letter code used by the streak scan (W / L / B)."""
        return {"WIN": "W", "LOSS": "L", "BREAKEVEN": "B"}[self.value]


class Session(str, Enum):
    """Fixed trading-region buckets, classified by UTC hour."""

    ASIA = "ASIA"
    LONDON = "LONDON"
    OVERLAP = "OVERLAP"
    NEW_YORK = "NEW_YORK"


class ReviewedFilter(str, Enum):
    REVIEWED = "REVIEWED"
    NOT_REVIEWED = "NOT_REVIEWED"


class CalendarMode(str, Enum):
    PNL_PERCENT = "PNL_PERCENT"
    PNL_DOLLAR = "PNL_DOLLAR"


class SharpeConvention(str, Enum):
    """Denominator used to turn a day's net P&L into a return.

    The analytics view and the monthly report historically disagree on
    this, so each call site names the convention it uses.
    """

    FIXED_BALANCE = "fixed_balance"  # starting balance if > 0, else 1
    PRIOR_EQUITY = "prior_equity"    # equity before the day


class ValidationErrorKind(str, Enum):
    MISSING_FIELD = "missing_field"
    INVALID_VALUE = "invalid_value"
    INVALID_TIMESTAMP = "invalid_timestamp"
