"""Trade record and boundary validation.

Raw rows arrive from the persistence layer loosely typed: timestamps as
ISO strings, numerics as strings / ``None`` / ``NaN``.  They are
validated once here into an immutable :class:`TradeRecord`; nothing
downstream re-guards individual fields.

Usage::

    result = parse_trades(rows)
    for issue in result.errors:
        logger.warning("skipped row: %s", issue)
    report = build_report(result.trades, params)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from trading_journal.core.enums import Direction, Outcome, ValidationErrorKind
from trading_journal.core.errors import TradeValidationError

from .numeric import to_number_safe, to_optional_number
from .temporal import as_utc

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("id", "opened_at", "direction", "outcome")
_TIMESTAMP_FIELDS = ("opened_at", "closed_at", "reviewed_at")


@dataclass(frozen=True)
class TradeRecord:
    """One logged trade, as the analytics engine sees it.

    Parameters
    ----------
    trade_id : str
        Persistence identifier.
    opened_at : datetime
        Open instant, timezone-aware UTC.
    closed_at : datetime | None
        Close instant; ``None`` while open or when unknown.
    symbol : str
        Instrument as entered (case-insensitive, may be blank).
    pnl_amount, pnl_percent : float
        Gross P&L figures, signed.
    commission, net_pnl : float | None
        Only trusted once ``reviewed_at`` is set.
    reviewed_at : datetime | None
        Presence marks the review stage as complete.
    template_id : str | None
        Setup template the trade was taken under.
    """

    trade_id: str
    opened_at: datetime
    direction: Direction
    outcome: Outcome
    symbol: str = ""
    closed_at: datetime | None = None
    pnl_amount: float = 0.0
    pnl_percent: float = 0.0
    commission: float | None = None
    net_pnl: float | None = None
    risk_amount: float | None = None
    r_multiple: float | None = None
    reviewed_at: datetime | None = None
    template_id: str | None = None
    account_id: str | None = None

    @property
    def is_reviewed(self) -> bool:
        return self.reviewed_at is not None

    @property
    def normalized_symbol(self) -> str:
        return self.symbol.strip().upper()

    @property
    def duration_minutes(self) -> float | None:
        """Open-to-close minutes; ``None`` when not closed or negative."""
        if self.closed_at is None:
            return None
        minutes = (as_utc(self.closed_at) - as_utc(self.opened_at)).total_seconds() / 60
        return minutes if minutes >= 0 else None


# ---------------------------------------------------------------------------
# Boundary model
# ---------------------------------------------------------------------------

class TradeRow(BaseModel):
    """A trade row as stored by the persistence layer."""

    model_config = ConfigDict(extra="ignore")

    id: str
    opened_at: datetime
    direction: Direction
    outcome: Outcome
    instrument: str | None = None
    closed_at: datetime | None = None
    pnl_amount: float = 0.0
    pnl_percent: float = 0.0
    commission: float | None = None
    net_pnl: float | None = None
    risk_amount: float | None = None
    r_multiple: float | None = None
    reviewed_at: datetime | None = None
    template_id: str | None = None
    account_id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("direction", "outcome", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("pnl_amount", "pnl_percent", mode="before")
    @classmethod
    def _gross(cls, v: Any) -> float:
        return to_number_safe(v)

    @field_validator("commission", "net_pnl", "risk_amount", "r_multiple", mode="before")
    @classmethod
    def _optional_number(cls, v: Any) -> float | None:
        return to_optional_number(v)

    @field_validator(
        "closed_at", "reviewed_at", "instrument", "template_id", "account_id",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_record(self) -> TradeRecord:
        return TradeRecord(
            trade_id=self.id,
            opened_at=as_utc(self.opened_at),
            closed_at=as_utc(self.closed_at) if self.closed_at else None,
            symbol=self.instrument or "",
            direction=self.direction,
            outcome=self.outcome,
            pnl_amount=self.pnl_amount,
            pnl_percent=self.pnl_percent,
            commission=self.commission,
            net_pnl=self.net_pnl,
            risk_amount=self.risk_amount,
            r_multiple=self.r_multiple,
            reviewed_at=as_utc(self.reviewed_at) if self.reviewed_at else None,
            template_id=self.template_id,
            account_id=self.account_id,
        )


@dataclass(frozen=True)
class ValidationIssue:
    """Why one input row was rejected."""

    index: int
    kind: ValidationErrorKind
    field: str
    message: str
    trade_id: str | None = None


@dataclass(frozen=True)
class ParseResult:
    trades: tuple[TradeRecord, ...]
    errors: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


def _classify(err: Mapping[str, Any]) -> tuple[ValidationErrorKind, str]:
    loc = err.get("loc") or ("?",)
    field = str(loc[0])
    value = err.get("input")
    if err.get("type") == "missing" or (
        field in _REQUIRED_FIELDS
        and (value is None or (isinstance(value, str) and not value.strip()))
    ):
        return ValidationErrorKind.MISSING_FIELD, field
    if field in _TIMESTAMP_FIELDS:
        return ValidationErrorKind.INVALID_TIMESTAMP, field
    return ValidationErrorKind.INVALID_VALUE, field


def parse_trade(row: Mapping[str, Any]) -> TradeRecord:
    """Validate one raw row.

    Raises
    ------
    TradeValidationError
        When a required field is missing or any field is malformed.
    """
    raw_id = row.get("id")
    trade_id = str(raw_id).strip() if raw_id is not None else ""
    try:
        return TradeRow.model_validate(dict(row)).to_record()
    except ValidationError as exc:
        first = exc.errors()[0]
        kind, field = _classify(first)
        raise TradeValidationError(
            kind, field, first.get("msg", "invalid"), trade_id=trade_id or None
        ) from exc


def parse_trades(rows: Iterable[Mapping[str, Any]]) -> ParseResult:
    """Validate many rows without raising; bad rows are reported, not dropped silently."""
    trades: list[TradeRecord] = []
    errors: list[ValidationIssue] = []
    for index, row in enumerate(rows):
        try:
            trades.append(parse_trade(row))
        except TradeValidationError as exc:
            errors.append(ValidationIssue(
                index=index,
                kind=exc.kind,
                field=exc.field,
                message=str(exc),
                trade_id=exc.trade_id,
            ))
    if errors:
        logger.debug("Rejected %d of %d trade rows", len(errors), len(errors) + len(trades))
    return ParseResult(trades=tuple(trades), errors=tuple(errors))


def sort_chronologically(trades: Iterable[TradeRecord]) -> tuple[TradeRecord, ...]:
    """Stable sort by open instant."""
    return tuple(sorted(trades, key=lambda t: as_utc(t.opened_at)))
