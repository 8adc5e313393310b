"""Filter & normalize — the working subset every report section consumes.

All criteria are ANDed in a single pass; input order is preserved.  A
criterion that is ``None`` or empty imposes no constraint.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from trading_journal.core.enums import Direction, Outcome, ReviewedFilter, Session

from .record import TradeRecord
from .temporal import as_utc, session_for, session_label

NO_SETUP = "NO_SETUP"


@dataclass(frozen=True)
class TradeFilters:
    """Stateless filter criteria for one computation call."""

    range_start: datetime | None = None  # inclusive
    range_end: datetime | None = None    # exclusive
    instrument_query: str = ""
    instruments: tuple[str, ...] = ()
    direction: Direction | None = None
    outcome: Outcome | None = None
    session: Session | None = None
    reviewed: ReviewedFilter | None = None
    setup: str | None = None  # NO_SETUP or a template id
    account_id: str | None = None


def normalize_filters(filters: TradeFilters) -> TradeFilters:
    """Trim free-text criteria so equal filters compare equal."""
    return replace(
        filters,
        instrument_query=filters.instrument_query.strip(),
        instruments=tuple(
            s.strip().upper() for s in filters.instruments if s and s.strip()
        ),
        setup=filters.setup or None,
        account_id=filters.account_id or None,
    )


def _matches(trade: TradeRecord, f: TradeFilters, query: str, instruments: frozenset[str]) -> bool:
    if query and query not in trade.symbol.upper():
        return False
    if instruments and trade.normalized_symbol not in instruments:
        return False
    if f.direction is not None and trade.direction != f.direction:
        return False
    if f.outcome is not None and trade.outcome != f.outcome:
        return False
    if f.session is not None and session_for(trade.opened_at) != f.session:
        return False

    if f.reviewed == ReviewedFilter.REVIEWED and trade.reviewed_at is None:
        return False
    if f.reviewed == ReviewedFilter.NOT_REVIEWED and trade.reviewed_at is not None:
        return False

    if f.setup == NO_SETUP:
        if trade.template_id is not None:
            return False
    elif f.setup and trade.template_id != f.setup:
        return False

    if f.account_id and trade.account_id != f.account_id:
        return False

    opened = as_utc(trade.opened_at)
    if f.range_start is not None and opened < as_utc(f.range_start):
        return False
    if f.range_end is not None and opened >= as_utc(f.range_end):
        return False

    return True


def filter_trades(
    trades: Iterable[TradeRecord], filters: TradeFilters | None = None
) -> tuple[TradeRecord, ...]:
    """Return the trades satisfying every non-empty criterion, in input order."""
    if filters is None:
        return tuple(trades)
    f = normalize_filters(filters)
    query = f.instrument_query.upper()
    instruments = frozenset(f.instruments)
    return tuple(t for t in trades if _matches(t, f, query, instruments))


def active_filter_count(filters: TradeFilters) -> int:
    """Number of categorical criteria in effect (the date range is not counted)."""
    f = normalize_filters(filters)
    criteria = (
        f.instrument_query,
        f.instruments,
        f.direction,
        f.session,
        f.outcome,
        f.reviewed,
        f.setup,
        f.account_id,
    )
    return sum(1 for c in criteria if c)


def describe_filters(
    filters: TradeFilters,
    setup_names: Mapping[str, str] | None = None,
) -> str:
    """One-line human summary, e.g. ``2024-01-01 → 2024-03-31 • Dir: BUY``."""
    f = normalize_filters(filters)
    bits: list[str] = []
    if f.range_start is not None or f.range_end is not None:
        start = f.range_start.date().isoformat() if f.range_start else "…"
        end = f.range_end.date().isoformat() if f.range_end else "…"
        bits.append(f"{start} → {end}")
    if f.instrument_query:
        bits.append(f"Instrument: {f.instrument_query.upper()}")
    if f.instruments:
        bits.append(f"Instruments: {', '.join(f.instruments)}")
    if f.direction is not None:
        bits.append(f"Dir: {f.direction.value}")
    if f.session is not None:
        bits.append(f"Session: {session_label(f.session)}")
    if f.outcome is not None:
        bits.append(f"Outcome: {f.outcome.value}")
    if f.reviewed == ReviewedFilter.REVIEWED:
        bits.append("Reviewed")
    elif f.reviewed == ReviewedFilter.NOT_REVIEWED:
        bits.append("Not reviewed")
    if f.setup == NO_SETUP:
        bits.append("Setup: none")
    elif f.setup:
        name = (setup_names or {}).get(f.setup)
        bits.append(f"Setup: {name or 'Selected'}")
    return " • ".join(bits)


def instrument_options(trades: Iterable[TradeRecord]) -> list[str]:
    """Sorted distinct non-blank symbols, uppercased."""
    return sorted({t.normalized_symbol for t in trades if t.normalized_symbol})


def filters_from_mapping(data: Mapping[str, Any]) -> TradeFilters:
    """Build filters from loosely typed input (CLI options, query params)."""

    def _enum(cls: Any, key: str) -> Any:
        value = data.get(key)
        if value in (None, ""):
            return None
        return cls(str(value).strip().upper())

    instruments = data.get("instruments") or ()
    if isinstance(instruments, str):
        instruments = tuple(s for s in instruments.split(",") if s.strip())

    return TradeFilters(
        range_start=data.get("range_start"),
        range_end=data.get("range_end"),
        instrument_query=data.get("instrument_query") or "",
        instruments=tuple(instruments),
        direction=_enum(Direction, "direction"),
        outcome=_enum(Outcome, "outcome"),
        session=_enum(Session, "session"),
        reviewed=_enum(ReviewedFilter, "reviewed"),
        setup=data.get("setup") or None,
        account_id=data.get("account_id") or None,
    )
