"""Grouping and ranking — symbol, direction, session, month and time views.

Each view is an independent pass over the filtered trades; all money
figures come from :func:`resolve_net_pnl`, so the views reconcile with
the scalar totals.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo

from trading_journal.core.enums import CalendarMode, Direction, Outcome, Session

from .metrics import BarPoint, expectancy, rate, reward_risk_ratio
from .numeric import to_number_safe
from .pnl import resolve_net_pnl
from .record import TradeRecord
from .temporal import (
    DAY_LABELS,
    SESSION_ORDER,
    UTC,
    day_key,
    day_of_week,
    hour_of_day,
    month_key,
    session_for,
    session_label,
)

UNKNOWN_SYMBOL = "UNKNOWN"


@dataclass(frozen=True)
class SymbolPerformance:
    symbol: str
    pnl: float
    trades: int
    wins: int
    losses: int

    @property
    def win_rate(self) -> float:
        return rate(self.wins, self.trades)


@dataclass(frozen=True)
class DirectionPerformance:
    direction: Direction
    trades: int = 0
    pnl: float = 0.0
    wins: int = 0
    losses: int = 0

    @property
    def win_rate(self) -> float:
        return rate(self.wins, self.trades)


@dataclass(frozen=True)
class SessionPerformance:
    session: Session
    trades: int = 0
    pnl: float = 0.0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0

    @property
    def label(self) -> str:
        return session_label(self.session)

    @property
    def win_rate(self) -> float:
        return rate(self.wins, self.trades)


@dataclass(frozen=True)
class MonthPerformance:
    month: str
    trades: int
    pnl: float
    win_rate: float
    wins: int
    losses: int
    breakeven: int
    rrr: float
    expectancy: float
    avg_duration_min: float
    active_days: int


@dataclass
class _Bucket:
    """Accumulator shared by the grouped views."""

    trades: int = 0
    pnl: float = 0.0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    win_sum: float = 0.0
    loss_sum_abs: float = 0.0
    duration_sum: float = 0.0
    duration_count: int = 0
    days: set[str] = field(default_factory=set)

    def record(self, trade: TradeRecord) -> float:
        net = resolve_net_pnl(trade)
        self.trades += 1
        self.pnl += net
        if trade.outcome == Outcome.WIN:
            self.wins += 1
            self.win_sum += net
        elif trade.outcome == Outcome.LOSS:
            self.losses += 1
            self.loss_sum_abs += abs(net)
        else:
            self.breakeven += 1
        duration = trade.duration_minutes
        if duration is not None:
            self.duration_sum += duration
            self.duration_count += 1
        return net


# ------------------------------------------------------------------ #
# Symbols                                                              #
# ------------------------------------------------------------------ #

def symbol_ranking(trades: Iterable[TradeRecord]) -> list[SymbolPerformance]:
    """Per-symbol totals sorted by net P&L, best first.

    Symbols are uppercased; blank or missing symbols group as ``UNKNOWN``.
    Ties keep first-seen order.
    """
    buckets: dict[str, _Bucket] = {}
    for t in trades:
        symbol = t.normalized_symbol or UNKNOWN_SYMBOL
        buckets.setdefault(symbol, _Bucket()).record(t)

    ranking = [
        SymbolPerformance(
            symbol=symbol, pnl=b.pnl, trades=b.trades, wins=b.wins, losses=b.losses,
        )
        for symbol, b in buckets.items()
    ]
    ranking.sort(key=lambda s: s.pnl, reverse=True)
    return ranking


def top_symbols(ranking: Sequence[SymbolPerformance], n: int = 5) -> list[SymbolPerformance]:
    return list(ranking[:n])


def bottom_symbols(ranking: Sequence[SymbolPerformance], n: int = 5) -> list[SymbolPerformance]:
    """The last *n* of the ranking, worst performer first."""
    if n <= 0:
        return []
    return list(reversed(ranking[-n:]))


# ------------------------------------------------------------------ #
# Direction / session                                                  #
# ------------------------------------------------------------------ #

def direction_performance(trades: Iterable[TradeRecord]) -> list[DirectionPerformance]:
    """Exactly two rows, BUY then SELL."""
    buckets = {d: _Bucket() for d in (Direction.BUY, Direction.SELL)}
    for t in trades:
        buckets[t.direction].record(t)
    return [
        DirectionPerformance(
            direction=d, trades=b.trades, pnl=b.pnl, wins=b.wins, losses=b.losses,
        )
        for d, b in buckets.items()
    ]


def session_performance(trades: Iterable[TradeRecord]) -> list[SessionPerformance]:
    """Exactly four rows in Asia, London, Overlap, New York order."""
    buckets = {s: _Bucket() for s in SESSION_ORDER}
    for t in trades:
        buckets[session_for(t.opened_at)].record(t)
    return [
        SessionPerformance(
            session=s,
            trades=b.trades,
            pnl=b.pnl,
            wins=b.wins,
            losses=b.losses,
            breakeven=b.breakeven,
        )
        for s, b in buckets.items()
    ]


def session_pnl_bars(rows: Iterable[SessionPerformance]) -> list[BarPoint]:
    return [BarPoint(label=r.label, value=r.pnl) for r in rows]


# ------------------------------------------------------------------ #
# Months                                                               #
# ------------------------------------------------------------------ #

def monthly_performance(
    trades: Iterable[TradeRecord], tz: ZoneInfo = UTC
) -> list[MonthPerformance]:
    """Per-month statistics, months ascending."""
    buckets: dict[str, _Bucket] = defaultdict(_Bucket)
    for t in trades:
        b = buckets[month_key(t.opened_at, tz)]
        b.record(t)
        b.days.add(day_key(t.opened_at, tz))

    rows: list[MonthPerformance] = []
    for month in sorted(buckets):
        b = buckets[month]
        win_rate = rate(b.wins, b.trades)
        avg_win = b.win_sum / b.wins if b.wins else 0.0
        avg_loss_abs = b.loss_sum_abs / b.losses if b.losses else 0.0
        rows.append(MonthPerformance(
            month=month,
            trades=b.trades,
            pnl=b.pnl,
            win_rate=win_rate,
            wins=b.wins,
            losses=b.losses,
            breakeven=b.breakeven,
            rrr=reward_risk_ratio(avg_win, avg_loss_abs),
            expectancy=expectancy(win_rate, avg_win, avg_loss_abs),
            avg_duration_min=b.duration_sum / b.duration_count if b.duration_count else 0.0,
            active_days=len(b.days),
        ))
    return rows


# ------------------------------------------------------------------ #
# Time of week / day                                                   #
# ------------------------------------------------------------------ #

def day_of_week_bars(trades: Iterable[TradeRecord], tz: ZoneInfo = UTC) -> list[BarPoint]:
    """Net P&L per local weekday, Sunday first."""
    by_dow = [0.0] * 7
    for t in trades:
        by_dow[day_of_week(t.opened_at, tz)] += resolve_net_pnl(t)
    return [BarPoint(label=lbl, value=v) for lbl, v in zip(DAY_LABELS, by_dow)]


def hour_bars(trades: Iterable[TradeRecord], tz: ZoneInfo = UTC) -> list[BarPoint]:
    """Net P&L per local wall-clock hour, 0-23."""
    by_hour = [0.0] * 24
    for t in trades:
        by_hour[hour_of_day(t.opened_at, tz)] += resolve_net_pnl(t)
    return [BarPoint(label=str(h), value=v) for h, v in enumerate(by_hour)]


def calendar_values(
    trades: Iterable[TradeRecord],
    month: str,
    tz: ZoneInfo = UTC,
    mode: CalendarMode = CalendarMode.PNL_PERCENT,
) -> dict[str, float]:
    """Per-day totals for one ``YYYY-MM`` calendar page.

    ``PNL_PERCENT`` sums the gross percent figures; ``PNL_DOLLAR`` sums net P&L.
    """
    by_day: dict[str, float] = defaultdict(float)
    for t in trades:
        day = day_key(t.opened_at, tz)
        if not day.startswith(month):
            continue
        if mode == CalendarMode.PNL_PERCENT:
            by_day[day] += to_number_safe(t.pnl_percent)
        else:
            by_day[day] += resolve_net_pnl(t)
    return dict(by_day)
