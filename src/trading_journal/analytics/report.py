"""Performance report assembly.

Filters once, then derives every section from the same filtered tuple.
Sections are independent of one another; the report is a pure function
of (trades, params) and is never mutated after construction.

Usage::

    params = ReportParams(
        filters=TradeFilters(direction=Direction.BUY),
        timezone="Europe/London",
        starting_balance=10_000.0,
    )
    report = build_report(trades, params)
    report.stats.profit_factor
    report.equity[-1].equity
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from trading_journal.core.enums import SharpeConvention

from .filters import TradeFilters, filter_trades
from .grouping import (
    DirectionPerformance,
    MonthPerformance,
    SessionPerformance,
    SymbolPerformance,
    bottom_symbols,
    day_of_week_bars,
    direction_performance,
    hour_bars,
    monthly_performance,
    session_performance,
    session_pnl_bars,
    symbol_ranking,
    top_symbols,
)
from .metrics import (
    BarPoint,
    Drawdown,
    EquityPoint,
    TradeStats,
    compute_stats,
    daily_net_series,
    equity_series,
    max_drawdown,
    monthly_net_bars,
    sharpe_ratio,
)
from .numeric import to_optional_number
from .record import TradeRecord
from .streaks import StreakSummary, detect_streaks
from .temporal import resolve_timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportParams:
    """Everything besides the trades that a report depends on."""

    filters: TradeFilters = field(default_factory=TradeFilters)
    timezone: str | None = None
    starting_balance: float | None = None  # None = not configured
    top_n: int = 5


@dataclass(frozen=True)
class PerformanceReport:
    timezone: str
    starting_balance: float | None
    trades: tuple[TradeRecord, ...]

    stats: TradeStats
    streaks: StreakSummary
    equity: tuple[EquityPoint, ...]
    daily_net: tuple[BarPoint, ...]
    monthly_net: tuple[BarPoint, ...]
    monthly: tuple[MonthPerformance, ...]
    sessions: tuple[SessionPerformance, ...]
    session_bars: tuple[BarPoint, ...]
    directions: tuple[DirectionPerformance, ...]
    day_of_week: tuple[BarPoint, ...]
    hours: tuple[BarPoint, ...]
    symbols: tuple[SymbolPerformance, ...]
    top_symbols: tuple[SymbolPerformance, ...]
    bottom_symbols: tuple[SymbolPerformance, ...]
    drawdown: Drawdown
    sharpe: float | None
    best_day: EquityPoint | None
    worst_day: EquityPoint | None

    @property
    def has_starting_balance(self) -> bool:
        return self.starting_balance is not None

    @property
    def ending_equity(self) -> float | None:
        """Last plotted equity value; ``None`` when there are no trades."""
        return self.equity[-1].equity if self.equity else None


def best_and_worst_day(
    points: Sequence[EquityPoint],
) -> tuple[EquityPoint | None, EquityPoint | None]:
    """Days with the highest / lowest own net; the earliest wins a tie."""
    best: EquityPoint | None = None
    worst: EquityPoint | None = None
    for p in points:
        if best is None or p.day_net > best.day_net:
            best = p
        if worst is None or p.day_net < worst.day_net:
            worst = p
    return best, worst


def build_report(
    trades: Iterable[TradeRecord],
    params: ReportParams | None = None,
) -> PerformanceReport:
    """Compute the full performance report for *trades* under *params*.

    Raises
    ------
    UnknownTimezoneError
        If ``params.timezone`` is not a valid IANA name.  No other
        input causes an exception.
    """
    params = params or ReportParams()
    tz = resolve_timezone(params.timezone)
    filtered = filter_trades(trades, params.filters)
    # A non-finite balance is treated as not configured
    balance = to_optional_number(params.starting_balance)

    equity = equity_series(filtered, tz, balance)
    daily = daily_net_series(filtered, tz)
    ranking = symbol_ranking(filtered)
    sessions = session_performance(filtered)

    start = balance if balance is not None else 0.0
    drawdown = max_drawdown([start, *(p.equity for p in equity)])
    sharpe = sharpe_ratio(
        [p.value for p in daily],
        convention=SharpeConvention.FIXED_BALANCE,
        starting_balance=balance,
    )
    best_day, worst_day = best_and_worst_day(equity)

    logger.debug(
        "Built report: %d trades, %d days, %d symbols",
        len(filtered), len(equity), len(ranking),
    )

    return PerformanceReport(
        timezone=tz.key,
        starting_balance=balance,
        trades=filtered,
        stats=compute_stats(filtered),
        streaks=detect_streaks(filtered),
        equity=tuple(equity),
        daily_net=tuple(daily),
        monthly_net=tuple(monthly_net_bars(filtered, tz)),
        monthly=tuple(monthly_performance(filtered, tz)),
        sessions=tuple(sessions),
        session_bars=tuple(session_pnl_bars(sessions)),
        directions=tuple(direction_performance(filtered)),
        day_of_week=tuple(day_of_week_bars(filtered, tz)),
        hours=tuple(hour_bars(filtered, tz)),
        symbols=tuple(ranking),
        top_symbols=tuple(top_symbols(ranking, params.top_n)),
        bottom_symbols=tuple(bottom_symbols(ranking, params.top_n)),
        drawdown=drawdown,
        sharpe=sharpe,
        best_day=best_day,
        worst_day=worst_day,
    )
