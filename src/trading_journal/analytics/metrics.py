"""Aggregation engine — scalar statistics, equity curve, drawdown, Sharpe.

Every ratio has an explicit degenerate-denominator policy instead of
raising:

* profit factor: ``inf`` with no losing P&L but some profit, else 0
* reward:risk:   ``inf`` with no average loss but a positive average win, else 0
* Sharpe:        ``None`` with fewer than two days or zero deviation
* rates/shares:  0 when there are no trades
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from zoneinfo import ZoneInfo

import numpy as np

from trading_journal.core.enums import Outcome, SharpeConvention

from .numeric import to_number_safe, to_optional_number
from .pnl import resolve_net_pnl
from .record import TradeRecord
from .temporal import UTC, day_key, month_key

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TradeStats:
    """Scalar statistics over one filtered trade set.

    Rates and shares are percentages in ``[0, 100]``; money values are in
    the reporting currency; durations are minutes.
    """

    total_trades: int = 0
    win_count: int = 0
    loss_count: int = 0
    breakeven_count: int = 0
    win_share: float = 0.0
    loss_share: float = 0.0
    breakeven_share: float = 0.0
    win_rate: float = 0.0

    total_pnl: float = 0.0
    gross_profit: float = 0.0
    gross_loss_abs: float = 0.0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss_abs: float = 0.0
    rrr: float = 0.0
    expectancy: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0
    commissions_paid: float = 0.0

    win_pct_avg: float = 0.0
    loss_pct_avg: float = 0.0
    best_win_pct: float = 0.0
    worst_loss_pct: float = 0.0

    avg_duration_min: float = 0.0
    avg_win_duration_min: float = 0.0
    avg_loss_duration_min: float = 0.0


@dataclass(frozen=True)
class EquityPoint:
    """One day of the equity curve."""

    day: str        # YYYY-MM-DD in the report timezone
    equity: float   # plotted value: balance + cum_net, or cum_net alone
    day_net: float
    cum_net: float


@dataclass(frozen=True)
class BarPoint:
    label: str
    value: float


@dataclass(frozen=True)
class Drawdown:
    max_drawdown: float = 0.0      # absolute, >= 0
    max_drawdown_pct: float = 0.0  # fraction of the running peak, 0..1


# ---------------------------------------------------------------------------
# Ratio policies
# ---------------------------------------------------------------------------

def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def rate(count: int, total: int) -> float:
    """``count / total`` as a percentage; 0 when there is nothing to divide."""
    return count / total * 100 if total else 0.0


def profit_factor(gross_profit: float, gross_loss_abs: float) -> float:
    if gross_loss_abs > 0:
        return gross_profit / gross_loss_abs
    return math.inf if gross_profit > 0 else 0.0


def reward_risk_ratio(avg_win: float, avg_loss_abs: float) -> float:
    if avg_loss_abs > 0:
        return avg_win / avg_loss_abs
    return math.inf if avg_win > 0 else 0.0


def expectancy(win_rate_pct: float, avg_win: float, avg_loss_abs: float) -> float:
    """Expected net P&L per trade; the loss rate is everything that did not win."""
    win_frac = win_rate_pct / 100
    return win_frac * avg_win - (1 - win_frac) * avg_loss_abs


def average_duration(trades: Iterable[TradeRecord]) -> float:
    """Mean minutes over closed trades; negative durations are excluded."""
    durations = [d for d in (t.duration_minutes for t in trades) if d is not None]
    return mean(durations)


# ---------------------------------------------------------------------------
# Scalar statistics
# ---------------------------------------------------------------------------

def compute_stats(trades: Sequence[TradeRecord]) -> TradeStats:
    """Compute the scalar statistics block for *trades*."""
    total = len(trades)
    if total == 0:
        return TradeStats()

    winners = [t for t in trades if t.outcome == Outcome.WIN]
    losers = [t for t in trades if t.outcome == Outcome.LOSS]
    be_count = sum(1 for t in trades if t.outcome == Outcome.BREAKEVEN)

    nets = [resolve_net_pnl(t) for t in trades]
    total_pnl = sum(nets)
    gross_profit = sum(v for v in nets if v > 0)
    gross_loss_abs = abs(sum(v for v in nets if v < 0))

    avg_win = mean([resolve_net_pnl(t) for t in winners])
    avg_loss_abs = abs(mean([resolve_net_pnl(t) for t in losers]))
    win_rate = rate(len(winners), total)

    win_pcts = [to_number_safe(t.pnl_percent) for t in winners]
    loss_pcts = [to_number_safe(t.pnl_percent) for t in losers]

    return TradeStats(
        total_trades=total,
        win_count=len(winners),
        loss_count=len(losers),
        breakeven_count=be_count,
        win_share=rate(len(winners), total),
        loss_share=rate(len(losers), total),
        breakeven_share=rate(be_count, total),
        win_rate=win_rate,
        total_pnl=total_pnl,
        gross_profit=gross_profit,
        gross_loss_abs=gross_loss_abs,
        profit_factor=profit_factor(gross_profit, gross_loss_abs),
        avg_win=avg_win,
        avg_loss_abs=avg_loss_abs,
        rrr=reward_risk_ratio(avg_win, avg_loss_abs),
        expectancy=expectancy(win_rate, avg_win, avg_loss_abs),
        best_trade=max(nets),
        worst_trade=min(nets),
        commissions_paid=sum(to_number_safe(t.commission) for t in trades),
        win_pct_avg=mean(win_pcts),
        loss_pct_avg=mean(loss_pcts),
        best_win_pct=max(win_pcts) if win_pcts else 0.0,
        worst_loss_pct=min(loss_pcts) if loss_pcts else 0.0,
        avg_duration_min=average_duration(trades),
        avg_win_duration_min=average_duration(winners),
        avg_loss_duration_min=average_duration(losers),
    )


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------

def net_by_day(trades: Iterable[TradeRecord], tz: ZoneInfo = UTC) -> dict[str, float]:
    """Net P&L per local day key, keys in ascending order."""
    by_day: dict[str, float] = defaultdict(float)
    for t in trades:
        by_day[day_key(t.opened_at, tz)] += resolve_net_pnl(t)
    return {d: by_day[d] for d in sorted(by_day)}


def daily_net_series(trades: Iterable[TradeRecord], tz: ZoneInfo = UTC) -> list[BarPoint]:
    return [BarPoint(label=d, value=v) for d, v in net_by_day(trades, tz).items()]


def monthly_net_bars(trades: Iterable[TradeRecord], tz: ZoneInfo = UTC) -> list[BarPoint]:
    by_month: dict[str, float] = defaultdict(float)
    for t in trades:
        by_month[month_key(t.opened_at, tz)] += resolve_net_pnl(t)
    return [BarPoint(label=m, value=by_month[m]) for m in sorted(by_month)]


def equity_series(
    trades: Iterable[TradeRecord],
    tz: ZoneInfo = UTC,
    starting_balance: float | None = None,
) -> list[EquityPoint]:
    """Running sum of daily net P&L, offset by the starting balance when one is set."""
    balance = to_optional_number(starting_balance)
    points: list[EquityPoint] = []
    cum = 0.0
    for day, day_net in net_by_day(trades, tz).items():
        cum += day_net
        equity = balance + cum if balance is not None else cum
        points.append(EquityPoint(day=day, equity=equity, day_net=day_net, cum_net=cum))
    return points


# ---------------------------------------------------------------------------
# Risk metrics
# ---------------------------------------------------------------------------

def max_drawdown(values: Iterable[float]) -> Drawdown:
    """Largest decline from a running peak, absolute and as a fraction of the peak.

    The series should include the starting point before any trades.
    Non-finite points are treated as 0.
    """
    eq = np.array([to_number_safe(v) for v in values], dtype=float)
    if eq.size == 0:
        return Drawdown()

    running_max = np.maximum.accumulate(eq)
    drawdowns = running_max - eq
    pct = np.divide(
        drawdowns, running_max, out=np.zeros_like(drawdowns), where=running_max > 0
    )
    return Drawdown(
        max_drawdown=float(np.max(drawdowns)),
        max_drawdown_pct=float(np.max(pct)),
    )


def daily_returns(
    day_nets: Sequence[float],
    convention: SharpeConvention,
    starting_balance: float | None = None,
) -> list[float]:
    """Turn day net P&L into returns using the call site's denominator rule."""
    nets = np.asarray(day_nets, dtype=float)
    balance = to_optional_number(starting_balance)
    if nets.size == 0:
        return []

    if convention == SharpeConvention.FIXED_BALANCE:
        denom = balance if balance is not None and balance > 0 else 1.0
        return (nets / denom).tolist()

    # Equity before each day: the balance plus every earlier day's net
    prior_equity = (balance or 0.0) + np.concatenate(([0.0], np.cumsum(nets)[:-1]))
    returns = np.divide(nets, prior_equity, out=np.zeros_like(nets), where=prior_equity != 0)
    return returns.tolist()


def sharpe_ratio(
    day_nets: Sequence[float],
    *,
    convention: SharpeConvention = SharpeConvention.FIXED_BALANCE,
    starting_balance: float | None = None,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> float | None:
    """Annualized Sharpe of daily returns (risk-free rate 0).

    Uses the sample standard deviation (N-1).  Returns ``None`` with
    fewer than two days, or when the deviation or result is not a
    usable finite number.
    """
    if len(day_nets) < 2:
        return None

    returns = np.asarray(daily_returns(day_nets, convention, starting_balance), dtype=float)
    # Identical returns have zero spread; np.std can still report rounding noise
    if np.ptp(returns) == 0:
        return None

    mean_ret = float(np.mean(returns))
    std_ret = float(np.std(returns, ddof=1))
    if not std_ret or not math.isfinite(std_ret):
        return None

    annualized = mean_ret / std_ret * math.sqrt(periods_per_year)
    return annualized if math.isfinite(annualized) else None
