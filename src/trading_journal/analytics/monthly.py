"""Monthly report — one calendar month against a carried-forward balance.

Differs from the analytics report in two deliberate ways that users of
both screens have come to rely on:

* the month opens at ``starting balance + net P&L of all prior trades``;
* daily returns (and so the Sharpe ratio) divide by the equity before
  each day rather than by a fixed balance.

Usage::

    start = month_starting_balance(accounts, "all", prior_trades)
    report = build_monthly_report(trades, month="2024-03",
                                  timezone="Europe/Istanbul",
                                  starting_balance=start)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from trading_journal.core.enums import Outcome, SharpeConvention

from .filters import TradeFilters, filter_trades
from .metrics import (
    Drawdown,
    daily_returns,
    max_drawdown,
    profit_factor,
    rate,
    sharpe_ratio,
)
from .numeric import to_number_safe
from .pnl import resolve_net_pnl, resolve_net_pnl_pct
from .record import TradeRecord
from .temporal import day_key, month_range, resolve_timezone, to_local

logger = logging.getLogger(__name__)

ALL_ACCOUNTS = "all"


@dataclass(frozen=True)
class AccountBalance:
    account_id: str
    starting_balance: float | None = None


@dataclass(frozen=True)
class DailyPoint:
    day: str        # YYYY-MM-DD
    label: str      # e.g. "Mar 08"
    pnl: float
    equity: float   # equity after the day closes
    ret: float      # pnl / equity before the day


@dataclass(frozen=True)
class SymbolStat:
    symbol: str
    pnl: float
    count: int
    win_rate: float


@dataclass(frozen=True)
class MonthlyReport:
    month: str
    timezone: str
    starting_balance: float
    ending_balance: float

    total_trades: int
    wins: int
    losses: int
    breakeven: int
    win_rate: float

    net_pnl: float
    net_pnl_pct: float  # sum of per-trade net percent figures
    gross_profit: float
    gross_loss_abs: float
    avg_win: float
    avg_loss: float  # signed, negative when losses are stored negative
    rrr: float
    expectancy: float
    profit_factor: float
    sharpe: float | None

    drawdown: Drawdown
    best_day: DailyPoint | None
    worst_day: DailyPoint | None
    daily: tuple[DailyPoint, ...]
    by_symbol: tuple[SymbolStat, ...]


@dataclass(frozen=True)
class MonthSummary:
    """Headline figures for the dashboard cards."""

    total: int
    wins: int
    losses: int
    breakeven: int
    pnl: float
    win_rate: float
    commissions_paid: float
    pnl_pct: float
    equity: float | None


# ---------------------------------------------------------------------------
# Starting balance
# ---------------------------------------------------------------------------

def prior_net_pnl(prior_trades: Iterable[TradeRecord]) -> float:
    return sum(resolve_net_pnl(t) for t in prior_trades)


def month_starting_balance(
    accounts: Sequence[AccountBalance],
    account_id: str,
    prior_trades: Iterable[TradeRecord] = (),
) -> float | None:
    """Balance the month opens at, or ``None`` when the account has none.

    ``"all"`` sums every account's balance (unset balances count as 0).
    *prior_trades* are the trades opened before the month, already
    scoped to the selected account by the caller.
    """
    if account_id == ALL_ACCOUNTS:
        total = sum(to_number_safe(a.starting_balance) for a in accounts)
        return total + prior_net_pnl(prior_trades)

    account = next((a for a in accounts if a.account_id == account_id), None)
    if account is None or account.starting_balance is None:
        return None
    return to_number_safe(account.starting_balance) + prior_net_pnl(prior_trades)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

def _symbol_stats(trades: Sequence[TradeRecord]) -> list[SymbolStat]:
    """Per-symbol totals, best first; trades without a symbol are skipped."""
    pnl: dict[str, float] = {}
    count: dict[str, int] = {}
    wins: dict[str, int] = {}
    for t in trades:
        sym = t.normalized_symbol
        if not sym:
            continue
        pnl[sym] = pnl.get(sym, 0.0) + resolve_net_pnl(t)
        count[sym] = count.get(sym, 0) + 1
        if t.outcome == Outcome.WIN:
            wins[sym] = wins.get(sym, 0) + 1
    stats = [
        SymbolStat(symbol=s, pnl=pnl[s], count=count[s], win_rate=rate(wins.get(s, 0), count[s]))
        for s in pnl
    ]
    stats.sort(key=lambda s: s.pnl, reverse=True)
    return stats


def build_monthly_report(
    trades: Iterable[TradeRecord],
    *,
    month: str,
    timezone: str | None = None,
    starting_balance: float | None = None,
) -> MonthlyReport:
    """Compute the monthly report for trades opened within *month*.

    Trades outside the local calendar month are ignored, so callers may
    pass a coarser range.
    """
    tz = resolve_timezone(timezone)
    start_ts, end_ts = month_range(month, tz)
    rows = filter_trades(trades, TradeFilters(range_start=start_ts, range_end=end_ts))
    start = to_number_safe(starting_balance)

    winners = [t for t in rows if t.outcome == Outcome.WIN]
    losers = [t for t in rows if t.outcome == Outcome.LOSS]
    total = len(rows)

    net = sum(resolve_net_pnl(t) for t in rows)
    gross_profit = sum(resolve_net_pnl(t) for t in winners)
    loss_sum = sum(resolve_net_pnl(t) for t in losers)
    gross_loss_abs = abs(loss_sum)

    avg_win = gross_profit / len(winners) if winners else 0.0
    avg_loss = loss_sum / len(losers) if losers else 0.0
    win_frac = len(winners) / total if total else 0.0
    loss_frac = len(losers) / total if total else 0.0

    # Daily equity
    day_net: dict[str, float] = {}
    labels: dict[str, str] = {}
    for t in rows:
        key = day_key(t.opened_at, tz)
        day_net[key] = day_net.get(key, 0.0) + resolve_net_pnl(t)
        labels.setdefault(key, to_local(t.opened_at, tz).strftime("%b %d"))

    days = sorted(day_net)
    day_nets = [day_net[d] for d in days]
    rets = daily_returns(day_nets, SharpeConvention.PRIOR_EQUITY, start)

    daily: list[DailyPoint] = []
    equity = start
    for d, pnl, ret in zip(days, day_nets, rets):
        equity += pnl
        daily.append(DailyPoint(day=d, label=labels[d], pnl=pnl, equity=equity, ret=ret))

    best_day: DailyPoint | None = None
    worst_day: DailyPoint | None = None
    for p in daily:
        if best_day is None or p.pnl > best_day.pnl:
            best_day = p
        if worst_day is None or p.pnl < worst_day.pnl:
            worst_day = p

    logger.debug("Monthly report %s: %d trades over %d days", month, total, len(daily))

    return MonthlyReport(
        month=month,
        timezone=tz.key,
        starting_balance=start,
        ending_balance=start + net,
        total_trades=total,
        wins=len(winners),
        losses=len(losers),
        breakeven=sum(1 for t in rows if t.outcome == Outcome.BREAKEVEN),
        win_rate=rate(len(winners), total),
        net_pnl=net,
        net_pnl_pct=sum(resolve_net_pnl_pct(t) for t in rows),
        gross_profit=gross_profit,
        gross_loss_abs=gross_loss_abs,
        avg_win=avg_win,
        avg_loss=avg_loss,
        rrr=avg_win / abs(avg_loss) if avg_loss != 0 else 0.0,
        expectancy=win_frac * avg_win + loss_frac * avg_loss if total else 0.0,
        profit_factor=profit_factor(gross_profit, gross_loss_abs),
        sharpe=sharpe_ratio(
            day_nets,
            convention=SharpeConvention.PRIOR_EQUITY,
            starting_balance=start,
        ),
        drawdown=max_drawdown([start, *(p.equity for p in daily)]),
        best_day=best_day,
        worst_day=worst_day,
        daily=tuple(daily),
        by_symbol=tuple(_symbol_stats(rows)),
    )


def month_summary(
    trades: Sequence[TradeRecord],
    starting_balance: float | None = None,
) -> MonthSummary:
    """Dashboard headline figures for an already month-scoped trade list."""
    total = len(trades)
    wins = sum(1 for t in trades if t.outcome == Outcome.WIN)
    losses = sum(1 for t in trades if t.outcome == Outcome.LOSS)
    pnl = sum(resolve_net_pnl(t) for t in trades)
    return MonthSummary(
        total=total,
        wins=wins,
        losses=losses,
        breakeven=sum(1 for t in trades if t.outcome == Outcome.BREAKEVEN),
        pnl=pnl,
        win_rate=rate(wins, total),
        commissions_paid=sum(to_number_safe(t.commission) for t in trades),
        pnl_pct=pnl / starting_balance * 100 if starting_balance else 0.0,
        equity=starting_balance + pnl if starting_balance is not None else None,
    )
