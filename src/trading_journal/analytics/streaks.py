"""Win/loss streak detection.

A run is broken by the opposite outcome *or* a breakeven.  Input must
be in chronological order; callers keep trades sorted by open time.

Usage::

    summary = detect_streaks(trades)
    summary.max_wins, summary.avg_losses
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from trading_journal.core.enums import Outcome

from .record import TradeRecord


@dataclass(frozen=True)
class StreakSummary:
    max_wins: int = 0
    max_losses: int = 0
    avg_wins: float = 0.0
    avg_losses: float = 0.0
    win_runs: tuple[int, ...] = ()
    loss_runs: tuple[int, ...] = ()


def outcome_sequence(trades: Iterable[TradeRecord]) -> list[str]:
    """Reduce trades to ``W`` / ``L`` / ``B`` symbols."""
    return [t.outcome.symbol for t in trades]


def detect_streaks(items: Iterable[TradeRecord | Outcome | str]) -> StreakSummary:
    """Scan an outcome sequence once and summarise its runs.

    *items* may be trade records, :class:`Outcome` members or the
    single-letter codes ``W`` / ``L`` / ``B``.
    """
    max_w = max_l = 0
    cur_w = cur_l = 0
    win_runs: list[int] = []
    loss_runs: list[int] = []

    for item in items:
        code = _code(item)
        if code == "W":
            cur_w += 1
            max_w = max(max_w, cur_w)
            if cur_l:
                loss_runs.append(cur_l)
            cur_l = 0
        elif code == "L":
            cur_l += 1
            max_l = max(max_l, cur_l)
            if cur_w:
                win_runs.append(cur_w)
            cur_w = 0
        else:
            if cur_w:
                win_runs.append(cur_w)
            if cur_l:
                loss_runs.append(cur_l)
            cur_w = cur_l = 0

    # Flush whatever run is still open
    if cur_w:
        win_runs.append(cur_w)
    if cur_l:
        loss_runs.append(cur_l)

    return StreakSummary(
        max_wins=max_w,
        max_losses=max_l,
        avg_wins=sum(win_runs) / len(win_runs) if win_runs else 0.0,
        avg_losses=sum(loss_runs) / len(loss_runs) if loss_runs else 0.0,
        win_runs=tuple(win_runs),
        loss_runs=tuple(loss_runs),
    )


def _code(item: TradeRecord | Outcome | str) -> str:
    if isinstance(item, TradeRecord):
        return item.outcome.symbol
    if isinstance(item, Outcome):
        return item.symbol
    return str(item).upper()[:1]
