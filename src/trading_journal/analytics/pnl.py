"""Net P&L resolution — the single source of truth for "P&L".

A trade moves through two stages: logged (gross figures only) and
reviewed (commission and an optional explicit net figure are final).
Until review, commission and net are ignored even when present.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .numeric import to_number_safe, to_optional_number

if TYPE_CHECKING:
    from .record import TradeRecord


def resolve_net_pnl(trade: TradeRecord) -> float:
    """Net P&L of one trade.

    * not reviewed → gross ``pnl_amount``
    * reviewed → explicit ``net_pnl`` when finite, else gross − commission
    """
    gross = to_number_safe(trade.pnl_amount)
    if trade.reviewed_at is None:
        return gross

    explicit = to_optional_number(trade.net_pnl)
    if explicit is not None:
        return explicit

    commission = to_number_safe(trade.commission)
    return gross - commission


def resolve_net_pnl_pct(trade: TradeRecord) -> float:
    """Net P&L percent, scaled from the gross percent by net/gross."""
    gross_pct = to_number_safe(trade.pnl_percent)
    if trade.reviewed_at is None:
        return gross_pct

    gross = to_number_safe(trade.pnl_amount)
    net = resolve_net_pnl(trade)
    if gross == 0:
        return gross_pct
    return to_number_safe(gross_pct * net / gross)
