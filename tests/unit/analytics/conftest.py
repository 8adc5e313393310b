"""Trade builders and shared fixtures for the analytics tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from trading_journal.analytics.record import TradeRecord
from trading_journal.core.enums import Direction, Outcome

# 2024-03-04 was a Monday
BASE_TIME = datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc)


def make_trade(
    trade_id: str = "t1",
    opened_at: datetime | None = None,
    *,
    outcome: Outcome = Outcome.WIN,
    pnl: float = 100.0,
    pnl_percent: float = 1.0,
    direction: Direction = Direction.BUY,
    symbol: str = "EURUSD",
    duration_min: float | None = None,
    commission: float | None = None,
    net_pnl: float | None = None,
    reviewed: bool = False,
    template_id: str | None = None,
    account_id: str | None = None,
) -> TradeRecord:
    """Build a TradeRecord; gross ``pnl`` is the net figure unless reviewed."""
    opened = opened_at or BASE_TIME
    return TradeRecord(
        trade_id=trade_id,
        opened_at=opened,
        closed_at=opened + timedelta(minutes=duration_min) if duration_min is not None else None,
        symbol=symbol,
        direction=direction,
        outcome=outcome,
        pnl_amount=pnl,
        pnl_percent=pnl_percent,
        commission=commission,
        net_pnl=net_pnl,
        reviewed_at=opened + timedelta(days=1) if reviewed else None,
        template_id=template_id,
        account_id=account_id,
    )


def win(trade_id: str, pnl: float = 100.0, **kwargs) -> TradeRecord:
    return make_trade(trade_id, outcome=Outcome.WIN, pnl=pnl, **kwargs)


def loss(trade_id: str, pnl: float = -50.0, **kwargs) -> TradeRecord:
    return make_trade(trade_id, outcome=Outcome.LOSS, pnl=pnl, **kwargs)


def breakeven(trade_id: str, pnl: float = 0.0, **kwargs) -> TradeRecord:
    return make_trade(trade_id, outcome=Outcome.BREAKEVEN, pnl=pnl, **kwargs)


def at(day: int, hour: int = 10, minute: int = 0, month: int = 3, year: int = 2024) -> datetime:
    """UTC instant helper."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Trade sets
# ---------------------------------------------------------------------------

@pytest.fixture
def mixed_trades() -> list[TradeRecord]:
    """Six trades over three days, chronological.

    Net by day (UTC): 03-04 +150, 03-05 -80, 03-06 +70  => total +140
    """
    return [
        win("w1", 100.0, opened_at=at(4, 8), symbol="EURUSD", duration_min=30),
        loss("l1", -50.0, opened_at=at(4, 13), symbol="GBPUSD", direction=Direction.SELL, duration_min=60),
        win("w2", 100.0, opened_at=at(4, 17), symbol="eurusd", duration_min=90),
        loss("l2", -80.0, opened_at=at(5, 22), symbol="XAUUSD", direction=Direction.SELL),
        breakeven("b1", 0.0, opened_at=at(6, 3), symbol="GBPUSD"),
        win("w3", 70.0, opened_at=at(6, 9), symbol="XAUUSD", duration_min=15),
    ]


@pytest.fixture
def reviewed_trade() -> TradeRecord:
    return make_trade(
        "r1", pnl=100.0, commission=20.0, net_pnl=50.0, reviewed=True,
    )
