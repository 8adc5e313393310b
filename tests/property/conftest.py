"""Hypothesis strategies for trade records."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from hypothesis import strategies as st

from trading_journal.analytics.record import TradeRecord
from trading_journal.core.enums import Direction, Outcome

# 2024-03-04 was a Monday
BASE_TIME = datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc)

SYMBOLS = ["EURUSD", "eurusd", "GBPUSD", " XAUUSD ", "", "BTCUSD"]
TIMEZONES = ["UTC", "Europe/Istanbul", "America/New_York", "Asia/Tokyo"]

money = st.one_of(
    st.floats(min_value=-1e6, max_value=1e6, allow_nan=False),
    st.sampled_from([float("nan"), float("inf"), float("-inf")]),
)


@st.composite
def trades(draw) -> TradeRecord:
    opened = BASE_TIME + timedelta(minutes=draw(st.integers(0, 60 * 24 * 120)))
    duration = draw(st.one_of(st.none(), st.integers(-30, 600)))
    reviewed = draw(st.booleans())
    return TradeRecord(
        trade_id=f"t{draw(st.integers(0, 10**9))}",
        opened_at=opened,
        closed_at=opened + timedelta(minutes=duration) if duration is not None else None,
        direction=draw(st.sampled_from(list(Direction))),
        outcome=draw(st.sampled_from(list(Outcome))),
        symbol=draw(st.sampled_from(SYMBOLS)),
        pnl_amount=draw(money),
        pnl_percent=draw(st.floats(min_value=-50, max_value=50)),
        commission=draw(st.one_of(st.none(), st.floats(min_value=0, max_value=100))),
        net_pnl=draw(st.one_of(st.none(), money)),
        reviewed_at=opened + timedelta(days=1) if reviewed else None,
        template_id=draw(st.sampled_from([None, "tpl-1", "tpl-2"])),
    )


trade_lists = st.lists(trades(), max_size=40)

day_bounds = st.datetimes(
    min_value=datetime(2024, 3, 1),
    max_value=datetime(2024, 8, 1),
    timezones=st.just(timezone.utc),
)
