"""Tests for the filter & normalize stage."""

from datetime import date

import pytest

from trading_journal.analytics.filters import (
    NO_SETUP,
    TradeFilters,
    active_filter_count,
    describe_filters,
    filter_trades,
    filters_from_mapping,
    instrument_options,
)
from trading_journal.analytics.temporal import day_range, resolve_timezone
from trading_journal.core.enums import Direction, Outcome, ReviewedFilter, Session

from .conftest import at, make_trade


def _ids(trades):
    return [t.trade_id for t in trades]


class TestFilterTrades:
    def test_no_filters_returns_all_in_order(self, mixed_trades):
        assert _ids(filter_trades(mixed_trades)) == ["w1", "l1", "w2", "l2", "b1", "w3"]
        assert _ids(filter_trades(mixed_trades, TradeFilters())) == _ids(mixed_trades)

    def test_empty_input(self):
        assert filter_trades([], TradeFilters(direction=Direction.BUY)) == ()

    def test_instrument_query_is_case_insensitive_substring(self, mixed_trades):
        result = filter_trades(mixed_trades, TradeFilters(instrument_query=" usd "))
        assert len(result) == 6
        result = filter_trades(mixed_trades, TradeFilters(instrument_query="eur"))
        assert _ids(result) == ["w1", "w2"]

    def test_instrument_set(self, mixed_trades):
        result = filter_trades(mixed_trades, TradeFilters(instruments=("xauusd", " gbpusd")))
        assert _ids(result) == ["l1", "l2", "b1", "w3"]

    def test_direction_and_outcome(self, mixed_trades):
        f = TradeFilters(direction=Direction.SELL, outcome=Outcome.LOSS)
        assert _ids(filter_trades(mixed_trades, f)) == ["l1", "l2"]

    def test_session_uses_utc_hour(self, mixed_trades):
        assert _ids(filter_trades(mixed_trades, TradeFilters(session=Session.ASIA))) == ["l2", "b1"]
        assert _ids(filter_trades(mixed_trades, TradeFilters(session=Session.LONDON))) == ["w1", "w3"]

    def test_reviewed_status(self):
        trades = [make_trade("a", reviewed=True), make_trade("b")]
        assert _ids(filter_trades(trades, TradeFilters(reviewed=ReviewedFilter.REVIEWED))) == ["a"]
        assert _ids(filter_trades(trades, TradeFilters(reviewed=ReviewedFilter.NOT_REVIEWED))) == ["b"]

    def test_setup_sentinel_and_id(self):
        trades = [
            make_trade("a", template_id="tpl-1"),
            make_trade("b"),
            make_trade("c", template_id="tpl-2"),
        ]
        assert _ids(filter_trades(trades, TradeFilters(setup=NO_SETUP))) == ["b"]
        assert _ids(filter_trades(trades, TradeFilters(setup="tpl-2"))) == ["c"]

    def test_account(self):
        trades = [make_trade("a", account_id="acc-1"), make_trade("b", account_id="acc-2")]
        assert _ids(filter_trades(trades, TradeFilters(account_id="acc-2"))) == ["b"]

    def test_range_is_half_open(self, mixed_trades):
        start, end = at(4, 13), at(6, 3)
        result = filter_trades(mixed_trades, TradeFilters(range_start=start, range_end=end))
        assert _ids(result) == ["l1", "w2", "l2"]

    def test_day_range_includes_end_day(self, mixed_trades):
        start, end = day_range(date(2024, 3, 5), date(2024, 3, 6))
        result = filter_trades(mixed_trades, TradeFilters(range_start=start, range_end=end))
        assert _ids(result) == ["l2", "b1", "w3"]

    def test_range_respects_report_timezone(self, mixed_trades):
        # Mar 6 in Istanbul starts at Mar 5 21:00 UTC, so l2 (22:00 UTC) is included
        tz = resolve_timezone("Europe/Istanbul")
        start, end = day_range(date(2024, 3, 6), date(2024, 3, 6), tz)
        result = filter_trades(mixed_trades, TradeFilters(range_start=start, range_end=end))
        assert _ids(result) == ["l2", "b1", "w3"]

    def test_composition_is_conjunction(self, mixed_trades):
        combined = TradeFilters(direction=Direction.BUY, instrument_query="XAU")
        step = filter_trades(
            filter_trades(mixed_trades, TradeFilters(direction=Direction.BUY)),
            TradeFilters(instrument_query="XAU"),
        )
        assert filter_trades(mixed_trades, combined) == step == (mixed_trades[5],)


class TestFilterHelpers:
    def test_active_filter_count_ignores_range(self):
        f = TradeFilters(range_start=at(1), direction=Direction.BUY, instrument_query="  ")
        assert active_filter_count(f) == 1
        assert active_filter_count(TradeFilters()) == 0

    def test_describe_filters(self):
        f = TradeFilters(
            range_start=at(1),
            range_end=at(31),
            direction=Direction.BUY,
            session=Session.OVERLAP,
            reviewed=ReviewedFilter.REVIEWED,
            setup="tpl-1",
        )
        text = describe_filters(f, {"tpl-1": "Breakout"})
        assert text == (
            "2024-03-01 → 2024-03-31 • Dir: BUY • Session: London–NY Overlap"
            " • Reviewed • Setup: Breakout"
        )

    def test_describe_empty(self):
        assert describe_filters(TradeFilters()) == ""

    def test_instrument_options(self, mixed_trades):
        assert instrument_options(mixed_trades) == ["EURUSD", "GBPUSD", "XAUUSD"]

    def test_from_mapping(self):
        f = filters_from_mapping({
            "direction": "sell",
            "outcome": "",
            "session": "new_york",
            "instruments": "EURUSD, GBPUSD",
        })
        assert f.direction is Direction.SELL
        assert f.outcome is None
        assert f.session is Session.NEW_YORK
        assert f.instruments == ("EURUSD", " GBPUSD")

    def test_from_mapping_rejects_unknown_enum(self):
        with pytest.raises(ValueError):
            filters_from_mapping({"direction": "LONG"})
