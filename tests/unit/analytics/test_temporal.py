"""Tests for timezone-aware bucketing and session classification."""

from datetime import date, datetime, timezone

import pytest

from trading_journal.analytics.temporal import (
    day_key,
    day_of_week,
    day_range,
    current_month,
    default_range,
    hour_of_day,
    month_key,
    month_range,
    parse_month,
    resolve_timezone,
    session_for,
    session_label,
)
from trading_journal.core.enums import Session
from trading_journal.core.errors import ConfigError, UnknownTimezoneError

from .conftest import at


class TestResolveTimezone:
    def test_blank_is_utc(self):
        assert resolve_timezone(None).key == "UTC"
        assert resolve_timezone("  ").key == "UTC"

    def test_known_zone(self):
        assert resolve_timezone("Asia/Tokyo").key == "Asia/Tokyo"

    def test_unknown_zone_raises(self):
        with pytest.raises(UnknownTimezoneError):
            resolve_timezone("Mars/Olympus_Mons")

    def test_unknown_zone_is_config_error(self):
        with pytest.raises(ConfigError):
            resolve_timezone("Not/AZone")


class TestLocalKeys:
    def test_day_key_shifts_with_timezone(self):
        # 23:30 UTC on Mar 4 is already Mar 5 in Istanbul (UTC+3)
        ts = at(4, 23, 30)
        assert day_key(ts) == "2024-03-04"
        assert day_key(ts, resolve_timezone("Europe/Istanbul")) == "2024-03-05"

    def test_day_key_shifts_backwards(self):
        ts = at(4, 2)
        assert day_key(ts, resolve_timezone("America/New_York")) == "2024-03-03"

    def test_month_key_crosses_month_boundary(self):
        ts = datetime(2024, 3, 31, 22, 0, tzinfo=timezone.utc)
        assert month_key(ts) == "2024-03"
        assert month_key(ts, resolve_timezone("Asia/Tokyo")) == "2024-04"

    def test_naive_datetime_treated_as_utc(self):
        assert day_key(datetime(2024, 3, 4, 23, 30)) == "2024-03-04"

    def test_day_of_week_sunday_is_zero(self):
        assert day_of_week(at(3)) == 0   # Sunday
        assert day_of_week(at(4)) == 1   # Monday
        assert day_of_week(at(9)) == 6   # Saturday

    def test_hour_of_day_is_local(self):
        ts = at(4, 10)
        assert hour_of_day(ts) == 10
        assert hour_of_day(ts, resolve_timezone("Asia/Tokyo")) == 19


class TestSessionFor:
    @pytest.mark.parametrize("hour,expected", [
        (0, Session.ASIA),
        (6, Session.ASIA),
        (7, Session.LONDON),
        (11, Session.LONDON),
        (12, Session.OVERLAP),
        (15, Session.OVERLAP),
        (16, Session.NEW_YORK),
        (20, Session.NEW_YORK),
        (21, Session.ASIA),
        (23, Session.ASIA),
    ])
    def test_utc_hour_boundaries(self, hour, expected):
        assert session_for(at(4, hour)) is expected

    def test_uses_utc_not_local_offset(self):
        tokyo = resolve_timezone("Asia/Tokyo")
        local = datetime(2024, 3, 4, 18, 0, tzinfo=tokyo)  # 09:00 UTC
        assert session_for(local) is Session.LONDON

    def test_labels(self):
        assert session_label(Session.OVERLAP) == "London–NY Overlap"
        assert session_label(Session.NEW_YORK) == "New York"


class TestRanges:
    def test_parse_month(self):
        assert parse_month("2024-03") == (2024, 3)

    @pytest.mark.parametrize("bad", ["2024-13", "2024", "march", "2024-00"])
    def test_parse_month_rejects(self, bad):
        with pytest.raises(ConfigError):
            parse_month(bad)

    def test_month_range_utc(self):
        start, end = month_range("2024-12")
        assert start == datetime(2024, 12, 1, tzinfo=timezone.utc)
        assert end == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_month_range_local_midnight(self):
        start, _ = month_range("2024-03", resolve_timezone("Europe/Istanbul"))
        assert start == datetime(2024, 2, 29, 21, 0, tzinfo=timezone.utc)

    def test_day_range_end_inclusive(self):
        start, end = day_range(date(2024, 3, 4), date(2024, 3, 6))
        assert start == datetime(2024, 3, 4, tzinfo=timezone.utc)
        assert end == datetime(2024, 3, 7, tzinfo=timezone.utc)

    def test_current_month_is_local(self):
        now = datetime(2024, 3, 31, 23, 0, tzinfo=timezone.utc)
        assert current_month(now) == "2024-03"
        assert current_month(now, resolve_timezone("Europe/Istanbul")) == "2024-04"

    def test_default_range(self):
        assert default_range(date(2024, 3, 31), 90) == (date(2024, 1, 1), date(2024, 3, 31))
