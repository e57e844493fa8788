"""Tests for local calendar-day windows."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from webhook_relay.relay.dates import day_window, local_hhmm, parse_day, resolve_window
from webhook_relay.relay.errors import InvalidDateError

ICT = timezone(timedelta(hours=7))


class TestParseDay:
    def test_explicit_date(self) -> None:
        assert parse_day("2026-03-01", 7) == date(2026, 3, 1)

    @pytest.mark.parametrize("value", ["today", None, ""])
    def test_today_uses_local_zone(self, value: str | None) -> None:
        # 20:00 UTC is already the next day at UTC+7
        now = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)
        assert parse_day(value, 7, now=now) == date(2026, 3, 2)

    @pytest.mark.parametrize(
        "value",
        ["yesterday", "2026-3-1", "01-03-2026", "2026-13-01", "2026-02-30", "2026-03-01T00:00"],
    )
    def test_malformed_rejected(self, value: str) -> None:
        with pytest.raises(InvalidDateError, match="Invalid date"):
            parse_day(value, 7)

    def test_invalid_date_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_day("nope", 7)


class TestDayWindow:
    def test_window_in_utc(self) -> None:
        start, end = day_window(date(2026, 3, 1), 7)

        assert start == datetime(2026, 2, 28, 17, 0, tzinfo=UTC)
        assert end == datetime(2026, 3, 1, 17, 0, tzinfo=UTC)
        assert start.tzinfo == UTC

    def test_last_half_second_of_day_included(self) -> None:
        start, end = day_window(date(2026, 3, 1), 7)
        instant = datetime(2026, 3, 1, 23, 59, 59, 500000, tzinfo=ICT)

        assert start <= instant < end

    def test_first_half_second_of_next_day_excluded(self) -> None:
        start, end = day_window(date(2026, 3, 1), 7)
        instant = datetime(2026, 3, 2, 0, 0, 0, 500000, tzinfo=ICT)

        assert not (start <= instant < end)

    def test_local_midnight_included(self) -> None:
        start, end = day_window(date(2026, 3, 1), 7)
        assert start <= datetime(2026, 3, 1, 0, 0, tzinfo=ICT) < end

    def test_negative_offset(self) -> None:
        start, _ = day_window(date(2026, 3, 1), -5)
        assert start == datetime(2026, 3, 1, 5, 0, tzinfo=UTC)


class TestResolveWindow:
    def test_combines_parse_and_window(self) -> None:
        assert resolve_window("2026-03-01", 7) == day_window(date(2026, 3, 1), 7)

    def test_propagates_invalid_date(self) -> None:
        with pytest.raises(InvalidDateError):
            resolve_window("bad", 7)


def test_local_hhmm() -> None:
    assert local_hhmm(datetime(2026, 3, 1, 17, 5, tzinfo=UTC), 7) == "00:05"
