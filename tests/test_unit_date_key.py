from datetime import date, datetime, timezone, timedelta

import pytest

from fleet_booking.models.date_key import DateKey


def test_strips_time_of_day():
    assert DateKey.from_value(datetime(2025, 6, 10, 23, 59)) == DateKey(2025, 6, 10)
    assert DateKey.from_value("2025-06-10T08:30:00") == DateKey(2025, 6, 10)
    assert DateKey.from_value(date(2025, 6, 10)) == DateKey(2025, 6, 10)


def test_aware_timestamp_uses_configured_timezone():
    # 22:00 UTC on the 9th is already the 10th in Nairobi (UTC+3)
    ts = datetime(2025, 6, 9, 22, 0, tzinfo=timezone.utc)
    assert DateKey.from_value(ts) == DateKey(2025, 6, 9)
    assert DateKey.from_value(ts, "Africa/Nairobi") == DateKey(2025, 6, 10)
    assert DateKey.from_value("2025-06-09T22:00:00Z", "Africa/Nairobi") == DateKey(2025, 6, 10)


def test_ordering_is_lexicographic():
    keys = [DateKey(2025, 12, 1), DateKey(2024, 12, 31), DateKey(2025, 2, 28)]
    assert sorted(keys) == [DateKey(2024, 12, 31), DateKey(2025, 2, 28), DateKey(2025, 12, 1)]


def test_rejects_impossible_days():
    with pytest.raises(ValueError):
        DateKey(2025, 2, 30)
    with pytest.raises(ValueError):
        DateKey.from_value("not-a-date")


def test_month_arithmetic_crosses_years():
    assert DateKey(2025, 12, 15).add_months(1) == DateKey(2026, 1, 1)
    assert DateKey(2025, 1, 31).add_months(-1) == DateKey(2024, 12, 1)
    assert DateKey(2024, 2, 28).add_days(1) == DateKey(2024, 2, 29)
    assert DateKey(2024, 3, 1).add_days(-1) == DateKey.of(date(2024, 3, 1) - timedelta(days=1))
