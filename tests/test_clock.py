from datetime import datetime, timedelta

import pytest

from alarms.clock import ClockTime, Period, resolve


def _ref() -> datetime:
    return datetime(2024, 1, 1, 9, 0)


def test_midnight_is_hour_zero():
    result = resolve(ClockTime(12, 15, Period.AM), _ref())
    assert result.hour == 0
    assert result.minute == 15


def test_noon_stays_twelve():
    result = resolve(ClockTime(12, 0, Period.PM), _ref())
    assert result.hour == 12
    assert result == datetime(2024, 1, 1, 12, 0)


def test_pm_adds_twelve():
    assert ClockTime(7, 55, Period.PM).hour24 == 19
    assert ClockTime(7, 55, Period.AM).hour24 == 7


def test_result_always_after_reference():
    references = [
        datetime(2024, 1, 1, 0, 0),
        datetime(2024, 2, 28, 23, 59, 59),
        datetime(2024, 12, 31, 12, 0, 0, 500),
        datetime(2024, 6, 15, 7, 55),
    ]
    for ref in references:
        for period in Period:
            for hour in range(1, 13):
                for minute in range(60):
                    result = resolve(ClockTime(hour, minute, period), ref)
                    assert ref < result <= ref + timedelta(days=1)


def test_same_instant_rolls_to_tomorrow():
    ref = datetime(2024, 1, 1, 8, 0)
    assert resolve(ClockTime(8, 0, Period.AM), ref) == datetime(2024, 1, 2, 8, 0)


def test_rollover_crosses_year_end():
    ref = datetime(2024, 12, 31, 23, 30)
    assert resolve(ClockTime(1, 0, Period.AM), ref) == datetime(2025, 1, 1, 1, 0)


def test_resolve_is_deterministic():
    ref = datetime(2024, 1, 1, 23, 58, 30)
    clock_time = ClockTime(11, 59, Period.PM)
    assert resolve(clock_time, ref) == resolve(clock_time, ref)


def test_parse_and_render():
    clock_time = ClockTime.parse("7:05 pm")
    assert clock_time == ClockTime(7, 5, Period.PM)
    assert str(clock_time) == "07:05 PM"
    assert ClockTime.parse("12:00AM").hour24 == 0


@pytest.mark.parametrize("text", ["13:00 PM", "7:60 AM", "0:30 AM", "07:55", "later"])
def test_parse_rejects_invalid(text):
    with pytest.raises(ValueError):
        ClockTime.parse(text)


def test_period_accepts_strings():
    assert ClockTime(3, 0, "pm").period is Period.PM
    with pytest.raises(ValueError):
        ClockTime(3, 0, "XM")
