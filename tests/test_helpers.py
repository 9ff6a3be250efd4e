from datetime import date, datetime, time, timezone

import pytest

from conftest import MONDAY, make_event
from studydesk.services.schedule_status import minutes_until
from studydesk.utils.helpers import (
    calculate_percentage,
    format_clock,
    format_datetime_local,
    format_duration,
    format_starts_in,
    from_epoch_ms,
    get_week_range,
    get_zoneinfo,
    minutes_between,
    parse_hhmm,
    to_epoch_ms,
    to_local,
)


@pytest.mark.parametrize("minutes, text", [(0, "0m"), (45, "45m"), (60, "1h"), (95, "1h 35m")])
def test_format_duration(minutes, text):
    assert format_duration(minutes) == text


@pytest.mark.parametrize("minutes, text", [(0, "< 1m"), (1, "1m"), (4, "4m"), (75, "1h 15m")])
def test_format_starts_in(minutes, text):
    assert format_starts_in(minutes) == text


def test_final_minute_before_class_is_not_zero():
    event = make_event("a", "09:00", "10:00")
    assert format_starts_in(minutes_until(event, MONDAY.replace(hour=8, minute=59, second=30))) == "< 1m"


@pytest.mark.parametrize("seconds, text", [(1500, "25:00"), (61, "01:01"), (0, "00:00"), (-5, "00:00")])
def test_format_clock(seconds, text):
    assert format_clock(seconds) == text


def test_week_range_monday_and_sunday_start():
    wednesday = date(2024, 1, 3)
    assert get_week_range(wednesday) == (date(2024, 1, 1), date(2024, 1, 7))
    assert get_week_range(wednesday, first_weekday=6) == (date(2023, 12, 31), date(2024, 1, 6))
    assert get_week_range(date(2023, 12, 31), first_weekday=6)[0] == date(2023, 12, 31)


def test_calculate_percentage():
    assert calculate_percentage(1, 3) == 33.33
    assert calculate_percentage(5, 0) == 0.0


def test_parse_hhmm():
    assert parse_hhmm("07:30") == time(7, 30)
    assert parse_hhmm(" 23:59 ") == time(23, 59)
    for bad in ("24:00", "7.30", "", None):
        with pytest.raises(ValueError):
            parse_hhmm(bad)


def test_minutes_between():
    assert minutes_between(time(9, 0), time(10, 30)) == 90
    assert minutes_between(time(10, 0), time(9, 0)) == -60


def test_epoch_ms_round_trip():
    moment = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    ms = to_epoch_ms(moment)
    assert ms == 1_704_110_400_000
    assert from_epoch_ms(ms, "UTC") == moment
    assert to_epoch_ms(datetime(2024, 1, 1, 12, 0)) == ms


def test_unknown_zone_falls_back_to_utc():
    assert get_zoneinfo("Mars/Olympus").key == "UTC"


def test_local_conversion():
    moment = datetime(2024, 7, 1, 12, 0)
    assert to_local(moment, "Europe/Berlin").hour == 14
    assert format_datetime_local(moment, tz_name="UTC") == "2024-07-01 12:00"
    assert format_datetime_local(None) == "N/A"
