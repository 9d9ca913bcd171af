from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from sundayreg.services.sunday import resolve, sunday_label, upcoming_sundays

NY = ZoneInfo("America/New_York")


def test_sunday_before_cutoff_is_today():
    now = datetime(2024, 3, 3, 13, 59, tzinfo=NY)
    t = resolve(now, NY, cutoff_hour=14)
    assert t.date == date(2024, 3, 3)
    assert t.is_today is True
    assert t.label == "Sunday, March 3, 2024"


def test_sunday_at_cutoff_rolls_a_full_week():
    now = datetime(2024, 3, 3, 14, 0, tzinfo=NY)
    t = resolve(now, NY, cutoff_hour=14)
    assert t.date == date(2024, 3, 10)
    assert t.is_today is False


def test_sunday_late_evening_rolls_forward():
    t = resolve(datetime(2024, 3, 3, 23, 30, tzinfo=NY), NY, cutoff_hour=14)
    assert t.date == date(2024, 3, 10)


@pytest.mark.parametrize("hour", [0, 6, 12, 13])
def test_every_hour_before_cutoff_is_today(hour):
    t = resolve(datetime(2024, 3, 3, hour, 0, tzinfo=NY), NY, cutoff_hour=14)
    assert t.date == date(2024, 3, 3) and t.is_today


def test_weekdays_resolve_to_coming_sunday():
    monday = datetime(2024, 2, 26, 9, 0, tzinfo=NY)
    for offset in range(6):  # Monday .. Saturday
        now = monday + timedelta(days=offset)
        t = resolve(now, NY)
        assert t.date == date(2024, 3, 3)
        assert t.date.weekday() == 6
        assert 1 <= (t.date - now.date()).days <= 6
        assert t.is_today is False


def test_saturday_night_is_one_day_ahead():
    t = resolve(datetime(2024, 3, 2, 23, 59, tzinfo=NY), NY)
    assert t.date == date(2024, 3, 3)
    assert t.is_today is False


def test_instant_is_read_in_configured_timezone():
    # 2024-03-03 03:00 UTC is still Saturday evening in New York
    utc_now = datetime(2024, 3, 3, 3, 0, tzinfo=ZoneInfo("UTC"))
    assert resolve(utc_now, NY).date == date(2024, 3, 3)
    assert resolve(utc_now, NY).is_today is False
    # same instant is Sunday 11:00 in Manila
    manila = ZoneInfo("Asia/Manila")
    t = resolve(utc_now, manila)
    assert t.date == date(2024, 3, 3) and t.is_today is True


def test_naive_now_is_wall_clock_in_tz():
    t = resolve(datetime(2024, 3, 3, 9, 0), NY)
    assert t.is_today is True


def test_custom_cutoff_hour():
    now = datetime(2024, 3, 3, 9, 0, tzinfo=NY)
    assert resolve(now, NY, cutoff_hour=9).date == date(2024, 3, 10)
    assert resolve(now, NY, cutoff_hour=10).date == date(2024, 3, 3)
    # cutoff 0: Sunday is never "today"
    assert resolve(now, NY, cutoff_hour=0).is_today is False


def test_invalid_cutoff_rejected():
    with pytest.raises(ValueError):
        resolve(datetime(2024, 3, 3, 9, 0, tzinfo=NY), NY, cutoff_hour=25)


def test_label_has_no_zero_padding():
    assert sunday_label(date(2024, 12, 1)) == "Sunday, December 1, 2024"


def test_upcoming_sundays_are_weekly():
    out = upcoming_sundays(datetime(2024, 2, 28, 10, 0, tzinfo=NY), 3, NY)
    assert [s.date for s in out] == [date(2024, 3, 3), date(2024, 3, 10), date(2024, 3, 17)]
    assert all(not s.is_today for s in out)
