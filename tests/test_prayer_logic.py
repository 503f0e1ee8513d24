from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from slati_cli.models import FALLBACK_PRAYER_TIMES, PrayerTimes
from slati_cli.prayer_logic import (
    format_time_12h,
    format_clock_ar,
    format_date_ar,
    format_time_for_display,
    get_countdown,
    get_prayer_status,
    resolve_next_prayer,
)


def _at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2024, 1, 15, hour, minute, second)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("00:05", "12:05 ص"),
        ("04:45", "4:45 ص"),
        ("11:59", "11:59 ص"),
        ("12:00", "12:00 م"),
        ("15:30", "3:30 م"),
        ("23:07", "11:07 م"),
    ],
)
def test_format_time_12h(value: str, expected: str) -> None:
    assert format_time_12h(value) == expected


def test_format_time_12h_hour_range() -> None:
    for hour in range(24):
        display_hour = int(format_time_12h(f"{hour:02}:09").split(":")[0])
        assert 1 <= display_hour <= 12


@pytest.mark.parametrize("value", ["1230", "", "ab:cd", "24:00", "12:60"])
def test_format_time_12h_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        format_time_12h(value)


def test_format_time_24h_passthrough() -> None:
    assert format_time_for_display("18:45", "24h") == "18:45"


def test_next_prayer_later_today() -> None:
    now = _at(13, 0)
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, now)

    assert next_prayer.name == "Asr"
    assert next_prayer.time == "15:30"
    assert next_prayer.display_name == "العصر"
    assert not next_prayer.is_tomorrow
    assert str(get_countdown(next_prayer, now)) == "02:30:00"


def test_next_prayer_before_fajr() -> None:
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, _at(1, 15))
    assert next_prayer.name == "Fajr"
    assert not next_prayer.is_tomorrow


def test_next_prayer_after_isha_is_tomorrow_fajr() -> None:
    now = _at(21, 0)
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, now)

    assert next_prayer.name == "Fajr"
    assert next_prayer.is_tomorrow
    assert next_prayer.at == datetime(2024, 1, 16, 4, 45)
    assert str(get_countdown(next_prayer, now)) == "07:45:00"


def test_prayer_at_exact_time_counts_as_passed() -> None:
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, _at(12, 10))
    assert next_prayer.name == "Asr"


def test_exactly_isha_rolls_over_to_tomorrow() -> None:
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, _at(20, 15))
    assert next_prayer.is_tomorrow


def test_countdown_floors_partial_seconds() -> None:
    now = _at(15, 29, 58) + timedelta(microseconds=400_000)
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, now)
    countdown = get_countdown(next_prayer, now)

    assert (countdown.hours, countdown.minutes, countdown.seconds) == (0, 0, 1)


def test_countdown_never_negative() -> None:
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, _at(13, 0))
    assert str(get_countdown(next_prayer, _at(16, 0))) == "00:00:00"


def test_resolution_is_idempotent() -> None:
    times = PrayerTimes.from_dict(FALLBACK_PRAYER_TIMES.to_dict())
    now = _at(19, 0, 30)

    first = resolve_next_prayer(times, now)
    second = resolve_next_prayer(times, now)

    assert first == second
    assert get_countdown(first, now) == get_countdown(second, now)
    assert times == FALLBACK_PRAYER_TIMES


def test_prayer_status_marks_next_and_passed() -> None:
    status = get_prayer_status(FALLBACK_PRAYER_TIMES, _at(13, 0))
    assert status == {
        "Fajr": "passed",
        "Dhuhr": "passed",
        "Asr": "next",
        "Maghrib": "upcoming",
        "Isha": "upcoming",
    }


def test_prayer_status_after_isha() -> None:
    status = get_prayer_status(FALLBACK_PRAYER_TIMES, _at(22, 0))
    assert status["Fajr"] == "next"
    assert status["Isha"] == "passed"


def test_chronological_check() -> None:
    assert FALLBACK_PRAYER_TIMES.is_chronological()
    swapped = PrayerTimes(
        Fajr="04:45",
        Dhuhr="15:30",
        Asr="12:10",
        Maghrib="18:45",
        Isha="20:15",
    )
    assert not swapped.is_chronological()


def test_countdown_across_spring_forward() -> None:
    london = ZoneInfo("Europe/London")
    now = datetime(2024, 3, 30, 21, 0, tzinfo=london)
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, now)

    assert next_prayer.is_tomorrow
    assert str(get_countdown(next_prayer, now)) == "06:45:00"


def test_countdown_across_fall_back() -> None:
    london = ZoneInfo("Europe/London")
    now = datetime(2024, 10, 26, 21, 0, tzinfo=london)
    next_prayer = resolve_next_prayer(FALLBACK_PRAYER_TIMES, now)

    assert str(get_countdown(next_prayer, now)) == "08:45:00"


def test_arabic_date_and_clock() -> None:
    moment = datetime(2024, 1, 15, 0, 5, 9)

    assert format_date_ar(moment) == "الاثنين، 15 يناير 2024"
    assert format_clock_ar(moment) == "12:05:09 ص"
    assert format_clock_ar(moment.replace(hour=13)) == "1:05:09 م"
