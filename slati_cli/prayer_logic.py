from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal
from zoneinfo import ZoneInfo

from .models import PRAYER_DISPLAY_NAMES, PRAYER_NAMES, PrayerName, PrayerTimes, TimeFormat

PrayerStatus = Literal["passed", "next", "upcoming"]

AM_MARKER = "ص"
PM_MARKER = "م"

_HHMM_RE = re.compile(r"(\d{1,2}):(\d{2})")


@dataclass(frozen=True)
class NextPrayer:
    name: PrayerName
    time: str
    display_name: str
    is_tomorrow: bool
    at: datetime


@dataclass(frozen=True)
class Countdown:
    hours: int
    minutes: int
    seconds: int

    def __str__(self) -> str:
        return f"{self.hours:02}:{self.minutes:02}:{self.seconds:02}"


def parse_hhmm(value: str) -> tuple[int, int]:
    match = _HHMM_RE.fullmatch(value.strip())
    if not match:
        raise ValueError(f"Invalid time value: {value!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return hours, minutes


def format_time_12h(value: str) -> str:
    """Render a 24-hour ``HH:MM`` value as ``h:MM`` followed by the Arabic AM/PM marker."""
    hours, minutes = parse_hhmm(value)
    marker = PM_MARKER if hours >= 12 else AM_MARKER
    return f"{hours % 12 or 12}:{minutes:02} {marker}"


def format_time_for_display(value: str, time_format: TimeFormat) -> str:
    if time_format == "24h":
        return value
    return format_time_12h(value)


def get_time_zone_now(time_zone: str | None) -> datetime:
    if time_zone:
        return datetime.now(ZoneInfo(time_zone))
    # Naive local time; astimezone() applies the system rules per date.
    return datetime.now()


def time_string_to_datetime(time_str: str, base_date: datetime) -> datetime:
    hours, minutes = parse_hhmm(time_str)
    return base_date.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def resolve_next_prayer(prayer_times: PrayerTimes, now: datetime) -> NextPrayer:
    for name in PRAYER_NAMES:
        time = prayer_times.get(name)
        at = time_string_to_datetime(time, now)
        # Equal to now counts as already passed.
        if at > now:
            return NextPrayer(
                name=name,
                time=time,
                display_name=PRAYER_DISPLAY_NAMES[name],
                is_tomorrow=False,
                at=at,
            )

    tomorrow = now + timedelta(days=1)
    return NextPrayer(
        name="Fajr",
        time=prayer_times.Fajr,
        display_name=PRAYER_DISPLAY_NAMES["Fajr"],
        is_tomorrow=True,
        at=time_string_to_datetime(prayer_times.Fajr, tomorrow),
    )


def get_countdown(next_prayer: NextPrayer, now: datetime) -> Countdown:
    remaining = next_prayer.at.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    total_seconds = max(0, int(remaining.total_seconds()))
    return Countdown(
        hours=total_seconds // 3600,
        minutes=(total_seconds % 3600) // 60,
        seconds=total_seconds % 60,
    )


def get_prayer_status(
    prayer_times: PrayerTimes,
    now: datetime,
) -> dict[PrayerName, PrayerStatus]:
    next_prayer = resolve_next_prayer(prayer_times, now)
    status: dict[PrayerName, PrayerStatus] = {}

    for name in PRAYER_NAMES:
        if name == next_prayer.name:
            status[name] = "next"
        elif next_prayer.is_tomorrow or time_string_to_datetime(prayer_times.get(name), now) <= now:
            status[name] = "passed"
        else:
            status[name] = "upcoming"

    return status


AR_WEEKDAYS = (
    "الاثنين",
    "الثلاثاء",
    "الأربعاء",
    "الخميس",
    "الجمعة",
    "السبت",
    "الأحد",
)

AR_MONTHS = (
    "يناير",
    "فبراير",
    "مارس",
    "أبريل",
    "مايو",
    "يونيو",
    "يوليو",
    "أغسطس",
    "سبتمبر",
    "أكتوبر",
    "نوفمبر",
    "ديسمبر",
)


def format_date_ar(moment: datetime) -> str:
    return f"{AR_WEEKDAYS[moment.weekday()]}، {moment.day} {AR_MONTHS[moment.month - 1]} {moment.year}"


def format_clock_ar(moment: datetime) -> str:
    marker = PM_MARKER if moment.hour >= 12 else AM_MARKER
    return f"{moment.hour % 12 or 12}:{moment.minute:02}:{moment.second:02} {marker}"
