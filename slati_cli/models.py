from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

PrayerName = Literal["Fajr", "Dhuhr", "Asr", "Maghrib", "Isha"]
TimeFormat = Literal["12h", "24h"]
ScheduleSource = Literal["coordinates", "city", "fallback"]

PRAYER_NAMES: tuple[PrayerName, ...] = (
    "Fajr",
    "Dhuhr",
    "Asr",
    "Maghrib",
    "Isha",
)

PRAYER_DISPLAY_NAMES: dict[PrayerName, str] = {
    "Fajr": "الفجر",
    "Dhuhr": "الظهر",
    "Asr": "العصر",
    "Maghrib": "المغرب",
    "Isha": "العشاء",
}

CURRENT_LOCATION_LABEL = "موقعك الحالي"
UNKNOWN_COUNTRY_LABEL = "غير محدد"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass
class Location:
    city: str
    country: str
    latitude: float | None = None
    longitude: float | None = None

    @property
    def coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(self.latitude, self.longitude)

    @property
    def label(self) -> str:
        return f"{self.city}, {self.country}"


def _minutes_of_day(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


@dataclass(frozen=True)
class PrayerTimes:
    Fajr: str
    Dhuhr: str
    Asr: str
    Maghrib: str
    Isha: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrayerTimes":
        return cls(
            Fajr=str(data["Fajr"]),
            Dhuhr=str(data["Dhuhr"]),
            Asr=str(data["Asr"]),
            Maghrib=str(data["Maghrib"]),
            Isha=str(data["Isha"]),
        )

    def to_dict(self) -> dict[str, str]:
        return {name: self.get(name) for name in PRAYER_NAMES}

    def get(self, prayer: PrayerName) -> str:
        return getattr(self, prayer)

    def is_chronological(self) -> bool:
        """True when every prayer falls strictly after the one before it."""
        minutes = [_minutes_of_day(self.get(name)) for name in PRAYER_NAMES]
        return all(earlier < later for earlier, later in zip(minutes, minutes[1:]))


FALLBACK_PRAYER_TIMES = PrayerTimes(
    Fajr="04:45",
    Dhuhr="12:10",
    Asr="15:30",
    Maghrib="18:45",
    Isha="20:15",
)
