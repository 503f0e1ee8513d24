from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from .config import DEFAULT_METHOD, Config
from .location import fallback_notice
from .models import (
    FALLBACK_PRAYER_TIMES,
    PRAYER_NAMES,
    Location,
    PrayerTimes,
    ScheduleSource,
)
from .net import http_get

ALADHAN_BASE_URL = "https://api.aladhan.com/v1"

COORDINATES_FAILED_MESSAGE = "تعذر تحميل أوقات الصلاة لموقعك"
FALLBACK_NOTICE = "تعذر تحميل أوقات الصلاة - يتم عرض أوقات افتراضية"

logger = logging.getLogger(__name__)


class PrayerApiError(RuntimeError):
    pass


@dataclass
class ScheduleResult:
    times: PrayerTimes
    source: ScheduleSource
    location: Location
    time_zone: str | None = None
    notice: str | None = None


def format_time_to_hhmm(value: str) -> str:
    match = re.search(r"(\d{1,2}):(\d{2})", value)
    if not match:
        return value
    hours = int(match.group(1))
    minutes = int(match.group(2))
    return f"{hours:02}:{minutes:02}"


def _require_time_field(payload: dict[str, Any], key: str) -> str:
    raw = payload.get(key)
    if not isinstance(raw, str):
        raise PrayerApiError(f"Missing time field: {key}")

    hhmm = format_time_to_hhmm(raw)
    if not re.fullmatch(r"([01]\d|2[0-3]):[0-5]\d", hhmm):
        raise PrayerApiError(f"Invalid time format for {key}")
    return hhmm


def _valid_time_zone(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning("Ignoring unknown time zone %r, using local time: %s", value, exc)
        return None
    return value


def _fetch_timings(url: str, params: dict[str, Any], timeout: float) -> tuple[PrayerTimes, str | None]:
    try:
        response = http_get(url, params, timeout)
    except httpx.HTTPError as exc:
        raise PrayerApiError("Failed to fetch prayer times") from exc

    if response.status_code != 200:
        raise PrayerApiError(f"Failed to fetch prayer times (HTTP {response.status_code})")

    try:
        payload = response.json()
    except ValueError as exc:
        raise PrayerApiError("Invalid response from AlAdhan") from exc

    if not isinstance(payload, dict) or payload.get("code") != 200:
        raise PrayerApiError("AlAdhan reported an error")

    data = payload.get("data")
    timings = data.get("timings") if isinstance(data, dict) else None
    if not isinstance(timings, dict):
        raise PrayerApiError("Unexpected response format from AlAdhan")

    times = PrayerTimes(**{name: _require_time_field(timings, name) for name in PRAYER_NAMES})
    if not times.is_chronological():
        raise PrayerApiError("Prayer times are out of order")

    meta = data.get("meta")
    time_zone = meta.get("timezone") if isinstance(meta, dict) else None
    return times, _valid_time_zone(time_zone)


def fetch_times_by_coordinates(
    latitude: float,
    longitude: float,
    method: int = DEFAULT_METHOD,
    timeout: float = 10.0,
) -> tuple[PrayerTimes, str | None]:
    params = {"latitude": latitude, "longitude": longitude, "method": method}
    return _fetch_timings(f"{ALADHAN_BASE_URL}/timings", params, timeout)


def fetch_times_by_city(
    city: str,
    country: str,
    method: int = DEFAULT_METHOD,
    timeout: float = 10.0,
) -> tuple[PrayerTimes, str | None]:
    params = {"city": city, "country": country, "method": method}
    return _fetch_timings(f"{ALADHAN_BASE_URL}/timingsByCity", params, timeout)


def load_schedule(location: Location, config: Config) -> ScheduleResult:
    """Fetch today's schedule for ``location``, never failing.

    Coordinates are tried first, then the configured default city, and
    finally the built-in fallback times. Any step that ends up showing
    default data carries a notice for the user.
    """
    default_location = config.default_location
    coords = location.coordinates

    if coords is not None:
        try:
            times, time_zone = fetch_times_by_coordinates(
                coords.latitude,
                coords.longitude,
                method=config.method,
                timeout=config.request_timeout,
            )
            return ScheduleResult(
                times=times,
                source="coordinates",
                location=location,
                time_zone=time_zone,
            )
        except PrayerApiError as exc:
            logger.warning("Prayer times by coordinates failed: %s", exc)

    try:
        times, time_zone = fetch_times_by_city(
            config.default_city,
            config.default_country,
            method=config.method,
            timeout=config.request_timeout,
        )
    except PrayerApiError as exc:
        logger.warning("Prayer times by city failed, using fallback schedule: %s", exc)
        return ScheduleResult(
            times=FALLBACK_PRAYER_TIMES,
            source="fallback",
            location=default_location,
            notice=FALLBACK_NOTICE,
        )

    notice = None
    if coords is not None:
        notice = fallback_notice(COORDINATES_FAILED_MESSAGE, default_location)
    return ScheduleResult(
        times=times,
        source="city",
        location=default_location,
        time_zone=time_zone,
        notice=notice,
    )
