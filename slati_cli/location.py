from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

import httpx

from .models import CURRENT_LOCATION_LABEL, UNKNOWN_COUNTRY_LABEL, Coordinates, Location
from .net import http_get

IP_GEOLOCATION_URL = "https://ipapi.co/json/"
REVERSE_GEOCODE_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"
REVERSE_GEOCODE_LANGUAGE = "ar"

logger = logging.getLogger(__name__)


class GeolocationErrorCode(Enum):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


ERROR_MESSAGES: dict[GeolocationErrorCode, str] = {
    GeolocationErrorCode.PERMISSION_DENIED: "تم رفض الوصول للموقع",
    GeolocationErrorCode.POSITION_UNAVAILABLE: "فشل في تحديد الموقع",
    GeolocationErrorCode.TIMEOUT: "انتهت مهلة تحديد الموقع",
}
UNSUPPORTED_MESSAGE = "تحديد الموقع غير مدعوم"


class GeolocationError(RuntimeError):
    def __init__(self, code: GeolocationErrorCode, message: str | None = None) -> None:
        super().__init__(message or code.name)
        self.code = code


class ReverseGeocodeError(RuntimeError):
    pass


@dataclass(frozen=True)
class GeolocationOptions:
    enable_high_accuracy: bool = True
    timeout: float = 10.0
    maximum_age: float = 300.0


class GeolocationProvider(Protocol):
    def get_current_position(self, options: GeolocationOptions) -> Coordinates: ...


@dataclass
class LocationResult:
    location: Location
    notice: str | None = None

    @property
    def is_default(self) -> bool:
        return self.location.coordinates is None


def fallback_notice(reason: str, default_location: Location) -> str:
    return f"{reason} - يتم عرض أوقات {default_location.city} كافتراضي"


class IpGeolocationProvider:
    """Approximate position from the public IP address.

    A successful lookup is kept and reused while it is younger than
    ``options.maximum_age``. There is no high-accuracy source behind an IP
    lookup, so ``enable_high_accuracy`` has no effect here.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._cached: tuple[Coordinates, float] | None = None

    def get_current_position(self, options: GeolocationOptions) -> Coordinates:
        if self._cached is not None:
            coords, fetched_at = self._cached
            if self._clock() - fetched_at <= options.maximum_age:
                logger.debug("Reusing cached position %s", coords)
                return coords

        try:
            response = http_get(IP_GEOLOCATION_URL, {}, options.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise GeolocationError(GeolocationErrorCode.TIMEOUT, str(exc)) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise GeolocationError(GeolocationErrorCode.POSITION_UNAVAILABLE, str(exc)) from exc

        if not isinstance(data, dict) or data.get("error"):
            raise GeolocationError(
                GeolocationErrorCode.POSITION_UNAVAILABLE,
                "IP geolocation returned no position",
            )

        try:
            coords = Coordinates(float(data["latitude"]), float(data["longitude"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise GeolocationError(GeolocationErrorCode.POSITION_UNAVAILABLE, str(exc)) from exc

        self._cached = (coords, self._clock())
        return coords


class StaticGeolocationProvider:
    def __init__(self, coords: Coordinates) -> None:
        self._coords = coords

    def get_current_position(self, options: GeolocationOptions) -> Coordinates:
        return self._coords


class DeniedGeolocationProvider:
    def get_current_position(self, options: GeolocationOptions) -> Coordinates:
        raise GeolocationError(
            GeolocationErrorCode.PERMISSION_DENIED,
            "Geolocation is disabled",
        )


def reverse_geocode(coords: Coordinates, timeout: float = 10.0) -> Location:
    params = {
        "latitude": coords.latitude,
        "longitude": coords.longitude,
        "localityLanguage": REVERSE_GEOCODE_LANGUAGE,
    }

    try:
        response = http_get(REVERSE_GEOCODE_URL, params, timeout)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise ReverseGeocodeError("Reverse geocoding failed") from exc

    if not isinstance(data, dict):
        raise ReverseGeocodeError("Unexpected reverse geocoding response")

    return Location(
        city=data.get("city") or data.get("locality") or CURRENT_LOCATION_LABEL,
        country=data.get("countryName") or UNKNOWN_COUNTRY_LABEL,
        latitude=coords.latitude,
        longitude=coords.longitude,
    )


def resolve_location(
    provider: GeolocationProvider | None,
    default_location: Location,
    options: GeolocationOptions | None = None,
    timeout: float = 10.0,
) -> LocationResult:
    options = options or GeolocationOptions()

    if provider is None:
        logger.warning("No geolocation provider available")
        return LocationResult(
            location=default_location,
            notice=fallback_notice(UNSUPPORTED_MESSAGE, default_location),
        )

    try:
        coords = provider.get_current_position(options)
    except GeolocationError as exc:
        logger.warning("Geolocation failed (%s): %s", exc.code.name, exc)
        return LocationResult(
            location=default_location,
            notice=fallback_notice(ERROR_MESSAGES[exc.code], default_location),
        )

    try:
        location = reverse_geocode(coords, timeout=timeout)
    except ReverseGeocodeError as exc:
        logger.warning("%s for %s: %s", exc, coords, exc.__cause__)
        location = Location(
            city=CURRENT_LOCATION_LABEL,
            country=UNKNOWN_COUNTRY_LABEL,
            latitude=coords.latitude,
            longitude=coords.longitude,
        )

    logger.debug("Resolved location %s", location)
    return LocationResult(location=location)
