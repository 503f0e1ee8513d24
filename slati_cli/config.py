from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, cast

from .models import Location, TimeFormat

CONFIG_DIR = Path.home() / ".config" / "slati"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_METHOD = 4
DEFAULT_REQUEST_TIMEOUT = 10.0

logger = logging.getLogger(__name__)


@dataclass
class Config:
    method: int = DEFAULT_METHOD
    time_format: TimeFormat = "12h"
    geolocation: bool = True
    default_city: str = "Riyadh"
    default_country: str = "Saudi Arabia"
    default_city_label: str = "الرياض"
    default_country_label: str = "المملكة العربية السعودية"
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @property
    def default_location(self) -> Location:
        return Location(city=self.default_city_label, country=self.default_country_label)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _sanitize_time_format(value: Any) -> TimeFormat:
    if value in ("12h", "24h"):
        return cast(TimeFormat, value)
    return "12h"


def _sanitize_method(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return DEFAULT_METHOD


def _sanitize_timeout(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return float(value)
    return DEFAULT_REQUEST_TIMEOUT


def _sanitize_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def load_config() -> Config:
    if not CONFIG_PATH.exists():
        config = Config()
        save_config(config)
        return config

    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config at %s: %s", CONFIG_PATH, exc)
        config = Config()
        save_config(config)
        return config

    if not isinstance(data, dict):
        logger.warning("Ignoring malformed config at %s", CONFIG_PATH)
        return Config()

    defaults = Config()
    geolocation = data.get("geolocation")
    return Config(
        method=_sanitize_method(data.get("method")),
        time_format=_sanitize_time_format(data.get("time_format")),
        geolocation=geolocation if isinstance(geolocation, bool) else defaults.geolocation,
        default_city=_sanitize_text(data.get("default_city"), defaults.default_city),
        default_country=_sanitize_text(data.get("default_country"), defaults.default_country),
        default_city_label=_sanitize_text(
            data.get("default_city_label"), defaults.default_city_label
        ),
        default_country_label=_sanitize_text(
            data.get("default_country_label"), defaults.default_country_label
        ),
        request_timeout=_sanitize_timeout(data.get("request_timeout")),
    )


def save_config(config: Config) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(
        json.dumps(config.to_dict(), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
