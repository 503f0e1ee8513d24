from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .config import Config
from .location import GeolocationOptions, GeolocationProvider, resolve_location
from .models import Location, PrayerTimes, ScheduleSource
from .prayer_api import load_schedule
from .prayer_logic import (
    Countdown,
    NextPrayer,
    get_countdown,
    get_time_zone_now,
    resolve_next_prayer,
)

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    location: Location
    times: PrayerTimes | None = None
    source: ScheduleSource | None = None
    time_zone: str | None = None
    next_prayer: NextPrayer | None = None
    countdown: Countdown | None = None
    notice: str | None = None


@dataclass
class PrayerTimesApp:
    """Owns the application state and drives the locate, fetch and tick cycle."""

    config: Config
    provider: GeolocationProvider | None
    clock: Callable[[str | None], datetime] = get_time_zone_now
    options: GeolocationOptions = field(default_factory=GeolocationOptions)
    state: AppState = field(init=False)

    def __post_init__(self) -> None:
        self.state = AppState(location=self.config.default_location)

    def start(self) -> AppState:
        self.state.notice = None

        located = resolve_location(
            self.provider,
            self.config.default_location,
            options=self.options,
            timeout=self.config.request_timeout,
        )
        schedule = load_schedule(located.location, self.config)

        # Location and schedule are swapped in together.
        self.state.location = schedule.location
        self.state.times = schedule.times
        self.state.source = schedule.source
        self.state.time_zone = schedule.time_zone
        self.state.notice = schedule.notice or located.notice
        logger.info(
            "Loaded %s schedule for %s", schedule.source, self.state.location.label
        )

        self.tick()
        return self.state

    def relocate(self) -> AppState:
        return self.start()

    def tick(self, now: datetime | None = None) -> AppState:
        if self.state.times is None:
            return self.state

        if now is None:
            now = self.clock(self.state.time_zone)
        self.state.next_prayer = resolve_next_prayer(self.state.times, now)
        self.state.countdown = get_countdown(self.state.next_prayer, now)
        return self.state
