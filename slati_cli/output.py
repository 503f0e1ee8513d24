from __future__ import annotations

from datetime import datetime

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import PRAYER_DISPLAY_NAMES, PRAYER_NAMES, Location, ScheduleSource, TimeFormat
from .prayer_logic import (
    PrayerStatus,
    format_clock_ar,
    format_date_ar,
    format_time_for_display,
    get_prayer_status,
)
from .state import AppState

SOURCE_LABELS: dict[ScheduleSource, str] = {
    "coordinates": "AlAdhan (coordinates)",
    "city": "AlAdhan (city)",
    "fallback": "Built-in fallback",
}

STATUS_STYLES: dict[PrayerStatus, str | None] = {
    "next": "bold green",
    "passed": "dim",
    "upcoming": None,
}

RELOCATE_HINT = "Run `slati locate` to try locating again."


def build_location_label(location: Location) -> Text:
    return Text(location.label, style="bold cyan")


def build_clock_line(now: datetime) -> Text:
    return Text(f"{format_date_ar(now)}  {format_clock_ar(now)}", style="white")


def build_notice(notice: str) -> Panel:
    body = Group(Text(notice, style="bold"), Text(RELOCATE_HINT, style="dim"))
    return Panel(body, border_style="yellow", title="Notice")


def build_prayer_table(state: AppState, now: datetime, time_format: TimeFormat) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=False)
    table.add_column("الصلاة", style="bold")
    table.add_column("Prayer")
    table.add_column("Time", justify="right")

    if state.times is None:
        return table

    status = get_prayer_status(state.times, now)
    for name in PRAYER_NAMES:
        label = name
        if status[name] == "next" and state.next_prayer and state.next_prayer.is_tomorrow:
            label = f"{name} (tomorrow)"
        table.add_row(
            PRAYER_DISPLAY_NAMES[name],
            label,
            format_time_for_display(state.times.get(name), time_format),
            style=STATUS_STYLES[status[name]],
        )

    return table


def build_next_panel(state: AppState, time_format: TimeFormat) -> Panel:
    if state.next_prayer is None or state.countdown is None:
        return Panel(Text("No prayer times loaded", style="dim"), title="Next Prayer")

    next_prayer = state.next_prayer
    when = format_time_for_display(next_prayer.time, time_format)
    if next_prayer.is_tomorrow:
        when += " (tomorrow)"

    body = Group(
        Text(f"{next_prayer.display_name} ({next_prayer.name})", style="bold green"),
        Text(f"At: {when}", style="bold"),
        Text(f"Countdown: {state.countdown}", style="bold yellow"),
    )
    return Panel(body, title="Next Prayer", border_style="green")


def build_view(state: AppState, now: datetime, time_format: TimeFormat) -> Group:
    parts = [
        build_location_label(state.location),
        build_clock_line(now),
    ]
    if state.source is not None:
        parts.append(Text(f"Source: {SOURCE_LABELS[state.source]}", style="dim"))
    if state.notice:
        parts.append(build_notice(state.notice))
    parts.append(build_prayer_table(state, now, time_format))
    parts.append(build_next_panel(state, time_format))
    return Group(*parts)


def render_today(console: Console, state: AppState, now: datetime, time_format: TimeFormat) -> None:
    console.print(Panel(build_view(state, now, time_format), title="Slati", border_style="blue"))
