from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live

from . import __version__
from .config import CONFIG_PATH, Config, load_config, save_config
from .location import (
    DeniedGeolocationProvider,
    GeolocationProvider,
    IpGeolocationProvider,
    StaticGeolocationProvider,
)
from .log import setup_logging
from .models import Coordinates, TimeFormat
from .output import build_location_label, build_notice, build_view, render_today
from .state import PrayerTimesApp

TICK_INTERVAL_SEC = 1.0

app = typer.Typer(
    help="Slati: today's prayer times and a countdown to the next one.",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=True,
)
console = Console()


@dataclass
class Options:
    lat: float | None = None
    lon: float | None = None
    no_geolocation: bool = False


def _validate_time_format(value: str) -> TimeFormat:
    if value not in ("12h", "24h"):
        raise typer.BadParameter("time format must be either '12h' or '24h'")
    return value  # type: ignore[return-value]


def _prompt_choice(prompt: str, choices: tuple[str, ...], default: str) -> str:
    while True:
        value = typer.prompt(f"{prompt} [{'/'.join(choices)}]", default=default)
        if value in choices:
            return value
        console.print(f"[red]Invalid choice:[/red] {value}")


def _validate_coordinates(lat: float, lon: float) -> None:
    if not (-90.0 <= lat <= 90.0):
        raise typer.BadParameter("latitude must be between -90 and 90")
    if not (-180.0 <= lon <= 180.0):
        raise typer.BadParameter("longitude must be between -180 and 180")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"slati {__version__}")
        raise typer.Exit()


def _build_provider(options: Options, config: Config) -> GeolocationProvider:
    if options.lat is not None or options.lon is not None:
        if options.lat is None or options.lon is None:
            raise typer.BadParameter("--lat and --lon must be given together")
        _validate_coordinates(options.lat, options.lon)
        return StaticGeolocationProvider(Coordinates(options.lat, options.lon))

    if options.no_geolocation or not config.geolocation:
        return DeniedGeolocationProvider()

    return IpGeolocationProvider()


def _start_app(ctx: typer.Context) -> tuple[PrayerTimesApp, Config]:
    options: Options = ctx.obj or Options()
    config = load_config()
    prayer_app = PrayerTimesApp(config=config, provider=_build_provider(options, config))

    with console.status("جاري تحميل أوقات الصلاة..."):
        prayer_app.start()
    return prayer_app, config


def _print_config(config: Config) -> None:
    console.print_json(json.dumps(config.to_dict(), ensure_ascii=False, indent=2))
    console.print(f"[dim]Config path:[/dim] {CONFIG_PATH}")


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    lat: Optional[float] = typer.Option(None, "--lat", help="Use this latitude instead of geolocation."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Use this longitude instead of geolocation."),
    no_geolocation: bool = typer.Option(
        False,
        "--no-geolocation",
        help="Skip geolocation and show the default city.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Show today's prayer times."""
    _ = version
    setup_logging(verbose)
    ctx.obj = Options(lat=lat, lon=lon, no_geolocation=no_geolocation)

    if ctx.invoked_subcommand is None:
        prayer_app, config = _start_app(ctx)
        now = prayer_app.clock(prayer_app.state.time_zone)
        prayer_app.tick(now)
        render_today(console, prayer_app.state, now, config.time_format)


@app.command("next")
def next_command(
    ctx: typer.Context,
    once: bool = typer.Option(False, "--once", help="Show next prayer once and exit."),
) -> None:
    """Show the next prayer and a live countdown."""
    prayer_app, config = _start_app(ctx)

    def _current_view():
        now = prayer_app.clock(prayer_app.state.time_zone)
        prayer_app.tick(now)
        return build_view(prayer_app.state, now, config.time_format)

    if once:
        console.print(_current_view())
        return

    try:
        with Live(_current_view(), console=console, refresh_per_second=4) as live:
            while True:
                time.sleep(TICK_INTERVAL_SEC)
                live.update(_current_view())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command("locate")
def locate_command(ctx: typer.Context) -> None:
    """Run location detection again and show the result."""
    prayer_app, _ = _start_app(ctx)
    state = prayer_app.state

    console.print(build_location_label(state.location))
    coords = state.location.coordinates
    if coords is not None:
        console.print(f"[dim]Coordinates:[/dim] {coords.latitude:.4f}, {coords.longitude:.4f}")
    if state.notice:
        console.print(build_notice(state.notice))


@app.command("config")
def config_command(
    show: bool = typer.Option(False, "--show", help="Print current configuration."),
    method: Optional[int] = typer.Option(
        None,
        "--method",
        min=0,
        help="AlAdhan calculation method id (4 = Umm al-Qura).",
    ),
    time_format: Optional[str] = typer.Option(
        None,
        "--time-format",
        help="Display format: 12h or 24h.",
    ),
    geolocation: Optional[bool] = typer.Option(
        None,
        "--geolocation/--no-geolocation",
        help="Allow or forbid location detection.",
    ),
    default_city: Optional[str] = typer.Option(None, "--default-city"),
    default_country: Optional[str] = typer.Option(None, "--default-country"),
    default_city_label: Optional[str] = typer.Option(None, "--default-city-label"),
    default_country_label: Optional[str] = typer.Option(None, "--default-country-label"),
    request_timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.1,
        help="Network timeout in seconds.",
    ),
) -> None:
    """Set calculation method, time format and the default city."""
    config = load_config()

    updates = {
        "method": method,
        "geolocation": geolocation,
        "default_city": default_city,
        "default_country": default_country,
        "default_city_label": default_city_label,
        "default_country_label": default_country_label,
        "request_timeout": request_timeout,
    }
    has_update_flags = time_format is not None or any(
        value is not None for value in updates.values()
    )

    if show and not has_update_flags:
        _print_config(config)
        return

    if not has_update_flags:
        console.print("[bold]Interactive configuration[/bold]")
        config.method = typer.prompt("Calculation method", default=config.method, type=int)
        format_value = _prompt_choice("Time format", ("12h", "24h"), config.time_format)
        config.time_format = _validate_time_format(format_value)
        config.geolocation = typer.confirm("Detect location automatically?", default=config.geolocation)

        save_config(config)
        console.print("[green]Configuration saved.[/green]")
        _print_config(config)
        return

    for key, value in updates.items():
        if value is not None:
            setattr(config, key, value)

    if time_format is not None:
        config.time_format = _validate_time_format(time_format)

    save_config(config)
    console.print("[green]Configuration saved.[/green]")
    _print_config(config)


if __name__ == "__main__":
    app()
