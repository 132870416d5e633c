"""Command-line interface for climbing conditions."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import date, datetime, timedelta, timezone

from crag_conditions import __version__
from crag_conditions.astronomy.daylight import (
    calculate_daylight_hours,
    detect_time_context,
    get_time_context_data,
    solar_timezone,
)
from crag_conditions.config import get_settings
from crag_conditions.logging_config import configure_logging
from crag_conditions.models.conditions import RatingCategory
from crag_conditions.models.location import Coordinates
from crag_conditions.models.rock import RockType
from crag_conditions.models.weather import WeatherSnapshot
from crag_conditions.providers.base import ProviderError
from crag_conditions.providers.openmeteo import OpenMeteoProvider
from crag_conditions.rules.engine import ConditionsEngine, ConditionsOptions

logger = logging.getLogger(__name__)

ROCK_CHOICES = [rock.value for rock in RockType]
RATING_CHOICES = [rating.value for rating in RatingCategory]


def _coordinates(value: str) -> Coordinates:
    try:
        return Coordinates.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _utc_offset(value: str) -> timezone:
    try:
        return timezone(timedelta(hours=float(value)))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid UTC offset: {value}") from e


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="crag-conditions",
        description="Crag Conditions - Rock climbing conditions from the weather forecast",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Log level (default: %(default)s)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Conditions command
    conditions_parser = subparsers.add_parser(
        "conditions", help="Current conditions and annotated forecast for a crag"
    )
    conditions_parser.add_argument(
        "location",
        type=_coordinates,
        help="Crag coordinates as lat,lon",
    )
    conditions_parser.add_argument(
        "--rock",
        choices=ROCK_CHOICES,
        default=RockType.UNKNOWN.value,
        help="Rock type",
    )
    conditions_parser.add_argument(
        "--recent-precip",
        type=float,
        default=0.0,
        metavar="MM",
        help="Precipitation before the forecast starts, in mm",
    )
    conditions_parser.add_argument(
        "--days",
        type=int,
        default=settings.forecast_days,
        help="Forecast days (default: %(default)s)",
    )
    conditions_parser.add_argument(
        "--no-night",
        action="store_true",
        help="Leave night hours out of the forecast",
    )

    # Windows command
    windows_parser = subparsers.add_parser(
        "windows", help="Best climbing windows for a crag"
    )
    windows_parser.add_argument(
        "location",
        type=_coordinates,
        help="Crag coordinates as lat,lon",
    )
    windows_parser.add_argument(
        "--rock",
        choices=ROCK_CHOICES,
        default=RockType.UNKNOWN.value,
        help="Rock type",
    )
    windows_parser.add_argument(
        "--recent-precip",
        type=float,
        default=0.0,
        metavar="MM",
        help="Precipitation before the forecast starts, in mm",
    )
    windows_parser.add_argument(
        "--min-rating",
        choices=RATING_CHOICES,
        default=settings.default_min_rating.value,
        help="Lowest rating inside a window (default: %(default)s)",
    )
    windows_parser.add_argument(
        "--max",
        type=int,
        default=settings.default_max_windows,
        dest="max_windows",
        help="Maximum windows to show (default: %(default)s)",
    )
    windows_parser.add_argument(
        "--days",
        type=int,
        default=settings.forecast_days,
        help="Forecast days (default: %(default)s)",
    )
    windows_parser.add_argument(
        "--no-night",
        action="store_true",
        help="Keep night hours out of the windows",
    )

    # Daylight command
    daylight_parser = subparsers.add_parser(
        "daylight", help="Sun times and practical climbing hours for a date"
    )
    daylight_parser.add_argument(
        "location",
        type=_coordinates,
        help="Crag coordinates as lat,lon",
    )
    daylight_parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Date as YYYY-MM-DD (default: today at the crag)",
    )
    daylight_parser.add_argument(
        "--utc-offset",
        type=_utc_offset,
        default=None,
        metavar="HOURS",
        help="Local UTC offset in hours (default: solar time at the longitude)",
    )
    daylight_parser.add_argument(
        "--max-temp",
        type=float,
        default=None,
        metavar="C",
        help="Expected maximum temperature, used to pick the time context",
    )
    daylight_parser.add_argument(
        "--query",
        default=None,
        help="Free-text hint such as \"after work\" or \"first light\"",
    )

    return parser


async def fetch_snapshot(coordinates: Coordinates, days: int) -> WeatherSnapshot:
    """Fetch a forecast using the configured provider."""
    settings = get_settings()
    async with OpenMeteoProvider(
        user_agent=settings.weather_user_agent,
        timeout=settings.request_timeout_seconds,
        base_url=settings.open_meteo_base_url,
    ) as provider:
        return await provider.get_snapshot(coordinates, days)


def run_conditions(args: argparse.Namespace, snapshot: WeatherSnapshot) -> str:
    """Compute conditions and render them as JSON."""
    options = ConditionsOptions(
        include_night_hours=not args.no_night,
        include_windows=True,
    )
    result = ConditionsEngine().compute(snapshot, args.rock, args.recent_precip, options)
    return result.model_dump_json(indent=2)


def run_windows(args: argparse.Namespace, snapshot: WeatherSnapshot) -> str:
    """Find windows and render them as JSON."""
    engine = ConditionsEngine(min_rating=args.min_rating, max_windows=args.max_windows)
    windows = engine.find_windows(
        snapshot.hourly,
        args.rock,
        recent_precip_mm=args.recent_precip,
        include_night_hours=not args.no_night,
        daily=snapshot.daily,
    )
    return json.dumps([w.model_dump(mode="json") for w in windows], indent=2)


def run_daylight(args: argparse.Namespace) -> str:
    """Compute sun times and climbing hours and render them as JSON."""
    tz = args.utc_offset
    if tz is None:
        tz = solar_timezone(args.location.longitude)
    day = args.date or datetime.now(tz).date()
    daylight = calculate_daylight_hours(args.location, day, tz)
    context = detect_time_context(
        args.max_temp if args.max_temp is not None else 0.0,
        args.location.latitude,
        day.month,
        args.query,
    )
    data = asdict(get_time_context_data(daylight, context))
    data["civil_dawn"] = daylight.civil_dawn
    data["civil_dusk"] = daylight.civil_dusk
    data["polar_day"] = daylight.polar_day
    data["polar_night"] = daylight.polar_night
    return json.dumps(data, indent=2, default=str)


COMMANDS = {
    "conditions": run_conditions,
    "windows": run_windows,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "daylight":
        print(run_daylight(args))
        return 0

    try:
        snapshot = asyncio.run(fetch_snapshot(args.location, args.days))
    except ProviderError as e:
        logger.error(f"Could not fetch the forecast: {e}")
        return 1

    print(COMMANDS[args.command](args, snapshot))
    return 0


if __name__ == "__main__":
    sys.exit(main())
