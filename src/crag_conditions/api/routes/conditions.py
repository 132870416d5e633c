"""Climbing conditions routes.

Both routes fetch a forecast from the weather provider and run the conditions
engine on it. Full responses are cached in-process for
`conditions_cache_ttl_seconds`, keyed by rounded location, rock type and
options.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from crag_conditions.api.dependencies import (
    ResponseCache,
    get_app_settings,
    get_conditions_cache,
    get_weather_provider,
)
from crag_conditions.astronomy.daylight import (
    TimeContextData,
    calculate_daylight_hours,
    detect_time_context,
    get_time_context_data,
    solar_timezone,
)
from crag_conditions.config import Settings
from crag_conditions.models.conditions import ConditionsResult, RatingCategory, Window
from crag_conditions.models.location import Coordinates
from crag_conditions.models.rock import RockType
from crag_conditions.models.weather import CurrentReading, DailySummary, WeatherSnapshot
from crag_conditions.providers.base import WeatherProvider
from crag_conditions.rules.engine import ConditionsEngine, ConditionsOptions

logger = logging.getLogger(__name__)

router = APIRouter()


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocationOut(_CamelModel):
    """Requested location."""

    lat: float
    lon: float


class AstroOut(_CamelModel):
    """Today's sun events from the forecast."""

    sunrise: datetime | None = None
    sunset: datetime | None = None


class ConditionsResponse(_CamelModel):
    """Current conditions, annotated forecast and daylight context."""

    location: LocationOut
    rock_type: RockType
    current: CurrentReading
    conditions: ConditionsResult
    daily_forecast: list[DailySummary] = Field(default_factory=list)
    astro: AstroOut | None = None
    time_context: TimeContextData | None = None
    updated_at: datetime


def _local_tz(snapshot: WeatherSnapshot) -> tzinfo:
    if snapshot.current.time is not None and snapshot.current.time.tzinfo is not None:
        return snapshot.current.time.tzinfo
    if snapshot.hourly and snapshot.hourly[0].time.tzinfo is not None:
        return snapshot.hourly[0].time.tzinfo
    if snapshot.longitude is not None:
        return solar_timezone(snapshot.longitude)
    return timezone.utc


def _local_today(snapshot: WeatherSnapshot) -> date:
    if snapshot.current.time is not None:
        return snapshot.current.time.date()
    if snapshot.daily:
        return snapshot.daily[0].date
    return datetime.now(_local_tz(snapshot)).date()


def _max_temp(snapshot: WeatherSnapshot, day: date) -> float | None:
    summary = snapshot.daily_for(day)
    if summary is not None and summary.temp_max_c is not None:
        return summary.temp_max_c
    temps = [h.temp_c for h in snapshot.hourly if h.time.date() == day and h.is_valid()]
    return max(temps) if temps else None


def _time_context(coordinates: Coordinates, snapshot: WeatherSnapshot) -> TimeContextData:
    day = _local_today(snapshot)
    daylight = calculate_daylight_hours(coordinates, day, _local_tz(snapshot))
    max_temp = _max_temp(snapshot, day)
    context = detect_time_context(
        max_temp if max_temp is not None else 0.0,
        coordinates.latitude,
        day.month,
    )
    return get_time_context_data(daylight, context)


def _coordinates(lat: float, lon: float) -> Coordinates:
    return Coordinates(latitude=lat, longitude=lon)


@router.get("", response_model=ConditionsResponse, response_model_by_alias=True)
async def get_conditions(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude"),
    rock_type: str = Query("unknown", alias="rockType"),
    recent_precip_mm: float = Query(0.0, ge=0, alias="recentPrecipMm"),
    include_night_hours: bool | None = Query(None, alias="includeNightHours"),
    windows: bool = Query(True, description="Include the best climbing windows"),
    provider: WeatherProvider = Depends(get_weather_provider),
    cache: ResponseCache = Depends(get_conditions_cache),
    settings: Settings = Depends(get_app_settings),
) -> ConditionsResponse:
    """Get climbing conditions for a location and rock type."""
    coordinates = _coordinates(lat, lon)
    rock = RockType.parse(rock_type)
    if include_night_hours is None:
        include_night_hours = settings.include_night_hours

    cache_key = (
        "conditions",
        coordinates.rounded(3),
        rock,
        recent_precip_mm,
        include_night_hours,
        windows,
    )
    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug(f"Conditions cache hit for {coordinates} ({rock.value})")
        return cached

    snapshot = await provider.get_snapshot(coordinates, settings.forecast_days)

    options = ConditionsOptions(
        include_night_hours=include_night_hours,
        include_windows=windows,
    )
    engine = ConditionsEngine(
        min_rating=settings.default_min_rating,
        max_windows=settings.default_max_windows,
    )
    conditions = engine.compute(snapshot, rock, recent_precip_mm, options)
    time_context = await run_in_threadpool(_time_context, coordinates, snapshot)

    today = snapshot.daily[0] if snapshot.daily else None
    response = ConditionsResponse(
        location=LocationOut(lat=lat, lon=lon),
        rock_type=rock,
        current=snapshot.current,
        conditions=conditions,
        daily_forecast=snapshot.daily,
        astro=AstroOut(sunrise=today.sunrise, sunset=today.sunset) if today else None,
        time_context=time_context,
        updated_at=datetime.now(timezone.utc),
    )

    logger.info(
        f"Computed conditions for {coordinates} ({rock.value}): "
        f"{conditions.rating.value}, score {conditions.friction_score:.2f}"
    )
    cache.put(cache_key, response)
    return response


@router.get("/windows", response_model=list[Window])
async def get_windows(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude"),
    rock_type: str = Query("unknown", alias="rockType"),
    recent_precip_mm: float = Query(0.0, ge=0, alias="recentPrecipMm"),
    min_rating: str | None = Query(None, alias="minRating"),
    max_windows: int | None = Query(None, ge=1, le=50, alias="maxWindows"),
    include_night_hours: bool | None = Query(None, alias="includeNightHours"),
    provider: WeatherProvider = Depends(get_weather_provider),
    settings: Settings = Depends(get_app_settings),
) -> list[Window]:
    """Get the best climbing windows in the forecast."""
    try:
        rating = RatingCategory.parse(min_rating) if min_rating else settings.default_min_rating
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown rating: {min_rating}",
        )
    if include_night_hours is None:
        include_night_hours = settings.include_night_hours

    coordinates = _coordinates(lat, lon)
    snapshot = await provider.get_snapshot(coordinates, settings.forecast_days)

    engine = ConditionsEngine(
        min_rating=rating,
        max_windows=max_windows or settings.default_max_windows,
    )
    return engine.find_windows(
        snapshot.hourly,
        rock_type,
        recent_precip_mm=recent_precip_mm,
        include_night_hours=include_night_hours,
        daily=snapshot.daily,
    )
