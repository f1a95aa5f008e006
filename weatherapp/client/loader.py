"""
Per-city weather loading.

The home page asks for weather only for the city on screen, once per city
id per session. A failed fetch is remembered as None so the page shows
"N/A" instead of retrying forever.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from ..logging_config import get_logger
from .api import ApiClient
from .state import ForecastDay, HomeState, HourData, SavedCity, WeatherSnapshot

logger = get_logger(__name__)

FORECAST_DAYS = 4
HOURLY_WINDOW = 24


def build_query(city: SavedCity) -> str:
    """Query string for the weather API: coordinates when known, else the name."""
    if city.lat is not None and city.lon is not None:
        return f"{city.lat},{city.lon}"
    return city.name


def _zone(tz_name: Optional[str]):
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("unknown_timezone", tz=tz_name)
    return timezone.utc


def hour_epoch(hour: HourData, tz_name: Optional[str] = None) -> int:
    """
    Unix time of an hourly entry. Upstream sends time_epoch; without it the
    "YYYY-MM-DD HH:MM" local time is read in the location's timezone.
    """
    if hour.time_epoch is not None:
        return int(hour.time_epoch)
    local = datetime.strptime(hour.time, "%Y-%m-%d %H:%M").replace(tzinfo=_zone(tz_name))
    return int(local.timestamp())


def rolling_hours(
    forecast: Sequence[ForecastDay],
    last_updated_epoch: int,
    tz_name: Optional[str] = None,
    limit: int = HOURLY_WINDOW,
) -> Tuple[HourData, ...]:
    """
    Next `limit` hours: today's hours strictly after the last observation,
    followed by all of tomorrow's.
    """
    today = forecast[0].hours if len(forecast) > 0 else ()
    tomorrow = forecast[1].hours if len(forecast) > 1 else ()
    upcoming = [h for h in today if hour_epoch(h, tz_name) > last_updated_epoch]
    return tuple([*upcoming, *tomorrow][:limit])


def build_snapshot(payload: Mapping[str, Any]) -> WeatherSnapshot:
    """
    Turn a /api/weather payload into a snapshot.
    Raises ValueError when the payload is not usable; never returns a partial snapshot.
    """
    current = payload.get("current")
    forecast_block = payload.get("forecast")
    if not current or not forecast_block:
        raise ValueError("Invalid data structure from weather API")

    try:
        forecast = tuple(ForecastDay.from_json(d) for d in forecast_block.get("forecastday") or [])
        tz_name = (payload.get("location") or {}).get("tz_id")
        condition = current.get("condition") or {}
        air_quality = current.get("air_quality") or {}
        return WeatherSnapshot(
            temperature_c=current["temp_c"],
            temperature_f=current["temp_f"],
            condition_text=condition.get("text", ""),
            condition_icon=condition.get("icon", ""),
            feels_like_c=current["feelslike_c"],
            feels_like_f=current["feelslike_f"],
            humidity=current["humidity"],
            wind_kph=current["wind_kph"],
            wind_mph=current["wind_mph"],
            forecast=forecast,
            hourly_forecast=rolling_hours(forecast, int(current["last_updated_epoch"]), tz_name),
            uv=current.get("uv") or 0,
            aqi=air_quality.get("us-epa-index") or 0,
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid data structure from weather API: {e!r}") from e


async def load_weather(state: HomeState, api: ApiClient) -> HomeState:
    """Next state after making sure the displayed city has a snapshot (or a failure marker)."""
    city = state.current_city
    if city is None or city.id in state.weather:
        return state

    try:
        payload = await api.weather(build_query(city), days=FORECAST_DAYS, aqi="yes")
        snapshot = build_snapshot(payload)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("weather_load_failed", city=city.name, city_id=city.id, error=str(e))
        return state.with_weather(city.id, None)

    return state.with_weather(city.id, snapshot)
