"""
View-layer data types.

All of these are immutable: the orchestrator and loader take a HomeState
and hand back a new one, so nothing is mutated behind a view's back.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

CURRENT_LOCATION_ID = "current-location"
CURRENT_LOCATION_USER = "-1"

CELSIUS = "celsius"
FAHRENHEIT = "fahrenheit"
UNITS = (CELSIUS, FAHRENHEIT)


@dataclass(frozen=True)
class SavedCity:
    id: str
    name: str
    user_id: str
    lat: Optional[float] = None
    lon: Optional[float] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SavedCity":
        return cls(
            id=str(data["_id"]),
            name=data["name"],
            user_id=data["userId"],
            lat=data.get("lat"),
            lon=data.get("lon"),
        )

    @property
    def is_current_location(self) -> bool:
        return self.id == CURRENT_LOCATION_ID


@dataclass(frozen=True)
class HourData:
    time: str
    temp_c: float
    temp_f: float
    condition_text: str
    condition_icon: str
    time_epoch: Optional[int] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "HourData":
        condition = data.get("condition") or {}
        return cls(
            time=data["time"],
            temp_c=data["temp_c"],
            temp_f=data["temp_f"],
            condition_text=condition.get("text", ""),
            condition_icon=condition.get("icon", ""),
            time_epoch=data.get("time_epoch"),
        )


@dataclass(frozen=True)
class ForecastDay:
    date: str
    maxtemp_c: float
    mintemp_c: float
    maxtemp_f: float
    mintemp_f: float
    daily_chance_of_rain: float
    maxwind_kph: float
    maxwind_mph: float
    condition_text: str
    condition_icon: str
    sunrise: str
    sunset: str
    hours: Tuple[HourData, ...] = ()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ForecastDay":
        day = data["day"]
        astro = data.get("astro") or {}
        condition = day.get("condition") or {}
        return cls(
            date=data["date"],
            maxtemp_c=day["maxtemp_c"],
            mintemp_c=day["mintemp_c"],
            maxtemp_f=day["maxtemp_f"],
            mintemp_f=day["mintemp_f"],
            daily_chance_of_rain=day.get("daily_chance_of_rain", 0),
            maxwind_kph=day.get("maxwind_kph", 0),
            maxwind_mph=day.get("maxwind_mph", 0),
            condition_text=condition.get("text", ""),
            condition_icon=condition.get("icon", ""),
            sunrise=astro.get("sunrise", ""),
            sunset=astro.get("sunset", ""),
            hours=tuple(HourData.from_json(h) for h in data.get("hour") or []),
        )


@dataclass(frozen=True)
class WeatherSnapshot:
    temperature_c: float
    temperature_f: float
    condition_text: str
    condition_icon: str
    feels_like_c: float
    feels_like_f: float
    humidity: float
    wind_kph: float
    wind_mph: float
    forecast: Tuple[ForecastDay, ...]
    hourly_forecast: Tuple[HourData, ...]
    uv: float = 0
    aqi: int = 0


@dataclass(frozen=True)
class HomeState:
    """
    State of the home page.

    `weather` is keyed by city id and is tri-state per key:
    - key missing: never requested
    - None: the fetch failed
    - WeatherSnapshot: loaded
    """
    cities: Tuple[SavedCity, ...] = ()
    weather: Mapping[str, Optional[WeatherSnapshot]] = field(default_factory=dict)
    index: int = 0
    units: str = CELSIUS
    loading: bool = True

    @property
    def current_city(self) -> Optional[SavedCity]:
        if not self.cities or not (0 <= self.index < len(self.cities)):
            return None
        return self.cities[self.index]

    def with_weather(self, city_id: str, snapshot: Optional[WeatherSnapshot]) -> "HomeState":
        weather: Dict[str, Optional[WeatherSnapshot]] = dict(self.weather)
        weather[city_id] = snapshot
        return replace(self, weather=weather)
