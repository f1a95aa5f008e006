"""
Carousel navigation and display helpers for the home page.

Nothing here does I/O; switching units only changes which precomputed
field (_c or _f) is shown.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Tuple

from .state import CELSIUS, FAHRENHEIT, UNITS, ForecastDay, HomeState, SavedCity, WeatherSnapshot
from .storage import JsonStore

UNITS_KEY = "weather-app-units"

LOADING = "loading"
FAILED = "failed"
READY = "ready"

UPCOMING_DAYS = 2


def next_index(index: int, length: int) -> int:
    if length == 0:
        return index
    return (index + 1) % length


def prev_index(index: int, length: int) -> int:
    if length == 0:
        return index
    return (index - 1 + length) % length


def go_next(state: HomeState) -> HomeState:
    return replace(state, index=next_index(state.index, len(state.cities)))


def go_prev(state: HomeState) -> HomeState:
    return replace(state, index=prev_index(state.index, len(state.cities)))


@dataclass(frozen=True)
class Card:
    """What to draw for the city on screen."""
    kind: str
    city: SavedCity
    snapshot: Optional[WeatherSnapshot] = None


def card_for(state: HomeState) -> Optional[Card]:
    city = state.current_city
    if city is None:
        return None
    if city.id not in state.weather:
        return Card(LOADING, city)
    snapshot = state.weather[city.id]
    if snapshot is None:
        return Card(FAILED, city)
    return Card(READY, city, snapshot)


def upcoming_days(snapshot: Optional[WeatherSnapshot]) -> Tuple[ForecastDay, ...]:
    """The days after today that a card lists; day 0 is today."""
    if snapshot is None:
        return ()
    return tuple(snapshot.forecast[1:1 + UPCOMING_DAYS])


# -------------------------
# Units
# -------------------------

def load_units(store: JsonStore) -> str:
    saved = store.get(UNITS_KEY)
    return saved if saved in UNITS else CELSIUS


def save_units(store: JsonStore, units: str) -> None:
    if units not in UNITS:
        raise ValueError(f"Unknown units: {units!r}")
    store.set(UNITS_KEY, units)


def pick(units: str, metric: float, imperial: float) -> float:
    return imperial if units == FAHRENHEIT else metric


def round_half_up(value: float) -> int:
    """2.5 -> 3, -2.5 -> -2 (built-in round() would give 2 and -2)."""
    return math.floor(value + 0.5)


def temp(units: str, metric: float, imperial: float, with_unit: bool = False) -> str:
    value = round_half_up(pick(units, metric, imperial))
    if not with_unit:
        return f"{value}°"
    return f"{value}°F" if units == FAHRENHEIT else f"{value}°C"


def wind(units: str, kph: float, mph: float) -> str:
    if units == FAHRENHEIT:
        return f"{round_half_up(mph)} mph"
    return f"{round_half_up(kph)} kph"


# -------------------------
# Labels
# -------------------------

def aqi_label(aqi: int) -> str:
    """US EPA index -> description."""
    labels = {
        1: "Good",
        2: "Moderate",
        3: "Unhealthy for sensitive groups",
        4: "Unhealthy",
        5: "Very Unhealthy",
    }
    if aqi in labels:
        return labels[aqi]
    if aqi >= 6:
        return "Hazardous"
    return "Unknown"


def uv_label(uv: float) -> str:
    if uv <= 2:
        return "Low"
    if uv <= 5:
        return "Moderate"
    if uv <= 7:
        return "High"
    if uv <= 10:
        return "Very High"
    return "Extreme"


def hour_label(time_str: str) -> str:
    """Upstream hour timestamp to a 12-hour label, e.g. "1 PM"."""
    t = datetime.strptime(time_str, "%Y-%m-%d %H:%M")
    hour = t.hour % 12 or 12
    return f"{hour} {'AM' if t.hour < 12 else 'PM'}"


def day_label(iso_date: str) -> str:
    return date.fromisoformat(iso_date).strftime("%a")


def full_date(iso_date: str) -> str:
    d = date.fromisoformat(iso_date)
    return f"{d.strftime('%A, %B')} {d.day}, {d.year}"
