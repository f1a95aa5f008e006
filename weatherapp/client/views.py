"""
Text rendering of the pages (Jinja2 templates under weatherapp/templates).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined

from . import carousel
from .manage import suggestion_label
from .state import ForecastDay, HomeState, SavedCity

env = Environment(
    loader=PackageLoader("weatherapp", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)
env.globals.update(
    temp=carousel.temp,
    wind=carousel.wind,
    aqi_label=carousel.aqi_label,
    uv_label=carousel.uv_label,
    hour_label=carousel.hour_label,
    day_label=carousel.day_label,
    full_date=carousel.full_date,
    suggestion_label=suggestion_label,
    LOADING=carousel.LOADING,
    FAILED=carousel.FAILED,
)


def render_home(state: HomeState) -> str:
    card = carousel.card_for(state)
    return env.get_template("home.txt.j2").render(
        state=state,
        card=card,
        units=state.units,
        position=f"{state.index + 1}/{len(state.cities)}" if state.cities else "",
        upcoming_days=carousel.upcoming_days(card.snapshot if card else None),
    )


def render_day(day: ForecastDay, units: str) -> str:
    return env.get_template("day.txt.j2").render(day=day, units=units)


def render_saved(cities: Sequence[SavedCity], suggestions: Optional[List[Dict[str, Any]]] = None) -> str:
    return env.get_template("saved.txt.j2").render(cities=cities, suggestions=suggestions or [])


def render_suggestions(suggestions: List[Dict[str, Any]]) -> str:
    return env.get_template("suggestions.txt.j2").render(suggestions=suggestions)
