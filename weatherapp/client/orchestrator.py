"""
City-list orchestration for the home page.

Two lookups run side by side and are joined before anything is shown:
- where the user is (geolocation -> reverse geocoding -> place name)
- which cities the user saved (our API)

The result is one list with the current location pinned first.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Optional, Protocol

import httpx

from ..logging_config import get_logger
from ..weather_clients import DEFAULT_PLACE_NAME, pick_place_name
from .api import ApiClient
from .geolocation import GeolocationError, Position
from .state import CURRENT_LOCATION_ID, CURRENT_LOCATION_USER, HomeState, SavedCity
from .storage import JsonStore

logger = get_logger(__name__)

# Set by the management view whenever the saved list changes.
CITIES_CHANGED_KEY = "citiesChanged"


class Geolocator(Protocol):
    async def current_position(self) -> Position: ...


class ReverseGeocoder(Protocol):
    async def reverse(self, lat: float, lon: float) -> Any: ...


def fallback_location(name: str = DEFAULT_PLACE_NAME) -> SavedCity:
    return SavedCity(id=CURRENT_LOCATION_ID, name=name, user_id=CURRENT_LOCATION_USER)


async def resolve_current_location(
    geolocator: Optional[Geolocator],
    geocoder: ReverseGeocoder,
    default_name: str = DEFAULT_PLACE_NAME,
) -> SavedCity:
    """
    The synthetic "current location" entry. Never raises: every failure
    turns into the default city (without coordinates).
    """
    if geolocator is None:
        logger.info("geolocation_unsupported", fallback=default_name)
        return fallback_location(default_name)

    try:
        position = await geolocator.current_position()
    except GeolocationError as e:
        logger.warning("geolocation_failed", error=str(e), fallback=default_name)
        return fallback_location(default_name)

    try:
        address = await geocoder.reverse(position.latitude, position.longitude)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("reverse_geocoding_failed", error=str(e), fallback=default_name)
        return fallback_location(default_name)

    return SavedCity(
        id=CURRENT_LOCATION_ID,
        name=pick_place_name(address, default_name),
        user_id=CURRENT_LOCATION_USER,
        lat=position.latitude,
        lon=position.longitude,
    )


async def load_city_list(
    state: HomeState,
    api: ApiClient,
    user_id: str,
    session: JsonStore,
    geolocator: Optional[Geolocator],
    geocoder: ReverseGeocoder,
    default_name: str = DEFAULT_PLACE_NAME,
) -> HomeState:
    """
    Next home state after (re)loading the city list.

    - a list already loaded is reused unless the "cities changed" flag is set
    - a refetch drops every cached weather snapshot and clears the flag
    - if the saved-city fetch fails the list is left as it was
    """
    changed = session.get(CITIES_CHANGED_KEY)
    if state.cities and not changed:
        return replace(state, loading=False)

    try:
        current, saved = await asyncio.gather(
            resolve_current_location(geolocator, geocoder, default_name),
            api.list_cities(user_id),
        )
    except (httpx.HTTPError, ValueError, KeyError) as e:
        logger.error("initial_data_failed", user_id=user_id, error=str(e))
        return replace(state, loading=False)

    cities = (current, *saved)
    if changed:
        session.remove(CITIES_CHANGED_KEY)

    logger.info("city_list_loaded", count=len(cities), current=current.name)
    index = state.index if state.index < len(cities) else 0
    return replace(state, cities=cities, weather={}, index=index, loading=False)
