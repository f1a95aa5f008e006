"""
Home page controller: owns the HomeState and its collaborators and runs
the orchestrator / loader whenever the list or the index changes.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..weather_clients import DEFAULT_PLACE_NAME
from . import carousel
from .api import ApiClient
from .loader import load_weather
from .orchestrator import Geolocator, ReverseGeocoder, load_city_list
from .state import HomeState
from .storage import JsonStore


class HomePage:
    def __init__(
        self,
        api: ApiClient,
        user_id: str,
        local: JsonStore,
        session: JsonStore,
        geolocator: Optional[Geolocator],
        geocoder: ReverseGeocoder,
        default_city: str = DEFAULT_PLACE_NAME,
    ):
        self.api = api
        self.user_id = user_id
        self.local = local
        self.session = session
        self.geolocator = geolocator
        self.geocoder = geocoder
        self.default_city = default_city
        self.state = HomeState(units=carousel.load_units(local))

    async def load(self) -> HomeState:
        """(Re)load the city list, then the weather of the city on screen."""
        self.state = replace(self.state, loading=True)
        self.state = await load_city_list(
            self.state,
            self.api,
            self.user_id,
            self.session,
            self.geolocator,
            self.geocoder,
            self.default_city,
        )
        return await self.refresh_weather()

    async def refresh_weather(self) -> HomeState:
        self.state = await load_weather(self.state, self.api)
        return self.state

    async def next(self) -> HomeState:
        self.state = carousel.go_next(self.state)
        return await self.refresh_weather()

    async def prev(self) -> HomeState:
        self.state = carousel.go_prev(self.state)
        return await self.refresh_weather()

    def set_units(self, units: str) -> HomeState:
        carousel.save_units(self.local, units)
        self.state = replace(self.state, units=units)
        return self.state

    def card(self) -> Optional[carousel.Card]:
        return carousel.card_for(self.state)
