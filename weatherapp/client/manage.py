"""
"My saved places": add / remove cities and autocomplete city names.

Local state only changes after the server confirmed the change, so a
failure leaves the list exactly as the server last reported it.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Set

import httpx

from ..logging_config import get_logger
from .api import ApiClient, error_message
from .orchestrator import CITIES_CHANGED_KEY
from .state import SavedCity
from .storage import JsonStore

logger = get_logger(__name__)

DEBOUNCE_S = 0.3


class CityActionError(RuntimeError):
    """A save or delete the user must be told about."""


def suggestion_label(suggestion: Dict[str, Any]) -> str:
    return f"{suggestion.get('name', '')}, {suggestion.get('region', '')}, {suggestion.get('country', '')}"


class Autocomplete:
    """
    Debounced city suggestions.

    Every keystroke restarts the timer. Each fetch carries a sequence
    number; when it completes, its result is kept only if no newer input
    arrived in the meantime. Superseded fetches are not aborted.
    """

    def __init__(self, api: ApiClient, delay_s: float = DEBOUNCE_S):
        self.api = api
        self.delay_s = delay_s
        self.text = ""
        self.suggestions: List[Dict[str, Any]] = []
        self._seq = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: Set[asyncio.Task] = set()

    def update(self, text: str) -> None:
        """New input value. Must be called from inside the running event loop."""
        self.text = text
        self._seq += 1
        self._cancel_timer()
        if not text.strip():
            self.suggestions = []
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay_s, self._fire, text, self._seq)

    def choose(self, suggestion: Dict[str, Any]) -> str:
        """Fill the input with the plain city name (region/country dropped)."""
        self._seq += 1
        self._cancel_timer()
        self.text = suggestion["name"]
        self.suggestions = []
        return self.text

    def clear(self) -> None:
        self._seq += 1
        self._cancel_timer()
        self.text = ""
        self.suggestions = []

    async def settle(self) -> List[Dict[str, Any]]:
        """Wait for the pending timer (if any) and every in-flight fetch."""
        while self._timer is not None or self._inflight:
            if self._inflight:
                await asyncio.gather(*list(self._inflight))
            else:
                await asyncio.sleep(self.delay_s / 4 or 0.01)
        return self.suggestions

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, text: str, seq: int) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._fetch(text, seq))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _fetch(self, text: str, seq: int) -> None:
        try:
            results = list(await self.api.search_cities(text))
        except (httpx.HTTPError, ValueError) as e:
            logger.error("suggestions_failed", q=text, error=str(e))
            results = []
        if seq != self._seq:
            logger.debug("suggestions_stale", q=text, seq=seq, latest=self._seq)
            return
        self.suggestions = results


class SavedPage:
    def __init__(self, api: ApiClient, user_id: str, session: JsonStore):
        self.api = api
        self.user_id = user_id
        self.session = session
        self.cities: List[SavedCity] = []
        self.autocomplete = Autocomplete(api)

    async def load(self) -> List[SavedCity]:
        try:
            self.cities = await self.api.list_cities(self.user_id)
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("cities_load_failed", user_id=self.user_id, error=str(e))
        return self.cities

    async def add(self, name: Optional[str] = None) -> Optional[SavedCity]:
        """
        Save `name` (or the current input). Blank input is ignored.
        Raises CityActionError on duplicates and any other failure.
        """
        name = (self.autocomplete.text if name is None else name).strip()
        if not name:
            return None
        try:
            city = await self.api.add_city(name, self.user_id)
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("city_save_failed", name=name, error=str(e))
            raise CityActionError(
                f"Failed to save city. It might already be saved. ({error_message(e)})"
            ) from e
        self.cities = [*self.cities, city]
        self.autocomplete.clear()
        self.session.set(CITIES_CHANGED_KEY, "true")
        return city

    async def remove(self, city_id: str) -> None:
        try:
            await self.api.delete_city(city_id, self.user_id)
        except httpx.HTTPError as e:
            logger.error("city_delete_failed", city_id=city_id, error=str(e))
            raise CityActionError(f"Failed to delete city. ({error_message(e)})") from e
        self.cities = [c for c in self.cities if c.id != city_id]
        self.session.set(CITIES_CHANGED_KEY, "true")
