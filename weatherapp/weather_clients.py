"""
Upstream clients.

API logic lives here rather than in the FastAPI endpoints:
- easier to test in isolation (every client takes an optional httpx transport)
- the CLI views reuse the reverse geocoder without going through the server
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PLACE_NAME = "New York"


class WeatherError(RuntimeError):
    """Raised when the weather provider answers with an error payload."""
    pass


@dataclass
class _CacheEntry:
    payload: Dict[str, Any]
    stored_at: float


@dataclass
class ResponseCache:
    """
    Tiny TTL cache for upstream payloads.

    Only successful payloads are stored. Entries older than ttl_s are
    dropped on read and swept on every write; past max_entries the oldest
    entry is evicted.
    """
    ttl_s: float = 600.0
    max_entries: int = 256
    clock: Callable[[], float] = time.monotonic
    _entries: Dict[Tuple[Any, ...], _CacheEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_s

    def get(self, key: Tuple[Any, ...]) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self.clock()):
            del self._entries[key]
            return None
        return entry.payload

    def put(self, key: Tuple[Any, ...], payload: Dict[str, Any]) -> None:
        if self.ttl_s <= 0 or self.max_entries <= 0:
            return
        now = self.clock()
        for stale in [k for k, e in self._entries.items() if self._expired(e, now)]:
            del self._entries[stale]
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_entries:
            # insertion order, oldest first
            del self._entries[next(iter(self._entries))]
        self._entries[key] = _CacheEntry(payload=payload, stored_at=now)

    def clear(self) -> None:
        self._entries.clear()


class WeatherApiClient:
    """
    WeatherAPI.com wrapper.

    Endpoints used:
    - Forecast (includes current conditions):
        /v1/forecast.json?key=KEY&q=...&days=N&aqi=yes|no
    - Location search / autocomplete:
        /v1/search.json?key=KEY&q=...

    WeatherAPI reports problems in the body ({"error": {"code", "message"}}),
    often with a 4xx status; those become WeatherError. Transport failures
    surface as httpx.HTTPError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        timeout_s: float = 10.0,
        cache_ttl_s: float = 600.0,
        cache_max_entries: int = 256,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.transport = transport
        self.base = "https://api.weatherapi.com/v1"
        self.cache = ResponseCache(ttl_s=cache_ttl_s, max_entries=cache_max_entries)

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
            r = await client.get(f"{self.base}/{path}", params={"key": self.api_key, **params})
        return r.json()

    async def forecast(self, q: str, days: int = 1, aqi: str = "no") -> Dict[str, Any]:
        """
        Current conditions plus `days` days of forecast (hourly included).

        Responses are cached per (q, days, aqi) for cache_ttl_s seconds.
        """
        key = (q, days, aqi)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("weather_cache_hit", q=q, days=days, aqi=aqi)
            return cached

        data = await self._get_json("forecast.json", {"q": q, "days": days, "aqi": aqi})
        if isinstance(data, dict) and data.get("error"):
            raise WeatherError(data["error"].get("message", "Weather lookup failed"))

        self.cache.put(key, data)
        return data

    async def search(self, q: str) -> List[Dict[str, Any]]:
        """
        City suggestions for free text.
        Each item carries at least id, name, region, country, lat, lon.
        """
        data = await self._get_json("search.json", {"q": q})
        if isinstance(data, dict) and data.get("error"):
            raise WeatherError(data["error"].get("message", "City search failed"))
        return data


def pick_place_name(address: Optional[Dict[str, Any]], default: str = DEFAULT_PLACE_NAME) -> str:
    """Most specific populated-place name from a Nominatim address block."""
    address = address or {}
    for key in ("city", "town", "village", "county"):
        if address.get(key):
            return address[key]
    return default


class NominatimClient:
    """
    OpenStreetMap Nominatim reverse geocoder.

    /reverse?format=json&lat=..&lon=.. returns {"address": {...}}.
    Nominatim's usage policy requires an identifying User-Agent.
    """

    def __init__(
        self,
        timeout_s: float = 10.0,
        user_agent: str = "weatherapp/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.transport = transport
        self.base = "https://nominatim.openstreetmap.org"

    async def reverse(self, lat: float, lon: float) -> Dict[str, Any]:
        params = {"format": "json", "lat": lat, "lon": lon}
        headers = {"User-Agent": self.user_agent}
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
            r = await client.get(f"{self.base}/reverse", params=params, headers=headers)
        r.raise_for_status()
        return r.json().get("address") or {}
