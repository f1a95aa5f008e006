"""
HTTP client for this app's own REST endpoints, used by the views.

Non-2xx answers raise httpx.HTTPStatusError; the server's {"error": ...}
message is available through `error_message`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from .state import SavedCity


def error_message(exc: Exception) -> str:
    """Best human-readable message for a failed call."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {exc.response.status_code}"
    return str(exc) or exc.__class__.__name__


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout_s, transport=self.transport
        ) as client:
            r = await client.request(method, path, **kwargs)
        r.raise_for_status()
        return r

    async def list_cities(self, user_id: str) -> List[SavedCity]:
        r = await self._request("GET", f"/api/cities/{user_id}")
        return [SavedCity.from_json(item) for item in r.json()]

    async def add_city(self, name: str, user_id: str) -> SavedCity:
        r = await self._request("POST", "/api/cities", json={"name": name, "userId": user_id})
        return SavedCity.from_json(r.json())

    async def delete_city(self, city_id: str, user_id: str) -> None:
        await self._request("DELETE", "/api/cities", json={"cityId": city_id, "userId": user_id})

    async def search_cities(self, q: str) -> List[Dict[str, Any]]:
        r = await self._request("GET", "/api/search-cities", params={"q": q})
        return r.json()

    async def weather(self, q: str, days: int = 4, aqi: str = "yes") -> Dict[str, Any]:
        r = await self._request("GET", "/api/weather", params={"q": q, "days": days, "aqi": aqi})
        return r.json()
