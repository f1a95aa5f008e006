"""
Where is the user?

A terminal has no browser geolocation, so the position comes from
configuration. No configured position behaves like a browser without the
geolocation API. A geolocator that refuses raises GeolocationError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class GeolocationError(RuntimeError):
    """Position unavailable (permission denied, timeout, ...)."""


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float


class FixedGeolocator:
    """Reports a position known up front (settings or CLI flags)."""

    def __init__(self, latitude: float, longitude: float):
        self.position = Position(latitude, longitude)

    async def current_position(self) -> Position:
        return self.position


def geolocator_for(latitude: Optional[float], longitude: Optional[float]) -> Optional[FixedGeolocator]:
    """None (unsupported) unless both coordinates are known."""
    if latitude is None or longitude is None:
        return None
    return FixedGeolocator(latitude, longitude)
