"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling
- wiring together DB + upstream clients

Every error leaves the server as {"error": "<message>"}.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .settings import settings
from .db import Base, engine, get_db
from .schemas import CityCreate, CityDelete, CityOut
from .weather_clients import WeatherApiClient, WeatherError
from .crud import DuplicateCityError, create_city, delete_city, list_cities
from .logging_config import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Create tables on startup (no migrations for a single table).
    Base.metadata.create_all(bind=engine)
    logger.info("app_started", database_url=settings.database_url)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Upstream client (constructed once so its response cache is shared).
weather_api = WeatherApiClient(
    settings.weather_api_key,
    timeout_s=settings.http_timeout_s,
    cache_ttl_s=settings.weather_cache_ttl_s,
    cache_max_entries=settings.weather_cache_max_entries,
)


def get_weather_client() -> WeatherApiClient:
    """Dependency hook; tests override it with a client on a mock transport."""
    return weather_api


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid request."}, status_code=400)


@app.get("/health")
def health():
    return {"ok": True}


# -------------------------
# Saved cities
# -------------------------

@app.get("/api/cities/{user_id}")
def api_list_cities(user_id: str, db: Session = Depends(get_db)):
    """All saved cities of one user."""
    try:
        cities = list_cities(db, user_id)
    except SQLAlchemyError:
        logger.exception("cities_fetch_failed", user_id=user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch cities.")
    return [CityOut.model_validate(c).to_json() for c in cities]


@app.post("/api/cities", status_code=201)
def api_create_city(payload: CityCreate, db: Session = Depends(get_db)):
    """Save a city for a user. Duplicates per user are a 409."""
    if not payload.name or not payload.user_id:
        raise HTTPException(status_code=400, detail="City name and userId are required.")
    try:
        city = create_city(db, payload.name, payload.user_id)
    except DuplicateCityError:
        raise HTTPException(status_code=409, detail="This city has already been saved.")
    except SQLAlchemyError:
        logger.exception("city_save_failed", user_id=payload.user_id)
        raise HTTPException(status_code=500, detail="Failed to save city.")
    return CityOut.model_validate(city).to_json()


@app.delete("/api/cities", status_code=204)
def api_delete_city(payload: CityDelete, db: Session = Depends(get_db)):
    """
    Delete a saved city. Unknown ids and ids owned by someone else get the
    same 404 so existence is not leaked.
    """
    if not payload.user_id or not payload.city_id:
        raise HTTPException(status_code=400, detail="userId and cityId are required.")
    try:
        deleted = delete_city(db, payload.city_id, payload.user_id)
    except SQLAlchemyError:
        logger.exception("city_delete_failed", city_id=payload.city_id)
        raise HTTPException(status_code=500, detail="Failed to delete city.")
    if not deleted:
        raise HTTPException(status_code=404, detail="City not found or user not authorized.")
    return Response(status_code=204)


# -------------------------
# Weather proxy
# -------------------------

@app.get("/api/search-cities")
async def api_search_cities(
    q: Optional[str] = Query(None),
    client: WeatherApiClient = Depends(get_weather_client),
):
    """Autocomplete suggestions, passed through from WeatherAPI."""
    if not q:
        raise HTTPException(status_code=400, detail="Query parameter is required")
    try:
        return await client.search(q)
    except (WeatherError, httpx.HTTPError, ValueError) as e:
        logger.error("city_search_failed", q=q, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch city suggestions")


@app.get("/api/weather")
async def api_weather(
    q: Optional[str] = Query(None),
    days: int = Query(1, ge=1, le=14),
    aqi: str = Query("no", pattern="^(yes|no)$"),
    client: WeatherApiClient = Depends(get_weather_client),
):
    """
    Current conditions + forecast for a city name or "lat,lon":
    - upstream-reported errors (unknown location, bad key) -> 400
    - network / decoding failures -> 500
    """
    if not client.api_key:
        raise HTTPException(status_code=400, detail="Weather API key is not configured on the server.")
    if not q:
        raise HTTPException(status_code=400, detail="City query parameter 'q' is required.")
    try:
        return await client.forecast(q, days=days, aqi=aqi)
    except WeatherError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (httpx.HTTPError, ValueError) as e:
        logger.error("weather_fetch_failed", q=q, error=str(e))
        raise HTTPException(status_code=500, detail="Internal Server Error")
