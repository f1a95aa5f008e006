"""Shared fixtures: in-memory database, mocked upstreams, app clients."""

from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weatherapp.db import Base, get_db
from weatherapp.main import app, get_weather_client
from weatherapp.weather_clients import WeatherApiClient

from tests.payloads import suggestions, upstream_error, weather_payload


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


class FakeWeatherApi:
    """
    Stand-in for api.weatherapi.com behind an httpx.MockTransport.

    `forecasts` and `searches` map a q value to the JSON body returned;
    forecasts for unknown q values get the upstream "no matching location"
    error.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.forecasts: Dict[str, Any] = {}
        self.searches: Dict[str, Any] = {}
        self.fail_with: Callable[[httpx.Request], None] | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            self.fail_with(request)
        q = request.url.params.get("q")
        if request.url.path.endswith("/search.json"):
            return httpx.Response(200, json=self.searches.get(q, []))
        if q in self.forecasts:
            return httpx.Response(200, json=self.forecasts[q])
        return httpx.Response(400, json=upstream_error())


@pytest.fixture
def fake_upstream() -> FakeWeatherApi:
    fake = FakeWeatherApi()
    fake.forecasts["London"] = weather_payload()
    fake.searches["Lon"] = suggestions("London", "Londonderry")
    return fake


@pytest.fixture
def weather_client(fake_upstream) -> WeatherApiClient:
    return WeatherApiClient("test-key", transport=httpx.MockTransport(fake_upstream.handler))


@pytest.fixture
def test_app(session_factory, weather_client):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_weather_client] = lambda: weather_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app) -> TestClient:
    return TestClient(test_app)


@pytest.fixture
def asgi_transport(test_app) -> httpx.ASGITransport:
    """Lets the view-layer ApiClient talk to the app in-process."""
    return httpx.ASGITransport(app=test_app)
