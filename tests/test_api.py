"""HTTP tests for the REST endpoints."""

import httpx

from tests.payloads import weather_payload


class TestCitiesEndpoints:
    """Tests for /api/cities."""

    def test_create_returns_201_and_record(self, client) -> None:
        """Test saving a city returns the persisted record."""
        r = client.post("/api/cities", json={"name": "Paris", "userId": "u1"})

        assert r.status_code == 201
        body = r.json()
        assert set(body) == {"_id", "name", "userId"}
        assert body["name"] == "Paris"
        assert body["userId"] == "u1"

    def test_create_missing_fields(self, client) -> None:
        """Test missing name or userId is a 400 with a message."""
        for payload in ({"name": "Paris"}, {"userId": "u1"}, {"name": "", "userId": "u1"}, {}):
            r = client.post("/api/cities", json=payload)
            assert r.status_code == 400
            assert r.json() == {"error": "City name and userId are required."}

    def test_create_duplicate_is_conflict(self, client) -> None:
        """Test saving the same city twice yields 409 and no second record."""
        client.post("/api/cities", json={"name": "Paris", "userId": "u1"})
        r = client.post("/api/cities", json={"name": "Paris", "userId": "u1"})

        assert r.status_code == 409
        assert r.json() == {"error": "This city has already been saved."}
        assert len(client.get("/api/cities/u1").json()) == 1

    def test_list_by_user(self, client) -> None:
        """Test listing returns only the requested user's records in order."""
        client.post("/api/cities", json={"name": "Paris", "userId": "u1"})
        client.post("/api/cities", json={"name": "Rome", "userId": "u1"})
        client.post("/api/cities", json={"name": "Oslo", "userId": "u2"})

        r = client.get("/api/cities/u1")

        assert r.status_code == 200
        assert [c["name"] for c in r.json()] == ["Paris", "Rome"]

    def test_delete_by_owner(self, client) -> None:
        """Test the owner deletes with 204 and an empty body."""
        city = client.post("/api/cities", json={"name": "Paris", "userId": "u1"}).json()

        r = client.request("DELETE", "/api/cities", json={"cityId": city["_id"], "userId": "u1"})

        assert r.status_code == 204
        assert r.content == b""
        assert client.get("/api/cities/u1").json() == []

    def test_delete_other_users_city_is_not_found(self, client) -> None:
        """Test a mismatched userId returns 404 and keeps the record."""
        city = client.post("/api/cities", json={"name": "Paris", "userId": "u1"}).json()

        r = client.request("DELETE", "/api/cities", json={"cityId": city["_id"], "userId": "u2"})

        assert r.status_code == 404
        assert r.json() == {"error": "City not found or user not authorized."}
        assert len(client.get("/api/cities/u1").json()) == 1

    def test_delete_missing_fields(self, client) -> None:
        """Test missing cityId or userId is a 400."""
        r = client.request("DELETE", "/api/cities", json={"cityId": "abc"})

        assert r.status_code == 400
        assert r.json() == {"error": "userId and cityId are required."}


class TestSearchEndpoint:
    """Tests for /api/search-cities."""

    def test_passes_suggestions_through(self, client) -> None:
        """Test upstream suggestions are returned unchanged."""
        r = client.get("/api/search-cities", params={"q": "Lon"})

        assert r.status_code == 200
        assert [s["name"] for s in r.json()] == ["London", "Londonderry"]

    def test_missing_query(self, client) -> None:
        """Test a missing q is a 400."""
        r = client.get("/api/search-cities")

        assert r.status_code == 400
        assert r.json() == {"error": "Query parameter is required"}

    def test_upstream_failure(self, client, fake_upstream) -> None:
        """Test a network failure upstream is a 500."""
        def boom(request: httpx.Request) -> None:
            raise httpx.ConnectError("down", request=request)

        fake_upstream.fail_with = boom
        r = client.get("/api/search-cities", params={"q": "Lon"})

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to fetch city suggestions"}


class TestWeatherEndpoint:
    """Tests for /api/weather."""

    def test_forecast_payload(self, client, fake_upstream) -> None:
        """Test a known city returns current conditions and 4 forecast days."""
        r = client.get("/api/weather", params={"q": "London", "days": 4, "aqi": "yes"})

        assert r.status_code == 200
        body = r.json()
        assert body["current"]["temp_c"] == 18.4
        assert len(body["forecast"]["forecastday"]) == 4

        sent = fake_upstream.requests[-1]
        assert sent.url.path == "/v1/forecast.json"
        assert sent.url.params["key"] == "test-key"
        assert sent.url.params["days"] == "4"
        assert sent.url.params["aqi"] == "yes"

    def test_missing_query(self, client) -> None:
        """Test omitting q is a 400 with the documented message."""
        r = client.get("/api/weather")

        assert r.status_code == 400
        assert r.json() == {"error": "City query parameter 'q' is required."}

    def test_missing_api_key(self, client, weather_client) -> None:
        """Test an unconfigured key is reported before calling upstream."""
        weather_client.api_key = None

        r = client.get("/api/weather", params={"q": "London"})

        assert r.status_code == 400
        assert r.json() == {"error": "Weather API key is not configured on the server."}

    def test_upstream_reported_error(self, client) -> None:
        """Test an upstream error body becomes a 400 carrying its message."""
        r = client.get("/api/weather", params={"q": "Atlantis"})

        assert r.status_code == 400
        assert r.json() == {"error": "No matching location found."}

    def test_network_error(self, client, fake_upstream) -> None:
        """Test a transport failure is a 500."""
        def boom(request: httpx.Request) -> None:
            raise httpx.ReadTimeout("slow", request=request)

        fake_upstream.fail_with = boom
        r = client.get("/api/weather", params={"q": "London"})

        assert r.status_code == 500
        assert r.json() == {"error": "Internal Server Error"}

    def test_responses_are_cached(self, client, fake_upstream) -> None:
        """Test the same query within the TTL hits upstream once."""
        fake_upstream.forecasts["Paris"] = weather_payload()

        client.get("/api/weather", params={"q": "Paris", "days": 4, "aqi": "yes"})
        client.get("/api/weather", params={"q": "Paris", "days": 4, "aqi": "yes"})

        assert len(fake_upstream.requests) == 1


def test_health(client) -> None:
    """Test the liveness endpoint."""
    assert client.get("/health").json() == {"ok": True}
