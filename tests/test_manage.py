"""Tests for the saved-places view and autocomplete."""

import asyncio

import pytest

from weatherapp.client.api import ApiClient
from weatherapp.client.manage import Autocomplete, CityActionError, SavedPage, suggestion_label
from weatherapp.client.orchestrator import CITIES_CHANGED_KEY
from weatherapp.client.storage import JsonStore

from tests.payloads import suggestions


class StubSearchApi:
    """Search stand-in; `delays` slows down individual queries."""

    def __init__(self, delays=None, fail=False):
        self.delays = delays or {}
        self.fail = fail
        self.calls = []

    async def search_cities(self, q):
        self.calls.append(q)
        await asyncio.sleep(self.delays.get(q, 0))
        if self.fail:
            raise ValueError("bad json")
        return suggestions(q.title())


class TestAutocomplete:
    """Tests for debounced suggestions."""

    def test_debounce_only_fetches_last_input(self) -> None:
        api = StubSearchApi()

        async def scenario():
            ac = Autocomplete(api, delay_s=0.02)
            for text in ("l", "lo", "lon"):
                ac.update(text)
                await asyncio.sleep(0.005)
            return await ac.settle()

        result = asyncio.run(scenario())

        assert api.calls == ["lon"]
        assert [s["name"] for s in result] == ["Lon"]

    def test_stale_response_discarded(self) -> None:
        """Test a slow earlier response cannot overwrite newer suggestions."""
        api = StubSearchApi(delays={"par": 0.1})

        async def scenario():
            ac = Autocomplete(api, delay_s=0.01)
            ac.update("par")
            await asyncio.sleep(0.03)  # timer fired, "par" in flight
            ac.update("paris")
            return await ac.settle()

        result = asyncio.run(scenario())

        assert api.calls == ["par", "paris"]
        assert [s["name"] for s in result] == ["Paris"]

    def test_blank_input_clears(self) -> None:
        api = StubSearchApi()

        async def scenario():
            ac = Autocomplete(api, delay_s=0.01)
            ac.update("rome")
            await ac.settle()
            ac.update("   ")
            return ac, await ac.settle()

        ac, result = asyncio.run(scenario())

        assert result == []
        assert api.calls == ["rome"]

    def test_failure_clears_suggestions(self) -> None:
        api = StubSearchApi(fail=True)

        async def scenario():
            ac = Autocomplete(api, delay_s=0.01)
            ac.suggestions = suggestions("Old")
            ac.update("x")
            return await ac.settle()

        assert asyncio.run(scenario()) == []

    def test_choose_uses_plain_name(self) -> None:
        api = StubSearchApi()
        london = {"id": 1, "name": "London", "region": "City of London, Greater London", "country": "United Kingdom"}

        async def scenario():
            ac = Autocomplete(api, delay_s=0.01)
            ac.update("lond")
            await ac.settle()
            text = ac.choose(london)
            await ac.settle()
            return ac, text

        ac, text = asyncio.run(scenario())

        assert text == "London"
        assert ac.text == "London"
        assert ac.suggestions == []
        assert api.calls == ["lond"]

    def test_suggestion_label(self) -> None:
        label = suggestion_label({"name": "Paris", "region": "Ile-de-France", "country": "France"})

        assert label == "Paris, Ile-de-France, France"


class TestSavedPage:
    """Tests for add/remove against the real app."""

    @pytest.fixture
    def page(self, asgi_transport, tmp_path) -> SavedPage:
        api = ApiClient("http://testserver", transport=asgi_transport)
        return SavedPage(api, "u1", JsonStore(tmp_path / "session.json"))

    def test_add_appends_and_flags_change(self, page) -> None:
        city = asyncio.run(page.add("  Paris  "))

        assert city.name == "Paris"
        assert [c.name for c in page.cities] == ["Paris"]
        assert page.session.get(CITIES_CHANGED_KEY) == "true"

    def test_add_blank_is_ignored(self, page) -> None:
        assert asyncio.run(page.add("   ")) is None
        assert page.cities == []
        assert page.session.get(CITIES_CHANGED_KEY) is None

    def test_add_duplicate_raises_and_keeps_state(self, page) -> None:
        asyncio.run(page.add("Paris"))
        page.session.remove(CITIES_CHANGED_KEY)

        with pytest.raises(CityActionError, match="already been saved"):
            asyncio.run(page.add("Paris"))

        assert [c.name for c in page.cities] == ["Paris"]
        assert page.session.get(CITIES_CHANGED_KEY) is None

    def test_remove(self, page) -> None:
        async def scenario():
            paris = await page.add("Paris")
            await page.add("Rome")
            await page.remove(paris.id)
            return await page.load()

        cities = asyncio.run(scenario())

        assert [c.name for c in page.cities] == ["Rome"]
        assert [c.name for c in cities] == ["Rome"]
        assert page.session.get(CITIES_CHANGED_KEY) == "true"

    def test_remove_unknown_raises(self, page) -> None:
        asyncio.run(page.add("Paris"))

        with pytest.raises(CityActionError, match="not found"):
            asyncio.run(page.remove("f" * 32))

        assert [c.name for c in page.cities] == ["Paris"]

    def test_add_uses_autocomplete_text(self, page) -> None:
        page.autocomplete.text = "Oslo"

        asyncio.run(page.add())

        assert [c.name for c in page.cities] == ["Oslo"]
        assert page.autocomplete.text == ""
