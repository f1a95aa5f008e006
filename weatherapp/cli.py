"""CLI entry point: run the server or use the app from a terminal."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional

from .settings import settings
from .logging_config import configure_logging
from .weather_clients import NominatimClient
from .client import carousel
from .client.api import ApiClient
from .client.geolocation import geolocator_for
from .client.home import HomePage
from .client.identity import get_user_id
from .client.manage import CityActionError, SavedPage
from .client.state import CELSIUS, FAHRENHEIT
from .client.storage import local_store, session_store
from .client.views import render_day, render_home, render_saved, render_suggestions

HOME_HELP = "n=next  p=prev  c=°C  f=°F  d N=day details  r=reload  q=quit"


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="weatherapp", description="Saved-cities weather app")
    parser.add_argument("--api", default=settings.api_base_url, help="Base URL of the server")
    parser.add_argument("--state-dir", default=settings.state_dir, help="Where local/session state is kept")

    sub = parser.add_subparsers(dest="command")

    serve_p = sub.add_parser("serve", help="Run the HTTP server")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)

    home_p = sub.add_parser("home", help="Weather carousel over your places")
    home_p.add_argument("--lat", type=float, default=settings.latitude)
    home_p.add_argument("--lon", type=float, default=settings.longitude)
    home_p.add_argument("--units", choices=[CELSIUS, FAHRENHEIT])
    home_p.add_argument("--once", action="store_true", help="Print the first card and exit")

    saved_p = sub.add_parser("saved", help="Manage saved places")
    saved_sub = saved_p.add_subparsers(dest="saved_command")
    saved_sub.add_parser("list", help="List saved places")
    add_p = saved_sub.add_parser("add", help="Save a city")
    add_p.add_argument("name")
    rm_p = saved_sub.add_parser("remove", help="Delete a saved city by id")
    rm_p.add_argument("city_id")
    search_p = saved_sub.add_parser("search", help="City name suggestions")
    search_p.add_argument("text")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging()

    if args.command == "serve":
        return _cmd_serve(args)
    if args.command == "home":
        return asyncio.run(_cmd_home(args))
    if args.command == "saved":
        if args.saved_command is None:
            saved_p.print_help()
            return 1
        return asyncio.run(_cmd_saved(args))
    return 1


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("weatherapp.main:app", host=args.host, port=args.port)
    return 0


async def _cmd_home(args: argparse.Namespace) -> int:
    local = local_store(args.state_dir)
    page = HomePage(
        api=ApiClient(args.api, timeout_s=settings.http_timeout_s),
        user_id=get_user_id(local),
        local=local,
        session=session_store(args.state_dir),
        geolocator=geolocator_for(args.lat, args.lon),
        geocoder=NominatimClient(timeout_s=settings.http_timeout_s),
        default_city=settings.default_city,
    )
    if args.units:
        page.set_units(args.units)

    await page.load()
    print(render_home(page.state))
    if args.once:
        return 0

    print(HOME_HELP)
    while True:
        try:
            line = (await asyncio.to_thread(input, "> ")).strip().lower()
        except EOFError:
            return 0
        if line in ("q", "quit", "exit"):
            return 0
        if line == "n":
            await page.next()
        elif line == "p":
            await page.prev()
        elif line == "c":
            page.set_units(CELSIUS)
        elif line == "f":
            page.set_units(FAHRENHEIT)
        elif line == "r":
            await page.load()
        elif line.startswith("d"):
            _print_day(page, line[1:].strip())
            continue
        else:
            print(HOME_HELP)
            continue
        print(render_home(page.state))


def _print_day(page: HomePage, which: str) -> None:
    card = page.card()
    days = carousel.upcoming_days(card.snapshot if card else None)
    if not days:
        print("No forecast loaded.")
        return
    try:
        n = int(which or "1")
    except ValueError:
        n = 0
    if not 1 <= n <= len(days):
        print(f"Pick a day shown on the card (1 to {len(days)}).")
        return
    print(render_day(days[n - 1], page.state.units))


async def _cmd_saved(args: argparse.Namespace) -> int:
    local = local_store(args.state_dir)
    page = SavedPage(
        api=ApiClient(args.api, timeout_s=settings.http_timeout_s),
        user_id=get_user_id(local),
        session=session_store(args.state_dir),
    )

    if args.saved_command == "search":
        page.autocomplete.update(args.text)
        suggestions = await page.autocomplete.settle()
        print(render_suggestions(suggestions))
        return 0

    await page.load()
    try:
        if args.saved_command == "add":
            await page.add(args.name)
        elif args.saved_command == "remove":
            await page.remove(args.city_id)
    except CityActionError as e:
        print(str(e), file=sys.stderr)
        return 2

    print(render_saved(page.cities))
    return 0


if __name__ == "__main__":
    sys.exit(main())
