from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from parkfinder.api import ParkingDirectoryClient
from parkfinder.config import Settings, settings
from parkfinder.location import StaticLocationProvider
from parkfinder.models import Coordinates
from parkfinder.notifications import ConsoleNotifier
from parkfinder.reconciler import BookingReconciler
from parkfinder.screens import AddLotScreen, BrowseLotsScreen
from parkfinder.services import describe_lots, format_lot

logger = logging.getLogger(__name__)


def _position(args: argparse.Namespace, cfg: Settings) -> Coordinates | None:
    lat = args.lat if args.lat is not None else cfg.device_lat
    lng = args.lng if args.lng is not None else cfg.device_lng
    if lat is None or lng is None:
        return None
    return Coordinates(latitude=lat, longitude=lng)


def _browse_screen(args: argparse.Namespace, cfg: Settings, client: ParkingDirectoryClient) -> BrowseLotsScreen:
    reconciler = BookingReconciler(client, ConsoleNotifier())
    return BrowseLotsScreen(
        reconciler,
        StaticLocationProvider(_position(args, cfg)),
        radius_km=args.radius if args.radius is not None else cfg.radius_km,
        speed_kmh=cfg.speed_kmh,
    )


async def _load_or_report(screen: BrowseLotsScreen) -> bool:
    if await screen.load():
        return True
    print(f"Error: {screen.error}", file=sys.stderr)
    return False


async def cmd_nearby(args: argparse.Namespace, cfg: Settings, client: ParkingDirectoryClient) -> int:
    screen = _browse_screen(args, cfg, client)
    if not await _load_or_report(screen):
        return 1
    screen.search_query = args.search or ""
    lots = screen.visible_lots
    if not lots:
        print("No parking lots found nearby.")
        return 0
    for row in describe_lots(lots, screen.location, screen.speed_kmh, nearest_first=args.nearest):
        print(format_lot(row))
    return 0


async def cmd_book(args: argparse.Namespace, cfg: Settings, client: ParkingDirectoryClient) -> int:
    screen = _browse_screen(args, cfg, client)
    if not await _load_or_report(screen):
        return 1
    try:
        screen.select_lot(args.lot_id)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    if not screen.booking_enabled:
        print("Error: this parking lot is full.", file=sys.stderr)
        return 1
    result = await screen.book()
    return 0 if result is not None and result.ok else 1


async def cmd_rate(args: argparse.Namespace, cfg: Settings, client: ParkingDirectoryClient) -> int:
    screen = _browse_screen(args, cfg, client)
    if not await _load_or_report(screen):
        return 1
    try:
        screen.select_lot(args.lot_id)
        screen.open_rating_modal()
        screen.choose_rating(args.rating)
    except (KeyError, ValueError) as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1
    result = await screen.submit_rating()
    return 0 if result is not None and result.ok else 1


async def cmd_add(args: argparse.Namespace, cfg: Settings, client: ParkingDirectoryClient) -> int:
    form = AddLotScreen(client, ConsoleNotifier(), StaticLocationProvider(_position(args, cfg)))
    form.open()
    form.name = args.name or ""
    form.capacity = args.capacity or ""
    form.available = args.available or ""
    form.rate = args.rate or ""
    if args.here:
        if not form.use_current_location():
            print("Error: current location is not available.", file=sys.stderr)
            return 1
    else:
        form.latitude = args.lot_lat or ""
        form.longitude = args.lot_lng or ""
    result = await form.submit()
    return 0 if result is not None and result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parkfinder", description="Find, book and rate nearby parking lots.")
    parser.add_argument("--api", help="Parking directory base URL")
    parser.add_argument("--lat", type=float, help="Device latitude")
    parser.add_argument("--lng", type=float, help="Device longitude")
    parser.add_argument("--radius", type=float, help="Search radius in km")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("nearby", help="List parking lots around the device")
    p.add_argument("--search", help="Only lots whose name contains this text")
    p.add_argument("--nearest", action="store_true", help="Sort by distance")
    p.set_defaults(func=cmd_nearby)

    p = sub.add_parser("book", help="Book a spot at a lot")
    p.add_argument("lot_id", type=int)
    p.set_defaults(func=cmd_book)

    p = sub.add_parser("rate", help="Rate a lot from 1 to 5")
    p.add_argument("lot_id", type=int)
    p.add_argument("rating", type=int)
    p.set_defaults(func=cmd_rate)

    # Form fields stay text, as typed into the mobile form
    p = sub.add_parser("add", help="Register a new parking lot")
    p.add_argument("--name")
    p.add_argument("--lot-lat")
    p.add_argument("--lot-lng")
    p.add_argument("--here", action="store_true", help="Place the lot at the device position")
    p.add_argument("--capacity")
    p.add_argument("--available")
    p.add_argument("--rate")
    p.set_defaults(func=cmd_add)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = settings
    if args.api:
        cfg = cfg.model_copy(update={"api_base_url": args.api.rstrip("/")})

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, cfg.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = ParkingDirectoryClient(cfg.api_base_url, timeout=cfg.request_timeout_s)
    try:
        return asyncio.run(args.func(args, cfg, client))
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
