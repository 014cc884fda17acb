"""Run one cafe search from the command line and print the ranked list.

Usage:
    PYTHONPATH=backend python -m scripts.find_cafes --address "Bandra, Mumbai"
    PYTHONPATH=backend python -m scripts.find_cafes --lat 19.076 --lon 72.8777 --radius 800

Handy for checking Overpass/Nominatim connectivity without the API server.
"""

from __future__ import annotations

import argparse
import logging
import sys

from domain.models import Coordinate
from services.location import StaticLocationProvider
from services.presentation import ViewState
from services.search_session import create_session

LOG = logging.getLogger("find_cafes")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find cafes near an address or coordinate")
    parser.add_argument("--address", help="free-text address to geocode")
    parser.add_argument("--lat", type=float)
    parser.add_argument("--lon", type=float)
    parser.add_argument("--radius", type=float, default=None, help="search radius in meters")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)
    if not args.address and (args.lat is None or args.lon is None):
        parser.error("give --address or both --lat and --lon")
    if args.radius is not None and args.radius < 1:
        parser.error("--radius must be at least 1 meter")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    view = ViewState()
    session = create_session(view)
    if args.address:
        results = session.find_address(args.address, radius_m=args.radius)
    else:
        provider = StaticLocationProvider(Coordinate(args.lat, args.lon))
        results = session.locate(provider, radius_m=args.radius)

    if view.status:
        print(view.status)
    if results is None:
        return 1
    for entry in view.entries:
        hours = f"  [{entry.opening_hours}]" if entry.opening_hours else ""
        print(f"{entry.index + 1:>3}. {entry.name} ({round(entry.distance_m)} m){hours}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
