"""
Turn raw Overpass elements into a distance-ordered ResultSet.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from domain.models import UNNAMED_CAFE, Coordinate, PlaceResult, ResultSet
from services.distance import haversine_m

logger = logging.getLogger(__name__)


def _point(lat: Any, lon: Any) -> Optional[Coordinate]:
    if lat is None or lon is None:
        return None
    try:
        return Coordinate(float(lat), float(lon))
    except (TypeError, ValueError):
        return None


def resolve_coordinate(element: dict[str, Any]) -> Optional[Coordinate]:
    """Nodes carry lat/lon directly; ways and relations carry a `center`."""
    center = element.get("center") or {}
    direct = _point(element.get("lat"), element.get("lon"))
    centroid = _point(center.get("lat"), center.get("lon")) if isinstance(center, dict) else None
    if element.get("type") == "node":
        return direct or centroid
    return centroid or direct


def _to_place(element: dict[str, Any], coord: Coordinate, center: Coordinate) -> PlaceResult:
    tags = element.get("tags") or {}
    if not isinstance(tags, dict):
        tags = {}
    return PlaceResult(
        element_type=str(element.get("type", "node")),
        element_id=element.get("id", 0),
        coordinate=coord,
        distance_m=haversine_m(center, coord),
        name=tags.get("name") or UNNAMED_CAFE,
        street=tags.get("addr:street") or None,
        opening_hours=tags.get("opening_hours") or None,
        tags=dict(tags),
    )


def rank(
    elements: Optional[Iterable[dict[str, Any]]],
    center: Coordinate,
    radius_m: float = 0.0,
) -> ResultSet:
    """
    Annotate each element with its distance from `center` and sort ascending.

    Elements without a usable coordinate are skipped. When the same
    type/id shows up twice only the closest copy is kept.
    """
    places: List[PlaceResult] = []
    skipped = 0
    for element in elements or []:
        coord = resolve_coordinate(element) if isinstance(element, dict) else None
        if coord is None:
            skipped += 1
            continue
        places.append(_to_place(element, coord, center))
    if skipped:
        logger.warning("rank: skipped %d element(s) without coordinates", skipped)

    places.sort(key=lambda p: p.distance_m)

    seen: set[str] = set()
    unique: List[PlaceResult] = []
    for place in places:
        if place.identity in seen:
            continue
        seen.add(place.identity)
        unique.append(place)

    return ResultSet(center=center, radius_m=radius_m, places=tuple(unique))
