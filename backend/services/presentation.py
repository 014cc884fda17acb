"""
Presentation sinks the search session draws into.

The session never touches a concrete UI. It talks to three small interfaces
(status line, list panel, map display). `ViewState` implements all three by
recording what should be on screen, which is what the HTTP API returns to
the browser.
"""
from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from domain.models import Coordinate, PlaceResult

CENTER_MARKER_TITLE = "Center location"
CENTER_POPUP = "Search center"


class StatusSink(Protocol):
    def show_status(self, text: str) -> None: ...


class ListPanelSink(Protocol):
    def show_entries(self, entries: Sequence["ListEntry"]) -> None: ...

    def clear_entries(self) -> None: ...


class MapDisplaySink(Protocol):
    def set_view(self, center: Coordinate, zoom: int) -> None: ...

    def set_center_marker(self, center: Coordinate) -> None: ...

    def add_marker(self, marker: "Marker") -> None: ...

    def clear_markers(self) -> None: ...

    def pan_to(self, coordinate: Coordinate) -> None: ...

    def open_popup(self, marker_index: int) -> None: ...


def escape_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return html.escape(text, quote=True)


def format_distance(distance_m: float) -> str:
    return f"{round(distance_m)} m"


def popup_html(place: PlaceResult) -> str:
    street = f"{escape_html(place.street)}<br/>" if place.street else ""
    return f"<strong>{escape_html(place.name)}</strong><br/>{street}{format_distance(place.distance_m)} away"


def list_entry_html(place: PlaceResult) -> str:
    hours = escape_html(place.opening_hours)
    return (
        f"<strong>{escape_html(place.name)}</strong>"
        f'<div class="meta">{format_distance(place.distance_m)} — {hours}</div>'
    )


@dataclass
class Marker:
    coordinate: Coordinate
    popup: str
    identity: str


@dataclass
class ListEntry:
    index: int
    identity: str
    name: str
    distance_m: float
    opening_hours: Optional[str]
    html: str


def build_marker(place: PlaceResult) -> Marker:
    return Marker(coordinate=place.coordinate, popup=popup_html(place), identity=place.identity)


def build_entry(index: int, place: PlaceResult) -> ListEntry:
    return ListEntry(
        index=index,
        identity=place.identity,
        name=place.name,
        distance_m=place.distance_m,
        opening_hours=place.opening_hours,
        html=list_entry_html(place),
    )


@dataclass
class ViewState:
    """Recording implementation of every sink."""
    status: Optional[str] = None
    entries: List[ListEntry] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)
    map_center: Optional[Coordinate] = None
    zoom: Optional[int] = None
    center_marker: Optional[Coordinate] = None
    open_popup_index: Optional[int] = None

    # StatusSink
    def show_status(self, text: str) -> None:
        # a status line replaces whatever the panel showed
        self.status = text
        self.entries = []

    # ListPanelSink
    def show_entries(self, entries: Sequence[ListEntry]) -> None:
        self.status = None
        self.entries = list(entries)

    def clear_entries(self) -> None:
        self.entries = []

    # MapDisplaySink
    def set_view(self, center: Coordinate, zoom: int) -> None:
        self.map_center = center
        self.zoom = zoom

    def set_center_marker(self, center: Coordinate) -> None:
        self.center_marker = center

    def add_marker(self, marker: Marker) -> None:
        self.markers.append(marker)

    def clear_markers(self) -> None:
        self.markers = []
        self.open_popup_index = None

    def pan_to(self, coordinate: Coordinate) -> None:
        self.map_center = coordinate

    def open_popup(self, marker_index: int) -> None:
        self.open_popup_index = marker_index

    def to_dict(self) -> dict:
        def _coord(c: Optional[Coordinate]) -> Optional[dict]:
            return {"lat": c.lat, "lon": c.lon} if c else None

        return {
            "status": self.status,
            "entries": [
                {
                    "index": e.index,
                    "id": e.identity,
                    "name": e.name,
                    "distance_m": e.distance_m,
                    "opening_hours": e.opening_hours,
                    "html": e.html,
                }
                for e in self.entries
            ],
            "markers": [
                {"id": m.identity, "lat": m.coordinate.lat, "lon": m.coordinate.lon, "popup": m.popup}
                for m in self.markers
            ],
            "map": {
                "center": _coord(self.map_center),
                "zoom": self.zoom,
                "center_marker": _coord(self.center_marker),
                "center_popup": CENTER_POPUP if self.center_marker else None,
                "open_popup": self.open_popup_index,
            },
        }
