"""
Cafe search API routes.

Each browser tab creates a session and then drives it with locate/find/clear
calls. Every call answers with the full view state (status line, list
entries, markers, map view) for the client to draw.
"""
import logging
import threading
import uuid
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from domain.models import Coordinate, SearchRequest
from services.errors import PoiFetchError
from services.location import StaticLocationProvider, UnsupportedLocationProvider
from services.overpass_client import get_default_poi_fetcher
from services.presentation import ViewState
from services.search_session import SearchSession, create_session
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)


class SessionRegistry:
    """Sessions live in memory for the life of the process."""

    def __init__(self) -> None:
        self._sessions: Dict[str, tuple[SearchSession, ViewState]] = {}
        self._lock = threading.Lock()

    def create(self) -> str:
        view = ViewState()
        session = create_session(view, fetcher=get_default_poi_fetcher())
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = (session, view)
        return session_id

    def get(self, session_id: str) -> tuple[SearchSession, ViewState]:
        with self._lock:
            entry = self._sessions.get(session_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return entry


sessions = SessionRegistry()


class PositionRequest(BaseModel):
    """Result of the browser's geolocation call.

    Send lat/lon on success, `error` when the browser reported a failure and
    `supported=false` when it has no geolocation at all.
    """
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    error: Optional[str] = None
    supported: bool = True
    radius_m: Optional[float] = Field(default=None, ge=1)


class FindRequest(BaseModel):
    address: str = ""
    radius_m: Optional[float] = Field(default=None, ge=1)


class SessionCreated(BaseModel):
    session_id: str


class CafeResponse(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    distance_m: float
    street: Optional[str] = None
    opening_hours: Optional[str] = None


class CafeSearchResponse(BaseModel):
    center: dict
    radius_m: float
    empty: bool
    cafes: List[CafeResponse]


def _provider(body: PositionRequest):
    if not body.supported:
        return UnsupportedLocationProvider()
    if body.lat is not None and body.lon is not None:
        return StaticLocationProvider(Coordinate(body.lat, body.lon))
    return StaticLocationProvider(error=body.error or "position unavailable")


def _view_response(session: SearchSession, view: ViewState) -> dict:
    data = view.to_dict()
    data["state"] = session.state.value
    return data


@router.post("/sessions", response_model=SessionCreated)
def create_search_session():
    return SessionCreated(session_id=sessions.create())


@router.get("/sessions/{session_id}")
def get_session_view(session_id: str):
    session, view = sessions.get(session_id)
    return _view_response(session, view)


@router.post("/sessions/{session_id}/locate")
def locate(session_id: str, body: PositionRequest):
    session, view = sessions.get(session_id)
    session.locate(_provider(body), radius_m=body.radius_m)
    return _view_response(session, view)


@router.post("/sessions/{session_id}/initial-load")
def initial_load(session_id: str, body: PositionRequest):
    session, view = sessions.get(session_id)
    session.initial_load(_provider(body), radius_m=body.radius_m)
    return _view_response(session, view)


@router.post("/sessions/{session_id}/find")
def find_address(session_id: str, body: FindRequest):
    session, view = sessions.get(session_id)
    session.find_address(body.address, radius_m=body.radius_m)
    return _view_response(session, view)


@router.post("/sessions/{session_id}/clear")
def clear(session_id: str):
    session, view = sessions.get(session_id)
    session.clear()
    return _view_response(session, view)


@router.post("/sessions/{session_id}/select/{index}")
def select(session_id: str, index: int):
    session, view = sessions.get(session_id)
    try:
        session.select(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Result not found")
    return _view_response(session, view)


@router.get("/cafes", response_model=CafeSearchResponse)
def search_cafes(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_m: Optional[float] = Query(default=None, ge=1),
):
    """Stateless ranked search around a point."""
    request = SearchRequest(Coordinate(lat, lon), radius_m or settings.DEFAULT_RADIUS_M)
    try:
        result_set = get_default_poi_fetcher().fetch(request.center, request.radius_m)
    except PoiFetchError as exc:
        logger.warning("stateless cafe search failed: %s", exc)
        raise HTTPException(status_code=502, detail="Error fetching data. Try again later.")
    return CafeSearchResponse(
        center={"lat": lat, "lon": lon},
        radius_m=request.radius_m,
        empty=result_set.is_empty,
        cafes=[
            CafeResponse(
                id=p.identity,
                name=p.name,
                lat=p.coordinate.lat,
                lon=p.coordinate.lon,
                distance_m=p.distance_m,
                street=p.street,
                opening_hours=p.opening_hours,
            )
            for p in result_set
        ],
    )
