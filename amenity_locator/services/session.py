from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict

from amenity_locator.config import get_settings
from amenity_locator.exceptions import GeolocationError, GeolocationErrorKind, QueryFailed
from amenity_locator.models import AmenityTag, BoundingBox, GeoPoint, RankedFeature
from amenity_locator.services.markers import ResultSet, to_markers
from amenity_locator.services.overpass import search_near, search_viewport

logger = logging.getLogger(__name__)

IDLE_LABEL = "Find"
BUSY_LABEL = "Finding..."


class SearchState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    IDLE_WITH_RESULTS = "idle_with_results"
    IDLE_WITH_ERROR = "idle_with_error"


class LocateResult(BaseModel):
    """Outcome of a single geolocation request.

    Either a position, a failure kind, or `available=False` when the client has
    no geolocation support at all.
    """

    model_config = ConfigDict(frozen=True)

    position: Optional[GeoPoint] = None
    error: Optional[GeolocationErrorKind] = None
    available: bool = True

    @classmethod
    def success(cls, position: GeoPoint) -> "LocateResult":
        return cls(position=position)

    @classmethod
    def failure(cls, kind: GeolocationErrorKind) -> "LocateResult":
        return cls(error=kind)

    @classmethod
    def unavailable(cls) -> "LocateResult":
        return cls(available=False)

    @property
    def ok(self) -> bool:
        return self.position is not None


Locate = Callable[[], Awaitable[LocateResult]]


def fixed_position(position: GeoPoint) -> Locate:
    """Locate callable for a position the client already resolved."""

    async def locate() -> LocateResult:
        return LocateResult.success(position)

    return locate


class SearchSession:
    """One search trigger (button) and the markers it owns.

    Debouncing is left to the caller: a trigger while SEARCHING starts another search.
    """

    def __init__(self, session: aiohttp.ClientSession, results: Optional[ResultSet] = None) -> None:
        self.session = session
        self.results = results if results is not None else ResultSet()
        self.state = SearchState.IDLE
        self.label = IDLE_LABEL
        self.alert: Optional[str] = None
        self.bbox: Optional[BoundingBox] = None
        self.error: Optional[QueryFailed] = None

    async def find_near_me(self, locate: Locate, tag: AmenityTag, radius_km: Optional[float] = None) -> SearchState:
        self._reset()
        located = await locate()
        if not located.available:
            logger.warning("Geolocation is not available on this client")
            return self.state
        if not located.ok:
            # no search and no retry after a geolocation failure
            kind = located.error or GeolocationErrorKind.POSITION_UNAVAILABLE
            self.alert = GeolocationError(kind).alert_text
            logger.info("Geolocation failed: %s", kind.name)
            return self.state

        self._begin()
        try:
            bbox, center, ranked = await search_near(self.session, located.position, tag, radius_km)
        except QueryFailed as e:
            return self._fail(e)
        return self._finish(bbox, center, ranked)

    async def find_in_view(self, viewport: BoundingBox, tag: AmenityTag) -> SearchState:
        self._reset()
        self._begin()
        try:
            bbox, center, ranked = await search_viewport(self.session, viewport, tag)
        except QueryFailed as e:
            return self._fail(e)
        return self._finish(bbox, center, ranked)

    def _reset(self) -> None:
        self.results.clear()
        self.alert = None
        self.bbox = None
        self.error = None
        self.state = SearchState.IDLE

    def _begin(self) -> None:
        self.state = SearchState.SEARCHING
        self.label = BUSY_LABEL

    def _finish(self, bbox: BoundingBox, center: GeoPoint, ranked: List[RankedFeature]) -> SearchState:
        self.bbox = bbox
        self.results.replace(center, to_markers(ranked, get_settings().map_search_base_url))
        self.state = SearchState.IDLE_WITH_RESULTS
        self.label = IDLE_LABEL
        return self.state

    def _fail(self, error: QueryFailed) -> SearchState:
        logger.exception("Amenity search failed")
        self.error = error
        self.state = SearchState.IDLE_WITH_ERROR
        self.label = IDLE_LABEL
        return self.state
