from __future__ import annotations

from typing import Optional

import aiohttp
from fastapi import FastAPI, HTTPException, Query

from amenity_locator.config import get_settings
from amenity_locator.exceptions import GEOLOCATION_MESSAGES
from amenity_locator.logging_config import configure_logging
from amenity_locator.models import AmenityTag, BoundingBox, GeoPoint, SearchResult
from amenity_locator.services.bbox import default_radius_km
from amenity_locator.services.session import SearchSession, SearchState, fixed_position

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Find public toilets and drinking water near you using OpenStreetMap data.",
)


@app.get("/", tags=["Root"])
async def root():
    return {"ok": True, "service": settings.app_name, "version": settings.version}


@app.get("/health", tags=["Healthcheck"])
async def health():
    return {"ok": True}


@app.get("/api/amenities", tags=["Api Amenities"])
async def api_amenities():
    return {
        "amenities": [
            {"name": tag.value, "osm_value": tag.overpass_value, "default_radius_km": default_radius_km(tag)}
            for tag in AmenityTag
        ]
    }


@app.get("/api/geolocation-errors", tags=["Api Amenities"])
async def api_geolocation_errors():
    return {"errors": {str(kind.value): message for kind, message in GEOLOCATION_MESSAGES.items()}}


def _search_result(amenity: AmenityTag, searcher: SearchSession) -> SearchResult:
    if searcher.state is SearchState.IDLE_WITH_ERROR:
        raise HTTPException(status_code=502, detail=str(searcher.error))
    return SearchResult(
        amenity=amenity,
        center=searcher.results.origin,
        bbox=searcher.bbox,
        markers=searcher.results.markers,
    )


@app.get("/api/search/nearby", response_model=SearchResult, tags=["Api Search"])
async def api_search_nearby(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    amenity: AmenityTag = Query(AmenityTag.toilet),
    radius_km: Optional[float] = Query(None, gt=0, le=200),
):
    # the browser resolved the position already; it arrives as lat/lon
    locate = fixed_position(GeoPoint(latitude=lat, longitude=lon))
    async with aiohttp.ClientSession() as session:
        searcher = SearchSession(session)
        await searcher.find_near_me(locate, amenity, radius_km)

    return _search_result(amenity, searcher)


@app.get("/api/search/viewport", response_model=SearchResult, tags=["Api Search"])
async def api_search_viewport(
    south: float = Query(..., ge=-90.0, le=90.0),
    west: float = Query(..., ge=-180.0, le=180.0),
    north: float = Query(..., ge=-90.0, le=90.0),
    east: float = Query(..., ge=-180.0, le=180.0),
    amenity: AmenityTag = Query(AmenityTag.toilet),
):
    try:
        viewport = BoundingBox(south=south, west=west, north=north, east=east)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    async with aiohttp.ClientSession() as session:
        searcher = SearchSession(session)
        await searcher.find_in_view(viewport, amenity)

    return _search_result(amenity, searcher)
