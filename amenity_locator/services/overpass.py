from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import aiohttp
from pydantic import ValidationError

from amenity_locator.config import get_settings
from amenity_locator.exceptions import QueryFailed
from amenity_locator.models import (
    AmenityTag,
    AreaFeature,
    BoundingBox,
    FeatureBounds,
    GeoPoint,
    PointFeature,
    RankedFeature,
    RawFeature,
)
from amenity_locator.services.bbox import from_center_and_radius, from_viewport, query_spec
from amenity_locator.services.geo import haversine_m

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT_S = 120


def build_query(bbox: BoundingBox, tag: AmenityTag, timeout_s: int = DEFAULT_QUERY_TIMEOUT_S) -> str:
    """Overpass QL selecting nodes and ways (no relations) tagged amenity=<tag> inside bbox."""
    area = f"{bbox.south},{bbox.west},{bbox.north},{bbox.east}"
    selector = f'["amenity"="{tag.overpass_value}"]'
    return (
        f"[out:json][timeout:{timeout_s}];"
        f"(node{selector}({area});way{selector}({area}););"
        "out geom;"
    )


def _elements_from_payload(data: Any) -> List[Dict[str, Any]]:
    # null body, non-object body, missing or null "elements" all mean "nothing found"
    if not isinstance(data, dict):
        return []
    elements = data.get("elements")
    if not isinstance(elements, list):
        return []
    return [el for el in elements if isinstance(el, dict)]


async def fetch_elements(session: aiohttp.ClientSession, query: str) -> List[Dict[str, Any]]:
    """POST the query to Overpass and return the raw `elements` list."""
    settings = get_settings()
    timeout = aiohttp.ClientTimeout(total=settings.http_timeout_s)
    headers = {"User-Agent": settings.user_agent}

    logger.debug("Overpass query: %s", query)
    try:
        async with session.post(
            str(settings.overpass_base_url), data={"data": query}, headers=headers, timeout=timeout
        ) as resp:
            resp.raise_for_status()
            data = await resp.json(content_type=None)
    except aiohttp.ClientResponseError as e:
        raise QueryFailed(f"Overpass error: {e.status}", status=e.status) from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise QueryFailed(f"Overpass request failed: {e!r}") from e
    except ValueError as e:
        raise QueryFailed("Overpass returned a non-JSON body") from e

    return _elements_from_payload(data)


def _tags_from_element(el: Dict[str, Any]) -> Dict[str, str]:
    tags = el.get("tags") or {}
    if not isinstance(tags, dict):
        return {}
    return {str(k): str(v) for k, v in tags.items()}


def parse_element(el: Dict[str, Any]) -> Optional[RawFeature]:
    """Turn one Overpass element into a point or area feature.

    Returns None for element types other than node/way and for nodes/ways
    without usable geometry.
    """
    osm_type = el.get("type")
    tags = _tags_from_element(el)
    try:
        if osm_type == "node":
            return PointFeature(lat=el["lat"], lon=el["lon"], tags=tags)
        if osm_type == "way":
            return AreaFeature(bounds=FeatureBounds.model_validate(el["bounds"]), tags=tags)
    except (KeyError, TypeError, ValidationError):
        logger.warning("Dropping %s %s without usable geometry", osm_type, el.get("id"))
        return None

    logger.debug("Dropping unsupported element type %r (id=%s)", osm_type, el.get("id"))
    return None


def feature_position(feature: RawFeature) -> Tuple[float, float]:
    if isinstance(feature, PointFeature):
        return feature.lat, feature.lon
    if isinstance(feature, AreaFeature):
        # bbox midpoint, not the polygon centroid
        b = feature.bounds
        return (b.minlat + b.maxlat) / 2, (b.minlon + b.maxlon) / 2
    raise TypeError(f"Unknown feature kind: {feature!r}")


def rank(features: Iterable[RawFeature], center: GeoPoint) -> List[RankedFeature]:
    """Attach the distance to `center` and sort nearest-first (stable for ties)."""
    ranked: list[RankedFeature] = []
    for feature in features:
        lat, lon = feature_position(feature)
        ranked.append(
            RankedFeature(
                latitude=lat,
                longitude=lon,
                tags=dict(feature.tags),
                distance_to_center_m=haversine_m(lat, lon, center.latitude, center.longitude),
            )
        )

    ranked.sort(key=lambda f: f.distance_to_center_m)
    return ranked


async def search(
    session: aiohttp.ClientSession,
    bbox: BoundingBox,
    tag: AmenityTag,
    center: GeoPoint,
) -> List[RankedFeature]:
    """Search amenities tagged `tag` inside `bbox`, nearest to `center` first.

    Raises QueryFailed if the request or the response parsing fails.
    """
    settings = get_settings()
    query = build_query(bbox, tag, timeout_s=settings.query_timeout_s)
    elements = await fetch_elements(session, query)

    features = [f for f in (parse_element(el) for el in elements) if f is not None]
    result = rank(features, center)
    logger.info("Found %d %s features (%d raw elements)", len(result), tag.value, len(elements))
    return result


async def search_near(
    session: aiohttp.ClientSession,
    center: GeoPoint,
    tag: AmenityTag,
    radius_km: Optional[float] = None,
) -> Tuple[BoundingBox, GeoPoint, List[RankedFeature]]:
    spec = query_spec(tag, radius_km)
    bbox, ref = from_center_and_radius(center, spec.search_radius_km)
    return bbox, ref, await search(session, bbox, spec.tag, ref)


async def search_viewport(
    session: aiohttp.ClientSession,
    viewport: BoundingBox,
    tag: AmenityTag,
) -> Tuple[BoundingBox, GeoPoint, List[RankedFeature]]:
    bbox, ref = from_viewport(viewport)
    return bbox, ref, await search(session, bbox, tag, ref)
