from __future__ import annotations

import math
from typing import Optional, Tuple

from amenity_locator.config import get_settings
from amenity_locator.models import AmenityQuerySpec, AmenityTag, BoundingBox, GeoPoint

# One degree of latitude, flat-Earth approximation (fine for tens of km)
KM_PER_DEGREE = 111.111


def default_radius_km(tag: AmenityTag) -> float:
    settings = get_settings()
    if tag is AmenityTag.toilet:
        return settings.toilet_radius_km
    return settings.drinking_water_radius_km


def query_spec(tag: AmenityTag, radius_km: Optional[float] = None) -> AmenityQuerySpec:
    if radius_km is None:
        radius_km = default_radius_km(tag)
    return AmenityQuerySpec(tag=tag, search_radius_km=radius_km)


def from_center_and_radius(center: GeoPoint, radius_km: float) -> Tuple[BoundingBox, GeoPoint]:
    """Square-ish box of side `radius_km` centered on `center`.

    The longitude span grows without bound towards the poles; at exactly +/-90 degrees
    it is infinite. That is a known limit of the approximation and is not clamped.
    """
    if radius_km <= 0:
        raise ValueError("radius_km must be positive")

    lat_delta = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(center.latitude))
    lon_delta = radius_km / (KM_PER_DEGREE * cos_lat) if cos_lat != 0 else math.inf

    bbox = BoundingBox(
        south=center.latitude - lat_delta / 2,
        west=center.longitude - lon_delta / 2,
        north=center.latitude + lat_delta / 2,
        east=center.longitude + lon_delta / 2,
    )
    return bbox, center


def from_viewport(viewport: BoundingBox) -> Tuple[BoundingBox, GeoPoint]:
    # plain average is good enough at viewport scale
    center = GeoPoint(
        latitude=(viewport.south + viewport.north) / 2,
        longitude=(viewport.west + viewport.east) / 2,
    )
    return viewport, center
