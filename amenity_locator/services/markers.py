from __future__ import annotations

from typing import Iterable, List, Optional

from amenity_locator.models import GeoPoint, Marker, RankedFeature


def distance_label(distance_m: float) -> str:
    return f"{distance_m / 1000:.3f} Km"


def map_search_url(base_url: str, lat: float, lon: float) -> str:
    return f"{base_url.rstrip('/')}/{lat},{lon}"


def to_marker(feature: RankedFeature, map_search_base_url: str) -> Marker:
    return Marker(
        latitude=feature.latitude,
        longitude=feature.longitude,
        tags=dict(feature.tags),
        distance_m=feature.distance_to_center_m,
        distance_km=round(feature.distance_to_center_m / 1000, 3),
        label=distance_label(feature.distance_to_center_m),
        map_url=map_search_url(map_search_base_url, feature.latitude, feature.longitude),
    )


def to_markers(features: Iterable[RankedFeature], map_search_base_url: str) -> List[Marker]:
    return [to_marker(f, map_search_base_url) for f in features]


class ResultSet:
    """Markers currently shown on the map, plus the point they were ranked from.

    Owned by the UI layer; every finished search replaces it as a whole.
    """

    def __init__(self) -> None:
        self.origin: Optional[GeoPoint] = None
        self.markers: List[Marker] = []

    def replace(self, origin: GeoPoint, markers: Iterable[Marker]) -> None:
        self.origin = origin
        self.markers = list(markers)

    def clear(self) -> None:
        self.origin = None
        self.markers = []

    def __len__(self) -> int:
        return len(self.markers)
