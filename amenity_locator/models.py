from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AmenityTag(str, Enum):
    toilet = "toilet"
    drinking_water = "drinking_water"

    @property
    def overpass_value(self) -> str:
        """Value of the `amenity` key in OSM data."""
        return _OVERPASS_VALUES[self]


_OVERPASS_VALUES: dict[AmenityTag, str] = {
    AmenityTag.toilet: "toilets",
    AmenityTag.drinking_water: "drinking_water",
}


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    # not wrapped to +/-180: panned map viewports report e.g. 185 for -175
    longitude: float = Field(..., allow_inf_nan=False)


class BoundingBox(BaseModel):
    """Axis-aligned lat/lon rectangle. Antimeridian wraparound is not supported."""

    model_config = ConfigDict(frozen=True)

    south: float
    west: float
    north: float
    east: float

    @model_validator(mode="after")
    def _check_order(self) -> "BoundingBox":
        if self.south > self.north:
            raise ValueError("south must be <= north")
        if self.west > self.east:
            raise ValueError("west must be <= east")
        return self


class AmenityQuerySpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: AmenityTag
    search_radius_km: float = Field(..., gt=0)


class FeatureBounds(BaseModel):
    minlat: float
    maxlat: float
    minlon: float
    maxlon: float


class PointFeature(BaseModel):
    kind: Literal["point"] = "point"
    lat: float
    lon: float
    tags: Dict[str, str] = Field(default_factory=dict)


class AreaFeature(BaseModel):
    kind: Literal["area"] = "area"
    bounds: FeatureBounds
    tags: Dict[str, str] = Field(default_factory=dict)


RawFeature = Annotated[Union[PointFeature, AreaFeature], Field(discriminator="kind")]


class RankedFeature(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    tags: Dict[str, str] = Field(default_factory=dict)
    distance_to_center_m: float = Field(..., ge=0)


class Marker(BaseModel):
    latitude: float
    longitude: float
    tags: Dict[str, str] = Field(default_factory=dict)
    distance_m: float
    distance_km: float
    label: str
    map_url: str


class SearchResult(BaseModel):
    amenity: AmenityTag
    center: GeoPoint
    bbox: BoundingBox
    markers: List[Marker]
