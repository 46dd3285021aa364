from __future__ import annotations

import math
import types

import pytest

import amenity_locator.services.bbox as bbox_module
from amenity_locator.models import AmenityTag, BoundingBox, GeoPoint
from amenity_locator.services.bbox import (
    default_radius_km,
    from_center_and_radius,
    from_viewport,
    query_spec,
)


def test_center_and_radius_bilbao(bilbao):
    bbox, center = from_center_and_radius(bilbao, 20)

    assert center is bilbao
    assert bbox.south == pytest.approx(43.174, abs=0.01)
    assert bbox.north == pytest.approx(43.354, abs=0.01)
    assert bbox.west == pytest.approx(-3.044, abs=0.01)
    assert bbox.east == pytest.approx(-2.797, abs=0.01)


def test_center_and_radius_deltas(bilbao):
    bbox, _ = from_center_and_radius(bilbao, 10)

    assert bbox.north - bbox.south == pytest.approx(10 / 111.111)
    expected_lon = 10 / (111.111 * math.cos(math.radians(bilbao.latitude)))
    assert bbox.east - bbox.west == pytest.approx(expected_lon)


@pytest.mark.parametrize("lat", [-89.9, -60.0, 0.0, 12.5, 45.0, 89.9])
@pytest.mark.parametrize("lon", [-179.0, 0.0, 33.3])
@pytest.mark.parametrize("radius_km", [0.1, 10, 20, 150])
def test_center_and_radius_contains_center(lat, lon, radius_km):
    center = GeoPoint(latitude=lat, longitude=lon)
    bbox, _ = from_center_and_radius(center, radius_km)

    assert bbox.south <= center.latitude <= bbox.north
    assert bbox.west <= center.longitude <= bbox.east


def test_center_and_radius_at_pole_is_very_wide_but_not_nan():
    bbox, _ = from_center_and_radius(GeoPoint(latitude=90.0, longitude=0.0), 20)

    assert not math.isnan(bbox.west)
    assert not math.isnan(bbox.east)
    assert bbox.east - bbox.west > 1e6


@pytest.mark.parametrize("radius_km", [0, -5])
def test_center_and_radius_rejects_non_positive_radius(bilbao, radius_km):
    with pytest.raises(ValueError):
        from_center_and_radius(bilbao, radius_km)


@pytest.mark.parametrize(
    "viewport",
    [
        BoundingBox(south=43.2, west=-3.0, north=43.3, east=-2.8),
        BoundingBox(south=-10.0, west=100.0, north=-9.5, east=100.1),
        BoundingBox(south=1.0, west=1.0, north=1.0, east=1.0),
    ],
)
def test_viewport_center_is_inside(viewport):
    bbox, center = from_viewport(viewport)

    assert bbox == viewport
    assert viewport.south <= center.latitude <= viewport.north
    assert viewport.west <= center.longitude <= viewport.east


def test_viewport_center_is_midpoint():
    _, center = from_viewport(BoundingBox(south=43.0, west=-3.0, north=43.2, east=-2.8))

    assert center.latitude == pytest.approx(43.1)
    assert center.longitude == pytest.approx(-2.9)


def test_default_radius_per_amenity():
    assert default_radius_km(AmenityTag.toilet) == 20.0
    assert default_radius_km(AmenityTag.drinking_water) == 10.0


def test_default_radius_from_env(monkeypatch):
    monkeypatch.setenv("DRINKING_WATER_RADIUS_KM", "3.5")

    assert default_radius_km(AmenityTag.drinking_water) == 3.5


def test_query_spec_override_wins():
    assert query_spec(AmenityTag.toilet).search_radius_km == 20.0
    assert query_spec(AmenityTag.toilet, 2.0).search_radius_km == 2.0


def test_bbox_rejects_inverted_edges():
    with pytest.raises(ValueError):
        BoundingBox(south=44.0, west=-3.0, north=43.0, east=-2.0)
    with pytest.raises(ValueError):
        BoundingBox(south=43.0, west=-2.0, north=44.0, east=-3.0)


def test_center_and_radius_zero_cosine_gives_infinite_span(monkeypatch, bilbao):
    fake_math = types.SimpleNamespace(cos=lambda _: 0.0, radians=math.radians, inf=math.inf)
    monkeypatch.setattr(bbox_module, "math", fake_math)

    bbox, _ = from_center_and_radius(bilbao, 20)

    assert bbox.west == -math.inf
    assert bbox.east == math.inf
    assert bbox.north - bbox.south == pytest.approx(20 / 111.111)


@pytest.mark.parametrize(
    "viewport, expected_lon",
    [
        (BoundingBox(south=0.0, west=170.0, north=1.0, east=200.0), 185.0),
        (BoundingBox(south=-1.0, west=-200.0, north=1.0, east=-170.0), -185.0),
    ],
)
def test_viewport_across_antimeridian(viewport, expected_lon):
    bbox, center = from_viewport(viewport)

    assert bbox == viewport
    assert center.longitude == pytest.approx(expected_lon)
    assert viewport.west <= center.longitude <= viewport.east


def test_center_and_radius_near_antimeridian_contains_center():
    center = GeoPoint(latitude=10.0, longitude=179.99)

    bbox, _ = from_center_and_radius(center, 20)

    assert bbox.east > 180.0
    assert bbox.west <= center.longitude <= bbox.east
