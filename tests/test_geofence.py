"""Tests for the geofence geometry helpers."""

import pytest

from guardwatch.shared.geofence import (
    haversine_distance,
    is_point_in_zone,
    point_in_polygon,
    zones_containing,
)
from guardwatch.shared.schemas import GeofenceZone, GeoPoint

UNIT_SQUARE = [
    {"latitude": 0.0, "longitude": 0.0},
    {"latitude": 0.0, "longitude": 1.0},
    {"latitude": 1.0, "longitude": 1.0},
    {"latitude": 1.0, "longitude": 0.0},
]


def point(lat, lon):
    return {"latitude": lat, "longitude": lon}


class TestHaversine:
    def test_zero_distance(self):
        assert haversine_distance(40.7128, -74.0060, 40.7128, -74.0060) == 0

    def test_one_degree_of_longitude_at_equator(self):
        """One degree on a 6371 km sphere is about 111.19 km."""
        assert haversine_distance(0, 0, 0, 1) == pytest.approx(111_195, rel=1e-3)

    def test_symmetric(self):
        a = haversine_distance(40.7128, -74.0060, 51.5074, -0.1278)
        b = haversine_distance(51.5074, -0.1278, 40.7128, -74.0060)
        assert a == pytest.approx(b)


class TestPointInPolygon:
    def test_center_inside(self):
        assert point_in_polygon(point(0.5, 0.5), UNIT_SQUARE) is True

    def test_far_point_outside(self):
        assert point_in_polygon(point(2, 2), UNIT_SQUARE) is False

    def test_vertices_are_deterministic(self):
        """Points on vertices resolve the same way on every call."""
        first = [point_in_polygon(point(*v), UNIT_SQUARE) for v in [(0, 0), (1, 1)]]
        second = [point_in_polygon(point(*v), UNIT_SQUARE) for v in [(0, 0), (1, 1)]]
        assert first == second == [True, False]

    def test_accepts_models(self):
        vertices = [GeoPoint(**v) for v in UNIT_SQUARE]
        assert point_in_polygon(GeoPoint(latitude=0.25, longitude=0.75), vertices) is True


class TestIsPointInZone:
    def test_circle_contains_center(self):
        zone = {"center": point(0, 0), "radius": 1000, "coordinates": []}
        assert is_point_in_zone(point(0, 0), zone) is True

    def test_circle_excludes_distant_point(self):
        """0.02 degrees of longitude is about 2.2 km, outside a 1 km circle."""
        zone = {"center": point(0, 0), "radius": 1000, "coordinates": []}
        assert is_point_in_zone(point(0, 0.02), zone) is False

    def test_radius_takes_precedence_over_polygon(self):
        zone = {"center": point(10, 10), "radius": 50, "coordinates": UNIT_SQUARE}
        assert is_point_in_zone(point(0.5, 0.5), zone) is False

    def test_polygon_zone(self):
        zone = {"coordinates": UNIT_SQUARE}
        assert is_point_in_zone(point(0.5, 0.5), zone) is True

    def test_degenerate_zone_never_matches(self):
        """Fewer than three vertices and no radius."""
        zone = {"coordinates": UNIT_SQUARE[:2]}
        assert is_point_in_zone(point(0, 0), zone) is False
        assert is_point_in_zone(point(0.5, 0.5), {}) is False


class TestZonesContaining:
    def _zone(self, zone_id, **kwargs):
        return GeofenceZone(id=zone_id, name=zone_id, **kwargs)

    def test_filters_inactive_and_keeps_order(self):
        square = [GeoPoint(**v) for v in UNIT_SQUARE]
        zones = [
            self._zone("a", coordinates=square),
            self._zone("b", coordinates=square, is_active=False),
            self._zone("c", center=GeoPoint(latitude=0.5, longitude=0.5), radius=100),
            self._zone("d", center=GeoPoint(latitude=5, longitude=5), radius=100),
        ]
        matched = zones_containing(point(0.5, 0.5), zones)
        assert [z.id for z in matched] == ["a", "c"]

    def test_include_inactive(self):
        square = [GeoPoint(**v) for v in UNIT_SQUARE]
        zones = [self._zone("b", coordinates=square, is_active=False)]
        assert len(zones_containing(point(0.5, 0.5), zones, active_only=False)) == 1
