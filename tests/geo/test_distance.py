"""Tests for trip distance calculation."""

import math

import pytest

from trip_tracking.geo.distance import (
    EARTH_RADIUS_MILES,
    calculate_distance,
    haversine_distance_miles,
)

NEW_YORK = (40.7128, -74.0060)
EAST_VILLAGE = (40.7306, -73.9352)
LOS_ANGELES = (34.0522, -118.2437)


@pytest.mark.unit
class TestCalculateDistance:
    def test_same_point_returns_exactly_zero(self) -> None:
        lat, lon = NEW_YORK
        assert calculate_distance(lat, lon, lat, lon) == 0.0

    def test_symmetry(self) -> None:
        forward = calculate_distance(*NEW_YORK, *LOS_ANGELES)
        backward = calculate_distance(*LOS_ANGELES, *NEW_YORK)
        assert forward == backward

    def test_rounded_to_two_decimals(self) -> None:
        for a, b in [(NEW_YORK, EAST_VILLAGE), (NEW_YORK, LOS_ANGELES)]:
            distance = calculate_distance(*a, *b)
            assert distance == round(distance, 2)

    def test_manhattan_crosstown_trip(self) -> None:
        """Lower Manhattan to the East Village is just under four miles."""
        distance = calculate_distance(*NEW_YORK, *EAST_VILLAGE)
        assert distance == pytest.approx(3.91, abs=0.02)
        assert distance == round(haversine_distance_miles(*NEW_YORK, *EAST_VILLAGE), 2)

    def test_known_distance_new_york_to_los_angeles(self) -> None:
        distance = calculate_distance(*NEW_YORK, *LOS_ANGELES)
        assert 2440 <= distance <= 2460

    def test_one_degree_of_latitude(self) -> None:
        distance = calculate_distance(0.0, 0.0, 1.0, 0.0)
        assert distance == pytest.approx(EARTH_RADIUS_MILES * math.pi / 180, abs=0.01)

    def test_antipodal_points_do_not_raise(self) -> None:
        distance = calculate_distance(0.0, 0.0, 0.0, 180.0)
        assert distance == pytest.approx(EARTH_RADIUS_MILES * math.pi, abs=0.01)

    def test_across_antimeridian(self) -> None:
        distance = calculate_distance(0.0, 179.5, 0.0, -179.5)
        assert distance == pytest.approx(69.1, abs=0.1)


@pytest.mark.unit
def test_earth_radius_is_in_miles() -> None:
    assert EARTH_RADIUS_MILES == 3959
