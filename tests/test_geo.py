"""
Tests for geographic math.

Tests the equirectangular projection and haversine distance.
"""

import math
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from constants import EARTH_RADIUS_M
from geo import project, haversine_m, distance
from tracking.data_models import Origin

from conftest import make_fix, METERS_PER_DEG_LAT


class TestProject:
    """Tests for projecting fixes into the local meter frame."""

    def test_no_origin_returns_zero(self):
        """Without an origin every fix projects to (0, 0)."""
        assert project(None, make_fix(lat=10.0, lon=20.0)) == (0.0, 0.0)

    @pytest.mark.parametrize("lat,lon", [(0.0, 0.0), (37.7749, -122.4194), (-33.87, 151.21), (89.0, 179.0)])
    def test_fix_at_origin_is_zero(self, lat, lon):
        """The origin itself always maps to (0, 0)."""
        origin = Origin(latitude=lat, longitude=lon)
        x, y = project(origin, make_fix(lat=lat, lon=lon))
        assert x == pytest.approx(0.0)
        assert y == pytest.approx(0.0)

    def test_north_is_positive_y(self):
        """Moving north increases y only."""
        origin = Origin(latitude=0.0, longitude=0.0)
        x, y = project(origin, make_fix(lat=0.001, lon=0.0))
        assert x == pytest.approx(0.0)
        assert y == pytest.approx(math.radians(0.001) * EARTH_RADIUS_M)
        assert y == pytest.approx(111.19, abs=0.01)

    def test_east_is_positive_x(self):
        """Moving east increases x only."""
        origin = Origin(latitude=0.0, longitude=0.0)
        x, y = project(origin, make_fix(lat=0.0, lon=0.001))
        assert x == pytest.approx(111.19, abs=0.01)
        assert y == pytest.approx(0.0)

    def test_longitude_shrinks_with_latitude(self):
        """East-west meters per degree scale with cos(origin latitude)."""
        origin = Origin(latitude=60.0, longitude=0.0)
        x, _ = project(origin, make_fix(lat=60.0, lon=0.001))
        assert x == pytest.approx(111.19 * 0.5, abs=0.01)

    def test_south_west_is_negative(self):
        """Offsets south and west of the origin are negative."""
        origin = Origin(latitude=37.0, longitude=-122.0)
        x, y = project(origin, make_fix(lat=36.999, lon=-122.001))
        assert x < 0
        assert y < 0

    def test_custom_radius(self):
        """Projection scales linearly with the sphere radius."""
        origin = Origin(latitude=0.0, longitude=0.0)
        _, y1 = project(origin, make_fix(lat=0.01, lon=0.0))
        _, y2 = project(origin, make_fix(lat=0.01, lon=0.0), earth_radius_m=EARTH_RADIUS_M * 2)
        assert y2 == pytest.approx(2 * y1)


class TestDistance:
    """Tests for haversine distance."""

    def test_same_point_is_zero(self):
        """distance(A, A) == 0."""
        a = make_fix(lat=37.7749, lon=-122.4194)
        assert distance(a, a) == 0.0

    def test_symmetric(self):
        """distance(A, B) == distance(B, A)."""
        a = make_fix(lat=37.7749, lon=-122.4194)
        b = make_fix(lat=37.7849, lon=-122.4094)
        assert distance(a, b) == pytest.approx(distance(b, a))

    def test_one_millidegree_latitude(self):
        """0.001 degrees of latitude is about 111 m."""
        assert haversine_m(0.0, 0.0, 0.001, 0.0) == pytest.approx(0.001 * METERS_PER_DEG_LAT, rel=1e-6)

    def test_matches_projection_for_short_hops(self):
        """Over a few meters the projection and haversine agree."""
        origin = Origin(latitude=37.7749, longitude=-122.4194)
        fix = make_fix(lat=37.77495, lon=-122.41935)
        x, y = project(origin, fix)
        assert math.hypot(x, y) == pytest.approx(distance(origin, fix), rel=1e-4)

    def test_antipodal_points(self):
        """Antipodal points are half the circumference apart."""
        d = haversine_m(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M)

    def test_never_negative(self):
        """Distance is never negative."""
        assert haversine_m(10.0, 10.0, -10.0, -10.0) > 0
