"""
Tests for the fix significance filter.

Tests the combined minimum-distance / minimum-time rule and the odometer
contribution of accepted fixes.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tracking.data_models import PathPoint, TrackerConfig
from tracking.fix_filter import FixFilter, FilterDecision

from conftest import make_fix, METERS_PER_DEG_LAT


def _north(meters: float) -> float:
    return 37.7749 + meters / METERS_PER_DEG_LAT


@pytest.fixture
def last_point():
    """Last recorded point at t=10s."""
    return PathPoint.from_fix(make_fix(t_ms=10_000), 0.0, 0.0)


class TestFixFilter:
    """Tests for FixFilter.evaluate."""

    def test_first_fix_always_accepted(self):
        """With no previous point the fix is accepted and contributes nothing."""
        decision = FixFilter().evaluate(None, None, make_fix())
        assert decision == FilterDecision(accepted=True)

    def test_small_and_soon_rejected(self, last_point):
        """0.3 m after 500 ms is jitter and is rejected."""
        fix = make_fix(lat=_north(0.3), t_ms=10_500)
        decision = FixFilter().evaluate(last_point, 10_000, fix)

        assert not decision.accepted
        assert decision.distance_m == 0.0
        assert decision.raw_distance_m == pytest.approx(0.3, abs=1e-3)
        assert decision.elapsed_ms == 500

    def test_small_but_late_accepted_without_distance(self, last_point):
        """0.3 m after 1500 ms is recorded but adds nothing to the odometer."""
        fix = make_fix(lat=_north(0.3), t_ms=11_500)
        decision = FixFilter().evaluate(last_point, 10_000, fix)

        assert decision.accepted
        assert decision.distance_m == 0.0
        assert decision.raw_distance_m == pytest.approx(0.3, abs=1e-3)

    def test_far_and_soon_accepted_with_distance(self, last_point):
        """5 m after 200 ms is recorded and adds 5 m."""
        fix = make_fix(lat=_north(5.0), t_ms=10_200)
        decision = FixFilter().evaluate(last_point, 10_000, fix)

        assert decision.accepted
        assert decision.distance_m == pytest.approx(5.0, abs=1e-3)

    def test_either_threshold_accepts(self, last_point):
        """Reaching the time threshold or the distance threshold is enough to accept."""
        f = FixFilter(min_distance_m=1.0, min_time_between_ms=1000)
        assert f.evaluate(last_point, 10_000, make_fix(lat=_north(0.1), t_ms=11_000)).accepted
        decision = f.evaluate(last_point, 10_000, make_fix(lat=_north(1.001), t_ms=10_001))
        assert decision.accepted
        assert decision.distance_m > 0

    def test_elapsed_uses_last_update_time(self, last_point):
        """Elapsed time is measured from the last update, not the point time."""
        fix = make_fix(lat=_north(0.3), t_ms=12_000)
        decision = FixFilter().evaluate(last_point, 11_500, fix)
        assert not decision.accepted
        assert decision.elapsed_ms == 500

    def test_elapsed_falls_back_to_point_time(self, last_point):
        """Without a recorded update time the point timestamp is used."""
        decision = FixFilter().evaluate(last_point, None, make_fix(lat=_north(0.3), t_ms=10_400))
        assert decision.elapsed_ms == 400

    def test_from_config(self):
        """Thresholds are taken from TrackerConfig."""
        config = TrackerConfig(min_distance_m=3.0, min_time_between_ms=250, earth_radius_m=6_000_000)
        f = FixFilter.from_config(config)
        assert f.min_distance_m == 3.0
        assert f.min_time_between_ms == 250
        assert f.earth_radius_m == 6_000_000

    def test_zero_thresholds_accept_everything(self, last_point):
        """With both thresholds at zero every fix counts in full."""
        f = FixFilter(min_distance_m=0.0, min_time_between_ms=0)
        decision = f.evaluate(last_point, 10_000, make_fix(lat=_north(0.3), t_ms=10_000))
        assert decision.accepted
        assert decision.distance_m == pytest.approx(0.3, abs=1e-3)
