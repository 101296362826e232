"""
Tests for adaptive grid spacing.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grid_scaler import GridScaler
from tracking.data_models import TrackerConfig, ViewConfig


class TestSpacing:
    """Tests for GridScaler.spacing."""

    def test_largest_qualifying_candidate(self):
        """450 m fits 4.5 divisions of 100 m, the largest that qualifies."""
        assert GridScaler().spacing(450) == 100

    @pytest.mark.parametrize("view_range,expected", [
        (1000, 100),
        (399, 50),
        (200, 50),
        (80, 20),
        (40, 10),
        (20, 5),
        (8, 2),
        (4, 1),
    ])
    def test_default_candidates(self, view_range, expected):
        assert GridScaler().spacing(view_range) == expected

    def test_too_small_falls_back_to_smallest(self):
        """Views under four of the smallest candidate still get a grid."""
        assert GridScaler().spacing(3) == 1
        assert GridScaler().spacing(0) == 1

    def test_custom_candidates(self):
        scaler = GridScaler(candidates_m=[25, 250], min_divisions=2)
        assert scaler.spacing(600) == 250
        assert scaler.spacing(400) == 25

    def test_requires_candidates(self):
        with pytest.raises(ValueError):
            GridScaler(candidates_m=[])

    def test_from_config(self):
        scaler = GridScaler.from_config(TrackerConfig(grid_candidates_m=[3, 30], min_grid_divisions=5))
        assert scaler.candidates_m == (3, 30)
        assert scaler.min_divisions == 5


class TestViewRange:
    """Tests for view range computation."""

    def test_view_range(self, view):
        """(600 - 2*40) / 3 px/m."""
        assert GridScaler.view_range(600, view) == pytest.approx(520 / 3)

    def test_never_negative(self, view):
        assert GridScaler.view_range(50, view) == 0.0

    def test_uses_shorter_side(self):
        view = ViewConfig(pixels_per_meter=1.0, margin_px=0, canvas_width=1000, canvas_height=100)
        scaler = GridScaler()
        assert scaler.visible_range(view) == 100
        assert scaler.spacing_for_view(view) == 20

    def test_zoom_changes_spacing(self):
        """Zooming in shrinks the visible range and the spacing with it."""
        wide = ViewConfig(pixels_per_meter=1.0, margin_px=50, canvas_width=500, canvas_height=500)
        close = wide.model_copy(update={"pixels_per_meter": 10.0})
        scaler = GridScaler()
        assert scaler.spacing_for_view(wide) == 100
        assert scaler.spacing_for_view(close) == 10
