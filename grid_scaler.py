"""
Adaptive grid spacing for the track canvas.

Picks the coarsest "nice" spacing that still leaves a minimum number of grid
divisions visible, so the grid neither clutters a wide view nor collapses to
one or two lines on a zoomed-in one.
"""

from typing import Sequence

from constants import GRID_CANDIDATES_M, MIN_GRID_DIVISIONS


class GridScaler:
    """Chooses grid spacing from an ascending list of candidate spacings.

    Args:
        candidates_m: Ascending candidate spacings in meters
        min_divisions: Divisions that must remain visible across the view
    """

    def __init__(self, candidates_m: Sequence[float] = GRID_CANDIDATES_M,
                 min_divisions: float = MIN_GRID_DIVISIONS):
        if not candidates_m:
            raise ValueError("At least one grid candidate is required")
        self.candidates_m = tuple(candidates_m)
        self.min_divisions = min_divisions

    @classmethod
    def from_config(cls, config) -> "GridScaler":
        return cls(config.grid_candidates_m, config.min_grid_divisions)

    @staticmethod
    def view_range(extent_px: float, view) -> float:
        """Visible range in meters along one canvas extent.

        Args:
            extent_px: Canvas width or height in pixels
            view: ViewConfig supplying margin and pixels-per-meter

        Returns:
            Meters between the two margins (never negative)
        """
        return max(0.0, (extent_px - 2 * view.margin_px) / view.pixels_per_meter)

    def spacing(self, view_range_m: float) -> float:
        """Largest candidate giving at least min_divisions over the range.

        Falls back to the smallest candidate when the view is too small for
        any candidate to qualify.
        """
        for candidate in reversed(self.candidates_m):
            if view_range_m / candidate >= self.min_divisions:
                return candidate
        return self.candidates_m[0]

    def spacing_for_view(self, view) -> float:
        """Spacing for a ViewConfig, sized by its shorter canvas extent."""
        return self.spacing(self.visible_range(view))

    def visible_range(self, view) -> float:
        return self.view_range(min(view.canvas_width, view.canvas_height), view)
