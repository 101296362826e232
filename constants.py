"""
Constants for the GPS path tracker.

Centralized defaults for filtering thresholds, projection, grid scaling,
canvas layout, colors, and drawing sizes.
"""

from typing import Tuple
from dataclasses import dataclass


# =============================================================================
# Projection
# =============================================================================

EARTH_RADIUS_M = 6_371_000.0  # Mean Earth radius in meters


# =============================================================================
# Fix Filtering
# =============================================================================

MIN_DISTANCE_M = 1.0          # Minimum displacement counted as travel (meters)
MIN_TIME_BETWEEN_MS = 1000    # Minimum time between recorded fixes (ms)


# =============================================================================
# Position Source
# =============================================================================

GPS_TIMEOUT_MS = 15000        # No fix within this window is a timeout
GPS_MAX_FIX_AGE_MS = 0        # 0 = never accept cached fixes
RETRY_DELAY_MS = 3000         # Delay before resubscribing after a timeout
SURFACE_RETRY_DELAY_MS = 500  # Delay before redrawing on a surface that was not ready
VEHICLE_POLL_INTERVAL_S = 2.0  # Vehicle status endpoint polling period


# =============================================================================
# Grid Scaling
# =============================================================================

GRID_CANDIDATES_M = (1, 2, 5, 10, 20, 50, 100)  # Ascending grid spacings
MIN_GRID_DIVISIONS = 4                          # Divisions that must stay visible


# =============================================================================
# Canvas Layout
# =============================================================================

PIXELS_PER_METER = 3.0
CANVAS_MARGIN = 40            # Margin around the drawing area (pixels)
CANVAS_SIZE = 600             # Default square canvas edge (pixels)


# =============================================================================
# Colors (RGB format for Pillow)
# =============================================================================

@dataclass(frozen=True)
class Colors:
    """Track canvas colors in RGB format."""
    WHITE: Tuple[int, int, int] = (255, 255, 255)
    BLACK: Tuple[int, int, int] = (0, 0, 0)
    GREEN: Tuple[int, int, int] = (0, 255, 0)
    RED: Tuple[int, int, int] = (255, 0, 0)
    YELLOW: Tuple[int, int, int] = (255, 255, 0)

    BACKGROUND: Tuple[int, int, int] = (0, 0, 0)
    GRID_LINE: Tuple[int, int, int] = (17, 17, 17)
    GRID_LABEL: Tuple[int, int, int] = (51, 51, 51)
    AXIS: Tuple[int, int, int] = (0, 255, 0)
    ORIGIN_FILL: Tuple[int, int, int] = (255, 255, 0)
    PATH: Tuple[int, int, int] = (0, 170, 255)       # Travelled polyline
    PATH_POINT: Tuple[int, int, int] = (0, 255, 0)
    CURRENT: Tuple[int, int, int] = (255, 0, 0)      # Current position + heading
    SCALE_TEXT: Tuple[int, int, int] = (170, 170, 170)


COLORS = Colors()


# =============================================================================
# Drawing Sizes (pixels)
# =============================================================================

ORIGIN_RADIUS = 7
PATH_POINT_RADIUS = 3
CURRENT_POINT_RADIUS = 8
OUTLINE_WIDTH = 2
GRID_LINE_WIDTH = 1
AXIS_LINE_WIDTH = 2
PATH_LINE_WIDTH = 3

# Heading arrow triangle in the arrow's local frame (x along the heading)
HEADING_ARROW_SHAPE = ((15.0, 0.0), (10.0, -5.0), (10.0, 5.0))

GRID_LABEL_FONT_SIZE = 9
AXIS_LABEL_FONT_SIZE = 11
ORIGIN_LABEL_FONT_SIZE = 12
POINT_LABEL_FONT_SIZE = 11
SCALE_FONT_SIZE = 10


# =============================================================================
# Conversion Constants
# =============================================================================

MPS_TO_KMH = 3.6  # meters per second to kilometers per hour
