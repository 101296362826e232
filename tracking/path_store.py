"""
Path history for a tracking session.

PathStore owns the session origin, the ordered recorded points, the odometer
total, and the session timing. Points are append-only and keep the x/y they
were given at insertion.
"""

import logging
from typing import Optional, Tuple

from tracking.data_models import GeoFix, Origin, PathPoint, PathState

logger = logging.getLogger(__name__)


class PathStore:
    """Append-only store of recorded path points.

    The origin is set from the first appended fix and stays fixed until the
    store is cleared.
    """

    def __init__(self):
        self._state = PathState()

    def append(self, fix: GeoFix, x: float, y: float, distance_m: float = 0.0) -> PathPoint:
        """Record an accepted fix.

        Args:
            fix: Accepted fix
            x: Projected east offset in meters
            y: Projected north offset in meters
            distance_m: Odometer contribution granted by the filter

        Returns:
            The recorded PathPoint
        """
        if distance_m < 0:
            raise ValueError(f"Odometer contribution must not be negative: {distance_m}")

        last = self._state.last_point
        if last is not None and fix.timestamp_ms <= last.timestamp_ms:
            raise ValueError(
                f"Fix at {fix.timestamp_ms}ms is not newer than last recorded point at {last.timestamp_ms}ms"
            )

        if self._state.origin is None:
            self._state.origin = Origin(latitude=fix.latitude, longitude=fix.longitude)
            self._state.start_time_ms = fix.timestamp_ms
            logger.info(f"Origin set at {fix.latitude:.6f}, {fix.longitude:.6f}")

        self._state.total_distance_m += distance_m
        point = PathPoint.from_fix(fix, x, y, odometer_m=self._state.total_distance_m)
        self._state.points.append(point)
        self._state.last_update_time_ms = fix.timestamp_ms

        logger.debug(
            f"Point {len(self._state.points)}: X={x:.2f}m, Y={y:.2f}m, "
            f"Speed={fix.speed_kmh:.1f}km/h"
        )
        return point

    def clear(self) -> None:
        """Reset to an empty path with no origin."""
        self._state = PathState()

    @property
    def origin(self) -> Optional[Origin]:
        return self._state.origin

    @property
    def points(self) -> Tuple[PathPoint, ...]:
        return tuple(self._state.points)

    @property
    def point_count(self) -> int:
        return len(self._state.points)

    @property
    def total_distance_m(self) -> float:
        return self._state.total_distance_m

    @property
    def start_time_ms(self) -> Optional[int]:
        return self._state.start_time_ms

    @property
    def last_update_time_ms(self) -> Optional[int]:
        return self._state.last_update_time_ms

    @property
    def last_point(self) -> Optional[PathPoint]:
        return self._state.last_point

    def elapsed_ms(self, now_ms: int) -> int:
        """Milliseconds since the session started, 0 before the first fix."""
        if self._state.start_time_ms is None:
            return 0
        return max(0, now_ms - self._state.start_time_ms)

    def snapshot(self) -> PathState:
        """Deep copy of the current state for rendering or export."""
        return self._state.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._state.points)
