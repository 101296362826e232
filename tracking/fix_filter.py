"""
Significance filter for incoming fixes.

Decides whether a fix is worth recording and how much it adds to the
odometer. Two thresholds work together:

- A fix is skipped only when it is BOTH too close to the last recorded point
  and too soon after the last update.
- An accepted fix adds to the odometer only when it moved at least the
  minimum distance. Fixes accepted purely because enough time elapsed are
  treated as jitter and contribute nothing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from constants import EARTH_RADIUS_M, MIN_DISTANCE_M, MIN_TIME_BETWEEN_MS
from geo import distance
from tracking.data_models import GeoFix, PathPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterDecision:
    """Outcome of filtering one fix.

    Attributes:
        accepted: Whether the fix should be recorded
        distance_m: Odometer contribution in meters (0 unless moved far enough)
        raw_distance_m: Haversine distance from the last recorded point
        elapsed_ms: Time since the last update, None for the first fix
    """
    accepted: bool
    distance_m: float = 0.0
    raw_distance_m: float = 0.0
    elapsed_ms: Optional[int] = None


class FixFilter:
    """Applies the minimum-distance / minimum-time rules to fixes.

    Args:
        min_distance_m: Displacement below which a fix counts as jitter
        min_time_between_ms: Elapsed time that forces a fix to be recorded
        earth_radius_m: Sphere radius for the haversine distance
    """

    def __init__(self, min_distance_m: float = MIN_DISTANCE_M,
                 min_time_between_ms: int = MIN_TIME_BETWEEN_MS,
                 earth_radius_m: float = EARTH_RADIUS_M):
        self.min_distance_m = min_distance_m
        self.min_time_between_ms = min_time_between_ms
        self.earth_radius_m = earth_radius_m

    @classmethod
    def from_config(cls, config) -> "FixFilter":
        return cls(
            min_distance_m=config.min_distance_m,
            min_time_between_ms=config.min_time_between_ms,
            earth_radius_m=config.earth_radius_m,
        )

    def evaluate(self, last_point: Optional[PathPoint], last_update_time_ms: Optional[int],
                 fix: GeoFix) -> FilterDecision:
        """Decide acceptance and odometer contribution for a fix.

        Args:
            last_point: Most recently recorded point, None before the first fix
            last_update_time_ms: Timestamp of the last recorded update
            fix: Incoming fix

        Returns:
            FilterDecision for the fix
        """
        if last_point is None:
            # First fix establishes the origin
            return FilterDecision(accepted=True)

        d = distance(last_point, fix, self.earth_radius_m)
        elapsed = fix.timestamp_ms - (last_update_time_ms if last_update_time_ms is not None else last_point.timestamp_ms)

        if d < self.min_distance_m and elapsed < self.min_time_between_ms:
            logger.debug(f"Skipping fix: moved {d:.2f}m in {elapsed}ms")
            return FilterDecision(accepted=False, raw_distance_m=d, elapsed_ms=elapsed)

        contribution = d if d >= self.min_distance_m else 0.0
        return FilterDecision(accepted=True, distance_m=contribution, raw_distance_m=d, elapsed_ms=elapsed)
