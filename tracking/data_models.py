"""
Data models for GPS path tracking.

Pydantic models for incoming fixes, the session origin, recorded path points,
the path state owned by a tracker, the canvas view, and tracker configuration.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from constants import (
    EARTH_RADIUS_M,
    MIN_DISTANCE_M, MIN_TIME_BETWEEN_MS,
    GPS_TIMEOUT_MS, GPS_MAX_FIX_AGE_MS, RETRY_DELAY_MS, SURFACE_RETRY_DELAY_MS,
    GRID_CANDIDATES_M, MIN_GRID_DIVISIONS,
    PIXELS_PER_METER, CANVAS_MARGIN, CANVAS_SIZE,
    MPS_TO_KMH,
)


class GeoFix(BaseModel):
    """
    Single position sample reported by a position source.

    Immutable once received.
    """
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, description="WGS84 latitude in degrees")
    longitude: float = Field(ge=-180.0, le=180.0, description="WGS84 longitude in degrees")
    accuracy_m: float = Field(default=0.0, ge=0.0, description="Horizontal accuracy radius in meters")
    speed_mps: float = Field(default=0.0, description="Ground speed in meters per second")
    timestamp_ms: int = Field(description="Unix epoch milliseconds")

    @field_validator("speed_mps", mode="before")
    @classmethod
    def _default_missing_speed(cls, value):
        # Sources report null speed when stationary or unknown
        return 0.0 if value is None else value

    @property
    def speed_kmh(self) -> float:
        """Convert speed to kilometers per hour."""
        return self.speed_mps * MPS_TO_KMH


class Origin(BaseModel):
    """Reference coordinate of the local planar frame for one session."""
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class PathPoint(BaseModel):
    """
    Recorded path point.

    x/y are meters in the session's local frame, computed once at insertion
    and never recomputed.
    """
    model_config = ConfigDict(frozen=True)

    x: float = Field(description="East-west offset from origin in meters")
    y: float = Field(description="North-south offset from origin in meters")
    latitude: float
    longitude: float
    timestamp_ms: int
    accuracy_m: float = 0.0
    speed_mps: float = 0.0
    odometer_m: float = Field(default=0.0, description="Session odometer at this point in meters")

    @property
    def timestamp(self) -> datetime:
        """Timestamp as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp_ms / 1000.0, tz=timezone.utc)

    @classmethod
    def from_fix(cls, fix: GeoFix, x: float, y: float, odometer_m: float = 0.0) -> "PathPoint":
        """
        Create a PathPoint from the fix it was projected from.

        Args:
            fix: Accepted GeoFix
            x: Projected east offset in meters
            y: Projected north offset in meters
            odometer_m: Session odometer including this point

        Returns:
            PathPoint carrying the fix's coordinates, time, accuracy and speed
        """
        return cls(
            x=x,
            y=y,
            latitude=fix.latitude,
            longitude=fix.longitude,
            timestamp_ms=fix.timestamp_ms,
            accuracy_m=fix.accuracy_m,
            speed_mps=fix.speed_mps,
            odometer_m=odometer_m,
        )


class PathState(BaseModel):
    """Everything recorded during a tracking session."""
    origin: Optional[Origin] = None
    points: List[PathPoint] = Field(default_factory=list)
    total_distance_m: float = 0.0
    start_time_ms: Optional[int] = None
    last_update_time_ms: Optional[int] = None

    @property
    def last_point(self) -> Optional[PathPoint]:
        return self.points[-1] if self.points else None


class ViewConfig(BaseModel):
    """
    Canvas view supplied by the rendering host.

    Mutable and independent of PathState; resizing replaces the canvas
    dimensions without touching the recorded path.
    """
    pixels_per_meter: float = Field(default=PIXELS_PER_METER, gt=0)
    margin_px: int = Field(default=CANVAS_MARGIN, ge=0)
    canvas_width: int = Field(default=CANVAS_SIZE, ge=0)
    canvas_height: int = Field(default=CANVAS_SIZE, ge=0)

    def to_canvas(self, x: float, y: float):
        """Map local meters to canvas pixels (north up)."""
        canvas_x = self.margin_px + x * self.pixels_per_meter
        canvas_y = self.canvas_height - self.margin_px - y * self.pixels_per_meter
        return canvas_x, canvas_y


class TrackerState(str, Enum):
    """Tracking controller lifecycle state."""
    IDLE = "idle"
    SEARCHING = "searching"
    LOCKED = "locked"
    ERROR = "error"


class TrackerConfig(BaseModel):
    """
    Tracker configuration.

    Thresholds, grid candidates and projection constants live here instead of
    module-level constants so each tracker instance can be tuned on its own.
    """
    min_distance_m: float = Field(default=MIN_DISTANCE_M, ge=0.0)
    min_time_between_ms: int = Field(default=MIN_TIME_BETWEEN_MS, ge=0)
    earth_radius_m: float = Field(default=EARTH_RADIUS_M, gt=0)

    grid_candidates_m: List[float] = Field(default_factory=lambda: list(GRID_CANDIDATES_M))
    min_grid_divisions: float = Field(default=MIN_GRID_DIVISIONS, gt=0)

    pixels_per_meter: float = Field(default=PIXELS_PER_METER, gt=0)
    margin_px: int = Field(default=CANVAS_MARGIN, ge=0)
    canvas_size_px: int = Field(default=CANVAS_SIZE, ge=0)

    high_accuracy: bool = True
    gps_timeout_ms: int = Field(default=GPS_TIMEOUT_MS, gt=0)
    max_fix_age_ms: int = Field(default=GPS_MAX_FIX_AGE_MS, ge=0)
    retry_delay_ms: int = Field(default=RETRY_DELAY_MS, ge=0)
    max_retries: Optional[int] = Field(default=None, ge=0, description="None retries timeouts forever")
    surface_retry_delay_ms: int = Field(default=SURFACE_RETRY_DELAY_MS, ge=0)

    @field_validator("grid_candidates_m")
    @classmethod
    def _check_candidates(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("grid_candidates_m must not be empty")
        if any(v <= 0 for v in value):
            raise ValueError("grid_candidates_m must be positive")
        if list(value) != sorted(value):
            raise ValueError("grid_candidates_m must be ascending")
        return value

    def view_config(self) -> ViewConfig:
        """Initial square ViewConfig for this configuration."""
        return ViewConfig(
            pixels_per_meter=self.pixels_per_meter,
            margin_px=self.margin_px,
            canvas_width=self.canvas_size_px,
            canvas_height=self.canvas_size_px,
        )
