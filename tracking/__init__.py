"""
Real-time GPS path tracking.

Filters incoming fixes, projects them into a local meter frame around the
session origin, accumulates the path and odometer, and drives rendering.
"""

from tracking.data_models import (
    GeoFix,
    Origin,
    PathPoint,
    PathState,
    TrackerConfig,
    TrackerState,
    ViewConfig,
)
from tracking.errors import (
    PositionError,
    SurfaceNotReady,
    TrackerError,
    TrackingError,
    WakeLockUnsupported,
)
from tracking.fix_filter import FilterDecision, FixFilter
from tracking.path_store import PathStore
from tracking.position_source import PositionSource, ReplayPositionSource, SubscribeOptions
from tracking.controller import TrackerStatus, TrackingController

__all__ = [
    "GeoFix",
    "Origin",
    "PathPoint",
    "PathState",
    "TrackerConfig",
    "TrackerState",
    "ViewConfig",
    "PositionError",
    "SurfaceNotReady",
    "TrackerError",
    "TrackingError",
    "WakeLockUnsupported",
    "FilterDecision",
    "FixFilter",
    "PathStore",
    "PositionSource",
    "ReplayPositionSource",
    "SubscribeOptions",
    "TrackerStatus",
    "TrackingController",
]
