"""
Error taxonomy for GPS path tracking.

Every failure the tracker can meet is classified into a TrackerError value.
The controller catches these exceptions and reports the classification
through its status instead of letting them escape.
"""

from enum import Enum


class TrackerError(str, Enum):
    """Classified tracking failure."""
    PERMISSION_DENIED = "permission_denied"        # Terminal until access is re-granted
    POSITION_UNAVAILABLE = "position_unavailable"  # Terminal until manual restart
    TIMEOUT = "timeout"                            # Recoverable, retried after a delay
    SURFACE_NOT_READY = "surface_not_ready"        # Drawing target not available yet
    WAKE_LOCK_UNSUPPORTED = "wake_lock_unsupported"  # Non-fatal, tracking continues

    @property
    def recoverable(self) -> bool:
        return self is not TrackerError.PERMISSION_DENIED and self is not TrackerError.POSITION_UNAVAILABLE


class TrackingError(Exception):
    """Base class for tracker exceptions."""
    kind: TrackerError


class PositionError(TrackingError):
    """Failure reported by a position source."""

    def __init__(self, kind: TrackerError, message: str = ""):
        if kind not in (TrackerError.PERMISSION_DENIED, TrackerError.POSITION_UNAVAILABLE, TrackerError.TIMEOUT):
            raise ValueError(f"Not a position error: {kind}")
        super().__init__(message or kind.value)
        self.kind = kind


class SurfaceNotReady(TrackingError):
    """Drawing surface has no usable size yet."""
    kind = TrackerError.SURFACE_NOT_READY


class WakeLockUnsupported(TrackingError):
    """Keep-awake is not available on this host."""
    kind = TrackerError.WAKE_LOCK_UNSUPPORTED
