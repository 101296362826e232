"""
Tracking session controller.

Drives fixes from a position source through the filter, the projection and
the path store, then redraws the canvas. Owns the session state machine:

    IDLE --start()--> SEARCHING --first fix--> LOCKED
    SEARCHING/LOCKED --stop()--> IDLE
    SEARCHING/LOCKED --permission denied / unavailable--> ERROR
    SEARCHING/LOCKED --timeout--> SEARCHING (resubscribe after a delay,
                                  ERROR once max_retries is exceeded)

Every failure is reported through status(); none escapes to the caller.

Events are processed one at a time. Sources and the retry timer may call in
from their own threads, so each event turn runs under one re-entrant lock.
"""

import logging
import threading
import time
from typing import Any, Callable, List, Optional

from pydantic import BaseModel

from constants import MPS_TO_KMH
from geo import project
from grid_scaler import GridScaler
from renderer import DrawCommand, Renderer
from tracking.data_models import GeoFix, TrackerConfig, TrackerState, ViewConfig
from tracking.errors import (
    PositionError, SurfaceNotReady, TrackerError, WakeLockUnsupported,
)
from tracking.fix_filter import FixFilter
from tracking.path_store import PathStore
from tracking.position_source import PositionSource, SubscribeOptions
from tracking.wake_lock import UnsupportedWakeLock, WakeLock

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


def _now_ms() -> int:
    return int(time.time() * 1000)


def timer_scheduler(delay_s: float, callback: Callable[[], None]) -> threading.Timer:
    """Run callback once after delay_s on a daemon timer thread."""
    timer = threading.Timer(delay_s, callback)
    timer.daemon = True
    timer.start()
    return timer


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as MM:SS (minutes keep counting past 59)."""
    total = int(max(0, seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


class TrackerStatus(BaseModel):
    """Read-only snapshot of a tracker for hosts and UIs."""
    state: TrackerState
    error: Optional[TrackerError] = None
    message: str = ""
    point_count: int = 0
    total_distance_m: float = 0.0
    elapsed_seconds: float = 0.0
    x_m: Optional[float] = None
    y_m: Optional[float] = None
    accuracy_m: Optional[float] = None
    speed_kmh: Optional[float] = None
    retry_count: int = 0
    wake_lock_active: bool = False
    wake_lock_error: Optional[TrackerError] = None

    @property
    def elapsed_text(self) -> str:
        return format_elapsed(self.elapsed_seconds)


class TrackingController:
    """
    Owns one tracking session and its recorded path.

    Args:
        source: PositionSource delivering fixes
        config: TrackerConfig (defaults if None)
        surface: Optional Surface executing draw commands
        renderer: Renderer (built from config if None)
        wake_lock: WakeLock held while tracking (unsupported if None)
        scheduler: Callable(delay_s, callback) for delayed retries
        clock: Callable returning the current epoch time in ms
        on_render: Optional callback receiving each frame's draw commands

    Usage:
        source = ReplayPositionSource(fixes)
        tracker = TrackingController(source, surface=ImageSurface(600, 600))
        tracker.start()
        source.play()
        tracker.stop()
        print(tracker.status())
    """

    def __init__(self, source: PositionSource, config: Optional[TrackerConfig] = None,
                 surface=None, renderer: Optional[Renderer] = None,
                 wake_lock: Optional[WakeLock] = None, scheduler: Optional[Scheduler] = None,
                 clock: Callable[[], int] = _now_ms,
                 on_render: Optional[Callable[[List[DrawCommand]], None]] = None):
        self.config = config or TrackerConfig()
        self.source = source
        self.surface = surface
        self.renderer = renderer or Renderer(GridScaler.from_config(self.config))
        self.wake_lock = wake_lock or UnsupportedWakeLock()
        self.store = PathStore()
        self.fix_filter = FixFilter.from_config(self.config)
        self.on_render = on_render
        self.last_commands: List[DrawCommand] = []

        self._scheduler = scheduler or timer_scheduler
        self._clock = clock
        self._lock = threading.RLock()

        self.view = self.config.view_config()
        if surface is not None and surface.ready:
            width, height = surface.size
            self.view = self.view.model_copy(update={"canvas_width": width, "canvas_height": height})

        self._state = TrackerState.IDLE
        self._error: Optional[TrackerError] = None
        self._message = ""
        self._handle = None
        self._generation = 0
        self._retry_count = 0
        self._surface_retry_pending = False
        self._wake_lock_error: Optional[TrackerError] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def error(self) -> Optional[TrackerError]:
        return self._error

    @property
    def is_tracking(self) -> bool:
        return self._state in (TrackerState.SEARCHING, TrackerState.LOCKED)

    def start(self) -> None:
        """Begin tracking. No-op while already searching or locked.

        Starting from ERROR is the manual restart after a terminal failure.
        """
        with self._lock:
            if self.is_tracking:
                logger.debug("Tracking already active")
                return

            self._retry_count = 0
            self._error = None
            self._message = ""
            self._subscribe()
            self._acquire_wake_lock()
            logger.info("Tracking started, searching for position")

    def stop(self) -> None:
        """Stop tracking and release the source. The recorded path is kept."""
        with self._lock:
            if self._state == TrackerState.IDLE:
                logger.debug("Tracking not active")
                return

            self._release_subscription()
            self._release_wake_lock()
            self._state = TrackerState.IDLE
            logger.info(f"Tracking stopped ({self.store.point_count} points, "
                        f"{self.store.total_distance_m:.2f}m)")

    def clear(self) -> bool:
        """Discard the recorded path.

        Returns:
            False (and nothing changes) unless the tracker is IDLE
        """
        with self._lock:
            if self._state != TrackerState.IDLE:
                logger.warning(f"Cannot clear path while {self._state.value}; stop tracking first")
                return False

            self.store.clear()
            logger.info("Path cleared")
            self.redraw()
            return True

    def on_foreground(self) -> None:
        """Host came back to the foreground; re-acquire keep-awake if locked."""
        with self._lock:
            if self._state == TrackerState.LOCKED and not self.wake_lock.held:
                self._acquire_wake_lock()

    # -------------------------------------------------------------------------
    # Source events
    # -------------------------------------------------------------------------

    def handle_fix(self, fix: GeoFix) -> bool:
        """Process a fix from the current subscription.

        Returns:
            True if the fix was recorded
        """
        return self._on_fix(fix, self._generation)

    def handle_error(self, error: PositionError) -> None:
        """Process an error from the current subscription."""
        self._on_error(error, self._generation)

    def _subscribe(self) -> None:
        self._generation += 1
        generation = self._generation
        self._state = TrackerState.SEARCHING
        self._handle = self.source.subscribe(
            lambda fix: self._on_fix(fix, generation),
            lambda error: self._on_error(error, generation),
            SubscribeOptions.from_config(self.config),
        )

    def _release_subscription(self) -> None:
        # Invalidates callbacks and pending retries of the old subscription
        self._generation += 1
        if self._handle is not None:
            self.source.unsubscribe(self._handle)
            self._handle = None

    def _on_fix(self, fix: GeoFix, generation: int) -> bool:
        with self._lock:
            if generation != self._generation or not self.is_tracking:
                logger.debug("Ignoring fix from inactive subscription")
                return False

            last_update = self.store.last_update_time_ms
            if last_update is not None and fix.timestamp_ms <= last_update:
                logger.debug(f"Ignoring out-of-order fix at {fix.timestamp_ms}ms")
                return False

            if self._state == TrackerState.SEARCHING:
                self._state = TrackerState.LOCKED
                self._retry_count = 0
                if self._error == TrackerError.TIMEOUT:
                    self._error = None
                    self._message = ""
                logger.info(f"GPS locked at {fix.latitude:.6f}, {fix.longitude:.6f}")

            decision = self.fix_filter.evaluate(self.store.last_point, last_update, fix)
            if not decision.accepted:
                return False

            x, y = project(self.store.origin, fix, self.config.earth_radius_m)
            self.store.append(fix, x, y, decision.distance_m)
            self.redraw()
            return True

    def _on_error(self, error: PositionError, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self.is_tracking:
                logger.debug(f"Ignoring error from inactive subscription: {error}")
                return

            self._error = error.kind
            self._message = str(error)

            if error.kind != TrackerError.TIMEOUT:
                logger.error(f"Position source failed: {error}")
                self._fail()
                return

            self._retry_count += 1
            max_retries = self.config.max_retries
            if max_retries is not None and self._retry_count > max_retries:
                logger.error(f"GPS timeout, giving up after {max_retries} retries")
                self._fail()
                return

            delay_ms = self.config.retry_delay_ms
            logger.warning(f"GPS timeout, retrying in {delay_ms}ms (attempt {self._retry_count})")
            self._release_subscription()
            self._state = TrackerState.SEARCHING
            retry_generation = self._generation
            self._scheduler(delay_ms / 1000.0, lambda: self._retry(retry_generation))

    def _retry(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state != TrackerState.SEARCHING:
                logger.debug("Retry cancelled")
                return
            logger.debug(f"Resubscribing (attempt {self._retry_count})")
            self._subscribe()

    def _fail(self) -> None:
        self._release_subscription()
        self._release_wake_lock()
        self._state = TrackerState.ERROR

    # -------------------------------------------------------------------------
    # Wake lock
    # -------------------------------------------------------------------------

    def _acquire_wake_lock(self) -> None:
        try:
            self.wake_lock.acquire()
            self._wake_lock_error = None
            logger.debug("Wake lock activated")
        except WakeLockUnsupported as e:
            self._wake_lock_error = e.kind
            logger.debug(f"Wake lock unsupported, continuing without it: {e}")

    def _release_wake_lock(self) -> None:
        if self.wake_lock.held:
            self.wake_lock.release()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def resize(self, width: int, height: int) -> bool:
        """Apply new canvas dimensions and redraw. The path is untouched."""
        with self._lock:
            self.view = self.view.model_copy(update={
                "canvas_width": max(0, int(width)),
                "canvas_height": max(0, int(height)),
            })
            if self.surface is not None:
                self.surface.resize(width, height)
            return self.redraw()

    def set_view(self, view: ViewConfig) -> bool:
        """Replace the whole view (zoom, margin, size) and redraw."""
        with self._lock:
            self.view = view
            if self.surface is not None:
                self.surface.resize(view.canvas_width, view.canvas_height)
            return self.redraw()

    def redraw(self) -> bool:
        """Render the current path and push it to the surface.

        Returns:
            False if the surface was not ready (a redraw is scheduled)
        """
        with self._lock:
            commands = self.renderer.render(self.store, self.view)
            self.last_commands = commands

            if self.surface is not None:
                try:
                    self.surface.draw(commands)
                except SurfaceNotReady as e:
                    # A position error stays the reported classification
                    if self._error in (None, TrackerError.SURFACE_NOT_READY):
                        self._error = e.kind
                        self._message = str(e)
                    self._schedule_surface_retry()
                    return False

            if self._error == TrackerError.SURFACE_NOT_READY:
                self._error = None
                self._message = ""
            if self.on_render is not None:
                self.on_render(commands)
            return True

    def _schedule_surface_retry(self) -> None:
        if self._surface_retry_pending:
            return
        self._surface_retry_pending = True
        delay_ms = self.config.surface_retry_delay_ms
        logger.debug(f"Surface not ready, redrawing in {delay_ms}ms")
        self._scheduler(delay_ms / 1000.0, self._retry_redraw)

    def _retry_redraw(self) -> None:
        with self._lock:
            self._surface_retry_pending = False
            self.redraw()

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status(self) -> TrackerStatus:
        with self._lock:
            last = self.store.last_point
            return TrackerStatus(
                state=self._state,
                error=self._error,
                message=self._message,
                point_count=self.store.point_count,
                total_distance_m=self.store.total_distance_m,
                elapsed_seconds=self.store.elapsed_ms(self._clock()) / 1000.0,
                x_m=last.x if last else None,
                y_m=last.y if last else None,
                accuracy_m=last.accuracy_m if last else None,
                speed_kmh=last.speed_mps * MPS_TO_KMH if last else None,
                retry_count=self._retry_count,
                wake_lock_active=self.wake_lock.held,
                wake_lock_error=self._wake_lock_error,
            )
