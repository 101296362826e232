"""
Polled vehicle telemetry position source.

Reads the vehicle's position from its HTTP status endpoint
(GET {base_url}/context, payload {"data": {"lat": ..., "long": ...}}) and
delivers it as GeoFix events. The vehicle reports zero or missing
coordinates until its own GPS is ready; those polls deliver nothing, and a
subscriber that sees no valid fix for options.timeout_ms receives a TIMEOUT
error.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional

import requests

from constants import VEHICLE_POLL_INTERVAL_S
from tracking.data_models import GeoFix
from tracking.errors import PositionError, TrackerError
from tracking.position_source import (
    ErrorCallback, FixCallback, PositionSource, SubscribeOptions, SubscriptionRegistry,
)

logger = logging.getLogger(__name__)

# Accuracy reported for vehicle fixes; the endpoint does not publish one
VEHICLE_FIX_ACCURACY_M = 1.0


def _now_ms() -> int:
    return int(time.time() * 1000)


def classify_request_error(exc: requests.RequestException) -> PositionError:
    """Map a requests failure onto the tracker's error taxonomy."""
    if isinstance(exc, requests.Timeout):
        return PositionError(TrackerError.TIMEOUT, f"Vehicle status request timed out: {exc}")
    if isinstance(exc, requests.HTTPError) and exc.response is not None \
            and exc.response.status_code in (401, 403):
        return PositionError(TrackerError.PERMISSION_DENIED,
                             f"Vehicle status endpoint refused access ({exc.response.status_code})")
    return PositionError(TrackerError.POSITION_UNAVAILABLE, f"Vehicle status unavailable: {exc}")


def parse_vehicle_position(payload) -> Optional[tuple]:
    """Extract (lat, lon, speed_mps) from a status payload.

    Returns:
        Tuple of floats, or None when the vehicle has no valid position yet
    """
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None

    try:
        lat = float(data.get("lat") or 0.0)
        lon = float(data.get("long") or 0.0)
        speed = float(data.get("speed") or 0.0)
    except (TypeError, ValueError):
        return None

    # Vehicle reports 0/0 until it has a fix
    if lat == 0.0 or lon == 0.0:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return None
    return lat, lon, speed


class VehicleTelemetrySource(PositionSource):
    """
    Position source polling a vehicle status endpoint.

    Args:
        base_url: Vehicle API root, e.g. "http://192.168.1.10:5000"
        interval_s: Polling period for run()
        session: requests.Session to use (created if None)
        request_timeout_s: Per-request HTTP timeout
        clock: Callable returning the current epoch time in ms

    Usage:
        source = VehicleTelemetrySource("http://vehicle.local:5000")
        tracker = TrackingController(source)
        tracker.start()
        source.run(duration_s=60)
    """

    def __init__(self, base_url: str, interval_s: float = VEHICLE_POLL_INTERVAL_S,
                 session: Optional[requests.Session] = None, request_timeout_s: float = 5.0,
                 clock: Callable[[], int] = _now_ms):
        self.base_url = base_url.rstrip("/")
        self.interval_s = interval_s
        self.request_timeout_s = request_timeout_s
        self._session = session or requests.Session()
        self._clock = clock
        self._registry = SubscriptionRegistry()
        self._last_valid_ms: Dict[int, int] = {}
        self.polls = 0

    @property
    def status_url(self) -> str:
        return f"{self.base_url}/context"

    def subscribe(self, on_fix: FixCallback, on_error: ErrorCallback,
                  options: SubscribeOptions = SubscribeOptions()) -> int:
        handle = self._registry.add(on_fix, on_error, options)
        self._last_valid_ms[handle] = self._clock()
        logger.debug(f"Vehicle subscription {handle} on {self.status_url}")
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._registry.remove(handle)
        self._last_valid_ms.pop(handle, None)

    @property
    def subscriber_count(self) -> int:
        return len(self._registry)

    def poll_once(self) -> Optional[GeoFix]:
        """Fetch the vehicle status once and notify subscribers.

        Returns:
            The delivered fix, or None if nothing valid was delivered
        """
        if not len(self._registry):
            return None

        self.polls += 1
        try:
            response = self._session.get(self.status_url, timeout=self.request_timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            error = classify_request_error(e)
            logger.warning(f"Vehicle poll failed: {error}")
            for handle, (_, on_error, _) in self._registry.items():
                if handle in self._registry:
                    on_error(error)
            return None

        # requests.JSONDecodeError is both a ValueError and a RequestException
        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"Vehicle status is not valid JSON: {e}")
            payload = None

        now = self._clock()
        position = parse_vehicle_position(payload)
        if position is None:
            logger.debug("Vehicle GPS data not ready")
            self._check_timeouts(now)
            return None

        lat, lon, speed = position
        fix = GeoFix(latitude=lat, longitude=lon, accuracy_m=VEHICLE_FIX_ACCURACY_M,
                     speed_mps=speed, timestamp_ms=now)
        for handle, (on_fix, _, _) in self._registry.items():
            if handle in self._registry:
                self._last_valid_ms[handle] = now
                on_fix(fix)
        return fix

    def _check_timeouts(self, now: int) -> None:
        for handle, (_, on_error, options) in self._registry.items():
            started = self._last_valid_ms.get(handle, now)
            if handle in self._registry and now - started >= options.timeout_ms:
                # Restart the window so one stall reports once per timeout period
                self._last_valid_ms[handle] = now
                on_error(PositionError(TrackerError.TIMEOUT,
                                       f"No valid vehicle position for {now - started}ms"))

    def run(self, duration_s: Optional[float] = None,
            stop_event: Optional[threading.Event] = None) -> int:
        """Poll until the duration elapses or stop_event is set.

        Returns:
            Number of polls performed
        """
        stop_event = stop_event or threading.Event()
        deadline = None if duration_s is None else time.monotonic() + duration_s
        polls = 0
        while not stop_event.is_set():
            if deadline is not None and time.monotonic() >= deadline:
                break
            self.poll_once()
            polls += 1
            stop_event.wait(self.interval_s)
        return polls

    def close(self) -> None:
        self._session.close()
