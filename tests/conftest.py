"""
Pytest configuration and fixtures for GPS path tracker tests.

Provides reusable fixes, tracker configuration, and fake scheduler,
wake lock and clock collaborators for driving the controller synchronously.
"""

import pytest
from typing import Callable, List, Tuple

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tracking.data_models import GeoFix, TrackerConfig, ViewConfig
from tracking.wake_lock import WakeLock

# One degree of latitude on the tracker's sphere
METERS_PER_DEG_LAT = 111194.93


class FakeScheduler:
    """Records scheduled callbacks so tests can fire them on demand."""

    def __init__(self):
        self.pending: List[Tuple[float, Callable[[], None]]] = []

    def __call__(self, delay_s: float, callback: Callable[[], None]):
        self.pending.append((delay_s, callback))
        return len(self.pending)

    def run_pending(self) -> int:
        """Fire every callback scheduled so far."""
        due, self.pending = self.pending, []
        for _, callback in due:
            callback()
        return len(due)


class FakeWakeLock(WakeLock):
    """Wake lock that always succeeds and counts acquisitions."""

    def __init__(self):
        self._held = False
        self.acquire_count = 0

    def acquire(self) -> None:
        self._held = True
        self.acquire_count += 1

    def release(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def lose(self) -> None:
        """Simulate the host dropping the lock (e.g. app backgrounded)."""
        self._held = False


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now_ms: int = 0):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms


def make_fix(lat: float = 37.7749, lon: float = -122.4194, t_ms: int = 0,
             accuracy: float = 5.0, speed: float = 0.0) -> GeoFix:
    return GeoFix(latitude=lat, longitude=lon, accuracy_m=accuracy, speed_mps=speed, timestamp_ms=t_ms)


@pytest.fixture
def origin_fix():
    """Fixture providing the first fix of a session."""
    return make_fix(t_ms=0)


@pytest.fixture
def northbound_fixes():
    """Fixture providing fixes moving ~5m north every 2 seconds."""
    step = 5.0 / METERS_PER_DEG_LAT
    return [make_fix(lat=37.7749 + i * step, t_ms=i * 2000) for i in range(5)]


@pytest.fixture
def config():
    """Fixture providing a default tracker configuration."""
    return TrackerConfig()


@pytest.fixture
def view():
    """Fixture providing a 600x600 view with 40px margin at 3 px/m."""
    return ViewConfig(pixels_per_meter=3.0, margin_px=40, canvas_width=600, canvas_height=600)


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture
def fake_wake_lock():
    return FakeWakeLock()


@pytest.fixture
def fake_clock():
    return FakeClock()
