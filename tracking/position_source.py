"""
Position sources feeding fixes to a tracker.

A position source delivers fixes and errors as discrete events to callbacks
registered through subscribe(). Device GPS, replayed recordings and polled
vehicle telemetry are interchangeable producers of the same GeoFix shape.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from constants import GPS_TIMEOUT_MS, GPS_MAX_FIX_AGE_MS
from tracking.data_models import GeoFix
from tracking.errors import PositionError

logger = logging.getLogger(__name__)

FixCallback = Callable[[GeoFix], None]
ErrorCallback = Callable[[PositionError], None]


@dataclass(frozen=True)
class SubscribeOptions:
    """Options passed to a position source on subscribe.

    Attributes:
        high_accuracy: Prefer the most accurate positioning available
        timeout_ms: Maximum wait for a fix before reporting a timeout
        max_fix_age_ms: Oldest cached fix the source may deliver (0 = none)
    """
    high_accuracy: bool = True
    timeout_ms: int = GPS_TIMEOUT_MS
    max_fix_age_ms: int = GPS_MAX_FIX_AGE_MS

    @classmethod
    def from_config(cls, config) -> "SubscribeOptions":
        return cls(
            high_accuracy=config.high_accuracy,
            timeout_ms=config.gps_timeout_ms,
            max_fix_age_ms=config.max_fix_age_ms,
        )


class PositionSource(ABC):
    """
    Abstract producer of position fixes.

    Subclasses must implement:
        - subscribe(on_fix, on_error, options): Start delivery, return a handle
        - unsubscribe(handle): Stop delivery for that handle
    """

    @abstractmethod
    def subscribe(self, on_fix: FixCallback, on_error: ErrorCallback,
                  options: SubscribeOptions = SubscribeOptions()) -> int:
        pass

    @abstractmethod
    def unsubscribe(self, handle: int) -> None:
        pass


class SubscriptionRegistry:
    """Handle bookkeeping shared by the concrete sources."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._subscribers: Dict[int, Tuple[FixCallback, ErrorCallback, SubscribeOptions]] = {}

    def add(self, on_fix: FixCallback, on_error: ErrorCallback, options: SubscribeOptions) -> int:
        handle = next(self._ids)
        self._subscribers[handle] = (on_fix, on_error, options)
        return handle

    def remove(self, handle: int) -> None:
        if self._subscribers.pop(handle, None) is None:
            logger.debug(f"Unsubscribe for unknown handle {handle}")

    def active(self) -> List[Tuple[FixCallback, ErrorCallback, SubscribeOptions]]:
        return list(self._subscribers.values())

    def items(self) -> List[Tuple[int, Tuple[FixCallback, ErrorCallback, SubscribeOptions]]]:
        return list(self._subscribers.items())

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, handle: int) -> bool:
        return handle in self._subscribers


ReplayEvent = Union[GeoFix, PositionError]


class ReplayPositionSource(PositionSource):
    """
    Replays a recorded sequence of fixes and errors.

    Nothing is delivered on subscribe; call play() or step() to push events
    to the current subscribers, one event at a time, in order.

    Usage:
        source = ReplayPositionSource.from_csv("drive.csv")
        tracker = TrackingController(source)
        tracker.start()
        source.play()
    """

    def __init__(self, events: Iterable[ReplayEvent] = ()):
        self._events: List[ReplayEvent] = list(events)
        self._position = 0
        self._registry = SubscriptionRegistry()

    @classmethod
    def from_csv(cls, csv_path) -> "ReplayPositionSource":
        from track_export.csv_io import read_fixes
        return cls(read_fixes(csv_path))

    def subscribe(self, on_fix: FixCallback, on_error: ErrorCallback,
                  options: SubscribeOptions = SubscribeOptions()) -> int:
        handle = self._registry.add(on_fix, on_error, options)
        logger.debug(f"Replay subscription {handle} ({self.remaining} events left)")
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._registry.remove(handle)

    @property
    def subscriber_count(self) -> int:
        return len(self._registry)

    @property
    def remaining(self) -> int:
        return len(self._events) - self._position

    def push(self, event: ReplayEvent) -> None:
        """Queue another event behind the recorded ones."""
        self._events.append(event)

    def step(self) -> Optional[ReplayEvent]:
        """Deliver the next event to every subscriber.

        Returns:
            The delivered event, or None when the recording is exhausted.
            Events are consumed even with no subscriber attached.
        """
        if self._position >= len(self._events):
            return None

        event = self._events[self._position]
        self._position += 1

        # Snapshot: callbacks may unsubscribe while being notified
        for on_fix, on_error, _ in self._registry.active():
            if isinstance(event, PositionError):
                on_error(event)
            else:
                on_fix(event)
        return event

    def play(self, limit: Optional[int] = None) -> int:
        """Deliver remaining events in order.

        Args:
            limit: Maximum number of events to deliver (all if None)

        Returns:
            Number of events delivered
        """
        delivered = 0
        while limit is None or delivered < limit:
            if self.step() is None:
                break
            delivered += 1
        return delivered
