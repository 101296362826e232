"""
Keep-awake handling for active tracking sessions.

Hosts that can keep the screen/system awake provide a WakeLock; hosts that
cannot raise WakeLockUnsupported and tracking carries on without it.
"""

from abc import ABC, abstractmethod

from tracking.errors import WakeLockUnsupported


class WakeLock(ABC):
    """Keep-awake resource held for the duration of a tracking session."""

    @abstractmethod
    def acquire(self) -> None:
        """Acquire the lock.

        Raises:
            WakeLockUnsupported: If the host cannot keep itself awake
        """
        pass

    @abstractmethod
    def release(self) -> None:
        pass

    @property
    @abstractmethod
    def held(self) -> bool:
        pass


class UnsupportedWakeLock(WakeLock):
    """Default for hosts without a keep-awake facility."""

    def acquire(self) -> None:
        raise WakeLockUnsupported("Wake lock not available on this host")

    def release(self) -> None:
        pass

    @property
    def held(self) -> bool:
        return False
