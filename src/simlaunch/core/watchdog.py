"""Inactivity watchdog."""

import asyncio
import time
from collections.abc import Callable


class Watchdog:
    """Fixed-period poll that fires when log activity stalls.

    Every ``timeout_ms`` it compares the time since the last activity with
    ``timeout_ms``. The poll is not rescheduled on activity.
    """

    def __init__(
        self,
        timeout_ms: int,
        last_activity: Callable[[], float],
        on_expired: Callable[[], None],
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout_ms = timeout_ms
        self._last_activity = last_activity
        self._on_expired = on_expired
        self._clock = clock

    @property
    def period(self) -> float:
        """Tick period in seconds."""
        return self.timeout_ms / 1000

    def expired(self) -> bool:
        idle_ms = (self._clock() - self._last_activity()) * 1000
        return idle_ms >= self.timeout_ms

    def tick(self) -> bool:
        """Evaluate one tick. Returns True if the watchdog fired."""
        if not self.expired():
            return False
        self._on_expired()
        return True

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.period)
            if self.tick():
                return
