"""
Farkle Duel - Bust Scheduler

Runs the delayed turn hand-off after a bust. The match itself never waits:
it flags the bust and the scheduler calls back after the display pause.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def _thread_timer(delay: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class BustScheduler:
    """One pending callback per room.

    Scheduling again for a room cancels whatever was pending there.

    Args:
        delay: Seconds between the bust roll and the callback
        timer_factory: Builds a startable, cancellable timer
    """

    def __init__(
        self,
        delay: float = 2.0,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self.delay = delay
        self._timer_factory = timer_factory
        self._timers: dict[str, Timer] = {}
        self._lock = threading.Lock()

    def schedule(self, room_id: str, callback: Callable[[], None]) -> None:
        """Run `callback` after the delay, replacing any pending one."""
        def fire() -> None:
            with self._lock:
                if self._timers.get(room_id) is not timer:
                    return
                del self._timers[room_id]
            try:
                callback()
            except Exception:
                logger.exception("Bust callback failed for room %s", room_id)

        timer = self._timer_factory(self.delay, fire)
        with self._lock:
            previous = self._timers.pop(room_id, None)
            self._timers[room_id] = timer
        if previous is not None:
            previous.cancel()
        timer.start()
        logger.debug("Bust resolution for room %s in %.1fs", room_id, self.delay)

    def cancel(self, room_id: str) -> bool:
        """Drop the pending callback for a room, if any."""
        with self._lock:
            timer = self._timers.pop(room_id, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    @property
    def pending(self) -> list[str]:
        with self._lock:
            return list(self._timers)

    def shutdown(self) -> None:
        """Cancel everything still pending."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
