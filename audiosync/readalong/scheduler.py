"""
Tick Schedulers

A scheduler runs a callback on the host's next frame. The playback
controller requests one tick at a time and re-requests from inside the
tick, so a single chain of ticks exists per controller.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from audiosync.utils.config import config

TickCallback = Callable[[], None]


class Scheduler(ABC):
    """Run-on-next-frame abstraction."""

    @abstractmethod
    def request_tick(self, callback: TickCallback) -> Any:
        """Schedule ``callback`` for the next frame and return a handle."""

    @abstractmethod
    def cancel_tick(self, handle: Any) -> None:
        """Cancel a pending tick. Unknown or spent handles are ignored."""


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler stepped by hand.

    Each call to ``frame()`` runs every callback that was pending when the
    frame began. Callbacks requested during a frame wait for the next one.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, TickCallback] = {}
        self._next_handle = 1
        self.ticks = 0  # Callbacks executed so far

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_tick(self, callback: TickCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_tick(self, handle: Any) -> None:
        self._pending.pop(handle, None)

    def frame(self) -> int:
        """
        Advance one frame.

        Returns:
            Number of callbacks run
        """
        due = list(self._pending.items())
        self._pending.clear()

        for _, callback in due:
            callback()
            self.ticks += 1
        return len(due)

    def run(self, frames: int) -> int:
        """Advance several frames and return the callbacks run."""
        return sum(self.frame() for _ in range(frames))


class AsyncioScheduler(Scheduler):
    """Frame clock on an asyncio event loop."""

    def __init__(
        self,
        interval: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            interval: Seconds between frames (default from config)
            loop: Event loop to use (default: the running loop)
        """
        self.interval = config.tick_interval if interval is None else interval
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_tick(self, callback: TickCallback) -> asyncio.TimerHandle:
        return self.loop.call_later(self.interval, callback)

    def cancel_tick(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()
