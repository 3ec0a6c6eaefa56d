"""Cancellable delayed tasks for room lifecycle transitions.

Participant removal after the leave grace period and promotion of joining
participants after the settle delay are deferred callbacks. The store keeps
the returned handles per room so that deleting a room cancels every pending
transition instead of leaving orphaned timers.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class ScheduledHandle(Protocol):
    """Handle to a pending delayed callback."""

    def cancel(self) -> None:
        """Cancel the callback if it has not run yet."""
        ...


@runtime_checkable
class TaskScheduler(Protocol):
    """Schedules a callback to run once after a delay (seconds)."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        """Schedule ``callback`` to run after ``delay`` seconds.

        Args:
            delay: Delay in seconds.
            callback: Zero-argument callable.

        Returns:
            A handle whose ``cancel()`` prevents the callback from running.
        """
        ...


class _TimerHandle:
    """Adapts threading.Timer to the ScheduledHandle protocol."""

    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class AsyncioScheduler:
    """Default scheduler built on the running event loop.

    Inside a running loop, callbacks are scheduled with ``loop.call_later``
    and run on the loop thread. Outside one (synchronous callers, scripts),
    a daemon ``threading.Timer`` is used instead; its callbacks run on the
    timer thread and only mutate rooms under the store lock. Readers on
    other threads should go through ``RoomStore.snapshot``.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(delay, callback)
            timer.daemon = True
            timer.start()
            return _TimerHandle(timer)
        return loop.call_later(delay, callback)


__all__ = ["AsyncioScheduler", "ScheduledHandle", "TaskScheduler"]
