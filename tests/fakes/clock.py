"""Deterministic clock and scheduler for room lifecycle tests.

FakeClock replaces ``time.time``; ManualScheduler replaces the asyncio
scheduler and fires due callbacks only when the test advances time.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field


_DEFAULT_START = 1_000.0


class FakeClock:
    """Callable clock returning a controllable time in seconds."""

    def __init__(self, start: float = _DEFAULT_START) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@dataclass
class _ManualHandle:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """TaskScheduler whose callbacks run on ``advance()``.

    Shares the FakeClock so scheduled delays line up with store timestamps.

    Example:
        >>> clock = FakeClock()
        >>> scheduler = ManualScheduler(clock)
        >>> handle = scheduler.call_later(1.0, lambda: None)
        >>> scheduler.advance(1.0)
        1
    """

    clock: FakeClock
    handles: list[_ManualHandle] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(due=self.clock() + delay, callback=callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[_ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire due callbacks in due order.

        Returns:
            Number of callbacks fired.
        """
        self.clock.advance(seconds)
        due = sorted(
            (h for h in self.pending if h.due <= self.clock()),
            key=lambda h: h.due,
        )
        for handle in due:
            handle.fired = True
            handle.callback()
        return len(due)
