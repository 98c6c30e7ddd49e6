from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass(eq=False)
class TimerHandle:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        # No-op once fired.
        if not self.fired:
            self.cancelled = True


@dataclass
class FrameScheduler:
    """Cooperative delayed actions driven by the caller's clock.

    Nothing runs on its own: the owner advances time with `tick(dt)` (the
    pygame loop does this once per frame, tests do it explicitly) and due
    callbacks run on that same thread, earliest first.
    """

    now: float = 0.0
    _timers: list[TimerHandle] = field(default_factory=list)

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        handle = TimerHandle(due=self.now + delay, callback=callback)
        self._timers.append(handle)
        return handle

    def tick(self, dt: float) -> int:
        """Advance the clock by `dt` and run what became due. Returns the number fired."""
        if dt < 0:
            raise ValueError("dt must be >= 0")
        self.now += dt
        fired = 0
        while True:
            due = [t for t in self._timers if t.pending and t.due <= self.now]
            if not due:
                break
            # stable: equal due times fire in scheduling order
            handle = min(due, key=lambda t: t.due)
            handle.fired = True
            self._timers.remove(handle)
            handle.callback()
            fired += 1
        self._timers = [t for t in self._timers if t.pending]
        return fired

    def pending_count(self) -> int:
        return sum(1 for t in self._timers if t.pending)
