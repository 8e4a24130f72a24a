# src/flappy/scheduler.py
"""
Cooperative frame/interval scheduler.

The game drives it with pygame's wall-clock ticks, the env and the tests drive
it with simulated milliseconds. Everything runs on the caller's thread inside
`pump()`; there is no background timer.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ScheduledTask:
    callback: Callable[[], Any]
    interval_ms: Optional[float]   # None -> fire on every pump (one per frame)
    next_due_ms: float = 0.0
    owner: Any = None
    cancelled: bool = False
    fired: int = 0

    @property
    def per_frame(self) -> bool:
        return self.interval_ms is None

    def cancel(self):
        """Takes effect immediately, even mid-pump."""
        self.cancelled = True


class Scheduler:
    def __init__(self, now_ms: float = 0.0):
        self.now_ms = float(now_ms)
        self._tasks: List[ScheduledTask] = []

    @property
    def tasks(self) -> List[ScheduledTask]:
        return [t for t in self._tasks if not t.cancelled]

    def every_frame(self, callback: Callable[[], Any], owner: Any = None) -> ScheduledTask:
        task = ScheduledTask(callback=callback, interval_ms=None, next_due_ms=self.now_ms, owner=owner)
        self._tasks.append(task)
        return task

    def every(self, interval_ms: float, callback: Callable[[], Any], owner: Any = None) -> ScheduledTask:
        """Fire `callback` once per elapsed interval, first one interval from now."""
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        task = ScheduledTask(
            callback=callback,
            interval_ms=float(interval_ms),
            next_due_ms=self.now_ms + float(interval_ms),
            owner=owner,
        )
        self._tasks.append(task)
        return task

    def cancel_owner(self, owner: Any) -> int:
        n = 0
        for task in self._tasks:
            if task.owner is owner and not task.cancelled:
                task.cancel()
                n += 1
        if n:
            logger.debug("cancelled %d task(s) for %r", n, owner)
        return n

    def advance(self, elapsed_ms: float, max_step_ms: Optional[float] = None) -> int:
        """
        Pump `elapsed_ms` past the current clock, clamped to `max_step_ms`.
        Time lost to a stall is dropped, so overdue intervals cannot burst.
        """
        elapsed_ms = max(0.0, float(elapsed_ms))
        if max_step_ms is not None and elapsed_ms > max_step_ms:
            elapsed_ms = float(max_step_ms)
        return self.pump(self.now_ms + elapsed_ms)

    def pump(self, now_ms: float) -> int:
        """
        Advance the clock to `now_ms` and run what is due, in registration
        order. Returns the number of callbacks run.
        """
        now_ms = float(now_ms)
        if now_ms < self.now_ms:
            raise ValueError(f"clock went backwards: {now_ms} < {self.now_ms}")
        self.now_ms = now_ms

        fired = 0
        # snapshot: tasks registered by a callback wait for the next pump
        for task in list(self._tasks):
            if task.cancelled:
                continue
            if task.per_frame:
                task.callback()
                task.fired += 1
                fired += 1
                continue
            while not task.cancelled and task.next_due_ms <= now_ms:
                task.next_due_ms += task.interval_ms
                task.callback()
                task.fired += 1
                fired += 1

        self._tasks = [t for t in self._tasks if not t.cancelled]
        return fired
