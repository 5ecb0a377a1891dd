"""
Cooperative timer scheduling.

Every timed behavior of a pony (sampling ticks, boop decay, scared recovery,
inactivity) goes through a ``Scheduler``. Production code uses ``QtScheduler``
on the Qt event loop; tests and offline replay drive ``ManualScheduler`` by
hand. ``TimerSlot`` keeps at most one pending callback per named slot.
"""

from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from PySide6.QtCore import QObject, QTimer


class Scheduler(Protocol):
    def now_ms(self) -> int: ...

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class QtScheduler(QObject):
    """Single-shot ``QTimer`` per scheduled callback."""

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._timers: set[QTimer] = set()

    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        timer.timeout.connect(lambda t=timer, cb=callback: self._fire(t, cb))
        self._timers.add(timer)
        timer.start()
        return timer

    def cancel(self, handle: QTimer | None) -> None:
        if handle is None or handle not in self._timers:
            return
        self._timers.discard(handle)
        handle.stop()
        handle.deleteLater()

    def pending_count(self) -> int:
        return len(self._timers)

    def _fire(self, timer: QTimer, callback: Callable[[], None]) -> None:
        if timer not in self._timers:
            return
        self._timers.discard(timer)
        timer.deleteLater()
        callback()


@dataclass(order=True, slots=True)
class ManualTimer:
    due_ms: int
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ManualScheduler:
    """
    Virtual-clock scheduler.

    Nothing fires until ``advance()`` is called. Callbacks run in due-time
    order (FIFO for equal due times) with the clock set to their due time.
    """

    def __init__(self, start_ms: int = 0):
        self._now_ms = int(start_ms)
        self._queue: list[ManualTimer] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        return self._now_ms

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self._now_ms + max(0, int(delay_ms)), next(self._seq), callback)
        heapq.heappush(self._queue, timer)
        return timer

    def cancel(self, handle: ManualTimer | None) -> None:
        if handle is not None:
            handle.cancelled = True

    def pending_count(self) -> int:
        return sum(1 for timer in self._queue if not timer.cancelled)

    def advance(self, ms: int) -> None:
        target = self._now_ms + max(0, int(ms))
        while self._queue and self._queue[0].due_ms <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now_ms = timer.due_ms
            timer.cancelled = True
            timer.callback()
        self._now_ms = target

    def advance_to(self, timestamp_ms: int) -> None:
        self.advance(int(timestamp_ms) - self._now_ms)


class TimerSlot:
    """A named slot holding at most one pending callback."""

    def __init__(self, scheduler: Scheduler, name: str):
        self._scheduler = scheduler
        self._name = name
        self._handle: Any = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.cancel()
        token = object()
        self._handle = (token, self._scheduler.schedule(delay_ms, lambda: self._fire(token, callback)))

    def cancel(self) -> None:
        if self._handle is None:
            return
        _, handle = self._handle
        self._handle = None
        self._scheduler.cancel(handle)

    def _fire(self, token: object, callback: Callable[[], None]) -> None:
        if self._handle is None or self._handle[0] is not token:
            return
        self._handle = None
        callback()
