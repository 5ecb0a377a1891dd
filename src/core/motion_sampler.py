from __future__ import annotations

import logging
from typing import Callable

from .motion import MotionSample, WindowHandle
from .scheduler import Scheduler, TimerSlot

logger = logging.getLogger("BoopPony")


class MotionSampler:
    """
    Periodically reads a host window's screen position.

    Samples go to ``on_sample`` every ``interval_ms`` while attached. The
    position captured on attach is only a baseline and is never delivered.
    """

    DEFAULT_INTERVAL_MS: int = 400

    def __init__(
        self,
        scheduler: Scheduler,
        on_sample: Callable[[MotionSample], None],
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ):
        self._scheduler = scheduler
        self._on_sample = on_sample
        self._interval_ms = max(1, int(interval_ms))
        self._window: WindowHandle | None = None
        self._tick_timer = TimerSlot(scheduler, "sample_tick")

    @property
    def attached(self) -> bool:
        return self._window is not None

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def attach(self, window: WindowHandle) -> MotionSample:
        self._window = window
        baseline = self._read(window)
        self._tick_timer.start(self._interval_ms, self._tick)
        logger.debug("[MotionSampler] attached baseline=%s", baseline.position)
        return baseline

    def detach(self) -> None:
        self._tick_timer.cancel()
        self._window = None

    def _read(self, window: WindowHandle) -> MotionSample:
        return MotionSample(window.screen_position(), self._scheduler.now_ms())

    def _tick(self) -> None:
        if self._window is None:
            return
        sample = self._read(self._window)
        # Rescheduled before delivery; a sink calling detach() cancels it.
        self._tick_timer.start(self._interval_ms, self._tick)
        self._on_sample(sample)
