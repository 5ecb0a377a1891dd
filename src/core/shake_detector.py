from __future__ import annotations

import logging
from enum import Enum, auto

from PySide6.QtCore import QObject, Signal

from .motion import MotionSample, Position, WindowHandle
from .motion_sampler import MotionSampler
from .scheduler import Scheduler

logger = logging.getLogger("BoopPony")


class ShakePhase(Enum):
    """Shake classifier phases. SHAKING is only reachable through MOVING."""

    IDLE = auto()
    MOVING = auto()
    SHAKING = auto()


class ShakeDetector(QObject):
    """
    Classify window position samples into shake gestures.

    A sample counts as movement when the window moved more than
    ``sensitivity_px`` on either axis since the previous sample. Continuous
    movement lasting longer than ``min_duration_ms`` (measured from the first
    moving sample) emits ``shake_started`` once; the first stationary sample
    afterwards emits ``shake_ended``. Movement that stops before the
    threshold returns to IDLE silently.

    Signals:
    - shake_started: window entered SHAKING
    - shake_ended: window left SHAKING (also emitted by detach())
    """

    shake_started = Signal()
    shake_ended = Signal()

    DEFAULT_MIN_DURATION_MS: int = 500
    DEFAULT_SENSITIVITY_PX: int = 10
    DEFAULT_CHECK_INTERVAL_MS: int = 400

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        min_duration_ms: int = DEFAULT_MIN_DURATION_MS,
        sensitivity_px: int = DEFAULT_SENSITIVITY_PX,
        check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._min_duration_ms = int(min_duration_ms)
        self._sensitivity_px = int(sensitivity_px)
        self._sampler = MotionSampler(scheduler, self.process_sample, check_interval_ms)
        self._phase = ShakePhase.IDLE
        self._last_position: Position | None = None
        self._moving_since: int | None = None
        self._shaking_since: int | None = None

    @property
    def phase(self) -> ShakePhase:
        return self._phase

    @property
    def moving_since(self) -> int | None:
        return self._moving_since

    @property
    def shaking_since(self) -> int | None:
        return self._shaking_since

    @property
    def attached(self) -> bool:
        return self._sampler.attached

    @property
    def min_duration_ms(self) -> int:
        return self._min_duration_ms

    @property
    def sensitivity_px(self) -> int:
        return self._sensitivity_px

    @property
    def check_interval_ms(self) -> int:
        return self._sampler.interval_ms

    def attach(self, window: WindowHandle) -> None:
        if self.attached:
            self.detach()
        baseline = self._sampler.attach(window)
        self._last_position = baseline.position

    def detach(self) -> None:
        if not self.attached:
            return
        self._sampler.detach()
        self._last_position = None
        self._moving_since = None
        was_shaking = self._phase is ShakePhase.SHAKING
        self._phase = ShakePhase.IDLE
        if was_shaking:
            self._shaking_since = None
            logger.info("[ShakeDetector] shake closed by detach")
            self.shake_ended.emit()

    def process_sample(self, sample: MotionSample) -> None:
        if not self.attached or self._last_position is None:
            return

        now = sample.timestamp_ms
        moved = sample.position.delta(self._last_position) > self._sensitivity_px
        self._last_position = sample.position

        if moved:
            if self._moving_since is None:
                self._moving_since = now
                self._phase = ShakePhase.MOVING
            elif now - self._moving_since > self._min_duration_ms and self._phase is not ShakePhase.SHAKING:
                self._phase = ShakePhase.SHAKING
                self._shaking_since = now
                logger.info("[ShakeDetector] shakestart after %d ms of motion", now - self._moving_since)
                self.shake_started.emit()
            return

        self._moving_since = None
        if self._phase is ShakePhase.SHAKING:
            self._phase = ShakePhase.IDLE
            self._shaking_since = None
            logger.info("[ShakeDetector] shakeend")
            self.shake_ended.emit()
        else:
            self._phase = ShakePhase.IDLE
