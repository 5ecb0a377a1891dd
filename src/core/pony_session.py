from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal

from .config_manager import InteractionConfig, ShakeConfig
from .motion import WindowHandle
from .scheduler import Scheduler
from .shake_detector import ShakeDetector
from .state_machine import DisplayState, InteractionStateMachine

logger = logging.getLogger("BoopPony")


class PonySession(QObject):
    """
    One pony's interaction core.

    Owns a ShakeDetector and an InteractionStateMachine, routes UI input into
    them and forwards the detector's gesture events. The two components only
    talk through signals; neither reads the other's fields.
    """

    state_changed = Signal(object)
    boop_enabled_changed = Signal(bool)
    close_requested = Signal()

    def __init__(
        self,
        scheduler: Scheduler,
        shake_config: ShakeConfig | None = None,
        interaction_config: InteractionConfig | None = None,
        *,
        name: str = "pony",
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        shake_config = shake_config or ShakeConfig()
        interaction_config = interaction_config or InteractionConfig()
        self._name = name
        self._closed = False

        self._detector = ShakeDetector(
            scheduler,
            min_duration_ms=shake_config.min_duration_ms,
            sensitivity_px=shake_config.sensitivity_px,
            check_interval_ms=shake_config.check_interval_ms,
            parent=self,
        )
        self._machine = InteractionStateMachine(
            scheduler,
            boop_timeout_ms=interaction_config.boop_timeout_ms,
            scared_recovery_ms=interaction_config.scared_recovery_ms,
            inactive_timeout_ms=interaction_config.inactive_timeout_ms,
            boop_transitions=interaction_config.transition_table(),
            parent=self,
        )

        self._detector.shake_started.connect(self._on_shake_started)
        self._detector.shake_ended.connect(self._on_shake_ended)
        self._machine.state_changed.connect(self.state_changed.emit)
        self._machine.boop_enabled_changed.connect(self.boop_enabled_changed.emit)

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> DisplayState:
        return self._machine.state

    @property
    def shake_detector(self) -> ShakeDetector:
        return self._detector

    @property
    def state_machine(self) -> InteractionStateMachine:
        return self._machine

    def attach(self, window: WindowHandle) -> None:
        self._closed = False
        self._detector.attach(window)
        self._machine.on_any_interaction()
        logger.info("[PonySession] %s attached", self._name)

    def boop(self) -> None:
        self._machine.on_any_interaction()
        self._machine.on_boop()

    def cutie_mark_clicked(self) -> None:
        self._machine.on_any_interaction()

    def titlebar_interaction(self) -> None:
        self._machine.on_any_interaction()

    def request_close(self) -> None:
        self._machine.on_any_interaction()
        self.close_requested.emit()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Detach first: a synthesized shakeend schedules a recovery that teardown cancels.
        self._detector.detach()
        self._machine.teardown()
        logger.info("[PonySession] %s closed", self._name)

    def _on_shake_started(self) -> None:
        logger.info("[PonySession] %s shakestart", self._name)
        self._machine.on_shake_start()

    def _on_shake_ended(self) -> None:
        logger.info("[PonySession] %s shakeend", self._name)
        self._machine.on_shake_end()
