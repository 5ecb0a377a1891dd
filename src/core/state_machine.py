from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Mapping

from PySide6.QtCore import QObject, Signal

from .scheduler import Scheduler, TimerSlot

logger = logging.getLogger("BoopPony")


class DisplayState(Enum):
    """What the pony currently shows."""

    RESTING = auto()
    BOOPED_1 = auto()
    BOOPED_2 = auto()
    BOOPED_3 = auto()
    BOOPED_4 = auto()
    BROKEN = auto()
    SCARED = auto()
    INACTIVE = auto()


# Boop count -> state. Only exact keys trigger a transition.
DEFAULT_BOOP_TRANSITIONS: dict[int, DisplayState] = {
    1: DisplayState.BOOPED_1,
    4: DisplayState.BOOPED_2,
    7: DisplayState.BOOPED_3,
    12: DisplayState.BOOPED_4,
    24: DisplayState.BROKEN,
}


class InteractionStateMachine(QObject):
    """
    Turns boops and shake gestures into the pony's display state.

    Three independent timer slots drive the resets:
    - boop_reset: no boop for ``boop_timeout_ms`` -> RESTING, counter 0
    - scared_recovery: ``scared_recovery_ms`` after a shake ends -> RESTING
    - inactivity: no interaction for ``inactive_timeout_ms`` -> INACTIVE

    ``boop_transitions`` keys must be strictly increasing positive counts.

    Signals:
    - state_changed(DisplayState)
    - boop_enabled_changed(bool)
    """

    state_changed = Signal(object)
    boop_enabled_changed = Signal(bool)

    DEFAULT_BOOP_TIMEOUT_MS: int = 1_000
    DEFAULT_SCARED_RECOVERY_MS: int = 1_000
    DEFAULT_INACTIVE_TIMEOUT_MS: int = 4_000

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        boop_timeout_ms: int = DEFAULT_BOOP_TIMEOUT_MS,
        scared_recovery_ms: int = DEFAULT_SCARED_RECOVERY_MS,
        inactive_timeout_ms: int = DEFAULT_INACTIVE_TIMEOUT_MS,
        boop_transitions: Mapping[int, DisplayState] | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._boop_timeout_ms = int(boop_timeout_ms)
        self._scared_recovery_ms = int(scared_recovery_ms)
        self._inactive_timeout_ms = int(inactive_timeout_ms)
        self._boop_transitions = dict(
            sorted((boop_transitions if boop_transitions is not None else DEFAULT_BOOP_TRANSITIONS).items())
        )
        self._state = DisplayState.RESTING
        self._boop_count = 0
        self._boop_enabled = True
        self._boop_reset_timer = TimerSlot(scheduler, "boop_reset")
        self._scared_recovery_timer = TimerSlot(scheduler, "scared_recovery")
        self._inactivity_timer = TimerSlot(scheduler, "inactivity")

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def boop_count(self) -> int:
        return self._boop_count

    @property
    def boop_enabled(self) -> bool:
        return self._boop_enabled

    @property
    def boop_transitions(self) -> dict[int, DisplayState]:
        return dict(self._boop_transitions)

    def on_boop(self) -> None:
        if self._state is DisplayState.SCARED:
            return
        self._boop_reset_timer.cancel()
        self._boop_count += 1
        new_state = self._boop_transitions.get(self._boop_count)
        if new_state is not None:
            self._set_state(new_state)
        self._boop_reset_timer.start(self._boop_timeout_ms, self._on_boop_reset_timeout)

    def on_shake_start(self) -> None:
        self._inactivity_timer.cancel()
        self._boop_reset_timer.cancel()
        # A recovery left over from an earlier shake must not end this one.
        self._scared_recovery_timer.cancel()
        self._boop_count = 0
        self._set_boop_enabled(False)
        self._set_state(DisplayState.SCARED)

    def on_shake_end(self) -> None:
        self._scared_recovery_timer.start(self._scared_recovery_ms, self._on_scared_recovery_timeout)

    def on_any_interaction(self) -> None:
        self._inactivity_timer.start(self._inactive_timeout_ms, self._on_inactivity_timeout)

    def teardown(self) -> None:
        self._boop_reset_timer.cancel()
        self._scared_recovery_timer.cancel()
        self._inactivity_timer.cancel()

    def _on_boop_reset_timeout(self) -> None:
        self._set_state(DisplayState.RESTING)

    def _on_scared_recovery_timeout(self) -> None:
        self._set_state(DisplayState.RESTING)
        self._set_boop_enabled(True)
        self.on_any_interaction()

    def _on_inactivity_timeout(self) -> None:
        self._set_state(DisplayState.INACTIVE)

    def _set_state(self, state: DisplayState) -> None:
        old_state = self._state
        self._state = state
        if state is DisplayState.RESTING:
            self._boop_count = 0
        logger.debug("[Interaction] %s -> %s (boops=%d)", old_state.name, state.name, self._boop_count)
        self.state_changed.emit(state)

    def _set_boop_enabled(self, enabled: bool) -> None:
        if self._boop_enabled == enabled:
            return
        self._boop_enabled = enabled
        self.boop_enabled_changed.emit(enabled)
