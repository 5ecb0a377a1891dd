from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.scheduler import ManualScheduler
from core.state_machine import DEFAULT_BOOP_TRANSITIONS, DisplayState, InteractionStateMachine


class InteractionStateMachineTest(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.machine = InteractionStateMachine(self.scheduler)
        self.emitted: list[DisplayState] = []
        self.boop_enabled: list[bool] = []
        self.machine.state_changed.connect(self.emitted.append)
        self.machine.boop_enabled_changed.connect(self.boop_enabled.append)

    def test_initial_state(self) -> None:
        self.assertEqual(self.machine.state, DisplayState.RESTING)
        self.assertEqual(self.machine.boop_count, 0)
        self.assertTrue(self.machine.boop_enabled)
        self.assertEqual(self.machine.boop_transitions, DEFAULT_BOOP_TRANSITIONS)

    def test_only_exact_counts_change_state(self) -> None:
        observed = []
        for _ in range(7):
            self.machine.on_boop()
            observed.append(self.machine.state)
        self.assertEqual(
            observed,
            [
                DisplayState.BOOPED_1,
                DisplayState.BOOPED_1,
                DisplayState.BOOPED_1,
                DisplayState.BOOPED_2,
                DisplayState.BOOPED_2,
                DisplayState.BOOPED_2,
                DisplayState.BOOPED_3,
            ],
        )
        self.assertEqual(self.emitted, [DisplayState.BOOPED_1, DisplayState.BOOPED_2, DisplayState.BOOPED_3])
        self.assertEqual(self.machine.boop_count, 7)

    def test_twenty_four_boops_break_the_pony_until_reset(self) -> None:
        for _ in range(24):
            self.machine.on_boop()
            self.scheduler.advance(500)
        self.assertEqual(self.machine.state, DisplayState.BROKEN)

        self.scheduler.advance(500)
        self.assertEqual(self.machine.state, DisplayState.RESTING)
        self.assertEqual(self.machine.boop_count, 0)

    def test_boop_reset_after_timeout_since_last_boop(self) -> None:
        self.machine.on_boop()
        self.scheduler.advance(800)
        self.machine.on_boop()
        self.scheduler.advance(999)
        self.assertEqual(self.machine.state, DisplayState.BOOPED_1)
        self.assertEqual(self.machine.boop_count, 2)

        self.scheduler.advance(1)
        self.assertEqual(self.machine.state, DisplayState.RESTING)
        self.assertEqual(self.machine.boop_count, 0)
        self.assertEqual(self.scheduler.pending_count(), 0)

    def test_boop_ignored_while_scared(self) -> None:
        self.machine.on_boop()
        self.machine.on_shake_start()
        pending = self.scheduler.pending_count()

        self.machine.on_boop()
        self.assertEqual(self.machine.state, DisplayState.SCARED)
        self.assertEqual(self.machine.boop_count, 0)
        self.assertEqual(self.scheduler.pending_count(), pending)

    def test_shake_start_forces_scared_and_clears_boops(self) -> None:
        for _ in range(5):
            self.machine.on_boop()
        self.machine.on_any_interaction()

        self.machine.on_shake_start()
        self.assertEqual(self.machine.state, DisplayState.SCARED)
        self.assertEqual(self.machine.boop_count, 0)
        self.assertFalse(self.machine.boop_enabled)
        self.assertEqual(self.boop_enabled, [False])
        # Boop reset and inactivity were both cancelled.
        self.assertEqual(self.scheduler.pending_count(), 0)

        self.scheduler.advance(10_000)
        self.assertEqual(self.machine.state, DisplayState.SCARED)

    def test_shake_end_recovers_after_delay(self) -> None:
        self.machine.on_shake_start()
        self.machine.on_shake_end()
        self.scheduler.advance(999)
        self.assertEqual(self.machine.state, DisplayState.SCARED)

        self.scheduler.advance(1)
        self.assertEqual(self.machine.state, DisplayState.RESTING)
        self.assertTrue(self.machine.boop_enabled)
        self.assertEqual(self.boop_enabled, [False, True])

        # Recovery refreshes the inactivity timer.
        self.scheduler.advance(4_000)
        self.assertEqual(self.machine.state, DisplayState.INACTIVE)

    def test_new_shake_cancels_pending_recovery(self) -> None:
        self.machine.on_shake_start()
        self.machine.on_shake_end()
        self.scheduler.advance(500)
        self.machine.on_shake_start()
        self.scheduler.advance(5_000)
        self.assertEqual(self.machine.state, DisplayState.SCARED)
        self.assertFalse(self.machine.boop_enabled)

    def test_inactivity_is_rolling(self) -> None:
        self.machine.on_any_interaction()
        self.scheduler.advance(3_000)
        self.machine.on_any_interaction()
        self.scheduler.advance(3_999)
        self.assertEqual(self.machine.state, DisplayState.RESTING)
        self.scheduler.advance(1)
        self.assertEqual(self.machine.state, DisplayState.INACTIVE)

    def test_inactivity_and_boop_timers_are_independent(self) -> None:
        self.machine.on_any_interaction()
        self.scheduler.advance(3_500)
        self.machine.on_boop()
        self.assertEqual(self.machine.state, DisplayState.BOOPED_1)

        self.scheduler.advance(500)
        self.assertEqual(self.machine.state, DisplayState.INACTIVE)
        self.scheduler.advance(500)
        self.assertEqual(self.machine.state, DisplayState.RESTING)

    def test_custom_transition_table(self) -> None:
        machine = InteractionStateMachine(
            self.scheduler,
            boop_timeout_ms=200,
            boop_transitions={3: DisplayState.BROKEN, 2: DisplayState.BOOPED_4},
        )
        machine.on_boop()
        self.assertEqual(machine.state, DisplayState.RESTING)
        machine.on_boop()
        self.assertEqual(machine.state, DisplayState.BOOPED_4)
        machine.on_boop()
        self.assertEqual(machine.state, DisplayState.BROKEN)
        self.assertEqual(list(machine.boop_transitions), [2, 3])
        self.scheduler.advance(200)
        self.assertEqual(machine.state, DisplayState.RESTING)

    def test_teardown_cancels_everything_and_is_repeatable(self) -> None:
        self.machine.on_boop()
        self.machine.on_any_interaction()
        self.machine.on_shake_end()
        self.assertEqual(self.scheduler.pending_count(), 3)

        self.machine.teardown()
        self.machine.teardown()
        self.assertEqual(self.scheduler.pending_count(), 0)
        state = self.machine.state
        self.scheduler.advance(60_000)
        self.assertEqual(self.machine.state, state)

    def test_teardown_without_activity_is_safe(self) -> None:
        InteractionStateMachine(ManualScheduler()).teardown()


if __name__ == "__main__":
    unittest.main()
