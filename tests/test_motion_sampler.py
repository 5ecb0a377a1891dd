from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from core.motion import MotionSample, Position
from core.motion_sampler import MotionSampler
from core.scheduler import ManualScheduler


class _FakeWindow:
    def __init__(self, x: int = 0, y: int = 0) -> None:
        self.position = Position(x, y)

    def screen_position(self) -> Position:
        return self.position


class MotionSamplerTest(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = ManualScheduler()
        self.samples: list[MotionSample] = []
        self.sampler = MotionSampler(self.scheduler, self.samples.append, interval_ms=400)

    def test_attach_returns_baseline_without_delivering(self) -> None:
        baseline = self.sampler.attach(_FakeWindow(5, 7))
        self.assertEqual(baseline, MotionSample(Position(5, 7), 0))
        self.assertEqual(self.samples, [])
        self.assertTrue(self.sampler.attached)

    def test_delivers_one_sample_per_interval(self) -> None:
        window = _FakeWindow()
        self.sampler.attach(window)
        self.scheduler.advance(400)
        window.position = Position(30, 0)
        self.scheduler.advance(400)

        self.assertEqual(
            self.samples,
            [MotionSample(Position(0, 0), 400), MotionSample(Position(30, 0), 800)],
        )

    def test_detach_stops_delivery_immediately(self) -> None:
        self.sampler.attach(_FakeWindow())
        self.scheduler.advance(400)
        self.sampler.detach()
        self.scheduler.advance(2_000)
        self.assertEqual(len(self.samples), 1)
        self.assertEqual(self.scheduler.pending_count(), 0)
        self.assertFalse(self.sampler.attached)

    def test_stale_tick_after_detach_is_ignored(self) -> None:
        self.sampler.attach(_FakeWindow(3, 4))
        self.sampler.detach()
        # A timer callback already queued by the event loop may still run.
        self.sampler._tick()
        self.assertEqual(self.samples, [])
        self.assertEqual(self.scheduler.pending_count(), 0)

    def test_sink_detaching_during_delivery_stops_sampling(self) -> None:
        def _detach_on_first(sample: MotionSample) -> None:
            self.samples.append(sample)
            self.sampler.detach()

        sampler = MotionSampler(self.scheduler, _detach_on_first, interval_ms=400)
        self.sampler = sampler
        sampler.attach(_FakeWindow(9, 9))
        self.scheduler.advance(2_000)
        self.assertEqual(self.samples, [MotionSample(Position(9, 9), 400)])
        self.assertEqual(self.scheduler.pending_count(), 0)

    def test_reattach_resets_baseline_and_timer(self) -> None:
        self.sampler.attach(_FakeWindow(1, 1))
        self.scheduler.advance(200)
        baseline = self.sampler.attach(_FakeWindow(50, 60))
        self.assertEqual(baseline.position, Position(50, 60))
        self.assertEqual(self.scheduler.pending_count(), 1)

        self.scheduler.advance(399)
        self.assertEqual(self.samples, [])
        self.scheduler.advance(1)
        self.assertEqual(self.samples, [MotionSample(Position(50, 60), 600)])


if __name__ == "__main__":
    unittest.main()
