from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from tools.shake_replay import replay_payload


def _zigzag(start_ms: int, end_ms: int, step_ms: int = 100, amplitude: int = 40) -> list[dict[str, int]]:
    points = []
    for index, t in enumerate(range(start_ms, end_ms, step_ms)):
        points.append({"x": 200 + (amplitude if index % 2 else 0), "y": 200, "t_ms": t})
    return points


class ShakeReplayTest(unittest.TestCase):
    def test_reports_shake_lifecycle(self) -> None:
        points = [{"x": 200, "y": 200, "t_ms": 0}]
        points += _zigzag(350, 1_950, step_ms=400)
        points.append({"x": 600, "y": 600, "t_ms": 2_000})
        points.append({"x": 600, "y": 600, "t_ms": 4_000})

        events = replay_payload({"points": points})

        self.assertEqual([event["event"] for event in events], ["shakestart", "shakeend"])
        self.assertEqual(events[0]["t_ms"], 1_600)
        self.assertEqual(events[1]["t_ms"], 2_400)

    def test_payload_settings_and_overrides(self) -> None:
        points = [{"x": 0, "y": 0, "t_ms": 0}]
        points += [{"x": 5 if i % 2 else 0, "y": 0, "t_ms": 50 * (i + 1)} for i in range(10)]
        payload = {"points": points, "check_interval_ms": 50, "sensitivity_px": 3, "min_duration_ms": 100}

        self.assertEqual([e["event"] for e in replay_payload(payload)], ["shakestart", "shakeend"])
        self.assertEqual(replay_payload(payload, sensitivity_px=5), [])

    def test_rejects_empty_trajectory(self) -> None:
        with self.assertRaises(ValueError):
            replay_payload({"points": [{"x": "?", "y": 0}]})


if __name__ == "__main__":
    unittest.main()
