from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

try:
    from core.motion import Position
    from core.scheduler import ManualScheduler
    from core.shake_detector import ShakeDetector
except ModuleNotFoundError:
    from ..core.motion import Position
    from ..core.scheduler import ManualScheduler
    from ..core.shake_detector import ShakeDetector


class _RecordedWindow:
    """Reports the last recorded position at or before the scheduler's clock."""

    def __init__(self, points: list[tuple[int, int, int]], scheduler: ManualScheduler):
        self._points = points
        self._scheduler = scheduler

    def screen_position(self) -> Position:
        now = self._scheduler.now_ms()
        current = self._points[0]
        for point in self._points:
            if point[2] > now:
                break
            current = point
        return Position(current[0], current[1])


def _extract_points(payload: dict[str, Any]) -> list[tuple[int, int, int]]:
    raw_points = payload.get("points")
    if not isinstance(raw_points, list):
        return []
    points: list[tuple[int, int, int]] = []
    for item in raw_points:
        if not isinstance(item, dict):
            continue
        try:
            points.append((int(round(float(item["x"]))), int(round(float(item["y"]))), int(item["t_ms"])))
        except (KeyError, TypeError, ValueError):
            continue
    points.sort(key=lambda point: point[2])
    return points


def replay_payload(
    payload: dict[str, Any],
    *,
    min_duration_ms: int | None = None,
    sensitivity_px: int | None = None,
    check_interval_ms: int | None = None,
) -> list[dict[str, Any]]:
    """Run a recorded trajectory through a ShakeDetector and list its events."""
    points = _extract_points(payload)
    if not points:
        raise ValueError("Input trajectory has no valid points.")

    def _setting(override: int | None, key: str, default: int) -> int:
        if override is not None:
            return int(override)
        return int(payload.get(key, default))

    scheduler = ManualScheduler(start_ms=points[0][2])
    detector = ShakeDetector(
        scheduler,
        min_duration_ms=_setting(min_duration_ms, "min_duration_ms", ShakeDetector.DEFAULT_MIN_DURATION_MS),
        sensitivity_px=_setting(sensitivity_px, "sensitivity_px", ShakeDetector.DEFAULT_SENSITIVITY_PX),
        check_interval_ms=_setting(check_interval_ms, "check_interval_ms", ShakeDetector.DEFAULT_CHECK_INTERVAL_MS),
    )
    events: list[dict[str, Any]] = []
    detector.shake_started.connect(lambda: events.append({"event": "shakestart", "t_ms": scheduler.now_ms()}))
    detector.shake_ended.connect(lambda: events.append({"event": "shakeend", "t_ms": scheduler.now_ms()}))

    window = _RecordedWindow(points, scheduler)
    detector.attach(window)
    scheduler.advance_to(points[-1][2] + detector.check_interval_ms)
    detector.detach()
    return events


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Replay a recorded window trajectory through the shake detector.",
    )
    parser.add_argument("input", help='Trajectory json path: {"points": [{"x", "y", "t_ms"}, ...]}')
    parser.add_argument("--min-duration-ms", type=int, default=None)
    parser.add_argument("--sensitivity-px", type=int, default=None)
    parser.add_argument("--check-interval-ms", type=int, default=None)
    args = parser.parse_args()

    input_path = Path(args.input).expanduser().resolve()
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    payload = json.loads(input_path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Input trajectory JSON must be an object.")

    events = replay_payload(
        payload,
        min_duration_ms=args.min_duration_ms,
        sensitivity_px=args.sensitivity_px,
        check_interval_ms=args.check_interval_ms,
    )
    for event in events:
        print(f"{event['t_ms']:>8} ms  {event['event']}")
    if not events:
        print("no shake detected")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
