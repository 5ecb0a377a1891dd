from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Position:
    """Screen coordinates of a host window at one instant."""

    x: int
    y: int

    def delta(self, other: Position) -> int:
        # Per-axis displacement; diagonal moves are not boosted.
        return max(abs(self.x - other.x), abs(self.y - other.y))


@dataclass(frozen=True, slots=True)
class MotionSample:
    position: Position
    timestamp_ms: int


class WindowHandle(Protocol):
    """Anything whose screen position can be sampled."""

    def screen_position(self) -> Position: ...
