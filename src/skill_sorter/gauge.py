from __future__ import annotations

from typing import Optional

from skill_sorter.core import LEFT, Direction


DEFAULT_MAX_PRESS_MS = 1000
MAX_POWER = 100.0


def power(start_ms: float, now_ms: float, max_duration_ms: float = DEFAULT_MAX_PRESS_MS) -> float:
    """
    power = min(100, 100 * elapsed / max_duration)

    Elapsed time below zero (clock skew) counts as zero.
    """
    if max_duration_ms <= 0:
        raise ValueError("max_duration_ms must be positive")
    elapsed = now_ms - start_ms
    if elapsed <= 0:
        return 0.0
    return min(MAX_POWER, MAX_POWER * elapsed / max_duration_ms)


def power_copy(level: float, direction: Optional[Direction]) -> str:
    if level < 34:
        return "Meh"
    if direction == LEFT:
        return "Nah" if level < 67 else "Hell no!"
    return "Yeah" if level < 67 else "Yuuus!"


class PressGauge:
    """
    Tracks a single hold.

    The first direction pressed owns the hold: pressing the other direction
    while held is ignored, and so is releasing it. Only releasing the owning
    direction yields a committed level.
    """

    def __init__(self, max_duration_ms: float = DEFAULT_MAX_PRESS_MS) -> None:
        if max_duration_ms <= 0:
            raise ValueError("max_duration_ms must be positive")
        self.max_duration_ms = max_duration_ms
        self.direction: Optional[Direction] = None
        self.start_ms: Optional[float] = None
        self.level: float = 0.0

    @property
    def is_pressing(self) -> bool:
        return self.start_ms is not None

    def press(self, direction: Direction, now_ms: float) -> bool:
        if self.is_pressing:
            return False
        self.direction = direction
        self.start_ms = now_ms
        self.level = 0.0
        return True

    def sample(self, now_ms: float) -> float:
        if self.start_ms is None:
            return self.level
        # never move backwards while held
        self.level = max(self.level, power(self.start_ms, now_ms, self.max_duration_ms))
        return self.level

    def release(self, direction: Direction, now_ms: float) -> Optional[float]:
        if not self.is_pressing or direction != self.direction:
            return None
        level = self.sample(now_ms)
        self.cancel()
        return level

    def cancel(self) -> None:
        self.direction = None
        self.start_ms = None
        self.level = 0.0
