from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional

from .orientation import Direction, Orientation, orientation_for_level


class Intent(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    MOVE_UP = 2
    MOVE_DOWN = 3
    SOFT_DROP = 4
    HARD_DROP = 5
    DROP_LEFT = 6
    DROP_RIGHT = 7
    DROP_UP = 8
    DROP_DOWN = 9
    ROTATE = 10
    NONE = 11


DROP_INTENTS: Dict[Intent, Direction] = {
    Intent.DROP_LEFT: Direction.LEFT,
    Intent.DROP_RIGHT: Direction.RIGHT,
    Intent.DROP_UP: Direction.UP,
    Intent.DROP_DOWN: Direction.DOWN,
}


# Key codes follow the DOM KeyboardEvent.key names
KEYMAPS: Dict[Orientation, Dict[str, Intent]] = {
    Orientation.DOWN: {
        "ArrowLeft": Intent.MOVE_LEFT,
        "ArrowRight": Intent.MOVE_RIGHT,
        "ArrowUp": Intent.ROTATE,
        "ArrowDown": Intent.DROP_DOWN,
        " ": Intent.ROTATE,
    },
    Orientation.LEFT: {
        "ArrowLeft": Intent.DROP_LEFT,
        "ArrowRight": Intent.ROTATE,
        "ArrowUp": Intent.MOVE_UP,
        "ArrowDown": Intent.MOVE_DOWN,
        " ": Intent.ROTATE,
    },
    Orientation.RIGHT: {
        "ArrowLeft": Intent.ROTATE,
        "ArrowRight": Intent.DROP_RIGHT,
        "ArrowUp": Intent.MOVE_UP,
        "ArrowDown": Intent.MOVE_DOWN,
        " ": Intent.ROTATE,
    },
    Orientation.UP: {
        "ArrowLeft": Intent.MOVE_LEFT,
        "ArrowRight": Intent.MOVE_RIGHT,
        "ArrowUp": Intent.DROP_UP,
        "ArrowDown": Intent.ROTATE,
        " ": Intent.ROTATE,
    },
}


def intent_for_key(level: int, key: str) -> Optional[Intent]:
    return KEYMAPS[orientation_for_level(level)].get(key)


GESTURE_INTENTS: Dict[str, Intent] = {
    "tap": Intent.ROTATE,
    Direction.LEFT.value: Intent.MOVE_LEFT,
    Direction.RIGHT.value: Intent.MOVE_RIGHT,
    Direction.DOWN.value: Intent.HARD_DROP,
}


@dataclass
class _LastSwipe:
    direction: Direction
    time_ms: int


class GestureFilter:
    """Turns raw pan deltas into at most one intent per logical gesture.

    A swipe only fires again once its direction changes or the cooldown
    has passed; releasing the pointer clears that lock.
    """

    def __init__(self, cooldown_ms: int = 120, swipe_threshold: int = 30, tap_threshold: int = 10) -> None:
        self.cooldown_ms = cooldown_ms
        self.swipe_threshold = swipe_threshold
        self.tap_threshold = tap_threshold
        self._last: Optional[_LastSwipe] = None

    def classify_swipe(self, dx: float, dy: float) -> Optional[Direction]:
        adx, ady = abs(dx), abs(dy)
        if adx > ady and adx > self.swipe_threshold:
            return Direction.RIGHT if dx > 0 else Direction.LEFT
        if ady > adx and ady > self.swipe_threshold:
            return Direction.DOWN if dy > 0 else Direction.UP
        return None

    def on_move(self, dx: float, dy: float, now_ms: int) -> Optional[Intent]:
        direction = self.classify_swipe(dx, dy)
        if direction is None:
            return None
        last = self._last
        if last is not None and last.direction == direction and now_ms - last.time_ms <= self.cooldown_ms:
            return None
        self._last = _LastSwipe(direction, now_ms)
        return GESTURE_INTENTS.get(direction.value)

    def on_release(self, dx: float, dy: float) -> Optional[Intent]:
        self._last = None
        if abs(dx) < self.tap_threshold and abs(dy) < self.tap_threshold:
            return GESTURE_INTENTS["tap"]
        return None
