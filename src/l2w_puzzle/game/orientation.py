from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional, Tuple

from ..constants import GRID_SIZE
from .grid import Edge


Vector = Tuple[int, int]  # (dx, dy)


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


DIRECTION_VECTORS: Dict[Direction, Vector] = {
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
}


class Orientation(IntEnum):
    """Level rotation in degrees; pieces fall in the named direction."""

    DOWN = 0
    LEFT = 90
    UP = 180
    RIGHT = 270


@dataclass(frozen=True)
class OrientationProfile:
    orientation: Orientation
    fall: Direction
    spawn_edge: Edge
    vertical_moves: bool  # up/down intents move the piece sideways to its fall


PROFILES: Dict[Orientation, OrientationProfile] = {
    Orientation.DOWN: OrientationProfile(Orientation.DOWN, Direction.DOWN, Edge.TOP, False),
    Orientation.LEFT: OrientationProfile(Orientation.LEFT, Direction.LEFT, Edge.RIGHT, True),
    Orientation.UP: OrientationProfile(Orientation.UP, Direction.UP, Edge.BOTTOM, False),
    Orientation.RIGHT: OrientationProfile(Orientation.RIGHT, Direction.RIGHT, Edge.LEFT, True),
}

# Levels cycle every two: 1-2 down, 3-4 left, 5-6 right, 7-8 up
_BASE_LEVELS: Dict[int, Orientation] = {
    1: Orientation.DOWN,
    2: Orientation.DOWN,
    3: Orientation.LEFT,
    4: Orientation.LEFT,
    5: Orientation.RIGHT,
    6: Orientation.RIGHT,
    7: Orientation.UP,
    8: Orientation.UP,
}


def reduce_level(level: int) -> int:
    """Map any level onto 1..8. Levels from 9 up draw a level seeded by their own number."""
    if level < 1:
        return 1
    if level <= 8:
        return level
    return random.Random(level).randint(1, 8)


def orientation_for_level(level: int) -> Orientation:
    return _BASE_LEVELS[reduce_level(level)]


def rotation_for_level(level: int) -> int:
    return int(orientation_for_level(level))


def profile_for_level(level: int) -> OrientationProfile:
    return PROFILES[orientation_for_level(level)]


def fall_direction(rotation: int) -> Vector:
    return DIRECTION_VECTORS[PROFILES[Orientation(rotation)].fall]


def horizontal_movement(rotation: int, direction: Direction) -> Vector:
    # left/right stay literal whatever the fall direction
    if direction == Direction.LEFT:
        return (-1, 0)
    return (1, 0)


def vertical_movement(rotation: int, direction: Direction) -> Vector:
    dy = -1 if direction == Direction.UP else 1
    if Orientation(rotation) == Orientation.UP:
        dy = -dy
    return (0, dy)


def spawn_position(
    level: int,
    width: int,
    height: int,
    size: int = GRID_SIZE,
    rng: Optional[random.Random] = None,
) -> Tuple[int, int]:
    """Anchor for a new piece, flush against the edge it falls away from.

    The coordinate along that edge is centred on odd levels and uniformly
    random within the board on even levels.
    """
    profile = profile_for_level(level)
    rng = rng or random.Random()
    along_vertical_edge = profile.spawn_edge in (Edge.LEFT, Edge.RIGHT)
    extent = height if along_vertical_edge else width
    room = max(0, size - extent)
    if level % 2 == 1:
        lateral = min(room, size // 2 - extent // 2)
    else:
        lateral = rng.randint(0, room)

    if profile.spawn_edge == Edge.TOP:
        return lateral, 0
    if profile.spawn_edge == Edge.BOTTOM:
        return lateral, size - height
    if profile.spawn_edge == Edge.RIGHT:
        return size - width, lateral
    return 0, lateral
