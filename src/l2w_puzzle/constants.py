from __future__ import annotations

from enum import Enum, IntEnum
from typing import Tuple


GRID_SIZE = 14

# Phase A palette; grid cells store palette index + 1
PIECE_COLORS: Tuple[str, ...] = (
    "#FF0000",  # red
    "#00FF00",  # green
    "#0000FF",  # blue
    "#FFFF00",  # yellow
    "#FF00FF",  # magenta
    "#00FFFF",  # cyan
    "#FFA500",  # orange
)

ROTATIONS: Tuple[int, ...] = (0, 90, 180, 270)


class BlockType(str, Enum):
    """Right- and left-facing L blocks, shared by both phases."""

    RFB = "RFB"
    LFB = "LFB"


class CellValue(IntEnum):
    """Phase B grid cell enumeration."""

    EMPTY = 0
    RFB = 1
    LFB = 2
    PREFILLED = 3


def color_index(color: str) -> int:
    """1-based grid value for a palette colour."""
    return PIECE_COLORS.index(color) + 1
