from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np

from ..constants import color_index


class ShapeType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    L = 6
    J = 7
    C = 8
    P = 9


Mask = np.ndarray


BASE_SHAPES: Dict[ShapeType, Mask] = {
    ShapeType.I: np.array([[1, 1, 1, 1]], dtype=np.int8),
    ShapeType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    ShapeType.T: np.array([[0, 1, 0], [1, 1, 1]], dtype=np.int8),
    ShapeType.S: np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8),
    ShapeType.Z: np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8),
    ShapeType.L: np.array([[1, 0], [1, 0], [1, 1]], dtype=np.int8),
    ShapeType.J: np.array([[0, 1], [0, 1], [1, 1]], dtype=np.int8),
    ShapeType.C: np.array([[1, 1], [1, 0], [1, 1]], dtype=np.int8),
    ShapeType.P: np.array([[1, 1], [1, 1], [1, 0]], dtype=np.int8),
}


def rotate_mask(mask: Mask) -> Mask:
    """Rotate a cell mask 90 degrees clockwise."""
    return np.ascontiguousarray(np.rot90(mask, 1, axes=(1, 0)))


@dataclass(eq=False)
class FallingPiece:
    """The active Phase A piece: a mask anchored by its top-left corner at (x, y)."""

    kind: ShapeType
    color: str
    mask: Mask
    x: int = 0
    y: int = 0

    @property
    def color_value(self) -> int:
        return color_index(self.color)

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        cells: List[Tuple[int, int]] = []
        for dy in range(self.height):
            for dx in range(self.width):
                if self.mask[dy, dx]:
                    cells.append((origin_x + dx, origin_y + dy))
        return cells

    def cells(self) -> List[Tuple[int, int]]:
        return self.cells_at(self.x, self.y)

    def moved(self, dx: int, dy: int) -> "FallingPiece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self) -> "FallingPiece":
        return replace(self, mask=rotate_mask(self.mask))

    def at(self, x: int, y: int) -> "FallingPiece":
        return replace(self, x=x, y=y)

    def same_as(self, other: "FallingPiece") -> bool:
        return (
            self.kind == other.kind
            and self.color == other.color
            and self.x == other.x
            and self.y == other.y
            and np.array_equal(self.mask, other.mask)
        )
