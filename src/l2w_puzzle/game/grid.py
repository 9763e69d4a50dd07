from __future__ import annotations

from enum import Enum
from typing import Iterable, Tuple

import numpy as np

from ..constants import GRID_SIZE
from .pieces import FallingPiece


Cell = Tuple[int, int]  # (row, col)


class Edge(str, Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


def create_empty_grid(size: int = GRID_SIZE) -> np.ndarray:
    return np.zeros((size, size), dtype=np.int8)


def is_inside(grid: np.ndarray, x: int, y: int) -> bool:
    h, w = grid.shape
    return 0 <= x < w and 0 <= y < h


def can_place(
    grid: np.ndarray,
    piece: FallingPiece,
    dx: int = 0,
    dy: int = 0,
    allow_overhang: bool = False,
) -> bool:
    """True iff every mask cell, shifted by (dx, dy), is in bounds and empty.

    With ``allow_overhang`` cells above the top row (y < 0) are accepted so
    a piece may spawn partly outside the board.
    """
    h, w = grid.shape
    for x, y in piece.cells_at(piece.x + dx, piece.y + dy):
        if x < 0 or x >= w or y >= h:
            return False
        if y < 0:
            if allow_overhang:
                continue
            return False
        if grid[y, x] != 0:
            return False
    return True


def place(grid: np.ndarray, piece: FallingPiece) -> np.ndarray:
    """Copy of ``grid`` with the piece written in as its colour index.

    Cells outside the board are skipped; callers check ``can_place`` first.
    """
    new_grid = grid.copy()
    value = piece.color_value
    for x, y in piece.cells():
        if is_inside(new_grid, x, y):
            new_grid[y, x] = value
    return new_grid


def remove_cells(grid: np.ndarray, cells: Iterable[Cell]) -> np.ndarray:
    new_grid = grid.copy()
    for row, col in cells:
        if is_inside(new_grid, col, row):
            new_grid[row, col] = 0
    return new_grid


def apply_gravity(grid: np.ndarray) -> np.ndarray:
    """Compact each column downwards, keeping the order of filled cells."""
    h, w = grid.shape
    new_grid = np.zeros_like(grid)
    for col in range(w):
        column = grid[:, col]
        filled = column[column != 0]
        if filled.size:
            new_grid[h - filled.size :, col] = filled
    return new_grid


def edge_cells(grid: np.ndarray, edge: Edge) -> np.ndarray:
    if edge == Edge.TOP:
        return grid[0, :]
    if edge == Edge.BOTTOM:
        return grid[-1, :]
    if edge == Edge.LEFT:
        return grid[:, 0]
    return grid[:, -1]


def is_edge_full(grid: np.ndarray, edge: Edge) -> bool:
    """Phase A ends once the spawn edge holds any block."""
    return bool(np.any(edge_cells(grid, edge) != 0))
