from __future__ import annotations

from functools import lru_cache
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from ..constants import BlockType


Offset = Tuple[int, int]  # (row, col)
Pattern = Tuple[Offset, ...]


def normalize_pattern(cells: Iterable[Offset]) -> Pattern:
    """Translate cells to a zero-based bounding box and sort them row-major."""
    cells = list(cells)
    min_row = min(r for r, _ in cells)
    min_col = min(c for _, c in cells)
    return tuple(sorted((r - min_row, c - min_col) for r, c in cells))


def create_base_pattern(size: int, kind: BlockType) -> Pattern:
    """The ``size`` x ``size`` L: a full column plus the bottom row.

    RFB keeps its column on the left, LFB on the right.
    """
    cells: List[Offset] = []
    if kind == BlockType.RFB:
        cells.extend((row, 0) for row in range(size))
        cells.extend((size - 1, col) for col in range(1, size))
    else:
        cells.extend((row, size - 1) for row in range(size))
        cells.extend((size - 1, col) for col in range(size - 1))
    return normalize_pattern(dict.fromkeys(cells))


@lru_cache(maxsize=None)
def l_patterns(size: int = 3) -> Dict[BlockType, Tuple[Pattern, ...]]:
    return {kind: (create_base_pattern(size, kind),) for kind in BlockType}


def detect_l_blocks(
    grid: np.ndarray,
    patterns: Sequence[Pattern],
    same_color: bool = True,
) -> List[List[Offset]]:
    """All placements of ``patterns`` whose cells are filled.

    Matches are listed pattern by pattern, anchors row-major. With
    ``same_color`` every covered cell must also hold the same value.
    """
    h, w = grid.shape
    found: List[List[Offset]] = []
    for pattern in patterns:
        max_dy = max(dy for dy, _ in pattern)
        max_dx = max(dx for _, dx in pattern)
        for y in range(h - max_dy):
            for x in range(w - max_dx):
                cells = [(y + dy, x + dx) for dy, dx in pattern]
                values = [int(grid[r, c]) for r, c in cells]
                if any(v == 0 for v in values):
                    continue
                if same_color and any(v != values[0] for v in values):
                    continue
                found.append(cells)
    return found


def has_l_blocks(grid: np.ndarray, size: int = 3, same_color: bool = True) -> bool:
    patterns = l_patterns(size)
    return any(detect_l_blocks(grid, patterns[kind], same_color) for kind in BlockType)
