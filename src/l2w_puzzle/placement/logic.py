from __future__ import annotations

"""
Phase B placement rules
RFB and LFB pieces live on the board as persistent entities; every change is
validated against board bounds, pre-filled cells and the other pieces.
"""

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..constants import GRID_SIZE, ROTATIONS, BlockType, CellValue


Cell = Tuple[int, int]  # (row, col)


class PlacementShapes:
    """Static Phase B shape definitions"""

    # Base shapes (rotation 0)
    SHAPES = {
        BlockType.RFB: np.array([[1, 0, 0], [1, 1, 1]], dtype=int),
        BlockType.LFB: np.array([[0, 0, 1], [0, 0, 1], [1, 1, 1]], dtype=int),
    }

    @classmethod
    def get_shape(cls, kind: BlockType, rotation: int = 0) -> np.ndarray:
        """Shape rotated clockwise by ``rotation`` degrees"""
        shape = cls.SHAPES[kind].copy()
        for _ in range((rotation // 90) % 4):
            shape = np.rot90(shape, 1, axes=(1, 0))
        return shape


def normalize_rotation(rotation: int) -> int:
    return (int(rotation) // 90 % 4) * 90


def next_rotation(rotation: int) -> int:
    return normalize_rotation(rotation + 90)


def piece_cells(kind: BlockType, row: int, col: int, rotation: int = 0) -> List[Cell]:
    """Absolute cells covered by a piece anchored (top-left) at (row, col)"""
    shape = PlacementShapes.get_shape(kind, rotation)
    cells: List[Cell] = []
    for r in range(shape.shape[0]):
        for c in range(shape.shape[1]):
            if shape[r, c]:
                cells.append((row + r, col + c))
    return cells


@dataclass
class PlacedPiece:
    """A piece on the Phase B board"""
    id: int
    kind: BlockType
    row: int
    col: int
    rotation: int = 0
    is_w_block: bool = False

    def cells(self) -> List[Cell]:
        return piece_cells(self.kind, self.row, self.col, self.rotation)


class PlacementStatus(str, Enum):
    OK = "ok"
    CONFLICT = "conflict"
    LOCKED = "locked"
    NO_COUNTER = "noCounter"
    NOT_FOUND = "notFound"
    FINISHED = "finished"  # the phase is over; the board is read-only


@dataclass
class PlacementResult:
    """Outcome of a placement, move, rotation or removal.

    ``conflicts`` and ``blocking_ids`` are only filled for CONFLICT; a
    blocking pre-filled cell shows up in ``conflicts`` without an id.
    """
    status: PlacementStatus
    piece: Optional[PlacedPiece] = None
    conflicts: List[Cell] = field(default_factory=list)
    blocking_ids: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == PlacementStatus.OK

    def __bool__(self) -> bool:
        return self.ok


def occupancy(pieces: Iterable[PlacedPiece], ignore_id: Optional[int] = None) -> Dict[Cell, int]:
    """Cell -> id of the piece covering it"""
    owners: Dict[Cell, int] = {}
    for piece in pieces:
        if piece.id == ignore_id:
            continue
        for cell in piece.cells():
            owners[cell] = piece.id
    return owners


def validate_placement(
    kind: BlockType,
    row: int,
    col: int,
    rotation: int,
    pieces: Sequence[PlacedPiece],
    size: int = GRID_SIZE,
    prefilled: Optional[Set[Cell]] = None,
    ignore_id: Optional[int] = None,
) -> PlacementResult:
    """Check a candidate against bounds, pre-filled cells and the other pieces.

    Pure: nothing is mutated. The piece ``ignore_id`` is left out so a
    piece can be validated at its own new position.
    """
    prefilled = prefilled or set()
    owners = occupancy(pieces, ignore_id)
    conflicts: List[Cell] = []
    blocking: List[int] = []
    for cell in piece_cells(kind, row, col, rotation):
        r, c = cell
        if r < 0 or r >= size or c < 0 or c >= size:
            conflicts.append(cell)
        elif cell in prefilled:
            conflicts.append(cell)
        elif cell in owners:
            conflicts.append(cell)
            if owners[cell] not in blocking:
                blocking.append(owners[cell])
    if conflicts:
        return PlacementResult(PlacementStatus.CONFLICT, conflicts=conflicts, blocking_ids=blocking)
    return PlacementResult(PlacementStatus.OK)


def build_grid_from_pieces(
    pieces: Iterable[PlacedPiece],
    size: int = GRID_SIZE,
    prefilled: Optional[Set[Cell]] = None,
) -> np.ndarray:
    grid = np.zeros((size, size), dtype=np.int8)
    for r, c in prefilled or ():
        if 0 <= r < size and 0 <= c < size:
            grid[r, c] = CellValue.PREFILLED
    for piece in pieces:
        value = CellValue.RFB if piece.kind == BlockType.RFB else CellValue.LFB
        for r, c in piece.cells():
            if 0 <= r < size and 0 <= c < size:
                grid[r, c] = value
    return grid


def iter_valid_placements(
    kind: BlockType,
    pieces: Sequence[PlacedPiece],
    size: int = GRID_SIZE,
    prefilled: Optional[Set[Cell]] = None,
) -> Iterator[Tuple[int, int, int]]:
    """Valid (row, col, rotation) anchors for a new piece of ``kind``, rotation-major."""
    for rotation in ROTATIONS:
        for row in range(size):
            for col in range(size):
                if validate_placement(kind, row, col, rotation, pieces, size, prefilled).ok:
                    yield row, col, rotation


def can_place_piece_type(
    kind: BlockType,
    pieces: Sequence[PlacedPiece],
    size: int = GRID_SIZE,
    prefilled: Optional[Set[Cell]] = None,
) -> bool:
    return next(iter_valid_placements(kind, pieces, size, prefilled), None) is not None
