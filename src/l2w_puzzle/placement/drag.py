from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..constants import BlockType
from .engine import PartBEngine
from .logic import Cell, PlacementResult, PlacementStatus, piece_cells


logger = logging.getLogger(__name__)


# Where a piece dragged out of a counter is held, relative to its anchor
COUNTER_GRAB_OFFSET: Tuple[int, int] = (1, 1)


class DragSource(str, Enum):
    COUNTER = "counter"
    BOARD = "board"


@dataclass
class DragState:
    source: DragSource
    kind: BlockType
    rotation: int
    offset: Tuple[int, int]
    piece_id: Optional[int] = None
    origin: Optional[Cell] = None
    pointer: Optional[Cell] = None
    has_moved: bool = False

    def anchor_for(self, cell: Cell) -> Cell:
        return cell[0] - self.offset[0], cell[1] - self.offset[1]


@dataclass
class ConflictState:
    piece_id: Optional[int] = None
    cells: List[Cell] = field(default_factory=list)
    blocking_ids: List[int] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self.cells)


@dataclass
class DragPreview:
    cells: List[Cell]
    result: PlacementResult


class DragController:
    """Translates grab / move_to / release pointer intents into Phase B engine calls.

    Works in board cells; mapping screen points to cells is the frontend's job.
    A release of ``None`` means the pointer left the board.
    """

    def __init__(self, engine: PartBEngine) -> None:
        self.engine = engine
        self.drag: Optional[DragState] = None
        self.conflict = ConflictState()

    # ---------- Conflict feedback ----------
    def clear_conflict(self) -> None:
        self.conflict = ConflictState()

    def _record_conflict(self, piece_id: Optional[int], result: PlacementResult) -> None:
        if result.status == PlacementStatus.CONFLICT:
            self.conflict = ConflictState(piece_id, list(result.conflicts), list(result.blocking_ids))

    def blocking_cells(self) -> List[Cell]:
        cells: List[Cell] = []
        for piece_id in self.conflict.blocking_ids:
            piece = self.engine.find_piece(piece_id)
            if piece is not None:
                cells.extend(piece.cells())
        return cells

    def can_interact(self, piece_id: Optional[int] = None) -> bool:
        """While a piece is stuck in conflict only that piece may be picked up."""
        if self.engine.finished:
            return False
        if piece_id is not None:
            piece = self.engine.find_piece(piece_id)
            if piece is None or self.engine.is_locked(piece):
                return False
        if self.conflict.piece_id is None:
            return True
        return piece_id == self.conflict.piece_id

    # ---------- Pointer intents ----------
    def grab_counter(self, kind: BlockType) -> bool:
        if not self.can_interact() or self.engine.available(kind) <= 0:
            return False
        self.drag = DragState(DragSource.COUNTER, kind, 0, COUNTER_GRAB_OFFSET)
        return True

    def grab_board(self, row: int, col: int) -> bool:
        piece = self.engine.find_piece_at(row, col)
        if piece is None or not self.can_interact(piece.id):
            return False
        self.clear_conflict()
        self.drag = DragState(
            DragSource.BOARD,
            piece.kind,
            piece.rotation,
            (row - piece.row, col - piece.col),
            piece_id=piece.id,
            origin=(row, col),
            pointer=(row, col),
        )
        return True

    def move_to(self, row: int, col: int) -> None:
        drag = self.drag
        if drag is None:
            return
        drag.pointer = (row, col)
        if drag.origin is not None and (row, col) != drag.origin:
            drag.has_moved = True

    def preview(self) -> Optional[DragPreview]:
        """Cells under the pointer and whether dropping there would succeed."""
        drag = self.drag
        if drag is None or drag.pointer is None:
            return None
        row, col = drag.anchor_for(drag.pointer)
        result = self.engine.validate(drag.kind, row, col, drag.rotation, ignore_id=drag.piece_id)
        return DragPreview(piece_cells(drag.kind, row, col, drag.rotation), result)

    def release(self, cell: Optional[Cell]) -> Optional[PlacementResult]:
        drag = self.drag
        self.drag = None
        if drag is None:
            return None

        if drag.source == DragSource.BOARD and drag.piece_id is not None:
            if cell is None:
                result = self.engine.remove_piece(drag.piece_id)
                self.clear_conflict()
                return result
            if not drag.has_moved and cell == drag.origin:
                result = self.engine.rotate_piece(drag.piece_id)
            else:
                row, col = drag.anchor_for(cell)
                result = self.engine.move_existing(drag.piece_id, row, col)
            self._settle(drag.piece_id, result)
            return result

        if cell is None:
            return None
        row, col = drag.anchor_for(cell)
        result = self.engine.place_new(drag.kind, row, col, drag.rotation)
        self._settle(None, result)
        return result

    def cancel(self) -> None:
        self.drag = None
        self.clear_conflict()

    def _settle(self, piece_id: Optional[int], result: PlacementResult) -> None:
        if result.ok:
            self.clear_conflict()
        else:
            logger.debug("drop rejected: %s", result.status.value)
            self._record_conflict(piece_id, result)
