from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set

import numpy as np

from ..config import CompletionRule, GameConfig
from ..constants import BlockType
from ..game.rules import ScoringRules
from ..state import GameState, counter_target
from .logic import (
    Cell,
    PlacedPiece,
    PlacementResult,
    PlacementStatus,
    build_grid_from_pieces,
    can_place_piece_type,
    next_rotation,
    normalize_rotation,
    validate_placement,
)
from .wblocks import RescanResult, WBlockTracker


logger = logging.getLogger(__name__)


class PartBOutcome(str, Enum):
    RESOLVED = "resolved"  # every piece on the board belongs to a W-block
    UNRESOLVED = "unresolved"
    TIME_UP = "timeUp"


class PartBEngine:
    """Placement phase: counters are spent on RFB/LFB pieces that pair into W-blocks.

    Pieces keep their identity on the board. Every successful change is
    followed by a W-block rescan, the queued deltas are flushed into the
    shared state and the completion rule is evaluated. From
    ``config.w_lock_level`` on, pieces in a W-block can no longer be moved,
    rotated or removed.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        prefilled: Optional[Iterable[Cell]] = None,
        on_finished: Optional[Callable[[PartBOutcome], None]] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.state = state or GameState()
        self.prefilled: Set[Cell] = set(prefilled or ())
        self.on_finished = on_finished
        self.tracker = WBlockTracker(self.rules)
        self.pieces: List[PlacedPiece] = []
        self._next_id = 1
        self.finished = False
        self.outcome: Optional[PartBOutcome] = None
        self.last_rescan = RescanResult()

    @property
    def size(self) -> int:
        return self.config.grid_size

    @property
    def level(self) -> int:
        return self.state.level

    @property
    def grid(self) -> np.ndarray:
        return build_grid_from_pieces(self.pieces, self.size, self.prefilled)

    def available(self, kind: BlockType) -> int:
        return self.state.counter(kind)

    # ---------- Lookup ----------
    def find_piece(self, piece_id: int) -> Optional[PlacedPiece]:
        for piece in self.pieces:
            if piece.id == piece_id:
                return piece
        return None

    def find_piece_at(self, row: int, col: int) -> Optional[PlacedPiece]:
        for piece in self.pieces:
            if (row, col) in piece.cells():
                return piece
        return None

    def is_locked(self, piece: PlacedPiece) -> bool:
        return piece.is_w_block and self.level >= self.config.w_lock_level

    def can_interact(self, piece_id: int) -> bool:
        piece = self.find_piece(piece_id)
        return piece is not None and not self.finished and not self.is_locked(piece)

    def unresolved_pieces(self) -> List[PlacedPiece]:
        return [p for p in self.pieces if not p.is_w_block]

    # ---------- Validation ----------
    def validate(
        self,
        kind: BlockType,
        row: int,
        col: int,
        rotation: int = 0,
        ignore_id: Optional[int] = None,
    ) -> PlacementResult:
        return validate_placement(
            kind, row, col, normalize_rotation(rotation), self.pieces, self.size, self.prefilled, ignore_id
        )

    # ---------- Operations ----------
    def place_new(self, kind: BlockType, row: int, col: int, rotation: int = 0) -> PlacementResult:
        if self.finished:
            return PlacementResult(PlacementStatus.FINISHED)
        if self.available(kind) <= 0:
            return PlacementResult(PlacementStatus.NO_COUNTER)
        rotation = normalize_rotation(rotation)
        result = self.validate(kind, row, col, rotation)
        if not result.ok:
            return result
        piece = PlacedPiece(self._next_id, kind, row, col, rotation)
        self._next_id += 1
        self.pieces.append(piece)
        self.state.enqueue(counter_target(kind), -1)
        logger.debug("placed %s #%d at (%d, %d) rotation %d", kind.value, piece.id, row, col, rotation)
        self._after_change()
        return PlacementResult(PlacementStatus.OK, piece=piece)

    def move_existing(self, piece_id: int, row: int, col: int) -> PlacementResult:
        if self.finished:
            return PlacementResult(PlacementStatus.FINISHED)
        piece = self.find_piece(piece_id)
        if piece is None:
            return PlacementResult(PlacementStatus.NOT_FOUND)
        if self.is_locked(piece):
            return PlacementResult(PlacementStatus.LOCKED, piece=piece)
        result = self.validate(piece.kind, row, col, piece.rotation, ignore_id=piece.id)
        if not result.ok:
            result.piece = piece
            return result
        piece.row, piece.col = row, col
        self._after_change()
        return PlacementResult(PlacementStatus.OK, piece=piece)

    def rotate_piece(self, piece_id: int, rotation: Optional[int] = None) -> PlacementResult:
        """Rotate in place about the anchor, by default one step clockwise."""
        if self.finished:
            return PlacementResult(PlacementStatus.FINISHED)
        piece = self.find_piece(piece_id)
        if piece is None:
            return PlacementResult(PlacementStatus.NOT_FOUND)
        if self.is_locked(piece):
            return PlacementResult(PlacementStatus.LOCKED, piece=piece)
        target = next_rotation(piece.rotation) if rotation is None else normalize_rotation(rotation)
        result = self.validate(piece.kind, piece.row, piece.col, target, ignore_id=piece.id)
        if not result.ok:
            result.piece = piece
            return result
        piece.rotation = target
        self._after_change()
        return PlacementResult(PlacementStatus.OK, piece=piece)

    def remove_piece(self, piece_id: int) -> PlacementResult:
        if self.finished:
            return PlacementResult(PlacementStatus.FINISHED)
        piece = self.find_piece(piece_id)
        if piece is None:
            return PlacementResult(PlacementStatus.NOT_FOUND)
        if self.is_locked(piece):
            return PlacementResult(PlacementStatus.LOCKED, piece=piece)
        self.pieces.remove(piece)
        self.state.enqueue(counter_target(piece.kind), 1)
        logger.debug("removed %s #%d", piece.kind.value, piece.id)
        self._after_change()
        return PlacementResult(PlacementStatus.OK, piece=piece)

    def rescan(self) -> RescanResult:
        """Re-detect W-blocks and apply any resulting score changes."""
        self.last_rescan = self.tracker.rescan(self.pieces, self.state)
        self.state.flush()
        return self.last_rescan

    def _after_change(self) -> None:
        self.rescan()
        self.evaluate_completion()

    # ---------- Completion ----------
    def is_complete(self) -> bool:
        if self.config.completion_rule == CompletionRule.PERMISSIVE:
            return self._permissive_done()
        return self._strict_done()

    def _strict_done(self) -> bool:
        rfb, lfb = self.available(BlockType.RFB), self.available(BlockType.LFB)
        return rfb == 0 and lfb == 0 and not self.unresolved_pieces()

    def _permissive_done(self) -> bool:
        for empty, other in ((BlockType.LFB, BlockType.RFB), (BlockType.RFB, BlockType.LFB)):
            if self.available(empty) != 0:
                continue
            waiting = [p for p in self.unresolved_pieces() if p.kind == empty]
            if not waiting:
                return True
            partners_on_board = any(p.kind == other for p in self.unresolved_pieces())
            other_in_counter = self.available(other) > 0
            if not other_in_counter and not partners_on_board:
                return True
            if other_in_counter and not can_place_piece_type(other, self.pieces, self.size, self.prefilled):
                return True
        return False

    def evaluate_completion(self) -> Optional[PartBOutcome]:
        if self.finished or not self.is_complete():
            return None
        outcome = PartBOutcome.UNRESOLVED if self.unresolved_pieces() else PartBOutcome.RESOLVED
        self._finish(outcome)
        return outcome

    def time_up(self) -> None:
        if not self.finished:
            self._finish(PartBOutcome.TIME_UP)

    def _finish(self, outcome: PartBOutcome) -> None:
        self.finished = True
        self.outcome = outcome
        logger.info("part B over at level %d: %s", self.level, outcome.value)
        if self.on_finished is not None:
            self.on_finished(outcome)

    # ---------- Lifecycle ----------
    def resume(self) -> None:
        """Re-open the board after a round trip through Phase A."""
        self.finished = False
        self.outcome = None

    def reset_board(self, prefilled: Optional[Iterable[Cell]] = None) -> None:
        self.pieces = []
        self.tracker.reset()
        if prefilled is not None:
            self.prefilled = set(prefilled)
        self.finished = False
        self.outcome = None
        self.last_rescan = RescanResult()
