from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..config import GameConfig
from ..constants import BlockType
from ..scheduler import Scheduler, TimerHandle
from ..state import GameState, counter_target, DeltaTarget
from .controls import DROP_INTENTS, Intent
from .generator import PieceGenerator
from .grid import apply_gravity, can_place, create_empty_grid, is_edge_full, place, remove_cells
from .orientation import (
    DIRECTION_VECTORS,
    Direction,
    OrientationProfile,
    fall_direction,
    horizontal_movement,
    profile_for_level,
    rotation_for_level,
    vertical_movement,
)
from .patterns import Offset, detect_l_blocks, has_l_blocks, l_patterns
from .pieces import FallingPiece
from .rules import ScoringRules, fall_interval


logger = logging.getLogger(__name__)


@dataclass
class ClearResult:
    grid: np.ndarray
    rfb_count: int = 0
    lfb_count: int = 0
    score: int = 0
    cleared: List[Tuple[BlockType, List[Offset]]] = field(default_factory=list)


class PartAEngine:
    """Falling-piece phase: pieces drop in the level's direction and L-blocks are cleared for counters.

    Automatic falling runs on a repeating scheduler timer. When a piece
    locks it is committed at once and the active piece is cleared; the
    clear loop, the termination check and the next spawn run after a short
    cosmetic delay when an L-block is showing, immediately otherwise.
    """

    TIMER_GROUP = "partA"

    def __init__(
        self,
        state: Optional[GameState] = None,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        scheduler: Optional[Scheduler] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.state = state or GameState()
        self.scheduler = scheduler or Scheduler()
        self.on_finished = on_finished
        self.rng = random.Random(self.config.random_seed)
        self.generator = PieceGenerator(self.rng, self.config.grid_size)
        self.grid = create_empty_grid(self.config.grid_size)
        self.current_piece: Optional[FallingPiece] = None
        self.next_piece: Optional[FallingPiece] = None
        self.last_color: Optional[str] = None
        self.started = False
        self.finished = False
        self.resolving = False
        self._fall_timer: Optional[TimerHandle] = None

    # ---------- Level-derived rules ----------
    @property
    def level(self) -> int:
        return self.state.level

    @property
    def rotation(self) -> int:
        return rotation_for_level(self.level)

    @property
    def profile(self) -> OrientationProfile:
        return profile_for_level(self.level)

    @property
    def fall_interval_ms(self) -> int:
        if self.config.fall_interval_ms is not None:
            return self.config.fall_interval_ms
        return fall_interval(self.level)

    # ---------- Lifecycle ----------
    def start(self) -> None:
        self.stop()
        self.grid = create_empty_grid(self.config.grid_size)
        first = self.generator.generate(None, self.level)
        second = self.generator.generate(first.color, self.level)
        self.current_piece = first
        self.next_piece = second
        self.last_color = None
        self.started = True
        self.finished = False
        self.resolving = False
        self._fall_timer = self.scheduler.call_every(self.fall_interval_ms, self.tick, self.TIMER_GROUP)
        logger.debug("part A started at level %d (rotation %d)", self.level, self.rotation)

    def stop(self) -> None:
        """Cancel the fall timer and any pending lock resolution."""
        self.scheduler.cancel_group(self.TIMER_GROUP)
        self._fall_timer = None
        self.started = False
        self.resolving = False
        self.current_piece = None

    # ---------- Movement ----------
    def _can_place(self, piece: FallingPiece, dx: int = 0, dy: int = 0) -> bool:
        return can_place(self.grid, piece, dx, dy, self.config.allow_spawn_overhang)

    def _try_move(self, dx: int, dy: int) -> bool:
        piece = self.current_piece
        if piece is None or not self.started:
            return False
        if self._can_place(piece, dx, dy):
            self.current_piece = piece.moved(dx, dy)
            return True
        return False

    def tick(self) -> bool:
        """One automatic fall step. Returns True if the piece moved."""
        piece = self.current_piece
        if piece is None or not self.started:
            return False
        dx, dy = fall_direction(self.rotation)
        if self._try_move(dx, dy):
            return True
        self._lock(piece)
        return False

    def move_left(self) -> bool:
        return self._try_move(*horizontal_movement(self.rotation, Direction.LEFT))

    def move_right(self) -> bool:
        return self._try_move(*horizontal_movement(self.rotation, Direction.RIGHT))

    def move_vertical(self, direction: Direction) -> bool:
        if not self.profile.vertical_moves:
            return False
        return self._try_move(*vertical_movement(self.rotation, direction))

    def move_down(self) -> bool:
        """Step once in the fall direction, locking the piece if it is blocked."""
        return self.tick()

    def drop(self) -> bool:
        return self.drop_in_direction(self.profile.fall)

    def drop_in_direction(self, direction: Direction) -> bool:
        """Slide as far as possible towards ``direction`` and lock there."""
        piece = self.current_piece
        if piece is None or not self.started:
            return False
        dx, dy = DIRECTION_VECTORS[direction]
        steps = 0
        while steps < self.config.grid_size and self._can_place(piece, dx, dy):
            piece = piece.moved(dx, dy)
            steps += 1
        self._lock(piece)
        return True

    def rotate(self) -> bool:
        piece = self.current_piece
        if piece is None or not self.started:
            return False
        rotated = piece.rotated()
        if self._can_place(rotated):
            self.current_piece = rotated
            return True
        return False

    def apply(self, intent: Intent) -> bool:
        if intent == Intent.MOVE_LEFT:
            return self.move_left()
        if intent == Intent.MOVE_RIGHT:
            return self.move_right()
        if intent == Intent.MOVE_UP:
            return self.move_vertical(Direction.UP)
        if intent == Intent.MOVE_DOWN:
            return self.move_vertical(Direction.DOWN)
        if intent == Intent.SOFT_DROP:
            return self.move_down()
        if intent == Intent.HARD_DROP:
            return self.drop()
        if intent in DROP_INTENTS:
            return self.drop_in_direction(DROP_INTENTS[intent])
        if intent == Intent.ROTATE:
            return self.rotate()
        return False

    # ---------- Locking and clearing ----------
    def _lock(self, piece: FallingPiece) -> None:
        self.grid = place(self.grid, piece)
        # The piece now lives in the grid only
        self.current_piece = None
        self.last_color = piece.color
        self.resolving = True
        showing = has_l_blocks(self.grid, self.config.l_block_size, self.config.same_color_l_blocks)
        delay = self.config.l_clear_delay_ms if showing else 0
        logger.debug("locked %s at (%d, %d); resolving in %d ms", piece.kind.name, piece.x, piece.y, delay)
        self.scheduler.call_later(delay, self._resolve_lock, self.TIMER_GROUP)

    def clear_l_blocks(self, grid: np.ndarray) -> ClearResult:
        """Clear L-blocks one at a time, LFB before RFB, until none is left."""
        patterns = l_patterns(self.config.l_block_size)
        result = ClearResult(grid=grid)
        while True:
            for kind in (BlockType.LFB, BlockType.RFB):
                matches = detect_l_blocks(result.grid, patterns[kind], self.config.same_color_l_blocks)
                if matches:
                    cells = matches[0]
                    result.grid = remove_cells(result.grid, cells)
                    if self.config.gravity_after_clear:
                        result.grid = apply_gravity(result.grid)
                    if kind == BlockType.LFB:
                        result.lfb_count += 1
                    else:
                        result.rfb_count += 1
                    result.score += self.rules.score_for_l_block(kind)
                    result.cleared.append((kind, cells))
                    break
            else:
                return result

    def _resolve_lock(self) -> None:
        self.resolving = False
        result = self.clear_l_blocks(self.grid)
        self.grid = result.grid
        for kind, cells in result.cleared:
            logger.debug("cleared %s at %s", kind.value, cells[0])
            self.state.enqueue(counter_target(kind), 1)
            self.state.enqueue(DeltaTarget.SCORE, self.rules.score_for_l_block(kind))
        self.state.flush()

        if is_edge_full(self.grid, self.profile.spawn_edge):
            self._finish("spawn edge reached")
            return

        promoted = self.next_piece or self.generator.generate(self.last_color, self.level)
        promoted = self.generator.respawn(promoted, self.level)
        if not self._can_place(promoted):
            self._finish("spawn blocked")
            return
        self.current_piece = promoted
        self.next_piece = self.generator.generate(promoted.color, self.level)

    def _finish(self, reason: str) -> None:
        logger.info("part A over at level %d: %s", self.level, reason)
        self.stop()
        self.finished = True
        if self.on_finished is not None:
            self.on_finished()

    # ---------- Observation ----------
    def get_state(self) -> np.ndarray:
        """Grid copy with the active piece overlaid as negative colour indices."""
        state = self.grid.copy()
        piece = self.current_piece
        if piece is not None:
            h, w = state.shape
            for x, y in piece.cells():
                if 0 <= y < h and 0 <= x < w:
                    state[y, x] = -piece.color_value
        return state
