from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from ..constants import GRID_SIZE, PIECE_COLORS
from .orientation import spawn_position
from .pieces import BASE_SHAPES, FallingPiece, ShapeType


logger = logging.getLogger(__name__)


class PieceGenerator:
    """Random Phase A pieces: uniform shape, uniform colour never equal to the last one."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        size: int = GRID_SIZE,
        shapes: Optional[Sequence[ShapeType]] = None,
        palette: Sequence[str] = PIECE_COLORS,
    ) -> None:
        self.rng = rng or random.Random()
        self.size = size
        self.shapes = list(shapes) if shapes is not None else list(ShapeType)
        self.palette = list(palette)

    def pick_color(self, last_color: Optional[str] = None) -> str:
        choices = [c for c in self.palette if c != last_color]
        if not choices:
            # A single-colour palette cannot avoid repeats
            choices = self.palette
        return self.rng.choice(choices)

    def generate(self, last_color: Optional[str] = None, level: int = 1) -> FallingPiece:
        kind = self.rng.choice(self.shapes)
        mask = BASE_SHAPES[kind].copy()
        piece = FallingPiece(kind=kind, color=self.pick_color(last_color), mask=mask)
        return self.respawn(piece, level)

    def respawn(self, piece: FallingPiece, level: int) -> FallingPiece:
        """Move ``piece`` to the spawn anchor for ``level``."""
        x, y = spawn_position(level, piece.width, piece.height, self.size, self.rng)
        logger.debug("spawn %s %s at (%d, %d) level %d", piece.kind.name, piece.color, x, y, level)
        return piece.at(x, y)
