from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Sequence, Set, Tuple

from ..constants import BlockType
from ..game.patterns import Offset, Pattern, normalize_pattern
from ..game.rules import ScoringRules
from ..state import DeltaTarget, GameState
from .logic import PlacedPiece, piece_cells


logger = logging.getLogger(__name__)


Pair = Tuple[int, int]  # (rfb_id, lfb_id)

W_BLOCK_CELLS = 9


def rotate_cells(cells: Iterable[Offset]) -> Pattern:
    """Rotate a cell set 90 degrees clockwise and normalise it."""
    return normalize_pattern((c, -r) for r, c in cells)


@lru_cache(maxsize=None)
def w_reference_patterns() -> Tuple[Pattern, ...]:
    """The W footprint, an RFB with an LFB two columns to its right, in all four rotations."""
    base = normalize_pattern(
        piece_cells(BlockType.RFB, 0, 0, 0) + piece_cells(BlockType.LFB, 0, 2, 0)
    )
    patterns: List[Pattern] = []
    current = base
    for _ in range(4):
        if current not in patterns:
            patterns.append(current)
        current = rotate_cells(current)
    return tuple(patterns)


def pair_key(rfb_id: int, lfb_id: int) -> str:
    return f"{rfb_id}:{lfb_id}"


def is_w_pair(rfb: PlacedPiece, lfb: PlacedPiece) -> bool:
    union = set(rfb.cells()) | set(lfb.cells())
    if len(union) != W_BLOCK_CELLS:
        return False
    return normalize_pattern(union) in w_reference_patterns()


def detect_w_blocks(pieces: Sequence[PlacedPiece]) -> List[Pair]:
    """Every RFB x LFB pair whose combined footprint is a W, in piece order."""
    rfbs = [p for p in pieces if p.kind == BlockType.RFB]
    lfbs = [p for p in pieces if p.kind == BlockType.LFB]
    return [(r.id, l.id) for r in rfbs for l in lfbs if is_w_pair(r, l)]


@dataclass
class RescanResult:
    pairs: List[Pair] = field(default_factory=list)
    formed: List[str] = field(default_factory=list)
    broken: List[str] = field(default_factory=list)


class WBlockTracker:
    """Keeps the credited W pairs in step with the board.

    Each rescan flags the pieces of every current pair and diffs the pairs
    against the scored set: new pairs queue +1 W and +W points, vanished
    pairs queue the same amounts negated. Repeating a rescan on an
    unchanged board queues nothing.
    """

    def __init__(self, rules: ScoringRules | None = None) -> None:
        self.rules = rules or ScoringRules()
        self.scored: Set[str] = set()

    def rescan(self, pieces: Sequence[PlacedPiece], state: GameState) -> RescanResult:
        pairs = detect_w_blocks(pieces)
        in_w: Set[int] = set()
        for rfb_id, lfb_id in pairs:
            in_w.add(rfb_id)
            in_w.add(lfb_id)
        for piece in pieces:
            piece.is_w_block = piece.id in in_w

        current = {pair_key(*pair) for pair in pairs}
        result = RescanResult(pairs=pairs)
        for key in sorted(current - self.scored):
            logger.debug("W-block formed %s", key)
            state.enqueue(DeltaTarget.W, 1)
            state.enqueue(DeltaTarget.SCORE, self.rules.w_block)
            result.formed.append(key)
        for key in sorted(self.scored - current):
            logger.debug("W-block broken %s", key)
            state.enqueue(DeltaTarget.W, -1)
            state.enqueue(DeltaTarget.SCORE, -self.rules.w_block)
            result.broken.append(key)
        self.scored = current
        return result

    def reset(self) -> None:
        self.scored.clear()
