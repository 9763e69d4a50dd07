"""Placement phase (Phase B) of the L2W puzzle.

RFB and LFB pieces bought with Phase A counters are placed on a 14x14
board; an RFB and an LFB whose combined footprint is a W score a W-block.
"""

from .logic import (
    PlacedPiece,
    PlacementResult,
    PlacementShapes,
    PlacementStatus,
    build_grid_from_pieces,
    can_place_piece_type,
    iter_valid_placements,
    piece_cells,
    validate_placement,
)
from .wblocks import WBlockTracker, detect_w_blocks, w_reference_patterns
from .engine import PartBEngine, PartBOutcome
from .timer import PartBTimer, format_time
from .drag import ConflictState, DragController, DragSource

__all__ = [
    "PlacedPiece",
    "PlacementResult",
    "PlacementShapes",
    "PlacementStatus",
    "build_grid_from_pieces",
    "can_place_piece_type",
    "iter_valid_placements",
    "piece_cells",
    "validate_placement",
    "WBlockTracker",
    "detect_w_blocks",
    "w_reference_patterns",
    "PartBEngine",
    "PartBOutcome",
    "PartBTimer",
    "format_time",
    "ConflictState",
    "DragController",
    "DragSource",
]
