"""Falling-piece phase (Phase A) of the L2W puzzle.

Exports the engine and its supporting pieces:
- PartAEngine: fall ticks, locking, L-block clear loop and termination
- FallingPiece / ShapeType: the nine-shape catalog and the active piece
- PieceGenerator: random shape and non-repeating colour at the level's spawn
- ScoringRules: points per L-block and per W-block
- Intent / GestureFilter: abstract player intents and gesture deduplication
"""

from .pieces import FallingPiece, ShapeType, rotate_mask
from .generator import PieceGenerator
from .rules import SCORES, ScoringRules
from .orientation import Direction, Orientation, rotation_for_level
from .controls import GestureFilter, Intent, intent_for_key
from .core import ClearResult, PartAEngine

__all__ = [
    "FallingPiece",
    "ShapeType",
    "rotate_mask",
    "PieceGenerator",
    "SCORES",
    "ScoringRules",
    "Direction",
    "Orientation",
    "rotation_for_level",
    "GestureFilter",
    "Intent",
    "intent_for_key",
    "ClearResult",
    "PartAEngine",
]
