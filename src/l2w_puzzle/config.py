from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .constants import GRID_SIZE


class CompletionRule(str, Enum):
    """How Phase B decides that the level is over.

    STRICT: both counters are empty and every RFB/LFB on the board belongs
    to a W-block.
    PERMISSIVE: a counter is empty and the remaining pieces can no longer
    pair up, or there is no room left for the remaining counter pieces.
    """

    STRICT = "strict"
    PERMISSIVE = "permissive"


@dataclass
class GameConfig:
    """Configuration shared by both engines and the phase machine"""
    grid_size: int = GRID_SIZE
    random_seed: Optional[int] = None

    # Phase A
    fall_interval_ms: Optional[int] = None  # None: per-level table in game.rules
    l_clear_delay_ms: int = 400
    l_block_size: int = 3
    same_color_l_blocks: bool = True
    gravity_after_clear: bool = False
    allow_spawn_overhang: bool = False

    # Phase B
    w_lock_level: int = 2
    completion_rule: CompletionRule = CompletionRule.STRICT
    part_b_time_seconds: int = 120
    part_b_bonus_seconds: int = 0

    # Cosmetic sequencing and input filtering
    transition_stage_delays_ms: Tuple[int, int] = (1000, 2000)
    swipe_cooldown_ms: int = 120
    swipe_threshold_px: int = 30
    tap_threshold_px: int = 10
