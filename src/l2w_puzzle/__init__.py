"""L2W puzzle: a two-phase tile game engine.

Phase A drops pieces onto a grid and clears L-blocks for RFB/LFB counters;
Phase B spends those counters on pieces that pair up into W-blocks.
"""

from .config import CompletionRule, GameConfig
from .constants import GRID_SIZE, BlockType
from .exceptions import FeedbackConfigError, InvalidTransitionError, L2WError
from .machine import GameSnapshot, GameStateMachine, TransitionStage
from .scheduler import Scheduler
from .state import GameState, Phase

__version__ = "0.1.0"

__all__ = [
    "CompletionRule",
    "GameConfig",
    "GRID_SIZE",
    "BlockType",
    "FeedbackConfigError",
    "InvalidTransitionError",
    "L2WError",
    "GameSnapshot",
    "GameStateMachine",
    "TransitionStage",
    "Scheduler",
    "GameState",
    "Phase",
]
