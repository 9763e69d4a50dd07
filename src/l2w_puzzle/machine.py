from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

import numpy as np

from .config import GameConfig
from .exceptions import InvalidTransitionError
from .game.controls import GestureFilter, Intent, intent_for_key
from .game.core import PartAEngine
from .game.rules import ScoringRules
from .placement.drag import DragController
from .placement.engine import PartBEngine, PartBOutcome
from .placement.logic import Cell, PlacedPiece
from .placement.timer import PartBTimer
from .scheduler import Scheduler
from .state import GameState, Phase


logger = logging.getLogger(__name__)


class TransitionStage(str, Enum):
    RED_FAIL = "redFail"
    GREEN_FAIL_FORWARD = "greenFailForward"
    LEVEL_COMPLETE = "levelComplete"
    NICE_TURN_AROUND = "niceTurnAround"
    TIME_UP = "timeUp"
    CONTINUE = "continue"
    BUTTON = "button"


STAGE_SEQUENCES: Dict[Phase, Tuple[TransitionStage, TransitionStage, TransitionStage]] = {
    Phase.TRANSITION_AB: (TransitionStage.RED_FAIL, TransitionStage.GREEN_FAIL_FORWARD, TransitionStage.BUTTON),
    Phase.COMPLETE: (TransitionStage.LEVEL_COMPLETE, TransitionStage.NICE_TURN_AROUND, TransitionStage.BUTTON),
    Phase.TRANSITION_BA: (TransitionStage.TIME_UP, TransitionStage.CONTINUE, TransitionStage.BUTTON),
}

TRANSITIONS: Dict[Phase, FrozenSet[Phase]] = {
    Phase.IDLE: frozenset({Phase.PART_A}),
    Phase.PART_A: frozenset({Phase.TRANSITION_AB}),
    Phase.TRANSITION_AB: frozenset({Phase.PART_B}),
    Phase.PART_B: frozenset({Phase.TRANSITION_BA, Phase.COMPLETE}),
    Phase.TRANSITION_BA: frozenset({Phase.PART_A}),
    Phase.COMPLETE: frozenset({Phase.PART_B}),
}


PhaseListener = Callable[[Phase, Phase], None]


@dataclass
class GameSnapshot:
    """Read-only view handed to renderers."""
    phase: Phase
    stage: Optional[TransitionStage]
    score: int
    level: int
    rfb_count: int
    lfb_count: int
    w_count: int
    part_a_grid: np.ndarray
    next_piece_kind: Optional[str]
    part_b_grid: np.ndarray
    pieces: List[PlacedPiece] = field(default_factory=list)
    conflict_cells: List[Cell] = field(default_factory=list)
    blocking_cells: List[Cell] = field(default_factory=list)
    time_remaining: str = ""


class GameStateMachine:
    """Owns both engines and the shared state and moves play between the phases.

    idle -> partA -> transitionAB -> partB -> transitionBA -> partA
                                           -> complete -> partB (next level)

    Engine callbacks drive the automatic edges; ``start``, ``continue_``,
    ``level_up`` and ``restart`` are the player's intents and return False
    when they do not apply to the current phase.
    """

    STAGE_GROUP = "stages"

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        scheduler: Optional[Scheduler] = None,
        state: Optional[GameState] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.scheduler = scheduler or Scheduler()
        self.state = state or GameState()
        self.part_a = PartAEngine(
            self.state, self.config, self.rules, self.scheduler, on_finished=self._on_part_a_finished
        )
        self.part_b = PartBEngine(self.state, self.config, self.rules, on_finished=self._on_part_b_finished)
        self.timer = PartBTimer(
            self.scheduler,
            self.config.part_b_time_seconds,
            self.config.part_b_bonus_seconds,
            on_time_up=self._on_time_up,
        )
        self.drag = DragController(self.part_b)
        self.gestures = GestureFilter(
            self.config.swipe_cooldown_ms, self.config.swipe_threshold_px, self.config.tap_threshold_px
        )
        self.stage: Optional[TransitionStage] = None
        self.listeners: List[PhaseListener] = []

    @property
    def phase(self) -> Phase:
        return self.state.phase

    # ---------- Edges ----------
    def _transition(self, target: Phase) -> None:
        source = self.state.phase
        if target not in TRANSITIONS[source]:
            raise InvalidTransitionError(f"{source.value} -> {target.value}")
        self.state.phase = target
        logger.info("phase %s -> %s (level %d)", source.value, target.value, self.state.level)
        self._run_stages(target)
        for listener in list(self.listeners):
            listener(source, target)

    def _run_stages(self, phase: Phase) -> None:
        self.scheduler.cancel_group(self.STAGE_GROUP)
        sequence = STAGE_SEQUENCES.get(phase)
        if sequence is None:
            self.stage = None
            return
        self.stage = sequence[0]
        first_delay, second_delay = self.config.transition_stage_delays_ms
        self.scheduler.call_later(first_delay, lambda: self._set_stage(sequence[1]), self.STAGE_GROUP)
        self.scheduler.call_later(second_delay, lambda: self._set_stage(sequence[2]), self.STAGE_GROUP)

    def _set_stage(self, stage: TransitionStage) -> None:
        self.stage = stage

    def _try(self, target: Phase) -> bool:
        try:
            self._transition(target)
        except InvalidTransitionError as exc:
            logger.warning("ignored intent in phase %s: %s", self.phase.value, exc)
            return False
        return True

    # ---------- Player intents ----------
    def start(self) -> bool:
        if not self._try(Phase.PART_A):
            return False
        self.part_a.start()
        return True

    def continue_(self) -> bool:
        """Leave a transition screen; skips any remaining stages."""
        if self.phase == Phase.TRANSITION_AB:
            self._try(Phase.PART_B)
            self.part_b.resume()
            self.drag.cancel()
            self.timer.start()
            return True
        if self.phase == Phase.TRANSITION_BA:
            self._try(Phase.PART_A)
            self.part_a.start()
            return True
        logger.warning("continue ignored in phase %s", self.phase.value)
        return False

    def level_up(self) -> bool:
        if self.phase != Phase.COMPLETE:
            logger.warning("level up ignored in phase %s", self.phase.value)
            return False
        level = self.state.advance_level()
        self.part_b.reset_board()
        self.drag.cancel()
        self._try(Phase.PART_B)
        self.timer.start()
        logger.info("level %d", level)
        return True

    def restart(self) -> bool:
        self.part_a.stop()
        self.timer.stop()
        self.scheduler.cancel_group(self.STAGE_GROUP)
        self.drag.cancel()
        self.part_b.reset_board()
        self.state.reset()
        self.stage = None
        logger.info("game reset")
        return True

    # ---------- Phase A input ----------
    def apply_intent(self, intent: Intent) -> bool:
        if self.phase != Phase.PART_A:
            return False
        return self.part_a.apply(intent)

    def handle_key(self, key: str) -> bool:
        intent = intent_for_key(self.state.level, key)
        if intent is None:
            return False
        return self.apply_intent(intent)

    def handle_swipe(self, dx: float, dy: float) -> bool:
        intent = self.gestures.on_move(dx, dy, self.scheduler.now_ms)
        return intent is not None and self.apply_intent(intent)

    def handle_release(self, dx: float, dy: float) -> bool:
        intent = self.gestures.on_release(dx, dy)
        return intent is not None and self.apply_intent(intent)

    # ---------- Engine callbacks ----------
    def _on_part_a_finished(self) -> None:
        if self.phase == Phase.PART_A:
            self._transition(Phase.TRANSITION_AB)

    def _on_part_b_finished(self, outcome: PartBOutcome) -> None:
        self.timer.stop()
        self.drag.cancel()
        if self.phase != Phase.PART_B:
            return
        if outcome == PartBOutcome.RESOLVED:
            self._transition(Phase.COMPLETE)
        else:
            self._transition(Phase.TRANSITION_BA)

    def _on_time_up(self) -> None:
        self.part_b.time_up()

    # ---------- Time and output ----------
    def advance(self, delta_ms: int) -> int:
        return self.scheduler.advance(delta_ms)

    def snapshot(self) -> GameSnapshot:
        state = self.state
        next_piece = self.part_a.next_piece
        return GameSnapshot(
            phase=state.phase,
            stage=self.stage,
            score=state.score,
            level=state.level,
            rfb_count=state.rfb_count,
            lfb_count=state.lfb_count,
            w_count=state.w_count,
            part_a_grid=self.part_a.get_state(),
            next_piece_kind=next_piece.kind.name if next_piece is not None else None,
            part_b_grid=self.part_b.grid,
            pieces=[PlacedPiece(p.id, p.kind, p.row, p.col, p.rotation, p.is_w_block) for p in self.part_b.pieces],
            conflict_cells=list(self.drag.conflict.cells),
            blocking_cells=self.drag.blocking_cells(),
            time_remaining=self.timer.formatted,
        )
