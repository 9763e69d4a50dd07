from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, List

from .constants import BlockType


logger = logging.getLogger(__name__)

HISTORY_LIMIT = 256


class Phase(str, Enum):
    IDLE = "idle"
    PART_A = "partA"
    TRANSITION_AB = "transitionAB"
    PART_B = "partB"
    TRANSITION_BA = "transitionBA"
    COMPLETE = "complete"


class DeltaTarget(str, Enum):
    SCORE = "score"
    RFB = "rfb"
    LFB = "lfb"
    W = "w"


@dataclass(frozen=True)
class Delta:
    target: DeltaTarget
    amount: int


def counter_target(kind: BlockType) -> DeltaTarget:
    return DeltaTarget.RFB if kind == BlockType.RFB else DeltaTarget.LFB


@dataclass
class GameState:
    """Score, level and counters shared by reference between both engines.

    Fields are only changed through the ``apply_*`` methods. Engines queue
    their deltas with ``enqueue`` while an operation is in progress and call
    ``flush`` once it has completed, so deltas land in emission order.
    """

    phase: Phase = Phase.IDLE
    score: int = 0
    level: int = 1
    rfb_count: int = 0
    lfb_count: int = 0
    w_count: int = 0
    _pending: Deque[Delta] = field(default_factory=deque, repr=False)
    # Most recent applied deltas, oldest dropped first
    history: Deque[Delta] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT), repr=False)

    def counter(self, kind: BlockType) -> int:
        return self.rfb_count if kind == BlockType.RFB else self.lfb_count

    def apply_score_delta(self, delta: int) -> None:
        self.score = self._clamped("score", self.score, delta)
        self.history.append(Delta(DeltaTarget.SCORE, delta))

    def apply_counter_delta(self, target: DeltaTarget, delta: int) -> None:
        if target == DeltaTarget.SCORE:
            self.apply_score_delta(delta)
            return
        if target == DeltaTarget.RFB:
            self.rfb_count = self._clamped("rfb_count", self.rfb_count, delta)
        elif target == DeltaTarget.LFB:
            self.lfb_count = self._clamped("lfb_count", self.lfb_count, delta)
        else:
            self.w_count = self._clamped("w_count", self.w_count, delta)
        self.history.append(Delta(target, delta))

    def apply(self, delta: Delta) -> None:
        if delta.amount == 0:
            return
        self.apply_counter_delta(delta.target, delta.amount)

    def enqueue(self, target: DeltaTarget, amount: int) -> None:
        self._pending.append(Delta(target, amount))

    def flush(self) -> List[Delta]:
        applied: List[Delta] = []
        while self._pending:
            delta = self._pending.popleft()
            self.apply(delta)
            applied.append(delta)
        return applied

    def discard_pending(self) -> None:
        self._pending.clear()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance_level(self) -> int:
        self.level += 1
        return self.level

    def reset(self) -> None:
        self.phase = Phase.IDLE
        self.score = 0
        self.level = 1
        self.rfb_count = 0
        self.lfb_count = 0
        self.w_count = 0
        self._pending.clear()
        self.history.clear()

    @staticmethod
    def _clamped(name: str, current: int, delta: int) -> int:
        value = current + delta
        if value < 0:
            logger.warning("%s would drop below zero (%d%+d); clamping", name, current, delta)
            return 0
        return value
