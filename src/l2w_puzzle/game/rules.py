from __future__ import annotations

from dataclasses import dataclass

from ..constants import BlockType


@dataclass
class ScoringRules:
    rfb: int = 100
    lfb: int = 150
    w_block: int = 200

    def score_for_l_block(self, kind: BlockType) -> int:
        return self.rfb if kind == BlockType.RFB else self.lfb


SCORES = ScoringRules()


# Every level range currently falls once a second
FALL_INTERVAL_LEVEL_1_2 = 1000
FALL_INTERVAL_LEVEL_3_4 = 1000
FALL_INTERVAL_DEFAULT = 1000


def fall_interval(level: int) -> int:
    """Milliseconds between automatic fall steps."""
    if level <= 2:
        return FALL_INTERVAL_LEVEL_1_2
    if level <= 4:
        return FALL_INTERVAL_LEVEL_3_4
    return FALL_INTERVAL_DEFAULT
