from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from l2w_puzzle.config import GameConfig
from l2w_puzzle.constants import ROTATIONS, BlockType, CellValue
from l2w_puzzle.placement import PartBEngine, PlacementStatus, iter_valid_placements
from l2w_puzzle.state import GameState


BLOCK_TYPES: Tuple[BlockType, ...] = (BlockType.RFB, BlockType.LFB)


def _compute_action_mask(engine: PartBEngine) -> np.ndarray:
    """Boolean mask over (type, row, col, rotation) for placing a new piece."""
    size = engine.size
    mask = np.zeros((len(BLOCK_TYPES), size, size, len(ROTATIONS)), dtype=np.bool_)
    if engine.finished:
        return mask
    for t, kind in enumerate(BLOCK_TYPES):
        if engine.available(kind) <= 0:
            continue
        for row, col, rotation in iter_valid_placements(kind, engine.pieces, size, engine.prefilled):
            mask[t, row, col, ROTATIONS.index(rotation)] = True
    return mask


def valid_actions(engine: PartBEngine) -> List[Tuple[int, int, int, int]]:
    return [tuple(int(v) for v in idx) for idx in np.argwhere(_compute_action_mask(engine))]  # type: ignore[misc]


class PartBEnv(gym.Env):
    """Placement phase as an episode: each action places one new piece.

    The episode starts from the counters given in ``options`` (or the
    constructor defaults) and ends when the completion rule fires. The
    reward is the score change, so W-blocks earn and broken ones cost.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        rfb_count: int = 6,
        lfb_count: int = 6,
        level: int = 1,
        max_episode_steps: int = 500,
        invalid_action_penalty: float = -0.1,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.initial_counts = (rfb_count, lfb_count)
        self.level = level
        self.max_episode_steps = max_episode_steps
        self.invalid_action_penalty = float(invalid_action_penalty)

        size = self.config.grid_size
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=int(CellValue.PREFILLED), shape=(size, size), dtype=np.int8),
                "counters": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(2,), dtype=np.int32),
                "w_count": spaces.Discrete(size * size),
            }
        )
        # Action: (type, row, col, rotation index)
        self.action_space = spaces.MultiDiscrete((len(BLOCK_TYPES), size, size, len(ROTATIONS)))

        self.engine: Optional[PartBEngine] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        engine = self.engine
        assert engine is not None
        return {
            "grid": engine.grid.astype(np.int8),
            "counters": np.array([engine.state.rfb_count, engine.state.lfb_count], dtype=np.int32),
            "w_count": int(engine.state.w_count),
        }

    def _get_info(self) -> Dict[str, Any]:
        engine = self.engine
        assert engine is not None
        return {
            "action_mask": _compute_action_mask(engine),
            "score": engine.state.score,
            "w_count": engine.state.w_count,
            "outcome": engine.outcome.value if engine.outcome is not None else None,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        options = options or {}
        rfb, lfb = options.get("counts", self.initial_counts)
        state = GameState(level=int(options.get("level", self.level)), rfb_count=int(rfb), lfb_count=int(lfb))
        self.engine = PartBEngine(state, self.config, prefilled=options.get("prefilled"))
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        engine = self.engine
        assert engine is not None, "call reset() first"
        t, row, col, r = map(int, action)
        before = engine.state.score

        result = engine.place_new(BLOCK_TYPES[t], row, col, ROTATIONS[r])

        self._steps += 1
        gained = engine.state.score - before
        reward = float(gained)
        if not result.ok:
            reward += self.invalid_action_penalty
        if not engine.finished and not _compute_action_mask(engine).any():
            # Nothing can be placed any more; the timer would end the phase
            engine.time_up()
        terminated = bool(engine.finished)
        truncated = self._steps >= self.max_episode_steps and not terminated

        info = self._get_info()
        info["placement_status"] = result.status.value
        info["conflicts"] = list(result.conflicts) if result.status == PlacementStatus.CONFLICT else []
        return self._get_obs(), reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        assert self.engine is not None
        return _compute_action_mask(self.engine)

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array" or self.engine is None:
            return None
        palette = {
            int(CellValue.EMPTY): (30, 30, 36),
            int(CellValue.RFB): (70, 130, 230),
            int(CellValue.LFB): (230, 150, 60),
            int(CellValue.PREFILLED): (90, 90, 90),
        }
        grid = self.engine.grid
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = palette[int(grid[y, x])]
        return img

    def close(self) -> None:
        pass
