from __future__ import annotations

from typing import Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .part_b_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Flattens the Phase B MultiDiscrete (type, row, col, rotation) into Discrete(N).

    Indices are C-ordered, so all RFB placements come before all LFB ones.
    `get_action_mask()` returns the flat (N,) mask; an empty counter zeroes
    its whole type block and a finished board zeroes everything.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        self.nvec = tuple(int(n) for n in env.action_space.nvec)
        types, rows, cols, rotations = self.nvec
        assert rows == cols, "Phase B board must be square"
        self.size = rows
        self.n = int(np.prod(self.nvec))
        self.action_space = spaces.Discrete(self.n)

    def flatten(self, kind: int, row: int, col: int, rotation: int) -> int:
        return int(np.ravel_multi_index((kind, row, col, rotation), self.nvec))

    def _unflatten(self, idx: int) -> Tuple[int, int, int, int]:
        kind, row, col, rotation = np.unravel_index(int(idx), self.nvec)
        return int(kind), int(row), int(col), int(rotation)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self._unflatten(int(action)), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.engine).reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps a masked-out placement for a uniformly drawn valid one.

    `info["resampled"]` tells whether the swap happened. With no valid
    placement left the action goes through unchanged and the engine answers
    with its own status (`noCounter`, `conflict` or `finished`).
    """

    def step(self, action):  # type: ignore[override]
        resampled = False
        if isinstance(self.action_space, spaces.Discrete):
            mask = self.get_action_mask()
            if 0 <= int(action) < mask.shape[0] and not bool(mask[int(action)]):
                valid_idxs = np.flatnonzero(mask)
                if valid_idxs.size > 0:
                    action = int(self.np_random.choice(valid_idxs))
                    resampled = True
        obs, reward, terminated, truncated, info = self.env.step(action)
        info["resampled"] = resampled
        return obs, reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        if hasattr(self.env, "get_action_mask"):
            return getattr(self.env, "get_action_mask")()
        raise AttributeError("wrapped env does not provide get_action_mask")
