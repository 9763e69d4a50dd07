from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from l2w_puzzle.config import GameConfig
from l2w_puzzle.constants import PIECE_COLORS, color_index
from l2w_puzzle.game import Intent, PartAEngine, ShapeType
from l2w_puzzle.game.orientation import rotation_for_level
from l2w_puzzle.scheduler import Scheduler
from l2w_puzzle.state import GameState


def _color_rgb(color: str) -> Tuple[int, int, int]:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class PartAEnv(gym.Env):
    """Falling-piece phase as an episode.

    Each step applies one player intent, then one automatic fall tick, then
    resolves any pending lock without waiting for the cosmetic delay. The
    reward is the score gained in the step; the episode ends when the spawn
    edge fills.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        level: int = 1,
        max_episode_steps: int = 5000,
        invalid_action_penalty: float = 0.0,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.level = level
        self.max_episode_steps = max_episode_steps
        self.invalid_action_penalty = float(invalid_action_penalty)

        size = self.config.grid_size
        colors = len(PIECE_COLORS)
        # Active piece cells are negative colour indices
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-colors, high=colors, shape=(size, size), dtype=np.int8),
                "next_piece": spaces.Discrete(len(ShapeType) + 1),
                "rotation": spaces.Discrete(4),
                "counters": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(2,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(len(Intent))

        self.engine: Optional[PartAEngine] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        engine = self.engine
        assert engine is not None
        next_piece = engine.next_piece
        return {
            "grid": engine.get_state().astype(np.int8),
            "next_piece": int(next_piece.kind) if next_piece is not None else 0,
            "rotation": rotation_for_level(engine.level) // 90,
            "counters": np.array([engine.state.rfb_count, engine.state.lfb_count], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        engine = self.engine
        assert engine is not None
        return {
            "score": engine.state.score,
            "rfb_count": engine.state.rfb_count,
            "lfb_count": engine.state.lfb_count,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        config = self.config if seed is None else replace(self.config, random_seed=seed)
        level = int((options or {}).get("level", self.level))
        state = GameState(level=level)
        self.engine = PartAEngine(state, config, scheduler=Scheduler())
        self.engine.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        engine = self.engine
        assert engine is not None, "call reset() first"
        before = engine.state.score

        moved = engine.apply(Intent(int(action)))
        engine.tick()
        engine.scheduler.flush(PartAEngine.TIMER_GROUP)

        self._steps += 1
        gained = engine.state.score - before
        reward = float(gained)
        if not moved and Intent(int(action)) != Intent.NONE:
            reward += self.invalid_action_penalty
        terminated = bool(engine.finished)
        truncated = self._steps >= self.max_episode_steps and not terminated

        info = self._get_info()
        info["engine_score_delta"] = float(gained)
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array" or self.engine is None:
            return None
        grid = self.engine.get_state()
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = abs(int(grid[y, x]))
                color = _color_rgb(PIECE_COLORS[v - 1]) if v else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        if self.engine is not None:
            self.engine.stop()
