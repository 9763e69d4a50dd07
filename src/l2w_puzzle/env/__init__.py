"""Gymnasium environments for the L2W puzzle."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Falling-piece phase, one intent per step
register(
    id="L2W-PartA-v0",
    entry_point="l2w_puzzle.env.part_a_env:PartAEnv",
)

# Placement phase, one new piece per step
register(
    id="L2W-PartB-v0",
    entry_point="l2w_puzzle.env.part_b_env:PartBEnv",
)

__all__ = ["L2W-PartA-v0", "L2W-PartB-v0"]
