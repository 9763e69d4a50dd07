from __future__ import annotations

import argparse
import logging
import random

import gymnasium as gym

import l2w_puzzle.env  # noqa: F401  (registers the environments)
from l2w_puzzle.env.part_b_env import valid_actions


logger = logging.getLogger(__name__)


def run_random_part_a(steps: int = 500, seed: int | None = None) -> float:
    env = gym.make("L2W-PartA-v0")
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            logger.info("part A episode over: score %d", info["score"])
            obs, info = env.reset()
    env.close()
    return total_reward


def run_random_part_b(steps: int = 200, seed: int | None = None) -> float:
    env = gym.make("L2W-PartB-v0")
    obs, info = env.reset(seed=seed)
    rng = random.Random(seed)
    total_reward = 0.0
    for _ in range(steps):
        # Prefer valid placements if available
        valid = valid_actions(env.unwrapped.engine)
        action = rng.choice(valid) if valid else env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            logger.info("part B episode over: %s, W-blocks %d", info["outcome"], info["w_count"])
            obs, info = env.reset()
    env.close()
    return total_reward


def main() -> None:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Random agent for the L2W environments")
    parser.add_argument("--steps", type=int, default=500)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print(f"Random agent part A total reward: {run_random_part_a(args.steps, args.seed):.2f}")
    print(f"Random agent part B total reward: {run_random_part_b(args.steps, args.seed):.2f}")


if __name__ == "__main__":  # pragma: no cover
    main()
