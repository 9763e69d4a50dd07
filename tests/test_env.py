import unittest
import numpy as np
import gymnasium as gym

import l2w_puzzle.env  # noqa: F401  registers the environments
from l2w_puzzle.env.part_a_env import PartAEnv
from l2w_puzzle.env.part_b_env import PartBEnv, valid_actions
from l2w_puzzle.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper
from l2w_puzzle.game.controls import Intent
from l2w_puzzle.rl.random_agent import run_random_part_a, run_random_part_b


class TestPartAEnv(unittest.TestCase):

    def test_reset_observation(self):
        env = PartAEnv()
        obs, info = env.reset(seed=1)
        self.assertEqual(obs["grid"].shape, (14, 14))
        self.assertTrue((obs["grid"] < 0).any())
        self.assertEqual(obs["rotation"], 0)
        self.assertTrue(env.observation_space.contains(obs))
        self.assertEqual(info["score"], 0)

    def test_hard_drops_end_episode(self):
        env = PartAEnv()
        env.reset(seed=3)
        terminated = False
        for _ in range(500):
            _, reward, terminated, truncated, _ = env.step(int(Intent.HARD_DROP))
            self.assertGreaterEqual(reward, 0.0)
            if terminated:
                break
        self.assertTrue(terminated)

    def test_level_option(self):
        env = PartAEnv()
        obs, _ = env.reset(seed=0, options={"level": 3})
        self.assertEqual(obs["rotation"], 1)

    def test_rgb_render(self):
        env = PartAEnv(render_mode="rgb_array")
        env.reset(seed=0)
        self.assertEqual(env.render().shape, (14 * 12, 14 * 12, 3))


class TestPartBEnv(unittest.TestCase):

    def test_w_placement_rewards_and_terminates(self):
        env = PartBEnv()
        obs, info = env.reset(options={"counts": (1, 1)})
        self.assertEqual(info["action_mask"].shape, (2, 14, 14, 4))
        _, reward, terminated, _, _ = env.step((0, 0, 0, 0))
        self.assertEqual(reward, 0.0)
        self.assertFalse(terminated)
        _, reward, terminated, _, info = env.step((1, 0, 2, 0))
        self.assertEqual(reward, 200.0)
        self.assertTrue(terminated)
        self.assertEqual(info["outcome"], "resolved")
        self.assertEqual(info["w_count"], 1)

    def test_invalid_action_penalty(self):
        env = PartBEnv(rfb_count=1, lfb_count=1)
        env.reset()
        env.step((0, 0, 0, 0))
        _, reward, terminated, _, info = env.step((1, 0, 0, 0))
        self.assertEqual(info["placement_status"], "conflict")
        self.assertAlmostEqual(reward, -0.1)
        self.assertFalse(terminated)
        self.assertIn((1, 2), info["conflicts"])

    def test_action_mask_respects_counters(self):
        env = PartBEnv()
        env.reset(options={"counts": (0, 1), "prefilled": [(0, 0)]})
        mask = env.get_action_mask()
        self.assertFalse(mask[0].any())
        self.assertTrue(mask[1].any())
        # LFB rotated 180 covers its own anchor
        self.assertFalse(mask[1, 0, 0, 2])
        self.assertTrue(all(t == 1 for t, _, _, _ in valid_actions(env.engine)))


class TestWrappers(unittest.TestCase):

    def test_flatten(self):
        env = FlattenDiscreteActionWrapper(PartBEnv())
        self.assertEqual(env.action_space.n, 2 * 14 * 14 * 4)
        self.assertEqual(env._unflatten(0), (0, 0, 0, 0))
        self.assertEqual(env._unflatten(env.action_space.n - 1), (1, 13, 13, 3))
        self.assertEqual(env._unflatten(4 * 14 + 4 + 1), (0, 1, 1, 1))
        self.assertEqual(env.flatten(0, 1, 1, 1), 4 * 14 + 4 + 1)
        env.reset()
        self.assertEqual(env.get_action_mask().shape, (env.action_space.n,))

    def test_resample_invalid(self):
        env = ResampleInvalidActionWrapper(FlattenDiscreteActionWrapper(PartBEnv()))
        env.reset(seed=0, options={"counts": (1, 0)})
        invalid = int(np.flatnonzero(~env.get_action_mask())[0])
        _, _, _, _, info = env.step(invalid)
        self.assertEqual(info["placement_status"], "ok")
        self.assertTrue(info["resampled"])

    def test_empty_counter_masks_its_type_block(self):
        env = FlattenDiscreteActionWrapper(PartBEnv())
        env.reset(options={"counts": (0, 1)})
        mask = env.get_action_mask()
        half = env.action_space.n // 2
        self.assertFalse(mask[:half].any())
        self.assertTrue(mask[half:].any())

    def test_nothing_valid_passes_action_through(self):
        env = ResampleInvalidActionWrapper(FlattenDiscreteActionWrapper(PartBEnv()))
        env.reset(seed=0, options={"counts": (0, 0)})
        _, _, terminated, _, info = env.step(0)
        self.assertFalse(info["resampled"])
        self.assertEqual(info["placement_status"], "noCounter")
        self.assertTrue(terminated)


class TestRandomAgent(unittest.TestCase):

    def test_random_agents_run(self):
        self.assertGreaterEqual(run_random_part_a(steps=50, seed=0), 0.0)
        self.assertIsInstance(run_random_part_b(steps=20, seed=0), float)


class TestRegistration(unittest.TestCase):

    def test_registered(self):
        self.assertEqual(gym.spec("L2W-PartA-v0").entry_point, "l2w_puzzle.env.part_a_env:PartAEnv")
        env = gym.make("L2W-PartB-v0")
        obs, _ = env.reset(seed=0)
        self.assertEqual(obs["grid"].shape, (14, 14))
        env.close()


if __name__ == '__main__':
    unittest.main()
