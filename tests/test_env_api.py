"""
Tests for Gymnasium environment API.
"""

from dataclasses import replace

import numpy as np
import pytest

from dash_runner.dash_core.config_loader import load_config
from dash_runner.dash_core.env_gym import ACTION_JUMP, ACTION_NOOP, DashEnv


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env(config):
    env = DashEnv(config=config)
    yield env
    env.close()


class TestDashEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        """Reset should return (observation, info) tuple."""
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2

        obs, info = result
        assert isinstance(obs, dict)
        assert isinstance(info, dict)
        assert info["delta_score"] == 0

    def test_observation_structure(self, env):
        """Observation should have expected keys and shapes."""
        obs, _ = env.reset(seed=42)

        for key in ("player_y", "player_vy", "jumps_remaining", "on_ground",
                    "score", "elapsed_seconds", "obstacle_count",
                    "nearest_obstacle_distance"):
            assert key in obs

        max_obs = env.config.observation.max_obstacles
        assert obs["obs_x"].shape == (max_obs,)
        assert obs["obs_mask"].shape == (max_obs,)
        assert set(obs.keys()) == set(env.observation_space.spaces.keys())

    def test_step_returns_five_values(self, env):
        """Step should return (obs, reward, terminated, truncated, info)."""
        env.reset(seed=42)

        obs, reward, terminated, truncated, info = env.step(ACTION_NOOP)

        assert isinstance(obs, dict)
        assert isinstance(reward, float)
        assert isinstance(terminated, bool)
        assert isinstance(truncated, bool)
        assert isinstance(info, dict)

    def test_reward_is_always_zero(self, env):
        env.reset(seed=42)
        rng = np.random.default_rng(0)

        for _ in range(50):
            _, reward, terminated, truncated, _ = env.step(int(rng.integers(0, 2)))
            assert reward == 0.0
            if terminated or truncated:
                env.reset()

    def test_jump_action(self, env):
        env.reset(seed=42)

        _, _, _, _, info = env.step(ACTION_JUMP)

        assert info["jumped"]
        assert env.state.player_velocity_y < 0
        assert info["jumps_remaining"] == env.config.player.max_jumps - 1

    def test_numpy_action(self, env):
        env.reset(seed=42)
        _, _, _, _, info = env.step(np.array(1))
        assert info["jumped"]

    def test_info_contains_score(self, env):
        env.reset(seed=42)

        _, _, _, _, info = env.step(ACTION_NOOP)

        assert "score" in info
        assert "delta_score" in info
        assert "elapsed_seconds" in info
        assert info["elapsed_seconds"] == pytest.approx(env.frame_dt)

    def test_deterministic_with_seed(self, config):
        """Same seed and actions should produce identical observations."""
        env1 = DashEnv(config=config)
        env2 = DashEnv(config=config)

        env1.reset(seed=123)
        env2.reset(seed=123)

        for i in range(400):
            action = ACTION_JUMP if i % 50 == 0 else ACTION_NOOP
            obs1, _, t1, tr1, _ = env1.step(action)
            obs2, _, t2, tr2, _ = env2.step(action)

            assert np.array_equal(obs1["obs_height"], obs2["obs_height"])
            assert np.array_equal(obs1["obs_x"], obs2["obs_x"])
            assert t1 == t2

            if t1 or tr1:
                break

    def test_idle_episode_terminates_by_collision(self, env):
        """Never jumping should end the run on the first obstacle."""
        env.reset(seed=42)

        terminated = truncated = False
        info = {}
        steps = 0
        while not (terminated or truncated) and steps < 2000:
            _, _, terminated, truncated, info = env.step(ACTION_NOOP)
            steps += 1

        assert terminated
        assert not truncated
        assert info["terminated_reason"] == "collision"

    def test_truncation_at_time_cap(self, config):
        short = replace(config, caps=replace(config.caps, max_elapsed_seconds=0.1))
        env = DashEnv(config=short)
        env.reset(seed=1)

        truncated = False
        for _ in range(20):
            _, _, terminated, truncated, info = env.step(ACTION_NOOP)
            if truncated:
                break

        assert truncated
        assert not terminated
        assert info["terminated_reason"] == "time_limit"

    def test_render_ansi(self, config):
        env = DashEnv(config=config, render_mode="ansi")
        env.reset(seed=1)
        assert "Score:" in env.render()

    def test_render_none(self, env):
        env.reset(seed=1)
        assert env.render() is None
