"""
Tests for the simulation engine lifecycle and step pipeline.
"""

import math
import random

import pytest

from dash_runner.dash_core.config_loader import load_config
from dash_runner.dash_core.game import SimulationEngine
from dash_runner.dash_core.models import Obstacle


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def engine(config):
    return SimulationEngine(config=config, seed=42)


def _run_until_game_over(engine, state, dt=0.016, max_steps=5000):
    for _ in range(max_steps):
        engine.step(state, dt)
        if state.is_game_over:
            return
    raise AssertionError("Run never ended")


def _first_spawn_step(engine, state, dt=0.016, max_steps=1000):
    for i in range(max_steps):
        engine.step(state, dt)
        if state.obstacles:
            return i
    raise AssertionError("No obstacle spawned")


def _frozen_view(state):
    return (
        state.score,
        state.elapsed_seconds,
        state.player_x,
        state.player_y,
        state.player_velocity_y,
        [(o.x, o.y, o.width, o.height) for o in state.obstacles],
    )


class TestNewGame:
    """Test run creation."""

    def test_defaults(self, engine, config):
        state = engine.new_game()

        assert state.player_x == config.player.start_x
        assert state.player_bottom == config.ground_y
        assert state.player_velocity_y == 0.0
        assert state.jumps_remaining == config.player.max_jumps
        assert state.obstacles == []
        assert state.score == 0
        assert state.elapsed_seconds == 0.0
        assert not state.is_game_over
        assert state.spawn_timer == 0.0
        assert state.next_spawn_interval == config.spawn.base_interval

    def test_reset_after_game_over(self, config):
        """A new run after game over starts from scratch, spawn timing included."""
        engine = SimulationEngine(config=config, seed=7)
        old = engine.new_game()
        _run_until_game_over(engine, old)
        assert old.is_game_over

        state = engine.new_game()

        assert state.score == 0
        assert state.elapsed_seconds == 0.0
        assert not state.is_game_over
        assert state.obstacles == []

        fresh_engine = SimulationEngine(config=config, seed=7)
        expected = _first_spawn_step(fresh_engine, fresh_engine.new_game())
        assert _first_spawn_step(engine, state) == expected

    def test_old_state_untouched_by_new_game(self, engine):
        old = engine.new_game()
        _run_until_game_over(engine, old)
        before = _frozen_view(old)

        engine.new_game()

        assert _frozen_view(old) == before


class TestStep:
    """Test the per-frame pipeline."""

    def test_returns_same_state(self, engine):
        state = engine.new_game()
        assert engine.step(state, 0.016) is state

    def test_delta_time_clamped(self, engine, config):
        state = engine.new_game()
        engine.step(state, 1.0)
        assert state.elapsed_seconds == pytest.approx(config.physics.max_delta_time)

    def test_negative_delta_is_zero(self, engine, config):
        state = engine.new_game()
        engine.step(state, -0.5)

        assert state.elapsed_seconds == 0.0
        assert state.score == 0
        assert state.player_bottom == config.ground_y

    def test_score_from_elapsed(self, engine):
        """Score is floor(10 * elapsed) and never decreases."""
        state = engine.new_game()
        rng = random.Random(11)
        last_score = 0
        last_elapsed = 0.0

        for _ in range(400):
            engine.step(state, rng.uniform(0.0, 0.04))
            if state.is_game_over:
                break
            assert state.score == math.floor(10 * state.elapsed_seconds)
            assert state.score >= last_score
            assert state.elapsed_seconds >= last_elapsed
            last_score = state.score
            last_elapsed = state.elapsed_seconds

    def test_offscreen_obstacles_removed(self, engine):
        state = engine.new_game()
        state.obstacles = [
            Obstacle(x=-45.0, y=450.0, width=50.0, height=50.0, velocity_x=-400.0),
            Obstacle(x=600.0, y=450.0, width=50.0, height=50.0, velocity_x=-400.0),
        ]

        engine.step(state, 0.016)

        assert len(state.obstacles) == 1
        assert state.obstacles[0].x == pytest.approx(600.0 - 6.4)
        for _ in range(300):
            engine.step(state, 0.016)
            assert all(o.x + o.width >= 0 for o in state.obstacles)

    def test_collision_ends_game(self, engine):
        state = engine.new_game()
        state.obstacles = [
            Obstacle(x=state.player_x, y=state.player_y, width=50.0, height=60.0, velocity_x=-400.0)
        ]

        engine.step(state, 0.016)

        assert state.is_game_over
        assert state.elapsed_seconds == pytest.approx(0.016)
        assert state.score == 0


class TestGameOver:
    """Test the terminal state."""

    def test_idempotent_after_game_over(self, engine):
        """Steps and jumps on a finished run change nothing."""
        state = engine.new_game()
        _run_until_game_over(engine, state)
        before = _frozen_view(state)

        for _ in range(20):
            engine.step(state, 0.016)
            assert not engine.player_jump(state)

        assert state.is_game_over
        assert _frozen_view(state) == before

    def test_collision_query_still_true(self, engine):
        state = engine.new_game()
        _run_until_game_over(engine, state)
        assert engine.check_collision(state)


class TestEndToEnd:
    """Scenario from a fresh run with the shipped spawn schedule."""

    def test_first_obstacle_after_base_interval(self, engine, config):
        assert config.spawn.base_interval == 2.5

        state = engine.new_game()
        for _ in range(100):
            engine.step(state, 0.016)

        assert state.elapsed_seconds == pytest.approx(1.6)
        assert state.obstacles == []

        while state.elapsed_seconds < 3.0:
            engine.step(state, 0.016)

        assert len(state.obstacles) >= 1
        assert not state.is_game_over

    def test_seeded_runs_match(self, config):
        """Two engines with the same seed produce identical runs."""
        a = SimulationEngine(config=config, seed=99)
        b = SimulationEngine(config=config, seed=99)
        sa = a.new_game()
        sb = b.new_game()

        for i in range(600):
            if i % 40 == 0:
                a.player_jump(sa)
                b.player_jump(sb)
            a.step(sa, 0.016)
            b.step(sb, 0.016)

        assert _frozen_view(sa) == _frozen_view(sb)
        assert sa.is_game_over == sb.is_game_over


class TestReporting:
    """Test debug and render helpers."""

    def test_debug_info(self, engine):
        state = engine.new_game()
        engine.step(state, 0.016)

        text = engine.get_debug_info(state)

        assert "Score: 0" in text
        assert "Obstacles: 0" in text
        assert "GameOver: False" in text

    def test_info(self, engine):
        state = engine.new_game()
        info = engine.get_info(state)

        assert info["score"] == 0
        assert info["obstacle_count"] == 0
        assert info["terminated_reason"] == ""

    def test_render_data_is_flat(self, engine):
        data = engine.get_render_data(engine.new_game())
        assert data["playerX"] == engine.config.player.start_x
        assert data["obstacles"] == []
