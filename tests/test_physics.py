"""
Tests for player physics: gravity, ground clamp and multi-jump.
"""

import random

import pytest

from dash_runner.dash_core.config_loader import load_config
from dash_runner.dash_core.game import SimulationEngine
from dash_runner.dash_core.models import Obstacle
from dash_runner.dash_core.physics import PlayerPhysics, advance_obstacles


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def engine(config):
    return SimulationEngine(config=config, seed=42)


@pytest.fixture
def physics(config):
    return PlayerPhysics(config)


class TestGroundClamp:
    """Test the ground line invariant."""

    def test_new_game_rests_on_ground(self, engine, config):
        """Fresh player's bottom edge touches the ground line."""
        state = engine.new_game()

        assert state.player_bottom == config.ground_y
        assert state.player_velocity_y == 0.0
        assert state.jumps_remaining == config.player.max_jumps

    def test_never_below_ground_without_input(self, engine, config):
        """No step sequence sinks the player below the ground line."""
        state = engine.new_game()
        rng = random.Random(3)

        for _ in range(500):
            engine.step(state, rng.uniform(0.0, 0.05))
            assert state.player_bottom <= config.ground_y
            assert state.player_velocity_y == 0.0

    def test_landing_zeroes_velocity(self, engine, config):
        """After a jump, the landing step snaps to ground with zero velocity."""
        state = engine.new_game()
        engine.player_jump(state)

        landed = False
        for _ in range(200):
            engine.step(state, 0.016)
            assert state.player_bottom <= config.ground_y
            if state.player_bottom == config.ground_y:
                landed = True
                break

        assert landed
        assert state.player_velocity_y == 0.0
        assert state.jumps_remaining == config.player.max_jumps

    def test_semi_implicit_euler(self, physics, engine, config):
        """Velocity is updated before position."""
        state = engine.new_game()
        state.player_y -= 100.0  # airborne
        y0 = state.player_y
        dt = 0.01

        landed = physics.integrate(state, dt)

        expected_v = config.physics.gravity * dt
        assert not landed
        assert state.player_velocity_y == pytest.approx(expected_v)
        assert state.player_y == pytest.approx(y0 + expected_v * dt)


class TestMultiJump:
    """Test the jump charge budget."""

    def test_max_jumps_then_noop(self, engine, config):
        """M jumps change velocity, the (M+1)-th before landing does not."""
        state = engine.new_game()
        max_jumps = config.player.max_jumps

        for _ in range(max_jumps):
            before = state.player_velocity_y
            assert engine.player_jump(state)
            assert state.player_velocity_y != before
            assert state.player_velocity_y == config.player.jump_velocity
            engine.step(state, 0.016)

        assert state.jumps_remaining == 0

        before_v = state.player_velocity_y
        before_y = state.player_y
        assert not engine.player_jump(state)
        assert state.player_velocity_y == before_v
        assert state.player_y == before_y
        assert state.jumps_remaining == 0

    def test_ground_jump_refills_charges(self, physics, engine, config):
        """Jumping from the ground starts from a full budget."""
        state = engine.new_game()
        state.jumps_remaining = 0  # not yet replenished this frame

        assert physics.jump(state)
        assert state.jumps_remaining == config.player.max_jumps - 1

    def test_airborne_without_charges(self, physics, engine):
        """Airborne jump with no charges leaves state untouched."""
        state = engine.new_game()
        state.player_y -= 50.0
        state.player_velocity_y = 120.0
        state.jumps_remaining = 0

        assert not physics.jump(state)
        assert state.player_velocity_y == 120.0

    def test_is_on_ground_epsilon(self, physics, engine, config):
        """Within epsilon of the ground counts as grounded."""
        state = engine.new_game()
        state.player_y -= config.player.ground_epsilon / 2
        assert physics.is_on_ground(state)

        state.player_y -= config.player.ground_epsilon
        assert not physics.is_on_ground(state)


class TestAdvanceObstacles:
    """Test obstacle movement and culling."""

    def test_moves_by_velocity(self):
        obstacles = [Obstacle(x=300.0, y=400.0, width=50.0, height=100.0, velocity_x=-400.0)]

        removed = advance_obstacles(obstacles, 0.01)

        assert removed == 0
        assert obstacles[0].x == pytest.approx(296.0)

    def test_culls_and_preserves_order(self):
        """Off-screen obstacles are dropped, survivors keep spawn order."""
        gone = Obstacle(x=-45.0, y=400.0, width=50.0, height=100.0, velocity_x=-400.0)
        edge = Obstacle(x=-40.0, y=420.0, width=50.0, height=80.0, velocity_x=-400.0)
        mid = Obstacle(x=300.0, y=430.0, width=50.0, height=70.0, velocity_x=-400.0)
        far = Obstacle(x=700.0, y=440.0, width=50.0, height=60.0, velocity_x=-400.0)
        obstacles = [gone, edge, mid, far]

        removed = advance_obstacles(obstacles, 0.016)

        assert removed == 1
        assert obstacles == [edge, mid, far]
        assert all(o.x + o.width >= 0 for o in obstacles)
