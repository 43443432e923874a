"""
Tests for renderer snapshots and observation packing.
"""

import json

import numpy as np
import pytest

from dash_runner.dash_core.config_loader import load_config
from dash_runner.dash_core.game import SimulationEngine
from dash_runner.dash_core.models import Obstacle
from dash_runner.dash_core.state_snapshot import SnapshotBuilder


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def engine(config):
    return SimulationEngine(config=config, seed=42)


@pytest.fixture
def builder(config):
    return SnapshotBuilder(config)


class TestRendererDict:
    """Test the flat transport layout."""

    def test_flat_keys(self, engine):
        data = engine.snapshot(engine.new_game()).to_dict()

        for key in ("playerX", "playerY", "playerWidth", "playerHeight",
                    "score", "elapsedSeconds", "isGameOver", "obstacles"):
            assert key in data
        assert data["obstacles"] == []
        assert data["isGameOver"] is False

    def test_obstacle_entries(self, engine):
        state = engine.new_game()
        state.obstacles.append(
            Obstacle(x=500.0, y=420.0, width=50.0, height=80.0, velocity_x=-400.0)
        )

        data = engine.snapshot(state).to_dict()

        assert data["obstacles"] == [{"x": 500.0, "y": 420.0, "width": 50.0, "height": 80.0}]

    def test_json_parses(self, engine):
        state = engine.new_game()
        engine.step(state, 0.016)

        parsed = json.loads(engine.snapshot(state).to_json())

        assert parsed["elapsedSeconds"] == pytest.approx(0.016)
        assert parsed["playerX"] == state.player_x

    def test_snapshot_is_detached(self, engine):
        """Later steps do not change an earlier snapshot."""
        state = engine.new_game()
        state.obstacles.append(
            Obstacle(x=500.0, y=420.0, width=50.0, height=80.0, velocity_x=-400.0)
        )
        snap = engine.snapshot(state)

        engine.step(state, 0.016)

        assert snap.obstacles[0].x == 500.0
        assert snap.elapsed_seconds == 0.0


class TestObservationArrays:
    """Test fixed-size observation packing."""

    def test_padding_and_mask(self, builder, engine, config):
        state = engine.new_game()
        state.obstacles.append(
            Obstacle(x=300.0, y=440.0, width=50.0, height=60.0, velocity_x=-420.0)
        )

        obs = builder.build(state).to_obs_dict()
        max_obs = config.observation.max_obstacles

        assert obs["obs_x"].shape == (max_obs,)
        assert obs["obs_mask"].dtype == bool
        assert obs["obs_mask"][0]
        assert not obs["obs_mask"][1:].any()
        assert obs["obs_x"][0] == pytest.approx(300.0)
        assert obs["obs_vx"][0] == pytest.approx(-420.0)
        assert int(obs["obstacle_count"]) == 1

    def test_truncates_to_capacity(self, builder, engine, config):
        state = engine.new_game()
        max_obs = config.observation.max_obstacles
        for i in range(max_obs + 3):
            state.obstacles.append(
                Obstacle(x=200.0 + 10 * i, y=450.0, width=50.0, height=50.0, velocity_x=-400.0)
            )

        obs = builder.build(state).to_obs_dict()

        assert obs["obs_mask"].sum() == max_obs
        assert int(obs["obstacle_count"]) == max_obs + 3

    def test_nearest_obstacle_features(self, builder, engine):
        state = engine.new_game()
        behind = Obstacle(x=10.0, y=450.0, width=50.0, height=50.0, velocity_x=-400.0)
        ahead = Obstacle(x=340.0, y=430.0, width=50.0, height=70.0, velocity_x=-450.0)
        state.obstacles.extend([behind, ahead])

        snap = builder.build(state)

        player_right = state.player_x + state.player_width
        assert snap.nearest_obstacle_distance == pytest.approx(340.0 - player_right)
        assert snap.nearest_obstacle_height == 70.0
        assert snap.nearest_obstacle_speed == -450.0

    def test_no_obstacle_ahead(self, builder, engine, config):
        snap = builder.build(engine.new_game())

        assert snap.nearest_obstacle_distance == config.world.width
        assert snap.nearest_obstacle_height == 0.0
        assert snap.on_ground
        assert isinstance(snap.to_obs_dict()["score"], np.ndarray)
