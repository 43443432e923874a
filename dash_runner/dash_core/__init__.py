"""
Dash Core - The heart of the runner game.

This module provides the deterministic game-state simulation, a Gymnasium
environment wrapper, and supporting systems (physics, spawning, collision,
scoring, leaderboard, replays).

Main exports:
- SimulationEngine: Frame-by-frame game simulation
- GameState: Mutable state of one run
- DashEnv: Gymnasium environment for agents
- Leaderboard: High score storage for finished runs
- GameConfig: Configuration loaded from game_config.yaml
"""

from dash_runner.dash_core.config_loader import GameConfig, load_config
from dash_runner.dash_core.models import GameState, Obstacle, Rect
from dash_runner.dash_core.game import SimulationEngine
from dash_runner.dash_core.state_snapshot import GameSnapshot
from dash_runner.dash_core.env_gym import DashEnv
from dash_runner.dash_core.leaderboard import HighScore, Leaderboard, LeaderboardError
from dash_runner.dash_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    replay_episode,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "GameState",
    "Obstacle",
    "Rect",
    "SimulationEngine",
    "GameSnapshot",
    "DashEnv",
    "HighScore",
    "Leaderboard",
    "LeaderboardError",
    "ReplayRecorder",
    "record_episode",
    "replay_episode",
    "generate_replay_filename",
]
