"""
State Snapshot
==============

Read-only views of a GameState for renderers and agents.

GameSnapshot.to_dict() uses a flat camelCase layout (playerX, playerY, ...,
obstacles: [{x, y, width, height}]) so a renderer in another process or
language can consume it as JSON. to_obs_dict() packs the same data into
fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.models import GameState


@dataclass(frozen=True)
class ObstacleView:
    """Immutable copy of one obstacle."""
    x: float
    y: float
    width: float
    height: float
    velocity_x: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class GameSnapshot:
    """
    Complete game state snapshot with a few derived features.

    Arrays are fixed-size with masking for variable obstacle counts.
    """
    # Player
    player_x: float
    player_y: float
    player_width: float
    player_height: float
    player_velocity_y: float
    jumps_remaining: int
    on_ground: bool

    # Progress
    score: int
    elapsed_seconds: float
    is_game_over: bool

    # World info (for normalization)
    world_width: float
    world_height: float
    ground_y: float

    obstacles: Tuple[ObstacleView, ...]

    # Derived features
    nearest_obstacle_distance: float  # Gap from player's right edge to next obstacle ahead
    nearest_obstacle_height: float    # 0 when nothing is ahead
    nearest_obstacle_speed: float     # 0 when nothing is ahead

    # Object arrays (fixed size, padded)
    obs_x: np.ndarray                 # (MAX_OBS,) float32
    obs_y: np.ndarray
    obs_width: np.ndarray
    obs_height: np.ndarray
    obs_vx: np.ndarray
    obs_mask: np.ndarray              # (MAX_OBS,) bool

    def to_dict(self) -> Dict[str, Any]:
        """Flat, JSON-safe dictionary for renderers."""
        return {
            "playerX": self.player_x,
            "playerY": self.player_y,
            "playerWidth": self.player_width,
            "playerHeight": self.player_height,
            "playerVelocityY": self.player_velocity_y,
            "jumpsRemaining": self.jumps_remaining,
            "score": self.score,
            "elapsedSeconds": self.elapsed_seconds,
            "isGameOver": self.is_game_over,
            "obstacles": [o.to_dict() for o in self.obstacles],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            # Player
            "player_y": np.array(self.player_y, dtype=np.float32),
            "player_vy": np.array(self.player_velocity_y, dtype=np.float32),
            "jumps_remaining": np.array(self.jumps_remaining, dtype=np.int32),
            "on_ground": np.array(int(self.on_ground), dtype=np.int8),

            # Progress
            "score": np.array(self.score, dtype=np.int64),
            "elapsed_seconds": np.array(self.elapsed_seconds, dtype=np.float32),
            "obstacle_count": np.array(len(self.obstacles), dtype=np.int32),

            # Derived
            "nearest_obstacle_distance": np.array(self.nearest_obstacle_distance, dtype=np.float32),
            "nearest_obstacle_height": np.array(self.nearest_obstacle_height, dtype=np.float32),
            "nearest_obstacle_speed": np.array(self.nearest_obstacle_speed, dtype=np.float32),

            # Object arrays
            "obs_x": self.obs_x,
            "obs_y": self.obs_y,
            "obs_width": self.obs_width,
            "obs_height": self.obs_height,
            "obs_vx": self.obs_vx,
            "obs_mask": self.obs_mask,
        }


class SnapshotBuilder:
    """Builds game state snapshots."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_obstacles = config.observation.max_obstacles
        self._world_width = config.world.width
        self._world_height = config.world.height
        self._ground_y = config.world.ground_y
        self._ground_epsilon = config.player.ground_epsilon

    @property
    def max_obstacles(self) -> int:
        return self._max_obstacles

    def build(self, state: GameState) -> GameSnapshot:
        """Build a snapshot from current game state."""
        obstacles = tuple(
            ObstacleView(o.x, o.y, o.width, o.height, o.velocity_x)
            for o in state.obstacles
        )

        # Fresh arrays each time: snapshots must not alias one another
        obs_x = np.zeros(self._max_obstacles, dtype=np.float32)
        obs_y = np.zeros(self._max_obstacles, dtype=np.float32)
        obs_width = np.zeros(self._max_obstacles, dtype=np.float32)
        obs_height = np.zeros(self._max_obstacles, dtype=np.float32)
        obs_vx = np.zeros(self._max_obstacles, dtype=np.float32)
        obs_mask = np.zeros(self._max_obstacles, dtype=bool)

        count = min(len(obstacles), self._max_obstacles)
        for i in range(count):
            o = obstacles[i]
            obs_x[i] = o.x
            obs_y[i] = o.y
            obs_width[i] = o.width
            obs_height[i] = o.height
            obs_vx[i] = o.velocity_x
            obs_mask[i] = True

        # Nearest obstacle whose right edge is still ahead of the player's left edge
        nearest_distance = self._world_width
        nearest_height = 0.0
        nearest_speed = 0.0
        player_right = state.player_x + state.player_width
        for o in obstacles:
            if o.x + o.width <= state.player_x:
                continue
            nearest_distance = max(0.0, o.x - player_right)
            nearest_height = o.height
            nearest_speed = o.velocity_x
            break

        on_ground = abs(state.player_bottom - self._ground_y) < self._ground_epsilon

        return GameSnapshot(
            player_x=state.player_x,
            player_y=state.player_y,
            player_width=state.player_width,
            player_height=state.player_height,
            player_velocity_y=state.player_velocity_y,
            jumps_remaining=state.jumps_remaining,
            on_ground=on_ground,
            score=state.score,
            elapsed_seconds=state.elapsed_seconds,
            is_game_over=state.is_game_over,
            world_width=self._world_width,
            world_height=self._world_height,
            ground_y=self._ground_y,
            obstacles=obstacles,
            nearest_obstacle_distance=nearest_distance,
            nearest_obstacle_height=nearest_height,
            nearest_obstacle_speed=nearest_speed,
            obs_x=obs_x,
            obs_y=obs_y,
            obs_width=obs_width,
            obs_height=obs_height,
            obs_vx=obs_vx,
            obs_mask=obs_mask,
        )
