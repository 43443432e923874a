"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class WorldConfig:
    """Visible world geometry."""
    width: float                 # Spawn X for new obstacles
    height: float
    ground_y: float              # Ground line (bottom edges rest here)


@dataclass(frozen=True)
class PlayerConfig:
    """Player size, start position and jump tuning."""
    start_x: float
    width: float
    height: float
    max_jumps: int
    jump_velocity: float         # Negative = upward
    ground_epsilon: float


@dataclass(frozen=True)
class PhysicsConfig:
    """Integration parameters."""
    gravity: float
    max_delta_time: float
    frame_dt: float


@dataclass(frozen=True)
class SpawnConfig:
    """Spawn interval schedule."""
    base_interval: float
    min_interval: float
    speed_factor: float


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle size range and speed schedule."""
    width: float
    min_height: float
    max_height: float
    base_speed: float
    speed_growth: float


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    points_per_second: int


@dataclass(frozen=True)
class CapsConfig:
    """Run limits."""
    max_elapsed_seconds: float


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_obstacles: int


@dataclass(frozen=True)
class LeaderboardConfig:
    """Leaderboard parameters."""
    top_n: int
    default_player_name: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    world: WorldConfig
    player: PlayerConfig
    physics: PhysicsConfig
    spawn: SpawnConfig
    obstacles: ObstacleConfig
    scoring: ScoringConfig
    caps: CapsConfig
    observation: ObservationConfig
    leaderboard: LeaderboardConfig

    @property
    def ground_y(self) -> float:
        """Y coordinate of the ground line."""
        return self.world.ground_y

    @property
    def player_rest_y(self) -> float:
        """Player top edge when standing on the ground."""
        return self.world.ground_y - self.player.height


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.world.width <= 0 or config.world.height <= 0:
        raise ValueError(
            f"World size must be positive, got {config.world.width}x{config.world.height}"
        )

    if not 0 < config.world.ground_y <= config.world.height:
        raise ValueError(
            f"ground_y ({config.world.ground_y}) must lie within the world height "
            f"({config.world.height})"
        )

    if config.player.width <= 0 or config.player.height <= 0:
        raise ValueError("Player width and height must be positive")

    if config.player.max_jumps < 1:
        raise ValueError(f"max_jumps must be at least 1, got {config.player.max_jumps}")

    if config.player.jump_velocity >= 0:
        raise ValueError(
            f"jump_velocity must be negative (upward), got {config.player.jump_velocity}"
        )

    if config.physics.max_delta_time <= 0:
        raise ValueError(f"max_delta_time must be positive, got {config.physics.max_delta_time}")

    if config.physics.frame_dt <= 0:
        raise ValueError(f"frame_dt must be positive, got {config.physics.frame_dt}")

    # Interval schedule
    if config.spawn.min_interval <= 0:
        raise ValueError(f"min_interval must be positive, got {config.spawn.min_interval}")
    if config.spawn.base_interval < config.spawn.min_interval:
        raise ValueError(
            f"base_interval ({config.spawn.base_interval}) must not be below "
            f"min_interval ({config.spawn.min_interval})"
        )
    if config.spawn.speed_factor < 0:
        raise ValueError(f"speed_factor must be non-negative, got {config.spawn.speed_factor}")

    # Obstacles must move left and rest on the ground
    if config.obstacles.width <= 0:
        raise ValueError(f"Obstacle width must be positive, got {config.obstacles.width}")
    if not 0 < config.obstacles.min_height <= config.obstacles.max_height:
        raise ValueError(
            f"Obstacle heights must satisfy 0 < min_height <= max_height, got "
            f"[{config.obstacles.min_height}, {config.obstacles.max_height}]"
        )
    if config.obstacles.max_height > config.world.ground_y:
        raise ValueError(
            f"max_height ({config.obstacles.max_height}) exceeds ground_y ({config.world.ground_y})"
        )
    if config.obstacles.base_speed >= 0:
        raise ValueError(
            f"base_speed must be negative (leftward), got {config.obstacles.base_speed}"
        )
    if config.obstacles.speed_growth < 0:
        raise ValueError(
            f"speed_growth must be non-negative, got {config.obstacles.speed_growth}"
        )

    if config.scoring.points_per_second <= 0:
        raise ValueError(
            f"points_per_second must be positive, got {config.scoring.points_per_second}"
        )

    if config.observation.max_obstacles < 1:
        raise ValueError(
            f"observation.max_obstacles must be at least 1, got {config.observation.max_obstacles}"
        )

    if config.leaderboard.top_n < 1:
        raise ValueError(f"leaderboard.top_n must be at least 1, got {config.leaderboard.top_n}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    world_data = raw["world"]
    world = WorldConfig(
        width=float(world_data["width"]),
        height=float(world_data["height"]),
        ground_y=float(world_data["ground_y"])
    )

    player_data = raw["player"]
    player = PlayerConfig(
        start_x=float(player_data["start_x"]),
        width=float(player_data["width"]),
        height=float(player_data["height"]),
        max_jumps=int(player_data.get("max_jumps", 2)),
        jump_velocity=float(player_data["jump_velocity"]),
        ground_epsilon=float(player_data.get("ground_epsilon", 1.0))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        max_delta_time=float(physics_data.get("max_delta_time", 0.033)),
        frame_dt=float(physics_data.get("frame_dt", 0.016))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        base_interval=float(spawn_data["base_interval"]),
        min_interval=float(spawn_data["min_interval"]),
        speed_factor=float(spawn_data["speed_factor"])
    )

    obstacle_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        width=float(obstacle_data["width"]),
        min_height=float(obstacle_data["min_height"]),
        max_height=float(obstacle_data["max_height"]),
        base_speed=float(obstacle_data["base_speed"]),
        speed_growth=float(obstacle_data.get("speed_growth", 0.0))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        points_per_second=int(scoring_data.get("points_per_second", 10))
    )

    # Optional sections
    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_elapsed_seconds=float(caps_data.get("max_elapsed_seconds", 300.0))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_obstacles=int(obs_data.get("max_obstacles", 16))
    )

    lb_data = raw.get("leaderboard", {})
    leaderboard = LeaderboardConfig(
        top_n=int(lb_data.get("top_n", 5)),
        default_player_name=str(lb_data.get("default_player_name", "Player"))
    )

    config = GameConfig(
        world=world,
        player=player,
        physics=physics,
        spawn=spawn,
        obstacles=obstacles,
        scoring=scoring,
        caps=caps,
        observation=observation,
        leaderboard=leaderboard
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
