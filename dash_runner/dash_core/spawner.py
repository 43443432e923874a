"""
Obstacle Spawner
================

Time-based procedural obstacle generation. The spawn interval shrinks and
obstacle speed grows linearly with elapsed time; obstacle heights come from
an injected, seedable random source.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.models import GameState, Obstacle

logger = logging.getLogger(__name__)


class ObstacleSpawner:
    """
    Spawns obstacles at the right edge of the world.

    The accumulator (time since last spawn) and the scheduled interval are
    read from and written to the GameState, so the spawner itself holds no
    per-run state beyond its random source.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source to draw heights from. Takes precedence over seed.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else random.Random(seed)

        spawn = config.spawn
        self._base_interval = spawn.base_interval
        self._min_interval = spawn.min_interval
        self._speed_factor = spawn.speed_factor

        obstacles = config.obstacles
        self._width = obstacles.width
        self._min_height = obstacles.min_height
        self._max_height = obstacles.max_height
        self._base_speed = obstacles.base_speed
        self._speed_growth = obstacles.speed_growth

        self._spawn_x = config.world.width
        self._ground_y = config.world.ground_y

    @property
    def base_interval(self) -> float:
        return self._base_interval

    @property
    def rng(self) -> random.Random:
        return self._rng

    def reseed(self, seed: Optional[int]) -> None:
        """Replace the random source with a fresh one seeded with seed."""
        self._rng = random.Random(seed)

    def spawn_interval(self, elapsed_seconds: float) -> float:
        """Spawn interval at a given elapsed time, floored at min_interval."""
        return max(
            self._base_interval - self._speed_factor * elapsed_seconds,
            self._min_interval
        )

    def obstacle_speed(self, elapsed_seconds: float) -> float:
        """Horizontal velocity for an obstacle spawned at elapsed_seconds."""
        return self._base_speed - self._speed_growth * elapsed_seconds

    def make_obstacle(self, elapsed_seconds: float) -> Obstacle:
        """
        Create an obstacle resting on the ground at the right edge.

        Args:
            elapsed_seconds: Run time at spawn, drives the speed schedule.

        Returns:
            New Obstacle (not yet added to any state).
        """
        height = self._rng.uniform(self._min_height, self._max_height)
        return Obstacle(
            x=self._spawn_x,
            y=self._ground_y - height,
            width=self._width,
            height=height,
            velocity_x=self.obstacle_speed(elapsed_seconds)
        )

    def update(self, state: GameState, dt: float) -> Optional[Obstacle]:
        """
        Accumulate dt and spawn an obstacle when the scheduled interval is reached.

        The interval computed at this step becomes the target for the next
        spawn; the one that just elapsed was scheduled by the previous spawn.

        Args:
            state: Game state to mutate.
            dt: Time step in seconds.

        Returns:
            The spawned Obstacle, or None.
        """
        interval = self.spawn_interval(state.elapsed_seconds)
        state.spawn_timer += dt

        if state.spawn_timer < state.next_spawn_interval:
            return None

        state.spawn_timer = 0.0
        state.next_spawn_interval = interval

        obstacle = self.make_obstacle(state.elapsed_seconds)
        state.obstacles.append(obstacle)
        logger.debug(
            "Spawned obstacle h=%.1f vx=%.1f at t=%.3f (next in %.3fs)",
            obstacle.height, obstacle.velocity_x, state.elapsed_seconds, interval
        )
        return obstacle
