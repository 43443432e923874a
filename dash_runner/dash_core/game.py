"""
Simulation Engine
=================

Main game orchestrator combining physics, spawning, collision and scoring.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from dash_runner.dash_core.collision import check_collision
from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.models import GameState
from dash_runner.dash_core.physics import PlayerPhysics, advance_obstacles
from dash_runner.dash_core.rules import GameRules
from dash_runner.dash_core.scoring import ScoreTracker
from dash_runner.dash_core.spawner import ObstacleSpawner
from dash_runner.dash_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Advances a GameState one frame at a time.

    Orchestrates:
    - Time-step clamping
    - Score from elapsed time
    - Player physics and jumps
    - Obstacle spawning, movement and culling
    - Collision and the terminal game-over transition

    The engine is not thread-safe. Callers must serialize step() and
    player_jump() calls for a given state.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize engine.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for obstacle heights.
            rng: Explicit random source. Takes precedence over seed.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        self._physics = PlayerPhysics(config)
        self._spawner = ObstacleSpawner(config, rng=rng, seed=seed)
        self._scorer = ScoreTracker(config)
        self._rules = GameRules(config)
        self._snapshot_builder = SnapshotBuilder(config)

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def physics(self) -> PlayerPhysics:
        return self._physics

    @property
    def spawner(self) -> ObstacleSpawner:
        return self._spawner

    @property
    def rules(self) -> GameRules:
        return self._rules

    def new_game(self, seed: Optional[int] = None) -> GameState:
        """
        Create a fresh run.

        Args:
            seed: New random seed. Keeps the current random stream if None.

        Returns:
            GameState with the player resting on the ground and an empty
            obstacle list. Its spawn timer starts at zero with the base
            interval scheduled.
        """
        if seed is not None:
            self._seed = seed
            self._spawner.reseed(seed)

        player = self._config.player
        return GameState(
            player_x=player.start_x,
            player_y=self._config.player_rest_y,
            player_velocity_y=0.0,
            player_width=player.width,
            player_height=player.height,
            jumps_remaining=player.max_jumps,
            obstacles=[],
            score=0,
            elapsed_seconds=0.0,
            is_game_over=False,
            spawn_timer=0.0,
            next_spawn_interval=self._spawner.base_interval,
        )

    def step(self, state: GameState, delta_time: float) -> GameState:
        """
        Advance state by one frame.

        Args:
            state: Game state to mutate in place.
            delta_time: Seconds since the previous frame. Negative values
                are treated as zero; large values are capped.

        Returns:
            The same state object.
        """
        if state.is_game_over:
            return state

        dt = self._rules.time_step.clamp(delta_time)

        state.elapsed_seconds += dt
        state.score = self._scorer.compute(state.elapsed_seconds)

        self._physics.integrate(state, dt)
        self._spawner.update(state, dt)
        advance_obstacles(state.obstacles, dt)

        if check_collision(state):
            state.is_game_over = True
            logger.info(
                "Game over at t=%.2fs with score %d", state.elapsed_seconds, state.score
            )

        return state

    def player_jump(self, state: GameState) -> bool:
        """
        Handle one jump input event.

        Args:
            state: Game state to mutate.

        Returns:
            True if a jump was applied. False on a finished game or when no
            jump charges remain (silent no-op).
        """
        if state.is_game_over:
            return False
        return self._physics.jump(state)

    def check_collision(self, state: GameState) -> bool:
        """True if the player currently overlaps any obstacle."""
        return check_collision(state)

    def snapshot(self, state: GameState) -> GameSnapshot:
        """Immutable view of state for renderers and agents."""
        return self._snapshot_builder.build(state)

    def get_info(self, state: GameState) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        termination = self._rules.termination.check_termination(state)
        return {
            "score": state.score,
            "elapsed_seconds": state.elapsed_seconds,
            "obstacle_count": len(state.obstacles),
            "jumps_remaining": state.jumps_remaining,
            "terminated_reason": termination.reason,
        }

    def get_render_data(self, state: GameState) -> Dict[str, Any]:
        """Flat snapshot dict (playerX, playerY, ..., obstacles)."""
        return self.snapshot(state).to_dict()

    def get_debug_info(self, state: GameState) -> str:
        """One-line summary of a run for debugging."""
        return (
            f"Time: {state.elapsed_seconds:.2f}s | Score: {state.score} | "
            f"Player Y: {state.player_y:.1f} | Obstacles: {len(state.obstacles)} | "
            f"GameOver: {state.is_game_over}"
        )
