"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the runner game.
Each env step advances the simulation by one frame of physics.frame_dt.
Reward is always 0.0 - agents must compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from dash_runner.dash_core.config_loader import GameConfig, load_config
from dash_runner.dash_core.game import SimulationEngine
from dash_runner.dash_core.models import GameState

logger = logging.getLogger(__name__)

ACTION_NOOP = 0
ACTION_JUMP = 1


class DashEnv(gym.Env):
    """
    Endless runner as a Gymnasium environment.

    Action Space:
        Discrete(2). 0 = do nothing, 1 = jump (edge-triggered, applied
        before the frame is simulated).

    Observation Space:
        Dict of player state, progress counters, nearest-obstacle features
        and fixed-size padded obstacle arrays.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, elapsed_seconds, obstacle_count,
        jumps_remaining, terminated_reason and jumped.
    """

    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        frame_dt: Optional[float] = None,
        debug: bool = False,
    ):
        """
        Initialize runner environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already-loaded configuration. Takes precedence over config_path.
            render_mode: "ansi" for a text summary, None for headless.
            frame_dt: Override seconds simulated per env step.
            debug: If True, logs every step at DEBUG level.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)

        self.render_mode = render_mode
        self._debug = debug
        self._frame_dt = frame_dt or self._config.physics.frame_dt

        self._engine = SimulationEngine(config=self._config)
        self._state: GameState = self._engine.new_game()

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            logger.debug("DashEnv initialized")
            logger.debug("  World: %sx%s", self._config.world.width, self._config.world.height)
            logger.debug("  Ground Y: %s", self._config.world.ground_y)
            logger.debug("  Max obstacles: %s", self._config.observation.max_obstacles)

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obs = self._config.observation.max_obstacles
        world = self._config.world
        max_jumps = self._config.player.max_jumps

        return spaces.Dict({
            # Player
            "player_y": spaces.Box(low=-np.inf, high=world.ground_y, shape=(), dtype=np.float32),
            "player_vy": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "jumps_remaining": spaces.Box(low=0, high=max_jumps, shape=(), dtype=np.int32),
            "on_ground": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),

            # Progress
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "elapsed_seconds": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "obstacle_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),

            # Derived
            "nearest_obstacle_distance": spaces.Box(low=0, high=world.width, shape=(), dtype=np.float32),
            "nearest_obstacle_height": spaces.Box(low=0, high=world.ground_y, shape=(), dtype=np.float32),
            "nearest_obstacle_speed": spaces.Box(low=-np.inf, high=0, shape=(), dtype=np.float32),

            # Object arrays
            "obs_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_obs,), dtype=np.float32),
            "obs_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_obs,), dtype=np.float32),
            "obs_width": spaces.Box(low=0, high=world.width, shape=(max_obs,), dtype=np.float32),
            "obs_height": spaces.Box(low=0, high=world.ground_y, shape=(max_obs,), dtype=np.float32),
            "obs_vx": spaces.Box(low=-np.inf, high=0, shape=(max_obs,), dtype=np.float32),
            "obs_mask": spaces.MultiBinary(max_obs),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._state = self._engine.new_game(seed=seed)

        obs = self._engine.snapshot(self._state).to_obs_dict()
        info = self._engine.get_info(self._state)
        info["delta_score"] = 0
        info["jumped"] = False

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 0 (no-op) or 1 (jump). Any nonzero value jumps.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])

        score_before = self._state.score

        jumped = False
        if int(action) != ACTION_NOOP:
            jumped = self._engine.player_jump(self._state)

        self._engine.step(self._state, self._frame_dt)

        obs = self._engine.snapshot(self._state).to_obs_dict()

        # Reward is always 0.0 - agents compute their own
        reward = 0.0

        termination = self._engine.rules.termination.check_termination(self._state)

        info = self._engine.get_info(self._state)
        info["delta_score"] = self._state.score - score_before
        info["jumped"] = jumped

        if self._debug:
            logger.debug(
                "Step: action=%d, jumped=%s, delta_score=%d, obstacles=%d, y=%.1f",
                int(action), jumped, info["delta_score"],
                info["obstacle_count"], self._state.player_y
            )
            if termination.terminated:
                logger.debug("TERMINATED: %s", termination.reason)

        return obs, reward, termination.terminated, termination.truncated, info

    def render(self) -> Optional[str]:
        """
        Render the current game state.

        Returns:
            Text summary if render_mode is "ansi", None otherwise.
        """
        if self.render_mode == "ansi":
            return self._engine.get_debug_info(self._state)
        return None

    def close(self) -> None:
        """Nothing to release; kept for API symmetry."""

    @property
    def engine(self) -> SimulationEngine:
        """Access to underlying engine (for debugging/tools)."""
        return self._engine

    @property
    def state(self) -> GameState:
        """Current game state (live object, not a copy)."""
        return self._state

    @property
    def frame_dt(self) -> float:
        """Seconds simulated per env step."""
        return self._frame_dt

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
