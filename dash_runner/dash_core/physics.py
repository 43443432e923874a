"""
Physics
=======

Player vertical integration (semi-implicit Euler with a ground clamp),
multi-jump handling and obstacle advection.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.models import GameState, Obstacle

logger = logging.getLogger(__name__)


class PlayerPhysics:
    """
    Integrates the player's vertical motion.

    Jump charges are spent on each jump and restored only by ground contact,
    which permits up to max_jumps consecutive jumps before landing.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize player physics.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._gravity = config.physics.gravity
        self._ground_y = config.world.ground_y
        self._max_jumps = config.player.max_jumps
        self._jump_velocity = config.player.jump_velocity
        self._ground_epsilon = config.player.ground_epsilon

    @property
    def ground_y(self) -> float:
        return self._ground_y

    @property
    def max_jumps(self) -> int:
        return self._max_jumps

    def is_on_ground(self, state: GameState) -> bool:
        """True if the player's bottom edge is within epsilon of the ground line."""
        return abs(state.player_bottom - self._ground_y) < self._ground_epsilon

    def integrate(self, state: GameState, dt: float) -> bool:
        """
        Advance the player by dt.

        Velocity is updated before position. If the bottom edge reaches the
        ground line it is snapped there, velocity is zeroed and jump charges
        are restored.

        Args:
            state: Game state to mutate.
            dt: Time step in seconds (already clamped).

        Returns:
            True if the player is resting on the ground after this step.
        """
        state.player_velocity_y += self._gravity * dt
        state.player_y += state.player_velocity_y * dt

        if state.player_bottom >= self._ground_y:
            if state.jumps_remaining < self._max_jumps:
                logger.debug("Player landed at t=%.3f", state.elapsed_seconds)
            state.player_y = self._ground_y - state.player_height
            state.player_velocity_y = 0.0
            state.jumps_remaining = self._max_jumps
            return True

        return False

    def jump(self, state: GameState) -> bool:
        """
        Apply a jump impulse if a charge is available.

        Args:
            state: Game state to mutate.

        Returns:
            True if the jump was applied, False if no charges were left.
        """
        if self.is_on_ground(state):
            state.jumps_remaining = self._max_jumps

        if state.jumps_remaining <= 0:
            return False

        state.player_velocity_y = self._jump_velocity
        state.jumps_remaining -= 1
        return True


def advance_obstacles(obstacles: List[Obstacle], dt: float) -> int:
    """
    Move obstacles by their velocity and drop those that left the screen.

    The list is filtered in place; surviving obstacles keep their order.

    Args:
        obstacles: Obstacle list owned by a GameState.
        dt: Time step in seconds.

    Returns:
        Number of obstacles removed.
    """
    for obstacle in obstacles:
        obstacle.x += obstacle.velocity_x * dt

    before = len(obstacles)
    obstacles[:] = [o for o in obstacles if not o.is_off_screen]
    return before - len(obstacles)
