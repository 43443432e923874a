"""
Baseline Jumper Agent - Jumps when the next obstacle is about to arrive.

A simple heuristic agent that reads the nearest-obstacle features from the
observation and times its jumps from the obstacle's approach speed.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark to compare against
3. A verification that the environment API works correctly

Strategy:
- Estimate time to impact = gap / |obstacle speed|
- Jump from the ground when impact is within LEAD_TIME seconds
- Spend the air jump at the top of the arc if the obstacle is tall
"""

from typing import Any, Dict

import numpy as np


# Seconds before impact to leave the ground
LEAD_TIME = 0.18
# Obstacles at least this tall get an air jump
TALL_OBSTACLE = 75.0


class JumperAgent:
    """Baseline agent timing jumps off the nearest obstacle."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def reset(self) -> None:
        """Stateless; nothing to reset."""

    def act(self, observation: Dict[str, Any]) -> int:
        """
        Decide whether to jump this frame.

        Args:
            observation: Dict of numpy arrays from the environment.

        Returns:
            1 to jump, 0 otherwise.
        """
        gap = float(observation["nearest_obstacle_distance"])
        height = float(observation["nearest_obstacle_height"])
        speed = abs(float(observation["nearest_obstacle_speed"]))
        on_ground = bool(observation["on_ground"])
        jumps_left = int(observation["jumps_remaining"])
        vy = float(observation["player_vy"])

        if height <= 0.0 or speed <= 0.0:
            return 0

        time_to_impact = gap / speed

        action = 0
        if on_ground and time_to_impact <= LEAD_TIME:
            action = 1
        elif not on_ground and jumps_left > 0 and vy >= 0.0 and height >= TALL_OBSTACLE:
            # Falling with a tall obstacle still ahead or underneath
            action = 1

        if self.debug and action:
            print(f"[Jumper] gap={gap:.0f} speed={speed:.0f} h={height:.0f} "
                  f"ground={on_ground} jumps_left={jumps_left}")

        return action


def act(observation: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return JumperAgent().act(observation)
