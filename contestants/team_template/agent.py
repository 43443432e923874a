"""
Starter agent for new teams.

dash-eval imports this file and looks for a `JumperAgent` class first, then
for a module-level `act(obs)` function. Return 1 to jump and 0 to keep
running. Useful observation keys: nearest_obstacle_distance,
nearest_obstacle_height, nearest_obstacle_speed, on_ground, jumps_remaining.

Try it with:
    dash-eval --agent contestants/team_template --max-seconds 30
"""

from __future__ import annotations

from typing import Dict

import numpy as np

# Pixels between player and obstacle at which to take off
JUMP_DISTANCE = 90.0


class JumperAgent:
    """Jumps when the next obstacle is closer than a fixed distance."""

    def __init__(self, jump_distance: float = JUMP_DISTANCE):
        self.jump_distance = jump_distance
        self.episodes = 0

    def reset(self) -> None:
        self.episodes += 1

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        if float(obs["nearest_obstacle_height"]) <= 0.0:
            return 0
        close = float(obs["nearest_obstacle_distance"]) < self.jump_distance
        return int(close and bool(obs["on_ground"]))


def act(obs: Dict[str, np.ndarray]) -> int:
    return JumperAgent().act(obs)
