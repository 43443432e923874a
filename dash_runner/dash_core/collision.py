"""
Collision Detection
===================

AABB tests between the player and obstacles.
"""

from __future__ import annotations

from typing import Optional

from dash_runner.dash_core.models import GameState, Obstacle, Rect


def rects_intersect(a: Rect, b: Rect) -> bool:
    """Strict overlap on both axes; touching edges do not count."""
    return a.intersects(b)


def find_collision(state: GameState) -> Optional[Obstacle]:
    """Return the first obstacle overlapping the player, or None."""
    player = state.get_player_bounds()
    for obstacle in state.obstacles:
        if player.intersects(obstacle.get_bounds()):
            return obstacle
    return None


def check_collision(state: GameState) -> bool:
    """True if the player overlaps any obstacle. Does not mutate state."""
    return find_collision(state) is not None

