"""
Game Models
===========

Mutable game state for a single run, plus the obstacle entity and the
axis-aligned bounding box used for collision tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box. Y grows downward."""
    x: float
    y: float
    width: float
    height: float

    def intersects(self, other: "Rect") -> bool:
        """
        Strict AABB overlap test.

        Rectangles that only share an edge do not intersect.
        """
        return (
            self.x < other.x + other.width
            and self.x + self.width > other.x
            and self.y < other.y + other.height
            and self.y + self.height > other.y
        )

    def __repr__(self) -> str:
        return f"Rect({self.x:.1f}, {self.y:.1f}, {self.width:.1f}x{self.height:.1f})"


@dataclass
class Obstacle:
    """A single obstacle sliding leftward along the ground."""
    x: float
    y: float
    width: float
    height: float
    velocity_x: float            # Negative = leftward

    @property
    def is_off_screen(self) -> bool:
        """True once the right edge has passed the left edge of the world."""
        return self.x + self.width < 0

    def get_bounds(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass
class GameState:
    """
    Complete state of one run.

    Mutated in place by SimulationEngine.step() and player_jump(). The spawn
    accumulator lives here so that each run carries its own spawn schedule.
    """
    # Player kinematics
    player_x: float
    player_y: float              # Top edge
    player_velocity_y: float
    player_width: float
    player_height: float
    jumps_remaining: int

    # World
    obstacles: List[Obstacle] = field(default_factory=list)

    # Progress
    score: int = 0
    elapsed_seconds: float = 0.0
    is_game_over: bool = False

    # Spawn accumulator
    spawn_timer: float = 0.0
    next_spawn_interval: float = 0.0

    @property
    def player_bottom(self) -> float:
        """Y coordinate of the player's bottom edge."""
        return self.player_y + self.player_height

    def get_player_bounds(self) -> Rect:
        return Rect(self.player_x, self.player_y, self.player_width, self.player_height)

    def __repr__(self) -> str:
        return (
            f"GameState(Player: {self.player_x:.1f},{self.player_y:.1f} "
            f"Vy:{self.player_velocity_y:.1f}, Score: {self.score}, "
            f"Obstacles: {len(self.obstacles)}, GameOver: {self.is_game_over})"
        )
