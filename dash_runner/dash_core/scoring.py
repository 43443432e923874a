"""
Scoring System
==============

Score is a pure function of elapsed run time.
"""

from __future__ import annotations

import math
from typing import Optional

from dash_runner.dash_core.config_loader import GameConfig, get_config


def score_for_elapsed(elapsed_seconds: float, points_per_second: int) -> int:
    """floor(elapsed_seconds * points_per_second)."""
    return int(math.floor(elapsed_seconds * points_per_second))


class ScoreTracker:
    """
    Computes the score for a run.

    Never increments on its own: the score is recomputed from elapsed time
    on every step, which makes it monotonic whenever elapsed time is.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._points_per_second = config.scoring.points_per_second

    @property
    def points_per_second(self) -> int:
        return self._points_per_second

    def compute(self, elapsed_seconds: float) -> int:
        """Score for a run that has lasted elapsed_seconds."""
        return score_for_elapsed(elapsed_seconds, self._points_per_second)
