"""
Game Rules
==========

Handles the time-step policy and termination conditions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.models import GameState

logger = logging.getLogger(__name__)


REASON_COLLISION = "collision"
REASON_TIME_LIMIT = "time_limit"


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    truncated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, False, reason)

    @staticmethod
    def truncation(reason: str) -> "TerminationResult":
        return TerminationResult(False, True, reason)


class TimeStepRules:
    """
    Sanitizes caller-supplied frame times.

    Negative deltas are treated as zero. Positive deltas are capped at
    max_delta_time.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._max_delta_time = config.physics.max_delta_time

    @property
    def max_delta_time(self) -> float:
        return self._max_delta_time

    def clamp(self, delta_time: float) -> float:
        """Clamp delta_time into [0, max_delta_time]."""
        if delta_time < 0:
            logger.warning("Negative delta_time %.6f clamped to 0", delta_time)
            return 0.0
        return min(delta_time, self._max_delta_time)


class TerminationRules:
    """
    Decides when a run ends.

    A collision terminates the run. Exceeding max_elapsed_seconds truncates
    it (used by the Gymnasium wrapper; the engine itself never truncates).
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._max_elapsed_seconds = config.caps.max_elapsed_seconds

    @property
    def max_elapsed_seconds(self) -> float:
        return self._max_elapsed_seconds

    def check_termination(self, state: GameState) -> TerminationResult:
        """
        Check termination conditions for a state.

        Args:
            state: Current game state.

        Returns:
            TerminationResult with flags and reason.
        """
        if state.is_game_over:
            return TerminationResult.game_over(REASON_COLLISION)

        if state.elapsed_seconds >= self._max_elapsed_seconds:
            return TerminationResult.truncation(REASON_TIME_LIMIT)

        return TerminationResult.none()


class GameRules:
    """Container for all game rules."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self.time_step = TimeStepRules(config)
        self.termination = TerminationRules(config)
