"""
Leaderboard
===========

High score storage for finished runs. Scores live in memory, or in a JSON
file when a path is given. The simulation never depends on this module:
a failed write must not stop a new run from starting.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.models import GameState

logger = logging.getLogger(__name__)

LEADERBOARD_VERSION = "1.0"


class LeaderboardError(Exception):
    """Raised when the leaderboard file cannot be read or written."""


@dataclass
class HighScore:
    """One leaderboard entry."""
    player_name: str
    score: int
    date_achieved: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    user_id: Optional[str] = None


class Leaderboard:
    """
    Keeps high scores sorted for top-N queries.

    Usage:
        board = Leaderboard(path="scores.json")
        if state.is_game_over:
            board.submit_run(state, "alice")
        board.get_top_scores()
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize leaderboard.

        Args:
            path: JSON file to persist to. In-memory only if None.
            config: Game configuration. Uses default if None.

        Raises:
            LeaderboardError: If an existing file cannot be parsed.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._top_n = config.leaderboard.top_n
        self._default_name = config.leaderboard.default_player_name
        self._path = Path(path) if path is not None else None
        self._entries: List[HighScore] = []

        if self._path is not None and self._path.exists():
            self._entries = self._load(self._path)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def top_n(self) -> int:
        return self._top_n

    def add_high_score(
        self,
        player_name: Optional[str],
        score: int,
        user_id: Optional[str] = None
    ) -> HighScore:
        """
        Record a score.

        Args:
            player_name: Display name. Blank names become the default name.
            score: Final score, must be non-negative.
            user_id: Optional owner of the entry.

        Returns:
            The stored entry.

        Raises:
            ValueError: If score is negative.
            LeaderboardError: If the file cannot be written.
        """
        if score < 0:
            raise ValueError(f"Score must be non-negative, got {score}")

        name = player_name.strip() if player_name else ""
        entry = HighScore(
            player_name=name or self._default_name,
            score=int(score),
            user_id=user_id
        )
        self._entries.append(entry)
        try:
            self._save()
        except LeaderboardError:
            self._entries.pop()
            raise

        logger.info("Recorded score %d for %s", entry.score, entry.player_name)
        return entry

    def submit_run(
        self,
        state: GameState,
        player_name: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> HighScore:
        """
        Record the final score of a finished run.

        Raises:
            ValueError: If the run is still active.
        """
        if not state.is_game_over:
            raise ValueError("Cannot submit a run that is still in progress")
        return self.add_high_score(player_name, state.score, user_id=user_id)

    def get_top_scores(self, count: Optional[int] = None) -> List[HighScore]:
        """
        Highest scores first.

        Ties keep insertion order, so the earlier score ranks higher.

        Args:
            count: Number of entries. Defaults to the configured top_n.
        """
        if count is None:
            count = self._top_n
        ranked = sorted(self._entries, key=lambda e: e.score, reverse=True)
        return ranked[:max(0, count)]

    def is_top_score(self, score: int) -> bool:
        """True if score would place in the top N."""
        top = self.get_top_scores(self._top_n)
        if len(top) < self._top_n:
            return True
        return score > top[-1].score

    def get_score_rank(self, score: int) -> int:
        """Rank a score would take (1 = best)."""
        return sum(1 for e in self._entries if e.score > score) + 1

    def get_best_score(self) -> int:
        """Highest recorded score, or 0 if none exist."""
        if not self._entries:
            return 0
        return max(e.score for e in self._entries)

    def get_total_games(self) -> int:
        """Number of recorded runs."""
        return len(self._entries)

    def clear_all_scores(self) -> None:
        """
        Remove every entry.

        Raises:
            LeaderboardError: If the file cannot be written. The entries are
                kept in that case.
        """
        previous = self._entries
        self._entries = []
        try:
            self._save()
        except LeaderboardError:
            self._entries = previous
            raise
        logger.info("Cleared %d leaderboard entries", len(previous))

    def _load(self, path: Path) -> List[HighScore]:
        try:
            with open(path, "r") as f:
                data = json.load(f)
            return [
                HighScore(
                    player_name=str(item["player_name"]),
                    score=int(item["score"]),
                    date_achieved=str(item["date_achieved"]),
                    user_id=item.get("user_id")
                )
                for item in data["scores"]
            ]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise LeaderboardError(f"Failed to load leaderboard from {path}: {e}") from e

    def _save(self) -> None:
        if self._path is None:
            return

        data = {
            "version": LEADERBOARD_VERSION,
            "scores": [asdict(e) for e in self._entries],
        }

        # Write to a temp file, then replace
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove temporary file %s", tmp_path)
            raise LeaderboardError(f"Failed to save leaderboard to {self._path}: {e}") from e
