"""
Replay Recorder
===============

A run is fully determined by its seed, the frame time and the frames on
which a jump was requested. The recorder captures exactly that, so a replay
file stays small even for long runs, and `replay_episode` rebuilds the run
on a fresh SimulationEngine.

Usage:
    env = ReplayRecorder(DashEnv(), agent_name="my_agent")
    obs, info = env.reset(seed=42)
    ...
    env.save("my_replay.json")
    state = replay_episode(load_replay("my_replay.json"))
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import gymnasium as gym
import numpy as np

from dash_runner.dash_core.config_loader import GameConfig, get_config
from dash_runner.dash_core.env_gym import ACTION_NOOP, DashEnv
from dash_runner.dash_core.game import SimulationEngine
from dash_runner.dash_core.models import GameState

logger = logging.getLogger(__name__)

REPLAY_VERSION = "1.0"


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """Timestamped name: {agent}_{YYYYmmdd_HHMMSS}[_s{seed}].json"""
    stem = f"{agent_name}_{datetime.now():%Y%m%d_%H%M%S}"
    if seed is not None:
        stem += f"_s{seed}"
    return Path(directory or ".") / f"{stem}.json"


def compute_config_hash(config: GameConfig) -> str:
    """Short digest of every parameter that changes how a run plays out."""
    sections = {
        "world": (config.world.width, config.world.ground_y),
        "player": (
            config.player.start_x,
            config.player.width,
            config.player.height,
            config.player.max_jumps,
            config.player.jump_velocity,
            config.player.ground_epsilon,
        ),
        "physics": (config.physics.gravity, config.physics.max_delta_time),
        "spawn": (
            config.spawn.base_interval,
            config.spawn.min_interval,
            config.spawn.speed_factor,
        ),
        "obstacles": (
            config.obstacles.width,
            config.obstacles.min_height,
            config.obstacles.max_height,
            config.obstacles.base_speed,
            config.obstacles.speed_growth,
        ),
        "scoring": (config.scoring.points_per_second,),
    }
    payload = json.dumps(sections, sort_keys=True).encode()
    return hashlib.md5(payload).hexdigest()[:8]


@dataclass
class Replay:
    """Everything needed to reproduce one run."""
    seed: Optional[int]
    config_hash: str
    frame_dt: float
    agent: str = "unknown"
    jump_frames: List[int] = field(default_factory=list)
    total_steps: int = 0
    final_score: int = 0
    termination_reason: str = ""
    version: str = REPLAY_VERSION

    def actions(self) -> List[int]:
        """Expand jump_frames back into one 0/1 action per frame."""
        actions = [0] * self.total_steps
        for frame in self.jump_frames:
            actions[frame] = 1
        return actions

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Replay":
        return cls(
            seed=data.get("seed"),
            config_hash=str(data["config_hash"]),
            frame_dt=float(data["frame_dt"]),
            agent=str(data.get("agent", "unknown")),
            jump_frames=[int(f) for f in data.get("jump_frames", [])],
            total_steps=int(data.get("total_steps", 0)),
            final_score=int(data.get("final_score", 0)),
            termination_reason=str(data.get("termination_reason", "")),
            version=str(data.get("version", REPLAY_VERSION)),
        )


class ReplayRecorder(gym.Wrapper):
    """
    Gymnasium wrapper that logs the jump inputs of the current episode.

    Each reset starts a new recording. Frames are counted per env step and
    a frame is stored whenever a jump was requested, whether or not the
    engine accepted it: the engine decides that again on playback.
    """

    def __init__(self, env: DashEnv, agent_name: str = "unknown"):
        super().__init__(env)
        self.agent_name = agent_name
        self._replay = self._blank(None)

    def _blank(self, seed: Optional[int]) -> Replay:
        dash_env: DashEnv = self.env
        return Replay(
            seed=seed,
            config_hash=compute_config_hash(dash_env.config),
            frame_dt=dash_env.frame_dt,
            agent=self.agent_name,
        )

    @property
    def replay(self) -> Replay:
        """The episode recorded so far."""
        return self._replay

    def reset(self, *, seed=None, options=None):
        self._replay = self._blank(seed)
        return self.env.reset(seed=seed, options=options)

    def step(self, action):
        if isinstance(action, np.ndarray):
            action = int(action.reshape(-1)[0])
        action = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action)

        replay = self._replay
        if action != ACTION_NOOP:
            replay.jump_frames.append(replay.total_steps)
        replay.total_steps += 1
        replay.final_score = int(info["score"])
        if terminated or truncated:
            replay.termination_reason = info["terminated_reason"]

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """JSON-ready copy of the current recording."""
        return self._replay.to_dict()

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Write the recording as JSON.

        Args:
            path: Target file. A timestamped name is generated if None.
            overwrite: If False, refuse to replace an existing file.
            directory: Where a generated name is placed.

        Raises:
            FileExistsError: If path exists and overwrite is False.
        """
        if path is None:
            path = generate_replay_filename(self.agent_name, self._replay.seed, directory)
        path = Path(path)

        if not overwrite and path.exists():
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.get_replay_data(), indent=2))

        logger.info(
            "Saved replay %s: seed=%s, %d frames, %d jumps, score %d",
            path, self._replay.seed, self._replay.total_steps,
            len(self._replay.jump_frames), self._replay.final_score
        )
        return path


def load_replay(path: Union[str, Path]) -> Replay:
    """Read a file written by ReplayRecorder.save()."""
    return Replay.from_dict(json.loads(Path(path).read_text()))


def replay_episode(
    replay: Union[Replay, Dict[str, Any]],
    config: Optional[GameConfig] = None
) -> GameState:
    """
    Re-run a recorded episode on a fresh engine.

    Args:
        replay: A Replay, or its dict form.
        config: Game configuration. Uses default if None.

    Returns:
        Final GameState of the replayed run.

    Raises:
        ValueError: If the replay has no seed or was recorded with a
            different configuration.
    """
    if isinstance(replay, dict):
        replay = Replay.from_dict(replay)
    if config is None:
        config = get_config()

    if replay.seed is None:
        raise ValueError("Replay has no seed and cannot be reproduced")

    expected = compute_config_hash(config)
    if replay.config_hash != expected:
        raise ValueError(
            f"Replay config hash {replay.config_hash} does not match "
            f"current config {expected}"
        )

    engine = SimulationEngine(config=config)
    state = engine.new_game(seed=int(replay.seed))
    jumps = set(replay.jump_frames)
    for frame in range(replay.total_steps):
        if state.is_game_over:
            break
        if frame in jumps:
            engine.player_jump(state)
        engine.step(state, replay.frame_dt)

    return state


def record_episode(
    env: DashEnv,
    agent_fn: Callable,
    seed: int,
    save_path: Optional[Union[str, Path]] = None,
    agent_name: str = "unknown"
) -> Replay:
    """
    Play one seeded episode with agent_fn and return its recording.

    Args:
        env: Environment to play in.
        agent_fn: Callable mapping an observation to an action.
        seed: Episode seed.
        save_path: If given, the replay is also written there.
        agent_name: Stored in the replay metadata.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)
    obs, _ = recorder.reset(seed=seed)

    terminated = truncated = False
    while not (terminated or truncated):
        obs, _, terminated, truncated, _ = recorder.step(agent_fn(obs))

    if save_path:
        recorder.save(save_path)
    return recorder.replay
