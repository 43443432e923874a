"""
Evaluation Harness
==================

Plays a jump agent through every seed of the seed bank and reports how it
runs: survival time, obstacles cleared, and how its jump inputs were spent
(ground jumps, air jumps, inputs rejected for lack of charges).

Usage:
    dash-eval --agent contestants/baseline_jumper
    dash-eval --agent contestants/team_template --max-seconds 60 --replay-dir replays
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from dash_runner.dash_core.config_loader import GameConfig, load_config
from dash_runner.dash_core.env_gym import ACTION_NOOP, DashEnv
from dash_runner.dash_core.leaderboard import Leaderboard
from dash_runner.dash_core.replay_recorder import ReplayRecorder

DEFAULT_SEED_BANK = Path(__file__).with_name("seed_bank.json")

Observation = Dict[str, np.ndarray]


@dataclass
class LoadedAgent:
    """An agent's policy plus its optional per-episode reset hook."""
    name: str
    act: Callable[[Observation], Any]
    reset: Optional[Callable[[], None]] = None


@dataclass
class RunStats:
    """What happened on one seed."""
    seed: int
    score: int
    survived_seconds: float
    steps: int
    obstacles_cleared: int
    ground_jumps: int
    air_jumps: int
    rejected_jumps: int
    termination_reason: str
    wall_time: float

    @property
    def jumps(self) -> int:
        return self.ground_jumps + self.air_jumps


@dataclass
class EvalSummary:
    """Aggregate over all seeds."""
    mean_score: float
    median_score: float
    min_score: int
    max_score: int
    mean_survival: float
    p10_survival: float
    mean_obstacles_cleared: float
    jumps_per_obstacle: float
    endings: Dict[str, int]
    total_time: float
    runs: List[RunStats] = field(default_factory=list)

    @property
    def collision_rate(self) -> float:
        if not self.runs:
            return 0.0
        return self.endings.get("collision", 0) / len(self.runs)


def load_seed_bank(path: Optional[Union[str, Path]] = None) -> List[int]:
    """Seeds listed under "seeds" in a JSON file (the bundled bank by default)."""
    data = json.loads(Path(path or DEFAULT_SEED_BANK).read_text())
    return [int(seed) for seed in data["seeds"]]


def load_agent(agent_path: Union[str, Path]) -> LoadedAgent:
    """
    Import an agent from a directory holding agent.py, or from a .py file.

    The module must define a `JumperAgent` class with an `act(obs)` method,
    or a module-level `act(obs)` function.

    Raises:
        FileNotFoundError: If no agent file exists at the path.
        ImportError: If the file cannot be imported.
        AttributeError: If the module defines neither entry point.
    """
    path = Path(agent_path)
    agent_file = path / "agent.py" if path.is_dir() else path
    if not agent_file.is_file():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    name = agent_file.parent.name if agent_file.name == "agent.py" else agent_file.stem
    module_spec = importlib.util.spec_from_file_location(f"dash_agent_{name}", agent_file)
    if module_spec is None or module_spec.loader is None:
        raise ImportError(f"Cannot import agent from {agent_file}")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)

    agent_cls = getattr(module, "JumperAgent", None)
    if agent_cls is not None:
        agent = agent_cls()
        if not callable(getattr(agent, "act", None)):
            raise AttributeError(f"{agent_file}: JumperAgent has no act() method")
        return LoadedAgent(name, agent.act, getattr(agent, "reset", None))

    act_fn = getattr(module, "act", None)
    if callable(act_fn):
        return LoadedAgent(name, act_fn)

    raise AttributeError(f"{agent_file}: define a JumperAgent class or an act() function")


def _as_agent(agent: Union[LoadedAgent, Callable[[Observation], Any]]) -> LoadedAgent:
    if isinstance(agent, LoadedAgent):
        return agent
    return LoadedAgent(getattr(agent, "__name__", "agent"), agent)


def run_seed(
    agent: Union[LoadedAgent, Callable[[Observation], Any]],
    seed: int,
    env: DashEnv,
    replay_dir: Optional[Union[str, Path]] = None
) -> RunStats:
    """
    Play one seeded episode and collect per-run statistics.

    An obstacle counts as cleared once its right edge is behind the player's
    left edge. Jump inputs are classified against the on_ground flag of the
    observation the agent acted on.

    Args:
        agent: LoadedAgent or a bare act(obs) callable.
        seed: Episode seed.
        env: Environment to play in.
        replay_dir: If given, the episode is recorded and saved there.
    """
    agent = _as_agent(agent)
    if agent.reset is not None:
        agent.reset()

    player_env = ReplayRecorder(env, agent_name=agent.name) if replay_dir else env
    obs, info = player_env.reset(seed=seed)

    state = env.state
    cleared = ground_jumps = air_jumps = rejected = steps = 0
    started = time.perf_counter()

    terminated = truncated = False
    while not (terminated or truncated):
        action = int(agent.act(obs))
        was_on_ground = bool(obs["on_ground"])
        ahead = [o for o in state.obstacles if o.x + o.width >= state.player_x]

        obs, _, terminated, truncated, info = player_env.step(action)
        steps += 1

        if action != ACTION_NOOP:
            if not info["jumped"]:
                rejected += 1
            elif was_on_ground:
                ground_jumps += 1
            else:
                air_jumps += 1
        cleared += sum(1 for o in ahead if o.x + o.width < state.player_x)

    if replay_dir:
        player_env.save(directory=replay_dir)

    return RunStats(
        seed=seed,
        score=info["score"],
        survived_seconds=info["elapsed_seconds"],
        steps=steps,
        obstacles_cleared=cleared,
        ground_jumps=ground_jumps,
        air_jumps=air_jumps,
        rejected_jumps=rejected,
        termination_reason=info["terminated_reason"],
        wall_time=time.perf_counter() - started,
    )


def summarize(runs: Sequence[RunStats], total_time: float = 0.0) -> EvalSummary:
    """Aggregate statistics over a non-empty list of runs."""
    if not runs:
        raise ValueError("Cannot summarize an empty evaluation")

    scores = np.array([r.score for r in runs])
    survival = np.array([r.survived_seconds for r in runs])
    cleared = np.array([r.obstacles_cleared for r in runs])
    jumps = sum(r.jumps for r in runs)

    return EvalSummary(
        mean_score=float(scores.mean()),
        median_score=float(np.median(scores)),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        mean_survival=float(survival.mean()),
        p10_survival=float(np.percentile(survival, 10)),
        mean_obstacles_cleared=float(cleared.mean()),
        jumps_per_obstacle=jumps / max(int(cleared.sum()), 1),
        endings=dict(Counter(r.termination_reason for r in runs)),
        total_time=total_time,
        runs=list(runs),
    )


def evaluate_agent(
    agent: Union[LoadedAgent, Callable[[Observation], Any]],
    seeds: Optional[Sequence[int]] = None,
    env: Optional[DashEnv] = None,
    replay_dir: Optional[Union[str, Path]] = None,
    verbose: bool = True
) -> EvalSummary:
    """
    Run the agent on every seed with a shared environment.

    Args:
        agent: LoadedAgent or a bare act(obs) callable.
        seeds: Seeds to play. Uses the bundled seed bank if None.
        env: Environment to reuse. A default DashEnv is created if None.
        replay_dir: Save one replay per seed into this directory.
        verbose: Print one line per seed and a summary table.
    """
    seeds = list(seeds) if seeds is not None else load_seed_bank()
    env = env if env is not None else DashEnv()

    started = time.perf_counter()
    runs = []
    for seed in seeds:
        run = run_seed(agent, seed, env, replay_dir=replay_dir)
        runs.append(run)
        if verbose:
            print(f"  seed {seed:>6}  score {run.score:>6}  "
                  f"{run.survived_seconds:6.1f}s  cleared {run.obstacles_cleared:>3}  "
                  f"jumps {run.ground_jumps}+{run.air_jumps} "
                  f"(rejected {run.rejected_jumps})  {run.termination_reason}")

    summary = summarize(runs, time.perf_counter() - started)
    if verbose:
        print_summary(summary)
    return summary


def print_summary(summary: EvalSummary) -> None:
    rows = [
        ("Runs", f"{len(summary.runs)}"),
        ("Score mean / median", f"{summary.mean_score:.1f} / {summary.median_score:.1f}"),
        ("Score range", f"{summary.min_score} .. {summary.max_score}"),
        ("Survival mean / p10", f"{summary.mean_survival:.1f}s / {summary.p10_survival:.1f}s"),
        ("Obstacles cleared", f"{summary.mean_obstacles_cleared:.1f} per run"),
        ("Jumps per obstacle", f"{summary.jumps_per_obstacle:.2f}"),
        ("Endings", ", ".join(f"{k}={v}" for k, v in sorted(summary.endings.items()))),
        ("Wall time", f"{summary.total_time:.2f}s"),
    ]
    width = max(len(label) for label, _ in rows)
    print()
    for label, value in rows:
        print(f"{label:<{width}}  {value}")


def submit_to_leaderboard(
    summary: EvalSummary,
    leaderboard: Leaderboard,
    player_name: str
) -> int:
    """
    Record every evaluated run on a leaderboard.

    Returns:
        Number of runs that placed in the top N when submitted.
    """
    placed = 0
    for run in summary.runs:
        if leaderboard.is_top_score(run.score):
            placed += 1
        leaderboard.add_high_score(player_name, run.score)
    return placed


def write_report(summary: EvalSummary, agent_name: str, path: Union[str, Path]) -> Path:
    """Dump the summary and every run as JSON."""
    report = asdict(summary)
    report["agent"] = agent_name
    report["collision_rate"] = summary.collision_rate
    path = Path(path)
    path.write_text(json.dumps(report, indent=2))
    return path


def build_env(config_path: Optional[str], max_seconds: Optional[float]) -> DashEnv:
    """DashEnv from a config file, with an optional run length cap override."""
    config: GameConfig = load_config(config_path)
    if max_seconds is not None:
        config = replace(config, caps=replace(config.caps, max_elapsed_seconds=max_seconds))
    return DashEnv(config=config)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a jump agent on the seed bank")
    parser.add_argument("--agent", required=True,
                        help="Agent directory (containing agent.py) or .py file")
    parser.add_argument("--seeds", default=None,
                        help="Seed bank JSON (defaults to the bundled bank)")
    parser.add_argument("--config", default=None,
                        help="Game config YAML (defaults to the bundled config)")
    parser.add_argument("--max-seconds", type=float, default=None,
                        help="Truncate runs after this many simulated seconds")
    parser.add_argument("--replay-dir", default=None,
                        help="Save one replay per seed into this directory")
    parser.add_argument("--output", default=None,
                        help="Write a JSON report to this path")
    parser.add_argument("--leaderboard", default=None,
                        help="Leaderboard JSON file to record final scores in")
    parser.add_argument("--name", default=None,
                        help="Leaderboard display name (defaults to the agent name)")
    parser.add_argument("--quiet", action="store_true",
                        help="Only print errors")
    args = parser.parse_args(argv)

    try:
        agent = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}", file=sys.stderr)
        return 1

    seeds = load_seed_bank(args.seeds)
    env = build_env(args.config, args.max_seconds)
    if not args.quiet:
        print(f"Evaluating {agent.name} on {len(seeds)} seeds")

    summary = evaluate_agent(agent, seeds, env=env, replay_dir=args.replay_dir,
                             verbose=not args.quiet)

    if args.output:
        write_report(summary, agent.name, args.output)
    if args.leaderboard:
        board = Leaderboard(path=args.leaderboard, config=env.config)
        placed = submit_to_leaderboard(summary, board, args.name or agent.name)
        if not args.quiet:
            print(f"Leaderboard: {placed} run(s) placed in the top {board.top_n}, "
                  f"best ever {board.get_best_score()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
