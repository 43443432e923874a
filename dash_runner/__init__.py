"""
Dash Runner Package
===================

Endless-runner game core: a player jumps over procedurally spawned
obstacles while the score grows with survival time.

- dash_core: simulation engine, Gymnasium wrapper, leaderboard, replays
- evaluation: seed-bank evaluation harness for jump agents

All tunable parameters are in game_config.yaml.
"""
