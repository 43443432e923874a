"""
Baseline Jumper Agent Package

A simple heuristic agent that times jumps from the nearest-obstacle
features. Serves as a benchmark and example.
"""

from .agent import JumperAgent

__all__ = ["JumperAgent"]
