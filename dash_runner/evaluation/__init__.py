"""
Evaluation Package
==================

Contains the seed bank and evaluation harness for scoring jump agents.
"""

from dash_runner.evaluation.run_eval import evaluate_agent, load_seed_bank

__all__ = ["evaluate_agent", "load_seed_bank"]
