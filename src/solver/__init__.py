"""
Solver Package - Modular search framework for the pyramid merge puzzle.

This package provides a pluggable strategy framework for finding a
winning sequence of merges from any game state. Strategies can be
selected at runtime by name.

Public API:
    - MergeMove: One merge of two blocks
    - Solution: Result of strategy computation
    - SolutionMetrics: Performance statistics
    - SolutionPlayback: Step-by-step replay against an engine
    - SolutionContext: Shared context for strategies
    - SolverStrategy: Abstract base for strategies
    - detect_unsolvable(): Pruning heuristic
    - create_strategy(): Factory function
    - get_strategy_names(): List available strategies
    - get_strategy_info(): Strategy names, descriptions and options
    - resolve_strategy_name(): Fall back to the default for unknown names

Usage:
    from src.engine import GameEngine
    from src.solver import create_strategy, SolutionContext

    engine = GameEngine(seed=1234567)
    context = SolutionContext(engine=engine, max_iterations=500)

    strategy = create_strategy("dfs")
    solution = strategy.solve(context)

    for move in solution.moves:
        print(f"Merge {move.source_id} into {move.target_id}")
"""

# Core data structures
from .move import MergeMove
from .solution import Solution, SolutionMetrics, SolutionPlayback
from .context import SolutionContext
from .heuristics import detect_unsolvable, is_unsolvable

# Strategy framework
from .base import SolverStrategy
from .factory import (
    create_strategy,
    get_strategy_names,
    get_strategy_info,
    get_default_strategy_name,
    register_strategy,
    resolve_strategy_name,
)

# Import strategies to register them
from . import strategies

__all__ = [
    # Data structures
    "MergeMove",
    "Solution",
    "SolutionMetrics",
    "SolutionPlayback",
    "SolutionContext",
    # Heuristics
    "detect_unsolvable",
    "is_unsolvable",
    # Strategy framework
    "SolverStrategy",
    "create_strategy",
    "get_strategy_names",
    "get_strategy_info",
    "get_default_strategy_name",
    "register_strategy",
    "resolve_strategy_name",
]
