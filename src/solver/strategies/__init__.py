"""
Strategies Package - Concrete strategy implementations.

Import this module to register all built-in strategies.
"""

from .dfs import DepthFirstStrategy, DepthFirstSearch, SearchFrame
from .greedy import GreedyStrategy
from .random_restart import RandomRestartStrategy

__all__ = [
    "DepthFirstStrategy",
    "DepthFirstSearch",
    "SearchFrame",
    "GreedyStrategy",
    "RandomRestartStrategy",
]
