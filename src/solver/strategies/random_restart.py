"""
Random Restart Strategy - Random playouts, starting over after each loss.
"""

import time
import random
import logging
from typing import Optional

from ..base import SolverStrategy
from ..context import SolutionContext
from ..solution import Solution
from ..factory import register_strategy

logger = logging.getLogger(__name__)


@register_strategy
class RandomRestartStrategy(SolverStrategy):
    """
    Plays random legal merges, restarting from the initial state on loss.

    Each merge counts as one iteration of the budget; the search also
    stops after max_tries lost playouts.

    Parameters:
        max_tries: Lost playouts allowed before giving up (default 10)
        seed: Seed for the move picker, for reproducible runs
    """
    name = "random"
    description = "Random restarts - Random playouts until a win or out of tries"

    def __init__(self, max_tries: int = 10, seed: Optional[int] = None):
        self.max_tries = max_tries
        self._rng = random.Random(seed)

    def solve(self, context: SolutionContext) -> Solution:
        """
        Run random playouts until one wins.

        Args:
            context: Solution context with engine and cancellation

        Returns:
            Solution with moves and metrics
        """
        start_time = time.perf_counter()
        engine = context.engine
        start = engine.export_snapshot()
        iterations = 0
        tries = 0
        was_cancelled = False
        budget_exhausted = False

        while not engine.has_won and tries < self.max_tries:
            if self._check_cancelled(context):
                was_cancelled = True
                break
            if context.budget_exhausted(iterations):
                budget_exhausted = True
                break

            moves = engine.list_legal_moves()
            if not moves:
                tries += 1
                logger.debug(f"[Random] Playout {tries} lost at score {engine.score}")
                engine.import_snapshot(start)
                continue

            engine.merge(*self._rng.choice(moves))
            iterations += 1

        winner = engine.export_snapshot() if engine.has_won else None
        if winner is not None:
            logger.info(f"[Random] Solved after {tries} lost playouts")
        else:
            logger.info(f"[Random] Gave up after {tries} lost playouts, {iterations} merges")

        return self._build_solution(
            context, start, winner, start_time,
            iterations=iterations,
            states_explored=iterations,
            pruned_branches=0,
            was_cancelled=was_cancelled,
            budget_exhausted=budget_exhausted
        )
