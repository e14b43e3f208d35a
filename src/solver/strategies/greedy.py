"""
Greedy Strategy - Always plays the highest-scored merge.
"""

import time
import logging

from ..base import SolverStrategy
from ..context import SolutionContext
from ..solution import Solution
from ..factory import register_strategy

logger = logging.getLogger(__name__)


@register_strategy
class GreedyStrategy(SolverStrategy):
    """
    Greedy strategy that always plays the move with the highest score,
    the same move the depth-first search would try first.

    A single playout with no backtracking: fast, but it only wins when
    that merge is right every time. Each merge counts as one
    iteration of the budget.
    """
    name = "greedy"
    description = "Greedy (instant) - Single playout of highest-scored merges"

    def solve(self, context: SolutionContext) -> Solution:
        """
        Play highest-scored merges until win, loss or budget.

        Args:
            context: Solution context with engine and cancellation

        Returns:
            Solution with moves and metrics
        """
        start_time = time.perf_counter()
        engine = context.engine
        start = engine.export_snapshot()
        iterations = 0
        states_explored = 0
        was_cancelled = False
        budget_exhausted = False

        while not engine.has_won:
            if self._check_cancelled(context):
                was_cancelled = True
                break
            if context.budget_exhausted(iterations):
                budget_exhausted = True
                break

            moves = engine.list_legal_moves()
            states_explored += len(moves)
            if not moves:
                break

            best = max(moves, key=lambda m: self.evaluate_move(engine, m))
            engine.merge(*best)
            iterations += 1

        winner = engine.export_snapshot() if engine.has_won else None
        logger.info(
            f"[Greedy] {'Won' if winner else 'Stopped'} after {iterations} merges, "
            f"score {engine.score}"
        )

        return self._build_solution(
            context, start, winner, start_time,
            iterations=iterations,
            states_explored=states_explored,
            pruned_branches=0,
            was_cancelled=was_cancelled,
            budget_exhausted=budget_exhausted
        )
