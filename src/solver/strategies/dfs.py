"""
Depth-First Strategy - Budgeted, score-ordered search for a win.

The search runs on an explicit stack of snapshots rather than recursion.
Each outer iteration is one resumable step, so callers can interleave
the search with other work and cancel between steps.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from src.engine import GameEngine, Snapshot

from ..base import SolverStrategy
from ..context import SolutionContext
from ..heuristics import is_unsolvable
from ..solution import Solution
from ..factory import register_strategy

logger = logging.getLogger(__name__)


@dataclass
class SearchFrame:
    """
    Stack entry of the depth-first search.

    Attributes:
        snapshot: State to resume from
        candidate_moves: Legal merges in that state
    """
    snapshot: Snapshot
    candidate_moves: List[Tuple[int, int]]


@dataclass
class DepthFirstSearch:
    """
    Resumable search state.

    Call step() repeatedly (or iterate over steps()) until `finished`.
    The engine is used as scratch space: every step imports states into
    it and rolls back with import_snapshot().

    Attributes:
        strategy: Strategy supplying move ordering
        engine: Engine being searched
        start: Snapshot the search started from
        stack: Pending frames
        seen: Fingerprints already pushed
        winner: Winning snapshot once found
    """
    strategy: SolverStrategy
    engine: GameEngine
    start: Snapshot
    stack: List[SearchFrame] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)
    winner: Optional[Snapshot] = None
    iterations: int = 0
    states_explored: int = 0
    pruned_branches: int = 0

    @classmethod
    def begin(cls, strategy: SolverStrategy, engine: GameEngine) -> 'DepthFirstSearch':
        start = engine.export_snapshot()
        search = cls(strategy=strategy, engine=engine, start=start)
        search.stack.append(SearchFrame(start, engine.list_legal_moves()))
        return search

    @property
    def finished(self) -> bool:
        return self.winner is not None or not self.stack

    def step(self) -> bool:
        """
        Run one outer iteration.

        Returns:
            True if this iteration found a win
        """
        if self.finished:
            return self.winner is not None

        frame = self.stack.pop()
        self.iterations += 1
        engine = self.engine
        engine.import_snapshot(frame.snapshot)

        if engine.has_won:
            self.winner = frame.snapshot
            return True

        if is_unsolvable(engine):
            self.pruned_branches += 1
            return False

        # Children are pushed in ascending score order, so the highest-scored
        # child (source furthest above its target) is popped next
        for move in self.strategy.order_moves(engine, frame.candidate_moves):
            if not engine.merge(*move):
                continue

            if is_unsolvable(engine):
                self.pruned_branches += 1
                engine.import_snapshot(frame.snapshot)
                continue

            child = engine.export_snapshot()
            if child.short_state not in self.seen:
                self.seen.add(child.short_state)
                self.stack.append(SearchFrame(child, engine.list_legal_moves()))
                self.states_explored += 1

            engine.import_snapshot(frame.snapshot)

        return False

    def steps(self) -> Iterator[int]:
        """Yield the iteration count after each step until finished."""
        while not self.finished:
            self.step()
            yield self.iterations


@register_strategy
class DepthFirstStrategy(SolverStrategy):
    """
    Explicit-stack depth-first search with pruning and deduplication.

    Algorithm:
        1. Push the current state with its legal moves
        2. Pop a frame and import it; stop if it is a win
        3. Skip it if the unsolvable heuristic fires
        4. Try moves in ascending score order; push each unseen, non-pruned child
        5. Repeat until a win, an empty stack, or the budget runs out

    A failed search only means no win was found within the budget.
    """
    name = "dfs"
    description = "Depth-first search (default) - Budgeted exhaustive search"

    def solve(self, context: SolutionContext) -> Solution:
        """
        Search for a win within context.max_iterations iterations.

        Args:
            context: Solution context with engine, budget and cancellation

        Returns:
            Solution with moves and metrics
        """
        start_time = time.perf_counter()
        search = self.start(context.engine)
        was_cancelled = False
        budget_exhausted = False

        logger.info(
            f"[DFS] Searching seed {search.start.seed} "
            f"from move {search.start.move_count}, budget {context.max_iterations}"
        )

        for iterations in self.iterate(search, context):
            if iterations % 50 == 0:
                context.report_progress(
                    min(0.99, iterations / max(1, context.max_iterations)),
                    f"{iterations} iterations, {len(search.stack)} pending"
                )

        if search.winner is None:
            was_cancelled = self._check_cancelled(context)
            budget_exhausted = bool(search.stack) and context.budget_exhausted(search.iterations)

        if search.winner is not None:
            logger.info(f"[DFS] Solved in {search.iterations} iterations")
        elif budget_exhausted:
            logger.info(f"[DFS] Budget of {context.max_iterations} iterations exhausted")
        elif was_cancelled:
            logger.info(f"[DFS] Cancelled after {search.iterations} iterations")
        else:
            logger.info(f"[DFS] No solution found after {search.iterations} iterations")
        logger.debug(
            f"[DFS] {search.states_explored} states explored, "
            f"{search.pruned_branches} branches pruned"
        )

        return self._build_solution(
            context, search.start, search.winner, start_time,
            iterations=search.iterations,
            states_explored=search.states_explored,
            pruned_branches=search.pruned_branches,
            was_cancelled=was_cancelled,
            budget_exhausted=budget_exhausted
        )

    def start(self, engine: GameEngine) -> DepthFirstSearch:
        """Create a resumable search rooted at the engine's current state."""
        return DepthFirstSearch.begin(self, engine)

    def iterate(self, search: DepthFirstSearch,
                context: SolutionContext) -> Iterator[int]:
        """
        Drive a search one iteration at a time.

        Yields the iteration count after every step, which is the point
        where a caller may do other work or stop resuming. Stops on win,
        empty stack, exhausted budget or cancellation.
        """
        while not search.finished:
            if self._check_cancelled(context):
                return
            if context.budget_exhausted(search.iterations):
                return
            search.step()
            yield search.iterations
