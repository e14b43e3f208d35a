"""
Base Strategy Module - Abstract base class for solving strategies.
"""

import time
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from src.engine import GameEngine, Snapshot

from .move import MergeMove
from .context import SolutionContext
from .solution import Solution, SolutionMetrics


class SolverStrategy(ABC):
    """
    Abstract base class for all solving strategies.

    Subclasses must implement the solve() method and define
    name and description class attributes.

    Attributes:
        name: Short identifier for the strategy
        description: Human-readable description for UI
        height_weight: Weight of the height term in evaluate_move()
        value_weight: Weight of the value-gap term in evaluate_move()
    """
    name: str = "base"
    description: str = "Base strategy"
    height_weight: float = 2.0
    value_weight: float = 1.0

    @abstractmethod
    def solve(self, context: SolutionContext) -> Solution:
        """
        Search for a winning sequence of merges from the engine's state.

        Must periodically check context.is_cancelled() and stop early
        if True. On failure the engine is restored to its starting state.

        Args:
            context: Solution context with engine, budget and cancellation

        Returns:
            Solution with moves and metrics
        """
        pass

    def find_all_valid_moves(self, engine: GameEngine) -> List[MergeMove]:
        """
        Find every legal merge on the current board.

        Args:
            engine: Engine in the state to inspect

        Returns:
            List of MergeMove objects
        """
        return [
            MergeMove.create(engine, source_id, target_id)
            for source_id, target_id in engine.list_legal_moves(stop_at_first=False)
        ]

    def evaluate_move(self, engine: GameEngine, move: Tuple[int, int]) -> float:
        """
        Score a merge. Candidate moves are ordered ascending by this score.

        Grows with the height of the source above its target and with the
        value gap left to the win value.

        Args:
            engine: Engine holding both blocks
            move: (source_id, target_id)

        Returns:
            Score value
        """
        source = engine.get_block(move[0])
        target = engine.get_block(move[1])
        config = engine.config

        height_delta = source.y - target.y
        value_gap = config.win_value - source.value + target.value

        normalized_height = height_delta / (config.layers - 1)
        normalized_value = value_gap / config.win_value

        return self.height_weight * normalized_height + self.value_weight * normalized_value

    def order_moves(self, engine: GameEngine,
                    moves: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
        """Sort moves ascending by evaluate_move()."""
        return sorted(moves, key=lambda m: self.evaluate_move(engine, m))

    def _check_cancelled(self, context: SolutionContext) -> bool:
        """
        Convenience method to check cancellation.

        Args:
            context: Solution context

        Returns:
            True if strategy should stop
        """
        return context.is_cancelled()

    def _moves_between(self, engine: GameEngine, start: Snapshot,
                       end: Snapshot) -> List[MergeMove]:
        """
        Rebuild MergeMove details for the history recorded after start.

        Leaves `end` imported into the engine.
        """
        engine.import_snapshot(start)
        moves = []
        for source_id, target_id in end.history[len(start.history):]:
            moves.append(MergeMove.create(engine, source_id, target_id))
            engine.merge(source_id, target_id)
        engine.import_snapshot(end)
        return moves

    def _build_solution(
        self,
        context: SolutionContext,
        start: Snapshot,
        winner: Optional[Snapshot],
        start_time: float,
        iterations: int,
        states_explored: int,
        pruned_branches: int,
        was_cancelled: bool,
        budget_exhausted: bool
    ) -> Solution:
        """
        Build Solution object and leave the engine in its final state.

        The winning state stays imported unless the context asks for the
        start to be restored; a failed search always restores the start.
        """
        engine = context.engine
        moves: List[MergeMove] = []

        if winner is not None:
            moves = self._moves_between(engine, start, winner)
            if context.restore_on_success:
                engine.import_snapshot(start)
        else:
            engine.import_snapshot(start)

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return Solution(
            moves=moves,
            solved=winner is not None,
            was_cancelled=was_cancelled,
            budget_exhausted=budget_exhausted,
            start_snapshot=start,
            snapshot=winner,
            metrics=SolutionMetrics(
                computation_time_ms=elapsed_ms,
                iterations=iterations,
                states_explored=states_explored,
                pruned_branches=pruned_branches,
                strategy_name=self.name
            )
        )
