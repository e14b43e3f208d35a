"""
Solution Module - Result of strategy computation and step-by-step playback.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from src.engine import GameEngine, Snapshot

from .move import MergeMove

logger = logging.getLogger(__name__)


@dataclass
class SolutionMetrics:
    """
    Performance metrics for solution computation.

    Attributes:
        computation_time_ms: Time taken in milliseconds
        iterations: Outer search iterations consumed from the budget
        states_explored: Number of distinct states generated
        pruned_branches: Number of branches pruned by the unsolvable heuristic
        strategy_name: Name of strategy that computed this solution
    """
    computation_time_ms: float = 0.0
    iterations: int = 0
    states_explored: int = 0
    pruned_branches: int = 0
    strategy_name: str = ""


@dataclass
class Solution:
    """
    Result of a strategy computation.

    A failed search is an ordinary outcome: `solved` is False and
    `budget_exhausted` / `was_cancelled` tell why it stopped. Running out
    of budget does not mean the game cannot be won.

    Attributes:
        moves: Merges to play from the starting state, in order
        solved: True if the moves lead to a win
        was_cancelled: True if stopped by cancel flag or timeout
        budget_exhausted: True if the iteration budget ran out
        start_snapshot: State the search started from
        snapshot: Winning state if solved, else None
        metrics: Performance statistics
    """
    moves: List[MergeMove] = field(default_factory=list)
    solved: bool = False
    was_cancelled: bool = False
    budget_exhausted: bool = False
    start_snapshot: Optional[Snapshot] = None
    snapshot: Optional[Snapshot] = None
    metrics: SolutionMetrics = field(default_factory=SolutionMetrics)

    @property
    def move_count(self) -> int:
        """Number of moves in solution."""
        return len(self.moves)

    @property
    def has_moves(self) -> bool:
        """Check if solution has any moves."""
        return len(self.moves) > 0

    def get_move(self, index: int) -> MergeMove:
        """
        Get move at specific index.

        Raises:
            IndexError: If index out of range
        """
        return self.moves[index]

    @property
    def outcome(self) -> str:
        """Short human-readable outcome."""
        if self.solved:
            return "solved"
        if self.was_cancelled:
            return "cancelled"
        if self.budget_exhausted:
            return "no solution within budget"
        return "no solution found"


@dataclass
class SolutionPlayback:
    """
    Plays a solution's moves one at a time against a live engine.

    Used for hints (show current_move, then advance() once the player
    agrees) and for checking a solution by literal replay.

    Attributes:
        solution: The solution to play back
        engine: Engine positioned at the solution's starting state
        move_index: Current position in move sequence (0 = first move)
    """
    solution: Solution
    engine: GameEngine
    move_index: int = 0

    @property
    def current_move(self) -> Optional[MergeMove]:
        """Get next move to play, or None if exhausted."""
        if self.move_index < len(self.solution.moves):
            return self.solution.moves[self.move_index]
        return None

    @property
    def is_exhausted(self) -> bool:
        """True if all moves have been consumed."""
        return self.move_index >= len(self.solution.moves)

    @property
    def moves_remaining(self) -> int:
        return max(0, len(self.solution.moves) - self.move_index)

    @property
    def total_moves(self) -> int:
        return len(self.solution.moves)

    def advance(self) -> Optional[MergeMove]:
        """
        Apply the current move to the engine.

        Returns:
            The move just played, or None if exhausted or the engine
            rejected the merge (position index is left unchanged)
        """
        move = self.current_move
        if move is None:
            return None
        if not self.engine.merge(move.source_id, move.target_id):
            logger.warning(f"Playback move {self.move_index + 1} rejected: {move}")
            return None
        self.move_index += 1
        return move

    def play_all(self) -> int:
        """
        Apply every remaining move.

        Returns:
            Number of moves applied before exhaustion or rejection
        """
        played = 0
        while self.advance() is not None:
            played += 1
        return played

    def peek_moves(self, count: int = 3) -> List[MergeMove]:
        """
        Preview upcoming moves without advancing.

        Args:
            count: Number of moves to preview

        Returns:
            List of upcoming moves (may be shorter than count)
        """
        start = self.move_index
        end = min(start + count, len(self.solution.moves))
        return self.solution.moves[start:end]
