"""
Game Engine Module - Rules, merge/undo state machine and win/loss tracking.

The engine owns every block of one pyramid game. Blocks are stored in an
arena indexed by id; a position lookup grid is built lazily from the arena
the first time a lattice query needs it.

Usage:
    engine = GameEngine(seed=1234567)
    moves = engine.list_legal_moves()
    engine.merge(*moves[0])
    engine.undo()
"""

import logging
from enum import Enum, auto
from typing import Iterable, List, Optional

import numpy as np

from .block import Block, NULL_ID
from .config import PuzzleConfig, DEFAULT_CONFIG
from .shuffler import Shuffler, SeedInput
from .snapshot import Snapshot, MergeRecord, fingerprint

logger = logging.getLogger(__name__)


__all__ = [
    "GameStatus",
    "GameEngine",
]


class GameStatus(Enum):
    """
    Game outcome.

    States:
        PLAYING: Legal merges remain and the game is not won
        WON: Exactly win_count surviving blocks hold win_value
        LOST: Not won and no legal merge remains
    """
    PLAYING = auto()
    WON = auto()
    LOST = auto()


class GameEngine:
    """
    Mutable pyramid game.

    Mutating operations (merge, undo, reset) are synchronous and either
    fully apply or leave the game untouched. Illegal requests return
    False instead of raising.

    Attributes:
        config: Pyramid rules
        shuffler: Layout generator used by reset()
    """

    def __init__(self, seed: SeedInput = None, config: Optional[PuzzleConfig] = None,
                 shuffler: Optional[Shuffler] = None):
        """
        Initialize engine and start a game.

        Args:
            seed: 7-digit seed; a random one is drawn if invalid or absent
            config: Pyramid rules (defaults to shuffler's config or the standard pyramid)
            shuffler: Layout generator (built from config if omitted)
        """
        if shuffler is None:
            shuffler = Shuffler(config or DEFAULT_CONFIG)
        self.shuffler = shuffler
        self.config = config or shuffler.config

        self._blocks: List[Block] = []
        self._grid: Optional[np.ndarray] = None
        self._history: List[MergeRecord] = []
        self._score = 0
        self._lost = False
        self._seed = 0

        self.reset(seed)

    @classmethod
    def from_blocks(cls, blocks: Iterable[Block], seed: int,
                    config: PuzzleConfig = DEFAULT_CONFIG) -> 'GameEngine':
        """
        Build an engine around an explicit block arrangement.

        Bypasses the shuffler; status is computed from the given blocks.

        Args:
            blocks: Blocks with ids 0..n-1
            seed: Seed to report for this game
            config: Pyramid rules

        Returns:
            GameEngine instance
        """
        engine = cls(seed=seed, config=config)
        engine._seed = seed
        engine._set_blocks(sorted((b.copy() for b in blocks), key=lambda b: b.id))
        engine._clear_progress()
        engine._update_status()
        return engine

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def blocks(self) -> List[Block]:
        """All blocks ordered by id, including disabled ones."""
        return self._blocks

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def score(self) -> int:
        return self._score

    @property
    def history(self) -> List[MergeRecord]:
        """Copy of merge history."""
        return list(self._history)

    @property
    def has_won(self) -> bool:
        """True when exactly win_count surviving blocks hold win_value."""
        winners = sum(
            1 for b in self._blocks
            if not b.disabled and b.value == self.config.win_value
        )
        return winners == self.config.win_count

    @property
    def has_lost(self) -> bool:
        return not self.has_won and self._lost

    @property
    def status(self) -> GameStatus:
        if self.has_won:
            return GameStatus.WON
        if self._lost:
            return GameStatus.LOST
        return GameStatus.PLAYING

    def get_block(self, block_id: int) -> Optional[Block]:
        """Get block by id, or None if no such block."""
        if 0 <= block_id < len(self._blocks):
            return self._blocks[block_id]
        return None

    def remaining_blocks(self) -> List[Block]:
        """Blocks that have not been merged away."""
        return [b for b in self._blocks if not b.disabled]

    def block_at(self, x: int, y: int, z: int) -> Optional[Block]:
        """
        Get the block placed at a lattice cell.

        Returns the block even if disabled; None outside the pyramid.
        """
        if not self.config.is_valid_cell(x, y, z):
            return None
        block_id = int(self._position_grid()[x, y, z])
        return self.get_block(block_id)

    def closest_block(self, block_ids: Iterable[int]) -> int:
        """
        Pick the surviving block nearest the viewer among candidates.

        Used to resolve a pointer hit over several overlapping cubes:
        the block with the largest x + y + z wins.

        Returns:
            Block id, or NULL_ID if none survive
        """
        candidates = [self.get_block(i) for i in block_ids]
        candidates = [b for b in candidates if b is not None and not b.disabled]
        if not candidates:
            return NULL_ID
        return max(candidates, key=lambda b: sum(b.position)).id

    # ------------------------------------------------------------------
    # Support / occlusion predicates
    # ------------------------------------------------------------------

    def has_above(self, block_id: int, ignore_id: int = NULL_ID) -> bool:
        """
        Check for a surviving block in the same column one layer up.

        Args:
            block_id: Block to check
            ignore_id: Block to disregard if it is the one above

        Returns:
            True if blocked from above
        """
        block = self.get_block(block_id)
        if block is None:
            return False
        above = self.block_at(block.x, block.y + 1, block.z)
        if above is None:
            return False
        return above.id != ignore_id and not above.disabled

    def is_covered(self, block_id: int) -> bool:
        """
        Check whether a block is hidden under an apex or a bridging pair.

        Covered if a surviving block sits at (x+1, y+1, z+1), or surviving
        blocks sit at both (x+1, y+1, z) and (x, y+1, z+1).
        Unknown ids count as covered.
        """
        block = self.get_block(block_id)
        if block is None:
            return True
        x, y, z = block.position

        if self._is_occupied(x + 1, y + 1, z + 1):
            return True
        return self._is_occupied(x + 1, y + 1, z) and self._is_occupied(x, y + 1, z + 1)

    def is_free(self, block_id: int) -> bool:
        """Surviving, not blocked from above and not covered."""
        block = self.get_block(block_id)
        if block is None or block.disabled:
            return False
        return not self.has_above(block_id) and not self.is_covered(block_id)

    def free_blocks(self) -> List[Block]:
        """All blocks currently eligible for selection."""
        return [b for b in self._blocks if self.is_free(b.id)]

    # ------------------------------------------------------------------
    # Legality
    # ------------------------------------------------------------------

    def can_merge(self, source_id: int, target_id: int) -> bool:
        """
        Check whether source can be merged into target.

        The source must be free. The target may only be blocked from
        above by the source itself, and may only be covered when it sits
        directly beneath the source. Both must share color and value.

        Args:
            source_id: Block that will be disabled
            target_id: Block whose value doubles

        Returns:
            True if the merge is legal
        """
        if source_id == target_id:
            return False
        source = self.get_block(source_id)
        target = self.get_block(target_id)
        if source is None or target is None or source.disabled or target.disabled:
            return False
        if not source.can_combine_with(target):
            return False

        if self.has_above(target_id, ignore_id=source_id):
            return False
        if self.has_above(source_id) or self.is_covered(source_id):
            return False
        if self.is_covered(target_id) and not self._is_directly_below(target, source):
            return False

        return True

    def list_legal_moves(self, stop_at_first: bool = False) -> List[MergeRecord]:
        """
        Enumerate legal merges.

        Sources are free blocks. Targets are the other free blocks plus
        the block directly beneath the source.

        Args:
            stop_at_first: Return as soon as one move is found

        Returns:
            List of (source_id, target_id) pairs
        """
        free_blocks = self.free_blocks()
        free_ids = [b.id for b in free_blocks]
        moves: List[MergeRecord] = []

        for block in free_blocks:
            candidates = list(free_ids)
            below = self.block_at(block.x, block.y - 1, block.z)
            if below is not None and below.id not in free_ids:
                candidates.append(below.id)

            for candidate_id in candidates:
                if self.can_merge(block.id, candidate_id):
                    moves.append((block.id, candidate_id))
                    if stop_at_first:
                        return moves

        return moves

    def has_legal_moves(self) -> bool:
        return len(self.list_legal_moves(stop_at_first=True)) > 0

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def merge(self, source_id: int, target_id: int) -> bool:
        """
        Merge source into target.

        Target value doubles, source is disabled, score grows by
        score_multiplier * source value.

        Returns:
            True if merged, False if illegal (state unchanged)
        """
        if not self.can_merge(source_id, target_id):
            return False

        source = self._blocks[source_id]
        target = self._blocks[target_id]
        target.value *= 2
        source.disabled = True

        self._history.append((source_id, target_id))
        self._score += self.config.score_multiplier * source.value
        self._update_status()

        logger.debug(f"Merged {source_id} into {target_id} -> {target.value}, score {self._score}")
        return True

    def undo(self) -> bool:
        """
        Revert the last merge.

        No-op when history is empty or the game is won.

        Returns:
            True if a merge was reverted
        """
        if not self._history or self.has_won:
            return False

        source_id, target_id = self._history.pop()
        source = self._blocks[source_id]
        target = self._blocks[target_id]
        target.value //= 2
        source.disabled = False
        self._score -= self.config.score_multiplier * source.value

        self._lost = False
        self._update_status()

        logger.debug(f"Undid merge {source_id} -> {target_id}, score {self._score}")
        return True

    def reset(self, seed: SeedInput = None) -> int:
        """
        Start a new game.

        Args:
            seed: Layout seed; a random one is drawn if invalid or absent

        Returns:
            Seed actually used
        """
        blocks, used_seed = self.shuffler.generate(seed)
        self._seed = used_seed
        self._set_blocks(blocks)
        self._clear_progress()
        self._update_status()
        logger.info(f"New game started with seed {used_seed}")
        return used_seed

    def restart(self) -> int:
        """Start over from the current seed."""
        return self.reset(self._seed)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def fingerprint(self) -> str:
        """Canonical key of the current position."""
        return fingerprint(self._blocks)

    def export_snapshot(self) -> Snapshot:
        return Snapshot.capture(
            seed=self._seed,
            history=self._history,
            blocks=self._blocks,
            score=self._score,
            won=self.has_won,
            lost=self._lost,
        )

    def import_snapshot(self, snapshot: Snapshot, replay: bool = False) -> None:
        """
        Restore a snapshot.

        Block states are restored directly when the snapshot carries them.
        With replay=True, or when it only carries seed and history, the
        layout is regenerated from the seed and history is replayed.

        Args:
            snapshot: Snapshot produced by export_snapshot() or Snapshot.from_dict()
            replay: Force reconstruction by replaying history

        Raises:
            ValueError: If block states do not match this pyramid's size
        """
        if replay or not snapshot.states:
            self._replay(snapshot)
            return

        if snapshot.seed != self._seed or len(self._blocks) != len(snapshot.states):
            blocks, seed = self.shuffler.generate(snapshot.seed)
            if len(blocks) != len(snapshot.states):
                raise ValueError(
                    f"Snapshot has {len(snapshot.states)} blocks, expected {len(blocks)}"
                )
            self._seed = seed
            self._set_blocks(blocks)

        for block, (value, disabled) in zip(self._blocks, snapshot.states):
            block.value = value
            block.disabled = disabled

        self._history = list(snapshot.history)
        self._score = snapshot.score
        self._lost = snapshot.lost

    def _replay(self, snapshot: Snapshot) -> None:
        blocks, self._seed = self.shuffler.generate(snapshot.seed)
        self._set_blocks(blocks)
        self._clear_progress()
        self._update_status()

        for source_id, target_id in snapshot.history:
            if not self.merge(source_id, target_id):
                logger.warning(f"Replay stopped at illegal merge {source_id} -> {target_id}")
                break

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_blocks(self, blocks: List[Block]) -> None:
        self._blocks = blocks
        self._grid = None

    def _clear_progress(self) -> None:
        self._history = []
        self._score = 0
        self._lost = False

    def _position_grid(self) -> np.ndarray:
        """Lazily built (x, y, z) -> id lookup."""
        if self._grid is None:
            size = self.config.layers
            grid = np.full((size, size, size), NULL_ID, dtype=np.int32)
            for block in self._blocks:
                grid[block.position] = block.id
            self._grid = grid
        return self._grid

    def _is_occupied(self, x: int, y: int, z: int) -> bool:
        block = self.block_at(x, y, z)
        return block is not None and not block.disabled

    @staticmethod
    def _is_directly_below(lower: Block, upper: Block) -> bool:
        return lower.x == upper.x and lower.z == upper.z and lower.y == upper.y - 1

    def _update_status(self) -> None:
        """Set the sticky loss flag once no legal merge remains."""
        if self.has_won:
            return
        if not self._lost and not self.has_legal_moves():
            self._lost = True
            logger.info(f"No legal merges left, game lost with score {self._score}")
