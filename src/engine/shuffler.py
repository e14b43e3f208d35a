"""
Shuffler Module - Deterministic pyramid layout from a 7-digit seed.

The permutation uses a sine-based pseudo-random stream so that a given
seed always produces the same arrangement. It is not meant to be
cryptographically random, only reproducible.
"""

import logging
import math
import random
from typing import List, Optional, Tuple, Union

from .block import Block, NULL_ID
from .config import PuzzleConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)


SeedInput = Union[int, str, None]


def is_valid_seed(seed: SeedInput, digits: int = DEFAULT_CONFIG.seed_digits) -> bool:
    """
    Check that a seed is exactly `digits` decimal digits.

    Leading zeros are rejected because the seed is read as an integer.

    Args:
        seed: Integer or string seed

    Returns:
        True if the seed is usable as-is
    """
    if seed is None or isinstance(seed, bool):
        return False
    text = str(seed).strip()
    return len(text) == digits and text.isdigit() and text[0] != "0"


def parse_seed(text: SeedInput, digits: int = DEFAULT_CONFIG.seed_digits) -> Optional[int]:
    """
    Parse a human-entered seed.

    Returns:
        The seed as an int, or None when invalid
    """
    if not is_valid_seed(text, digits):
        return None
    return int(str(text).strip())


class Shuffler:
    """
    Builds the block multiset and lays it out on the lattice.

    Example:
        shuffler = Shuffler()
        blocks, seed = shuffler.generate(1234567)
    """

    def __init__(self, config: PuzzleConfig = DEFAULT_CONFIG,
                 rng: Optional[random.Random] = None):
        """
        Initialize shuffler.

        Args:
            config: Pyramid rules (layer count, value multiset, colors)
            rng: Source for fresh seeds when none is given
        """
        self.config = config
        self._rng = rng or random.Random()

    def is_valid_seed(self, seed: SeedInput) -> bool:
        return is_valid_seed(seed, self.config.seed_digits)

    def random_seed(self) -> int:
        """
        Draw a fresh seed.

        Uniform over [0, 10^digits), left-padded with '1' up to the
        required digit count so the result is always valid.
        """
        digits = self.config.seed_digits
        raw = str(self._rng.randrange(10 ** digits))
        return int(raw.rjust(digits, "1"))

    def resolve_seed(self, seed: SeedInput = None) -> int:
        """Return the seed as an int, or a fresh one if invalid/absent."""
        if self.is_valid_seed(seed):
            return int(str(seed).strip())
        if seed is not None:
            logger.warning(f"Invalid seed {seed!r}, generating a random one")
        return self.random_seed()

    def generate(self, seed: SeedInput = None) -> Tuple[List[Block], int]:
        """
        Generate a full game layout.

        Args:
            seed: 7-digit seed; invalid or absent seeds are replaced

        Returns:
            (blocks ordered by id, seed actually used)
        """
        seed = self.resolve_seed(seed)
        blocks = self._generate_blocks()
        blocks = self._shuffle(blocks, seed)
        self._assign_positions(blocks)
        logger.debug(f"Generated {len(blocks)} blocks for seed {seed}")
        return blocks, seed

    def _generate_blocks(self) -> List[Block]:
        return [
            Block(id=NULL_ID, position=(0, 0, 0), value=value, color=color)
            for color in range(self.config.color_count)
            for value in self.config.values
        ]

    @staticmethod
    def _shuffle(blocks: List[Block], seed: int) -> List[Block]:
        """Fisher-Yates over a sine stream keyed by seed + offset."""
        shuffled = list(blocks)
        offset = 0

        def next_random() -> float:
            nonlocal offset
            x = math.sin(seed + offset) * 10000
            offset += 1
            return x - math.floor(x)

        index = len(shuffled)
        while index:
            pick = math.floor(next_random() * index)
            index -= 1
            shuffled[index], shuffled[pick] = shuffled[pick], shuffled[index]

        return shuffled

    def _assign_positions(self, blocks: List[Block]) -> None:
        for block_id, position in enumerate(self.config.cells()):
            blocks[block_id].id = block_id
            blocks[block_id].position = position
