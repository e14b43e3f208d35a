"""
Puzzle Configuration Module - Lattice size, value ladder and win rules.
"""

from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class PuzzleConfig:
    """
    Static rules of a pyramid game.

    The pyramid has `layers` stacked triangular layers. Layer y is a
    triangular grid of side (layers - y): valid cells satisfy x >= 0,
    z >= 0 and x + z < layers - y.

    Attributes:
        layers: Number of stacked layers (y = 0 is the base)
        color_count: Number of color groups
        values: Starting value multiset for each color
        win_value: Value a block must reach to count towards a win
        win_count: Number of blocks at win_value needed to win
        score_multiplier: Score added per merge is multiplier * merged value
        seed_digits: Exact number of decimal digits in a valid seed
    """
    layers: int = 6
    color_count: int = 4
    values: Tuple[int, ...] = (32, 32, 16, 8, 8, 8, 4, 4, 4, 4, 2, 2, 2, 2)
    win_value: int = 128
    win_count: int = 4
    score_multiplier: int = 10
    seed_digits: int = 7

    def __post_init__(self):
        if self.block_count != self.cell_count:
            raise ValueError(
                f"{self.block_count} blocks do not fill {self.cell_count} cells "
                f"of a {self.layers}-layer pyramid"
            )

    @property
    def block_count(self) -> int:
        """Total blocks across all colors."""
        return self.color_count * len(self.values)

    @property
    def cell_count(self) -> int:
        """Total cells in the lattice."""
        return sum(1 for _ in self.cells())

    def layer_side(self, y: int) -> int:
        """Side length of the triangular layer y."""
        return self.layers - y

    def is_valid_cell(self, x: int, y: int, z: int) -> bool:
        """Check whether (x, y, z) lies inside the pyramid."""
        return 0 <= y < self.layers and x >= 0 and z >= 0 and x + z < self.layers - y

    def cells(self) -> Iterator[Tuple[int, int, int]]:
        """
        Enumerate lattice cells in layout order.

        y outer ascending, then x, then z, each within the layer's range.
        """
        for y in range(self.layers):
            for x in range(self.layers - y):
                for z in range(self.layers - x - y):
                    yield (x, y, z)


DEFAULT_CONFIG = PuzzleConfig()
