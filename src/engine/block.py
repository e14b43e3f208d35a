"""
Block Module - One numbered, colored cube of the pyramid.
"""

from dataclasses import dataclass, replace
from typing import Tuple


NULL_ID = -1


@dataclass
class Block:
    """
    A single cube in the pyramid.

    Blocks are never deleted during a game. Merging disables the source
    block so that undo can bring it back exactly.

    Attributes:
        id: Stable identity within one game instance
        position: (x, y, z) lattice cell, y is the layer (0 = base)
        value: Power of two
        color: Color group index
        disabled: True once merged away
    """
    id: int
    position: Tuple[int, int, int]
    value: int
    color: int
    disabled: bool = False

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    @property
    def z(self) -> int:
        return self.position[2]

    def can_combine_with(self, other: 'Block') -> bool:
        """Same color and same value."""
        return self.color == other.color and self.value == other.value

    def copy(self) -> 'Block':
        """Independent copy of this block."""
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "position": list(self.position),
            "value": self.value,
            "color": self.color,
            "disabled": self.disabled,
        }
