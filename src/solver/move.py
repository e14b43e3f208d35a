"""
Move Module - Represents a single merge of two pyramid blocks.
"""

from dataclasses import dataclass
from typing import Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from src.engine import GameEngine


@dataclass(frozen=True)
class MergeMove:
    """
    Represents a merge of source into target.

    The source block is retired and the target block doubles. Value,
    color and positions are recorded at the moment the move was found,
    so the move can be described after the board has changed.

    Attributes:
        source_id: Block that gets disabled
        target_id: Block whose value doubles
        value: Shared value of both blocks before merging
        color: Shared color group
        source_position: (x, y, z) of the source block
        target_position: (x, y, z) of the target block
    """
    source_id: int
    target_id: int
    value: int
    color: int
    source_position: Tuple[int, int, int]
    target_position: Tuple[int, int, int]

    @classmethod
    def create(cls, engine: 'GameEngine', source_id: int, target_id: int) -> 'MergeMove':
        """
        Create a MergeMove from the engine's current blocks.

        Args:
            engine: Engine holding both blocks
            source_id: Block that gets disabled
            target_id: Block whose value doubles

        Returns:
            MergeMove instance
        """
        source = engine.get_block(source_id)
        target = engine.get_block(target_id)
        return cls(source_id=source_id, target_id=target_id,
                   value=source.value, color=source.color,
                   source_position=source.position,
                   target_position=target.position)

    @property
    def result_value(self) -> int:
        """Target value after the merge."""
        return self.value * 2

    @property
    def height_delta(self) -> int:
        """Layers between source and target (positive when source is higher)."""
        return self.source_position[1] - self.target_position[1]

    def as_tuple(self) -> Tuple[int, int]:
        """(source_id, target_id) pair as stored in engine history."""
        return (self.source_id, self.target_id)

    def __str__(self):
        return f"{self.source_id}->{self.target_id} ({self.value}x2, color {self.color})"
