"""
Heuristics Module - Approximate dead-end detection for search pruning.

This is a best-effort filter, not a proof: it may prune a state that
could still be won, and it misses many dead ends. Solvers use it only to
skip branches early.
"""

from collections import defaultdict
from typing import Dict, List

from src.engine import Block, GameEngine


def value_chain(value: int, win_value: int) -> List[int]:
    """
    Values strictly between `value` and `win_value` in the doubling ladder.

    value_chain(8, 128) == [16, 32, 64]
    """
    chain = []
    current = value * 2
    while current < win_value:
        chain.append(current)
        current *= 2
    return chain


def detect_unsolvable(engine: GameEngine) -> int:
    """
    Look for a surviving block that looks permanently stuck.

    For each surviving block b of value v, consider same-color survivors
    in b's column on lower layers ("below") and same-color survivors
    anywhere else ("others"). If the block directly beneath b matches v,
    b can merge right away and is not stuck. Otherwise b is stuck when
    something same-colored lies below it and every value of the chain
    from 2v up to half the win value is still present among others.

    Args:
        engine: Engine in the state to check

    Returns:
        Value of the first stuck block found, or 0 if none
    """
    win_value = engine.config.win_value
    survivors = engine.remaining_blocks()

    by_color: Dict[int, List[Block]] = defaultdict(list)
    for block in survivors:
        by_color[block.color].append(block)

    for block in survivors:
        if block.value >= win_value:
            continue

        same_color = by_color[block.color]
        below = [
            b for b in same_color
            if b.x == block.x and b.z == block.z and b.y < block.y
        ]
        if not below:
            continue

        if any(b.y == block.y - 1 and b.value == block.value for b in below):
            continue

        below_ids = {b.id for b in below}
        other_values = {
            b.value for b in same_color
            if b.id not in below_ids and b.id != block.id
        }
        if all(v in other_values for v in value_chain(block.value, win_value)):
            return block.value

    return 0


def is_unsolvable(engine: GameEngine) -> bool:
    return detect_unsolvable(engine) > 0
