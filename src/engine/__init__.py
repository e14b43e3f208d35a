"""
Engine Package - Rules engine for the pyramid merge puzzle.

Public API:
    - PuzzleConfig / DEFAULT_CONFIG: Pyramid rules
    - Block: One cube of the pyramid
    - Shuffler: Deterministic seeded layout
    - is_valid_seed() / parse_seed(): Seed validation at the input boundary
    - Snapshot / fingerprint(): State capture for save/restore and search
    - GameEngine / GameStatus: Merge/undo state machine

Usage:
    from src.engine import GameEngine

    engine = GameEngine(seed=1234567)
    for source_id, target_id in engine.list_legal_moves():
        print(f"{source_id} -> {target_id}")
"""

from .config import PuzzleConfig, DEFAULT_CONFIG
from .block import Block, NULL_ID
from .shuffler import Shuffler, is_valid_seed, parse_seed
from .snapshot import Snapshot, fingerprint
from .engine import GameEngine, GameStatus

__all__ = [
    "PuzzleConfig",
    "DEFAULT_CONFIG",
    "Block",
    "NULL_ID",
    "Shuffler",
    "is_valid_seed",
    "parse_seed",
    "Snapshot",
    "fingerprint",
    "GameEngine",
    "GameStatus",
]
