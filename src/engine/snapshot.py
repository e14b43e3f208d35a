"""
Snapshot Module - Cheap, immutable capture of a game for save/restore.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from .block import Block


MergeRecord = Tuple[int, int]


def fingerprint(blocks: Iterable[Block]) -> str:
    """
    Canonical key over surviving blocks.

    Surviving (id, value) pairs sorted by id, joined as "id;value,...".
    Two games with equal fingerprints are the same position no matter
    which merges led there.

    Args:
        blocks: Any iterable of blocks (disabled ones are skipped)

    Returns:
        Fingerprint string
    """
    surviving = sorted((b for b in blocks if not b.disabled), key=lambda b: b.id)
    return ",".join(f"{b.id};{b.value}" for b in surviving)


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable game capture.

    Attributes:
        seed: Seed that produced the starting layout
        history: Merge records (source_id, target_id) in play order
        states: (value, disabled) for every block, indexed by id
        score: Score at capture time
        won: Win flag at capture time
        lost: Loss flag at capture time
    """
    seed: int
    history: Tuple[MergeRecord, ...] = ()
    states: Tuple[Tuple[int, bool], ...] = ()
    score: int = 0
    won: bool = False
    lost: bool = False
    short_state: str = field(default="", compare=False)

    @classmethod
    def capture(cls, seed: int, history: Iterable[MergeRecord], blocks: List[Block],
                score: int, won: bool, lost: bool) -> 'Snapshot':
        """Build a snapshot from live engine data."""
        return cls(
            seed=seed,
            history=tuple((int(a), int(b)) for a, b in history),
            states=tuple((b.value, b.disabled) for b in blocks),
            score=score,
            won=won,
            lost=lost,
            short_state=fingerprint(blocks),
        )

    @property
    def move_count(self) -> int:
        return len(self.history)

    @property
    def disabled_ids(self) -> Tuple[int, ...]:
        """Ids of blocks merged away."""
        return tuple(i for i, (_, disabled) in enumerate(self.states) if disabled)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form for saving or sharing."""
        return {
            "seed": self.seed,
            "history": [list(record) for record in self.history],
            "states": [[value, disabled] for value, disabled in self.states],
            "score": self.score,
            "won": self.won,
            "lost": self.lost,
            "shortState": self.short_state,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        """
        Rebuild a snapshot from to_dict() output.

        Only seed and history are required; the rest can be recovered by
        replaying history on a fresh layout.
        """
        return cls(
            seed=int(data["seed"]),
            history=tuple((int(a), int(b)) for a, b in data.get("history", [])),
            states=tuple((int(v), bool(d)) for v, d in data.get("states", [])),
            score=int(data.get("score", 0)),
            won=bool(data.get("won", False)),
            lost=bool(data.get("lost", False)),
            short_state=data.get("shortState", ""),
        )
