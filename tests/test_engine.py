"""
Tests for the pyramid rules engine

Covers:
1. Shuffler determinism and seed validation
2. Support/occlusion predicates
3. Merge legality, merge/undo and score
4. Win/loss status
5. Snapshot export/import

Usage:
    pytest tests/test_engine.py
"""

import random
import sys
from collections import Counter
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.engine import (
    Block,
    DEFAULT_CONFIG,
    GameEngine,
    GameStatus,
    PuzzleConfig,
    Shuffler,
    Snapshot,
    fingerprint,
    is_valid_seed,
    parse_seed,
)


SEED = 1234567


def make_engine(specs, seed=SEED):
    """Build an engine from (position, value, color) tuples, ids in order."""
    blocks = [
        Block(id=i, position=position, value=value, color=color)
        for i, (position, value, color) in enumerate(specs)
    ]
    return GameEngine.from_blocks(blocks, seed=seed)


def block_states(engine):
    return [b.to_dict() for b in engine.blocks]


# ----------------------------------------------------------------------
# Shuffler
# ----------------------------------------------------------------------

def test_config_fills_pyramid():
    assert DEFAULT_CONFIG.cell_count == 56
    assert DEFAULT_CONFIG.block_count == 56
    assert len(list(DEFAULT_CONFIG.cells())) == 56


def test_config_rejects_mismatched_block_count():
    with pytest.raises(ValueError):
        PuzzleConfig(values=(2, 2))


def test_generate_is_deterministic():
    first, seed_a = Shuffler().generate(SEED)
    second, seed_b = Shuffler().generate(SEED)

    assert seed_a == seed_b == SEED
    assert [(b.id, b.position, b.value, b.color) for b in first] == \
           [(b.id, b.position, b.value, b.color) for b in second]


def test_different_seeds_give_different_layouts():
    first, _ = Shuffler().generate(SEED)
    second, _ = Shuffler().generate(7654321)
    assert [(b.value, b.color) for b in first] != [(b.value, b.color) for b in second]


def test_generate_layout_shape():
    blocks, _ = Shuffler().generate(SEED)

    assert [b.id for b in blocks] == list(range(56))
    assert [b.position for b in blocks] == list(DEFAULT_CONFIG.cells())
    assert all(DEFAULT_CONFIG.is_valid_cell(*b.position) for b in blocks)
    assert not any(b.disabled for b in blocks)

    for color in range(4):
        values = Counter(b.value for b in blocks if b.color == color)
        assert values == Counter({32: 2, 16: 1, 8: 3, 4: 4, 2: 4})


def test_layout_enumeration_order():
    cells = list(DEFAULT_CONFIG.cells())
    assert cells[0] == (0, 0, 0)
    assert cells[1] == (0, 0, 1)
    assert cells[6] == (1, 0, 0)
    assert cells[21] == (0, 1, 0)
    assert cells[-1] == (0, 5, 0)


@pytest.mark.parametrize("seed", ["1234567", 1234567, " 9999999 ", 1000000])
def test_valid_seeds(seed):
    assert is_valid_seed(seed)
    assert parse_seed(seed) == int(str(seed).strip())


@pytest.mark.parametrize("seed", [None, "", "123456", "12345678", "0123456", "abcdefg", "12345a7", True])
def test_invalid_seeds(seed):
    assert not is_valid_seed(seed)
    assert parse_seed(seed) is None


def test_invalid_seed_is_replaced():
    shuffler = Shuffler(rng=random.Random(42))
    _, seed = shuffler.generate("nope")
    assert is_valid_seed(seed)


def test_random_seeds_are_valid():
    shuffler = Shuffler(rng=random.Random(0))
    for _ in range(200):
        assert is_valid_seed(shuffler.random_seed())


# ----------------------------------------------------------------------
# Predicates
# ----------------------------------------------------------------------

def test_initial_free_blocks_are_layer_edges():
    engine = GameEngine(seed=SEED)
    for block in engine.blocks:
        x, y, z = block.position
        on_edge = x + z == DEFAULT_CONFIG.layers - 1 - y
        assert engine.is_free(block.id) == on_edge


def test_base_corner_is_blocked():
    engine = GameEngine(seed=SEED)
    corner = engine.block_at(0, 0, 0)
    assert engine.has_above(corner.id)
    assert engine.is_covered(corner.id)
    assert not engine.is_free(corner.id)


def test_has_above_ignores_disabled_and_ignore_id():
    engine = make_engine([((0, 0, 0), 2, 0), ((0, 1, 0), 2, 0)])
    assert engine.has_above(0)
    assert not engine.has_above(0, ignore_id=1)

    engine.blocks[1].disabled = True
    assert not engine.has_above(0)


def test_covered_by_apex():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 1, 1), 8, 1)])
    assert not engine.has_above(0)
    assert engine.is_covered(0)
    assert not engine.is_free(0)


def test_covered_needs_both_bridging_blocks():
    one_side = make_engine([((0, 0, 0), 2, 0), ((1, 1, 0), 8, 1)])
    assert not one_side.is_covered(0)
    assert one_side.is_free(0)

    bridged = make_engine([((0, 0, 0), 2, 0), ((1, 1, 0), 8, 1), ((0, 1, 1), 8, 2)])
    assert bridged.is_covered(0)
    assert not bridged.is_free(0)


def test_unknown_id_is_covered_not_free():
    engine = make_engine([((0, 0, 0), 2, 0)])
    assert engine.is_covered(99)
    assert not engine.has_above(99)
    assert not engine.is_free(99)


def test_closest_block_prefers_highest_coordinate_sum():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 1, 1), 4, 0), ((1, 0, 1), 8, 1)])
    assert engine.closest_block([0, 1, 2]) == 1
    engine.blocks[1].disabled = True
    assert engine.closest_block([0, 1, 2]) == 2
    assert engine.closest_block([]) == -1


# ----------------------------------------------------------------------
# Legality, merge and undo
# ----------------------------------------------------------------------

def test_merge_side_by_side():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 2, 0), ((3, 0, 0), 4, 1), ((4, 0, 0), 4, 1)])

    assert engine.can_merge(0, 1)
    assert engine.merge(0, 1)
    assert engine.blocks[1].value == 4
    assert engine.blocks[0].disabled
    assert engine.history == [(0, 1)]
    assert engine.score == 20
    assert engine.status == GameStatus.PLAYING


def test_merge_and_undo_restore_everything():
    engine = make_engine([((0, 0, 0), 8, 0), ((1, 0, 0), 8, 0), ((3, 0, 0), 4, 1), ((4, 0, 0), 4, 1)])
    before = block_states(engine)

    assert engine.merge(2, 3)
    assert engine.score == 40
    assert engine.undo()

    assert block_states(engine) == before
    assert engine.score == 0
    assert engine.history == []
    assert engine.status == GameStatus.PLAYING


def test_merge_then_undo_for_every_initial_move():
    engine = GameEngine(seed=SEED)
    before = block_states(engine)
    status = engine.status

    for source_id, target_id in engine.list_legal_moves():
        assert engine.merge(source_id, target_id)
        assert engine.undo()
        assert block_states(engine) == before
        assert engine.score == 0
        assert engine.status == status


@pytest.mark.parametrize("specs", [
    [((0, 0, 0), 2, 0), ((1, 0, 0), 2, 1)],  # different colors
    [((0, 0, 0), 2, 0), ((1, 0, 0), 4, 0)],  # different values
])
def test_mismatched_blocks_cannot_merge(specs):
    engine = make_engine(specs)
    before = block_states(engine)

    assert not engine.can_merge(0, 1)
    assert not engine.merge(0, 1)
    assert not engine.merge(1, 0)
    assert block_states(engine) == before
    assert engine.history == []
    assert engine.score == 0


def test_illegal_ids_do_nothing():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 2, 0)])
    assert not engine.merge(0, 0)
    assert not engine.merge(-1, 0)
    assert not engine.merge(0, 99)
    assert engine.history == []


def test_merge_down_onto_support():
    engine = make_engine([((0, 0, 0), 2, 0), ((0, 1, 0), 2, 0)])

    assert engine.can_merge(1, 0)
    assert not engine.can_merge(0, 1)
    assert engine.list_legal_moves() == [(1, 0)]
    assert engine.merge(1, 0)
    assert engine.blocks[0].value == 4


def test_merge_down_onto_covered_support():
    engine = make_engine([((0, 0, 0), 2, 0), ((0, 1, 0), 2, 0), ((1, 1, 1), 8, 1)])
    assert engine.is_covered(0)
    assert engine.can_merge(1, 0)


def test_blocked_source_cannot_merge():
    # Block 0 has block 1 above it; block 2 is a matching free block
    engine = make_engine([((0, 0, 0), 2, 0), ((0, 1, 0), 16, 1), ((3, 0, 0), 2, 0)])
    assert engine.has_above(0)
    assert not engine.can_merge(0, 2)
    assert not engine.can_merge(2, 0)


def test_covered_block_cannot_merge():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 1, 1), 16, 1), ((3, 0, 0), 2, 0)])
    assert engine.is_covered(0)
    assert not engine.can_merge(0, 2)
    assert not engine.can_merge(2, 0)
    assert not engine.merge(0, 2)


def test_disabled_blocks_cannot_merge():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 2, 0), ((2, 0, 0), 4, 0)])
    assert engine.merge(0, 1)
    assert not engine.can_merge(0, 2)
    assert not engine.can_merge(2, 0)


def test_stop_at_first_agrees_with_full_listing():
    engines = [
        GameEngine(seed=SEED),
        GameEngine(seed=7654321),
        make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 2, 1)]),
        make_engine([((0, 0, 0), 2, 0), ((0, 1, 0), 2, 0)]),
    ]
    for engine in engines:
        first = engine.list_legal_moves(stop_at_first=True)
        full = engine.list_legal_moves(stop_at_first=False)
        assert bool(first) == bool(full)
        assert len(first) <= 1
        assert set(first) <= set(full)


def test_legal_moves_are_mergeable():
    engine = GameEngine(seed=SEED)
    for source_id, target_id in engine.list_legal_moves():
        assert engine.is_free(source_id)
        assert engine.can_merge(source_id, target_id)


def test_reset_with_seed():
    engine = GameEngine(seed=SEED)
    moves = engine.list_legal_moves()
    if moves:
        engine.merge(*moves[0])

    assert engine.reset(7654321) == 7654321
    assert engine.seed == 7654321
    assert engine.history == []
    assert engine.score == 0
    assert engine.fingerprint() == GameEngine(seed=7654321).fingerprint()


def test_restart_keeps_seed():
    engine = GameEngine(seed=SEED)
    start = engine.fingerprint()
    moves = engine.list_legal_moves()
    if moves:
        engine.merge(*moves[0])
    engine.restart()
    assert engine.seed == SEED
    assert engine.fingerprint() == start


# ----------------------------------------------------------------------
# Status
# ----------------------------------------------------------------------

NEAR_WIN = [
    ((0, 0, 0), 128, 1),
    ((1, 0, 0), 128, 2),
    ((2, 0, 0), 128, 3),
    ((3, 0, 0), 64, 0),
    ((4, 0, 0), 64, 0),
]


def test_four_blocks_at_128_is_won():
    engine = make_engine([
        ((0, 0, 0), 128, 0),
        ((1, 0, 0), 128, 1),
        ((2, 0, 0), 128, 2),
        ((3, 0, 0), 128, 3),
    ])
    assert engine.status == GameStatus.WON
    assert engine.has_won
    assert not engine.has_lost


def test_three_or_five_blocks_at_128_is_not_won():
    three = make_engine([((0, 0, 0), 128, 0), ((1, 0, 0), 128, 1), ((2, 0, 0), 128, 2)])
    assert three.status != GameStatus.WON

    five = make_engine([((i, 0, 0), 128, i % 4) for i in range(5)])
    assert five.status != GameStatus.WON


def test_winning_merge_and_no_undo_after_win():
    engine = make_engine(NEAR_WIN)
    assert engine.status == GameStatus.PLAYING

    assert engine.merge(3, 4)
    assert engine.status == GameStatus.WON
    assert engine.score == 640

    assert not engine.undo()
    assert engine.status == GameStatus.WON
    assert engine.history == [(3, 4)]


def test_loss_is_sticky_until_undo():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 2, 0), ((2, 0, 0), 8, 1)])

    assert engine.merge(0, 1)
    assert engine.status == GameStatus.LOST
    assert engine.has_lost
    assert not engine.merge(1, 2)
    assert engine.status == GameStatus.LOST

    assert engine.undo()
    assert engine.status == GameStatus.PLAYING


def test_start_without_moves_is_lost():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 4, 0)])
    assert engine.status == GameStatus.LOST


def test_undo_with_empty_history():
    engine = GameEngine(seed=SEED)
    assert not engine.undo()
    assert engine.score == 0


# ----------------------------------------------------------------------
# Snapshots
# ----------------------------------------------------------------------

def play_moves(engine, count):
    for _ in range(count):
        moves = engine.list_legal_moves()
        if not moves:
            break
        engine.merge(*moves[0])


def test_snapshot_round_trip():
    engine = GameEngine(seed=SEED)
    play_moves(engine, 5)
    snapshot = engine.export_snapshot()

    other = GameEngine(seed=7654321)
    other.import_snapshot(snapshot)

    assert other.seed == SEED
    assert other.history == engine.history
    assert other.score == engine.score
    assert other.status == engine.status
    assert other.fingerprint() == engine.fingerprint()
    assert other.export_snapshot() == snapshot


def test_snapshot_replay_matches_direct_restore():
    engine = GameEngine(seed=SEED)
    play_moves(engine, 6)
    snapshot = engine.export_snapshot()

    replayed = GameEngine(seed=SEED)
    replayed.import_snapshot(snapshot, replay=True)
    assert block_states(replayed) == block_states(engine)
    assert replayed.export_snapshot() == snapshot


def test_snapshot_import_rolls_back():
    engine = GameEngine(seed=SEED)
    start = engine.export_snapshot()
    before = block_states(engine)
    play_moves(engine, 4)

    engine.import_snapshot(start)
    assert block_states(engine) == before
    assert engine.history == []
    assert engine.score == 0


def test_snapshot_dict_round_trip():
    engine = GameEngine(seed=SEED)
    play_moves(engine, 3)
    snapshot = engine.export_snapshot()

    restored = Snapshot.from_dict(snapshot.to_dict())
    assert restored == snapshot
    assert restored.short_state == snapshot.short_state

    seed_and_history = Snapshot.from_dict({
        "seed": SEED,
        "history": [list(m) for m in snapshot.history],
    })
    replayed = GameEngine()
    replayed.import_snapshot(seed_and_history)
    assert replayed.fingerprint() == engine.fingerprint()


def test_snapshot_size_mismatch_raises():
    engine = GameEngine(seed=SEED)
    with pytest.raises(ValueError):
        engine.import_snapshot(Snapshot(seed=SEED, states=((2, False),)))


def test_disabled_ids_in_snapshot():
    engine = make_engine([((0, 0, 0), 2, 0), ((1, 0, 0), 2, 0), ((3, 0, 0), 4, 1), ((4, 0, 0), 4, 1)])
    engine.merge(0, 1)
    assert engine.export_snapshot().disabled_ids == (0,)


def test_fingerprint_ignores_move_order():
    specs = [((0, 0, 0), 2, 0), ((1, 0, 0), 2, 0), ((3, 0, 0), 2, 1), ((4, 0, 0), 2, 1)]
    first = make_engine(specs)
    first.merge(0, 1)
    first.merge(2, 3)

    second = make_engine(specs)
    second.merge(2, 3)
    second.merge(0, 1)

    assert first.history != second.history
    assert first.fingerprint() == second.fingerprint() == "1;4,3;4"


def test_fingerprint_format():
    blocks = [
        Block(id=2, position=(0, 0, 0), value=8, color=0),
        Block(id=0, position=(1, 0, 0), value=2, color=0),
        Block(id=1, position=(2, 0, 0), value=4, color=0, disabled=True),
    ]
    assert fingerprint(blocks) == "0;2,2;8"
