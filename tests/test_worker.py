"""
Tests for the background solver worker

The worker body is run synchronously via run(), so no event loop is
needed; signal handlers are called directly on the emitting thread.

Usage:
    pytest tests/test_worker.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.engine import GameEngine, GameStatus
from src.solver import SolutionPlayback
from src.solver_worker import SolverWorker


SEED = 1234567


def test_worker_leaves_caller_engine_untouched():
    engine = GameEngine(seed=SEED)
    snapshot = engine.export_snapshot()

    solutions = []
    statuses = []
    worker = SolverWorker(snapshot, strategy_name="dfs", max_iterations=100)
    worker.solution_ready.connect(solutions.append)
    worker.status_changed.connect(statuses.append)
    worker.run()

    assert not worker.is_running()
    assert worker.solution is not None
    assert solutions == [worker.solution]
    assert statuses[0] == "Solving"
    assert statuses[-1] == worker.solution.outcome
    assert engine.export_snapshot() == snapshot

    if worker.solution.solved:
        SolutionPlayback(solution=worker.solution, engine=engine).play_all()
        assert engine.status == GameStatus.WON


def test_worker_reports_unknown_strategy():
    engine = GameEngine(seed=SEED)
    errors = []
    worker = SolverWorker(engine.export_snapshot(), strategy_name="does-not-exist")
    worker.error_occurred.connect(errors.append)
    worker.run()

    assert worker.solution is None
    assert len(errors) == 1
    assert "does-not-exist" in errors[0]


def test_worker_stop_request_cancels_run():
    engine = GameEngine(seed=SEED)
    worker = SolverWorker(engine.export_snapshot(), strategy_name="dfs", max_iterations=10000)
    worker.request_stop()
    worker.run()

    assert worker.solution is not None
    assert worker.solution.was_cancelled
    assert worker.solution.metrics.iterations == 0
    assert engine.export_snapshot() == worker.snapshot


def test_worker_defaults_to_dfs():
    engine = GameEngine(seed=SEED)
    worker = SolverWorker(engine.export_snapshot())
    assert worker.strategy_name == "dfs"
