"""
Solver Worker Module for Pyramid Merge Solver

Provides a background QThread worker that runs a solving strategy without
blocking the caller. Communicates results via Qt signals.

The worker searches on its own engine, rebuilt from a snapshot of the
caller's game, so the live game is never touched while a search runs.
"""

import logging
import threading
from typing import Optional

from PyQt5.QtCore import QThread, pyqtSignal

from src.engine import GameEngine, PuzzleConfig, DEFAULT_CONFIG, Snapshot
from src.solver import SolutionContext, create_strategy, get_default_strategy_name


# Configure module logger
logger = logging.getLogger(__name__)


class SolverWorker(QThread):
    """
    Background worker thread for one solver run.

    Signals:
        status_changed(str): Emitted when worker status changes
        progress_changed(float, str): Strategy progress (0.0-1.0, message)
        solution_ready(object): Emitted with the Solution when the run ends
        error_occurred(str): Emitted when the strategy raises

    Example:
        worker = SolverWorker(engine.export_snapshot(), max_iterations=2000)
        worker.solution_ready.connect(on_solution)
        worker.start()
        # ...
        worker.request_stop()
        worker.wait()
    """

    status_changed = pyqtSignal(str)
    progress_changed = pyqtSignal(float, str)
    solution_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(self, snapshot: Snapshot, strategy_name: Optional[str] = None,
                 max_iterations: int = 2000, config: PuzzleConfig = DEFAULT_CONFIG,
                 **strategy_kwargs):
        """
        Initialize the solver worker.

        Args:
            snapshot: Game state to solve from
            strategy_name: Registered strategy name (default strategy if None)
            max_iterations: Search budget
            config: Pyramid rules of the game in the snapshot
            **strategy_kwargs: Passed to the strategy constructor
        """
        super().__init__()
        self.snapshot = snapshot
        self.strategy_name = strategy_name or get_default_strategy_name()
        self.max_iterations = max_iterations
        self.config = config
        self._strategy_kwargs = strategy_kwargs
        self._cancel_flag = threading.Event()
        self._running = False
        self._solution = None

    def run(self):
        """
        Worker body. Called when thread starts.

        Builds a private engine, runs the strategy and emits the result.
        """
        self._running = True
        logger.info(f"Solver worker started ({self.strategy_name})")
        self.status_changed.emit("Solving")

        try:
            engine = GameEngine(seed=self.snapshot.seed, config=self.config)
            engine.import_snapshot(self.snapshot)

            strategy = create_strategy(self.strategy_name, **self._strategy_kwargs)
            context = SolutionContext(
                engine=engine,
                cancel_flag=self._cancel_flag,
                max_iterations=self.max_iterations,
                progress_callback=self._on_progress,
            )
            self._solution = strategy.solve(context)
            self.status_changed.emit(self._solution.outcome)
            self.solution_ready.emit(self._solution)
        except Exception as e:
            logger.exception("Error in solver worker")
            self.status_changed.emit("Error")
            self.error_occurred.emit(str(e))
        finally:
            self._running = False
            logger.info("Solver worker stopped")

    def request_stop(self):
        """
        Request the worker to stop gracefully.

        The strategy finishes its current iteration before stopping.
        Use wait() after calling this to block until stopped.
        """
        logger.info("Stop requested")
        self._cancel_flag.set()

    def is_running(self) -> bool:
        """
        Check if the worker is currently running.

        Returns:
            True if a solver run is active, False otherwise
        """
        return self._running

    @property
    def solution(self):
        """Last solution produced, or None."""
        return self._solution

    def _on_progress(self, percent: float, message: str) -> None:
        self.progress_changed.emit(percent, message)
