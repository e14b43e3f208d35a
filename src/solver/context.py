"""
Solution Context Module - Shared context for strategy execution.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from src.engine import GameEngine


@dataclass
class SolutionContext:
    """
    Shared context passed to strategies containing the engine,
    cancellation, search budget and progress reporting.

    Strategies import intermediate states into `engine` while searching,
    so nothing else may use the engine until solve() returns.

    Attributes:
        engine: Engine to search from (its current state is the start)
        cancel_flag: Threading event for cancellation
        max_iterations: Exploration budget (outer search iterations)
        timeout_sec: Optional wall-clock limit in seconds
        start_time: When computation started
        progress_callback: Optional callback for progress updates
        restore_on_success: Re-import the starting state after a win is found
    """
    engine: GameEngine
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    max_iterations: int = 2000
    timeout_sec: Optional[float] = None
    start_time: float = field(default_factory=time.time)
    progress_callback: Optional[Callable[[float, str], None]] = None
    restore_on_success: bool = False

    def is_cancelled(self) -> bool:
        """
        Check if cancellation requested or timeout exceeded.

        Returns:
            True if strategy should stop execution
        """
        if self.cancel_flag.is_set():
            return True
        if self.timeout_sec is not None and self.elapsed_time() > self.timeout_sec:
            return True
        return False

    def cancel(self) -> None:
        """Request the running strategy to stop after its current iteration."""
        self.cancel_flag.set()

    def budget_exhausted(self, iterations: int) -> bool:
        return iterations >= self.max_iterations

    def report_progress(self, percent: float, message: str = "") -> None:
        """
        Report progress to UI.

        Args:
            percent: Progress from 0.0 to 1.0
            message: Optional status message
        """
        if self.progress_callback:
            self.progress_callback(percent, message)

    def elapsed_time(self) -> float:
        """
        Get seconds elapsed since computation started.

        Returns:
            Elapsed time in seconds
        """
        return time.time() - self.start_time
