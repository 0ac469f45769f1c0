"""
Flush scheduling for target surfaces.

Two disciplines, fixed at construction:

    immediate  flush right after each successful mutating dispatch
    polled     a periodic tick flushes every dirty target exactly once,
               coalescing all mutations since the previous tick
"""

import logging
import time
from enum import Enum
from typing import List, Optional

from osc_display.core.target import DispatcherState

logger = logging.getLogger(__name__)


class FlushMode(Enum):
    IMMEDIATE = "immediate"
    POLLED = "polled"


class FlushScheduler:
    """
    Tracks per-target dirty flags and flushes surfaces.

    Dirty flags belong to the DispatcherState guard: mark_dirty() and
    after_dispatch() must be called with state.lock held (the Dispatcher
    does this); poll() takes the lock itself.
    """

    def __init__(self, state: DispatcherState, mode: FlushMode = FlushMode.IMMEDIATE,
                 profiler=None):
        self.state = state
        self.mode = FlushMode(mode)
        self._dirty: List[bool] = [False] * state.target_count
        self._profiler = profiler

    def is_dirty(self, index: int) -> bool:
        return self._dirty[index]

    def mark_dirty(self, index: int) -> None:
        self._dirty[index] = True

    def after_dispatch(self, index: Optional[int]) -> None:
        """Hook run at the end of a successful dispatch (guard held)."""
        if index is None or not self._dirty[index]:
            return
        if self.mode == FlushMode.IMMEDIATE:
            self._flush_locked(index)

    def _flush_locked(self, index: int) -> None:
        target = self.state.targets[index]
        t0 = time.perf_counter()
        target.flush()
        self._dirty[index] = False
        if self._profiler:
            self._profiler.record_flush(time.perf_counter() - t0)
        logger.debug(f"Flushed target {index}")

    def poll(self) -> int:
        """
        Flush every dirty target once.

        Returns:
            Number of targets flushed
        """
        flushed = 0
        with self.state.lock:
            for index, dirty in enumerate(self._dirty):
                if dirty:
                    self._flush_locked(index)
                    flushed += 1
        return flushed

    def flush_all(self) -> None:
        """Flush every target regardless of its dirty flag (startup splash)."""
        with self.state.lock:
            for index in range(self.state.target_count):
                self._flush_locked(index)
