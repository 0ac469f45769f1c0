"""
Dispatch profiler for the OSC display server.

Keeps rolling timings of message dispatch (per address) and surface
flushes, and logs a summary on an interval. Meant for checking latency on
small boards driving several displays.

Usage:
    profiler = DispatchProfiler(interval=5.0)
    profiler.record_command("/waveform", duration_s)   # transport threads
    profiler.record_flush(duration_s)                  # flush scheduler
    profiler.maybe_report()                            # main loop
"""

import collections
import threading
import time
from typing import Dict

from osc_display.utils.logging import get_logger

logger = get_logger(__name__)


class _Stats:
    """Rolling statistics over a fixed-size window."""

    __slots__ = ("_values",)

    def __init__(self, window: int = 300):
        self._values = collections.deque(maxlen=window)

    def add(self, value: float):
        self._values.append(value)

    @property
    def count(self) -> int:
        return len(self._values)

    @property
    def max(self) -> float:
        return max(self._values) if self._values else 0.0

    @property
    def avg(self) -> float:
        return sum(self._values) / len(self._values) if self._values else 0.0

    @property
    def p95(self) -> float:
        if not self._values:
            return 0.0
        ordered = sorted(self._values)
        return ordered[min(int(len(ordered) * 0.95), len(ordered) - 1)]


def _fmt_ms(seconds: float) -> str:
    return f"{seconds * 1000:.2f}ms"


class DispatchProfiler:
    """
    Collects dispatch and flush timings.

    Args:
        interval: Seconds between summary log outputs
        window: Number of recent samples kept per statistic
    """

    def __init__(self, interval: float = 5.0, window: int = 300):
        self._interval = interval
        self._window = window
        self._lock = threading.Lock()
        self._commands: Dict[str, _Stats] = {}
        self._flushes = _Stats(window)
        self._messages = 0
        self._last_report = time.monotonic()

    def record_command(self, address: str, duration: float):
        with self._lock:
            stats = self._commands.get(address)
            if stats is None:
                stats = self._commands[address] = _Stats(self._window)
            stats.add(duration)
            self._messages += 1

    def record_flush(self, duration: float):
        with self._lock:
            self._flushes.add(duration)

    def maybe_report(self) -> bool:
        """Log a summary if the interval has elapsed. Returns True if logged."""
        now = time.monotonic()
        if now - self._last_report < self._interval:
            return False
        self._report(now - self._last_report)
        self._last_report = now
        return True

    def _report(self, elapsed: float):
        with self._lock:
            rate = self._messages / elapsed if elapsed > 0 else 0.0
            lines = [
                f"=== PROFILE ({self._messages} messages, {rate:.1f} msg/s) ===",
                f"  {'Address':<30s} {'n':>5s} {'avg':>8s} {'p95':>8s} {'max':>8s}",
            ]
            ranked = sorted(self._commands.items(), key=lambda x: x[1].count, reverse=True)
            for address, s in ranked[:8]:
                lines.append(
                    f"  {address:<30s} {s.count:>5d} {_fmt_ms(s.avg):>8s} "
                    f"{_fmt_ms(s.p95):>8s} {_fmt_ms(s.max):>8s}"
                )
            s = self._flushes
            lines.append(
                f"  {'(flush)':<30s} {s.count:>5d} {_fmt_ms(s.avg):>8s} "
                f"{_fmt_ms(s.p95):>8s} {_fmt_ms(s.max):>8s}"
            )
            self._messages = 0
        logger.info("\n".join(lines))
