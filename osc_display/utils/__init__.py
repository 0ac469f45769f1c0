"""Utility components for the OSC display server."""

from osc_display.utils.logging import setup_logging, get_logger
from osc_display.utils.profiler import DispatchProfiler

__all__ = [
    "setup_logging",
    "get_logger",
    "DispatchProfiler",
]
