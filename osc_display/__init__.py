"""
OSC Display - route OSC messages to one or more small monochrome displays.

This package provides an OSC display server where:
- Messages address one of several targets (displays) under a selectable
  addressing policy (single, per-message, stateful)
- Each recognized address draws text, parameter bars, waveforms or a
  fading point trail into the target's frame buffer
- Frames are flushed immediately or on a polling cadence, optionally
  through a TCA9548A I2C multiplexer
"""

from osc_display.core.addressing import AddressingPolicy
from osc_display.core.result import DispatchResult, ErrorKind
from osc_display.core.target import DispatcherState, Target
from osc_display.dispatcher import Dispatcher
from osc_display.flush import FlushMode, FlushScheduler
from osc_display.client import OscDisplayClient

__version__ = "1.0.0"
__all__ = [
    "AddressingPolicy",
    "DispatchResult",
    "ErrorKind",
    "DispatcherState",
    "Target",
    "Dispatcher",
    "FlushMode",
    "FlushScheduler",
    "OscDisplayClient",
]
