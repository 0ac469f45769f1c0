"""Core components: addressing, targets, point buffers and dispatch results."""

from osc_display.core.addressing import AddressingPolicy, TargetResolver, parse_policy
from osc_display.core.point_buffer import PointBuffer
from osc_display.core.result import DispatchResult, ErrorKind, Result
from osc_display.core.target import DispatcherState, Target

__all__ = [
    "AddressingPolicy",
    "TargetResolver",
    "parse_policy",
    "PointBuffer",
    "DispatchResult",
    "ErrorKind",
    "Result",
    "DispatcherState",
    "Target",
]
