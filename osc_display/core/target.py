"""
Targets and the shared dispatcher state.

Architecture:
    DispatcherState (one per server instance)
    ├── lock            (guards every field below)
    ├── TargetResolver  (addressing policy + active target)
    └── Targets: List[Target]
          ├── surface       (frame buffer, owned exclusively)
          ├── channel       (multiplexer channel or None)
          └── PointBuffer   (sized to the surface at construction)
"""

import logging
import threading
from typing import List, Optional, Sequence

from osc_display.core.addressing import AddressingPolicy, TargetResolver
from osc_display.core.point_buffer import PointBuffer
from osc_display.rendering.mux import ChannelSelector, NullChannelSelector

logger = logging.getLogger(__name__)


class Target:
    """One independently addressable drawing surface."""

    def __init__(self, index: int, surface, channel: Optional[int] = None,
                 selector: Optional[ChannelSelector] = None):
        self.index = index
        self.surface = surface
        self.channel = channel
        self.selector = selector if selector is not None else NullChannelSelector()
        self.points = PointBuffer(surface.get_width(), surface.get_height())

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    def flush(self) -> None:
        """Select this target's bus channel and flush its surface."""
        self.selector.select(self.channel)
        self.surface.flush()

    def release(self) -> None:
        self.surface.release()

    def __repr__(self) -> str:
        channel = "direct" if self.channel is None else f"channel={self.channel}"
        return f"Target({self.index}, {self.width}x{self.height}, {channel})"


class DispatcherState:
    """
    Everything the Dispatcher mutates, passed in explicitly.

    All reads and writes go through `lock`, which is also taken by the
    polled flush tick.
    """

    def __init__(self, targets: Sequence[Target],
                 policy: AddressingPolicy = AddressingPolicy.SINGLE):
        if not targets:
            raise ValueError("At least one target is required")
        for expected, target in enumerate(targets):
            if target.index != expected:
                raise ValueError(f"Target index {target.index} at position {expected}")
        self.targets: List[Target] = list(targets)
        self.resolver = TargetResolver(len(self.targets), policy)
        self.lock = threading.Lock()

    @property
    def target_count(self) -> int:
        return len(self.targets)

    def release(self) -> None:
        """Release every target surface. Call only after draining."""
        for target in self.targets:
            try:
                target.release()
            except Exception as e:
                logger.error(f"Failed to release {target}: {e}")
