"""
Persistent point buffer with fading trails.

Each cell holds the number of remaining ticks it stays visible. Points are
stamped into the grid with a square brush; every render tick draws each
live cell once and decrements it.
"""

import logging
import math
from typing import Iterable, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MAX_COUNTER = 0xFFFF


def _at_least_one(value) -> int:
    if not math.isfinite(value):
        return 1
    return min(max(1, int(value)), MAX_COUNTER)


def _round_half_away(value: float) -> int:
    """Round to nearest, halves away from zero (so -0.5 maps to -1, off-surface)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class PointBuffer:
    """
    Grid of persistence counters sized to a surface resolution.

    Indexed as grid[y, x]. Owned by exactly one Target.
    """

    def __init__(self, width: int, height: int,
                 persistence: int = 1, brush_size: int = 1):
        if width < 1 or height < 1:
            raise ValueError(f"Invalid point buffer size {width}x{height}")
        self.width = width
        self.height = height
        self.grid = np.zeros((height, width), dtype=np.uint16)
        self.persistence = _at_least_one(persistence)
        self.brush_size = _at_least_one(brush_size)

    def clear(self) -> None:
        """Zero every cell."""
        self.grid.fill(0)

    def set_persistence(self, value) -> int:
        """Set the tick count stamped by later accumulate() calls (min 1)."""
        self.persistence = _at_least_one(value)
        return self.persistence

    def set_brush_size(self, value) -> int:
        """Set the square brush edge length in pixels (min 1)."""
        self.brush_size = _at_least_one(value)
        return self.brush_size

    def to_pixel(self, x: float, y: float, normalized: bool) -> Tuple[int, int]:
        """Map a point to integer pixel coordinates (may be off-surface)."""
        if normalized:
            return (_round_half_away(x * (self.width - 1)),
                    _round_half_away(y * (self.height - 1)))
        return int(math.floor(x)), int(math.floor(y))

    def accumulate(self, points: Iterable[Tuple[float, float]],
                   normalized: bool) -> int:
        """
        Stamp points into the grid at the current persistence.

        Points outside the surface after mapping are skipped; they do not
        stop the rest of the batch.

        Args:
            points: (x, y) pairs, unit interval if normalized else pixels
            normalized: Whether coordinates are in [0, 1]

        Returns:
            Number of points stamped
        """
        size = self.brush_size
        lo = (size - 1) // 2
        stamped = 0
        for x, y in points:
            if not (math.isfinite(x) and math.isfinite(y)):
                logger.debug(f"Point ({x}, {y}) is not finite, skipped")
                continue
            px, py = self.to_pixel(x, y, normalized)
            if not (0 <= px < self.width and 0 <= py < self.height):
                logger.debug(f"Point ({x}, {y}) -> ({px}, {py}) outside "
                             f"{self.width}x{self.height}, skipped")
                continue
            x0 = max(0, px - lo)
            y0 = max(0, py - lo)
            x1 = min(self.width, px - lo + size)
            y1 = min(self.height, py - lo + size)
            self.grid[y0:y1, x0:x1] = self.persistence
            stamped += 1
        return stamped

    def render_tick(self, surface) -> int:
        """
        Draw every live cell once and decrement its counter.

        Returns:
            Number of pixels drawn
        """
        ys, xs = np.nonzero(self.grid)
        for x, y in zip(xs.tolist(), ys.tolist()):
            surface.draw_pixel(x, y)
        self.grid[ys, xs] -= 1
        return len(xs)

    @property
    def live_cells(self) -> int:
        return int(np.count_nonzero(self.grid))
