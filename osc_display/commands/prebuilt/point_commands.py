"""
Point-buffer commands (the /points family).

Accumulation and parameter commands only change the target's point
buffer; /points/tick renders it onto the surface.
"""

import logging

from osc_display.commands.base import ArgShape, NUMBER, register_command

logger = logging.getLogger(__name__)

POINTS = "/points"

_POINT_PAIRS = ArgShape(repeat=(NUMBER, NUMBER), min_repeats=1)


def _pairs(values):
    return list(zip(values[0::2], values[1::2]))


@register_command("clear", ArgShape(), family=POINTS, draws=False)
def points_clear(target):
    """Forget all points."""
    target.points.clear()


@register_command("persistence", ArgShape(NUMBER), family=POINTS, draws=False)
def points_persistence(target, value):
    """Number of ticks new points stay visible (min 1)."""
    target.points.set_persistence(value)


@register_command("size", ArgShape(NUMBER), family=POINTS, draws=False)
def points_size(target, value):
    """Brush edge length in pixels (min 1)."""
    target.points.set_brush_size(value)


@register_command("tick", ArgShape(), family=POINTS)
def points_tick(target):
    """Draw live points and age them by one tick."""
    drawn = target.points.render_tick(target.surface)
    logger.debug(f"Target {target.index}: tick drew {drawn} pixel(s)")


@register_command("values-rel", _POINT_PAIRS, family=POINTS, draws=False)
def points_values_rel(target, *coords):
    """Add points given as x y pairs in the unit interval."""
    target.points.accumulate(_pairs(coords), normalized=True)


@register_command("values-px", _POINT_PAIRS, family=POINTS, draws=False)
def points_values_px(target, *coords):
    """Add points given as x y pairs in pixels."""
    target.points.accumulate(_pairs(coords), normalized=False)
