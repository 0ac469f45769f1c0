"""
Parameter visualisation commands: bars, LFO meters and waveforms.
"""

import math

from osc_display.commands.base import ArgShape, NUMBER, register_command

PARAMETER_LABELS = ("P1", "P2", "P3")


def _clamp(value: float, lo: float, hi: float) -> float:
    if not math.isfinite(value):
        return lo
    return min(max(value, lo), hi)


@register_command("/parameters", ArgShape(NUMBER, NUMBER, NUMBER))
def parameters(target, *values):
    """Three labelled horizontal bars, each value 0..1 of the bar width."""
    surface = target.surface
    width, height = surface.get_width(), surface.get_height()
    row_height = max(1, height // len(PARAMETER_LABELS))
    label_width = max(surface.text_size(label)[0] for label in PARAMETER_LABELS) + 2
    bar_width = max(0, width - label_width)

    for row, (label, value) in enumerate(zip(PARAMETER_LABELS, values)):
        y = row * row_height
        surface.draw_text(0, y, label)
        fill = int(round(_clamp(value, 0.0, 1.0) * bar_width))
        surface.draw_box(label_width, y + 1, fill, max(1, row_height - 2))


@register_command("/param1", ArgShape(NUMBER))
def param1(target, value):
    """Single bar across the surface, 0..1 of its width."""
    surface = target.surface
    bar_height = max(1, surface.get_height() // 6)
    fill = int(round(_clamp(value, 0.0, 1.0) * surface.get_width()))
    surface.draw_box(0, (surface.get_height() - bar_height) // 2, fill, bar_height)


@register_command("/lfos", ArgShape(repeat=(NUMBER,), min_repeats=1))
def lfos(target, *values):
    """Bipolar vertical meters (-1..1) around the horizontal midline."""
    surface = target.surface
    width, height = surface.get_width(), surface.get_height()
    mid = height // 2
    count = len(values)
    surface.draw_line(0, mid, width - 1, mid)

    for i, value in enumerate(values):
        x0 = i * width // count
        x1 = (i + 1) * width // count
        column = max(1, x1 - x0 - 1)
        extent = int(round(_clamp(value, -1.0, 1.0) * mid))
        if extent > 0:
            surface.draw_box(x0, mid - extent, column, extent)
        elif extent < 0:
            surface.draw_box(x0, mid, column, min(-extent, height - mid))


@register_command("/waveform", ArgShape(repeat=(NUMBER,), min_repeats=1))
def waveform(target, *values):
    """
    Piecewise waveform across the surface width.

    Column x shows values[floor(x * N / width)] at row floor(value * height),
    clamped to the surface.
    """
    surface = target.surface
    width, height = surface.get_width(), surface.get_height()
    count = len(values)
    for x in range(width):
        value = values[x * count // width]
        if not math.isfinite(value):
            continue
        y = int(math.floor(value * height))
        surface.draw_pixel(x, min(max(y, 0), height - 1))
