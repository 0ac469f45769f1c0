"""
Text and number commands.

All coordinates are top-left text anchors; the dispatcher clears the
surface before any of these run.
"""

import math

from osc_display.commands.base import ArgShape, AnyShape, NUMBER, STRING, register_command


def format_number(value) -> str:
    """Format an OSC number for display (ints as-is, floats to 3 decimals)."""
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return str(value)
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _line_height(surface) -> int:
    return max(1, surface.text_size("Ag")[1])


@register_command("/osc-test", ArgShape(NUMBER))
def osc_test(target, value):
    """Connection test: banner, the received number and a size indicator."""
    surface = target.surface
    surface.draw_text(10, 0, "OSC TEST!")
    surface.draw_text(10, _line_height(surface), format_number(value))

    radius_max = max(1, min(surface.get_width(), surface.get_height()) // 4)
    level = min(max(float(value), 0.0), 1.0) if math.isfinite(value) else 0.0
    radius = max(1, int(round(level * radius_max)))
    surface.draw_ellipse(surface.get_width() - radius_max - 2,
                         surface.get_height() - radius_max - 2,
                         radius, radius)


@register_command("/number", ArgShape(NUMBER))
def number(target, value):
    """Draw a single number centered on the surface."""
    surface = target.surface
    text = format_number(value)
    w, h = surface.text_size(text)
    surface.draw_text(max(0, (surface.get_width() - w) // 2),
                      max(0, (surface.get_height() - h) // 2), text)


@register_command("/display-text", ArgShape(repeat=(STRING,), min_repeats=1))
def display_text(target, *lines):
    """Draw each string argument on its own line."""
    surface = target.surface
    line_height = _line_height(surface)
    for row, line in enumerate(lines):
        y = row * line_height
        if y >= surface.get_height():
            break
        surface.draw_text(0, y, line)


@register_command("/display-strings-and-numbers",
                  ArgShape(repeat=(STRING, NUMBER), min_repeats=1))
def display_strings_and_numbers(target, *pairs):
    """Draw "label value" lines from alternating string/number arguments."""
    surface = target.surface
    line_height = _line_height(surface)
    for row in range(len(pairs) // 2):
        y = row * line_height
        if y >= surface.get_height():
            break
        label, value = pairs[2 * row], pairs[2 * row + 1]
        surface.draw_text(0, y, f"{label} {format_number(value)}")


@register_command("/tr", AnyShape(ArgShape(NUMBER, STRING), ArgShape(STRING)))
def tr(target, *args):
    """Status string, optionally prefixed by a number."""
    surface = target.surface
    if len(args) == 2:
        value, text = args
        surface.draw_text(10, 0, f"{format_number(value)} {text}")
    else:
        surface.draw_text(10, _line_height(surface) * 2, args[0])
