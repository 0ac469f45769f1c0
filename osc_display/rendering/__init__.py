"""Drawing surfaces, bus channel selection and the preview window."""

from osc_display.rendering.surface import Surface, PygameSurface
from osc_display.rendering.mux import ChannelSelector, NullChannelSelector, TCA9548A

__all__ = [
    "Surface",
    "PygameSurface",
    "ChannelSelector",
    "NullChannelSelector",
    "TCA9548A",
]
