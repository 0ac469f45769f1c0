"""
Drawing surface protocol and the pygame frame-buffer implementation.

A surface is a small monochrome frame buffer. Commands draw into it with
surface-local integer pixel coordinates; flush() pushes the finished frame
to whatever presents it (preview window, snapshot files, a display driver).
"""

import logging
import threading
from typing import Callable, List, Protocol, Tuple

import pygame

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 128
DEFAULT_HEIGHT = 64
DEFAULT_FONT_SIZE = 12

FOREGROUND = (255, 255, 255)
BACKGROUND = (0, 0, 0)


class Surface(Protocol):
    """Protocol for drawing surfaces. One per target."""

    def get_width(self) -> int:
        ...

    def get_height(self) -> int:
        ...

    def clear(self) -> None:
        """Clear the frame buffer (does not flush)."""
        ...

    def draw_pixel(self, x: int, y: int) -> None:
        ...

    def draw_line(self, x0: int, y0: int, x1: int, y1: int) -> None:
        ...

    def draw_box(self, x: int, y: int, w: int, h: int) -> None:
        """Draw a filled box with top-left corner (x, y)."""
        ...

    def draw_ellipse(self, x: int, y: int, rx: int, ry: int) -> None:
        """Draw an ellipse outline centered at (x, y)."""
        ...

    def draw_text(self, x: int, y: int, text: str) -> None:
        """Draw text with its top-left corner at (x, y)."""
        ...

    def text_size(self, text: str) -> Tuple[int, int]:
        """Rendered (width, height) of text in pixels."""
        ...

    def flush(self) -> None:
        """Send the frame buffer to the output."""
        ...

    def release(self) -> None:
        """Release the surface at shutdown."""
        ...


FlushListener = Callable[["PygameSurface"], None]


class PygameSurface:
    """
    Off-screen pygame frame buffer.

    Needs no display: only pygame.font is initialized. Flush listeners are
    called with the surface after every flush and must copy what they keep.
    """

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT,
                 font_size: int = DEFAULT_FONT_SIZE):
        if width < 1 or height < 1:
            raise ValueError(f"Invalid surface size {width}x{height}")
        if not pygame.font.get_init():
            pygame.font.init()
        self.width = width
        self.height = height
        self.buffer = pygame.Surface((width, height))
        self.buffer.fill(BACKGROUND)
        self._font = pygame.font.Font(None, font_size)
        self._listeners: List[FlushListener] = []
        self._lock = threading.Lock()
        self.flush_count = 0

    def add_flush_listener(self, listener: FlushListener) -> None:
        self._listeners.append(listener)

    def get_width(self) -> int:
        return self.width

    def get_height(self) -> int:
        return self.height

    def clear(self) -> None:
        self.buffer.fill(BACKGROUND)

    def draw_pixel(self, x: int, y: int) -> None:
        self.buffer.set_at((x, y), FOREGROUND)

    def draw_line(self, x0: int, y0: int, x1: int, y1: int) -> None:
        pygame.draw.line(self.buffer, FOREGROUND, (x0, y0), (x1, y1))

    def draw_box(self, x: int, y: int, w: int, h: int) -> None:
        if w <= 0 or h <= 0:
            return
        self.buffer.fill(FOREGROUND, pygame.Rect(x, y, w, h))

    def draw_ellipse(self, x: int, y: int, rx: int, ry: int) -> None:
        rect = pygame.Rect(x - rx, y - ry, 2 * rx + 1, 2 * ry + 1)
        pygame.draw.ellipse(self.buffer, FOREGROUND, rect, 1)

    def draw_text(self, x: int, y: int, text: str) -> None:
        if not text:
            return
        rendered = self._font.render(text, False, FOREGROUND, BACKGROUND)
        self.buffer.blit(rendered, (x, y))

    def text_size(self, text: str) -> Tuple[int, int]:
        return self._font.size(text)

    def snapshot(self) -> pygame.Surface:
        """Copy of the current frame buffer (safe to keep across flushes)."""
        with self._lock:
            return self.buffer.copy()

    def flush(self) -> None:
        with self._lock:
            self.flush_count += 1
        for listener in self._listeners:
            listener(self)

    def release(self) -> None:
        self._listeners.clear()
