"""
Flush sinks: the pygame preview window and PNG snapshots.

Sinks are registered as flush listeners on each target surface. Flushes
can happen on transport threads, so the preview only stores copies of the
flushed frames; present() draws them from the main thread.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pygame

logger = logging.getLogger(__name__)

TILE_GAP = 4  # pixels between targets (window pixels)
GAP_COLOR = (40, 40, 40)


class PreviewWindow:
    """Window tiling every target's last flushed frame side by side."""

    def __init__(self, target_count: int, width: int, height: int, scale: int = 4):
        self.target_count = target_count
        self.tile_size = (width * scale, height * scale)
        self.scale = scale
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self._frames: Dict[int, pygame.Surface] = {}
        self._lock = threading.Lock()
        self._changed = True

    def init(self) -> None:
        """Open the window. Must run on the main thread."""
        pygame.init()
        tile_w, tile_h = self.tile_size
        size = (tile_w * self.target_count + TILE_GAP * (self.target_count - 1), tile_h)
        self.screen = pygame.display.set_mode(size)
        pygame.display.set_caption(f"OSC Display ({self.target_count} target(s))")
        self.clock = pygame.time.Clock()
        logger.info(f"Preview window {size[0]}x{size[1]} (scale {self.scale})")

    def tile_origin(self, index: int) -> Tuple[int, int]:
        return (index * (self.tile_size[0] + TILE_GAP), 0)

    def on_flush(self, index: int, surface) -> None:
        """Flush listener: keep a copy of the target's frame."""
        frame = surface.buffer.copy()
        with self._lock:
            self._frames[index] = frame
            self._changed = True

    def present(self) -> None:
        """Draw the latest frames if any changed. Main thread only."""
        if self.screen is None:
            return
        with self._lock:
            if not self._changed:
                return
            frames = dict(self._frames)
            self._changed = False

        self.screen.fill(GAP_COLOR)
        for index in range(self.target_count):
            frame = frames.get(index)
            if frame is None:
                continue
            scaled = pygame.transform.scale(frame, self.tile_size)
            self.screen.blit(scaled, self.tile_origin(index))
        pygame.display.flip()

    def tick(self, fps: int) -> float:
        if self.clock:
            return self.clock.tick(fps) / 1000.0
        return 0.0

    def get_events(self) -> List:
        return pygame.event.get()

    def quit(self) -> None:
        pygame.quit()


class SnapshotWriter:
    """Writes target-<index>.png on every flush."""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, index: int) -> Path:
        return self.directory / f"target-{index}.png"

    def on_flush(self, index: int, surface) -> None:
        try:
            pygame.image.save(surface.buffer, str(self.path_for(index)))
        except (pygame.error, OSError) as e:
            logger.warning(f"Snapshot of target {index} failed: {e}")
