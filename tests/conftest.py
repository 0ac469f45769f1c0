from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from osc_display.core.addressing import AddressingPolicy
from osc_display.core.target import DispatcherState, Target
from osc_display.dispatcher import Dispatcher
from osc_display.flush import FlushMode, FlushScheduler


class RecordingSurface:
    """Surface fake that records every drawing call."""

    def __init__(self, width: int = 128, height: int = 64) -> None:
        self.width = width
        self.height = height
        self.calls: list[tuple] = []
        self.flush_count = 0
        self.released = False

    def get_width(self) -> int:
        return self.width

    def get_height(self) -> int:
        return self.height

    def clear(self) -> None:
        self.calls.append(("clear",))

    def draw_pixel(self, x: int, y: int) -> None:
        self.calls.append(("pixel", x, y))

    def draw_line(self, x0: int, y0: int, x1: int, y1: int) -> None:
        self.calls.append(("line", x0, y0, x1, y1))

    def draw_box(self, x: int, y: int, w: int, h: int) -> None:
        self.calls.append(("box", x, y, w, h))

    def draw_ellipse(self, x: int, y: int, rx: int, ry: int) -> None:
        self.calls.append(("ellipse", x, y, rx, ry))

    def draw_text(self, x: int, y: int, text: str) -> None:
        self.calls.append(("text", x, y, text))

    def text_size(self, text: str) -> tuple[int, int]:
        return (6 * len(text), 8)

    def flush(self) -> None:
        self.flush_count += 1

    def release(self) -> None:
        self.released = True

    @property
    def drawing_calls(self) -> list[tuple]:
        return [call for call in self.calls if call[0] != "clear"]

    def pixels(self) -> list[tuple[int, int]]:
        return [(call[1], call[2]) for call in self.calls if call[0] == "pixel"]


def make_state(count: int = 3, policy: AddressingPolicy = AddressingPolicy.SINGLE,
               width: int = 128, height: int = 64) -> DispatcherState:
    targets = [Target(i, RecordingSurface(width, height)) for i in range(count)]
    return DispatcherState(targets, policy)


def make_dispatcher(count: int = 3, policy: AddressingPolicy = AddressingPolicy.SINGLE,
                    width: int = 128, height: int = 64,
                    mode: FlushMode = FlushMode.IMMEDIATE) -> Dispatcher:
    state = make_state(count, policy, width, height)
    return Dispatcher(state, scheduler=FlushScheduler(state, mode))


@pytest.fixture
def dispatcher() -> Dispatcher:
    return make_dispatcher()
