#!/usr/bin/env python3
"""
OSC client for the OSC display server.

Thin wrapper over python-osc's SimpleUDPClient with one method per
display command. The protocol is fire-and-forget: nothing is returned.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple, Union

from pythonosc import udp_client

from osc_display.config import DEFAULT_PORT

logger = logging.getLogger(__name__)

Number = Union[int, float]


class OscDisplayClient:
    """
    UDP client for the OSC display server.

    Usage:
        client = OscDisplayClient("192.168.0.100")
        client.display_text("hello", "world")
        client.parameters(0.2, 0.5, 0.9)

        # Per-message addressing: every data message carries its target
        client = OscDisplayClient("192.168.0.100", target=1)
        client.set_target_mode("per-message")
        client.waveform([0.0, 0.5, 1.0])
    """

    def __init__(self, host: str, port: int = DEFAULT_PORT,
                 target: Optional[int] = None):
        """
        Initialize display client.

        Args:
            host: Display server IP address
            port: Display server UDP port (default: 7562)
            target: If set, prepend this target index to every data message
                (for per-message addressing)
        """
        self.host = host
        self.port = port
        self.target = target
        self._client = udp_client.SimpleUDPClient(host, port)

    def send(self, address: str, *args) -> None:
        """Send a raw message (no target prefix)."""
        logger.debug(f"-> {self.host}:{self.port} {address} {list(args)}")
        self._client.send_message(address, list(args))

    def _send_data(self, address: str, *args) -> None:
        if self.target is not None:
            args = (int(self.target),) + args
        self.send(address, *args)

    # --- Addressing ---

    def set_target_mode(self, mode: Union[int, str]) -> None:
        """Set addressing policy: 0/"single", 1/"per-message", 2/"stateful"."""
        self.send("/targetMode", mode)

    def set_target(self, index: int) -> None:
        """Set the server's active target (stateful addressing)."""
        self.send("/target", int(index))

    # --- Text ---

    def osc_test(self, value: Number) -> None:
        self._send_data("/osc-test", float(value))

    def number(self, value: Number) -> None:
        self._send_data("/number", value)

    def display_text(self, *lines: str) -> None:
        self._send_data("/display-text", *[str(line) for line in lines])

    def display_strings_and_numbers(self, pairs: Iterable[Tuple[str, Number]]) -> None:
        args = []
        for label, value in pairs:
            args.extend([str(label), value])
        self._send_data("/display-strings-and-numbers", *args)

    def status(self, text: str, value: Optional[Number] = None) -> None:
        """Status line (/tr), optionally prefixed by a number."""
        if value is None:
            self._send_data("/tr", str(text))
        else:
            self._send_data("/tr", value, str(text))

    # --- Parameters ---

    def parameters(self, p1: float, p2: float, p3: float) -> None:
        self._send_data("/parameters", float(p1), float(p2), float(p3))

    def param1(self, value: float) -> None:
        self._send_data("/param1", float(value))

    def lfos(self, values: Sequence[float]) -> None:
        self._send_data("/lfos", *[float(v) for v in values])

    def waveform(self, values: Sequence[float]) -> None:
        self._send_data("/waveform", *[float(v) for v in values])

    # --- Points ---

    def points_clear(self) -> None:
        self._send_data("/points/clear")

    def points_persistence(self, ticks: int) -> None:
        self._send_data("/points/persistence", int(ticks))

    def points_size(self, size: int) -> None:
        self._send_data("/points/size", int(size))

    def points_tick(self) -> None:
        self._send_data("/points/tick")

    def points(self, points: Iterable[Tuple[Number, Number]],
               normalized: bool = True) -> None:
        """Send points as (x, y) pairs, unit interval or pixels."""
        args = []
        for x, y in points:
            args.extend([float(x), float(y)])
        address = "/points/values-rel" if normalized else "/points/values-px"
        self._send_data(address, *args)
