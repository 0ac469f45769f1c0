#!/usr/bin/env python3
"""
OSC Display Server - routes OSC messages to one or more small displays.

This server provides:
1. An OSC/UDP listener (python-osc, one thread per datagram)
2. Three addressing policies for multi-display setups
3. Text, parameter, waveform and fading point-trail commands
4. Immediate or polled flushing, optional TCA9548A multiplexer
5. YAML configuration and a pygame preview window
"""

import sys
import time
import signal
import argparse
import functools
import threading
from typing import Optional

import pygame
from pythonosc import dispatcher as osc_dispatcher
from pythonosc import osc_server

from osc_display.commands import get_registry
from osc_display.config import (
    BACKENDS, DEFAULT_PORT, ServerConfig, TargetConfig, load_config,
)
from osc_display.core.addressing import parse_policy
from osc_display.core.target import DispatcherState, Target
from osc_display.dispatcher import Dispatcher
from osc_display.flush import FlushMode, FlushScheduler
from osc_display.rendering.mux import NullChannelSelector, TCA9548A
from osc_display.rendering.preview import PreviewWindow, SnapshotWriter
from osc_display.rendering.surface import PygameSurface
from osc_display.utils.logging import setup_logging, get_logger
from osc_display.utils.profiler import DispatchProfiler


class OscDisplayServer:
    """
    OSC display server.

    Architecture:
        Server (single instance)
        ├── ThreadingOSCUDPServer -> Dispatcher.handle_message
        ├── DispatcherState
        │   ├── TargetResolver
        │   └── Targets (surface + point buffer + mux channel)
        ├── FlushScheduler
        └── PreviewWindow / SnapshotWriter (flush listeners)
    """

    def __init__(self, config: ServerConfig, verbose: bool = False):
        """
        Initialize the display server.

        Args:
            config: Validated server configuration
            verbose: Enable verbose logging
        """
        self.config = config
        self.verbose = verbose

        self.state: Optional[DispatcherState] = None
        self.scheduler: Optional[FlushScheduler] = None
        self.dispatcher: Optional[Dispatcher] = None
        self.selector = NullChannelSelector()
        self.preview: Optional[PreviewWindow] = None

        self.osc_server: Optional[osc_server.ThreadingOSCUDPServer] = None
        self.osc_thread: Optional[threading.Thread] = None

        self._running = threading.Event()
        self._running.set()
        self._shutdown_done = False

        self._profiler: Optional[DispatchProfiler] = None
        self.logger = get_logger(__name__)

    @property
    def running(self) -> bool:
        """Check if server is running (thread-safe)."""
        return self._running.is_set()

    def stop(self):
        self._running.clear()

    def install_signal_handlers(self):
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals. Second signal forces immediate exit."""
        signal_names = {signal.SIGTERM: "SIGTERM", signal.SIGINT: "SIGINT (Ctrl+C)"}
        signal_name = signal_names.get(signum, f"signal {signum}")

        if not self._running.is_set():
            self.logger.info(f"Force exit: Received {signal_name} during shutdown")
            import os
            os._exit(1)

        self.logger.info(f"Shutdown initiated: Received {signal_name}")
        self._running.clear()

    def enable_profiling(self, interval: float = 5.0):
        """Enable dispatch/flush profiling with periodic log output."""
        self._profiler = DispatchProfiler(interval=interval)
        self.logger.info(f"Profiling enabled (report every {interval}s)")

    def init_targets(self) -> bool:
        """
        Create surfaces, targets, the dispatcher and flush scheduler.

        Returns:
            True if successful
        """
        display = self.config.display

        if self.config.mux is not None:
            try:
                self.selector = TCA9548A(self.config.mux.bus, self.config.mux.address)
            except RuntimeError as e:
                self.logger.error(str(e))
                return False

        if display.backend == "pygame":
            self.preview = PreviewWindow(len(self.config.targets), display.width,
                                         display.height, display.preview_scale)
            try:
                self.preview.init()
            except pygame.error as e:
                self.logger.error(f"Failed to open preview window: {e}")
                return False

        snapshots = SnapshotWriter(display.snapshot_dir) if display.snapshot_dir else None

        targets = []
        for index, target_config in enumerate(self.config.targets):
            surface = PygameSurface(display.width, display.height, display.font_size)
            if self.preview:
                surface.add_flush_listener(functools.partial(self.preview.on_flush, index))
            if snapshots:
                surface.add_flush_listener(functools.partial(snapshots.on_flush, index))
            target = Target(index, surface, target_config.channel, self.selector)
            targets.append(target)
            self.logger.info(f"Initialized {target}")

        self.state = DispatcherState(targets, self.config.addressing)
        self.scheduler = FlushScheduler(self.state, display.flush, self._profiler)
        self.dispatcher = Dispatcher(self.state, get_registry(), self.scheduler,
                                     self._profiler)
        self.logger.info(f"{len(targets)} target(s), addressing={self.config.addressing.name}, "
                         f"flush={display.flush.value}")

        self._draw_splash()
        return True

    def _draw_splash(self):
        splash = self.config.display.splash
        with self.state.lock:
            for target in self.state.targets:
                surface = target.surface
                surface.clear()
                surface.draw_text(0, 0, splash)
                surface.draw_text(0, surface.text_size(splash)[1],
                                  f"target {target.index}")
        self.scheduler.flush_all()

    def _on_message(self, client_address, address: str, *args) -> None:
        # Returning a value would make python-osc send a reply datagram
        source = f"{client_address[0]}:{client_address[1]}"
        self.dispatcher.handle_message(source, address, *args)

    def start_osc_server(self) -> bool:
        """Start the OSC listener in a separate thread."""
        disp = osc_dispatcher.Dispatcher()
        disp.set_default_handler(self._on_message, needs_reply_address=True)
        try:
            self.osc_server = osc_server.ThreadingOSCUDPServer(
                (self.config.host, self.config.port), disp)
        except OSError as e:
            self.logger.error(f"Failed to bind {self.config.host}:{self.config.port}: {e}")
            return False
        self.osc_thread = threading.Thread(target=self.osc_server.serve_forever,
                                           name="osc-server", daemon=True)
        self.osc_thread.start()
        self.logger.info(f"OSC server listening on {self.config.host}:{self.config.port}")
        return True

    def _handle_preview_events(self):
        for event in self.preview.get_events():
            if event.type == pygame.QUIT:
                self.stop()
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.stop()

    def run(self):
        """Main loop: polled flushes, preview updates, profiling reports."""
        self.logger.info("Starting main loop...")
        period = 1.0 / self.config.display.update_rate
        polled = self.scheduler.mode == FlushMode.POLLED
        try:
            while self.running:
                if polled:
                    self.scheduler.poll()
                if self.preview:
                    self._handle_preview_events()
                    self.preview.present()
                    self.preview.tick(self.config.display.update_rate)
                else:
                    time.sleep(period)
                if self._profiler:
                    self._profiler.maybe_report()
        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.shutdown()

    def shutdown(self):
        """Stop the listener, drain in-flight messages, release targets."""
        if self._shutdown_done:
            return
        self._shutdown_done = True
        self.logger.info("Shutting down...")
        self._running.clear()

        if self.osc_server:
            self.osc_server.shutdown()
            self.osc_server.server_close()

        if self.dispatcher:
            self.dispatcher.drain()
            if self.scheduler.mode == FlushMode.POLLED:
                self.scheduler.poll()

        if self.state:
            self.state.release()

        self.selector.close()

        if self.preview:
            try:
                self.preview.quit()
            except pygame.error as e:
                self.logger.warning(f"Preview shutdown error: {e}")

        self.logger.info("Shutdown complete")


def apply_overrides(config: ServerConfig, args: argparse.Namespace) -> ServerConfig:
    """Apply command-line overrides to a loaded config and re-validate."""
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.backend:
        config.display.backend = args.backend
    if args.flush:
        config.display.flush = FlushMode(args.flush)
    if args.addressing:
        policy = parse_policy(args.addressing)
        if policy is None:
            raise ValueError(f"Unknown addressing policy: {args.addressing}")
        config.addressing = policy
    if args.targets is not None:
        if config.mux is None:
            config.targets = [TargetConfig() for _ in range(args.targets)]
        else:
            config.targets = [TargetConfig(channel=i) for i in range(args.targets)]
    return config.validate()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="OSC Display Server - route OSC messages to small displays"
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to server configuration YAML"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (logs every message)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        help=f"UDP port (default: {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--host",
        help="Listen address (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--backend", "-b",
        choices=list(BACKENDS),
        help="Surface backend: headless or pygame preview window"
    )
    parser.add_argument(
        "--flush",
        choices=[m.value for m in FlushMode],
        help="Flush discipline (default: immediate)"
    )
    parser.add_argument(
        "--addressing", "-a",
        choices=["single", "per-message", "stateful"],
        help="Initial addressing policy (default: single)"
    )
    parser.add_argument(
        "--targets", "-n",
        type=int,
        help="Number of targets (overrides the config's target list)"
    )
    parser.add_argument(
        "--profile",
        nargs="?",
        const=5.0,
        type=float,
        metavar="INTERVAL",
        help="Enable dispatch profiling (optional: report interval in seconds, default 5)"
    )
    return parser


def main():
    """Entry point for the display server."""
    args = build_parser().parse_args()

    setup_logging(verbose=args.verbose)
    logger = get_logger(__name__)

    try:
        config = apply_overrides(load_config(args.config), args)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    server = OscDisplayServer(config, verbose=args.verbose)
    server.install_signal_handlers()
    if args.profile is not None:
        server.enable_profiling(interval=args.profile)

    if not server.init_targets():
        server.shutdown()
        sys.exit(1)

    if not server.start_osc_server():
        server.shutdown()
        sys.exit(1)

    server.run()


if __name__ == "__main__":
    main()
