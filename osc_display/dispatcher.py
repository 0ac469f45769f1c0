"""
Message dispatcher for the OSC display server.

Each incoming message runs through:

    Lookup      an address with no registered command is rejected first
    Resolving   control messages go straight to the TargetResolver; data
                messages have their target resolved (PER_MESSAGE may
                consume a leading index argument)
    Validating  argument shape check
    Executing   the action runs against the resolved target
    Result      success marks the target dirty; failures are classified

Validation never touches target state. The whole sequence runs under the
single DispatcherState lock, so at most one mutation is in flight across
all targets.
"""

import logging
import time
from typing import Any, Optional, Sequence

from osc_display.commands.base import CommandRegistry, get_registry
from osc_display.core.result import DispatchResult, ErrorKind
from osc_display.core.target import DispatcherState
from osc_display.flush import FlushScheduler

logger = logging.getLogger(__name__)

UNMATCHED = "(unmatched)"  # profiler key for addresses with no command


class Dispatcher:
    """Routes OSC messages to targets and applies registered commands."""

    def __init__(self, state: DispatcherState,
                 registry: Optional[CommandRegistry] = None,
                 scheduler: Optional[FlushScheduler] = None,
                 profiler=None):
        self.state = state
        self.registry = registry if registry is not None else get_registry()
        self.scheduler = scheduler if scheduler is not None else FlushScheduler(state)
        self._profiler = profiler

    def dispatch(self, address: str, args: Sequence[Any] = ()) -> DispatchResult:
        """
        Process one message.

        Args:
            address: OSC address pattern
            args: Typed OSC arguments (int, float, str)

        Returns:
            DispatchResult describing the outcome
        """
        args = tuple(args)
        with self.state.lock:
            if self.registry.is_control(address):
                return self._dispatch_control(address, args)
            return self._dispatch_data(address, args)

    def _dispatch_control(self, address: str, args: tuple) -> DispatchResult:
        command = self.registry.lookup(address)
        mismatch = command.shape.check(args)
        if mismatch is not None:
            return DispatchResult.failure(
                address, ErrorKind.ARGUMENT_SHAPE_MISMATCH, f"{address}: {mismatch}")

        outcome = command.action(self.state.resolver, *args)
        if not outcome.ok:
            return DispatchResult.failure(address, outcome.error, outcome.message)
        return DispatchResult.success(address)

    def _dispatch_data(self, address: str, args: tuple) -> DispatchResult:
        resolver = self.state.resolver

        # An unknown address fails the same way under every policy
        command = self.registry.lookup(address)
        if command is None or command.control:
            return DispatchResult.failure(
                address, ErrorKind.NO_PATTERN_MATCHED, f"Unhandled message to: {address}")

        # Resolving
        resolved = resolver.resolve_for_message(False, args)
        if not resolved.ok:
            return DispatchResult.failure(address, resolved.error,
                                          f"{address}: {resolved.message}")
        resolution = resolved.value

        # Validating
        mismatch = command.shape.check(resolution.args)
        if mismatch is not None:
            return DispatchResult.failure(
                address, ErrorKind.ARGUMENT_SHAPE_MISMATCH,
                f"{address}: {mismatch}", target=resolution.target)

        # Executing
        resolver.adopt(resolution)
        target = self.state.targets[resolution.target]
        if command.draws:
            target.surface.clear()
        command.action(target, *resolution.args)

        if command.draws:
            self.scheduler.mark_dirty(target.index)
            self.scheduler.after_dispatch(target.index)
        return DispatchResult.success(address, target=target.index,
                                      mutated=command.draws)

    def handle_message(self, source: Any, address: str, *args) -> int:
        """
        Transport entry point: dispatch, log and return a status code.

        Never raises, so a bad message cannot take down a transport thread.

        Returns:
            0 on success, 1 on failure
        """
        p = self._profiler
        t0 = time.perf_counter()
        try:
            result = self.dispatch(address, args)
        except Exception:
            logger.exception(f"Error handling {address} from {source}")
            return 1
        if p:
            # Unknown addresses share one bucket so senders cannot grow the table
            key = address if result.error != ErrorKind.NO_PATTERN_MATCHED else UNMATCHED
            p.record_command(key, time.perf_counter() - t0)

        if result.ok:
            logger.debug(f"{address} {list(args)} from {source}: {result.to_dict()}")
        else:
            logger.warning(f"Rejected {address} {list(args)} from {source} "
                           f"[{result.error.value}]: {result.message}")
        return result.code

    def drain(self) -> None:
        """Wait for any in-flight message to finish."""
        with self.state.lock:
            pass
