"""
Command registry and decorator for the OSC display server.

Commands are registered with the @register_command decorator. Each one
pairs an OSC address with an argument shape and an action. Lookup tries
exact addresses first and prefix families (e.g. /points/...) after that.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import logging

from osc_display.core.addressing import is_number

logger = logging.getLogger(__name__)

NUMBER = "f"
STRING = "s"

_KIND_NAMES = {NUMBER: "number", STRING: "string"}


def _type_name(value: Any) -> str:
    return type(value).__name__


def _matches(kind: str, value: Any) -> bool:
    if kind == NUMBER:
        return is_number(value)
    return isinstance(value, str)


class ArgShape:
    """
    Argument shape: fixed leading kinds plus an optional repeated group.

    ArgShape(NUMBER, NUMBER, NUMBER)             exactly three numbers
    ArgShape(repeat=(STRING,), min_repeats=1)    one or more strings
    ArgShape(repeat=(NUMBER, NUMBER), min_repeats=1)
                                                 one or more number pairs

    check() only inspects the arguments; it never consumes or converts them.
    """

    def __init__(self, *fixed: str, repeat: Tuple[str, ...] = (),
                 min_repeats: int = 0):
        self.fixed = tuple(fixed)
        self.repeat = tuple(repeat)
        self.min_repeats = min_repeats

    def describe(self) -> str:
        parts = list(self.fixed)
        if self.repeat:
            group = " ".join(self.repeat)
            if len(self.repeat) > 1:
                group = f"({group})"
            parts.append(group + ("+" if self.min_repeats > 0 else "*"))
        return " ".join(parts) if parts else "(no arguments)"

    def check(self, args: Sequence[Any]) -> Optional[str]:
        """
        Validate arguments against this shape.

        Returns:
            None if the arguments fit, otherwise a mismatch description
        """
        n_fixed = len(self.fixed)
        if len(args) < n_fixed or (not self.repeat and len(args) != n_fixed):
            return f"expected [{self.describe()}], got {len(args)} argument(s)"

        for i, kind in enumerate(self.fixed):
            if not _matches(kind, args[i]):
                return (f"argument {i}: expected {_KIND_NAMES[kind]}, "
                        f"got {_type_name(args[i])}")

        if not self.repeat:
            return None

        rest = args[n_fixed:]
        group = len(self.repeat)
        if len(rest) % group != 0 or len(rest) // group < self.min_repeats:
            return f"expected [{self.describe()}], got {len(args)} argument(s)"
        for offset, value in enumerate(rest):
            kind = self.repeat[offset % group]
            if not _matches(kind, value):
                return (f"argument {n_fixed + offset}: expected "
                        f"{_KIND_NAMES[kind]}, got {_type_name(value)}")
        return None


class AnyShape:
    """Accepts arguments matching any one of several shapes."""

    def __init__(self, *shapes: ArgShape):
        self.shapes = shapes

    def describe(self) -> str:
        return " | ".join(shape.describe() for shape in self.shapes)

    def check(self, args: Sequence[Any]) -> Optional[str]:
        for shape in self.shapes:
            if shape.check(args) is None:
                return None
        return f"expected [{self.describe()}], got {len(args)} argument(s)"


@dataclass(frozen=True)
class Command:
    """
    A registered command.

    Attributes:
        address: Full OSC address pattern
        shape: Argument shape validator
        action: Handler. Drawing commands are called as action(target, *args);
            control commands as action(resolver, *args) and return a Result.
        draws: Whether a successful run changes the target surface
        control: Whether this is an addressing control message
    """
    address: str
    shape: Any
    action: Callable
    draws: bool = True
    control: bool = False
    description: str = field(default="", compare=False)


class CommandRegistry:
    """
    Registry for command handlers.

    Exact addresses are stored in declaration order. A prefix family holds
    commands keyed by the remainder of the address after "<prefix>/".
    """

    def __init__(self):
        self._commands: Dict[str, Command] = {}
        self._families: Dict[str, Dict[str, Command]] = {}

    def register(self, command: Command, family: Optional[str] = None) -> None:
        """
        Register a command.

        Args:
            command: Command to add
            family: Prefix family (e.g. "/points"); the command's address
                must then be "<family>/<name>"

        Raises:
            ValueError: If the address is already registered
        """
        if family is None:
            if command.address in self._commands:
                raise ValueError(f"Command '{command.address}' is already registered")
            self._commands[command.address] = command
        else:
            name = command.address[len(family) + 1:]
            members = self._families.setdefault(family, {})
            if name in members:
                raise ValueError(f"Command '{command.address}' is already registered")
            members[name] = command
        logger.debug(f"Registered command: {command.address} [{command.shape.describe()}]")

    def lookup(self, address: str) -> Optional[Command]:
        """Find the command for an address, or None if no pattern matches."""
        command = self._commands.get(address)
        if command is not None:
            return command
        for prefix, members in self._families.items():
            if address.startswith(prefix + "/"):
                command = members.get(address[len(prefix) + 1:])
                if command is not None:
                    return command
        return None

    def is_control(self, address: str) -> bool:
        command = self._commands.get(address)
        return command is not None and command.control

    def list_commands(self) -> List[str]:
        """List all registered addresses in declaration order."""
        addresses = list(self._commands.keys())
        for prefix, members in self._families.items():
            addresses.extend(f"{prefix}/{name}" for name in members)
        return addresses


# Global registry instance (immutable after import)
_registry = CommandRegistry()


def get_registry() -> CommandRegistry:
    """Get the global command registry."""
    return _registry


def register_command(address: str, shape=None, *, family: Optional[str] = None,
                     draws: bool = True, control: bool = False,
                     registry: Optional[CommandRegistry] = None) -> Callable:
    """
    Decorator to register a command handler.

    Usage:
        @register_command("/number", ArgShape(NUMBER))
        def number(target, value):
            '''Draw a single number.'''
            ...

        @register_command("clear", ArgShape(), family="/points", draws=False)
        def points_clear(target):
            ...

    The decorator only registers the function and returns it unchanged.
    """
    def decorator(fn: Callable) -> Callable:
        full_address = f"{family}/{address}" if family else address
        command = Command(
            address=full_address,
            shape=shape if shape is not None else ArgShape(),
            action=fn,
            draws=draws,
            control=control,
            description=(fn.__doc__ or "").strip().split("\n")[0],
        )
        (registry or _registry).register(command, family=family)
        return fn

    return decorator
