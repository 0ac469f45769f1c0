"""
Command system for the OSC display server.

Commands are registered using the @register_command decorator and
auto-discovered from the prebuilt/ submodule on import.
"""

from osc_display.commands.base import (
    AnyShape,
    ArgShape,
    Command,
    CommandRegistry,
    NUMBER,
    STRING,
    register_command,
    get_registry,
)

# Auto-import prebuilt commands to register them
from osc_display.commands import prebuilt

__all__ = [
    "AnyShape",
    "ArgShape",
    "Command",
    "CommandRegistry",
    "NUMBER",
    "STRING",
    "register_command",
    "get_registry",
]
