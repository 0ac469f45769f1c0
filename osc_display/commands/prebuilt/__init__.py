"""
Prebuilt commands for the OSC display server.

Importing this package registers every recognized OSC address.
"""

# Import all command modules to trigger registration
from osc_display.commands.prebuilt import control_commands
from osc_display.commands.prebuilt import text_commands
from osc_display.commands.prebuilt import parameter_commands
from osc_display.commands.prebuilt import point_commands

__all__ = [
    "control_commands",
    "text_commands",
    "parameter_commands",
    "point_commands",
]
