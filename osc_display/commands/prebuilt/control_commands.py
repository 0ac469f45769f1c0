"""
Addressing control commands.

These operate on the TargetResolver instead of a target and never dirty a
surface. Each returns a Result so failures keep their error kind.
"""

from osc_display.commands.base import ArgShape, AnyShape, NUMBER, STRING, register_command


@register_command("/targetMode", AnyShape(ArgShape(NUMBER), ArgShape(STRING)),
                  draws=False, control=True)
def target_mode(resolver, value):
    """Switch addressing policy: 0/single, 1/per-message, 2/stateful."""
    return resolver.set_policy(value)


@register_command("/target", ArgShape(NUMBER), draws=False, control=True)
def target(resolver, index):
    """Set the active target (STATEFUL addressing only)."""
    return resolver.set_active_target(index)
