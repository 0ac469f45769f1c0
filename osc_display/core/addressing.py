"""
Target addressing for multi-display setups.

The TargetResolver decides which target a data message applies to:

    SINGLE       every message goes to target 0
    PER_MESSAGE  every data message carries a leading target index
    STATEFUL     /target sets a sticky active target used by later messages
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

from osc_display.core.result import ErrorKind, Result

logger = logging.getLogger(__name__)


class AddressingPolicy(Enum):
    """Addressing policies, valued by their /targetMode wire number."""
    SINGLE = 0
    PER_MESSAGE = 1
    STATEFUL = 2


_POLICY_NAMES = {
    "single": AddressingPolicy.SINGLE,
    "per-message": AddressingPolicy.PER_MESSAGE,
    "per_message": AddressingPolicy.PER_MESSAGE,
    "permessage": AddressingPolicy.PER_MESSAGE,
    "stateful": AddressingPolicy.STATEFUL,
}


def is_number(value: Any) -> bool:
    """True for OSC int/float arguments (bools are not numbers on the wire)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_policy(value: Any) -> Optional[AddressingPolicy]:
    """
    Parse an addressing policy from a wire number or a name.

    Returns:
        The policy, or None if the value names no defined policy
    """
    if isinstance(value, AddressingPolicy):
        return value
    if isinstance(value, str):
        return _POLICY_NAMES.get(value.strip().lower())
    if is_number(value):
        if not math.isfinite(value) or int(value) != value:
            return None
        try:
            return AddressingPolicy(int(value))
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class Resolution:
    """Target chosen for a data message and the arguments left for the command."""
    target: int
    args: Tuple[Any, ...]
    consumed_leading_arg: bool = False


class TargetResolver:
    """
    Holds the addressing policy and the active target index.

    Not thread-safe on its own: the Dispatcher calls it with its guard held.
    """

    def __init__(self, target_count: int,
                 policy: AddressingPolicy = AddressingPolicy.SINGLE):
        if target_count < 1:
            raise ValueError("At least one target is required")
        self.target_count = target_count
        self.policy = policy
        self.active_target = 0

    def _check_index(self, value: Any) -> Result[int]:
        index = int(value) if math.isfinite(value) else -1
        if index != value or not 0 <= index < self.target_count:
            return Result.failure(
                ErrorKind.VALUE_OUT_OF_RANGE,
                f"Target index {value} out of range [0, {self.target_count})"
            )
        return Result.success(index)

    def set_policy(self, value: Any) -> Result[AddressingPolicy]:
        """Replace the addressing policy. The active target is kept."""
        policy = parse_policy(value)
        if policy is None:
            return Result.failure(
                ErrorKind.VALUE_OUT_OF_RANGE,
                f"Undefined addressing policy: {value!r}"
            )
        if policy != self.policy:
            logger.info(f"Addressing policy: {self.policy.name} -> {policy.name}")
        self.policy = policy
        return Result.success(policy)

    def set_active_target(self, value: Any) -> Result[int]:
        """Set the sticky active target. Only valid under STATEFUL."""
        if self.policy != AddressingPolicy.STATEFUL:
            return Result.failure(
                ErrorKind.ADDRESSING_MODE_INVALID,
                f"/target requires STATEFUL addressing (current: {self.policy.name})"
            )
        checked = self._check_index(value)
        if not checked.ok:
            return checked
        self.active_target = checked.value
        logger.debug(f"Active target: {self.active_target}")
        return checked

    def resolve_for_message(self, is_control: bool,
                            args: Sequence[Any]) -> Result[Optional[Resolution]]:
        """
        Resolve the target of a message without changing any state.

        Control messages carry their own target semantics and resolve to
        None. Under PER_MESSAGE the leading argument is taken as the target
        index; call adopt() once the message has validated to make it the
        active target.

        Args:
            is_control: Whether the message is /target or /targetMode
            args: Message arguments

        Returns:
            Result holding a Resolution (None for control messages)
        """
        args = tuple(args)
        if is_control:
            return Result.success(None)

        if self.policy == AddressingPolicy.SINGLE:
            return Result.success(Resolution(0, args))

        if self.policy == AddressingPolicy.STATEFUL:
            return Result.success(Resolution(self.active_target, args))

        if not args:
            return Result.failure(
                ErrorKind.ARGUMENT_SHAPE_MISMATCH,
                "Missing leading target index (PER_MESSAGE addressing)"
            )
        leading = args[0]
        if not is_number(leading):
            return Result.failure(
                ErrorKind.ARGUMENT_SHAPE_MISMATCH,
                f"Leading target index must be numeric, got {leading!r}"
            )
        checked = self._check_index(leading)
        if not checked.ok:
            return Result.failure(checked.error, checked.message)
        return Result.success(Resolution(checked.value, args[1:], True))

    def adopt(self, resolution: Resolution) -> None:
        """Commit a PER_MESSAGE resolution as the active target."""
        if resolution.consumed_leading_arg:
            self.active_target = resolution.target
