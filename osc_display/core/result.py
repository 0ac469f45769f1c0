"""
Dispatch outcome types for the OSC display server.

Expected failures (bad address, bad arguments, wrong addressing mode,
out-of-range values) are returned as values, never raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Failure taxonomy for a rejected message."""
    NO_PATTERN_MATCHED = "no-pattern-matched"
    ARGUMENT_SHAPE_MISMATCH = "argument-shape-mismatch"
    ADDRESSING_MODE_INVALID = "addressing-mode-invalid"
    VALUE_OUT_OF_RANGE = "value-out-of-range"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an (ErrorKind, message) pair."""
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "Result[T]":
        return cls(error=error, message=message)


@dataclass(frozen=True)
class DispatchResult:
    """
    Outcome of processing one message.

    Attributes:
        address: Address pattern of the message
        error: None on success, otherwise the failure kind
        message: Human readable description of the failure
        target: Index of the target the message was applied to (None for
            control messages and for failures before resolution)
        mutated: True when the target surface changed and needs a flush
    """
    address: str
    error: Optional[ErrorKind] = None
    message: str = ""
    target: Optional[int] = None
    mutated: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def code(self) -> int:
        """Integer status reported to the transport: 0 success, 1 failure."""
        return 0 if self.ok else 1

    @classmethod
    def success(cls, address: str, target: Optional[int] = None,
                mutated: bool = False) -> "DispatchResult":
        return cls(address=address, target=target, mutated=mutated)

    @classmethod
    def failure(cls, address: str, error: ErrorKind, message: str,
                target: Optional[int] = None) -> "DispatchResult":
        return cls(address=address, error=error, message=message, target=target)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a response-style dictionary (for logging)."""
        if self.ok:
            data = {"status": "success", "address": self.address,
                    "mutated": self.mutated}
            if self.target is not None:
                data["target"] = self.target
            return data
        data = {
            "status": "error",
            "address": self.address,
            "error": self.error.value,
            "message": self.message,
        }
        if self.target is not None:
            data["target"] = self.target
        return data
