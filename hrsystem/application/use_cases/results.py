"""
Operation results returned by the use cases.

Business-rule violations are reported through these values rather than
raised, so callers can show the reason and retry with corrected input.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class Outcome(Enum):
    """Outcome of a workflow operation."""
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_STATE = "invalid_state"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Detailed result of an operation."""
    outcome: Outcome
    value: Optional[T] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> "OperationResult[T]":
        return cls(Outcome.OK, value, message)

    @classmethod
    def failure(cls, outcome: Outcome, message: str) -> "OperationResult[T]":
        if outcome is Outcome.OK:
            raise ValueError("failure() needs a non-OK outcome")
        return cls(outcome, None, message)
