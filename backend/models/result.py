"""Tagged result type for calls to the ranking oracle.

Expected failures (auth gate, quota gate, network trouble) travel as ``Err``
values so callers can branch on ``code`` instead of catching exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    LOGIN_REQUIRED = "LOGIN_REQUIRED"
    UPGRADE_REQUIRED = "UPGRADE_REQUIRED"
    TRANSIENT = "TRANSIENT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_wire(cls, raw: object) -> "ErrorCode":
        try:
            return cls(str(raw))
        except ValueError:
            return cls.UNKNOWN


GATE_CODES = frozenset({ErrorCode.LOGIN_REQUIRED, ErrorCode.UPGRADE_REQUIRED})


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    code: ErrorCode
    message: str | None = None
    status: int | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_gate(self) -> bool:
        return self.code in GATE_CODES


Result = Ok[T] | Err
