from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    NO_ACTIVE_CHECKIN = "NO_ACTIVE_CHECKIN"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    STATS_NOT_FOUND = "STATS_NOT_FOUND"
    FREEZE_ALREADY_USED = "FREEZE_ALREADY_USED"
    NO_ACTIVE_STREAK = "NO_ACTIVE_STREAK"
    DATASTORE_ERROR = "DATASTORE_ERROR"


@dataclass
class Result(Generic[T]):
    """
    Outcome of a service call.

    Expected conditions (already checked in, freeze used, ...) and datastore
    failures both come back as a failed Result rather than an exception, so
    each caller decides whether to degrade to a default or report the error.
    """
    success: bool
    message: str
    data: Optional[T] = None
    error: Optional[ErrorCode] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str = "OK") -> "Result[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> "Result[T]":
        return cls(success=False, message=message, error=error)

    def unwrap_or(self, default: T) -> T:
        return self.data if self.success else default
