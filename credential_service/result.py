"""
Result and ErrorKind: the return contract of store and hashing operations.

Store and password operations never raise across layers; they hand back a
Result that is either a value or a tagged error kind, and the caller decides
how to respond.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    DUPLICATE_USERNAME = "duplicate_username"
    HASHING_ERROR = "hashing_error"
    COMPARISON_ERROR = "comparison_error"
    STORE_UNAVAILABLE = "store_unavailable"
    REGISTRATION_FAILED = "registration_failed"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an operation.

    Attributes:
        value: Payload on success (may legitimately be None, e.g. a lookup miss)
        error: Error kind on failure
        detail: Internal description of the failure, for logs only
    """
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: Optional[str] = None) -> "Result[T]":
        return cls(error=error, detail=detail)
