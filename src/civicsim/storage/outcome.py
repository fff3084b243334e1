"""Explicit success/failure values for storage call sites."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """Outcome of a storage operation.

    Exactly one of ``value`` (on success) or ``error`` (on failure) is
    meaningful. Callers decide what a failure means at their call site.
    """

    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StorageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "StorageResult[T]":
        return cls(error=error)
