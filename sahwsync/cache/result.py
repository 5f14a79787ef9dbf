"""Result type used by the cache manager's internal store API."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .exceptions import CacheError

T = TypeVar("T")


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """Outcome of a store operation: either a value or a :class:`CacheError`."""

    value: Optional[T] = None
    error: Optional[CacheError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "CacheResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CacheError) -> "CacheResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` on failure or when the value is None."""
        if self.error is not None or self.value is None:
            return default
        return self.value
