"""
Explicit success-or-failure values returned by the parse and emit stages.

A `Result` holds either a value or a `KaleidoscopeError`, which keeps a
failed parse distinguishable from a legitimately absent value (such as the
missing body of an `extern`).
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .lexer.errors import KaleidoscopeError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one parse or emission step."""
    value: Optional[T] = None
    error: Optional[KaleidoscopeError] = None

    @classmethod
    def success(cls, value: T) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: KaleidoscopeError) -> 'Result[T]':
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
