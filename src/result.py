"""
Result type returned by the API client layer instead of raising.

A ``Result`` is either a success carrying a value or a failure carrying an
error message and an ``ErrorType``. It supports structural pattern matching::

    match result:
        case Result(True, value):
            ...
        case Result(False, error=message, error_type=ErrorType.NOT_FOUND):
            ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class ErrorType(str, Enum):
    """Classification of a failed result."""

    NONE = "none"
    GENERAL = "general"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    EXCEPTION = "exception"
    NETWORK = "network"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation that can fail."""

    is_success: bool
    value: T | None = None
    error: str | None = None
    error_type: ErrorType = ErrorType.NONE
    exception: BaseException | None = None

    def __post_init__(self) -> None:
        if self.is_success:
            if self.error is not None or self.error_type is not ErrorType.NONE:
                raise ValueError("A successful result cannot carry an error")
            if self.exception is not None:
                raise ValueError("A successful result cannot carry an exception")
        else:
            if not self.error:
                raise ValueError("A failed result needs an error message")
            if self.error_type is ErrorType.NONE:
                raise ValueError("A failed result needs an error type")
            if self.value is not None:
                raise ValueError("A failed result cannot carry a value")

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(is_success=True, value=value)

    @classmethod
    def failure(
        cls,
        error: str,
        error_type: ErrorType = ErrorType.GENERAL,
        exception: BaseException | None = None,
    ) -> Result[T]:
        return cls(
            is_success=False,
            error=error,
            error_type=error_type,
            exception=exception,
        )

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        error_type: ErrorType = ErrorType.EXCEPTION,
    ) -> Result[T]:
        """Wrap an exception, using its message (or its type name) as the error."""
        return cls.failure(str(exc) or type(exc).__name__, error_type, exc)

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    def has_error_type(self, error_type: ErrorType) -> bool:
        return self.is_failure and self.error_type is error_type

    def value_or(self, default: T) -> T:
        return self.value if self.is_success else default  # type: ignore[return-value]

    def _propagate(self) -> Result[Any]:
        return Result.failure(self.error or "Unknown error", self.error_type, self.exception)

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Transform the value of a success; failures pass through."""
        if self.is_failure:
            return self._propagate()
        try:
            return Result.success(fn(self.value))  # type: ignore[arg-type]
        except Exception as exc:
            return Result.from_exception(exc)

    def bind(self, fn: Callable[[T], Result[U]]) -> Result[U]:
        """Chain an operation that itself returns a Result."""
        if self.is_failure:
            return self._propagate()
        try:
            return fn(self.value)  # type: ignore[arg-type]
        except Exception as exc:
            return Result.from_exception(exc)

    def match(self, on_success: Callable[[T], R], on_failure: Callable[[str], R]) -> R:
        if self.is_success:
            return on_success(self.value)  # type: ignore[arg-type]
        return on_failure(self.error or "Unknown error")

    def tap(self, action: Callable[[T], Any]) -> Result[T]:
        """Run a side effect on success and return the result unchanged."""
        if self.is_success:
            action(self.value)  # type: ignore[arg-type]
        return self

    def on_failure(self, action: Callable[[str], Any]) -> Result[T]:
        if self.is_failure:
            action(self.error or "Unknown error")
        return self

    def ensure(
        self,
        predicate: Callable[[T], bool],
        error: str = "Predicate not satisfied",
        error_type: ErrorType = ErrorType.VALIDATION,
    ) -> Result[T]:
        """Turn a success into a failure when the predicate does not hold."""
        if self.is_failure or predicate(self.value):  # type: ignore[arg-type]
            return self
        return Result.failure(error, error_type)

    def recover(
        self,
        fn: Callable[[str], T],
        error_type: ErrorType | None = None,
    ) -> Result[T]:
        """Replace a failure (optionally only of one type) with a success."""
        if self.is_success:
            return self
        if error_type is not None and self.error_type is not error_type:
            return self
        return Result.success(fn(self.error or "Unknown error"))

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.success({self.value!r})"
        return f"Result.failure({self.error!r}, {self.error_type.value})"


def combine(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Collect successful values, or join every error message on failure."""
    results = list(results)
    failures = [r for r in results if r.is_failure]
    if failures:
        return Result.failure(
            "; ".join(f.error or "Unknown error" for f in failures),
            failures[0].error_type,
        )
    return Result.success([r.value for r in results])  # type: ignore[misc]


def try_call(fn: Callable[[], T]) -> Result[T]:
    try:
        return Result.success(fn())
    except Exception as exc:
        return Result.from_exception(exc)


async def try_call_async(fn: Callable[[], Awaitable[T]]) -> Result[T]:
    try:
        return Result.success(await fn())
    except Exception as exc:
        return Result.from_exception(exc)
