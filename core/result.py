"""
Result pattern for explicit error handling.

Provider calls return either a Success or a Failure instead of raising,
so every step of the shipping pipeline decides explicitly what a failed
outbound call means for the webhook response.

Example:
    >>> def parse_amount(raw: str) -> Result[Decimal, str]:
    ...     try:
    ...         return Success(Decimal(raw))
    ...     except InvalidOperation:
    ...         return Failure(f"invalid amount: {raw}")
    ...
    >>> parse_amount("12.50").unwrap()
    Decimal('12.50')
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Never

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True, slots=True)
class Success[T]:
    """
    A successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def is_success(self) -> bool:
        """Return True."""
        return True

    def is_failure(self) -> bool:
        """Return False."""
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, _default: T) -> T:
        """Return the contained value, ignoring the default."""
        return self.value

    def map[U](self, func: Callable[[T], U]) -> Success[U]:
        """
        Apply a function to the success value.

        Args:
            func: Function to apply to the value.

        Returns:
            New Success wrapping the mapped value.
        """
        return Success(func(self.value))


@dataclass(frozen=True, slots=True)
class Failure[E]:
    """
    A failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def is_success(self) -> bool:
        """Return False."""
        return False

    def is_failure(self) -> bool:
        """Return True."""
        return True

    def unwrap(self) -> Never:
        """
        Raise, since a Failure carries no value.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"Cannot unwrap Failure: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        """Return the provided default."""
        return default

    def map[T, U](self, _func: Callable[[T], U]) -> Failure[E]:
        """Return self unchanged; there is no value to map."""
        return self


type Result[T, E] = Success[T] | Failure[E]


def success[T](value: T) -> Success[T]:
    """Create a Success result."""
    return Success(value)


def failure[E](error: E) -> Failure[E]:
    """Create a Failure result."""
    return Failure(error)
