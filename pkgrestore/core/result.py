"""Result type for fallible operations.

Operations that can fail in an expected way (a missing list file, an
installer exiting non-zero, an unsupported host) return ``Ok`` or ``Err``
instead of raising, so callers decide at the edge what is fatal.

Usage:
    match detect():
        case Ok(platform):
            console.info(f"platform: {platform}")
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeGuard, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying a value.

    Attributes:
        value: What the operation produced.
    """

    value: T

    def is_ok(self) -> bool:
        """Always True for Ok."""
        return True

    def is_err(self) -> bool:
        """Always False for Ok."""
        return False

    def unwrap(self) -> T:
        """Hand out the contained value.

        Returns:
            The success value.
        """
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Hand out the contained value; ``default`` is not used.

        Args:
            default: Fallback that only an Err would return.

        Returns:
            The success value.
        """
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply ``f`` to the contained value.

        Args:
            f: Transformation of the success value.

        Returns:
            Ok wrapping the transformed value.
        """
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result carrying an error value.

    Attributes:
        error: Why the operation failed, usually a frozen error dataclass.
    """

    error: E

    def is_ok(self) -> bool:
        """Always False for Err."""
        return False

    def is_err(self) -> bool:
        """Always True for Err."""
        return True

    def unwrap(self) -> None:
        """Raise, since an Err has no value to hand out.

        Raises:
            ValueError: Always, with the error in the message.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return the fallback in place of the missing value.

        Args:
            default: Value to use instead.

        Returns:
            ``default``.
        """
        return default

    def map(self, f: Callable[[T], U]) -> Err[E]:
        """Return self unchanged; there is no value to transform.

        Args:
            f: Not called.

        Returns:
            This Err.
        """
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


def is_ok(result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Narrow a Result to Ok for type checkers.

    Args:
        result: The Result to check.

    Returns:
        True if ``result`` is an Ok.
    """
    return isinstance(result, Ok)


def is_err(result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Narrow a Result to Err for type checkers.

    Args:
        result: The Result to check.

    Returns:
        True if ``result`` is an Err.
    """
    return isinstance(result, Err)
