"""Helpers for explicitly unwrapping optional values."""

from typing import Optional, Type, TypeVar

from blocksort.errors import SorterError

T = TypeVar("T")


def unwrap(
    value: Optional[T], message: str, error: Type[SorterError] = SorterError
) -> T:
    """
    Return the contained value or raise.

    Args:
        value: Optional value to unwrap
        message: Error message used when the value is absent
        error: Exception class to raise when the value is absent

    Returns:
        The contained value
    """
    if value is None:
        raise error(message)
    return value


def unwrap_or(value: Optional[T], default: T) -> T:
    """Return the contained value, or ``default`` when absent."""
    if value is None:
        return default
    return value
