"""Small helpers shared across the package."""

from __future__ import annotations

import random
from collections.abc import Iterable

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def element_of(items: Iterable[str], value: str) -> bool:
    """Tell whether ``value`` is one of ``items``."""
    return any(item == value for item in items)


def file_ext(path: str) -> str:
    """Return everything after the first dot of ``path``, dot included.

    A path without a dot has no extension and yields an empty string.
    """
    _, dot, rest = path.partition(".")
    return f".{rest}" if dot and rest else ""


def generate_random(size: int) -> int:
    """Return a random integer in ``[0, size)``."""
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    return random.randrange(size)


def abs_int32(value: int) -> int:
    """Absolute value with 32-bit signed integer semantics.

    The smallest 32-bit integer has no positive counterpart and is returned
    unchanged, as two's-complement negation does.
    """
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValueError(f"{value} does not fit in a 32-bit signed integer")
    if value >= 0 or value == INT32_MIN:
        return value
    return -value