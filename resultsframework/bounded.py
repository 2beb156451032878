"""
Bounded child collections.

Objectives, outcomes and outputs are capped at MAX_CHILDREN. Appending
to a full collection is a no-op, never an error.
"""

from __future__ import annotations

from typing import TypeVar

from .config import MAX_CHILDREN

T = TypeVar("T")


def is_full(items: tuple, cap: int = MAX_CHILDREN) -> bool:
    """True when no further item may be appended."""
    return len(items) >= cap


def try_append(items: tuple[T, ...], item: T, cap: int = MAX_CHILDREN) -> tuple[tuple[T, ...], bool]:
    """
    Append item unless the collection already holds cap entries.

    Returns:
        (new_items, accepted). When rejected, new_items is the very
        same tuple that was passed in.
    """
    if is_full(items, cap):
        return items, False
    return items + (item,), True
