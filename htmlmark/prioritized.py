"""Priorities for handlers, render results and tag types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Generic, Iterable, TypeVar

__all__ = [
    "PRIORITY_EARLY",
    "PRIORITY_STANDARD",
    "PRIORITY_LATE",
    "Prioritized",
    "RenderStatus",
    "TagType",
    "sort_prioritized",
]

# Handlers run early; subtract from this to run even earlier.
PRIORITY_EARLY = 100
# Handlers that need no particular order.
PRIORITY_STANDARD = 500
# Handlers run late; add to this to run even later.
PRIORITY_LATE = 1000

V = TypeVar("V")


@dataclass(frozen=True)
class Prioritized(Generic[V]):
    """A value together with the priority it is run or looked up with."""

    value: V
    priority: int


class RenderStatus(IntEnum):
    """What a render handler did with a node."""

    TRY_NEXT = 0
    SUCCESS = 1


class TagType(str, Enum):
    """How an element is treated when no renderer handles it."""

    BLOCK = "block"
    INLINE = "inline"
    # The node is removed before rendering.
    REMOVE = "remove"


def sort_prioritized(items: Iterable[Prioritized[V]]) -> list[Prioritized[V]]:
    """Return the items ordered by ascending priority, keeping ties in order."""
    return sorted(items, key=lambda item: item.priority)