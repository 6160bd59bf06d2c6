"""``Annotated`` markers and helpers for kinds Python has no syntax for."""

from __future__ import annotations

import dataclasses
import queue
from typing import Annotated, Any, Optional

from .kinds import ChanDir


@dataclasses.dataclass(frozen=True, slots=True)
class ArrayLength:
    """Marks ``tuple[T, ...]`` as a fixed-size array of ``length`` elements."""
    length: int

    def __post_init__(self) -> None:
        if isinstance(self.length, bool) or not isinstance(self.length, int) or self.length < 0:
            raise ValueError(f"Array length must be a non-negative int, got {self.length!r}")


@dataclasses.dataclass(frozen=True, slots=True)
class Variadic:
    """Marks a ``Callable`` whose last parameter is variadic (``*args``)."""


def array_of(element: Any, length: int) -> Any:
    """Fixed-size array annotation: ``Annotated[tuple[element, ...], ArrayLength(length)]``."""
    return Annotated[tuple[element, ...], ArrayLength(length)]


def chan_of(element: Any, direction: ChanDir = ChanDir.BOTH) -> Any:
    """Channel annotation backed by :class:`queue.Queue`."""
    if direction is ChanDir.BOTH:
        return queue.Queue[element]
    return Annotated[queue.Queue[element], direction]


def pointer_to(element: Any) -> Any:
    """Reference annotation: ``Optional[element]``."""
    return Optional[element]
