"""
Envelope-keyed index of a node's direct children.

Each indexed item reports an axis-aligned envelope and a squared distance to
a query point. Point queries filter envelopes with numpy and then keep the
items whose distance to the point is zero, i.e. the items whose shape holds
the point. Results always come back in insertion order, which makes the
parent chosen for a new shape independent of index internals.
"""
import math
from dataclasses import dataclass
from typing import Generic, Iterator, List, Protocol, Tuple, TypeVar

import numpy as np

from nesting_tree.shape import Point2

_INITIAL_CAPACITY = 8


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding rectangle. NaN corners mean "empty"."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_corners(cls, a: Point2, b: Point2) -> "Envelope":
        values = (a[0], a[1], b[0], b[1])
        if any(math.isnan(v) for v in values):
            return cls.empty()
        return cls(
            min(a[0], b[0]), min(a[1], b[1]),
            max(a[0], b[0]), max(a[1], b[1]),
        )

    @classmethod
    def empty(cls) -> "Envelope":
        nan = float("nan")
        return cls(nan, nan, nan, nan)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class Indexed(Protocol):
    def envelope(self) -> Envelope:
        ...

    def distance_2(self, point: Point2) -> float:
        ...


T = TypeVar("T", bound=Indexed)


def squared_distance(a: Point2, b: Point2) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


class ChildIndex(Generic[T]):
    """Insertion-ordered spatial index over items with envelopes."""

    def __init__(self) -> None:
        self._items: List[T] = []
        self._bounds = np.empty((0, 4), dtype=float)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def items(self) -> List[T]:
        return list(self._items)

    def insert(self, item: T) -> None:
        count = len(self._items)
        if count == len(self._bounds):
            grown = np.empty((max(_INITIAL_CAPACITY, 2 * count), 4), dtype=float)
            grown[:count] = self._bounds[:count]
            self._bounds = grown
        self._bounds[count] = item.envelope().as_tuple()
        self._items.append(item)

    def locate_all_at_point(self, point: Point2) -> Iterator[T]:
        """Items whose own shape contains ``point``, in insertion order."""
        for i in self._envelope_hits(point):
            item = self._items[i]
            if item.distance_2(point) <= 0.0:
                yield item

    def drain(self) -> Iterator[T]:
        """Hand over every item and leave the index empty."""
        items = self._items
        self._items = []
        self._bounds = np.empty((0, 4), dtype=float)
        return iter(items)

    def _envelope_hits(self, point: Point2) -> np.ndarray:
        count = len(self._items)
        if count == 0:
            return np.empty(0, dtype=np.intp)
        bounds = self._bounds[:count]
        x, y = float(point[0]), float(point[1])
        mask = (
            (bounds[:, 0] <= x) & (x <= bounds[:, 2])
            & (bounds[:, 1] <= y) & (y <= bounds[:, 3])
        )
        return np.flatnonzero(mask)
