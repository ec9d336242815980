"""
Shape capability for the nesting tree.

Any 2D type that can answer a handful of geometric questions (containment,
point test, bounds, an interior point and an area) can be indexed by the
tree. Nothing here depends on a geometry library.
"""
import math
from typing import Protocol, Tuple, runtime_checkable

Point2 = Tuple[float, float]
BoundingBox = Tuple[Point2, Point2]  # (min corner, max corner)


class NestingError(Exception):
    """Base error for nesting tree failures."""


class DegenerateShapeError(NestingError, ValueError):
    """A shape broke the capability contract (no interior point, bad area)."""


@runtime_checkable
class Shape(Protocol):
    """Operations a shape must provide to take part in a nesting tree.

    ``representative_point()`` must satisfy ``contains_point`` for the same
    shape whenever ``area() > 0``.
    """

    def contains(self, other: "Shape") -> bool:
        ...

    def contains_point(self, point: Point2) -> bool:
        ...

    def bounding_box(self) -> BoundingBox:
        ...

    def representative_point(self) -> Point2:
        ...

    def area(self) -> float:
        ...


def approx_contains(outer: Shape, inner: Shape) -> bool:
    """Fast containment test: ``outer`` is at least as large as ``inner`` and
    holds ``inner``'s representative point.

    This is an approximation. A concave ``outer`` can hold the point of a shape
    that pokes outside it, and such a shape will be reported as contained.

    Args:
        outer: Candidate container
        inner: Shape being placed

    Returns:
        True if ``outer`` is taken to contain ``inner``
    """
    if outer.area() < inner.area():
        return False
    return outer.contains_point(inner.representative_point())


def checked_area(shape: Shape) -> float:
    """Return ``shape.area()``, rejecting negative or NaN values."""
    area = float(shape.area())
    if math.isnan(area) or area < 0.0:
        raise DegenerateShapeError(f"Shape reported an invalid area: {area!r}")
    return area
