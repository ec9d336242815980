"""
Shapely-backed shapes for the nesting tree.

PolygonShape adapts a plain Polygon to the Shape capability; LabeledPolygon
pairs a polygon with an arbitrary label (e.g. the id of the SVG element it came
from) and delegates all geometry to the polygon. Also provides conversion from
importer loops to polygons and tree constructors rooted at an empty polygon.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, List, Sequence, Tuple, TypeVar, Union

import shapely
from shapely.geometry import LineString, Polygon

from nesting_tree.shape import (
    BoundingBox,
    DegenerateShapeError,
    Point2,
    Shape,
    approx_contains,
)
from nesting_tree.tree import Tree

logger = logging.getLogger(__name__)

L = TypeVar("L")

_NAN = float("nan")


@dataclass(eq=False)
class PolygonShape:
    """A simple polygon (holes allowed) as a nesting tree shape.

    An empty polygon has zero area, NaN bounds and a NaN representative point:
    it holds no point and no other shape holds it.
    """
    polygon: Polygon

    def __post_init__(self):
        if not isinstance(self.polygon, Polygon):
            raise TypeError(
                f"PolygonShape needs a Polygon, got {type(self.polygon).__name__}"
            )
        if not self.polygon.is_empty:
            shapely.prepare(self.polygon)

    def contains(self, other: Shape) -> bool:
        return approx_contains(self, other)

    def contains_point(self, point: Point2) -> bool:
        if self.polygon.is_empty:
            return False
        return bool(shapely.contains_xy(self.polygon, point[0], point[1]))

    def bounding_box(self) -> BoundingBox:
        if self.polygon.is_empty:
            return ((_NAN, _NAN), (_NAN, _NAN))
        min_x, min_y, max_x, max_y = self.polygon.bounds
        return ((min_x, min_y), (max_x, max_y))

    def representative_point(self) -> Point2:
        if self.polygon.is_empty:
            return (_NAN, _NAN)
        point = self.polygon.representative_point()
        if point.is_empty:
            if self.polygon.area > 0:
                raise DegenerateShapeError(
                    "Could not find an interior point for a non-empty polygon"
                )
            # No interior to speak of; any point on the outline will do
            point = self.polygon.exterior.interpolate(0.5, normalized=True)
        return (point.x, point.y)

    def area(self) -> float:
        return float(self.polygon.area)


@dataclass(eq=False)
class LabeledPolygon(Generic[L]):
    """A polygon carrying an opaque label through the tree."""
    label: L
    polygon: Polygon
    _shape: PolygonShape = field(init=False, repr=False)

    def __post_init__(self):
        self._shape = PolygonShape(self.polygon)

    def contains(self, other: Shape) -> bool:
        return approx_contains(self, other)

    def contains_point(self, point: Point2) -> bool:
        return self._shape.contains_point(point)

    def bounding_box(self) -> BoundingBox:
        return self._shape.bounding_box()

    def representative_point(self) -> Point2:
        return self._shape.representative_point()

    def area(self) -> float:
        return self._shape.area()


# ─── Conversion functions ────────────────────────────────────────────────────

def loop_to_polygon(loop: Union[LineString, Sequence[Tuple[float, float]]]) -> Polygon:
    """Build a polygon from a closed point loop.

    Returns an empty polygon when the loop has fewer than three distinct
    vertices.
    """
    coords = list(loop.coords) if isinstance(loop, LineString) else list(loop)
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]
    if len(set(coords)) < 3:
        return Polygon()
    return Polygon(coords)


def loops_to_polygons(loops: Iterable[Any]) -> List[Polygon]:
    """Convert importer loops to polygons, dropping loops with no area outline."""
    polygons = []
    skipped = 0
    for loop in loops:
        polygon = loop_to_polygon(loop)
        if polygon.is_empty:
            skipped += 1
            continue
        polygons.append(polygon)
    if skipped:
        logger.debug("Skipped %d loops with fewer than 3 distinct vertices", skipped)
    return polygons


def shape_polygon(shape: Any) -> Polygon:
    """The polygon behind a PolygonShape or LabeledPolygon, else an empty one."""
    polygon = getattr(shape, "polygon", None)
    if isinstance(polygon, Polygon):
        return polygon
    return Polygon()


def tree_from_polygons(polygons: Iterable[Polygon]) -> Tree[PolygonShape]:
    """Nesting tree of plain polygons, rooted at an empty polygon."""
    shapes = [PolygonShape(polygon) for polygon in polygons]
    return Tree.from_shapes(shapes, root=PolygonShape(Polygon()))


def tree_from_labeled_polygons(
    pairs: Iterable[Tuple[L, Polygon]],
    root_label: Any = None,
) -> Tree[LabeledPolygon[L]]:
    """
    Nesting tree of ``(label, polygon)`` pairs, rooted at an empty polygon.

    Args:
        pairs: ``(label, polygon)`` pairs, e.g. from ``import_svg_labeled``
        root_label: Label carried by the root node

    Returns:
        Tree of ``LabeledPolygon`` values, largest shapes at depth 0
    """
    shapes = [LabeledPolygon(label, polygon) for label, polygon in pairs]
    return Tree.from_shapes(shapes, root=LabeledPolygon(root_label, Polygon()))
