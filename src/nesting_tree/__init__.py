"""Containment hierarchy ("nesting tree") over 2D shapes."""

from nesting_tree.shape import (
    BoundingBox,
    DegenerateShapeError,
    NestingError,
    Point2,
    Shape,
    approx_contains,
)
from nesting_tree.spatial_index import ChildIndex, Envelope
from nesting_tree.tree import DepthIntoIterator, DepthIterator, Tree, TreeNode

__all__ = [
    "BoundingBox",
    "ChildIndex",
    "DegenerateShapeError",
    "DepthIntoIterator",
    "DepthIterator",
    "Envelope",
    "NestingError",
    "Point2",
    "Shape",
    "Tree",
    "TreeNode",
    "approx_contains",
]
