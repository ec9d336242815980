"""
Containment ("nesting") tree over 2D shapes.

Every node owns one shape and an index of the shapes directly nested inside
it. Shapes are inserted largest first, and each one is attached under the
most deeply nested already-placed shape that contains it. Placement is greedy
and never revisited.

Typical use::

    tree = Tree.from_shapes(shapes)
    for depth, shape in tree:
        ...
"""
import logging
from collections import deque
from typing import Deque, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

from nesting_tree.shape import (
    BoundingBox,
    DegenerateShapeError,
    Point2,
    Shape,
    checked_area,
)
from nesting_tree.spatial_index import ChildIndex, Envelope, squared_distance

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=Shape)

_NAN_POINT: Point2 = (float("nan"), float("nan"))


class TreeNode(Generic[V]):
    """One shape plus the index of shapes directly nested inside it.

    Bounds, representative point and area are read from the shape once and
    cached; shapes must not change after insertion.
    """

    def __init__(
        self,
        value: V,
        bounding_box: BoundingBox,
        representative_point: Point2,
        area: float,
    ) -> None:
        self._value = value
        self._envelope = Envelope.from_corners(*bounding_box)
        self.bounding_box = bounding_box
        self.representative_point = representative_point
        self.area = area
        self._children: ChildIndex["TreeNode[V]"] = ChildIndex()

    @classmethod
    def from_shape(cls, value: V) -> "TreeNode[V]":
        area = checked_area(value)
        point = tuple(value.representative_point())
        if len(point) != 2:
            raise DegenerateShapeError(
                f"Representative point must have two coordinates, got {point!r}"
            )
        return cls(value, value.bounding_box(), (float(point[0]), float(point[1])), area)

    @classmethod
    def container(cls, value: Optional[V] = None) -> "TreeNode[V]":
        """Root node whose value is only a holder for the top-level shapes.

        Its geometry is never queried, so ``value`` may be ``None`` or a shape
        with no usable interior.
        """
        return cls(value, (_NAN_POINT, _NAN_POINT), _NAN_POINT, float("inf"))

    def __repr__(self) -> str:
        return f"TreeNode(value={self._value!r}, children={len(self._children)})"

    @property
    def value(self) -> V:
        return self._value

    # ─── Index protocol ──────────────────────────────────────────────────────

    def envelope(self) -> Envelope:
        return self._envelope

    def distance_2(self, point: Point2) -> float:
        """0 if the shape holds ``point``, else squared distance from the
        cached representative point."""
        if self._value.contains_point(point):
            return 0.0
        return squared_distance(self.representative_point, point)

    # ─── Insertion ───────────────────────────────────────────────────────────

    def add_node(self, elem: Union[V, "TreeNode[V]"]) -> "TreeNode[V]":
        """Attach ``elem`` under the deepest descendant that contains it.

        Candidates at each level are the children holding ``elem``'s
        representative point, tried in insertion order; the first that
        contains ``elem`` is descended into.

        Args:
            elem: Shape to insert, or an already built node

        Returns:
            The node ``elem`` was attached to
        """
        node = elem if isinstance(elem, TreeNode) else TreeNode.from_shape(elem)
        parent: TreeNode[V] = self
        while True:
            for child in parent._children.locate_all_at_point(node.representative_point):
                if child._value.contains(node._value):
                    parent = child
                    break
            else:
                parent._children.insert(node)
                return parent

    # ─── Access ──────────────────────────────────────────────────────────────

    def children(self) -> List["TreeNode[V]"]:
        """Direct children, in index order."""
        return self._children.items()

    def child_count(self) -> int:
        return len(self._children)

    def depth_iter(self) -> "DepthIterator[V]":
        """Breadth-first ``(depth, value)`` pairs below this node, children at 0."""
        return DepthIterator(self._children)

    def locate_children_at_point(self, point: Point2) -> Iterator["TreeNode[V]"]:
        return self._children.locate_all_at_point(point)


class Tree(Generic[V]):
    """Nesting hierarchy built once from a collection of shapes.

    The root holds either a universal shape supplied by the caller or ``None``.
    It is never yielded by traversal; only the inserted shapes are.
    """

    def __init__(self, root: Optional[TreeNode[V]] = None) -> None:
        self._root = root
        self._size = 0 if root is None else sum(1 for _ in root.depth_iter())

    @classmethod
    def from_shapes(cls, shapes: Iterable[V], root: Optional[V] = None) -> "Tree[V]":
        """Build a tree, inserting ``shapes`` in descending area order.

        Equal areas keep their input order, so the earlier shape becomes the
        parent when two identical shapes contain each other.

        Args:
            shapes: Shapes to nest, in any order
            root: Value held by the root node; never yielded by traversals

        Returns:
            Tree holding every shape in ``shapes``

        Raises:
            DegenerateShapeError: A shape reports a negative or NaN area
        """
        nodes = [TreeNode.from_shape(shape) for shape in shapes]
        nodes.sort(key=lambda node: node.area, reverse=True)

        root_node: TreeNode[V] = TreeNode.container(root)
        max_depth = -1
        depths = {id(root_node): -1}
        for node in nodes:
            parent = root_node.add_node(node)
            depth = depths[id(parent)] + 1
            depths[id(node)] = depth
            max_depth = max(max_depth, depth)

        tree = cls(root_node)
        logger.debug(
            "Built nesting tree: %d shapes, %d top-level, max depth %d",
            len(nodes), root_node.child_count(), max_depth,
        )
        return tree

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> "DepthIterator[V]":
        return self.iter()

    def __repr__(self) -> str:
        return f"Tree(shapes={self._size})"

    @property
    def root(self) -> Optional[TreeNode[V]]:
        return self._root

    def iter(self) -> "DepthIterator[V]":
        """Borrowing breadth-first traversal; may be repeated."""
        if self._root is None:
            return DepthIterator(())
        return self._root.depth_iter()

    def into_iter(self) -> "DepthIntoIterator[V]":
        """Consuming breadth-first traversal.

        Detaches the hierarchy from the tree; nodes are released as they are
        yielded and the tree is empty afterwards.
        """
        root, self._root = self._root, None
        self._size = 0
        if root is None:
            return DepthIntoIterator(())
        return DepthIntoIterator(root._children.drain())

    def children(self) -> List[TreeNode[V]]:
        """Top-level nodes (direct children of the root)."""
        if self._root is None:
            return []
        return self._root.children()

    def enclosing(self, point: Point2) -> List[V]:
        """Shapes containing ``point``, outermost first.

        Follows the same candidate order as insertion, so a point inside
        overlapping siblings reports the branch the first sibling leads to.
        """
        chain: List[V] = []
        node = self._root
        while node is not None:
            node = next(node.locate_children_at_point(point), None)
            if node is not None:
                chain.append(node.value)
        return chain


# ─── Traversal ───────────────────────────────────────────────────────────────

class DepthIterator(Generic[V]):
    """Level-order ``(depth, value)`` iterator that leaves the tree intact."""

    def __init__(self, children: Iterable[TreeNode[V]]) -> None:
        self._order: Deque[Tuple[int, TreeNode[V]]] = deque((0, child) for child in children)

    def __iter__(self) -> "DepthIterator[V]":
        return self

    def __next__(self) -> Tuple[int, V]:
        if not self._order:
            raise StopIteration
        depth, node = self._order.popleft()
        for child in node._children:
            self._order.append((depth + 1, child))
        return depth, node.value


class DepthIntoIterator(Generic[V]):
    """Level-order ``(depth, value)`` iterator that takes the nodes apart."""

    def __init__(self, children: Iterable[TreeNode[V]]) -> None:
        self._order: Deque[Tuple[int, TreeNode[V]]] = deque((0, child) for child in children)

    def __iter__(self) -> "DepthIntoIterator[V]":
        return self

    def __next__(self) -> Tuple[int, V]:
        if not self._order:
            raise StopIteration
        depth, node = self._order.popleft()
        for child in node._children.drain():
            self._order.append((depth + 1, child))
        return depth, node.value
