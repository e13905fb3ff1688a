"""A kd-tree whose nodes carry bounding boxes and weighted coordinate sums."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Optional

from .point import Point, WeightedSum


class KdNode(WeightedSum):
    """A kd-tree node: a bounding box, two children and, for leaves, one point."""

    def __init__(self, cell_min: Sequence[float], cell_max: Sequence[float]) -> None:
        if len(cell_min) != len(cell_max):
            raise ValueError("Cell bounds must have the same dimensionality")
        super().__init__(len(cell_min))
        self.cell_min: list[float] = [float(c) for c in cell_min]
        self.cell_max: list[float] = [float(c) for c in cell_max]
        self.left: Optional[KdNode] = None
        self.right: Optional[KdNode] = None
        self.point: Optional[Point] = None

    def is_leaf(self) -> bool:
        """True when the node has no children."""
        return self.left is None and self.right is None


class KdTree:
    """A kd-tree built by median splits, cycling through the axes by depth.

    Leaves hold references to the points they were built from, so a centroid
    assigned to a leaf's point is visible on the original point.
    """

    def __init__(self, points: Iterable[Point]) -> None:
        pts = list(points)
        if pts and any(p.dimensions != pts[0].dimensions for p in pts):
            raise ValueError("Points must have the same dimensionality")
        self._root = self._build(pts, 0)

    @property
    def root(self) -> Optional[KdNode]:
        return self._root

    def leaves(self) -> Iterator[KdNode]:
        """Yield the leaf nodes from left to right."""
        stack = [self._root] if self._root is not None else []
        while stack:
            node = stack.pop()
            if node.is_leaf():
                yield node
                continue
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def _build(self, points: list[Point], depth: int) -> Optional[KdNode]:
        if not points:
            return None
        dims = points[0].dimensions
        cell_min = [min(p.coordinates[i] for p in points) for i in range(dims)]
        cell_max = [max(p.coordinates[i] for p in points) for i in range(dims)]
        node = KdNode(cell_min, cell_max)
        node.count = len(points)
        node.wgt_cent = Point.sum(points).coordinates

        if node.count == 1:
            node.point = points[0]
            return node

        axis = depth % dims
        ordered = sorted(points, key=lambda p: p.coordinates[axis])
        median = node.count // 2
        node.left = self._build(ordered[:median], depth + 1)
        node.right = self._build(ordered[median:], depth + 1)
        return node