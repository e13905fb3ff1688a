"""Points in n-dimensional space and centroids carrying weighted sums."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Optional, Union

_EQ_TOLERANCE = 1e-6


class WeightedSum:
    """A running sum of coordinates together with the number of summed items."""

    def __init__(self, dimensions: int) -> None:
        self.wgt_cent: list[float] = [0.0] * dimensions
        self.count: int = 0

    def reset_count(self) -> None:
        """Zero the weighted sum and the counter."""
        self.wgt_cent = [0.0] * len(self.wgt_cent)
        self.count = 0


class Point:
    """A point with coordinates, an identifier and an optional assigned centroid."""

    def __init__(self, coordinates: Iterable[float], id: int = -1) -> None:
        self.coordinates: list[float] = [float(c) for c in coordinates]
        self.id = id
        self.centroid: Optional[Point] = None

    @classmethod
    def filled(cls, value: float, dimensions: int, id: int = -1) -> "Point":
        """Build a point whose coordinates all equal ``value``."""
        return cls([value] * dimensions, id)

    @property
    def dimensions(self) -> int:
        return len(self.coordinates)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.coordinates):
            raise IndexError("Index out of bounds")

    def __getitem__(self, index: int) -> float:
        self._check_index(index)
        return self.coordinates[index]

    def __setitem__(self, index: int, value: float) -> None:
        self._check_index(index)
        self.coordinates[index] = float(value)

    def __len__(self) -> int:
        return len(self.coordinates)

    def __iter__(self):
        return iter(self.coordinates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        if other.dimensions != self.dimensions:
            return False
        return all(
            abs(a - b) <= _EQ_TOLERANCE
            for a, b in zip(self.coordinates, other.coordinates)
        )

    __hash__ = None  # type: ignore[assignment]

    def _same_dimensions(self, other: "Point") -> None:
        if other.dimensions != self.dimensions:
            raise ValueError("Points must have the same dimensionality")

    def __add__(self, other: "Point") -> "Point":
        if not isinstance(other, Point):
            return NotImplemented
        self._same_dimensions(other)
        return Point(a + b for a, b in zip(self.coordinates, other.coordinates))

    def __sub__(self, other: "Point") -> "Point":
        if not isinstance(other, Point):
            return NotImplemented
        self._same_dimensions(other)
        return Point(a - b for a, b in zip(self.coordinates, other.coordinates))

    def __truediv__(self, other: Union["Point", float]) -> "Point":
        if isinstance(other, Point):
            self._same_dimensions(other)
            return Point(a / b for a, b in zip(self.coordinates, other.coordinates))
        return Point(a / other for a in self.coordinates)

    def cross(self, other: "Point") -> "Point":
        """Cyclic cross product; the usual vector product in three dimensions."""
        self._same_dimensions(other)
        n = self.dimensions
        a, b = self.coordinates, other.coordinates
        return Point(
            a[(i + 1) % n] * b[(i + 2) % n] - a[(i + 2) % n] * b[(i + 1) % n]
            for i in range(n)
        )

    def norm(self) -> float:
        return math.sqrt(sum(c * c for c in self.coordinates))

    @classmethod
    def sum(cls, points: Iterable["Point"]) -> "Point":
        """Element-wise sum of the given points."""
        iterator = iter(points)
        try:
            first = next(iterator)
        except StopIteration:
            raise ValueError("Cannot sum an empty collection of points") from None
        total = Point(first.coordinates)
        for point in iterator:
            total = total + point
        return total

    def set_centroid(self, centroid: Optional["Point"]) -> None:
        self.centroid = centroid

    def copy(self) -> "Point":
        """A new point with the same coordinates, id and centroid reference."""
        result = Point(self.coordinates, self.id)
        result.centroid = self.centroid
        return result

    def __str__(self) -> str:
        return "(" + ", ".join(format(c, "g") for c in self.coordinates) + ")"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.coordinates!r}, id={self.id})"


class CentroidPoint(Point, WeightedSum):
    """A cluster centre that accumulates the coordinates of its members."""

    def __init__(self, coordinates: Iterable[float], id: int = -1) -> None:
        Point.__init__(self, coordinates, id)
        WeightedSum.__init__(self, self.dimensions)

    @classmethod
    def from_point(cls, point: Point) -> "CentroidPoint":
        result = cls(point.coordinates, point.id)
        result.centroid = point.centroid
        return result

    def accumulate(self, other: WeightedSum) -> "CentroidPoint":
        """Add another weighted sum into this one, in place."""
        if len(other.wgt_cent) != len(self.wgt_cent):
            raise ValueError("Weighted sums must have the same dimensionality")
        self.wgt_cent = [a + b for a, b in zip(self.wgt_cent, other.wgt_cent)]
        self.count += other.count
        return self

    def reset_count(self) -> None:
        WeightedSum.reset_count(self)

    def normalize(self) -> None:
        """Move the centroid to the mean of what it has accumulated."""
        if self.count == 0:
            self.coordinates = [
                math.copysign(math.inf, w) if w else math.nan for w in self.wgt_cent
            ]
        else:
            self.coordinates = [w / self.count for w in self.wgt_cent]

    def copy(self) -> "CentroidPoint":
        result = CentroidPoint(self.coordinates, self.id)
        result.centroid = self.centroid
        result.wgt_cent = list(self.wgt_cent)
        result.count = self.count
        return result

    def __eq__(self, other: object) -> bool:
        """Equal when every coordinate has the same integer floor."""
        if not isinstance(other, Point):
            return NotImplemented
        if other.dimensions != self.dimensions:
            return False
        return all(
            math.floor(a) == math.floor(b)
            for a, b in zip(self.coordinates, other.coordinates)
        )

    __hash__ = None  # type: ignore[assignment]


def distance(a: Union[Point, Sequence[float]], b: Union[Point, Sequence[float]]) -> float:
    """Euclidean distance between two points."""
    ca = a.coordinates if isinstance(a, Point) else list(a)
    cb = b.coordinates if isinstance(b, Point) else list(b)
    if len(ca) != len(cb):
        raise ValueError("Points must have the same dimensionality")
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(ca, cb)))