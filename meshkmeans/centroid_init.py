"""Ways of choosing the initial centroids for k-means."""

from __future__ import annotations

import math
import os
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Union

from .point import CentroidPoint, Point, distance

PathLike = Union[str, "os.PathLike[str]"]


def truncate_to_three_decimals(value: float) -> float:
    """Cut a value to three decimals, rounding towards zero."""
    return math.trunc(value * 1000.0) / 1000.0


def export_points_csv(points: Iterable[Point], path: PathLike) -> None:
    """Write points as CSV rows of truncated coordinates followed by a zero label."""
    pts = list(points)
    dims = pts[0].dimensions if pts else 2
    header = "x,y,z,label" if dims == 3 else "x,y,label"
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(header + "\n")
        for point in pts:
            fields = [format(truncate_to_three_decimals(c), "g") for c in point.coordinates]
            handle.write(",".join(fields) + ",0\n")


class CentroidInitMethod(ABC):
    """Base for centroid initialisers working on a list of points.

    When ``export_dir`` is given, the data and the chosen centroids are written
    there as ``Mesh.csv`` and ``Centroids.csv``.
    """

    def __init__(
        self,
        data: Iterable[Point],
        k: int = 0,
        export_dir: Optional[PathLike] = None,
    ) -> None:
        self.data: list[Point] = list(data)
        self.k = int(k)
        self.export_dir = Path(export_dir) if export_dir is not None else None

    @abstractmethod
    def find_centroids(self) -> list[CentroidPoint]:
        """Return the chosen initial centroids, numbered from zero."""

    def _export(self, centroids: list[CentroidPoint]) -> None:
        if self.export_dir is None:
            return
        export_points_csv(self.data, self.export_dir / "Mesh.csv")
        export_points_csv(centroids, self.export_dir / "Centroids.csv")


class RandomCentroidInit(CentroidInitMethod):
    """Picks k distinct data points at random; k between 1 and 10 when unset."""

    def __init__(
        self,
        data: Iterable[Point],
        k: int = 0,
        export_dir: Optional[PathLike] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(data, k, export_dir)
        self.rng = rng if rng is not None else random.Random()

    def find_centroids(self) -> list[CentroidPoint]:
        size = len(self.data)
        if self.k == 0:
            self.k = self.rng.randint(1, 10)
        elif size < self.k:
            raise ValueError("Dataset size is smaller than the number of clusters.")

        chosen = sorted(self.rng.sample(range(size), min(self.k, size)))
        centroids = [
            CentroidPoint(self.data[index].coordinates, i)
            for i, index in enumerate(chosen)
        ]
        self._export(centroids)
        return centroids


class MostDistantInit(CentroidInitMethod):
    """Starts from the first point, then repeatedly adds the point farthest from
    every centroid chosen so far."""

    def find_centroids(self) -> list[CentroidPoint]:
        if not self.data:
            raise ValueError("Cannot choose centroids from an empty dataset.")

        centroids = [CentroidPoint(self.data[0].coordinates, 0)]
        while len(centroids) < self.k:
            farthest = Point.filled(0.0, self.data[0].dimensions)
            max_distance = -math.inf
            for point in self.data:
                nearest = min(distance(point, c) for c in centroids)
                if nearest > max_distance:
                    max_distance = nearest
                    farthest = point
            centroids.append(CentroidPoint(farthest.coordinates, len(centroids)))

        self._export(centroids)
        return centroids