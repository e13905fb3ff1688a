"""Centroid initialisation from the peaks of a kernel density estimate on a grid."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from itertools import product
from typing import Optional

import numpy as np

from .centroid_init import CentroidInitMethod, MostDistantInit, PathLike
from .kde_base import KDEBase
from .point import CentroidPoint, Point

logger = logging.getLogger(__name__)

RAY_MIN = 3
RANGE_MIN = 9
SHRINK_FACTOR = 0.40


def _axis_count(span: float, step: float) -> int:
    if step == 0:
        return 1
    return int(span / step) + 1


class KDE(CentroidInitMethod, KDEBase):
    """Chooses centroids at the local maxima of the density sampled on a regular grid.

    The grid has at least ``RANGE_MIN`` divisions per axis, and a grid point is a
    maximum when no grid point within ``RAY_MIN`` steps along every axis has a
    higher density. When fewer than ``k`` maxima are found the bandwidth is
    shrunk and the search repeated; when more are found, the ``k`` most distant
    of them are kept.
    """

    def __init__(
        self,
        data: Iterable[Point],
        k: int = 0,
        export_dir: Optional[PathLike] = None,
    ) -> None:
        CentroidInitMethod.__init__(self, data, k, export_dir)
        KDEBase.__init__(self, self.data)
        self.range_number_division = max(
            RANGE_MIN, int(np.floor(np.cbrt(len(self.data))))
        )
        self.ray = RAY_MIN
        self.min_values: list[float] = []
        self.range: list[float] = []
        self.step: list[float] = []
        self.rs: list[float] = []
        self.counts: list[int] = []

    def find_centroids(self) -> list[CentroidPoint]:
        return self.find_local_maxima(self.generate_grid())

    def generate_grid(self) -> list[Point]:
        """Regular grid over the bounding box of the data, first axis varying fastest."""
        dims = self.dimensions
        self.min_values = [min(p.coordinates[d] for p in self.data) for d in range(dims)]
        max_values = [max(p.coordinates[d] for p in self.data) for d in range(dims)]
        self.range = [hi - lo for lo, hi in zip(self.min_values, max_values)]
        self.step = [span / self.range_number_division for span in self.range]
        self.rs = [step * self.ray for step in self.step]
        self.counts = [_axis_count(span, step) for span, step in zip(self.range, self.step)]

        grid = []
        for flat in range(math.prod(self.counts)):
            index = flat
            coords = []
            for lo, step, count in zip(self.min_values, self.step, self.counts):
                coords.append(lo + (index % count) * step)
                index //= count
            grid.append(Point(coords))
        return grid

    def _offsets(self, dim: int) -> list[float]:
        step = self.step[dim]
        if step == 0:
            return [0.0]
        offsets = []
        offset = -self.rs[dim]
        while offset <= self.rs[dim]:
            offsets.append(offset)
            offset += step
        return offsets

    def _grid_index(self, coords: Sequence[float]) -> Optional[int]:
        flat = 0
        stride = 1
        for c, lo, step, count in zip(coords, self.min_values, self.step, self.counts):
            j = 0 if step == 0 else round((c - lo) / step)
            if not 0 <= j < count:
                return None
            flat += j * stride
            stride *= count
        return flat

    def is_local_maximum(
        self, grid: Sequence[Point], densities: Sequence[float], index: int
    ) -> bool:
        """True when no neighbouring grid point has a higher density."""
        if not self.counts:
            raise RuntimeError("generate_grid must be called before searching for maxima")
        current = densities[index]
        centre = grid[index].coordinates
        offsets = [self._offsets(d) for d in range(self.dimensions)]
        for combo in product(*offsets):
            neighbor = Point(c + o for c, o in zip(centre, combo))
            j = self._grid_index(neighbor.coordinates)
            if j is not None and grid[j] == neighbor and densities[j] > current:
                return False
        return True

    def _maxima(self, grid: Sequence[Point]) -> list[Point]:
        densities = [self.kde_value(p) for p in grid]
        return [
            point
            for i, point in enumerate(grid)
            if self.is_local_maximum(grid, densities, i)
        ]

    def find_local_maxima(self, grid: Sequence[Point]) -> list[CentroidPoint]:
        """Centroids at the density peaks of ``grid``, adjusted towards ``k``."""
        if self.k > len(grid):
            raise ValueError("The grid has fewer points than the number of clusters.")
        iteration = 0
        while True:
            logger.debug("KDE peak search, iteration %d", iteration)
            maxima = self._maxima(grid)
            logger.debug("Number of local maxima found: %d", len(maxima))
            if self.k != 0 and len(maxima) < self.k:
                self.shrink_bandwidth(SHRINK_FACTOR)
                iteration += 1
                continue
            if self.k != 0 and len(maxima) > self.k:
                return MostDistantInit(maxima, self.k, self.export_dir).find_centroids()
            return [CentroidPoint(p.coordinates, i) for i, p in enumerate(maxima)]

    def count_local_maxima(self) -> int:
        """Number of density peaks with the current bandwidth, without adjusting it."""
        return len(self._maxima(self.generate_grid()))