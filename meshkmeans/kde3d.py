"""Three-dimensional grid kernel density estimate for choosing centroids."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Optional

import numpy as np

from .centroid_init import CentroidInitMethod, MostDistantInit, PathLike
from .kde_base import KDEBase
from .point import CentroidPoint, Point

logger = logging.getLogger(__name__)

RAY_MIN = 3
SHRINK_FACTOR = 0.40

Grid3D = list[list[list[Point]]]


class KDE3D(CentroidInitMethod, KDEBase):
    """Density-peak centroid initialisation on a nested three-dimensional grid.

    The grid has ``floor(cbrt(n))`` divisions per axis, and a grid cell is a
    peak when no cell within ``RAY_MIN`` indices on every axis has a higher
    density.
    """

    def __init__(
        self,
        data: Iterable[Point],
        k: int = 0,
        export_dir: Optional[PathLike] = None,
    ) -> None:
        CentroidInitMethod.__init__(self, data, k, export_dir)
        KDEBase.__init__(self, self.data)
        if self.dimensions != 3:
            raise ValueError("KDE3D works on three-dimensional points only")
        self.range_number_division = int(np.floor(np.cbrt(len(self.data))))
        self.range: list[float] = [0.0, 0.0, 0.0]
        self.step: list[float] = [0.0, 0.0, 0.0]
        self.num_points: list[int] = [0, 0, 0]

    def find_centroids(self) -> list[CentroidPoint]:
        return self.find_local_maxima(self.generate_grid())

    def generate_grid(self) -> Grid3D:
        """Grid indexed as ``grid[x][y][z]`` over the bounding box of the data."""
        mins = [min(p.coordinates[d] for p in self.data) for d in range(3)]
        maxs = [max(p.coordinates[d] for p in self.data) for d in range(3)]
        for d in range(3):
            self.range[d] = maxs[d] - mins[d]
            self.step[d] = self.range[d] / self.range_number_division
            self.num_points[d] = (
                1 if self.step[d] == 0 else int(self.range[d] / self.step[d]) + 1
            )
        nx, ny, nz = self.num_points
        return [
            [
                [
                    Point(
                        [
                            mins[0] + x * self.step[0],
                            mins[1] + y * self.step[1],
                            mins[2] + z * self.step[2],
                        ]
                    )
                    for z in range(nz)
                ]
                for y in range(ny)
            ]
            for x in range(nx)
        ]

    def find_local_maxima(self, grid: Grid3D) -> list[CentroidPoint]:
        """Centroids at the density peaks of ``grid``, adjusted towards ``k``."""
        cells = sum(len(column) for plane in grid for column in plane)
        if self.k > cells:
            raise ValueError("The grid has fewer points than the number of clusters.")
        iteration = 0
        while True:
            densities = np.array(
                [[[self.kde_value(p) for p in column] for column in plane] for plane in grid]
            )
            maxima = [
                grid[x][y][z]
                for x in range(len(grid))
                for y in range(len(grid[x]))
                for z in range(len(grid[x][y]))
                if self.is_local_maximum(densities, x, y, z)
            ]
            logger.debug("Iteration %d: %d local maxima", iteration, len(maxima))
            if len(maxima) < self.k:
                self.shrink_bandwidth(SHRINK_FACTOR)
                iteration += 1
                continue
            if len(maxima) > self.k:
                return MostDistantInit(maxima, self.k, self.export_dir).find_centroids()
            return [CentroidPoint(p.coordinates, i) for i, p in enumerate(maxima)]

    def is_local_maximum(self, densities: Sequence, x: int, y: int, z: int) -> bool:
        """True when no cell within the search radius has a higher density."""
        current = densities[x][y][z]
        for dx in range(-RAY_MIN, RAY_MIN + 1):
            for dy in range(-RAY_MIN, RAY_MIN + 1):
                for dz in range(-RAY_MIN, RAY_MIN + 1):
                    if dx == 0 and dy == 0 and dz == 0:
                        continue
                    nx, ny, nz = x + dx, y + dy, z + dz
                    if not 0 <= nx < len(densities):
                        continue
                    if not 0 <= ny < len(densities[nx]):
                        continue
                    if not 0 <= nz < len(densities[nx][ny]):
                        continue
                    if densities[nx][ny][nz] > current:
                        return False
        return True