"""Shared kernel density estimation with a rule-of-thumb bandwidth."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Union

import numpy as np

from .point import Point


def mean_and_std(data: Sequence[Point], dim: int) -> tuple[float, float]:
    """Mean and population standard deviation of one coordinate."""
    values = [p.coordinates[dim] for p in data]
    if not values:
        raise ValueError("Cannot compute statistics of an empty dataset")
    n = len(values)
    mean = sum(values) / n
    variance = sum(v * v for v in values) / n - mean * mean
    return mean, math.sqrt(max(variance, 0.0))


class KDEBase:
    """Gaussian kernel density estimate over a set of points."""

    def __init__(self, data: Iterable[Point]) -> None:
        points = list(data)
        if not points:
            raise ValueError("Kernel density estimation needs at least one point")
        self.data: list[Point] = points
        self.dimensions = points[0].dimensions
        self._matrix = np.array([p.coordinates for p in points], dtype=float)
        self.h: np.ndarray = self.bandwidth_rule_of_thumb()

    def bandwidth_rule_of_thumb(self) -> np.ndarray:
        """Set and return a diagonal bandwidth matrix from Scott-like scaling."""
        n = len(self.data)
        d = self.dimensions
        factor = n ** (-1.0 / (d + 4)) * (4.0 / (d + 2)) ** (1.0 / (d + 4))
        bandwidths = np.array([mean_and_std(self.data, i)[1] * factor for i in range(d)])
        matrix = np.diag(bandwidths**2)
        self._set_bandwidth(matrix)
        return matrix

    def shrink_bandwidth(self, factor: float) -> None:
        """Scale the diagonal of the bandwidth matrix by ``factor``."""
        matrix = self.h.copy()
        matrix[np.diag_indices_from(matrix)] *= factor
        self._set_bandwidth(matrix)

    def _set_bandwidth(self, matrix: np.ndarray) -> None:
        self.h = matrix
        with np.errstate(divide="ignore", invalid="ignore"):
            eigenvalues, eigenvectors = np.linalg.eigh(matrix)
            self.h_sqrt_inv = (eigenvectors / np.sqrt(eigenvalues)) @ eigenvectors.T
            self.h_det_sqrt = math.sqrt(max(float(np.linalg.det(matrix)), 0.0))
            self.transformed_points = self._matrix @ self.h_sqrt_inv.T

    def kde_value(self, x: Union[Point, Sequence[float]]) -> float:
        """Estimated density at ``x``."""
        coords = np.asarray(x.coordinates if isinstance(x, Point) else x, dtype=float)
        if coords.size != self.dimensions:
            raise ValueError("Query point has the wrong dimensionality")
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            query = self.h_sqrt_inv @ coords
            diffs = self.transformed_points - query
            squared = np.einsum("ij,ij->i", diffs, diffs)
            coeff = 1.0 / math.pow(2.0 * math.pi, self.dimensions / 2.0)
            total = coeff * float(np.exp(-0.5 * squared).sum())
            return total / (len(self.transformed_points) * self.h_det_sqrt)