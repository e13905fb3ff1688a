"""Common base for the distance metrics that drive k-means fitting."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Optional

from .point import CentroidPoint, Point


class Metric(ABC):
    """Holds the data points, the current centroids and a convergence threshold.

    ``centroids`` is a reference to a list owned by the caller, so updates made
    while fitting are seen by whoever set it.
    """

    def __init__(self, data: Iterable[Point] = (), threshold: float = 0.0) -> None:
        self.data: list[Point] = list(data)
        self.threshold = float(threshold)
        self.old_centroids: list[CentroidPoint] = []
        self.centroids: Optional[list[CentroidPoint]] = None

    def set_centroids(self, centroids: list[CentroidPoint]) -> None:
        """Use ``centroids`` (the same list, not a copy) for fitting."""
        self.centroids = centroids

    @property
    def points(self) -> list[Point]:
        """The data points being clustered."""
        return self.data

    def reset_centroids(self) -> None:
        """Forget the previous centroids and every point's assignment."""
        self.old_centroids = []
        for point in self.data:
            point.centroid = None

    @abstractmethod
    def setup(self) -> None:
        """Prepare any state needed before an iteration."""

    @abstractmethod
    def fit(self) -> None:
        """Run the clustering until convergence."""

    @abstractmethod
    def store_centroids(self) -> None:
        """Record the final centroids where they are needed."""