"""The k-means driver: chooses initial centroids and fits them with a metric."""

from __future__ import annotations

import logging
from enum import IntEnum
from pathlib import Path
from typing import Optional, Union

from .centroid_init import (
    CentroidInitMethod,
    MostDistantInit,
    PathLike,
    RandomCentroidInit,
    export_points_csv,
)
from .kde import KDE
from .kde3d import KDE3D
from .metric import Metric
from .point import CentroidPoint, Point

logger = logging.getLogger(__name__)

_RULE = "-----------------------"


class CentroidInit(IntEnum):
    """How the initial centroids are chosen."""

    RANDOM = 0
    KDE = 1
    MOST_DISTANT = 2
    KDE_3D = 3


class KMeans:
    """Chooses ``num_clusters`` initial centroids from the metric's points and
    fits them with that metric.

    When ``export_dir`` is given, the initialisers write their CSV files there
    and fitting writes the final centroids to ``CentroidsFix.csv``.
    """

    def __init__(
        self,
        num_clusters: int,
        threshold: float,
        metric: Metric,
        centroid_init_method: Union[CentroidInit, int] = CentroidInit.RANDOM,
        export_dir: Optional[PathLike] = None,
    ) -> None:
        self.metric = metric
        self.threshold = float(threshold)
        self.num_clusters = int(num_clusters)
        self.export_dir = Path(export_dir) if export_dir is not None else None
        self._centroids: list[CentroidPoint] = []
        self._initialize_centroids(centroid_init_method)

    def _initialize_centroids(self, method: Union[CentroidInit, int]) -> None:
        try:
            method = CentroidInit(int(method))
        except ValueError:
            raise ValueError("Not a valid centroids initialization method!") from None
        if self.num_clusters <= 0:
            raise ValueError("The number of clusters must be positive")

        points = self.metric.points
        initializer: CentroidInitMethod
        if method is CentroidInit.RANDOM:
            initializer = RandomCentroidInit(points, self.num_clusters, self.export_dir)
        elif method is CentroidInit.KDE:
            initializer = KDE(points, self.num_clusters, self.export_dir)
        elif method is CentroidInit.MOST_DISTANT:
            initializer = MostDistantInit(points, self.num_clusters, self.export_dir)
        elif points and points[0].dimensions == 3:
            initializer = KDE3D(points, self.num_clusters, self.export_dir)
        else:
            raise ValueError("Invalid centroids initialization method")

        self._centroids.extend(initializer.find_centroids())

    @property
    def points(self) -> list[Point]:
        return self.metric.points

    @property
    def centroids(self) -> list[CentroidPoint]:
        return self._centroids

    def reset_centroids(self) -> None:
        """Drop the centroids and every point's assignment."""
        self._centroids.clear()
        self.metric.reset_centroids()

    def fit(self) -> None:
        """Fit the centroids to the data with the metric."""
        self.metric.set_centroids(self._centroids)
        self.metric.fit()
        if self.export_dir is not None:
            export_points_csv(self._centroids, self.export_dir / "CentroidsFix.csv")

    def report(self) -> str:
        """A text listing of the centroids and of each point's assignment."""
        lines = ["Fitting phase terminated", _RULE, "Centroids: "]
        lines.extend(str(c) for c in self._centroids)
        lines.extend([_RULE, "Points: "])
        for point in self.metric.points:
            if point.centroid is None:
                lines.append(f"{point} -> No centroid assigned.")
                continue
            lines.append(f"{point} -> Centroid: {point.centroid}")
            if not any(c == point.centroid for c in self._centroids):
                logger.error("Centroid not found!")
        return "\n".join(lines) + "\n"