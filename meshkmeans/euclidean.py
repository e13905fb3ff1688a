"""Euclidean k-means fitting accelerated by a kd-tree filtering pass."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Sequence
from typing import Optional, Union

from .kdtree import KdNode, KdTree
from .mesh import Mesh
from .metric import Metric
from .point import CentroidPoint, Point
from .point import distance as _distance

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100


class EuclideanMetric(Metric):
    """Lloyd's k-means under the Euclidean distance, using kd-tree filtering.

    The data points are copied on construction; after fitting, every copy in
    ``points`` refers to the centroid it was assigned to. When a mesh is
    given, the data are taken to be its face baricenters and the final
    assignment is written back to the mesh's face clusters.
    """

    def __init__(
        self,
        data: Iterable[Point],
        threshold: float,
        mesh: Optional[Mesh] = None,
    ) -> None:
        super().__init__((p.copy() for p in data), threshold)
        self.mesh = mesh
        self.kdtree = KdTree(self.data)

    @staticmethod
    def distance(
        a: Union[Point, Sequence[float]], b: Union[Point, Sequence[float]]
    ) -> float:
        """Straight-line distance between two points of the same dimension."""
        return _distance(a, b)

    def setup(self) -> None:
        """Nothing needs preparing between iterations for this metric."""

    def fit(self) -> None:
        """Iterate filtering passes until the centroids stop moving."""
        centroids = self._require_centroids()
        iteration = 0
        converged = False
        while not converged:
            self._filter(centroids)
            converged = self._check_convergence(centroids, iteration)
            self.old_centroids = [c.copy() for c in centroids]
            self.setup()
            iteration += 1

        if self.mesh is not None:
            self.update_face_clusters()
            self.store_centroids()

    def store_centroids(self) -> None:
        """Attach a copy of its cluster's centroid to every face baricenter."""
        if self.mesh is None:
            return
        centroids = self._require_centroids()
        for face_id, face in enumerate(self.mesh.faces):
            index = self.mesh.face_cluster(face_id)
            if not 0 <= index < len(centroids):
                logger.warning(
                    "Face %d has not a valid cluster (%d). Skipping.", face_id, index
                )
                continue
            centroid = centroids[index]
            face.baricenter.set_centroid(Point(centroid.coordinates, centroid.id))

    def update_face_clusters(self) -> None:
        """Label every mesh face with the index of its nearest centroid."""
        if self.mesh is None:
            raise ValueError("No mesh to update")
        centroids = self._require_centroids()
        for face_id, face in enumerate(self.mesh.faces):
            best = -1
            best_distance = sys.float_info.max
            for index, centroid in enumerate(centroids):
                d = _distance(face.baricenter, centroid)
                if d < best_distance:
                    best_distance = d
                    best = index
            self.mesh.set_face_cluster(face_id, best)

    def _require_centroids(self) -> list[CentroidPoint]:
        if self.centroids is None:
            raise RuntimeError("Centroids not set!")
        if not self.centroids:
            raise ValueError("At least one centroid is needed")
        return self.centroids

    def _filter(self, centroids: list[CentroidPoint]) -> None:
        for centroid in centroids:
            centroid.reset_count()
        self._filter_node(self.kdtree.root, list(centroids))
        for centroid in centroids:
            centroid.normalize()

    def _filter_node(
        self, node: Optional[KdNode], candidates: list[CentroidPoint]
    ) -> None:
        if node is None:
            return

        if node.is_leaf():
            closest = self._closest(candidates, Point(node.wgt_cent))
            closest.accumulate(node)
            if node.point is not None:
                node.point.set_centroid(closest)
            return

        midpoint = Point((lo + hi) / 2.0 for lo, hi in zip(node.cell_min, node.cell_max))
        closest = self._closest(candidates, midpoint)
        remaining = [
            z
            for z in candidates
            if z is closest or not self._is_farther(z, closest, node)
        ]

        if len(remaining) == 1:
            owner = remaining[0]
            owner.accumulate(node)
            self._assign(node.left, owner)
            self._assign(node.right, owner)
        else:
            self._filter_node(node.left, remaining)
            self._filter_node(node.right, remaining)

    @staticmethod
    def _closest(candidates: list[CentroidPoint], target: Point) -> CentroidPoint:
        return min(candidates, key=lambda c: _distance(c, target))

    @staticmethod
    def _is_farther(z: Point, z_star: Point, node: KdNode) -> bool:
        """True when every point of the cell is closer to ``z_star`` than to ``z``."""
        vertex = Point(
            hi if u >= 0 else lo
            for u, lo, hi in zip((z - z_star).coordinates, node.cell_min, node.cell_max)
        )
        return _distance(z, vertex) > _distance(z_star, vertex)

    def _assign(self, node: Optional[KdNode], centroid: CentroidPoint) -> None:
        if node is None:
            return
        if node.is_leaf():
            if node.point is not None:
                node.point.set_centroid(centroid)
            return
        self._assign(node.left, centroid)
        self._assign(node.right, centroid)

    def _check_convergence(self, centroids: list[CentroidPoint], iteration: int) -> bool:
        if iteration > MAX_ITERATIONS:
            return True
        if not self.old_centroids:
            return False
        moved = sum(_distance(c, o) for c, o in zip(centroids, self.old_centroids))
        return moved / len(centroids) <= self.threshold