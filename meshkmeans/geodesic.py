"""K-means on a mesh surface using Dijkstra geodesic distances between faces."""

from __future__ import annotations

import heapq
import logging
import math
from collections.abc import Iterable, Sequence
from typing import Union

from .mesh import Face, Mesh
from .metric import Metric
from .point import CentroidPoint, Point
from .point import distance as _distance

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 200


class GeodesicDijkstraMetric(Metric):
    """Clusters mesh faces by shortest paths over the face adjacency graph.

    An edge between two adjacent faces weighs the distance between their
    baricenters plus the sine of the angle between their normals, scaled by
    the average distance between adjacent baricenters. Each iteration snaps
    every centroid to its nearest face, labels every face with the centroid
    it is geodesically closest to, and moves each centroid to the mean
    baricenter of its faces.
    """

    def __init__(
        self,
        mesh: Mesh,
        threshold: float,
        data: Iterable[Point] = (),
    ) -> None:
        super().__init__((p.copy() for p in data), threshold)
        self.mesh = mesh
        self.distances: dict[int, list[float]] = {}
        self.avg_distances = 0.0
        self.iterations = 0

    @property
    def points(self) -> list[Point]:
        """Copies of the mesh face baricenters, in face order."""
        self.data = self.mesh.face_points()
        return self.data

    def _require_centroids(self) -> list[CentroidPoint]:
        if not self.centroids:
            raise RuntimeError("Centroids not set!")
        return self.centroids

    def average_adjacent_distance(self) -> float:
        """Mean distance between the baricenters of adjacent faces, each pair once."""
        total = 0.0
        pairs = 0
        faces = self.mesh.faces
        for face_id, face in enumerate(faces):
            for neighbour in self.mesh.face_adjacency(face_id):
                if face_id < neighbour:
                    total += _distance(face.baricenter, faces[neighbour].baricenter)
                    pairs += 1
        return total / pairs if pairs else 0.0

    def dihedral_angle(self, f1: Face, f2: Face) -> float:
        """Sine of the angle between the face normals, scaled by the average distance."""
        n1, n2 = f1.normal, f2.normal
        dot = sum(a * b for a, b in zip(n1.coordinates, n2.coordinates))
        denominator = n1.norm() * n2.norm()
        cos_theta = dot / denominator if denominator != 0 else math.nan
        if abs(cos_theta) > 1.0:
            cos_theta /= abs(cos_theta)
        theta = math.acos(cos_theta)
        return math.sin(theta) * self.avg_distances

    def find_closest_face(self, centroid: Union[Point, Sequence[float]]) -> int:
        """Index of the face whose baricenter is nearest to ``centroid``."""
        if not self.mesh.faces:
            raise ValueError("The mesh has no faces")
        return min(
            range(self.mesh.num_faces),
            key=lambda face_id: _distance(centroid, self.mesh.faces[face_id].baricenter),
        )

    def compute_distances(self, start_face: int) -> list[float]:
        """Shortest-path distances from ``start_face`` to every face; inf if unreachable."""
        count = self.mesh.num_faces
        if not 0 <= start_face < count:
            raise IndexError("Face index out of range")
        faces = self.mesh.faces
        distances = [math.inf] * count
        distances[start_face] = 0.0
        queue: list[tuple[float, int]] = [(0.0, start_face)]
        visited: set[int] = set()

        while queue:
            _, current = heapq.heappop(queue)
            if current in visited:
                continue
            visited.add(current)
            current_face = faces[current]
            for neighbour in self.mesh.face_adjacency(current):
                neighbour_face = faces[neighbour]
                weight = _distance(
                    current_face.baricenter, neighbour_face.baricenter
                ) + self.dihedral_angle(current_face, neighbour_face)
                candidate = distances[current] + weight
                if candidate < distances[neighbour]:
                    distances[neighbour] = candidate
                    heapq.heappush(queue, (candidate, neighbour))
        return distances

    def setup(self) -> None:
        """Snap each centroid to its nearest face and compute distances from there."""
        centroids = self._require_centroids()
        self.avg_distances = self.average_adjacent_distance()
        for index, centroid in enumerate(centroids):
            face_id = self.find_closest_face(centroid)
            centroid.coordinates = list(self.mesh.faces[face_id].baricenter.coordinates)
            self.distances[index] = self.compute_distances(face_id)

    def fit(self) -> None:
        """Alternate face labelling and centroid updates until the centroids settle."""
        centroids = self._require_centroids()
        mesh = self.mesh
        mesh.build_face_adjacency()

        iteration = 0
        converged = False
        while not converged:
            self.setup()

            for face_id in range(mesh.num_faces):
                best = -1
                best_distance = math.inf
                for index in range(len(centroids)):
                    d = self.distances[index][face_id]
                    if d < best_distance:
                        best_distance = d
                        best = index
                if mesh.face_cluster(face_id) != best:
                    mesh.set_face_cluster(face_id, best)

            dims = centroids[0].dimensions
            sums = [[0.0] * dims for _ in centroids]
            counts = [0] * len(centroids)
            for face_id, face in enumerate(mesh.faces):
                index = mesh.face_cluster(face_id)
                if not 0 <= index < len(centroids):
                    continue
                for dim, value in enumerate(face.baricenter.coordinates[:dims]):
                    sums[index][dim] += value
                counts[index] += 1

            for centroid, total, count in zip(centroids, sums, counts):
                centroid.coordinates = (
                    [value / count for value in total] if count else [0.0] * dims
                )

            converged = self._check_convergence(centroids, iteration)
            self.old_centroids = [c.copy() for c in centroids]
            iteration += 1

        self.iterations = iteration
        self.store_centroids()
        logger.info("K-Means converged after %d iterations.", iteration)

    def store_centroids(self) -> None:
        """Attach a copy of its cluster's centroid to every face baricenter."""
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

    def _check_convergence(self, centroids: list[CentroidPoint], iteration: int) -> bool:
        if iteration > MAX_ITERATIONS:
            return True
        if not self.old_centroids:
            return False
        moved = sum(_distance(c, o) for c, o in zip(centroids, self.old_centroids))
        return moved / len(centroids) <= self.threshold