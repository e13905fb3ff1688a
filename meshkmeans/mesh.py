"""Triangle meshes: OBJ loading, face adjacency, cluster labels and export."""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Union

from .point import Point

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _resolve_index(token: str, vertex_count: int) -> int:
    raw = token.split("/", 1)[0]
    try:
        index = int(raw)
    except ValueError:
        raise ValueError(f"Invalid face index: {token!r}") from None
    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = vertex_count + index
    else:
        raise ValueError("Face indices start at 1")
    if not 0 <= resolved < vertex_count:
        raise ValueError(f"Face index {index} refers to a missing vertex")
    return resolved


def parse_obj(lines: Iterable[str]) -> tuple[list[list[float]], list[tuple[int, int, int]]]:
    """Read vertex positions and triangles from OBJ text.

    Face indices come back zero-based; polygons are split into a fan of
    triangles. Groups, objects, normals and texture coordinates are ignored.
    """
    vertices: list[list[float]] = []
    faces: list[tuple[int, int, int]] = []
    for line in lines:
        fields = line.split("#", 1)[0].split()
        if not fields:
            continue
        keyword, args = fields[0], fields[1:]
        if keyword == "v":
            if len(args) < 3:
                raise ValueError("A vertex needs three coordinates")
            vertices.append([float(a) for a in args[:3]])
        elif keyword == "f":
            if len(args) < 3:
                raise ValueError("A face needs at least three vertices")
            indices = [_resolve_index(a, len(vertices)) for a in args]
            first = indices[0]
            for second, third in zip(indices[1:], indices[2:]):
                faces.append((first, second, third))
    return vertices, faces


def _coords(vertex: Union[Point, Sequence[float]]) -> list[float]:
    return list(vertex.coordinates) if isinstance(vertex, Point) else [float(c) for c in vertex]


class Face:
    """A triangle with its area, unit normal and baricenter."""

    def __init__(
        self,
        vertices: Sequence[int],
        mesh_vertices: Sequence[Union[Point, Sequence[float]]],
        id: int,
    ) -> None:
        self.vertices: list[int] = [int(v) for v in vertices]
        if len(self.vertices) != 3:
            raise ValueError("A face must have exactly three vertices")
        v0, v1, v2 = (Point(_coords(mesh_vertices[v])) for v in self.vertices)
        cross = (v1 - v0).cross(v2 - v0)
        length = cross.norm()
        if length == 0:
            self.normal = Point([math.nan] * cross.dimensions)
        else:
            self.normal = cross / length
        self.area: float = 0.5 * length
        self.baricenter = (v0 + v1 + v2) / 3
        self.baricenter.id = id

    @property
    def id(self) -> int:
        return self.baricenter.id


class Mesh:
    """Vertices, triangular faces, per-face cluster labels and face adjacency."""

    def __init__(self) -> None:
        self.vertices: list[Point] = []
        self.faces: list[Face] = []
        self._clusters: dict[int, int] = {}
        self._adjacency: dict[int, list[int]] = {}

    @classmethod
    def from_obj(cls, path: PathLike) -> "Mesh":
        """Load a mesh from an OBJ file."""
        with open(path, encoding="utf-8") as handle:
            try:
                vertices, faces = parse_obj(handle)
            except ValueError as exc:
                raise ValueError("Failed to load file") from exc
        if not faces:
            raise ValueError("Failed to load file")
        mesh = cls()
        mesh.vertices = [Point(coords, i) for i, coords in enumerate(vertices)]
        mesh.faces = [Face(tri, mesh.vertices, j) for j, tri in enumerate(faces)]
        return mesh

    def load_segmentation(self, path: PathLike) -> int:
        """Read one cluster label per line from a ``.seg`` file.

        Reading stops at the first line without a leading integer. Returns the
        number of clusters, one more than the largest label.
        """
        path = Path(path)
        if path.suffix != ".seg":
            raise ValueError("File must have .seg extension")
        max_cluster = 0
        with open(path, encoding="utf-8") as handle:
            for face_id, line in enumerate(handle):
                match = _LEADING_INT.match(line)
                if match is None:
                    break
                cluster = int(match.group(1))
                self.set_face_cluster(face_id, cluster)
                max_cluster = max(max_cluster, cluster)
        return max_cluster + 1

    def build_face_adjacency(self) -> None:
        """Link every face to the faces sharing at least one vertex with it."""
        vertex_faces: dict[int, set[int]] = {}
        for face in self.faces:
            for vertex in face.vertices:
                vertex_faces.setdefault(vertex, set()).add(face.id)
        self._adjacency = {}
        for face in self.faces:
            neighbours: set[int] = set()
            for vertex in face.vertices:
                neighbours |= vertex_faces[vertex]
            neighbours.discard(face.id)
            self._adjacency[face.id] = sorted(neighbours)

    def face_cluster(self, face: int) -> int:
        """Cluster label of a face, or -1 when it has none."""
        return self._clusters.get(face, -1)

    def set_face_cluster(self, face: int, cluster: int) -> None:
        self._clusters[face] = cluster

    def face_points(self) -> list[Point]:
        """Copies of the face baricenters, in face order."""
        return [face.baricenter.copy() for face in self.faces]

    def face_adjacency(self, face: int) -> list[int]:
        """Faces adjacent to ``face``; raises KeyError before adjacency is built."""
        return list(self._adjacency[face])

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    def add_vertex(self, vertex: Point) -> None:
        self.vertices.append(vertex)

    def add_face(self, face: Face) -> None:
        self.faces.append(face)

    def _vertex_lines(self) -> list[str]:
        return [
            "v " + " ".join(format(c, "g") for c in vertex.coordinates[:3]) + "\n"
            for vertex in self.vertices
        ]

    @staticmethod
    def _face_line(face: Face) -> str:
        return "f" + "".join(f" {v + 1}" for v in face.vertices) + "\n"

    def export_obj(self, path: PathLike, cluster: int) -> None:
        """Write the vertices and only the faces labelled ``cluster``."""
        with open(path, "w", encoding="utf-8") as handle:
            handle.writelines(self._vertex_lines())
            for face_id, face in enumerate(self.faces):
                if self.face_cluster(face_id) == cluster:
                    handle.write(self._face_line(face))
        logger.info("Exported mesh to %s", path)

    def export_grouped_obj(self, path: PathLike) -> None:
        """Write the whole mesh, starting a group whenever the cluster label changes."""
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("# Vertices\n")
            handle.writelines(self._vertex_lines())
            handle.write("# Faces grouped by clusters\n")
            current = -1
            for face_id, face in enumerate(self.faces):
                cluster = self.face_cluster(face_id)
                if cluster != current:
                    current = cluster
                    handle.write(f"\ng cluster_{current}\n")
                handle.write(self._face_line(face))
        logger.info("Exported grouped mesh to %s", path)

    def __str__(self) -> str:
        return "Vertices: \n" + "".join(f"{vertex}\n" for vertex in self.vertices)