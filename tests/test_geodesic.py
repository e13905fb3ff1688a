import math

import pytest

from meshkmeans.geodesic import MAX_ITERATIONS, GeodesicDijkstraMetric
from meshkmeans.kmeans import CentroidInit, KMeans
from meshkmeans.mesh import Face, Mesh
from meshkmeans.point import CentroidPoint, Point


def _build(vertices, triangles):
    mesh = Mesh()
    for i, coords in enumerate(vertices):
        mesh.add_vertex(Point(coords, i))
    for j, tri in enumerate(triangles):
        mesh.add_face(Face(tri, mesh.vertices, j))
    return mesh


def strip_mesh(quads=6):
    vertices = []
    for i in range(quads + 1):
        vertices.append([float(i), 0.0, 0.0])
        vertices.append([float(i), 1.0, 0.0])
    triangles = []
    for i in range(quads):
        b, t, nb, nt = 2 * i, 2 * i + 1, 2 * i + 2, 2 * i + 3
        triangles.append((b, nb, nt))
        triangles.append((b, nt, t))
    return _build(vertices, triangles)


def square_mesh():
    vertices = [[0, 0, 0], [3, 0, 0], [3, 3, 0], [0, 3, 0]]
    return _build(vertices, [(0, 1, 2), (0, 2, 3)])


def folded_mesh():
    vertices = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]]
    return _build(vertices, [(0, 1, 2), (0, 1, 3)])


def test_average_adjacent_distance_square():
    mesh = square_mesh()
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    assert metric.average_adjacent_distance() == pytest.approx(math.sqrt(2))


def test_average_adjacent_distance_without_neighbours_is_zero():
    mesh = _build([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [(0, 1, 2)])
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    assert metric.average_adjacent_distance() == 0.0


def test_dihedral_angle_perpendicular_faces_scales_average():
    mesh = folded_mesh()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    metric.avg_distances = 2.0
    assert metric.dihedral_angle(mesh.faces[0], mesh.faces[1]) == pytest.approx(2.0)


def test_dihedral_angle_coplanar_faces_is_zero():
    mesh = strip_mesh(2)
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    metric.avg_distances = 5.0
    assert metric.dihedral_angle(mesh.faces[0], mesh.faces[3]) == pytest.approx(0.0)


def test_compute_distances_needs_adjacency():
    metric = GeodesicDijkstraMetric(strip_mesh(2), 0.05)
    with pytest.raises(KeyError):
        metric.compute_distances(0)


def test_compute_distances_out_of_range():
    mesh = strip_mesh(2)
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    with pytest.raises(IndexError):
        metric.compute_distances(mesh.num_faces)


def test_compute_distances_square_matches_adjacent_distance():
    mesh = square_mesh()
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    distances = metric.compute_distances(0)
    assert distances[0] == 0.0
    assert distances[1] == pytest.approx(metric.average_adjacent_distance())


def test_compute_distances_invariants_on_strip():
    mesh = strip_mesh(5)
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    first = metric.compute_distances(0)
    last_id = mesh.num_faces - 1
    last = metric.compute_distances(last_id)
    assert first[0] == 0.0
    assert all(math.isfinite(d) for d in first)
    assert first[last_id] == pytest.approx(last[0])
    assert first[last_id] == max(first)
    for face_id in range(mesh.num_faces):
        assert first[face_id] >= math.dist(
            mesh.faces[0].baricenter.coordinates,
            mesh.faces[face_id].baricenter.coordinates,
        ) - 1e-9


def test_compute_distances_unreachable_is_infinite():
    vertices = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [5, 5, 0], [6, 5, 0], [5, 6, 0]]
    mesh = _build(vertices, [(0, 1, 2), (3, 4, 5)])
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    assert metric.compute_distances(0)[1] == math.inf


def test_find_closest_face():
    mesh = strip_mesh(4)
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    target = mesh.faces[5].baricenter
    assert metric.find_closest_face(target) == 5
    assert metric.find_closest_face(target.coordinates) == 5


def test_find_closest_face_empty_mesh():
    metric = GeodesicDijkstraMetric(Mesh(), 0.05)
    with pytest.raises(ValueError):
        metric.find_closest_face([0.0, 0.0, 0.0])


def test_points_are_face_baricenters():
    mesh = strip_mesh(3)
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    points = metric.points
    assert len(points) == mesh.num_faces
    assert all(p == f.baricenter for p, f in zip(points, mesh.faces))
    assert [p.id for p in points] == list(range(mesh.num_faces))


def test_setup_snaps_centroids_to_faces():
    mesh = strip_mesh(4)
    mesh.build_face_adjacency()
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    target = mesh.faces[2].baricenter.coordinates
    centroid = CentroidPoint([target[0] + 0.01, target[1], target[2]], 0)
    metric.set_centroids([centroid])
    metric.setup()
    assert centroid == mesh.faces[2].baricenter
    assert centroid.coordinates == pytest.approx(target)
    assert metric.distances[0][2] == 0.0
    assert metric.avg_distances == pytest.approx(metric.average_adjacent_distance())


def test_fit_without_centroids_raises():
    metric = GeodesicDijkstraMetric(strip_mesh(2), 0.05)
    with pytest.raises(RuntimeError):
        metric.fit()
    metric.set_centroids([])
    with pytest.raises(RuntimeError):
        metric.fit()


def test_fit_separates_ends_of_strip():
    mesh = strip_mesh(6)
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    first = mesh.faces[0].baricenter
    last = mesh.faces[-1].baricenter
    centroids = [CentroidPoint(first.coordinates, 0), CentroidPoint(last.coordinates, 1)]
    metric.set_centroids(centroids)
    metric.fit()
    labels = [mesh.face_cluster(i) for i in range(mesh.num_faces)]
    assert set(labels) == {0, 1}
    assert labels[0] == 0
    assert labels[-1] == 1
    assert 1 <= metric.iterations <= MAX_ITERATIONS + 2
    for face_id, face in enumerate(mesh.faces):
        assigned = centroids[labels[face_id]]
        assert face.baricenter.centroid.coordinates == pytest.approx(assigned.coordinates)


def test_store_centroids_skips_invalid_labels():
    mesh = strip_mesh(1)
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    centroid = CentroidPoint([0.5, 0.5, 0.0], 0)
    metric.set_centroids([centroid])
    mesh.set_face_cluster(0, 0)
    mesh.set_face_cluster(1, 7)
    metric.store_centroids()
    assert mesh.faces[0].baricenter.centroid.coordinates == centroid.coordinates
    assert mesh.faces[1].baricenter.centroid is None


def test_kmeans_with_geodesic_metric():
    mesh = strip_mesh(6)
    metric = GeodesicDijkstraMetric(mesh, 0.05)
    kmeans = KMeans(2, 0.05, metric, CentroidInit.MOST_DISTANT)
    assert len(kmeans.centroids) == 2
    kmeans.fit()
    labels = [mesh.face_cluster(i) for i in range(mesh.num_faces)]
    assert set(labels) == {0, 1}
    assert labels[0] != labels[-1]