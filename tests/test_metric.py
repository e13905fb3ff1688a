import pytest

from meshkmeans.metric import Metric
from meshkmeans.point import CentroidPoint, Point


class _CountingMetric(Metric):
    def __init__(self, data=(), threshold=0.0):
        super().__init__(data, threshold)
        self.calls = []

    def setup(self):
        self.calls.append("setup")

    def fit(self):
        self.setup()
        self.old_centroids = [c.copy() for c in self.centroids]
        self.store_centroids()

    def store_centroids(self):
        self.calls.append("store")


def test_metric_is_abstract():
    with pytest.raises(TypeError):
        Metric([], 0.1)


def test_points_hold_same_objects_in_new_list():
    data = [Point([0, 0]), Point([1, 1])]
    metric = _CountingMetric(data, 0.5)
    assert metric.points is not data
    assert metric.points[0] is data[0]
    assert metric.threshold == 0.5
    assert metric.centroids is None


def test_set_centroids_keeps_reference():
    metric = _CountingMetric([Point([0, 0])])
    centroids = [CentroidPoint([0, 0], 0)]
    metric.set_centroids(centroids)
    centroids.append(CentroidPoint([1, 1], 1))
    assert metric.centroids is centroids
    assert len(metric.centroids) == 2


def test_reset_centroids_clears_state():
    data = [Point([0, 0]), Point([2, 2])]
    metric = _CountingMetric(data)
    centroid = CentroidPoint([1, 1], 0)
    metric.set_centroids([centroid])
    for point in data:
        point.set_centroid(centroid)
    metric.fit()
    assert len(metric.old_centroids) == 1
    assert metric.calls == ["setup", "store"]
    metric.reset_centroids()
    assert metric.old_centroids == []
    assert all(point.centroid is None for point in data)