import random
import statistics

import numpy as np
import pytest

from meshkmeans.kde_base import KDEBase, mean_and_std
from meshkmeans.point import Point


def _cloud(n=40, seed=4, offset=(0.0, 0.0)):
    rng = random.Random(seed)
    return [
        Point([rng.gauss(offset[0], 1.0), rng.gauss(offset[1], 0.7)], i)
        for i in range(n)
    ]


def test_mean_and_std_match_statistics():
    values = [1.0, 2.0, 3.0, 4.0, 10.0]
    data = [Point([v, -v]) for v in values]
    mean, std = mean_and_std(data, 0)
    assert mean == pytest.approx(statistics.mean(values))
    assert std == pytest.approx(statistics.pstdev(values))
    mean1, std1 = mean_and_std(data, 1)
    assert mean1 == pytest.approx(-statistics.mean(values))
    assert std1 == pytest.approx(statistics.pstdev(values))


def test_mean_and_std_empty_raises():
    with pytest.raises(ValueError):
        mean_and_std([], 0)


def test_empty_data_raises():
    with pytest.raises(ValueError):
        KDEBase([])


def test_bandwidth_is_diagonal_and_positive():
    kde = KDEBase(_cloud())
    h = kde.h
    assert h.shape == (2, 2)
    assert h[0, 1] == 0.0 and h[1, 0] == 0.0
    assert h[0, 0] > 0.0 and h[1, 1] > 0.0


def test_inverse_square_root_consistency():
    kde = KDEBase(_cloud())
    product = kde.h_sqrt_inv @ kde.h @ kde.h_sqrt_inv
    assert np.allclose(product, np.eye(2))
    assert kde.h_det_sqrt**2 == pytest.approx(np.linalg.det(kde.h))


def test_rule_of_thumb_returns_current_matrix():
    kde = KDEBase(_cloud())
    again = kde.bandwidth_rule_of_thumb()
    assert np.allclose(again, kde.h)


def test_shrink_scales_diagonal_and_transformed_points():
    kde = KDEBase(_cloud())
    old_h = kde.h.copy()
    old_points = kde.transformed_points.copy()
    kde.shrink_bandwidth(0.4)
    assert np.allclose(kde.h, old_h * 0.4)
    assert np.allclose(kde.transformed_points, old_points / np.sqrt(0.4))


def test_density_is_translation_invariant():
    base = KDEBase(_cloud())
    shifted = KDEBase(_cloud(offset=(5.0, -3.0)))
    for query in ([0.0, 0.0], [1.0, -0.5], [-2.0, 1.0]):
        moved = [query[0] + 5.0, query[1] - 3.0]
        assert shifted.kde_value(moved) == pytest.approx(base.kde_value(query), rel=1e-6)


def test_density_integrates_to_one():
    kde = KDEBase(_cloud())
    step = 0.2
    grid = np.arange(-8.0, 8.0, step)
    total = sum(kde.kde_value([x, y]) for x in grid for y in grid) * step * step
    assert total == pytest.approx(1.0, abs=1e-2)


def test_density_higher_near_data():
    kde = KDEBase(_cloud())
    assert kde.kde_value(Point([0.0, 0.0])) > kde.kde_value(Point([20.0, 20.0]))


def test_query_dimension_checked():
    kde = KDEBase(_cloud())
    with pytest.raises(ValueError):
        kde.kde_value([0.0, 0.0, 0.0])