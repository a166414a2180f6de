import numpy as np
import pytest

from biosensors.core.distance import functional_distance, wasserstein_distance
from biosensors.exceptions import ShapeMismatchError


def test_scenario_a_distances(scenario_a):
    curves, grid, _ = scenario_a
    expected = np.array([[0.0, 1.0, 2.0], [1.0, 0.0, 1.0], [2.0, 1.0, 0.0]])
    np.testing.assert_allclose(functional_distance(curves, grid), expected)


def test_self_distance_symmetric_zero_diagonal(random_curves):
    curves, grid, _ = random_curves
    d = functional_distance(curves, grid)
    assert d.shape == (20, 20)
    np.testing.assert_array_equal(d, d.T)
    np.testing.assert_array_equal(np.diag(d), 0.0)
    assert np.all(d >= 0)


def test_cross_distance_matches_self_distance_rows(random_curves):
    curves, grid, _ = random_curves
    full = functional_distance(curves, grid)
    cross = functional_distance(curves, grid, other=curves[[4, 0, 11]])
    assert cross.shape == (3, 20)
    np.testing.assert_allclose(cross, full[[4, 0, 11]])


def test_single_query_curve_as_vector(scenario_a):
    curves, grid, _ = scenario_a
    cross = functional_distance(curves, grid, other=np.array([0.5, 0.5]))
    np.testing.assert_allclose(cross, [[0.5, 0.5, 1.5]])


def test_distance_is_not_normalized_by_grid_length():
    grid = np.array([0.0, 2.0])
    d = functional_distance(np.array([[0.0, 0.0], [1.0, 1.0]]), grid)
    assert d[0, 1] == pytest.approx(np.sqrt(2.0))


def test_grid_width_mismatch():
    with pytest.raises(ShapeMismatchError):
        functional_distance(np.zeros((3, 4)), np.linspace(0, 1, 5))
    with pytest.raises(ShapeMismatchError):
        functional_distance(np.zeros((3, 4)), np.linspace(0, 1, 4), other=np.zeros((2, 3)))


def test_wasserstein_distance_of_shifted_quantiles():
    grid = np.linspace(0, 1, 11)
    a = np.vstack([grid, 2 * grid])
    b = a + np.array([[1.0], [0.5]])
    np.testing.assert_allclose(wasserstein_distance(a, b, grid), [1.0, 0.5])


def test_wasserstein_distance_shape_mismatch():
    grid = np.linspace(0, 1, 5)
    with pytest.raises(ShapeMismatchError):
        wasserstein_distance(np.zeros((2, 5)), np.zeros((3, 5)), grid)
