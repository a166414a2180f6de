import numpy as np
import pytest

from biosensors.core.integration import cumulative_trapezoid, trapezoid
from biosensors.exceptions import ShapeMismatchError


@pytest.mark.parametrize("c", [0.0, 1.0, -2.5, 7.25])
def test_trapezoid_of_constant_is_constant(c):
    t = np.array([0.0, 0.5, 1.0])
    assert trapezoid(t, np.full(3, c)) == pytest.approx(c)


def test_trapezoid_linear_on_uneven_grid():
    t = np.array([0.0, 0.1, 0.4, 1.0])
    assert trapezoid(t, 2 * t) == pytest.approx(1.0)


def test_trapezoid_row_and_column_orientation_agree():
    t = np.linspace(0, 2, 9)
    y = t ** 2
    flat = trapezoid(t, y)
    assert trapezoid(t.reshape(1, -1), y.reshape(1, -1)) == pytest.approx(flat)
    assert trapezoid(t.reshape(-1, 1), y.reshape(-1, 1)) == pytest.approx(flat)


def test_trapezoid_matrix_gives_one_value_per_column():
    t = np.array([0.0, 0.5, 1.0])
    x = np.column_stack([t, t])
    y = np.column_stack([np.ones(3), 2 * t])
    np.testing.assert_allclose(trapezoid(x, y), [1.0, 1.0])


def test_trapezoid_shape_mismatch():
    with pytest.raises(ShapeMismatchError):
        trapezoid(np.zeros(3), np.zeros(4))
    with pytest.raises(ValueError):
        trapezoid(np.zeros((1, 3)), np.zeros((3, 1)))


def test_cumulative_trapezoid_starts_at_zero():
    t = np.array([0.0, 0.5, 1.0])
    np.testing.assert_allclose(cumulative_trapezoid(t, 2 * t), [0.0, 0.25, 1.0])


def test_cumulative_trapezoid_keeps_row_orientation():
    t = np.array([[0.0, 0.2, 1.0]])
    result = cumulative_trapezoid(t, np.ones((1, 3)))
    assert result.shape == (1, 3)
    np.testing.assert_allclose(result, [[0.0, 0.2, 1.0]])


def test_cumulative_trapezoid_last_value_matches_total():
    t = np.linspace(0, 1, 17)
    y = np.exp(t)
    assert cumulative_trapezoid(t, y)[-1] == pytest.approx(trapezoid(t, y))


def test_cumulative_trapezoid_shape_mismatch():
    with pytest.raises(ShapeMismatchError):
        cumulative_trapezoid(np.zeros(3), np.zeros(2))
