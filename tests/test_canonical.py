import numpy as np
import pytest

from biosensors.core.regression.canonical import canonical_rows, find_row
from biosensors.exceptions import ShapeMismatchError


def test_rows_within_tolerance_merge():
    canonical, index = canonical_rows(np.array([[1.0, 2.0], [1.001, 2.0015]]))
    np.testing.assert_array_equal(canonical, [[1.0, 2.0]])
    np.testing.assert_array_equal(index, [0, 0])


def test_rows_beyond_tolerance_stay_distinct():
    canonical, index = canonical_rows(np.array([[1.0, 2.0], [1.0, 2.003]]))
    assert canonical.shape == (2, 2)
    np.testing.assert_array_equal(index, [0, 1])


def test_order_by_first_then_remaining_coordinates():
    rows = np.array([[3.0, 1.0], [1.0, 2.0], [1.0, 1.0], [2.0, 0.0]])
    canonical, index = canonical_rows(rows)
    np.testing.assert_array_equal(canonical, [[1.0, 1.0], [1.0, 2.0], [2.0, 0.0], [3.0, 1.0]])
    np.testing.assert_array_equal(index, [3, 1, 0, 2])
    np.testing.assert_array_equal(canonical[index], rows)


def test_blocks_are_stacked_in_order():
    pred = np.array([[0.5], [2.0]])
    fit = np.array([[0.0], [1.0], [2.0005]])
    mean = fit.mean(axis=0, keepdims=True)
    canonical, index = canonical_rows(pred, fit, mean)
    assert index.shape == (6,)
    np.testing.assert_allclose(canonical[index].ravel(), [0.5, 2.0, 0.0, 1.0, 2.0, 1.0], atol=0.002)
    assert index[1] == index[4]


def test_result_is_deterministic():
    rng = np.random.default_rng(3)
    rows = np.round(rng.uniform(0, 1, size=(40, 3)), 2)
    first = canonical_rows(rows)
    second = canonical_rows(rows.copy())
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])


def test_blocks_must_share_width():
    with pytest.raises(ShapeMismatchError):
        canonical_rows(np.zeros((2, 2)), np.zeros((2, 3)))


def test_find_row():
    canonical = np.array([[0.0, 0.0], [1.0, 1.0]])
    assert find_row(canonical, np.array([1.0015, 0.999])) == 1
    assert find_row(canonical, np.array([5.0, 5.0])) == 0


def test_difference_equal_to_tolerance_merges():
    canonical, index = canonical_rows(np.array([[0.0], [0.002]]))
    np.testing.assert_array_equal(canonical, [[0.0]])
    np.testing.assert_array_equal(index, [0, 0])


def test_difference_just_above_tolerance_stays_distinct():
    canonical, index = canonical_rows(np.array([[0.0], [0.0021]]))
    np.testing.assert_array_equal(canonical, [[0.0], [0.0021]])
    np.testing.assert_array_equal(index, [0, 1])


def test_find_row_at_tolerance_boundary():
    canonical = np.array([[-1.0], [0.0]])
    assert find_row(canonical, np.array([0.002])) == 1
    assert find_row(canonical, np.array([-0.002])) == 1
    # no match falls back to the first row
    assert find_row(canonical, np.array([0.0021])) == 0
