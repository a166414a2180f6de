import numpy as np
import pytest

from biosensors.core.regression.bandwidth import CrossValidatedBandwidth


@pytest.fixture
def partitions():
    train = np.column_stack([np.arange(0, 15), np.arange(5, 20)])
    validate = np.column_stack([np.arange(15, 20), np.arange(0, 5)])
    return train, validate


def test_select_returns_minimum_total_error(random_curves, partitions):
    curves, grid, y = random_curves
    train, validate = partitions
    candidates = [0.05, 0.2, 0.8, 5.0]

    selector = CrossValidatedBandwidth()
    h = selector.select(curves, grid, y, candidates, train, validate)

    errors = dict(selector.results)
    assert h in candidates
    assert len(errors) == len(candidates)
    assert selector.optimal_error == pytest.approx(min(errors.values()))
    assert errors[h] == pytest.approx(selector.optimal_error)


def test_results_empty_before_select():
    selector = CrossValidatedBandwidth(kernel="triweight")
    assert selector.results == []
    assert selector.optimal_bandwidth is None


def test_select_requires_folds(random_curves):
    curves, grid, y = random_curves
    with pytest.raises(RuntimeError):
        CrossValidatedBandwidth().select(curves, grid, y, [0.1, 1.0], None, None)
