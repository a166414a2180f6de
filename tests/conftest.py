"""Shared fixtures for the regression tests."""

import numpy as np
import pytest


@pytest.fixture
def scenario_a():
    """Three straight curves on a two-point grid with a linear outcome."""
    grid = np.array([0.0, 1.0])
    curves = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    outcome = np.array([1.0, 2.0, 3.0])
    return curves, grid, outcome


@pytest.fixture
def random_curves():
    """Noisy sine curves with an outcome driven by their amplitude."""
    rng = np.random.default_rng(7)
    grid = np.linspace(0.0, 1.0, 25)
    amplitude = rng.uniform(0.5, 2.0, size=20)
    curves = amplitude[:, np.newaxis] * np.sin(2 * np.pi * grid) + rng.normal(0, 0.05, (20, 25))
    outcome = 3.0 * amplitude + rng.normal(0, 0.1, size=20)
    return curves, grid, outcome


@pytest.fixture
def quantile_grid():
    return np.linspace(0.0, 1.0, 11)
