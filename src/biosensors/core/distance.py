"""
Integral (L2) distances between curves sampled on a common grid.

The distance between two curves a and b is

    d(a, b) = sqrt( ∫ (a(t) - b(t))² dt )

computed with the trapezoid rule on the shared grid, without normalizing
by the grid length. The same distance between quantile functions is the
2-Wasserstein distance between the underlying distributions.
"""

from typing import Optional
import numpy as np
from scipy import integrate

from biosensors.exceptions import ShapeMismatchError

__all__ = [
    "functional_distance",
    "wasserstein_distance",
]


def _check_curves(curves: np.ndarray, grid: np.ndarray, name: str) -> np.ndarray:
    curves = np.asarray(curves, dtype=float)
    if curves.ndim == 1:
        curves = curves.reshape(1, -1)
    if curves.ndim != 2:
        raise ShapeMismatchError(f"'{name}' must be a 2-D array of curves")
    if curves.shape[1] != grid.shape[0]:
        raise ShapeMismatchError(
            f"'{name}' has {curves.shape[1]} columns but the grid has {grid.shape[0]} points"
        )
    return curves


def _as_grid(grid: np.ndarray) -> np.ndarray:
    grid = np.asarray(grid, dtype=float)
    if grid.ndim == 2 and 1 in grid.shape:
        grid = grid.ravel()
    if grid.ndim != 1:
        raise ShapeMismatchError("grid must be a vector")
    return grid


def functional_distance(
    curves: np.ndarray,
    grid: np.ndarray,
    other: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Pairwise integral distance matrix.

    Args:
        curves: (N, G) array, one curve per row
        grid: (G,) sampling grid shared by all curves
        other: Optional (M, G) array of query curves

    Returns:
        (N, N) self-distance matrix if ``other`` is None, otherwise the
        (M, N) matrix of distances from each query curve to each curve

    Raises:
        ShapeMismatchError: If curve widths disagree with the grid
    """
    grid = _as_grid(grid)
    curves = _check_curves(curves, grid, "curves")
    query = curves if other is None else _check_curves(other, grid, "other")

    distances = np.empty((query.shape[0], curves.shape[0]))
    for i, row in enumerate(query):
        sq = np.square(row - curves)
        distances[i] = np.sqrt(integrate.trapezoid(sq, x=grid, axis=1))

    return distances


def wasserstein_distance(
    quantiles_a: np.ndarray,
    quantiles_b: np.ndarray,
    grid: np.ndarray,
) -> np.ndarray:
    """
    Row-wise 2-Wasserstein distance between distributions given by quantile functions.

    Args:
        quantiles_a: (N, G) quantile functions on ``grid``
        quantiles_b: (N, G) quantile functions on ``grid``
        grid: (G,) probability levels

    Returns:
        (N,) distances between matching rows
    """
    grid = _as_grid(grid)
    quantiles_a = _check_curves(quantiles_a, grid, "quantiles_a")
    quantiles_b = _check_curves(quantiles_b, grid, "quantiles_b")

    if quantiles_a.shape != quantiles_b.shape:
        raise ShapeMismatchError(
            f"Quantile arrays differ in shape: {quantiles_a.shape} vs {quantiles_b.shape}"
        )

    sq = np.square(quantiles_a - quantiles_b)
    return np.sqrt(integrate.trapezoid(sq, x=grid, axis=1))
