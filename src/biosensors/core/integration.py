"""
Trapezoidal integration over arbitrary grids.

Both functions accept paired arrays of identical shape. 2-D inputs are
integrated along columns; a single-row input is transposed to a column
first, so curves can be passed either way round.
"""

from typing import Union
import numpy as np
from scipy import integrate

from biosensors.exceptions import ShapeMismatchError

__all__ = [
    "trapezoid",
    "cumulative_trapezoid",
]


def _as_columns(x: np.ndarray, y: np.ndarray):
    """Validate shapes and return column-oriented copies plus a transpose flag."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if x.shape != y.shape:
        raise ShapeMismatchError(
            f"Arguments 'x' and 'y' must have the same shape, got {x.shape} and {y.shape}"
        )
    if x.ndim > 2:
        raise ShapeMismatchError(f"Expected 1-D or 2-D arrays, got {x.ndim}-D")

    transposed = x.ndim == 2 and x.shape[0] == 1
    if transposed:
        x = x.T
        y = y.T
    return x, y, transposed


def trapezoid(
    x: np.ndarray,
    y: np.ndarray,
) -> Union[float, np.ndarray]:
    """
    Integrate ``y`` over ``x`` with the trapezoid rule.

    Args:
        x: Grid points, same shape as ``y``
        y: Function values

    Returns:
        Total integral. A float for vector input or a single column,
        otherwise one value per column.

    Raises:
        ShapeMismatchError: If ``x`` and ``y`` differ in shape
    """
    x, y, _ = _as_columns(x, y)

    total = integrate.trapezoid(y, x=x, axis=0)
    if np.ndim(total) == 0:
        return float(total)
    if total.shape[0] == 1:
        return float(total[0])
    return total


def cumulative_trapezoid(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Running trapezoidal integral of ``y`` over ``x``.

    The value at the first grid point is 0. The output has the same shape
    and orientation as the input.

    Raises:
        ShapeMismatchError: If ``x`` and ``y`` differ in shape
    """
    x, y, transposed = _as_columns(x, y)

    result = integrate.cumulative_trapezoid(y, x=x, axis=0, initial=0)
    return result.T if transposed else result
