"""
Deduplication of covariate rows.

Regression fits are evaluated once per distinct covariate vector. Rows
that agree within an absolute tolerance on every coordinate share one
canonical representative; an index vector maps each input row back to it.
"""

from typing import Tuple
import numpy as np

from biosensors.exceptions import ShapeMismatchError

__all__ = [
    "DEFAULT_TOLERANCE",
    "canonical_rows",
    "find_row",
]

DEFAULT_TOLERANCE = 0.002


def _close(rows: np.ndarray, row: np.ndarray, tol: float) -> np.ndarray:
    """Boolean mask of ``rows`` that match ``row`` within ``tol`` on every coordinate."""
    return np.all(np.abs(rows - row) <= tol, axis=1)


def _is_greater(a: np.ndarray, b: np.ndarray) -> bool:
    """True if ``a`` comes after ``b`` in lexicographic order."""
    for x, y in zip(a, b):
        if x > y:
            return True
        if x < y:
            return False
    return False


def find_row(canonical: np.ndarray, row: np.ndarray, tol: float = DEFAULT_TOLERANCE) -> int:
    """
    Position of the first canonical row matching ``row`` within ``tol``.

    Returns 0 when nothing matches.
    """
    hits = np.flatnonzero(_close(canonical, row, tol))
    return int(hits[0]) if hits.size else 0


def canonical_rows(
    *blocks: np.ndarray,
    tol: float = DEFAULT_TOLERANCE,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Deduplicate the rows of one or more stacked covariate blocks.

    Representatives are taken in input order, then sorted by the first
    coordinate; rows sharing a first coordinate are put in lexicographic
    order by a pairwise exchange pass. The order is only there to make
    output reproducible.

    Args:
        *blocks: 2-D arrays with the same number of columns, stacked in order
        tol: Absolute per-coordinate tolerance

    Returns:
        canonical: (R, P) array of distinct rows
        index: (N,) array, ``canonical[index]`` reproduces the stacked input
            up to ``tol``
    """
    arrays = [np.atleast_2d(np.asarray(b, dtype=float)) for b in blocks]
    if not arrays:
        raise ValueError("At least one block of rows is required")
    if len({a.shape[1] for a in arrays}) != 1:
        raise ShapeMismatchError("All covariate blocks must have the same number of columns")

    stacked = np.vstack(arrays)
    if stacked.shape[0] == 0:
        return stacked.copy(), np.zeros(0, dtype=np.intp)

    unique = [stacked[0]]
    for row in stacked[1:]:
        if not _close(np.asarray(unique), row, tol).any():
            unique.append(row)
    unique = np.asarray(unique)

    order = np.argsort(unique[:, 0], kind="stable")
    n = order.size
    for i in range(n - 1):
        for j in range(i + 1, n):
            if unique[order[i], 0] < unique[order[j], 0]:
                break
            if _is_greater(unique[order[i]], unique[order[j]]):
                order[i], order[j] = order[j], order[i]

    canonical = unique[order]
    index = np.array([find_row(canonical, row, tol) for row in stacked], dtype=np.intp)

    return canonical, index
