"""
Quadratic programs for projecting quantile-density fits.

A solver takes (D, d, V, v) and returns the minimizer of

    ½ xᵀ D x + dᵀ x    subject to    V x ≤ v

or raises ``QPFailure``. ``slsqp_solver`` adapts SciPy's SLSQP to this
contract; any callable with the same signature can be used instead.

The projection problem works on x = [Q(0), q(t₁), ..., q(t_M)] and
measures the distance to the unconstrained fit with a quadratic form built
from the grid spacings, so the projection approximates the closest
quantile function in the Wasserstein sense.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple
import numpy as np
from scipy.optimize import minimize

from biosensors.exceptions import InvalidGridError, QPFailure

__all__ = [
    "QPSolver",
    "ProjectionProblem",
    "slsqp_solver",
    "quadratic_weights",
    "projection_problem",
]

# scipy.optimize SLSQP exit mode "Positive directional derivative for linesearch"
_SLSQP_LINESEARCH_STALL = 8


class QPSolver(Protocol):
    """
    Callable contract for quadratic program solvers.

    Solvers are called with the four problem arrays only. Extra tuning such
    as a starting point is bound beforehand, e.g. with ``functools.partial``.
    """

    def __call__(
        self,
        D: np.ndarray,
        d: np.ndarray,
        V: np.ndarray,
        v: np.ndarray,
    ) -> np.ndarray:
        ...


@dataclass
class ProjectionProblem:
    """
    One quadratic program instance.

    Attributes:
        D: (M+1, M+1) quadratic term
        d: (M+1,) linear term
        V: (3M-2, M+1) inequality matrix
        v: (3M-2,) inequality bounds
        x0: Feasible starting point
    """

    D: np.ndarray
    d: np.ndarray
    V: np.ndarray
    v: np.ndarray
    x0: np.ndarray


def slsqp_solver(
    D: np.ndarray,
    d: np.ndarray,
    V: np.ndarray,
    v: np.ndarray,
    x0: Optional[np.ndarray] = None,
    maxiter: int = 500,
    ftol: float = 1e-10,
    feasibility_tol: float = 1e-8,
) -> np.ndarray:
    """
    Solve a convex quadratic program with SciPy's SLSQP.

    Args:
        D: Quadratic term (symmetric, positive semi-definite)
        d: Linear term
        V: Inequality matrix
        v: Inequality bounds
        x0: Starting point (zeros if None)
        maxiter: Iteration limit
        ftol: Objective tolerance
        feasibility_tol: Allowed constraint violation of the returned point

    Returns:
        Solution vector

    Raises:
        QPFailure: If SLSQP reports failure or returns non-finite values
    """
    D = np.asarray(D, dtype=float)
    d = np.asarray(d, dtype=float)
    V = np.asarray(V, dtype=float)
    v = np.asarray(v, dtype=float)
    x0 = np.zeros(d.shape[0]) if x0 is None else np.asarray(x0, dtype=float)

    def obj(x: np.ndarray) -> float:
        return float(0.5 * x.dot(D.dot(x)) + d.dot(x))

    def jac(x: np.ndarray) -> np.ndarray:
        return D.dot(x) + d

    constraints = {
        "type": "ineq",
        "fun": lambda x: v - V.dot(x),
        "jac": lambda x: -V,
    }

    try:
        res = minimize(
            obj,
            x0,
            jac=jac,
            constraints=[constraints],
            method="SLSQP",
            options={"ftol": ftol, "maxiter": maxiter},
        )
    except (ValueError, np.linalg.LinAlgError) as e:
        raise QPFailure(f"SLSQP raised: {e}") from e

    if not np.all(np.isfinite(res.x)):
        raise QPFailure("SLSQP returned non-finite values")

    # A line-search stall at a feasible point is accepted as converged.
    feasible = np.max(V.dot(res.x) - v, initial=-np.inf) <= feasibility_tol
    if not res.success and not (res.status == _SLSQP_LINESEARCH_STALL and feasible):
        raise QPFailure(f"SLSQP did not converge: {res.message}")
    if not feasible:
        raise QPFailure("SLSQP returned an infeasible point")

    return res.x


def quadratic_weights(grid: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Linear and quadratic weight terms derived from grid spacings.

    Args:
        grid: (M,) increasing grid, M ≥ 2

    Returns:
        c: (M,) linear weights
        C: (M, M) quadratic weights
    """
    grid = np.asarray(grid, dtype=float).ravel()
    if grid.size < 2:
        raise InvalidGridError("Grid must have at least two points")

    delta = np.diff(grid)
    delta_next = np.append(delta, 0.0)
    delta_prev = np.insert(delta, 0, 0.0)

    half = 0.5 * (delta_next + delta_prev)
    last = delta.size - 1

    c = 0.5 * delta[last] * half
    C = 0.1 * delta[last] * np.outer(half, half)

    for k in range(last):
        bk = np.zeros(grid.size)
        bk[: k + 2] = half[: k + 2]
        step = 0.5 * (delta[k] + delta[k + 1])
        c = c + step * bk
        C = C + step * np.outer(bk, bk)

    return c, C


def projection_problem(
    grid: np.ndarray,
    q0: float,
    qd: np.ndarray,
    qdmin: float,
    smoothness: float = 1.5,
    weights: Optional[Tuple[np.ndarray, np.ndarray]] = None,
) -> ProjectionProblem:
    """
    Build the program projecting one fit onto positive quantile densities.

    Constraints keep every density value at or above ``qdmin`` and bound
    each first difference by ``smoothness`` times the first difference of
    the unconstrained fit.

    Args:
        grid: (M,) grid
        q0: Unconstrained quantile at zero
        qd: (M,) unconstrained quantile density
        qdmin: Positive lower bound
        smoothness: Multiplier on the fitted first differences
        weights: Precomputed ``quadratic_weights(grid)``

    Returns:
        ProjectionProblem
    """
    qd = np.asarray(qd, dtype=float).ravel()
    m = qd.size
    c, C = quadratic_weights(grid) if weights is None else weights

    D = np.block([
        [np.ones((1, 1)), c[np.newaxis, :]],
        [c[:, np.newaxis], C],
    ])
    d = -D.dot(np.concatenate([[q0], qd]))

    # q_i >= qdmin
    V1 = np.hstack([np.zeros((m, 1)), -np.eye(m)])
    v1 = np.full(m, -qdmin)

    # |q_i - q_{i+1}| <= smoothness * |qd_i - qd_{i+1}|
    first_diff = np.eye(m - 1, m) - np.eye(m - 1, m, k=1)
    V2 = np.hstack([np.zeros((m - 1, 1)), first_diff])
    v2 = smoothness * np.abs(np.diff(qd))

    V = np.vstack([V1, V2, -V2])
    v = np.concatenate([v1, v2, v2])
    x0 = np.concatenate([[q0], np.maximum(qd, qdmin)])

    return ProjectionProblem(D=D, d=d, V=V, v=v, x0=x0)
