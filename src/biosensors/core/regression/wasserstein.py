"""
Global Fréchet regression for distributional outcomes under the Wasserstein metric.

Each outcome distribution is given by its quantile density q(t) on a grid
over [0, 1] and its quantile at zero Q(0). Both are regressed linearly on
the covariates. Fitted quantile densities that go negative are projected
back onto positive functions with a quadratic program; the quantile
function and density are then recovered as

    Q(t) = Q(0) + ∫₀ᵗ q(s) ds        f(Q(t)) = 1 / q(t)
"""

from dataclasses import dataclass, field
from functools import partial
import logging
from typing import Any, Dict, List, Optional, Tuple
import numpy as np
from joblib import Parallel, delayed

from biosensors.core.integration import cumulative_trapezoid
from biosensors.core.regression.canonical import DEFAULT_TOLERANCE, canonical_rows
from biosensors.core.regression.quadprog import (
    QPSolver,
    projection_problem,
    quadratic_weights,
    slsqp_solver,
)
from biosensors.exceptions import (
    InvalidGridError,
    QPFailure,
    ShapeMismatchError,
    SingularDesignError,
)

__all__ = [
    "WassersteinRegression",
    "WassersteinRegressionResult",
    "check_grid",
]

logger = logging.getLogger(__name__)


@dataclass
class WassersteinRegressionResult:
    """
    Fitted and predicted distributions.

    Attributes:
        xfit: (N, P) covariates used for fitting
        xpred: (K, P) covariates used for prediction
        quantiles_fit: (N, M) fitted quantile functions
        quantiles_pred: (K, M) predicted quantile functions
        quantile_densities_fit: (N, M) fitted quantile densities
        quantile_densities_pred: (K, M) predicted quantile densities
        densities_fit: (N, M) fitted densities, evaluated on ``quantiles_fit``
        densities_pred: (K, M) predicted densities, evaluated on ``quantiles_pred``
        qp_used: True if any fit violated positivity and was projected
        n_projected: Number of distinct covariate rows sent to the solver
        failed_rows: Distinct covariate rows whose projection failed
    """

    xfit: np.ndarray
    xpred: np.ndarray
    quantiles_fit: np.ndarray
    quantiles_pred: np.ndarray
    quantile_densities_fit: np.ndarray
    quantile_densities_pred: np.ndarray
    densities_fit: np.ndarray
    densities_pred: np.ndarray
    qp_used: bool = False
    n_projected: int = 0
    failed_rows: List[np.ndarray] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary of plain lists for serialization."""
        return {
            "xfit": self.xfit.tolist(),
            "xpred": self.xpred.tolist(),
            "quantiles_fit": self.quantiles_fit.tolist(),
            "quantiles_pred": self.quantiles_pred.tolist(),
            "quantile_densities_fit": self.quantile_densities_fit.tolist(),
            "quantile_densities_pred": self.quantile_densities_pred.tolist(),
            "densities_fit": self.densities_fit.tolist(),
            "densities_pred": self.densities_pred.tolist(),
            "qp_used": self.qp_used,
            "n_projected": self.n_projected,
            "failed_rows": [row.tolist() for row in self.failed_rows],
        }


def check_grid(grid: Optional[np.ndarray], n_points: int) -> np.ndarray:
    """
    Validate a quantile grid, defaulting to an equispaced grid on [0, 1].

    Raises:
        ShapeMismatchError: If the grid length differs from ``n_points``
        InvalidGridError: If the grid is not strictly increasing from 0 to 1
    """
    if grid is None:
        return np.linspace(0.0, 1.0, n_points)

    grid = np.asarray(grid, dtype=float)
    if grid.ndim == 2 and 1 in grid.shape:
        grid = grid.ravel()
    if grid.ndim != 1 or grid.size != n_points:
        raise ShapeMismatchError(
            f"Length of grid ({grid.size}) should match number of columns in q ({n_points})"
        )
    if grid.size < 2 or grid[0] != 0 or grid[-1] != 1 or np.any(np.diff(grid) <= 0):
        raise InvalidGridError("grid should be an increasing grid beginning at 0 and ending at 1")
    return grid


def _as_covariates(x: np.ndarray, name: str) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    if x.ndim != 2:
        raise ShapeMismatchError(f"'{name}' must be a 2-D covariate matrix")
    return x


def _with_intercept(x: np.ndarray) -> np.ndarray:
    return np.hstack([np.ones((x.shape[0], 1)), x])


class WassersteinRegression:
    """
    Global Fréchet regression of distributions on Euclidean covariates.

    Example:
        >>> engine = WassersteinRegression(qdmin=1e-6)
        >>> result = engine.fit(xfit, q, Q0, xpred, grid)
        >>> result.quantiles_pred.shape
    """

    def __init__(
        self,
        qdmin: float = 1e-6,
        tolerance: float = DEFAULT_TOLERANCE,
        smoothness: float = 1.5,
        n_jobs: int = 1,
        solver: Optional[QPSolver] = None,
    ):
        """
        Initialize the engine.

        Args:
            qdmin: Positive lower bound on projected quantile densities
            tolerance: Tolerance for merging duplicate covariate rows
            smoothness: Bound on projected first differences relative to the fit
            n_jobs: joblib workers over projected rows
            solver: Quadratic program solver called as ``solver(D, d, V, v)``;
                None uses SLSQP started from the feasible point of each problem
        """
        if not qdmin > 0:
            raise ValueError("qdmin must be positive")

        self.qdmin = qdmin
        self.tolerance = tolerance
        self.smoothness = smoothness
        self.n_jobs = n_jobs
        self.solver = solver

    @classmethod
    def from_config(cls, config, solver: Optional[QPSolver] = None) -> "WassersteinRegression":
        """Build from a ``WassersteinConfig``."""
        return cls(
            qdmin=config.qdmin,
            tolerance=config.tolerance,
            smoothness=config.smoothness,
            n_jobs=config.n_jobs,
            solver=solver,
        )

    def _project(
        self,
        grid: np.ndarray,
        q0: float,
        qd: np.ndarray,
        weights: Tuple[np.ndarray, np.ndarray],
    ) -> Optional[np.ndarray]:
        """Solve one projection; None if the solver fails."""
        problem = projection_problem(grid, q0, qd, self.qdmin, self.smoothness, weights)
        solver = self.solver
        if solver is None:
            solver = partial(slsqp_solver, x0=problem.x0)
        try:
            solution = np.asarray(solver(problem.D, problem.d, problem.V, problem.v), dtype=float)
        except QPFailure as e:
            logger.warning(
                "An error occurred during the quadratic optimization, keeping the "
                "unconstrained fit: %s", e,
            )
            return None

        if solution.shape != problem.x0.shape:
            logger.warning(
                "Quadratic solver returned shape %s, expected %s; keeping the unconstrained fit",
                solution.shape, problem.x0.shape,
            )
            return None
        return solution

    def fit(
        self,
        xfit: np.ndarray,
        q: np.ndarray,
        Q0: np.ndarray,
        xpred: np.ndarray,
        grid: Optional[np.ndarray] = None,
    ) -> WassersteinRegressionResult:
        """
        Fit the regression and predict at new covariates.

        Args:
            xfit: (N, P) fitting covariates, without intercept column
            q: (N, M) quantile densities on ``grid``
            Q0: (N,) quantiles at zero
            xpred: (K, P) prediction covariates
            grid: (M,) grid on [0, 1]; equispaced if None

        Returns:
            WassersteinRegressionResult

        Raises:
            ShapeMismatchError: If argument shapes disagree
            InvalidGridError: If the grid is not increasing from 0 to 1
            SingularDesignError: If the covariates with intercept are rank deficient
        """
        q = np.asarray(q, dtype=float)
        if q.ndim != 2:
            raise ShapeMismatchError("q must be a 2-D array of quantile densities")
        n, m = q.shape

        grid = check_grid(grid, m)
        xfit = _as_covariates(xfit, "xfit")
        xpred = _as_covariates(xpred, "xpred")
        Q0 = np.asarray(Q0, dtype=float).ravel()

        if xfit.shape[0] != n:
            raise ShapeMismatchError(f"xfit has {xfit.shape[0]} rows but q has {n}")
        if Q0.size != n:
            raise ShapeMismatchError(f"Q0 has {Q0.size} values but q has {n} rows")
        if xpred.shape[0] and xpred.shape[1] != xfit.shape[1]:
            raise ShapeMismatchError(
                f"xpred has {xpred.shape[1]} covariates but xfit has {xfit.shape[1]}"
            )
        xpred = xpred.reshape(-1, xfit.shape[1])
        k = xpred.shape[0]

        xbar = xfit.mean(axis=0, keepdims=True)
        xall, ic = canonical_rows(xpred, xfit, xbar, tol=self.tolerance)
        r = xall.shape[0]

        logger.debug("Wasserstein fit: %d fit rows, %d prediction rows, %d distinct", n, k, r)

        # OLS by normal equations
        A = _with_intercept(xfit)
        gram = A.T.dot(A)
        try:
            ahat = np.linalg.solve(gram, A.T.dot(Q0))
            bhat = np.linalg.solve(gram, A.T.dot(q))
        except np.linalg.LinAlgError as e:
            raise SingularDesignError(
                "Covariate design matrix is singular; covariates must not be constant or "
                f"collinear and need more rows ({n}) than columns ({xfit.shape[1]})"
            ) from e

        design = _with_intercept(xall)
        qall = design.dot(bhat)
        Q0all = design.dot(ahat)

        # Positivity check; violating rows are projected onto positive functions
        flagged = np.flatnonzero(qall.min(axis=1) < 0)
        failed_rows = []
        if flagged.size:
            logger.info("Quadratic program used for %d of %d distinct rows", flagged.size, r)
            weights = quadratic_weights(grid)
            solutions = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(self._project)(grid, Q0all[j], qall[j], weights) for j in flagged
            )
            for j, solution in zip(flagged, solutions):
                if solution is None:
                    failed_rows.append(xall[j].copy())
                    continue
                Q0all[j] = solution[0]
                qall[j] = solution[1:]

        Qall = np.empty_like(qall)
        for j in range(r):
            Qall[j] = Q0all[j] + cumulative_trapezoid(grid, qall[j])

        with np.errstate(divide="ignore"):
            fall = 1.0 / qall

        pred_rows = ic[:k]
        fit_rows = ic[k:k + n]

        return WassersteinRegressionResult(
            xfit=xfit,
            xpred=xpred,
            quantiles_fit=Qall[fit_rows],
            quantiles_pred=Qall[pred_rows],
            quantile_densities_fit=qall[fit_rows],
            quantile_densities_pred=qall[pred_rows],
            densities_fit=fall[fit_rows],
            densities_pred=fall[pred_rows],
            qp_used=bool(flagged.size),
            n_projected=int(flagged.size),
            failed_rows=failed_rows,
        )

    def __repr__(self) -> str:
        return (
            f"WassersteinRegression(qdmin={self.qdmin:g}, tolerance={self.tolerance:g}, "
            f"smoothness={self.smoothness:g})"
        )
