"""
Nadaraya-Watson kernel regression on functional covariates.

The estimator computes, for each bandwidth h:
    ŷ(x) = Σᵢ K(d(x, xᵢ), h) · yᵢ / Σᵢ K(d(x, xᵢ), h)

where:
    - K is a kernel function (see ``kernels``)
    - d(·, ·) is the integral L2 distance between curves
    - (xᵢ, yᵢ) are training curves and scalar outcomes

Cross-validation uses caller-supplied partitions: column l of
``train_index`` / ``validate_index`` holds the 0-based rows used to train
and to validate fold l.
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Sequence, Union
import numpy as np
from joblib import Parallel, delayed

from biosensors.core.distance import functional_distance
from biosensors.core.regression.kernels import KernelType, get_kernel
from biosensors.exceptions import InvalidPartitionError, ShapeMismatchError

__all__ = [
    "NadarayaWatsonRegression",
    "NadarayaRegressionResult",
    "check_partition",
]

logger = logging.getLogger(__name__)


@dataclass
class NadarayaRegressionResult:
    """
    Result of a Nadaraya-Watson fit over a bandwidth grid.

    Attributes:
        bandwidths: (H,) evaluated bandwidths
        predictions: (N, H) in-sample predictions, one column per bandwidth
        residuals: (N, H) outcome minus prediction
        sse: (H,) in-sample sum of squared residuals
        r2: (H,) 1 - SSE / SST with SST around the global outcome mean
        cv_sse: (H, L) out-of-fold sum of squared validation errors per
            bandwidth and fold. This is a raw error sum, not an R².
    """

    bandwidths: np.ndarray
    predictions: np.ndarray
    residuals: np.ndarray
    sse: np.ndarray
    r2: np.ndarray
    cv_sse: np.ndarray

    @property
    def n_folds(self) -> int:
        return self.cv_sse.shape[1]

    @property
    def total_cv_sse(self) -> np.ndarray:
        """Out-of-fold SSE summed over folds, one value per bandwidth."""
        return self.cv_sse.sum(axis=1)

    @property
    def best_bandwidth(self) -> float:
        """Bandwidth with the smallest total out-of-fold SSE."""
        if self.n_folds == 0:
            raise RuntimeError("No cross-validation folds were evaluated")
        return float(self.bandwidths[np.nanargmin(self.total_cv_sse)])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary of plain lists for serialization."""
        return {
            "bandwidths": self.bandwidths.tolist(),
            "predictions": self.predictions.tolist(),
            "residuals": self.residuals.tolist(),
            "sse": self.sse.tolist(),
            "r2": self.r2.tolist(),
            "cv_sse": self.cv_sse.tolist(),
        }


def check_partition(
    index: Optional[np.ndarray],
    n_samples: int,
    name: str = "index",
) -> np.ndarray:
    """
    Validate a 0-based partition index matrix.

    Args:
        index: (K, L) integer matrix, one fold per column. A vector is read
            as a single fold; None means no folds.
        n_samples: Number of observations the indices refer to
        name: Argument name for error messages

    Returns:
        (K, L) array of dtype intp

    Raises:
        InvalidPartitionError: On non-integer, negative or out-of-range entries
    """
    if index is None:
        return np.zeros((0, 0), dtype=np.intp)

    index = np.asarray(index)
    if index.ndim == 1:
        index = index.reshape(-1, 1)
    if index.ndim != 2:
        raise InvalidPartitionError(f"'{name}' must be a 2-D matrix with one column per fold")

    if index.size == 0:
        return index.astype(np.intp)

    if not np.issubdtype(index.dtype, np.integer):
        if not np.issubdtype(index.dtype, np.number) or not np.all(np.mod(index, 1) == 0):
            raise InvalidPartitionError(f"'{name}' must contain integer row indices")

    low, high = index.min(), index.max()
    if low < 0 or high >= n_samples:
        raise InvalidPartitionError(
            f"'{name}' holds indices in [{low}, {high}] but only rows 0..{n_samples - 1} exist "
            "(indices are 0-based)"
        )

    return index.astype(np.intp)


def _as_outcome(outcome: np.ndarray, n_samples: int) -> np.ndarray:
    outcome = np.asarray(outcome, dtype=float)
    if outcome.ndim == 2 and 1 in outcome.shape:
        outcome = outcome.ravel()
    if outcome.ndim != 1 or outcome.shape[0] != n_samples:
        raise ShapeMismatchError(
            f"Outcome must hold one value per curve ({n_samples}), got shape {outcome.shape}"
        )
    return outcome


class NadarayaWatsonRegression:
    """
    Nadaraya-Watson regression for scalar outcomes on functional covariates.

    The engine holds configuration only; every call receives its data and
    returns a fresh result, so repeated calls on the same inputs give
    identical output.

    Example:
        >>> engine = NadarayaWatsonRegression(bandwidths=[0.5, 1.0])
        >>> result = engine.fit(curves, grid, y, train_index, validate_index)
        >>> result.best_bandwidth
    """

    def __init__(
        self,
        bandwidths: Union[float, Sequence[float], np.ndarray],
        kernel: Union[str, KernelType] = KernelType.GAUSSIAN,
        n_jobs: int = 1,
    ):
        """
        Initialize the engine.

        Args:
            bandwidths: Bandwidth grid, all values positive
            kernel: Kernel name or ``KernelType``
            n_jobs: joblib workers over bandwidths
        """
        bandwidths = np.atleast_1d(np.asarray(bandwidths, dtype=float)).ravel()
        if bandwidths.size == 0:
            raise ValueError("At least one bandwidth is required")
        if np.any(~(bandwidths > 0)):
            raise ValueError("Bandwidths must be positive")

        self.bandwidths = bandwidths
        self.kernel = KernelType(kernel)
        self.n_jobs = n_jobs
        self._kernel_fn = get_kernel(self.kernel)

    @classmethod
    def from_config(cls, config) -> "NadarayaWatsonRegression":
        """Build from a ``NadarayaConfig``."""
        return cls(
            bandwidths=config.bandwidths,
            kernel=config.kernel,
            n_jobs=config.n_jobs,
        )

    def _smooth(self, distances: np.ndarray, outcome: np.ndarray, bandwidth: float) -> np.ndarray:
        """
        Kernel-weighted average of ``outcome`` for each row of ``distances``.

        With a compactly supported kernel a row whose distances all exceed
        the bandwidth has zero total weight; its prediction is ``nan``.
        """
        weights = self._kernel_fn(distances, bandwidth)
        with np.errstate(divide="ignore", invalid="ignore"):
            return (weights @ outcome) / weights.sum(axis=1)

    def _fold_errors(
        self,
        distances: np.ndarray,
        outcome: np.ndarray,
        train_index: np.ndarray,
        validate_index: np.ndarray,
        bandwidth: float,
    ) -> np.ndarray:
        """Out-of-fold SSE for one bandwidth across all folds."""
        errors = np.zeros(train_index.shape[1])
        for l in range(train_index.shape[1]):
            train, validate = train_index[:, l], validate_index[:, l]
            fold_distances = distances[np.ix_(validate, train)]
            predicted = self._smooth(fold_distances, outcome[train], bandwidth)
            errors[l] = np.sum(np.square(outcome[validate] - predicted))
        return errors

    def _map_bandwidths(self, func, *args) -> List[np.ndarray]:
        return Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(func)(*args, h) for h in self.bandwidths
        )

    def fit(
        self,
        curves: np.ndarray,
        grid: np.ndarray,
        outcome: np.ndarray,
        train_index: Optional[np.ndarray] = None,
        validate_index: Optional[np.ndarray] = None,
    ) -> NadarayaRegressionResult:
        """
        Fit over the bandwidth grid and evaluate cross-validation folds.

        Args:
            curves: (N, G) training curves
            grid: (G,) sampling grid
            outcome: (N,) scalar outcomes
            train_index: (K, L) 0-based training rows per fold
            validate_index: (V, L) 0-based validation rows per fold

        Returns:
            NadarayaRegressionResult

        Raises:
            ShapeMismatchError: If curves, grid and outcome disagree
            InvalidPartitionError: If the partition matrices are invalid
        """
        distances = functional_distance(curves, grid)
        n = distances.shape[0]
        y = _as_outcome(outcome, n)

        train_index = check_partition(train_index, n, "train_index")
        validate_index = check_partition(validate_index, n, "validate_index")
        if train_index.shape[1] != validate_index.shape[1]:
            raise InvalidPartitionError(
                f"train_index has {train_index.shape[1]} folds but validate_index has "
                f"{validate_index.shape[1]}"
            )

        logger.debug(
            "Nadaraya-Watson fit: %d curves, %d bandwidths, %d folds",
            n, self.bandwidths.size, train_index.shape[1],
        )

        predictions = np.column_stack(self._map_bandwidths(self._smooth, distances, y))
        residuals = y[:, np.newaxis] - predictions
        sse = np.sum(np.square(residuals), axis=0)

        sst = np.sum(np.square(y - y.mean()))
        with np.errstate(divide="ignore", invalid="ignore"):
            r2 = 1.0 - sse / sst

        if train_index.shape[1]:
            cv_sse = np.vstack(
                self._map_bandwidths(self._fold_errors, distances, y, train_index, validate_index)
            )
        else:
            cv_sse = np.zeros((self.bandwidths.size, 0))

        return NadarayaRegressionResult(
            bandwidths=self.bandwidths.copy(),
            predictions=predictions,
            residuals=residuals,
            sse=sse,
            r2=r2,
            cv_sse=cv_sse,
        )

    def predict(
        self,
        curves: np.ndarray,
        grid: np.ndarray,
        outcome: np.ndarray,
        new_curves: np.ndarray,
        train_index: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Predict outcomes for new curves.

        Every fold column of ``train_index`` is evaluated in turn and the
        predictions of the last column are returned; earlier columns do not
        contribute. Without ``train_index`` all training rows are used.

        Args:
            curves: (N, G) training curves
            grid: (G,) sampling grid
            outcome: (N,) training outcomes
            new_curves: (M, G) query curves
            train_index: (K, L) 0-based training rows per fold

        Returns:
            (M, H) predictions, one column per bandwidth
        """
        cross = functional_distance(curves, grid, other=new_curves)
        n = cross.shape[1]
        y = _as_outcome(outcome, n)

        if train_index is None:
            train_index = np.arange(n).reshape(-1, 1)
        train_index = check_partition(train_index, n, "train_index")
        if train_index.shape[1] == 0:
            raise InvalidPartitionError("train_index must hold at least one fold")

        predictions = None
        for l in range(train_index.shape[1]):
            train = train_index[:, l]
            fold_distances = cross[:, train]
            predictions = np.column_stack(
                self._map_bandwidths(self._smooth, fold_distances, y[train])
            )

        return predictions

    def __repr__(self) -> str:
        return (
            f"NadarayaWatsonRegression(kernel={self.kernel.value}, "
            f"n_bandwidths={self.bandwidths.size})"
        )
