"""
Bandwidth selection for functional kernel regression.

Selection uses the out-of-fold error of caller-supplied partitions: the
chosen bandwidth minimizes the validation SSE summed over folds.
"""

from typing import List, Optional, Sequence, Tuple, Union
import numpy as np

from biosensors.core.regression.kernels import KernelType
from biosensors.core.regression.nadaraya_watson import (
    NadarayaRegressionResult,
    NadarayaWatsonRegression,
)

__all__ = [
    "CrossValidatedBandwidth",
]


class CrossValidatedBandwidth:
    """
    Grid search bandwidth selection over supplied cross-validation folds.

    Example:
        >>> selector = CrossValidatedBandwidth()
        >>> h = selector.select(curves, grid, y, [0.1, 0.5, 1.0], train, validate)
    """

    def __init__(
        self,
        kernel: Union[str, KernelType] = KernelType.GAUSSIAN,
        n_jobs: int = 1,
    ):
        self.kernel = KernelType(kernel)
        self.n_jobs = n_jobs

        self.result: Optional[NadarayaRegressionResult] = None
        self.optimal_bandwidth: Optional[float] = None
        self.optimal_error: Optional[float] = None

    @property
    def results(self) -> List[Tuple[float, float]]:
        """(bandwidth, total out-of-fold SSE) pairs from the last search."""
        if self.result is None:
            return []
        return list(zip(self.result.bandwidths.tolist(), self.result.total_cv_sse.tolist()))

    def select(
        self,
        curves: np.ndarray,
        grid: np.ndarray,
        outcome: np.ndarray,
        bandwidths: Sequence[float],
        train_index: np.ndarray,
        validate_index: np.ndarray,
    ) -> float:
        """
        Select the bandwidth with the smallest total out-of-fold SSE.

        Args:
            curves: (N, G) training curves
            grid: (G,) sampling grid
            outcome: (N,) outcomes
            bandwidths: Candidate bandwidths
            train_index: (K, L) 0-based training rows per fold
            validate_index: (V, L) 0-based validation rows per fold

        Returns:
            Optimal bandwidth
        """
        engine = NadarayaWatsonRegression(bandwidths, kernel=self.kernel, n_jobs=self.n_jobs)
        self.result = engine.fit(curves, grid, outcome, train_index, validate_index)

        self.optimal_bandwidth = self.result.best_bandwidth
        self.optimal_error = float(np.nanmin(self.result.total_cv_sse))

        return self.optimal_bandwidth
