"""
Nonparametric regression for functional and distributional outcomes.

This module implements Nadaraya-Watson regression on functional
covariates and global Fréchet regression of distributions under the
Wasserstein metric.
"""

from biosensors.core.regression.kernels import (
    KernelType,
    gaussian_kernel,
    triweight_kernel,
    get_kernel,
)
from biosensors.core.regression.canonical import (
    canonical_rows,
)
from biosensors.core.regression.nadaraya_watson import (
    NadarayaWatsonRegression,
    NadarayaRegressionResult,
)
from biosensors.core.regression.bandwidth import (
    CrossValidatedBandwidth,
)
from biosensors.core.regression.quadprog import (
    QPSolver,
    slsqp_solver,
)
from biosensors.core.regression.wasserstein import (
    WassersteinRegression,
    WassersteinRegressionResult,
)

__all__ = [
    # Kernels
    "KernelType",
    "gaussian_kernel",
    "triweight_kernel",
    "get_kernel",
    # Covariate deduplication
    "canonical_rows",
    # Nadaraya-Watson
    "NadarayaWatsonRegression",
    "NadarayaRegressionResult",
    # Bandwidth selection
    "CrossValidatedBandwidth",
    # Wasserstein
    "QPSolver",
    "slsqp_solver",
    "WassersteinRegression",
    "WassersteinRegressionResult",
]
