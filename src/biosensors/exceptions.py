"""
Error types raised by the regression engines.

Shape, grid, partition and design errors are fatal to the call. ``QPFailure`` is
raised by quadratic-program solvers and is downgraded to a warning by the
Wasserstein engine, which keeps the unconstrained fit for that row.
"""

__all__ = [
    "BiosensorsError",
    "ShapeMismatchError",
    "InvalidGridError",
    "InvalidPartitionError",
    "QPFailure",
    "SingularDesignError",
]


class BiosensorsError(Exception):
    """Base class for all package errors."""


class ShapeMismatchError(BiosensorsError, ValueError):
    """Paired array arguments do not have compatible shapes."""


class InvalidGridError(BiosensorsError, ValueError):
    """Grid is not strictly increasing from 0 to 1."""


class InvalidPartitionError(BiosensorsError, IndexError):
    """Train/validation index matrix is malformed or out of bounds."""


class QPFailure(BiosensorsError, RuntimeError):
    """A quadratic program could not be solved."""


class SingularDesignError(BiosensorsError, ValueError):
    """Fitting covariates with an intercept column do not have full column rank."""
