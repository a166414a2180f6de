"""
Kernel functions for regression on functional distances.

Kernels map a nonnegative distance and a bandwidth to a nonnegative
weight. They are only ever used through the ratio Σ(w·y)/Σw, so constant
factors cancel; the constants below are kept as they are so that weights
stay comparable between runs.
"""

from enum import Enum
from typing import Callable, Dict, Union
import numpy as np

__all__ = [
    "KernelType",
    "KernelFunction",
    "gaussian_kernel",
    "triweight_kernel",
    "get_kernel",
]

KernelFunction = Callable[[np.ndarray, float], np.ndarray]

_GAUSSIAN_SCALE = 2.0 / np.sqrt(2.0 * np.pi)
_TRIWEIGHT_SCALE = 35.0 / 16.0


class KernelType(str, Enum):
    """Available kernels."""

    GAUSSIAN = "gaussian"  # Unbounded support
    TRIWEIGHT = "triweight"  # Compact support on [0, h]


def _check_bandwidth(bandwidth: float) -> None:
    if not bandwidth > 0:
        raise ValueError("Bandwidth must be positive")


def gaussian_kernel(
    distance: Union[float, np.ndarray], bandwidth: float
) -> np.ndarray:
    """
    Gaussian-shaped kernel with unbounded support.

    K(d) = (2/√(2π)) · exp(-½ (d/h)²)

    Args:
        distance: Distance value(s)
        bandwidth: Bandwidth h

    Returns:
        Kernel weight(s), strictly positive
    """
    _check_bandwidth(bandwidth)
    u = np.asarray(distance, dtype=float) / bandwidth
    return _GAUSSIAN_SCALE * np.exp(-np.square(u) * 0.5)


def triweight_kernel(
    distance: Union[float, np.ndarray], bandwidth: float
) -> np.ndarray:
    """
    Order-3 kernel with compact support.

    K(d) = (35/16)(1 - (d/h)²)³ for 0 ≤ d/h ≤ 1, else 0

    Args:
        distance: Nonnegative distance value(s)
        bandwidth: Support radius h

    Returns:
        Kernel weight(s), zero outside [0, h]
    """
    _check_bandwidth(bandwidth)
    u = np.asarray(distance, dtype=float) / bandwidth
    weights = _TRIWEIGHT_SCALE * np.power(1.0 - np.square(u), 3)
    return np.where((u >= 0) & (u <= 1), weights, 0.0)


_KERNELS: Dict[KernelType, KernelFunction] = {
    KernelType.GAUSSIAN: gaussian_kernel,
    KernelType.TRIWEIGHT: triweight_kernel,
}


def get_kernel(kind: Union[str, KernelType]) -> KernelFunction:
    """
    Resolve a kernel by name.

    Raises:
        KeyError: If the kernel is unknown
    """
    try:
        return _KERNELS[KernelType(kind)]
    except ValueError:
        available = ", ".join(k.value for k in KernelType)
        raise KeyError(f"Kernel '{kind}' not found. Available: {available}") from None
