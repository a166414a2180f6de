"""
Core modules for biosensors.

Subpackages:
    integration: Trapezoidal integration over arbitrary grids
    distance: Integral L2 distances between curves
    regression: Nadaraya-Watson and Wasserstein regression engines
"""

from biosensors.core import integration
from biosensors.core import distance
from biosensors.core import regression

__all__ = ["integration", "distance", "regression"]
