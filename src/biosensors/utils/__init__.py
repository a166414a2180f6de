"""
Utility modules for biosensors.
"""

from biosensors.utils.logging import PACKAGE_LOGGER, setup_logging

__all__ = [
    "PACKAGE_LOGGER",
    "setup_logging",
]
