"""
biosensors: nonparametric regression for functional and distributional biosensor data.

This package provides Nadaraya-Watson regression on curves compared by
an integral L2 distance, and global Fréchet regression of distributions
under the Wasserstein metric.
"""

__version__ = "0.1.0"
__author__ = "biosensors Contributors"

# Lazy imports to keep `import biosensors` cheap
def __getattr__(name: str):
    """Lazy import module attributes."""
    if name == "integration":
        from biosensors.core import integration
        return integration
    elif name == "distance":
        from biosensors.core import distance
        return distance
    elif name == "regression":
        from biosensors.core import regression
        return regression
    elif name == "NadarayaWatsonRegression":
        from biosensors.core.regression.nadaraya_watson import NadarayaWatsonRegression
        return NadarayaWatsonRegression
    elif name == "WassersteinRegression":
        from biosensors.core.regression.wasserstein import WassersteinRegression
        return WassersteinRegression
    elif name == "CrossValidatedBandwidth":
        from biosensors.core.regression.bandwidth import CrossValidatedBandwidth
        return CrossValidatedBandwidth
    elif name == "Config":
        from biosensors.config.schema import Config
        return Config
    elif name == "setup_logging":
        from biosensors.utils.logging import setup_logging
        return setup_logging
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "integration",
    "distance",
    "regression",
    "NadarayaWatsonRegression",
    "WassersteinRegression",
    "CrossValidatedBandwidth",
    "Config",
    "setup_logging",
]
