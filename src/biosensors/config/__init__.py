"""
Configuration management for biosensors.

Pydantic-based schemas for the regression engines, with support for
loading from TOML and YAML files.
"""

from biosensors.config.schema import (
    Config,
    NadarayaConfig,
    WassersteinConfig,
)

__all__ = [
    "Config",
    "NadarayaConfig",
    "WassersteinConfig",
]
