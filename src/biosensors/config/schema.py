"""
Pydantic configuration schemas for the regression engines.

Each engine has its own section; ``Config`` bundles them together with
the logging level and handles TOML/YAML round-trips.
"""

import logging
from pathlib import Path
from typing import IO, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from biosensors.core.regression.kernels import KernelType

__all__ = [
    "NadarayaConfig",
    "WassersteinConfig",
    "Config",
]


class NadarayaConfig(BaseModel):
    """Configuration for functional Nadaraya-Watson regression."""

    model_config = ConfigDict(extra="forbid")

    bandwidths: List[float] = Field(
        default=[0.5, 1.0, 2.0],
        min_length=1,
        description="Bandwidths to evaluate",
    )
    kernel: KernelType = Field(
        default=KernelType.GAUSSIAN,
        description="Kernel used to turn distances into weights",
    )
    n_jobs: int = Field(
        default=1,
        description="Parallel workers over bandwidths (joblib semantics, -1 = all cores)",
    )

    @field_validator("bandwidths", mode="before")
    @classmethod
    def validate_bandwidths(cls, v: Any) -> List[float]:
        """Accept a scalar and reject non-positive values."""
        if isinstance(v, (int, float)):
            v = [v]
        values = [float(h) for h in v]
        if any(h <= 0 for h in values):
            raise ValueError("Bandwidths must be positive")
        return values


class WassersteinConfig(BaseModel):
    """Configuration for global Fréchet regression under the Wasserstein metric."""

    model_config = ConfigDict(extra="forbid")

    qdmin: float = Field(
        default=1e-6,
        gt=0.0,
        description="Lower bound on fitted quantile densities",
    )
    tolerance: float = Field(
        default=0.002,
        gt=0.0,
        description="Absolute tolerance for merging duplicate covariate rows",
    )
    smoothness: float = Field(
        default=1.5,
        gt=0.0,
        description="Bound on projected first differences, relative to the OLS fit",
    )
    n_jobs: int = Field(
        default=1,
        description="Parallel workers over projected rows (joblib semantics)",
    )


class Config(BaseModel):
    """
    Main configuration for biosensors.

    Example:
        >>> config = Config.from_toml("biosensors.toml")
        >>> config = Config(nadaraya=NadarayaConfig(bandwidths=[0.1, 0.2]))
    """

    model_config = ConfigDict(extra="forbid")

    nadaraya: NadarayaConfig = Field(
        default_factory=NadarayaConfig,
        description="Nadaraya-Watson configuration",
    )
    wasserstein: WassersteinConfig = Field(
        default_factory=WassersteinConfig,
        description="Wasserstein regression configuration",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Level for the package logger",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def apply_logging(self, stream: Optional[IO] = None) -> logging.Logger:
        """Set the package logger to ``log_level``; see ``setup_logging``."""
        from biosensors.utils.logging import setup_logging

        return setup_logging(self.log_level, stream=stream)

    @classmethod
    def from_toml(cls, path: Union[str, Path]) -> "Config":
        """
        Load configuration from TOML file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance
        """
        import sys

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        # Use tomli for Python < 3.11, tomllib for >= 3.11
        if sys.version_info >= (3, 11):
            import tomllib

            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from YAML file."""
        import yaml

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Config":
        """
        Load configuration from file (auto-detect format).

        Args:
            path: Path to configuration file (.toml or .yaml/.yml)
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == ".toml":
            return cls.from_toml(path)
        elif suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    def to_toml(self, path: Union[str, Path]) -> None:
        """Save configuration to TOML file."""
        import tomli_w

        with open(Path(path), "wb") as f:
            tomli_w.dump(self.model_dump(mode="json"), f)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        import yaml

        with open(Path(path), "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)
