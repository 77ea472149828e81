"""Exception hierarchy for sf-impact."""

from .analysis import AnalysisError, InvalidArgumentError
from .base import SfImpactError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "SfImpactError",
    "AnalysisError",
    "InvalidArgumentError",
    "ConfigurationError",
    "InvalidConfigError",
]
