"""Analysis-related exceptions: invalid arguments to the analysis core."""

from typing import Any

from .base import SfImpactError


class AnalysisError(SfImpactError):
    """Base class for analysis-related errors."""
    pass


class InvalidArgumentError(AnalysisError):
    """Raised when a caller passes a missing or unusable required argument.

    Shape problems inside metadata collections are normalized away and never
    raise; this is reserved for arguments the operation cannot run without.
    """

    def __init__(self, argument: str, reason: str, value: Any = None):
        super().__init__(
            f"Invalid argument: {argument}",
            details={"argument": argument, "reason": reason},
        )
        self.argument = argument
        self.reason = reason
        self.value = value
