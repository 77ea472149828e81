"""Base formatter interface for sf-impact output rendering."""

from abc import ABC, abstractmethod
from typing import Union

from ..api import ImpactReport
from ..batch.models import BatchReport
from ..diff.models import DiffRepresentation
from ..impact.models import RiskAssessment

Result = Union[DiffRepresentation, ImpactReport, RiskAssessment, BatchReport]


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, result: Result) -> None:
        """Render a result to the terminal."""

    @abstractmethod
    def format(self, result: Result) -> str:
        """Return formatted string representation of a result."""
