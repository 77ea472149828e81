"""
sf-impact - Impact analysis for proposed Salesforce metadata changes

Diffs proposed fields and validation rules against an object's current
metadata, then reports what the change breaks: name and label collisions,
platform limits, formula dependencies, redundant or contradictory rules,
naming problems and an overall risk level. Batches of tickets are checked
for overlapping writes and put into deployment order.
"""

__version__ = "0.1.0"

from .api import ImpactReport, analyze_object
from .batch import analyze_batch, split_batch, validate_batch
from .config import AnalyzerConfig, load_config
from .diff import DiffRepresentation, generate_diff
from .exceptions import SfImpactError
from .impact import (
    ConflictDetector,
    ImpactAnalyzer,
    RiskAssessment,
    analyze_field_impacts,
    check_validation_rule_conflicts,
    detect_conflicts,
    detect_dependencies,
    get_risk_score,
)
from .metadata import get_current_state

__all__ = [
    "analyze_object",  # Main entry point
    "ImpactReport",
    "AnalyzerConfig",
    "load_config",
    "SfImpactError",
    "get_current_state",
    "generate_diff",
    "DiffRepresentation",
    "analyze_field_impacts",
    "check_validation_rule_conflicts",
    "detect_dependencies",
    "detect_conflicts",
    "get_risk_score",
    "RiskAssessment",
    "ImpactAnalyzer",
    "ConflictDetector",
    "analyze_batch",
    "validate_batch",
    "split_batch",
]
