"""Impact layer: conflicts, dependencies and risk for proposed metadata."""

from .analyzer import (
    ImpactAnalyzer,
    analyze_field_impacts,
    check_validation_rule_conflicts,
    detect_dependencies,
)
from .conflicts import ConflictDetector, detect_conflicts
from .models import (
    Change,
    Dependency,
    DetectedConflict,
    FieldImpact,
    RiskAssessment,
    ValidationRuleConflict,
)
from .risk import RiskScorer, changes_from_diff, get_risk_score

__all__ = [
    "Change",
    "ConflictDetector",
    "Dependency",
    "DetectedConflict",
    "FieldImpact",
    "ImpactAnalyzer",
    "RiskAssessment",
    "RiskScorer",
    "ValidationRuleConflict",
    "analyze_field_impacts",
    "changes_from_diff",
    "check_validation_rule_conflicts",
    "detect_conflicts",
    "detect_dependencies",
    "get_risk_score",
]
