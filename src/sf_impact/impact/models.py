"""Data models for impact analysis: impacts, conflicts, dependencies, risk."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

# Severities ordered low -> critical
SEVERITY_ORDER: Dict[str, int] = {"low": 1, "medium": 2, "high": 3, "critical": 4}

SEVERITY_RISK_SCORE: Dict[str, int] = {"critical": 90, "high": 70, "medium": 40, "low": 20}


@dataclass
class Dependency:
    """Directed edge: ``source_component`` references ``target_component``."""

    source_component: str
    target_component: str
    dependency_type: str  # "field" | "formula" | "workflow" | "apex" | "validation"
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "sourceComponent": self.source_component,
            "targetComponent": self.target_component,
            "dependencyType": self.dependency_type,
            "description": self.description,
        }


@dataclass
class FieldImpact:
    """Effect of adding one field to an object."""

    field_name: str
    impact_type: str  # "conflict" | "dependency" | "modification" | "deletion"
    severity: str  # "low" | "medium" | "high"
    description: str
    affected_components: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fieldName": self.field_name,
            "impactType": self.impact_type,
            "severity": self.severity,
            "description": self.description,
            "affectedComponents": list(self.affected_components),
        }


@dataclass
class ValidationRuleConflict:
    """Clash between a new validation rule and an existing one."""

    rule_name: str
    conflict_type: str  # "overlap" | "contradiction" | "redundancy"
    severity: str
    description: str
    existing_rule: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleName": self.rule_name,
            "conflictType": self.conflict_type,
            "severity": self.severity,
            "description": self.description,
            "existingRule": self.existing_rule,
        }


@dataclass
class Change:
    """One typed change fed to the risk scorer."""

    type: str  # "field" | "validationRule" | ...
    operation: str  # "create" | "update" | "delete"
    field_type: Optional[str] = None
    required: Optional[bool] = None
    unique: Optional[bool] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Change":
        return cls(
            type=str(raw.get("type") or ""),
            operation=str(raw.get("operation") or ""),
            field_type=raw.get("fieldType", raw.get("field_type")),
            required=raw.get("required"),
            unique=raw.get("unique"),
            name=raw.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type,
            "operation": self.operation,
            "fieldType": self.field_type,
            "required": self.required,
            "unique": self.unique,
            "name": self.name,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class RiskAssessment:
    """Bounded score plus the reasons behind it."""

    score: int  # 0..100
    level: str  # "low" | "medium" | "high" | "critical"
    factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level,
            "factors": list(self.factors),
            "recommendations": list(self.recommendations),
        }


@dataclass
class DetectedConflict:
    """Object-level conflict with a suggested resolution, ready for display."""

    type: str  # "duplicate" | "dependency" | "validation" | "naming"
    severity: str  # "low" | "medium" | "high" | "critical"
    conflicting_component: str
    description: str
    resolution: str
    affected_components: List[str] = field(default_factory=list)
    suggested_actions: List[str] = field(default_factory=list)
    risk_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "conflictingComponent": self.conflicting_component,
            "description": self.description,
            "resolution": self.resolution,
            "affectedComponents": list(self.affected_components),
            "suggestedActions": list(self.suggested_actions),
            "riskScore": self.risk_score,
        }
