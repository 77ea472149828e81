"""Data models for metadata diffing: per-property, per-item and per-object deltas."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..metadata.models import FieldDefinition, ValidationRuleDefinition

ADDED = "added"
REMOVED = "removed"
MODIFIED = "modified"
UNCHANGED = "unchanged"

CHANGED_STATUSES = frozenset({ADDED, REMOVED, MODIFIED})


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


@dataclass
class FieldDifference:
    """One changed property between current and proposed."""

    property: str  # camelCase metadata property name
    old_value: Any
    new_value: Any
    change_type: str  # "added" | "removed" | "modified"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property": self.property,
            "oldValue": _jsonable(self.old_value),
            "newValue": _jsonable(self.new_value),
            "changeType": self.change_type,
        }


# Validation rules diff the same way fields do.
RuleDifference = FieldDifference


@dataclass
class FieldComparison:
    """Status of one field name across current and proposed."""

    name: str
    status: str  # "added" | "removed" | "modified" | "unchanged"
    current: Optional[FieldDefinition] = None
    proposed: Optional[FieldDefinition] = None
    differences: List[FieldDifference] = field(default_factory=list)

    @property
    def is_change(self) -> bool:
        return self.status in CHANGED_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "current": self.current.to_dict() if self.current else None,
            "proposed": self.proposed.to_dict() if self.proposed else None,
            "differences": [d.to_dict() for d in self.differences],
        }


@dataclass
class RuleComparison:
    """Status of one validation rule name across current and proposed."""

    name: str
    status: str
    current: Optional[ValidationRuleDefinition] = None
    proposed: Optional[ValidationRuleDefinition] = None
    differences: List[RuleDifference] = field(default_factory=list)

    @property
    def is_change(self) -> bool:
        return self.status in CHANGED_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "current": self.current.to_dict() if self.current else None,
            "proposed": self.proposed.to_dict() if self.proposed else None,
            "differences": [d.to_dict() for d in self.differences],
        }


@dataclass
class DiffSummary:
    """Counts by status for fields and rules."""

    total_changes: int = 0
    fields_added: int = 0
    fields_modified: int = 0
    fields_removed: int = 0
    fields_unchanged: int = 0
    rules_added: int = 0
    rules_modified: int = 0
    rules_removed: int = 0
    rules_unchanged: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalChanges": self.total_changes,
            "fieldsAdded": self.fields_added,
            "fieldsModified": self.fields_modified,
            "fieldsRemoved": self.fields_removed,
            "fieldsUnchanged": self.fields_unchanged,
            "rulesAdded": self.rules_added,
            "rulesModified": self.rules_modified,
            "rulesRemoved": self.rules_removed,
            "rulesUnchanged": self.rules_unchanged,
        }


@dataclass
class DiffRepresentation:
    """Complete diff of one object's fields and validation rules."""

    object_name: str
    fields: List[FieldComparison] = field(default_factory=list)
    validation_rules: List[RuleComparison] = field(default_factory=list)
    summary: DiffSummary = field(default_factory=DiffSummary)
    change_percentage: int = 0

    def fields_with_status(self, status: str) -> List[FieldComparison]:
        return [c for c in self.fields if c.status == status]

    def rules_with_status(self, status: str) -> List[RuleComparison]:
        return [c for c in self.validation_rules if c.status == status]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectName": self.object_name,
            "summary": self.summary.to_dict(),
            "fields": [c.to_dict() for c in self.fields],
            "validationRules": [c.to_dict() for c in self.validation_rules],
            "changePercentage": self.change_percentage,
        }
