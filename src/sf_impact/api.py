"""Public API for sf-impact.

This module ties the layers together. Callers that want one answer for a
proposed change to an object should call analyze_object() instead of
driving the comparator, analyzer, detector and scorer by hand.

Example:
    >>> from sf_impact import analyze_object
    >>>
    >>> report = analyze_object(
    ...     {"objectName": "Account", "fields": [{"name": "Region__c", "type": "Text"}]},
    ...     [{"name": "Region__c", "type": "Text"}, {"name": "Tier__c", "type": "Text"}],
    ...     [],
    ... )
    >>> report.diff.summary.fields_added
    1
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONFIG, AnalyzerConfig
from .diff.comparator import MetadataComparator
from .diff.models import ADDED, MODIFIED, REMOVED, UNCHANGED, DiffRepresentation
from .exceptions import InvalidArgumentError
from .impact.analyzer import ImpactAnalyzer
from .impact.conflicts import ConflictDetector
from .impact.models import (
    Dependency,
    DetectedConflict,
    FieldImpact,
    RiskAssessment,
    ValidationRuleConflict,
)
from .impact.risk import RiskScorer, changes_from_diff
from .logging_config import get_logger
from .metadata.models import CurrentState
from .metadata.normalizer import components_from, get_current_state

logger = get_logger(__name__)


@dataclass
class ImpactReport:
    """Everything known about one proposed change to one object."""

    object_name: str
    diff: DiffRepresentation
    field_impacts: List[FieldImpact] = field(default_factory=list)
    rule_conflicts: List[ValidationRuleConflict] = field(default_factory=list)
    conflicts: List[DetectedConflict] = field(default_factory=list)
    removed_field_dependencies: List[Dependency] = field(default_factory=list)
    risk: Optional[RiskAssessment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectName": self.object_name,
            "diff": self.diff.to_dict(),
            "fieldImpacts": [i.to_dict() for i in self.field_impacts],
            "ruleConflicts": [c.to_dict() for c in self.rule_conflicts],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "removedFieldDependencies": [d.to_dict() for d in self.removed_field_dependencies],
            "risk": self.risk.to_dict() if self.risk else None,
        }


def _declared_object_name(current_metadata: Any) -> Optional[str]:
    if isinstance(current_metadata, CurrentState):
        return current_metadata.object_name
    if isinstance(current_metadata, Mapping):
        name = current_metadata.get("objectName") or current_metadata.get("object_name")
        if isinstance(name, str) and name.strip():
            return name
    return None


def analyze_object(
    current_metadata: Any,
    proposed_fields: Any,
    proposed_rules: Any,
    *,
    object_name: Optional[str] = None,
    config: Optional[AnalyzerConfig] = None,
) -> ImpactReport:
    """Diff, impacts, conflicts and risk for a proposed object definition.

    Added items are checked against what survives the change: unchanged
    items plus modified items in their proposed form. Removed fields are
    checked for anything that still references them.

    Args:
        current_metadata: Describe output (``objectName``, ``fields``,
            ``validationRules``) or a CurrentState
        proposed_fields: Full proposed field list for the object
        proposed_rules: Full proposed validation rule list for the object
        object_name: Overrides the object name found in ``current_metadata``
        config: Analyzer configuration (default: DEFAULT_CONFIG)

    Returns:
        ImpactReport for the object

    Raises:
        InvalidArgumentError: If no object name can be resolved
    """
    config = config or DEFAULT_CONFIG
    name = object_name or _declared_object_name(current_metadata)
    if not name:
        raise InvalidArgumentError(
            "object_name", "not given and current metadata has no objectName"
        )

    state = replace(get_current_state(current_metadata), object_name=name)

    diff = MetadataComparator(config).generate_diff(state, proposed_fields, proposed_rules)

    def surviving(comparison):
        return comparison.proposed if comparison.status == MODIFIED else comparison.current

    remaining_fields = [surviving(c) for c in diff.fields if c.status in (UNCHANGED, MODIFIED)]
    remaining_rules = [
        surviving(c) for c in diff.validation_rules if c.status in (UNCHANGED, MODIFIED)
    ]
    added_fields = [c.proposed for c in diff.fields_with_status(ADDED)]
    added_rules = [c.proposed for c in diff.rules_with_status(ADDED)]

    analyzer = ImpactAnalyzer(config)
    field_impacts: List[FieldImpact] = []
    for added in added_fields:
        field_impacts.extend(analyzer.analyze_field_impacts(added, remaining_fields))

    rule_conflicts: List[ValidationRuleConflict] = []
    for comparison in diff.validation_rules:
        if comparison.status not in (ADDED, MODIFIED):
            continue
        own_key = config.name_key(comparison.name)
        others = [r for r in remaining_rules if config.name_key(r.name) != own_key]
        rule_conflicts.extend(analyzer.check_validation_rule_conflicts(comparison.proposed, others))

    conflicts = ConflictDetector(config).detect_conflicts(
        {"fields": added_fields, "validationRules": added_rules},
        {"fields": remaining_fields, "validationRules": remaining_rules},
    )

    remaining_components = components_from(remaining_fields, remaining_rules)
    removed_field_dependencies: List[Dependency] = []
    for comparison in diff.fields_with_status(REMOVED):
        removed_field_dependencies.extend(
            analyzer.detect_dependencies(comparison.current, remaining_components)
        )

    risk = RiskScorer(config).get_risk_score(changes_from_diff(diff))

    logger.debug(
        "%s: %d field impacts, %d rule conflicts, %d conflicts, risk %d (%s)",
        name,
        len(field_impacts),
        len(rule_conflicts),
        len(conflicts),
        risk.score,
        risk.level,
    )
    return ImpactReport(
        object_name=name,
        diff=diff,
        field_impacts=field_impacts,
        rule_conflicts=rule_conflicts,
        conflicts=conflicts,
        removed_field_dependencies=removed_field_dependencies,
        risk=risk,
    )
