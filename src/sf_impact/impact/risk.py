"""Risk scorer: typed change list to a bounded score and level.

Points per matching change (defaults, see ``ThresholdConfig``):

    field delete                 +25
    master-detail field change   +20
    validation rule create       +10
    required field               +15
    unique field                 +12
    optional field create        +5

The sum is capped at ``max_score``; the level is the highest threshold the
score reaches (critical 75, high 50, medium 25, otherwise low). A change can
match several patterns, and adding a change never lowers the score.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, AnalyzerConfig
from ..diff.models import ADDED, MODIFIED, REMOVED, DiffRepresentation, FieldComparison
from ..logging_config import get_logger
from ..metadata.models import MASTER_DETAIL
from .models import Change, RiskAssessment

logger = get_logger(__name__)

FIELD = "field"
VALIDATION_RULE = "validationRule"

_OPERATIONS = {ADDED: "create", MODIFIED: "update", REMOVED: "delete"}

_RELATIONSHIP_PROPERTIES = frozenset({"type", "referenceTo", "relationshipName", "deleteConstraint"})

LEVEL_RECOMMENDATIONS = {
    "critical": "Critical changes detected - thorough testing required",
    "high": "High-risk changes - comprehensive validation recommended",
    "medium": "Moderate risk - standard testing procedures apply",
    "low": "Low risk - basic validation sufficient",
}


def _as_changes(changes: Any) -> List[Change]:
    if not isinstance(changes, (list, tuple)):
        return []
    result: List[Change] = []
    for raw in changes:
        if isinstance(raw, Change):
            result.append(raw)
        elif isinstance(raw, Mapping):
            result.append(Change.from_dict(raw))
        else:
            logger.debug("Skipping change entry of type %s", type(raw).__name__)
    return result


class RiskScorer:
    """Accumulates risk points over a list of typed changes."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def _patterns(self, change: Change) -> Iterable[Tuple[int, str, Optional[str]]]:
        """(points, factor, recommendation) for every pattern the change matches."""
        points = self.config.thresholds
        is_field = change.type == FIELD

        if is_field and change.operation == "delete":
            yield (
                points.field_delete,
                "Field deletion detected",
                "Ensure no dependencies exist on deleted fields",
            )
        if is_field and change.field_type == MASTER_DETAIL:
            yield (
                points.master_detail_change,
                "Master-detail relationship change",
                "Test data model integrity after deployment",
            )
        if change.type == VALIDATION_RULE and change.operation == "create":
            yield (
                points.validation_rule_create,
                "New validation rule added",
                "Test with existing data to ensure compliance",
            )
        if is_field and change.required is True:
            yield (
                points.required_field,
                "Required field added",
                "Provide default values for existing records",
            )
        if is_field and change.unique is True:
            yield (
                points.unique_field,
                "Unique field constraint added",
                "Check for duplicate values in existing data",
            )
        if is_field and change.operation == "create" and not change.required:
            yield points.optional_field, "Optional field added", None

    def level_for(self, score: int) -> str:
        thresholds = self.config.thresholds
        if score >= thresholds.critical_level:
            return "critical"
        if score >= thresholds.high_level:
            return "high"
        if score >= thresholds.medium_level:
            return "medium"
        return "low"

    def get_risk_score(self, changes: Any) -> RiskAssessment:
        score = 0
        factors: List[str] = []
        recommendations: List[str] = []

        for change in _as_changes(changes):
            for points, factor, recommendation in self._patterns(change):
                score += points
                factors.append(factor)
                if recommendation:
                    recommendations.append(recommendation)

        score = min(score, self.config.thresholds.max_score)
        level = self.level_for(score)
        recommendations.insert(0, LEVEL_RECOMMENDATIONS[level])

        logger.debug("Risk score %d (%s) from %d factors", score, level, len(factors))
        return RiskAssessment(
            score=score, level=level, factors=factors, recommendations=recommendations
        )


def _field_change(comparison: FieldComparison) -> Change:
    operation = _OPERATIONS[comparison.status]

    if comparison.status == ADDED:
        proposed = comparison.proposed
        return Change(
            type=FIELD,
            operation=operation,
            field_type=proposed.type,
            required=proposed.required,
            unique=proposed.unique,
            name=comparison.name,
        )

    if comparison.status == REMOVED:
        return Change(
            type=FIELD, operation=operation, field_type=comparison.current.type, name=comparison.name
        )

    changed = {d.property: d for d in comparison.differences}
    touches_master_detail = (
        comparison.current.is_master_detail or comparison.proposed.is_master_detail
    ) and bool(_RELATIONSHIP_PROPERTIES & changed.keys())

    return Change(
        type=FIELD,
        operation=operation,
        field_type=MASTER_DETAIL if touches_master_detail else None,
        required=True if "required" in changed and comparison.proposed.required else None,
        unique=True if "unique" in changed and comparison.proposed.unique else None,
        name=comparison.name,
    )


def changes_from_diff(diff: DiffRepresentation) -> List[Change]:
    """Typed change list for the risk scorer from a diff.

    Modified fields only count as required/unique/master-detail changes when
    the diff actually touched that aspect of the field.
    """
    changes = [_field_change(c) for c in diff.fields if c.is_change]
    changes.extend(
        Change(type=VALIDATION_RULE, operation=_OPERATIONS[c.status], name=c.name)
        for c in diff.validation_rules
        if c.is_change
    )
    return changes


_default = RiskScorer()


def get_risk_score(changes: Any) -> RiskAssessment:
    return _default.get_risk_score(changes)
