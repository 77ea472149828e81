"""Impact analyzer: what adding a field or rule does to an existing object.

Each check is independent and every applicable one is reported:

    Field                                   impact       severity
    name already used                       conflict     high
    label used by a different field         conflict     medium
    master-detail beyond the per-object cap conflict     high
    formula references a missing field      dependency   high
    rollup without a master-detail parent   dependency   high
    unique field beyond the warning level   conflict     medium

Validation rules are checked for name overlap, and against every other rule
touching the same fields for redundancy (similar formulas) or contradiction
(one negates the other). See :mod:`sf_impact.formula.analyzer` for the
limits of the formula heuristics.
"""

from typing import Any, List, Optional, Set

from ..config import DEFAULT_CONFIG, AnalyzerConfig
from ..exceptions import InvalidArgumentError
from ..formula.analyzer import FormulaAnalyzer
from ..logging_config import get_logger
from ..metadata.models import Component, FieldDefinition, ValidationRuleDefinition
from ..metadata.normalizer import (
    normalize_component,
    normalize_components,
    normalize_field,
    normalize_fields,
    normalize_rule,
    normalize_rules,
)
from .models import Dependency, FieldImpact, ValidationRuleConflict

logger = get_logger(__name__)


def _require(value: Any, normalized: Any, argument: str) -> None:
    if value is None:
        raise InvalidArgumentError(argument, "is required")
    if normalized is None:
        raise InvalidArgumentError(argument, "has no name or fullName", value)


class ImpactAnalyzer:
    """Cross-references new components against the existing ones."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.formulas = FormulaAnalyzer(self.config.thresholds)

    def _key(self, name: Optional[str]) -> str:
        return self.config.name_key(name)

    def _keys(self, names) -> Set[str]:
        return {self._key(n) for n in names}

    # ── Fields ────────────────────────────────────────────────────────────

    def analyze_field_impacts(
        self, new_field: Any, existing_fields: Any
    ) -> List[FieldImpact]:
        """All impacts of adding ``new_field`` next to ``existing_fields``."""
        field = normalize_field(new_field)
        _require(new_field, field, "new_field")
        existing = normalize_fields(existing_fields)
        limits = self.config.thresholds
        impacts: List[FieldImpact] = []

        key = self._key(field.name)
        name_conflict = next((f for f in existing if self._key(f.name) == key), None)
        if name_conflict is not None:
            impacts.append(
                FieldImpact(
                    field_name=field.name,
                    impact_type="conflict",
                    severity="high",
                    description=f'Field name "{field.name}" already exists',
                    affected_components=[name_conflict.name],
                )
            )

        if field.label:
            label = field.label.lower()
            label_conflict = next(
                (
                    f
                    for f in existing
                    if f.label and f.label.lower() == label and self._key(f.name) != key
                ),
                None,
            )
            if label_conflict is not None:
                impacts.append(
                    FieldImpact(
                        field_name=field.name,
                        impact_type="conflict",
                        severity="medium",
                        description=(
                            f'Field label "{field.label}" is already used by field '
                            f'"{label_conflict.name}"'
                        ),
                        affected_components=[label_conflict.name],
                    )
                )

        if field.is_master_detail:
            master_details = [f for f in existing if f.is_master_detail]
            if len(master_details) >= limits.max_master_detail:
                impacts.append(
                    FieldImpact(
                        field_name=field.name,
                        impact_type="conflict",
                        severity="high",
                        description=(
                            "Object already has maximum number of master-detail "
                            f"relationships ({limits.max_master_detail})"
                        ),
                        affected_components=[f.name for f in master_details],
                    )
                )

        if field.is_formula:
            existing_keys = self._keys(f.name for f in existing)
            missing = [
                ref
                for ref in self.formulas.extract_field_references(field.formula)
                if self._key(ref) not in existing_keys
            ]
            if missing:
                impacts.append(
                    FieldImpact(
                        field_name=field.name,
                        impact_type="dependency",
                        severity="high",
                        description=f"Formula references non-existent fields: {', '.join(missing)}",
                        affected_components=missing,
                    )
                )

        if field.is_rollup and not self._has_master_detail_to(existing, field.summarized_object):
            impacts.append(
                FieldImpact(
                    field_name=field.name,
                    impact_type="dependency",
                    severity="high",
                    description=(
                        "Rollup summary requires master-detail relationship to "
                        f"{field.summarized_object or 'the summarized object'}"
                    ),
                    affected_components=[],
                )
            )

        if field.unique:
            unique_count = sum(1 for f in existing if f.unique)
            if unique_count >= limits.unique_field_warning:
                impacts.append(
                    FieldImpact(
                        field_name=field.name,
                        impact_type="conflict",
                        severity="medium",
                        description="Approaching limit of unique fields on object",
                        affected_components=[],
                    )
                )

        logger.debug("Field %s: %d impacts against %d fields", field.name, len(impacts), len(existing))
        return impacts

    def _has_master_detail_to(
        self, existing: List[FieldDefinition], target: Optional[str]
    ) -> bool:
        if not target:
            return False
        target_key = self._key(target)
        return any(
            f.is_master_detail and target_key in self._keys(f.reference_to) for f in existing
        )

    # ── Validation rules ──────────────────────────────────────────────────

    def check_validation_rule_conflicts(
        self, new_rule: Any, existing_rules: Any
    ) -> List[ValidationRuleConflict]:
        """Name overlap, redundancy and contradiction against existing rules."""
        rule = normalize_rule(new_rule)
        _require(new_rule, rule, "new_rule")
        existing = normalize_rules(existing_rules)
        conflicts: List[ValidationRuleConflict] = []

        key = self._key(rule.name)
        name_conflict = next((r for r in existing if self._key(r.name) == key), None)
        if name_conflict is not None:
            conflicts.append(
                ValidationRuleConflict(
                    rule_name=rule.name,
                    conflict_type="overlap",
                    severity="high",
                    description=f'Validation rule name "{rule.name}" already exists',
                    existing_rule=name_conflict.name,
                )
            )

        new_refs = self._keys(self.formulas.extract_field_references(rule.error_condition_formula))

        for other in existing:
            if self._key(other.name) == key:
                continue
            other_refs = self._keys(
                self.formulas.extract_field_references(other.error_condition_formula)
            )
            if not new_refs & other_refs:
                continue

            conflict = self._compare_rule_logic(rule, other)
            if conflict is not None:
                conflicts.append(conflict)

        return conflicts

    def _compare_rule_logic(
        self, rule: ValidationRuleDefinition, other: ValidationRuleDefinition
    ) -> Optional[ValidationRuleConflict]:
        score = self.formulas.similarity(rule.error_condition_formula, other.error_condition_formula)
        if score > self.config.thresholds.redundancy_similarity:
            return ValidationRuleConflict(
                rule_name=rule.name,
                conflict_type="redundancy",
                severity="medium",
                description=f'Similar validation logic to existing rule "{other.name}"',
                existing_rule=other.name,
            )
        if self.formulas.contradictory(rule.error_condition_formula, other.error_condition_formula):
            return ValidationRuleConflict(
                rule_name=rule.name,
                conflict_type="contradiction",
                severity="high",
                description=f'Potentially contradicts existing rule "{other.name}"',
                existing_rule=other.name,
            )
        return None

    # ── Dependencies ──────────────────────────────────────────────────────

    def detect_dependencies(self, component: Any, all_components: Any) -> List[Dependency]:
        """Components in ``all_components`` that depend on ``component``.

        Only fields have dependents: formula fields and validation rules that
        reference the field by name, and other relationship fields pointing at
        the same parent object.
        """
        target = normalize_component(component)
        _require(component, target, "component")
        if not target.is_field:
            return []

        components = normalize_components(all_components)
        target_key = self._key(target.name)
        dependencies: List[Dependency] = []

        for other in components:
            if other.is_formula_field and self._key(other.name) != target_key:
                if target_key in self._keys(self.formulas.extract_field_references(other.formula)):
                    dependencies.append(
                        Dependency(
                            source_component=other.name,
                            target_component=target.name,
                            dependency_type="formula",
                            description=f'Formula field "{other.name}" references this field',
                        )
                    )

        for other in components:
            if other.is_rule:
                refs = self._keys(
                    self.formulas.extract_field_references(other.error_condition_formula)
                )
                if target_key in refs:
                    dependencies.append(
                        Dependency(
                            source_component=other.name,
                            target_component=target.name,
                            dependency_type="validation",
                            description=f'Validation rule "{other.name}" references this field',
                        )
                    )

        if target.is_relationship and target.reference_to:
            dependencies.extend(self._related_through_parent(target, components))

        return dependencies

    def _related_through_parent(
        self, target: Component, components: List[Component]
    ) -> List[Dependency]:
        target_key = self._key(target.name)
        parents = [self._key(obj) for obj in target.reference_to]
        related: List[Dependency] = []

        for other in components:
            if not (other.is_field and other.is_relationship) or self._key(other.name) == target_key:
                continue
            other_parents = self._keys(other.reference_to)
            shared = next(
                (obj for obj, k in zip(target.reference_to, parents) if k in other_parents), None
            )
            if shared is not None:
                related.append(
                    Dependency(
                        source_component=other.name,
                        target_component=target.name,
                        dependency_type="field",
                        description=f"Related through {shared} object",
                    )
                )
        return related


_default = ImpactAnalyzer()


def analyze_field_impacts(new_field: Any, existing_fields: Any) -> List[FieldImpact]:
    return _default.analyze_field_impacts(new_field, existing_fields)


def check_validation_rule_conflicts(
    new_rule: Any, existing_rules: Any
) -> List[ValidationRuleConflict]:
    return _default.check_validation_rule_conflicts(new_rule, existing_rules)


def detect_dependencies(component: Any, all_components: Any) -> List[Dependency]:
    return _default.detect_dependencies(component, all_components)
