"""Metadata comparator: structural diff of fields and validation rules.

Items are matched by API name. The result walks the union of names in a
fixed order (current order first, then proposed-only names) so identical
inputs always produce identical output:

    only in proposed  -> added
    only in current   -> removed
    in both           -> modified if any tracked property differs, else unchanged

Whether names match case-sensitively is decided by
``AnalyzerConfig.case_sensitive_names``.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from ..config import DEFAULT_CONFIG, AnalyzerConfig
from ..logging_config import get_logger
from ..metadata.models import CurrentState, FieldDefinition, ValidationRuleDefinition
from ..metadata.normalizer import get_current_state, normalize_fields, normalize_rules
from .models import (
    ADDED,
    MODIFIED,
    REMOVED,
    UNCHANGED,
    DiffRepresentation,
    DiffSummary,
    FieldComparison,
    FieldDifference,
    RuleComparison,
)

logger = get_logger(__name__)

# (metadata property, dataclass attribute)
FIELD_PROPERTIES: Tuple[Tuple[str, str], ...] = (
    ("label", "label"),
    ("type", "type"),
    ("length", "length"),
    ("precision", "precision"),
    ("scale", "scale"),
    ("required", "required"),
    ("unique", "unique"),
    ("externalId", "external_id"),
    ("defaultValue", "default_value"),
    ("formula", "formula"),
    ("picklistValues", "picklist_values"),
    ("referenceTo", "reference_to"),
    ("relationshipName", "relationship_name"),
    ("deleteConstraint", "delete_constraint"),
    ("helpText", "help_text"),
    ("description", "description"),
)

RULE_PROPERTIES: Tuple[Tuple[str, str], ...] = (
    ("description", "description"),
    ("errorConditionFormula", "error_condition_formula"),
    ("errorMessage", "error_message"),
    ("active", "active"),
    ("errorDisplayField", "error_display_field"),
)

T = TypeVar("T", FieldDefinition, ValidationRuleDefinition)


def _read(item: Any, attr: str) -> Any:
    value = getattr(item, attr)
    # Empty multi-valued properties count as absent
    if isinstance(value, tuple) and not value:
        return None
    return value


def _values_differ(old: Any, new: Any) -> bool:
    if isinstance(old, tuple) and isinstance(new, tuple):
        # picklist values and referenceTo are unordered
        return sorted(old) != sorted(new)
    return old != new


def diff_properties(
    current: Any, proposed: Any, properties: Sequence[Tuple[str, str]]
) -> List[FieldDifference]:
    """One FieldDifference per tracked property whose value changed."""
    differences: List[FieldDifference] = []
    for prop, attr in properties:
        old = _read(current, attr)
        new = _read(proposed, attr)

        if old is None and new is None:
            continue
        if old is None:
            differences.append(FieldDifference(prop, None, new, ADDED))
        elif new is None:
            differences.append(FieldDifference(prop, old, None, REMOVED))
        elif _values_differ(old, new):
            differences.append(FieldDifference(prop, old, new, MODIFIED))
    return differences


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class MetadataComparator:
    """Compares current and proposed metadata for one object."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def _index(self, items: List[T], side: str) -> Dict[str, T]:
        index: Dict[str, T] = {}
        for item in items:
            key = self.config.name_key(item.name)
            if key in index:
                logger.debug("Duplicate %s entry %s ignored", side, item.name)
                continue
            index[key] = item
        return index

    def _union(self, current: List[T], proposed: List[T]):
        """Yield (name, current, proposed) over the union of names."""
        current_by_key = self._index(current, "current")
        proposed_by_key = self._index(proposed, "proposed")

        for key, item in current_by_key.items():
            match = proposed_by_key.get(key)
            yield (match.name if match else item.name), item, match
        for key, item in proposed_by_key.items():
            if key not in current_by_key:
                yield item.name, None, item

    @staticmethod
    def _status(current: Any, proposed: Any, differences: list) -> str:
        if current is None:
            return ADDED
        if proposed is None:
            return REMOVED
        return MODIFIED if differences else UNCHANGED

    def compare_fields(self, current: Any, proposed: Any) -> List[FieldComparison]:
        """Classify every field name in either collection."""
        comparisons: List[FieldComparison] = []
        for name, old, new in self._union(normalize_fields(current), normalize_fields(proposed)):
            differences = (
                diff_properties(old, new, FIELD_PROPERTIES) if old is not None and new is not None else []
            )
            comparisons.append(
                FieldComparison(
                    name=name,
                    status=self._status(old, new, differences),
                    current=old,
                    proposed=new,
                    differences=differences,
                )
            )
        return comparisons

    def compare_validation_rules(self, current: Any, proposed: Any) -> List[RuleComparison]:
        """Classify every validation rule name in either collection."""
        comparisons: List[RuleComparison] = []
        for name, old, new in self._union(normalize_rules(current), normalize_rules(proposed)):
            differences = (
                diff_properties(old, new, RULE_PROPERTIES) if old is not None and new is not None else []
            )
            comparisons.append(
                RuleComparison(
                    name=name,
                    status=self._status(old, new, differences),
                    current=old,
                    proposed=new,
                    differences=differences,
                )
            )
        return comparisons

    def generate_diff(
        self,
        current_state: Union[CurrentState, dict, None],
        proposed_fields: Any,
        proposed_rules: Any,
    ) -> DiffRepresentation:
        """Diff a whole object and summarize it.

        ``change_percentage`` is the share of changed items (added, modified
        or removed) among all item names on either side, rounded half up.
        """
        state = get_current_state(current_state)
        field_comparisons = self.compare_fields(state.fields, proposed_fields)
        rule_comparisons = self.compare_validation_rules(state.validation_rules, proposed_rules)

        summary = _summarize(field_comparisons, rule_comparisons)
        total_items = len(field_comparisons) + len(rule_comparisons)
        change_percentage = (
            round_half_up(100 * summary.total_changes / total_items) if total_items else 0
        )

        logger.debug(
            "Diff for %s: %d changes across %d items (%d%%)",
            state.object_name,
            summary.total_changes,
            total_items,
            change_percentage,
        )

        return DiffRepresentation(
            object_name=state.object_name,
            fields=field_comparisons,
            validation_rules=rule_comparisons,
            summary=summary,
            change_percentage=change_percentage,
        )


def _count(comparisons: Sequence[Union[FieldComparison, RuleComparison]], status: str) -> int:
    return sum(1 for c in comparisons if c.status == status)


def _summarize(
    fields: List[FieldComparison], rules: List[RuleComparison]
) -> DiffSummary:
    summary = DiffSummary(
        fields_added=_count(fields, ADDED),
        fields_modified=_count(fields, MODIFIED),
        fields_removed=_count(fields, REMOVED),
        fields_unchanged=_count(fields, UNCHANGED),
        rules_added=_count(rules, ADDED),
        rules_modified=_count(rules, MODIFIED),
        rules_removed=_count(rules, REMOVED),
        rules_unchanged=_count(rules, UNCHANGED),
    )
    summary.total_changes = (
        summary.fields_added
        + summary.fields_modified
        + summary.fields_removed
        + summary.rules_added
        + summary.rules_modified
        + summary.rules_removed
    )
    return summary


_default = MetadataComparator()


def compare_fields(current: Any, proposed: Any) -> List[FieldComparison]:
    return _default.compare_fields(current, proposed)


def compare_validation_rules(current: Any, proposed: Any) -> List[RuleComparison]:
    return _default.compare_validation_rules(current, proposed)


def generate_diff(
    current_state: Union[CurrentState, dict, None],
    proposed_fields: Any,
    proposed_rules: Any,
) -> DiffRepresentation:
    return _default.generate_diff(current_state, proposed_fields, proposed_rules)
