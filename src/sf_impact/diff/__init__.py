"""Diff layer: field and validation rule comparison for one object."""

from .comparator import (
    MetadataComparator,
    compare_fields,
    compare_validation_rules,
    generate_diff,
)
from .models import (
    DiffRepresentation,
    DiffSummary,
    FieldComparison,
    FieldDifference,
    RuleComparison,
    RuleDifference,
)

__all__ = [
    "DiffRepresentation",
    "DiffSummary",
    "FieldComparison",
    "FieldDifference",
    "MetadataComparator",
    "RuleComparison",
    "RuleDifference",
    "compare_fields",
    "compare_validation_rules",
    "generate_diff",
]
