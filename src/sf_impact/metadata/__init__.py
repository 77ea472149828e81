"""Metadata layer: canonical field/rule snapshots and their normalization."""

from .models import (
    Component,
    CurrentState,
    FieldDefinition,
    ValidationRuleDefinition,
)
from .normalizer import (
    components_from,
    get_current_state,
    normalize_component,
    normalize_components,
    normalize_field,
    normalize_fields,
    normalize_rule,
    normalize_rules,
)

__all__ = [
    "Component",
    "CurrentState",
    "FieldDefinition",
    "ValidationRuleDefinition",
    "components_from",
    "get_current_state",
    "normalize_component",
    "normalize_components",
    "normalize_field",
    "normalize_fields",
    "normalize_rule",
    "normalize_rules",
]
