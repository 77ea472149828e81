"""Canonical metadata snapshots: fields, validation rules, object state.

Everything the analyzers consume is one of these types. Raw org-describe or
LLM-generated dicts are turned into them by :mod:`.normalizer` before any
comparison logic runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

MASTER_DETAIL = "MasterDetail"
LOOKUP = "Lookup"
FORMULA = "Formula"
ROLLUP_TYPES = frozenset({"Rollup", "Summary"})

FIELD_KIND = "field"
RULE_KIND = "validationRule"


@dataclass(frozen=True)
class FieldDefinition:
    """Shape of one Salesforce field at a point in time."""

    name: str
    label: Optional[str] = None
    type: Optional[str] = None
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    required: bool = False
    unique: bool = False
    external_id: bool = False
    default_value: Any = None
    formula: Optional[str] = None
    reference_to: Tuple[str, ...] = ()
    picklist_values: Optional[Tuple[str, ...]] = None
    relationship_name: Optional[str] = None
    delete_constraint: Optional[str] = None
    help_text: Optional[str] = None
    description: Optional[str] = None
    summarized_object: Optional[str] = None

    @property
    def is_formula(self) -> bool:
        return self.type == FORMULA or bool(self.formula)

    @property
    def is_master_detail(self) -> bool:
        return self.type == MASTER_DETAIL

    @property
    def is_lookup(self) -> bool:
        return self.type == LOOKUP

    @property
    def is_relationship(self) -> bool:
        return self.is_master_detail or self.is_lookup

    @property
    def is_rollup(self) -> bool:
        return self.type in ROLLUP_TYPES

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "label": self.label,
            "type": self.type,
            "length": self.length,
            "precision": self.precision,
            "scale": self.scale,
            "required": self.required,
            "unique": self.unique,
            "externalId": self.external_id,
            "defaultValue": self.default_value,
            "formula": self.formula,
            "referenceTo": list(self.reference_to) or None,
            "picklistValues": list(self.picklist_values) if self.picklist_values is not None else None,
            "relationshipName": self.relationship_name,
            "deleteConstraint": self.delete_constraint,
            "helpText": self.help_text,
            "description": self.description,
            "summarizedObject": self.summarized_object,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ValidationRuleDefinition:
    """A named boolean condition that blocks a record save when true."""

    name: str
    error_condition_formula: str = ""
    error_message: Optional[str] = None
    active: bool = True
    description: Optional[str] = None
    error_display_field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "errorConditionFormula": self.error_condition_formula,
            "errorMessage": self.error_message,
            "active": self.active,
            "description": self.description,
            "errorDisplayField": self.error_display_field,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class CurrentState:
    """Current org metadata for one object, already normalized."""

    object_name: str
    fields: List[FieldDefinition] = field(default_factory=list)
    validation_rules: List[ValidationRuleDefinition] = field(default_factory=list)
    last_modified: Optional[str] = None


@dataclass(frozen=True)
class Component:
    """A field or validation rule as seen by dependency detection."""

    kind: str  # FIELD_KIND | RULE_KIND
    name: str
    field_type: Optional[str] = None
    formula: Optional[str] = None
    reference_to: Tuple[str, ...] = ()
    error_condition_formula: Optional[str] = None

    @property
    def is_field(self) -> bool:
        return self.kind == FIELD_KIND

    @property
    def is_rule(self) -> bool:
        return self.kind == RULE_KIND

    @property
    def is_formula_field(self) -> bool:
        return self.is_field and (self.field_type == FORMULA or bool(self.formula))

    @property
    def is_relationship(self) -> bool:
        return self.field_type in (MASTER_DETAIL, LOOKUP)

    @classmethod
    def from_field(cls, definition: FieldDefinition) -> "Component":
        return cls(
            kind=FIELD_KIND,
            name=definition.name,
            field_type=definition.type,
            formula=definition.formula,
            reference_to=definition.reference_to,
        )

    @classmethod
    def from_rule(cls, rule: ValidationRuleDefinition) -> "Component":
        return cls(
            kind=RULE_KIND,
            name=rule.name,
            error_condition_formula=rule.error_condition_formula,
        )
