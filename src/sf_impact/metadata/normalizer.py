"""Normalization of raw metadata into canonical snapshots.

Input comes from two directions: org-describe results (``fullName``,
string booleans, ``referenceTo`` as a string) and LLM-generated proposals
(``name``, real booleans, lists). Both are mapped onto the dataclasses in
:mod:`.models` here, once, so the analyzers never branch on shape.

Malformed collections are treated as empty and malformed entries are
skipped; nothing in this module raises for shape problems.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple, Union

from ..logging_config import get_logger
from .models import (
    FIELD_KIND,
    RULE_KIND,
    Component,
    CurrentState,
    FieldDefinition,
    ValidationRuleDefinition,
)

logger = get_logger(__name__)

DEFAULT_OBJECT_NAME = "CustomObject"

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no", ""})


def _pick(raw: Mapping, *keys: str) -> Any:
    """First non-None value among camelCase/snake_case spellings."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in _TRUE_STRINGS:
            return True
        if lower in _FALSE_STRINGS:
            return False
        return default
    return bool(value)


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _as_names(value: Any) -> Tuple[str, ...]:
    """referenceTo may be a single object name or a list of them."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, Iterable):
        return tuple(str(v) for v in value if v is not None and v != "")
    return ()


def _picklist_entry(entry: Any) -> Optional[str]:
    if isinstance(entry, Mapping):
        return _as_str(_pick(entry, "fullName", "value", "label"))
    return _as_str(entry)


def _as_picklist(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, (str, Mapping)):
        value = [value]
    if not isinstance(value, Iterable):
        return None
    entries = (_picklist_entry(v) for v in value)
    return tuple(e for e in entries if e is not None)


def identity_of(raw: Any) -> Optional[str]:
    """Identity key of a raw entry: ``name`` wins over ``fullName``."""
    if isinstance(raw, (FieldDefinition, ValidationRuleDefinition, Component)):
        return raw.name
    if not isinstance(raw, Mapping):
        return None
    name = raw.get("name") or raw.get("fullName")
    return _as_str(name) if name else None


def normalize_field(raw: Any) -> Optional[FieldDefinition]:
    """Map one raw field onto a FieldDefinition, or None if it has no identity."""
    if isinstance(raw, FieldDefinition):
        return raw
    if isinstance(raw, Component):
        if not raw.is_field:
            return None
        return FieldDefinition(
            name=raw.name,
            type=raw.field_type,
            formula=raw.formula,
            reference_to=raw.reference_to,
        )
    if not isinstance(raw, Mapping):
        return None
    name = identity_of(raw)
    if name is None:
        return None

    return FieldDefinition(
        name=name,
        label=_as_str(raw.get("label")),
        type=_as_str(raw.get("type")),
        length=_as_int(raw.get("length")),
        precision=_as_int(raw.get("precision")),
        scale=_as_int(raw.get("scale")),
        required=_as_bool(raw.get("required"), False),
        unique=_as_bool(raw.get("unique"), False),
        external_id=_as_bool(_pick(raw, "externalId", "external_id"), False),
        default_value=_pick(raw, "defaultValue", "default_value"),
        formula=_as_str(raw.get("formula")),
        reference_to=_as_names(_pick(raw, "referenceTo", "reference_to")),
        picklist_values=_as_picklist(_pick(raw, "picklistValues", "picklist_values")),
        relationship_name=_as_str(_pick(raw, "relationshipName", "relationship_name")),
        delete_constraint=_as_str(_pick(raw, "deleteConstraint", "delete_constraint")),
        help_text=_as_str(_pick(raw, "helpText", "inlineHelpText", "help_text")),
        description=_as_str(raw.get("description")),
        summarized_object=_as_str(_pick(raw, "summarizedObject", "summarized_object")),
    )


def normalize_rule(raw: Any) -> Optional[ValidationRuleDefinition]:
    """Map one raw validation rule onto a ValidationRuleDefinition."""
    if isinstance(raw, ValidationRuleDefinition):
        return raw
    if isinstance(raw, Component):
        if not raw.is_rule:
            return None
        return ValidationRuleDefinition(
            name=raw.name, error_condition_formula=raw.error_condition_formula or ""
        )
    if not isinstance(raw, Mapping):
        return None
    name = identity_of(raw)
    if name is None:
        return None

    return ValidationRuleDefinition(
        name=name,
        error_condition_formula=_as_str(
            _pick(raw, "errorConditionFormula", "error_condition_formula")
        )
        or "",
        error_message=_as_str(_pick(raw, "errorMessage", "error_message")),
        active=_as_bool(raw.get("active"), True),
        description=_as_str(raw.get("description")),
        error_display_field=_as_str(_pick(raw, "errorDisplayField", "error_display_field")),
    )


def _as_list(items: Any) -> list:
    if items is None or isinstance(items, (str, bytes, Mapping)):
        return []
    if isinstance(items, (list, tuple)):
        return list(items)
    return []


def normalize_fields(items: Any) -> List[FieldDefinition]:
    """Normalize a collection of raw fields; non-lists become empty."""
    result: List[FieldDefinition] = []
    for raw in _as_list(items):
        definition = normalize_field(raw)
        if definition is None:
            logger.debug("Skipping field entry without name/fullName: %r", raw)
            continue
        result.append(definition)
    return result


def normalize_rules(items: Any) -> List[ValidationRuleDefinition]:
    """Normalize a collection of raw validation rules; non-lists become empty."""
    result: List[ValidationRuleDefinition] = []
    for raw in _as_list(items):
        rule = normalize_rule(raw)
        if rule is None:
            logger.debug("Skipping validation rule entry without name/fullName: %r", raw)
            continue
        result.append(rule)
    return result


def get_current_state(metadata: Union[Mapping, CurrentState, None]) -> CurrentState:
    """Build a CurrentState from describe output, a CurrentState, or nothing."""
    if isinstance(metadata, CurrentState):
        return metadata
    if not isinstance(metadata, Mapping):
        if metadata is not None:
            logger.debug("Current metadata is not a mapping (%s); using empty state",
                         type(metadata).__name__)
        return CurrentState(object_name=DEFAULT_OBJECT_NAME)

    last_modified = _pick(metadata, "lastModified", "last_modified")
    return CurrentState(
        object_name=_as_str(_pick(metadata, "objectName", "object_name")) or DEFAULT_OBJECT_NAME,
        fields=normalize_fields(metadata.get("fields")),
        validation_rules=normalize_rules(
            _pick(metadata, "validationRules", "validation_rules")
        ),
        last_modified=_as_str(last_modified),
    )


def normalize_component(raw: Any) -> Optional[Component]:
    """Map a raw component (``type`` field or validationRule) onto a Component."""
    if isinstance(raw, Component):
        return raw
    if isinstance(raw, FieldDefinition):
        return Component.from_field(raw)
    if isinstance(raw, ValidationRuleDefinition):
        return Component.from_rule(raw)
    name = identity_of(raw)
    if name is None:
        return None

    kind = raw.get("type")
    if kind not in (FIELD_KIND, RULE_KIND):
        logger.debug("Skipping component %s with unknown type %r", name, kind)
        return None

    return Component(
        kind=kind,
        name=name,
        field_type=_as_str(_pick(raw, "fieldType", "field_type")),
        formula=_as_str(raw.get("formula")),
        reference_to=_as_names(_pick(raw, "referenceTo", "reference_to")),
        error_condition_formula=_as_str(
            _pick(raw, "errorConditionFormula", "error_condition_formula")
        ),
    )


def normalize_components(items: Any) -> List[Component]:
    result: List[Component] = []
    for raw in _as_list(items):
        component = normalize_component(raw)
        if component is not None:
            result.append(component)
    return result


def components_from(
    fields: Iterable[FieldDefinition], rules: Iterable[ValidationRuleDefinition]
) -> List[Component]:
    """Flatten fields and rules into the component list dependency detection expects."""
    return [Component.from_field(f) for f in fields] + [Component.from_rule(r) for r in rules]
