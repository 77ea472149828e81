"""Object-level conflict detection for a set of proposed changes.

Turns analyzer output into display-ready conflicts with a resolution, a list
of suggested actions and a risk score, and adds the checks that need the
whole proposal at once: circular formula references and naming problems.

Results are ordered most severe first, then by risk score.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import numpy as np

from ..config import DEFAULT_CONFIG, AnalyzerConfig
from ..formula.analyzer import FormulaAnalyzer
from ..logging_config import get_logger
from ..metadata.models import FieldDefinition
from ..metadata.normalizer import normalize_fields, normalize_rules
from .analyzer import ImpactAnalyzer
from .models import SEVERITY_ORDER, SEVERITY_RISK_SCORE, DetectedConflict

logger = get_logger(__name__)

RESERVED_WORDS = frozenset(
    {
        "account", "case", "contact", "lead", "opportunity",
        "product", "user", "task", "event", "note",
        "id", "name", "type", "status", "date",
        "currency", "percent", "formula", "master", "detail",
        "limit", "offset", "order", "by", "where",
        "select", "from", "and", "or", "not",
    }
)

NAMING_PATTERNS: Dict[str, re.Pattern] = {
    "PascalCase__c": re.compile(r"^[A-Z][a-zA-Z0-9]*$"),
    "snake_case__c": re.compile(r"^[a-z]+(_[a-z]+)*$"),
}

NAMING_SUGGESTIONS: Dict[str, List[str]] = {
    "PascalCase__c": [
        "Use PascalCase for field names (e.g., CustomerEmail__c)",
        "Include descriptive context in the name",
        "Avoid abbreviations when possible",
    ],
    "snake_case__c": [
        "Use lowercase words separated by underscores (e.g., customer_email__c)",
        "Include descriptive context in the name",
        "Avoid abbreviations when possible",
    ],
}

_RULE_CONFLICT_TYPES = {"overlap": "duplicate", "contradiction": "validation", "redundancy": "duplicate"}

CUSTOM_SUFFIX = "__c"


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert, delete, substitute) between two strings."""
    rows, cols = len(b) + 1, len(a) + 1
    matrix = np.zeros((rows, cols), dtype=np.int64)
    matrix[:, 0] = np.arange(rows)
    matrix[0, :] = np.arange(cols)

    for i in range(1, rows):
        for j in range(1, cols):
            if b[i - 1] == a[j - 1]:
                matrix[i, j] = matrix[i - 1, j - 1]
            else:
                matrix[i, j] = 1 + min(matrix[i - 1, j - 1], matrix[i, j - 1], matrix[i - 1, j])

    return int(matrix[rows - 1, cols - 1])


def name_similarity(a: str, b: str) -> float:
    """1 - distance / length of the longer string; 1.0 for two empty strings."""
    longer = max(len(a), len(b))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(a, b)) / longer


def _base_name(name: str) -> str:
    return name[: -len(CUSTOM_SUFFIX)] if name.endswith(CUSTOM_SUFFIX) else name


def resolution_for(conflict_type: str, component_name: str) -> str:
    if conflict_type == "duplicate":
        return f'Choose a different name for "{component_name}" or modify the existing component'
    if conflict_type == "dependency":
        return f'Ensure all referenced components exist before creating "{component_name}"'
    if conflict_type == "validation":
        return "Review and modify validation logic to avoid conflicts"
    if conflict_type == "naming":
        return f'Rename "{component_name}" to follow naming conventions'
    return "Review and resolve the conflict before proceeding"


def suggested_actions_for(conflict_type: str, component_name: str) -> List[str]:
    if conflict_type == "duplicate":
        return [
            f"Use a more specific name for {component_name}",
            "Check if the existing field can be reused",
            "Add a prefix or suffix to differentiate",
        ]
    if conflict_type == "dependency":
        return [
            "Create required dependencies first",
            "Update formula to reference existing fields",
            "Consider using a different field type",
        ]
    if conflict_type == "validation":
        return [
            "Combine validation rules if they serve the same purpose",
            "Adjust validation conditions to avoid overlap",
            "Use custom error messages to differentiate",
        ]
    return ["Review the conflict and take appropriate action"]


def prioritize(conflicts: List[DetectedConflict]) -> List[DetectedConflict]:
    """Most severe first, then highest risk score; ties keep input order."""
    return sorted(
        conflicts,
        key=lambda c: (-SEVERITY_ORDER.get(c.severity, 0), -c.risk_score),
    )


class ConflictDetector:
    """Finds conflicts between proposed metadata and what the object already has."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.impacts = ImpactAnalyzer(self.config)
        self.formulas = FormulaAnalyzer(self.config.thresholds)

    def detect_conflicts(self, proposed: Any, existing: Any) -> List[DetectedConflict]:
        """All conflicts for a proposal ``{fields, validationRules}`` against existing metadata."""
        proposed_fields = normalize_fields(_section(proposed, "fields"))
        proposed_rules = normalize_rules(_section(proposed, "validationRules", "validation_rules"))
        existing_fields = normalize_fields(_section(existing, "fields"))
        existing_rules = normalize_rules(_section(existing, "validationRules", "validation_rules"))

        conflicts: List[DetectedConflict] = []
        conflicts.extend(self.detect_field_conflicts(proposed_fields, existing_fields))
        conflicts.extend(self.detect_rule_conflicts(proposed_rules, existing_rules))
        conflicts.extend(self.detect_circular_dependencies(proposed_fields, existing_fields))
        conflicts.extend(self.detect_naming_conflicts(proposed_fields, existing_fields))

        logger.debug(
            "%d conflicts for %d proposed fields, %d proposed rules",
            len(conflicts),
            len(proposed_fields),
            len(proposed_rules),
        )
        return prioritize(conflicts)

    def detect_field_conflicts(
        self, proposed_fields: List[FieldDefinition], existing_fields: List[FieldDefinition]
    ) -> List[DetectedConflict]:
        conflicts: List[DetectedConflict] = []
        for proposed in proposed_fields:
            for impact in self.impacts.analyze_field_impacts(proposed, existing_fields):
                if impact.impact_type == "conflict":
                    conflict_type = "duplicate"
                elif impact.impact_type == "dependency":
                    conflict_type = "dependency"
                else:
                    continue
                conflicts.append(
                    DetectedConflict(
                        type=conflict_type,
                        severity=impact.severity,
                        conflicting_component=(
                            impact.affected_components[0] if impact.affected_components else proposed.name
                        ),
                        description=impact.description,
                        resolution=resolution_for(conflict_type, proposed.name),
                        affected_components=list(impact.affected_components),
                        suggested_actions=suggested_actions_for(conflict_type, proposed.name),
                        risk_score=SEVERITY_RISK_SCORE.get(impact.severity, 10),
                    )
                )
        return conflicts

    def detect_rule_conflicts(self, proposed_rules, existing_rules) -> List[DetectedConflict]:
        conflicts: List[DetectedConflict] = []
        for proposed in proposed_rules:
            for found in self.impacts.check_validation_rule_conflicts(proposed, existing_rules):
                conflicts.append(
                    DetectedConflict(
                        type=_RULE_CONFLICT_TYPES[found.conflict_type],
                        severity=found.severity,
                        conflicting_component=found.existing_rule or proposed.name,
                        description=found.description,
                        resolution=resolution_for("validation", proposed.name),
                        affected_components=[found.existing_rule] if found.existing_rule else [],
                        suggested_actions=suggested_actions_for("validation", proposed.name),
                        risk_score=SEVERITY_RISK_SCORE.get(found.severity, 10),
                    )
                )
        return conflicts

    def detect_circular_dependencies(
        self, proposed_fields: List[FieldDefinition], existing_fields: List[FieldDefinition]
    ) -> List[DetectedConflict]:
        """Proposed formula fields that sit on a reference cycle.

        Proposed definitions shadow existing ones with the same name.
        """
        key = self.config.name_key
        by_key: Dict[str, FieldDefinition] = {}
        for f in existing_fields:
            by_key.setdefault(key(f.name), f)
        for f in proposed_fields:
            by_key[key(f.name)] = f

        adjacency: Dict[str, List[str]] = {}
        for k, f in by_key.items():
            if f.formula:
                refs = (key(r) for r in self.formulas.extract_field_references(f.formula))
                adjacency[k] = [r for r in refs if r in by_key]

        cyclic: Dict[str, set] = {}
        for component in strongly_connected_components(adjacency, set(by_key)):
            if len(component) > 1 or any(n in adjacency.get(n, []) for n in component):
                for node in component:
                    cyclic[node] = component

        conflicts: List[DetectedConflict] = []
        for f in proposed_fields:
            if not f.is_formula or key(f.name) not in cyclic:
                continue
            members = sorted(by_key[n].name for n in cyclic[key(f.name)])
            conflicts.append(
                DetectedConflict(
                    type="dependency",
                    severity="critical",
                    conflicting_component=f.name,
                    description=f'Circular dependency detected in formula field "{f.name}"',
                    resolution="Remove circular references from formula",
                    affected_components=members,
                    suggested_actions=[
                        "Review formula dependencies",
                        "Restructure formula logic to avoid circular references",
                        "Consider using workflow rules or process builder instead",
                    ],
                    risk_score=SEVERITY_RISK_SCORE["critical"],
                )
            )
        return conflicts

    def follows_naming_convention(self, field_name: str) -> bool:
        if not field_name.endswith(CUSTOM_SUFFIX):
            return False
        pattern = NAMING_PATTERNS[self.config.naming_convention]
        return bool(pattern.match(_base_name(field_name)))

    def find_similar_field_names(
        self, field_name: str, existing_fields: List[FieldDefinition]
    ) -> List[str]:
        """Existing names close to ``field_name`` but not the same name."""
        threshold = self.config.thresholds.similar_name_threshold
        normalized = _base_name(field_name.lower())
        similar: List[str] = []
        for existing in existing_fields:
            score = name_similarity(normalized, _base_name(existing.name.lower()))
            if threshold < score < 1:
                similar.append(existing.name)
        return similar

    def detect_naming_conflicts(
        self, proposed_fields: List[FieldDefinition], existing_fields: List[FieldDefinition]
    ) -> List[DetectedConflict]:
        convention = self.config.naming_convention
        conflicts: List[DetectedConflict] = []

        for f in proposed_fields:
            base = _base_name(f.name).lower()
            if base in RESERVED_WORDS:
                conflicts.append(
                    DetectedConflict(
                        type="naming",
                        severity="high",
                        conflicting_component=f.name,
                        description=f'Field name "{f.name}" uses reserved word "{base}"',
                        resolution="Choose a different name that doesn't conflict with reserved words",
                        affected_components=[f.name],
                        suggested_actions=[
                            f'Prefix the field name (e.g., "Custom_{f.name}")',
                            "Use a synonym that is not reserved",
                            "Add context to make the name unique",
                        ],
                        risk_score=75,
                    )
                )

            if not self.follows_naming_convention(f.name):
                conflicts.append(
                    DetectedConflict(
                        type="naming",
                        severity="low",
                        conflicting_component=f.name,
                        description=(
                            f'Field name "{f.name}" doesn\'t follow organization naming conventions'
                        ),
                        resolution=f"Rename to follow {convention} pattern",
                        affected_components=[f.name],
                        suggested_actions=list(NAMING_SUGGESTIONS[convention]),
                        risk_score=SEVERITY_RISK_SCORE["low"],
                    )
                )

            similar = self.find_similar_field_names(f.name, existing_fields)
            if similar:
                conflicts.append(
                    DetectedConflict(
                        type="naming",
                        severity="medium",
                        conflicting_component=similar[0],
                        description=(
                            f'Field name "{f.name}" is very similar to existing field "{similar[0]}"'
                        ),
                        resolution="Consider using a more distinct name to avoid confusion",
                        affected_components=similar,
                        suggested_actions=[
                            "Add more specific context to the field name",
                            "Use a completely different naming approach",
                            f'Consider if "{similar[0]}" can be reused instead',
                        ],
                        risk_score=SEVERITY_RISK_SCORE["medium"],
                    )
                )

        return conflicts


def _section(metadata: Any, *keys: str) -> Any:
    if isinstance(metadata, Mapping):
        for k in keys:
            if metadata.get(k) is not None:
                return metadata[k]
        return None
    for k in keys:
        value = getattr(metadata, k, None)
        if value is not None:
            return value
    return None


def strongly_connected_components(
    adjacency: Dict[str, List[str]], all_nodes: set
) -> List[set]:
    """Tarjan's algorithm for strongly connected components (iterative).

    Uses an explicit call stack so long formula chains don't hit the
    recursion limit.
    """
    counter = 0
    scc_stack: List[str] = []
    on_stack: set = set()
    index: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    result: List[set] = []

    for root in sorted(all_nodes):
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        scc_stack.append(root)
        on_stack.add(root)
        call_stack = [(root, iter(adjacency.get(root, [])))]

        while call_stack:
            v, it = call_stack[-1]
            pushed = False
            for w in it:
                if w not in index:
                    index[w] = lowlink[w] = counter
                    counter += 1
                    scc_stack.append(w)
                    on_stack.add(w)
                    call_stack.append((w, iter(adjacency.get(w, []))))
                    pushed = True
                    break
                elif w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])

            if not pushed:
                call_stack.pop()
                if call_stack:
                    caller = call_stack[-1][0]
                    lowlink[caller] = min(lowlink[caller], lowlink[v])

                if lowlink[v] == index[v]:
                    component: set = set()
                    while True:
                        w = scc_stack.pop()
                        on_stack.discard(w)
                        component.add(w)
                        if w == v:
                            break
                    result.append(component)

    return result


_default = ConflictDetector()


def detect_conflicts(proposed: Any, existing: Any) -> List[DetectedConflict]:
    return _default.detect_conflicts(proposed, existing)
