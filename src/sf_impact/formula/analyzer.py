"""Heuristic text analysis of Salesforce formulas.

This is not a parser. Formulas are treated as bags of tokens:

    tokens(f)        = lowercase words of f after (){}[], are blanked out
    similarity(a, b) = |tokens(a) ∩ tokens(b)| / |tokens(a) ∪ tokens(b)|

Contradiction detection is a textual guess on top of that: if exactly one
side wraps its condition in NOT( and removing that wrapper makes it look like
the other side, the pair is reported. Logically equivalent formulas written
differently are not recognized, and unrelated formulas that happen to share
vocabulary can be flagged. Callers go through :class:`FormulaAnalyzer` so a
real expression parser can replace this without touching them.
"""

from __future__ import annotations

import re
from typing import List, Optional, Set

from ..config import DEFAULT_CONFIG, ThresholdConfig

_SEPARATORS = re.compile(r"[(){}\[\],]")
_NOT_WRAPPER = re.compile(r"\bnot\s*\(", re.IGNORECASE)

CUSTOM_FIELD_PATTERN = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*__c)\b")

STANDARD_FIELDS: tuple[str, ...] = (
    "Id",
    "Name",
    "CreatedDate",
    "CreatedById",
    "LastModifiedDate",
    "LastModifiedById",
    "OwnerId",
    "RecordTypeId",
)
STANDARD_FIELD_PATTERN = re.compile(r"\b(" + "|".join(STANDARD_FIELDS) + r")\b")

# Display rewrites, applied in order. Two-character operators come before
# their one-character prefixes.
_SIMPLIFY_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"NOT\(ISBLANK\((.*?)\)\)"), r"\1 is not blank"),
    (re.compile(r"NOT\(ISNULL\((.*?)\)\)"), r"\1 is not null"),
    (re.compile(r"ISBLANK\((.*?)\)"), r"\1 is blank"),
    (re.compile(r"ISNULL\((.*?)\)"), r"\1 is null"),
    (re.compile(r"\s*=\s*TRUE\b", re.IGNORECASE), " is true"),
    (re.compile(r"\s*=\s*FALSE\b", re.IGNORECASE), " is false"),
    (re.compile(r"\s*(?:!=|<>)\s*"), " is not equal to "),
    (re.compile(r"\s*>=\s*"), " is greater than or equal to "),
    (re.compile(r"\s*<=\s*"), " is less than or equal to "),
    (re.compile(r"\s*==?\s*"), " equals "),
    (re.compile(r"\s*>\s*"), " is greater than "),
    (re.compile(r"\s*<\s*"), " is less than "),
    (re.compile(r"AND\((.*?)\)"), r"(\1)"),
    (re.compile(r"OR\((.*?)\)"), r"(\1 or another condition)"),
    (re.compile(r"\s+"), " "),
)


class FormulaAnalyzer:
    """Token-level formula comparison and field-reference extraction."""

    def __init__(self, thresholds: Optional[ThresholdConfig] = None):
        self.thresholds = thresholds or DEFAULT_CONFIG.thresholds

    @staticmethod
    def tokenize(formula: Optional[str]) -> List[str]:
        if not formula:
            return []
        return [t.lower() for t in _SEPARATORS.sub(" ", formula).split()]

    def token_set(self, formula: Optional[str]) -> Set[str]:
        return set(self.tokenize(formula))

    def similarity(self, a: Optional[str], b: Optional[str]) -> float:
        """Jaccard index of the two token sets, in [0, 1]."""
        tokens_a = self.token_set(a)
        tokens_b = self.token_set(b)
        union = tokens_a | tokens_b
        if not union:
            return 0.0
        return len(tokens_a & tokens_b) / len(union)

    def contradictory(self, a: Optional[str], b: Optional[str]) -> bool:
        """True if exactly one side is NOT(...)-wrapped and unwrapping it matches the other."""
        a = a or ""
        b = b or ""
        a_negated = bool(_NOT_WRAPPER.search(a))
        b_negated = bool(_NOT_WRAPPER.search(b))

        if a_negated == b_negated:
            return False

        threshold = self.thresholds.contradiction_similarity
        if a_negated:
            return self.similarity(_NOT_WRAPPER.sub("(", a), b) > threshold
        return self.similarity(a, _NOT_WRAPPER.sub("(", b)) > threshold

    @staticmethod
    def extract_field_references(formula: Optional[str]) -> List[str]:
        """Custom (``__c``) and well-known standard field names, deduped in first-seen order."""
        if not formula:
            return []
        found = CUSTOM_FIELD_PATTERN.findall(formula) + STANDARD_FIELD_PATTERN.findall(formula)
        return list(dict.fromkeys(found))

    @staticmethod
    def simplify(formula: Optional[str]) -> str:
        """English-ish rendering of a formula for display. Not used for analysis."""
        if not formula:
            return ""
        simplified = formula
        for pattern, replacement in _SIMPLIFY_RULES:
            simplified = pattern.sub(replacement, simplified)
        return simplified.strip()


_default = FormulaAnalyzer()


def similarity(a: Optional[str], b: Optional[str]) -> float:
    return _default.similarity(a, b)


def contradictory(a: Optional[str], b: Optional[str]) -> bool:
    return _default.contradictory(a, b)


def simplify_formula(formula: Optional[str]) -> str:
    return FormulaAnalyzer.simplify(formula)


def extract_field_references(formula: Optional[str]) -> List[str]:
    return FormulaAnalyzer.extract_field_references(formula)
