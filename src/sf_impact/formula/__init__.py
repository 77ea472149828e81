"""Formula layer: tokenization, similarity and reference extraction."""

from .analyzer import (
    STANDARD_FIELDS,
    FormulaAnalyzer,
    contradictory,
    extract_field_references,
    similarity,
    simplify_formula,
)

__all__ = [
    "STANDARD_FIELDS",
    "FormulaAnalyzer",
    "contradictory",
    "extract_field_references",
    "similarity",
    "simplify_formula",
]
