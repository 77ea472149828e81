"""Tests for object-level conflict detection."""

import pytest

from sf_impact.config import AnalyzerConfig
from sf_impact.impact import ConflictDetector, detect_conflicts
from sf_impact.impact.conflicts import (
    levenshtein_distance,
    name_similarity,
    strongly_connected_components,
)
from sf_impact.impact.models import SEVERITY_ORDER


def _naming(conflicts):
    return [(c.severity, c.risk_score) for c in conflicts if c.type == "naming"]


class TestEditDistance:
    @pytest.mark.parametrize(
        "a,b,expected",
        [("kitten", "sitting", 3), ("", "abc", 3), ("abc", "abc", 0), ("flaw", "lawn", 2)],
    )
    def test_levenshtein(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected
        assert levenshtein_distance(b, a) == expected

    def test_similarity(self):
        assert name_similarity("abc", "abc") == 1.0
        assert name_similarity("", "") == 1.0
        assert name_similarity("headcounts", "headcount") == pytest.approx(0.9)


class TestFieldConflicts:
    def test_duplicate_name(self, account_fields):
        conflicts = detect_conflicts(
            {"fields": [{"name": "Region__c", "label": "Region", "type": "Picklist"}]},
            {"fields": account_fields},
        )

        assert len(conflicts) == 1
        assert conflicts[0].type == "duplicate"
        assert conflicts[0].severity == "high"
        assert conflicts[0].conflicting_component == "Region__c"
        assert conflicts[0].risk_score == 70

    def test_missing_formula_reference_is_dependency(self, account_fields):
        conflicts = detect_conflicts(
            {"fields": [{"name": "Score__c", "type": "Formula", "formula": "Weight__c * 2"}]},
            {"fields": account_fields},
        )

        assert [(c.type, c.conflicting_component) for c in conflicts] == [
            ("dependency", "Weight__c")
        ]

    def test_empty_inputs(self):
        assert detect_conflicts({}, {}) == []
        assert detect_conflicts(None, None) == []


class TestRuleConflicts:
    def test_contradiction_maps_to_validation(self):
        conflicts = detect_conflicts(
            {"validationRules": [{"name": "Email_Present", "errorConditionFormula": "NOT(ISBLANK(Email__c))"}]},
            {"validationRules": [{"name": "Email_Blank", "errorConditionFormula": "ISBLANK(Email__c)"}]},
        )

        assert [(c.type, c.severity, c.conflicting_component) for c in conflicts] == [
            ("validation", "high", "Email_Blank")
        ]

    def test_overlap_maps_to_duplicate(self):
        conflicts = detect_conflicts(
            {"validationRules": [{"name": "Rule_A", "errorConditionFormula": "ISBLANK(A__c)"}]},
            {"validationRules": [{"name": "Rule_A", "errorConditionFormula": "ISBLANK(B__c)"}]},
        )
        assert [c.type for c in conflicts] == ["duplicate"]


class TestCircularDependencies:
    def test_two_field_cycle(self):
        detector = ConflictDetector()
        conflicts = detector.detect_conflicts(
            {"fields": [
                {"name": "Alpha__c", "type": "Formula", "formula": "Beta__c + 1"},
                {"name": "Beta__c", "type": "Formula", "formula": "Alpha__c * 2"},
            ]},
            {"fields": []},
        )

        circular = [c for c in conflicts if c.severity == "critical"]
        assert [c.conflicting_component for c in circular] == ["Alpha__c", "Beta__c"]
        assert circular[0].affected_components == ["Alpha__c", "Beta__c"]
        assert circular[0].type == "dependency"

    def test_cycle_through_existing_field(self):
        conflicts = detect_conflicts(
            {"fields": [{"name": "Alpha__c", "type": "Formula", "formula": "Gamma__c"}]},
            {"fields": [{"name": "Gamma__c", "type": "Formula", "formula": "Alpha__c / 2"}]},
        )
        assert [c.conflicting_component for c in conflicts if c.severity == "critical"] == ["Alpha__c"]

    def test_self_reference(self):
        conflicts = detect_conflicts(
            {"fields": [{"name": "Alpha__c", "type": "Formula", "formula": "Alpha__c + 1"}]}, {}
        )
        assert any(c.severity == "critical" for c in conflicts)

    def test_chain_is_not_a_cycle(self):
        conflicts = detect_conflicts(
            {"fields": [{"name": "Alpha__c", "type": "Formula", "formula": "Beta__c + 1"}]},
            {"fields": [{"name": "Beta__c", "type": "Formula", "formula": "Gamma__c"},
                        {"name": "Gamma__c", "type": "Number"}]},
        )
        assert conflicts == []

    def test_scc(self):
        adjacency = {"a": ["b"], "b": ["a", "c"], "c": []}
        components = strongly_connected_components(adjacency, {"a", "b", "c"})
        assert sorted(sorted(c) for c in components) == [["a", "b"], ["c"]]

    @pytest.mark.slow
    def test_long_formula_ring_beyond_recursion_limit(self):
        nodes = [f"F{i}__c" for i in range(50_000)]
        adjacency = {node: [nodes[(i + 1) % len(nodes)]] for i, node in enumerate(nodes)}

        components = strongly_connected_components(adjacency, set(nodes))

        assert len(components) == 1
        assert components[0] == set(nodes)

    @pytest.mark.slow
    def test_long_formula_chain_is_all_singletons(self):
        nodes = [f"F{i}__c" for i in range(50_000)]
        adjacency = {node: [nodes[i + 1]] for i, node in enumerate(nodes[:-1])}

        components = strongly_connected_components(adjacency, set(nodes))

        assert len(components) == len(nodes)
        assert all(len(c) == 1 for c in components)


class TestNamingConflicts:
    def test_reserved_word(self):
        conflicts = detect_conflicts({"fields": [{"name": "Status__c"}]}, {})
        assert _naming(conflicts) == [("high", 75)]

    def test_convention(self):
        conflicts = detect_conflicts({"fields": [{"name": "customer_email__c"}]}, {})
        assert _naming(conflicts) == [("low", 20)]

    def test_snake_case_convention(self):
        detector = ConflictDetector(AnalyzerConfig(naming_convention="snake_case__c"))
        assert detector.detect_conflicts({"fields": [{"name": "customer_email__c"}]}, {}) == []
        assert _naming(detector.detect_conflicts({"fields": [{"name": "CustomerEmail__c"}]}, {})) == [
            ("low", 20)
        ]

    def test_missing_suffix_breaks_convention(self):
        detector = ConflictDetector()
        assert not detector.follows_naming_convention("CustomerEmail")
        assert detector.follows_naming_convention("CustomerEmail__c")

    def test_similar_name(self, account_fields):
        conflicts = detect_conflicts({"fields": [{"name": "HeadCounts__c"}]}, {"fields": account_fields})

        similar = [c for c in conflicts if c.type == "naming"]
        assert len(similar) == 1
        assert similar[0].severity == "medium"
        assert similar[0].conflicting_component == "Headcount__c"


class TestPrioritization:
    def test_sorted_by_severity_then_risk(self, account_fields):
        conflicts = detect_conflicts(
            {"fields": [
                {"name": "Status__c"},
                {"name": "region__c"},
                {"name": "Loop__c", "type": "Formula", "formula": "Loop__c"},
                {"name": "bad_name__c"},
            ]},
            {"fields": account_fields},
        )

        keys = [(SEVERITY_ORDER[c.severity], c.risk_score) for c in conflicts]
        assert keys == sorted(keys, reverse=True)
        assert conflicts[0].severity == "critical"
        assert conflicts[-1].severity == "low"
