"""Tests for the impact analyzer: field impacts, rule conflicts, dependencies."""

import pytest

from sf_impact.config import AnalyzerConfig, ThresholdConfig
from sf_impact.exceptions import InvalidArgumentError
from sf_impact.impact import (
    ImpactAnalyzer,
    analyze_field_impacts,
    check_validation_rule_conflicts,
    detect_dependencies,
)
from sf_impact.metadata import components_from, normalize_fields, normalize_rules


def _master_detail(name, parent):
    return {"name": name, "type": "MasterDetail", "referenceTo": [parent]}


class TestFieldImpacts:
    def test_no_impacts_for_a_clean_field(self, account_fields):
        assert analyze_field_impacts({"name": "Tier__c", "label": "Tier", "type": "Text"}, account_fields) == []

    def test_duplicate_name(self, account_fields):
        impacts = analyze_field_impacts({"name": "region__c", "type": "Text"}, account_fields)

        assert len(impacts) == 1
        assert impacts[0].impact_type == "conflict"
        assert impacts[0].severity == "high"
        assert impacts[0].affected_components == ["Region__c"]

    def test_label_used_by_another_field(self, account_fields):
        impacts = analyze_field_impacts({"name": "Territory__c", "label": "REGION"}, account_fields)

        assert [(i.impact_type, i.severity) for i in impacts] == [("conflict", "medium")]
        assert impacts[0].affected_components == ["Region__c"]

    def test_missing_label_is_not_a_label_conflict(self):
        impacts = analyze_field_impacts({"name": "B__c"}, [{"name": "A__c"}])
        assert impacts == []

    def test_master_detail_limit(self):
        existing = [_master_detail("Parent1__c", "Account"), _master_detail("Parent2__c", "Contact")]
        impacts = analyze_field_impacts(_master_detail("Parent3__c", "Case"), existing)

        assert len(impacts) == 1
        assert impacts[0].severity == "high"
        assert impacts[0].affected_components == ["Parent1__c", "Parent2__c"]

    def test_master_detail_under_limit(self):
        existing = [_master_detail("Parent1__c", "Account")]
        assert analyze_field_impacts(_master_detail("Parent2__c", "Case"), existing) == []

    def test_master_detail_limit_is_configurable(self):
        analyzer = ImpactAnalyzer(AnalyzerConfig(thresholds=ThresholdConfig(max_master_detail=1)))
        existing = [_master_detail("Parent1__c", "Account")]
        assert len(analyzer.analyze_field_impacts(_master_detail("Parent2__c", "Case"), existing)) == 1

    def test_formula_with_missing_reference(self, account_fields):
        impacts = analyze_field_impacts(
            {"name": "Score__c", "type": "Formula", "formula": "Headcount__c * Weight__c"},
            account_fields,
        )

        assert len(impacts) == 1
        assert impacts[0].impact_type == "dependency"
        assert impacts[0].severity == "high"
        assert impacts[0].affected_components == ["Weight__c"]

    def test_formula_with_all_references_present(self, account_fields):
        impacts = analyze_field_impacts(
            {"name": "Score__c", "type": "Formula", "formula": "headcount__c * AnnualBudget__c"},
            account_fields,
        )
        assert impacts == []

    def test_rollup_without_master_detail(self, account_fields):
        impacts = analyze_field_impacts(
            {"name": "Total__c", "type": "Summary", "summarizedObject": "Invoice__c"}, account_fields
        )

        assert len(impacts) == 1
        assert impacts[0].impact_type == "dependency"
        assert "Invoice__c" in impacts[0].description

    def test_rollup_with_master_detail(self):
        existing = [_master_detail("Invoice__c", "Invoice__c")]
        impacts = analyze_field_impacts(
            {"name": "Total__c", "type": "Summary", "summarizedObject": "Invoice__c"}, existing
        )
        assert impacts == []

    def test_unique_field_warning(self):
        existing = [{"name": f"Key{i}__c", "unique": True} for i in range(10)]
        impacts = analyze_field_impacts({"name": "Key10__c", "unique": True}, existing)

        assert [(i.impact_type, i.severity) for i in impacts] == [("conflict", "medium")]

    def test_unique_field_below_warning(self):
        existing = [{"name": f"Key{i}__c", "unique": True} for i in range(9)]
        assert analyze_field_impacts({"name": "Key9__c", "unique": True}, existing) == []

    def test_several_checks_reported_together(self):
        existing = [
            {"name": "Dup__c", "label": "Dup"},
            _master_detail("Parent1__c", "Account"),
            _master_detail("Parent2__c", "Contact"),
        ]
        impacts = analyze_field_impacts(_master_detail("Dup__c", "Case"), existing)
        assert len(impacts) == 2

    def test_malformed_existing_is_empty(self):
        assert analyze_field_impacts({"name": "A__c"}, "not a list") == []

    def test_missing_new_field_raises(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            analyze_field_impacts(None, [])
        assert exc_info.value.argument == "new_field"

    def test_nameless_new_field_raises(self):
        with pytest.raises(InvalidArgumentError):
            analyze_field_impacts({"label": "No name"}, [])


class TestValidationRuleConflicts:
    def test_near_identical_rule_is_redundant(self):
        existing = [
            {"name": "Email_Required", "errorConditionFormula": "AND(ISBLANK(Email__c), Active__c = TRUE)"}
        ]
        new_rule = {
            "name": "Email_Needed",
            "errorConditionFormula": "AND(ISBLANK(Email__c), Active__c = TRUE, 1 = 1)",
        }

        conflicts = check_validation_rule_conflicts(new_rule, existing)

        assert len(conflicts) == 1
        assert conflicts[0].conflict_type == "redundancy"
        assert conflicts[0].severity == "medium"
        assert conflicts[0].existing_rule == "Email_Required"

    def test_negated_rule_is_contradiction(self):
        existing = [{"name": "Email_Blank", "errorConditionFormula": "ISBLANK(Email__c)"}]
        new_rule = {"name": "Email_Present", "errorConditionFormula": "NOT(ISBLANK(Email__c))"}

        conflicts = check_validation_rule_conflicts(new_rule, existing)

        assert [(c.conflict_type, c.severity) for c in conflicts] == [("contradiction", "high")]

    def test_name_overlap(self, account_rules):
        conflicts = check_validation_rule_conflicts(
            {"name": "budget_required", "errorConditionFormula": "ISBLANK(Phone__c)"}, account_rules
        )

        assert [(c.conflict_type, c.existing_rule) for c in conflicts] == [("overlap", "Budget_Required")]

    def test_rules_on_different_fields_do_not_conflict(self, account_rules):
        conflicts = check_validation_rule_conflicts(
            {"name": "Phone_Required", "errorConditionFormula": "ISBLANK(Phone__c)"}, account_rules
        )
        assert conflicts == []

    def test_missing_rule_raises(self):
        with pytest.raises(InvalidArgumentError):
            check_validation_rule_conflicts(None, [])


class TestDependencies:
    def test_formula_and_rule_dependents(self, account_fields, account_rules):
        components = components_from(normalize_fields(account_fields), normalize_rules(account_rules))

        deps = detect_dependencies({"type": "field", "name": "AnnualBudget__c"}, components)

        assert [(d.source_component, d.dependency_type) for d in deps] == [
            ("BudgetPerHead__c", "formula"),
            ("Budget_Required", "validation"),
        ]
        assert all(d.target_component == "AnnualBudget__c" for d in deps)

    def test_relationship_siblings(self, account_fields):
        components = components_from(normalize_fields(account_fields), [])
        target = {"type": "field", "name": "Ultimate_Parent__c", "fieldType": "Lookup",
                  "referenceTo": ["Account"]}

        deps = detect_dependencies(target, components)

        assert len(deps) == 1
        assert deps[0].source_component == "Parent__c"
        assert deps[0].dependency_type == "field"
        assert deps[0].description == "Related through Account object"

    def test_component_does_not_depend_on_itself(self, account_fields):
        components = components_from(normalize_fields(account_fields), [])
        assert detect_dependencies(components[-1], components) == []

    def test_rules_have_no_dependents(self, account_rules):
        components = components_from([], normalize_rules(account_rules))
        assert detect_dependencies(components[0], components) == []

    def test_missing_component_raises(self):
        with pytest.raises(InvalidArgumentError):
            detect_dependencies(None, [])
