"""Tests for batch aggregation."""

import pytest

from sf_impact.batch import (
    BatchAggregator,
    TicketChange,
    analyze_batch,
    determine_execution_order,
    detect_batch_conflicts,
    identify_common_changes,
    preview_batch,
    split_batch,
    validate_batch,
)
from sf_impact.config import AnalyzerConfig, BatchConfig
from sf_impact.exceptions import InvalidArgumentError


class TestTicketChange:
    def test_flat_keys(self, tickets):
        ticket = TicketChange.from_dict(tickets[1])
        assert ticket.ticket_id == "T-1"
        assert ticket.change_type == "FIELD"
        assert ticket.field_names == ["Region__c"]

    def test_nested_metadata(self):
        ticket = TicketChange.from_dict(
            {"id": "T-9", "jiraKey": "SF-9",
             "metadata": {"changeType": "FIELD", "objectNames": ["Lead"], "fieldNames": "Score__c"}}
        )
        assert ticket.ticket_id == "T-9"
        assert ticket.ticket_key == "SF-9"
        assert ticket.object_names == ["Lead"]
        assert ticket.field_names == ["Score__c"]

    def test_malformed_lists_are_empty(self):
        ticket = TicketChange.from_dict({"ticketId": "T-1", "changes": {"a": 1}, "fieldNames": None})
        assert ticket.changes == []
        assert ticket.field_names == []


class TestBatchConflicts:
    def test_same_field_from_two_tickets(self, tickets):
        conflicts = detect_batch_conflicts(tickets)

        assert len(conflicts) == 1
        assert "Region__c" in conflicts[0]
        assert "Account" in conflicts[0]
        assert "T-1, T-2" in conflicts[0]

    def test_different_objects_do_not_conflict(self):
        conflicts = detect_batch_conflicts([
            {"ticketId": "A", "objectNames": ["Account"], "fieldNames": ["Region__c"]},
            {"ticketId": "B", "objectNames": ["Lead"], "fieldNames": ["Region__c"]},
        ])
        assert conflicts == []

    def test_one_ticket_never_conflicts_with_itself(self):
        conflicts = detect_batch_conflicts([
            {"ticketId": "A", "objectNames": ["Account", "account"], "fieldNames": ["Region__c"]},
        ])
        assert conflicts == []

    def test_tickets_without_ids_are_still_distinct(self):
        conflicts = detect_batch_conflicts([
            {"objectNames": ["Account"], "fieldNames": ["Region__c"]},
            {"objectNames": ["Account"], "fieldNames": ["Region__c"]},
        ])
        assert len(conflicts) == 1
        assert "(#1, #2)" in conflicts[0]

    def test_case_sensitive_policy(self, tickets):
        aggregator = BatchAggregator(AnalyzerConfig(case_sensitive_names=True))
        assert aggregator.detect_batch_conflicts(tickets) == []


class TestExecutionOrder:
    def test_priority_order(self, tickets):
        assert determine_execution_order(tickets) == ["T-1", "T-2", "T-3"]

    def test_ties_and_unknown_types_keep_input_order(self):
        order = determine_execution_order([
            {"ticketId": "X", "changeType": "REPORT"},
            {"ticketId": "A", "changeType": "field"},
            {"ticketId": "Y"},
            {"ticketId": "B", "changeType": "FIELD"},
            {"ticketId": "O", "changeType": "CUSTOM_OBJECT"},
        ])
        assert order == ["O", "A", "B", "X", "Y"]


class TestCommonChanges:
    def test_normalized_and_counted(self, tickets):
        assert identify_common_changes(tickets) == ["update help text (2 tickets)"]

    def test_repeat_within_one_ticket_is_not_common(self):
        assert identify_common_changes([{"ticketId": "A", "changes": ["x", "X "]}]) == []

    def test_tickets_without_ids_are_counted_separately(self):
        changes = identify_common_changes([{"changes": ["Add field"]}, {"changes": ["add field"]}])
        assert changes == ["add field (2 tickets)"]


class TestAnalyzeBatch:
    def test_combines_all_parts(self, tickets):
        analysis = analyze_batch(tickets)

        assert len(analysis.conflicts) == 1
        assert analysis.common_changes == ["update help text (2 tickets)"]
        assert analysis.execution_order == ["T-1", "T-2", "T-3"]
        assert set(analysis.to_dict()) == {"conflicts", "commonChanges", "executionOrder"}

    def test_non_list_is_empty(self):
        analysis = analyze_batch("tickets")
        assert analysis.conflicts == analysis.common_changes == analysis.execution_order == []


class TestValidateBatch:
    def test_valid_batch_warns_about_conflicts(self, tickets):
        result = validate_batch(tickets)
        assert result.is_valid
        assert result.errors == []
        assert len(result.warnings) == 1

    def test_too_small(self, tickets):
        result = validate_batch(tickets[:1])
        assert not result.is_valid
        assert "minimum is 2" in result.errors[0]

    def test_too_large_is_a_warning(self):
        aggregator = BatchAggregator(AnalyzerConfig(batch=BatchConfig(min_batch_size=1, max_batch_size=2)))
        result = aggregator.validate_batch([{"ticketId": str(i)} for i in range(3)])
        assert result.is_valid
        assert "maximum recommended is 2" in result.warnings[0]

    def test_preview(self, tickets):
        report = preview_batch(tickets)
        data = report.to_dict()
        assert data["validation"]["isValid"] is True
        assert data["analysis"]["executionOrder"] == ["T-1", "T-2", "T-3"]


class TestSplitBatch:
    def test_chunks(self):
        assert split_batch(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]

    def test_default_size_from_config(self):
        aggregator = BatchAggregator(AnalyzerConfig(batch=BatchConfig(min_batch_size=1, max_batch_size=3)))
        assert aggregator.split_batch(list("abcd")) == [["a", "b", "c"], ["d"]]

    def test_empty(self):
        assert split_batch([], 5) == []

    def test_invalid_size(self):
        with pytest.raises(InvalidArgumentError):
            split_batch(["a"], 0)
