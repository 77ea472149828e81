"""Tests for the formatters package."""

import io
import json

import pytest
from rich.console import Console

from sf_impact.api import analyze_object
from sf_impact.batch import preview_batch
from sf_impact.diff import generate_diff
from sf_impact.formatters import JsonFormatter, RichFormatter, get_formatter
from sf_impact.impact import get_risk_score


def _rich_output(result):
    buffer = io.StringIO()
    RichFormatter(Console(file=buffer, width=120)).render(result)
    return buffer.getvalue()


class TestGetFormatter:
    def test_known_names(self):
        assert isinstance(get_formatter("json"), JsonFormatter)
        assert isinstance(get_formatter("rich"), RichFormatter)

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_formatter("xml")


class TestJsonFormatter:
    def test_diff_round_trips_through_json(self, account_metadata, account_fields):
        diff = generate_diff(account_metadata, account_fields[:-1], [])
        data = json.loads(JsonFormatter().format(diff))
        assert data == diff.to_dict()

    def test_render_prints(self, capsys):
        JsonFormatter().render(get_risk_score([{"type": "field", "operation": "delete"}]))
        assert json.loads(capsys.readouterr().out)["score"] == 25


class TestRichFormatter:
    def test_diff(self, account_metadata, account_fields):
        output = _rich_output(generate_diff(account_metadata, account_fields[:-1], []))
        assert "Account" in output
        assert "Parent__c" in output
        assert "removed" in output

    def test_no_changes(self, account_metadata, account_fields, account_rules):
        output = _rich_output(generate_diff(account_metadata, account_fields, account_rules))
        assert "No changes." in output

    def test_report_sections(self, account_metadata, account_fields, account_rules):
        proposed = account_fields[1:] + [{"name": "Status__c", "label": "Status"}]
        output = _rich_output(analyze_object(account_metadata, proposed, account_rules))

        assert "Conflicts" in output
        assert "Still referencing removed fields" in output
        assert "Region_Required" in output
        assert "Risk" in output

    def test_risk(self):
        output = _rich_output(get_risk_score([{"type": "field", "operation": "delete"}]))
        assert "25" in output
        assert "medium" in output
        assert "Field deletion detected" in output

    def test_batch(self, tickets):
        output = _rich_output(preview_batch(tickets))
        assert "T-1 -> T-2 -> T-3" in output
        assert "update help text (2 tickets)" in output

    def test_unknown_result(self):
        with pytest.raises(TypeError):
            RichFormatter(Console(file=io.StringIO())).render(object())
