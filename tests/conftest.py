"""Shared test fixtures for sf-impact tests."""

import pytest


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def account_fields():
    """Current custom fields on Account."""
    return [
        {"name": "Region__c", "label": "Region", "type": "Picklist",
         "picklistValues": ["North", "South"]},
        {"name": "AnnualBudget__c", "label": "Annual Budget", "type": "Currency",
         "precision": 18, "scale": 2},
        {"name": "BudgetPerHead__c", "label": "Budget Per Head", "type": "Formula",
         "formula": "AnnualBudget__c / Headcount__c"},
        {"name": "Headcount__c", "label": "Headcount", "type": "Number"},
        {"name": "Parent__c", "label": "Parent", "type": "Lookup", "referenceTo": ["Account"]},
    ]


@pytest.fixture
def account_rules():
    """Current validation rules on Account."""
    return [
        {
            "name": "Budget_Required",
            "errorConditionFormula": "AND(ISBLANK(AnnualBudget__c), Headcount__c > 10)",
            "errorMessage": "Budget is required for large accounts",
            "active": True,
        },
        {
            "name": "Region_Required",
            "errorConditionFormula": "ISBLANK(TEXT(Region__c))",
            "errorMessage": "Pick a region",
            "active": True,
        },
    ]


@pytest.fixture
def account_metadata(account_fields, account_rules):
    """Describe-style output for Account."""
    return {
        "objectName": "Account",
        "fields": account_fields,
        "validationRules": account_rules,
        "lastModified": "2024-05-01T10:00:00Z",
    }


@pytest.fixture
def tickets():
    """Three tickets; two of them write Account.Region__c."""
    return [
        {
            "ticketId": "T-3",
            "summary": "Add region permission",
            "changeType": "PERMISSION_SET",
            "changes": ["Grant Region access"],
            "objectNames": ["Account"],
            "fieldNames": [],
        },
        {
            "ticketId": "T-1",
            "summary": "Region picklist",
            "changeType": "FIELD",
            "changes": ["Add Region picklist value", "Update help text"],
            "objectNames": ["Account"],
            "fieldNames": ["Region__c"],
        },
        {
            "ticketId": "T-2",
            "summary": "Region rule",
            "changeType": "VALIDATION_RULE",
            "changes": ["  update HELP text "],
            "objectNames": ["Account"],
            "fieldNames": ["region__c"],
        },
    ]
