import json
from datetime import date

import pytest

from smb_opsboard.errors import ValidationError
from smb_opsboard.models import (
    CLIENTS,
    EMPLOYEES,
    FINANCE,
    TRANSACTIONS,
    get_entity_spec,
)


def test_prepare_applies_defaults():
    """Omitted fields get their defaults on add."""
    values = CLIENTS.prepare({"name": "TechCorp", "industry": "Technology"})

    assert values["status"] == "Active"
    assert values["revenue"] == "0"
    assert values["employees"] is None
    assert values["contract_end"] is None


def test_prepare_rejects_missing_required_fields():
    """Blank required fields are listed in the error."""
    with pytest.raises(ValidationError) as excinfo:
        CLIENTS.prepare({"name": "  ", "industry": ""})

    assert excinfo.value.fields == ["name", "industry"]
    assert excinfo.value.message == "name, industry are required."


def test_prepare_rejects_values_outside_vocabulary():
    """Statuses outside the vocabulary are rejected."""
    with pytest.raises(ValidationError) as excinfo:
        CLIENTS.prepare({"name": "A", "industry": "B", "status": "Churned"})
    assert excinfo.value.fields == ["status"]


def test_prepare_rejects_unknown_fields():
    """Fields outside the schema are rejected."""
    with pytest.raises(ValidationError):
        CLIENTS.prepare({"name": "A", "industry": "B", "email": "a@b.c"})


def test_prepare_employee_converts_kinds():
    """Integers, lists and dates are converted to storage values."""
    values = EMPLOYEES.prepare(
        {
            "name": "Alice",
            "position": "Developer",
            "salary": "$7,500",
            "performance": "92",
            "skills": "Python, SQL, ",
            "join_date": "2024-02-01",
        }
    )

    assert values["salary"] == "$7,500"
    assert values["performance"] == 92
    assert json.loads(values["skills"]) == ["Python", "SQL"]
    assert values["join_date"] == "2024-02-01"
    assert values["department"] == "General"


def test_prepare_employee_join_date_defaults_to_today():
    """join_date defaults to the current date."""
    values = EMPLOYEES.prepare({"name": "A", "position": "B", "salary": "1"})
    assert values["join_date"] == date.today().isoformat()


def test_prepare_employee_performance_range():
    """Performance must be a whole number between 0 and 100."""
    with pytest.raises(ValidationError):
        EMPLOYEES.prepare(
            {"name": "A", "position": "B", "salary": "1", "performance": "120"}
        )
    with pytest.raises(ValidationError):
        EMPLOYEES.prepare(
            {"name": "A", "position": "B", "salary": "1", "performance": "high"}
        )


def test_prepare_rejects_bad_dates():
    """Dates must use the YYYY-MM-DD format."""
    with pytest.raises(ValidationError):
        EMPLOYEES.prepare(
            {"name": "A", "position": "B", "salary": "1", "join_date": "01/02/2024"}
        )


def test_prepare_finance_defaults_salaries_and_overhead():
    """Salaries and overhead default to "0"."""
    values = FINANCE.prepare(
        {"month": "Jan", "revenue": "20000", "expenses": "15000", "profit": "5000"}
    )
    assert values["salaries"] == "0"
    assert values["overhead"] == "0"


def test_prepare_transaction_amount_goes_through_currency_parser():
    """Transaction amounts are required and parsed as currency."""
    values = TRANSACTIONS.prepare(
        {"description": "Invoice", "category": "Sales", "amount": "$1,200.50"}
    )
    assert values["amount"] == 1200.5
    assert values["type"] == "Income"

    with pytest.raises(ValidationError):
        TRANSACTIONS.prepare({"description": "Invoice", "category": "Sales", "amount": ""})


def test_prepare_partial_checks_only_given_fields():
    """Partial validation ignores absent fields but rejects blanked ones."""
    assert CLIENTS.prepare({"status": "Pending"}, partial=True) == {"status": "Pending"}

    with pytest.raises(ValidationError):
        CLIENTS.prepare({"name": ""}, partial=True)
    with pytest.raises(ValidationError) as excinfo:
        EMPLOYEES.prepare({"status": ""}, partial=True)
    assert excinfo.value.fields == ["status"]


def test_decode_and_to_dict():
    """Stored rows decode to entities and back to editable dicts."""
    row = {
        "id": "e1",
        "name": "Alice",
        "position": "Developer",
        "department": "Engineering",
        "salary": "$7,500",
        "status": "Active",
        "performance": 92,
        "skills": '["Python", "SQL"]',
        "join_date": "2024-02-01",
        "created_at": "2025-01-01T10:00:00.000000+00:00",
        "updated_at": "2025-01-01T10:00:00.000000+00:00",
    }
    employee = EMPLOYEES.decode(row)

    assert employee.skills == ("Python", "SQL")
    assert employee.join_date == date(2024, 2, 1)
    assert employee.created_at is not None

    editable = EMPLOYEES.to_dict(employee)
    assert editable["skills"] == ["Python", "SQL"]
    assert "id" not in editable


def test_get_entity_spec():
    """Entity specs are looked up by module key."""
    assert get_entity_spec("team") is EMPLOYEES
    with pytest.raises(ValueError):
        get_entity_spec("invoices")
