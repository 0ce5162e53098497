from datetime import date

from smb_opsboard.models import Employee
from smb_opsboard.views import (
    format_currency,
    format_percent,
    kpis_to_dataframe,
    limit_rows,
    records_to_dataframe,
)


def test_format_currency_and_percent():
    """Currency and percent values are formatted for display."""
    assert format_currency(12500) == "$12,500"
    assert format_currency(-1234.5, "€", 2) == "-€1,234.50"
    assert format_percent(25) == "25.0%"


def test_records_to_dataframe_flattens_tuples_and_dates():
    """Tuples and dates are flattened to text columns."""
    employee = Employee(
        id="e1",
        name="Alice",
        position="Dev",
        department="Engineering",
        salary="$7,500",
        status="Active",
        performance=92,
        skills=("Python", "SQL"),
        join_date=date(2024, 2, 1),
    )

    df = records_to_dataframe([employee])

    assert "created_at" not in df.columns
    assert df.loc[0, "skills"] == "Python, SQL"
    assert df.loc[0, "join_date"] == "2024-02-01"

    subset = records_to_dataframe([employee], ["name", "salary"])
    assert list(subset.columns) == ["name", "salary"]

    empty = records_to_dataframe([], ["name"])
    assert empty.empty
    assert list(empty.columns) == ["name"]


def test_kpis_to_dataframe_rounds_floats():
    """Float KPIs are rounded, other values kept as is."""
    df = kpis_to_dataframe({"Margin": 25.456, "Clients": 3, "Revenue": "$1,000"})

    assert list(df["kpi"]) == ["Margin", "Clients", "Revenue"]
    assert list(df["value"]) == [25.5, 3, "$1,000"]
    assert list(kpis_to_dataframe({}).columns) == ["kpi", "value"]


def test_limit_rows():
    """limit_rows truncates only when a limit is set."""
    df = kpis_to_dataframe({"a": 1, "b": 2, "c": 3})
    assert len(limit_rows(df, 2)) == 2
    assert len(limit_rows(df, None)) == 3
