import json
from pathlib import Path

import pytest

from smb_opsboard.db import DatabaseConfig, import_rows, select_all
from smb_opsboard.io import read_records_csv
from smb_opsboard.models import CLIENTS, EMPLOYEES, TASKS


def write_csv(tmp_path: Path, name: str, content: str) -> Path:
    """Helper to write a CSV file in tmp_path."""
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_read_records_csv_normalizes_columns_and_applies_defaults(tmp_path):
    """Headers are normalized, extra columns dropped and defaults applied."""
    path = write_csv(
        tmp_path,
        "clients.csv",
        " Name ,INDUSTRY,Revenue,notes\n"
        'TechCorp,Technology,"$125,000",key account\n'
        "Green Farms,Agriculture,,\n",
    )

    df = read_records_csv(path, CLIENTS)

    assert list(df.columns) == list(CLIENTS.columns)
    assert list(df["name"]) == ["TechCorp", "Green Farms"]
    assert list(df["revenue"]) == ["$125,000", "0"]
    assert list(df["status"]) == ["Active", "Active"]


def test_read_records_csv_converts_lists_and_numbers(tmp_path):
    """List and integer columns are converted to storage values."""
    path = write_csv(
        tmp_path,
        "team.csv",
        "name,position,salary,performance,skills\n"
        'Alice,Developer,"$7,500",92,"Python, SQL"\n',
    )

    df = read_records_csv(path, EMPLOYEES)

    row = df.iloc[0]
    assert row["performance"] == 92
    assert json.loads(row["skills"]) == ["Python", "SQL"]


def test_read_records_csv_missing_required_column(tmp_path):
    """A missing required column is reported by name."""
    path = write_csv(tmp_path, "clients.csv", "name,revenue\nTechCorp,100\n")

    with pytest.raises(ValueError, match="industry"):
        read_records_csv(path, CLIENTS)


def test_read_records_csv_invalid_row_names_the_line(tmp_path):
    """An invalid row is reported with its CSV line number."""
    path = write_csv(
        tmp_path,
        "tasks.csv",
        "title,assignee,due_date,status\n"
        "Report,Bruno,2025-04-10,To Do\n"
        "Audit,Alice,2025-05-01,Blocked\n",
    )

    with pytest.raises(ValueError, match="line 3"):
        read_records_csv(path, TASKS)


def test_csv_import_into_record_store(tmp_path):
    """A CSV file can be read and imported into the Record Store."""
    path = write_csv(
        tmp_path,
        "tasks.csv",
        "title,assignee,due_date\nReport,Bruno,2025-04-10\nAudit,Alice,2025-05-01\n",
    )
    cfg = DatabaseConfig(engine="sqlite", path=tmp_path / "ops.sqlite")

    stats = import_rows(cfg, "tasks", read_records_csv(path, TASKS))

    assert stats.rows_inserted == 2
    tasks = [TASKS.decode(row) for row in select_all(cfg, "tasks")]
    assert {t.title for t in tasks} == {"Report", "Audit"}
    assert all(t.status == "To Do" for t in tasks)
