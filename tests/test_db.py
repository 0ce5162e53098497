import pandas as pd
import pytest

from smb_opsboard.db import (
    DatabaseConfig,
    count_rows,
    delete_row,
    import_rows,
    init_database,
    insert_row,
    select_all,
    update_row,
)
from smb_opsboard.errors import RecordNotFoundError, RecordStoreError


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    db_path = tmp_path / "db" / "test_db.sqlite"
    return DatabaseConfig(engine="sqlite", path=db_path)


def test_init_database_creates_file_and_schema(tmp_path):
    """init_database should create the SQLite file and empty tables."""
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    assert cfg.path.exists()

    # Idempotent.
    init_database(cfg)
    for table in ("clients", "employees", "finance", "transactions", "compliance", "tasks"):
        assert count_rows(cfg, table) == 0


def test_insert_assigns_id_and_timestamps(tmp_path):
    """insert_row should assign a UUID and matching timestamps."""
    cfg = make_tmp_db_cfg(tmp_path)

    row = insert_row(cfg, "clients", {"name": "TechCorp", "industry": "Tech"})

    assert len(row["id"]) == 36
    assert row["name"] == "TechCorp"
    assert row["status"] is None
    assert row["created_at"] == row["updated_at"]


def test_select_all_returns_newest_first(tmp_path):
    """select_all should return rows newest first."""
    cfg = make_tmp_db_cfg(tmp_path)
    for name in ("first", "second", "third"):
        insert_row(cfg, "clients", {"name": name, "industry": "x"})

    rows = select_all(cfg, "clients")
    assert [r["name"] for r in rows] == ["third", "second", "first"]


def test_update_row_is_partial(tmp_path):
    """update_row should only touch the given columns."""
    cfg = make_tmp_db_cfg(tmp_path)
    row = insert_row(cfg, "tasks", {"title": "Report", "assignee": "Bob", "status": "To Do"})

    updated = update_row(cfg, "tasks", row["id"], {"status": "Done"})

    assert updated["status"] == "Done"
    assert updated["title"] == "Report"
    assert updated["updated_at"] >= row["updated_at"]


def test_update_row_errors(tmp_path):
    """update_row should reject unknown ids and empty updates."""
    cfg = make_tmp_db_cfg(tmp_path)
    row = insert_row(cfg, "tasks", {"title": "Report", "assignee": "Bob"})

    with pytest.raises(RecordNotFoundError):
        update_row(cfg, "tasks", "missing", {"status": "Done"})
    with pytest.raises(ValueError):
        update_row(cfg, "tasks", row["id"], {})


def test_delete_row(tmp_path):
    """delete_row should report whether a row was removed."""
    cfg = make_tmp_db_cfg(tmp_path)
    row = insert_row(cfg, "finance", {"month": "Jan", "revenue": "100"})

    assert delete_row(cfg, "finance", row["id"]) is True
    assert delete_row(cfg, "finance", row["id"]) is False
    assert count_rows(cfg, "finance") == 0


def test_unknown_table_or_column_is_a_programming_error(tmp_path):
    """Unknown tables and columns should raise ValueError."""
    cfg = make_tmp_db_cfg(tmp_path)

    with pytest.raises(ValueError):
        select_all(cfg, "invoices")
    with pytest.raises(ValueError):
        insert_row(cfg, "clients", {"email": "a@b.c"})


def test_unsupported_engine(tmp_path):
    """Only the sqlite engine should be accepted."""
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.sqlite")
    with pytest.raises(ValueError):
        init_database(cfg)


def test_sqlite_failures_are_wrapped(tmp_path):
    """sqlite errors should surface as RecordStoreError."""
    # A directory cannot be opened as a database file.
    cfg = DatabaseConfig(engine="sqlite", path=tmp_path)

    with pytest.raises(RecordStoreError) as excinfo:
        select_all(cfg, "clients")
    assert excinfo.value.__cause__ is not None


def test_import_rows_inserts_every_row(tmp_path):
    """import_rows should insert every DataFrame row, NaN as NULL."""
    cfg = make_tmp_db_cfg(tmp_path)
    df = pd.DataFrame(
        [
            {"name": "A", "industry": "Retail", "employees": 10},
            {"name": "B", "industry": "Tech", "employees": None},
        ]
    )

    stats = import_rows(cfg, "clients", df)

    assert stats.table == "clients"
    assert stats.rows_inserted == 2
    rows = {r["name"]: r for r in select_all(cfg, "clients")}
    assert rows["A"]["employees"] == 10
    assert rows["B"]["employees"] is None


def test_import_rows_rejects_unknown_columns(tmp_path):
    """import_rows should reject columns outside the table schema."""
    cfg = make_tmp_db_cfg(tmp_path)
    with pytest.raises(ValueError):
        import_rows(cfg, "clients", pd.DataFrame([{"nickname": "x"}]))
