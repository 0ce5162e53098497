# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Record Store layer for SMB OpsBoard.

This module provides all low-level accessors for the SQLite database that
holds the business records of the dashboard. It is responsible for:

- Initializing the database schema (one table per module).
- Listing every row of a table, newest first.
- Inserting a single row and returning the stored version.
- Updating a row by id (partial updates, automatic updated_at).
- Deleting a row by id.
- Bulk-importing rows from a pandas DataFrame (CSV import).

The database is the single store of record for clients, employees, finance
records, transactions, compliance items and tasks. Higher layers (module
controllers) keep a local copy of each table and patch it only after the
store has confirmed a write.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

Every table shares three technical columns:

   - id          TEXT PRIMARY KEY  -- UUID4 string
   - created_at  TEXT NOT NULL     -- ISO datetime (UTC, microseconds)
   - updated_at  TEXT NOT NULL     -- ISO datetime (UTC, microseconds)

Business columns come from the entity specifications in `models.py`:

   clients       name, industry, status, revenue, employees, profitability,
                 risk_score, contract_end
   employees     name, position, department, salary, status, performance,
                 skills (JSON array), join_date
   finance       month, revenue, expenses, profit, salaries, overhead
   transactions  date, type, description, category, amount, mode, status,
                 client_reference
   compliance    title, description, category, type, priority, status,
                 due_date
   tasks         title, description, assignee, status, priority, due_date,
                 project

Column kinds map to SQLite types as follows: int -> INTEGER, float -> REAL,
everything else (text, currency, date, list) -> TEXT. Status vocabularies
are NOT enforced by the schema; they are validated by the controllers.

------------------------------------------------------------------------------
Error handling
------------------------------------------------------------------------------

Every sqlite3 failure is re-raised as `RecordStoreError` (the underlying
exception is kept as ``__cause__``). Updating a missing id raises
`RecordNotFoundError`. Unknown table or column names are programming errors
and raise ValueError.
"""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from .errors import RecordNotFoundError, RecordStoreError
from .logging_setup import get_logger
from .models import ENTITY_SPECS

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for SMB OpsBoard.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of a bulk import into one table.

    Attributes
    ----------
    table:
        Target table.
    rows_inserted:
        Number of rows inserted.
    """

    table: str
    rows_inserted: int


_SQL_TYPES = {"int": "INTEGER", "float": "REAL"}

TABLE_COLUMNS: dict[str, dict[str, str]] = {
    spec.table: {col: _SQL_TYPES.get(kind, "TEXT") for col, kind in spec.columns.items()}
    for spec in ENTITY_SPECS.values()
}
"""Business columns (name -> SQLite type) for each Record Store table."""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection returning rows as sqlite3.Row.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    conn = sqlite3.connect(cfg.path)
    conn.row_factory = sqlite3.Row
    return conn


def _ensure_table(table: str) -> dict[str, str]:
    """Return the business columns of `table` or raise ValueError."""
    try:
        return TABLE_COLUMNS[table]
    except KeyError as exc:
        known = ", ".join(sorted(TABLE_COLUMNS))
        raise ValueError(f"Unknown table {table!r}. Known tables: {known}.") from exc


def _ensure_columns(table: str, values: Mapping[str, Any]) -> None:
    columns = _ensure_table(table)
    unknown = sorted(set(values) - set(columns))
    if unknown:
        raise ValueError(f"Unknown column(s) for table {table!r}: {', '.join(unknown)}")


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string (microsecond precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    for table, columns in TABLE_COLUMNS.items():
        column_sql = ",\n".join(f"    {name} {sql_type}" for name, sql_type in columns.items())
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id          TEXT PRIMARY KEY,
                {column_sql},
                created_at  TEXT NOT NULL,
                updated_at  TEXT NOT NULL
            );
            """
        )
        conn.execute(
            f"""
            CREATE INDEX IF NOT EXISTS idx_{table}_created_at
                ON {table}(created_at);
            """
        )

    conn.commit()


def _to_sql_value(value: Any) -> Any:
    """Convert a DataFrame cell (NaN, numpy scalar) into a sqlite3 value."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def _fetch_by_id(conn: sqlite3.Connection, table: str, row_id: str) -> dict | None:
    cur = conn.execute(f"SELECT * FROM {table} WHERE id = ?;", (row_id,))
    row = cur.fetchone()
    return dict(row) if row is not None else None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates one table per module if missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    RecordStoreError
        If schema creation fails.
    """
    try:
        cfg.path.parent.mkdir(parents=True, exist_ok=True)
        conn = _connect(cfg)
        try:
            _create_schema_if_needed(conn)
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as exc:
        raise RecordStoreError(
            f"Failed to initialize database at {cfg.path}", {"path": str(cfg.path)}
        ) from exc


def select_all(cfg: DatabaseConfig, table: str) -> list[dict]:
    """
    Return every row of `table`, newest first.

    Rows are ordered by `created_at` descending; rows created within the
    same microsecond keep their insertion order (newest first).

    Returns
    -------
    list[dict]
        One dict per row (column -> raw stored value).
    """
    _ensure_table(table)
    init_database(cfg)

    try:
        conn = _connect(cfg)
        try:
            cur = conn.execute(
                f"SELECT * FROM {table} ORDER BY created_at DESC, rowid DESC;"
            )
            rows = [dict(r) for r in cur.fetchall()]
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise RecordStoreError(f"Failed to select from {table}", {"table": table}) from exc

    return rows


def insert_row(cfg: DatabaseConfig, table: str, values: Mapping[str, Any]) -> dict:
    """
    Insert a single row and return it as stored.

    Parameters
    ----------
    cfg:
        Database configuration.
    table:
        Target table.
    values:
        Business column values (already validated and converted by the
        entity specification). Missing columns are stored as NULL.

    Returns
    -------
    dict
        The stored row including `id`, `created_at` and `updated_at`.
    """
    _ensure_columns(table, values)
    init_database(cfg)

    row_id = str(uuid.uuid4())
    now_iso = _now_utc_iso()

    columns = ["id", *values.keys(), "created_at", "updated_at"]
    params = [row_id, *values.values(), now_iso, now_iso]
    placeholders = ", ".join("?" for _ in columns)

    try:
        conn = _connect(cfg)
        try:
            conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders});",
                params,
            )
            conn.commit()
            row = _fetch_by_id(conn, table, row_id)
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise RecordStoreError(f"Failed to insert into {table}", {"table": table}) from exc

    if row is None:
        msg = f"Row {row_id} was just inserted into {table} but could not be reloaded."
        raise RecordStoreError(msg, {"table": table, "id": row_id})

    logger.debug("row_inserted", table=table, id=row_id)
    return row


def update_row(
    cfg: DatabaseConfig,
    table: str,
    row_id: str,
    values: Mapping[str, Any],
) -> dict:
    """
    Apply a partial update to an existing row.

    Parameters
    ----------
    cfg:
        Database configuration.
    table:
        Target table.
    row_id:
        Identifier of the row.
    values:
        Columns to update. `updated_at` is always refreshed.

    Returns
    -------
    dict
        The updated row.

    Raises
    ------
    ValueError
        If no fields are provided for update.
    RecordNotFoundError
        If no row has this id.
    """
    _ensure_columns(table, values)
    if not values:
        raise ValueError("No fields to update.")

    init_database(cfg)

    fields = [f"{col} = ?" for col in values]
    params: list[object] = list(values.values())

    fields.append("updated_at = ?")
    params.append(_now_utc_iso())
    params.append(row_id)

    try:
        conn = _connect(cfg)
        try:
            cur = conn.execute(
                f"""
                UPDATE {table}
                   SET {", ".join(fields)}
                 WHERE id = ?;
                """,
                params,
            )
            conn.commit()
            updated = cur.rowcount
            row = _fetch_by_id(conn, table, row_id)
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise RecordStoreError(
            f"Failed to update {table} row {row_id}", {"table": table, "id": row_id}
        ) from exc

    if updated == 0 or row is None:
        raise RecordNotFoundError(
            f"No row {row_id} in {table}.", {"table": table, "id": row_id}
        )

    logger.debug("row_updated", table=table, id=row_id, fields=sorted(values))
    return row


def delete_row(cfg: DatabaseConfig, table: str, row_id: str) -> bool:
    """
    Delete a row by id.

    Returns
    -------
    bool
        True if a row was removed, False if the id was not present.
    """
    _ensure_table(table)
    init_database(cfg)

    try:
        conn = _connect(cfg)
        try:
            cur = conn.execute(f"DELETE FROM {table} WHERE id = ?;", (row_id,))
            conn.commit()
            deleted = cur.rowcount > 0
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise RecordStoreError(
            f"Failed to delete {table} row {row_id}", {"table": table, "id": row_id}
        ) from exc

    logger.debug("row_deleted", table=table, id=row_id, deleted=deleted)
    return deleted


def count_rows(cfg: DatabaseConfig, table: str) -> int:
    """Return the number of rows stored in `table`."""
    _ensure_table(table)
    init_database(cfg)

    try:
        conn = _connect(cfg)
        try:
            cur = conn.execute(f"SELECT COUNT(*) FROM {table};")
            (count,) = cur.fetchone()
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise RecordStoreError(f"Failed to count rows of {table}", {"table": table}) from exc

    return int(count)


def import_rows(cfg: DatabaseConfig, table: str, df: pd.DataFrame) -> ImportStats:
    """
    Insert every row of a DataFrame into `table` in a single transaction.

    Parameters
    ----------
    df:
        DataFrame whose columns are business columns of `table` and whose
        values are storage values (see `EntitySpec.prepare`). NaN cells are
        stored as NULL.

    Returns
    -------
    ImportStats
        Number of rows inserted.

    Raises
    ------
    ValueError
        If df contains unknown columns.
    RecordStoreError
        If the import fails; in that case nothing is inserted.
    """
    _ensure_columns(table, {c: None for c in df.columns})
    init_database(cfg)

    if df.empty:
        return ImportStats(table=table, rows_inserted=0)

    columns = ["id", *df.columns, "created_at", "updated_at"]
    placeholders = ", ".join("?" for _ in columns)
    sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders});"

    rows_inserted = 0
    try:
        conn = _connect(cfg)
        try:
            cur = conn.cursor()
            for record in df.to_dict(orient="records"):
                values = [_to_sql_value(v) for v in record.values()]
                now_iso = _now_utc_iso()
                cur.execute(sql, [str(uuid.uuid4()), *values, now_iso, now_iso])
                rows_inserted += 1
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise RecordStoreError(f"Failed to import rows into {table}", {"table": table}) from exc

    logger.info("rows_imported", table=table, rows=rows_inserted)
    return ImportStats(table=table, rows_inserted=rows_inserted)
