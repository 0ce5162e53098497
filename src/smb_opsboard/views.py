# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Tabular view helpers for SMB OpsBoard.

This module turns entity lists, KPI dictionaries and notification logs into
pandas DataFrames that the CLI prints with ``DataFrame.to_string`` (or that
a richer front end can chart). The helpers are agnostic of the module they
render: they only rely on dataclass attributes and column names.
"""

from collections.abc import Mapping, Sequence
from dataclasses import fields, is_dataclass
from typing import Optional, Union

import pandas as pd

from .notifications import Notification

KpiValue = Union[int, float, str]


def format_currency(value: float, symbol: str = "$", decimals: int = 0) -> str:
    """Format an amount with thousands separators: 12500 -> '$12,500'."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{decimals}f}"


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def records_to_dataframe(
    records: Sequence[object],
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Build a DataFrame with one row per entity.

    Args:
        records: Entity dataclasses (all of the same type).
        columns: Attributes to keep, in order. Defaults to every dataclass
            field except the technical timestamps.

    Returns:
        A DataFrame. Tuples (e.g. skills) are joined with ", " and dates are
        rendered as ISO strings. An empty input yields an empty DataFrame
        with the requested columns.
    """
    if columns is None:
        if records and is_dataclass(records[0]):
            columns = [
                f.name
                for f in fields(records[0])
                if f.name not in ("created_at", "updated_at")
            ]
        else:
            columns = []

    rows: list[dict[str, object]] = []
    for record in records:
        row: dict[str, object] = {}
        for col in columns:
            value = getattr(record, col)
            if isinstance(value, tuple):
                value = ", ".join(value)
            elif hasattr(value, "isoformat"):
                value = value.isoformat()
            row[col] = value
        rows.append(row)

    return pd.DataFrame(rows, columns=list(columns))


def kpis_to_dataframe(kpis: Mapping[str, KpiValue], decimals: int = 1) -> pd.DataFrame:
    """
    Convert an ordered mapping of KPI label -> value into a two-column table.

    Floats are rounded to `decimals`; strings (already formatted values) are
    kept as is.
    """
    if not kpis:
        return pd.DataFrame(columns=["kpi", "value"])

    rows = []
    for label, value in kpis.items():
        if isinstance(value, float):
            value = round(value, decimals)
        rows.append({"kpi": label, "value": value})
    return pd.DataFrame(rows, columns=["kpi", "value"])


def notifications_to_dataframe(notifications: Sequence[Notification]) -> pd.DataFrame:
    """One row per notification, newest first, with a short timestamp."""
    columns = ["id", "read", "priority", "type", "category", "title", "message", "timestamp"]
    rows = [
        {
            "id": n.id,
            "read": "yes" if n.read else "no",
            "priority": n.priority,
            "type": n.type,
            "category": n.category,
            "title": n.title,
            "message": n.message,
            "timestamp": n.timestamp.strftime("%Y-%m-%d %H:%M"),
        }
        for n in notifications
    ]
    return pd.DataFrame(rows, columns=columns)


def limit_rows(df: pd.DataFrame, max_rows: Optional[int]) -> pd.DataFrame:
    """Keep the first `max_rows` rows (all rows when max_rows is None)."""
    if max_rows is None or max_rows < 0:
        return df
    return df.head(max_rows)
