# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
CSV import for SMB OpsBoard.

This module reads module records (clients, team members, finance records,
transactions, compliance items, tasks) from a CSV file and normalizes them
into storage values ready for `db.import_rows`.

Expected input format
---------------------
One row per record, one column per business field of the target module.
Column names are case-insensitive and surrounding spaces are ignored, so
``Name``, `` name`` and ``NAME`` all map to ``name``.

- Every required field of the module must be present as a column.
- Optional columns may be omitted: their default values are applied.
- Columns that are not fields of the module are ignored.

Every row goes through the same validation as a record added from the
dashboard (`EntitySpec.prepare`). The first invalid row aborts the import
with a ValueError naming the CSV line, so a file is imported entirely or
not at all.

Output schema
-------------
A pandas DataFrame whose columns are exactly the business columns of the
module, in schema order, holding storage values (ISO dates, JSON text for
skills, numbers for numeric columns).
"""

import os
from typing import Union

import pandas as pd

from .errors import ValidationError
from .models import EntitySpec


def read_records_csv(
    path: Union[str, "os.PathLike[str]"],
    spec: EntitySpec,
) -> pd.DataFrame:
    """
    Read module records from a CSV file and normalize them.

    Parameters
    ----------
    path:
        Path to the CSV file.
    spec:
        Entity specification of the target module.

    Returns
    -------
    pandas.DataFrame
        One row per CSV line, with the module's business columns.

    Raises
    ------
    ValueError
        If a required column is missing or if a row fails validation.
    """

    # Read everything as text: conversions are done by the entity spec
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    # Normalize column names to lowercase (to make the check case-insensitive)
    df.columns = [str(c).lower().strip() for c in df.columns]
    cols = set(df.columns)

    missing = [f for f in spec.required if f not in cols]
    if missing:
        raise ValueError(
            f"CSV file for {spec.key} is missing required column(s): "
            f"{', '.join(missing)}."
        )

    known = [c for c in spec.columns if c in cols]

    rows: list[dict] = []
    for index, record in enumerate(df[known].to_dict(orient="records")):
        values = {k: v for k, v in record.items() if str(v).strip() != ""}
        try:
            rows.append(spec.prepare(values))
        except ValidationError as exc:
            # +2: header line and 1-based numbering
            raise ValueError(f"Invalid row at line {index + 2}: {exc.message}") from exc

    return pd.DataFrame(rows, columns=list(spec.columns))
