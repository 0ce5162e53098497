# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Entity types and per-module entity specifications.

Each business entity (client, employee, finance record, transaction,
compliance item, task) is represented by a frozen dataclass mirroring a row
of its Record Store table. Alongside the dataclasses, an `EntitySpec`
describes everything the generic list controller needs to know about a
module:

- the table and dataclass,
- the column kinds (text, int, float, date, list, currency),
- required fields and default values for optional ones,
- the closed vocabularies of enum-like fields (status, priority, type...),
- the fields used by free-text search and the field used by the status
  filter.

Canonical schemas
-----------------
Several historical versions of the dashboard disagreed on the shape of a
client (email + Lead/Active/Dormant/Churned vs. industry +
Active/Inactive/Pending). The Record Store schema (industry,
Active/Inactive/Pending) is the one kept here; the other is not merged in.

Monetary values of clients, employees and finance records are kept as the
free-form text typed by the user and parsed on every read
(see `parsing.parse_currency`). Transaction amounts are numeric.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Generic, Literal, Optional, TypeVar

from .errors import ValidationError
from .parsing import parse_currency

ColumnKind = Literal["text", "currency", "int", "float", "date", "list"]

ALL = "All"
"""Sentinel value of the status filter meaning "no filtering"."""


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Client:
    """A customer account tracked by the CRM module."""

    id: str
    name: str
    industry: str
    status: str
    revenue: str
    employees: Optional[int]
    profitability: Optional[str]
    risk_score: Optional[int]
    contract_end: Optional[date]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Employee:
    """A team member. `salary` keeps its currency formatting."""

    id: str
    name: str
    position: str
    department: str
    salary: str
    status: str
    performance: int
    skills: tuple[str, ...]
    join_date: Optional[date]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class FinanceRecord:
    """Monthly finance figures, all stored as currency-formatted text."""

    id: str
    month: str
    revenue: str
    expenses: str
    profit: str
    salaries: str
    overhead: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """A single income or expense movement."""

    id: str
    date: Optional[date]
    type: str
    description: str
    category: str
    amount: float
    mode: str
    status: str
    client_reference: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ComplianceItem:
    """A regulatory or internal obligation with a due date."""

    id: str
    title: str
    description: str
    category: str
    type: str
    priority: str
    status: str
    due_date: Optional[date]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Task:
    """A unit of project work assigned to a team member."""

    id: str
    title: str
    description: str
    assignee: str
    status: str
    priority: str
    due_date: Optional[date]
    project: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


T = TypeVar("T")


# ---------------------------------------------------------------------------
# Entity specifications
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def _parse_iso_datetime(raw: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(raw) if raw else None


@dataclass(frozen=True)
class EntitySpec(Generic[T]):
    """
    Description of one module's entity, used by the generic controller.

    Attributes
    ----------
    key:
        Module identifier (e.g. "clients").
    table:
        Record Store table name.
    label:
        Singular human-readable name, used in messages ("client").
    entity_type:
        Dataclass materialized from table rows.
    columns:
        Business columns and their kinds, in display order. The technical
        columns (id, created_at, updated_at) are implicit.
    required:
        Fields that must be non-blank when adding a record.
    search_fields:
        Fields scanned by the case-insensitive free-text search.
    filter_field:
        Enum field compared for equality by the status filter.
    choices:
        Closed vocabularies for enum-like fields.
    defaults:
        Values applied to optional fields left blank on add.
    """

    key: str
    table: str
    label: str
    entity_type: type[T]
    columns: dict[str, ColumnKind]
    required: tuple[str, ...]
    search_fields: tuple[str, ...]
    filter_field: Optional[str] = None
    choices: dict[str, tuple[str, ...]] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)

    # -- input side -------------------------------------------------------

    def prepare(self, values: Mapping[str, Any], *, partial: bool = False) -> dict:
        """
        Validate user-supplied values and convert them to storage values.

        Args:
            values: Raw values, typically strings coming from a form or CLI.
            partial: When True (edits), only the provided fields are checked
                and required-field rules apply only to fields present.

        Returns:
            A dict of column -> storage value (ISO text for dates, JSON text
            for lists, int/float for numeric kinds).

        Raises:
            ValidationError: for unknown fields, missing required fields,
                values outside a closed vocabulary or unparsable numbers
                and dates.
        """
        unknown = sorted(set(values) - set(self.columns))
        if unknown:
            raise ValidationError(
                f"Unknown {self.label} field(s): {', '.join(unknown)}.",
                fields=unknown,
            )

        if partial:
            checked_required = [f for f in self.required if f in values]
        else:
            checked_required = list(self.required)

        missing = [f for f in checked_required if _is_blank(values.get(f))]
        if missing:
            names = ", ".join(missing)
            raise ValidationError(
                f"{names} {'is' if len(missing) == 1 else 'are'} required.",
                fields=missing,
            )

        merged: dict[str, Any] = {}
        if not partial:
            for col in self.columns:
                default = self.defaults.get(col)
                if callable(default):
                    default = default()
                raw = values.get(col)
                merged[col] = default if _is_blank(raw) else raw
        else:
            merged = dict(values)

        prepared: dict[str, Any] = {}
        for col, raw in merged.items():
            prepared[col] = self._convert(col, raw)
        return prepared

    def _convert(self, col: str, raw: Any) -> Any:
        kind = self.columns[col]

        allowed = self.choices.get(col)
        if allowed is not None:
            if _is_blank(raw):
                raise ValidationError(f"{col} is required.", fields=[col])
            text = str(raw).strip()
            if text not in allowed:
                raise ValidationError(
                    f"Invalid {col} {text!r} for {self.label}; "
                    f"expected one of: {', '.join(allowed)}.",
                    fields=[col],
                )
            return text

        if _is_blank(raw):
            return "[]" if kind == "list" else None

        if kind in ("text", "currency"):
            return str(raw).strip()

        if kind == "int":
            try:
                number = int(str(raw).strip())
            except ValueError as exc:
                raise ValidationError(
                    f"{col} must be a whole number.", fields=[col]
                ) from exc
            if col in ("performance", "risk_score") and not 0 <= number <= 100:
                raise ValidationError(
                    f"{col} must be between 0 and 100.", fields=[col]
                )
            return number

        if kind == "float":
            return parse_currency(raw)

        if kind == "date":
            if isinstance(raw, datetime):
                return raw.date().isoformat()
            if isinstance(raw, date):
                return raw.isoformat()
            try:
                return date.fromisoformat(str(raw).strip()).isoformat()
            except ValueError as exc:
                raise ValidationError(
                    f"{col} must be a date in YYYY-MM-DD format.", fields=[col]
                ) from exc

        # kind == "list"
        if isinstance(raw, str):
            items = [part.strip() for part in raw.split(",")]
        else:
            items = [str(part).strip() for part in raw]
        return json.dumps([item for item in items if item])

    # -- output side ------------------------------------------------------

    def decode(self, row: Mapping[str, Any]) -> T:
        """Materialize a Record Store row (column -> raw value) as an entity."""
        kwargs: dict[str, Any] = {"id": row["id"]}
        for col, kind in self.columns.items():
            raw = row.get(col)
            if kind == "date":
                kwargs[col] = date.fromisoformat(raw) if raw else None
            elif kind == "list":
                kwargs[col] = tuple(json.loads(raw)) if raw else ()
            elif kind == "float":
                kwargs[col] = float(raw) if raw is not None else 0.0
            elif kind == "int" and raw is not None:
                kwargs[col] = int(raw)
            elif kind in ("text", "currency") and raw is None:
                kwargs[col] = self.defaults.get(col)
            else:
                kwargs[col] = raw
        kwargs["created_at"] = _parse_iso_datetime(row.get("created_at"))
        kwargs["updated_at"] = _parse_iso_datetime(row.get("updated_at"))
        return self.entity_type(**kwargs)

    def to_dict(self, entity: T) -> dict[str, Any]:
        """Return an editable copy of an entity's business fields."""
        out: dict[str, Any] = {}
        for col, kind in self.columns.items():
            value = getattr(entity, col)
            if kind == "list":
                value = list(value)
            out[col] = value
        return out


# ---------------------------------------------------------------------------
# Module registry
# ---------------------------------------------------------------------------

CLIENT_STATUSES = ("Active", "Inactive", "Pending")
EMPLOYEE_STATUSES = ("Active", "On Leave", "Terminated")
TRANSACTION_TYPES = ("Income", "Expense")
TRANSACTION_MODES = ("Bank", "Credit Card", "UPI", "Cash")
TRANSACTION_STATUSES = ("Pending", "Received", "Paid")
COMPLIANCE_STATUSES = ("pending", "completed", "overdue")
COMPLIANCE_PRIORITIES = ("High", "Medium", "Low")
COMPLIANCE_TYPES = ("legal", "financial", "security", "operational", "info")
TASK_STATUSES = ("To Do", "In Progress", "Done")
TASK_PRIORITIES = ("Low", "Medium", "High")


CLIENTS: EntitySpec[Client] = EntitySpec(
    key="clients",
    table="clients",
    label="client",
    entity_type=Client,
    columns={
        "name": "text",
        "industry": "text",
        "status": "text",
        "revenue": "currency",
        "employees": "int",
        "profitability": "text",
        "risk_score": "int",
        "contract_end": "date",
    },
    required=("name", "industry"),
    search_fields=("name", "industry"),
    filter_field="status",
    choices={"status": CLIENT_STATUSES},
    defaults={"status": "Active", "revenue": "0"},
)

EMPLOYEES: EntitySpec[Employee] = EntitySpec(
    key="team",
    table="employees",
    label="team member",
    entity_type=Employee,
    columns={
        "name": "text",
        "position": "text",
        "department": "text",
        "salary": "currency",
        "status": "text",
        "performance": "int",
        "skills": "list",
        "join_date": "date",
    },
    required=("name", "position", "salary"),
    search_fields=("name", "position", "department"),
    filter_field="status",
    choices={"status": EMPLOYEE_STATUSES},
    defaults={
        "department": "General",
        "status": "Active",
        "performance": 0,
        "join_date": date.today,
    },
)

FINANCE: EntitySpec[FinanceRecord] = EntitySpec(
    key="finance",
    table="finance",
    label="finance record",
    entity_type=FinanceRecord,
    columns={
        "month": "text",
        "revenue": "currency",
        "expenses": "currency",
        "profit": "currency",
        "salaries": "currency",
        "overhead": "currency",
    },
    required=("month", "revenue", "expenses", "profit"),
    search_fields=("month",),
    filter_field=None,
    defaults={"salaries": "0", "overhead": "0"},
)

TRANSACTIONS: EntitySpec[Transaction] = EntitySpec(
    key="transactions",
    table="transactions",
    label="transaction",
    entity_type=Transaction,
    columns={
        "date": "date",
        "type": "text",
        "description": "text",
        "category": "text",
        "amount": "float",
        "mode": "text",
        "status": "text",
        "client_reference": "text",
    },
    required=("description", "category", "amount"),
    search_fields=("description", "category", "client_reference"),
    filter_field="type",
    choices={
        "type": TRANSACTION_TYPES,
        "mode": TRANSACTION_MODES,
        "status": TRANSACTION_STATUSES,
    },
    defaults={
        "date": date.today,
        "type": "Income",
        "mode": "Bank",
        "status": "Pending",
    },
)

COMPLIANCE: EntitySpec[ComplianceItem] = EntitySpec(
    key="compliance",
    table="compliance",
    label="compliance item",
    entity_type=ComplianceItem,
    columns={
        "title": "text",
        "description": "text",
        "category": "text",
        "type": "text",
        "priority": "text",
        "status": "text",
        "due_date": "date",
    },
    required=("title", "description", "category", "type", "due_date"),
    search_fields=("title", "description", "category"),
    filter_field="status",
    choices={
        "type": COMPLIANCE_TYPES,
        "priority": COMPLIANCE_PRIORITIES,
        "status": COMPLIANCE_STATUSES,
    },
    defaults={"priority": "Medium", "status": "pending"},
)

TASKS: EntitySpec[Task] = EntitySpec(
    key="tasks",
    table="tasks",
    label="task",
    entity_type=Task,
    columns={
        "title": "text",
        "description": "text",
        "assignee": "text",
        "status": "text",
        "priority": "text",
        "due_date": "date",
        "project": "text",
    },
    required=("title", "assignee", "due_date"),
    search_fields=("title", "assignee", "project"),
    filter_field="status",
    choices={"status": TASK_STATUSES, "priority": TASK_PRIORITIES},
    defaults={"description": "", "status": "To Do", "priority": "Medium", "project": ""},
)

ENTITY_SPECS: dict[str, EntitySpec] = {
    spec.key: spec
    for spec in (CLIENTS, EMPLOYEES, FINANCE, TRANSACTIONS, COMPLIANCE, TASKS)
}
"""Entity specifications indexed by module key."""


def get_entity_spec(key: str) -> EntitySpec:
    """
    Return the EntitySpec registered for a module key.

    Raises:
        ValueError: if the key is unknown.
    """
    try:
        return ENTITY_SPECS[key]
    except KeyError as exc:
        known = ", ".join(sorted(ENTITY_SPECS))
        raise ValueError(f"Unknown module {key!r}. Known modules: {known}.") from exc
