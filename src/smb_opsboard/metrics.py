# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
KPI computations for SMB OpsBoard.

This module derives every figure shown on the dashboard cards and charts
from collections already fetched from the Record Store:

1. Finance
   -------
   - totals of revenue, expenses, profit, salaries and overhead,
   - profit margin = (revenue - expenses) / revenue, in percent,
   - month-over-month revenue growth series,
   - expense breakdown (salaries / overhead / other).

2. Team
   ----
   - head count, active members and percent active,
   - payroll (salaries of active members only),
   - average performance and performance buckets.

3. CRM, compliance, transactions and tasks
   ---------------------------------------
   - counts per status, completion rate,
   - income / expenses / net and average monthly income.

Rules shared by every function
------------------------------
- Inputs are plain lists of entity dataclasses; nothing is cached and every
  call recomputes from scratch.
- Monetary text goes through `parsing.parse_currency`, so malformed values
  count as 0.
- Every ratio guards its denominator: an empty collection or a zero base
  yields 0.0, never NaN or an exception.

Chart series are returned as pandas DataFrames so they can be rendered or
exported like any other table.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import pandas as pd

from .models import (
    CLIENT_STATUSES,
    COMPLIANCE_STATUSES,
    TASK_STATUSES,
    Client,
    ComplianceItem,
    Employee,
    FinanceRecord,
    Task,
    Transaction,
)
from .parsing import parse_currency, sum_currency

PERFORMANCE_BUCKETS: tuple[tuple[str, int, int], ...] = (
    ("90-100%", 90, 101),
    ("80-89%", 80, 90),
    ("70-79%", 70, 80),
    ("Below 70%", -1, 70),
)
"""(label, lower bound inclusive, upper bound exclusive)."""


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------


def percentage(part: float, whole: float) -> float:
    """Return part / whole * 100, or 0.0 when whole is 0."""
    if not whole:
        return 0.0
    return part / whole * 100.0


def active_ratio(total: int, active: int) -> float:
    """Percent of active items; 0.0 for an empty collection."""
    return percentage(active, total)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return float(sum(values)) / len(values)


def status_counts(
    records: Iterable[object],
    field: str = "status",
    vocabulary: Sequence[str] = (),
) -> dict[str, int]:
    """
    Count records per value of `field`.

    Every value of `vocabulary` appears in the result (with 0 if unused);
    values outside the vocabulary are counted as well, after it.
    """
    counts = Counter(getattr(r, field) for r in records)
    out = {value: counts.get(value, 0) for value in vocabulary}
    for value, count in counts.items():
        if value not in out:
            out[value] = count
    return out


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------


def profit_margin(revenue: float, expenses: float) -> float:
    """
    Profit margin in percent: (revenue - expenses) / revenue * 100.

    Returns 0.0 when revenue is 0, whatever the expenses.
    """
    if revenue == 0:
        return 0.0
    return (revenue - expenses) / revenue * 100.0


def growth_rate(current: float, previous: float) -> float:
    """Period-over-period growth in percent; 0.0 when previous is 0 or negative."""
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100.0


@dataclass(frozen=True)
class FinanceSummary:
    """Totals of a set of monthly finance records."""

    total_revenue: float
    total_expenses: float
    total_profit: float
    total_salaries: float
    total_overhead: float
    margin_pct: float
    months: int


def finance_summary(records: Sequence[FinanceRecord]) -> FinanceSummary:
    """Sum every monetary column and compute the profit margin."""
    revenue = sum_currency(r.revenue for r in records)
    expenses = sum_currency(r.expenses for r in records)
    return FinanceSummary(
        total_revenue=revenue,
        total_expenses=expenses,
        total_profit=sum_currency(r.profit for r in records),
        total_salaries=sum_currency(r.salaries for r in records),
        total_overhead=sum_currency(r.overhead for r in records),
        margin_pct=profit_margin(revenue, expenses),
        months=len(records),
    )


def finance_chart_frame(records: Sequence[FinanceRecord]) -> pd.DataFrame:
    """
    Parsed revenue / expenses / profit per record, in chronological order.

    Records come from the Record Store newest first; the frame reverses
    them so that the oldest month comes first.

    Columns: month, revenue, expenses, profit.
    """
    rows = [
        {
            "month": r.month,
            "revenue": parse_currency(r.revenue),
            "expenses": parse_currency(r.expenses),
            "profit": parse_currency(r.profit),
        }
        for r in reversed(records)
    ]
    return pd.DataFrame(rows, columns=["month", "revenue", "expenses", "profit"])


def growth_series(chart: pd.DataFrame) -> pd.DataFrame:
    """
    Month-over-month revenue growth for a chronological chart frame.

    The first entry always reports 0 growth, as does any month whose
    previous revenue is 0 or negative. Values are percentages rounded to 2
    decimals.

    Columns: month, growth.
    """
    growth: list[float] = []
    revenues = [float(v) for v in chart["revenue"]] if not chart.empty else []
    for index, current in enumerate(revenues):
        if index == 0:
            growth.append(0.0)
        else:
            growth.append(round(growth_rate(current, revenues[index - 1]), 2))

    return pd.DataFrame(
        {"month": list(chart["month"]) if not chart.empty else [], "growth": growth},
        columns=["month", "growth"],
    )


def expense_breakdown(summary: FinanceSummary) -> dict[str, float]:
    """
    Split total expenses into salaries, overhead and other.

    Only strictly positive slices are kept (a pie chart cannot show
    negative or empty slices).
    """
    slices = {
        "Salaries": summary.total_salaries,
        "Overhead": summary.total_overhead,
        "Other": summary.total_expenses - summary.total_salaries - summary.total_overhead,
    }
    return {name: value for name, value in slices.items() if value > 0}


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TeamSummary:
    total: int
    active: int
    active_pct: float
    payroll: float
    average_performance: float


def payroll(employees: Iterable[Employee]) -> float:
    """Sum of salaries of Active employees only."""
    return sum_currency(e.salary for e in employees if e.status == "Active")


def team_summary(employees: Sequence[Employee]) -> TeamSummary:
    active = sum(1 for e in employees if e.status == "Active")
    return TeamSummary(
        total=len(employees),
        active=active,
        active_pct=active_ratio(len(employees), active),
        payroll=payroll(employees),
        average_performance=mean([e.performance or 0 for e in employees]),
    )


def performance_buckets(employees: Iterable[Employee]) -> dict[str, int]:
    """Number of employees per performance range (see PERFORMANCE_BUCKETS)."""
    counts = {label: 0 for label, _, _ in PERFORMANCE_BUCKETS}
    for e in employees:
        score = e.performance or 0
        for label, low, high in PERFORMANCE_BUCKETS:
            if low <= score < high:
                counts[label] += 1
                break
    return counts


# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClientSummary:
    total: int
    active: int
    active_pct: float
    by_status: dict[str, int]
    total_revenue: float


def client_summary(clients: Sequence[Client]) -> ClientSummary:
    by_status = status_counts(clients, "status", CLIENT_STATUSES)
    active = by_status.get("Active", 0)
    return ClientSummary(
        total=len(clients),
        active=active,
        active_pct=active_ratio(len(clients), active),
        by_status=by_status,
        total_revenue=sum_currency(c.revenue for c in clients),
    )


# ---------------------------------------------------------------------------
# Compliance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComplianceSummary:
    total: int
    completed: int
    pending: int
    overdue: int
    completion_rate: float


def compliance_summary(items: Sequence[ComplianceItem]) -> ComplianceSummary:
    by_status = status_counts(items, "status", COMPLIANCE_STATUSES)
    completed = by_status["completed"]
    return ComplianceSummary(
        total=len(items),
        completed=completed,
        pending=by_status["pending"],
        overdue=by_status["overdue"],
        completion_rate=percentage(completed, len(items)),
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransactionSummary:
    total_income: float
    total_expenses: float
    net: float
    income_count: int
    expense_count: int
    average_monthly_income: float


def transaction_summary(transactions: Sequence[Transaction]) -> TransactionSummary:
    """
    Income, expenses and net result of a set of transactions.

    The average monthly income divides total income by the number of
    distinct calendar months (YYYY-MM) present among all transactions.
    """
    income = [t for t in transactions if t.type == "Income"]
    expenses = [t for t in transactions if t.type == "Expense"]
    total_income = float(sum(t.amount for t in income))
    total_expenses = float(sum(t.amount for t in expenses))

    months = {t.date.strftime("%Y-%m") for t in transactions if t.date is not None}
    average_monthly_income = total_income / (len(months) or 1) if transactions else 0.0

    return TransactionSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net=total_income - total_expenses,
        income_count=len(income),
        expense_count=len(expenses),
        average_monthly_income=average_monthly_income,
    )


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def task_summary(tasks: Sequence[Task]) -> dict[str, int]:
    """Number of tasks per status, plus the total."""
    counts = status_counts(tasks, "status", TASK_STATUSES)
    return {"total": len(tasks), **counts}


# ---------------------------------------------------------------------------
# Analytics overview
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Overview:
    """Cross-module KPIs shown on the Dashboard and Analytics screens."""

    total_clients: int
    active_clients: int
    total_employees: int
    active_employees: int
    total_revenue: float
    total_expenses: float
    margin_pct: float
    average_performance: float


def overview(
    clients: Sequence[Client],
    employees: Sequence[Employee],
    finance: Sequence[FinanceRecord],
) -> Overview:
    clients_kpi = client_summary(clients)
    team_kpi = team_summary(employees)
    finance_kpi = finance_summary(finance)
    return Overview(
        total_clients=clients_kpi.total,
        active_clients=clients_kpi.active,
        total_employees=team_kpi.total,
        active_employees=team_kpi.active,
        total_revenue=finance_kpi.total_revenue,
        total_expenses=finance_kpi.total_expenses,
        margin_pct=finance_kpi.margin_pct,
        average_performance=team_kpi.average_performance,
    )
