# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Module screens: KPI cards, list tables and chart series per module.

Each builder receives the full collection of a module (KPIs are always
computed over everything that was loaded) and the subset currently
visible after search/filter (the list table shows only that subset). It
returns a `ModuleScreen` made of pandas DataFrames, ready for printing.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from . import metrics
from .config import DisplayConfig
from .models import Client, ComplianceItem, Employee, FinanceRecord, Task, Transaction
from .notifications import NotificationStore
from .views import (
    format_currency,
    format_percent,
    kpis_to_dataframe,
    notifications_to_dataframe,
    records_to_dataframe,
)


@dataclass
class ModuleScreen:
    """Everything a module view displays."""

    title: str
    kpis: pd.DataFrame
    table: pd.DataFrame
    charts: dict[str, pd.DataFrame] = field(default_factory=dict)


def _money(value: float, display: DisplayConfig) -> str:
    return format_currency(value, display.currency_symbol)


def _pct(value: float, display: DisplayConfig) -> str:
    return format_percent(value, display.decimals)


def _breakdown_frame(counts: dict[str, int], label: str = "name") -> pd.DataFrame:
    return pd.DataFrame(
        [{label: k, "count": v} for k, v in counts.items()], columns=[label, "count"]
    )


def crm_screen(
    clients: Sequence[Client],
    visible: Sequence[Client],
    display: DisplayConfig,
) -> ModuleScreen:
    kpi = metrics.client_summary(clients)
    return ModuleScreen(
        title="CRM",
        kpis=kpis_to_dataframe(
            {
                "Total clients": kpi.total,
                "Active clients": kpi.active,
                "Active (%)": _pct(kpi.active_pct, display),
                "Client revenue": _money(kpi.total_revenue, display),
            }
        ),
        table=records_to_dataframe(
            visible,
            ["id", "name", "industry", "status", "revenue", "risk_score", "contract_end"],
        ),
        charts={"status": _breakdown_frame(kpi.by_status, "status")},
    )


def team_screen(
    employees: Sequence[Employee],
    visible: Sequence[Employee],
    display: DisplayConfig,
) -> ModuleScreen:
    kpi = metrics.team_summary(employees)
    return ModuleScreen(
        title="Team",
        kpis=kpis_to_dataframe(
            {
                "Team size": kpi.total,
                "Active members": kpi.active,
                "Monthly payroll": _money(kpi.payroll, display),
                "Avg performance (%)": _pct(kpi.average_performance, display),
            }
        ),
        table=records_to_dataframe(
            visible,
            ["id", "name", "position", "department", "salary", "status", "performance", "skills"],
        ),
        charts={
            "performance": _breakdown_frame(metrics.performance_buckets(employees), "range")
        },
    )


def finance_screen(
    records: Sequence[FinanceRecord],
    visible: Sequence[FinanceRecord],
    display: DisplayConfig,
) -> ModuleScreen:
    summary = metrics.finance_summary(records)
    chart = metrics.finance_chart_frame(records)
    breakdown = metrics.expense_breakdown(summary)
    return ModuleScreen(
        title="Finance & Analytics",
        kpis=kpis_to_dataframe(
            {
                "Total revenue": _money(summary.total_revenue, display),
                "Total expenses": _money(summary.total_expenses, display),
                "Net profit": _money(summary.total_profit, display),
                "Profit margin (%)": _pct(summary.margin_pct, display),
            }
        ),
        table=records_to_dataframe(
            visible, ["id", "month", "revenue", "expenses", "profit", "salaries", "overhead"]
        ),
        charts={
            "monthly": chart,
            "growth": metrics.growth_series(chart),
            "expenses": pd.DataFrame(
                [{"name": k, "value": v} for k, v in breakdown.items()],
                columns=["name", "value"],
            ),
        },
    )


def transactions_screen(
    transactions: Sequence[Transaction],
    visible: Sequence[Transaction],
    display: DisplayConfig,
) -> ModuleScreen:
    kpi = metrics.transaction_summary(transactions)
    return ModuleScreen(
        title="Transaction History",
        kpis=kpis_to_dataframe(
            {
                "Total income": _money(kpi.total_income, display),
                "Total expenses": _money(kpi.total_expenses, display),
                "Net profit": _money(kpi.net, display),
                "Avg monthly income": _money(kpi.average_monthly_income, display),
            }
        ),
        table=records_to_dataframe(
            visible,
            ["id", "date", "type", "description", "category", "amount", "mode", "status"],
        ),
    )


def compliance_screen(
    items: Sequence[ComplianceItem],
    visible: Sequence[ComplianceItem],
    display: DisplayConfig,
) -> ModuleScreen:
    kpi = metrics.compliance_summary(items)
    return ModuleScreen(
        title="Compliance",
        kpis=kpis_to_dataframe(
            {
                "Total items": kpi.total,
                "Completed": kpi.completed,
                "Pending": kpi.pending,
                "Overdue": kpi.overdue,
                "Completion rate (%)": _pct(kpi.completion_rate, display),
            }
        ),
        table=records_to_dataframe(
            visible, ["id", "title", "category", "type", "priority", "status", "due_date"]
        ),
    )


def tasks_screen(
    tasks: Sequence[Task],
    visible: Sequence[Task],
    display: DisplayConfig,
) -> ModuleScreen:
    counts = metrics.task_summary(tasks)
    return ModuleScreen(
        title="Tasks",
        kpis=kpis_to_dataframe(
            {("Total tasks" if k == "total" else k): v for k, v in counts.items()}
        ),
        table=records_to_dataframe(
            visible, ["id", "title", "assignee", "status", "priority", "due_date", "project"]
        ),
    )


def notifications_screen(
    store: NotificationStore,
    display: DisplayConfig,
) -> ModuleScreen:
    stats = store.stats()
    return ModuleScreen(
        title="Notifications",
        kpis=kpis_to_dataframe(
            {
                "Total": stats["total"],
                "Unread": stats["unread"],
                "High priority": stats["high_priority"],
                "Today": stats["today"],
            }
        ),
        table=notifications_to_dataframe(store.notifications),
        charts={"categories": _breakdown_frame(store.category_counts(), "category")},
    )


def analytics_screen(
    clients: Sequence[Client],
    employees: Sequence[Employee],
    finance: Sequence[FinanceRecord],
    display: DisplayConfig,
) -> ModuleScreen:
    kpi = metrics.overview(clients, employees, finance)
    clients_kpi = metrics.client_summary(clients)
    revenue = metrics.finance_chart_frame(finance).sort_values("month", kind="stable")
    return ModuleScreen(
        title="Business Analytics",
        kpis=kpis_to_dataframe(
            {
                "Total revenue": _money(kpi.total_revenue, display),
                "Active clients": f"{kpi.active_clients}/{kpi.total_clients}",
                "Active employees": f"{kpi.active_employees}/{kpi.total_employees}",
                "Profit margin (%)": _pct(kpi.margin_pct, display),
                "Avg performance (%)": _pct(kpi.average_performance, display),
            }
        ),
        table=revenue.reset_index(drop=True),
        charts={
            "client_status": _breakdown_frame(
                {k: v for k, v in clients_kpi.by_status.items() if v > 0}, "status"
            ),
            "performance": _breakdown_frame(metrics.performance_buckets(employees), "range"),
        },
    )


def dashboard_screen(
    clients: Sequence[Client],
    employees: Sequence[Employee],
    finance: Sequence[FinanceRecord],
    notifications: Optional[NotificationStore],
    display: DisplayConfig,
) -> ModuleScreen:
    kpi = metrics.overview(clients, employees, finance)
    chart = metrics.finance_chart_frame(finance)
    growth = metrics.growth_series(chart)
    latest_growth = float(growth["growth"].iloc[-1]) if not growth.empty else 0.0
    cards: dict[str, object] = {
        "Total clients": kpi.total_clients,
        "Team size": kpi.total_employees,
        "Total revenue": _money(kpi.total_revenue, display),
        "Revenue growth (%)": _pct(latest_growth, display),
    }
    if notifications is not None:
        cards["Unread notifications"] = notifications.unread_count
    return ModuleScreen(
        title="Dashboard",
        kpis=kpis_to_dataframe(cards),
        table=chart,
    )
