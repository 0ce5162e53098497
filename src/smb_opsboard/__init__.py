# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB OpsBoard
------------

A Python-based business-operations dashboard for Small and Medium-sized
Businesses (SMBs). It gathers the day-to-day records of a small company in
one place and derives the KPIs shown on dashboard cards and charts.

Main capabilities:
- CRM (clients), team (employees), finance (monthly records and
  transactions), compliance items and tasks, stored in a SQLite database,
- a single generic list controller (load / filter / add / edit / delete)
  shared by every module view,
- a currency parser and KPI computations (revenue, margin, growth,
  payroll, performance, completion rates),
- a session-scoped notification log with a persisted snapshot,
- CSV import of records,
- a command-line interface rendering module screens as tables.

Usage:
    python -m smb_opsboard.cli --help
"""

__all__ = ["db", "metrics", "notifications", "controllers", "shell"]

__version__ = "0.2.0"
