# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB OpsBoard.

This module wires together the main building blocks of SMB OpsBoard:

- global configuration (database, notification storage, display options),
- structured logging,
- CSV import into the Record Store,
- the application shell (module controllers, notification log),
- view helpers (KPI cards and tables rendered with pandas).

The CLI is intentionally thin: it does not implement business logic
itself. Every command goes through the same controllers and stores as any
other front end would.


High-level pipeline
-------------------

1) Load the main TOML configuration (smb_opsboard_config.toml by default)
   using ``load_app_config()``. When no configuration file exists in the
   current directory, built-in defaults are used.

2) Configure logging (``--debug`` and ``--json-logs`` override the
   [logging] section).

3) Initialize the database and optionally import CSV files
   (``--import MODULE=CSV_PATH``, repeatable).

4) Build the `Dashboard` session object (this also loads or seeds the
   notification log).

5) Run the requested command:

   - ``show [MODULE]``           render a module screen (default: dashboard),
   - ``records MODULE list``     list records with search and filters,
   - ``records MODULE add``      add a record (``--set FIELD=VALUE``),
   - ``records MODULE update``   update a record by id,
   - ``records MODULE delete``   delete a record by id,
   - ``tasks status ID STATUS``  move a task to another status,
   - ``notifications ...``       list / read / read-all / delete / add.

6) Print the pending one-shot messages (successes and errors) produced by
   the command.


Exit status
-----------
Invalid arguments and configuration problems stop the CLI with a non-zero
exit status. Record Store failures during a command do not: they are
reported as error messages, like on the dashboard.
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import AppConfig, load_app_config
from .controllers import Message
from .db import count_rows, import_rows, init_database
from .errors import ConfigurationError, RecordStoreError
from .io import read_records_csv
from .logging_setup import get_logger, setup_logging
from .models import ALL, ENTITY_SPECS, TASK_STATUSES, get_entity_spec
from .modules import ModuleScreen
from .notifications import NOTIFICATION_TYPES, PRIORITIES
from .shell import MODULE_IDS, SUB_VIEWS, Dashboard
from .views import limit_rows, records_to_dataframe

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m smb_opsboard.cli",
        description=(
            "SMB OpsBoard - Business Operations Dashboard for SMBs. "
            "Manages clients, team members, finance records, transactions, "
            "compliance items and tasks, and renders KPI screens."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_opsboard and exit.",
    )

    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. "
            "If omitted, 'smb_opsboard_config.toml' in the current directory is "
            "used when present, built-in defaults otherwise."
        ),
    )

    ap.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )

    ap.add_argument(
        "--json-logs",
        dest="json_logs",
        action="store_true",
        help="Write log events as JSON lines (stderr).",
    )

    # Optional import: feed the database from CSV files before running the command
    ap.add_argument(
        "--import",
        dest="imports",
        action="append",
        default=[],
        metavar="MODULE=CSV_PATH",
        help=(
            "Import records of MODULE (clients, team, finance, transactions, "
            "compliance, tasks) from the given CSV file before running the "
            "command. May be repeated."
        ),
    )

    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Subcommands ('show', 'records', 'tasks', 'notifications').",
    )

    # ------------------------------------------------------------------
    # show
    # ------------------------------------------------------------------
    show = subparsers.add_parser(
        "show",
        help="Render the KPI cards and table of a module screen.",
    )
    show.add_argument(
        "module",
        nargs="?",
        default="dashboard",
        choices=[*MODULE_IDS, *SUB_VIEWS],
        help="Module to render (default: dashboard).",
    )
    _add_filter_arguments(show)
    show.add_argument(
        "--charts",
        action="store_true",
        help="Also print the chart series of the screen.",
    )
    show.add_argument(
        "--output",
        dest="output_dir",
        help="Also write the KPI table and list table as CSV files in this directory.",
    )

    # ------------------------------------------------------------------
    # records MODULE {list, add, update, delete}
    # ------------------------------------------------------------------
    records = subparsers.add_parser(
        "records",
        help="List and manage the records of one module.",
    )
    records.add_argument(
        "module",
        choices=list(ENTITY_SPECS),
        help="Record module.",
    )
    records_subparsers = records.add_subparsers(
        dest="records_command",
        metavar="records-command",
        help="Records subcommands ('list', 'add', 'update', 'delete').",
    )

    records_list = records_subparsers.add_parser("list", help="List records.")
    _add_filter_arguments(records_list)

    records_add = records_subparsers.add_parser("add", help="Add a record.")
    _add_set_argument(records_add)

    records_update = records_subparsers.add_parser("update", help="Update a record.")
    records_update.add_argument("record_id", metavar="ID", help="Record id.")
    _add_set_argument(records_update)

    records_delete = records_subparsers.add_parser("delete", help="Delete a record.")
    records_delete.add_argument("record_id", metavar="ID", help="Record id.")

    # ------------------------------------------------------------------
    # tasks status ID STATUS
    # ------------------------------------------------------------------
    tasks = subparsers.add_parser("tasks", help="Task board operations.")
    tasks_subparsers = tasks.add_subparsers(
        dest="tasks_command",
        metavar="tasks-command",
        help="Tasks subcommands ('status').",
    )
    tasks_status = tasks_subparsers.add_parser(
        "status",
        help="Move a task to another status.",
    )
    tasks_status.add_argument("task_id", metavar="ID", help="Task id.")
    tasks_status.add_argument("status", choices=list(TASK_STATUSES), help="New status.")

    # ------------------------------------------------------------------
    # notifications {list, read, read-all, delete, add}
    # ------------------------------------------------------------------
    notifications = subparsers.add_parser(
        "notifications",
        help="Inspect and manage the notification log.",
    )
    notifications_subparsers = notifications.add_subparsers(
        dest="notifications_command",
        metavar="notifications-command",
        help="Notifications subcommands ('list', 'read', 'read-all', 'delete', 'add').",
    )
    notifications_list = notifications_subparsers.add_parser(
        "list", help="List notifications, newest first."
    )
    notifications_list.add_argument(
        "--unread",
        action="store_true",
        help="Only show unread notifications.",
    )
    notifications_read = notifications_subparsers.add_parser(
        "read", help="Mark one notification as read."
    )
    notifications_read.add_argument("notification_id", metavar="ID")
    notifications_subparsers.add_parser("read-all", help="Mark every notification as read.")
    notifications_delete = notifications_subparsers.add_parser(
        "delete", help="Delete one notification."
    )
    notifications_delete.add_argument("notification_id", metavar="ID")
    notifications_add = notifications_subparsers.add_parser(
        "add", help="Add a notification."
    )
    notifications_add.add_argument("--title", required=True)
    notifications_add.add_argument("--message", required=True)
    notifications_add.add_argument("--type", choices=list(NOTIFICATION_TYPES), default="info")
    notifications_add.add_argument("--priority", choices=list(PRIORITIES), default="medium")
    notifications_add.add_argument("--category", default="General")

    return ap


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--search",
        default="",
        help="Case-insensitive text searched in the module's main text fields.",
    )
    parser.add_argument(
        "--status",
        default=ALL,
        help="Status filter (type for transactions). 'All' disables it.",
    )
    parser.add_argument(
        "--priority",
        default=None,
        help="Priority filter (compliance items and tasks).",
    )


def _add_set_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Field value. May be repeated.",
    )


def _parse_assignments(assignments: Sequence[str]) -> dict[str, str]:
    """
    Parse repeated FIELD=VALUE options into a dictionary.

    Raises
    ------
    SystemExit
        If an assignment has no '='.
    """
    values: dict[str, str] = {}
    for item in assignments:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise SystemExit(f"Invalid assignment: {item!r}. Expected FIELD=VALUE.")
        values[name.strip().lower()] = value
    return values


def _print_messages(messages: Sequence[Message]) -> None:
    for message in messages:
        stream = sys.stderr if message.variant == "destructive" else sys.stdout
        print(f"[{message.title}] {message.description}", file=stream)


def _print_screen(screen: ModuleScreen, with_charts: bool = False) -> None:
    print(f"=== {screen.title} ===")
    print(screen.kpis.to_string(index=False))
    print()
    if screen.table.empty:
        print("No records found.")
    else:
        print(screen.table.to_string(index=False))

    if with_charts:
        for name, frame in screen.charts.items():
            print()
            print(f"--- {name} ---")
            print(frame.to_string(index=False) if not frame.empty else "(empty)")


def _extra_filters(args: argparse.Namespace, module: str) -> dict[str, Optional[str]]:
    priority = getattr(args, "priority", None)
    if priority is None:
        return {}
    spec = ENTITY_SPECS.get(module)
    if spec is None or "priority" not in spec.columns:
        raise SystemExit(f"--priority is not supported for module {module!r}.")
    return {"priority": priority}


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_show(args: argparse.Namespace, dashboard: Dashboard) -> None:
    """
    Handle the 'show' subcommand: render one module screen.

    Search and filters only apply to list modules; KPI cards are always
    computed over the whole module.
    """
    filters = _extra_filters(args, args.module)
    screen = dashboard.render(
        args.module, search=args.search, status=args.status, **filters
    )
    _print_screen(screen, with_charts=args.charts)

    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for suffix, frame in (("kpis", screen.kpis), ("table", screen.table)):
            path = output_dir / f"{args.module}_{suffix}.csv"
            frame.to_csv(path, index=False)
            print(f"Wrote {path} ({len(frame)} rows)")


def _handle_records(args: argparse.Namespace, dashboard: Dashboard) -> None:
    """
    Handle the 'records MODULE ...' subcommands.

    The module table is loaded first so that local state mirrors the store
    before any mutation.
    """
    subcmd = getattr(args, "records_command", None)
    if subcmd is None:
        print(
            "No records subcommand specified. "
            "Available subcommands are: 'list', 'add', 'update', 'delete'."
        )
        return

    ctrl = dashboard.controller(args.module)
    if not ctrl.load():
        return

    if subcmd == "list":
        filters = _extra_filters(args, args.module)
        visible = ctrl.filtered(args.search, args.status, **filters)
        df = limit_rows(records_to_dataframe(visible), dashboard.config.display.max_rows)
        if df.empty:
            print("No records found for the given criteria.")
            return
        print(df.to_string(index=False))
        print()
        print(f"Shown: {len(visible)} of {len(ctrl)} {ctrl.spec.label} record(s).")

    elif subcmd == "add":
        record = ctrl.add(_parse_assignments(args.assignments))
        if record is not None:
            print(f"Created {ctrl.spec.label} {record.id}")

    elif subcmd == "update":
        if ctrl.get(args.record_id) is None:
            dashboard.messages.error(f"No {ctrl.spec.label} with id {args.record_id}.")
            return
        ctrl.save(args.record_id, _parse_assignments(args.assignments))

    elif subcmd == "delete":
        ctrl.delete(args.record_id)


def _handle_tasks(args: argparse.Namespace, dashboard: Dashboard) -> None:
    if getattr(args, "tasks_command", None) != "status":
        print("No tasks subcommand specified. Available subcommands are: 'status'.")
        return

    ctrl = dashboard.controller("tasks")
    if not ctrl.load():
        return
    if ctrl.get(args.task_id) is None:
        dashboard.messages.error(f"No task with id {args.task_id}.")
        return
    ctrl.change_status(args.task_id, args.status)


def _handle_notifications(args: argparse.Namespace, dashboard: Dashboard) -> None:
    store = dashboard.notifications
    subcmd = getattr(args, "notifications_command", None)

    if subcmd is None or subcmd == "list":
        screen = dashboard.render("notifications")
        if subcmd == "list" and args.unread:
            screen.table = screen.table[screen.table["read"] == "no"]
        _print_screen(screen)

    elif subcmd == "read":
        if store.mark_read(args.notification_id):
            print("Notification marked as read.")
        else:
            print(f"No notification with id {args.notification_id}.")

    elif subcmd == "read-all":
        count = store.mark_all_read()
        print(f"{count} notification(s) marked as read.")

    elif subcmd == "delete":
        if store.delete(args.notification_id):
            print("Notification deleted.")
        else:
            print(f"No notification with id {args.notification_id}.")

    elif subcmd == "add":
        notification = store.add(
            title=args.title,
            message=args.message,
            type=args.type,
            priority=args.priority,
            category=args.category,
        )
        print(f"Created notification {notification.id}")


def _run_imports(
    parser: argparse.ArgumentParser,
    imports: Sequence[str],
    config: AppConfig,
) -> None:
    """Import every MODULE=CSV_PATH pair into the Record Store."""
    for item in imports:
        module, sep, raw_path = item.partition("=")
        if not sep:
            parser.error(f"Invalid --import value {item!r}. Expected MODULE=CSV_PATH.")
        try:
            spec = get_entity_spec(module.strip())
        except ValueError as exc:
            parser.error(str(exc))

        csv_path = Path(raw_path)
        if not csv_path.is_file():
            parser.error(f"CSV file for --import not found: {csv_path}")

        print(f"Importing {spec.key} records from {csv_path} into the database...")
        try:
            df_import: pd.DataFrame = read_records_csv(csv_path, spec)
        except ValueError as exc:
            parser.error(f"{csv_path}: {exc}")

        try:
            stats = import_rows(config.database, spec.table, df_import)
        except RecordStoreError as exc:
            logger.error("import_failed", table=spec.table, error=str(exc))
            print(f"Error: import of {csv_path} failed: {exc.message}", file=sys.stderr)
            continue
        print(f"Imported {stats.rows_inserted} {spec.label} record(s).")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the SMB OpsBoard CLI.

    This function parses command-line arguments, loads the application
    configuration, configures logging, initializes the database, optionally
    imports CSV files into it, builds the dashboard session and runs the
    requested command (rendering the dashboard screen when none is given).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"smb_opsboard version {__version__}")
        return

    # 1) Load application configuration (database, notifications, display)
    try:
        if args.config_path:
            config = load_app_config(args.config_path)
        else:
            config = load_app_config(allow_missing=True)
    except (FileNotFoundError, ValueError, ConfigurationError) as exc:
        parser.error(str(exc))

    # 2) Logging: CLI flags take precedence over the [logging] section
    setup_logging(
        config.logging.level,
        debug=args.debug,
        json_output=args.json_logs or config.logging.json,
    )

    # 3) Initialize the database (create file and schema if needed)
    try:
        init_database(config.database)
    except (RecordStoreError, ValueError) as exc:
        raise SystemExit(f"Error: {exc}") from exc

    # 4) Optional imports from CSV into the database
    _run_imports(parser, args.imports, config)

    if not args.imports and all(
        count_rows(config.database, spec.table) == 0 for spec in ENTITY_SPECS.values()
    ):
        print("Warning: database is empty. Use --import to load records.")

    # 5) Session object: controllers and notification log
    dashboard = Dashboard(config)

    command = getattr(args, "command", None)
    if command == "records":
        _handle_records(args, dashboard)
    elif command == "tasks":
        _handle_tasks(args, dashboard)
    elif command == "notifications":
        _handle_notifications(args, dashboard)
    elif command == "show":
        _handle_show(args, dashboard)
    else:
        _print_screen(dashboard.render("dashboard"))

    # 6) One-shot messages produced by the command
    _print_messages(dashboard.messages.drain())


if __name__ == "__main__":
    main()
