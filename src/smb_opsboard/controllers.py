# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Generic list controller shared by every module view.

Each module view (CRM, Team, Finance, Transactions, Compliance, Tasks)
follows the same cycle against its Record Store table:

1) load    fetch the full table (newest first) and replace the local list;
2) filter  case-insensitive search across a few text fields combined with
           an equality filter on one enum field, recomputed on every call;
3) add     validate required fields locally, insert, then prepend the row
           returned by the store to the local list;
4) edit    hand out an editable copy of one record;
5) save    update the store, then patch the local record by id;
6) delete  delete in the store, then drop the local record by id.

Local state is only ever patched *after* the store confirmed the write, so
a failure leaves the local list exactly as it was (no rollback needed).

Failures never propagate to the caller: store errors are logged and turned
into a one-shot "destructive" message in the shared `MessageLog`,
validation errors are turned into a rejection message before any store
call. Every operation is attempted once; there is no retry.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Literal, Optional, TypeVar

from .db import DatabaseConfig, delete_row, insert_row, select_all, update_row
from .errors import RecordStoreError, ValidationError
from .logging_setup import get_logger
from .models import ALL, TASKS, EntitySpec, Task
from .notifications import NotificationStore

logger = get_logger(__name__)

T = TypeVar("T")

MessageVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Message:
    """A transient user-facing message (shown once, then discarded)."""

    title: str
    description: str
    variant: MessageVariant = "default"


class MessageLog:
    """Queue of pending one-shot messages shared by the module views."""

    def __init__(self) -> None:
        self._pending: list[Message] = []

    def post(self, title: str, description: str, variant: MessageVariant = "default") -> Message:
        message = Message(title=title, description=description, variant=variant)
        self._pending.append(message)
        return message

    def error(self, description: str) -> Message:
        return self.post("Error", description, "destructive")

    @property
    def pending(self) -> tuple[Message, ...]:
        return tuple(self._pending)

    def drain(self) -> list[Message]:
        """Return pending messages and clear the queue."""
        messages, self._pending = self._pending, []
        return messages


def _matches_filter(value: Any, wanted: Optional[str]) -> bool:
    if wanted is None or wanted in (ALL, ALL.lower(), ""):
        return True
    return value == wanted


class EntityListController(Generic[T]):
    """
    Load / filter / add / edit / delete controller for one module.

    Parameters
    ----------
    spec:
        Entity specification of the module (table, fields, validation).
    db:
        Record Store configuration.
    messages:
        Shared message log receiving success and error messages.
    """

    def __init__(self, spec: EntitySpec[T], db: DatabaseConfig, messages: MessageLog):
        self.spec = spec
        self.db = db
        self.messages = messages
        self._records: list[T] = []
        self.loaded = False

    @property
    def records(self) -> list[T]:
        """Local copy of the table, newest first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: str) -> Optional[T]:
        for record in self._records:
            if getattr(record, "id") == record_id:
                return record
        return None

    @property
    def _title(self) -> str:
        return self.spec.label[:1].upper() + self.spec.label[1:]

    # -- load -------------------------------------------------------------

    def load(self) -> bool:
        """
        Replace local state with the full table.

        Returns False (and leaves local state untouched) if the store
        call fails.
        """
        try:
            rows = select_all(self.db, self.spec.table)
        except RecordStoreError as exc:
            logger.error("load_failed", table=self.spec.table, error=str(exc))
            self.messages.error(f"Failed to load {self.spec.label} data.")
            return False

        self._records = [self.spec.decode(row) for row in rows]
        self.loaded = True
        self.messages.post(
            f"{self._title} Data Loaded", f"{len(rows)} {self.spec.label} record(s) loaded."
        )
        logger.debug("records_loaded", table=self.spec.table, count=len(self._records))
        return True

    # -- filter -----------------------------------------------------------

    def filtered(
        self,
        search: str = "",
        status: Optional[str] = ALL,
        **extra_filters: Optional[str],
    ) -> list[T]:
        """
        Return the local records matching a search text and filters.

        Args:
            search: Case-insensitive substring looked up in every search
                field; a record matches if any field contains it.
            status: Required value of the entity's filter field; "All", "all",
                "" or None disable the filter.
            extra_filters: Additional equality filters on other fields
                (e.g. ``priority="High"`` for compliance items), with the
                same "All" convention.
        """
        needle = (search or "").strip().lower()
        unknown = sorted(set(extra_filters) - set(self.spec.columns))
        if unknown:
            raise ValueError(f"Unknown filter field(s): {', '.join(unknown)}")

        result: list[T] = []
        for record in self._records:
            if needle and not any(
                needle in str(getattr(record, f) or "").lower()
                for f in self.spec.search_fields
            ):
                continue
            if self.spec.filter_field is not None and not _matches_filter(
                getattr(record, self.spec.filter_field), status
            ):
                continue
            if not all(
                _matches_filter(getattr(record, f), wanted)
                for f, wanted in extra_filters.items()
            ):
                continue
            result.append(record)
        return result

    # -- add --------------------------------------------------------------

    def add(self, values: Mapping[str, Any]) -> Optional[T]:
        """
        Validate and insert a new record.

        Returns the stored record, or None if validation or the store call
        failed (a message explains why).
        """
        try:
            prepared = self.spec.prepare(values)
        except ValidationError as exc:
            logger.info("add_rejected", table=self.spec.table, fields=exc.fields)
            self.messages.post("Validation Error", exc.message, "destructive")
            return None

        try:
            row = insert_row(self.db, self.spec.table, prepared)
        except RecordStoreError as exc:
            logger.error("add_failed", table=self.spec.table, error=str(exc))
            self.messages.error(f"Failed to add {self.spec.label}.")
            return None

        record = self.spec.decode(row)
        self._records.insert(0, record)
        self.messages.post("Success", f"{self._title} added successfully.")
        logger.info("record_added", table=self.spec.table, id=row["id"])
        return record

    # -- edit / save ------------------------------------------------------

    def edit(self, record_id: str) -> Optional[dict[str, Any]]:
        """Return an editable copy of one record's fields, or None."""
        record = self.get(record_id)
        if record is None:
            return None
        return self.spec.to_dict(record)

    def save(self, record_id: str, values: Mapping[str, Any]) -> Optional[T]:
        """
        Update a record in the store, then patch the local copy by id.

        Only the provided fields are validated and written.
        """
        try:
            prepared = self.spec.prepare(values, partial=True)
        except ValidationError as exc:
            logger.info("update_rejected", table=self.spec.table, fields=exc.fields)
            self.messages.post("Validation Error", exc.message, "destructive")
            return None

        if not prepared:
            self.messages.post("Validation Error", "Nothing to update.", "destructive")
            return None

        try:
            row = update_row(self.db, self.spec.table, record_id, prepared)
        except RecordStoreError as exc:
            logger.error(
                "update_failed", table=self.spec.table, id=record_id, error=str(exc)
            )
            self.messages.error(f"Failed to update {self.spec.label}.")
            return None

        record = self.spec.decode(row)
        self._records = [
            record if getattr(r, "id") == record_id else r for r in self._records
        ]
        self.messages.post("Success", f"{self._title} updated successfully.")
        logger.info("record_updated", table=self.spec.table, id=record_id)
        return record

    # -- delete -----------------------------------------------------------

    def delete(self, record_id: str) -> bool:
        """
        Delete a record in the store, then drop it from the local list.

        No confirmation and no undo. Returns False if the store call failed.
        """
        try:
            delete_row(self.db, self.spec.table, record_id)
        except RecordStoreError as exc:
            logger.error(
                "delete_failed", table=self.spec.table, id=record_id, error=str(exc)
            )
            self.messages.error(f"Failed to delete {self.spec.label}.")
            return False

        self._records = [r for r in self._records if getattr(r, "id") != record_id]
        self.messages.post(f"{self._title} Deleted", f"{self._title} removed successfully.")
        logger.info("record_deleted", table=self.spec.table, id=record_id)
        return True


class TaskController(EntityListController[Task]):
    """
    Task list controller that also records events in the notification log.

    Creating a task, changing its status and deleting it each add a
    notification in the "Tasks" category.
    """

    def __init__(
        self,
        db: DatabaseConfig,
        messages: MessageLog,
        notifications: NotificationStore,
    ):
        super().__init__(TASKS, db, messages)
        self.notifications = notifications

    def add(self, values: Mapping[str, Any]) -> Optional[Task]:
        task = super().add(values)
        if task is not None:
            self.notifications.add(
                title="New Task Created",
                message=f'Task "{task.title}" has been assigned to {task.assignee}',
                type="success",
                priority="medium",
                category="Tasks",
            )
        return task

    def change_status(self, task_id: str, status: str) -> Optional[Task]:
        """Move a task to another status (To Do, In Progress, Done)."""
        task = self.save(task_id, {"status": status})
        if task is not None:
            self.notifications.add(
                title="Task Status Updated",
                message=f'"{task.title}" status changed to {status}',
                type="success" if status == "Done" else "info",
                priority="low",
                category="Tasks",
            )
        return task

    def delete(self, task_id: str) -> bool:
        task = self.get(task_id)
        deleted = super().delete(task_id)
        if deleted and task is not None:
            self.notifications.add(
                title="Task Deleted",
                message=f'Task "{task.title}" has been removed',
                type="warning",
                priority="low",
                category="Tasks",
            )
        return deleted
