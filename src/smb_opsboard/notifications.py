# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Session-scoped notification log.

The notification log is an in-session event list shared by every module
view (tasks emit events when they are created, updated or deleted; the
Notifications screen lists them and lets the user mark or delete them). It
is independent from the Record Store: nothing here is ever written to the
database.

Design
------
- `NotificationStore` is an explicitly constructed object. The application
  shell creates exactly one per session and passes it to the controllers
  that need it; there is no module-level singleton.
- Persistence goes through a small port (`NotificationStorage`) with
  `load()` and `save()`. `JsonFileStorage` keeps the whole log in a single
  named slot of a JSON document, `MemoryStorage` keeps it in memory.
- The sequence is ordered newest first *by insertion*: `add` prepends.
  Timestamps are informative only and are never used to sort.
- Every mutation writes the full sequence back synchronously. Writes are
  best effort: a failing save is logged and the in-memory state keeps the
  mutation.
- Seeding happens at most once per storage: when `initialize` finds no
  snapshot it creates the sample notifications and saves them right away.
  An existing snapshot, even an empty one, is always loaded as is.
"""

import json
import uuid
from collections import Counter
from collections.abc import Callable
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Literal, Optional, Protocol

from .errors import ValidationError
from .logging_setup import get_logger

logger = get_logger(__name__)

NotificationType = Literal["info", "warning", "success", "error"]
Priority = Literal["low", "medium", "high"]

NOTIFICATION_TYPES: tuple[str, ...] = ("info", "warning", "success", "error")
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")


@dataclass(frozen=True)
class Notification:
    """One entry of the notification log."""

    id: str
    title: str
    message: str
    type: NotificationType
    priority: Priority
    read: bool
    timestamp: datetime
    category: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        """
        Rebuild a notification from its serialized form.

        Raises:
            KeyError, ValueError: if a field is missing or malformed.
        """
        timestamp = datetime.fromisoformat(str(data["timestamp"]))
        if timestamp.tzinfo is None:
            timestamp = timestamp.astimezone()
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            message=str(data["message"]),
            type=_check_choice("type", data["type"], NOTIFICATION_TYPES),
            priority=_check_choice("priority", data["priority"], PRIORITIES),
            read=bool(data.get("read", False)),
            timestamp=timestamp,
            category=str(data.get("category", "")),
        )


def _check_choice(name: str, value: Any, allowed: tuple[str, ...]) -> Any:
    if value not in allowed:
        raise ValidationError(
            f"Invalid notification {name} {value!r}; expected one of: "
            f"{', '.join(allowed)}.",
            fields=[name],
        )
    return value


# ---------------------------------------------------------------------------
# Persistence port
# ---------------------------------------------------------------------------


class NotificationStorage(Protocol):
    """Durable slot holding the serialized notification sequence."""

    def load(self) -> Optional[list[dict[str, Any]]]:
        """Return the stored sequence, or None if nothing was ever saved."""
        ...

    def save(self, items: list[dict[str, Any]]) -> None:
        """Replace the stored sequence. May raise OSError."""
        ...


class MemoryStorage:
    """In-process storage, for tests and throw-away sessions."""

    def __init__(self, items: Optional[list[dict[str, Any]]] = None):
        self._items = None if items is None else [dict(i) for i in items]
        self.save_count = 0

    def load(self) -> Optional[list[dict[str, Any]]]:
        if self._items is None:
            return None
        return [dict(i) for i in self._items]

    def save(self, items: list[dict[str, Any]]) -> None:
        self._items = [dict(i) for i in items]
        self.save_count += 1


class JsonFileStorage:
    """
    Single named slot inside a JSON document on disk.

    The document is a JSON object; the notification sequence lives under
    `slot`. Other keys of the document are preserved on save, so several
    slots can share one file.
    """

    def __init__(self, path: Path, slot: str = "notifications"):
        self.path = Path(path)
        self.slot = slot

    def _read_document(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Corrupt notification storage file: {self.path}") from exc
        if not isinstance(document, dict):
            raise ValueError(f"Invalid notification storage root in {self.path}")
        return document

    def load(self) -> Optional[list[dict[str, Any]]]:
        document = self._read_document()
        items = document.get(self.slot)
        if items is None:
            return None
        if not isinstance(items, list):
            raise ValueError(f"Slot {self.slot!r} of {self.path} is not a list")
        return items

    def save(self, items: list[dict[str, Any]]) -> None:
        try:
            document = self._read_document()
        except ValueError:
            document = {}
        document[self.slot] = items
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _new_id() -> str:
    return str(uuid.uuid4())


def sample_notifications(
    now: datetime,
    id_factory: Callable[[], str] = _new_id,
) -> list[Notification]:
    """The notifications created on the very first activation."""
    return [
        Notification(
            id=id_factory(),
            title="GDPR Compliance Due",
            message="Annual GDPR review is due in 5 days. Please complete the assessment.",
            type="warning",
            priority="high",
            read=False,
            timestamp=now,
            category="Compliance",
        ),
        Notification(
            id=id_factory(),
            title="New Client Added",
            message="TechCorp has been successfully added to your CRM.",
            type="success",
            priority="medium",
            read=False,
            timestamp=now - timedelta(hours=1),
            category="CRM",
        ),
        Notification(
            id=id_factory(),
            title="Monthly Finance Report",
            message="October financial records have been updated.",
            type="info",
            priority="low",
            read=True,
            timestamp=now - timedelta(hours=2),
            category="Finance",
        ),
        Notification(
            id=id_factory(),
            title="Team Performance Alert",
            message="Overall team performance has increased by 15% this month.",
            type="success",
            priority="medium",
            read=False,
            timestamp=now - timedelta(days=1),
            category="HR",
        ),
    ]


class NotificationStore:
    """
    Ordered notification log with persisted snapshot and derived counts.

    Parameters
    ----------
    storage:
        Persistence port holding the snapshot.
    seed:
        Whether `initialize` creates the sample notifications when no
        snapshot exists.
    clock:
        Returns the current timezone-aware datetime (local time by default).
    id_factory:
        Returns a new unique id (UUID4 strings by default).
    """

    def __init__(
        self,
        storage: NotificationStorage,
        *,
        seed: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._storage = storage
        self._seed = seed
        self._clock = clock or _local_now
        self._id_factory = id_factory or _new_id
        self._items: list[Notification] = []
        self._initialized = False

    # -- lifecycle --------------------------------------------------------

    def initialize(self) -> None:
        """
        Load the persisted snapshot, seeding the log on first activation.

        Calling this again reloads the snapshot; it never seeds twice since
        the seed is persisted immediately.
        """
        try:
            snapshot = self._storage.load()
        except (OSError, ValueError) as exc:
            logger.warning("notification_snapshot_unreadable", error=str(exc))
            self._items = []
            self._initialized = True
            return

        if snapshot is None:
            if self._seed:
                self._items = sample_notifications(self._clock(), self._id_factory)
            else:
                self._items = []
            self._persist()
            logger.info("notifications_seeded", count=len(self._items))
        else:
            self._items = self._decode(snapshot)
            logger.debug("notifications_loaded", count=len(self._items))

        self._initialized = True

    @property
    def initialized(self) -> bool:
        return self._initialized

    @staticmethod
    def _decode(snapshot: list[dict[str, Any]]) -> list[Notification]:
        items: list[Notification] = []
        for raw in snapshot:
            try:
                items.append(Notification.from_dict(raw))
            except (KeyError, TypeError, ValueError, ValidationError) as exc:
                logger.warning("notification_entry_skipped", error=str(exc))
        return items

    def _persist(self) -> None:
        try:
            self._storage.save([n.to_dict() for n in self._items])
        except OSError as exc:
            logger.warning("notification_snapshot_not_saved", error=str(exc))

    # -- mutations --------------------------------------------------------

    def add(
        self,
        title: str,
        message: str,
        type: NotificationType = "info",
        priority: Priority = "medium",
        category: str = "General",
        *,
        read: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> Notification:
        """
        Prepend a new notification and persist the log.

        Raises:
            ValidationError: if `type` or `priority` is not a known value.
        """
        notification = Notification(
            id=self._id_factory(),
            title=title,
            message=message,
            type=_check_choice("type", type, NOTIFICATION_TYPES),
            priority=_check_choice("priority", priority, PRIORITIES),
            read=read,
            timestamp=timestamp or self._clock(),
            category=category,
        )
        self._items.insert(0, notification)
        self._persist()
        logger.debug("notification_added", id=notification.id, category=category)
        return notification

    def mark_read(self, notification_id: str) -> bool:
        """Mark one notification as read. Returns False if the id is absent."""
        found = False
        updated: list[Notification] = []
        for n in self._items:
            if n.id == notification_id:
                found = True
                n = replace(n, read=True)
            updated.append(n)
        self._items = updated
        self._persist()
        return found

    def mark_all_read(self) -> int:
        """Mark every notification as read. Returns how many were unread."""
        unread = self.unread_count
        self._items = [replace(n, read=True) for n in self._items]
        self._persist()
        return unread

    def delete(self, notification_id: str) -> bool:
        """Remove a notification. Returns False if the id is absent."""
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        self._persist()
        return len(self._items) < before

    # -- derived views ----------------------------------------------------

    @property
    def notifications(self) -> tuple[Notification, ...]:
        """Current sequence, newest first by insertion."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, notification_id: str) -> Optional[Notification]:
        for n in self._items:
            if n.id == notification_id:
                return n
        return None

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    def count_by_priority(self, priority: str) -> int:
        return sum(1 for n in self._items if n.priority == priority)

    def priority_counts(self) -> dict[str, int]:
        """Counts for every priority level, including zeros."""
        counts = Counter(n.priority for n in self._items)
        return {p: counts.get(p, 0) for p in PRIORITIES}

    def type_counts(self) -> dict[str, int]:
        counts = Counter(n.type for n in self._items)
        return {t: counts.get(t, 0) for t in NOTIFICATION_TYPES}

    def category_counts(self) -> dict[str, int]:
        return dict(Counter(n.category for n in self._items))

    def today_count(self) -> int:
        """
        Number of notifications whose timestamp falls on today's local date.

        This is a calendar-date comparison in local time, not a rolling
        24 hour window.
        """
        today = self._clock().astimezone().date()
        return sum(1 for n in self._items if n.timestamp.astimezone().date() == today)

    def stats(self) -> dict[str, int]:
        """Figures shown on the Notifications screen cards."""
        return {
            "total": len(self._items),
            "unread": self.unread_count,
            "high_priority": self.count_by_priority("high"),
            "today": self.today_count(),
        }
