import itertools
import json
from datetime import datetime, timedelta

import pytest

from smb_opsboard.errors import ValidationError
from smb_opsboard.notifications import (
    JsonFileStorage,
    MemoryStorage,
    Notification,
    NotificationStore,
)

# Local, timezone-aware "now" in the middle of a day.
NOW = datetime(2025, 6, 15, 12, 0).astimezone()


def make_store(storage=None, **kwargs) -> NotificationStore:
    """Helper to build a store with a fixed clock and predictable ids."""
    counter = itertools.count(1)
    return NotificationStore(
        storage if storage is not None else MemoryStorage(),
        clock=lambda: NOW,
        id_factory=lambda: f"n{next(counter)}",
        **kwargs,
    )


class FailingStorage(MemoryStorage):
    def save(self, items):
        raise OSError("disk full")


def test_initialize_seeds_sample_notifications_once():
    """The first activation seeds and persists the sample notifications."""
    storage = MemoryStorage()
    store = make_store(storage)
    store.initialize()

    titles = [n.title for n in store.notifications]
    assert titles == [
        "GDPR Compliance Due",
        "New Client Added",
        "Monthly Finance Report",
        "Team Performance Alert",
    ]
    assert store.unread_count == 3
    assert store.count_by_priority("high") == 1
    # The seed is persisted right away.
    assert storage.save_count == 1
    assert len(storage.load()) == 4


def test_initialize_twice_gives_same_sequence():
    """Initializing again, or from the saved snapshot, gives the same log."""
    storage = MemoryStorage()
    store = make_store(storage)
    store.initialize()
    first = store.notifications

    store.initialize()
    assert store.notifications == first

    other = make_store(storage)
    other.initialize()
    assert [n.id for n in other.notifications] == [n.id for n in first]


def test_empty_snapshot_is_never_reseeded():
    """A saved empty log stays empty."""
    store = make_store(MemoryStorage(items=[]))
    store.initialize()
    assert len(store) == 0


def test_seed_can_be_disabled():
    """With seed disabled, the log starts empty."""
    storage = MemoryStorage()
    store = make_store(storage, seed=False)
    store.initialize()

    assert len(store) == 0
    assert storage.load() == []


def test_add_prepends_and_persists():
    """New notifications are unread, first in the log and saved."""
    storage = MemoryStorage()
    store = make_store(storage)
    store.initialize()

    created = store.add("Hello", "World", type="error", priority="high", category="Ops")

    assert store.notifications[0] == created
    assert created.read is False
    assert created.timestamp == NOW
    assert store.unread_count == 4
    assert storage.load()[0]["title"] == "Hello"


def test_add_rejects_unknown_type_or_priority():
    """Unknown types and priorities are rejected."""
    store = make_store()
    store.initialize()

    with pytest.raises(ValidationError):
        store.add("t", "m", type="fatal")
    with pytest.raises(ValidationError):
        store.add("t", "m", priority="urgent")
    assert len(store) == 4


def test_mark_read_and_mark_all_read():
    """Marking as read lowers the unread count."""
    store = make_store()
    store.initialize()
    first_id = store.notifications[0].id

    assert store.mark_read(first_id) is True
    assert store.get(first_id).read is True
    assert store.unread_count == 2

    assert store.mark_read("missing") is False

    assert store.mark_all_read() == 2
    assert store.unread_count == 0


def test_delete_twice_is_a_no_op():
    """Deleting an already deleted notification changes nothing."""
    store = make_store()
    store.initialize()
    target = store.notifications[1].id

    assert store.delete(target) is True
    assert len(store) == 3
    assert store.delete(target) is False
    assert len(store) == 3


def test_counts_and_stats():
    """Counts and stats are derived from the log."""
    store = make_store()
    store.initialize()

    assert store.priority_counts() == {"low": 1, "medium": 2, "high": 1}
    assert store.type_counts() == {"info": 1, "warning": 1, "success": 2, "error": 0}
    assert store.category_counts() == {"Compliance": 1, "CRM": 1, "Finance": 1, "HR": 1}
    # now, now - 1h and now - 2h fall on today; now - 1 day does not.
    assert store.today_count() == 3
    assert store.stats() == {"total": 4, "unread": 3, "high_priority": 1, "today": 3}


def test_failed_save_keeps_in_memory_state():
    """Storage failures do not undo in-memory changes."""
    store = make_store(FailingStorage())
    store.initialize()
    assert len(store) == 4

    store.add("t", "m")
    assert len(store) == 5
    assert store.mark_all_read() == 4


def test_json_file_storage_round_trip(tmp_path):
    """The JSON file keeps other keys and reloads the saved log."""
    path = tmp_path / "state" / "storage.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    store = make_store(JsonFileStorage(path))
    store.initialize()
    store.mark_all_read()

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["theme"] == "dark"
    assert len(document["notifications"]) == 4
    assert all(item["read"] for item in document["notifications"])

    reloaded = make_store(JsonFileStorage(path))
    reloaded.initialize()
    assert reloaded.unread_count == 0
    assert [n.title for n in reloaded.notifications] == [
        n.title for n in store.notifications
    ]


def test_corrupt_snapshot_starts_empty_without_reseeding(tmp_path):
    """A corrupt file gives an empty log and is left as is."""
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")

    store = make_store(JsonFileStorage(path))
    store.initialize()

    assert store.initialized
    assert len(store) == 0
    assert path.read_text(encoding="utf-8") == "{not json"


def test_invalid_entries_are_skipped():
    """Invalid saved entries are skipped on load."""
    good = Notification(
        id="x",
        title="t",
        message="m",
        type="info",
        priority="low",
        read=False,
        timestamp=NOW - timedelta(days=3),
        category="General",
    ).to_dict()
    bad = dict(good, id="y", type="fatal")

    store = make_store(MemoryStorage(items=[good, bad, {"id": "z"}]))
    store.initialize()

    assert [n.id for n in store.notifications] == ["x"]
    assert store.today_count() == 0
