# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Application shell: module navigation and screen rendering.

A `Dashboard` is built once per session from an `AppConfig`. It owns:

- the shared `MessageLog` (one-shot success / error messages),
- the `NotificationStore`, initialized on construction,
- one list controller per module backed by the Record Store (the task
  controller also writes to the notification log).

The dashboard object is passed explicitly to whatever drives it (the CLI,
tests); there is no module-level instance. Module tables are loaded lazily,
the first time a screen needs them.
"""

from typing import Optional

from .config import AppConfig
from .controllers import EntityListController, MessageLog, TaskController
from .logging_setup import get_logger
from .models import ALL, ENTITY_SPECS, get_entity_spec
from .modules import (
    ModuleScreen,
    analytics_screen,
    compliance_screen,
    crm_screen,
    dashboard_screen,
    finance_screen,
    notifications_screen,
    tasks_screen,
    team_screen,
    transactions_screen,
)
from .notifications import JsonFileStorage, NotificationStorage, NotificationStore
from .views import limit_rows

logger = get_logger(__name__)

MODULE_IDS: tuple[str, ...] = (
    "dashboard",
    "clients",
    "team",
    "finance",
    "compliance",
    "analytics",
    "notifications",
    "tasks",
)
"""Sidebar entries, in display order."""

SUB_VIEWS: dict[str, str] = {"transactions": "finance"}
"""Views reachable from inside another module (sub-view -> parent module)."""

MODULE_LABELS: dict[str, str] = {
    "dashboard": "Dashboard",
    "clients": "CRM",
    "team": "Team",
    "finance": "Finance",
    "compliance": "Compliance",
    "analytics": "Analytics",
    "notifications": "Notifications",
    "tasks": "Tasks",
    "transactions": "Transactions",
}

_LIST_SCREENS = {
    "clients": crm_screen,
    "team": team_screen,
    "finance": finance_screen,
    "transactions": transactions_screen,
    "compliance": compliance_screen,
    "tasks": tasks_screen,
}


class Dashboard:
    """
    Session object tying the module views together.

    Parameters
    ----------
    config:
        Application configuration (database, notification storage, display).
    notification_storage:
        Overrides the JSON file storage built from the configuration
        (e.g. a `MemoryStorage` in tests).
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        notification_storage: Optional[NotificationStorage] = None,
    ):
        self.config = config
        self.messages = MessageLog()

        storage = notification_storage or JsonFileStorage(
            config.notifications.storage_path, config.notifications.slot
        )
        self.notifications = NotificationStore(storage, seed=config.notifications.seed)
        self.notifications.initialize()

        self.controllers: dict[str, EntityListController] = {}
        for key, spec in ENTITY_SPECS.items():
            if key == "tasks":
                self.controllers[key] = TaskController(
                    config.database, self.messages, self.notifications
                )
            else:
                self.controllers[key] = EntityListController(
                    spec, config.database, self.messages
                )

        self.active = "dashboard"

    # -- navigation -------------------------------------------------------

    def sidebar(self) -> list[tuple[str, str, Optional[int]]]:
        """
        Sidebar entries as (module id, label, badge).

        The Notifications entry carries the unread count as a badge when it
        is not zero.
        """
        entries = []
        for module_id in MODULE_IDS:
            badge = None
            if module_id == "notifications" and self.notifications.unread_count:
                badge = self.notifications.unread_count
            entries.append((module_id, MODULE_LABELS[module_id], badge))
        return entries

    def select(self, module_id: str) -> str:
        """
        Make `module_id` the active module and return it.

        Raises:
            ValueError: if the module id is unknown.
        """
        if module_id not in MODULE_IDS and module_id not in SUB_VIEWS:
            known = ", ".join((*MODULE_IDS, *SUB_VIEWS))
            raise ValueError(f"Unknown module {module_id!r}. Known modules: {known}.")
        self.active = module_id
        logger.debug("module_selected", module=module_id)
        return module_id

    # -- data -------------------------------------------------------------

    def controller(self, key: str) -> EntityListController:
        """
        Return the list controller of a record module.

        Raises:
            ValueError: if `key` is not a record module.
        """
        get_entity_spec(key)
        return self.controllers[key]

    def _records(self, key: str) -> list:
        ctrl = self.controller(key)
        if not ctrl.loaded:
            ctrl.load()
        return ctrl.records

    def reload(self, key: Optional[str] = None) -> None:
        """Reload one module's table, or every table when key is None."""
        keys = [key] if key is not None else list(self.controllers)
        for k in keys:
            self.controller(k).load()

    # -- rendering --------------------------------------------------------

    def render(
        self,
        module_id: Optional[str] = None,
        *,
        search: str = "",
        status: Optional[str] = ALL,
        **filters: Optional[str],
    ) -> ModuleScreen:
        """
        Build the screen of a module (the active one by default).

        Args:
            module_id: Module to render; selecting it makes it active.
            search: Free-text search applied to list modules.
            status: Status filter applied to list modules ("All" disables).
            filters: Extra equality filters (e.g. priority for compliance).
        """
        if module_id is not None:
            self.select(module_id)
        module_id = self.active
        display = self.config.display

        if module_id == "dashboard":
            screen = dashboard_screen(
                self._records("clients"),
                self._records("team"),
                self._records("finance"),
                self.notifications,
                display,
            )
        elif module_id == "analytics":
            screen = analytics_screen(
                self._records("clients"),
                self._records("team"),
                self._records("finance"),
                display,
            )
        elif module_id == "notifications":
            screen = notifications_screen(self.notifications, display)
        else:
            records = self._records(module_id)
            visible = self.controller(module_id).filtered(search, status, **filters)
            screen = _LIST_SCREENS[module_id](records, visible, display)

        screen.table = limit_rows(screen.table, display.max_rows)
        return screen
