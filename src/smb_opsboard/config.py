# SMB OpsBoard - Business Operations Dashboard for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB OpsBoard.

This module is responsible for:
- loading the main application configuration from a TOML file,
- resolving relative paths against the configuration file directory,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .db import DatabaseConfig
from .errors import ConfigurationError
from .logging_setup import LOG_LEVELS

DEFAULT_CONFIG_FILE = "smb_opsboard_config.toml"


@dataclass(frozen=True)
class NotificationsConfig:
    """Where the notification log snapshot is persisted."""

    storage_path: Path
    slot: str
    seed: bool


@dataclass(frozen=True)
class DisplayConfig:
    """Display options for tables and KPI cards."""

    currency_symbol: str
    decimals: int
    max_rows: Optional[int]


@dataclass(frozen=True)
class LoggingConfig:
    """Default logging options (CLI flags take precedence)."""

    level: str
    json: bool


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB OpsBoard.

    This aggregates:
    - the database configuration (Record Store),
    - the notification log persistence options,
    - display options,
    - logging options.
    """

    database: DatabaseConfig
    notifications: NotificationsConfig
    display: DisplayConfig
    logging: LoggingConfig


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _bool_option(section: Mapping[str, Any], name: str, key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Invalid value for '{name}.{key}' in the configuration. "
            "Expected true or false."
        )
    return value


def _int_option(
    section: Mapping[str, Any], name: str, key: str, default: Optional[int]
) -> Optional[int]:
    value = section.get(key, default)
    if value is None:
        return None
    # TOML booleans are ints for Python, they are not accepted here
    if isinstance(value, bool):
        value = str(value)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid value for '{name}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc


def build_app_config(raw: Mapping[str, Any], base_dir: Path) -> AppConfig:
    """
    Build an AppConfig from parsed TOML data.

    Args:
        raw: Parsed TOML root dictionary (may be empty: every option has a
            default).
        base_dir: Directory used to resolve relative paths.

    Raises:
        ConfigurationError: if a value has the wrong type.
    """
    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or "data/db/smb_opsboard.sqlite"
    db_path = (base_dir / str(db_path_raw)).resolve()

    # 2) Notifications section
    notifications_section = _section(raw, "notifications")
    storage_raw = notifications_section.get("storage_path") or "data/notifications.json"
    notifications = NotificationsConfig(
        storage_path=(base_dir / str(storage_raw)).resolve(),
        slot=str(notifications_section.get("slot") or "notifications"),
        seed=_bool_option(notifications_section, "notifications", "seed", True),
    )

    # 3) Display options
    display_section = _section(raw, "display")
    display = DisplayConfig(
        currency_symbol=str(display_section.get("currency_symbol", "$")),
        decimals=_int_option(display_section, "display", "decimals", 1),
        max_rows=_int_option(display_section, "display", "max_rows", None),
    )

    # 4) Logging options
    logging_section = _section(raw, "logging")
    level = str(logging_section.get("level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid value for 'logging.level' in the configuration: {level!r}. "
            f"Expected one of: {', '.join(LOG_LEVELS)}."
        )
    logging_cfg = LoggingConfig(
        level=level,
        json=_bool_option(logging_section, "logging", "json", False),
    )

    return AppConfig(
        database=DatabaseConfig(engine=db_engine, path=db_path),
        notifications=notifications,
        display=display,
        logging=logging_cfg,
    )


def load_app_config(
    config_path: Optional[str] = None,
    *,
    allow_missing: bool = False,
) -> AppConfig:
    """
    Load the SMB OpsBoard application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        engine ("sqlite") and path of the SQLite file holding the records.

    [notifications]
        storage_path of the JSON document holding the notification log,
        slot (key inside that document) and seed (whether to create the
        sample notifications on first activation).

    [display]
        currency_symbol, decimals and max_rows for console rendering.

    [logging]
        level and json output.

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    Parameters
    ----------
    config_path:
        Path to the TOML file. Defaults to 'smb_opsboard_config.toml' in the
        current working directory.
    allow_missing:
        When True and the file does not exist, built-in defaults are used
        (paths resolved against the current directory).

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    config_file = Path(config_path or DEFAULT_CONFIG_FILE).resolve()

    if allow_missing and not config_file.exists():
        return build_app_config({}, config_file.parent)

    raw = _load_toml(config_file)
    return build_app_config(raw, config_file.parent)
