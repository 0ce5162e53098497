from pathlib import Path

import pytest

from smb_opsboard.config import build_app_config, load_app_config
from smb_opsboard.errors import ConfigurationError


def write_config(tmp_path: Path, content: str) -> Path:
    """Helper to write a TOML config file in tmp_path."""
    path = tmp_path / "smb_opsboard_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_app_config_resolves_relative_paths(tmp_path):
    """Every section is parsed and paths are resolved against the config directory."""
    path = write_config(
        tmp_path,
        """
[database]
engine = "sqlite"
path = "db/ops.sqlite"

[notifications]
storage_path = "state/notifications.json"
slot = "alerts"
seed = false

[display]
currency_symbol = "€"
decimals = 2
max_rows = 20

[logging]
level = "debug"
json = true
""",
    )

    config = load_app_config(str(path))

    assert config.database.engine == "sqlite"
    assert config.database.path == (tmp_path / "db" / "ops.sqlite").resolve()
    assert config.notifications.storage_path == (
        tmp_path / "state" / "notifications.json"
    ).resolve()
    assert config.notifications.slot == "alerts"
    assert config.notifications.seed is False
    assert config.display.currency_symbol == "€"
    assert config.display.decimals == 2
    assert config.display.max_rows == 20
    assert config.logging.level == "DEBUG"
    assert config.logging.json is True


def test_defaults_for_empty_config(tmp_path):
    """An empty config falls back to built-in defaults."""
    config = build_app_config({}, tmp_path)

    assert config.database.path == (tmp_path / "data/db/smb_opsboard.sqlite").resolve()
    assert config.notifications.slot == "notifications"
    assert config.notifications.seed is True
    assert config.display.currency_symbol == "$"
    assert config.display.max_rows is None
    assert config.logging.level == "INFO"


def test_missing_file(tmp_path):
    """A missing file raises unless allow_missing is set."""
    missing = tmp_path / "nope.toml"

    with pytest.raises(FileNotFoundError):
        load_app_config(str(missing))

    config = load_app_config(str(missing), allow_missing=True)
    assert config.database.path.parent == (tmp_path / "data" / "db").resolve()


def test_invalid_toml(tmp_path):
    """Unparsable TOML raises ValueError."""
    path = write_config(tmp_path, "[database\npath = ")
    with pytest.raises(ValueError):
        load_app_config(str(path))


def test_invalid_max_rows(tmp_path):
    """A non-integer max_rows is a configuration error."""
    with pytest.raises(ConfigurationError):
        build_app_config({"display": {"max_rows": "many"}}, tmp_path)


def test_invalid_decimals_is_rejected_like_max_rows(tmp_path):
    """decimals and max_rows share the same integer validation."""
    with pytest.raises(ConfigurationError):
        build_app_config({"display": {"decimals": "two"}}, tmp_path)
    with pytest.raises(ConfigurationError):
        build_app_config({"display": {"max_rows": True}}, tmp_path)

    config = build_app_config({"display": {"decimals": 0, "max_rows": "5"}}, tmp_path)
    assert config.display.decimals == 0
    assert config.display.max_rows == 5


@pytest.mark.parametrize(
    "raw",
    [
        {"notifications": {"seed": "false"}},
        {"notifications": {"seed": 0}},
        {"logging": {"json": "true"}},
    ],
)
def test_boolean_options_must_be_booleans(tmp_path, raw):
    """A quoted "false" must not silently turn into True."""
    with pytest.raises(ConfigurationError):
        build_app_config(raw, tmp_path)


def test_logging_level_is_validated(tmp_path):
    """Known level names are accepted in any case, others are rejected."""
    config = build_app_config({"logging": {"level": "warning"}}, tmp_path)
    assert config.logging.level == "WARNING"

    with pytest.raises(ConfigurationError):
        build_app_config({"logging": {"level": "LOUD"}}, tmp_path)
