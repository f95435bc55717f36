"""Layered configuration: built-in defaults, global file, project file, CLI."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

CONFIG_HOME_ENV = "GIT_CLEANER_HOME"
CONFIG_FILE_NAME = "config.json"
PROJECT_CONFIG_FILE_NAME = ".git-cleaner.json"

ARRAY_KEYS = ("defaultPatterns", "defaultWhitelist")
BOOLEAN_KEYS = ("autoConfirm", "forceDelete")

DEFAULT_CONFIG: dict[str, Any] = {
    "defaultPatterns": [],
    "defaultWhitelist": ["main", "master", "develop", "dev"],
    "defaultRemote": "origin",
    "autoConfirm": False,
    "forceDelete": False,
}


class ConfigError(Exception):
    """Configuration operation error."""


class UnreadableConfig(Exception):
    """A config file exists but does not hold a JSON object."""


class ConfigStore(Protocol):
    """Storage for one JSON config record."""

    def exists(self) -> bool: ...

    def read(self) -> dict[str, Any]: ...

    def write(self, data: dict[str, Any]) -> None: ...


class JsonFileStore:
    """Config record kept in a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as err:
            raise UnreadableConfig(str(err)) from err
        if not isinstance(data, dict):
            raise UnreadableConfig(f"expected a JSON object, got {type(data).__name__}")
        return data

    def write(self, data: dict[str, Any]) -> None:
        """Replace the file contents, creating the directory if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryStore:
    """In-memory config record, for tests."""

    def __init__(self, data: Optional[dict[str, Any]] = None) -> None:
        self.data = None if data is None else dict(data)

    def exists(self) -> bool:
        return self.data is not None

    def read(self) -> dict[str, Any]:
        if self.data is None:
            raise UnreadableConfig("no data")
        return dict(self.data)

    def write(self, data: dict[str, Any]) -> None:
        self.data = dict(data)


def default_config_dir() -> Path:
    """Directory of the global config file."""
    override = os.environ.get(CONFIG_HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".git-cleaner"


@dataclass(frozen=True)
class ResolvedConfig:
    """Final settings for one command run."""

    default_patterns: list[str] = field(default_factory=list)
    default_whitelist: list[str] = field(default_factory=list)
    default_remote: str = "origin"
    auto_confirm: bool = False
    force_delete: bool = False

    @classmethod
    def from_mapping(cls, config: dict[str, Any]) -> "ResolvedConfig":
        merged = {**DEFAULT_CONFIG, **config}
        return cls(
            default_patterns=_as_list(merged["defaultPatterns"]),
            default_whitelist=_as_list(merged["defaultWhitelist"]),
            default_remote=str(merged["defaultRemote"] or DEFAULT_CONFIG["defaultRemote"]),
            auto_confirm=_as_bool(merged["autoConfirm"]),
            force_delete=_as_bool(merged["forceDelete"]),
        )


def split_list(value: str) -> list[str]:
    """Split a comma-separated string into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return split_list(value)
    if value is None:
        return []
    return [str(item) for item in value]


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def coerce_value(key: str, value: Any) -> Any:
    """Convert a raw (usually command-line) value to the type of key."""
    if key in ARRAY_KEYS and isinstance(value, str):
        return split_list(value)
    if key in BOOLEAN_KEYS and isinstance(value, str):
        return value.strip().lower() == "true"
    return value


class ConfigManager:
    """Reads, merges and updates the global and project config records."""

    def __init__(self, global_store: ConfigStore, project_store: Optional[ConfigStore] = None) -> None:
        self.global_store = global_store
        self.project_store = project_store

    @classmethod
    def for_path(cls, project_dir: Path, config_dir: Optional[Path] = None) -> "ConfigManager":
        """Build a manager over the standard file locations."""
        config_dir = config_dir or default_config_dir()
        return cls(
            JsonFileStore(config_dir / CONFIG_FILE_NAME),
            JsonFileStore(project_dir / PROJECT_CONFIG_FILE_NAME),
        )

    def read_global_config(self) -> dict[str, Any]:
        """Defaults overridden key-by-key by the global config file."""
        if not self.global_store.exists():
            return dict(DEFAULT_CONFIG)
        try:
            data = self.global_store.read()
        except UnreadableConfig as err:
            logger.warning("Configuration file parsing failed, using default configuration: %s", err)
            return dict(DEFAULT_CONFIG)
        return {**DEFAULT_CONFIG, **data}

    def read_project_config(self) -> dict[str, Any]:
        """Project config file contents, or an empty record."""
        if self.project_store is None or not self.project_store.exists():
            return {}
        try:
            return self.project_store.read()
        except UnreadableConfig as err:
            logger.warning("Project configuration file parsing failed: %s", err)
            return {}

    def get_merged_config(self) -> dict[str, Any]:
        return {**self.read_global_config(), **self.read_project_config()}

    def resolve(
        self,
        patterns: Optional[Sequence[str]] = None,
        whitelist: Optional[Sequence[str]] = None,
        remote: Optional[str] = None,
        auto_confirm: Optional[bool] = None,
        force_delete: Optional[bool] = None,
    ) -> ResolvedConfig:
        """Layer explicitly supplied command-line values over the merged config.

        ``None`` (or an empty sequence) means the flag was not given.
        """
        config = self.get_merged_config()
        if patterns:
            config["defaultPatterns"] = list(patterns)
        if whitelist:
            config["defaultWhitelist"] = list(whitelist)
        if remote:
            config["defaultRemote"] = remote
        if auto_confirm is not None:
            config["autoConfirm"] = auto_confirm
        if force_delete is not None:
            config["forceDelete"] = force_delete
        resolved = ResolvedConfig.from_mapping(config)
        logger.debug("Resolved configuration: %s", resolved)
        return resolved

    def set_config(self, key: str, value: Any) -> Any:
        """Update one key of the global config and persist it.

        Returns:
            The coerced value that was stored

        Raises:
            ConfigError: If key is unknown or the file cannot be written
        """
        _check_key(key)
        config = self.read_global_config()
        config[key] = coerce_value(key, value)
        try:
            self.global_store.write(config)
        except OSError as err:
            raise ConfigError(f"Failed to write configuration file: {err}") from err
        logger.debug("Stored %s=%r in %r", key, config[key], self.global_store)
        return config[key]

    def get_config(self, key: str) -> Any:
        _check_key(key)
        return self.read_global_config()[key]

    def list_config(self) -> dict[str, Any]:
        return self.read_global_config()

    def init_config(self) -> bool:
        """Write the defaults unless a global config file already exists.

        Returns:
            True if a new file was created
        """
        if self.global_store.exists():
            return False
        try:
            self.global_store.write(dict(DEFAULT_CONFIG))
        except OSError as err:
            raise ConfigError(f"Failed to write configuration file: {err}") from err
        return True


def _check_key(key: str) -> None:
    if key not in DEFAULT_CONFIG:
        known = ", ".join(DEFAULT_CONFIG)
        raise ConfigError(f"Unknown configuration key '{key}' (expected one of: {known})")
