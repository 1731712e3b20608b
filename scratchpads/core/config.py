"""Settings storage and path resolution for scratchpads.

Settings live in two YAML files and are looked up with the fallback chain
workspace → global → default:

    <storage>/config.yaml          global settings
    <workspace>/.scratchpads.yaml  per-workspace overrides

Example config.yaml:
    file_prefix: note
    prompt_for_removal: false
    formatters:
      .py: black -q {path}

``resolve_config()`` turns the settings into an immutable
``ScratchpadsConfig`` that every component receives in its constructor.
A settings change produces a new config value; nothing is updated in place.
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import cast

import click
from ruamel.yaml import YAMLError

from scratchpads.core.consts import (
    APP_NAME,
    CONFIG_AUTO_FORMAT,
    CONFIG_AUTO_PASTE,
    CONFIG_DEFAULT_FILETYPE,
    CONFIG_DEFAULTS,
    CONFIG_EDITOR,
    CONFIG_FILE_PREFIX,
    CONFIG_FORMATTERS,
    CONFIG_PROMPT_FOR_FILENAME,
    CONFIG_PROMPT_FOR_REMOVAL,
    CONFIG_RENAME_WITH_EXTENSION,
    CONFIG_SCRATCHPADS_FOLDER,
    CONFIG_SETTLE_DELAY_MS,
    CONFIG_USE_GLOBAL_FOLDER,
    CONFIG_USE_SUBFOLDERS,
    GLOBAL_SCRATCHPADS_FOLDER_NAME,
    RECENT_FILETYPES_FILE,
    SCRATCHPADS_FOLDER_NAME,
    SETTINGS_FILE,
    STORAGE_ENV_VAR,
    WORKSPACE_MARKERS,
    WORKSPACE_SETTINGS_FILE,
)
from scratchpads.core.errors import ConfigurationError
from scratchpads.helpers.helpers_logging import print_debug, print_warning
from scratchpads.helpers.yaml_loader import ConfigDict, load_yaml_file, save_yaml_file

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class ConfigTarget(Enum):
    """Which settings file a write goes to."""

    WORKSPACE = "workspace"
    GLOBAL = "global"


@dataclass(frozen=True)
class SettingValues:
    """Every level at which a single setting may be defined."""

    workspace: object | None
    global_: object | None
    default: object | None

    def effective(self) -> object | None:
        """Return the first defined value along workspace → global → default."""
        if self.workspace is not None:
            return self.workspace
        if self.global_ is not None:
            return self.global_
        return self.default


# ---------------------------------------------------------------------------
# Settings store
# ---------------------------------------------------------------------------


class SettingsStore:
    """Key-value settings backed by the global and workspace YAML files."""

    def __init__(self, global_file: Path, workspace_file: Path | None = None) -> None:
        self.global_file = global_file
        self.workspace_file = workspace_file

    def _path_for(self, target: ConfigTarget) -> Path:
        if target is ConfigTarget.GLOBAL:
            return self.global_file
        if self.workspace_file is None:
            raise ConfigurationError(
                "No workspace detected; workspace settings are unavailable"
            )
        return self.workspace_file

    def _read(self, path: Path | None) -> ConfigDict:
        if path is None or not path.exists():
            return {}
        try:
            return load_yaml_file(path)
        except (YAMLError, ValueError) as exc:
            raise ConfigurationError(f"Could not read settings file {path}: {exc}") from exc

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in CONFIG_DEFAULTS and key != CONFIG_USE_SUBFOLDERS:
            known = ", ".join(sorted(CONFIG_DEFAULTS))
            raise ConfigurationError(f"Unknown setting '{key}'. Known settings: {known}")

    def inspect(self, key: str) -> SettingValues:
        """Return the workspace, global and default values of ``key``."""
        self._check_key(key)
        return SettingValues(
            workspace=self._read(self.workspace_file).get(key),
            global_=self._read(self.global_file).get(key),
            default=CONFIG_DEFAULTS.get(key),
        )

    def get(self, key: str) -> object | None:
        """Return the effective value of ``key``."""
        return self.inspect(key).effective()

    def set(
        self,
        key: str,
        value: object,
        target: ConfigTarget = ConfigTarget.GLOBAL,
    ) -> None:
        """Write ``key`` to the settings file of ``target``."""
        self._check_key(key)
        path = self._path_for(target)
        data = self._read(path)
        data[key] = value  # type: ignore[assignment]
        save_yaml_file(data, path)
        print_debug(f"Set {key}={value!r} in {path}")

    def unset(self, key: str, target: ConfigTarget = ConfigTarget.GLOBAL) -> bool:
        """Remove ``key`` from the settings file of ``target``.

        Returns:
            True if the key was present.
        """
        self._check_key(key)
        path = self._path_for(target)
        data = self._read(path)
        if key not in data:
            return False
        del data[key]
        save_yaml_file(data, path)
        return True

    def migrate_legacy(self) -> bool:
        """Move ``use_subfolders`` to its inverse ``use_global_folder``.

        Each settings file is migrated at its own level and the legacy key
        is removed afterwards.

        Returns:
            True if any file was rewritten.
        """
        migrated = False
        for path in (self.workspace_file, self.global_file):
            data = self._read(path)
            if path is None or CONFIG_USE_SUBFOLDERS not in data:
                continue
            legacy = data.pop(CONFIG_USE_SUBFOLDERS)
            if isinstance(legacy, bool):
                data[CONFIG_USE_GLOBAL_FOLDER] = not legacy
            save_yaml_file(data, path)
            print_debug(f"Migrated {CONFIG_USE_SUBFOLDERS} in {path}")
            migrated = True
        return migrated


def parse_setting_value(key: str, raw: str) -> object:
    """Convert a command-line string into the type expected for ``key``.

    Raises:
        ConfigurationError: If the key is unknown or the value does not fit.
    """
    if key not in CONFIG_DEFAULTS:
        known = ", ".join(sorted(CONFIG_DEFAULTS))
        raise ConfigurationError(f"Unknown setting '{key}'. Known settings: {known}")

    default = CONFIG_DEFAULTS[key]
    if isinstance(default, bool):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ConfigurationError(f"Setting '{key}' expects true/false, got '{raw}'")
    if isinstance(default, int):
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigurationError(f"Setting '{key}' expects an integer, got '{raw}'") from exc
        if value < 0:
            raise ConfigurationError(f"Setting '{key}' must not be negative")
        return value
    if isinstance(default, dict):
        raise ConfigurationError(
            f"Setting '{key}' is a mapping; edit the settings file directly"
        )
    if key == CONFIG_DEFAULT_FILETYPE:
        return raw.strip().lstrip(".")
    return raw


# ---------------------------------------------------------------------------
# Resolved configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScratchpadsConfig:
    """Immutable snapshot of settings plus every derived path.

    Attributes:
        storage_path: Per-installation storage directory.
        workspace_root: Detected workspace, or None outside any project.
        custom_path: Configured ``scratchpads_folder`` override ('' if unset).
        scratchpads_root: ``<custom_path or storage_path>/scratchpads``.
        project_hash: MD5 of the workspace path ('' without a workspace).
        project_scratchpads_path: Folder holding this project's scratchpads.
        recent_filetypes_path: JSON file with the Recent/custom filetypes.
    """

    storage_path: Path
    workspace_root: Path | None
    custom_path: str
    scratchpads_root: Path
    project_hash: str
    project_scratchpads_path: Path
    recent_filetypes_path: Path
    use_global_folder: bool = True
    default_filetype: str = ""
    file_prefix: str = ""
    prompt_for_filename: bool = False
    prompt_for_removal: bool = True
    rename_with_extension: bool = False
    auto_paste: bool = False
    auto_format: bool = False
    editor: str = ""
    formatters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    settle_delay: float = 0.2


def _typed_setting(settings: SettingsStore, key: str, expected: type) -> object:
    """Read a setting, falling back to the default when its type is wrong."""
    value = settings.get(key)
    default = CONFIG_DEFAULTS[key]
    # bool is an int subclass; keep the two apart
    if expected is int and isinstance(value, bool):
        value = None
    if value is None or not isinstance(value, expected):
        if value is not None:
            print_warning(
                f"Ignoring setting '{key}': expected {expected.__name__}, "
                + f"got {type(value).__name__}"
            )
        return default
    return value


def _formatters_setting(settings: SettingsStore) -> Mapping[str, str]:
    raw = _typed_setting(settings, CONFIG_FORMATTERS, dict)
    formatters: dict[str, str] = {}
    for ext, command in cast(dict[object, object], raw).items():
        if not isinstance(command, str) or not command.strip():
            print_warning(f"Ignoring formatter for '{ext}': command must be a string")
            continue
        key = "." + str(ext).strip().lstrip(".").lower()
        formatters[key] = command
    return MappingProxyType(formatters)


def project_hash_for(workspace_root: Path) -> str:
    """Return the folder selector used for a workspace's scratchpads."""
    return hashlib.md5(str(workspace_root).encode("utf-8")).hexdigest()


def resolve_config(
    settings: SettingsStore,
    storage_path: Path,
    workspace_root: Path | None,
) -> ScratchpadsConfig:
    """Compute the configuration snapshot from the current settings.

    Args:
        settings: Settings store to read from.
        storage_path: Per-installation storage directory.
        workspace_root: Current workspace, or None.

    Returns:
        A new immutable ScratchpadsConfig.
    """
    custom_path = str(_typed_setting(settings, CONFIG_SCRATCHPADS_FOLDER, str)).strip()
    base = Path(custom_path).expanduser() if custom_path else storage_path
    scratchpads_root = base / SCRATCHPADS_FOLDER_NAME
    project_hash = project_hash_for(workspace_root) if workspace_root else ""

    # Without a workspace there is no project folder to select
    use_global = workspace_root is None or bool(
        _typed_setting(settings, CONFIG_USE_GLOBAL_FOLDER, bool)
    )
    selector = GLOBAL_SCRATCHPADS_FOLDER_NAME if use_global else project_hash

    settle_ms = cast(int, _typed_setting(settings, CONFIG_SETTLE_DELAY_MS, int))

    return ScratchpadsConfig(
        storage_path=storage_path,
        workspace_root=workspace_root,
        custom_path=custom_path,
        scratchpads_root=scratchpads_root,
        project_hash=project_hash,
        project_scratchpads_path=scratchpads_root / selector,
        recent_filetypes_path=scratchpads_root / RECENT_FILETYPES_FILE,
        use_global_folder=use_global,
        default_filetype=str(_typed_setting(settings, CONFIG_DEFAULT_FILETYPE, str)).strip(),
        file_prefix=str(_typed_setting(settings, CONFIG_FILE_PREFIX, str)).strip(),
        prompt_for_filename=bool(_typed_setting(settings, CONFIG_PROMPT_FOR_FILENAME, bool)),
        prompt_for_removal=bool(_typed_setting(settings, CONFIG_PROMPT_FOR_REMOVAL, bool)),
        rename_with_extension=bool(
            _typed_setting(settings, CONFIG_RENAME_WITH_EXTENSION, bool)
        ),
        auto_paste=bool(_typed_setting(settings, CONFIG_AUTO_PASTE, bool)),
        auto_format=bool(_typed_setting(settings, CONFIG_AUTO_FORMAT, bool)),
        editor=str(_typed_setting(settings, CONFIG_EDITOR, str)).strip(),
        formatters=_formatters_setting(settings),
        settle_delay=max(settle_ms, 0) / 1000,
    )


# ---------------------------------------------------------------------------
# Environment discovery
# ---------------------------------------------------------------------------


def default_storage_path() -> Path:
    """Return the per-installation storage directory.

    ``$SCRATCHPADS_HOME`` wins over the platform application directory.
    """
    override = os.environ.get(STORAGE_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME))


def find_workspace_root(start: Path | None = None) -> Path | None:
    """Find the nearest ancestor that looks like a project root.

    Searches upwards from ``start`` (default: the current directory) for
    any of the workspace markers (``.scratchpads.yaml``, ``.git``,
    ``pyproject.toml``, ...).

    Returns:
        The workspace root, or None when no marker is found.
    """
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        if any((parent / marker).exists() for marker in WORKSPACE_MARKERS):
            return parent
    return None


def load_settings(storage_path: Path, workspace_root: Path | None) -> SettingsStore:
    """Build the settings store for the given storage path and workspace."""
    workspace_file = workspace_root / WORKSPACE_SETTINGS_FILE if workspace_root else None
    return SettingsStore(storage_path / SETTINGS_FILE, workspace_file)
