"""Filesystem operations scoped to the project's scratchpads folder."""

from __future__ import annotations

import math
import os
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from scratchpads.core.errors import ConfigurationError, ValidationError
from scratchpads.helpers.helpers_logging import print_debug

if TYPE_CHECKING:
    from scratchpads.core.config import ScratchpadsConfig

SORT_BY_NAME = "name"
SORT_BY_DATE = "date"
SORT_BY_TYPE = "type"
SORT_CHOICES = (SORT_BY_NAME, SORT_BY_DATE, SORT_BY_TYPE)

_SIZE_UNITS = ("B", "KB", "MB", "GB")
_SIZE_STEP = 1024


@dataclass(frozen=True)
class ScratchpadFile:
    """A scratchpad as seen on disk right now."""

    name: str
    path: Path
    modified_at: datetime
    size_bytes: int

    @property
    def ext(self) -> str:
        return self.path.suffix


def validate_folder_creatable(path: Path) -> bool:
    """Check whether ``path`` could be created.

    Walks up the path until it finds an ancestor that already exists. The
    filesystem root alone does not count.

    Returns:
        True if some ancestor exists (so ``mkdir -p`` can proceed).
    """
    nodes = path.parts
    stop = 1 if path.anchor else 0
    for i in range(len(nodes), stop, -1):
        if Path(*nodes[:i]).exists():
            return True
    return False


def ensure_folder_creatable(folder: Path, config: ScratchpadsConfig) -> Path:
    """Create ``folder`` unless the configured root is bogus.

    Every write under the scratchpads root goes through here, so nothing is
    created below a path that has no existing ancestor.

    Raises:
        ConfigurationError: If no ancestor of ``folder`` exists.
    """
    if folder.is_dir():
        return folder
    if not validate_folder_creatable(folder):
        configured = config.custom_path or str(config.storage_path)
        raise ConfigurationError(
            f"Invalid scratchpads path given ({configured}). Check configuration..."
        )
    folder.mkdir(parents=True, exist_ok=True)
    print_debug(f"Created folder {folder}")
    return folder


def format_size(size_bytes: int) -> str:
    """Format a byte count, e.g. ``1536`` → ``1.5 KB``."""
    if size_bytes <= 0:
        return "0 B"
    exponent = min(int(math.log(size_bytes, _SIZE_STEP)), len(_SIZE_UNITS) - 1)
    value = round(size_bytes / _SIZE_STEP**exponent, 1)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


def sort_files(
    files: Iterable[ScratchpadFile],
    sort_by: str = SORT_BY_TYPE,
    ascending: bool = True,
) -> list[ScratchpadFile]:
    """Sort scratchpads by name, modification date, or extension then name."""
    if sort_by == SORT_BY_NAME:
        ordered = sorted(files, key=lambda item: item.name.casefold())
    elif sort_by == SORT_BY_DATE:
        ordered = sorted(files, key=lambda item: item.modified_at)
    elif sort_by == SORT_BY_TYPE:
        ordered = sorted(files, key=lambda item: (item.ext.casefold(), item.name.casefold()))
    else:
        raise ValueError(f"Unknown sort order '{sort_by}' (expected one of {SORT_CHOICES})")
    if not ascending:
        ordered.reverse()
    return ordered


class ScratchpadStore:
    """List, stat, write, rename and delete scratchpads in one folder."""

    def __init__(self, config: ScratchpadsConfig) -> None:
        self._config = config

    @property
    def folder(self) -> Path:
        return self._config.project_scratchpads_path

    def ensure_folder(self) -> Path:
        """Create the scratchpads folder on first use.

        Raises:
            ConfigurationError: If no ancestor of the folder exists, which
                means the configured path is bogus.
        """
        return ensure_folder_creatable(self.folder, self._config)

    def path_for(self, name: str) -> Path:
        """Return the full path of scratchpad ``name``.

        Raises:
            ValidationError: If ``name`` would point outside the folder.
        """
        separators = [sep for sep in (os.sep, os.altsep) if sep]
        if name in {"", ".", ".."} or any(sep in name for sep in separators):
            raise ValidationError(f"Invalid scratchpad name '{name}'")
        return self.folder / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def list_names(self) -> list[str]:
        """Return the names of regular files in the folder (missing → [])."""
        try:
            entries = list(os.scandir(self.folder))
        except FileNotFoundError:
            return []
        return sorted(entry.name for entry in entries if entry.is_file())

    def stat(self, name: str) -> ScratchpadFile:
        path = self.path_for(name)
        stats = path.stat()
        return ScratchpadFile(
            name=name,
            path=path,
            modified_at=datetime.fromtimestamp(stats.st_mtime),
            size_bytes=stats.st_size,
        )

    def list_files(self) -> list[ScratchpadFile]:
        """Stat every scratchpad; files vanishing mid-listing are skipped."""
        files: list[ScratchpadFile] = []
        for name in self.list_names():
            try:
                files.append(self.stat(name))
            except FileNotFoundError:
                print_debug(f"{name} disappeared while listing")
        return files

    def latest(self) -> ScratchpadFile | None:
        """Return the most recently modified scratchpad, if any."""
        files = self.list_files()
        if not files:
            return None
        return max(files, key=lambda item: item.modified_at)

    def write(self, name: str, content: str = "") -> Path:
        """Create scratchpad ``name`` with ``content`` and return its path."""
        self.ensure_folder()
        path = self.path_for(name)
        path.write_text(content, encoding="utf-8")
        print_debug(f"Wrote {len(content)} characters to {path}")
        return path

    def rename(self, old_name: str, new_name: str, overwrite: bool = False) -> Path:
        """Rename a scratchpad inside the folder.

        Raises:
            FileExistsError: If ``new_name`` exists and ``overwrite`` is False.
            FileNotFoundError: If ``old_name`` does not exist.
        """
        source = self.path_for(old_name)
        target = self.path_for(new_name)
        if target.exists() and not overwrite:
            raise FileExistsError(f"A file named \"{new_name}\" already exists")
        os.replace(source, target)
        return target

    def delete(self, name: str) -> None:
        self.path_for(name).unlink()

    def delete_all(self) -> list[str]:
        """Delete every scratchpad and return the removed names."""
        removed: list[str] = []
        for name in self.list_names():
            try:
                self.delete(name)
            except FileNotFoundError:
                continue
            removed.append(name)
        return removed
