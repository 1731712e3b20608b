"""Collision-free scratchpad filenames with gap-filling numbering.

One counter is shared by every filetype of a base name. With
``scratch.js, scratch1.ts, scratch3.sql`` on disk, the next scratchpad is
``scratch2.<ext>`` whatever extension is requested, and deleting
``scratch1.ts`` frees the number 1 again.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from scratchpads.core.consts import DEFAULT_FILE_PREFIX
from scratchpads.helpers.helpers_logging import print_debug

if TYPE_CHECKING:
    from scratchpads.core.filetypes import Filetype
    from scratchpads.core.store import ScratchpadStore

_FILENAME_CHARS_RE = re.compile(r"[^A-Za-z0-9_.\-]")
_DISPLAY_NAME_CHARS_RE = re.compile(r"[^A-Za-z0-9_.\s\-]")
_EDGE_DOTS_SPACES_RE = re.compile(r"^[.\s]+|[.\s]+$")
_DOT_RUNS_RE = re.compile(r"\.{2,}")


def sanitize_name(value: str, allow_spaces: bool = False) -> str:
    """Clean user input before it becomes part of a filename.

    Drops characters outside ``[A-Za-z0-9_.-]`` (spaces are kept for
    display names), trims leading/trailing dots and whitespace and
    collapses runs of dots, so the result never contains a path separator.

    Example:
        " ../notes..md " → "notes.md"
    """
    pattern = _DISPLAY_NAME_CHARS_RE if allow_spaces else _FILENAME_CHARS_RE
    cleaned = pattern.sub("", value)
    cleaned = _EDGE_DOTS_SPACES_RE.sub("", cleaned)
    return _DOT_RUNS_RE.sub(".", cleaned)


def _base_is_taken(base: str, ext: str, names: set[str]) -> bool:
    if f"{base}{ext}" in names:
        return True
    prefix = f"{base}."
    return any(name.startswith(prefix) for name in names)


def _used_numbers(base: str, names: set[str]) -> set[int]:
    pattern = re.compile(rf"^{re.escape(base)}(\d+)\.")
    used: set[int] = set()
    for name in names:
        match = pattern.match(name)
        if match:
            used.add(int(match.group(1)))
    return used


def _lowest_free(used: set[int]) -> int:
    number = 1
    while number in used:
        number += 1
    return number


class FilenameAllocator:
    """Turns ``(base name, filetype)`` into a path that does not exist yet."""

    def __init__(self, store: ScratchpadStore) -> None:
        self._store = store

    def allocate_name(self, base: str, filetype: Filetype) -> str:
        """Return a free filename for ``base`` and ``filetype``.

        1. ``base + ext`` when no ``base.<anything>`` exists.
        2. Otherwise ``base<n> + ext`` with the smallest positive ``n`` not
           used by any ``base<n>.<anything>``.

        The result is checked against the filesystem once more right before
        returning; another process can still create it afterwards.
        """
        base = base or DEFAULT_FILE_PREFIX
        names = set(self._store.list_names())

        if not _base_is_taken(base, filetype.ext, names):
            candidate = f"{base}{filetype.ext}"
            if not self._store.exists(candidate):
                return candidate

        used = _used_numbers(base, names)
        number = _lowest_free(used)
        candidate = f"{base}{number}{filetype.ext}"
        while self._store.exists(candidate):
            print_debug(f"{candidate} appeared after listing, trying the next number")
            used.add(number)
            number = _lowest_free(used)
            candidate = f"{base}{number}{filetype.ext}"
        return candidate

    def allocate(self, base: str, filetype: Filetype) -> Path:
        """Return the full path of a free scratchpad for ``base``/``filetype``."""
        return self._store.path_for(self.allocate_name(base, filetype))
