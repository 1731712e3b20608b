"""Reconcile open editor tabs with scratchpad files on disk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from scratchpads.core.documents import DocumentHandle, DocumentRegistry, same_path
from scratchpads.helpers.helpers_logging import print_debug

if TYPE_CHECKING:
    from scratchpads.core.config import ScratchpadsConfig


class TabCoordinator:
    """Find and close editors backed by scratchpad files.

    Which documents count as scratchpads is decided by the configured
    folder: any document whose file sits directly in it.
    """

    def __init__(self, config: ScratchpadsConfig, registry: DocumentRegistry) -> None:
        self._config = config
        self._registry = registry

    def is_scratchpad(self, path: Path) -> bool:
        folder = os.path.normcase(os.path.abspath(self._config.project_scratchpads_path))
        return os.path.dirname(os.path.normcase(os.path.abspath(path))) == folder

    def close_all_scratch_tabs(self) -> int:
        """Close every open scratchpad document.

        Returns:
            Number of documents closed.
        """
        closed = self._registry.close_matching(lambda handle: self.is_scratchpad(handle.path))
        print_debug(f"Closed {closed} scratchpad tab(s)")
        return closed

    def close_tabs_for_path(self, path: Path) -> int:
        """Close every open document backed by ``path``.

        Returns:
            Number of documents closed (0 when none is open).
        """
        closed = self._registry.close_matching(lambda handle: same_path(handle.path, path))
        print_debug(f"Closed {closed} tab(s) for {path.name}")
        return closed

    def find_open_editor_for(self, path: Path) -> DocumentHandle | None:
        return self._registry.find(path)

    def active_scratchpad(self) -> DocumentHandle | None:
        """Return the active document if it is a scratchpad."""
        handle = self._registry.active()
        if handle is not None and self.is_scratchpad(handle.path):
            return handle
        return None

    def save(self, handle: DocumentHandle) -> None:
        self._registry.save(handle)
