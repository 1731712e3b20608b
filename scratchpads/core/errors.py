"""Exception hierarchy for scratchpads operations.

Cancelling a prompt is not an error: operations return ``None`` instead of
raising. Everything below is caught at the CLI boundary and reported once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scratchpads.core.filetypes import Filetype


class ScratchpadsError(Exception):
    """Base class for all scratchpads errors."""


class ValidationError(ScratchpadsError):
    """User input was rejected; nothing was changed."""


class FiletypeExistsError(ValidationError):
    """A filetype with the same normalized extension is already known."""

    def __init__(self, existing: Filetype) -> None:
        super().__init__(f"Extension already exists ({existing.name})")
        self.existing = existing


class ConfigurationError(ScratchpadsError):
    """Settings point somewhere unusable (e.g. an un-creatable folder)."""


class ScratchpadFileError(ScratchpadsError):
    """A filesystem operation on a scratchpad failed."""
