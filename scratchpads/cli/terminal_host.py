"""Editor host for the terminal.

Documents are opened in the configured editor (``editor`` setting, then
``$VISUAL``/``$EDITOR``) through ``click.edit``. The editor runs in the
foreground, so nothing stays open after a command returns: the host lists
no open documents and closing is a no-op.
"""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import click

from scratchpads.core.documents import DocumentHandle
from scratchpads.helpers.helpers_logging import print_debug, print_warning

if TYPE_CHECKING:
    from scratchpads.core.config import ScratchpadsConfig

# Tried in order; the first one that succeeds wins
CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbpaste",),
    ("wl-paste", "--no-newline"),
    ("xclip", "-selection", "clipboard", "-o"),
    ("xsel", "--clipboard", "--output"),
    ("powershell.exe", "-NoProfile", "-Command", "Get-Clipboard"),
)


class TerminalEditorHost:
    """Host that hands files to a terminal editor."""

    def __init__(self, config: ScratchpadsConfig) -> None:
        self._config = config

    # -- Documents --------------------------------------------------------------

    def open_document(self, path: Path) -> None:
        print_debug(f"Opening {path}")
        click.edit(filename=str(path), editor=self._config.editor or None)

    def save_document(self, handle: DocumentHandle) -> None:
        # The editor saves on exit; there is no unsaved buffer to flush
        print_debug(f"Nothing to save for {handle.path}")

    def list_open_documents(self) -> list[DocumentHandle]:
        return []

    def close_document(self, handle: DocumentHandle) -> None:
        print_debug(f"Nothing to close for {handle.path}")

    def reveal_folder(self, path: Path) -> None:
        click.launch(str(path))

    # -- Clipboard / formatting -------------------------------------------------

    def read_clipboard(self) -> str:
        """Return the clipboard text, or '' when no clipboard tool works."""
        for command in CLIPBOARD_COMMANDS:
            try:
                result = subprocess.run(
                    list(command),
                    check=False,
                    capture_output=True,
                    text=True,
                )
            except OSError:
                continue
            if result.returncode == 0:
                print_debug(f"Read clipboard with {command[0]}")
                return result.stdout
        print_warning("Clipboard is not available, creating an empty scratchpad")
        return ""

    def format_document(self, path: Path) -> None:
        """Run the formatter configured for the file's extension, if any.

        The command is split shell-style after substituting ``{path}``;
        without a placeholder the path is appended.
        """
        command = self._config.formatters.get(path.suffix.lower())
        if not command:
            print_debug(f"No formatter configured for '{path.suffix}'")
            return

        if "{path}" in command:
            args = shlex.split(command.replace("{path}", shlex.quote(str(path))))
        else:
            args = [*shlex.split(command), str(path)]

        try:
            result = subprocess.run(args, check=False, capture_output=True, text=True)
        except OSError as exc:
            print_warning(f"Formatter '{args[0]}' could not run: {exc}")
            return
        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            print_warning(f"Formatter '{args[0]}' failed: {detail}")
