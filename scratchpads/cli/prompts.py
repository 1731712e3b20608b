"""Interactive prompts for the scratchpads CLI.

The core only talks to the ``Prompter`` protocol; ``ClickPrompter`` is the
terminal implementation. Every prompt returns None when dismissed (empty
input on a required choice, Ctrl-C, Ctrl-D).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import click

from scratchpads.core.allocator import sanitize_name
from scratchpads.core.filetypes import PickItem
from scratchpads.helpers.helpers_logging import Colors, print_info, print_warning

# Rows shown per section before the rest is hidden behind filtering
MAX_ROWS_PER_SECTION = 15


class Prompter(Protocol):
    """User interaction needed by the scratchpad commands."""

    def pick(self, items: Sequence[PickItem], placeholder: str) -> PickItem | None: ...

    def input_text(
        self,
        placeholder: str,
        value: str = "",
        allow_spaces: bool = False,
    ) -> str | None: ...

    def confirm(self, message: str, *choices: str) -> str | None: ...


def _ask(text: str, default: str = "") -> str | None:
    """Read one line; None when the user aborts."""
    try:
        answer = click.prompt(
            text,
            default=default,
            show_default=bool(default),
            prompt_suffix=": ",
        )
    except click.Abort:
        click.echo()
        return None
    return str(answer).strip()


def filter_items(items: Sequence[PickItem], text: str) -> list[PickItem]:
    """Return selectable rows whose label contains ``text`` (case-insensitive)."""
    needle = text.casefold()
    return [item for item in items if not item.separator and needle in item.label.casefold()]


class ClickPrompter:
    """Numbered-list prompts on the terminal."""

    def __init__(self, max_rows: int = MAX_ROWS_PER_SECTION) -> None:
        self._max_rows = max_rows

    def _show(self, items: Sequence[PickItem]) -> list[PickItem]:
        """Print ``items`` grouped by section and return the numbered rows."""
        numbered: list[PickItem] = []
        shown = 0
        hidden = 0
        for item in items:
            if item.separator:
                if hidden:
                    click.echo(f"  {Colors.DIM}… {hidden} more, type to filter{Colors.RESET}")
                shown = hidden = 0
                click.echo(f"\n{Colors.BOLD}{item.label}{Colors.RESET}")
                continue
            numbered.append(item)
            if shown < self._max_rows:
                click.echo(f"  {len(numbered)}. {item.label}")
                shown += 1
            else:
                hidden += 1
        if hidden:
            click.echo(f"  {Colors.DIM}… {hidden} more, type to filter{Colors.RESET}")
        return numbered

    def pick(self, items: Sequence[PickItem], placeholder: str) -> PickItem | None:
        """Let the user choose one row by number or by filter text.

        Text that matches exactly one label picks it; text that matches
        several narrows the list and asks again.
        """
        candidates: Sequence[PickItem] = items
        while True:
            print_info(f"\n{placeholder}")
            numbered = self._show(candidates)
            if not numbered:
                print_warning("Nothing to select")
                return None

            answer = _ask(f"Select (1-{len(numbered)}, or text to filter)")
            if not answer:
                return None

            if answer.isdigit():
                index = int(answer) - 1
                if 0 <= index < len(numbered):
                    return numbered[index]
                print_warning(f"Please enter a number between 1 and {len(numbered)}")
                continue

            matches = filter_items(items, answer)
            if len(matches) == 1:
                return matches[0]
            if not matches:
                print_warning(f"No match for '{answer}'")
                candidates = items
                continue
            candidates = matches

    def input_text(
        self,
        placeholder: str,
        value: str = "",
        allow_spaces: bool = False,
    ) -> str | None:
        """Ask for a name, re-asking while it contains disallowed characters."""
        while True:
            answer = _ask(placeholder, default=value)
            if answer is None:
                return None
            if sanitize_name(answer, allow_spaces=allow_spaces) == answer:
                return answer
            spaces = "spaces, " if allow_spaces else ""
            print_warning(
                f"Only letters, digits, {spaces}'_', '-' and '.' are allowed, "
                + "without leading or trailing dots"
            )

    def confirm(self, message: str, *choices: str) -> str | None:
        """Ask ``message`` and return the chosen option, or None."""
        options = "/".join(choices)
        while True:
            answer = _ask(f"{message} [{options}]")
            if not answer:
                return None
            if answer.isdigit() and 1 <= int(answer) <= len(choices):
                return choices[int(answer) - 1]
            for choice in choices:
                if choice.casefold() == answer.casefold():
                    return choice
            print_warning(f"Please answer one of: {options}")
