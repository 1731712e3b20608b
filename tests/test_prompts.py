"""Tests for the terminal prompter."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click
import pytest

from scratchpads.cli.prompts import ClickPrompter, filter_items
from scratchpads.core.filetypes import PickItem

ITEMS = (
    PickItem("Recent", separator=True),
    PickItem("Python (.py)", "py"),
    PickItem("File types", separator=True),
    PickItem("JavaScript (.js)", "js"),
    PickItem("TypeScript (.ts)", "ts"),
    PickItem("Markdown (.md)", "md"),
)


@pytest.fixture()
def answers(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[str]]:
    """Queue answers for ``click.prompt``; a ``click.Abort`` entry is raised.

    Returns the list of prompt texts that were shown.
    """

    def queue(*replies: Any) -> list[str]:
        pending = list(replies)
        shown: list[str] = []

        def fake_prompt(text: str, default: str = "", **_: Any) -> str:
            shown.append(text)
            reply = pending.pop(0)
            if isinstance(reply, click.Abort):
                raise reply
            return reply or default

        monkeypatch.setattr(click, "prompt", fake_prompt)
        return shown

    return queue


class TestPick:
    """Numbered selection with filtering."""

    def test_pick_by_number_skips_separators(self, answers: Callable[..., list[str]]) -> None:
        answers("3")
        item = ClickPrompter().pick(ITEMS, "Select filetype")
        assert item is not None
        assert item.value == "ts"

    def test_unique_filter_match_is_picked(self, answers: Callable[..., list[str]]) -> None:
        answers("mark")
        item = ClickPrompter().pick(ITEMS, "Select filetype")
        assert item is not None
        assert item.value == "md"

    def test_ambiguous_filter_narrows_the_list(
        self,
        answers: Callable[..., list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        answers("script", "2")
        item = ClickPrompter().pick(ITEMS, "Select filetype")
        assert item is not None
        # JavaScript and TypeScript remain, numbered 1 and 2
        assert item.value == "ts"
        assert "1. JavaScript (.js)" in capsys.readouterr().out

    def test_no_match_shows_everything_again(
        self,
        answers: Callable[..., list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        answers("rust", "1")
        item = ClickPrompter().pick(ITEMS, "Select filetype")
        assert item is not None
        assert item.value == "py"
        assert "No match for 'rust'" in capsys.readouterr().out

    def test_out_of_range_number_asks_again(
        self,
        answers: Callable[..., list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        shown = answers("9", "1")
        assert ClickPrompter().pick(ITEMS, "Select filetype") is not None
        assert len(shown) == 2
        assert "between 1 and 4" in capsys.readouterr().out

    def test_empty_answer_dismisses(self, answers: Callable[..., list[str]]) -> None:
        answers("")
        assert ClickPrompter().pick(ITEMS, "Select filetype") is None

    def test_abort_dismisses(self, answers: Callable[..., list[str]]) -> None:
        answers(click.Abort())
        assert ClickPrompter().pick(ITEMS, "Select filetype") is None

    def test_nothing_selectable(self, answers: Callable[..., list[str]]) -> None:
        shown = answers()
        assert ClickPrompter().pick([PickItem("Recent", separator=True)], "Select") is None
        assert shown == []

    def test_long_sections_are_truncated(
        self,
        answers: Callable[..., list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        answers("")
        rows = [PickItem(f"Type {n}", n) for n in range(5)]
        ClickPrompter(max_rows=3).pick(rows, "Select")
        out = capsys.readouterr().out
        assert "3. Type 2" in out
        assert "Type 3" not in out
        assert "2 more, type to filter" in out


class TestInputText:
    """Free-text entry."""

    def test_default_value_is_returned_on_enter(self, answers: Callable[..., list[str]]) -> None:
        answers("")
        assert ClickPrompter().input_text("Enter new name", value="scratch") == "scratch"

    def test_invalid_characters_ask_again(
        self,
        answers: Callable[..., list[str]],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        shown = answers("bad/name", "good-name")
        assert ClickPrompter().input_text("Enter new name") == "good-name"
        assert len(shown) == 2
        assert "Only letters, digits" in capsys.readouterr().out

    def test_spaces_allowed_for_display_names(self, answers: Callable[..., list[str]]) -> None:
        answers("HTTP Request")
        assert ClickPrompter().input_text("Name", allow_spaces=True) == "HTTP Request"

    def test_abort_returns_none(self, answers: Callable[..., list[str]]) -> None:
        answers(click.Abort())
        assert ClickPrompter().input_text("Enter new name") is None


class TestConfirm:
    """Choosing among named options."""

    def test_answer_by_name_ignores_case(self, answers: Callable[..., list[str]]) -> None:
        answers("always")
        assert ClickPrompter().confirm("Remove all?", "Yes", "Always") == "Always"

    def test_answer_by_number(self, answers: Callable[..., list[str]]) -> None:
        answers("1")
        assert ClickPrompter().confirm("Overwrite?", "Overwrite", "Cancel") == "Overwrite"

    def test_unknown_answer_asks_again(self, answers: Callable[..., list[str]]) -> None:
        shown = answers("maybe", "yes")
        assert ClickPrompter().confirm("Remove all?", "Yes", "Always") == "Yes"
        assert shown[0] == "Remove all? [Yes/Always]"
        assert len(shown) == 2

    def test_empty_answer_dismisses(self, answers: Callable[..., list[str]]) -> None:
        answers("")
        assert ClickPrompter().confirm("Remove all?", "Yes", "Always") is None


def test_filter_items_skips_separators() -> None:
    labels = [item.label for item in filter_items(ITEMS, "E")]
    assert labels == ["TypeScript (.ts)"]
