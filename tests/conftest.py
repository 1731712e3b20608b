"""Shared fixtures and fakes for the scratchpads test suite.

Provides an isolated storage directory and configuration per test, a
scripted ``Prompter`` whose answers are queued up front, and two fake
editor hosts: one that lists open documents directly and one that only
exposes a ring of tabs with an active pointer.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from unittest.mock import patch

import pytest

from scratchpads.core.config import ScratchpadsConfig, SettingsStore, load_settings, resolve_config
from scratchpads.core.documents import DocumentHandle
from scratchpads.core.filetypes import PickItem
from scratchpads.helpers.helpers_logging import set_verbose

# Small language table keeping tests independent of the packaged data.
SMALL_TABLE: dict[str, tuple[str, ...]] = {
    "Python": (".py", ".pyi", ".pyw"),
    "JavaScript": (".js", ".cjs", ".mjs"),
    "TypeScript": (".ts", ".cts"),
    "SQL": (".sql", ".ddl"),
    "PLSQL": (".pls", ".sql", ".ddl"),
    "Markdown": (".md", ".markdown"),
    "reStructuredText": (".rst", ".rest.txt"),
    "Go Module": (),
}


# ---------------------------------------------------------------------------
# Scripted prompter
# ---------------------------------------------------------------------------


class ScriptedPrompter:
    """Prompter answering from queues; ``None`` in a queue dismisses."""

    def __init__(
        self,
        picks: Sequence[str | None] = (),
        texts: Sequence[str | None] = (),
        confirms: Sequence[str | None] = (),
    ) -> None:
        self.picks = list(picks)
        self.texts = list(texts)
        self.confirms = list(confirms)
        self.pick_calls: list[tuple[list[PickItem], str]] = []
        self.text_calls: list[tuple[str, str]] = []
        self.confirm_calls: list[tuple[str, tuple[str, ...]]] = []

    def pick(self, items: Sequence[PickItem], placeholder: str) -> PickItem | None:
        self.pick_calls.append((list(items), placeholder))
        label = self.picks.pop(0)
        if label is None:
            return None
        for item in items:
            if not item.separator and item.label == label:
                return item
        raise AssertionError(f"No selectable item labelled {label!r}")

    def input_text(
        self,
        placeholder: str,
        value: str = "",
        allow_spaces: bool = False,  # noqa: ARG002
    ) -> str | None:
        self.text_calls.append((placeholder, value))
        return self.texts.pop(0)

    def confirm(self, message: str, *choices: str) -> str | None:
        self.confirm_calls.append((message, choices))
        return self.confirms.pop(0)


# ---------------------------------------------------------------------------
# Fake hosts
# ---------------------------------------------------------------------------


class _RecordingHost:
    """Host behaviour shared by both fakes."""

    def __init__(self) -> None:
        self.opened: list[Path] = []
        self.saved: list[DocumentHandle] = []
        self.formatted: list[Path] = []
        self.revealed: list[Path] = []
        self.clipboard = ""

    def save_document(self, handle: DocumentHandle) -> None:
        self.saved.append(handle)

    def read_clipboard(self) -> str:
        return self.clipboard

    def format_document(self, path: Path) -> None:
        self.formatted.append(path)

    def reveal_folder(self, path: Path) -> None:
        self.revealed.append(path)


class FakeDirectHost(_RecordingHost):
    """Host that can list and close open documents."""

    def __init__(self, open_paths: Sequence[Path] = ()) -> None:
        super().__init__()
        self._next_id = 0
        self.documents: list[DocumentHandle] = []
        self.closed: list[DocumentHandle] = []
        for path in open_paths:
            self._add(path)

    def _add(self, path: Path) -> DocumentHandle:
        self._next_id += 1
        handle = DocumentHandle(id=f"doc{self._next_id}", path=Path(path))
        self.documents.append(handle)
        return handle

    def open_document(self, path: Path) -> None:
        self.opened.append(path)
        self._add(path)

    def list_open_documents(self) -> list[DocumentHandle]:
        return list(self.documents)

    def close_document(self, handle: DocumentHandle) -> None:
        self.closed.append(handle)
        self.documents.remove(handle)


class FakeCycleHost(_RecordingHost):
    """Host exposing only a ring of tabs with an active pointer.

    Closing the active tab activates its right-hand neighbour (wrapping),
    the way editors usually do.
    """

    def __init__(self, open_paths: Sequence[Path] = (), active: int = 0) -> None:
        super().__init__()
        self.ring = [
            DocumentHandle(id=f"doc{index}", path=Path(path))
            for index, path in enumerate(open_paths)
        ]
        self.index = active
        self.closed: list[DocumentHandle] = []
        self.advances = 0

    def open_document(self, path: Path) -> None:
        self.opened.append(path)
        handle = DocumentHandle(id=f"doc{len(self.ring) + len(self.closed)}", path=Path(path))
        self.ring.append(handle)
        self.index = len(self.ring) - 1

    def active_document(self) -> DocumentHandle | None:
        if not self.ring:
            return None
        return self.ring[self.index]

    def next_document(self) -> None:
        self.advances += 1
        if self.ring:
            self.index = (self.index + 1) % len(self.ring)

    def close_active_document(self) -> None:
        self.closed.append(self.ring.pop(self.index))
        self.index = self.index % len(self.ring) if self.ring else 0


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _quiet_and_fast() -> Iterator[list[float]]:
    """Skip real settle delays and reset verbosity around every test."""
    sleeps: list[float] = []
    with patch("scratchpads.core.documents.time.sleep", side_effect=sleeps.append):
        yield sleeps
    set_verbose(False)


@pytest.fixture()
def sleeps(_quiet_and_fast: list[float]) -> list[float]:
    """Durations passed to ``time.sleep`` during the test."""
    return _quiet_and_fast


@pytest.fixture()
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / ".git").mkdir(parents=True)
    return root


@pytest.fixture()
def settings(storage_path: Path) -> SettingsStore:
    return load_settings(storage_path, None)


@pytest.fixture()
def config(settings: SettingsStore, storage_path: Path) -> ScratchpadsConfig:
    """Configuration without a workspace (global scratchpads folder)."""
    return resolve_config(settings, storage_path, None)


@pytest.fixture()
def scratch_dir(config: ScratchpadsConfig) -> Path:
    folder = config.project_scratchpads_path
    folder.mkdir(parents=True)
    return folder


def make_files(folder: Path, *names: str) -> list[Path]:
    """Create empty files named ``names`` inside ``folder``."""
    folder.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in names:
        path = folder / name
        path.write_text("", encoding="utf-8")
        paths.append(path)
    return paths
