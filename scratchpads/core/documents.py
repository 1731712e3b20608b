"""Open-document registries over whatever the editor host exposes.

Hosts differ in how much they reveal about open documents:

- ``ListOpenDocuments``: the host can enumerate open documents and close
  any of them directly.
- ``CycleAndProbe``: the host only knows the active document and offers
  "activate next" / "close active". The registry walks the ring of open
  documents, pausing after every step because the active pointer updates
  asynchronously.

``select_registry()`` picks the variant from the host's capabilities so
callers never need to know which one is in use.
"""

from __future__ import annotations

import os
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from scratchpads.helpers.helpers_logging import print_debug, print_warning

# Upper bound on advances in one cycle; a well-behaved ring returns to the
# anchor long before this.
MAX_CYCLE_STEPS = 500


@dataclass(frozen=True)
class DocumentHandle:
    """An open document as reported by the host.

    Attributes:
        id: Host identifier; two handles with the same id are the same tab.
        path: File backing the document.
    """

    id: str
    path: Path


DocumentPredicate = Callable[[DocumentHandle], bool]


def same_path(left: Path, right: Path) -> bool:
    """Compare two paths after making them absolute and case-normalized."""
    return os.path.normcase(os.path.abspath(left)) == os.path.normcase(os.path.abspath(right))


# ---------------------------------------------------------------------------
# Host capabilities
# ---------------------------------------------------------------------------


class EditorHost(Protocol):
    """What every host must provide."""

    def open_document(self, path: Path) -> None: ...

    def save_document(self, handle: DocumentHandle) -> None: ...

    def read_clipboard(self) -> str: ...

    def format_document(self, path: Path) -> None: ...

    def reveal_folder(self, path: Path) -> None: ...


@runtime_checkable
class ListingHost(Protocol):
    """Host that can enumerate and close open documents directly."""

    def list_open_documents(self) -> list[DocumentHandle]: ...

    def close_document(self, handle: DocumentHandle) -> None: ...


@runtime_checkable
class CyclingHost(Protocol):
    """Host that only exposes the active document and tab commands."""

    def active_document(self) -> DocumentHandle | None: ...

    def next_document(self) -> None: ...

    def close_active_document(self) -> None: ...


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------


class DocumentRegistry(ABC):
    """Find, save and close open documents."""

    @abstractmethod
    def find(self, path: Path) -> DocumentHandle | None:
        """Return an open document backed by ``path``, if one is visible."""

    @abstractmethod
    def close_matching(self, predicate: DocumentPredicate) -> int:
        """Close every open document matching ``predicate``.

        Never raises: host failures end the operation early with a warning.

        Returns:
            Number of documents closed.
        """

    def active(self) -> DocumentHandle | None:
        """Return the active document when the host knows it."""
        return None

    @abstractmethod
    def save(self, handle: DocumentHandle) -> None:
        """Save the document behind ``handle``."""


class ListOpenDocuments(DocumentRegistry):
    """Registry for hosts that list open documents."""

    def __init__(self, host: ListingHost, save: Callable[[DocumentHandle], None]) -> None:
        self._host = host
        self._save = save

    def find(self, path: Path) -> DocumentHandle | None:
        for handle in self._host.list_open_documents():
            if same_path(handle.path, path):
                return handle
        return None

    def active(self) -> DocumentHandle | None:
        if isinstance(self._host, CyclingHost):
            return self._host.active_document()
        return None

    def close_matching(self, predicate: DocumentPredicate) -> int:
        closed = 0
        try:
            handles = [handle for handle in self._host.list_open_documents() if predicate(handle)]
            for handle in handles:
                print_debug(f"Closing {handle.path}")
                self._host.close_document(handle)
                closed += 1
        except Exception as exc:  # host failure ends the pass, never fatal
            print_warning(f"Stopped closing editors: {exc}")
        return closed

    def save(self, handle: DocumentHandle) -> None:
        self._save(handle)


class CycleAndProbe(DocumentRegistry):
    """Registry for hosts that only expose the active document.

    Closing works in two phases:

    1. While the active document matches, close it. The first active
       document that does not match becomes the anchor.
    2. Advance through the ring, closing every matching document, until an
       advance lands on the anchor again.

    After a close the host activates some neighbour; that document is
    inspected before advancing again so it is never skipped.
    """

    def __init__(
        self,
        host: CyclingHost,
        save: Callable[[DocumentHandle], None],
        settle_delay: float,
        max_steps: int = MAX_CYCLE_STEPS,
    ) -> None:
        self._host = host
        self._save = save
        self._settle_delay = settle_delay
        self._max_steps = max_steps

    def _settle(self) -> None:
        if self._settle_delay > 0:
            time.sleep(self._settle_delay)

    def _close_active(self, handle: DocumentHandle) -> None:
        print_debug(f"Closing {handle.path}")
        self._host.close_active_document()
        self._settle()

    def _advance(self) -> None:
        self._host.next_document()
        self._settle()

    def active(self) -> DocumentHandle | None:
        return self._host.active_document()

    def find(self, path: Path) -> DocumentHandle | None:
        # Only the active document is observable without cycling
        handle = self._host.active_document()
        if handle is not None and same_path(handle.path, path):
            return handle
        return None

    def close_matching(self, predicate: DocumentPredicate) -> int:
        closed = 0
        try:
            active = self._host.active_document()
            while active is not None and predicate(active):
                self._close_active(active)
                closed += 1
                active = self._host.active_document()

            if active is None:
                print_debug("No open tabs")
                return closed

            anchor = active
            print_debug(f"Anchor editor: {anchor.path}")
            self._advance()
            for _ in range(self._max_steps):
                current = self._host.active_document()
                if current is None:
                    print_debug("No more open tabs")
                    return closed
                if predicate(current):
                    self._close_active(current)
                    closed += 1
                    continue
                if current.id == anchor.id:
                    print_debug("Back to anchor tab. Stopping operation...")
                    return closed
                self._advance()

            print_warning(
                f"Stopped closing editors after {self._max_steps} steps "
                + "without returning to the starting tab"
            )
        except Exception as exc:  # host failure ends the cycle, never fatal
            print_warning(f"Stopped closing editors: {exc}")
        return closed

    def save(self, handle: DocumentHandle) -> None:
        self._save(handle)


def select_registry(host: EditorHost, settle_delay: float) -> DocumentRegistry:
    """Pick the registry variant supported by ``host``.

    Hosts that can list documents get ``ListOpenDocuments``; hosts that only
    expose the active document get ``CycleAndProbe``.

    Raises:
        TypeError: If the host supports neither.
    """
    if isinstance(host, ListingHost):
        return ListOpenDocuments(host, host.save_document)
    if isinstance(host, CyclingHost):
        return CycleAndProbe(host, host.save_document, settle_delay)
    raise TypeError(f"{type(host).__name__} exposes no way to find open documents")
