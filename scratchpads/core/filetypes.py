"""Filetype catalog: built-in language table plus the Recent/custom list.

The built-in catalog is derived once from ``data/languages.yaml``:

    Python: [.py, .pyi, .pyw]

gives the primary filetype ``Python (.py)`` and the secondary filetypes
``PYI (.pyi)`` and ``PYW (.pyw)``.

The Recent list is ordered most-recent-first and persisted as JSON:

    [{"name": "Python", "ext": ".py"}, {"name": "Notes", "ext": ".notes"}]

It doubles as the store for custom filetypes added by the user.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, cast

import yaml

from scratchpads.core.allocator import sanitize_name
from scratchpads.core.errors import FiletypeExistsError, ValidationError
from scratchpads.core.store import ensure_folder_creatable
from scratchpads.helpers.helpers_logging import print_debug, print_info, print_warning

if TYPE_CHECKING:
    from scratchpads.cli.prompts import Prompter
    from scratchpads.core.config import ScratchpadsConfig

LANGUAGES_FILE = Path(__file__).parent.parent / "data" / "languages.yaml"

RECENT_SECTION = "Recent"
ALL_TYPES_SECTION = "File types"

LanguageTable = Mapping[str, tuple[str, ...]]


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


def normalize_extension(ext: str) -> str:
    """Strip surrounding whitespace and leading dots, then lower-case.

    Used for comparison only: ``.PY``, ``py`` and ``.py`` are the same key.
    """
    return ext.strip().lstrip(".").lower()


@dataclass(frozen=True)
class Filetype:
    """A selectable (display name, extension) pair.

    Attributes:
        name: Display label, e.g. ``Python``.
        ext: Extension including the leading dot, e.g. ``.py``.
    """

    name: str
    ext: str

    @property
    def key(self) -> str:
        """Normalized extension used as identity."""
        return normalize_extension(self.ext)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.ext})"

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "ext": self.ext}


@dataclass(frozen=True)
class PickItem:
    """One row of a selection list: a section separator or a selectable value."""

    label: str
    value: Any = None
    separator: bool = False


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def load_language_table(path: Path = LANGUAGES_FILE) -> LanguageTable:
    """Load the language → extensions table once per process.

    Returns:
        Read-only mapping of language name to its extensions.
    """
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    table: dict[str, tuple[str, ...]] = {}
    for name, extensions in cast(dict[Any, Any], raw).items():
        if not isinstance(extensions, list):
            continue
        table[str(name)] = tuple(str(ext) for ext in cast(list[Any], extensions))
    return MappingProxyType(table)


def _sort_filetypes(filetypes: Iterable[Filetype]) -> list[Filetype]:
    return sorted(filetypes, key=lambda filetype: filetype.name.casefold())


def load_builtins(
    table: Mapping[str, Sequence[str]],
) -> tuple[tuple[Filetype, ...], tuple[Filetype, ...]]:
    """Split the language table into primary and secondary filetypes.

    The first extension of every language becomes its primary filetype.
    Further extensions become secondary filetypes named after the extension
    (``.pyi`` → ``PYI``). Compound extensions such as ``.rest.txt`` are
    dropped, as are extensions claimed by a primary entry or by an earlier
    secondary entry.

    The table is never modified, so repeated calls give identical results.

    Returns:
        (primary, secondary), each sorted case-insensitively by name.
    """
    primary: list[Filetype] = []
    candidates: list[Filetype] = []

    for name, extensions in table.items():
        if not extensions:
            continue
        first, *rest = extensions
        primary.append(Filetype(name=name, ext=first))
        for ext in rest:
            if ext.rfind(".") > 0:
                continue
            candidates.append(Filetype(name=ext[1:].upper(), ext=ext))

    claimed = {filetype.key for filetype in primary}
    secondary: list[Filetype] = []
    for filetype in candidates:
        if filetype.key in claimed:
            continue
        claimed.add(filetype.key)
        secondary.append(filetype)

    return tuple(_sort_filetypes(primary)), tuple(_sort_filetypes(secondary))


# ---------------------------------------------------------------------------
# Recent list (pure operations + persistence)
# ---------------------------------------------------------------------------


def promote(recent: Sequence[Filetype], filetype: Filetype) -> tuple[Filetype, ...]:
    """Return a new Recent list with ``filetype`` at the head.

    Any entry with the same normalized extension is removed first, so the
    list never holds duplicates and its length grows only for new types.
    """
    rest = tuple(item for item in recent if item.key != filetype.key)
    return (filetype, *rest)


def remove_extension(recent: Sequence[Filetype], ext: str) -> tuple[Filetype, ...]:
    """Return a new Recent list without the entry for ``ext``."""
    key = normalize_extension(ext)
    return tuple(item for item in recent if item.key != key)


def load_recent(path: Path) -> tuple[Filetype, ...]:
    """Load the Recent list, treating a missing or malformed file as empty.

    Individual entries that are not ``{"name": str, "ext": str}`` objects
    are skipped; duplicate extensions keep their first (most recent) entry.
    """
    if not path.exists():
        return ()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        print_warning(f"Ignoring unreadable recent filetypes file {path}: {exc}")
        return ()
    if not isinstance(data, list):
        print_warning(f"Ignoring recent filetypes file {path}: expected a JSON array")
        return ()

    recent: list[Filetype] = []
    seen: set[str] = set()
    for entry in cast(list[Any], data):
        if not isinstance(entry, dict):
            continue
        item = cast(dict[str, Any], entry)
        name, ext = item.get("name"), item.get("ext")
        if not isinstance(name, str) or not isinstance(ext, str) or not ext:
            continue
        filetype = Filetype(name=name, ext=ext)
        if filetype.key in seen:
            continue
        seen.add(filetype.key)
        recent.append(filetype)
    return tuple(recent)


def save_recent(path: Path, recent: Sequence[Filetype]) -> None:
    """Persist the Recent list as a JSON array, most recent first."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [filetype.to_dict() for filetype in recent]
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class FiletypeCatalog:
    """Ordered, selectable filetypes with a persisted MRU/custom sublist."""

    def __init__(
        self,
        config: ScratchpadsConfig,
        prompter: Prompter,
        table: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._config = config
        self._prompter = prompter
        self.primary, self.secondary = load_builtins(
            table if table is not None else load_language_table()
        )
        self._builtin_keys = frozenset(
            filetype.key for filetype in (*self.primary, *self.secondary)
        )
        self._recent = load_recent(config.recent_filetypes_path)
        self._items: tuple[PickItem, ...] = ()
        self._dirty = True

    @property
    def recent(self) -> tuple[Filetype, ...]:
        return self._recent

    # -- Lookup -------------------------------------------------------------

    def is_builtin(self, ext: str) -> bool:
        """True if ``ext`` belongs to the primary or secondary built-ins."""
        return normalize_extension(ext) in self._builtin_keys

    def find(self, ext: str) -> Filetype | None:
        """Return the filetype for ``ext``, preferring the Recent entry."""
        key = normalize_extension(ext)
        if not key:
            return None
        for filetype in (*self._recent, *self.primary, *self.secondary):
            if filetype.key == key:
                return filetype
        return None

    def get_default(self) -> Filetype | None:
        """Resolve the configured default extension against the catalog."""
        if not self._config.default_filetype:
            return None
        return self.find(self._config.default_filetype)

    def custom_types(self) -> tuple[Filetype, ...]:
        """Recent entries that are not built-in, i.e. user-added types."""
        return tuple(
            filetype for filetype in self._recent if filetype.key not in self._builtin_keys
        )

    # -- Selection list -------------------------------------------------------

    def items(self) -> tuple[PickItem, ...]:
        """Return the sectioned selection list, rebuilding it only when dirty."""
        if self._dirty or not self._items:
            recent_keys = {filetype.key for filetype in self._recent}
            remaining = [
                filetype
                for filetype in (*self.primary, *self.secondary)
                if filetype.key not in recent_keys
            ]
            items: list[PickItem] = []
            items.extend(self._section(RECENT_SECTION, self._recent))
            items.extend(self._section(ALL_TYPES_SECTION, remaining))
            self._items = tuple(items)
            self._dirty = False
            print_debug(f"Rebuilt filetype list ({len(self._items)} rows)")
        return self._items

    @staticmethod
    def _section(title: str, filetypes: Sequence[Filetype]) -> list[PickItem]:
        rows = [PickItem(label=title, separator=True)]
        rows.extend(PickItem(label=filetype.label, value=filetype) for filetype in filetypes)
        return rows

    def select_filetype(self, placeholder: str | None = None) -> Filetype | None:
        """Ask the user for a filetype and promote the choice to the head.

        Returns:
            The chosen filetype, or None if the prompt was dismissed.
        """
        selection = self._prompter.pick(self.items(), placeholder or "Select filetype")
        if selection is None or not isinstance(selection.value, Filetype):
            return None
        self.remember(selection.value)
        return selection.value

    # -- Mutations ------------------------------------------------------------

    def remember(self, filetype: Filetype) -> None:
        """Promote ``filetype`` to the head of the Recent list and persist it."""
        if self._recent and self._recent[0].key == filetype.key:
            return
        self._persist(promote(self._recent, filetype))

    def _persist(self, recent: tuple[Filetype, ...]) -> None:
        """Save ``recent`` and adopt it once it is on disk.

        Raises:
            ConfigurationError: If the scratchpads root cannot be created.
        """
        path = self._config.recent_filetypes_path
        ensure_folder_creatable(path.parent, self._config)
        save_recent(path, recent)
        self._recent = recent
        self._dirty = True

    def register_custom_type(self, ext: str, name: str | None = None) -> Filetype:
        """Add a new filetype and make it the most recent one.

        Raises:
            ValidationError: If the extension is empty.
            FiletypeExistsError: If the extension is already known.
        """
        key = normalize_extension(sanitize_name(ext))
        if not key:
            raise ValidationError("An extension is required")
        existing = self.find(key)
        if existing is not None:
            raise FiletypeExistsError(existing)

        display_name = sanitize_name(name or "", allow_spaces=True) or key.upper()
        filetype = Filetype(name=display_name, ext=f".{key}")
        self.remember(filetype)
        return filetype

    def add_custom_type(self) -> Filetype | None:
        """Prompt for a new extension and display name.

        Returns:
            The new filetype, or None if a prompt was dismissed.

        Raises:
            FiletypeExistsError: If the extension is already known.
        """
        ext = self._prompter.input_text("Enter file extension")
        key = normalize_extension(sanitize_name(ext or ""))
        if not key:
            print_info("Canceled...")
            return None

        existing = self.find(key)
        if existing is not None:
            raise FiletypeExistsError(existing)

        default_name = key.upper()
        name = self._prompter.input_text(
            f"Enter filetype's name (Hit enter for '{default_name}')",
            allow_spaces=True,
        )
        if name is None:
            return None
        return self.register_custom_type(key, name or default_name)

    def remove_custom(self, ext: str) -> Filetype:
        """Remove a custom filetype from the Recent list.

        Raises:
            ValidationError: If ``ext`` is not a custom filetype.
        """
        key = normalize_extension(ext)
        match = next((item for item in self.custom_types() if item.key == key), None)
        if match is None:
            raise ValidationError(f"No custom filetype with extension '{ext}'")
        self._persist(remove_extension(self._recent, match.ext))
        return match

    def remove_custom_type(self) -> Filetype | None:
        """Let the user pick a custom filetype and remove it.

        Returns:
            The removed filetype, or None if nothing was removed.
        """
        custom = self.custom_types()
        if not custom:
            print_info("No custom filetypes to remove")
            return None

        rows = [PickItem(label=filetype.label, value=filetype) for filetype in custom]
        selection = self._prompter.pick(rows, "Select a custom filetype to remove")
        if selection is None or not isinstance(selection.value, Filetype):
            return None
        return self.remove_custom(selection.value.ext)
