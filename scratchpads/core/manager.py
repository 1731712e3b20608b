"""High-level scratchpad commands.

``ScratchpadManager`` wires the filetype catalog, filename allocator, tab
coordinator and store together for each user command. Every command that
prompts returns None when the prompt is dismissed, before anything on disk
or in the editor has changed.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from scratchpads.core.allocator import FilenameAllocator, sanitize_name
from scratchpads.core.config import ConfigTarget, ScratchpadsConfig, SettingsStore, resolve_config
from scratchpads.core.consts import (
    CONFIG_DEFAULT_FILETYPE,
    CONFIG_PROMPT_FOR_REMOVAL,
    DEFAULT_FILE_PREFIX,
)
from scratchpads.core.documents import select_registry
from scratchpads.core.errors import ScratchpadFileError, ValidationError
from scratchpads.core.filetypes import Filetype, FiletypeCatalog, PickItem
from scratchpads.core.store import (
    SORT_BY_DATE,
    SORT_BY_TYPE,
    ScratchpadFile,
    ScratchpadStore,
    sort_files,
)
from scratchpads.core.tabs import TabCoordinator
from scratchpads.helpers.helpers_logging import print_debug, print_info, print_success, print_warning

if TYPE_CHECKING:
    from scratchpads.cli.prompts import Prompter
    from scratchpads.core.documents import EditorHost

OVERWRITE_CHOICE = "Overwrite"
CANCEL_CHOICE = "Cancel"
YES_CHOICE = "Yes"
ALWAYS_CHOICE = "Always"


@contextmanager
def _file_operation(action: str) -> Iterator[None]:
    """Re-raise filesystem failures as ScratchpadFileError with context."""
    try:
        yield
    except OSError as exc:
        raise ScratchpadFileError(f"Could not {action}: {exc}") from exc


class ScratchpadManager:
    """Entry point for every scratchpad command."""

    def __init__(
        self,
        config: ScratchpadsConfig,
        settings: SettingsStore,
        prompter: Prompter,
        host: EditorHost,
        table: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._settings = settings
        self._prompter = prompter
        self._host = host
        self._table = table
        self._build(config)

    def _build(self, config: ScratchpadsConfig) -> None:
        self.config = config
        self.store = ScratchpadStore(config)
        self.allocator = FilenameAllocator(self.store)
        self.catalog = FiletypeCatalog(config, self._prompter, self._table)
        self.tabs = TabCoordinator(config, select_registry(self._host, config.settle_delay))

    def reload_config(self) -> ScratchpadsConfig:
        """Recompute the configuration from the settings and rebuild components."""
        config = resolve_config(
            self._settings, self.config.storage_path, self.config.workspace_root
        )
        self._build(config)
        print_debug("Configuration reloaded")
        return config

    # -- Selection helpers ------------------------------------------------------

    def _pick_scratchpad(self, placeholder: str, empty_message: str) -> str | None:
        files = sort_files(self.store.list_files(), SORT_BY_DATE, ascending=False)
        if not files:
            print_info(empty_message)
            return None
        rows = [PickItem(label=item.name, value=item.name) for item in files]
        selection = self._prompter.pick(rows, placeholder)
        if selection is None:
            return None
        return str(selection.value)

    def _existing_path(self, name: str) -> Path:
        path = self.store.path_for(name)
        if not path.is_file():
            raise ValidationError(f"Scratchpad '{name}' does not exist")
        return path

    # -- Create -----------------------------------------------------------------

    def create_scratchpad(
        self,
        filetype: Filetype | None = None,
        open_after: bool = True,
        name: str | None = None,
    ) -> Path | None:
        """Create a new scratchpad and open it.

        Args:
            filetype: Type of the new file; the user picks one when None.
            open_after: Open the file in the editor once written.
            name: Base filename; defaults to the configured prefix, or a
                prompt when ``prompt_for_filename`` is set.

        Returns:
            Path of the new scratchpad, or None if cancelled.
        """
        if filetype is None:
            with _file_operation("save the recent filetypes"):
                filetype = self.catalog.select_filetype()
            if filetype is None:
                return None

        base = self.config.file_prefix or DEFAULT_FILE_PREFIX
        if name is None and self.config.prompt_for_filename:
            name = self._prompter.input_text("Enter filename (without extension)", value=base)
            if name is None:
                return None
        if name:
            base = sanitize_name(name) or base

        content = self._host.read_clipboard() if self.config.auto_paste else ""
        path = self.allocator.allocate(base, filetype)
        with _file_operation(f"create {path.name}"):
            self.store.write(path.name, content)

        if content and self.config.auto_format:
            self._host.format_document(path)

        print_success(f"Created {path.name}")
        if open_after:
            self._host.open_document(path)
        return path

    def create_scratchpad_default(self, open_after: bool = True) -> Path | None:
        """Create a scratchpad of the default filetype.

        Without a usable default the user picks one and it is saved as the
        global default before creating.
        """
        filetype = self.catalog.get_default()
        if filetype is None:
            if self.config.default_filetype:
                print_warning(
                    f"Default filetype '{self.config.default_filetype}' is unknown, "
                    + "select another one"
                )
            with _file_operation("save the default filetype"):
                filetype = self.catalog.select_filetype("Select default filetype")
                if filetype is None:
                    return None
                self._settings.set(
                    CONFIG_DEFAULT_FILETYPE, filetype.ext.lstrip("."), ConfigTarget.GLOBAL
                )
            self.reload_config()
        return self.create_scratchpad(filetype, open_after=open_after)

    # -- Open -------------------------------------------------------------------

    def open_scratchpad(self, name: str | None = None) -> Path | None:
        if name is None:
            name = self._pick_scratchpad("Select scratchpad to open", "No scratchpads to open")
            if name is None:
                return None
        path = self._existing_path(name)
        self._host.open_document(path)
        return path

    def open_latest_scratchpad(self) -> Path | None:
        latest = self.store.latest()
        if latest is None:
            print_info("No scratchpads to open")
            return None
        self._host.open_document(latest.path)
        return latest.path

    def open_folder(self) -> Path:
        """Reveal the scratchpads folder in the platform file browser."""
        with _file_operation("create the scratchpads folder"):
            folder = self.store.ensure_folder()
        self._host.reveal_folder(folder)
        return folder

    # -- Rename / remove --------------------------------------------------------

    def rename_scratchpad(
        self,
        name: str | None = None,
        new_name: str | None = None,
    ) -> Path | None:
        """Rename a scratchpad, keeping any open editor on it.

        The target is ``name``, else the active document when it is a
        scratchpad, else the user's pick. Unless ``rename_with_extension``
        is set, the user edits only the stem and the old extension is kept.

        Returns:
            The new path, or None if cancelled.
        """
        if name is None:
            active = self.tabs.active_scratchpad()
            if active is not None:
                name = active.path.name
            else:
                name = self._pick_scratchpad(
                    "Select scratchpad to rename", "No scratchpads to rename"
                )
                if name is None:
                    return None
        source = self._existing_path(name)

        keep_extension = not self.config.rename_with_extension
        if new_name is None:
            prefill = source.stem if keep_extension else source.name
            new_name = self._prompter.input_text("Enter new name", value=prefill)
            if not new_name:
                return None

        target_name = sanitize_name(new_name)
        if not target_name:
            raise ValidationError("A new name is required")
        if keep_extension:
            target_name += source.suffix
        if target_name == name:
            print_info("Name unchanged")
            return source

        target = self.store.path_for(target_name)
        if target.exists():
            answer = self._prompter.confirm(
                f'A file named "{target_name}" already exists. Overwrite?',
                OVERWRITE_CHOICE,
                CANCEL_CHOICE,
            )
            if answer != OVERWRITE_CHOICE:
                return None
            self.tabs.close_tabs_for_path(target)

        # Only a visible editor can be saved; every editor on the file is closed
        handle = self.tabs.find_open_editor_for(source)
        if handle is not None:
            self.tabs.save(handle)
        closed = self.tabs.close_tabs_for_path(source)

        with _file_operation(f"rename {name}"):
            renamed = self.store.rename(name, target_name, overwrite=True)

        if handle is not None or closed:
            self._host.open_document(renamed)
        print_success(f"Renamed {name} → {target_name}")
        return renamed

    def remove_scratchpad(self, name: str | None = None) -> Path | None:
        """Close the scratchpad's editors and delete it."""
        if name is None:
            name = self._pick_scratchpad(
                "Select scratchpad to remove", "No scratchpads to remove"
            )
            if name is None:
                return None
        path = self._existing_path(name)
        self.tabs.close_tabs_for_path(path)
        with _file_operation(f"remove {name}"):
            self.store.delete(name)
        print_success(f"Removed {name}")
        return path

    def remove_all_scratchpads(self, assume_yes: bool = False) -> int | None:
        """Close every scratchpad editor and delete every scratchpad.

        Answering "Always" turns the confirmation off for good.

        Returns:
            Number of files removed, or None if cancelled.
        """
        if self.config.prompt_for_removal and not assume_yes:
            answer = self._prompter.confirm(
                "Are you sure you want to remove all scratchpads?",
                YES_CHOICE,
                ALWAYS_CHOICE,
            )
            if answer not in (YES_CHOICE, ALWAYS_CHOICE):
                return None
            if answer == ALWAYS_CHOICE:
                with _file_operation("save settings"):
                    self._settings.set(
                        CONFIG_PROMPT_FOR_REMOVAL, False, ConfigTarget.GLOBAL
                    )
                self.reload_config()

        self.tabs.close_all_scratch_tabs()
        with _file_operation("remove scratchpads"):
            removed = self.store.delete_all()
        print_success(f"Removed {len(removed)} scratchpad(s)")
        return len(removed)

    # -- Filetypes --------------------------------------------------------------

    def new_filetype(self, open_after: bool = True) -> Path | None:
        """Add a custom filetype and create a scratchpad of it."""
        with _file_operation("save the recent filetypes"):
            filetype = self.catalog.add_custom_type()
        if filetype is None:
            return None
        print_success(f"Added filetype {filetype.label}")
        return self.create_scratchpad(filetype, open_after=open_after)

    def remove_filetype(self) -> Filetype | None:
        with _file_operation("save the recent filetypes"):
            removed = self.catalog.remove_custom_type()
        if removed is not None:
            print_success(f"Removed filetype {removed.label}")
        return removed

    # -- Listing ----------------------------------------------------------------

    def list_scratchpads(
        self,
        sort_by: str = SORT_BY_TYPE,
        ascending: bool = True,
    ) -> list[ScratchpadFile]:
        return sort_files(self.store.list_files(), sort_by, ascending)
