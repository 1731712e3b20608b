"""Click command definitions for the scratchpads CLI.

Each command builds the ``ScratchpadManager`` lazily from the root context
(``CliState``) and returns an exit code. Errors from the core are turned
into a single message plus exit code 1 by ``_guarded``; a dismissed prompt
is not an error and exits 0.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click

from scratchpads.cli.completions import (
    complete_custom_filetype_exts,
    complete_filetype_exts,
    complete_scratchpad_names,
    complete_setting_keys,
)
from scratchpads.cli.prompts import ClickPrompter
from scratchpads.cli.terminal_host import TerminalEditorHost
from scratchpads.core.config import (
    ConfigTarget,
    SettingsStore,
    default_storage_path,
    find_workspace_root,
    load_settings,
    parse_setting_value,
    resolve_config,
)
from scratchpads.core.consts import CONFIG_DEFAULTS
from scratchpads.core.errors import ConfigurationError, ScratchpadFileError, ValidationError
from scratchpads.core.manager import ScratchpadManager
from scratchpads.core.store import SORT_BY_TYPE, SORT_CHOICES, format_size
from scratchpads.helpers.helpers_logging import (
    Colors,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)

# ============================================================================
# Shared state
# ============================================================================


@dataclass
class CliState:
    """Per-invocation state stored in ``ctx.obj`` by the root group."""

    workspace_option: Path | None = None
    _settings: SettingsStore | None = field(default=None, repr=False)
    _manager: ScratchpadManager | None = field(default=None, repr=False)

    def workspace_root(self) -> Path | None:
        """Detected workspace; an explicit ``--workspace`` always counts."""
        if self.workspace_option is None:
            return find_workspace_root()
        return find_workspace_root(self.workspace_option) or self.workspace_option.resolve()

    def settings(self) -> SettingsStore:
        if self._settings is None:
            self._settings = load_settings(default_storage_path(), self.workspace_root())
            self._settings.migrate_legacy()
        return self._settings

    def manager(self) -> ScratchpadManager:
        if self._manager is None:
            settings = self.settings()
            config = resolve_config(
                settings, default_storage_path(), self.workspace_root()
            )
            self._manager = ScratchpadManager(
                config, settings, ClickPrompter(), TerminalEditorHost(config)
            )
        return self._manager

    def settings_file_hint(self) -> str:
        """Path shown when a setting needs fixing."""
        try:
            return str(self.settings().global_file)
        except ConfigurationError:
            return str(default_storage_path())


def _state(ctx: click.Context) -> CliState:
    state = ctx.find_object(CliState)
    if state is None:
        state = ctx.ensure_object(CliState)
    return state


def _guarded(func: Callable[..., int | None]) -> Callable[..., int]:
    """Map core errors to a printed message and exit code 1."""

    @functools.wraps(func)
    def wrapper(ctx: click.Context, *args: Any, **kwargs: Any) -> int:
        try:
            result = func(ctx, *args, **kwargs)
        except ValidationError as exc:
            print_warning(str(exc))
            return 1
        except ConfigurationError as exc:
            print_error(str(exc))
            settings_file = _state(ctx).settings_file_hint()
            print_info(f"Fix it with 'scratch config set' or by editing {settings_file}")
            return 1
        except ScratchpadFileError as exc:
            print_error(str(exc))
            return 1
        except OSError as exc:
            # settings and Recent writes made directly by a command
            print_error(f"File operation failed: {exc}")
            return 1
        return 0 if result is None else int(result)

    return wrapper


# ============================================================================
# Scratchpad commands
# ============================================================================


@click.command(name="new", help="Create a new scratchpad")
@click.option("--type", "-t", "ext", shell_complete=complete_filetype_exts,
              help="Filetype extension, e.g. py (prompts when omitted)")
@click.option("--name", "-n", help="Base filename (defaults to the file prefix)")
@click.option("--no-open", is_flag=True, help="Create the file without opening it")
@click.pass_context
@_guarded
def new_cmd(ctx: click.Context, ext: str | None, name: str | None, no_open: bool) -> int:
    manager = _state(ctx).manager()
    filetype = None
    if ext:
        filetype = manager.catalog.find(ext)
        if filetype is None:
            raise ValidationError(
                f"Unknown filetype '{ext}'. Add it with 'scratch add-filetype --ext {ext}'"
            )
        manager.catalog.remember(filetype)
    manager.create_scratchpad(filetype, open_after=not no_open, name=name)
    return 0


@click.command(name="new-default", help="Create a scratchpad of the default filetype")
@click.option("--no-open", is_flag=True, help="Create the file without opening it")
@click.pass_context
@_guarded
def new_default_cmd(ctx: click.Context, no_open: bool) -> int:
    _state(ctx).manager().create_scratchpad_default(open_after=not no_open)
    return 0


@click.command(name="open", help="Open a scratchpad")
@click.argument("name", required=False, default=None,
                shell_complete=complete_scratchpad_names)
@click.pass_context
@_guarded
def open_cmd(ctx: click.Context, name: str | None) -> int:
    _state(ctx).manager().open_scratchpad(name)
    return 0


@click.command(name="open-latest", help="Open the most recently modified scratchpad")
@click.pass_context
@_guarded
def open_latest_cmd(ctx: click.Context) -> int:
    _state(ctx).manager().open_latest_scratchpad()
    return 0


@click.command(name="rename", help="Rename a scratchpad")
@click.argument("name", required=False, default=None,
                shell_complete=complete_scratchpad_names)
@click.argument("new_name", required=False, default=None)
@click.pass_context
@_guarded
def rename_cmd(ctx: click.Context, name: str | None, new_name: str | None) -> int:
    _state(ctx).manager().rename_scratchpad(name, new_name)
    return 0


@click.command(name="remove", help="Remove a scratchpad")
@click.argument("name", required=False, default=None,
                shell_complete=complete_scratchpad_names)
@click.pass_context
@_guarded
def remove_cmd(ctx: click.Context, name: str | None) -> int:
    _state(ctx).manager().remove_scratchpad(name)
    return 0


@click.command(name="remove-all", help="Remove every scratchpad")
@click.option("--yes", "-y", "assume_yes", is_flag=True,
              help="Skip the confirmation prompt")
@click.pass_context
@_guarded
def remove_all_cmd(ctx: click.Context, assume_yes: bool) -> int:
    _state(ctx).manager().remove_all_scratchpads(assume_yes=assume_yes)
    return 0


@click.command(name="open-folder", help="Reveal the scratchpads folder")
@click.pass_context
@_guarded
def open_folder_cmd(ctx: click.Context) -> int:
    _state(ctx).manager().open_folder()
    return 0


@click.command(name="path", help="Print the scratchpads folder")
@click.pass_context
@_guarded
def path_cmd(ctx: click.Context) -> int:
    click.echo(str(_state(ctx).manager().config.project_scratchpads_path))
    return 0


@click.command(name="list", help="List scratchpads")
@click.option("--sort", "sort_by", type=click.Choice(SORT_CHOICES), default=SORT_BY_TYPE,
              show_default=True, help="Sort order")
@click.option("--reverse", is_flag=True, help="Reverse the sort order")
@click.pass_context
@_guarded
def list_cmd(ctx: click.Context, sort_by: str, reverse: bool) -> int:
    manager = _state(ctx).manager()
    files = manager.list_scratchpads(sort_by, ascending=not reverse)
    if not files:
        print_info("No scratchpads")
        return 0

    print_header(f"Scratchpads in {manager.config.project_scratchpads_path}")
    width = max(len(item.name) for item in files)
    for item in files:
        modified = item.modified_at.strftime("%Y-%m-%d %H:%M")
        click.echo(
            f"  {item.name:<{width}}  {format_size(item.size_bytes):>8}  "
            + f"{Colors.DIM}{modified}{Colors.RESET}"
        )
    return 0


# ============================================================================
# Filetype commands
# ============================================================================


@click.command(name="add-filetype",
               help="Add a custom filetype and create a scratchpad of it")
@click.option("--ext", help="Extension of the new filetype (prompts when omitted)")
@click.option("--name", help="Display name (defaults to the upper-cased extension)")
@click.option("--no-open", is_flag=True,
              help="Do not open the scratchpad created for the new filetype")
@click.pass_context
@_guarded
def add_filetype_cmd(
    ctx: click.Context,
    ext: str | None,
    name: str | None,
    no_open: bool,
) -> int:
    manager = _state(ctx).manager()
    if ext is None:
        manager.new_filetype(open_after=not no_open)
        return 0
    filetype = manager.catalog.register_custom_type(ext, name)
    print_success(f"Added filetype {filetype.label}")
    manager.create_scratchpad(filetype, open_after=not no_open)
    return 0


@click.command(name="remove-filetype", help="Remove a custom filetype")
@click.option("--ext", shell_complete=complete_custom_filetype_exts,
              help="Extension to remove (prompts when omitted)")
@click.pass_context
@_guarded
def remove_filetype_cmd(ctx: click.Context, ext: str | None) -> int:
    manager = _state(ctx).manager()
    if ext is None:
        manager.remove_filetype()
        return 0
    removed = manager.catalog.remove_custom(ext)
    print_success(f"Removed filetype {removed.label}")
    return 0


# ============================================================================
# Configuration commands
# ============================================================================


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, dict):
        items = ", ".join(f"{key}: {val}" for key, val in value.items())
        return "{" + items + "}"
    return "''" if value == "" else str(value)


@click.group(name="config", help="Show or change settings")
def config_group() -> None:
    pass


@config_group.command(name="list", help="Show every setting and where it comes from")
@click.pass_context
@_guarded
def config_list_cmd(ctx: click.Context) -> int:
    settings = _state(ctx).settings()
    print_header("Settings")
    for key in sorted(CONFIG_DEFAULTS):
        values = settings.inspect(key)
        if values.workspace is not None:
            source = "workspace"
        elif values.global_ is not None:
            source = "global"
        else:
            source = "default"
        click.echo(
            f"  {key} = {_format_value(values.effective())} "
            + f"{Colors.DIM}({source}){Colors.RESET}"
        )
    return 0


@config_group.command(name="get", help="Print the effective value of a setting")
@click.argument("key", shell_complete=complete_setting_keys)
@click.pass_context
@_guarded
def config_get_cmd(ctx: click.Context, key: str) -> int:
    click.echo(_format_value(_state(ctx).settings().get(key)))
    return 0


@config_group.command(name="set", help="Change a setting")
@click.argument("key", shell_complete=complete_setting_keys)
@click.argument("value")
@click.option("--workspace-level", is_flag=True,
              help="Write to the workspace settings instead of the global ones")
@click.pass_context
@_guarded
def config_set_cmd(ctx: click.Context, key: str, value: str, workspace_level: bool) -> int:
    target = ConfigTarget.WORKSPACE if workspace_level else ConfigTarget.GLOBAL
    parsed = parse_setting_value(key, value)
    _state(ctx).settings().set(key, parsed, target)
    print_success(f"{key} = {_format_value(parsed)} ({target.value})")
    return 0


@config_group.command(name="unset", help="Remove a setting so its fallback applies")
@click.argument("key", shell_complete=complete_setting_keys)
@click.option("--workspace-level", is_flag=True,
              help="Remove from the workspace settings instead of the global ones")
@click.pass_context
@_guarded
def config_unset_cmd(ctx: click.Context, key: str, workspace_level: bool) -> int:
    target = ConfigTarget.WORKSPACE if workspace_level else ConfigTarget.GLOBAL
    if _state(ctx).settings().unset(key, target):
        print_success(f"Removed {key} ({target.value})")
    else:
        print_info(f"{key} is not set ({target.value})")
    return 0


# ============================================================================
# Command registry
# ============================================================================

CLICK_COMMANDS: dict[str, click.Command] = {
    "new": new_cmd,
    "new-default": new_default_cmd,
    "open": open_cmd,
    "open-latest": open_latest_cmd,
    "rename": rename_cmd,
    "remove": remove_cmd,
    "remove-all": remove_all_cmd,
    "add-filetype": add_filetype_cmd,
    "remove-filetype": remove_filetype_cmd,
    "open-folder": open_folder_cmd,
    "list": list_cmd,
    "path": path_cmd,
    "config": config_group,
}
