"""Shell completion callbacks for the scratchpads CLI.

Each function follows the Click shell_complete callback signature:
    (ctx: click.Context, param: click.Parameter, incomplete: str) -> list[CompletionItem]

Completion must never fail loudly, so every lookup goes through
``_safe_call`` and degrades to no suggestions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from click.shell_completion import CompletionItem

if TYPE_CHECKING:
    import click

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _filter(items: list[str], incomplete: str) -> list[CompletionItem]:
    """Filter a list of strings by prefix and wrap as CompletionItem."""
    normalized_incomplete = incomplete.casefold()
    return [
        CompletionItem(s)
        for s in items
        if s.casefold().startswith(normalized_incomplete)
    ]


def _safe_call(
    func: Callable[..., Iterable[str] | str | None],
    *args: str,
) -> list[str]:
    """Call a lookup function, returning [] on any error."""
    try:
        result = func(*args)
        if result is None:
            return []
        if isinstance(result, str):
            return [result]
        return list(result)
    except Exception:
        return []


def _workspace_param(ctx: click.Context) -> str:
    """Read ``--workspace`` from the root context, '' if missing."""
    root = ctx.find_root()
    value = root.params.get("workspace")
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def list_scratchpad_names(workspace: str = "") -> list[str]:
    """Names of the scratchpads in the current folder."""
    from scratchpads.core.config import (
        default_storage_path,
        find_workspace_root,
        load_settings,
        resolve_config,
    )
    from scratchpads.core.store import ScratchpadStore

    storage = default_storage_path()
    root = find_workspace_root(Path(workspace) if workspace else None)
    config = resolve_config(load_settings(storage, root), storage, root)
    return ScratchpadStore(config).list_names()


def list_filetype_exts() -> list[str]:
    """Every known extension without its dot (built-ins only)."""
    from scratchpads.core.filetypes import load_builtins, load_language_table

    primary, secondary = load_builtins(load_language_table())
    return [filetype.ext.lstrip(".") for filetype in (*primary, *secondary)]


# ---------------------------------------------------------------------------
# Callbacks
# ---------------------------------------------------------------------------


def complete_scratchpad_names(
    ctx: click.Context,
    param: click.Parameter,  # noqa: ARG001
    incomplete: str,
) -> list[CompletionItem]:
    """Complete existing scratchpad filenames."""
    return _filter(_safe_call(list_scratchpad_names, _workspace_param(ctx)), incomplete)


def complete_filetype_exts(
    ctx: click.Context,  # noqa: ARG001
    param: click.Parameter,  # noqa: ARG001
    incomplete: str,
) -> list[CompletionItem]:
    """Complete built-in filetype extensions (without the dot)."""
    return _filter(_safe_call(list_filetype_exts), incomplete.lstrip("."))


def complete_setting_keys(
    ctx: click.Context,  # noqa: ARG001
    param: click.Parameter,  # noqa: ARG001
    incomplete: str,
) -> list[CompletionItem]:
    """Complete configuration keys."""
    from scratchpads.core.consts import CONFIG_DEFAULTS

    return _filter(sorted(CONFIG_DEFAULTS), incomplete)


def list_custom_exts(workspace: str = "") -> list[str]:
    """Extensions of the user-added filetypes."""
    from scratchpads.core.config import (
        default_storage_path,
        find_workspace_root,
        load_settings,
        resolve_config,
    )
    from scratchpads.core.filetypes import load_builtins, load_language_table, load_recent

    storage = default_storage_path()
    root = find_workspace_root(Path(workspace) if workspace else None)
    config = resolve_config(load_settings(storage, root), storage, root)
    primary, secondary = load_builtins(load_language_table())
    builtin = {filetype.key for filetype in (*primary, *secondary)}
    return [
        filetype.ext.lstrip(".")
        for filetype in load_recent(config.recent_filetypes_path)
        if filetype.key not in builtin
    ]


def complete_custom_filetype_exts(
    ctx: click.Context,
    param: click.Parameter,  # noqa: ARG001
    incomplete: str,
) -> list[CompletionItem]:
    """Complete extensions of user-added filetypes."""
    return _filter(_safe_call(list_custom_exts, _workspace_param(ctx)), incomplete.lstrip("."))
