#!/usr/bin/env python3
"""Scratchpads CLI - Main Entry Point.

Usage:
    scratch [--workspace PATH] [--verbose] <command> [options]

Commands:
    new               Create a new scratchpad (--type, --name, --no-open)
    new-default       Create a scratchpad of the default filetype
    open              Open a scratchpad
    open-latest       Open the most recently modified scratchpad
    rename            Rename a scratchpad
    remove            Remove a scratchpad
    remove-all        Remove every scratchpad
    add-filetype      Add a custom filetype
    remove-filetype   Remove a custom filetype
    open-folder       Reveal the scratchpads folder
    list              List scratchpads
    path              Print the scratchpads folder
    config            Show or change settings
    help              Show this help message
"""

from __future__ import annotations

import contextlib
import os
import sys
from pathlib import Path

import click

from scratchpads.cli.click_commands import CLICK_COMMANDS, CliState
from scratchpads.helpers.helpers_logging import set_verbose

_PROG_NAME = "scratch"
_COMPLETE_ENV_VAR = "_SCRATCH_COMPLETE"


def print_help(ctx: click.Context) -> None:
    """Print the top-level help text."""
    click.echo(ctx.find_root().get_help())


@click.group(invoke_without_command=True)
@click.option("--workspace", type=click.Path(file_okay=False, path_type=Path),
              default=None, help="Workspace directory (default: detected from cwd)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def _click_cli(ctx: click.Context, workspace: Path | None, verbose: bool) -> int:
    """Create, open, rename and clean up scratchpad files."""
    set_verbose(verbose)
    ctx.obj = CliState(workspace_option=workspace)
    if ctx.invoked_subcommand is not None:
        return 0

    print_help(ctx)
    return 0


def _register_commands() -> None:
    """Register all top-level commands in the click app."""
    for name, cmd_obj in CLICK_COMMANDS.items():
        _click_cli.add_command(cmd_obj, name=name)

    @click.command(name="help", help="Show help message")
    @click.pass_context
    def _help_cmd(ctx: click.Context) -> int:
        print_help(ctx)
        return 0

    _click_cli.add_command(_help_cmd)


_register_commands()


def main() -> int:
    """Main CLI entry point."""
    # Let Click handle shell completion protocol before anything else.
    # When _SCRATCH_COMPLETE is set, Click outputs completion data and exits.
    if os.environ.get(_COMPLETE_ENV_VAR):
        with contextlib.suppress(SystemExit):
            _click_cli.main(
                args=sys.argv[1:],
                prog_name=_PROG_NAME,
                standalone_mode=True,
            )
        return 0

    try:
        result = _click_cli.main(
            args=sys.argv[1:],
            prog_name=_PROG_NAME,
            standalone_mode=False,
        )
    except click.Abort:
        click.echo("\n⚠️  Cancelled by user")
        return 130
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
