"""Simple logging helpers for the scratchpads CLI."""

import click


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


_verbose = False


def set_verbose(enabled: bool) -> None:
    """Enable or disable debug output for the current process."""
    global _verbose  # noqa: PLW0603
    _verbose = enabled


def print_header(msg: str) -> None:
    """Print a header message."""
    click.echo(f"{Colors.HEADER}{Colors.BOLD}{msg}{Colors.RESET}")


def print_info(msg: str) -> None:
    """Print an info message."""
    click.echo(f"{Colors.CYAN}{msg}{Colors.RESET}")


def print_success(msg: str) -> None:
    """Print a success message."""
    click.echo(f"{Colors.GREEN}✓ {msg}{Colors.RESET}")


def print_warning(msg: str) -> None:
    """Print a warning message."""
    click.echo(f"{Colors.YELLOW}⚠️  {msg}{Colors.RESET}")


def print_error(msg: str) -> None:
    """Print an error message."""
    click.echo(f"{Colors.RED}❌ {msg}{Colors.RESET}", err=True)


def print_debug(msg: str) -> None:
    """Print a dimmed debug message when verbose output is enabled."""
    if _verbose:
        click.echo(f"{Colors.DIM}{msg}{Colors.RESET}", err=True)
