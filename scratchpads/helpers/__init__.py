"""Helper utilities shared by the core and the CLI."""

from scratchpads.helpers.helpers_logging import (
    print_error,
    print_info,
    print_success,
    print_warning,
)
from scratchpads.helpers.yaml_loader import load_yaml_file, save_yaml_file

__all__ = [
    "load_yaml_file",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "save_yaml_file",
]
