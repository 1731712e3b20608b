"""
Scratchpads

Disposable, typed scratch files for a project: create them on demand,
keep them out of the project tree, and clean them up again.
"""

__version__ = "0.1.0"

from scratchpads.cli.commands import main
from scratchpads.core.manager import ScratchpadManager

__all__ = [
    "ScratchpadManager",
    "main",
]
