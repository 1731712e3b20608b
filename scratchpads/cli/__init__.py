"""
CLI module for scratchpads.

Provides the ``scratch`` command-line interface, including the main entry
point installed as a console script.
"""

from .commands import main

__all__ = ["main"]
