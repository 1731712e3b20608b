"""Core scratchpad logic: filetypes, filenames, tabs and files."""

from scratchpads.core.filetypes import Filetype, FiletypeCatalog
from scratchpads.core.manager import ScratchpadManager

__all__ = ["Filetype", "FiletypeCatalog", "ScratchpadManager"]
