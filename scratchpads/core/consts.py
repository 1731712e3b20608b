"""Shared constants for scratchpads."""

APP_NAME = "scratchpads"

# Pause after closing or switching the active document in cycle mode (ms)
ACTIONS_TIMEOUT_MS = 200
DEFAULT_FILE_PREFIX = "scratch"
RECENT_FILETYPES_FILE = "recentFiletypes.json"
SCRATCHPADS_FOLDER_NAME = "scratchpads"
GLOBAL_SCRATCHPADS_FOLDER_NAME = "global"

SETTINGS_FILE = "config.yaml"
WORKSPACE_SETTINGS_FILE = ".scratchpads.yaml"
STORAGE_ENV_VAR = "SCRATCHPADS_HOME"

WORKSPACE_MARKERS = (
    WORKSPACE_SETTINGS_FILE,
    ".git",
    ".hg",
    ".svn",
    "pyproject.toml",
    "package.json",
    "setup.py",
)

# Configuration keys
CONFIG_AUTO_FORMAT = "auto_format"
CONFIG_AUTO_PASTE = "auto_paste"
CONFIG_DEFAULT_FILETYPE = "default_filetype"
CONFIG_EDITOR = "editor"
CONFIG_FILE_PREFIX = "file_prefix"
CONFIG_FORMATTERS = "formatters"
CONFIG_PROMPT_FOR_FILENAME = "prompt_for_filename"
CONFIG_PROMPT_FOR_REMOVAL = "prompt_for_removal"
CONFIG_RENAME_WITH_EXTENSION = "rename_with_extension"
CONFIG_SCRATCHPADS_FOLDER = "scratchpads_folder"
CONFIG_SETTLE_DELAY_MS = "settle_delay_ms"
CONFIG_USE_GLOBAL_FOLDER = "use_global_folder"
CONFIG_USE_SUBFOLDERS = "use_subfolders"  # legacy, inverse of use_global_folder

CONFIG_DEFAULTS: dict[str, object] = {
    CONFIG_AUTO_FORMAT: False,
    CONFIG_AUTO_PASTE: False,
    CONFIG_DEFAULT_FILETYPE: "",
    CONFIG_EDITOR: "",
    CONFIG_FILE_PREFIX: DEFAULT_FILE_PREFIX,
    CONFIG_FORMATTERS: {},
    CONFIG_PROMPT_FOR_FILENAME: False,
    CONFIG_PROMPT_FOR_REMOVAL: True,
    CONFIG_RENAME_WITH_EXTENSION: False,
    CONFIG_SCRATCHPADS_FOLDER: "",
    CONFIG_SETTLE_DELAY_MS: ACTIONS_TIMEOUT_MS,
    CONFIG_USE_GLOBAL_FOLDER: False,
}
