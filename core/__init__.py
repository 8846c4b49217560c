"""Shared core utilities for command execution and configuration loading."""

from .command_runner import (
    CommandError,
    CommandResult,
    CommandRunner,
    RecordedCommand,
    RecordingCommandRunner,
    ScriptedResult,
    SubprocessCommandRunner,
    format_command,
)
from .config_loader import (
    ConfigLoader,
    FILE_LOADERS,
    find_config_file,
    load_config_file,
    merge_mappings,
    normalize_string_list,
    normalize_string_mapping,
)

__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "ScriptedResult",
    "SubprocessCommandRunner",
    "format_command",
    "ConfigLoader",
    "FILE_LOADERS",
    "find_config_file",
    "load_config_file",
    "merge_mappings",
    "normalize_string_list",
    "normalize_string_mapping",
]
