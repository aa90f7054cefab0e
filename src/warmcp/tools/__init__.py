"""
MCP tool catalogue for Taskwarrior and Timewarrior.

Two families of tools built on one dispatch table. Each tool resolves its
arguments, builds an ordered command line and returns the external
program's output verbatim.
"""

from .dispatch import (
    Confirmation,
    DispatchError,
    Dispatcher,
    InvalidPayloadError,
    ToolArguments,
    ToolField,
    ToolSpec,
    UnknownToolError,
)
from .task_tools import (
    DEFAULT_LIST_FILTER,
    TASK_OVERRIDES,
    build_task_specs,
    task_family,
)
from .timew_tools import build_timew_specs, timew_family

__all__ = [
    "Confirmation",
    "DispatchError",
    "Dispatcher",
    "InvalidPayloadError",
    "ToolArguments",
    "ToolField",
    "ToolSpec",
    "UnknownToolError",
    "DEFAULT_LIST_FILTER",
    "TASK_OVERRIDES",
    "build_task_specs",
    "task_family",
    "build_timew_specs",
    "timew_family",
]
