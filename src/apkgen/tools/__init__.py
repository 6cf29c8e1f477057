"""External tool runners."""

from .base import ToolResult, ToolRunner, command_line, run_tool
from .local import LocalToolRunner

__all__ = [
    "LocalToolRunner",
    "ToolResult",
    "ToolRunner",
    "command_line",
    "run_tool",
]
