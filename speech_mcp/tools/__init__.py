"""Tool catalog and call dispatch."""

from .dispatcher import Dispatcher, Err, Ok, ToolResult, to_content, validate_arguments
from .registry import TOOLS, ToolDescriptor, get_tool

__all__ = [
    "Dispatcher",
    "Err",
    "Ok",
    "TOOLS",
    "ToolDescriptor",
    "ToolResult",
    "get_tool",
    "to_content",
    "validate_arguments",
]
