"""
Tool registry and executors for Oddsy.
"""

from .registry import (
    ApiKeyConfig,
    ToolRegistry,
    ToolResult,
    ToolSpec,
    build_registry,
)
from .recommendation import TERMINAL_TOOL_NAME

__all__ = [
    "ApiKeyConfig",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "build_registry",
    "TERMINAL_TOOL_NAME",
]
