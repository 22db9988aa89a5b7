from .builtin import register_builtin_tools
from .dispatcher import ToolDispatcher
from .registry import ToolRegistry, ToolSpec

__all__ = ["ToolDispatcher", "ToolRegistry", "ToolSpec", "register_builtin_tools"]
