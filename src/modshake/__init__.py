"""modshake - module graph building and symbol-level tree shaking."""

from .graph import GraphBuilder, GraphCache, ModuleGraph, ModuleInfo, build_graph
from .analyzers import TreeShaker, UsageMode, tree_shake
from .utils.errors import ConfigError, ModshakeError, ModuleLoadError, ParseError

__version__ = "0.1.0"

__all__ = [
    "GraphBuilder",
    "GraphCache",
    "ModuleGraph",
    "ModuleInfo",
    "build_graph",
    "TreeShaker",
    "UsageMode",
    "tree_shake",
    "ModshakeError",
    "ConfigError",
    "ModuleLoadError",
    "ParseError",
]
