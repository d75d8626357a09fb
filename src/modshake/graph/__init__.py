"""Module graph construction."""

from .module_info import ModuleInfo, ModuleGraph
from .resolver import ModuleResolver, is_relative, normalize_module_id
from .extractor import DeclarationExtractor, UsageCollector, ModuleExtractor
from .graph_builder import GraphBuilder, GraphStatistics, build_graph
from .graph_cache import GraphCache

__all__ = [
    "ModuleInfo",
    "ModuleGraph",
    "ModuleResolver",
    "is_relative",
    "normalize_module_id",
    "DeclarationExtractor",
    "UsageCollector",
    "ModuleExtractor",
    "GraphBuilder",
    "GraphStatistics",
    "build_graph",
    "GraphCache",
]
