"""Reachability analysis over module graphs."""

from .tree_shaker import TreeShaker, ShakeResult, UsageMode, tree_shake, kept_key
from .dependency_analyzer import (
    DependencyAnalyzer,
    CircularImport,
    CircularImportResult,
    UnusedExportResult,
)

__all__ = [
    "TreeShaker",
    "ShakeResult",
    "UsageMode",
    "tree_shake",
    "kept_key",
    "DependencyAnalyzer",
    "CircularImport",
    "CircularImportResult",
    "UnusedExportResult",
]
