"""Dependency analysis for circular imports and unused exports."""

from dataclasses import dataclass, field
from typing import Optional

import networkx as nx

from .tree_shaker import ShakeResult, TreeShaker, UsageMode, split_kept_key
from ..graph.module_info import ModuleGraph


@dataclass
class CircularImport:
    """Represents a circular import chain."""
    cycle: list[str]  # Module ids in import order
    severity: str = "medium"  # low, medium, high

    @property
    def cycle_length(self) -> int:
        return len(self.cycle)

    def format(self) -> str:
        """Format cycle for display."""
        lines = [
            f"CIRCULAR IMPORT ({self.severity})",
            f"Length: {self.cycle_length} modules",
            ""
        ]

        for i, module_id in enumerate(self.cycle):
            arrow = " →" if i < len(self.cycle) - 1 else " ↩"
            lines.append(f"  [{i+1}] {module_id}{arrow}")

        return "\n".join(lines)


@dataclass
class CircularImportResult:
    """Result of circular import detection."""
    total_cycles: int = 0
    cycles: list[CircularImport] = field(default_factory=list)
    by_severity: dict[str, int] = field(default_factory=dict)

    def format(self) -> str:
        """Format all cycles for display."""
        if self.total_cycles == 0:
            return "NO CIRCULAR IMPORTS FOUND"

        lines = [
            f"CIRCULAR IMPORTS DETECTED: {self.total_cycles}",
            "",
            "By severity:"
        ]

        for severity, count in sorted(self.by_severity.items(), key=lambda x: -x[1]):
            lines.append(f"  {severity}: {count}")

        lines.append("")

        for i, cycle in enumerate(self.cycles[:10], 1):
            lines.append(f"--- Cycle {i} ---")
            lines.append(cycle.format())
            lines.append("")

        if len(self.cycles) > 10:
            lines.append(f"... and {len(self.cycles) - 10} more cycles")

        return "\n".join(lines)


@dataclass
class UnusedExportResult:
    """Exports the tree shaker did not keep, grouped per module."""
    entry_id: str
    total_exports: int = 0
    total_unused: int = 0
    by_module: dict[str, list[str]] = field(default_factory=dict)
    unreachable_modules: list[str] = field(default_factory=list)

    def format(self) -> str:
        """Format unused export results for display."""
        lines = [
            "UNUSED EXPORT ANALYSIS",
            f"Entry: {self.entry_id}",
            f"Exports: {self.total_exports}",
            f"Drop candidates: {self.total_unused}",
            ""
        ]

        for module_id in sorted(self.by_module):
            names = self.by_module[module_id]
            lines.append(f"=== {module_id} ({len(names)}) ===")
            for name in names[:20]:
                lines.append(f"  {name}")
            if len(names) > 20:
                lines.append(f"  ... and {len(names) - 20} more")
            lines.append("")

        if self.unreachable_modules:
            lines.append(f"=== UNREACHABLE MODULES ({len(self.unreachable_modules)}) ===")
            for module_id in self.unreachable_modules:
                lines.append(f"  {module_id}")
            lines.append("")

        if self.total_unused == 0:
            lines.append("No unused exports detected!")

        return "\n".join(lines)


class DependencyAnalyzer:
    """Analyzes a module graph for import cycles and unused exports."""

    def __init__(self, graph: ModuleGraph):
        self.graph = graph
        self.digraph = graph.to_networkx()

    def detect_circular_imports(self, max_cycles: int = 50) -> CircularImportResult:
        """Detect circular imports in the graph.

        Args:
            max_cycles: Maximum number of cycles to return

        Returns:
            CircularImportResult with the detected cycles
        """
        result = CircularImportResult()

        for cycle_nodes in nx.simple_cycles(self.digraph):
            if len(result.cycles) >= max_cycles:
                break

            # Self-imports are cycles too, but only worth a low severity
            if len(cycle_nodes) == 1:
                severity = "low"
            elif len(cycle_nodes) == 2:
                severity = "high"
            elif len(cycle_nodes) <= 4:
                severity = "medium"
            else:
                severity = "low"

            result.cycles.append(CircularImport(cycle=_rotate(cycle_nodes), severity=severity))
            result.by_severity[severity] = result.by_severity.get(severity, 0) + 1

        result.total_cycles = len(result.cycles)
        return result

    def find_unused_exports(
        self,
        entry_id: Optional[str] = None,
        mode: UsageMode = UsageMode.NAMES,
        shake_result: Optional[ShakeResult] = None
    ) -> UnusedExportResult:
        """List exports that are drop candidates for an entry module."""
        if shake_result is None:
            shake_result = TreeShaker(self.graph, mode).shake(entry_id or self.graph.entry_id)

        result = UnusedExportResult(
            entry_id=shake_result.entry_id,
            total_exports=shake_result.total_exports,
            total_unused=len(shake_result.dropped),
        )

        for key in sorted(shake_result.dropped):
            module_id, symbol = split_kept_key(key)
            result.by_module.setdefault(module_id, []).append(symbol)

        result.unreachable_modules = sorted(set(self.graph) - shake_result.reachable)
        return result


def _rotate(cycle: list[str]) -> list[str]:
    """Rotate a cycle so it starts at its smallest id, for stable output."""
    start = cycle.index(min(cycle))
    return cycle[start:] + cycle[:start]
